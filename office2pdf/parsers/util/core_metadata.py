from __future__ import annotations

import logging
from xml.etree import ElementTree as ET

from office2pdf.ir import Metadata
from office2pdf.parsers.util.zip_context import ZipContext

logger = logging.getLogger(__name__)

CORE_PROPERTIES_PATH = "docProps/core.xml"

DC_NS = "{http://purl.org/dc/elements/1.1/}"
DCTERMS_NS = "{http://purl.org/dc/terms/}"

# (attribute on Metadata, element tag)
_CORE_FIELDS = (
    ("title", f"{DC_NS}title"),
    ("author", f"{DC_NS}creator"),
    ("subject", f"{DC_NS}subject"),
    ("description", f"{DC_NS}description"),
    ("created", f"{DCTERMS_NS}created"),
    ("modified", f"{DCTERMS_NS}modified"),
)


def parse_core_xml(xml: bytes | str) -> Metadata:
    """
    Parse Dublin Core metadata from ``docProps/core.xml`` content.

    Missing elements stay None; unparseable XML yields an empty Metadata.
    """
    metadata = Metadata()
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as exc:
        logger.debug(f"Ignoring unparseable core properties - {exc}")
        return metadata

    for attribute, tag in _CORE_FIELDS:
        elem = root.find(tag)
        if elem is not None and elem.text:
            setattr(metadata, attribute, elem.text.strip())
    return metadata


def extract_metadata(ctx: ZipContext) -> Metadata:
    """Read core properties of an opened package; never raises."""
    logger.debug("Extracting metadata")
    if not ctx.exists(CORE_PROPERTIES_PATH):
        return Metadata()
    return parse_core_xml(ctx.read_bytes(CORE_PROPERTIES_PATH))
