"""
Forward-only XML event stream for the streaming sub-parsers.

Wraps ``xml.etree.ElementTree.XMLPullParser`` so that parsers can be written
as explicit state machines reacting to ``start``/``end`` events instead of
walking a full DOM. Text is read from the element at its ``end`` event.
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional
from xml.etree import ElementTree as ET

logger = logging.getLogger(__name__)

START = "start"
END = "end"

_CHUNK_SIZE = 64 * 1024


def local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix from a tag or attribute name."""
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def get_attr(elem: ET.Element, name: str) -> Optional[str]:
    """Attribute lookup by local name, ignoring the namespace."""
    value = elem.get(name)
    if value is not None:
        return value
    for key, val in elem.attrib.items():
        if local_name(key) == name:
            return val
    return None


def iter_events(
    xml: bytes | str, *, clear: bool = True
) -> Iterator[tuple[str, str, ET.Element]]:
    """
    Yield ``(event, local_name, element)`` for every start and end tag.

    With ``clear`` set, elements are emptied after their end event has been
    handled so memory stays flat for large parts. Malformed XML ends the
    stream early; everything seen before the error has been yielded.
    """
    if isinstance(xml, str):
        xml = xml.encode("utf-8")

    parser = ET.XMLPullParser(events=(START, END))
    try:
        for offset in range(0, len(xml), _CHUNK_SIZE):
            parser.feed(xml[offset : offset + _CHUNK_SIZE])
            for event, elem in parser.read_events():
                yield event, local_name(elem.tag), elem
                if clear and event == END:
                    elem.clear()
        parser.close()
        for event, elem in parser.read_events():
            yield event, local_name(elem.tag), elem
    except ET.ParseError as exc:
        logger.debug(f"XML event stream stopped early - {exc}")
