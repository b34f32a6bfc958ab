from __future__ import annotations

import io
import logging
import posixpath
from dataclasses import dataclass
from xml.etree import ElementTree as ET

from office2pdf.exceptions import ParseError
from office2pdf.parsers.util.encryption import ensure_not_encrypted
from office2pdf.parsers.util.zip_bomb import open_zipfile

logger = logging.getLogger(__name__)

REL_NS = "{http://schemas.openxmlformats.org/package/2006/relationships}"


@dataclass(frozen=True)
class Relationship:
    id: str
    type: str
    target: str
    # Absolute package path, or the raw URL for external targets
    resolved: str
    external: bool = False


def rels_path_for(part_path: str) -> str:
    """``word/document.xml`` -> ``word/_rels/document.xml.rels``"""
    directory, name = posixpath.split(part_path)
    return posixpath.join(directory, "_rels", f"{name}.rels")


def resolve_target(part_path: str, target: str) -> str:
    """Resolve a relationship target relative to the part that owns it."""
    if target.startswith("/"):
        return target.lstrip("/")
    base_dir = posixpath.dirname(part_path)
    return posixpath.normpath(posixpath.join(base_dir, target))


class ZipContext:
    """Reusable package context with convenience helpers for reading OOXML parts."""

    def __init__(self, file_like: io.BytesIO, source: str | None = None):
        self.file_like = file_like
        self.file_like.seek(0)
        self._zip = open_zipfile(self.file_like, source=source or type(self).__name__)
        self._namelist = set(self._zip.namelist())
        self._xml_cache: dict[str, ET.Element] = {}
        self._rels_cache: dict[str, dict[str, Relationship]] = {}

    def __enter__(self) -> "ZipContext":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def namelist(self) -> set[str]:
        return self._namelist

    def exists(self, path: str) -> bool:
        return path in self._namelist

    def read_bytes(self, path: str) -> bytes:
        return self._zip.read(path)

    def read_text(self, path: str) -> str:
        return self._zip.read(path).decode("utf-8", errors="replace")

    def read_xml_root(self, path: str) -> ET.Element:
        """
        Parse a part once and cache its root element.

        Raises:
            KeyError: The part does not exist.
            ParseError: The part is not well-formed XML.
        """
        root = self._xml_cache.get(path)
        if root is not None:
            return root
        with self._zip.open(path) as f:
            try:
                root = ET.parse(f).getroot()
            except ET.ParseError as exc:
                raise ParseError(f"Malformed XML in {path}: {exc}", cause=exc) from exc
        self._xml_cache[path] = root
        return root

    def read_optional_xml_root(self, path: str) -> ET.Element | None:
        """Like read_xml_root, but None for a missing or malformed part."""
        if path not in self._namelist:
            return None
        try:
            return self.read_xml_root(path)
        except ParseError as exc:
            logger.warning("Ignoring malformed optional part %s: %s", path, exc)
            return None

    def relationships(self, part_path: str) -> dict[str, Relationship]:
        """Relationships of a part keyed by relationship id (empty if none)."""
        cached = self._rels_cache.get(part_path)
        if cached is not None:
            return cached

        relationships: dict[str, Relationship] = {}
        rels_root = self.read_optional_xml_root(rels_path_for(part_path))
        if rels_root is not None:
            for rel in rels_root.findall(f"{REL_NS}Relationship"):
                rel_id = rel.get("Id") or ""
                target = rel.get("Target") or ""
                if not rel_id or not target:
                    continue
                external = (rel.get("TargetMode") or "").lower() == "external"
                relationships[rel_id] = Relationship(
                    id=rel_id,
                    type=rel.get("Type") or "",
                    target=target,
                    resolved=target if external else resolve_target(part_path, target),
                    external=external,
                )

        self._rels_cache[part_path] = relationships
        return relationships

    def close(self) -> None:
        self._zip.close()


def as_file_like(data: bytes | io.BytesIO) -> io.BytesIO:
    if isinstance(data, (bytes, bytearray)):
        return io.BytesIO(bytes(data))
    data.seek(0)
    return data


def open_package(data: bytes | io.BytesIO, kind: str) -> ZipContext:
    """
    Open an OOXML package for one of the format parsers.

    Raises:
        FileEncryptedError: The package is password protected.
        ParseError: The bytes are not a ZIP container.
        ZipBombError: The container exceeds the zip-bomb limits.
    """
    file_like = as_file_like(data)
    ensure_not_encrypted(file_like, kind)
    return ZipContext(file_like, source=kind)
