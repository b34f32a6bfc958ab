"""
Conversion options and format identification.

All option types are plain dataclasses/enums so they can be constructed
directly by library callers or filled in by the CLI.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


class Format(enum.Enum):
    DOCX = "docx"
    XLSX = "xlsx"
    PPTX = "pptx"

    @classmethod
    def from_extension(cls, extension: str) -> Optional["Format"]:
        """Map a file extension (with or without leading dot) to a Format."""
        if not extension:
            return None
        ext = extension.lower().lstrip(".")
        for fmt in cls:
            if fmt.value == ext:
                return fmt
        return None

    @property
    def extension(self) -> str:
        return self.value


def _parse_inclusive_range(text: str, what: str) -> tuple[int, int]:
    text = text.strip()
    if "-" in text:
        start_str, end_str = text.split("-", 1)
    else:
        start_str, end_str = text, text
    try:
        start = int(start_str.strip())
        end = int(end_str.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid {what} range: {text!r}") from exc
    if start == 0 or end == 0:
        raise ValueError(f"{what.capitalize()} numbers are 1-indexed, got 0 in {text!r}")
    if start < 0 or end < 0:
        raise ValueError(f"Invalid {what} range: {text!r}")
    if start > end:
        raise ValueError(f"Invalid {what} range: start {start} > end {end}")
    return start, end


@dataclass(frozen=True)
class SlideRange:
    """Inclusive, 1-indexed slide range."""

    start: int
    end: int

    @classmethod
    def parse(cls, text: str) -> "SlideRange":
        """Parse ``"3"`` or ``"2-5"``."""
        start, end = _parse_inclusive_range(text, "slide")
        return cls(start, end)

    def contains(self, slide_number: int) -> bool:
        return self.start <= slide_number <= self.end


class PdfStandard(enum.Enum):
    PDF_A_2B = "a-2b"


@dataclass(frozen=True)
class PaperSize:
    """Paper size in points."""

    name: str
    width: float
    height: float

    @classmethod
    def custom(cls, width: float, height: float) -> "PaperSize":
        return cls("custom", width, height)

    @classmethod
    def parse(cls, text: str) -> "PaperSize":
        key = text.strip().lower()
        if key == "a4":
            return A4
        if key == "letter":
            return LETTER
        if key == "legal":
            return LEGAL
        raise ValueError(f"Unknown paper size: {text!r} (expected a4, letter, legal)")

    def dimensions(self) -> tuple[float, float]:
        return (self.width, self.height)


A4 = PaperSize("a4", 595.28, 841.89)
LETTER = PaperSize("letter", 612.0, 792.0)
LEGAL = PaperSize("legal", 612.0, 1008.0)


@dataclass
class ConvertOptions:
    """
    Options recognised by parsers, the markup generator and the render backend.

    Attributes:
        sheet_names: Only convert these spreadsheet sheets.
        slide_range: Only convert slides in this range.
        pdf_standard: Archival compliance flag, consumed by the render backend.
        paper_size: Force a paper size for every page.
        font_paths: Additional font directories for the render backend.
        landscape: Force landscape (True) or portrait (False) orientation.
        tagged: Emit a tagged (structured, accessible) PDF.
        pdf_ua: Emit PDF/UA-1 output; implies ``tagged``.
        streaming: Convert large spreadsheets in row chunks.
        streaming_chunk_size: Rows per chunk in streaming mode.
    """

    sheet_names: Optional[list[str]] = None
    slide_range: Optional[SlideRange] = None
    pdf_standard: Optional[PdfStandard] = None
    paper_size: Optional[PaperSize] = None
    font_paths: list[Path] = field(default_factory=list)
    landscape: Optional[bool] = None
    tagged: bool = False
    pdf_ua: bool = False
    streaming: bool = False
    streaming_chunk_size: int = 1000
