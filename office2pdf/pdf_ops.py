"""
PDF Page Operations
===================

Merge, split and page counting on finished PDF files, independent of the
conversion pipeline. Used to stitch streamed spreadsheet chunks together.

Dependencies
------------
pypdf (https://pypdf.readthedocs.io/):
    pip install pypdf

    Provides:
    - PdfReader for loading and counting pages
    - PdfWriter for assembling the merged / split output

Usage
-----
    >>> from office2pdf.pdf_ops import PageRange, merge, page_count, split
    >>> merged = merge([first_pdf, second_pdf])
    >>> page_count(merged)
    >>> parts = split(merged, [PageRange.parse("1-2"), PageRange.parse("3")])
"""

import io
import logging
from dataclasses import dataclass
from typing import List

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError

from office2pdf.config import _parse_inclusive_range
from office2pdf.exceptions import ParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageRange:
    """Inclusive, 1-indexed page range."""

    start: int
    end: int

    @classmethod
    def parse(cls, text: str) -> "PageRange":
        """Parse ``"3"`` or ``"1-5"``; raises ValueError like ``SlideRange.parse``."""
        start, end = _parse_inclusive_range(text, "page")
        return cls(start, end)


def _open_pdf_reader(pdf_bytes: bytes, label: str = "PDF") -> PdfReader:
    try:
        reader = PdfReader(io.BytesIO(pdf_bytes))
        # Page tree problems only surface when the pages are walked
        len(reader.pages)
    except (PyPdfError, ValueError, KeyError, TypeError) as exc:
        raise ParseError(f"Invalid {label}: {exc}", cause=exc) from exc
    return reader


def _write(writer: PdfWriter) -> bytes:
    output = io.BytesIO()
    writer.write(output)
    return output.getvalue()


def page_count(pdf_bytes: bytes) -> int:
    """
    Number of pages in a PDF.

    Raises:
        ParseError: The bytes are not a readable PDF.
    """
    return len(_open_pdf_reader(pdf_bytes).pages)


def merge(inputs: List[bytes]) -> bytes:
    """
    Concatenate PDFs in order.

    Args:
        inputs: Complete PDF files.

    Returns:
        The merged PDF. A single input is returned unchanged.

    Raises:
        ParseError: ``inputs`` is empty or one of them is not a readable PDF.
    """
    if not inputs:
        raise ParseError("no input PDFs to merge")
    if len(inputs) == 1:
        return inputs[0]

    writer = PdfWriter()
    for index, pdf_bytes in enumerate(inputs):
        reader = _open_pdf_reader(pdf_bytes, label=f"PDF at index {index}")
        for page in reader.pages:
            writer.add_page(page)
    logger.debug(f"Merged {len(inputs)} PDFs into {len(writer.pages)} pages")
    return _write(writer)


def split(pdf_bytes: bytes, ranges: List[PageRange]) -> List[bytes]:
    """
    Extract page ranges into separate PDFs.

    Args:
        pdf_bytes: A complete PDF file.
        ranges: One output document per range.

    Returns:
        One PDF per range, in the order of ``ranges``.

    Raises:
        ParseError: No ranges, a range beyond the page count, or unreadable
            input.
    """
    if not ranges:
        raise ParseError("no page ranges specified for split")

    reader = _open_pdf_reader(pdf_bytes)
    total_pages = len(reader.pages)
    for page_range in ranges:
        if page_range.start > total_pages or page_range.end > total_pages:
            raise ParseError(
                f"page range {page_range.start}-{page_range.end} exceeds "
                f"document page count ({total_pages})"
            )

    results = []
    for page_range in ranges:
        writer = PdfWriter()
        for index in range(page_range.start - 1, page_range.end):
            writer.add_page(reader.pages[index])
        results.append(_write(writer))
    return results
