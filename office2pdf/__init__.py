"""
office2pdf: Office document to PDF conversion.

Converts Word (.docx), Excel (.xlsx) and PowerPoint (.pptx) files into a
unified document model, lowers that model to Typst markup and compiles the
markup to PDF with a render backend.
"""

import io
from typing import List, Optional, Tuple, Union

from office2pdf.config import (
    ConvertOptions,
    Format,
    PaperSize,
    PdfStandard,
    SlideRange,
)
from office2pdf.converter import (
    ConvertMetrics,
    ConvertResult,
    convert,
    convert_bytes,
    generate,
    render_document,
)
from office2pdf.converter import parse as _parse
from office2pdf.exceptions import (
    ConversionError,
    ConversionIOError,
    FileEncryptedError,
    ParseError,
    RenderError,
    UnsupportedFormatError,
    ZipBombError,
)
from office2pdf.ir import ConversionWarning, Document
from office2pdf.router import detect_format, get_parser

__version__ = "0.1.0"


def parse(
    data: Union[bytes, io.BytesIO],
    fmt: Format,
    options: Optional[ConvertOptions] = None,
) -> Tuple[Document, List[ConversionWarning]]:
    """
    Parse an Office document into the document model.

    Args:
        data: The complete file as bytes or a BytesIO.
        fmt: The document format.
        options: Sheet and slide filters.

    Returns:
        ``(document, warnings)``.

    Example:
        >>> import office2pdf
        >>> with open("report.docx", "rb") as f:
        ...     document, warnings = office2pdf.parse(f.read(), office2pdf.Format.DOCX)
    """
    return _parse(data, fmt, options)


def parse_docx(data, options: Optional[ConvertOptions] = None):
    """Parse a DOCX file."""
    from office2pdf.parsers.docx_parser import parse_docx as _parse_docx

    return _parse_docx(data, options)


def parse_xlsx(data, options: Optional[ConvertOptions] = None):
    """Parse an XLSX file."""
    from office2pdf.parsers.xlsx_parser import parse_xlsx as _parse_xlsx

    return _parse_xlsx(data, options)


def parse_pptx(data, options: Optional[ConvertOptions] = None):
    """Parse a PPTX file."""
    from office2pdf.parsers.pptx_parser import parse_pptx as _parse_pptx

    return _parse_pptx(data, options)


__all__ = [
    # Version
    "__version__",
    # Pipeline
    "convert",
    "convert_bytes",
    "detect_format",
    "generate",
    "get_parser",
    "parse",
    "render_document",
    # Format-specific parsers
    "parse_docx",
    "parse_xlsx",
    "parse_pptx",
    # Options and results
    "ConvertMetrics",
    "ConvertOptions",
    "ConvertResult",
    "ConversionWarning",
    "Document",
    "Format",
    "PaperSize",
    "PdfStandard",
    "SlideRange",
    # Errors
    "ConversionError",
    "ConversionIOError",
    "FileEncryptedError",
    "ParseError",
    "RenderError",
    "UnsupportedFormatError",
    "ZipBombError",
]
