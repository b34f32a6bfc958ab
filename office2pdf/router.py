import io
import logging
import os
from typing import Callable, List, Optional, Tuple, Union

from office2pdf.config import ConvertOptions, Format
from office2pdf.exceptions import UnsupportedFormatError
from office2pdf.ir import ConversionWarning, Document

logger = logging.getLogger(__name__)

Parser = Callable[
    [Union[bytes, io.BytesIO], Optional[ConvertOptions]],
    Tuple[Document, List[ConversionWarning]],
]


def get_parser(fmt: Format) -> Parser:
    """Return the parser function for a format (lazy import)."""
    if fmt == Format.DOCX:
        from office2pdf.parsers.docx_parser import parse_docx

        return parse_docx
    elif fmt == Format.PPTX:
        from office2pdf.parsers.pptx_parser import parse_pptx

        return parse_pptx
    elif fmt == Format.XLSX:
        from office2pdf.parsers.xlsx_parser import parse_xlsx

        return parse_xlsx
    else:
        raise UnsupportedFormatError(str(fmt))


def detect_format(file_extension: str) -> Optional[Format]:
    """Format for a file extension (``"docx"``, ``".XLSX"``); None if unknown."""
    return Format.from_extension(file_extension)


def format_for_path(path: Union[str, os.PathLike]) -> Format:
    """
    Detect the format of a file from its name. The file need not exist.

    Raises:
        UnsupportedFormatError: The extension is not a supported format.
    """
    extension = os.path.splitext(os.fspath(path))[1]
    fmt = detect_format(extension)
    if fmt is None:
        logger.debug(f"File [{path}] with extension [{extension}] is not supported")
        raise UnsupportedFormatError(extension.lstrip(".") or str(path))
    logger.debug(f"Detected file type: {fmt.extension} for file: {path}")
    return fmt
