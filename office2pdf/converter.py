"""
Conversion pipeline: bytes -> document model -> markup -> PDF.

Every stage is exposed on its own (``parse``, ``generate``,
``render_document``) so callers can inspect or cache intermediate results;
``convert`` and ``convert_bytes`` run the whole pipeline and report
warnings and timings.
"""

import io
import logging
import os
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from office2pdf import pdf_ops
from office2pdf.config import ConvertOptions, Format
from office2pdf.exceptions import ConversionIOError, ParseError
from office2pdf.ir import ConversionWarning, Document
from office2pdf.render.backend import RenderBackend, TypstCliBackend
from office2pdf.render.typst_gen import GeneratedOutput, generate_typst
from office2pdf.router import format_for_path, get_parser

logger = logging.getLogger(__name__)


@dataclass
class ConvertMetrics:
    """Stage durations in seconds plus input/output sizes."""

    parse_duration: float = 0.0
    codegen_duration: float = 0.0
    compile_duration: float = 0.0
    input_size_bytes: int = 0
    output_size_bytes: int = 0
    page_count: Optional[int] = None

    @property
    def total_duration(self) -> float:
        return self.parse_duration + self.codegen_duration + self.compile_duration


@dataclass
class ConvertResult:
    pdf: bytes
    warnings: List[ConversionWarning] = field(default_factory=list)
    metrics: ConvertMetrics = field(default_factory=ConvertMetrics)


def parse(
    data: Union[bytes, io.BytesIO],
    fmt: Format,
    options: Optional[ConvertOptions] = None,
) -> Tuple[Document, List[ConversionWarning]]:
    """Parse a document of a known format into the document model."""
    return get_parser(fmt)(data, options)


def generate(document: Document, options: Optional[ConvertOptions] = None) -> GeneratedOutput:
    """Generate Typst markup and image assets for a document."""
    return generate_typst(document, options)


def render_document(
    document: Document,
    options: Optional[ConvertOptions] = None,
    backend: Optional[RenderBackend] = None,
) -> bytes:
    """Generate markup for a document and compile it to PDF."""
    options = options or ConvertOptions()
    backend = backend or TypstCliBackend()
    output = generate(document, options)
    return backend.compile(output.source, output.images, options)


def _count_pages(pdf: bytes) -> Optional[int]:
    try:
        return pdf_ops.page_count(pdf)
    except ParseError as exc:
        logger.warning(f"Could not count pages of the rendered PDF: {exc}")
        return None


def _log_warnings(warnings: List[ConversionWarning]) -> None:
    for warning in warnings:
        logger.debug(f"Conversion warning: {warning}")


def _convert_streaming(
    data: bytes,
    options: ConvertOptions,
    backend: RenderBackend,
    metrics: ConvertMetrics,
) -> Tuple[bytes, List[ConversionWarning]]:
    from office2pdf.parsers.xlsx_parser import iter_xlsx_row_chunks

    warnings: List[ConversionWarning] = []
    pdfs: List[bytes] = []
    chunks = iter_xlsx_row_chunks(data, options.streaming_chunk_size, options)
    while True:
        started = time.perf_counter()
        chunk = next(chunks, None)
        metrics.parse_duration += time.perf_counter() - started
        if chunk is None:
            break
        document, chunk_warnings = chunk
        warnings.extend(chunk_warnings)
        if not document.pages:
            continue

        started = time.perf_counter()
        output = generate(document, options)
        metrics.codegen_duration += time.perf_counter() - started

        started = time.perf_counter()
        pdfs.append(backend.compile(output.source, output.images, options))
        metrics.compile_duration += time.perf_counter() - started
        logger.debug(f"Compiled streaming chunk {len(pdfs)}")

    if not pdfs:
        # Empty workbook: still produce a (blank) document
        output = generate(Document(), options)
        pdfs.append(backend.compile(output.source, output.images, options))
    return pdf_ops.merge(pdfs), warnings


def convert_bytes(
    data: bytes,
    fmt: Format,
    options: Optional[ConvertOptions] = None,
    backend: Optional[RenderBackend] = None,
) -> ConvertResult:
    """
    Convert an in-memory document to PDF.

    Args:
        data: The complete input file.
        fmt: Format of ``data``.
        options: Conversion options.
        backend: Render backend; defaults to the typst command line compiler.

    Returns:
        The PDF bytes, the warnings for every degraded element and the
        stage metrics.

    Raises:
        ParseError: The input is not a valid instance of ``fmt``.
        RenderError: Markup generation or compilation failed.
    """
    options = options or ConvertOptions()
    backend = backend or TypstCliBackend()
    metrics = ConvertMetrics(input_size_bytes=len(data))

    if fmt == Format.XLSX and options.streaming:
        logger.debug(f"Streaming XLSX in chunks of {options.streaming_chunk_size} rows")
        pdf, warnings = _convert_streaming(data, options, backend, metrics)
    else:
        started = time.perf_counter()
        document, warnings = parse(data, fmt, options)
        metrics.parse_duration = time.perf_counter() - started

        started = time.perf_counter()
        output = generate(document, options)
        metrics.codegen_duration = time.perf_counter() - started

        started = time.perf_counter()
        pdf = backend.compile(output.source, output.images, options)
        metrics.compile_duration = time.perf_counter() - started

    metrics.output_size_bytes = len(pdf)
    metrics.page_count = _count_pages(pdf)
    _log_warnings(warnings)
    logger.info(
        "Converted %s: %d bytes -> %d bytes in %.3fs, %d warnings",
        fmt.extension.upper(),
        metrics.input_size_bytes,
        metrics.output_size_bytes,
        metrics.total_duration,
        len(warnings),
    )
    return ConvertResult(pdf=pdf, warnings=warnings, metrics=metrics)


def convert(
    path: Union[str, os.PathLike],
    options: Optional[ConvertOptions] = None,
    backend: Optional[RenderBackend] = None,
) -> ConvertResult:
    """
    Convert a file to PDF, detecting its format from the extension.

    Raises:
        UnsupportedFormatError: The extension is not docx, xlsx or pptx.
        ConversionIOError: The file cannot be read.
        ParseError: The file is not a valid instance of its format.
        RenderError: Markup generation or compilation failed.
    """
    fmt = format_for_path(path)
    logger.debug(f"Reading file: {path}")
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as exc:
        raise ConversionIOError(f"Cannot read {path}: {exc}", cause=exc) from exc
    return convert_bytes(data, fmt, options, backend)
