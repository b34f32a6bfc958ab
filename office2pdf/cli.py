from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

import office2pdf
from office2pdf.config import ConvertOptions, PaperSize, PdfStandard, SlideRange
from office2pdf.router import format_for_path


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="office2pdf",
        description="Convert a .docx, .xlsx or .pptx file to PDF.",
    )
    parser.add_argument(
        "path",
        type=Path,
        help="Path to the document to convert.",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output PDF path (defaults to the input path with a .pdf suffix).",
    )
    parser.add_argument(
        "--markup",
        action="store_true",
        help="Write the generated Typst markup to stdout instead of compiling.",
    )
    parser.add_argument(
        "--sheets",
        help="Comma-separated sheet names to convert (spreadsheets only).",
    )
    parser.add_argument(
        "--slides",
        help="Slide range such as 3 or 2-5 (presentations only).",
    )
    parser.add_argument(
        "--paper",
        help="Force the paper size: a4, letter or legal.",
    )
    parser.add_argument(
        "--landscape",
        action="store_true",
        help="Force landscape orientation.",
    )
    parser.add_argument(
        "--pdfa",
        action="store_true",
        help="Produce PDF/A-2b output.",
    )
    parser.add_argument(
        "--tagged",
        action="store_true",
        help="Produce a tagged (accessible) PDF.",
    )
    parser.add_argument(
        "--pdf-ua",
        action="store_true",
        help="Produce PDF/UA-1 output (implies --tagged).",
    )
    parser.add_argument(
        "--font-path",
        action="append",
        type=Path,
        default=[],
        help="Additional font directory (repeatable).",
    )
    parser.add_argument(
        "--streaming",
        action="store_true",
        help="Convert large spreadsheets in row chunks.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def _build_options(args: argparse.Namespace) -> ConvertOptions:
    options = ConvertOptions(font_paths=list(args.font_path), streaming=bool(args.streaming))
    if args.sheets:
        options.sheet_names = [name.strip() for name in args.sheets.split(",") if name.strip()]
    if args.slides:
        options.slide_range = SlideRange.parse(args.slides)
    if args.paper:
        options.paper_size = PaperSize.parse(args.paper)
    if args.landscape:
        options.landscape = True
    if args.pdfa:
        options.pdf_standard = PdfStandard.PDF_A_2B
    if args.tagged:
        options.tagged = True
    if args.pdf_ua:
        options.pdf_ua = True
    return options


def _print_warnings(warnings: list[office2pdf.ConversionWarning]) -> None:
    for warning in warnings:
        print(f"office2pdf: warning: {warning.element}: {warning.reason}", file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        code = exc.code if isinstance(exc.code, int) else 1
        return code

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        options = _build_options(args)
        if args.markup:
            fmt = format_for_path(args.path)
            document, warnings = office2pdf.parse(args.path.read_bytes(), fmt, options)
            _print_warnings(warnings)
            sys.stdout.write(office2pdf.generate(document, options).source)
            sys.stdout.write("\n")
            return 0

        result = office2pdf.convert(args.path, options)
        _print_warnings(result.warnings)
        output = args.output or args.path.with_suffix(".pdf")
        output.write_bytes(result.pdf)
        return 0
    except Exception as exc:
        print(f"office2pdf: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
