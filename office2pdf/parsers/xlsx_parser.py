"""
XLSX Spreadsheet Parser
=======================

Parses Microsoft Excel .xlsx files (Office Open XML, Excel 2007 and later)
into one table page per worksheet.

This module uses the openpyxl library for cells, styles, merges and
conditional formats, and reads the drawing parts directly from the ZIP
archive for embedded charts.

File Format Background
----------------------
The .xlsx format is a ZIP archive containing XML files following the Office
Open XML (OOXML) standard. Key components:

    xl/workbook.xml: Workbook properties and sheet list
    xl/worksheets/sheet1.xml, sheet2.xml, ...: Individual sheet data
    xl/sharedStrings.xml: Shared string table (for cell text)
    xl/styles.xml: Cell formatting and styles
    xl/drawings/drawing1.xml: Anchored drawings (charts, images)
    xl/charts/chart1.xml: Chart parts referenced from drawings
    docProps/core.xml: Metadata (title, creator, dates)

Dependencies
------------
openpyxl: https://openpyxl.readthedocs.io/
    pip install openpyxl

    Provides:
    - Cell value reading with type detection
    - Fonts, fills, borders and alignment
    - Merged ranges, row/column dimensions, page setup
    - Conditional formatting rules
    - Read-only row streaming for large workbooks

Data Representation
-------------------
Each non-empty sheet becomes a ``TablePage``. The grid covers rows
``1..max_row`` and columns ``1..max_column``; every slot gets a
``TableCell``. Cells covered by a merged range are continuation markers
(``col_span == 0``) that the generator skips.

Cell values are formatted for display:
    - None: no content
    - bool: ``TRUE`` / ``FALSE``
    - float: whole numbers without decimals
    - datetime/date/time: ISO format

The parser uses openpyxl's data_only=True mode, which returns calculated
values for formula cells rather than the formulas themselves.

Known Limitations
-----------------
- Formulas are not evaluated (only cached values are shown)
- Number formats are not applied
- Images anchored on sheets are not rendered
- Theme and indexed colors are ignored; only explicit RGB colors are used
- Pivot tables show only cached data

Usage
-----
    >>> from office2pdf.parsers.xlsx_parser import parse_xlsx
    >>>
    >>> with open("data.xlsx", "rb") as f:
    ...     document, warnings = parse_xlsx(f.read())
    >>> for page in document.pages:
    ...     print(page.name, len(page.table.rows))

Maintenance Notes
-----------------
- The full (non read-only) workbook is loaded because merges, dimensions
  and conditional formats are not available in read_only mode
- ``iter_xlsx_row_chunks`` is the read_only path for large workbooks and
  carries values only
"""

import datetime
import io
import logging
import re
from typing import Any, Iterator, List, Optional, Tuple, Union
from xml.etree import ElementTree as ET

from openpyxl import load_workbook
from openpyxl.utils import column_index_from_string
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from office2pdf.config import ConvertOptions
from office2pdf.exceptions import ParseError
from office2pdf.ir import (
    Alignment,
    BorderLineStyle,
    BorderSide,
    CellBorder,
    Chart,
    Color,
    ConversionWarning,
    Document,
    HeaderFooter,
    HeaderFooterParagraph,
    Margins,
    PageNumberField,
    PageSize,
    Paragraph,
    ParagraphStyle,
    Run,
    Table,
    TableCell,
    TablePage,
    TableRow,
    TextStyle,
)
from office2pdf.parsers.chart import parse_chart_xml
from office2pdf.parsers.cond_fmt import (
    CondFmtOverride,
    build_cond_fmt_overrides,
    color_from_openpyxl,
)
from office2pdf.parsers.util.core_metadata import extract_metadata
from office2pdf.parsers.util.units import (
    DEFAULT_EXCEL_COLUMN_WIDTH,
    excel_width_to_pt,
    inches_to_pt,
    parse_int,
)
from office2pdf.parsers.util.zip_context import ZipContext, as_file_like, open_package

logger = logging.getLogger(__name__)

# XML Namespaces used in XLSX packages
S_NS = "{http://schemas.openxmlformats.org/spreadsheetml/2006/main}"
R_NS = "{http://schemas.openxmlformats.org/officeDocument/2006/relationships}"
XDR_NS = "{http://schemas.openxmlformats.org/drawingml/2006/spreadsheetDrawing}"
C_NS = "{http://schemas.openxmlformats.org/drawingml/2006/chart}"

WORKBOOK_PATH = "xl/workbook.xml"

# Page setup paper codes (ECMA-376 Part 1, 18.3.1.64)
PAPER_SIZES = {
    1: PageSize(width=612.0, height=792.0),
    5: PageSize(width=612.0, height=1008.0),
    9: PageSize(width=595.28, height=841.89),
}

_ALIGNMENTS = {
    "left": Alignment.LEFT,
    "center": Alignment.CENTER,
    "centerContinuous": Alignment.CENTER,
    "right": Alignment.RIGHT,
    "justify": Alignment.JUSTIFY,
    "distributed": Alignment.JUSTIFY,
}

# openpyxl border style -> (width in points, line style)
_BORDER_STYLES = {
    "hair": (0.25, BorderLineStyle.SOLID),
    "thin": (0.5, BorderLineStyle.SOLID),
    "medium": (1.0, BorderLineStyle.SOLID),
    "thick": (1.5, BorderLineStyle.SOLID),
    "dashed": (0.5, BorderLineStyle.DASHED),
    "mediumDashed": (1.0, BorderLineStyle.DASHED),
    "dashDot": (0.5, BorderLineStyle.DASHED),
    "mediumDashDot": (1.0, BorderLineStyle.DASHED),
    "slantDashDot": (1.0, BorderLineStyle.DASHED),
    "dotted": (0.5, BorderLineStyle.DOTTED),
    "dashDotDot": (0.5, BorderLineStyle.DOTTED),
    "mediumDashDotDot": (1.0, BorderLineStyle.DOTTED),
    "double": (1.5, BorderLineStyle.DOUBLE),
}

# Header/footer codes: &P page number, && literal ampersand, anything else dropped
_HEADER_CODE = re.compile(
    r"&&|&P|&\[Page\]|&\[[^\]]*\]|&K[0-9A-Fa-f]{6}|&\"[^\"]*\"|&\d+|&[A-Za-z]"
)
_PAGE_CODES = ("&P", "&[Page]")


def _format_value_for_display(value: Any) -> str:
    """
    Format a cell value as display text.

    Args:
        value: Raw value from openpyxl cell.

    Returns:
        String representation of the value:
        - Empty string for None
        - ``TRUE`` / ``FALSE`` for booleans
        - Integer format for whole number floats
        - ISO format for datetime/date/time values
        - String conversion for all other values
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


def _text_style(font) -> TextStyle:
    style = TextStyle()
    if font is None:
        return style
    if font.b:
        style.bold = True
    if font.i:
        style.italic = True
    if font.u and font.u != "none":
        style.underline = True
    if font.strike:
        style.strikethrough = True
    if font.sz:
        style.font_size = float(font.sz)
    if font.name:
        style.font_family = font.name
    style.color = color_from_openpyxl(font.color)
    return style


def _cell_background(fill) -> Optional[Color]:
    if fill is None or getattr(fill, "fill_type", None) != "solid":
        return None
    return color_from_openpyxl(fill.fgColor)


def _border_side(side) -> Optional[BorderSide]:
    if side is None or not side.style:
        return None
    width, line_style = _BORDER_STYLES.get(side.style, (0.5, BorderLineStyle.SOLID))
    color = color_from_openpyxl(side.color) or Color.black()
    return BorderSide(width=width, color=color, style=line_style)


def _cell_border(border) -> Optional[CellBorder]:
    if border is None:
        return None
    result = CellBorder(
        top=_border_side(border.top),
        bottom=_border_side(border.bottom),
        left=_border_side(border.left),
        right=_border_side(border.right),
    )
    return None if result.is_empty() else result


def _cell_content(cell, text: str) -> List[Paragraph]:
    if not text:
        return []
    paragraph_style = ParagraphStyle()
    horizontal = getattr(cell.alignment, "horizontal", None)
    if horizontal in _ALIGNMENTS:
        paragraph_style.alignment = _ALIGNMENTS[horizontal]
    return [Paragraph(style=paragraph_style, runs=[Run(text=text, style=_text_style(cell.font))])]


def _apply_override(table_cell: TableCell, override: CondFmtOverride) -> None:
    if override.background is not None:
        table_cell.background = override.background
    if table_cell.content and (override.font_color is not None or override.bold is not None):
        first_run = table_cell.content[0].runs[0]
        if override.font_color is not None:
            first_run.style.color = override.font_color
        if override.bold is not None:
            first_run.style.bold = override.bold
    if override.data_bar is not None:
        table_cell.data_bar = override.data_bar
    if override.icon_text is not None:
        table_cell.icon_text = override.icon_text


def _has_content(ws: Worksheet) -> bool:
    if ws.merged_cells.ranges:
        return True
    for row in ws.iter_rows(values_only=True):
        if any(value is not None for value in row):
            return True
    return False


def _column_widths(ws: Worksheet, max_column: int) -> List[float]:
    default_width = ws.sheet_format.defaultColWidth or DEFAULT_EXCEL_COLUMN_WIDTH
    widths = [excel_width_to_pt(default_width)] * max_column
    for key, dim in ws.column_dimensions.items():
        if not dim.width:
            continue
        start = dim.min or column_index_from_string(key)
        end = max(dim.max or start, start)
        for col in range(start, min(end, max_column) + 1):
            widths[col - 1] = excel_width_to_pt(dim.width)
    return widths


def _row_height(ws: Worksheet, row: int) -> Optional[float]:
    dim = ws.row_dimensions.get(row)
    if dim is None or not dim.ht:
        return None
    return float(dim.ht)


def _merge_anchors(ws: Worksheet) -> Tuple[dict, set]:
    """Anchor spans keyed by (row, col) and the set of covered slots."""
    anchors: dict[tuple[int, int], tuple[int, int]] = {}
    covered: set[tuple[int, int]] = set()
    for merged in ws.merged_cells.ranges:
        anchors[(merged.min_row, merged.min_col)] = (
            merged.max_col - merged.min_col + 1,
            merged.max_row - merged.min_row + 1,
        )
        for row in range(merged.min_row, merged.max_row + 1):
            for col in range(merged.min_col, merged.max_col + 1):
                if (row, col) != (merged.min_row, merged.min_col):
                    covered.add((row, col))
    return anchors, covered


def _build_table(ws: Worksheet) -> Table:
    max_row = ws.max_row
    max_column = ws.max_column
    anchors, covered = _merge_anchors(ws)
    overrides = build_cond_fmt_overrides(ws)

    rows: List[TableRow] = []
    for row_idx in range(1, max_row + 1):
        cells: List[TableCell] = []
        for col_idx in range(1, max_column + 1):
            if (row_idx, col_idx) in covered:
                cells.append(TableCell(col_span=0))
                continue
            cell = ws.cell(row=row_idx, column=col_idx)
            text = _format_value_for_display(cell.value)
            col_span, row_span = anchors.get((row_idx, col_idx), (1, 1))
            table_cell = TableCell(
                content=_cell_content(cell, text),
                col_span=col_span,
                row_span=row_span,
                border=_cell_border(cell.border),
                background=_cell_background(cell.fill),
            )
            override = overrides.get((col_idx, row_idx))
            if override is not None:
                _apply_override(table_cell, override)
            cells.append(table_cell)
        rows.append(TableRow(cells=cells, height=_row_height(ws, row_idx)))

    return Table(rows=rows, column_widths=_column_widths(ws, max_column))


def _page_geometry(ws: Worksheet) -> Tuple[PageSize, Margins]:
    page_setup = ws.page_setup
    code = parse_int(str(page_setup.paperSize)) if page_setup.paperSize is not None else None
    base = PAPER_SIZES.get(code, PAPER_SIZES[9])
    size = PageSize(width=base.width, height=base.height)
    if page_setup.orientation == "landscape":
        size = PageSize(width=size.height, height=size.width)

    margins = Margins()
    page_margins = ws.page_margins
    if page_margins is not None:
        for side in ("top", "bottom", "left", "right"):
            value = getattr(page_margins, side, None)
            if value is not None:
                setattr(margins, side, inches_to_pt(float(value)))
    return size, margins


def _header_footer_elements(text: str) -> List[Union[Run, PageNumberField]]:
    elements: List[Union[Run, PageNumberField]] = []
    buffer = ""
    position = 0
    for match in _HEADER_CODE.finditer(text):
        buffer += text[position : match.start()]
        code = match.group(0)
        if code == "&&":
            buffer += "&"
        elif code in _PAGE_CODES:
            if buffer:
                elements.append(Run(text=buffer))
                buffer = ""
            elements.append(PageNumberField())
        position = match.end()
    buffer += text[position:]
    if buffer:
        elements.append(Run(text=buffer))
    return elements


def _header_footer(item) -> Optional[HeaderFooter]:
    """Left, center and right parts of an openpyxl header/footer item."""
    if item is None:
        return None
    paragraphs = []
    for part_name, alignment in (
        ("left", Alignment.LEFT),
        ("center", Alignment.CENTER),
        ("right", Alignment.RIGHT),
    ):
        part = getattr(item, part_name, None)
        text = getattr(part, "text", None) if part is not None else None
        if not text:
            continue
        elements = _header_footer_elements(text)
        if elements:
            paragraphs.append(
                HeaderFooterParagraph(style=ParagraphStyle(alignment=alignment), elements=elements)
            )
    if not paragraphs:
        return None
    return HeaderFooter(paragraphs=paragraphs)


class _XlsxContext:
    """Package-level lookups that openpyxl does not expose (sheet parts, drawings)."""

    def __init__(self, package: ZipContext):
        self.package = package
        self.warnings: List[ConversionWarning] = []
        self.sheet_parts: dict[str, str] = self._load_sheet_parts()

    def _load_sheet_parts(self) -> dict[str, str]:
        workbook = self.package.read_optional_xml_root(WORKBOOK_PATH)
        if workbook is None:
            return {}
        rels = self.package.relationships(WORKBOOK_PATH)
        parts = {}
        for sheet in workbook.iter(f"{S_NS}sheet"):
            name = sheet.get("name")
            rel = rels.get(sheet.get(f"{R_NS}id") or "")
            if name and rel is not None and not rel.external:
                parts[name] = rel.resolved
        return parts

    def warn(self, element: str, reason: str) -> None:
        logger.warning(f"{element}: {reason}")
        self.warnings.append(ConversionWarning(element=element, reason=reason))

    def sheet_charts(self, sheet_name: str) -> List[Tuple[int, Chart]]:
        """Charts anchored on a sheet as ``(anchor_row, chart)`` pairs."""
        sheet_part = self.sheet_parts.get(sheet_name)
        if sheet_part is None:
            return []
        charts: List[Tuple[int, Chart]] = []
        for rel in self.package.relationships(sheet_part).values():
            if rel.external or not rel.type.endswith("/drawing"):
                continue
            charts.extend(self._drawing_charts(sheet_name, rel.resolved))
        return charts

    def _drawing_charts(self, sheet_name: str, drawing_path: str) -> List[Tuple[int, Chart]]:
        drawing = self.package.read_optional_xml_root(drawing_path)
        if drawing is None:
            logger.debug(f"Drawing part missing: {drawing_path}")
            return []
        rels = self.package.relationships(drawing_path)
        charts: List[Tuple[int, Chart]] = []
        for anchor in drawing:
            chart_ref = anchor.find(f".//{C_NS}chart")
            if chart_ref is None:
                continue
            rel = rels.get(chart_ref.get(f"{R_NS}id") or "")
            element = f"sheet '{sheet_name}' chart"
            if rel is None or not self.package.exists(rel.resolved):
                self.warn(element, "chart part not found")
                continue
            chart = parse_chart_xml(self.package.read_bytes(rel.resolved))
            if chart is None:
                self.warn(element, f"unsupported chart type in {rel.resolved}")
                continue
            charts.append((_anchor_row(anchor), chart))
        return charts


def _anchor_row(anchor: ET.Element) -> int:
    """1-indexed row a chart is anchored to; 0 for absolute anchors."""
    row = anchor.find(f"{XDR_NS}from/{XDR_NS}row")
    if row is None or row.text is None:
        return 0
    return parse_int(row.text.strip(), 0) + 1


def _selected_sheet_names(
    available: List[str], options: ConvertOptions, warn
) -> List[str]:
    if options.sheet_names is None:
        return list(available)
    for name in options.sheet_names:
        if name not in available:
            warn(f"sheet '{name}'", "sheet not found")
    return [name for name in available if name in options.sheet_names]


def _parse_sheet(ctx: _XlsxContext, ws: Worksheet) -> TablePage:
    size, margins = _page_geometry(ws)
    return TablePage(
        name=str(ws.title),
        size=size,
        margins=margins,
        table=_build_table(ws),
        header=_header_footer(ws.oddHeader),
        footer=_header_footer(ws.oddFooter),
        charts=ctx.sheet_charts(str(ws.title)),
    )


def _load_workbook(file_like: io.BytesIO, read_only: bool):
    file_like.seek(0)
    try:
        return load_workbook(file_like, read_only=read_only, data_only=True)
    except (InvalidFileException, KeyError, ValueError, TypeError, ET.ParseError) as exc:
        raise ParseError(f"Invalid XLSX workbook: {exc}", cause=exc) from exc


def parse_xlsx(
    data: Union[bytes, io.BytesIO], options: Optional[ConvertOptions] = None
) -> Tuple[Document, List[ConversionWarning]]:
    """
    Parse an Excel .xlsx file into the document model.

    Args:
        data: The complete XLSX file as bytes or a BytesIO.
        options: ``sheet_names`` restricts the sheets that are converted.

    Returns:
        ``(document, warnings)`` with one TablePage per selected, non-empty
        sheet in workbook order.

    Raises:
        FileEncryptedError: The file is password protected.
        ParseError: Not a ZIP container or not a readable workbook.
        ZipBombError: The container exceeds the zip-bomb limits.

    Example:
        >>> with open("data.xlsx", "rb") as f:
        ...     document, warnings = parse_xlsx(f.read())
        >>> [page.name for page in document.pages]
    """
    logger.debug("Reading xlsx")
    options = options or ConvertOptions()

    with open_package(data, "XLSX") as package:
        ctx = _XlsxContext(package)
        metadata = extract_metadata(package)
        wb = _load_workbook(package.file_like, read_only=False)

        pages = []
        for sheet_name in _selected_sheet_names(list(wb.sheetnames), options, ctx.warn):
            logger.debug(f"Reading sheet: [{sheet_name}]")
            ws = wb[sheet_name]
            if not isinstance(ws, Worksheet):
                logger.debug(f"Skipping non-worksheet sheet: [{sheet_name}]")
                continue
            if not _has_content(ws):
                logger.debug(f"Skipping empty sheet: [{sheet_name}]")
                continue
            try:
                pages.append(_parse_sheet(ctx, ws))
            except Exception as exc:
                logger.exception(f"Failed to parse sheet [{sheet_name}]")
                ctx.warn(f"sheet '{sheet_name}'", str(exc))
        wb.close()

    total_rows = sum(len(page.table.rows) for page in pages)
    logger.info(
        "Parsed XLSX: %d sheets, %d total rows, %d warnings",
        len(pages),
        total_rows,
        len(ctx.warnings),
    )
    return Document(metadata=metadata, pages=pages), ctx.warnings


def _chunk_page(sheet_name: str, rows: List[tuple]) -> TablePage:
    width = max((len(row) for row in rows), default=0)
    table_rows = []
    for row in rows:
        cells = []
        for col_idx in range(width):
            value = row[col_idx] if col_idx < len(row) else None
            text = _format_value_for_display(value)
            content = [Paragraph(runs=[Run(text=text)])] if text else []
            cells.append(TableCell(content=content))
        table_rows.append(TableRow(cells=cells))
    return TablePage(
        name=sheet_name,
        table=Table(
            rows=table_rows,
            column_widths=[excel_width_to_pt(DEFAULT_EXCEL_COLUMN_WIDTH)] * width,
        ),
    )


def iter_xlsx_row_chunks(
    data: Union[bytes, io.BytesIO],
    chunk_size: int = 1000,
    options: Optional[ConvertOptions] = None,
) -> Iterator[Tuple[Document, List[ConversionWarning]]]:
    """
    Stream a workbook as a sequence of small documents.

    Each yielded document holds a single TablePage with at most
    ``chunk_size`` rows of one sheet. Only values are kept: styles, merges
    and conditional formats are not available in read-only mode.

    Args:
        data: The complete XLSX file as bytes or a BytesIO.
        chunk_size: Maximum rows per yielded document.
        options: ``sheet_names`` restricts the sheets that are streamed.

    Yields:
        ``(document, warnings)``. Warnings about unknown sheet names are
        reported with the first chunk.

    Raises:
        ValueError: ``chunk_size`` is not positive.
        FileEncryptedError: The file is password protected.
        ParseError: Not a ZIP container or not a readable workbook.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    options = options or ConvertOptions()

    # Validates the container (encryption, zip bomb) before openpyxl sees it
    with open_package(data, "XLSX") as package:
        metadata = extract_metadata(package)
    file_like = as_file_like(data)
    wb = _load_workbook(file_like, read_only=True)

    pending: List[ConversionWarning] = []

    def warn(element: str, reason: str) -> None:
        logger.warning(f"{element}: {reason}")
        pending.append(ConversionWarning(element=element, reason=reason))

    try:
        for sheet_name in _selected_sheet_names(list(wb.sheetnames), options, warn):
            logger.debug(f"Streaming sheet: [{sheet_name}]")
            ws = wb[sheet_name]
            if not hasattr(ws, "iter_rows"):
                logger.debug(f"Skipping non-worksheet sheet: [{sheet_name}]")
                continue
            chunk: List[tuple] = []
            for row in ws.iter_rows(values_only=True):
                chunk.append(tuple(row))
                if len(chunk) >= chunk_size:
                    yield Document(metadata=metadata, pages=[_chunk_page(sheet_name, chunk)]), pending
                    pending = []
                    chunk = []
            if chunk and any(value is not None for row in chunk for value in row):
                yield Document(metadata=metadata, pages=[_chunk_page(sheet_name, chunk)]), pending
                pending = []
        if pending:
            yield Document(metadata=metadata, pages=[]), pending
    finally:
        wb.close()
