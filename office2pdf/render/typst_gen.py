"""
Typst Markup Generator
======================

Lowers a parsed ``Document`` into Typst markup plus the list of image assets
the markup refers to. The output is handed to a render backend that
compiles it to PDF.

Page Model
----------
Every page of the document model starts with its own ``#set page(...)``
rule; pages are separated by ``#pagebreak()``:

    FlowPage    word-processing content, flows over as many physical pages
                as needed, with optional header and footer
    FixedPage   one slide; every element is absolutely placed with
                ``#place(top + left, dx:, dy:)``
    TablePage   one worksheet rendered as a single ``#table``, split where
                charts are anchored

Images
------
Images are written to virtual files ``img-0.png``, ``img-1.jpeg``, ... in
the order they are first met. Images with identical bytes and format share
one file.

Text
----
All text is normalized to Unicode NFC before escaping so decomposed
accents never reach the renderer. Characters with a meaning in Typst
markup are backslash-escaped; line breaks inside a run become
``#linebreak()``.

Tables
------
Cells are laid out on a grid that tracks, per column, how many more rows
are covered by a row span from above. Merge continuation cells are
dropped, a column span is clamped to the free columns left in the row and
rows are padded with empty cells so that Typst's automatic cell placement
never shifts content into the wrong row.

Known Limitations
-----------------
- Text wrapping around floating images is not reproduced; only behind /
  in-front images are placed absolutely
- Shadows are drawn as a plain offset rectangle without blur
- Charts are rendered as data tables with simple proportional bars

Usage
-----
    >>> from office2pdf.render.typst_gen import generate_typst
    >>> output = generate_typst(document)
    >>> print(output.source[:200])
    >>> [asset.virtual_path for asset in output.images]
"""

import hashlib
import logging
import math
import unicodedata
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from office2pdf.config import ConvertOptions
from office2pdf.exceptions import RenderError
from office2pdf.ir import (
    Alignment,
    Block,
    BorderLineStyle,
    BorderSide,
    Chart,
    ChartType,
    Color,
    Document,
    Ellipse,
    Exact,
    FixedElement,
    FixedPage,
    FloatingImage,
    FlowPage,
    GradientFill,
    GradientStop,
    HeaderFooter,
    ImageData,
    ImageFormat,
    Line,
    ListBlock,
    ListKind,
    Margins,
    MathEquation,
    PageBreak,
    PageNumberField,
    Paragraph,
    ParagraphStyle,
    Polygon,
    Proportional,
    Rectangle,
    RoundedRectangle,
    Run,
    Shape,
    SmartArt,
    Table,
    TableCell,
    TablePage,
    TableRow,
    TextBox,
    TextStyle,
    WrapMode,
)
from office2pdf.render.font_subst import font_with_fallbacks

logger = logging.getLogger(__name__)

# Characters with a meaning in Typst markup
ESCAPED_CHARACTERS = frozenset('\\#*_$@<>[]~"`/')
# Only meaningful at the start of a line (headings, lists)
_LINE_START_MARKERS = frozenset("=-+")

PAGE_NUMBER_MARKUP = "#context counter(page).display()"

DEFAULT_FONT_SIZE = 11.0
# Typst's default paragraph leading
DEFAULT_LEADING_EM = 0.65
CHART_BAR_COLOR = Color(0x44, 0x72, 0xC4)

_ALIGNMENTS = {
    Alignment.LEFT: "left",
    Alignment.CENTER: "center",
    Alignment.RIGHT: "right",
}

_DASHES = {
    BorderLineStyle.DASHED: "dashed",
    BorderLineStyle.DOTTED: "dotted",
}

_FLOATING_WRAPS = (WrapMode.BEHIND, WrapMode.IN_FRONT, WrapMode.NONE)


@dataclass
class ImageAsset:
    virtual_path: str
    data: bytes


@dataclass
class GeneratedOutput:
    source: str
    images: List[ImageAsset] = field(default_factory=list)


# Primitive formatting


def format_number(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def pt(value: float) -> str:
    return f"{format_number(value)}pt"


def quote(text: str) -> str:
    """A Typst string literal."""
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def color_markup(color: Color, opacity: Optional[float] = None) -> str:
    if opacity is None or opacity >= 1.0:
        return f'rgb("#{color.to_hex()}")'
    alpha = int(round(min(max(opacity, 0.0), 1.0) * 255))
    return f'rgb("#{color.to_hex()}{alpha:02x}")'


def normalize_text(text: str) -> str:
    return unicodedata.normalize("NFC", text)


def escape_text(text: str) -> str:
    """
    NFC-normalize and escape text for Typst markup.

    Newlines become ``#linebreak()``; a ``;`` is appended where the next
    character would otherwise continue the embedded call.
    """
    text = normalize_text(text).replace("\r\n", "\n").replace("\r", "\n")
    out: List[str] = []
    at_line_start = True
    for index, ch in enumerate(text):
        if ch == "\n":
            out.append("#linebreak()")
            following = text[index + 1 : index + 2]
            if following in ("(", "."):
                out.append(";")
            at_line_start = True
            continue
        if ch in ESCAPED_CHARACTERS or (at_line_start and ch in _LINE_START_MARKERS):
            out.append("\\" + ch)
        else:
            out.append(ch)
        at_line_start = at_line_start and ch.isspace()
    return _escape_enum_marker("".join(out))


def _escape_enum_marker(escaped: str) -> str:
    """``1. item`` would start a numbered list."""
    digits = 0
    while digits < len(escaped) and escaped[digits].isdigit():
        digits += 1
    if digits and escaped[digits : digits + 1] == ".":
        return escaped[:digits] + "\\." + escaped[digits + 1 :]
    return escaped


def _join_inline(parts: Sequence[str]) -> str:
    """Concatenate inline markup, terminating embedded calls that would run on."""
    result = ""
    previous = ""
    for part in parts:
        if not part:
            continue
        if _ends_with_call(previous) and part[0] in "([.":
            result += ";"
        result += part
        previous = part
    return result


def _ends_with_call(markup: str) -> bool:
    if markup.endswith("#linebreak()"):
        return True
    # Escaped brackets are literal text, not the end of a call
    return (
        markup.startswith("#")
        and markup.endswith((")", "]"))
        and not markup.endswith(("\\)", "\\]"))
    )


# Gradients


def normalize_gradient_stops(stops: Sequence[GradientStop]) -> List[GradientStop]:
    """
    Sort stops by offset and pin the first to 0 and the last to 1.

    Offsets in between are clamped to ``[0, 1]``; the result is
    non-decreasing.
    """
    ordered = sorted(stops, key=lambda stop: stop.offset)
    normalized = [
        GradientStop(offset=min(max(stop.offset, 0.0), 1.0), color=stop.color)
        for stop in ordered
    ]
    if len(normalized) >= 2:
        normalized[0] = GradientStop(offset=0.0, color=normalized[0].color)
        normalized[-1] = GradientStop(offset=1.0, color=normalized[-1].color)
    return normalized


def gradient_markup(gradient: GradientFill, opacity: Optional[float] = None) -> Optional[str]:
    """``gradient.linear(...)``; a single stop is a solid color, no stops is None."""
    stops = normalize_gradient_stops(gradient.stops)
    if not stops:
        return None
    if len(stops) == 1:
        return color_markup(stops[0].color, opacity)
    parts = [
        f"({color_markup(stop.color, opacity)}, {format_number(stop.offset * 100)}%)"
        for stop in stops
    ]
    if gradient.angle is not None:
        parts.append(f"angle: {format_number(gradient.angle)}deg")
    return f"gradient.linear({', '.join(parts)})"


# Strokes


def stroke_markup(side: Optional[BorderSide]) -> str:
    if side is None:
        return "none"
    dash = _DASHES.get(side.style)
    if dash is None:
        return f"{pt(side.width)} + {color_markup(side.color)}"
    return f"(paint: {color_markup(side.color)}, thickness: {pt(side.width)}, dash: {quote(dash)})"


def _cell_stroke(cell: TableCell) -> Optional[str]:
    border = cell.border
    if border is None or border.is_empty():
        return None
    sides = []
    for name in ("top", "bottom", "left", "right"):
        side = getattr(border, name)
        if side is not None:
            sides.append(f"{name}: {stroke_markup(side)}")
    return f"({', '.join(sides)})"


# Table grid


@dataclass
class GridCell:
    """One emitted table cell; ``cell`` is None for padding."""

    cell: Optional[TableCell]
    column: int
    colspan: int = 1
    rowspan: int = 1


def table_column_count(table: Table) -> int:
    if table.column_widths:
        return len(table.column_widths)
    widest = 0
    for row in table.rows:
        widest = max(
            widest, sum(cell.col_span for cell in row.cells if not cell.is_continuation)
        )
    return widest


def resolve_table_grid(table: Table, num_columns: Optional[int] = None) -> List[List[GridCell]]:
    """
    Place the cells of a table on its column grid.

    Continuation cells are dropped, column spans are clamped to the free
    columns left in the row, row spans are clamped to the rows left in the
    table and every row is padded to the full column count.
    """
    if num_columns is None:
        num_columns = table_column_count(table)
    rows_remaining = [0] * num_columns
    total_rows = len(table.rows)
    grid: List[List[GridCell]] = []

    for row_index, row in enumerate(table.rows):
        placed: List[GridCell] = []
        column = 0
        for cell in row.cells:
            if cell.is_continuation:
                continue
            while column < num_columns and rows_remaining[column] > 0:
                column += 1
            if column >= num_columns:
                logger.debug(f"Dropping cell beyond column {num_columns} in row {row_index + 1}")
                break
            free = 0
            while column + free < num_columns and rows_remaining[column + free] == 0:
                free += 1
            colspan = max(1, min(cell.col_span, free))
            rowspan = max(1, min(cell.row_span, total_rows - row_index))
            placed.append(GridCell(cell=cell, column=column, colspan=colspan, rowspan=rowspan))
            if rowspan > 1:
                for covered in range(column, column + colspan):
                    rows_remaining[covered] = rowspan
            column += colspan

        # Fill every free slot so the next row starts on a fresh line
        for free_column in range(num_columns):
            if rows_remaining[free_column] > 0:
                continue
            if any(p.column <= free_column < p.column + p.colspan for p in placed):
                continue
            placed.append(GridCell(cell=None, column=free_column))
        placed.sort(key=lambda p: p.column)
        grid.append(placed)

        for index in range(num_columns):
            if rows_remaining[index] > 0:
                rows_remaining[index] -= 1
    return grid


class TypstGenerator:
    """Single-use markup writer; collects image assets as it goes."""

    def __init__(self, options: Optional[ConvertOptions] = None):
        self.options = options or ConvertOptions()
        self.images: List[ImageAsset] = []
        self._image_names: dict[str, str] = {}

    # Document

    def generate(self, document: Document) -> GeneratedOutput:
        parts: List[str] = []
        preamble = self._document_preamble(document)
        if preamble:
            parts.append(preamble)
        for index, page in enumerate(document.pages):
            if index:
                parts.append("#pagebreak()\n")
            parts.append(self._page(page))
        source = "\n".join(parts)
        logger.debug(
            f"Generated {len(source)} characters of markup, {len(self.images)} images"
        )
        return GeneratedOutput(source=source, images=self.images)

    def _document_preamble(self, document: Document) -> str:
        args = []
        if document.metadata.title:
            args.append(f"title: {quote(normalize_text(document.metadata.title))}")
        if document.metadata.author:
            args.append(f"author: {quote(normalize_text(document.metadata.author))}")
        if not args:
            return ""
        return f"#set document({', '.join(args)})\n"

    def _page(self, page: Union[FlowPage, FixedPage, TablePage]) -> str:
        if isinstance(page, FlowPage):
            setup = self._page_setup(
                page.size.width, page.size.height, page.margins, page.header, page.footer
            )
            return setup + self.blocks(page.content)
        if isinstance(page, FixedPage):
            fill = None
            if page.background_gradient is not None:
                fill = gradient_markup(page.background_gradient)
            if fill is None and page.background_color is not None:
                fill = color_markup(page.background_color)
            setup = self._page_setup(
                page.size.width, page.size.height, Margins(0, 0, 0, 0), fill=fill
            )
            return setup + "".join(self._fixed_element(element) for element in page.elements)
        if isinstance(page, TablePage):
            setup = self._page_setup(
                page.size.width, page.size.height, page.margins, page.header, page.footer
            )
            return setup + self._table_page(page)
        raise RenderError(f"Unsupported page type: {type(page).__name__}")

    def _page_size(self, width: float, height: float) -> tuple[float, float]:
        if self.options.paper_size is not None:
            width, height = self.options.paper_size.dimensions()
        landscape = self.options.landscape
        if landscape is not None and (width > height) != landscape:
            width, height = height, width
        return width, height

    def _page_setup(
        self,
        width: float,
        height: float,
        margins: Margins,
        header: Optional[HeaderFooter] = None,
        footer: Optional[HeaderFooter] = None,
        fill: Optional[str] = None,
    ) -> str:
        width, height = self._page_size(width, height)
        args = [
            f"width: {pt(width)}",
            f"height: {pt(height)}",
            "margin: (top: {}, bottom: {}, left: {}, right: {})".format(
                pt(margins.top), pt(margins.bottom), pt(margins.left), pt(margins.right)
            ),
        ]
        if header is not None and header.paragraphs:
            args.append(f"header: [{self._header_footer(header)}]")
        if footer is not None and footer.paragraphs:
            args.append(f"footer: [{self._header_footer(footer)}]")
        if fill is not None:
            args.append(f"fill: {fill}")
        return f"#set page({', '.join(args)})\n\n"

    def _header_footer(self, header_footer: HeaderFooter) -> str:
        lines = []
        for paragraph in header_footer.paragraphs:
            parts = []
            for element in paragraph.elements:
                if isinstance(element, PageNumberField):
                    parts.append(PAGE_NUMBER_MARKUP)
                else:
                    parts.append(self.run(element))
            inline = _join_inline(parts)
            align = _ALIGNMENTS.get(paragraph.style.alignment)
            lines.append(f"#align({align})[{inline}]" if align else inline)
        return "\n".join(lines)

    # Blocks

    def blocks(self, blocks: Sequence[Block]) -> str:
        return "".join(self.block(block) for block in blocks)

    def block(self, block: Block) -> str:
        if isinstance(block, Paragraph):
            return self.paragraph(block)
        if isinstance(block, Table):
            return self.table(block) + "\n\n"
        if isinstance(block, ImageData):
            return self.image(block, block.width, block.height) + "\n\n"
        if isinstance(block, FloatingImage):
            return self.floating_image(block)
        if isinstance(block, ListBlock):
            return self.list_block(block)
        if isinstance(block, MathEquation):
            return self.math(block) + "\n\n"
        if isinstance(block, Chart):
            return self.chart(block) + "\n\n"
        if isinstance(block, PageBreak):
            return "#pagebreak()\n\n"
        raise RenderError(f"Unsupported block type: {type(block).__name__}")

    def run(self, run: Run) -> str:
        markup = escape_text(run.text) if run.text else ""
        if markup:
            markup = self._styled_text(markup, run.style)
            if run.style.underline:
                markup = f"#underline[{markup}]"
            if run.style.strikethrough:
                markup = f"#strike[{markup}]"
            if run.href:
                markup = f"#link({quote(run.href)})[{markup}]"
        if run.footnote is not None:
            markup = _join_inline([markup, f"#footnote[{escape_text(run.footnote)}]"])
        return markup

    def _styled_text(self, markup: str, style: TextStyle) -> str:
        args = []
        if style.font_family:
            args.append(f"font: {font_with_fallbacks(style.font_family)}")
        if style.font_size:
            args.append(f"size: {pt(style.font_size)}")
        if style.color is not None:
            args.append(f"fill: {color_markup(style.color)}")
        if style.bold:
            args.append('weight: "bold"')
        if style.italic:
            args.append('style: "italic"')
        if not args:
            return markup
        return f"#text({', '.join(args)})[{markup}]"

    def inline(self, paragraph: Paragraph) -> str:
        return _join_inline([self.run(run) for run in paragraph.runs])

    def paragraph(self, paragraph: Paragraph) -> str:
        inline = self.inline(paragraph)
        style = paragraph.style
        if style.heading_level:
            level = min(max(style.heading_level, 1), 6)
            return f"#heading(level: {level})[{inline}]\n\n"
        if _is_plain(style):
            if not inline:
                return "#v(1em)\n\n"
            return inline + "\n\n"

        block_args = []
        if style.space_before is not None:
            block_args.append(f"above: {pt(style.space_before)}")
        if style.space_after is not None:
            block_args.append(f"below: {pt(style.space_after)}")
        inset = []
        if style.indent_left:
            inset.append(f"left: {pt(max(style.indent_left, 0.0))}")
        if style.indent_right:
            inset.append(f"right: {pt(max(style.indent_right, 0.0))}")
        if inset:
            block_args.append(f"inset: ({', '.join(inset)})")

        par_args = []
        leading = self._leading(style, paragraph)
        if leading is not None:
            par_args.append(f"leading: {leading}")
        if style.indent_first_line:
            if style.indent_first_line > 0:
                par_args.append(f"first-line-indent: {pt(style.indent_first_line)}")
            else:
                par_args.append(f"hanging-indent: {pt(-style.indent_first_line)}")
        if style.alignment == Alignment.JUSTIFY:
            par_args.append("justify: true")

        body = inline if inline else "#v(1em)"
        align = _ALIGNMENTS.get(style.alignment)
        if align:
            body = f"#align({align})[{body}]"
        lines = []
        if par_args:
            lines.append(f"#set par({', '.join(par_args)})")
        lines.append(body)
        head = f"#block({', '.join(block_args)})" if block_args else "#block"
        return head + "[\n" + "\n".join(lines) + "\n]\n\n"

    def _leading(self, style: ParagraphStyle, paragraph: Paragraph) -> Optional[str]:
        spacing = style.line_spacing
        if isinstance(spacing, Proportional):
            return f"{format_number(DEFAULT_LEADING_EM * spacing.factor)}em"
        if isinstance(spacing, Exact):
            size = next(
                (run.style.font_size for run in paragraph.runs if run.style.font_size),
                DEFAULT_FONT_SIZE,
            )
            return pt(max(spacing.points - size, 0.0))
        return None

    def list_block(self, list_block: ListBlock) -> str:
        marker = "+" if list_block.kind == ListKind.ORDERED else "-"
        lines = []
        for item in list_block.items:
            text = "#linebreak()".join(self.inline(p) for p in item.content)
            lines.append("  " * max(item.level, 0) + f"{marker} {text}")
        return "\n".join(lines) + "\n\n"

    def math(self, equation: MathEquation) -> str:
        if equation.display:
            return f"$ {equation.content} $"
        return f"${equation.content}$"

    # Images

    def image_path(self, image: ImageData) -> str:
        if not isinstance(image.format, ImageFormat):
            raise RenderError(f"Unknown image format: {image.format!r}")
        key = f"{hashlib.sha256(image.data).hexdigest()}.{image.format.extension}"
        name = self._image_names.get(key)
        if name is None:
            name = f"img-{len(self.images)}.{image.format.extension}"
            self._image_names[key] = name
            self.images.append(ImageAsset(virtual_path=name, data=image.data))
        return name

    def image(
        self,
        image: ImageData,
        width: Optional[float] = None,
        height: Optional[float] = None,
        fit: Optional[str] = None,
    ) -> str:
        args = [quote(self.image_path(image))]
        if width:
            args.append(f"width: {pt(width)}")
        if height:
            args.append(f"height: {pt(height)}")
        if fit:
            args.append(f"fit: {quote(fit)}")
        return f"#image({', '.join(args)})"

    def floating_image(self, floating: FloatingImage) -> str:
        image = self.image(floating.image, floating.image.width, floating.image.height)
        if floating.wrap_mode not in _FLOATING_WRAPS:
            return image + "\n\n"
        return (
            f"#place(top + left, dx: {pt(floating.offset_x)}, dy: {pt(floating.offset_y)})"
            f"[{image}]\n"
        )

    # Tables

    def table(self, table: Table, default_stroke: bool = True) -> str:
        num_columns = table_column_count(table)
        if num_columns == 0:
            return ""
        if table.column_widths:
            widths = [pt(width) if width > 0 else "auto" for width in table.column_widths]
            columns = "(" + ", ".join(widths) + ",)"
        else:
            columns = str(num_columns)

        has_borders = any(
            cell.border is not None and not cell.border.is_empty()
            for row in table.rows
            for cell in row.cells
        )
        stroke = "0.5pt + black" if default_stroke and not has_borders else "none"

        lines = [f"#table(columns: {columns}, stroke: {stroke},"]
        rows_arg = self._row_heights(table.rows)
        if rows_arg:
            lines[0] = f"#table(columns: {columns}, rows: {rows_arg}, stroke: {stroke},"
        for grid_row in resolve_table_grid(table, num_columns):
            cells = [self._table_cell(placed) for placed in grid_row]
            lines.append("  " + ", ".join(cells) + ",")
        lines.append(")")
        return "\n".join(lines)

    def _row_heights(self, rows: Sequence[TableRow]) -> Optional[str]:
        if not any(row.height for row in rows):
            return None
        return "(" + ", ".join(pt(row.height) if row.height else "auto" for row in rows) + ",)"

    def _table_cell(self, placed: GridCell) -> str:
        cell = placed.cell
        if cell is None:
            return "[]"
        content = self.blocks(cell.content).strip()
        if cell.icon_text:
            content = escape_text(cell.icon_text) + " " + content
        if cell.data_bar is not None:
            fill_pct = min(max(cell.data_bar.fill_pct, 0.0), 100.0)
            bar = (
                f"#place(left + horizon)[#box(width: {format_number(fill_pct)}%, "
                f"height: 1em, fill: {color_markup(cell.data_bar.color, 0.6)})]"
            )
            content = f"#box(width: 100%)[{bar}{content}]"

        args = []
        if placed.colspan > 1:
            args.append(f"colspan: {placed.colspan}")
        if placed.rowspan > 1:
            args.append(f"rowspan: {placed.rowspan}")
        if cell.background is not None:
            args.append(f"fill: {color_markup(cell.background)}")
        stroke = _cell_stroke(cell)
        if stroke is not None:
            args.append(f"stroke: {stroke}")
        if not args:
            return f"[{content}]"
        return f"table.cell({', '.join(args)})[{content}]"

    def _table_page(self, page: TablePage) -> str:
        rows = page.table.rows
        charts = sorted(page.charts, key=lambda item: item[0])
        parts = []
        start = 0
        for anchor_row, chart in charts:
            end = min(max(anchor_row, start), len(rows))
            if end > start:
                segment = Table(rows=rows[start:end], column_widths=page.table.column_widths)
                parts.append(self.table(segment, default_stroke=False) + "\n\n")
            parts.append(self.chart(chart) + "\n\n")
            start = end
        if start < len(rows) or not parts:
            segment = Table(rows=rows[start:], column_widths=page.table.column_widths)
            parts.append(self.table(segment, default_stroke=False) + "\n\n")
        return "".join(parts)

    # Charts

    def chart(self, chart: Chart) -> str:
        row_count = max(
            [len(chart.categories)] + [len(series.values) for series in chart.series]
        )
        categories = [
            chart.categories[i] if i < len(chart.categories) else str(i + 1)
            for i in range(row_count)
        ]
        series_values = [
            list(series.values) + [0.0] * (row_count - len(series.values))
            for series in chart.series
        ]

        header = ["[]"] + [
            f"[*{escape_text(series.name or f'Series {index + 1}')}*]"
            for index, series in enumerate(chart.series)
        ]
        cells = list(header)
        if chart.chart_type == ChartType.PIE:
            totals = [sum(abs(v) for v in values) for values in series_values]
            for row in range(row_count):
                cells.append(f"[{escape_text(categories[row])}]")
                for values, total in zip(series_values, totals):
                    share = abs(values[row]) / total * 100 if total else 0.0
                    cells.append(f"[{format_number(values[row])} ({format_number(share)}%)]")
        else:
            with_bars = chart.chart_type in (ChartType.BAR, ChartType.COLUMN, ChartType.LINE)
            peak = max((abs(v) for values in series_values for v in values), default=0.0)
            for row in range(row_count):
                cells.append(f"[{escape_text(categories[row])}]")
                for values in series_values:
                    value = values[row]
                    cell = format_number(value)
                    if with_bars and peak > 0:
                        width = abs(value) / peak * 100
                        cell += (
                            f" #box(width: {format_number(width)}%, height: 0.6em, "
                            f"fill: {color_markup(CHART_BAR_COLOR)})"
                        )
                    cells.append(f"[{cell}]")

        columns = 1 + len(chart.series)
        lines = []
        if chart.title:
            lines.append(f"#align(center)[*{escape_text(chart.title)}*]")
        lines.append(f"#table(columns: {columns}, stroke: 0.5pt + gray,")
        for start in range(0, len(cells), columns):
            lines.append("  " + ", ".join(cells[start : start + columns]) + ",")
        lines.append(")")
        return "#block[\n" + "\n".join(lines) + "\n]"

    # Fixed layout

    def _fixed_element(self, element: FixedElement) -> str:
        body = self._fixed_content(element)
        return (
            f"#place(top + left, dx: {pt(element.x)}, dy: {pt(element.y)})"
            f"[#box(width: {pt(element.width)}, height: {pt(element.height)})[{body}]]\n"
        )

    def _fixed_content(self, element: FixedElement) -> str:
        kind = element.kind
        if isinstance(kind, TextBox):
            return self.blocks(kind.content).strip()
        if isinstance(kind, ImageData):
            return self.image(kind, element.width, element.height, fit="stretch")
        if isinstance(kind, Shape):
            return self.shape(kind, element.width, element.height)
        if isinstance(kind, Table):
            return self.table(kind)
        if isinstance(kind, SmartArt):
            lines = [
                "  " * max(node.depth, 0) + "- " + escape_text(node.text) for node in kind.nodes
            ]
            return "\n" + "\n".join(lines) + "\n"
        if isinstance(kind, Chart):
            return self.chart(kind)
        raise RenderError(f"Unsupported fixed element: {type(kind).__name__}")

    def shape(self, shape: Shape, width: float, height: float) -> str:
        fill = None
        if shape.gradient_fill is not None:
            fill = gradient_markup(shape.gradient_fill, shape.opacity)
        if fill is None and shape.fill is not None:
            fill = color_markup(shape.fill, shape.opacity)
        stroke = stroke_markup(shape.stroke)

        kind = shape.kind
        if isinstance(kind, Line):
            line_stroke = stroke if shape.stroke is not None else "1pt + black"
            markup = (
                f"#line(start: (0pt, 0pt), end: ({pt(kind.x2)}, {pt(kind.y2)}), "
                f"stroke: {line_stroke})"
            )
        elif isinstance(kind, Polygon):
            args = [f"fill: {fill or 'none'}", f"stroke: {stroke}"]
            args += [f"({pt(x)}, {pt(y)})" for x, y in kind.points]
            markup = f"#polygon({', '.join(args)})"
        elif isinstance(kind, (Rectangle, RoundedRectangle, Ellipse)):
            args = ["width: 100%", "height: 100%", f"fill: {fill or 'none'}", f"stroke: {stroke}"]
            if isinstance(kind, RoundedRectangle):
                args.append(f"radius: {pt(kind.radius_fraction * min(width, height))}")
            function = "ellipse" if isinstance(kind, Ellipse) else "rect"
            markup = f"#{function}({', '.join(args)})"
        else:
            raise RenderError(f"Unsupported shape kind: {type(kind).__name__}")

        if shape.shadow is not None:
            markup = self._shadow(shape) + markup
        if shape.rotation_deg:
            markup = f"#rotate({format_number(shape.rotation_deg)}deg)[{markup}]"
        return markup

    def _shadow(self, shape: Shape) -> str:
        shadow = shape.shadow
        radians = math.radians(shadow.direction)
        dx = shadow.distance * math.cos(radians)
        dy = shadow.distance * math.sin(radians)
        function = "ellipse" if isinstance(shape.kind, Ellipse) else "rect"
        return (
            f"#place(top + left, dx: {pt(dx)}, dy: {pt(dy)})"
            f"[#{function}(width: 100%, height: 100%, "
            f"fill: {color_markup(shadow.color, shadow.opacity)}, stroke: none)]"
        )


def _is_plain(style: ParagraphStyle) -> bool:
    return (
        style.alignment in (None, Alignment.LEFT)
        and not style.indent_left
        and not style.indent_right
        and not style.indent_first_line
        and style.line_spacing is None
        and style.space_before is None
        and style.space_after is None
    )


def generate_typst(
    document: Document, options: Optional[ConvertOptions] = None
) -> GeneratedOutput:
    """
    Generate Typst markup for a document.

    Args:
        document: A parsed document.
        options: ``paper_size`` and ``landscape`` override the page geometry.

    Returns:
        The markup and the image assets it references by virtual path.

    Raises:
        RenderError: The document contains an element the generator cannot
            express, such as an image without a known format.
    """
    return TypstGenerator(options).generate(document)
