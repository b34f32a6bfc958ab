"""
DOCX Document Parser
====================

Parses Microsoft Word .docx files (Office Open XML, Word 2007 and later) into
a single flowing page of the document model.

This module uses direct XML parsing of the docx ZIP archive, without
requiring the python-docx library.

File Format Background
----------------------
The .docx format is a ZIP archive containing XML files following the Office
Open XML (OOXML) standard. Key components:

    word/document.xml: Main document body (paragraphs, tables, sections)
    word/styles.xml: Paragraph and character styles with ``basedOn`` chains
    word/numbering.xml: List definitions (abstractNum / num)
    word/footnotes.xml: Footnote bodies
    word/header1.xml, footer1.xml: Header/footer content
    word/_rels/document.xml.rels: Relationships (images, charts, links)
    word/media/: Embedded images
    word/charts/: Embedded chart parts
    docProps/core.xml: Metadata (title, author, dates)

Units:
    - Page geometry, indents and spacing are in twips (1/20 pt)
    - Font sizes are in half-points
    - Border widths are in eighths of a point
    - Drawing extents and offsets are in EMU (12700 per point)

Style Resolution
----------------
Paragraph properties are resolved from the document defaults, then the
paragraph style chain (``w:basedOn``, root first), then the direct ``w:pPr``.
Run properties additionally layer the character style chain between the
paragraph style and the direct ``w:rPr``.

Tables
------
Vertical merges are encoded per cell (``w:vMerge w:val="restart"`` opens a
merge, ``w:vMerge`` without value continues it). Cells are collected in a
first pass with their grid column and merge marker; a second pass turns each
restart into a row span and drops the continuation cells.

Fault Isolation
---------------
Every top-level body element is parsed inside its own fault boundary: an
exception while handling one paragraph or table is recorded as a warning and
parsing continues with the next element.

Known Limitations
-----------------
- Only the last section's page setup, header and footer are used
- Text boxes (``wps:txbx``) and VML shapes are not rendered
- Comments, endnotes and tracked deletions are ignored
- Fields other than PAGE render their cached result text

Maintenance Notes
-----------------
- All XML parts are parsed once and cached by the package context
- Math is lowered by the shared OMML converter, charts by the chart parser
"""

import io
import logging
import re
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple, Union
from xml.etree import ElementTree as ET

from office2pdf.config import ConvertOptions
from office2pdf.exceptions import ParseError
from office2pdf.ir import (
    Alignment,
    Block,
    BorderLineStyle,
    BorderSide,
    CellBorder,
    Color,
    ConversionWarning,
    Document,
    Exact,
    FloatingImage,
    FlowPage,
    HeaderFooter,
    HeaderFooterParagraph,
    ImageData,
    ListBlock,
    ListItem,
    ListKind,
    Margins,
    MathEquation,
    PageBreak,
    PageNumberField,
    PageSize,
    Paragraph,
    ParagraphStyle,
    Proportional,
    Run,
    Table,
    TableCell,
    TableRow,
    TextStyle,
    WrapMode,
)
from office2pdf.parsers.chart import parse_chart_xml
from office2pdf.parsers.omml import omml_to_typst
from office2pdf.parsers.util.core_metadata import extract_metadata
from office2pdf.parsers.util.image_utils import detect_image_format, get_image_dimensions
from office2pdf.parsers.util.units import (
    eighths_to_pt,
    emu_to_pt,
    half_points_to_pt,
    parse_float,
    parse_int,
    pixels_to_pt,
    twips_to_pt,
)
from office2pdf.parsers.util.zip_context import ZipContext, open_package

logger = logging.getLogger(__name__)

# XML Namespaces used in DOCX documents
W_NS = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"
M_NS = "{http://schemas.openxmlformats.org/officeDocument/2006/math}"
R_NS = "{http://schemas.openxmlformats.org/officeDocument/2006/relationships}"
A_NS = "{http://schemas.openxmlformats.org/drawingml/2006/main}"
WP_NS = "{http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing}"
C_NS = "{http://schemas.openxmlformats.org/drawingml/2006/chart}"

DOCUMENT_PATH = "word/document.xml"
STYLES_PATH = "word/styles.xml"
NUMBERING_PATH = "word/numbering.xml"
FOOTNOTES_PATH = "word/footnotes.xml"

_OFF_VALUES = ("0", "false", "off")

_ALIGNMENTS = {
    "left": Alignment.LEFT,
    "start": Alignment.LEFT,
    "center": Alignment.CENTER,
    "right": Alignment.RIGHT,
    "end": Alignment.RIGHT,
    "both": Alignment.JUSTIFY,
    "distribute": Alignment.JUSTIFY,
    "justify": Alignment.JUSTIFY,
}

_BORDER_STYLES = {
    "single": BorderLineStyle.SOLID,
    "thick": BorderLineStyle.SOLID,
    "dashed": BorderLineStyle.DASHED,
    "dashSmallGap": BorderLineStyle.DASHED,
    "dotted": BorderLineStyle.DOTTED,
    "double": BorderLineStyle.DOUBLE,
}

_WRAP_MODES = {
    "wrapSquare": WrapMode.SQUARE,
    "wrapTight": WrapMode.TIGHT,
    "wrapThrough": WrapMode.TIGHT,
    "wrapTopAndBottom": WrapMode.TOP_AND_BOTTOM,
    "wrapNone": WrapMode.NONE,
}

_HEADING_NAME = re.compile(r"^heading\s*(\d)$", re.IGNORECASE)


def _val(elem: Optional[ET.Element], attr: str = "val") -> Optional[str]:
    if elem is None:
        return None
    return elem.get(f"{W_NS}{attr}")


def _on_off(elem: Optional[ET.Element]) -> Optional[bool]:
    """Toggle property: present without ``w:val`` means on."""
    if elem is None:
        return None
    value = _val(elem)
    return value is None or value.lower() not in _OFF_VALUES


def _hex_color(value: Optional[str]) -> Optional[Color]:
    if not value or value.lower() == "auto":
        return None
    return Color.from_hex(value)


class _DocxContext:
    """
    Cached context for DOCX parsing.

    Wraps the opened package and resolves styles, numbering, footnotes and
    relationships once for the whole document.
    """

    def __init__(self, package: ZipContext):
        self.package = package
        self.warnings: List[ConversionWarning] = []

        if not package.exists(DOCUMENT_PATH):
            raise ParseError(f"DOCX package has no {DOCUMENT_PATH}")
        self.document_root = package.read_xml_root(DOCUMENT_PATH)
        self.relationships = package.relationships(DOCUMENT_PATH)

        self._styles: dict[str, ET.Element] = {}
        self._default_ppr: Optional[ET.Element] = None
        self._default_rpr: Optional[ET.Element] = None
        self._load_styles()

        # numId -> {ilvl -> ListKind}
        self._numbering: dict[str, dict[int, ListKind]] = {}
        self._load_numbering()

        self._footnotes: dict[str, str] = {}
        self._load_footnotes()

    def _load_styles(self) -> None:
        root = self.package.read_optional_xml_root(STYLES_PATH)
        if root is None:
            return
        defaults = root.find(f"{W_NS}docDefaults")
        if defaults is not None:
            self._default_ppr = defaults.find(f"{W_NS}pPrDefault/{W_NS}pPr")
            self._default_rpr = defaults.find(f"{W_NS}rPrDefault/{W_NS}rPr")
        for style in root.findall(f"{W_NS}style"):
            style_id = style.get(f"{W_NS}styleId")
            if style_id:
                self._styles[style_id] = style

    def _load_numbering(self) -> None:
        root = self.package.read_optional_xml_root(NUMBERING_PATH)
        if root is None:
            return
        abstract_levels: dict[str, dict[int, ListKind]] = {}
        for abstract in root.findall(f"{W_NS}abstractNum"):
            levels = {}
            for lvl in abstract.findall(f"{W_NS}lvl"):
                ilvl = parse_int(_val(lvl, "ilvl"), 0)
                fmt = _val(lvl.find(f"{W_NS}numFmt"))
                levels[ilvl] = ListKind.UNORDERED if fmt == "bullet" else ListKind.ORDERED
            abstract_levels[_val(abstract, "abstractNumId") or ""] = levels
        for num in root.findall(f"{W_NS}num"):
            num_id = _val(num, "numId")
            abstract_id = _val(num.find(f"{W_NS}abstractNumId"))
            if num_id:
                self._numbering[num_id] = abstract_levels.get(abstract_id or "", {})

    def _load_footnotes(self) -> None:
        root = self.package.read_optional_xml_root(FOOTNOTES_PATH)
        if root is None:
            return
        for note in root.findall(f"{W_NS}footnote"):
            note_type = _val(note, "type")
            if note_type in ("separator", "continuationSeparator", "continuationNotice"):
                continue
            paragraphs = []
            for p in note.findall(f"{W_NS}p"):
                text = "".join(t.text or "" for t in p.iter(f"{W_NS}t"))
                if text.strip():
                    paragraphs.append(text.strip())
            self._footnotes[_val(note, "id") or ""] = " ".join(paragraphs)

    @property
    def body(self) -> Optional[ET.Element]:
        return self.document_root.find(f"{W_NS}body")

    def footnote_text(self, note_id: str) -> Optional[str]:
        return self._footnotes.get(note_id)

    def list_kind(self, num_id: str, ilvl: int) -> ListKind:
        levels = self._numbering.get(num_id, {})
        return levels.get(ilvl, levels.get(0, ListKind.ORDERED))

    def style_chain(self, style_id: Optional[str]) -> List[ET.Element]:
        """Style elements from the root of the ``basedOn`` chain down to ``style_id``."""
        chain: List[ET.Element] = []
        seen: set[str] = set()
        while style_id and style_id not in seen:
            seen.add(style_id)
            style = self._styles.get(style_id)
            if style is None:
                break
            chain.append(style)
            style_id = _val(style.find(f"{W_NS}basedOn"))
        chain.reverse()
        return chain

    @property
    def default_ppr(self) -> Optional[ET.Element]:
        return self._default_ppr

    @property
    def default_rpr(self) -> Optional[ET.Element]:
        return self._default_rpr

    def warn(self, element: str, reason: str) -> None:
        logger.warning(f"{element}: {reason}")
        self.warnings.append(ConversionWarning(element=element, reason=reason))


def _apply_ppr(style: ParagraphStyle, ppr: Optional[ET.Element]) -> None:
    if ppr is None:
        return

    alignment = _ALIGNMENTS.get(_val(ppr.find(f"{W_NS}jc")) or "")
    if alignment is not None:
        style.alignment = alignment

    ind = ppr.find(f"{W_NS}ind")
    if ind is not None:
        left = _val(ind, "left") or _val(ind, "start")
        right = _val(ind, "right") or _val(ind, "end")
        if left is not None:
            style.indent_left = twips_to_pt(parse_float(left, 0.0))
        if right is not None:
            style.indent_right = twips_to_pt(parse_float(right, 0.0))
        first_line = _val(ind, "firstLine")
        hanging = _val(ind, "hanging")
        if hanging is not None:
            style.indent_first_line = -twips_to_pt(parse_float(hanging, 0.0))
        elif first_line is not None:
            style.indent_first_line = twips_to_pt(parse_float(first_line, 0.0))

    spacing = ppr.find(f"{W_NS}spacing")
    if spacing is not None:
        before = parse_float(_val(spacing, "before"))
        after = parse_float(_val(spacing, "after"))
        line = parse_float(_val(spacing, "line"))
        if before is not None:
            style.space_before = twips_to_pt(before)
        if after is not None:
            style.space_after = twips_to_pt(after)
        if line is not None:
            rule = _val(spacing, "lineRule") or "auto"
            if rule == "auto":
                style.line_spacing = Proportional(line / 240.0)
            else:
                style.line_spacing = Exact(twips_to_pt(line))

    outline = parse_int(_val(ppr.find(f"{W_NS}outlineLvl")))
    if outline is not None and 0 <= outline < 9:
        style.heading_level = outline + 1


def _apply_rpr(style: TextStyle, rpr: Optional[ET.Element]) -> None:
    if rpr is None:
        return

    bold = _on_off(rpr.find(f"{W_NS}b"))
    if bold is not None:
        style.bold = bold
    italic = _on_off(rpr.find(f"{W_NS}i"))
    if italic is not None:
        style.italic = italic

    underline = rpr.find(f"{W_NS}u")
    if underline is not None:
        u_val = _val(underline)
        style.underline = u_val is None or u_val not in ("none",) + _OFF_VALUES

    strike = _on_off(rpr.find(f"{W_NS}strike"))
    double_strike = _on_off(rpr.find(f"{W_NS}dstrike"))
    if strike is not None or double_strike is not None:
        style.strikethrough = bool(strike) or bool(double_strike)

    size = parse_float(_val(rpr.find(f"{W_NS}sz")))
    if size is not None:
        style.font_size = half_points_to_pt(size)

    color = _hex_color(_val(rpr.find(f"{W_NS}color")))
    if color is not None:
        style.color = color

    fonts = rpr.find(f"{W_NS}rFonts")
    if fonts is not None:
        name = (
            _val(fonts, "ascii")
            or _val(fonts, "hAnsi")
            or _val(fonts, "eastAsia")
            or _val(fonts, "cs")
        )
        if name:
            style.font_family = name


def _paragraph_style_id(ppr: Optional[ET.Element]) -> Optional[str]:
    return _val(ppr.find(f"{W_NS}pStyle")) if ppr is not None else None


def _resolve_paragraph_style(ctx: _DocxContext, ppr: Optional[ET.Element]) -> ParagraphStyle:
    style = ParagraphStyle()
    _apply_ppr(style, ctx.default_ppr)
    for named in ctx.style_chain(_paragraph_style_id(ppr)):
        _apply_ppr(style, named.find(f"{W_NS}pPr"))
        name = _val(named.find(f"{W_NS}name")) or ""
        match = _HEADING_NAME.match(name.strip())
        if match:
            style.heading_level = int(match.group(1))
    _apply_ppr(style, ppr)
    return style


def _paragraph_base_text_style(ctx: _DocxContext, ppr: Optional[ET.Element]) -> TextStyle:
    style = TextStyle()
    _apply_rpr(style, ctx.default_rpr)
    for named in ctx.style_chain(_paragraph_style_id(ppr)):
        _apply_rpr(style, named.find(f"{W_NS}rPr"))
    return style


def _resolve_run_style(ctx: _DocxContext, base: TextStyle, rpr: Optional[ET.Element]) -> TextStyle:
    style = replace(base)
    if rpr is None:
        return style
    char_style_id = _val(rpr.find(f"{W_NS}rStyle"))
    for named in ctx.style_chain(char_style_id):
        _apply_rpr(style, named.find(f"{W_NS}rPr"))
    _apply_rpr(style, rpr)
    return style


def _page_break_before(ctx: _DocxContext, ppr: Optional[ET.Element]) -> bool:
    if ppr is None:
        return False
    direct = _on_off(ppr.find(f"{W_NS}pageBreakBefore"))
    if direct is not None:
        return direct
    for named in reversed(ctx.style_chain(_paragraph_style_id(ppr))):
        inherited = _on_off(named.find(f"{W_NS}pPr/{W_NS}pageBreakBefore"))
        if inherited is not None:
            return inherited
    return False


def _numbering_properties(
    ctx: _DocxContext, ppr: Optional[ET.Element]
) -> Optional[Tuple[str, int]]:
    """``(numId, ilvl)`` of a list paragraph, from direct or style properties."""
    if ppr is None:
        return None
    candidates = [ppr.find(f"{W_NS}numPr")]
    for named in reversed(ctx.style_chain(_paragraph_style_id(ppr))):
        candidates.append(named.find(f"{W_NS}pPr/{W_NS}numPr"))
    for num_pr in candidates:
        if num_pr is None:
            continue
        num_id = _val(num_pr.find(f"{W_NS}numId"))
        if num_id is None:
            continue
        if num_id == "0":
            return None
        ilvl = parse_int(_val(num_pr.find(f"{W_NS}ilvl")), 0)
        return num_id, ilvl
    return None


@dataclass
class _ParagraphParts:
    """Everything one ``w:p`` produces, before it is laid out as blocks."""

    style: ParagraphStyle
    # Run lists separated by hard page breaks
    segments: List[List[Run]]
    before: List[Block]
    after: List[Block]
    page_break_before: bool = False


class _ParagraphParser:
    """Walks the inline content of one paragraph."""

    def __init__(self, ctx: _DocxContext, part_path: str = DOCUMENT_PATH):
        self.ctx = ctx
        self.part_path = part_path

    def parse(self, p: ET.Element) -> _ParagraphParts:
        ppr = p.find(f"{W_NS}pPr")
        parts = _ParagraphParts(
            style=_resolve_paragraph_style(self.ctx, ppr),
            segments=[[]],
            before=[],
            after=[],
            page_break_before=_page_break_before(self.ctx, ppr),
        )
        base = _paragraph_base_text_style(self.ctx, ppr)
        self._walk_inline(p, parts, base, href=None)
        return parts

    def _walk_inline(
        self,
        parent: ET.Element,
        parts: _ParagraphParts,
        base: TextStyle,
        href: Optional[str],
    ) -> None:
        for child in parent:
            tag = child.tag
            if tag == f"{W_NS}r":
                self._run(child, parts, base, href)
            elif tag == f"{W_NS}hyperlink":
                self._walk_inline(child, parts, base, self._hyperlink_target(child))
            elif tag in (f"{W_NS}ins", f"{W_NS}smartTag", f"{W_NS}fldSimple"):
                self._walk_inline(child, parts, base, href)
            elif tag == f"{W_NS}sdt":
                content = child.find(f"{W_NS}sdtContent")
                if content is not None:
                    self._walk_inline(content, parts, base, href)
            elif tag == f"{M_NS}oMathPara":
                notation = omml_to_typst(child)
                if notation:
                    parts.after.append(MathEquation(content=notation, display=True))
            elif tag == f"{M_NS}oMath":
                notation = omml_to_typst(child)
                if notation:
                    parts.after.append(MathEquation(content=notation, display=False))

    def _hyperlink_target(self, link: ET.Element) -> Optional[str]:
        rel_id = link.get(f"{R_NS}id")
        if not rel_id:
            return None
        rel = self.ctx.package.relationships(self.part_path).get(rel_id)
        if rel is None or not rel.external:
            return None
        return rel.target

    def _run(
        self,
        r: ET.Element,
        parts: _ParagraphParts,
        base: TextStyle,
        href: Optional[str],
    ) -> None:
        style = _resolve_run_style(self.ctx, base, r.find(f"{W_NS}rPr"))
        buffer: List[str] = []

        def flush() -> None:
            if buffer:
                parts.segments[-1].append(Run(text="".join(buffer), style=style, href=href))
                buffer.clear()

        for child in r:
            tag = child.tag
            if tag == f"{W_NS}t":
                buffer.append(child.text or "")
            elif tag == f"{W_NS}tab":
                buffer.append("\t")
            elif tag in (f"{W_NS}br", f"{W_NS}cr"):
                if _val(child, "type") == "page":
                    flush()
                    parts.segments.append([])
                else:
                    buffer.append("\n")
            elif tag == f"{W_NS}noBreakHyphen":
                buffer.append("-")
            elif tag == f"{W_NS}footnoteReference":
                flush()
                note = self.ctx.footnote_text(_val(child, "id") or "")
                if note is not None:
                    parts.segments[-1].append(Run(text="", style=style, footnote=note))
        flush()

        for drawing in r.iter(f"{W_NS}drawing"):
            self._drawing(drawing, parts)

    def _drawing(self, drawing: ET.Element, parts: _ParagraphParts) -> None:
        for container in drawing:
            if container.tag not in (f"{WP_NS}inline", f"{WP_NS}anchor"):
                continue
            graphic_data = container.find(f"{A_NS}graphic/{A_NS}graphicData")
            if graphic_data is None:
                continue

            uri = graphic_data.get("uri") or ""
            if "chart" in uri:
                chart_ref = graphic_data.find(f"{C_NS}chart")
                if chart_ref is not None:
                    self._chart(chart_ref.get(f"{R_NS}id") or "", parts)
                continue

            blip = graphic_data.find(f".//{A_NS}blip")
            if blip is None:
                continue
            image = self._image(blip.get(f"{R_NS}embed") or "", container)
            if image is None:
                continue
            if container.tag == f"{WP_NS}inline":
                parts.before.append(image)
            else:
                parts.before.append(_floating_image(image, container))

    def _image(self, rel_id: str, container: ET.Element) -> Optional[ImageData]:
        rel = self.ctx.package.relationships(self.part_path).get(rel_id)
        if rel is None or rel.external:
            self.ctx.warn(f"image {rel_id}", "unresolved image relationship")
            return None
        if not self.ctx.package.exists(rel.resolved):
            self.ctx.warn(f"image {rel_id}", f"missing image part {rel.resolved}")
            return None
        data = self.ctx.package.read_bytes(rel.resolved)
        image_format = detect_image_format(data, rel.resolved)
        if image_format is None:
            self.ctx.warn(f"image {rel.resolved}", "unsupported image format")
            return None

        width = height = None
        extent = container.find(f"{WP_NS}extent")
        if extent is not None:
            cx = parse_float(extent.get("cx"))
            cy = parse_float(extent.get("cy"))
            width = emu_to_pt(cx) if cx else None
            height = emu_to_pt(cy) if cy else None
        if width is None or height is None:
            px_width, px_height = get_image_dimensions(data)
            if px_width and px_height:
                width, height = pixels_to_pt(px_width), pixels_to_pt(px_height)
        return ImageData(data=data, format=image_format, width=width, height=height)

    def _chart(self, rel_id: str, parts: _ParagraphParts) -> None:
        rel = self.ctx.package.relationships(self.part_path).get(rel_id)
        if rel is None or not self.ctx.package.exists(rel.resolved):
            self.ctx.warn(f"chart {rel_id}", "missing chart part")
            return
        chart = parse_chart_xml(self.ctx.package.read_bytes(rel.resolved))
        if chart is None:
            self.ctx.warn(f"chart {rel.resolved}", "unrecognised chart type")
            return
        parts.after.append(chart)


def _floating_image(image: ImageData, anchor: ET.Element) -> FloatingImage:
    wrap_mode = WrapMode.SQUARE
    for child in anchor:
        name = child.tag.replace(WP_NS, "")
        if name in _WRAP_MODES:
            wrap_mode = _WRAP_MODES[name]
            break
    if anchor.get("behindDoc") in ("1", "true"):
        wrap_mode = WrapMode.BEHIND

    def offset(axis: str) -> float:
        pos = anchor.find(f"{WP_NS}position{axis}/{WP_NS}posOffset")
        if pos is None or pos.text is None:
            return 0.0
        return emu_to_pt(parse_float(pos.text.strip(), 0.0))

    return FloatingImage(
        image=image,
        wrap_mode=wrap_mode,
        offset_x=offset("H"),
        offset_y=offset("V"),
    )


def _paragraph_blocks(parts: _ParagraphParts) -> List[Block]:
    blocks: List[Block] = []
    if parts.page_break_before:
        blocks.append(PageBreak())
    blocks.extend(parts.before)

    has_companions = bool(parts.before or parts.after)
    for index, runs in enumerate(parts.segments):
        if index > 0:
            blocks.append(PageBreak())
        if runs or (len(parts.segments) == 1 and not has_companions):
            blocks.append(Paragraph(style=replace(parts.style), runs=runs))

    blocks.extend(parts.after)
    return blocks


@dataclass
class _RawCell:
    grid_col: int
    col_span: int
    # "restart", "continue" or None
    v_merge: Optional[str]
    element: ET.Element
    row_span: int = 1


def _border_side(elem: Optional[ET.Element]) -> Optional[BorderSide]:
    if elem is None:
        return None
    value = _val(elem) or "single"
    if value in ("nil", "none"):
        return None
    size = parse_float(_val(elem, "sz"), 4.0)
    color = _hex_color(_val(elem, "color")) or Color.black()
    return BorderSide(
        width=eighths_to_pt(size),
        color=color,
        style=_BORDER_STYLES.get(value, BorderLineStyle.SOLID),
    )


def _cell_border(
    cell_borders: Optional[ET.Element], table_borders: Optional[ET.Element]
) -> Optional[CellBorder]:
    def side(*names: str) -> Optional[BorderSide]:
        for source in (cell_borders, table_borders):
            if source is None:
                continue
            for name in names:
                elem = source.find(f"{W_NS}{name}")
                if elem is not None:
                    return _border_side(elem)
        return None

    border = CellBorder(
        top=side("top"),
        bottom=side("bottom"),
        left=side("left", "start"),
        right=side("right", "end"),
    )
    return None if border.is_empty() else border


class _BodyParser:
    """Turns body-level elements (and cell content) into blocks."""

    def __init__(self, ctx: _DocxContext, part_path: str = DOCUMENT_PATH):
        self.ctx = ctx
        self.paragraphs = _ParagraphParser(ctx, part_path)

    def parse_elements(self, parent: ET.Element) -> List[Block]:
        blocks: List[Block] = []
        lists = _ListGrouper(self.ctx, blocks)
        for child in parent:
            lists.add(child, self.parse_element(child))
        return blocks

    def parse_element(self, elem: ET.Element) -> List[Block]:
        if elem.tag == f"{W_NS}p":
            return _paragraph_blocks(self.paragraphs.parse(elem))
        if elem.tag == f"{W_NS}tbl":
            return [self.parse_table(elem)]
        if elem.tag == f"{W_NS}sdt":
            content = elem.find(f"{W_NS}sdtContent")
            return self.parse_elements(content) if content is not None else []
        return []

    def parse_table(self, tbl: ET.Element) -> Table:
        column_widths = [
            twips_to_pt(parse_float(_val(col, "w"), 0.0))
            for col in tbl.findall(f"{W_NS}tblGrid/{W_NS}gridCol")
        ]
        table_borders = tbl.find(f"{W_NS}tblPr/{W_NS}tblBorders")

        # Pass 1: raw cells with grid positions and merge markers
        raw_rows: List[Tuple[ET.Element, List[_RawCell]]] = []
        for tr in tbl.findall(f"{W_NS}tr"):
            grid_col = parse_int(_val(tr.find(f"{W_NS}trPr/{W_NS}gridBefore")), 0)
            cells = []
            for tc in tr.findall(f"{W_NS}tc"):
                tc_pr = tc.find(f"{W_NS}tcPr")
                span = 1
                v_merge = None
                if tc_pr is not None:
                    span = max(parse_int(_val(tc_pr.find(f"{W_NS}gridSpan")), 1), 1)
                    merge = tc_pr.find(f"{W_NS}vMerge")
                    if merge is not None:
                        v_merge = "restart" if _val(merge) == "restart" else "continue"
                cells.append(_RawCell(grid_col=grid_col, col_span=span, v_merge=v_merge, element=tc))
                grid_col += span
            raw_rows.append((tr, cells))

        # Pass 2: row spans from restart/continue chains
        open_merges: dict[int, _RawCell] = {}
        kept_rows: List[Tuple[ET.Element, List[_RawCell]]] = []
        for row_index, (tr, cells) in enumerate(raw_rows):
            next_open: dict[int, _RawCell] = {}
            kept = []
            for cell in cells:
                if cell.v_merge == "continue":
                    anchor = open_merges.get(cell.grid_col)
                    if anchor is None:
                        self.ctx.warn(
                            f"table row {row_index + 1}",
                            f"vertical merge continuation without start at column {cell.grid_col + 1}",
                        )
                        continue
                    anchor.row_span += 1
                    next_open[cell.grid_col] = anchor
                    continue
                if cell.v_merge == "restart":
                    next_open[cell.grid_col] = cell
                kept.append(cell)
            open_merges = next_open
            kept_rows.append((tr, kept))

        rows = []
        for tr, cells in kept_rows:
            height = parse_float(_val(tr.find(f"{W_NS}trPr/{W_NS}trHeight")))
            rows.append(
                TableRow(
                    cells=[self._table_cell(cell, table_borders) for cell in cells],
                    height=twips_to_pt(height) if height else None,
                )
            )
        return Table(rows=rows, column_widths=column_widths)

    def _table_cell(self, cell: _RawCell, table_borders: Optional[ET.Element]) -> TableCell:
        tc_pr = cell.element.find(f"{W_NS}tcPr")
        cell_borders = tc_pr.find(f"{W_NS}tcBorders") if tc_pr is not None else None

        background = None
        if tc_pr is not None:
            fill = _val(tc_pr.find(f"{W_NS}shd"), "fill")
            if fill and fill.upper() != "FFFFFF":
                background = _hex_color(fill)

        return TableCell(
            content=self.parse_elements(cell.element),
            col_span=cell.col_span,
            row_span=cell.row_span,
            border=_cell_border(cell_borders, table_borders),
            background=background,
        )


class _ListGrouper:
    """Groups consecutive list paragraphs sharing a ``numId`` into one list."""

    def __init__(self, ctx: _DocxContext, blocks: List[Block]):
        self.ctx = ctx
        self.blocks = blocks
        self._current: Optional[ListBlock] = None
        self._num_id: Optional[str] = None

    def add(self, elem: ET.Element, produced: List[Block]) -> None:
        numbering = None
        if elem.tag == f"{W_NS}p":
            numbering = _numbering_properties(self.ctx, elem.find(f"{W_NS}pPr"))
        if numbering is None:
            self._close()
            self.blocks.extend(produced)
            return

        num_id, ilvl = numbering
        if self._current is None or num_id != self._num_id:
            self._close()
            self._current = ListBlock(kind=self.ctx.list_kind(num_id, ilvl))
            self._num_id = num_id
            self.blocks.append(self._current)

        paragraphs = [b for b in produced if isinstance(b, Paragraph)]
        if paragraphs:
            self._current.items.append(ListItem(content=paragraphs, level=ilvl))
        others = [b for b in produced if not isinstance(b, Paragraph)]
        if others:
            self._close()
            self.blocks.extend(others)

    def _close(self) -> None:
        self._current = None
        self._num_id = None


def _is_page_field(instruction: str) -> bool:
    words = instruction.strip().split()
    return bool(words) and words[0].upper() == "PAGE"


def _header_footer_paragraph(
    ctx: _DocxContext, p: ET.Element, part_path: str
) -> HeaderFooterParagraph:
    parser = _ParagraphParser(ctx, part_path)
    ppr = p.find(f"{W_NS}pPr")
    result = HeaderFooterParagraph(style=_resolve_paragraph_style(ctx, ppr))
    base = _paragraph_base_text_style(ctx, ppr)

    # Complex field state: None outside a field, else the instruction text
    instruction: Optional[str] = None
    in_page_result = False
    # Cached result runs of simple PAGE fields
    skipped: set[ET.Element] = set()

    def add_runs(elem: ET.Element) -> None:
        parts = _ParagraphParts(style=result.style, segments=[[]], before=[], after=[])
        parser._run(elem, parts, base, None)
        for segment in parts.segments:
            result.elements.extend(segment)

    for child in p.iter():
        if child.tag == f"{W_NS}fldSimple":
            if _is_page_field(_val(child, "instr") or ""):
                result.elements.append(PageNumberField())
                skipped.update(child.iter(f"{W_NS}r"))
            continue
        if child.tag != f"{W_NS}r" or child in skipped:
            continue

        fld_char = child.find(f"{W_NS}fldChar")
        if fld_char is not None:
            kind = _val(fld_char, "fldCharType")
            if kind == "begin":
                instruction = ""
            elif kind == "separate":
                if instruction is not None and _is_page_field(instruction):
                    result.elements.append(PageNumberField())
                    in_page_result = True
            elif kind == "end":
                instruction = None
                in_page_result = False
            continue

        instr = child.find(f"{W_NS}instrText")
        if instr is not None:
            if instruction is not None:
                instruction += instr.text or ""
            continue
        if in_page_result:
            continue
        add_runs(child)

    return result


def _parse_header_footer(
    ctx: _DocxContext, sect_pr: Optional[ET.Element], reference_tag: str
) -> Optional[HeaderFooter]:
    if sect_pr is None:
        return None
    references = sect_pr.findall(f"{W_NS}{reference_tag}")
    if not references:
        return None
    reference = next(
        (ref for ref in references if _val(ref, "type") in (None, "default")),
        references[0],
    )
    rel = ctx.relationships.get(reference.get(f"{R_NS}id") or "")
    if rel is None:
        return None
    root = ctx.package.read_optional_xml_root(rel.resolved)
    if root is None:
        ctx.warn(reference_tag, f"missing part {rel.resolved}")
        return None
    paragraphs = [
        _header_footer_paragraph(ctx, p, rel.resolved) for p in root.iter(f"{W_NS}p")
    ]
    if not paragraphs:
        return None
    return HeaderFooter(paragraphs=paragraphs)


def _final_section(body: ET.Element) -> Optional[ET.Element]:
    sect_pr = body.find(f"{W_NS}sectPr")
    if sect_pr is not None:
        return sect_pr
    paragraphs = body.findall(f"{W_NS}p")
    for p in reversed(paragraphs):
        sect_pr = p.find(f"{W_NS}pPr/{W_NS}sectPr")
        if sect_pr is not None:
            return sect_pr
    return None


def _page_setup(sect_pr: Optional[ET.Element]) -> Tuple[PageSize, Margins]:
    size = PageSize()
    margins = Margins()
    if sect_pr is None:
        return size, margins

    pg_sz = sect_pr.find(f"{W_NS}pgSz")
    if pg_sz is not None:
        width = parse_float(_val(pg_sz, "w"))
        height = parse_float(_val(pg_sz, "h"))
        if width:
            size.width = twips_to_pt(width)
        if height:
            size.height = twips_to_pt(height)

    pg_mar = sect_pr.find(f"{W_NS}pgMar")
    if pg_mar is not None:
        for side in ("top", "bottom", "left", "right"):
            value = parse_float(_val(pg_mar, side))
            if value is not None:
                setattr(margins, side, twips_to_pt(abs(value)))
    return size, margins


def _parse_body_element_safely(
    body_parser: _BodyParser, index: int, elem: ET.Element
) -> List[Block]:
    try:
        return body_parser.parse_element(elem)
    except Exception as exc:
        logger.exception(f"Failed to parse body element {index}")
        body_parser.ctx.warnings.append(
            ConversionWarning(element=f"body element {index}", reason=str(exc))
        )
        return []


def parse_docx(
    data: Union[bytes, io.BytesIO], options: Optional[ConvertOptions] = None
) -> Tuple[Document, List[ConversionWarning]]:
    """
    Parse a Word .docx file into the document model.

    Args:
        data: The complete DOCX file as bytes or a BytesIO.
        options: Conversion options; DOCX parsing currently reads none of them.

    Returns:
        ``(document, warnings)``. The document holds one FlowPage; every
        element that could not be converted is listed in ``warnings``.

    Raises:
        FileEncryptedError: The file is password protected.
        ParseError: Not a ZIP container, or ``word/document.xml`` is missing
            or malformed.
        ZipBombError: The container exceeds the zip-bomb limits.

    Example:
        >>> with open("report.docx", "rb") as f:
        ...     document, warnings = parse_docx(f.read())
        >>> page = document.pages[0]
        >>> len(page.content)
    """
    logger.debug("Reading docx")
    with open_package(data, "DOCX") as package:
        ctx = _DocxContext(package)
        metadata = extract_metadata(package)

        body = ctx.body
        if body is None:
            raise ParseError("DOCX document has no body")

        sect_pr = _final_section(body)
        size, margins = _page_setup(sect_pr)

        logger.debug("Extracting body")
        body_parser = _BodyParser(ctx)
        content: List[Block] = []
        lists = _ListGrouper(ctx, content)
        for index, child in enumerate(body):
            if child.tag == f"{W_NS}sectPr":
                continue
            lists.add(child, _parse_body_element_safely(body_parser, index, child))

        logger.debug("Extracting header/footer")
        header = _parse_header_footer(ctx, sect_pr, "headerReference")
        footer = _parse_header_footer(ctx, sect_pr, "footerReference")

    page = FlowPage(size=size, margins=margins, content=content, header=header, footer=footer)
    logger.info("Parsed DOCX: %d blocks, %d warnings", len(content), len(ctx.warnings))
    return Document(metadata=metadata, pages=[page]), ctx.warnings
