"""
PPTX Presentation Parser
========================

Parses Microsoft PowerPoint .pptx files (Office Open XML, PowerPoint 2007 and
later) into one fixed-layout page per slide.

This module uses direct XML parsing of the pptx ZIP archive, without
requiring the python-pptx library.

File Format Background
----------------------
The .pptx format is a ZIP archive containing XML files following the Office
Open XML (OOXML) standard. Key components:

    ppt/presentation.xml: Slide size (p:sldSz) and slide order (p:sldIdLst)
    ppt/_rels/presentation.xml.rels: Presentation relationships
    ppt/slides/slide1.xml, ...: Individual slide content (p:cSld/p:spTree)
    ppt/slides/_rels/slide1.xml.rels: Per-slide relationships
    ppt/slideLayouts/, ppt/slideMasters/: Inherited backgrounds
    ppt/theme/theme1.xml: Color scheme for a:schemeClr references
    ppt/charts/, ppt/diagrams/: Chart and SmartArt parts
    ppt/media/: Embedded images

XML Namespaces:
    - p: http://schemas.openxmlformats.org/presentationml/2006/main
    - a: http://schemas.openxmlformats.org/drawingml/2006/main
    - r: http://schemas.openxmlformats.org/officeDocument/2006/relationships

Geometry
--------
Positions and sizes are EMU (12700 per point); rotations are 60000ths of a
degree; percentages (alpha, gradient positions) are 100000ths. Group shapes
(p:grpSp) are flattened: child coordinates live in the group's child space
(chOff/chExt) and are mapped onto the group's own frame (off/ext).

Known Limitations
-----------------
- Shapes inherited from layouts and masters are not drawn (backgrounds are)
- Placeholder text inherits no formatting from layout/master text styles
- Audio, video and OLE objects are skipped
- Speaker notes and comments are not rendered

Maintenance Notes
-----------------
- Every top-level shape is parsed inside its own fault boundary; a broken
  shape becomes a warning and the rest of the slide is kept
"""

import io
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union
from xml.etree import ElementTree as ET

from office2pdf.config import ConvertOptions
from office2pdf.exceptions import ParseError
from office2pdf.ir import (
    Alignment,
    BorderLineStyle,
    BorderSide,
    Chart,
    Color,
    ConversionWarning,
    Document,
    Ellipse,
    Exact,
    FixedElement,
    FixedPage,
    GradientFill,
    GradientStop,
    ImageData,
    Line,
    PageSize,
    Paragraph,
    ParagraphStyle,
    Polygon,
    Proportional,
    Rectangle,
    RoundedRectangle,
    Run,
    Shadow,
    Shape,
    ShapeKind,
    SmartArt,
    Table,
    TableCell,
    TableRow,
    TextBox,
    TextStyle,
)
from office2pdf.parsers.chart import parse_chart_xml
from office2pdf.parsers.smartart import parse_smartart_data
from office2pdf.parsers.util.core_metadata import extract_metadata
from office2pdf.parsers.util.image_utils import detect_image_format
from office2pdf.parsers.util.units import (
    ANGLE_UNITS_PER_DEGREE,
    DEFAULT_SLIDE_HEIGHT_EMU,
    DEFAULT_SLIDE_WIDTH_EMU,
    PERCENT_UNITS,
    emu_to_pt,
    hundredths_to_pt,
    parse_float,
    parse_int,
)
from office2pdf.parsers.util.zip_context import ZipContext, open_package

logger = logging.getLogger(__name__)

# XML Namespaces used in PPTX documents
P_NS = "{http://schemas.openxmlformats.org/presentationml/2006/main}"
A_NS = "{http://schemas.openxmlformats.org/drawingml/2006/main}"
R_NS = "{http://schemas.openxmlformats.org/officeDocument/2006/relationships}"
C_NS = "{http://schemas.openxmlformats.org/drawingml/2006/chart}"
DGM_NS = "{http://schemas.openxmlformats.org/drawingml/2006/diagram}"

PRESENTATION_PATH = "ppt/presentation.xml"

REL_SLIDE = "/slide"
REL_LAYOUT = "/slideLayout"
REL_MASTER = "/slideMaster"
REL_THEME = "/theme"

# Stroke width PowerPoint draws when a:ln has no w attribute
DEFAULT_LINE_WIDTH_EMU = 9525

_ALIGNMENTS = {
    "l": Alignment.LEFT,
    "ctr": Alignment.CENTER,
    "r": Alignment.RIGHT,
    "just": Alignment.JUSTIFY,
    "dist": Alignment.JUSTIFY,
}

_DASH_STYLES = {
    "dash": BorderLineStyle.DASHED,
    "lgDash": BorderLineStyle.DASHED,
    "sysDash": BorderLineStyle.DASHED,
    "dashDot": BorderLineStyle.DASHED,
    "lgDashDot": BorderLineStyle.DASHED,
    "dot": BorderLineStyle.DOTTED,
    "sysDot": BorderLineStyle.DOTTED,
}

# a:schemeClr aliases -> theme color slots
_SCHEME_ALIASES = {"tx1": "dk1", "bg1": "lt1", "tx2": "dk2", "bg2": "lt2"}


def _rel_is(rel_type: str, suffix: str) -> bool:
    return rel_type.endswith(suffix)


@dataclass
class _Frame:
    """Affine mapping from a group's child space onto slide points."""

    offset_x: float = 0.0
    offset_y: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0

    def map(self, x_emu: float, y_emu: float) -> Tuple[float, float]:
        return (
            self.offset_x + emu_to_pt(x_emu) * self.scale_x,
            self.offset_y + emu_to_pt(y_emu) * self.scale_y,
        )

    def size(self, cx_emu: float, cy_emu: float) -> Tuple[float, float]:
        return emu_to_pt(cx_emu) * self.scale_x, emu_to_pt(cy_emu) * self.scale_y


class _PptxContext:
    """
    Cached context for PPTX parsing.

    Resolves slide order, slide size and the theme color scheme once; slide
    parts are read on demand through the package context.
    """

    def __init__(self, package: ZipContext):
        self.package = package
        self.warnings: List[ConversionWarning] = []

        if not package.exists(PRESENTATION_PATH):
            raise ParseError(f"PPTX package has no {PRESENTATION_PATH}")
        self.presentation_root = package.read_xml_root(PRESENTATION_PATH)
        self.slide_size = self._read_slide_size()
        self.slide_paths = self._compute_slide_order()
        self.theme_colors = self._load_theme_colors()

    def _read_slide_size(self) -> PageSize:
        sld_sz = self.presentation_root.find(f"{P_NS}sldSz")
        cx = parse_float(sld_sz.get("cx")) if sld_sz is not None else None
        cy = parse_float(sld_sz.get("cy")) if sld_sz is not None else None
        return PageSize(
            width=emu_to_pt(cx or DEFAULT_SLIDE_WIDTH_EMU),
            height=emu_to_pt(cy or DEFAULT_SLIDE_HEIGHT_EMU),
        )

    def _compute_slide_order(self) -> List[str]:
        rels = self.package.relationships(PRESENTATION_PATH)
        slide_paths = []
        sld_id_lst = self.presentation_root.find(f"{P_NS}sldIdLst")
        if sld_id_lst is None:
            return slide_paths
        for sld_id in sld_id_lst.findall(f"{P_NS}sldId"):
            rel = rels.get(sld_id.get(f"{R_NS}id") or "")
            if rel is not None and _rel_is(rel.type, REL_SLIDE):
                slide_paths.append(rel.resolved)
        return slide_paths

    def _load_theme_colors(self) -> dict[str, Color]:
        theme_path = None
        for rel in self.package.relationships(PRESENTATION_PATH).values():
            if _rel_is(rel.type, REL_THEME):
                theme_path = rel.resolved
                break
        if theme_path is None:
            candidates = sorted(
                name for name in self.package.namelist
                if name.startswith("ppt/theme/") and name.endswith(".xml")
            )
            theme_path = candidates[0] if candidates else None
        if theme_path is None:
            return {}

        root = self.package.read_optional_xml_root(theme_path)
        scheme = root.find(f".//{A_NS}clrScheme") if root is not None else None
        colors: dict[str, Color] = {}
        if scheme is None:
            return colors
        for slot in scheme:
            name = slot.tag.replace(A_NS, "")
            srgb = slot.find(f"{A_NS}srgbClr")
            sys_clr = slot.find(f"{A_NS}sysClr")
            color = None
            if srgb is not None:
                color = Color.from_hex(srgb.get("val") or "")
            elif sys_clr is not None:
                color = Color.from_hex(sys_clr.get("lastClr") or "")
            if color is not None:
                colors[name] = color
        return colors

    def related_part(self, part_path: str, suffix: str) -> Optional[str]:
        for rel in self.package.relationships(part_path).values():
            if _rel_is(rel.type, suffix):
                return rel.resolved
        return None

    def warn(self, element: str, reason: str) -> None:
        logger.warning(f"{element}: {reason}")
        self.warnings.append(ConversionWarning(element=element, reason=reason))


def _color_and_alpha(
    ctx: _PptxContext, parent: Optional[ET.Element]
) -> Tuple[Optional[Color], Optional[float]]:
    """Color of the first color child (srgbClr, schemeClr, sysClr) plus its alpha."""
    if parent is None:
        return None, None
    for child in parent:
        color = None
        if child.tag == f"{A_NS}srgbClr":
            color = Color.from_hex(child.get("val") or "")
        elif child.tag == f"{A_NS}schemeClr":
            slot = child.get("val") or ""
            color = ctx.theme_colors.get(_SCHEME_ALIASES.get(slot, slot))
        elif child.tag == f"{A_NS}sysClr":
            color = Color.from_hex(child.get("lastClr") or "")
        elif child.tag == f"{A_NS}prstClr":
            color = {"black": Color.black(), "white": Color.white()}.get(child.get("val") or "")
        else:
            continue
        alpha = None
        alpha_elem = child.find(f"{A_NS}alpha")
        if alpha_elem is not None:
            alpha = parse_float(alpha_elem.get("val"), PERCENT_UNITS) / PERCENT_UNITS
        return color, alpha
    return None, None


def _gradient_fill(ctx: _PptxContext, grad_fill: ET.Element) -> Optional[GradientFill]:
    stops = []
    for gs in grad_fill.findall(f"{A_NS}gsLst/{A_NS}gs"):
        color, _ = _color_and_alpha(ctx, gs)
        if color is None:
            continue
        offset = parse_float(gs.get("pos"), 0.0) / PERCENT_UNITS
        stops.append(GradientStop(offset=offset, color=color))
    if not stops:
        return None
    angle = None
    lin = grad_fill.find(f"{A_NS}lin")
    if lin is not None and lin.get("ang") is not None:
        angle = parse_float(lin.get("ang"), 0.0) / ANGLE_UNITS_PER_DEGREE
    return GradientFill(stops=stops, angle=angle)


def _background(
    ctx: _PptxContext, slide_root: ET.Element, slide_path: str
) -> Tuple[Optional[Color], Optional[GradientFill]]:
    """Slide background, falling back to the layout and then the master."""
    parts: List[Tuple[str, Optional[ET.Element]]] = [(slide_path, slide_root)]
    layout_path = ctx.related_part(slide_path, REL_LAYOUT)
    if layout_path is not None:
        parts.append((layout_path, ctx.package.read_optional_xml_root(layout_path)))
        master_path = ctx.related_part(layout_path, REL_MASTER)
        if master_path is not None:
            parts.append((master_path, ctx.package.read_optional_xml_root(master_path)))

    for _, root in parts:
        if root is None:
            continue
        bg_pr = root.find(f"{P_NS}cSld/{P_NS}bg/{P_NS}bgPr")
        if bg_pr is None:
            continue
        grad = bg_pr.find(f"{A_NS}gradFill")
        if grad is not None:
            gradient = _gradient_fill(ctx, grad)
            if gradient is not None:
                return None, gradient
        solid = bg_pr.find(f"{A_NS}solidFill")
        if solid is not None:
            color, _ = _color_and_alpha(ctx, solid)
            if color is not None:
                return color, None
    return None, None


def _run_style(ctx: _PptxContext, rpr: Optional[ET.Element]) -> TextStyle:
    style = TextStyle()
    if rpr is None:
        return style
    if rpr.get("b") is not None:
        style.bold = rpr.get("b") in ("1", "true")
    if rpr.get("i") is not None:
        style.italic = rpr.get("i") in ("1", "true")
    if rpr.get("u") is not None:
        style.underline = rpr.get("u") != "none"
    if rpr.get("strike") is not None:
        style.strikethrough = rpr.get("strike") != "noStrike"
    size = parse_float(rpr.get("sz"))
    if size is not None:
        style.font_size = hundredths_to_pt(size)
    color, _ = _color_and_alpha(ctx, rpr.find(f"{A_NS}solidFill"))
    if color is not None:
        style.color = color
    latin = rpr.find(f"{A_NS}latin")
    if latin is not None:
        typeface = latin.get("typeface") or ""
        # "+mn-lt" / "+mj-lt" refer to theme fonts
        if typeface and not typeface.startswith("+"):
            style.font_family = typeface
    return style


def _paragraph_style(ppr: Optional[ET.Element]) -> ParagraphStyle:
    style = ParagraphStyle()
    if ppr is None:
        return style
    style.alignment = _ALIGNMENTS.get(ppr.get("algn") or "")

    line_pct = ppr.find(f"{A_NS}lnSpc/{A_NS}spcPct")
    line_pts = ppr.find(f"{A_NS}lnSpc/{A_NS}spcPts")
    if line_pct is not None:
        style.line_spacing = Proportional(parse_float(line_pct.get("val"), PERCENT_UNITS) / PERCENT_UNITS)
    elif line_pts is not None:
        style.line_spacing = Exact(hundredths_to_pt(parse_float(line_pts.get("val"), 0.0)))

    before = ppr.find(f"{A_NS}spcBef/{A_NS}spcPts")
    after = ppr.find(f"{A_NS}spcAft/{A_NS}spcPts")
    if before is not None:
        style.space_before = hundredths_to_pt(parse_float(before.get("val"), 0.0))
    if after is not None:
        style.space_after = hundredths_to_pt(parse_float(after.get("val"), 0.0))
    return style


def _text_paragraphs(
    ctx: _PptxContext, tx_body: ET.Element, part_path: str
) -> List[Paragraph]:
    rels = ctx.package.relationships(part_path)
    paragraphs = []
    for a_p in tx_body.findall(f"{A_NS}p"):
        runs = []
        for child in a_p:
            if child.tag in (f"{A_NS}r", f"{A_NS}fld"):
                rpr = child.find(f"{A_NS}rPr")
                href = None
                if rpr is not None:
                    link = rpr.find(f"{A_NS}hlinkClick")
                    if link is not None:
                        rel = rels.get(link.get(f"{R_NS}id") or "")
                        if rel is not None and rel.external:
                            href = rel.target
                text = "".join(t.text or "" for t in child.findall(f"{A_NS}t"))
                if text:
                    runs.append(Run(text=text, style=_run_style(ctx, rpr), href=href))
            elif child.tag == f"{A_NS}br":
                runs.append(Run(text="\n", style=_run_style(ctx, child.find(f"{A_NS}rPr"))))
        paragraphs.append(Paragraph(style=_paragraph_style(a_p.find(f"{A_NS}pPr")), runs=runs))
    return paragraphs


def _xfrm_geometry(
    xfrm: Optional[ET.Element], frame: _Frame
) -> Tuple[float, float, float, float, Optional[float]]:
    """``(x, y, width, height, rotation_deg)`` of an a:xfrm / p:xfrm."""
    if xfrm is None:
        return frame.offset_x, frame.offset_y, 0.0, 0.0, None
    off = xfrm.find(f"{A_NS}off")
    ext = xfrm.find(f"{A_NS}ext")
    x_emu = parse_float(off.get("x"), 0.0) if off is not None else 0.0
    y_emu = parse_float(off.get("y"), 0.0) if off is not None else 0.0
    cx_emu = parse_float(ext.get("cx"), 0.0) if ext is not None else 0.0
    cy_emu = parse_float(ext.get("cy"), 0.0) if ext is not None else 0.0
    x, y = frame.map(x_emu, y_emu)
    width, height = frame.size(cx_emu, cy_emu)
    rotation = parse_float(xfrm.get("rot"), 0.0) / ANGLE_UNITS_PER_DEGREE
    return x, y, width, height, (rotation or None)


def _shape_kind(sp_pr: ET.Element, width: float, height: float) -> Optional[ShapeKind]:
    prst_geom = sp_pr.find(f"{A_NS}prstGeom")
    if prst_geom is not None:
        prst = prst_geom.get("prst") or "rect"
        if prst == "ellipse":
            return Ellipse()
        if prst in ("line", "straightConnector1"):
            return Line(x2=width, y2=height)
        if prst == "roundRect":
            fraction = 0.16667
            for gd in prst_geom.findall(f"{A_NS}avLst/{A_NS}gd"):
                formula = gd.get("fmla") or ""
                if gd.get("name") == "adj" and formula.startswith("val "):
                    fraction = parse_float(formula[4:], 16667.0) / PERCENT_UNITS
            return RoundedRectangle(radius_fraction=fraction)
        return Rectangle()

    cust_geom = sp_pr.find(f"{A_NS}custGeom")
    if cust_geom is not None:
        path = cust_geom.find(f"{A_NS}pathLst/{A_NS}path")
        if path is None:
            return None
        path_w = parse_float(path.get("w"), 0.0)
        path_h = parse_float(path.get("h"), 0.0)
        points = []
        for command in path:
            if command.tag not in (f"{A_NS}moveTo", f"{A_NS}lnTo"):
                continue
            pt = command.find(f"{A_NS}pt")
            if pt is None:
                continue
            px = parse_float(pt.get("x"), 0.0)
            py = parse_float(pt.get("y"), 0.0)
            points.append(
                (
                    px / path_w * width if path_w else emu_to_pt(px),
                    py / path_h * height if path_h else emu_to_pt(py),
                )
            )
        if len(points) < 2:
            return None
        return Polygon(points=tuple(points))
    return None


def _stroke(ctx: _PptxContext, ln: Optional[ET.Element]) -> Optional[BorderSide]:
    if ln is None or ln.find(f"{A_NS}noFill") is not None:
        return None
    color, _ = _color_and_alpha(ctx, ln.find(f"{A_NS}solidFill"))
    if color is None and ln.get("w") is None:
        return None
    dash = ln.find(f"{A_NS}prstDash")
    style = _DASH_STYLES.get(dash.get("val") if dash is not None else "", BorderLineStyle.SOLID)
    if ln.get("cmpd") == "dbl":
        style = BorderLineStyle.DOUBLE
    return BorderSide(
        width=emu_to_pt(parse_float(ln.get("w"), DEFAULT_LINE_WIDTH_EMU)),
        color=color or Color.black(),
        style=style,
    )


def _shadow(ctx: _PptxContext, sp_pr: ET.Element) -> Optional[Shadow]:
    outer = sp_pr.find(f"{A_NS}effectLst/{A_NS}outerShdw")
    if outer is None:
        return None
    color, alpha = _color_and_alpha(ctx, outer)
    return Shadow(
        blur_radius=emu_to_pt(parse_float(outer.get("blurRad"), 0.0)),
        distance=emu_to_pt(parse_float(outer.get("dist"), 0.0)),
        direction=parse_float(outer.get("dir"), 0.0) / ANGLE_UNITS_PER_DEGREE,
        color=color or Color.black(),
        opacity=alpha if alpha is not None else 1.0,
    )


def _geometry_shape(
    ctx: _PptxContext, sp_pr: ET.Element, width: float, height: float, rotation: Optional[float]
) -> Optional[Shape]:
    """A Shape when the geometry has a visible fill or outline."""
    kind = _shape_kind(sp_pr, width, height)
    if kind is None:
        return None

    fill = gradient = opacity = None
    solid = sp_pr.find(f"{A_NS}solidFill")
    grad = sp_pr.find(f"{A_NS}gradFill")
    if solid is not None:
        fill, opacity = _color_and_alpha(ctx, solid)
    elif grad is not None:
        gradient = _gradient_fill(ctx, grad)
    stroke = _stroke(ctx, sp_pr.find(f"{A_NS}ln"))

    if fill is None and gradient is None and stroke is None:
        return None
    return Shape(
        kind=kind,
        fill=fill,
        gradient_fill=gradient,
        stroke=stroke,
        rotation_deg=rotation,
        opacity=opacity,
        shadow=_shadow(ctx, sp_pr),
    )


class _SlideParser:
    """Converts the shape tree of one slide into fixed elements."""

    def __init__(self, ctx: _PptxContext, slide_path: str, slide_number: int):
        self.ctx = ctx
        self.slide_path = slide_path
        self.slide_number = slide_number
        self.rels = ctx.package.relationships(slide_path)

    def parse_tree(self, sp_tree: ET.Element) -> List[FixedElement]:
        elements: List[FixedElement] = []
        shape_index = 0
        for child in sp_tree:
            if child.tag not in (
                f"{P_NS}sp",
                f"{P_NS}cxnSp",
                f"{P_NS}pic",
                f"{P_NS}graphicFrame",
                f"{P_NS}grpSp",
            ):
                continue
            elements.extend(self._parse_shape_safely(shape_index, child))
            shape_index += 1
        return elements

    def _parse_shape_safely(self, index: int, shape: ET.Element) -> List[FixedElement]:
        try:
            return self._parse_shape(shape, _Frame())
        except Exception as exc:
            element = f"slide {self.slide_number} shape {index}"
            logger.exception(f"Failed to parse {element}")
            self.ctx.warnings.append(ConversionWarning(element=element, reason=str(exc)))
            return []

    def _parse_shape(self, shape: ET.Element, frame: _Frame) -> List[FixedElement]:
        if shape.tag in (f"{P_NS}sp", f"{P_NS}cxnSp"):
            return self._sp(shape, frame)
        if shape.tag == f"{P_NS}pic":
            return self._pic(shape, frame)
        if shape.tag == f"{P_NS}graphicFrame":
            return self._graphic_frame(shape, frame)
        if shape.tag == f"{P_NS}grpSp":
            return self._group(shape, frame)
        return []

    def _group(self, group: ET.Element, frame: _Frame) -> List[FixedElement]:
        xfrm = group.find(f"{P_NS}grpSpPr/{A_NS}xfrm")
        child_frame = frame
        if xfrm is not None:
            x, y, width, height, _ = _xfrm_geometry(xfrm, frame)
            ch_off = xfrm.find(f"{A_NS}chOff")
            ch_ext = xfrm.find(f"{A_NS}chExt")
            ch_x = parse_float(ch_off.get("x"), 0.0) if ch_off is not None else 0.0
            ch_y = parse_float(ch_off.get("y"), 0.0) if ch_off is not None else 0.0
            ch_cx = parse_float(ch_ext.get("cx"), 0.0) if ch_ext is not None else 0.0
            ch_cy = parse_float(ch_ext.get("cy"), 0.0) if ch_ext is not None else 0.0
            scale_x = width / emu_to_pt(ch_cx) if ch_cx else frame.scale_x
            scale_y = height / emu_to_pt(ch_cy) if ch_cy else frame.scale_y
            child_frame = _Frame(
                offset_x=x - emu_to_pt(ch_x) * scale_x,
                offset_y=y - emu_to_pt(ch_y) * scale_y,
                scale_x=scale_x,
                scale_y=scale_y,
            )

        elements = []
        for child in group:
            if child.tag in (f"{P_NS}nvGrpSpPr", f"{P_NS}grpSpPr"):
                continue
            elements.extend(self._parse_shape(child, child_frame))
        return elements

    def _sp(self, sp: ET.Element, frame: _Frame) -> List[FixedElement]:
        sp_pr = sp.find(f"{P_NS}spPr")
        xfrm = sp_pr.find(f"{A_NS}xfrm") if sp_pr is not None else None
        x, y, width, height, rotation = _xfrm_geometry(xfrm, frame)

        elements = []
        if sp_pr is not None:
            shape = _geometry_shape(self.ctx, sp_pr, width, height, rotation)
            if shape is not None:
                elements.append(FixedElement(x=x, y=y, width=width, height=height, kind=shape))

        tx_body = sp.find(f"{P_NS}txBody")
        if tx_body is not None:
            paragraphs = _text_paragraphs(self.ctx, tx_body, self.slide_path)
            if paragraphs:
                elements.append(
                    FixedElement(
                        x=x, y=y, width=width, height=height, kind=TextBox(content=paragraphs)
                    )
                )
        return elements

    def _pic(self, pic: ET.Element, frame: _Frame) -> List[FixedElement]:
        blip = pic.find(f"{P_NS}blipFill/{A_NS}blip")
        if blip is None:
            return []
        rel_id = blip.get(f"{R_NS}embed") or ""
        rel = self.rels.get(rel_id)
        if rel is None or rel.external or not self.ctx.package.exists(rel.resolved):
            self.ctx.warn(f"slide {self.slide_number} image {rel_id}", "missing image part")
            return []
        data = self.ctx.package.read_bytes(rel.resolved)
        image_format = detect_image_format(data, rel.resolved)
        if image_format is None:
            self.ctx.warn(f"slide {self.slide_number} image {rel.resolved}", "unsupported image format")
            return []

        x, y, width, height, _ = _xfrm_geometry(pic.find(f"{P_NS}spPr/{A_NS}xfrm"), frame)
        image = ImageData(data=data, format=image_format, width=width, height=height)
        return [FixedElement(x=x, y=y, width=width, height=height, kind=image)]

    def _graphic_frame(self, gf: ET.Element, frame: _Frame) -> List[FixedElement]:
        x, y, width, height, _ = _xfrm_geometry(gf.find(f"{P_NS}xfrm"), frame)
        graphic_data = gf.find(f"{A_NS}graphic/{A_NS}graphicData")
        if graphic_data is None:
            return []

        tbl = graphic_data.find(f"{A_NS}tbl")
        if tbl is not None:
            kind = self._table(tbl)
            return [FixedElement(x=x, y=y, width=width, height=height, kind=kind)]

        chart_ref = graphic_data.find(f"{C_NS}chart")
        if chart_ref is not None:
            chart = self._chart(chart_ref.get(f"{R_NS}id") or "")
            if chart is None:
                return []
            return [FixedElement(x=x, y=y, width=width, height=height, kind=chart)]

        rel_ids = graphic_data.find(f"{DGM_NS}relIds")
        if rel_ids is not None:
            smartart = self._smartart(rel_ids.get(f"{R_NS}dm") or "")
            if smartart is None:
                return []
            return [FixedElement(x=x, y=y, width=width, height=height, kind=smartart)]
        return []

    def _table(self, tbl: ET.Element) -> Table:
        column_widths = [
            emu_to_pt(parse_float(col.get("w"), 0.0))
            for col in tbl.findall(f"{A_NS}tblGrid/{A_NS}gridCol")
        ]
        rows = []
        for tr in tbl.findall(f"{A_NS}tr"):
            cells = []
            for tc in tr.findall(f"{A_NS}tc"):
                col_span = max(parse_int(tc.get("gridSpan"), 1), 1)
                row_span = max(parse_int(tc.get("rowSpan"), 1), 1)
                if tc.get("hMerge") in ("1", "true"):
                    col_span = 0
                if tc.get("vMerge") in ("1", "true"):
                    row_span = 0
                background, _ = _color_and_alpha(self.ctx, tc.find(f"{A_NS}tcPr/{A_NS}solidFill"))
                tx_body = tc.find(f"{A_NS}txBody")
                content = (
                    _text_paragraphs(self.ctx, tx_body, self.slide_path)
                    if tx_body is not None
                    else []
                )
                cells.append(
                    TableCell(
                        content=content,
                        col_span=col_span,
                        row_span=row_span,
                        background=background,
                    )
                )
            height = parse_float(tr.get("h"))
            rows.append(TableRow(cells=cells, height=emu_to_pt(height) if height else None))
        return Table(rows=rows, column_widths=column_widths)

    def _chart(self, rel_id: str) -> Optional[Chart]:
        rel = self.rels.get(rel_id)
        element = f"slide {self.slide_number} chart {rel_id}"
        if rel is None or not self.ctx.package.exists(rel.resolved):
            self.ctx.warn(element, "missing chart part")
            return None
        chart = parse_chart_xml(self.ctx.package.read_bytes(rel.resolved))
        if chart is None:
            self.ctx.warn(element, "unrecognised chart type")
        return chart

    def _smartart(self, rel_id: str) -> Optional[SmartArt]:
        rel = self.rels.get(rel_id)
        if rel is None or not self.ctx.package.exists(rel.resolved):
            self.ctx.warn(f"slide {self.slide_number} diagram {rel_id}", "missing diagram data part")
            return None
        return SmartArt(nodes=parse_smartart_data(self.ctx.package.read_bytes(rel.resolved)))


def _parse_slide(ctx: _PptxContext, slide_path: str, slide_number: int) -> Optional[FixedPage]:
    logger.debug(f"Processing slide [{slide_number}]: {slide_path}")
    if not ctx.package.exists(slide_path):
        ctx.warn(f"slide {slide_number}", f"slide part not found: {slide_path}")
        return None
    slide_root = ctx.package.read_xml_root(slide_path)

    background_color, background_gradient = _background(ctx, slide_root, slide_path)
    sp_tree = slide_root.find(f"{P_NS}cSld/{P_NS}spTree")
    elements = []
    if sp_tree is not None:
        elements = _SlideParser(ctx, slide_path, slide_number).parse_tree(sp_tree)

    return FixedPage(
        size=PageSize(width=ctx.slide_size.width, height=ctx.slide_size.height),
        elements=elements,
        background_color=background_color,
        background_gradient=background_gradient,
    )


def parse_pptx(
    data: Union[bytes, io.BytesIO], options: Optional[ConvertOptions] = None
) -> Tuple[Document, List[ConversionWarning]]:
    """
    Parse a PowerPoint .pptx file into the document model.

    Args:
        data: The complete PPTX file as bytes or a BytesIO.
        options: ``slide_range`` selects slides by 1-indexed position.

    Returns:
        ``(document, warnings)`` with one FixedPage per converted slide.

    Raises:
        FileEncryptedError: The file is password protected.
        ParseError: Not a ZIP container, or ``ppt/presentation.xml`` is
            missing or malformed.
        ZipBombError: The container exceeds the zip-bomb limits.
    """
    logger.debug("Reading pptx")
    options = options or ConvertOptions()

    with open_package(data, "PPTX") as package:
        ctx = _PptxContext(package)
        metadata = extract_metadata(package)

        pages = []
        for slide_number, slide_path in enumerate(ctx.slide_paths, start=1):
            if options.slide_range is not None and not options.slide_range.contains(slide_number):
                continue
            try:
                page = _parse_slide(ctx, slide_path, slide_number)
            except ParseError as exc:
                ctx.warn(f"slide {slide_number}", str(exc))
                continue
            if page is not None:
                pages.append(page)

    total_elements = sum(len(page.elements) for page in pages)
    logger.info(
        "Parsed PPTX: %d slides, %d elements, %d warnings",
        len(pages),
        total_elements,
        len(ctx.warnings),
    )
    return Document(metadata=metadata, pages=pages), ctx.warnings
