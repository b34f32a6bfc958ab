"""Minimal in-memory OOXML packages and PDFs for the tests."""

import io
import struct
import zipfile
from typing import Optional

from pypdf import PdfWriter

W = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
P = "http://schemas.openxmlformats.org/presentationml/2006/main"
A = "http://schemas.openxmlformats.org/drawingml/2006/main"
R = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
M = "http://schemas.openxmlformats.org/officeDocument/2006/math"
C = "http://schemas.openxmlformats.org/drawingml/2006/chart"
WP = "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing"
DGM = "http://schemas.openxmlformats.org/drawingml/2006/diagram"
PKG_REL = "http://schemas.openxmlformats.org/package/2006/relationships"

REL_IMAGE = f"{R}/image"
REL_CHART = f"{R}/chart"
REL_HYPERLINK = f"{R}/hyperlink"
REL_FOOTER = f"{R}/footer"
REL_SLIDE = f"{R}/slide"
REL_SLIDE_LAYOUT = f"{R}/slideLayout"
REL_DIAGRAM_DATA = f"{R}/diagramData"

# 4x3 RGB PNG header; enough for signature sniffing
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n"
    + b"\x00\x00\x00\rIHDR"
    + struct.pack(">II", 4, 3)
    + b"\x08\x02\x00\x00\x00\x00\x00\x00\x00"
)

CONTENT_TYPES = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
    '<Default Extension="xml" ContentType="application/xml"/>'
    '<Default Extension="rels" '
    'ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
    "</Types>"
)


def make_zip(parts: dict) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in parts.items():
            zf.writestr(name, data)
    return buffer.getvalue()


def rel(rel_id: str, rel_type: str, target: str, external: bool = False) -> str:
    mode = ' TargetMode="External"' if external else ""
    return f'<Relationship Id="{rel_id}" Type="{rel_type}" Target="{target}"{mode}/>'


def rels(*relationships: str) -> str:
    return f'<Relationships xmlns="{PKG_REL}">{"".join(relationships)}</Relationships>'


def core_xml(title: str = "", creator: str = "") -> str:
    return (
        "<cp:coreProperties "
        'xmlns:cp="http://schemas.openxmlformats.org/package/2006/metadata/core-properties" '
        'xmlns:dc="http://purl.org/dc/elements/1.1/">'
        f"<dc:title>{title}</dc:title><dc:creator>{creator}</dc:creator>"
        "</cp:coreProperties>"
    )


# Word


def w_root(tag: str, inner: str) -> str:
    return (
        f'<w:{tag} xmlns:w="{W}" xmlns:r="{R}" xmlns:m="{M}" xmlns:wp="{WP}" '
        f'xmlns:a="{A}" xmlns:c="{C}">{inner}</w:{tag}>'
    )


def docx_bytes(
    body: str,
    *,
    styles: Optional[str] = None,
    numbering: Optional[str] = None,
    footnotes: Optional[str] = None,
    document_rels: Optional[str] = None,
    extra_parts: Optional[dict] = None,
    core: Optional[str] = None,
) -> bytes:
    """A .docx whose ``w:body`` holds ``body``; optional parts are the inner XML."""
    parts = {
        "[Content_Types].xml": CONTENT_TYPES,
        "word/document.xml": w_root("document", f"<w:body>{body}</w:body>"),
    }
    if styles is not None:
        parts["word/styles.xml"] = w_root("styles", styles)
    if numbering is not None:
        parts["word/numbering.xml"] = w_root("numbering", numbering)
    if footnotes is not None:
        parts["word/footnotes.xml"] = w_root("footnotes", footnotes)
    if document_rels is not None:
        parts["word/_rels/document.xml.rels"] = document_rels
    if core is not None:
        parts["docProps/core.xml"] = core
    parts.update(extra_parts or {})
    return make_zip(parts)


def w_p(inner: str = "", ppr: str = "") -> str:
    return f"<w:p>{f'<w:pPr>{ppr}</w:pPr>' if ppr else ''}{inner}</w:p>"


def w_r(text: str, rpr: str = "") -> str:
    return f'<w:r>{f"<w:rPr>{rpr}</w:rPr>" if rpr else ""}<w:t xml:space="preserve">{text}</w:t></w:r>'


def w_tc(text: str, tcpr: str = "") -> str:
    return f"<w:tc>{f'<w:tcPr>{tcpr}</w:tcPr>' if tcpr else ''}{w_p(w_r(text))}</w:tc>"


def inline_drawing(inner_graphic: str, uri: str, cx: int = 914400, cy: int = 457200) -> str:
    return (
        "<w:r><w:drawing><wp:inline>"
        f'<wp:extent cx="{cx}" cy="{cy}"/>'
        f'<a:graphic><a:graphicData uri="{uri}">{inner_graphic}</a:graphicData></a:graphic>'
        "</wp:inline></w:drawing></w:r>"
    )


# Charts


def chart_xml(
    kind: str = "barChart",
    *,
    bar_dir: Optional[str] = None,
    title: Optional[str] = None,
    categories: tuple = (),
    series: tuple = (),
) -> str:
    """A chart part; ``series`` is a tuple of ``(name, values)`` pairs."""
    title_xml = ""
    if title is not None:
        title_xml = (
            "<c:title><c:tx><c:rich><a:bodyPr/><a:p><a:r>"
            f"<a:t>{title}</a:t></a:r></a:p></c:rich></c:tx></c:title>"
        )
    cat_points = "".join(
        f'<c:pt idx="{i}"><c:v>{label}</c:v></c:pt>' for i, label in enumerate(categories)
    )
    series_xml = ""
    for index, (name, values) in enumerate(series):
        value_points = "".join(
            f'<c:pt idx="{i}"><c:v>{value}</c:v></c:pt>' for i, value in enumerate(values)
        )
        series_xml += (
            f'<c:ser><c:idx val="{index}"/>'
            f'<c:tx><c:strRef><c:strCache><c:pt idx="0"><c:v>{name}</c:v></c:pt>'
            "</c:strCache></c:strRef></c:tx>"
            f"<c:cat><c:strRef><c:strCache>{cat_points}</c:strCache></c:strRef></c:cat>"
            f"<c:val><c:numRef><c:numCache>{value_points}</c:numCache></c:numRef></c:val>"
            "</c:ser>"
        )
    bar_dir_xml = f'<c:barDir val="{bar_dir}"/>' if bar_dir else ""
    return (
        f'<c:chartSpace xmlns:c="{C}" xmlns:a="{A}"><c:chart>{title_xml}'
        f"<c:plotArea><c:{kind}>{bar_dir_xml}{series_xml}</c:{kind}></c:plotArea>"
        "</c:chart></c:chartSpace>"
    )


# PowerPoint


def p_root(tag: str, inner: str) -> str:
    return f'<p:{tag} xmlns:p="{P}" xmlns:a="{A}" xmlns:r="{R}" xmlns:dgm="{DGM}" xmlns:c="{C}">{inner}</p:{tag}>'


def slide_xml(shapes: str, background: str = "") -> str:
    return p_root("sld", f"<p:cSld>{background}<p:spTree>{shapes}</p:spTree></p:cSld>")


def solid_background(hex_color: str) -> str:
    return (
        "<p:bg><p:bgPr>"
        f'<a:solidFill><a:srgbClr val="{hex_color}"/></a:solidFill>'
        "</p:bgPr></p:bg>"
    )


def xfrm(x: int, y: int, cx: int, cy: int, prefix: str = "a") -> str:
    return (
        f'<{prefix}:xfrm><a:off x="{x}" y="{y}"/><a:ext cx="{cx}" cy="{cy}"/></{prefix}:xfrm>'
    )


def pptx_bytes(
    slides: list,
    *,
    slide_rels: Optional[dict] = None,
    extra_parts: Optional[dict] = None,
    size: tuple = (9144000, 6858000),
    core: Optional[str] = None,
) -> bytes:
    """
    A .pptx with the given slide XML parts, in order.

    ``slide_rels`` maps a 1-based slide number to the relationships XML of
    that slide.
    """
    sld_ids = "".join(
        f'<p:sldId id="{256 + i}" r:id="rId{i + 1}"/>' for i in range(len(slides))
    )
    presentation = p_root(
        "presentation",
        f'<p:sldIdLst>{sld_ids}</p:sldIdLst><p:sldSz cx="{size[0]}" cy="{size[1]}"/>',
    )
    presentation_rels = rels(
        *(rel(f"rId{i + 1}", REL_SLIDE, f"slides/slide{i + 1}.xml") for i in range(len(slides)))
    )
    parts = {
        "[Content_Types].xml": CONTENT_TYPES,
        "ppt/presentation.xml": presentation,
        "ppt/_rels/presentation.xml.rels": presentation_rels,
    }
    for index, slide in enumerate(slides, start=1):
        if slide is not None:
            parts[f"ppt/slides/slide{index}.xml"] = slide
    for number, slide_rel_xml in (slide_rels or {}).items():
        parts[f"ppt/slides/_rels/slide{number}.xml.rels"] = slide_rel_xml
    if core is not None:
        parts["docProps/core.xml"] = core
    parts.update(extra_parts or {})
    return make_zip(parts)


# Excel


def workbook_bytes(workbook) -> bytes:
    """Serialize an openpyxl Workbook."""
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


# PDF


def blank_pdf(*widths: float, height: float = 792.0) -> bytes:
    """A PDF with one blank page per width."""
    writer = PdfWriter()
    for width in widths:
        writer.add_blank_page(width=width, height=height)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()
