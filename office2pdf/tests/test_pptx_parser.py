import unittest

import pytest

from office2pdf.config import ConvertOptions, SlideRange
from office2pdf.exceptions import ParseError
from office2pdf.ir import (
    Chart,
    ChartType,
    Color,
    FixedPage,
    ImageData,
    Rectangle,
    Shape,
    SmartArt,
    SmartArtNode,
    Table,
    TextBox,
)
from office2pdf.parsers.pptx_parser import _SlideParser, parse_pptx
from office2pdf.tests.ooxml_builders import (
    A,
    CONTENT_TYPES,
    DGM,
    PNG_BYTES,
    REL_CHART,
    REL_DIAGRAM_DATA,
    REL_HYPERLINK,
    REL_IMAGE,
    REL_SLIDE_LAYOUT,
    chart_xml,
    make_zip,
    p_root,
    pptx_bytes,
    rel,
    rels,
    slide_xml,
    solid_background,
    xfrm,
)

tc = unittest.TestCase()

TABLE_URI = "http://schemas.openxmlformats.org/drawingml/2006/table"
CHART_URI = "http://schemas.openxmlformats.org/drawingml/2006/chart"
DIAGRAM_URI = "http://schemas.openxmlformats.org/drawingml/2006/diagram"


def _text_body(text: str, rpr: str = "<a:rPr/>") -> str:
    return f"<p:txBody><a:bodyPr/><a:p><a:r>{rpr}<a:t>{text}</a:t></a:r></a:p></p:txBody>"


def _filled_rect(x: int, y: int, cx: int, cy: int, hex_color: str) -> str:
    return (
        "<p:sp><p:spPr>"
        + xfrm(x, y, cx, cy)
        + '<a:prstGeom prst="rect"><a:avLst/></a:prstGeom>'
        + f'<a:solidFill><a:srgbClr val="{hex_color}"/></a:solidFill>'
        + "</p:spPr></p:sp>"
    )


def _graphic_frame(inner: str, uri: str) -> str:
    return (
        "<p:graphicFrame>"
        + xfrm(914400, 914400, 3657600, 1828800, prefix="p")
        + f'<a:graphic><a:graphicData uri="{uri}">{inner}</a:graphicData></a:graphic>'
        + "</p:graphicFrame>"
    )


def _single_page(data: bytes) -> FixedPage:
    document, warnings = parse_pptx(data)
    tc.assertListEqual([], warnings)
    tc.assertEqual(1, len(document.pages))
    return document.pages[0]


def test_shape_with_fill_and_text() -> None:
    shape = (
        "<p:sp><p:spPr>"
        + xfrm(914400, 914400, 1828800, 914400)
        + '<a:prstGeom prst="rect"><a:avLst/></a:prstGeom>'
        + '<a:solidFill><a:srgbClr val="FF0000"/></a:solidFill>'
        + "</p:spPr>"
        + _text_body("Hello", '<a:rPr lang="en-US" sz="2400" b="1"/>')
        + "</p:sp>"
    )

    page = _single_page(pptx_bytes([slide_xml(shape)]))

    tc.assertEqual(2, len(page.elements))
    background, text = page.elements
    tc.assertEqual((72.0, 72.0, 144.0, 72.0), (background.x, background.y, background.width, background.height))
    tc.assertIsInstance(background.kind, Shape)
    tc.assertIsInstance(background.kind.kind, Rectangle)
    tc.assertEqual(Color(255, 0, 0), background.kind.fill)
    tc.assertIsInstance(text.kind, TextBox)
    run = text.kind.content[0].runs[0]
    tc.assertEqual("Hello", run.text)
    tc.assertTrue(run.style.bold)
    tc.assertEqual(24.0, run.style.font_size)


def test_text_box_without_geometry_has_no_shape() -> None:
    textbox = "<p:sp><p:spPr>" + xfrm(0, 0, 914400, 457200) + "</p:spPr>" + _text_body("Note") + "</p:sp>"

    page = _single_page(pptx_bytes([slide_xml(textbox)]))

    tc.assertEqual(1, len(page.elements))
    tc.assertIsInstance(page.elements[0].kind, TextBox)


def test_slide_size_and_solid_background() -> None:
    data = pptx_bytes(
        [slide_xml("", background=solid_background("003366"))], size=(12192000, 6858000)
    )

    page = _single_page(data)

    tc.assertEqual((960.0, 540.0), (page.size.width, page.size.height))
    tc.assertEqual(Color(0x00, 0x33, 0x66), page.background_color)
    tc.assertIsNone(page.background_gradient)


def test_gradient_background() -> None:
    gradient = (
        "<p:bg><p:bgPr><a:gradFill><a:gsLst>"
        '<a:gs pos="0"><a:srgbClr val="FFFFFF"/></a:gs>'
        '<a:gs pos="100000"><a:srgbClr val="000080"/></a:gs>'
        '</a:gsLst><a:lin ang="5400000"/></a:gradFill></p:bgPr></p:bg>'
    )

    page = _single_page(pptx_bytes([slide_xml("", background=gradient)]))

    tc.assertIsNone(page.background_color)
    stops = page.background_gradient.stops
    tc.assertEqual([0.0, 1.0], [stop.offset for stop in stops])
    tc.assertEqual(Color(0, 0, 0x80), stops[1].color)
    tc.assertEqual(90.0, page.background_gradient.angle)


def test_background_falls_back_to_layout() -> None:
    layout = p_root(
        "sldLayout", f"<p:cSld>{solid_background('00FF00')}<p:spTree/></p:cSld>"
    )
    data = pptx_bytes(
        [slide_xml("")],
        slide_rels={1: rels(rel("rId1", REL_SLIDE_LAYOUT, "../slideLayouts/slideLayout1.xml"))},
        extra_parts={"ppt/slideLayouts/slideLayout1.xml": layout},
    )

    page = _single_page(data)

    tc.assertEqual(Color(0, 255, 0), page.background_color)


def test_slide_range_selects_slides() -> None:
    slides = [
        slide_xml("", background=solid_background(hex_color))
        for hex_color in ("110000", "220000", "330000")
    ]

    document, _ = parse_pptx(
        pptx_bytes(slides), ConvertOptions(slide_range=SlideRange(2, 3))
    )

    tc.assertEqual(
        [Color(0x22, 0, 0), Color(0x33, 0, 0)],
        [page.background_color for page in document.pages],
    )


def test_group_transform_maps_children() -> None:
    group = (
        "<p:grpSp><p:nvGrpSpPr/>"
        "<p:grpSpPr><a:xfrm>"
        '<a:off x="914400" y="0"/><a:ext cx="914400" cy="914400"/>'
        '<a:chOff x="0" y="0"/><a:chExt cx="1828800" cy="1828800"/>'
        "</a:xfrm></p:grpSpPr>"
        + _filled_rect(914400, 914400, 914400, 914400, "0000FF")
        + "</p:grpSp>"
    )

    page = _single_page(pptx_bytes([slide_xml(group)]))

    element = page.elements[0]
    tc.assertEqual((108.0, 36.0), (element.x, element.y))
    tc.assertEqual((36.0, 36.0), (element.width, element.height))


def test_table_with_horizontal_merge() -> None:
    cell_text = "<a:txBody><a:bodyPr/><a:p><a:r><a:t>{}</a:t></a:r></a:p></a:txBody>"
    table = (
        "<a:tbl>"
        '<a:tblGrid><a:gridCol w="1828800"/><a:gridCol w="1828800"/></a:tblGrid>'
        '<a:tr h="457200">'
        f'<a:tc gridSpan="2">{cell_text.format("Header")}'
        '<a:tcPr><a:solidFill><a:srgbClr val="DDDDDD"/></a:solidFill></a:tcPr></a:tc>'
        f'<a:tc hMerge="1">{cell_text.format("")}</a:tc>'
        "</a:tr>"
        '<a:tr h="457200">'
        f'<a:tc>{cell_text.format("a")}</a:tc><a:tc>{cell_text.format("b")}</a:tc>'
        "</a:tr>"
        "</a:tbl>"
    )

    page = _single_page(pptx_bytes([slide_xml(_graphic_frame(table, TABLE_URI))]))

    element = page.elements[0]
    tc.assertEqual((72.0, 72.0, 288.0, 144.0), (element.x, element.y, element.width, element.height))
    parsed = element.kind
    tc.assertIsInstance(parsed, Table)
    tc.assertListEqual([144.0, 144.0], parsed.column_widths)
    tc.assertEqual([2, 0], [cell.col_span for cell in parsed.rows[0].cells])
    tc.assertTrue(parsed.rows[0].cells[1].is_continuation)
    tc.assertEqual(Color(0xDD, 0xDD, 0xDD), parsed.rows[0].cells[0].background)
    tc.assertEqual(36.0, parsed.rows[1].height)
    tc.assertEqual("b", parsed.rows[1].cells[1].content[0].plain_text())


def test_picture() -> None:
    picture = (
        '<p:pic><p:nvPicPr/><p:blipFill><a:blip r:embed="rId2"/></p:blipFill>'
        "<p:spPr>" + xfrm(0, 0, 914400, 685800) + "</p:spPr></p:pic>"
    )
    data = pptx_bytes(
        [slide_xml(picture)],
        slide_rels={1: rels(rel("rId2", REL_IMAGE, "../media/image1.png"))},
        extra_parts={"ppt/media/image1.png": PNG_BYTES},
    )

    element = _single_page(data).elements[0]

    tc.assertIsInstance(element.kind, ImageData)
    tc.assertEqual(PNG_BYTES, element.kind.data)
    tc.assertEqual((72.0, 54.0), (element.width, element.height))


def test_missing_picture_is_a_warning() -> None:
    picture = '<p:pic><p:blipFill><a:blip r:embed="rId2"/></p:blipFill></p:pic>'

    document, warnings = parse_pptx(pptx_bytes([slide_xml(picture)]))

    tc.assertEqual([], document.pages[0].elements)
    tc.assertEqual(1, len(warnings))
    tc.assertEqual("slide 1 image rId2", warnings[0].element)


def test_chart_frame() -> None:
    data = pptx_bytes(
        [slide_xml(_graphic_frame('<c:chart r:id="rId3"/>', CHART_URI))],
        slide_rels={1: rels(rel("rId3", REL_CHART, "../charts/chart1.xml"))},
        extra_parts={
            "ppt/charts/chart1.xml": chart_xml(
                "lineChart", categories=("Jan", "Feb"), series=(("Visits", (3, 5)),)
            )
        },
    )

    element = _single_page(data).elements[0]

    tc.assertIsInstance(element.kind, Chart)
    tc.assertEqual(ChartType.LINE, element.kind.chart_type)
    tc.assertListEqual([3.0, 5.0], element.kind.series[0].values)


def test_smartart_frame() -> None:
    data_model = (
        f'<dgm:dataModel xmlns:dgm="{DGM}" xmlns:a="{A}"><dgm:ptLst>'
        '<dgm:pt modelId="0" type="doc"/>'
        '<dgm:pt modelId="1"><dgm:t><a:p><a:r><a:t>Step one</a:t></a:r></a:p></dgm:t></dgm:pt>'
        '</dgm:ptLst><dgm:cxnLst><dgm:cxn modelId="5" srcId="0" destId="1"/></dgm:cxnLst>'
        "</dgm:dataModel>"
    )
    data = pptx_bytes(
        [slide_xml(_graphic_frame('<dgm:relIds r:dm="rId4"/>', DIAGRAM_URI))],
        slide_rels={1: rels(rel("rId4", REL_DIAGRAM_DATA, "../diagrams/data1.xml"))},
        extra_parts={"ppt/diagrams/data1.xml": data_model},
    )

    element = _single_page(data).elements[0]

    tc.assertEqual(SmartArt(nodes=[SmartArtNode(text="Step one", depth=0)]), element.kind)


def test_hyperlink_run() -> None:
    shape = (
        "<p:sp><p:spPr>" + xfrm(0, 0, 914400, 457200) + "</p:spPr>"
        + _text_body("docs", '<a:rPr><a:hlinkClick r:id="rId7"/></a:rPr>')
        + "</p:sp>"
    )
    data = pptx_bytes(
        [slide_xml(shape)],
        slide_rels={1: rels(rel("rId7", REL_HYPERLINK, "https://example.com/docs", external=True))},
    )

    run = _single_page(data).elements[0].kind.content[0].runs[0]

    tc.assertEqual("https://example.com/docs", run.href)


def test_missing_slide_part_is_a_warning() -> None:
    document, warnings = parse_pptx(pptx_bytes([slide_xml(""), None]))

    tc.assertEqual(1, len(document.pages))
    tc.assertEqual(1, len(warnings))
    tc.assertEqual("slide 2", warnings[0].element)


def test_non_zip_input_is_a_parse_error() -> None:
    with pytest.raises(ParseError):
        parse_pptx(b"not a presentation")


def test_missing_presentation_part_is_a_parse_error() -> None:
    with pytest.raises(ParseError):
        parse_pptx(make_zip({"[Content_Types].xml": CONTENT_TYPES}))


def test_failing_shape_is_skipped_with_warning(monkeypatch) -> None:
    def broken_picture(self, shape, frame):
        raise ValueError("unreadable picture")

    monkeypatch.setattr(_SlideParser, "_pic", broken_picture)
    shapes = (
        _filled_rect(0, 0, 914400, 914400, "FF0000")
        + "<p:pic><p:blipFill/></p:pic>"
        + _filled_rect(914400, 0, 914400, 914400, "0000FF")
    )

    document, warnings = parse_pptx(pptx_bytes([slide_xml(shapes)]))

    fills = [element.kind.fill for element in document.pages[0].elements]
    tc.assertListEqual([Color(255, 0, 0), Color(0, 0, 255)], fills)
    tc.assertEqual(1, len(warnings))
    tc.assertEqual("slide 1 shape 1", warnings[0].element)
    tc.assertEqual("unreadable picture", warnings[0].reason)
