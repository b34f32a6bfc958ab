import unittest

import pytest

from office2pdf.exceptions import ParseError
from office2pdf.ir import (
    Chart,
    ChartType,
    Color,
    FlowPage,
    ImageData,
    ImageFormat,
    ListBlock,
    ListKind,
    MathEquation,
    PageBreak,
    PageNumberField,
    Paragraph,
    Run,
    Table,
    TextStyle,
)
from office2pdf.parsers.docx_parser import _BodyParser, parse_docx
from office2pdf.tests.ooxml_builders import (
    CONTENT_TYPES,
    PNG_BYTES,
    R,
    REL_CHART,
    REL_FOOTER,
    REL_HYPERLINK,
    REL_IMAGE,
    chart_xml,
    core_xml,
    docx_bytes,
    inline_drawing,
    make_zip,
    rel,
    rels,
    w_p,
    w_r,
    w_root,
    w_tc,
)

tc = unittest.TestCase()

PICTURE_URI = "http://schemas.openxmlformats.org/drawingml/2006/picture"
CHART_URI = "http://schemas.openxmlformats.org/drawingml/2006/chart"


def _page(data: bytes) -> FlowPage:
    document, _ = parse_docx(data)
    tc.assertEqual(1, len(document.pages))
    return document.pages[0]


def test_bold_run_and_heading_style() -> None:
    styles = (
        '<w:style w:type="paragraph" w:styleId="Heading1">'
        '<w:name w:val="heading 1"/><w:rPr><w:sz w:val="32"/></w:rPr></w:style>'
    )
    body = (
        w_p(w_r("Introduction"), ppr='<w:pStyle w:val="Heading1"/>')
        + w_p(w_r("Hello ", rpr="<w:b/>") + w_r("world"))
    )

    document, warnings = parse_docx(docx_bytes(body, styles=styles))

    tc.assertListEqual([], warnings)
    heading, paragraph = document.pages[0].content
    tc.assertEqual(1, heading.style.heading_level)
    tc.assertEqual(16.0, heading.runs[0].style.font_size)
    tc.assertEqual("Hello world", paragraph.plain_text())
    tc.assertTrue(paragraph.runs[0].style.bold)
    tc.assertIsNone(paragraph.runs[1].style.bold)


def test_style_inheritance_and_direct_override() -> None:
    styles = (
        '<w:style w:type="paragraph" w:styleId="Base">'
        '<w:name w:val="Base"/><w:pPr><w:jc w:val="center"/></w:pPr>'
        '<w:rPr><w:b/><w:color w:val="FF0000"/></w:rPr></w:style>'
        '<w:style w:type="paragraph" w:styleId="Derived">'
        '<w:name w:val="Derived"/><w:basedOn w:val="Base"/><w:rPr><w:i/></w:rPr></w:style>'
    )
    body = w_p(
        w_r("inherited") + w_r("plain", rpr='<w:b w:val="0"/>'),
        ppr='<w:pStyle w:val="Derived"/>',
    )

    paragraph = _page(docx_bytes(body, styles=styles)).content[0]

    inherited, plain = paragraph.runs
    tc.assertEqual("center", paragraph.style.alignment.value)
    tc.assertTrue(inherited.style.bold)
    tc.assertTrue(inherited.style.italic)
    tc.assertEqual(Color(255, 0, 0), inherited.style.color)
    tc.assertFalse(plain.style.bold)
    tc.assertTrue(plain.style.italic)


def test_paragraph_spacing_and_indent() -> None:
    ppr = (
        '<w:spacing w:before="240" w:after="120" w:line="360" w:lineRule="auto"/>'
        '<w:ind w:left="720" w:hanging="360"/>'
    )

    style = _page(docx_bytes(w_p(w_r("text"), ppr=ppr))).content[0].style

    tc.assertEqual(12.0, style.space_before)
    tc.assertEqual(6.0, style.space_after)
    tc.assertEqual(1.5, style.line_spacing.factor)
    tc.assertEqual(36.0, style.indent_left)
    tc.assertEqual(-18.0, style.indent_first_line)


def test_vertical_merge_becomes_row_span() -> None:
    restart = '<w:vMerge w:val="restart"/>'
    table = (
        "<w:tbl>"
        '<w:tblGrid><w:gridCol w:w="1440"/><w:gridCol w:w="2880"/></w:tblGrid>'
        f'<w:tr>{w_tc("merged", restart)}{w_tc("b1")}</w:tr>'
        f'<w:tr>{w_tc("", "<w:vMerge/>")}{w_tc("b2")}</w:tr>'
        f'<w:tr>{w_tc("", "<w:vMerge/>")}{w_tc("b3")}</w:tr>'
        "</w:tbl>"
    )

    document, warnings = parse_docx(docx_bytes(table))

    tc.assertListEqual([], warnings)
    parsed = document.pages[0].content[0]
    tc.assertIsInstance(parsed, Table)
    tc.assertListEqual([72.0, 144.0], parsed.column_widths)
    tc.assertEqual(3, parsed.rows[0].cells[0].row_span)
    tc.assertEqual("merged", parsed.rows[0].cells[0].content[0].plain_text())
    # Continuation cells are dropped
    tc.assertEqual(["b2"], [c.content[0].plain_text() for c in parsed.rows[1].cells])
    tc.assertEqual(["b3"], [c.content[0].plain_text() for c in parsed.rows[2].cells])


def test_orphan_merge_continuation_is_dropped_with_warning() -> None:
    table = f'<w:tbl><w:tr>{w_tc("", "<w:vMerge/>")}{w_tc("kept")}</w:tr></w:tbl>'

    document, warnings = parse_docx(docx_bytes(table))

    tc.assertEqual(1, len(warnings))
    tc.assertIn("without start", warnings[0].reason)
    cells = document.pages[0].content[0].rows[0].cells
    tc.assertEqual(["kept"], [c.content[0].plain_text() for c in cells])


def test_grid_span_and_cell_shading() -> None:
    table = (
        "<w:tbl><w:tr>"
        + w_tc("wide", '<w:gridSpan w:val="2"/><w:shd w:val="clear" w:fill="D9E2F3"/>')
        + "</w:tr></w:tbl>"
    )

    cell = _page(docx_bytes(table)).content[0].rows[0].cells[0]

    tc.assertEqual(2, cell.col_span)
    tc.assertEqual(Color(0xD9, 0xE2, 0xF3), cell.background)


def test_bullet_paragraphs_are_grouped_into_a_list() -> None:
    numbering = (
        '<w:abstractNum w:abstractNumId="0">'
        '<w:lvl w:ilvl="0"><w:numFmt w:val="bullet"/></w:lvl>'
        '<w:lvl w:ilvl="1"><w:numFmt w:val="decimal"/></w:lvl>'
        "</w:abstractNum>"
        '<w:num w:numId="1"><w:abstractNumId w:val="0"/></w:num>'
    )
    num_pr = '<w:numPr><w:ilvl w:val="{}"/><w:numId w:val="1"/></w:numPr>'
    body = (
        w_p(w_r("first"), ppr=num_pr.format(0))
        + w_p(w_r("nested"), ppr=num_pr.format(1))
        + w_p(w_r("after"))
    )

    content = _page(docx_bytes(body, numbering=numbering)).content

    tc.assertEqual(2, len(content))
    list_block, paragraph = content
    tc.assertIsInstance(list_block, ListBlock)
    tc.assertEqual(ListKind.UNORDERED, list_block.kind)
    tc.assertEqual([0, 1], [item.level for item in list_block.items])
    tc.assertEqual("nested", list_block.items[1].content[0].plain_text())
    tc.assertEqual("after", paragraph.plain_text())


def test_hyperlink_target() -> None:
    body = w_p(
        w_r("see ") + '<w:hyperlink r:id="rId1">' + w_r("example") + "</w:hyperlink>"
    )
    document_rels = rels(rel("rId1", REL_HYPERLINK, "https://example.com", external=True))

    runs = _page(docx_bytes(body, document_rels=document_rels)).content[0].runs

    tc.assertIsNone(runs[0].href)
    tc.assertEqual("https://example.com", runs[1].href)


def test_footnote_reference() -> None:
    footnotes = (
        '<w:footnote w:type="separator" w:id="-1"><w:p><w:r><w:separator/></w:r></w:p></w:footnote>'
        f'<w:footnote w:id="1">{w_p(w_r("Source: annual survey"))}</w:footnote>'
    )
    body = w_p(w_r("Revenue grew") + '<w:r><w:footnoteReference w:id="1"/></w:r>')

    runs = _page(docx_bytes(body, footnotes=footnotes)).content[0].runs

    tc.assertEqual(2, len(runs))
    tc.assertEqual("", runs[1].text)
    tc.assertEqual("Source: annual survey", runs[1].footnote)


def test_page_break_splits_paragraph() -> None:
    body = w_p(w_r("one") + '<w:r><w:br w:type="page"/></w:r>' + w_r("two"))

    content = _page(docx_bytes(body)).content

    tc.assertEqual(3, len(content))
    tc.assertEqual("one", content[0].plain_text())
    tc.assertEqual(PageBreak(), content[1])
    tc.assertEqual("two", content[2].plain_text())


def test_page_break_before_property() -> None:
    body = w_p(w_r("first")) + w_p(w_r("second"), ppr="<w:pageBreakBefore/>")

    content = _page(docx_bytes(body)).content

    tc.assertEqual([Paragraph, PageBreak, Paragraph], [type(b) for b in content])


def test_inline_image() -> None:
    blip = '<a:blip r:embed="rId2"/>'
    body = w_p(inline_drawing(blip, PICTURE_URI, cx=914400, cy=457200))
    document_rels = rels(rel("rId2", REL_IMAGE, "media/image1.png"))

    content = _page(
        docx_bytes(
            body,
            document_rels=document_rels,
            extra_parts={"word/media/image1.png": PNG_BYTES},
        )
    ).content

    tc.assertEqual(1, len(content))
    image = content[0]
    tc.assertIsInstance(image, ImageData)
    tc.assertEqual(ImageFormat.PNG, image.format)
    tc.assertEqual((72.0, 36.0), (image.width, image.height))


def test_image_without_extent_uses_pixel_size() -> None:
    drawing = (
        "<w:r><w:drawing><wp:inline>"
        f'<a:graphic><a:graphicData uri="{PICTURE_URI}"><a:blip r:embed="rId2"/>'
        "</a:graphicData></a:graphic></wp:inline></w:drawing></w:r>"
    )
    document_rels = rels(rel("rId2", REL_IMAGE, "media/image1.png"))

    image = _page(
        docx_bytes(
            w_p(drawing),
            document_rels=document_rels,
            extra_parts={"word/media/image1.png": PNG_BYTES},
        )
    ).content[0]

    tc.assertEqual((3.0, 2.25), (image.width, image.height))


def test_missing_image_part_is_a_warning() -> None:
    body = w_p(w_r("caption") + inline_drawing('<a:blip r:embed="rId2"/>', PICTURE_URI))
    document_rels = rels(rel("rId2", REL_IMAGE, "media/missing.png"))

    document, warnings = parse_docx(docx_bytes(body, document_rels=document_rels))

    tc.assertEqual(1, len(warnings))
    tc.assertIn("missing image part", warnings[0].reason)
    tc.assertEqual("caption", document.pages[0].content[0].plain_text())


def test_embedded_chart() -> None:
    body = w_p(inline_drawing('<c:chart r:id="rId3"/>', CHART_URI))
    document_rels = rels(rel("rId3", REL_CHART, "charts/chart1.xml"))
    chart_part = chart_xml(
        "pieChart", title="Share", categories=("a", "b"), series=(("s", (1, 3)),)
    )

    content = _page(
        docx_bytes(
            body,
            document_rels=document_rels,
            extra_parts={"word/charts/chart1.xml": chart_part},
        )
    ).content

    tc.assertEqual(1, len(content))
    chart = content[0]
    tc.assertIsInstance(chart, Chart)
    tc.assertEqual(ChartType.PIE, chart.chart_type)
    tc.assertEqual("Share", chart.title)


def test_display_math_paragraph() -> None:
    fraction = (
        "<m:f><m:num><m:r><m:t>a</m:t></m:r></m:num>"
        "<m:den><m:r><m:t>b</m:t></m:r></m:den></m:f>"
    )
    body = w_p(f"<m:oMathPara><m:oMath>{fraction}</m:oMath></m:oMathPara>")

    content = _page(docx_bytes(body)).content

    tc.assertListEqual([MathEquation(content="frac(a, b)", display=True)], content)


def test_inline_math_follows_paragraph_text() -> None:
    body = w_p(w_r("where ") + "<m:oMath><m:r><m:t>x</m:t></m:r></m:oMath>")

    content = _page(docx_bytes(body)).content

    tc.assertEqual("where ", content[0].plain_text())
    tc.assertEqual(MathEquation(content="x", display=False), content[1])


def test_page_setup_from_section_properties() -> None:
    sect_pr = (
        '<w:sectPr><w:pgSz w:w="12240" w:h="15840"/>'
        '<w:pgMar w:top="1440" w:bottom="1440" w:left="1080" w:right="1080"/></w:sectPr>'
    )

    page = _page(docx_bytes(w_p(w_r("body")) + sect_pr))

    tc.assertEqual((612.0, 792.0), (page.size.width, page.size.height))
    tc.assertEqual(72.0, page.margins.top)
    tc.assertEqual(54.0, page.margins.left)
    # The section properties never become content
    tc.assertEqual(1, len(page.content))


def test_default_page_setup_is_a4() -> None:
    page = _page(docx_bytes(w_p(w_r("body"))))

    tc.assertEqual((595.28, 841.89), (page.size.width, page.size.height))


def test_footer_with_page_number_field() -> None:
    footer = w_root(
        "ftr",
        w_p(
            w_r("Page ")
            + '<w:fldSimple w:instr=" PAGE "><w:r><w:t>1</w:t></w:r></w:fldSimple>'
        ),
    )
    sect_pr = '<w:sectPr><w:footerReference w:type="default" r:id="rId9"/></w:sectPr>'
    document_rels = rels(rel("rId9", REL_FOOTER, "footer1.xml"))

    page = _page(
        docx_bytes(
            w_p(w_r("body")) + sect_pr,
            document_rels=document_rels,
            extra_parts={"word/footer1.xml": footer},
        )
    )

    tc.assertIsNone(page.header)
    tc.assertEqual(1, len(page.footer.paragraphs))
    tc.assertListEqual(
        [Run(text="Page ", style=TextStyle()), PageNumberField()],
        page.footer.paragraphs[0].elements,
    )


def test_header_with_complex_page_field() -> None:
    header = w_root(
        "hdr",
        w_p(
            '<w:r><w:fldChar w:fldCharType="begin"/></w:r>'
            '<w:r><w:instrText xml:space="preserve"> PAGE \\* MERGEFORMAT </w:instrText></w:r>'
            '<w:r><w:fldChar w:fldCharType="separate"/></w:r>'
            + w_r("7")
            + '<w:r><w:fldChar w:fldCharType="end"/></w:r>'
            + w_r(" of report")
        ),
    )
    sect_pr = '<w:sectPr><w:headerReference w:type="default" r:id="rId8"/></w:sectPr>'
    document_rels = rels(
        rel("rId8", f"{R}/header", "header1.xml")
    )

    page = _page(
        docx_bytes(
            w_p(w_r("body")) + sect_pr,
            document_rels=document_rels,
            extra_parts={"word/header1.xml": header},
        )
    )

    elements = page.header.paragraphs[0].elements
    tc.assertEqual(PageNumberField(), elements[0])
    tc.assertEqual(" of report", elements[1].text)
    tc.assertEqual(2, len(elements))


def test_metadata_from_core_properties() -> None:
    document, _ = parse_docx(
        docx_bytes(w_p(w_r("body")), core=core_xml(title="Annual Report", creator="Finance"))
    )

    tc.assertEqual("Annual Report", document.metadata.title)
    tc.assertEqual("Finance", document.metadata.author)


def test_non_zip_input_is_a_parse_error() -> None:
    with pytest.raises(ParseError):
        parse_docx(b"definitely not a docx")


def test_missing_document_part_is_a_parse_error() -> None:
    with pytest.raises(ParseError):
        parse_docx(make_zip({"[Content_Types].xml": CONTENT_TYPES}))


def test_failing_body_element_is_skipped_with_warning(monkeypatch) -> None:
    def broken_table(self, tbl):
        raise ValueError("unreadable table")

    monkeypatch.setattr(_BodyParser, "parse_table", broken_table)
    table = f"<w:tbl><w:tr>{w_tc('lost')}</w:tr></w:tbl>"

    document, warnings = parse_docx(docx_bytes(w_p(w_r("before")) + table + w_p(w_r("after"))))

    content = document.pages[0].content
    tc.assertListEqual(["before", "after"], [block.plain_text() for block in content])
    tc.assertEqual(1, len(warnings))
    tc.assertEqual("body element 1", warnings[0].element)
    tc.assertEqual("unreadable table", warnings[0].reason)


def test_overflowing_grid_span_keeps_the_table() -> None:
    span = '<w:gridSpan w:val="1e999"/>'
    table = f"<w:tbl><w:tr>{w_tc('cell', span)}</w:tr></w:tbl>"

    document, warnings = parse_docx(docx_bytes(w_p(w_r("before")) + table))

    tc.assertListEqual([], warnings)
    content = document.pages[0].content
    tc.assertEqual(2, len(content))
    tc.assertIsInstance(content[1], Table)
    tc.assertEqual(1, content[1].rows[0].cells[0].col_span)
