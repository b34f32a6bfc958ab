import unittest

from office2pdf.ir import ChartType
from office2pdf.parsers.chart import parse_chart_xml
from office2pdf.tests.ooxml_builders import chart_xml

tc = unittest.TestCase()


def test_parse_column_chart() -> None:
    chart = parse_chart_xml(
        chart_xml(
            "barChart",
            bar_dir="col",
            title="Quarterly Sales",
            categories=("Q1", "Q2", "Q3"),
            series=(("Revenue", (10, 20.5, 30)), ("Cost", (5, 6, 7))),
        )
    )

    tc.assertIsNotNone(chart)
    tc.assertEqual(ChartType.COLUMN, chart.chart_type)
    tc.assertEqual("Quarterly Sales", chart.title)
    tc.assertListEqual(["Q1", "Q2", "Q3"], chart.categories)
    tc.assertListEqual(["Revenue", "Cost"], [s.name for s in chart.series])
    tc.assertListEqual([10.0, 20.5, 30.0], chart.series[0].values)
    tc.assertListEqual([5.0, 6.0, 7.0], chart.series[1].values)


def test_parse_horizontal_bar_chart_without_title() -> None:
    chart = parse_chart_xml(
        chart_xml("barChart", bar_dir="bar", categories=("a",), series=(("s", (1,)),))
    )

    tc.assertEqual(ChartType.BAR, chart.chart_type)
    tc.assertIsNone(chart.title)


def test_parse_chart_type_mapping() -> None:
    tc.assertEqual(ChartType.PIE, parse_chart_xml(chart_xml("pieChart")).chart_type)
    tc.assertEqual(ChartType.PIE, parse_chart_xml(chart_xml("doughnutChart")).chart_type)
    tc.assertEqual(ChartType.LINE, parse_chart_xml(chart_xml("lineChart")).chart_type)
    tc.assertEqual(ChartType.AREA, parse_chart_xml(chart_xml("areaChart")).chart_type)
    tc.assertEqual(ChartType.OTHER, parse_chart_xml(chart_xml("radarChart")).chart_type)


def test_parse_chart_skips_non_numeric_values() -> None:
    chart = parse_chart_xml(
        chart_xml("lineChart", categories=("a", "b", "c"), series=(("s", (1, "n/a", 3)),))
    )

    tc.assertListEqual([1.0, 3.0], chart.series[0].values)


def test_parse_chart_without_known_type_returns_none() -> None:
    xml = (
        '<c:chartSpace xmlns:c="http://schemas.openxmlformats.org/drawingml/2006/chart">'
        "<c:chart><c:plotArea/></c:chart></c:chartSpace>"
    )

    tc.assertIsNone(parse_chart_xml(xml))
