"""
DrawingML Chart Parser
======================

Parses chart parts (``word/charts/chart1.xml``, ``ppt/charts/chart1.xml``,
``xl/charts/chart1.xml``) into the IR ``Chart``: chart type, optional title,
category labels and named numeric series.

Chart Part Background
---------------------
A chart part is a ``c:chartSpace`` whose ``c:chart/c:plotArea`` holds one or
more type elements (``c:barChart``, ``c:lineChart``, ...). Each type element
contains ``c:ser`` series:

    c:ser/c:tx//c:v          series name
    c:ser/c:cat//c:v         category labels (strRef, strLit, numRef, numLit)
    c:ser/c:val//c:v         values
    c:ser/c:xVal, c:yVal     scatter charts: x and y values

The parser is a state machine over the pull-parser event stream; cached
values (``c:v``) are read as they close so the part is never held as a tree.

Known Limitations
-----------------
- Combination charts report the first type element found; series from all
  type elements are collected
- Formulas in ``c:f`` are not evaluated; only cached values are used
"""

from __future__ import annotations

import logging
from typing import Optional
from xml.etree import ElementTree as ET

from office2pdf.ir import Chart, ChartSeries, ChartType
from office2pdf.parsers.util.xml_events import START, get_attr, iter_events

logger = logging.getLogger(__name__)

CHART_TYPE_ELEMENTS = {
    "barChart": ChartType.BAR,
    "bar3DChart": ChartType.BAR,
    "lineChart": ChartType.LINE,
    "line3DChart": ChartType.LINE,
    "pieChart": ChartType.PIE,
    "pie3DChart": ChartType.PIE,
    "doughnutChart": ChartType.PIE,
    "areaChart": ChartType.AREA,
    "area3DChart": ChartType.AREA,
    "scatterChart": ChartType.SCATTER,
    "radarChart": ChartType.OTHER,
    "bubbleChart": ChartType.OTHER,
    "stockChart": ChartType.OTHER,
    "surfaceChart": ChartType.OTHER,
    "surface3DChart": ChartType.OTHER,
}


class _ChartPartParser:
    """State machine for one chart part."""

    def __init__(self) -> None:
        self.chart_type: Optional[ChartType] = None
        self.title: Optional[str] = None
        self.categories: list[str] = []
        self.series: list[ChartSeries] = []

        self._stack: list[str] = []
        self._type_element: Optional[str] = None
        self._in_title = False
        self._title_done = False
        self._title_parts: list[str] = []

        self._in_series = False
        self._series_name_parts: list[str] = []
        self._series_values: list[float] = []
        self._series_categories: list[str] = []
        # One of "tx", "cat", "val", "xVal" while inside that series child
        self._series_section: Optional[str] = None

    def feed(self, event: str, name: str, elem: ET.Element) -> None:
        if event == START:
            self._on_start(name, elem)
            self._stack.append(name)
        else:
            if self._stack:
                self._stack.pop()
            self._on_end(name, elem)

    def _parent(self) -> Optional[str]:
        return self._stack[-1] if self._stack else None

    def _on_start(self, name: str, elem: ET.Element) -> None:
        if name in CHART_TYPE_ELEMENTS and self._type_element is None:
            self._type_element = name
            if self.chart_type is None:
                self.chart_type = CHART_TYPE_ELEMENTS[name]
            return

        if name == "title" and self._parent() == "chart" and not self._title_done:
            self._in_title = True
            return

        if self._type_element is None:
            return

        if name == "barDir" and self._parent() == self._type_element:
            if get_attr(elem, "val") == "col" and self.chart_type == ChartType.BAR:
                self.chart_type = ChartType.COLUMN
        elif name == "ser" and self._parent() == self._type_element:
            self._in_series = True
            self._series_name_parts = []
            self._series_values = []
            self._series_categories = []
        elif self._in_series and self._parent() == "ser":
            if name == "tx":
                self._series_section = "tx"
            elif name == "cat":
                self._series_section = "cat"
            elif name in ("val", "yVal"):
                self._series_section = "val"
                self._series_values = []
            elif name == "xVal":
                self._series_section = "xVal"

    def _on_end(self, name: str, elem: ET.Element) -> None:
        if self._in_title:
            if name in ("t", "v"):
                self._title_parts.append(elem.text or "")
            elif name == "title" and self._parent() == "chart":
                self._in_title = False
                self._title_done = True
                text = "".join(self._title_parts).strip()
                self.title = text or None
            return

        if name == self._type_element:
            self._type_element = None
            return

        if not self._in_series:
            return

        if name == "v":
            self._on_cached_value(elem.text or "")
        elif name == "ser" and self._parent() == self._type_element:
            self._finish_series()
        elif self._parent() == "ser" and name in ("tx", "cat", "val", "yVal", "xVal"):
            self._series_section = None

    def _on_cached_value(self, text: str) -> None:
        section = self._series_section
        if section == "tx":
            self._series_name_parts.append(text)
        elif section == "cat":
            self._series_categories.append(text)
        elif section == "xVal":
            # Scatter: the independent axis doubles as the category source
            self._series_categories.append(text)
        elif section == "val":
            try:
                self._series_values.append(float(text.strip()))
            except ValueError:
                logger.debug(f"Skipping non-numeric chart value {text!r}")

    def _finish_series(self) -> None:
        name = "".join(self._series_name_parts).strip() or None
        self.series.append(ChartSeries(name=name, values=self._series_values))
        if not self.categories and self._series_categories:
            self.categories = self._series_categories
        self._in_series = False
        self._series_section = None

    def result(self) -> Optional[Chart]:
        if self.chart_type is None:
            return None
        return Chart(
            chart_type=self.chart_type,
            title=self.title,
            categories=self.categories,
            series=self.series,
        )


def parse_chart_xml(xml: bytes | str) -> Optional[Chart]:
    """
    Parse a chart part into a Chart.

    Args:
        xml: Content of a ``chartN.xml`` part.

    Returns:
        The Chart, or None when the part declares no recognised chart type.
    """
    parser = _ChartPartParser()
    for event, name, elem in iter_events(xml):
        parser.feed(event, name, elem)
    return parser.result()
