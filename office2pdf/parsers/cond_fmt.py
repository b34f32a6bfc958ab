"""
Conditional Formatting Evaluator
================================

Evaluates a worksheet's conditional formatting rules against the cached cell
values and produces per-cell style overrides for the spreadsheet parser.

Rule types handled:
    - cellIs: comparison against a constant threshold, applying the rule's
      differential format (fill, bold, font color)
    - colorScale: 2- or 3-stop background color interpolation
    - dataBar: proportional in-cell bar
    - iconSet: arrow glyph chosen by percentage thresholds

Known Limitations
-----------------
- Formulas are not evaluated; a cellIs rule whose threshold is not a numeric
  literal never matches
- expression, top10, aboveAverage, duplicateValues and text rules are ignored
- Thresholds of color scales and data bars always use the min/max of the
  range; ``cfvo`` types other than percent are treated as percent for icons

Usage
-----
    >>> from openpyxl import load_workbook
    >>> wb = load_workbook("report.xlsx", data_only=True)
    >>> overrides = build_cond_fmt_overrides(wb.active)
    >>> overrides.get((2, 5))  # column B, row 5
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterator, Optional

from office2pdf.ir import Color, DataBarInfo

logger = logging.getLogger(__name__)

DEFAULT_DATA_BAR_COLOR = Color(0x63, 0x8E, 0xC6)
DEFAULT_MID_COLOR = Color(255, 255, 0)

THREE_ICONS = ("↓", "→", "↑")
FIVE_ICONS = ("⇊", "↓", "→", "↑", "⇈")

_EPSILON = 1e-9

# openpyxl reports unset colors as fully transparent black
_UNSET_ARGB = "00000000"
_BLACK_ARGB = "FF000000"


@dataclass
class CondFmtOverride:
    background: Optional[Color] = None
    font_color: Optional[Color] = None
    bold: Optional[bool] = None
    data_bar: Optional[DataBarInfo] = None
    icon_text: Optional[str] = None

    def merge(self, other: "CondFmtOverride") -> None:
        """Overwrite fields that ``other`` sets."""
        if other.background is not None:
            self.background = other.background
        if other.font_color is not None:
            self.font_color = other.font_color
        if other.bold is not None:
            self.bold = other.bold
        if other.data_bar is not None:
            self.data_bar = other.data_bar
        if other.icon_text is not None:
            self.icon_text = other.icon_text


@dataclass(frozen=True)
class CellRange:
    """Inclusive, 1-indexed cell range."""

    start_col: int
    start_row: int
    end_col: int
    end_row: int

    def cells(self) -> Iterator[tuple[int, int]]:
        for row in range(self.start_row, self.end_row + 1):
            for col in range(self.start_col, self.end_col + 1):
                yield col, row


def parse_column_letters(letters: str) -> Optional[int]:
    """``A`` -> 1, ``Z`` -> 26, ``AA`` -> 27; None for anything else."""
    if not letters:
        return None
    col = 0
    for ch in letters:
        if not ("A" <= ch <= "Z"):
            return None
        col = col * 26 + (ord(ch) - ord("A") + 1)
    return col


def parse_cell_ref(ref: str) -> Optional[tuple[int, int]]:
    """``$B$5`` -> (2, 5)"""
    ref = ref.replace("$", "")
    split = next((i for i, ch in enumerate(ref) if ch.isdigit()), None)
    if split is None:
        return None
    col = parse_column_letters(ref[:split])
    try:
        row = int(ref[split:])
    except ValueError:
        return None
    if col is None or row < 1:
        return None
    return col, row


def parse_sqref(sqref: str) -> list[CellRange]:
    """
    Parse a space-separated list of references (``A1:C3 E5``).

    Invalid parts are dropped.
    """
    ranges = []
    for part in sqref.split():
        if ":" in part:
            start_ref, end_ref = part.split(":", 1)
            start = parse_cell_ref(start_ref)
            end = parse_cell_ref(end_ref)
            if start is None or end is None:
                continue
            ranges.append(CellRange(start[0], start[1], end[0], end[1]))
        else:
            cell = parse_cell_ref(part)
            if cell is None:
                continue
            ranges.append(CellRange(cell[0], cell[1], cell[0], cell[1]))
    return ranges


def parse_argb_color(argb: Optional[str]) -> Optional[Color]:
    """``FFRRGGBB`` -> Color; None when shorter than 8 characters or invalid."""
    if not isinstance(argb, str) or len(argb) < 8:
        return None
    return Color.from_hex(argb[2:8])


def interpolate_color(color_a: Color, color_b: Color, ratio: float) -> Color:
    ratio = min(max(ratio, 0.0), 1.0)

    def channel(a: int, b: int) -> int:
        return int(math.floor(a + (b - a) * ratio + 0.5))

    return Color(
        channel(color_a.r, color_b.r),
        channel(color_a.g, color_b.g),
        channel(color_a.b, color_b.b),
    )


def evaluate_icon_index(value: float, thresholds: list[float], num_icons: int) -> int:
    """Index of the highest threshold reached, capped at ``num_icons - 1``."""
    if num_icons == 0:
        return 0
    for i in range(len(thresholds) - 1, 0, -1):
        if value >= thresholds[i]:
            return min(i, num_icons - 1)
    return 0


def numeric_value(value) -> Optional[float]:
    """Numeric view of a cell value; booleans and text are not numbers."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def color_from_openpyxl(color) -> Optional[Color]:
    if color is None:
        return None
    rgb = getattr(color, "rgb", None)
    if not isinstance(rgb, str) or rgb == _UNSET_ARGB:
        return None
    return parse_argb_color(rgb)


def _formula_thresholds(rule) -> list[float]:
    thresholds = []
    for formula in rule.formula or []:
        try:
            thresholds.append(float(str(formula).strip()))
        except ValueError:
            continue
    return thresholds


def evaluate_cell_is(value: float, operator: Optional[str], thresholds: list[float]) -> bool:
    """Whether a cellIs rule matches; no numeric threshold never matches."""
    if not thresholds:
        return False
    threshold = thresholds[0]
    if operator == "greaterThan":
        return value > threshold
    if operator == "greaterThanOrEqual":
        return value >= threshold
    if operator == "lessThan":
        return value < threshold
    if operator == "lessThanOrEqual":
        return value <= threshold
    if operator == "equal":
        return abs(value - threshold) < _EPSILON
    if operator == "notEqual":
        return abs(value - threshold) >= _EPSILON
    if operator in ("between", "notBetween"):
        if len(thresholds) >= 2:
            low, high = sorted(thresholds[:2])
            inside = low <= value <= high
            return inside if operator == "between" else not inside
        return value >= threshold if operator == "between" else value < threshold
    return False


def _differential_style(rule) -> CondFmtOverride:
    result = CondFmtOverride()
    dxf = getattr(rule, "dxf", None)
    if dxf is None:
        return result

    fill = dxf.fill
    if fill is not None:
        background = color_from_openpyxl(getattr(fill, "bgColor", None))
        if background is None:
            background = color_from_openpyxl(getattr(fill, "fgColor", None))
        result.background = background

    font = dxf.font
    if font is not None:
        if font.b:
            result.bold = True
        color = font.color
        rgb = getattr(color, "rgb", None) if color is not None else None
        if isinstance(rgb, str) and rgb != _BLACK_ARGB:
            result.font_color = color_from_openpyxl(color)

    return result


class _RangeValues:
    """Numeric cell values of one rule's ranges, clamped to the used area."""

    def __init__(self, worksheet, ranges: list[CellRange]):
        self.cells: list[tuple[int, int, float]] = []
        max_row = worksheet.max_row
        max_col = worksheet.max_column
        for cell_range in ranges:
            clamped = CellRange(
                cell_range.start_col,
                cell_range.start_row,
                min(cell_range.end_col, max_col),
                min(cell_range.end_row, max_row),
            )
            for col, row in clamped.cells():
                value = numeric_value(worksheet.cell(row=row, column=col).value)
                if value is not None:
                    self.cells.append((col, row, value))

    @property
    def bounds(self) -> tuple[float, float]:
        values = [v for _, _, v in self.cells]
        return min(values), max(values)


def _apply(overrides: dict, col: int, row: int, patch: CondFmtOverride) -> None:
    entry = overrides.get((col, row))
    if entry is None:
        overrides[(col, row)] = patch
    else:
        entry.merge(patch)


def _apply_cell_is(overrides, rule, values: _RangeValues) -> None:
    style = _differential_style(rule)
    thresholds = _formula_thresholds(rule)
    for col, row, value in values.cells:
        if evaluate_cell_is(value, rule.operator, thresholds):
            _apply(
                overrides,
                col,
                row,
                CondFmtOverride(
                    background=style.background,
                    font_color=style.font_color,
                    bold=style.bold,
                ),
            )


def _apply_color_scale(overrides, rule, values: _RangeValues) -> None:
    color_scale = rule.colorScale
    if color_scale is None:
        return
    colors = [color_from_openpyxl(c) for c in (color_scale.color or [])]
    if len(colors) < 2 or not values.cells:
        return

    low, high = values.bounds
    spread = high - low
    color_min = colors[0] or Color.white()
    color_max = colors[-1] or Color.black()
    color_mid = colors[1] or DEFAULT_MID_COLOR

    for col, row, value in values.cells:
        ratio = 0.5 if abs(spread) < _EPSILON else (value - low) / spread
        if len(colors) == 3:
            if ratio <= 0.5:
                color = interpolate_color(color_min, color_mid, ratio * 2.0)
            else:
                color = interpolate_color(color_mid, color_max, (ratio - 0.5) * 2.0)
        else:
            color = interpolate_color(color_min, color_max, ratio)
        _apply(overrides, col, row, CondFmtOverride(background=color))


def _apply_data_bar(overrides, rule, values: _RangeValues) -> None:
    data_bar = rule.dataBar
    if data_bar is None or not values.cells:
        return
    bar_color = data_bar.color
    if isinstance(bar_color, (list, tuple)):
        bar_color = bar_color[0] if bar_color else None
    color = color_from_openpyxl(bar_color) or DEFAULT_DATA_BAR_COLOR

    low, high = values.bounds
    spread = high - low
    for col, row, value in values.cells:
        pct = 50.0 if abs(spread) < _EPSILON else (value - low) / spread * 100.0
        _apply(
            overrides,
            col,
            row,
            CondFmtOverride(data_bar=DataBarInfo(color=color, fill_pct=pct)),
        )


def _apply_icon_set(overrides, rule, values: _RangeValues) -> None:
    if not values.cells:
        return
    low, high = values.bounds
    spread = high - low

    thresholds = []
    icon_set = rule.iconSet
    for cfvo in (icon_set.cfvo if icon_set is not None else None) or []:
        try:
            pct = float(cfvo.val)
        except (TypeError, ValueError):
            continue
        thresholds.append(low + spread * (pct / 100.0))
    if len(thresholds) < 2:
        thresholds = [low, low + spread / 3.0, low + spread * 2.0 / 3.0]

    icons = FIVE_ICONS if len(thresholds) >= 5 else THREE_ICONS
    for col, row, value in values.cells:
        index = evaluate_icon_index(value, thresholds, len(icons))
        _apply(overrides, col, row, CondFmtOverride(icon_text=icons[index]))


_RULE_HANDLERS = {
    "cellIs": _apply_cell_is,
    "colorScale": _apply_color_scale,
    "dataBar": _apply_data_bar,
    "iconSet": _apply_icon_set,
}


def build_cond_fmt_overrides(worksheet) -> dict[tuple[int, int], CondFmtOverride]:
    """
    Evaluate every conditional formatting rule of an openpyxl worksheet.

    Args:
        worksheet: A worksheet from a workbook loaded without ``read_only``.

    Returns:
        Overrides keyed by 1-indexed ``(column, row)``. Where several rules
        hit the same cell, later rules overwrite the fields they set.
    """
    overrides: dict[tuple[int, int], CondFmtOverride] = {}

    for cf in worksheet.conditional_formatting:
        ranges = parse_sqref(str(cf.sqref))
        if not ranges:
            continue
        values = _RangeValues(worksheet, ranges)
        for rule in cf.rules:
            handler = _RULE_HANDLERS.get(rule.type)
            if handler is None:
                logger.debug(f"Skipping unsupported conditional format type: {rule.type}")
                continue
            handler(overrides, rule, values)

    if overrides:
        logger.debug(f"Conditional formatting touched {len(overrides)} cells")
    return overrides
