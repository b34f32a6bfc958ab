"""Unit conversions from the native OOXML units to points."""

from __future__ import annotations

# Twips (twentieths of a point) are used throughout WordprocessingML
TWIPS_PER_POINT = 20.0
# EMU (English Metric Units): 914400 EMU = 1 inch = 72 pt
EMU_PER_POINT = 12700.0
EMU_PER_INCH = 914400

# 10 x 7.5 inches, the classic 4:3 slide
DEFAULT_SLIDE_WIDTH_EMU = 9144000
DEFAULT_SLIDE_HEIGHT_EMU = 6858000

# Spreadsheet character-width units -> points, empirically
EXCEL_WIDTH_TO_POINTS = 7.0
DEFAULT_EXCEL_COLUMN_WIDTH = 8.43

# DrawingML angles and percentages
ANGLE_UNITS_PER_DEGREE = 60000.0
PERCENT_UNITS = 100000.0

# Images without an explicit extent are laid out at 96 dpi
POINTS_PER_PIXEL = 0.75


def twips_to_pt(value: float) -> float:
    return value / TWIPS_PER_POINT


def emu_to_pt(value: float) -> float:
    return value / EMU_PER_POINT


def half_points_to_pt(value: float) -> float:
    return value / 2.0


def hundredths_to_pt(value: float) -> float:
    return value / 100.0


def eighths_to_pt(value: float) -> float:
    return value / 8.0


def inches_to_pt(value: float) -> float:
    return value * 72.0


def excel_width_to_pt(width: float) -> float:
    return width * EXCEL_WIDTH_TO_POINTS


def pixels_to_pt(value: float) -> float:
    return value * POINTS_PER_PIXEL


def parse_int(value: str | None, default: int | None = None) -> int | None:
    """Lenient integer parsing for XML attributes (``"1440"``, ``"12.0"``)."""
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        try:
            return int(float(value))
        except (ValueError, OverflowError):
            return default


def parse_float(value: str | None, default: float | None = None) -> float | None:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default
