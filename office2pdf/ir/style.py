import enum
from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int

    @classmethod
    def black(cls) -> "Color":
        return cls(0, 0, 0)

    @classmethod
    def white(cls) -> "Color":
        return cls(255, 255, 255)

    @classmethod
    def from_hex(cls, value: str) -> Optional["Color"]:
        """Parse ``RRGGBB`` (optionally prefixed with ``#``); None if invalid."""
        if not value:
            return None
        value = value.strip().lstrip("#")
        if len(value) != 6:
            return None
        try:
            return cls(int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))
        except ValueError:
            return None

    def to_hex(self) -> str:
        return f"{self.r:02x}{self.g:02x}{self.b:02x}"


class Alignment(enum.Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"


@dataclass(frozen=True)
class Proportional:
    """Line height as a multiple of the nominal single line."""

    factor: float


@dataclass(frozen=True)
class Exact:
    """Line height as a literal length in points."""

    points: float


LineSpacing = Union[Proportional, Exact]


@dataclass
class ParagraphStyle:
    alignment: Optional[Alignment] = None
    indent_left: Optional[float] = None
    indent_right: Optional[float] = None
    indent_first_line: Optional[float] = None
    line_spacing: Optional[LineSpacing] = None
    space_before: Optional[float] = None
    space_after: Optional[float] = None
    heading_level: Optional[int] = None


@dataclass
class TextStyle:
    font_family: Optional[str] = None
    font_size: Optional[float] = None
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None
    strikethrough: Optional[bool] = None
    color: Optional[Color] = None


@dataclass
class NamedStyle:
    id: str
    name: str
    paragraph: Optional[ParagraphStyle] = None
    text: Optional[TextStyle] = None


@dataclass
class StyleSheet:
    # Not consumed by the generator yet; parsers resolve styles inline.
    styles: List[NamedStyle] = field(default_factory=list)
