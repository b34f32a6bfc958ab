import enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from office2pdf.ir.style import Color, ParagraphStyle, TextStyle


@dataclass
class Run:
    """
    A span of uniformly styled text.

    A run carrying only a ``footnote`` (empty ``text``) renders no inline
    text, only the footnote mark and body.
    """

    text: str
    style: TextStyle = field(default_factory=TextStyle)
    href: Optional[str] = None
    footnote: Optional[str] = None


@dataclass
class Paragraph:
    style: ParagraphStyle = field(default_factory=ParagraphStyle)
    runs: List[Run] = field(default_factory=list)

    def plain_text(self) -> str:
        return "".join(run.text for run in self.runs)


class BorderLineStyle(enum.Enum):
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"
    DOUBLE = "double"


@dataclass
class BorderSide:
    width: float
    color: Color
    style: BorderLineStyle = BorderLineStyle.SOLID


@dataclass
class CellBorder:
    top: Optional[BorderSide] = None
    bottom: Optional[BorderSide] = None
    left: Optional[BorderSide] = None
    right: Optional[BorderSide] = None

    def is_empty(self) -> bool:
        return (
            self.top is None
            and self.bottom is None
            and self.left is None
            and self.right is None
        )


@dataclass
class DataBarInfo:
    color: Color
    # 0..100
    fill_pct: float


@dataclass
class TableCell:
    """
    One grid cell.

    ``col_span`` / ``row_span`` of 0 mark a merge continuation: the slot is
    covered by an earlier cell and must not be rendered on its own.
    """

    content: List["Block"] = field(default_factory=list)
    col_span: int = 1
    row_span: int = 1
    border: Optional[CellBorder] = None
    background: Optional[Color] = None
    data_bar: Optional[DataBarInfo] = None
    icon_text: Optional[str] = None

    @property
    def is_continuation(self) -> bool:
        return self.col_span == 0 or self.row_span == 0


@dataclass
class TableRow:
    cells: List[TableCell] = field(default_factory=list)
    height: Optional[float] = None


@dataclass
class Table:
    rows: List[TableRow] = field(default_factory=list)
    column_widths: List[float] = field(default_factory=list)


class ImageFormat(enum.Enum):
    PNG = "png"
    JPEG = "jpeg"
    GIF = "gif"
    BMP = "bmp"
    TIFF = "tiff"
    SVG = "svg"

    @property
    def extension(self) -> str:
        return self.value


@dataclass
class ImageData:
    data: bytes
    format: ImageFormat
    # Display size in points, if known
    width: Optional[float] = None
    height: Optional[float] = None


class WrapMode(enum.Enum):
    SQUARE = "square"
    TIGHT = "tight"
    TOP_AND_BOTTOM = "top_and_bottom"
    BEHIND = "behind"
    IN_FRONT = "in_front"
    NONE = "none"


@dataclass
class FloatingImage:
    image: ImageData
    wrap_mode: WrapMode = WrapMode.SQUARE
    offset_x: float = 0.0
    offset_y: float = 0.0


class ListKind(enum.Enum):
    ORDERED = "ordered"
    UNORDERED = "unordered"


@dataclass
class ListItem:
    content: List[Paragraph] = field(default_factory=list)
    level: int = 0


@dataclass
class ListBlock:
    kind: ListKind
    items: List[ListItem] = field(default_factory=list)


@dataclass
class MathEquation:
    # Math notation without the surrounding $ delimiters
    content: str
    display: bool = True


class ChartType(enum.Enum):
    BAR = "bar"
    COLUMN = "column"
    LINE = "line"
    PIE = "pie"
    AREA = "area"
    SCATTER = "scatter"
    OTHER = "other"


@dataclass
class ChartSeries:
    name: Optional[str] = None
    values: List[float] = field(default_factory=list)


@dataclass
class Chart:
    chart_type: ChartType
    title: Optional[str] = None
    categories: List[str] = field(default_factory=list)
    series: List[ChartSeries] = field(default_factory=list)


@dataclass(frozen=True)
class PageBreak:
    pass


Block = Union[
    Paragraph,
    Table,
    ImageData,
    FloatingImage,
    ListBlock,
    MathEquation,
    Chart,
    PageBreak,
]


@dataclass(frozen=True)
class PageNumberField:
    pass


@dataclass
class HeaderFooterParagraph:
    style: ParagraphStyle = field(default_factory=ParagraphStyle)
    elements: List[Union[Run, PageNumberField]] = field(default_factory=list)


@dataclass
class HeaderFooter:
    paragraphs: List[HeaderFooterParagraph] = field(default_factory=list)


# Fixed-layout content


@dataclass(frozen=True)
class Rectangle:
    pass


@dataclass(frozen=True)
class Ellipse:
    pass


@dataclass(frozen=True)
class Line:
    # End point relative to the element origin, in points
    x2: float
    y2: float


@dataclass(frozen=True)
class RoundedRectangle:
    # Corner radius as a fraction of the shorter side
    radius_fraction: float = 0.16667


@dataclass(frozen=True)
class Polygon:
    # Vertices relative to the element origin, in points
    points: Tuple[Tuple[float, float], ...] = ()


ShapeKind = Union[Rectangle, Ellipse, Line, RoundedRectangle, Polygon]


@dataclass
class GradientStop:
    # 0.0 .. 1.0
    offset: float
    color: Color


@dataclass
class GradientFill:
    stops: List[GradientStop] = field(default_factory=list)
    # Degrees, clockwise from the x axis
    angle: Optional[float] = None


@dataclass
class Shadow:
    blur_radius: float
    distance: float
    # Degrees
    direction: float
    color: Color
    opacity: float = 1.0


@dataclass
class Shape:
    kind: ShapeKind = field(default_factory=Rectangle)
    fill: Optional[Color] = None
    gradient_fill: Optional[GradientFill] = None
    stroke: Optional[BorderSide] = None
    rotation_deg: Optional[float] = None
    # 0.0 .. 1.0
    opacity: Optional[float] = None
    shadow: Optional[Shadow] = None


@dataclass
class TextBox:
    content: List[Block] = field(default_factory=list)


@dataclass
class SmartArtNode:
    text: str
    depth: int = 0


@dataclass
class SmartArt:
    nodes: List[SmartArtNode] = field(default_factory=list)


FixedElementKind = Union[TextBox, ImageData, Shape, Table, SmartArt, Chart]


@dataclass
class FixedElement:
    x: float
    y: float
    width: float
    height: float
    kind: FixedElementKind
