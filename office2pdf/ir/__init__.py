"""
Unified document model shared by all format parsers and the markup generator.

A parser builds one ``Document`` per input; the generator reads it once. The
model is never mutated after construction. All geometry is in points.
"""

from office2pdf.ir.document import (
    ConversionWarning,
    Document,
    FixedPage,
    FlowPage,
    Margins,
    Metadata,
    Page,
    PageSize,
    TablePage,
)
from office2pdf.ir.elements import (
    Block,
    BorderLineStyle,
    BorderSide,
    CellBorder,
    Chart,
    ChartSeries,
    ChartType,
    DataBarInfo,
    Ellipse,
    FixedElement,
    FixedElementKind,
    FloatingImage,
    GradientFill,
    GradientStop,
    HeaderFooter,
    HeaderFooterParagraph,
    ImageData,
    ImageFormat,
    Line,
    ListBlock,
    ListItem,
    ListKind,
    MathEquation,
    PageBreak,
    PageNumberField,
    Paragraph,
    Polygon,
    Rectangle,
    RoundedRectangle,
    Run,
    Shadow,
    Shape,
    ShapeKind,
    SmartArt,
    SmartArtNode,
    Table,
    TableCell,
    TableRow,
    TextBox,
    WrapMode,
)
from office2pdf.ir.style import (
    Alignment,
    Color,
    Exact,
    LineSpacing,
    NamedStyle,
    ParagraphStyle,
    Proportional,
    StyleSheet,
    TextStyle,
)

__all__ = [
    "Alignment",
    "Block",
    "BorderLineStyle",
    "BorderSide",
    "CellBorder",
    "Chart",
    "ChartSeries",
    "ChartType",
    "Color",
    "ConversionWarning",
    "DataBarInfo",
    "Document",
    "Ellipse",
    "Exact",
    "FixedElement",
    "FixedElementKind",
    "FixedPage",
    "FloatingImage",
    "FlowPage",
    "GradientFill",
    "GradientStop",
    "HeaderFooter",
    "HeaderFooterParagraph",
    "ImageData",
    "ImageFormat",
    "Line",
    "LineSpacing",
    "ListBlock",
    "ListItem",
    "ListKind",
    "Margins",
    "MathEquation",
    "Metadata",
    "NamedStyle",
    "Page",
    "PageBreak",
    "PageNumberField",
    "PageSize",
    "Paragraph",
    "ParagraphStyle",
    "Polygon",
    "Proportional",
    "Rectangle",
    "RoundedRectangle",
    "Run",
    "Shadow",
    "Shape",
    "ShapeKind",
    "SmartArt",
    "SmartArtNode",
    "StyleSheet",
    "Table",
    "TableCell",
    "TablePage",
    "TableRow",
    "TextBox",
    "TextStyle",
    "WrapMode",
]
