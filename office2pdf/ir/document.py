from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from office2pdf.ir.elements import (
    Block,
    Chart,
    FixedElement,
    GradientFill,
    HeaderFooter,
    Table,
)
from office2pdf.ir.style import Color, StyleSheet


@dataclass
class Metadata:
    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    description: Optional[str] = None
    created: Optional[str] = None
    modified: Optional[str] = None


@dataclass
class PageSize:
    # A4 in points
    width: float = 595.28
    height: float = 841.89

    @property
    def is_landscape(self) -> bool:
        return self.width > self.height


@dataclass
class Margins:
    top: float = 72.0
    bottom: float = 72.0
    left: float = 72.0
    right: float = 72.0


@dataclass
class FlowPage:
    size: PageSize = field(default_factory=PageSize)
    margins: Margins = field(default_factory=Margins)
    content: List[Block] = field(default_factory=list)
    header: Optional[HeaderFooter] = None
    footer: Optional[HeaderFooter] = None


@dataclass
class FixedPage:
    size: PageSize = field(default_factory=PageSize)
    elements: List[FixedElement] = field(default_factory=list)
    background_color: Optional[Color] = None
    # Takes precedence over background_color when both are set
    background_gradient: Optional[GradientFill] = None


@dataclass
class TablePage:
    name: str
    size: PageSize = field(default_factory=PageSize)
    margins: Margins = field(default_factory=Margins)
    table: Table = field(default_factory=Table)
    header: Optional[HeaderFooter] = None
    footer: Optional[HeaderFooter] = None
    # (anchor_row, chart): chart goes after the 1-indexed anchor row
    charts: List[Tuple[int, Chart]] = field(default_factory=list)


Page = Union[FlowPage, FixedPage, TablePage]


@dataclass
class Document:
    metadata: Metadata = field(default_factory=Metadata)
    pages: List[Page] = field(default_factory=list)
    styles: StyleSheet = field(default_factory=StyleSheet)


@dataclass(frozen=True)
class ConversionWarning:
    """One skipped or degraded element."""

    element: str
    reason: str

    def __str__(self) -> str:
        return f"{self.element}: {self.reason}"
