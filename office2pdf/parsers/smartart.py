"""
SmartArt Diagram Parser
=======================

Turns a diagram data part (``ppt/diagrams/data1.xml``) into an ordered list
of ``SmartArtNode(text, depth)``.

File Format Background
----------------------
A diagram data part is a flat graph, not a tree:

    dgm:ptLst/dgm:pt       points; ``type`` defaults to ``node``, the text
                           lives in ``dgm:t//a:t``
    dgm:cxnLst/dgm:cxn     connections; ``type`` defaults to ``parOf`` and
                           links ``srcId`` (parent) to ``destId`` (child)

The ``doc`` point is the root. ``pres``, ``parTrans`` and ``sibTrans`` points
only carry layout and transition data and never show up as content.

The slide references the data part from a ``p:graphicFrame`` through
``dgm:relIds/@r:dm``.

Known Limitations
-----------------
- The drawing part (``drawing1.xml``) with pre-rendered shapes is ignored;
  diagrams are rendered as an indented list
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional
from xml.etree import ElementTree as ET

from office2pdf.ir import SmartArtNode
from office2pdf.parsers.util.xml_events import START, get_attr, iter_events

logger = logging.getLogger(__name__)

SKIPPED_POINT_TYPES = frozenset(("doc", "pres", "parTrans", "sibTrans"))


@dataclass
class _Point:
    model_id: str
    type: str
    text: str
    order: int


class _DataModelParser:
    """State machine collecting points and parent-of connections."""

    def __init__(self) -> None:
        self.points: list[_Point] = []
        self.connections: list[tuple[str, str]] = []

        self._point: Optional[_Point] = None
        self._point_depth = 0
        self._in_text_body = False
        self._text_body_elem: Optional[ET.Element] = None
        self._text_parts: list[str] = []

    def feed(self, event: str, name: str, elem: ET.Element) -> None:
        if event == START:
            self._on_start(name, elem)
        else:
            self._on_end(name, elem)

    def _on_start(self, name: str, elem: ET.Element) -> None:
        if name == "pt":
            if self._point is None:
                self._point = _Point(
                    model_id=get_attr(elem, "modelId") or "",
                    type=get_attr(elem, "type") or "node",
                    text="",
                    order=len(self.points),
                )
                self._text_parts = []
                self._point_depth = 0
            self._point_depth += 1
        elif name == "t" and self._point is not None and not self._in_text_body:
            # dgm:t is the text body; the a:t elements inside carry the text
            self._in_text_body = True
            self._text_body_elem = elem
        elif name == "cxn":
            if (get_attr(elem, "type") or "parOf") == "parOf":
                src = get_attr(elem, "srcId")
                dest = get_attr(elem, "destId")
                if src and dest:
                    self.connections.append((src, dest))

    def _on_end(self, name: str, elem: ET.Element) -> None:
        if self._point is None:
            return
        if name == "t" and self._in_text_body:
            if elem is self._text_body_elem:
                self._in_text_body = False
            else:
                self._text_parts.append(elem.text or "")
        elif name == "p" and self._in_text_body and self._text_parts:
            # Paragraph boundary inside the node text
            self._text_parts.append(" ")
        elif name == "pt":
            self._point_depth -= 1
            if self._point_depth == 0:
                self._point.text = "".join(self._text_parts).strip()
                self.points.append(self._point)
                self._point = None
                self._in_text_body = False


def _build_nodes(points: list[_Point], connections: list[tuple[str, str]]) -> list[SmartArtNode]:
    by_id = {p.model_id: p for p in points if p.model_id}
    children: dict[str, list[_Point]] = {}
    has_parent: set[str] = set()
    for src, dest in connections:
        if src not in by_id or dest not in by_id or src == dest:
            continue
        children.setdefault(src, []).append(by_id[dest])
        has_parent.add(dest)
    for kids in children.values():
        kids.sort(key=lambda p: p.order)

    doc = next((p for p in points if p.type == "doc"), None)
    if doc is not None:
        roots = [doc]
    else:
        roots = [p for p in points if p.model_id not in has_parent]

    nodes: list[SmartArtNode] = []
    visited: set[int] = set()
    # (point, depth of the point if it is content)
    queue: deque[tuple[_Point, int]] = deque()
    for root in roots:
        queue.append((root, 0))

    while queue:
        point, depth = queue.popleft()
        if point.order in visited:
            continue
        visited.add(point.order)

        is_content = point.type not in SKIPPED_POINT_TYPES
        if is_content and point.text:
            nodes.append(SmartArtNode(text=point.text, depth=depth))
        child_depth = depth + 1 if is_content else depth
        for child in children.get(point.model_id, []):
            if child.order not in visited:
                queue.append((child, child_depth))

    # Orphans that no connection reaches
    for point in points:
        if point.order in visited:
            continue
        if point.type in SKIPPED_POINT_TYPES or not point.text:
            continue
        nodes.append(SmartArtNode(text=point.text, depth=0))

    return nodes


def parse_smartart_data(xml: bytes | str) -> list[SmartArtNode]:
    """
    Parse a diagram data part into content nodes.

    Args:
        xml: Content of ``ppt/diagrams/dataN.xml``.

    Returns:
        Nodes in breadth-first order from the root. Structural points and
        points with empty text are omitted.
    """
    parser = _DataModelParser()
    for event, name, elem in iter_events(xml):
        parser.feed(event, name, elem)
    nodes = _build_nodes(parser.points, parser.connections)
    logger.debug(
        f"Parsed diagram: {len(parser.points)} points, {len(nodes)} content nodes"
    )
    return nodes
