"""Parse UI nodes from uiautomator XML dumps.

Only the flat ``<node attr="value" ... />`` token form is recognized. Container
nodes written as ``<node ...>...</node>`` are skipped; their self-closing
descendants are still found.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from xml.sax.saxutils import unescape

from healcli.models.locator import Point

_NODE_PATTERN = re.compile(r"<node\b([^>]*)/>")
_ATTR_PATTERN = re.compile(r'([a-zA-Z0-9_:-]+)="([^"]*)"')
_BOUNDS_PATTERN = re.compile(r"\[(\d+),(\d+)\]\[(\d+),(\d+)\]")

_ENTITIES = {"&quot;": '"', "&apos;": "'"}


def parse_bounds(bounds: str | None) -> tuple[int, int, int, int] | None:
    """Parse bounds string to tuple.

    Args:
        bounds: Format "[left,top][right,bottom]"

    Returns:
        Tuple of (left, top, right, bottom), or None if malformed
    """
    match = _BOUNDS_PATTERN.search(bounds or "")
    if not match:
        return None
    left, top, right, bottom = (int(g) for g in match.groups())
    return (left, top, right, bottom)


def bounds_center_from_string(bounds: str | None) -> Point | None:
    """Center of a bounds string, rounded half up.

    >>> bounds_center_from_string("[10,20][30,40]")
    Point(x=20, y=30)
    """
    rect = parse_bounds(bounds)
    if rect is None:
        return None
    left, top, right, bottom = rect
    # (n + 1) // 2 rounds n / 2 half up for non-negative n
    return Point((left + right + 1) // 2, (top + bottom + 1) // 2)


@dataclass(frozen=True)
class UINode:
    """Attributes of one node from a uiautomator dump."""

    attrs: dict[str, str]
    index: int = 0

    def get(self, name: str) -> str:
        """Attribute value, empty string when absent."""
        return self.attrs.get(name, "")

    @property
    def resource_id(self) -> str:
        return self.get("resource-id")

    @property
    def content_desc(self) -> str:
        return self.get("content-desc")

    @property
    def text(self) -> str:
        return self.get("text")

    @property
    def class_name(self) -> str:
        return self.get("class")

    @property
    def bounds(self) -> tuple[int, int, int, int] | None:
        return parse_bounds(self.attrs.get("bounds"))

    @property
    def center(self) -> Point | None:
        return bounds_center_from_string(self.attrs.get("bounds"))

    def contains_point(self, x: int, y: int) -> bool:
        """Check if point is within element bounds."""
        if self.bounds is None:
            return False
        left, top, right, bottom = self.bounds
        return left <= x <= right and top <= y <= bottom

    def area(self) -> int:
        """Calculate element area."""
        if self.bounds is None:
            return 0
        left, top, right, bottom = self.bounds
        return max(0, right - left) * max(0, bottom - top)

    def to_metadata(self) -> dict[str, str]:
        """Element metadata in the shape the inspector reports it."""
        return {
            "resourceId": self.resource_id,
            "contentDesc": self.content_desc,
            "text": self.text,
            "class": self.class_name,
            "bounds": self.get("bounds"),
        }


def parse_node_attributes(tag_text: str) -> dict[str, str]:
    """Extract ``key="value"`` pairs from the inside of one tag."""
    return {
        name: unescape(value, _ENTITIES)
        for name, value in _ATTR_PATTERN.findall(tag_text)
    }


def parse_ui_nodes(xml: str | None) -> list[UINode]:
    """Scan a dump for self-closing ``<node .../>`` elements.

    Args:
        xml: uiautomator hierarchy dump

    Returns:
        Nodes in document order, empty if nothing matched
    """
    if not xml:
        return []
    return [
        UINode(attrs=parse_node_attributes(match.group(1)), index=i)
        for i, match in enumerate(_NODE_PATTERN.finditer(xml))
    ]


class UIElementParser:
    """Parse uiautomator XML dumps to find UI nodes."""

    def parse_xml_file(self, path: Path) -> list[UINode]:
        """Parse XML file to list of UI nodes.

        Args:
            path: Path to XML file

        Returns:
            List of UINode objects
        """
        return parse_ui_nodes(path.read_text(encoding="utf-8", errors="replace"))

    def parse_xml_string(self, xml_string: str) -> list[UINode]:
        """Parse XML string to list of UI nodes."""
        return parse_ui_nodes(xml_string)

    def find_node_at(
        self,
        nodes: list[UINode],
        x: int,
        y: int,
    ) -> UINode | None:
        """Find the smallest node containing the point.

        Args:
            nodes: List of UI nodes
            x: X coordinate
            y: Y coordinate

        Returns:
            Smallest node containing point, or None
        """
        matching = [n for n in nodes if n.contains_point(x, y)]
        if not matching:
            return None

        # Return smallest node (most specific)
        return min(matching, key=lambda n: n.area())
