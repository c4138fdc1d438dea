"""Attribute filter for the small XPath subset recorded locators use.

Understood:
- a leading ``//ClassName`` segment
- ``@attr="value"`` equality predicates
- ``contains(@attr, "value")`` substring predicates

Anything else (axes, positions, ``or``, single-quoted literals) is not
extracted and so does not filter. A ``//*[...]`` expression has no class
segment.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field

_CLASS_PATTERN = re.compile(r"^//([a-zA-Z0-9._]+)")
_EQUALS_PATTERN = re.compile(r'@([a-zA-Z-]+)\s*=\s*"([^"]*)"')
_CONTAINS_PATTERN = re.compile(r'contains\(\s*@([a-zA-Z-]+)\s*,\s*"([^"]*)"\s*\)')


@dataclass(frozen=True)
class XPathFilter:
    """Predicates extracted from an XPath expression.

    Attributes:
        class_name: Required ``class`` attribute, empty for any class
        equals: Attributes that must match exactly
        contains: Attributes that must contain the value
    """

    class_name: str = ""
    equals: dict[str, str] = field(default_factory=dict)
    contains: dict[str, str] = field(default_factory=dict)

    def matches(self, attrs: Mapping[str, str]) -> bool:
        """Evaluate against a node's attribute map."""
        if self.class_name and attrs.get("class", "") != self.class_name:
            return False
        for name, value in self.equals.items():
            if attrs.get(name, "") != value:
                return False
        for name, value in self.contains.items():
            if value not in attrs.get(name, ""):
                return False
        return True


def parse_xpath_filter(xpath: str | None) -> XPathFilter:
    """Extract the supported predicates from an XPath expression.

    Later predicates on the same attribute replace earlier ones.

    Args:
        xpath: Expression such as ``//android.widget.Button[@text="OK"]``

    Returns:
        XPathFilter; an empty filter matches every node
    """
    raw = (xpath or "").strip()
    class_match = _CLASS_PATTERN.match(raw)
    return XPathFilter(
        class_name=class_match.group(1) if class_match else "",
        equals=dict(_EQUALS_PATTERN.findall(raw)),
        contains=dict(_CONTAINS_PATTERN.findall(raw)),
    )
