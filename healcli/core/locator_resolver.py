"""Re-resolve a stored locator against a fresh UI hierarchy dump."""

from __future__ import annotations

import logging

from healcli.core.ui_element_parser import UINode, parse_ui_nodes
from healcli.core.xpath_filter import parse_xpath_filter
from healcli.models.locator import LocatorStrategy, Point

logger = logging.getLogger("heal.locator_resolver")

# Strategies that map to a single node attribute compared for equality
_ATTRIBUTE_BY_STRATEGY = {
    LocatorStrategy.ID: "resource-id",
    LocatorStrategy.ACCESSIBILITY_ID: "content-desc",
    LocatorStrategy.TEXT: "text",
}


def find_node_for_locator(
    nodes: list[UINode],
    locator: str,
    strategy: LocatorStrategy | str | None,
) -> UINode | None:
    """First node matched by a locator.

    Args:
        nodes: Parsed hierarchy nodes, in document order
        locator: Locator value
        strategy: id, accessibilityId, text or xpath; others never match

    Returns:
        First matching node, or None
    """
    resolved = LocatorStrategy.from_raw(strategy)

    if resolved in _ATTRIBUTE_BY_STRATEGY:
        attribute = _ATTRIBUTE_BY_STRATEGY[resolved]
        return next((n for n in nodes if n.get(attribute) == locator), None)

    if resolved is LocatorStrategy.XPATH:
        xpath_filter = parse_xpath_filter(locator)
        return next((n for n in nodes if xpath_filter.matches(n.attrs)), None)

    logger.debug(f"Strategy {strategy!r} cannot be resolved against a dump")
    return None


def find_center_from_locator(
    xml: str | None,
    locator: str,
    strategy: LocatorStrategy | str | None,
) -> Point | None:
    """Center of the first node in ``xml`` matching the locator.

    Args:
        xml: uiautomator dump taken after the screen settled
        locator: Locator value
        strategy: Locator strategy

    Returns:
        Bounds center of the matching node, or None when nothing matches,
        the dump has no nodes, or the node's bounds are malformed
    """
    nodes = parse_ui_nodes(xml)
    if not nodes:
        logger.debug("No nodes in UI dump")
        return None

    node = find_node_for_locator(nodes, locator, strategy)
    if node is None:
        return None
    return node.center
