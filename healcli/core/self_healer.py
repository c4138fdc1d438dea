"""Find a recorded step's element on a fresh screen.

Order: bundle primary, bundle fallbacks (highest score first), fuzzy match
against the recorded element metadata, then recorded coordinates.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Literal

from healcli.core.healing_engine import HealingTarget, LocatorHealingEngine
from healcli.core.locator_candidates import build_locator_candidates
from healcli.core.locator_resolver import find_node_for_locator
from healcli.core.ui_element_parser import parse_ui_nodes
from healcli.models.locator import LocatorCandidate, LocatorStrategy, Point, RecordedAction

logger = logging.getLogger("heal.self_healer")

ResolvedBy = Literal["primary", "fallback", "fuzzy", "coordinates"]

_COORDINATE_VALUE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*,\s*(\d+(?:\.\d+)?)\s*$")


@dataclass(frozen=True)
class Resolution:
    """Where a step's element was found and how."""

    point: Point
    resolved_by: ResolvedBy
    candidate: LocatorCandidate | None = None
    score: float = 0

    @property
    def healed(self) -> bool:
        """True when the primary locator did not resolve."""
        return self.resolved_by != "primary"


def _ordered_candidates(action: RecordedAction) -> list[LocatorCandidate]:
    bundle = action.locator_bundle
    if bundle is not None and bundle.primary is not None:
        fallbacks = sorted(bundle.fallbacks, key=lambda c: c.score, reverse=True)
        return [bundle.primary, *(c for c in fallbacks if c.key != bundle.primary.key)]
    return build_locator_candidates(action)


def _coordinate_point(value: str) -> Point | None:
    match = _COORDINATE_VALUE.match(value)
    if not match:
        return None
    return Point(round(float(match.group(1))), round(float(match.group(2))))


def resolve_action(
    action: RecordedAction,
    xml: str | None,
    engine: LocatorHealingEngine | None = None,
) -> Resolution | None:
    """Locate an action's element in a UI dump.

    Args:
        action: Recorded action, ideally with a locator bundle
        xml: uiautomator dump taken after the screen settled
        engine: Fuzzy matcher used when no locator resolves

    Returns:
        Resolution, or None when nothing locates the element
    """
    nodes = parse_ui_nodes(xml)
    candidates = _ordered_candidates(action)
    coordinates: LocatorCandidate | None = None

    if nodes:
        for i, candidate in enumerate(candidates):
            if candidate.strategy is LocatorStrategy.COORDINATES:
                coordinates = coordinates or candidate
                continue
            node = find_node_for_locator(nodes, candidate.value, candidate.strategy)
            center = node.center if node is not None else None
            if center is None:
                continue
            resolved_by: ResolvedBy = "primary" if i == 0 else "fallback"
            logger.debug(f"Resolved {action.id} by {resolved_by} {candidate.strategy}={candidate.value}")
            return Resolution(center, resolved_by, candidate, candidate.score)

        if engine is not None:
            match = engine.rank_best_match(HealingTarget.from_action(action), nodes)
            if match is not None and match.node.center is not None:
                logger.debug(f"Resolved {action.id} by fuzzy match (score {match.score})")
                return Resolution(match.node.center, "fuzzy", None, match.score)
    else:
        coordinates = next(
            (c for c in candidates if c.strategy is LocatorStrategy.COORDINATES), None
        )

    if coordinates is not None:
        point = _coordinate_point(coordinates.value)
        if point is not None:
            logger.debug(f"Resolved {action.id} by recorded coordinates")
            return Resolution(point, "coordinates", coordinates, coordinates.score)

    return None
