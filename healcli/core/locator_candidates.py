"""Ranked locator candidates for a recorded action.

Element identity (resource id, accessibility label) survives relayouts far
better than screen text, and text better than raw coordinates. Signals
captured live by the inspector outrank legacy recorded fields of the same kind.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from healcli.models.locator import (
    LocatorCandidate,
    LocatorSource,
    LocatorStrategy,
    RecordedAction,
)

logger = logging.getLogger("heal.locator_candidates")

# Score scale shared with severity badges and the critical-locator threshold
PRIMARY_DEFAULT_SCORE = 90
ELEMENT_ID_SCORE = 88
CONTENT_DESC_SCORE = 84
SMART_XPATH_SCORE = 74
LEGACY_XPATH_SCORE = 68
LEGACY_LOCATOR_SCORE = 65
FALLBACK_DEFAULT_SCORE = 60
ELEMENT_TEXT_SCORE = 56
COORDINATES_SCORE = 30

_COORDINATE_PAIR = re.compile(r"^\d+\s*,\s*\d+$")


def normalize_locator_strategy(strategy: str | None) -> LocatorStrategy | None:
    """Map a raw strategy string to a known strategy.

    Only the exact literals are accepted, so "XPATH" and "" give None.
    """
    return LocatorStrategy.from_raw(strategy)


def infer_locator_strategy(locator: str | None, explicit: str | None = None) -> LocatorStrategy:
    """Guess the strategy of a hand-edited locator.

    Args:
        locator: Locator value as typed by the user
        explicit: Strategy the user picked, if any

    Returns:
        The explicit strategy when valid, else a guess from the value's shape
    """
    normalized = normalize_locator_strategy(explicit)
    if normalized:
        return normalized
    raw = (locator or "").strip()
    if not raw or raw.startswith("//"):
        return LocatorStrategy.XPATH
    if _COORDINATE_PAIR.match(raw):
        return LocatorStrategy.COORDINATES
    return LocatorStrategy.ID


def format_coordinate(value: Any) -> str:
    """Render a coordinate without a trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


class _CandidateList:
    """Insertion-ordered candidates, unique by (strategy, value)."""

    def __init__(self) -> None:
        self._items: list[LocatorCandidate] = []
        self._keys: set[tuple[LocatorStrategy, str]] = set()

    def add(
        self,
        strategy: LocatorStrategy,
        value: str | None,
        score: float,
        source: LocatorSource,
        reason: str | None = None,
    ) -> None:
        cleaned = (value or "").strip()
        if not cleaned:
            return
        key = (strategy, cleaned)
        if key in self._keys:
            return
        self._keys.add(key)
        self._items.append(LocatorCandidate(strategy, cleaned, score, source, reason))

    def ranked(self) -> list[LocatorCandidate]:
        # sorted() is stable, so equal scores keep insertion order
        return sorted(self._items, key=lambda c: c.score, reverse=True)


def build_locator_candidates(action: RecordedAction) -> list[LocatorCandidate]:
    """Collect every locator signal on an action, deduplicated and ranked.

    Insertion order decides which duplicate survives: explicit bundle primary,
    bundle fallbacks, legacy locator field, smart xpath, legacy xpath, element
    id, content description, element text, coordinates.

    Args:
        action: Recorded action with any subset of locator fields

    Returns:
        Candidates sorted by score, highest first
    """
    candidates = _CandidateList()
    bundle = action.locator_bundle

    if bundle is not None:
        primary = bundle.primary
        if primary is not None and primary.value:
            candidates.add(
                primary.strategy,
                primary.value,
                primary.score or PRIMARY_DEFAULT_SCORE,
                primary.source or "inspector",
                primary.reason,
            )
        for fallback in bundle.fallbacks:
            candidates.add(
                fallback.strategy,
                fallback.value,
                fallback.score or FALLBACK_DEFAULT_SCORE,
                fallback.source or "legacy",
                fallback.reason,
            )

    legacy_strategy = normalize_locator_strategy(action.locator_strategy)
    if legacy_strategy and action.locator:
        candidates.add(legacy_strategy, action.locator, LEGACY_LOCATOR_SCORE, "legacy")

    candidates.add(LocatorStrategy.XPATH, action.smart_xpath, SMART_XPATH_SCORE, "inspector")
    candidates.add(LocatorStrategy.XPATH, action.xpath, LEGACY_XPATH_SCORE, "legacy")
    candidates.add(LocatorStrategy.ID, action.element_id, ELEMENT_ID_SCORE, "inspector")
    candidates.add(
        LocatorStrategy.ACCESSIBILITY_ID,
        action.element_content_desc,
        CONTENT_DESC_SCORE,
        "inspector",
    )
    candidates.add(LocatorStrategy.TEXT, action.element_text, ELEMENT_TEXT_SCORE, "inspector")

    coords = action.coordinates
    if coords is not None and coords.is_point:
        candidates.add(
            LocatorStrategy.COORDINATES,
            f"{format_coordinate(coords.x)},{format_coordinate(coords.y)}",
            COORDINATES_SCORE,
            "legacy",
        )

    ranked = candidates.ranked()
    logger.debug(f"Built {len(ranked)} candidates for {action.type}:{action.id}")
    return ranked
