"""Locator data models.

Recorded actions arrive from the recorder as camelCase JSON. These records are
the typed, immutable view of that JSON used by the core; ``from_dict`` and
``to_dict`` translate at the boundary so unknown keys survive a round trip.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Literal, NamedTuple

LocatorSource = Literal["inspector", "legacy"]

# Action types that must carry a locator bundle
LOCATOR_REQUIRED_ACTIONS = frozenset({"tap", "input", "longPress", "assert"})


class LocatorStrategy(StrEnum):
    """How a locator value identifies an element."""

    ID = "id"
    ACCESSIBILITY_ID = "accessibilityId"
    TEXT = "text"
    XPATH = "xpath"
    COORDINATES = "coordinates"
    ANDROID_UI_AUTOMATOR = "androidUiAutomator"

    @classmethod
    def from_raw(cls, raw: Any) -> LocatorStrategy | None:
        """Parse an exact strategy literal, ignoring surrounding whitespace."""
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip())
        except ValueError:
            return None


class Point(NamedTuple):
    """Screen point in device pixels."""

    x: int
    y: int


class StableLocator(NamedTuple):
    """Locator proposed as a replacement for a fragile one."""

    value: str
    strategy: LocatorStrategy


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class LocatorCandidate:
    """One way of finding an element, with its priority score.

    Attributes:
        strategy: Identification method
        value: Literal locator value (id, label, text, xpath or "x,y")
        score: Priority, higher is more reliable (0 means unscored)
        source: "inspector" for live inspection, "legacy" for old recorded fields
        reason: Optional explanation from the inspector
    """

    strategy: LocatorStrategy
    value: str
    score: float = 0
    source: LocatorSource | None = None
    reason: str | None = None

    @property
    def key(self) -> tuple[LocatorStrategy, str]:
        """Identity used for deduplication."""
        return (self.strategy, self.value)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "strategy": self.strategy.value,
            "value": self.value,
            "score": self.score,
        }
        if self.source:
            data["source"] = self.source
        if self.reason:
            data["reason"] = self.reason
        return data

    @classmethod
    def from_dict(cls, data: Any) -> LocatorCandidate | None:
        """Build a candidate from recorder JSON.

        Returns:
            Candidate, or None when the strategy is unknown or the value is empty
        """
        if not isinstance(data, dict):
            return None
        strategy = LocatorStrategy.from_raw(data.get("strategy"))
        value = _as_str(data.get("value")).strip()
        if strategy is None or not value:
            return None
        score = data.get("score")
        source = data.get("source")
        return cls(
            strategy=strategy,
            value=value,
            score=score if _is_number(score) else 0,
            source=source if source in ("inspector", "legacy") else None,
            reason=data.get("reason") or None,
        )


@dataclass(frozen=True)
class LocatorBundle:
    """Primary locator plus ordered fallbacks for one logical element."""

    fingerprint: str
    primary: LocatorCandidate | None
    fallbacks: tuple[LocatorCandidate, ...] = ()
    version: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "fingerprint": self.fingerprint,
            "primary": self.primary.to_dict() if self.primary else None,
            "fallbacks": [c.to_dict() for c in self.fallbacks],
        }

    @classmethod
    def from_dict(cls, data: Any) -> LocatorBundle | None:
        if not isinstance(data, dict):
            return None
        raw_fallbacks = data.get("fallbacks")
        fallbacks: list[LocatorCandidate] = []
        if isinstance(raw_fallbacks, list):
            for item in raw_fallbacks:
                candidate = LocatorCandidate.from_dict(item)
                if candidate is not None:
                    fallbacks.append(candidate)
        version = data.get("version")
        return cls(
            fingerprint=_as_str(data.get("fingerprint")),
            primary=LocatorCandidate.from_dict(data.get("primary")),
            fallbacks=tuple(fallbacks),
            version=version if isinstance(version, int) else 1,
        )


@dataclass(frozen=True)
class Coordinates:
    """Tap position, or swipe start and end."""

    x: float | None = None
    y: float | None = None
    end_x: float | None = None
    end_y: float | None = None

    @property
    def is_point(self) -> bool:
        """True when both x and y are numbers."""
        return _is_number(self.x) and _is_number(self.y)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"x": self.x, "y": self.y}
        if self.end_x is not None:
            data["endX"] = self.end_x
        if self.end_y is not None:
            data["endY"] = self.end_y
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Coordinates | None:
        if not isinstance(data, dict):
            return None
        return cls(
            x=data.get("x"),
            y=data.get("y"),
            end_x=data.get("endX"),
            end_y=data.get("endY"),
        )


# camelCase JSON key -> RecordedAction attribute, for plain string fields
_STRING_FIELDS = {
    "id": "id",
    "type": "type",
    "description": "description",
    "locator": "locator",
    "locatorStrategy": "locator_strategy",
    "value": "value",
    "elementId": "element_id",
    "elementText": "element_text",
    "elementClass": "element_class",
    "elementContentDesc": "element_content_desc",
    "xpath": "xpath",
    "smartXPath": "smart_xpath",
    "elementFingerprint": "element_fingerprint",
}

_KNOWN_KEYS = frozenset(_STRING_FIELDS) | {
    "enabled",
    "coordinates",
    "locatorBundle",
    "reliabilityScore",
}


@dataclass(frozen=True)
class RecordedAction:
    """A single recorded interaction or manually added step.

    Only tap, input, longPress and assert need a locator. Fields not used by
    the locator core are kept verbatim in ``extra``.
    """

    id: str = ""
    type: str = ""
    description: str = ""
    locator: str = ""
    locator_strategy: str = ""
    value: str | None = None
    enabled: bool = True

    # Element metadata captured by the inspector
    element_id: str | None = None
    element_text: str | None = None
    element_class: str | None = None
    element_content_desc: str | None = None
    xpath: str | None = None
    smart_xpath: str | None = None
    element_fingerprint: str | None = None
    reliability_score: float | None = None

    coordinates: Coordinates | None = None
    locator_bundle: LocatorBundle | None = None

    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def requires_locator(self) -> bool:
        """Whether this action type needs a locator bundle."""
        return self.type in LOCATOR_REQUIRED_ACTIONS

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(self.extra)
        for key, attr in _STRING_FIELDS.items():
            value = getattr(self, attr)
            if value is not None and (value != "" or key in ("id", "type", "locator")):
                data[key] = value
        if not self.enabled:
            data["enabled"] = False
        if self.reliability_score is not None:
            data["reliabilityScore"] = self.reliability_score
        if self.coordinates is not None:
            data["coordinates"] = self.coordinates.to_dict()
        if self.locator_bundle is not None:
            data["locatorBundle"] = self.locator_bundle.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecordedAction:
        """Build an action from recorder JSON.

        Args:
            data: camelCase action mapping as saved by the recorder

        Returns:
            RecordedAction with unknown keys preserved in ``extra``
        """
        kwargs: dict[str, Any] = {}
        for key, attr in _STRING_FIELDS.items():
            value = data.get(key)
            if value is None:
                continue
            kwargs[attr] = value if isinstance(value, str) else str(value)

        score = data.get("reliabilityScore")
        return cls(
            **kwargs,
            enabled=data.get("enabled") is not False,
            reliability_score=score if _is_number(score) else None,
            coordinates=Coordinates.from_dict(data.get("coordinates")),
            locator_bundle=LocatorBundle.from_dict(data.get("locatorBundle")),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )


@dataclass(frozen=True)
class LocatorInsight:
    """Explanation and fix for a step whose locator is critically weak."""

    step_index: int
    score: float
    title: str
    issue: str
    resolution: str
    suggested_locator: str | None = None
