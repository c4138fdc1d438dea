"""Data models for heal."""

from healcli.models.locator import (
    LOCATOR_REQUIRED_ACTIONS,
    Coordinates,
    LocatorBundle,
    LocatorCandidate,
    LocatorInsight,
    LocatorStrategy,
    Point,
    RecordedAction,
    StableLocator,
)

__all__ = [
    "LOCATOR_REQUIRED_ACTIONS",
    "Coordinates",
    "LocatorBundle",
    "LocatorCandidate",
    "LocatorInsight",
    "LocatorStrategy",
    "Point",
    "RecordedAction",
    "StableLocator",
]
