"""Propose a stable replacement for a fragile locator."""

from __future__ import annotations

import re

from healcli.models.locator import LocatorStrategy, RecordedAction, StableLocator

_CLASS_PREDICATE = re.compile(r"@class\s*=")
_IDENTITY_PREDICATE = re.compile(
    r"@resource-id=|@content-desc=|@text="
    r"|contains\(@text|contains\(@resource-id|contains\(@content-desc"
)


def is_weak_class_only_xpath(locator: str | None) -> bool:
    """Whether an xpath pins its element down by widget class alone.

    Such xpaths match every widget of that class on the screen.

    Args:
        locator: Locator string, xpath or otherwise

    Returns:
        True for a ``//`` xpath with an ``@class=`` predicate and no
        resource-id, content-desc or text predicate
    """
    raw = (locator or "").strip()
    if not raw.startswith("//"):
        return False
    return bool(_CLASS_PREDICATE.search(raw)) and not _IDENTITY_PREDICATE.search(raw)


def _usable_xpath(xpath: str | None) -> str | None:
    raw = (xpath or "").strip()
    if raw.startswith("//") and not is_weak_class_only_xpath(raw):
        return raw
    return None


def derive_stable_locator(action: RecordedAction) -> StableLocator | None:
    """Best substitute locator from an action's element metadata.

    Tried in order: element id, content description, class-qualified text
    xpath, text, smart xpath, legacy xpath. Class-only xpaths are never offered.

    Args:
        action: Recorded action

    Returns:
        StableLocator, or None when the element must be captured again
    """
    if action.element_id:
        return StableLocator(action.element_id, LocatorStrategy.ID)
    if action.element_content_desc:
        return StableLocator(action.element_content_desc, LocatorStrategy.ACCESSIBILITY_ID)
    if action.element_text and action.element_class:
        return StableLocator(
            f'//{action.element_class}[normalize-space(@text)="{action.element_text}"]',
            LocatorStrategy.XPATH,
        )
    if action.element_text:
        return StableLocator(action.element_text, LocatorStrategy.TEXT)

    for xpath in (action.smart_xpath, action.xpath):
        usable = _usable_xpath(xpath)
        if usable:
            return StableLocator(usable, LocatorStrategy.XPATH)
    return None


def suggest_locator_fix(action: RecordedAction) -> StableLocator | None:
    """Stable locator for an action, or None when it already uses it."""
    stable = derive_stable_locator(action)
    if stable is None:
        return None
    if stable.value == action.locator and stable.strategy.value == action.locator_strategy:
        return None
    return stable
