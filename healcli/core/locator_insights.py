"""Flag recorded steps whose locators are likely to break on replay."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from healcli.core.stable_locator import derive_stable_locator
from healcli.models.locator import LocatorInsight, LocatorStrategy, RecordedAction

logger = logging.getLogger("heal.locator_insights")

# Scores at or below this mark a critical locator
CRITICAL_LOCATOR_THRESHOLD = 10

# Assumed reliability when the agent did not score the locator
STABLE_LOCATOR_SCORE = 70
UNSTABLE_LOCATOR_SCORE = 35


def has_stable_locator(action: RecordedAction) -> bool:
    """Whether anything other than raw coordinates can find the element."""
    bundle = action.locator_bundle
    if bundle is not None:
        if bundle.primary is not None and bundle.primary.value:
            return True
        if any(c.value for c in bundle.fallbacks):
            return True
    if action.element_id or action.element_content_desc or action.element_text:
        return True
    if action.smart_xpath or action.xpath:
        return True
    if action.locator and action.locator_strategy and action.locator_strategy != LocatorStrategy.COORDINATES:
        return True
    return bool(action.locator) and action.locator.startswith("//")


def get_locator_score(action: RecordedAction) -> float:
    """Reliability score reported by the agent, or an estimate."""
    if action.reliability_score is not None:
        return action.reliability_score
    return STABLE_LOCATOR_SCORE if has_stable_locator(action) else UNSTABLE_LOCATOR_SCORE


def build_contextual_xpath(action: RecordedAction) -> str | None:
    """Xpath built from element metadata, most specific signal first."""
    cls = (action.element_class or "").strip()
    txt = (action.element_text or "").strip()
    a11y = (action.element_content_desc or "").strip()
    rid = (action.element_id or "").strip()

    if rid:
        return f'//*[@resource-id="{rid}"]'
    if cls and a11y:
        return f'//{cls}[@content-desc="{a11y}"]'
    if cls and txt:
        return f'//{cls}[normalize-space(@text)="{txt}"]'
    if txt:
        return f'//*[@text="{txt}"]'
    if a11y:
        return f'//*[@content-desc="{a11y}"]'
    return None


def build_low_score_locator_insights(
    actions: Sequence[RecordedAction],
    critical_threshold: float = CRITICAL_LOCATOR_THRESHOLD,
) -> list[LocatorInsight]:
    """Insights for locator-bearing steps scored at or below the threshold.

    Args:
        actions: Recorded steps in order
        critical_threshold: Highest score still considered critical

    Returns:
        One insight per critical step
    """
    insights: list[LocatorInsight] = []
    for index, action in enumerate(actions):
        if not action.requires_locator:
            continue
        score = get_locator_score(action)
        if score > critical_threshold:
            continue

        stable = derive_stable_locator(action)
        contextual = build_contextual_xpath(action)
        weak_locator = action.locator or action.smart_xpath or action.xpath or ""

        if weak_locator:
            issue = f"Current locator is fragile: {weak_locator}"
        else:
            issue = "Current step depends on weak/non-stable targeting."

        if stable is not None:
            resolution = (
                f"Use {stable.strategy.value} = {stable.value}; add fallback candidates "
                "and avoid generic class-only XPath."
            )
        elif contextual:
            resolution = (
                f"Use contextual XPath: {contextual}; add fallback candidates from "
                "id/accessibilityId/text and keep coordinates only as last fallback."
            )
        else:
            resolution = (
                "Capture locator again using Inspector and anchor by "
                "id/accessibility/text with ancestor context."
            )

        insights.append(LocatorInsight(
            step_index=index,
            score=score,
            title=f"Step {index + 1} has critical locator score ({score:g}/100)",
            issue=issue,
            resolution=resolution,
            suggested_locator=stable.value if stable else contextual,
        ))

    logger.debug(f"{len(insights)} critical locators in {len(actions)} steps")
    return insights
