"""Attach locator bundles to recorded actions."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from healcli.core.locator_candidates import build_locator_candidates
from healcli.models.locator import LocatorBundle, RecordedAction

logger = logging.getLogger("heal.locator_bundle")


def is_locator_required_action(action: RecordedAction) -> bool:
    """Whether the action type needs a locator (tap, input, longPress, assert)."""
    return action.requires_locator


def bundle_fingerprint(action: RecordedAction) -> str:
    """Stable key for the element an action targets.

    Explicit bundle fingerprint first, then the inspector's element
    fingerprint, then ``"{type}:{id}"``.
    """
    bundle = action.locator_bundle
    if bundle is not None and bundle.fingerprint:
        return bundle.fingerprint
    if action.element_fingerprint:
        return action.element_fingerprint
    return f"{action.type}:{action.id}"


def ensure_locator_bundle(action: RecordedAction) -> RecordedAction:
    """Return the action with a primary locator and fallback chain attached.

    An explicit bundle primary is never replaced, only trimmed. An empty
    ``locator`` is filled together with ``locator_strategy`` from the primary;
    an existing ``locator`` keeps its strategy as recorded. Actions that need
    no locator, or offer no candidates, come back unchanged.

    Args:
        action: Recorded action

    Returns:
        New action with ``locator_bundle`` set, or the same action
    """
    if not is_locator_required_action(action):
        return action

    candidates = build_locator_candidates(action)
    if not candidates:
        logger.debug(f"No locator candidates for {action.type}:{action.id}, coordinate fallback")
        return action

    existing = action.locator_bundle.primary if action.locator_bundle else None
    if existing is not None and existing.value.strip():
        primary = existing
        # Candidate values are trimmed, so the primary must be too
        if existing.value != existing.value.strip():
            primary = replace(existing, value=existing.value.strip())
    else:
        primary = candidates[0]
    fallbacks = tuple(c for c in candidates if c.key != primary.key)

    bundle = LocatorBundle(
        fingerprint=bundle_fingerprint(action),
        primary=primary,
        fallbacks=fallbacks,
    )

    # locator and locator_strategy are backfilled as a pair, never one alone
    if action.locator:
        locator, strategy = action.locator, action.locator_strategy
    else:
        locator, strategy = primary.value, primary.strategy.value
    return replace(
        action,
        locator_bundle=bundle,
        locator=locator,
        locator_strategy=strategy,
        extra=dict(action.extra),
    )


def normalize_actions_for_locator_healing(
    actions: Iterable[RecordedAction],
) -> list[RecordedAction]:
    """Apply :func:`ensure_locator_bundle` to every action, keeping order."""
    return [ensure_locator_bundle(action) for action in actions]
