"""Build xpath candidates anchored on an element's identity attributes."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from healcli.core.fingerprint import normalize_text
from healcli.models.locator import LocatorCandidate, LocatorStrategy

logger = logging.getLogger("heal.smart_xpath")

# Longer texts are matched by prefix with contains()
MAX_EXACT_TEXT_LENGTH = 40
PARTIAL_TEXT_LENGTH = 24
MAX_DIGIT_RATIO = 0.25

_DIGIT = re.compile(r"\d")


def xpath_literal(value: Any) -> str:
    """Quote a string as an XPath 1.0 literal, using concat() when it holds both quote kinds."""
    s = "" if value is None else str(value)
    if '"' not in s:
        return f'"{s}"'
    if "'" not in s:
        return f"'{s}'"
    parts = s.split('"')
    pieces: list[str] = []
    for i, part in enumerate(parts):
        if part:
            pieces.append(f'"{part}"')
        if i != len(parts) - 1:
            pieces.append("'\"'")
    return f"concat({', '.join(pieces)})"


def looks_dynamic(text: Any) -> bool:
    """Whether text is likely to change between runs (counters, prices, ids)."""
    s = normalize_text(text)
    if not s:
        return True
    if s.isdigit():
        return True
    return len(_DIGIT.findall(s)) / len(s) > MAX_DIGIT_RATIO


def _predicates(class_name: str, *clauses: str) -> str:
    parts = [f"@class={xpath_literal(class_name)}"] if class_name else []
    parts.extend(clauses)
    return " and ".join(parts)


def build_smart_xpath_candidates(
    meta: Mapping[str, Any] | None,
    parent_resource_id: str | None = None,
) -> list[LocatorCandidate]:
    """Xpath candidates for inspector metadata, strongest first.

    Args:
        meta: Element metadata with ``class``, ``resourceId``, ``contentDesc``
            and ``text`` keys
        parent_resource_id: Resource id of an ancestor to anchor on

    Returns:
        Candidates unique by value, sorted by score
    """
    if not meta:
        return []

    cls = str(meta.get("class") or "")
    rid = str(meta.get("resourceId") or "")
    cd = str(meta.get("contentDesc") or "")
    txt = normalize_text(meta.get("text"))

    raw: list[tuple[str, int, str]] = []

    if rid:
        rid_clause = f"@resource-id={xpath_literal(rid)}"
        raw.append((f"//*[{_predicates(cls, rid_clause)}]", 85, "resource-id anchored"))
        raw.append((f"//*[{rid_clause}]", 82, "resource-id only"))

    if cd:
        cd_clause = f"@content-desc={xpath_literal(cd)}"
        raw.append((f"//*[{_predicates(cls, cd_clause)}]", 80, "content-desc anchored"))
        raw.append((f"//*[{cd_clause}]", 78, "content-desc only"))

    if txt and not looks_dynamic(txt):
        if len(txt) <= MAX_EXACT_TEXT_LENGTH:
            clause = f"@text={xpath_literal(txt)}"
            raw.append((f"//*[{_predicates(cls, clause)}]", 68, "exact text"))
        else:
            clause = f"contains(@text, {xpath_literal(txt[:PARTIAL_TEXT_LENGTH])})"
            raw.append((f"//*[{_predicates(cls, clause)}]", 60, "partial text"))

    if parent_resource_id and (rid or cd or txt):
        if rid:
            child = f"@resource-id={xpath_literal(rid)}"
        elif cd:
            child = f"@content-desc={xpath_literal(cd)}"
        else:
            child = f"@text={xpath_literal(txt)}"
        raw.append((
            f"//*[@resource-id={xpath_literal(parent_resource_id)}]//*[{_predicates(cls, child)}]",
            72,
            "parent anchor",
        ))

    seen: set[str] = set()
    candidates: list[LocatorCandidate] = []
    for value, score, reason in raw:
        if value in seen:
            continue
        seen.add(value)
        candidates.append(
            LocatorCandidate(LocatorStrategy.XPATH, value, score, "inspector", reason)
        )

    candidates.sort(key=lambda c: c.score, reverse=True)
    logger.debug(f"Built {len(candidates)} smart xpath candidates")
    return candidates
