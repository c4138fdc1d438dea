"""Fuzzy re-identification of an element whose locators no longer match.

When neither the primary nor any fallback locator resolves, every node in the
fresh dump is scored against what was recorded about the element. Exact
identity matches dominate; similar ids, text overlap, class and coarse
position add smaller amounts.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from difflib import SequenceMatcher

from healcli.core.fingerprint import bounds_bucket, normalize_text
from healcli.core.ui_element_parser import UINode
from healcli.models.locator import RecordedAction

logger = logging.getLogger("heal.healing_engine")

DEFAULT_THRESHOLD = 60

# Weights per signal
CONTENT_DESC_EXACT = 100
CONTENT_DESC_SIMILAR = 70
RESOURCE_ID_EXACT = 95
RESOURCE_ID_SIMILAR = 65
TEXT_SIMILAR = 60
CLASS_EXACT = 20
CLASS_PARTIAL = 10
BOUNDS_BUCKET_MATCH = 25


def similarity(a: str, b: str) -> float:
    """String similarity in [0, 1]; 0 when either side is empty."""
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    return SequenceMatcher(None, a, b).ratio()


def token_jaccard(a: str, b: str) -> float:
    """Jaccard overlap of lowercase whitespace tokens."""
    tokens_a = set(normalize_text(a).lower().split())
    tokens_b = set(normalize_text(b).lower().split())
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / len(tokens_a | tokens_b)


@dataclass(frozen=True)
class HealingTarget:
    """What was recorded about the element being looked for."""

    resource_id: str = ""
    content_desc: str = ""
    text: str = ""
    class_name: str = ""
    bucket: str = ""

    @classmethod
    def from_action(cls, action: RecordedAction) -> HealingTarget:
        """Target from an action's element fields.

        Bounds come from the inspector's raw ``elementMetadata`` when the
        recorder kept it.
        """
        metadata = action.extra.get("elementMetadata")
        bounds = metadata.get("bounds") if isinstance(metadata, dict) else None
        return cls(
            resource_id=action.element_id or "",
            content_desc=action.element_content_desc or "",
            text=normalize_text(action.element_text),
            class_name=action.element_class or "",
            bucket=bounds_bucket(bounds),
        )


@dataclass(frozen=True)
class HealingMatch:
    """Best node found and its score."""

    node: UINode
    score: int


class LocatorHealingEngine:
    """Rank live nodes against a recorded element.

    Args:
        enabled: When False, nothing is ever matched
        threshold: Minimum score a match needs
    """

    def __init__(self, enabled: bool = True, threshold: int = DEFAULT_THRESHOLD):
        self.enabled = enabled
        self.threshold = threshold

    def score_node(self, target: HealingTarget, node: UINode) -> int:
        """Score one node against the target."""
        score = 0

        cd = node.content_desc
        if target.content_desc and cd:
            if cd == target.content_desc:
                score += CONTENT_DESC_EXACT
            else:
                score += math.floor(similarity(cd, target.content_desc) * CONTENT_DESC_SIMILAR)

        rid = node.resource_id
        if target.resource_id and rid:
            if rid == target.resource_id:
                score += RESOURCE_ID_EXACT
            else:
                score += math.floor(similarity(rid, target.resource_id) * RESOURCE_ID_SIMILAR)

        text = normalize_text(node.text)
        if target.text and text:
            overlap = max(token_jaccard(text, target.text), similarity(text, target.text))
            score += math.floor(overlap * TEXT_SIMILAR)

        cls = node.class_name
        if target.class_name and cls:
            if cls == target.class_name:
                score += CLASS_EXACT
            elif cls in target.class_name or target.class_name in cls:
                score += CLASS_PARTIAL

        if target.bucket and target.bucket == bounds_bucket(node.get("bounds")):
            score += BOUNDS_BUCKET_MATCH

        return score

    def rank_best_match(self, target: HealingTarget, nodes: list[UINode]) -> HealingMatch | None:
        """Highest-scoring node, first one on ties.

        Args:
            target: Recorded element description
            nodes: Nodes from a fresh dump

        Returns:
            HealingMatch, or None when disabled, empty, or below threshold
        """
        if not self.enabled or not nodes:
            return None

        best: HealingMatch | None = None
        for node in nodes:
            score = self.score_node(target, node)
            if score > (best.score if best else 0):
                best = HealingMatch(node=node, score=score)

        if best is None or best.score < self.threshold:
            logger.debug(f"No healing match above threshold {self.threshold}")
            return None

        logger.debug(f"Healing match node #{best.node.index} with score {best.score}")
        return best
