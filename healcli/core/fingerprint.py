"""Element fingerprints that survive small layout shifts."""

from __future__ import annotations

import hashlib
import math
import re
from collections.abc import Mapping
from typing import Any

from healcli.core.ui_element_parser import parse_bounds

# Grid size in pixels for coarse element position
BOUNDS_BUCKET_SIZE = 50

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: Any) -> str:
    """Trim and collapse runs of whitespace."""
    if text is None:
        return ""
    return _WHITESPACE.sub(" ", str(text).strip())


def bounds_bucket(bounds: str | None) -> str:
    """Element center snapped to the bucket grid, as ``"x,y"``.

    Returns:
        Bucket key, empty when the bounds do not parse
    """
    rect = parse_bounds(bounds)
    if rect is None:
        return ""
    left, top, right, bottom = rect
    cx = (left + right) // 2
    cy = (top + bottom) // 2
    bx = math.floor(cx / BOUNDS_BUCKET_SIZE + 0.5) * BOUNDS_BUCKET_SIZE
    by = math.floor(cy / BOUNDS_BUCKET_SIZE + 0.5) * BOUNDS_BUCKET_SIZE
    return f"{bx},{by}"


def compute_element_fingerprint(meta: Mapping[str, Any]) -> str:
    """SHA-256 over class, resource id, content description, text and bucket.

    Args:
        meta: Inspector metadata with ``class``, ``resourceId``,
            ``contentDesc``, ``text`` and ``bounds`` keys

    Returns:
        Hex digest
    """
    parts = [
        str(meta.get("class") or ""),
        str(meta.get("resourceId") or ""),
        str(meta.get("contentDesc") or ""),
        normalize_text(meta.get("text")),
        bounds_bucket(meta.get("bounds")),
    ]
    return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()
