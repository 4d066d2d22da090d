"""
sizes.py

Expands the compact size text found in catalog rows into ordered size tokens.

Grammar (first match wins):
    1) "OS" / "ONE"                -> ["ONE"]
    2) "Label: a, b, c"            -> ["Label a", "Label b", "Label c"]
    3) "a, b, c" (no dash)         -> ["a", "b", "c"]
       "6 - 13.5, 1 - 2.5"         -> each segment expanded, then concatenated
    4) "5 - 8"                     -> 5, 5.5, ... 8 (bounds swapped if reversed)
       "... whole sizes only"      -> half steps dropped
    5) "6 - 2.5" on a cyclic style -> 6 .. 13.5, then 1 .. 2.5
    6) anything else               -> [spec]

Public API:
    expand_sizes(spec, product=None, rules=None) -> list[str]
    split_list(text) -> list[str]
    format_size(value) -> str
"""

from __future__ import annotations

import logging
import math
import re
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from core import config
from core.categories import CategoryRules, default_rules
from core.errors import MalformedSpec

logger = logging.getLogger(__name__)

_WHOLE_ONLY_RE = re.compile(r"\(?\s*whole\s+sizes?\s+only\s*\)?", re.IGNORECASE)
_LABELED_RE = re.compile(r"^([^:,]+?)\s*:\s*(.+)$")
_RANGE_RE = re.compile(r"^(.*?\S)\s*-\s*(\S.*)$")


# ==============================
# Public API
# ==============================


def expand_sizes(
    spec: Any,
    product: Any = None,
    rules: Optional[CategoryRules] = None,
) -> List[str]:
    """
    Expand a size spec into an ordered list of size tokens.

    Args:
        spec: Raw size text from the catalog row (None/NaN tolerated).
        product: Product (or bare style code) used to decide whether numeric
            ranges wrap around. None disables wraparound.
        rules: Category rules; defaults to the configured rules.

    Returns:
        Size tokens in display order. Empty spec gives an empty list; text
        that cannot be parsed comes back as a single literal token.
    """
    text = _clean_ws(spec)
    if not text:
        return []

    if text.upper() in ("OS", config.SENTINEL_SIZE):
        return [config.SENTINEL_SIZE]

    m = _LABELED_RE.match(text)
    if m:
        label = m.group(1)
        return [f"{label} {tok}" for tok in split_list(m.group(2))]

    whole_only = bool(_WHOLE_ONLY_RE.search(text))
    body = _clean_ws(_WHOLE_ONLY_RE.sub(" ", text)) if whole_only else text
    if not body:
        return [text]

    cyclic = _is_cyclic(product, rules)

    if "," in body:
        segments = split_list(body)
        if not any("-" in seg for seg in segments):
            return segments
        out: List[str] = []
        for seg in segments:
            out.extend(_expand_segment(seg, whole_only, cyclic))
        return out

    return _expand_segment(body, whole_only, cyclic)


def split_list(text: Any) -> List[str]:
    """Split comma-separated text into trimmed, non-empty tokens."""
    return [tok for tok in (_clean_ws(p) for p in _clean_ws(text).split(",")) if tok]


def format_size(value: float) -> str:
    """Format a numeric size without a trailing '.0' (7.0 -> '7', 7.5 -> '7.5')."""
    return format(Decimal(str(float(value))).normalize(), "f")


# ==============================
# Ranges
# ==============================


def _expand_segment(seg: str, whole_only: bool, cyclic: bool) -> List[str]:
    try:
        bounds = _parse_range(seg)
    except MalformedSpec as e:
        logger.debug("Size spec kept literally: %s", e)
        return [seg]
    if bounds is None:
        return [seg]

    start, end = bounds
    if start > end:
        if cyclic:
            upper, lower = config.wrap_bounds()
            values = _step_range(start, upper) + _step_range(lower, end)
        else:
            logger.debug("Reversed size range %r normalized", seg)
            values = _step_range(end, start)
    else:
        values = _step_range(start, end)

    if whole_only:
        values = [v for v in values if float(v).is_integer()]
    return [format_size(v) for v in values]


def _parse_range(seg: str) -> Optional[Tuple[float, float]]:
    """
    Parse "<start> - <end>".

    Returns:
        (start, end) floats, or None when the segment has no dash.

    Raises:
        MalformedSpec: The segment has a dash but a bound is not numeric.
    """
    m = _RANGE_RE.match(seg)
    if not m:
        return None
    try:
        start, end = float(m.group(1)), float(m.group(2))
    except ValueError:
        raise MalformedSpec(f"non-numeric size range {seg!r}") from None
    if math.isnan(start) or math.isnan(end) or math.isinf(start) or math.isinf(end):
        raise MalformedSpec(f"non-finite size range {seg!r}")
    return start, end


def _step_range(start: float, end: float) -> List[float]:
    """Inclusive half-size steps from start to end; empty when end < start."""
    if end < start:
        return []
    n = math.floor(2 * (end - start))
    return [start + i * 0.5 for i in range(n + 1)]


# ==============================
# Utilities
# ==============================


def _is_cyclic(product: Any, rules: Optional[CategoryRules]) -> bool:
    if product is None:
        return False
    style = product if isinstance(product, str) else getattr(product, "style", "")
    return (rules or default_rules()).is_cyclic_size(style)


def _clean_ws(s: Any) -> str:
    """Strip ends and collapse whitespace; None/NaN become ""."""
    if s is None or (isinstance(s, float) and math.isnan(s)):
        return ""
    return re.sub(r"\s+", " ", str(s).strip())
