"""
categories.py

Style-code classification rules.

Whether a product is footwear (width in the SKU, sizes scaled x10) and whether
its size ranges wrap around (child shoe charts) are product-data conventions,
so both are plain predicates over the style code. The defaults are regexes
from core.config; callers can pass their own CategoryRules.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from core import config

StylePredicate = Callable[[str], bool]


def regex_predicate(pattern: str) -> StylePredicate:
    """Build a predicate that searches the (stripped, upper-cased) style code."""
    rx = re.compile(pattern)

    def _match(style: str) -> bool:
        return bool(rx.search((style or "").strip().upper()))

    return _match


@dataclass(frozen=True)
class CategoryRules:
    is_footwear: StylePredicate
    is_cyclic_size: StylePredicate

    @classmethod
    def from_config(cls) -> "CategoryRules":
        return cls(
            is_footwear=regex_predicate(config.footwear_style_pattern()),
            is_cyclic_size=regex_predicate(config.cyclic_size_style_pattern()),
        )


def default_rules() -> CategoryRules:
    return CategoryRules.from_config()
