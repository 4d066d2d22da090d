"""
catalog.py

Builds an ordered, read-only Catalog from a flat row feed.

Row rules:
    - collection name, no style code  -> header; opens (or re-opens) a collection
    - style code                      -> product in the most recent collection
                                         ("Uncategorized" if no header seen yet)
    - neither                         -> skipped (blank separator)

Rows with a style but no usable wholesale price are kept for display and
marked not orderable. Nothing in a row is required beyond the style code.

Public API:
    build_catalog(rows) -> Catalog
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from core import config
from core.categories import CategoryRules, default_rules
from core.errors import UnresolvableSKU
from core.sku import SkuIndex
from core.variants import Variant

logger = logging.getLogger(__name__)

ROW_FIELDS = (
    "style",
    "description",
    "sizes",
    "widths",
    "colours",
    "wholesale",
    "retail",
    "collection",
)


@dataclass(frozen=True)
class Product:
    style: str
    description: str = ""
    size_spec: str = ""
    width_spec: str = ""
    colour_spec: str = ""
    wholesale: Optional[Decimal] = None
    retail: Optional[Decimal] = None
    collection: str = config.UNCATEGORIZED

    @property
    def orderable(self) -> bool:
        return self.wholesale is not None


@dataclass(frozen=True)
class Collection:
    name: str
    products: Tuple[Product, ...] = ()


class Catalog:
    """One loaded catalog snapshot. Rebuild instead of mutating."""

    def __init__(
        self,
        collections: Iterable[Collection],
        rules: Optional[CategoryRules] = None,
    ):
        self.rules = rules or default_rules()
        self.collections: Tuple[Collection, ...] = tuple(collections)
        self._by_style: Dict[str, Product] = {
            p.style: p for c in self.collections for p in c.products
        }
        self.sku_index = SkuIndex.build(self.products(), self.rules)

    def products(self) -> List[Product]:
        return [p for c in self.collections for p in c.products]

    def product(self, style: str) -> Optional[Product]:
        return self._by_style.get((style or "").strip())

    def collection_names(self) -> List[str]:
        return [c.name for c in self.collections]

    def resolve(self, sku: str) -> Optional[Product]:
        return self.sku_index.product(sku)

    def variant_for(self, sku: str) -> Optional[Variant]:
        return self.sku_index.variant(sku)

    def require(self, sku: str) -> Variant:
        """Like variant_for, but raises UnresolvableSKU for unknown SKUs."""
        v = self.sku_index.variant(sku)
        if v is None:
            raise UnresolvableSKU(sku)
        return v

    def __len__(self) -> int:
        return len(self._by_style)

    def __repr__(self) -> str:
        return (
            f"Catalog(collections={len(self.collections)}, products={len(self)}, "
            f"skus={len(self.sku_index)})"
        )


# ==============================
# Builder
# ==============================


def build_catalog(
    rows: Iterable[Mapping[str, Any]],
    rules: Optional[CategoryRules] = None,
) -> Catalog:
    """
    Build a Catalog from ordered raw rows.

    Args:
        rows: Mappings with any of the keys in ROW_FIELDS. Values may be
            missing, None, NaN, empty or non-numeric.
        rules: Category rules used for the SKU index.

    Returns:
        A Catalog with collections in first-declared order. Collections that
        end up with no products are dropped.
    """
    order: List[str] = []
    members: Dict[str, List[Product]] = {}
    seen_styles = set()
    current: Optional[str] = None
    skipped = 0

    for n, row in enumerate(rows, start=1):
        style = _cell(row, "style")
        name = _cell(row, "collection")

        if not style:
            if not name:
                skipped += 1
                continue
            current = name
            if name not in members:
                order.append(name)
                members[name] = []
            continue

        if style in seen_styles:
            logger.warning("Row %d: duplicate style %s ignored", n, style)
            continue
        seen_styles.add(style)

        if current is None:
            current = config.UNCATEGORIZED
            if current not in members:
                order.append(current)
                members[current] = []

        product = _product_from_row(row, style, current)
        if not product.orderable:
            logger.warning("Row %d: style %s has no usable wholesale price", n, style)
        members[current].append(product)

    collections = [Collection(name, tuple(members[name])) for name in order if members[name]]
    catalog = Catalog(collections, rules)
    logger.info(
        "Catalog built: %d collections, %d products (%d blank rows skipped)",
        len(catalog.collections),
        len(catalog),
        skipped,
    )
    return catalog


def _product_from_row(row: Mapping[str, Any], style: str, collection: str) -> Product:
    return Product(
        style=style,
        description=_cell(row, "description"),
        size_spec=_cell(row, "sizes"),
        width_spec=_cell(row, "widths"),
        colour_spec=_cell(row, "colours"),
        wholesale=_to_money(row.get("wholesale")),
        retail=_to_money(row.get("retail")),
        collection=collection,
    )


# ==============================
# Cell helpers
# ==============================


def _cell(row: Mapping[str, Any], key: str) -> str:
    """Return a cleaned string cell; None/NaN/missing become ""."""
    value = row.get(key)
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    return re.sub(r"\s+", " ", str(value).strip())


def _to_money(value: Any) -> Optional[Decimal]:
    """
    Parse a price cell like '12.50', '$1,234.56' or 'USD 9.90' to Decimal.

    Returns None for blank, non-numeric, negative or non-finite values.
    """
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    txt = str(value).strip().replace("$", "").replace(",", "")
    if txt.upper().startswith("USD"):
        txt = txt[3:].strip()
    if not txt:
        return None
    try:
        amount = Decimal(txt)
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount
