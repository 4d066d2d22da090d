"""
sku.py

SKU encoding and catalog-wide reverse lookup.

Templates:
    footwear:            STYLE + WIDTH(2) + COLOUR + SIZE(3)    e.g. S000V720C + 0M + BLK + 075
    general merchandise: STYLE + COLOUR + SIZE(3)               e.g. A000B325U + OAT + ONE

Size codes:
    "ONE"/"OS"           -> "ONE"
    footwear numeric     -> round(size * 10), zero-padded to 3   (7.5 -> "075")
    anything else        -> token left-padded with "0" to 3     ("M" -> "00M")

General merchandise never carries a width segment, even when the product
lists widths. An empty width encodes to no width segment.

SKUs have no separators, so reverse lookup is reconstructive: every variant
in the catalog is encoded once into a SkuIndex and queries are exact matches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

from core import config
from core.categories import CategoryRules, default_rules
from core.variants import Variant, generate_variants

if TYPE_CHECKING:
    from core.catalog import Catalog, Product

logger = logging.getLogger(__name__)


# ==============================
# Encoding
# ==============================


def is_footwear(style: str, rules: Optional[CategoryRules] = None) -> bool:
    return (rules or default_rules()).is_footwear(style)


def format_size_code(size: str, footwear: bool) -> str:
    token = (size or "").strip()
    if token.upper() in ("OS", config.SENTINEL_SIZE):
        return config.SENTINEL_SIZE
    if footwear:
        try:
            scaled = (Decimal(token) * 10).quantize(Decimal(1), rounding=ROUND_HALF_UP)
            return str(int(scaled)).zfill(3)
        except (InvalidOperation, ValueError):
            pass  # labelled or lettered footwear sizes pad like general merchandise
    return token.rjust(3, "0")


def format_width_code(width: str) -> str:
    token = (width or "").strip()
    return token.rjust(2, "0") if token else ""


def encode(
    product: "Product", variant: Variant, rules: Optional[CategoryRules] = None
) -> str:
    """
    Encode one variant of a product into its SKU.

    Args:
        product: The product the variant belongs to.
        variant: Colour/width/size combination.
        rules: Category rules; defaults to the configured rules.

    Returns:
        The SKU string.
    """
    footwear = is_footwear(product.style, rules)
    size_code = format_size_code(variant.size, footwear)
    if footwear:
        return f"{product.style}{format_width_code(variant.width)}{variant.colour}{size_code}"
    return f"{product.style}{variant.colour}{size_code}"


def encode_variant(variant: Variant, rules: Optional[CategoryRules] = None) -> str:
    return encode(variant.product, variant, rules)


# ==============================
# Reverse lookup
# ==============================


@dataclass(frozen=True)
class SkuCollision:
    sku: str
    kept_style: str
    rejected_style: str


@dataclass
class SkuIndex:
    """SKU -> Variant map built once per catalog."""

    variants: Dict[str, Variant] = field(default_factory=dict)
    collisions: List[SkuCollision] = field(default_factory=list)
    positions: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def build(
        cls, products: Iterable["Product"], rules: Optional[CategoryRules] = None
    ) -> "SkuIndex":
        rules = rules or default_rules()
        index = cls()
        for product in products:
            for variant in generate_variants(product, rules):
                index._add(encode(product, variant, rules), variant)
        logger.info(
            "SKU index built: %d SKUs, %d collisions",
            len(index.variants),
            len(index.collisions),
        )
        return index

    def _add(self, sku: str, variant: Variant) -> None:
        existing = self.variants.get(sku)
        if existing is None:
            self.positions[sku] = len(self.variants)
            self.variants[sku] = variant
            return
        if existing == variant:
            return
        collision = SkuCollision(sku, existing.style, variant.style)
        self.collisions.append(collision)
        logger.warning(
            "SKU collision on %s: keeping %s, rejecting %s",
            sku,
            collision.kept_style,
            collision.rejected_style,
        )

    def variant(self, sku: str) -> Optional[Variant]:
        return self.variants.get((sku or "").strip())

    def product(self, sku: str) -> Optional["Product"]:
        v = self.variant(sku)
        return v.product if v is not None else None

    def position(self, sku: str) -> Optional[int]:
        """Canonical (catalog, then variant) order of a SKU; None if unknown."""
        return self.positions.get((sku or "").strip())

    def __contains__(self, sku: object) -> bool:
        return isinstance(sku, str) and sku.strip() in self.variants

    def __len__(self) -> int:
        return len(self.variants)


def resolve(sku: str, catalog: "Catalog") -> Optional["Product"]:
    """Return the product a SKU was generated from, or None if it is not in the catalog."""
    return catalog.sku_index.product(sku)
