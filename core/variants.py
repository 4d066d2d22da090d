"""
variants.py

Cross product of a product's colours x widths x sizes.

Order is colour (outer), width (middle), size (inner). The same order is used
for display, SKU indexing and export, so it must stay stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from core.categories import CategoryRules
from core.sizes import expand_sizes, split_list

if TYPE_CHECKING:
    from core.catalog import Product


@dataclass(frozen=True)
class Variant:
    product: "Product"
    colour: str
    width: str
    size: str

    @property
    def style(self) -> str:
        return self.product.style


def product_colours(product: "Product") -> List[str]:
    # No colour spec still gives one orderable colourway.
    return split_list(product.colour_spec) or [""]


def product_widths(product: "Product") -> List[str]:
    return split_list(product.width_spec) or [""]


def product_sizes(product: "Product", rules: Optional[CategoryRules] = None) -> List[str]:
    return expand_sizes(product.size_spec, product, rules)


def generate_variants(
    product: "Product", rules: Optional[CategoryRules] = None
) -> List[Variant]:
    """Return every orderable variant of a product in canonical order."""
    sizes = product_sizes(product, rules)
    return [
        Variant(product, colour, width, size)
        for colour in product_colours(product)
        for width in product_widths(product)
        for size in sizes
    ]
