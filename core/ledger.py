"""
ledger.py

The in-memory order: a sparse SKU -> quantity map over one Catalog.

The ledger stores SKUs only. Products and prices are looked up through the
catalog's SKU index whenever totals are read, so a SKU from a stale catalog
simply prices at zero (and is reported by unresolved_skus()).
"""

from __future__ import annotations

import logging
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from core import config
from core.catalog import Catalog

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

# Printable ASCII only; the export format reserves "," and a leading "#"
_SKU_CHARS_RE = re.compile(r"^[ -~]+$")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def normalize_sku(sku: Any) -> str:
    """
    Trim a SKU and check it can be written to an export file unchanged.

    Raises:
        ValueError: Blank SKU, or one containing ",", line breaks, control or
            non-ASCII characters, or starting with "#".
    """
    key = ("" if sku is None else str(sku)).strip()
    if not key:
        raise ValueError("SKU is required")
    if key.startswith("#") or "," in key or not _SKU_CHARS_RE.match(key):
        raise ValueError(f"Invalid SKU: {key!r}")
    return key


def _to_quantity(qty: Any) -> int:
    """
    Coerce form/import input to a non-negative int ("" and None mean 0).

    Raises:
        ValueError: For negative, fractional or non-numeric input.
    """
    if qty is None:
        return 0
    if isinstance(qty, bool):
        raise ValueError(f"Invalid quantity: {qty!r}")
    if isinstance(qty, int):
        n = qty
    elif isinstance(qty, float):
        if not qty.is_integer():
            raise ValueError(f"Quantity must be a whole number: {qty!r}")
        n = int(qty)
    else:
        txt = str(qty).strip()
        if not txt:
            return 0
        try:
            n = int(txt)
        except ValueError:
            raise ValueError(f"Invalid quantity: {qty!r}") from None
    if n < 0:
        raise ValueError(f"Quantity cannot be negative: {qty!r}")
    return n


class OrderLedger:
    def __init__(self, catalog: Catalog, quantities: Optional[Mapping[str, Any]] = None):
        self.catalog = catalog
        self._quantities: Dict[str, int] = {}
        self._flagged: set = set()
        if quantities:
            self.update(quantities)

    # ---------- writes ----------

    def set_quantity(self, sku: str, qty: Any) -> None:
        key = normalize_sku(sku)
        n = _to_quantity(qty)
        if n == 0:
            self._quantities.pop(key, None)
        else:
            self._quantities[key] = n

    def update(self, quantities: Mapping[str, Any]) -> None:
        for sku, qty in quantities.items():
            self.set_quantity(sku, qty)

    def replace(self, quantities: Mapping[str, Any]) -> None:
        """Swap in a complete quantity map. Nothing changes if any entry is invalid."""
        fresh: Dict[str, int] = {}
        for sku, qty in quantities.items():
            key, n = normalize_sku(sku), _to_quantity(qty)
            if n:
                fresh[key] = n
        self._quantities = fresh
        self._flagged = set()

    def clear(self) -> None:
        self._quantities.clear()
        self._flagged.clear()

    # ---------- reads ----------

    def quantity(self, sku: str) -> int:
        return self._quantities.get((sku or "").strip(), 0)

    def items(self) -> List[Tuple[str, int]]:
        return list(self._quantities.items())

    def is_empty(self) -> bool:
        return not self._quantities

    def __len__(self) -> int:
        return len(self._quantities)

    def __contains__(self, sku: object) -> bool:
        return isinstance(sku, str) and sku.strip() in self._quantities

    def unresolved_skus(self) -> List[str]:
        return [sku for sku in self._quantities if self.catalog.variant_for(sku) is None]

    def line_items(self) -> List[Dict[str, Any]]:
        """
        Per-SKU order lines in canonical order.

        Resolved SKUs follow catalog order (collection, product, colour,
        width, size); unresolved SKUs come last in entry order with a zero
        amount and collection "Unresolved".
        """
        index = self.catalog.sku_index
        resolved: List[Tuple[int, Dict[str, Any]]] = []
        unresolved: List[Dict[str, Any]] = []

        for sku, qty in self._quantities.items():
            variant = index.variant(sku)
            if variant is None:
                self._flag(sku)
                unresolved.append(
                    {
                        "collection": config.UNRESOLVED_GROUP,
                        "style": "",
                        "description": "",
                        "colour": "",
                        "width": "",
                        "size": "",
                        "sku": sku,
                        "quantity": qty,
                        "unit_price": None,
                        "amount": Decimal("0.00"),
                        "resolved": False,
                    }
                )
                continue
            product = variant.product
            price = product.wholesale
            amount = _money(price * qty) if price is not None else Decimal("0.00")
            resolved.append(
                (
                    index.position(sku),
                    {
                        "collection": product.collection,
                        "style": product.style,
                        "description": product.description,
                        "colour": variant.colour,
                        "width": variant.width,
                        "size": variant.size,
                        "sku": sku,
                        "quantity": qty,
                        "unit_price": price,
                        "amount": amount,
                        "resolved": True,
                    },
                )
            )

        resolved.sort(key=lambda t: t[0])
        return [line for _, line in resolved] + unresolved

    def totals(self) -> Dict[str, Any]:
        return _totals(self.line_items())

    def subtotals_by_collection(self) -> Dict[str, Dict[str, Any]]:
        """Quantity and amount per collection, in catalog collection order."""
        return _group_subtotals(self.line_items(), self.catalog.collection_names())

    def grouped_line_items(self) -> Dict[str, List[Dict[str, Any]]]:
        groups: Dict[str, List[Dict[str, Any]]] = {}
        for line in self.line_items():
            groups.setdefault(line["collection"], []).append(line)
        return _in_collection_order(groups, self.catalog.collection_names())

    def _flag(self, sku: str) -> None:
        if sku not in self._flagged:
            self._flagged.add(sku)
            logger.warning("Unresolvable SKU %s priced at 0", sku)


# ==============================
# Aggregation helpers
# ==============================


def _orderable_quantity(line: Dict[str, Any]) -> int:
    """Unpriced and unresolved lines stay on the order but are not counted."""
    return line["quantity"] if line["unit_price"] is not None else 0


def _totals(lines: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    item_count = 0
    subtotal = Decimal("0")
    for line in lines:
        item_count += _orderable_quantity(line)
        subtotal += line["amount"]
    subtotal = _money(subtotal)
    tax = _money(subtotal * config.tax_rate())
    return {
        "item_count": item_count,
        "subtotal": subtotal,
        "tax": tax,
        "grand_total": subtotal + tax,
    }


def _group_subtotals(
    lines: Iterable[Dict[str, Any]], collection_order: List[str]
) -> Dict[str, Dict[str, Any]]:
    groups: Dict[str, Dict[str, Any]] = {}
    for line in lines:
        g = groups.setdefault(line["collection"], {"quantity": 0, "amount": Decimal("0.00")})
        g["quantity"] += _orderable_quantity(line)
        g["amount"] += line["amount"]
    return _in_collection_order(groups, collection_order)


def _in_collection_order(groups: Dict[str, Any], collection_order: List[str]) -> Dict[str, Any]:
    ordered = {name: groups[name] for name in collection_order if name in groups}
    for name, value in groups.items():
        if name not in ordered:
            ordered[name] = value
    return ordered
