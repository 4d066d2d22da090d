"""
order_text.py

Plain-text order export and import.

Format (ASCII, one record per line, newline-terminated):

    SKU,Quantity
    # Collection: Dance Shoes
    S000V720C0MBLK075,3
    S000V720C0MBLK080,1
    # Subtotal: 4,50.00
    # Collection: Accessories
    A000B325UOATONE,2
    # Subtotal: 2,18.00

Groups follow catalog collection order. On import the header must match
exactly; "#" lines and blank lines are dropped and only SKU/quantity pairs
are kept. Any other malformed line rejects the whole import.

Public API:
    serialize(ledger) -> str
    deserialize(text, catalog) -> OrderLedger
    parse_export(text) -> dict[str, int]
    import_into(ledger, text) -> None
    export_to_file(ledger, path) -> None
    import_from_file(path, catalog) -> OrderLedger
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List

from core import config
from core.catalog import Catalog
from core.errors import EmptyOrder, FormatMismatch
from core.ledger import OrderLedger, normalize_sku

logger = logging.getLogger(__name__)

_QTY_RE = re.compile(r"^\d+$")
_COMMENT = "#"


# ==============================
# Export
# ==============================


def serialize(ledger: OrderLedger) -> str:
    """
    Render the ledger in the export format.

    Raises:
        EmptyOrder: The ledger has no positive quantities.
    """
    if ledger.is_empty():
        raise EmptyOrder("Order has no items with a positive quantity")

    out: List[str] = [config.EXPORT_HEADER]
    subtotals = ledger.subtotals_by_collection()
    for name, lines in ledger.grouped_line_items().items():
        out.append(f"{_COMMENT} Collection: {_ascii(name)}")
        for line in lines:
            out.append(f"{line['sku']},{line['quantity']}")
        group = subtotals[name]
        out.append(f"{_COMMENT} Subtotal: {group['quantity']},{group['amount']:.2f}")
    return "\n".join(out) + "\n"


def export_to_file(ledger: OrderLedger, path: str) -> None:
    """
    Write the export text to path. Nothing is written if it raises.

    Raises:
        EmptyOrder: Nothing to export.
        FormatMismatch: The text cannot be written as ASCII.
    """
    text = serialize(ledger)
    try:
        data = text.encode("ascii")
    except UnicodeEncodeError as e:
        raise FormatMismatch(f"Order cannot be exported as ASCII: {e}") from e
    with open(path, "wb") as f:
        f.write(data)
    logger.info("Order exported: %d SKUs -> %s", len(ledger), path)


# ==============================
# Import
# ==============================


def parse_export(text: str) -> Dict[str, int]:
    """
    Parse export text into SKU -> quantity.

    Repeated SKUs are summed; zero quantities are dropped.

    Raises:
        FormatMismatch: Wrong header, or a record that is not "SKU,<int>".
    """
    lines = (text or "").lstrip("\ufeff").splitlines()
    header = lines[0] if lines else ""
    if header != config.EXPORT_HEADER:
        raise FormatMismatch(
            f"Unrecognized order file: expected header {config.EXPORT_HEADER!r}, got {header!r}"
        )

    quantities: Dict[str, int] = {}
    for n, raw in enumerate(lines[1:], start=2):
        line = raw.strip()
        if not line or line.startswith(_COMMENT):
            continue
        parts = line.rsplit(",", 1)
        if len(parts) != 2:
            raise FormatMismatch(f"Line {n}: expected 'SKU,Quantity', got {line!r}")
        qty_s = parts[1].strip()
        if not _QTY_RE.match(qty_s):
            raise FormatMismatch(f"Line {n}: expected 'SKU,Quantity', got {line!r}")
        try:
            sku = normalize_sku(parts[0])
        except ValueError as e:
            raise FormatMismatch(f"Line {n}: {e}") from None
        qty = int(qty_s)
        if qty:
            quantities[sku] = quantities.get(sku, 0) + qty
    return quantities


def deserialize(text: str, catalog: Catalog) -> OrderLedger:
    """Build a new ledger from export text."""
    return OrderLedger(catalog, parse_export(text))


def import_into(ledger: OrderLedger, text: str) -> None:
    """
    Replace the ledger's contents with the imported order.

    The text is fully parsed first; on FormatMismatch the ledger is untouched.
    """
    quantities = parse_export(text)
    ledger.replace(quantities)
    logger.info("Order imported: %d SKUs", len(quantities))


def import_from_file(path: str, catalog: Catalog) -> OrderLedger:
    try:
        with open(path, "r", encoding="ascii") as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise FormatMismatch(f"Order file is not ASCII text: {e}") from e
    return deserialize(text, catalog)


def _ascii(s: str) -> str:
    return s.encode("ascii", errors="replace").decode("ascii")
