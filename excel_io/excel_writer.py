"""
excel_writer.py

Writes an order workbook for the wholesale team.

Sheets
------
- "Summary"   -> customer, order date, totals
- "Orders"    -> one row per SKU line (flat), in catalog order
- "SizeSheet" -> one row per Collection/Style/Colour/Width with quantities
                 across size columns

Key behavior
------------
- Size columns follow first-seen order across the order lines, which is the
  catalog's own size order (wraparound child sizes stay after 13.5).
- SKUs not found in the catalog appear on Orders only, priced at 0.

Usage
-----
write_order_workbook(ledger, {"customer_id": "C123"}, "out.xlsx")
"""

from __future__ import annotations

import logging
from typing import List

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from core.ledger import OrderLedger

logger = logging.getLogger(__name__)

ORDER_COLUMNS: List[str] = [
    "Collection",
    "Style",
    "Description",
    "Colour",
    "Width",
    "Size",
    "SKU",
    "Qty",
    "Unit Price",
    "Amount",
]

SIZESHEET_KEYS: List[str] = ["Collection", "Style", "Colour", "Width"]

_HEADER_FILL = PatternFill(start_color="4F81BD", end_color="4F81BD", fill_type="solid")
_SUMMARY_FILL = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
_ZEBRA = PatternFill(start_color="F2F2F2", end_color="F2F2F2", fill_type="solid")
_THIN = Border(left=Side(style="thin"), right=Side(style="thin"),
               top=Side(style="thin"), bottom=Side(style="thin"))


# ==============================================================================
# Public API
# ==============================================================================

def write_order_workbook(ledger: OrderLedger, meta: dict, output_path: str) -> None:
    """
    Write the Summary / Orders / SizeSheet workbook for an order.

    Args:
        ledger: The order to write.
        meta: Optional "customer_id" and "ordered_at" (string or datetime).
        output_path: Destination .xlsx path.
    """
    try:
        orders = orders_frame(ledger)
        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            _create_summary_sheet(writer, ledger, meta)

            orders.to_excel(writer, sheet_name="Orders", index=False)
            _format_table_sheet(writer.sheets["Orders"], orders, left_cols=7)

            sizes = to_sizesheet(orders)
            sizes.to_excel(writer, sheet_name="SizeSheet", index=False)
            _format_table_sheet(writer.sheets["SizeSheet"], sizes, left_cols=len(SIZESHEET_KEYS), zebra=True)

        logger.info("Order workbook written: %s", output_path)
    except Exception as e:
        logger.error("Error writing order workbook: %s", e)
        raise


def orders_frame(ledger: OrderLedger) -> pd.DataFrame:
    """Flat order lines as a DataFrame with ORDER_COLUMNS."""
    records = [
        {
            "Collection": line["collection"],
            "Style": line["style"],
            "Description": line["description"],
            "Colour": line["colour"],
            "Width": line["width"],
            "Size": line["size"],
            "SKU": line["sku"],
            "Qty": line["quantity"],
            "Unit Price": float(line["unit_price"]) if line["unit_price"] is not None else None,
            "Amount": float(line["amount"]),
        }
        for line in ledger.line_items()
    ]
    return pd.DataFrame(records, columns=ORDER_COLUMNS)


def to_sizesheet(orders: pd.DataFrame) -> pd.DataFrame:
    """
    Pivot order lines to one row per Collection/Style/Colour/Width with sizes
    across columns. First-seen order is kept for both rows and size columns.
    """
    work = orders.loc[orders["Style"].astype(str).str.strip() != ""].copy() if not orders.empty else orders
    if work.empty:
        return pd.DataFrame(columns=SIZESHEET_KEYS + ["Total"])

    work["Qty"] = pd.to_numeric(work["Qty"], errors="coerce").fillna(0).astype(int)
    sizes = list(dict.fromkeys(work["Size"].astype(str)))
    row_order = list(dict.fromkeys(work[SIZESHEET_KEYS].itertuples(index=False, name=None)))

    pvt = (
        work.pivot_table(
            index=SIZESHEET_KEYS,
            columns="Size",
            values="Qty",
            aggfunc="sum",
            fill_value=0,
            observed=False,
        )
        .reindex(
            index=pd.MultiIndex.from_tuples(row_order, names=SIZESHEET_KEYS),
            columns=sizes,
            fill_value=0,
        )
        .reset_index()
    )
    pvt.columns.name = None
    pvt["Total"] = pvt[sizes].sum(axis=1)
    return pvt[SIZESHEET_KEYS + sizes + ["Total"]]


# ==============================================================================
# Summary sheet
# ==============================================================================

def _create_summary_sheet(writer, ledger: OrderLedger, meta: dict) -> None:
    totals = ledger.totals()
    ordered_at = meta.get("ordered_at") or pd.Timestamp.now()
    unresolved = ledger.unresolved_skus()
    summary_data = {
        "Field": [
            "Customer ID",
            "Order Date",
            "Items",
            "Subtotal",
            "Tax",
            "Total",
            "Unresolved SKUs",
            "Processing Date",
        ],
        "Value": [
            meta.get("customer_id") or "N/A",
            str(ordered_at),
            str(totals["item_count"]),
            f"${totals['subtotal']:,.2f}",
            f"${totals['tax']:,.2f}",
            f"${totals['grand_total']:,.2f}",
            ", ".join(unresolved) if unresolved else "None",
            pd.Timestamp.now().strftime("%Y-%m-%d %H:%M:%S"),
        ],
    }
    pd.DataFrame(summary_data).to_excel(writer, sheet_name="Summary", index=False)
    _format_summary_sheet(writer.sheets["Summary"])


def _format_summary_sheet(ws) -> None:
    header_font = Font(color="FFFFFF", bold=True, size=12)
    for cell in ws[1]:
        cell.fill = _SUMMARY_FILL
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center", vertical="center")
    body_font = Font(size=11)
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.font = body_font
            cell.alignment = Alignment(horizontal="left", vertical="center")
    ws.column_dimensions["A"].width = 20
    ws.column_dimensions["B"].width = 40
    for row in ws.iter_rows():
        for cell in row:
            cell.border = _THIN


# ==============================================================================
# Orders / SizeSheet styling
# ==============================================================================

def _format_table_sheet(ws, df: pd.DataFrame, *, left_cols: int, zebra: bool = False) -> None:
    """Bold header, left-aligned descriptive columns, centered numbers, autosized widths."""
    header_font = Font(color="FFFFFF", bold=True, size=11)
    for cell in ws[1]:
        cell.fill = _HEADER_FILL
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center", vertical="center")

    body_font = Font(size=10)
    for row in ws.iter_rows(min_row=2):
        for idx, cell in enumerate(row, start=1):
            horizontal = "left" if idx <= left_cols else "center"
            cell.alignment = Alignment(horizontal=horizontal, vertical="center")
            cell.font = body_font

    for col_idx, col in enumerate(df.columns, start=1):
        letter = get_column_letter(col_idx)
        if len(df) > 0:
            max_len = max(len(str(col)), df[col].astype(str).str.len().max())
        else:
            max_len = len(str(col))
        if col_idx <= left_cols:
            width = min(max_len + 3, 50)
        elif col == "Total":
            width = max(10, max_len + 2)
        else:
            width = max(6, min(max_len + 2, 14))
        ws.column_dimensions[letter].width = width

    ws.freeze_panes = "A2"
    for row in ws.iter_rows():
        for cell in row:
            cell.border = _THIN
    if zebra:
        for r_idx, row in enumerate(ws.iter_rows(min_row=2), start=2):
            if r_idx % 2 == 0:
                for cell in row:
                    cell.fill = _ZEBRA
