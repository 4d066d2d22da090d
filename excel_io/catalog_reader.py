"""
catalog_reader.py

Reads a catalog sheet (CSV or XLSX) into the row mappings consumed by
core.catalog.build_catalog.

Headers are matched case-insensitively against COLUMN_ALIASES; unknown
columns are ignored. Every cell is read as text so style codes like
"0002050" keep their leading zeros and prices are parsed by the builder.

Usage
-----
catalog = load_catalog("catalog.xlsx")
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from core.catalog import ROW_FIELDS, Catalog, build_catalog
from core.categories import CategoryRules

logger = logging.getLogger(__name__)

# Case-insensitive aliases for incoming headers
COLUMN_ALIASES: Dict[str, tuple] = {
    "style": ("style", "style code", "style_code", "style no", "style #", "sku"),
    "description": ("description", "desc", "name", "product name"),
    "sizes": ("sizes", "size", "size range", "size_range"),
    "widths": ("widths", "width", "fittings", "fitting"),
    "colours": ("colours", "colors", "colour", "color", "colourways"),
    "wholesale": ("wholesale", "wholesale price", "wholesale_price", "whs", "wsp"),
    "retail": ("retail", "retail price", "retail_price", "rrp", "msrp"),
    "collection": ("collection", "category", "group", "collection name"),
}

EXCEL_EXTENSIONS = {".xlsx", ".xlsm"}


def read_catalog_frame(path: str, sheet_name: Any = 0) -> pd.DataFrame:
    """
    Load the raw catalog sheet as an all-text DataFrame.

    Raises:
        ValueError: Unsupported file extension.
    """
    ext = os.path.splitext(path)[1].lower()
    if ext in EXCEL_EXTENSIONS:
        return pd.read_excel(path, sheet_name=sheet_name, dtype=str, engine="openpyxl")
    if ext == ".csv":
        return pd.read_csv(path, dtype=str, keep_default_na=False, skip_blank_lines=False)
    raise ValueError(f"Unsupported catalog file type: {ext or path}")


def frame_to_rows(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """
    Convert a catalog DataFrame into canonical row mappings (keys from ROW_FIELDS).

    Raises:
        ValueError: Neither a style column nor a collection column was found.
    """
    columns = _map_alias_columns(df.columns)
    if "style" not in columns and "collection" not in columns:
        raise ValueError("Catalog sheet needs a style or collection column")
    missing = [f for f in ROW_FIELDS if f not in columns]
    if missing:
        logger.info("Catalog sheet has no column for: %s", ", ".join(missing))

    rows = []
    for record in df.to_dict(orient="records"):
        rows.append({field: record.get(col) for field, col in columns.items()})
    return rows


def read_catalog_rows(path: str, sheet_name: Any = 0) -> List[Dict[str, Any]]:
    rows = frame_to_rows(read_catalog_frame(path, sheet_name))
    logger.info("Read %d catalog rows from %s", len(rows), path)
    return rows


def load_catalog(
    path: str, sheet_name: Any = 0, rules: Optional[CategoryRules] = None
) -> Catalog:
    return build_catalog(read_catalog_rows(path, sheet_name), rules)


def _map_alias_columns(headers: Iterable[Any]) -> Dict[str, Any]:
    """Return canonical field -> actual column name. First occurrence wins when duplicated."""
    lookup: Dict[str, Any] = {}
    for c in headers:
        k = str(c).lower().strip()
        if k not in lookup:
            lookup[k] = c

    found: Dict[str, Any] = {}
    for field, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in lookup:
                found[field] = lookup[alias]
                break
    return found
