"""
config.py

Policy values for the order engine, read from the environment.

Environment Variables:
    ORDER_TAX_RATE: Tax rate applied to the order subtotal (default: "0.10").
    FOOTWEAR_STYLE_PATTERN: Regex a style code must match to be footwear (default: "^S").
    CYCLIC_SIZE_STYLE_PATTERN: Regex for styles whose size ranges wrap around (default: "C$").
    WRAP_SIZE_UPPER: Largest size before a wraparound range restarts (default: "13.5").
    WRAP_SIZE_LOWER: Size a wraparound range restarts from (default: "1").
    CATALOG_PATH: CSV/XLSX catalog loaded by the web app (default: bundled sample).
"""

import os
from decimal import Decimal

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

EXPORT_HEADER = "SKU,Quantity"
UNCATEGORIZED = "Uncategorized"
UNRESOLVED_GROUP = "Unresolved"
SENTINEL_SIZE = "ONE"


def tax_rate() -> Decimal:
    return Decimal(os.getenv("ORDER_TAX_RATE", "0.10"))


def footwear_style_pattern() -> str:
    return os.getenv("FOOTWEAR_STYLE_PATTERN", r"^S")


def cyclic_size_style_pattern() -> str:
    return os.getenv("CYCLIC_SIZE_STYLE_PATTERN", r"C$")


def wrap_bounds() -> tuple[float, float]:
    """Return (upper, lower) for wraparound size ranges."""
    return (
        float(os.getenv("WRAP_SIZE_UPPER", "13.5")),
        float(os.getenv("WRAP_SIZE_LOWER", "1")),
    )


def catalog_path() -> str:
    return os.getenv(
        "CATALOG_PATH", os.path.join(PROJECT_ROOT, "data", "sample_catalog.csv")
    )
