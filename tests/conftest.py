import pytest

import sys, pathlib
ROOT = pathlib.Path(__file__).resolve().parents[1]          #Project repo root
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.catalog import build_catalog
from core.ledger import OrderLedger

SAMPLE_CSV = ROOT / "data" / "sample_catalog.csv"

SAMPLE_ROWS = [
    {"collection": "Dance Shoes"},
    {
        "style": "S000V720C",
        "description": "Child Ballet Slipper",
        "sizes": "6 - 2.5",
        "widths": "M,W",
        "colours": "BLK,CAR",
        "wholesale": "12.50",
        "retail": "29.95",
    },
    {
        "style": "S0002050W",
        "description": "Women's Jazz Slip-On",
        "sizes": "3 - 14 (whole sizes only)",
        "widths": "M,W",
        "colours": "LPK",
        "wholesale": "38.00",
        "retail": "89.95",
    },
    {},
    {"collection": "Accessories"},
    {
        "style": "A000B325U",
        "description": "Knit Leg Warmers",
        "sizes": "OS",
        "colours": "CCG,OAT",
        "wholesale": "9.00",
        "retail": "24.95",
    },
]


@pytest.fixture(autouse=True)
def _policy_env(monkeypatch):
    # Keep engine policy at its defaults regardless of the caller's shell
    for var in (
        "ORDER_TAX_RATE",
        "FOOTWEAR_STYLE_PATTERN",
        "CYCLIC_SIZE_STYLE_PATTERN",
        "WRAP_SIZE_UPPER",
        "WRAP_SIZE_LOWER",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def sample_rows():
    return [dict(r) for r in SAMPLE_ROWS]


@pytest.fixture
def catalog(sample_rows):
    return build_catalog(sample_rows)


@pytest.fixture
def ledger(catalog):
    return OrderLedger(catalog)


@pytest.fixture
def app_module(tmp_path, monkeypatch):
    import app as app_mod

    out = tmp_path / "outputs"
    out.mkdir()
    monkeypatch.setattr(app_mod, "OUTPUT_FOLDER", str(out), raising=False)
    monkeypatch.setenv("CATALOG_PATH", str(SAMPLE_CSV))
    monkeypatch.setattr(app_mod, "_CATALOG", None, raising=False)
    monkeypatch.setattr(app_mod, "_CATALOG_MTIME", None, raising=False)
    return app_mod


@pytest.fixture
def client(app_module):
    app = app_module.app
    app.config.update(TESTING=True)
    return app.test_client()


@pytest.fixture
def order_quantities():
    return {
        "S000V720C0MBLK075": 3,
        "A000B325UOATONE": 2,
    }
