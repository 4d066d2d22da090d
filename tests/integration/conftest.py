"""
Fixtures for integration tests.
"""
import pytest
import pathlib
import sys

# Add project root to path
HERE = pathlib.Path(__file__).parent
PROJECT_ROOT = HERE.parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def golden_order_file():
    """
    Provides a real exported order from the golden expected files.
    Returns (path, filename) tuple.
    """
    path = PROJECT_ROOT / "tests" / "golden" / "expected" / "sample_order.txt"
    if not path.exists():
        pytest.skip("No golden order file found")
    return str(path), path.name


@pytest.fixture
def xlsx_catalog(tmp_path, monkeypatch, app_module):
    """
    Writes the sample catalog as an .xlsx sheet and points CATALOG_PATH at it.
    Returns the path.
    """
    import pandas as pd

    src = PROJECT_ROOT / "data" / "sample_catalog.csv"
    df = pd.read_csv(src, dtype=str, keep_default_na=False)
    path = tmp_path / "catalog.xlsx"
    df.to_excel(path, index=False)
    monkeypatch.setenv("CATALOG_PATH", str(path))
    return str(path)
