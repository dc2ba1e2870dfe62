"""Shared fixtures for the dashboard test suite."""

import json
from datetime import datetime

import pytest

from core.data import DATA_DIR_ENV, clear_cache
from core.schema import records_frame


# =============================================================================
# RECORD FIXTURES
# =============================================================================

@pytest.fixture
def basic_records():
    """Three plain records (no optional fields) spanning January and February."""
    return [
        {"date": "2024-01-05", "category": "Tech", "segment": "Consumer", "value": 100},
        {"date": "2024-02-10", "category": "Tech", "segment": "Consumer", "value": 200},
        {"date": "2024-02-15", "category": "Office", "segment": "Corporate", "value": 50},
    ]


@pytest.fixture
def enhanced_records():
    """Records carrying region, shipping and profit fields."""
    return [
        {
            "date": "2024-03-01", "category": "Furniture", "segment": "Consumer", "value": 100.0,
            "profit": 15.0, "quantity": 1, "region": "West", "state": "California",
            "shipping_mode": "Standard Class", "shipping_days": 5, "shipping_cost": 12.99,
        },
        {
            "date": "2024-03-02", "category": "Technology", "segment": "Corporate", "value": 300.0,
            "profit": 60.0, "quantity": 1, "region": "East", "state": "New York",
            "shipping_mode": "Same Day", "shipping_days": 1, "shipping_cost": 45.0,
        },
        {
            "date": "2024-03-03", "category": "Technology", "segment": "Home Office", "value": 100.0,
            "profit": 20.0, "quantity": 1, "region": "West", "state": "Oregon",
            "shipping_mode": "Standard Class", "shipping_days": 3, "shipping_cost": 12.99,
        },
        {
            "date": "2024-03-04", "category": "Office Supplies", "segment": "Consumer", "value": 50.0,
            "profit": 5.0, "quantity": 3, "region": "South", "state": "Texas",
            "shipping_mode": "Second Class", "shipping_days": 0, "shipping_cost": None,
        },
    ]


@pytest.fixture
def data_ctx(enhanced_records):
    """A loaded-dataset context as returned by load_dashboard_data."""
    return {
        "source_file": "enhanced_latest.json",
        "meta": {"source": "enhanced_tableau"},
        "records": records_frame(enhanced_records),
        "loaded_at": datetime(2024, 3, 5, 9, 30, 0),
    }


# =============================================================================
# DATA DIRECTORY FIXTURES
# =============================================================================

def _write_dataset(path, records, meta=None):
    path.write_text(json.dumps({"meta": meta or {}, "records": records}), encoding="utf-8")
    return path


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Empty data directory wired in through the environment override."""
    directory = tmp_path / "data"
    directory.mkdir()
    monkeypatch.setenv(DATA_DIR_ENV, str(directory))
    clear_cache()
    yield directory
    clear_cache()


@pytest.fixture
def write_dataset():
    """Writer for `{meta, records}` JSON files."""
    return _write_dataset
