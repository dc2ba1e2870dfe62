from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from core.errors import DataUnavailableError
from core.filters import DashboardFilters, filter_by_range, normalize_filters
from core.formatting import format_timestamp
from core.schema import records_frame

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
DATA_DIR_ENV = "SALES_DASHBOARD_DATA_DIR"

# Tried in order; the first readable file wins.
DATA_FILES: Tuple[str, ...] = (
    "enhanced_latest.json",
    "latest.json",
    "enhanced_sample.json",
    "sample.json",
)


def get_data_dir() -> Path:
    override = os.environ.get(DATA_DIR_ENV)
    return Path(override) if override else DATA_DIR


def get_source_files(data_dir: Optional[Path] = None) -> List[Path]:
    data_dir = data_dir or get_data_dir()
    return [data_dir / name for name in DATA_FILES if (data_dir / name).is_file()]


def file_signature(path: Path) -> Tuple[str, float]:
    return str(path), path.stat().st_mtime


def read_dataset(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, dict) or not isinstance(raw.get("records"), list):
        raise ValueError(f"{path.name} has no records list")
    return raw


@lru_cache(maxsize=4)
def _load_dataset_cached(path_str: str, mtime: float) -> Dict[str, Any]:
    path = Path(path_str)
    raw = read_dataset(path)
    records = records_frame(raw["records"])
    logger.info("Loaded %s (%d records)", path.name, len(records))
    return {
        "source_file": path.name,
        "meta": raw.get("meta") or {},
        "records": records,
        "loaded_at": datetime.now(),
    }


def load_dashboard_data(data_dir: Optional[Path] = None) -> Dict[str, Any]:
    """Load the first available dataset from the fallback chain.

    Raises DataUnavailableError when no candidate can be read.
    """
    data_dir = data_dir or get_data_dir()
    for name in DATA_FILES:
        path = data_dir / name
        if not path.is_file():
            logger.info("%s not found, trying next source", name)
            continue
        try:
            return _load_dataset_cached(*file_signature(path))
        except (OSError, ValueError) as exc:
            logger.warning("Failed to load %s: %s", name, exc)
    raise DataUnavailableError("No data files found")


def clear_cache() -> None:
    _load_dataset_cached.cache_clear()


def last_updated_label(data_ctx: Dict[str, Any]) -> str:
    loaded_at = data_ctx.get("loaded_at") or datetime.now()
    return f"Last updated: {format_timestamp(loaded_at)} ({data_ctx.get('source_file', 'latest.json')})"


def prepare_context(filters: dict | DashboardFilters, data_ctx: Dict[str, Any]) -> Dict[str, Any]:
    """Resolve the filtered subset every page computes from.

    Without a date range the full dataset is used.
    """
    filt = filters if isinstance(filters, DashboardFilters) else normalize_filters(filters)
    records: pd.DataFrame = data_ctx.get("records")
    if records is None:
        records = records_frame([])

    if filt.range_applied:
        filtered = filter_by_range(records, filt.start_date, filt.end_date)
    else:
        filtered = records

    return {
        "filters": filt,
        "records": records,
        "filtered": filtered,
        "range_applied": filt.range_applied,
        "source_file": data_ctx.get("source_file"),
        "meta": data_ctx.get("meta") or {},
    }
