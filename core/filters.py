from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Literal, Optional, Tuple, Union

import pandas as pd

from core.schema import RECORD_COLUMNS, RecordsLike, empty_frame, ensure_frame

PageSize = Union[int, Literal["all"]]
SortDirection = Literal["asc", "desc"]

PAGE_SIZE_OPTIONS: Tuple[PageSize, ...] = (10, 25, 50, 100, "all")
DEFAULT_PAGE_SIZE: PageSize = 50
DEFAULT_SORT_FIELD = "date"
SORT_FIELDS = tuple(RECORD_COLUMNS)
PAGE_NAMES = ("overview", "geography", "products", "customers", "time", "operations")


@dataclass(frozen=True)
class DashboardFilters:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    page_size: PageSize = DEFAULT_PAGE_SIZE
    page_index: int = 1
    sort_field: str = DEFAULT_SORT_FIELD
    sort_direction: SortDirection = "asc"

    @property
    def range_applied(self) -> bool:
        return self.start_date is not None and self.end_date is not None


def parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    ts = pd.to_datetime(str(value), errors="coerce")
    if pd.isna(ts):
        return None
    return ts.date()


def coerce_page_size(value: Any) -> PageSize:
    """Any positive integer or "all"; anything else gives the default."""
    if isinstance(value, str) and value.strip().lower() == "all":
        return "all"
    try:
        size = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PAGE_SIZE
    return size if size > 0 else DEFAULT_PAGE_SIZE


def normalize_page_size(value: Any) -> PageSize:
    """Restrict to the selectable options (API input and stored preferences)."""
    size = coerce_page_size(value)
    return size if size in PAGE_SIZE_OPTIONS else DEFAULT_PAGE_SIZE


def normalize_filters(raw: dict) -> DashboardFilters:
    raw = raw or {}

    page_index = raw.get("page_index", 1)
    try:
        page_index = int(page_index)
    except (TypeError, ValueError):
        page_index = 1
    page_index = max(1, page_index)

    sort_field = str(raw.get("sort_field") or DEFAULT_SORT_FIELD)
    if sort_field not in SORT_FIELDS:
        sort_field = DEFAULT_SORT_FIELD
    sort_direction = "desc" if str(raw.get("sort_direction") or "").lower() == "desc" else "asc"

    return DashboardFilters(
        start_date=parse_date(raw.get("start_date")),
        end_date=parse_date(raw.get("end_date")),
        page_size=normalize_page_size(raw.get("page_size", DEFAULT_PAGE_SIZE)),
        page_index=page_index,
        sort_field=sort_field,
        sort_direction=sort_direction,
    )


def default_date_range(today: Optional[date] = None) -> Tuple[date, date]:
    """First day of the current month through today."""
    today = today or date.today()
    return today.replace(day=1), today


def filter_by_range(records: RecordsLike, start: Any, end: Any) -> pd.DataFrame:
    """Records whose day falls within [start, end], inclusive.

    An inverted range yields an empty frame; so does a missing dataset.
    """
    if records is None:
        return empty_frame()
    df = ensure_frame(records)
    start_day = parse_date(start)
    end_day = parse_date(end)
    if start_day is None or end_day is None:
        raise ValueError(f"Invalid date range: {start!r} to {end!r}")

    lo = pd.Timestamp(start_day)
    hi = pd.Timestamp(end_day)
    mask = (df["date"] >= lo) & (df["date"] <= hi)
    return df.loc[mask]
