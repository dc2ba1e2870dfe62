"""Record table: sort / page-size / page-navigation state machine."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from core.filters import DEFAULT_PAGE_SIZE, DEFAULT_SORT_FIELD, DashboardFilters, PageSize, SortDirection, coerce_page_size
from core.formatting import format_currency, format_date, format_integer
from core.schema import MISSING_DISPLAY, RecordsLike, ensure_frame, is_missing, text_or_placeholder

TABLE_COLUMNS = ["date", "category", "segment", "value", "profit", "quantity", "region", "shipping_mode"]


@dataclass
class TableState:
    sort_field: str = DEFAULT_SORT_FIELD
    sort_direction: SortDirection = "asc"
    page_index: int = 1
    page_size: PageSize = DEFAULT_PAGE_SIZE


def sort_records(records: pd.DataFrame, field: str, direction: SortDirection) -> pd.DataFrame:
    """Stable sort on one column; missing values always go last."""
    if records.empty or field not in records.columns:
        return records
    key = None
    if field == "value":
        key = lambda s: pd.to_numeric(s, errors="coerce")  # noqa: E731
    return records.sort_values(field, ascending=direction == "asc", kind="stable", na_position="last", key=key)


class TableController:
    def __init__(self, state: Optional[TableState] = None):
        self.state = state or TableState()

    @classmethod
    def from_filters(cls, filters: DashboardFilters) -> "TableController":
        return cls(
            TableState(
                sort_field=filters.sort_field,
                sort_direction=filters.sort_direction,
                page_index=filters.page_index,
                page_size=filters.page_size,
            )
        )

    def reset(self) -> None:
        self.state = TableState()

    def set_sort(self, field: str) -> None:
        """Same field flips direction; a new field starts ascending."""
        if field == self.state.sort_field:
            self.state.sort_direction = "desc" if self.state.sort_direction == "asc" else "asc"
        else:
            self.state.sort_field = field
            self.state.sort_direction = "asc"

    def set_page_size(self, size: Any) -> None:
        self.state.page_size = coerce_page_size(size)
        self.state.page_index = 1

    def effective_page_size(self, filtered_count: int) -> int:
        if self.state.page_size == "all":
            return filtered_count
        return int(self.state.page_size)

    def total_pages(self, filtered_count: int) -> int:
        size = self.effective_page_size(filtered_count)
        if filtered_count <= 0 or size <= 0:
            return 0
        return math.ceil(filtered_count / size)

    def change_page(self, delta: int, filtered_count: int) -> bool:
        """Move by `delta` pages; out-of-range moves leave the state unchanged."""
        new_page = self.state.page_index + delta
        if 1 <= new_page <= self.total_pages(filtered_count):
            self.state.page_index = new_page
            return True
        return False

    def clamp_page(self, filtered_count: int) -> None:
        self.state.page_index = min(max(1, self.state.page_index), max(1, self.total_pages(filtered_count)))

    def page_bounds(self, filtered_count: int) -> Tuple[int, int]:
        if self.state.page_size == "all":
            return 0, filtered_count
        start = (self.state.page_index - 1) * int(self.state.page_size)
        return start, start + int(self.state.page_size)

    def sort_and_paginate(self, records: RecordsLike) -> pd.DataFrame:
        """Slice the current page out of the filtered records, then sort that slice.

        Sorting happens after slicing, so ordering only holds within a page.
        """
        df = ensure_frame(records)
        start, end = self.page_bounds(len(df))
        page = df.iloc[start:end]
        return sort_records(page, self.state.sort_field, self.state.sort_direction)

    def stats(self, filtered_count: int) -> Dict[str, Any]:
        start, end = self.page_bounds(filtered_count)
        end = min(end, filtered_count)
        displayed = max(0, end - start)
        total_pages = self.total_pages(filtered_count)
        return {
            "total_records": filtered_count,
            "displayed_records": displayed,
            "current_page": self.state.page_index,
            "total_pages": total_pages,
            "page_info": f"Showing {start + 1}-{end}" if displayed else "Showing 0-0",
            "has_prev": self.state.page_index > 1,
            "has_next": self.state.page_index < total_pages,
        }

    def sort_indicators(self, columns: List[str] = TABLE_COLUMNS) -> Dict[str, str]:
        return {
            col: ("▲" if self.state.sort_direction == "asc" else "▼") if col == self.state.sort_field else "▼"
            for col in columns
        }


def _optional_currency(value: Any) -> str:
    if is_missing(value) or not value:
        return MISSING_DISPLAY
    return format_currency(value, 0)


def _optional_integer(value: Any) -> str:
    if is_missing(value) or not value:
        return MISSING_DISPLAY
    return format_integer(value)


def format_table_rows(page: pd.DataFrame) -> List[Dict[str, str]]:
    rows: List[Dict[str, str]] = []
    for record in page.to_dict(orient="records"):
        rows.append(
            {
                "date": format_date(record.get("date")),
                "category": text_or_placeholder(record.get("category")),
                "segment": text_or_placeholder(record.get("segment")),
                "value": format_currency(record.get("value"), 0),
                "profit": _optional_currency(record.get("profit")),
                "quantity": _optional_integer(record.get("quantity")),
                "region": text_or_placeholder(record.get("region")),
                "shipping_mode": text_or_placeholder(record.get("shipping_mode")),
            }
        )
    return rows


def compute_table(filters: DashboardFilters, ctx: Dict[str, Any], controller: Optional[TableController] = None) -> Dict[str, Any]:
    df = ensure_frame(ctx.get("filtered"))
    controller = controller or TableController.from_filters(filters)
    page = controller.sort_and_paginate(df)
    return {
        "filters": asdict(filters),
        "state": asdict(controller.state),
        "columns": TABLE_COLUMNS,
        "sort_indicators": controller.sort_indicators(),
        "rows": format_table_rows(page),
        "stats": controller.stats(len(df)),
    }
