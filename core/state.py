"""Dashboard controller: the single owner of dataset, filtered subset and UI state."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import pandas as pd

from core.data import last_updated_label, load_dashboard_data
from core.errors import InvalidDateRangeError
from core.filters import PAGE_NAMES, DashboardFilters, default_date_range, filter_by_range, parse_date
from core.metrics_customers import compute_customers
from core.metrics_geography import compute_geography
from core.metrics_operations import compute_operations
from core.metrics_overview import compute_kpis, compute_overview
from core.metrics_products import compute_products
from core.metrics_time import compute_time
from core.preferences import PreferenceStore
from core.schema import records_frame
from core.table import TableController, compute_table

logger = logging.getLogger(__name__)

PAGE_RENDERERS: Dict[str, Callable[..., Dict[str, Any]]] = {
    "overview": compute_overview,
    "geography": compute_geography,
    "products": compute_products,
    "customers": compute_customers,
    "time": compute_time,
    "operations": compute_operations,
}


@dataclass
class UIState:
    current_page: str = "overview"
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    filterbar_collapsed: bool = False


class DashboardController:
    def __init__(self, data_ctx: Dict[str, Any], *, preferences: Optional[PreferenceStore] = None):
        self.data_ctx = data_ctx
        records = data_ctx.get("records")
        self.records: pd.DataFrame = records if records is not None else records_frame([])
        # None until a filter is applied; pages then use the full dataset.
        self.filtered: Optional[pd.DataFrame] = None
        self.ui = UIState()
        self.table = TableController()
        self.preferences = preferences
        if preferences is not None:
            saved = preferences.load()
            self.ui.filterbar_collapsed = saved["filterbar_collapsed"]
            self.table.state.page_size = saved["page_size"]

    @classmethod
    def load(cls, data_dir: Optional[Path] = None, *, preferences: Optional[PreferenceStore] = None) -> "DashboardController":
        return cls(load_dashboard_data(data_dir), preferences=preferences)

    @property
    def active_records(self) -> pd.DataFrame:
        return self.filtered if self.filtered is not None else self.records

    @property
    def last_updated(self) -> str:
        return last_updated_label(self.data_ctx)

    def filters(self) -> DashboardFilters:
        state = self.table.state
        return DashboardFilters(
            start_date=self.ui.start_date,
            end_date=self.ui.end_date,
            page_size=state.page_size,
            page_index=state.page_index,
            sort_field=state.sort_field,
            sort_direction=state.sort_direction,
        )

    def context(self) -> Dict[str, Any]:
        return {
            "filters": self.filters(),
            "records": self.records,
            "filtered": self.active_records,
            "range_applied": self.ui.start_date is not None and self.ui.end_date is not None,
            "source_file": self.data_ctx.get("source_file"),
            "meta": self.data_ctx.get("meta") or {},
        }

    def _persist(self) -> None:
        if self.preferences is not None:
            self.preferences.save(filterbar_collapsed=self.ui.filterbar_collapsed, page_size=self.table.state.page_size)

    # ----- filter bar -----
    def apply_filters(self, start: Any, end: Any) -> pd.DataFrame:
        """Replace the filtered subset; an empty bound leaves the state untouched."""
        start_day = parse_date(start)
        end_day = parse_date(end)
        if start_day is None or end_day is None:
            raise InvalidDateRangeError("Please select start and end dates")

        self.filtered = filter_by_range(self.records, start_day, end_day)
        self.ui.start_date, self.ui.end_date = start_day, end_day
        self.table.clamp_page(len(self.filtered))
        logger.info("Filter applied: %d records (%s to %s)", len(self.filtered), start_day, end_day)
        return self.filtered

    def apply_default_range(self, today: Optional[date] = None) -> pd.DataFrame:
        start, end = default_date_range(today)
        return self.apply_filters(start, end)

    def reset_filters(self) -> None:
        self.ui.start_date = None
        self.ui.end_date = None
        self.table.reset()
        self.filtered = self.records
        self._persist()

    def toggle_filterbar(self) -> bool:
        self.ui.filterbar_collapsed = not self.ui.filterbar_collapsed
        self._persist()
        return self.ui.filterbar_collapsed

    # ----- table -----
    def set_sort(self, field: str) -> Dict[str, Any]:
        self.table.set_sort(field)
        return self.table_payload()

    def set_page_size(self, size: Any) -> Dict[str, Any]:
        self.table.set_page_size(size)
        self._persist()
        return self.table_payload()

    def change_page(self, delta: int) -> Dict[str, Any]:
        self.table.change_page(delta, len(self.active_records))
        return self.table_payload()

    def table_payload(self) -> Dict[str, Any]:
        return compute_table(self.filters(), self.context(), self.table)

    # ----- pages -----
    def kpis(self) -> Dict[str, Any]:
        return compute_kpis(self.filters(), self.context())

    def render_page(self, name: Optional[str] = None, **options: Any) -> Dict[str, Any]:
        name = name or self.ui.current_page
        if name not in PAGE_RENDERERS:
            raise ValueError(f"Unknown page: {name}")
        return PAGE_RENDERERS[name](self.filters(), self.context(), **options)

    def switch_page(self, name: str, **options: Any) -> Dict[str, Any]:
        payload = self.render_page(name, **options)
        self.ui.current_page = name
        return payload

    def render_all(self) -> Dict[str, Dict[str, Any]]:
        """Recompute every page from the current subset."""
        return {name: self.render_page(name) for name in PAGE_NAMES}
