"""
Unit Tests for the record table controller

Covers sort toggling, page-size changes, navigation bounds and the
slice-then-sort pagination order.
"""

import pytest

from core.filters import DashboardFilters
from core.schema import records_frame
from core.table import TableController, TableState, compute_table, format_table_rows, sort_records


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def twelve_records():
    """Twelve records in date order whose values decrease from 12 to 1."""
    return records_frame(
        [
            {"date": f"2024-01-{day:02d}", "category": "A", "segment": "S", "value": 13 - day}
            for day in range(1, 13)
        ]
    )


@pytest.fixture
def records_25():
    return records_frame(
        [{"date": "2024-01-01", "category": "A", "segment": "S", "value": i} for i in range(25)]
    )


# =============================================================================
# STATE TRANSITIONS
# =============================================================================

class TestSortState:
    def test_same_field_flips_direction(self):
        table = TableController()
        table.set_sort("date")
        assert table.state.sort_direction == "desc"
        table.set_sort("date")
        assert table.state.sort_direction == "asc"

    def test_new_field_starts_ascending(self):
        table = TableController(TableState(sort_field="date", sort_direction="desc"))
        table.set_sort("value")
        assert table.state.sort_field == "value"
        assert table.state.sort_direction == "asc"

    def test_indicators(self):
        table = TableController(TableState(sort_field="value", sort_direction="desc"))
        indicators = table.sort_indicators()
        assert indicators["value"] == "▼"
        assert indicators["date"] == "▼"
        table.set_sort("value")
        assert table.sort_indicators()["value"] == "▲"


class TestPagination:
    def test_set_page_size_resets_page(self):
        table = TableController(TableState(page_index=3))
        table.set_page_size("25")
        assert table.state.page_size == 25
        assert table.state.page_index == 1

    @pytest.mark.parametrize("size, expected", [(20, 20), ("7", 7), ("all", "all"), (0, 50), (-5, 50), ("many", 50)])
    def test_set_page_size_accepts_any_positive_size(self, size, expected):
        table = TableController()
        table.set_page_size(size)
        assert table.state.page_size == expected

    def test_custom_page_size_paginates(self, records_25):
        table = TableController()
        table.set_page_size(20)
        assert table.total_pages(len(records_25)) == 2
        assert table.change_page(1, len(records_25)) is True
        assert len(table.sort_and_paginate(records_25)) == 5
        assert table.stats(len(records_25))["page_info"] == "Showing 21-25"

    def test_total_pages(self):
        table = TableController(TableState(page_size=10))
        assert table.total_pages(25) == 3
        assert table.total_pages(20) == 2
        assert table.total_pages(0) == 0

    def test_all_is_one_page(self):
        table = TableController(TableState(page_size="all"))
        assert table.total_pages(25) == 1
        assert table.page_bounds(25) == (0, 25)

    def test_change_page_within_bounds(self):
        table = TableController(TableState(page_size=10))
        assert table.change_page(1, 25) is True
        assert table.state.page_index == 2

    @pytest.mark.parametrize("delta", [-1, 3])
    def test_change_page_out_of_bounds_is_noop(self, delta):
        table = TableController(TableState(page_size=10))
        assert table.change_page(delta, 25) is False
        assert table.state.page_index == 1

    def test_change_page_on_empty_subset(self):
        table = TableController()
        assert table.change_page(1, 0) is False
        assert table.state.page_index == 1

    def test_clamp_page(self):
        table = TableController(TableState(page_size=10, page_index=5))
        table.clamp_page(25)
        assert table.state.page_index == 3
        table.clamp_page(0)
        assert table.state.page_index == 1

    def test_reset(self):
        table = TableController(TableState(sort_field="value", sort_direction="desc", page_index=4, page_size=10))
        table.reset()
        assert table.state == TableState()
        assert table.state.page_size == 50


# =============================================================================
# SORT + PAGINATE
# =============================================================================

class TestSortAndPaginate:
    def test_slices_before_sorting(self, twelve_records):
        """Page one holds the first ten records, sorted among themselves only."""
        table = TableController(TableState(sort_field="value", sort_direction="asc", page_size=10))
        page = table.sort_and_paginate(twelve_records)
        assert page["value"].tolist() == [float(v) for v in range(3, 13)]

    def test_second_page(self, twelve_records):
        table = TableController(TableState(sort_field="value", sort_direction="asc", page_size=10, page_index=2))
        page = table.sort_and_paginate(twelve_records)
        assert page["value"].tolist() == [1.0, 2.0]

    def test_date_desc(self, twelve_records):
        table = TableController(TableState(sort_field="date", sort_direction="desc", page_size=10))
        page = table.sort_and_paginate(twelve_records)
        assert page["date"].dt.day.tolist() == list(range(10, 0, -1))

    def test_missing_values_sort_last(self):
        df = records_frame(
            [
                {"date": "2024-01-01", "category": "A", "segment": "S", "value": 1, "region": None},
                {"date": "2024-01-02", "category": "A", "segment": "S", "value": 2, "region": "East"},
                {"date": "2024-01-03", "category": "A", "segment": "S", "value": 3, "region": "West"},
            ]
        )
        for direction in ("asc", "desc"):
            ordered = sort_records(df, "region", direction)
            assert ordered["value"].tolist()[-1] == 1.0

    def test_stable_ties(self):
        df = records_frame(
            [{"date": "2024-01-01", "category": c, "segment": "S", "value": 5} for c in ("x", "y", "z")]
        )
        assert sort_records(df, "value", "desc")["category"].tolist() == ["x", "y", "z"]


class TestStats:
    def test_last_partial_page(self, records_25):
        table = TableController(TableState(page_size=10, page_index=3))
        stats = table.stats(len(records_25))
        assert stats == {
            "total_records": 25,
            "displayed_records": 5,
            "current_page": 3,
            "total_pages": 3,
            "page_info": "Showing 21-25",
            "has_prev": True,
            "has_next": False,
        }

    def test_first_page(self):
        stats = TableController(TableState(page_size=10)).stats(25)
        assert stats["page_info"] == "Showing 1-10"
        assert stats["has_prev"] is False
        assert stats["has_next"] is True

    def test_empty(self):
        stats = TableController().stats(0)
        assert stats["page_info"] == "Showing 0-0"
        assert stats["total_pages"] == 0
        assert stats["displayed_records"] == 0
        assert stats["has_next"] is False


# =============================================================================
# ROWS
# =============================================================================

class TestRows:
    def test_placeholders_for_missing_optional_fields(self, basic_records):
        rows = format_table_rows(records_frame(basic_records[:1]))
        assert rows == [
            {
                "date": "01/05/2024",
                "category": "Tech",
                "segment": "Consumer",
                "value": "$100",
                "profit": "--",
                "quantity": "--",
                "region": "--",
                "shipping_mode": "--",
            }
        ]

    def test_enhanced_row(self, enhanced_records):
        row = format_table_rows(records_frame(enhanced_records[1:2]))[0]
        assert row["profit"] == "$60"
        assert row["quantity"] == "1"
        assert row["region"] == "East"
        assert row["shipping_mode"] == "Same Day"

    def test_compute_table_payload(self, enhanced_records):
        filters = DashboardFilters(page_size=10, sort_field="value", sort_direction="desc")
        payload = compute_table(filters, {"filtered": records_frame(enhanced_records)})
        assert [r["value"] for r in payload["rows"]] == ["$300", "$100", "$100", "$50"]
        assert payload["stats"]["page_info"] == "Showing 1-4"
        assert payload["state"]["sort_field"] == "value"
        assert payload["columns"][0] == "date"
