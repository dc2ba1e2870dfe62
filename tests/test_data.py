"""
Unit Tests for dataset loading and the record schema
"""

from datetime import date, datetime

import pandas as pd
import pytest

from core.data import last_updated_label, load_dashboard_data, prepare_context, read_dataset
from core.errors import DataUnavailableError
from core.schema import RECORD_COLUMNS, records_frame


# =============================================================================
# FALLBACK CHAIN
# =============================================================================

class TestLoadFallback:
    """enhanced_latest -> latest -> enhanced_sample -> sample; first readable wins."""

    def test_sample_only(self, data_dir, write_dataset, basic_records):
        write_dataset(data_dir / "sample.json", basic_records)
        ctx = load_dashboard_data()
        assert ctx["source_file"] == "sample.json"
        assert len(ctx["records"]) == 3

    def test_earlier_candidate_wins(self, data_dir, write_dataset, basic_records, enhanced_records):
        write_dataset(data_dir / "sample.json", basic_records)
        write_dataset(data_dir / "latest.json", enhanced_records, meta={"source": "tableau"})
        ctx = load_dashboard_data()
        assert ctx["source_file"] == "latest.json"
        assert ctx["meta"] == {"source": "tableau"}
        assert len(ctx["records"]) == 4

    def test_unreadable_candidate_is_skipped(self, data_dir, write_dataset, basic_records):
        (data_dir / "enhanced_latest.json").write_text("{not json", encoding="utf-8")
        (data_dir / "latest.json").write_text('{"meta": {}}', encoding="utf-8")
        write_dataset(data_dir / "enhanced_sample.json", basic_records)
        assert load_dashboard_data()["source_file"] == "enhanced_sample.json"

    def test_nothing_available(self, data_dir):
        with pytest.raises(DataUnavailableError, match="No data files found"):
            load_dashboard_data()

    def test_explicit_directory(self, tmp_path, write_dataset, basic_records):
        write_dataset(tmp_path / "enhanced_latest.json", basic_records)
        assert load_dashboard_data(tmp_path)["source_file"] == "enhanced_latest.json"


class TestReadDataset:
    def test_requires_records_list(self, tmp_path):
        path = tmp_path / "latest.json"
        path.write_text('{"records": {"a": 1}}', encoding="utf-8")
        with pytest.raises(ValueError):
            read_dataset(path)


# =============================================================================
# CONTEXT
# =============================================================================

class TestPrepareContext:
    def test_no_range_uses_full_dataset(self, data_ctx):
        ctx = prepare_context({}, data_ctx)
        assert ctx["range_applied"] is False
        assert len(ctx["filtered"]) == 4

    def test_range(self, data_ctx):
        ctx = prepare_context({"start_date": "2024-03-02", "end_date": "2024-03-03"}, data_ctx)
        assert ctx["range_applied"] is True
        assert ctx["filters"].start_date == date(2024, 3, 2)
        assert len(ctx["filtered"]) == 2

    def test_empty_result_stays_empty(self, data_ctx):
        ctx = prepare_context({"start_date": "2030-01-01", "end_date": "2030-01-31"}, data_ctx)
        assert ctx["filtered"].empty

    def test_last_updated_label(self, data_ctx):
        assert last_updated_label(data_ctx) == "Last updated: 3/5/2024, 9:30:00 AM (enhanced_latest.json)"

    def test_last_updated_label_defaults(self):
        label = last_updated_label({"loaded_at": datetime(2024, 1, 1, 12, 0, 0)})
        assert label == "Last updated: 1/1/2024, 12:00:00 PM (latest.json)"


# =============================================================================
# SCHEMA
# =============================================================================

class TestRecordsFrame:
    def test_optional_columns_added(self, basic_records):
        df = records_frame(basic_records)
        assert set(RECORD_COLUMNS).issubset(df.columns)
        assert df["profit"].isna().all()
        assert df["region"].isna().all()

    @pytest.mark.parametrize(
        "raw, day",
        [
            ("2024-02-28T23:30:00-05:00", "2024-02-28"),
            ("2024-02-29T01:15:00+09:00", "2024-02-29"),
            ("2024-02-28T23:30:00Z", "2024-02-28"),
            ("2024-02-28T18:45:00", "2024-02-28"),
        ],
    )
    def test_offsets_keep_the_written_day(self, raw, day):
        df = records_frame([{"date": raw, "category": "A", "segment": "S", "value": 1}])
        assert df["date"].iloc[0] == pd.Timestamp(day)

    def test_mixed_offsets_in_one_column(self):
        df = records_frame(
            [
                {"date": "2024-02-28T23:30:00-05:00"},
                {"date": "2024-02-28T23:30:00+05:00"},
                {"date": "2024-03-01"},
            ]
        )
        assert df["date"].tolist() == [pd.Timestamp("2024-02-28"), pd.Timestamp("2024-02-28"), pd.Timestamp("2024-03-01")]

    def test_date_objects(self):
        df = records_frame([{"date": datetime(2024, 2, 28, 23, 30)}, {"date": date(2024, 3, 1)}])
        assert df["date"].tolist() == [pd.Timestamp("2024-02-28"), pd.Timestamp("2024-03-01")]

    def test_records_are_never_dropped(self):
        df = records_frame([{"date": "bad", "value": "abc"}, {}])
        assert len(df) == 2
        assert df["date"].isna().all()
        assert df["value"].isna().all()

    def test_integer_like_postal_codes_render_as_text(self):
        df = records_frame([{"date": "2024-01-01", "postal_code": 94105.0}])
        assert df["postal_code"].tolist() == ["94105"]

    def test_empty(self):
        df = records_frame([])
        assert df.empty
        assert set(RECORD_COLUMNS).issubset(df.columns)
