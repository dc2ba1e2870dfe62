"""
API Tests for the FastAPI dashboard service
"""

import pytest
from fastapi.testclient import TestClient

import api.main
from api.main import app

FEBRUARY = {"start_date": "2024-02-01", "end_date": "2024-02-28"}


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def loaded(data_dir, write_dataset, basic_records, enhanced_records):
    write_dataset(data_dir / "latest.json", basic_records + enhanced_records, meta={"source": "tableau"})
    return data_dir


# =============================================================================
# META
# =============================================================================

class TestMeta:
    def test_source(self, client, loaded):
        body = client.get("/meta/source").json()
        assert body["source_file"] == "latest.json"
        assert body["record_count"] == 7
        assert body["last_updated"].startswith("Last updated: ")
        assert body["meta"]["source"] == "tableau"

    def test_data_unavailable(self, client, data_dir):
        response = client.get("/meta/source")
        assert response.status_code == 503
        assert response.json()["error"] == "Failed to load data: No data files found"

    def test_data_unavailable_on_pages(self, client, data_dir):
        response = client.post("/overview", json={})
        assert response.status_code == 503


# =============================================================================
# PAGES
# =============================================================================

class TestPages:
    def test_kpis_for_range(self, client, loaded):
        body = client.post("/kpis", json=FEBRUARY).json()
        assert body["values"]["total_sales"] == pytest.approx(250.0)
        assert body["values"]["profit_source"] == "assumed"
        assert body["display"]["profit_margin"] == "12.5%"
        assert body["filters"]["start_date"] == "2024-02-01"

    def test_overview_without_range_uses_everything(self, client, loaded):
        body = client.post("/overview", json={}).json()
        assert body["kpis"]["values"]["total_orders"] == 7
        assert body["charts"]["monthly_trend"]["$schema"].startswith("https://vega.github.io/schema/vega-lite/")

    @pytest.mark.parametrize("page", ["geography", "products", "customers", "time", "operations"])
    def test_each_page(self, client, loaded, page):
        response = client.post(f"/{page}", json={})
        assert response.status_code == 200
        assert set(response.json()) >= {"filters", "kpis", "series", "table", "charts"}

    def test_geography_region_query(self, client, loaded):
        body = client.post("/geography", params={"region": "West"}, json={}).json()
        assert body["selected"] == "West"
        assert [row["region"] for row in body["table"]] == ["West"]

    def test_operations_mode_query(self, client, loaded):
        body = client.post("/operations", params={"shipping_mode": "Same Day"}, json={}).json()
        assert [row["shipping_mode"] for row in body["table"]] == ["Same Day"]

    def test_invalid_body(self, client, loaded):
        response = client.post("/kpis", json={"page_size": "lots"})
        assert response.status_code == 422

    @pytest.mark.parametrize("bounds", [{"start_date": "2024-03-03"}, {"end_date": "2024-03-03"}])
    def test_half_open_range_is_rejected(self, client, loaded, bounds):
        response = client.post("/kpis", json=bounds)
        assert response.status_code == 400
        assert response.json() == {"error": "Please select start and end dates", "type": "InvalidDateRangeError"}

    @pytest.mark.parametrize("path", ["/overview", "/table", "/export/records"])
    def test_half_open_range_is_rejected_everywhere(self, client, loaded, path):
        response = client.post(path, json={"start_date": "2024-03-03"})
        assert response.status_code == 400
        assert response.json()["type"] == "InvalidDateRangeError"


# =============================================================================
# TABLE
# =============================================================================

class TestTable:
    def test_default(self, client, loaded):
        body = client.post("/table", json={"page_size": 10}).json()
        assert body["stats"]["page_info"] == "Showing 1-7"
        assert body["rows"][0]["date"] == "01/05/2024"

    def test_sort_toggles(self, client, loaded):
        body = client.post("/table/sort", params={"field": "date"}, json={}).json()
        assert body["state"]["sort_direction"] == "desc"
        assert body["rows"][0]["date"] == "03/04/2024"

    def test_sort_new_field(self, client, loaded):
        body = client.post("/table/sort", params={"field": "value"}, json={"sort_direction": "desc"}).json()
        assert body["state"] == {"sort_field": "value", "sort_direction": "asc", "page_index": 1, "page_size": 50}
        assert body["rows"][0]["value"] == "$50"

    def test_page_out_of_range(self, client, loaded):
        body = client.post("/table/page", params={"delta": 1}, json={"page_size": 10}).json()
        assert body["stats"]["current_page"] == 1


# =============================================================================
# EXPORT
# =============================================================================

class TestExport:
    def test_records_csv(self, client, loaded):
        response = client.post("/export/records", json=FEBRUARY)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.strip().splitlines()
        assert lines[0].startswith("date,category,segment,value")
        assert len(lines) == 3
        assert lines[1].startswith("2024-02-10,Tech,Consumer,200.0")

    def test_page_table_csv(self, client, loaded):
        response = client.post("/export/products", json={})
        assert response.text.splitlines()[0] == "category,sales,orders"

    def test_unknown_page_is_empty(self, client, loaded):
        response = client.post("/export/returns", json={})
        assert response.status_code == 200
        assert response.text.strip() == ""

    def test_renderer_failure_is_json_error(self, client, loaded, monkeypatch):
        def broken(filters, ctx, **opts):
            raise RuntimeError("renderer exploded")

        monkeypatch.setitem(api.main.PAGE_RENDERERS, "products", broken)
        response = client.post("/export/products", json={})
        assert response.status_code == 500
        assert response.json() == {"error": "renderer exploded", "type": "RuntimeError"}
