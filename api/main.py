from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import DashboardFiltersModel, SourceResponse
from core.data import last_updated_label, load_dashboard_data, prepare_context
from core.errors import DataUnavailableError, InvalidDateRangeError
from core.filters import DashboardFilters, normalize_filters
from core.metrics_customers import compute_customers
from core.metrics_geography import compute_geography
from core.metrics_operations import compute_operations
from core.metrics_overview import compute_kpis, compute_overview
from core.metrics_products import compute_products
from core.metrics_time import compute_time
from core.state import PAGE_RENDERERS
from core.table import TableController, compute_table

app = FastAPI(title="Sales Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:8501"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _filters_from_model(model: DashboardFiltersModel) -> DashboardFilters:
    return normalize_filters(model.model_dump())


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                type(pd.NaT): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(exc: Exception, label: str) -> JSONResponse:
    if isinstance(exc, DataUnavailableError):
        logger.warning("%s: %s", label, exc)
        return JSONResponse(status_code=503, content={"error": f"Failed to load data: {exc}", "type": type(exc).__name__})
    if isinstance(exc, InvalidDateRangeError):
        logger.info("%s rejected: %s", label, exc)
        return JSONResponse(status_code=400, content={"error": str(exc), "type": type(exc).__name__})
    logger.exception("%s failed", label)
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _context(filters: DashboardFiltersModel):
    f = _filters_from_model(filters)
    if (f.start_date is None) != (f.end_date is None):
        raise InvalidDateRangeError("Please select start and end dates")
    data_ctx = load_dashboard_data()
    return f, prepare_context(f, data_ctx)


@app.get("/meta/source", response_model=SourceResponse)
def meta_source():
    try:
        data_ctx = load_dashboard_data()
        return _json(
            {
                "source_file": data_ctx["source_file"],
                "record_count": int(len(data_ctx["records"])),
                "last_updated": last_updated_label(data_ctx),
                "meta": data_ctx.get("meta") or {},
            }
        )
    except Exception as exc:
        return _error(exc, "meta_source")


@app.post("/kpis")
def kpis(filters: DashboardFiltersModel):
    try:
        f, ctx = _context(filters)
        return _json(compute_kpis(f, ctx))
    except Exception as exc:
        return _error(exc, "kpis")


@app.post("/overview")
def overview(filters: DashboardFiltersModel):
    try:
        f, ctx = _context(filters)
        return _json(compute_overview(f, ctx))
    except Exception as exc:
        return _error(exc, "overview")


@app.post("/geography")
def geography(filters: DashboardFiltersModel, region: Optional[str] = Query(default=None)):
    try:
        f, ctx = _context(filters)
        return _json(compute_geography(f, ctx, region=region or None))
    except Exception as exc:
        return _error(exc, "geography")


@app.post("/products")
def products(filters: DashboardFiltersModel):
    try:
        f, ctx = _context(filters)
        return _json(compute_products(f, ctx))
    except Exception as exc:
        return _error(exc, "products")


@app.post("/customers")
def customers(filters: DashboardFiltersModel):
    try:
        f, ctx = _context(filters)
        return _json(compute_customers(f, ctx))
    except Exception as exc:
        return _error(exc, "customers")


@app.post("/time")
def time_page(filters: DashboardFiltersModel):
    try:
        f, ctx = _context(filters)
        return _json(compute_time(f, ctx))
    except Exception as exc:
        return _error(exc, "time")


@app.post("/operations")
def operations(filters: DashboardFiltersModel, shipping_mode: Optional[str] = Query(default=None)):
    try:
        f, ctx = _context(filters)
        return _json(compute_operations(f, ctx, shipping_mode=shipping_mode or None))
    except Exception as exc:
        return _error(exc, "operations")


@app.post("/table")
def table(filters: DashboardFiltersModel):
    try:
        f, ctx = _context(filters)
        return _json(compute_table(f, ctx))
    except Exception as exc:
        return _error(exc, "table")


@app.post("/table/sort")
def table_sort(filters: DashboardFiltersModel, field: str = Query(...)):
    try:
        f, ctx = _context(filters)
        controller = TableController.from_filters(f)
        controller.set_sort(field)
        return _json(compute_table(f, ctx, controller))
    except Exception as exc:
        return _error(exc, "table_sort")


@app.post("/table/page")
def table_page(filters: DashboardFiltersModel, delta: int = Query(...)):
    try:
        f, ctx = _context(filters)
        controller = TableController.from_filters(f)
        controller.change_page(delta, len(ctx["filtered"]))
        return _json(compute_table(f, ctx, controller))
    except Exception as exc:
        return _error(exc, "table_page")


@app.post("/export/{page}")
def export_page(page: str, filters: DashboardFiltersModel):
    try:
        f, ctx = _context(filters)
        if page == "records":
            export_df = ctx["filtered"].assign(date=lambda d: d["date"].dt.strftime("%Y-%m-%d"))
        elif page in PAGE_RENDERERS:
            export_df = pd.DataFrame(PAGE_RENDERERS[page](f, ctx)["table"])
        else:
            export_df = pd.DataFrame()

        csv_bytes = export_df.to_csv(index=False).encode("utf-8")
        return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={page}.csv"})
    except Exception as exc:
        return _error(exc, "export")
