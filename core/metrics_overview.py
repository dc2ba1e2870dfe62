from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from core.aggregations import aggregate_by_category, aggregate_by_month, aggregate_by_region, aggregate_by_segment
from core.charts import dual_axis_chart, pie_chart
from core.filters import DashboardFilters
from core.kpis import kpi_display, summarize
from core.schema import ensure_frame


def compute_kpis(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    summary = summarize(ensure_frame(ctx.get("filtered")))
    return {"filters": asdict(filters), "values": summary, "display": kpi_display(summary)}


def compute_overview(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df = ensure_frame(ctx.get("filtered"))
    summary = summarize(df)
    monthly = aggregate_by_month(df)
    categories = aggregate_by_category(df)
    segments = aggregate_by_segment(df)
    regions = [{"name": r["name"], "sales": r["sales"]} for r in aggregate_by_region(df)["regions"]]

    monthly_df = pd.DataFrame({"month": monthly["labels"], "sales": monthly["sales"], "profit": monthly["profit"]})
    category_df = pd.DataFrame({"category": categories["keys"], "sales": categories["sales"], "orders": categories["orders"]})
    segment_df = pd.DataFrame({"segment": segments["keys"], "sales": segments["sales"]})
    region_df = pd.DataFrame({"region": [r["name"] for r in regions], "sales": [r["sales"] for r in regions]})

    charts = {
        "monthly_trend": dual_axis_chart(
            monthly_df,
            "month",
            "sales",
            "profit",
            left_title="Sales",
            right_title="Profit",
            left_mark="line",
            right_format="$~s",
        ),
        "region_sales": pie_chart(region_df, "region", "sales"),
        "category_sales": dual_axis_chart(category_df, "category", "sales", "orders", left_title="Sales", right_title="Orders"),
        "segment_sales": pie_chart(segment_df, "segment", "sales"),
    }

    return {
        "filters": asdict(filters),
        "kpis": {"values": summary, "display": kpi_display(summary)},
        "series": {"monthly": monthly, "categories": categories, "segments": segments, "regions": regions},
        "table": [],
        "charts": charts,
    }
