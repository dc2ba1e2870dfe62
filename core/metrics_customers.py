from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import pandas as pd

from core.aggregations import aggregate_by_segment
from core.charts import dual_axis_chart, pie_chart
from core.filters import DashboardFilters
from core.formatting import format_currency, format_integer
from core.schema import ensure_frame


def segment_table(segments: Dict[str, List[Any]]) -> List[Dict[str, str]]:
    return [
        {"segment": key, "sales": format_currency(sales), "orders": format_integer(orders)}
        for key, sales, orders in zip(segments["keys"], segments["sales"], segments["orders"])
    ]


def compute_customers(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df = ensure_frame(ctx.get("filtered"))
    segments = aggregate_by_segment(df)
    segment_df = pd.DataFrame({"segment": segments["keys"], "sales": segments["sales"], "orders": segments["orders"]})

    charts = {
        "segment_pie": pie_chart(segment_df, "segment", "sales"),
        "segment_bar": dual_axis_chart(segment_df, "segment", "sales", "orders", left_title="Sales", right_title="Orders"),
    }
    return {
        "filters": asdict(filters),
        "kpis": {"total_segments": len(segments["keys"])},
        "series": {"segments": segments},
        "table": segment_table(segments),
        "charts": charts,
    }
