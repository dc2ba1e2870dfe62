from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import pandas as pd

from core.aggregations import aggregate_by_day
from core.charts import dual_axis_chart
from core.filters import DashboardFilters
from core.formatting import format_currency, format_integer
from core.schema import ensure_frame


def daily_table(daily: Dict[str, List[Any]]) -> List[Dict[str, str]]:
    return [
        {"date": label, "sales": format_currency(sales), "profit": format_currency(profit), "orders": format_integer(orders)}
        for label, sales, profit, orders in zip(daily["labels"], daily["sales"], daily["profit"], daily["orders"])
    ]


def compute_time(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df = ensure_frame(ctx.get("filtered"))
    daily = aggregate_by_day(df)
    # Day labels repeat across years, so the chart axis uses the ISO key.
    daily_df = pd.DataFrame({"day": daily["keys"], "sales": daily["sales"], "profit": daily["profit"]})

    charts = {
        "daily_trend": dual_axis_chart(
            daily_df,
            "day",
            "sales",
            "profit",
            left_title="Sales",
            right_title="Profit",
            left_mark="line",
            right_format="$~s",
        ),
    }
    return {
        "filters": asdict(filters),
        "kpis": {"days": len(daily["keys"])},
        "series": {"daily": daily},
        "table": daily_table(daily),
        "charts": charts,
    }
