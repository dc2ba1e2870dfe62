from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

import pandas as pd

from core.aggregations import aggregate_by_region, aggregate_by_shipping_mode, select_by_name
from core.charts import COST_COLOR, DAYS_COLOR, bar_chart, dual_axis_chart
from core.filters import DashboardFilters
from core.formatting import format_compact_currency, format_compact_number, format_days, format_days_or_placeholder
from core.schema import MISSING_DISPLAY, UNKNOWN, ensure_frame


def shipping_table(modes: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "shipping_mode": m["name"],
            "orders": format_compact_number(m["orders"]),
            "sales": format_compact_currency(m["sales"]),
            "profit": format_compact_currency(m["profit"]),
            "avg_shipping_days": format_days(m["avg_shipping_days"]),
            "total_shipping_cost": format_compact_currency(m["total_shipping_cost"]),
            "top_category": m["top_category"],
        }
        for m in modes
    ]


def compute_operations(filters: DashboardFilters, ctx: Dict[str, Any], *, shipping_mode: Optional[str] = None) -> Dict[str, Any]:
    df = ensure_frame(ctx.get("filtered"))
    agg = aggregate_by_shipping_mode(df)
    modes = agg["shipping_modes"]
    summary = agg["summary"]
    regions = aggregate_by_region(df)["regions"]
    fastest = summary["fastest_mode"]

    kpis = {
        "total_shipping_orders": format_compact_number(summary["total_orders"]),
        "avg_shipping_days": format_days_or_placeholder(summary["avg_shipping_days"]),
        "total_shipping_cost": format_compact_currency(summary["total_shipping_cost"]),
        "fastest_shipping_mode": fastest["name"] if fastest["name"] != UNKNOWN else MISSING_DISPLAY,
    }

    names = [m["name"] for m in modes]
    mode_df = pd.DataFrame(
        {
            "shipping_mode": names,
            "sales": [m["sales"] for m in modes],
            "orders": [m["orders"] for m in modes],
            "avg_shipping_days": [m["avg_shipping_days"] for m in modes],
            "total_shipping_cost": [m["total_shipping_cost"] for m in modes],
        }
    )
    region_df = pd.DataFrame(
        {
            "region": [r["name"] for r in regions],
            "sales": [r["sales"] for r in regions],
            "avg_shipping_days": [r["avg_shipping_days"] for r in regions],
        }
    )

    charts = {
        "shipping_mode": dual_axis_chart(mode_df, "shipping_mode", "sales", "orders", left_title="Sales", right_title="Orders"),
        "shipping_days": bar_chart(mode_df, "shipping_mode", "avg_shipping_days", title="Avg Ship Days", color=DAYS_COLOR, value_format=".1f"),
        "shipping_cost": dual_axis_chart(
            mode_df,
            "shipping_mode",
            "sales",
            "total_shipping_cost",
            left_title="Sales",
            right_title="Ship Cost",
            right_format="$~s",
            right_color=COST_COLOR,
        ),
        "region_shipping_performance": dual_axis_chart(
            region_df,
            "region",
            "sales",
            "avg_shipping_days",
            left_title="Sales",
            right_title="Ship Days",
            right_format=".1f",
            right_color=DAYS_COLOR,
            right_inverse=True,
        ),
    }

    return {
        "filters": asdict(filters),
        "kpis": kpis,
        "summary": summary,
        "series": {"shipping_modes": modes, "regions": [{"name": r["name"], "sales": r["sales"], "avg_shipping_days": r["avg_shipping_days"]} for r in regions]},
        "options": names,
        "selected": shipping_mode or None,
        "table": shipping_table(select_by_name(modes, shipping_mode)),
        "charts": charts,
    }
