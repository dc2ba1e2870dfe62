from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

import pandas as pd

from core.aggregations import SEGMENT_AXIS, aggregate_by_region, segment_sales_by_region, select_by_name
from core.charts import DAYS_COLOR, PROFIT_COLOR, bar_chart, dual_axis_chart, pie_chart, stacked_bar_chart
from core.filters import DashboardFilters
from core.formatting import format_compact_currency, format_compact_number, format_days, format_days_or_placeholder
from core.schema import MISSING_DISPLAY, ensure_frame


def region_table(regions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "region": r["name"],
            "states": ", ".join(r["states"]),
            "sales": format_compact_currency(r["sales"]),
            "profit": format_compact_currency(r["profit"]),
            "orders": format_compact_number(r["orders"]),
            "avg_shipping_days": format_days(r["avg_shipping_days"]),
            "top_category": r["top_category"],
        }
        for r in regions
    ]


def compute_geography(filters: DashboardFilters, ctx: Dict[str, Any], *, region: Optional[str] = None) -> Dict[str, Any]:
    df = ensure_frame(ctx.get("filtered"))
    agg = aggregate_by_region(df)
    regions = agg["regions"]
    summary = agg["summary"]
    top_sales = summary["top_sales_region"]
    top_profit = summary["top_profit_region"]

    kpis = {
        "total_regions": summary["total_regions"],
        "top_region_sales": format_compact_currency(top_sales["sales"]) if top_sales else MISSING_DISPLAY,
        "top_region_name": top_sales["name"] if top_sales else MISSING_DISPLAY,
        "top_region_profit": format_compact_currency(top_profit["profit"]) if top_profit else MISSING_DISPLAY,
        "top_region_profit_name": top_profit["name"] if top_profit else MISSING_DISPLAY,
        "avg_shipping_days": format_days_or_placeholder(summary["avg_shipping_days"]),
    }

    names = [r["name"] for r in regions]
    region_df = pd.DataFrame(
        {
            "region": names,
            "sales": [r["sales"] for r in regions],
            "profit": [r["profit"] for r in regions],
            "avg_shipping_days": [r["avg_shipping_days"] for r in regions],
        }
    )
    segment_df = pd.DataFrame(segment_sales_by_region(regions), columns=["region", "segment", "sales"])

    charts = {
        "region_sales": pie_chart(region_df, "region", "sales"),
        "region_profit": bar_chart(region_df, "region", "profit", title="Profit", color=PROFIT_COLOR),
        "region_shipping": dual_axis_chart(
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
        "region_segment": stacked_bar_chart(segment_df, "segment", "sales", "region", x_sort=SEGMENT_AXIS),
    }

    return {
        "filters": asdict(filters),
        "kpis": kpis,
        "summary": {
            "total_regions": summary["total_regions"],
            "top_sales_region": top_sales["name"] if top_sales else None,
            "top_profit_region": top_profit["name"] if top_profit else None,
            "avg_shipping_days": summary["avg_shipping_days"],
        },
        "series": {"regions": regions},
        "options": names,
        "selected": region or None,
        "table": region_table(select_by_name(regions, region)),
        "charts": charts,
    }
