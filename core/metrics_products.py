from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import pandas as pd

from core.aggregations import aggregate_by_category
from core.charts import dual_axis_chart, pie_chart
from core.filters import DashboardFilters
from core.formatting import format_currency, format_integer
from core.schema import ensure_frame


def category_table(categories: Dict[str, List[Any]]) -> List[Dict[str, str]]:
    return [
        {"category": key, "sales": format_currency(sales), "orders": format_integer(orders)}
        for key, sales, orders in zip(categories["keys"], categories["sales"], categories["orders"])
    ]


def compute_products(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df = ensure_frame(ctx.get("filtered"))
    categories = aggregate_by_category(df)
    category_df = pd.DataFrame({"category": categories["keys"], "sales": categories["sales"], "orders": categories["orders"]})

    charts = {
        "category_combo": dual_axis_chart(category_df, "category", "sales", "orders", left_title="Sales", right_title="Orders"),
        "category_pie": pie_chart(category_df, "category", "sales"),
    }
    return {
        "filters": asdict(filters),
        "kpis": {"total_categories": len(categories["keys"])},
        "series": {"categories": categories},
        "table": category_table(categories),
        "charts": charts,
    }
