from __future__ import annotations

from typing import Any, Dict

from core.formatting import format_compact_currency, format_compact_number, format_percent
from core.schema import RecordsLike, amount, ensure_frame

# Used when no record in the subset carries a profit figure.
ASSUMED_PROFIT_MARGIN = 12.5


def summarize(records: RecordsLike) -> Dict[str, Any]:
    """Headline totals for a record subset.

    If any record has a non-zero profit, profit is the actual sum and the
    margin is derived from it. Otherwise a 12.5% margin is assumed.
    """
    df = ensure_frame(records)
    total_sales = float(amount(df, "value").sum())
    total_orders = int(len(df))

    profit = amount(df, "profit")
    if bool((profit != 0).any()):
        total_profit = float(profit.sum())
        profit_margin = total_profit / total_sales * 100 if total_sales > 0 else 0.0
        profit_source = "actual"
    else:
        profit_margin = ASSUMED_PROFIT_MARGIN
        total_profit = total_sales * 0.125
        profit_source = "assumed"

    return {
        "total_sales": total_sales,
        "total_orders": total_orders,
        "total_profit": total_profit,
        "profit_margin": profit_margin,
        "profit_source": profit_source,
    }


def kpi_display(summary: Dict[str, Any]) -> Dict[str, str]:
    return {
        "total_sales": format_compact_currency(summary["total_sales"]),
        "total_orders": format_compact_number(summary["total_orders"]),
        "total_profit": format_compact_currency(summary["total_profit"]),
        "profit_margin": format_percent(summary["profit_margin"]),
    }
