"""Grouping aggregators over a (filtered) record frame.

Every call rebuilds its buckets from the frame it is given. Orderings
differ by dimension and are part of the contract:

- month/day: ascending by period key
- category/segment: first-seen order within the frame passed in
- region/shipping mode: descending by total sales (stable on ties)
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Sequence

import pandas as pd

from core.formatting import format_day_label, format_month_label
from core.schema import UNKNOWN, RecordsLike, amount, dimension, ensure_frame, mean_or_zero, observations

Period = Literal["month", "day"]

SEGMENT_AXIS = ("Consumer", "Corporate", "Home Office")

_PERIOD_FORMATS = {"month": "%Y-%m", "day": "%Y-%m-%d"}
_PERIOD_LABELS = {"month": format_month_label, "day": format_day_label}


def _with_amounts(df: pd.DataFrame) -> pd.DataFrame:
    return df.assign(_sales=amount(df, "value"), _profit=amount(df, "profit"))


def _top_key(group: pd.DataFrame, key: pd.Series) -> str:
    """Key with the largest summed sales; the first-seen key wins a tie."""
    if group.empty:
        return UNKNOWN
    sums = group["_sales"].groupby(key, sort=False).sum()
    return str(sums.idxmax())


def _sales_map(group: pd.DataFrame, key: pd.Series) -> Dict[str, float]:
    sums = group["_sales"].groupby(key, sort=False).sum()
    return {str(k): float(v) for k, v in sums.items()}


def aggregate_by_period(records: RecordsLike, period: Period = "month") -> Dict[str, List[Any]]:
    """Sales, profit and order count per calendar month or day."""
    df = _with_amounts(ensure_frame(records))
    out: Dict[str, List[Any]] = {"keys": [], "labels": [], "sales": [], "profit": [], "orders": []}
    if df.empty:
        return out

    df = df.assign(_period=df["date"].dt.strftime(_PERIOD_FORMATS[period]))
    grouped = (
        df.dropna(subset=["_period"])
        .groupby("_period", sort=True)
        .agg(sales=("_sales", "sum"), profit=("_profit", "sum"), orders=("_sales", "size"))
    )
    label = _PERIOD_LABELS[period]
    for key, row in grouped.iterrows():
        out["keys"].append(str(key))
        out["labels"].append(label(str(key)))
        out["sales"].append(float(row["sales"]))
        out["profit"].append(float(row["profit"]))
        out["orders"].append(int(row["orders"]))
    return out


def aggregate_by_month(records: RecordsLike) -> Dict[str, List[Any]]:
    return aggregate_by_period(records, "month")


def aggregate_by_day(records: RecordsLike) -> Dict[str, List[Any]]:
    return aggregate_by_period(records, "day")


def aggregate_by_dimension(records: RecordsLike, field: str) -> Dict[str, List[Any]]:
    """Sales, profit and orders per literal `field` value, in first-seen order."""
    df = _with_amounts(ensure_frame(records))
    out: Dict[str, List[Any]] = {"keys": [], "sales": [], "profit": [], "orders": []}
    if df.empty:
        return out

    grouped = (
        df.assign(_key=dimension(df, field))
        .groupby("_key", sort=False)
        .agg(sales=("_sales", "sum"), profit=("_profit", "sum"), orders=("_sales", "size"))
    )
    for key, row in grouped.iterrows():
        out["keys"].append(str(key))
        out["sales"].append(float(row["sales"]))
        out["profit"].append(float(row["profit"]))
        out["orders"].append(int(row["orders"]))
    return out


def aggregate_by_category(records: RecordsLike) -> Dict[str, List[Any]]:
    return aggregate_by_dimension(records, "category")


def aggregate_by_segment(records: RecordsLike) -> Dict[str, List[Any]]:
    return aggregate_by_dimension(records, "segment")


def _sort_by_sales(buckets: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(buckets, key=lambda b: b["sales"], reverse=True)


def aggregate_by_region(records: RecordsLike) -> Dict[str, Any]:
    df = _with_amounts(ensure_frame(records))
    if df.empty:
        return {"regions": [], "summary": summarize_regions([])}

    df = df.assign(_region=dimension(df, "region"), _state=dimension(df, "state"))
    buckets: List[Dict[str, Any]] = []
    for name, group in df.groupby("_region", sort=False):
        categories = dimension(group, "category")
        segments = dimension(group, "segment")
        shipping_days = observations(group["shipping_days"])
        buckets.append(
            {
                "name": str(name),
                "states": [str(s) for s in group["_state"].unique()],
                "sales": float(group["_sales"].sum()),
                "profit": float(group["_profit"].sum()),
                "orders": int(len(group)),
                "shipping_days": shipping_days,
                "avg_shipping_days": mean_or_zero(shipping_days),
                "categories": _sales_map(group, categories),
                "segments": _sales_map(group, segments),
                "top_category": _top_key(group, categories),
                "top_segment": _top_key(group, segments),
            }
        )
    regions = _sort_by_sales(buckets)
    return {"regions": regions, "summary": summarize_regions(regions)}


def summarize_regions(regions: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    top_profit: Optional[Dict[str, Any]] = None
    for region in regions:
        if top_profit is None or region["profit"] > top_profit["profit"]:
            top_profit = region
    return {
        "total_regions": len(regions),
        "top_sales_region": regions[0] if regions else None,
        "top_profit_region": top_profit,
        "avg_shipping_days": mean_or_zero([r["avg_shipping_days"] for r in regions]),
    }


def aggregate_by_shipping_mode(records: RecordsLike) -> Dict[str, Any]:
    df = _with_amounts(ensure_frame(records))
    if df.empty:
        return {"shipping_modes": [], "summary": summarize_shipping_modes([])}

    df = df.assign(_mode=dimension(df, "shipping_mode"))
    buckets: List[Dict[str, Any]] = []
    for name, group in df.groupby("_mode", sort=False):
        categories = dimension(group, "category")
        shipping_days = observations(group["shipping_days"])
        shipping_costs = observations(group["shipping_cost"])
        buckets.append(
            {
                "name": str(name),
                "orders": int(len(group)),
                "sales": float(group["_sales"].sum()),
                "profit": float(group["_profit"].sum()),
                "shipping_days": shipping_days,
                "shipping_costs": shipping_costs,
                "avg_shipping_days": mean_or_zero(shipping_days),
                "total_shipping_cost": float(sum(shipping_costs)),
                "avg_shipping_cost": mean_or_zero(shipping_costs),
                "categories": _sales_map(group, categories),
                "top_category": _top_key(group, categories),
            }
        )
    modes = _sort_by_sales(buckets)
    return {"shipping_modes": modes, "summary": summarize_shipping_modes(modes)}


def fastest_mode(modes: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """Mode with the smallest positive average shipping days.

    Modes without any shipping-day observation are not eligible.
    """
    eligible = [m for m in modes if m["avg_shipping_days"] > 0]
    if not eligible:
        return {"name": UNKNOWN, "avg_shipping_days": None}
    best = min(eligible, key=lambda m: m["avg_shipping_days"])
    return {"name": best["name"], "avg_shipping_days": best["avg_shipping_days"]}


def summarize_shipping_modes(modes: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "total_orders": sum(m["orders"] for m in modes),
        "avg_shipping_days": mean_or_zero([m["avg_shipping_days"] for m in modes]),
        "total_shipping_cost": float(sum(m["total_shipping_cost"] for m in modes)),
        "fastest_mode": fastest_mode(modes),
    }


def segment_sales_by_region(regions: Sequence[Dict[str, Any]], segments: Sequence[str] = SEGMENT_AXIS) -> List[Dict[str, Any]]:
    """Long-form rows (region, segment, sales) for a stacked segment chart."""
    return [
        {"region": r["name"], "segment": seg, "sales": float(r["segments"].get(seg, 0.0))}
        for r in regions
        for seg in segments
    ]


def select_by_name(buckets: Sequence[Dict[str, Any]], name: Optional[str]) -> List[Dict[str, Any]]:
    """Narrow region/shipping-mode buckets to one name; empty selection keeps all."""
    if not name:
        return list(buckets)
    return [b for b in buckets if b["name"] == name]
