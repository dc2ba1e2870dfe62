from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

PALETTE = ["#3B82F6", "#10B981", "#F59E0B", "#8B5CF6", "#EF4444", "#14B8A6", "#F472B6", "#22C55E"]
SALES_COLOR = "#3B82F6"
SECONDARY_COLOR = "#10B981"
PROFIT_COLOR = "#8B5CF6"
DAYS_COLOR = "#F59E0B"
COST_COLOR = "#EF4444"


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _axis(fmt: Optional[str] = None, **kwargs: Any) -> alt.Axis:
    if fmt:
        kwargs["format"] = fmt
    return alt.Axis(gridDash=[4, 4], domain=False, ticks=False, **kwargs)


def dual_axis_chart(
    df: pd.DataFrame,
    x: str,
    left: str,
    right: str,
    *,
    left_title: str,
    right_title: str,
    left_mark: str = "bar",
    right_mark: str = "line",
    left_format: str = "$~s",
    right_format: str = "~s",
    left_color: str = SALES_COLOR,
    right_color: str = SECONDARY_COLOR,
    right_inverse: bool = False,
    x_sort: Optional[Sequence[str]] = None,
    height: int = 300,
) -> Dict[str, Any]:
    """Two series over a shared category axis with independent y scales."""
    sort = list(x_sort) if x_sort is not None else df[x].tolist()
    base = alt.Chart(df).encode(x=alt.X(f"{x}:N", title=None, sort=sort, axis=alt.Axis(grid=False, labelAngle=0)))
    hover = alt.selection_point(fields=[x], on="mouseover", empty="all")

    def layer(mark: str, field: str, title: str, fmt: str, color: str, inverse: bool = False) -> alt.Chart:
        chart = base.mark_bar(color=color) if mark == "bar" else base.mark_line(color=color, point={"filled": True, "size": 60})
        return chart.encode(
            y=alt.Y(f"{field}:Q", title=title, scale=alt.Scale(reverse=inverse), axis=_axis(fmt)),
            tooltip=[alt.Tooltip(f"{x}:N", title=x.replace("_", " ").title()), alt.Tooltip(f"{field}:Q", title=title, format=fmt)],
        )

    left_layer = layer(left_mark, left, left_title, left_format, left_color).add_params(hover)
    right_layer = layer(right_mark, right, right_title, right_format, right_color, right_inverse)
    chart = alt.layer(left_layer, right_layer).resolve_scale(y="independent").properties(height=height)
    return to_vega_spec(chart)


def pie_chart(df: pd.DataFrame, name: str, value: str, *, title: str = "Sales", value_format: str = "$,.2f", height: int = 300) -> Dict[str, Any]:
    hover = alt.selection_point(fields=[name], on="mouseover", empty="all")
    chart = (
        alt.Chart(df)
        .mark_arc(outerRadius=110)
        .encode(
            theta=alt.Theta(f"{value}:Q", stack=True),
            color=alt.Color(f"{name}:N", scale=alt.Scale(range=PALETTE), sort=df[name].tolist(), title=None),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.6)),
            tooltip=[alt.Tooltip(f"{name}:N", title=name.replace("_", " ").title()), alt.Tooltip(f"{value}:Q", title=title, format=value_format)],
        )
        .add_params(hover)
        .properties(height=height)
    )
    return to_vega_spec(chart)


def bar_chart(df: pd.DataFrame, x: str, y: str, *, title: str, color: str = SALES_COLOR, value_format: str = "$~s", height: int = 300) -> Dict[str, Any]:
    chart = (
        alt.Chart(df)
        .mark_bar(color=color)
        .encode(
            x=alt.X(f"{x}:N", title=None, sort=df[x].tolist(), axis=alt.Axis(grid=False, labelAngle=0)),
            y=alt.Y(f"{y}:Q", title=title, axis=_axis(value_format)),
            tooltip=[alt.Tooltip(f"{x}:N"), alt.Tooltip(f"{y}:Q", title=title, format=value_format)],
        )
        .properties(height=height)
    )
    return to_vega_spec(chart)


def stacked_bar_chart(df: pd.DataFrame, x: str, y: str, stack: str, *, x_sort: Sequence[str], title: str = "Sales", height: int = 300) -> Dict[str, Any]:
    chart = (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X(f"{x}:N", title=None, sort=list(x_sort), axis=alt.Axis(grid=False, labelAngle=0)),
            y=alt.Y(f"{y}:Q", title=title, stack="zero", axis=_axis("$~s")),
            color=alt.Color(f"{stack}:N", title=None, scale=alt.Scale(range=PALETTE)),
            tooltip=[alt.Tooltip(f"{stack}:N"), alt.Tooltip(f"{x}:N"), alt.Tooltip(f"{y}:Q", title=title, format="$,.2f")],
        )
        .properties(height=height)
    )
    return to_vega_spec(chart)
