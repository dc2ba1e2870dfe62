from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

from core.data import clear_cache
from core.errors import DataUnavailableError, InvalidDateRangeError
from core.filters import DEFAULT_PAGE_SIZE, PAGE_SIZE_OPTIONS, default_date_range
from core.preferences import PreferenceStore
from core.state import DashboardController
from core.table import TABLE_COLUMNS

PAGE_TITLES = {
    "overview": ("Overview", "Headline KPIs and trends"),
    "geography": ("Geography", "Detailed analysis by region"),
    "products": ("Products", "Detailed analysis by product category"),
    "customers": ("Customers", "Detailed analysis by customer segment"),
    "time": ("Time", "Detailed analysis over time"),
    "operations": ("Operations", "Shipping performance and cost"),
}
COLUMN_LABELS = {
    "date": "Date",
    "category": "Category",
    "segment": "Segment",
    "value": "Sales",
    "profit": "Profit",
    "quantity": "Quantity",
    "region": "Region",
    "shipping_mode": "Ship Mode",
}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        .last-updated {color: #6b7280;font-size: 0.85rem;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body


def render_page_header(page: str, last_updated: str, export_df: Optional[pd.DataFrame] = None):
    title, subtitle = PAGE_TITLES[page]
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>Home / {title}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        btn_cols = st.columns(2)
        if btn_cols[0].button("Refresh"):
            clear_cache()
            st.session_state.pop("controller", None)
            st.rerun()
        if export_df is not None and not export_df.empty:
            btn_cols[1].download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name=f"{page}.csv",
                mime="text/csv",
            )
    st.caption(subtitle)
    st.markdown(f"<div class='last-updated'>{last_updated}</div>", unsafe_allow_html=True)


def render_chart(spec: Dict[str, Any]):
    st.vega_lite_chart(spec, use_container_width=True)


def render_chart_grid(charts: Dict[str, Dict[str, Any]], titles: Dict[str, str]):
    names = [n for n in titles if n in charts]
    for i in range(0, len(names), 2):
        cols = st.columns(2)
        for col, name in zip(cols, names[i : i + 2]):
            with col:
                with card(titles[name]):
                    render_chart(charts[name])


def render_table(rows: List[Dict[str, Any]], labels: Optional[Dict[str, str]] = None):
    if not rows:
        st.info("No rows for the selected date range.")
        return
    df = pd.DataFrame(rows)
    if labels:
        df = df.rename(columns=labels)
    st.dataframe(df, hide_index=True, use_container_width=True)


def render_metric_row(items: List[tuple]):
    cols = st.columns(len(items))
    for col, (label, value) in zip(cols, items):
        col.metric(label, value)


# ---------- controller ----------
def get_controller() -> Optional[DashboardController]:
    if "controller" in st.session_state:
        return st.session_state["controller"]
    try:
        controller = DashboardController.load(preferences=PreferenceStore())
    except DataUnavailableError as exc:
        st.error(f"Failed to load data: {exc}")
        return None
    controller.apply_default_range()
    st.session_state["controller"] = controller
    return controller


st.set_page_config(page_title="Sales Analytics Dashboard", layout="wide")
inject_base_styles()
st.title("Sales Analytics Dashboard")

controller = get_controller()
if controller is None:
    st.stop()

# ----- Sidebar: navigation + filters -----
with st.sidebar:
    st.markdown("### Navigate")
    page_keys = list(PAGE_TITLES)
    nav_choice = st.radio(
        "Navigate",
        page_keys,
        index=page_keys.index(controller.ui.current_page),
        format_func=lambda p: PAGE_TITLES[p][0],
        label_visibility="collapsed",
    )
    controller.ui.current_page = nav_choice

    st.markdown("---")
    toggle_label = "Expand" if controller.ui.filterbar_collapsed else "Collapse"
    if st.button(f"{toggle_label} filters"):
        controller.toggle_filterbar()
        st.rerun()

    if not controller.ui.filterbar_collapsed:
        st.markdown("### Date range")
        default_start, default_end = default_date_range()
        start = st.date_input("Start date", value=controller.ui.start_date or default_start)
        end = st.date_input("End date", value=controller.ui.end_date or default_end)
        c1, c2 = st.columns(2)
        if c1.button("Apply", type="primary"):
            try:
                controller.apply_filters(start, end)
            except InvalidDateRangeError as exc:
                st.warning(str(exc))
        if c2.button("Reset"):
            controller.reset_filters()

        size_labels = [str(s) if s != "all" else "All" for s in PAGE_SIZE_OPTIONS]
        current_size = controller.table.state.page_size
        size_index = PAGE_SIZE_OPTIONS.index(current_size) if current_size in PAGE_SIZE_OPTIONS else PAGE_SIZE_OPTIONS.index(DEFAULT_PAGE_SIZE)
        chosen = st.selectbox("Rows per page", size_labels, index=size_index)
        chosen_size = "all" if chosen == "All" else int(chosen)
        if chosen_size != current_size:
            controller.set_page_size(chosen_size)


# ----- KPI header -----
export_df = controller.active_records.assign(date=lambda d: d["date"].dt.strftime("%Y-%m-%d"))
render_page_header(controller.ui.current_page, controller.last_updated, export_df=export_df)
kpis = controller.kpis()["display"]
render_metric_row(
    [
        ("Total Sales", kpis["total_sales"]),
        ("Total Orders", kpis["total_orders"]),
        ("Total Profit", kpis["total_profit"]),
        ("Profit Margin", kpis["profit_margin"]),
    ]
)


# ----- Page renderers -----
def render_overview_page():
    payload = controller.switch_page("overview")
    render_chart_grid(
        payload["charts"],
        {
            "monthly_trend": "Monthly Sales & Profit",
            "region_sales": "Sales by Region",
            "category_sales": "Sales & Orders by Category",
            "segment_sales": "Customer Segment",
        },
    )


def render_geography_page():
    base = controller.render_page("geography")
    options = [""] + base["options"]
    selected = st.selectbox("Region", options, format_func=lambda r: r or "All regions")
    payload = controller.switch_page("geography", region=selected or None)
    k = payload["kpis"]
    render_metric_row(
        [
            ("Regions", k["total_regions"]),
            (f"Top Sales ({k['top_region_name']})", k["top_region_sales"]),
            (f"Top Profit ({k['top_region_profit_name']})", k["top_region_profit"]),
            ("Avg Shipping", k["avg_shipping_days"]),
        ]
    )
    render_chart_grid(
        payload["charts"],
        {
            "region_sales": "Sales Distribution by Region",
            "region_profit": "Profit by Region",
            "region_shipping": "Sales vs Avg Shipping Days",
            "region_segment": "Segment Sales by Region",
        },
    )
    with card("Regions"):
        render_table(
            payload["table"],
            {
                "region": "Region",
                "states": "States",
                "sales": "Sales",
                "profit": "Profit",
                "orders": "Orders",
                "avg_shipping_days": "Avg Shipping",
                "top_category": "Top Category",
            },
        )


def render_products_page():
    payload = controller.switch_page("products")
    render_chart_grid(payload["charts"], {"category_combo": "Sales & Orders by Category", "category_pie": "Sales Distribution by Category"})
    with card("Categories"):
        render_table(payload["table"], {"category": "Category", "sales": "Sales", "orders": "Orders"})


def render_customers_page():
    payload = controller.switch_page("customers")
    render_chart_grid(payload["charts"], {"segment_pie": "Segment Distribution (Sales)", "segment_bar": "Sales & Orders by Segment"})
    with card("Segments"):
        render_table(payload["table"], {"segment": "Segment", "sales": "Sales", "orders": "Orders"})


def render_time_page():
    payload = controller.switch_page("time")
    cols = st.columns(2)
    with cols[0]:
        with card("Daily Sales & Profit"):
            render_chart(payload["charts"]["daily_trend"])
    with cols[1]:
        with card("Daily Details"):
            render_table(payload["table"], {"date": "Date", "sales": "Sales", "profit": "Profit", "orders": "Orders"})


def render_operations_page():
    base = controller.render_page("operations")
    options = [""] + base["options"]
    selected = st.selectbox("Ship mode", options, format_func=lambda m: m or "All ship modes")
    payload = controller.switch_page("operations", shipping_mode=selected or None)
    k = payload["kpis"]
    render_metric_row(
        [
            ("Shipping Orders", k["total_shipping_orders"]),
            ("Avg Shipping", k["avg_shipping_days"]),
            ("Shipping Cost", k["total_shipping_cost"]),
            ("Fastest Mode", k["fastest_shipping_mode"]),
        ]
    )
    render_chart_grid(
        payload["charts"],
        {
            "shipping_mode": "Sales & Orders by Ship Mode",
            "shipping_days": "Avg Shipping Days by Mode",
            "shipping_cost": "Sales vs Shipping Cost",
            "region_shipping_performance": "Regional Shipping Performance",
        },
    )
    with card("Ship Modes"):
        render_table(
            payload["table"],
            {
                "shipping_mode": "Ship Mode",
                "orders": "Orders",
                "sales": "Sales",
                "profit": "Profit",
                "avg_shipping_days": "Avg Shipping",
                "total_shipping_cost": "Shipping Cost",
                "top_category": "Top Category",
            },
        )


def render_data_table():
    with card("Orders"):
        indicators = controller.table.sort_indicators()
        header = st.columns(len(TABLE_COLUMNS))
        for col, field in zip(header, TABLE_COLUMNS):
            if col.button(f"{COLUMN_LABELS[field]} {indicators[field]}", key=f"sort-{field}"):
                controller.set_sort(field)
                st.rerun()

        payload = controller.table_payload()
        render_table(payload["rows"], COLUMN_LABELS)

        stats = payload["stats"]
        c1, c2, c3 = st.columns([1, 3, 1])
        if c1.button("Prev", disabled=not stats["has_prev"]):
            controller.change_page(-1)
            st.rerun()
        c2.caption(
            f"{stats['page_info']} of {stats['total_records']:,} · "
            f"Page {stats['current_page']} / {stats['total_pages']}"
        )
        if c3.button("Next", disabled=not stats["has_next"]):
            controller.change_page(1)
            st.rerun()


PAGE_RENDERERS = {
    "overview": render_overview_page,
    "geography": render_geography_page,
    "products": render_products_page,
    "customers": render_customers_page,
    "time": render_time_page,
    "operations": render_operations_page,
}

PAGE_RENDERERS[controller.ui.current_page]()
render_data_table()
