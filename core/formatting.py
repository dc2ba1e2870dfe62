"""Display formatting for KPI tiles, tables and chart axes.

Rounding works on the exact binary value of the float and rounds ties
away from zero, which is how the browser's number formatting behaves.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

import pandas as pd

from core.schema import MISSING_DISPLAY, is_missing

_COMPACT_SUFFIXES = ("", "K", "M", "B", "T")


def _to_decimal(value: Any) -> Decimal:
    if is_missing(value):
        return Decimal(0)
    return Decimal(float(value))


def _quantize(value: Decimal, ndigits: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-ndigits), rounding=ROUND_HALF_UP)


def format_currency(value: Any, decimals: int = 2) -> str:
    """`$1,234.50`; negatives as `-$1,234.50`."""
    number = _to_decimal(value)
    rounded = _quantize(abs(number), decimals)
    sign = "-" if number < 0 else ""
    return f"{sign}${rounded:,.{decimals}f}"


def format_compact_number(value: Any) -> str:
    """Compact notation with at most one fractional digit: 12345 -> `12.3K`."""
    number = _to_decimal(value)
    magnitude = abs(number)

    index = 0
    while index < len(_COMPACT_SUFFIXES) - 1 and magnitude >= Decimal(1000) ** (index + 1):
        index += 1
    scaled = _quantize(magnitude.scaleb(-3 * index), 1)
    if scaled >= 1000 and index < len(_COMPACT_SUFFIXES) - 1:
        # rounding carried into the next unit, e.g. 999,960 -> 1M
        index += 1
        scaled = _quantize(magnitude.scaleb(-3 * index), 1)

    text = f"{scaled:f}"
    if text.endswith(".0"):
        text = text[:-2]
    sign = "-" if number < 0 else ""
    return f"{sign}{text}{_COMPACT_SUFFIXES[index]}"


def format_compact_currency(value: Any) -> str:
    return "$" + format_compact_number(value)


def format_percent(value: Any) -> str:
    number = _to_decimal(value)
    rounded = _quantize(abs(number), 1)
    sign = "-" if number < 0 else ""
    return f"{sign}{rounded:.1f}%"


def format_integer(value: Any) -> str:
    number = _quantize(_to_decimal(value), 0)
    return f"{number:,.0f}"


def format_days(value: Any) -> str:
    return f"{_quantize(_to_decimal(value), 1):.1f} days"


def format_days_or_placeholder(value: Any) -> str:
    if is_missing(value) or not value:
        return MISSING_DISPLAY
    return format_days(value)


def _as_timestamp(value: Any) -> Optional[pd.Timestamp]:
    if is_missing(value):
        return None
    if isinstance(value, (date, datetime, pd.Timestamp)):
        return pd.Timestamp(value)
    ts = pd.to_datetime(str(value), errors="coerce")
    return None if pd.isna(ts) else ts


def format_date(value: Any) -> str:
    """Table dates as `MM/DD/YYYY`."""
    ts = _as_timestamp(value)
    return ts.strftime("%m/%d/%Y") if ts is not None else MISSING_DISPLAY


def format_month_label(period_key: str) -> str:
    """`2024-02` -> `Feb 2024`."""
    return pd.Timestamp(f"{period_key}-01").strftime("%b %Y")


def format_day_label(period_key: str) -> str:
    """`2024-02-05` -> `Feb 5`."""
    ts = pd.Timestamp(period_key)
    return f"{ts.strftime('%b')} {ts.day}"


def format_timestamp(value: datetime) -> str:
    """`1/5/2024, 3:04:05 PM`."""
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{value.month}/{value.day}/{value.year}, {hour}:{value.minute:02d}:{value.second:02d} {suffix}"
