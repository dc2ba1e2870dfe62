"""Record schema and missing-field policy.

Every module reads order records through the helpers here, so the
"Unknown" / 0 / "--" substitutions live in one place.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Union

import pandas as pd

UNKNOWN = "Unknown"
MISSING_DISPLAY = "--"

REQUIRED_FIELDS: List[str] = ["date", "category", "segment", "value"]
OPTIONAL_FIELDS: List[str] = [
    "profit",
    "profit_margin",
    "quantity",
    "region",
    "state",
    "city",
    "postal_code",
    "shipping_mode",
    "shipping_days",
    "shipping_cost",
    "customer_name",
    "product_name",
]
RECORD_COLUMNS: List[str] = REQUIRED_FIELDS + OPTIONAL_FIELDS

NUMERIC_FIELDS: List[str] = ["value", "profit", "profit_margin", "quantity", "shipping_days", "shipping_cost"]
TEXT_FIELDS: List[str] = [
    "category",
    "segment",
    "region",
    "state",
    "city",
    "postal_code",
    "shipping_mode",
    "customer_name",
    "product_name",
]

RecordsLike = Union[pd.DataFrame, Iterable[dict], None]


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _as_text(value: Any) -> Optional[str]:
    if is_missing(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def text_or_unknown(value: Any) -> str:
    text = _as_text(value)
    return text if text else UNKNOWN


def text_or_placeholder(value: Any) -> str:
    text = _as_text(value)
    return text if text else MISSING_DISPLAY


def _parse_day(value: Any) -> pd.Timestamp:
    if is_missing(value):
        return pd.NaT
    if isinstance(value, (date, datetime)):
        ts = pd.Timestamp(value)
    else:
        ts = pd.to_datetime(str(value), errors="coerce", format="ISO8601")
    if pd.isna(ts):
        return pd.NaT
    # an offset is dropped, not converted; the day stays as written
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.normalize()


def parse_dates(series: pd.Series) -> pd.Series:
    """Parse ISO date strings to naive timestamps truncated to the day."""
    return pd.to_datetime(series.astype(object).map(_parse_day))


def _numeric(series: pd.Series) -> pd.Series:
    series = series.astype(object).where(series.notna(), None)
    return pd.to_numeric(series, errors="coerce").astype("float64")


def empty_frame() -> pd.DataFrame:
    return records_frame([])


def records_frame(records: RecordsLike) -> pd.DataFrame:
    """Build a DataFrame with every schema column present and typed.

    Records are never dropped here; invalid values become NaN/NaT/None.
    """
    if records is None:
        df = pd.DataFrame()
    elif isinstance(records, pd.DataFrame):
        df = records.copy()
    else:
        df = pd.DataFrame.from_records(list(records))

    for col in RECORD_COLUMNS:
        if col not in df.columns:
            df[col] = None

    df["date"] = parse_dates(df["date"])
    for col in NUMERIC_FIELDS:
        df[col] = _numeric(df[col])
    for col in TEXT_FIELDS:
        df[col] = df[col].map(_as_text).astype(object)
    return df.reset_index(drop=True)


def ensure_frame(records: RecordsLike) -> pd.DataFrame:
    if isinstance(records, pd.DataFrame) and set(RECORD_COLUMNS).issubset(records.columns):
        return records
    return records_frame(records)


def dimension(df: pd.DataFrame, field: str) -> pd.Series:
    """Grouping key for `field` with "Unknown" for missing or empty values."""
    return df[field].map(text_or_unknown).astype(object)


def amount(df: pd.DataFrame, field: str) -> pd.Series:
    """Numeric column with missing values counted as 0 for sums."""
    return df[field].fillna(0.0)


def observations(series: pd.Series) -> List[float]:
    """Strictly positive observations, used for averages (missing/zero excluded)."""
    return [float(v) for v in series.tolist() if not is_missing(v) and v > 0]


def mean_or_zero(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0
