"""Date helpers shared across calculations and dashboard layers."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

import pandas as pd


def to_timestamp(value: pd.Timestamp | datetime | date | str) -> pd.Timestamp:
    """Convert an input value to a timezone-naive pandas Timestamp."""
    ts = pd.Timestamp(value)
    if ts.tz is not None:
        ts = ts.tz_convert(None)
    return ts


def parse_utc_dates(values: Any) -> pd.Series:
    """Parse date-like values as UTC; unparseable entries become NaT.

    Date-only strings are anchored at UTC midnight so month/quarter keys do not
    depend on the local timezone of the process.
    """
    series = pd.Series(values, dtype='object') if not isinstance(values, pd.Series) else values
    return pd.to_datetime(series, errors='coerce', utc=True, format='mixed')


def to_iso_date(value: Any) -> str | None:
    """Return `YYYY-MM-DD` for a date-like value, or None when blank/unparseable."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    ts = pd.to_datetime(value, errors='coerce')
    if pd.isna(ts):
        return None
    return to_timestamp(ts).date().isoformat()
