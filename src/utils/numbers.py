"""Numeric coercion for loosely-typed JSON values."""

from __future__ import annotations

from typing import Any

import pandas as pd


def safe_float(value: Any, default: float | None = 0.0) -> float | None:
    """Return value as float, or default for None/NaN/non-numeric input."""
    if value is None or isinstance(value, bool):
        return default
    try:
        num = float(value)
    except (TypeError, ValueError):
        return default
    if pd.isna(num):
        return default
    return num
