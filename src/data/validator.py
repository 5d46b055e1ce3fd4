"""Client-side validation for instrument form values."""

from __future__ import annotations

import math
from typing import Any, Iterable

import pandas as pd

from src.utils.date_utils import to_iso_date

REQUIRED_FIELDS_MESSAGE = 'Please fill in all required fields.'


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def parse_number(value: Any) -> float | None:
    """Parse a form value into a number; blank input yields None.

    Raises ValueError for non-numeric text and for values that are not finite.
    """
    if is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValueError(f'{value!r} is not a number.')
    parsed = pd.to_numeric(str(value).strip().replace(',', ''), errors='coerce')
    if pd.isna(parsed) or not math.isfinite(float(parsed)):
        raise ValueError(f'{value!r} is not a number.')
    return float(parsed)


def missing_required(values: dict[str, Any], required: Iterable[str]) -> list[str]:
    """Return required field names whose values are blank."""
    return [name for name in required if is_blank(values.get(name))]


def validate_form_values(
    values: dict[str, Any],
    *,
    required: Iterable[str],
    numeric: Iterable[str] = (),
    dates: Iterable[str] = (),
    labels: dict[str, str] | None = None,
) -> list[str]:
    """Validate visible form values and return blocking error messages."""
    labels = labels or {}
    errors: list[str] = []

    missing = missing_required(values, required)
    if missing:
        names = ', '.join(labels.get(m, m) for m in missing)
        errors.append(f'{REQUIRED_FIELDS_MESSAGE} Missing: {names}.')

    for name in numeric:
        if name in missing:
            continue
        try:
            parse_number(values.get(name))
        except ValueError:
            errors.append(f'{labels.get(name, name)} must be a number.')

    for name in dates:
        if name in missing or is_blank(values.get(name)):
            continue
        if to_iso_date(values.get(name)) is None:
            errors.append(f'{labels.get(name, name)} must be a valid date (YYYY-MM-DD).')

    return errors
