"""Calendar bucketing of cashflow ladder rows for charting."""

from __future__ import annotations

from typing import Any

import pandas as pd

from src.utils.date_utils import parse_utc_dates

GROUP_BY_OPTIONS = ['Month', 'Quarter', 'Year']
BUCKET_COLUMNS = [
    'group_key',
    'fixed',
    'floating',
    'total',
    'cumulative_fixed',
    'cumulative_floating',
    'cumulative_total',
]


def _empty_buckets() -> pd.DataFrame:
    return pd.DataFrame(
        {
            'group_key': pd.Series(dtype=str),
            **{col: pd.Series(dtype=float) for col in BUCKET_COLUMNS[1:]},
        }
    )


def _rows_frame(data: Any) -> pd.DataFrame:
    if isinstance(data, pd.DataFrame):
        return data.copy()
    if isinstance(data, list):
        return pd.DataFrame([r for r in data if isinstance(r, dict)])
    return pd.DataFrame()


def group_keys(dates: pd.Series, group_by: str) -> pd.Series:
    """Return `YYYY-MM`, `YYYY QN`, or `YYYY` keys for parsed timestamps."""
    year = dates.dt.year.astype(int).map('{:04d}'.format)
    if group_by == 'Month':
        return year + '-' + dates.dt.month.astype(int).map('{:02d}'.format)
    if group_by == 'Quarter':
        quarter = ((dates.dt.month.astype(int) - 1) // 3) + 1
        return year + ' Q' + quarter.astype(str)
    if group_by == 'Year':
        return year
    raise ValueError(f'group_by must be one of {GROUP_BY_OPTIONS}.')


def bucket_cashflows(data: Any, group_by: str = 'Month') -> pd.DataFrame:
    """Sum fixed/floating cashflows into calendar buckets with running totals.

    `time_label` is preferred over `cashflow_date`. Dates are parsed as UTC;
    rows whose date cannot be parsed are dropped. Missing amounts count as 0.
    Buckets are sorted ascending by key string.
    """
    if group_by not in GROUP_BY_OPTIONS:
        raise ValueError(f'group_by must be one of {GROUP_BY_OPTIONS}.')
    rows = _rows_frame(data)
    if rows.empty:
        return _empty_buckets()

    label = rows['time_label'] if 'time_label' in rows.columns else pd.Series(None, index=rows.index, dtype=object)
    fallback = rows['cashflow_date'] if 'cashflow_date' in rows.columns else pd.Series(None, index=rows.index, dtype=object)
    label = label.where(label.notna() & (label.astype(str).str.strip() != ''), fallback)
    dates = parse_utc_dates(label.astype(object))

    work = pd.DataFrame(index=rows.index)
    for col in ['fixed', 'floating']:
        values = rows[col] if col in rows.columns else pd.Series(0.0, index=rows.index)
        work[col] = pd.to_numeric(values, errors='coerce').fillna(0.0).astype(float)
    work = work.loc[dates.notna()].copy()
    if work.empty:
        return _empty_buckets()
    work['group_key'] = group_keys(dates.loc[work.index], group_by)

    out = (
        work.groupby('group_key', sort=True)[['fixed', 'floating']]
        .sum()
        .reset_index()
        .sort_values('group_key')
        .reset_index(drop=True)
    )
    out['total'] = out['fixed'] + out['floating']
    out['cumulative_fixed'] = out['fixed'].cumsum()
    out['cumulative_floating'] = out['floating'].cumsum()
    out['cumulative_total'] = out['total'].cumsum()
    return out[BUCKET_COLUMNS]
