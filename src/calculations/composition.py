"""Reshape composition, gap, and yield-curve payloads into chart frames."""

from __future__ import annotations

import re
from typing import Any

import pandas as pd

from src.utils.numbers import safe_float

REPRICING_BUCKET_ORDER = [
    '0-3 Months',
    '3-6 Months',
    '6-12 Months',
    '1-5 Years',
    '>5 Years',
    'Fixed Rate / Non-Sensitive',
]
_TENOR_RE = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*([DWMY])\s*$', re.IGNORECASE)
_TENOR_MONTHS = {'D': 1.0 / 30.0, 'W': 7.0 / 30.0, 'M': 1.0, 'Y': 12.0}


def _records(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def composition_frame(composition: Any) -> pd.DataFrame:
    """`{name: value}` mapping to a pie-ready name/value frame."""
    if not isinstance(composition, dict) or not composition:
        return pd.DataFrame(columns=['name', 'value'])
    return pd.DataFrame(
        [{'name': str(k), 'value': float(safe_float(v, 0.0))} for k, v in composition.items()]
    )


def group_by_category(records: Any, instrument_type: str) -> pd.DataFrame:
    """Sum `total_amount` by `category` for one instrument type."""
    rows = [r for r in _records(records) if r.get('instrument_type') == instrument_type]
    if not rows:
        return pd.DataFrame(columns=['name', 'value'])
    df = pd.DataFrame(
        {
            'name': [str(r.get('category') or 'Unclassified') for r in rows],
            'value': [float(safe_float(r.get('total_amount'), 0.0)) for r in rows],
        }
    )
    return df.groupby('name', sort=False, as_index=False)['value'].sum()


def average_rates_frame(records: Any) -> pd.DataFrame:
    """Category-level count, amount, and average rate for the portfolio page."""
    cols = ['instrument_type', 'category', 'subcategory', 'volume_count', 'total_amount', 'average_interest_rate']
    rows = _records(records)
    if not rows:
        return pd.DataFrame(columns=cols)
    df = pd.DataFrame(rows)
    for col in cols:
        if col not in df.columns:
            df[col] = None
    df = df[cols].copy()
    for col in ['volume_count', 'total_amount', 'average_interest_rate']:
        df[col] = pd.to_numeric(df[col], errors='coerce')
    return df.reset_index(drop=True)


def net_positions_frame(rows: Any) -> pd.DataFrame:
    cols = ['bucket', 'total_assets', 'total_liabilities', 'net_position']
    records = _records(rows)
    if not records:
        return pd.DataFrame(columns=cols)
    return pd.DataFrame(
        [
            {
                'bucket': str(r.get('bucket', '')),
                'total_assets': float(safe_float(r.get('total_assets'), 0.0)),
                'total_liabilities': float(safe_float(r.get('total_liabilities'), 0.0)),
                'net_position': float(safe_float(r.get('net_position'), 0.0)),
            }
            for r in records
        ],
        columns=cols,
    )


def repricing_gap_frame(rows: Any) -> pd.DataFrame:
    """Repricing-gap buckets in regulatory order with instrument counts."""
    cols = ['bucket', 'assets', 'liabilities', 'net', 'instrument_count']
    records = _records(rows)
    if not records:
        return pd.DataFrame(columns=cols)
    df = pd.DataFrame(
        [
            {
                'bucket': str(r.get('bucket', '')),
                'assets': float(safe_float(r.get('assets'), 0.0)),
                'liabilities': float(safe_float(r.get('liabilities'), 0.0)),
                'net': float(safe_float(r.get('net'), 0.0)),
                'instrument_count': len(r.get('instruments') or []),
            }
            for r in records
        ],
        columns=cols,
    )
    order = {b: i for i, b in enumerate(REPRICING_BUCKET_ORDER)}
    df['_order'] = df['bucket'].map(order).fillna(len(order))
    return df.sort_values('_order', kind='stable').drop(columns='_order').reset_index(drop=True)


def drill_down_frames(payload: Any) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Split a drill-down payload into asset and liability frames sorted by amount."""
    cols = ['instrument_id', 'instrument_type', 'amount']
    payload = payload if isinstance(payload, dict) else {}
    out = []
    for side in ['assets', 'liabilities']:
        records = _records(payload.get(side))
        df = pd.DataFrame(
            [
                {
                    'instrument_id': str(r.get('instrument_id', '')),
                    'instrument_type': str(r.get('instrument_type', '')),
                    'amount': float(safe_float(r.get('amount'), 0.0)),
                }
                for r in records
            ],
            columns=cols,
        )
        out.append(df.sort_values('amount', ascending=False, kind='stable').reset_index(drop=True))
    return out[0], out[1]


def tenor_to_months(tenor: Any) -> float | None:
    """Convert tenor labels such as `3M` or `10Y` to months."""
    match = _TENOR_RE.match(str(tenor or ''))
    if not match:
        return None
    return float(match.group(1)) * _TENOR_MONTHS[match.group(2).upper()]


def yield_curve_frame(points: Any) -> pd.DataFrame:
    """Yield curve points ordered by tenor within each scenario."""
    cols = ['scenario', 'tenor', 'tenor_months', 'rate']
    records = _records(points)
    if not records:
        return pd.DataFrame(columns=cols)
    df = pd.DataFrame(
        [
            {
                'scenario': str(r.get('scenario') or 'Base Case'),
                'tenor': str(r.get('tenor') or r.get('name') or ''),
                'rate': float(safe_float(r.get('rate', r.get('yield')), 0.0)),
            }
            for r in records
        ]
    )
    df['tenor_months'] = df['tenor'].map(tenor_to_months)
    df = df.sort_values(['scenario', 'tenor_months'], kind='stable', na_position='last')
    return df[cols].reset_index(drop=True)
