"""Pivot scenario-keyed driver rows into comparison lookups and tables."""

from __future__ import annotations

from typing import Any, Callable

import numpy as np
import pandas as pd

from src.utils.numbers import safe_float

EVE_SCENARIOS = [
    'Base Case',
    'Parallel Up +200bps',
    'Parallel Down -200bps',
    'Short Rates Up +100bps',
    'Short Rates Down -100bps',
    'Long Rates Up +100bps',
]
PLACEHOLDER = '-'

DriverMatrix = dict[str, dict[str, dict[str, Any]]]


def eve_matrix_key(row: dict[str, Any]) -> str:
    return str(row.get('instrument_type') or '')


def nii_matrix_key(row: dict[str, Any]) -> str:
    breakdown = row.get('breakdown_value')
    return f'{row.get("instrument_type") or ""}|{"" if breakdown is None else breakdown}'


def build_driver_matrix(rows: Any, key_fn: Callable[[dict[str, Any]], str]) -> DriverMatrix:
    """Index rows as matrix[key][scenario] = row; later rows overwrite earlier ones."""
    matrix: DriverMatrix = {}
    if not isinstance(rows, list):
        return matrix
    for row in rows:
        if not isinstance(row, dict):
            continue
        scenario = str(row.get('scenario') or '')
        matrix.setdefault(key_fn(row), {})[scenario] = row
    return matrix


def build_eve_driver_matrix(rows: Any) -> DriverMatrix:
    return build_driver_matrix(rows, eve_matrix_key)


def build_nii_driver_matrix(rows: Any) -> DriverMatrix:
    return build_driver_matrix(rows, nii_matrix_key)


def matrix_value(
    matrix: DriverMatrix,
    key: str,
    scenario: str,
    field: str,
    placeholder: Any = PLACEHOLDER,
) -> Any:
    """Return matrix[key][scenario][field], or the placeholder when absent."""
    row = matrix.get(key, {}).get(scenario)
    if row is None:
        return placeholder
    value = row.get(field)
    return placeholder if value is None else value


def pick_duration(entry: dict[str, dict[str, Any]], selected_scenarios: list[str]) -> float | None:
    """First non-null duration found walking the selected scenarios in order."""
    for scenario in selected_scenarios:
        row = entry.get(scenario)
        if row is None:
            continue
        duration = safe_float(row.get('duration'), None)
        if duration is not None:
            return duration
    return None


def eve_comparison_table(rows: Any, selected_scenarios: list[str]) -> pd.DataFrame:
    """Instrument type x scenario base-PV table with one duration column."""
    matrix = build_eve_driver_matrix(rows)
    columns = ['Instrument Type', 'Duration'] + [f'{s} PV' for s in selected_scenarios]
    records = []
    for key in sorted(matrix):
        entry = matrix[key]
        record: dict[str, Any] = {'Instrument Type': key, 'Duration': pick_duration(entry, selected_scenarios)}
        for scenario in selected_scenarios:
            value = matrix_value(matrix, key, scenario, 'base_pv', placeholder=None)
            record[f'{scenario} PV'] = safe_float(value, None)
        records.append(record)
    out = pd.DataFrame(records, columns=columns)
    numeric_cols = columns[1:]
    out[numeric_cols] = out[numeric_cols].astype(float)
    return out


def nii_comparison_table(rows: Any, selected_scenarios: list[str]) -> pd.DataFrame:
    """Instrument type x bucket x scenario NII contribution table."""
    matrix = build_nii_driver_matrix(rows)
    columns = ['Instrument Type', 'Breakdown'] + [f'{s} NII' for s in selected_scenarios]
    records = []
    for key in sorted(matrix):
        instrument_type, _, breakdown = key.partition('|')
        record: dict[str, Any] = {'Instrument Type': instrument_type, 'Breakdown': breakdown}
        for scenario in selected_scenarios:
            value = matrix_value(matrix, key, scenario, 'nii_contribution', placeholder=None)
            record[f'{scenario} NII'] = safe_float(value, None)
        records.append(record)
    out = pd.DataFrame(records, columns=columns)
    numeric_cols = columns[2:]
    out[numeric_cols] = out[numeric_cols].astype(float)
    return out


def duration_chart_data(drivers: Any, instrument_type: str) -> tuple[pd.DataFrame, float | None]:
    """Per-instrument durations for one type and their |base PV|-weighted average."""
    empty = pd.DataFrame(columns=['instrument', 'duration'])
    if not isinstance(drivers, list):
        return empty, None
    rows = [
        d for d in drivers
        if isinstance(d, dict) and d.get('instrument_type') == instrument_type and d.get('duration') is not None
    ]
    if not rows:
        return empty, None
    rows = sorted(rows, key=lambda d: str(d.get('instrument_id') or ''))
    durations = np.array([safe_float(d.get('duration'), 0.0) for d in rows], dtype=float)
    weights = np.abs(np.array([safe_float(d.get('base_pv'), 0.0) for d in rows], dtype=float))
    total = float(weights.sum())
    weighted_avg = float(np.dot(durations, weights) / total) if total > 0 else None
    points = pd.DataFrame(
        {
            'instrument': [str(d.get('instrument_id') or '') for d in rows],
            'duration': durations,
        }
    )
    return points, weighted_avg
