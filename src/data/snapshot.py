"""Live dashboard snapshot normalization.

The backend owns every number here; this module only guarantees that each
field the dashboard reads exists with a zero/empty default and the expected
shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from src.models.assumptions import BehavioralAssumptions
from src.utils.numbers import safe_float

DEFAULT_SCENARIO_SERIES = ['Base Case', '+200bps', '-200bps']
GAP_COLUMNS = ['bucket', 'assets', 'liabilities', 'gap']


@dataclass
class DashboardSnapshot:
    """Normalized `/dashboard/live-data` payload."""

    eve_sensitivity: float = 0.0
    nii_sensitivity: float = 0.0
    portfolio_value: float = 0.0
    total_loans: int = 0
    total_deposits: int = 0
    total_derivatives: int = 0
    total_assets_value: float = 0.0
    total_liabilities_value: float = 0.0
    net_interest_income: float = 0.0
    economic_value_of_equity: float = 0.0
    yield_curve_data: list[dict[str, Any]] = field(default_factory=list)
    scenario_data: list[dict[str, Any]] = field(default_factory=list)
    nii_repricing_gap: list[dict[str, Any]] = field(default_factory=list)
    eve_maturity_gap: list[dict[str, Any]] = field(default_factory=list)
    eve_scenarios: list[dict[str, Any]] = field(default_factory=list)
    nii_scenarios: list[dict[str, Any]] = field(default_factory=list)
    loan_composition: dict[str, float] = field(default_factory=dict)
    deposit_composition: dict[str, float] = field(default_factory=dict)
    derivative_composition: dict[str, float] = field(default_factory=dict)
    current_assumptions: BehavioralAssumptions = field(default_factory=BehavioralAssumptions)


def _float(value: Any) -> float:
    return float(safe_float(value, 0.0))


def _int(value: Any) -> int:
    return int(_float(value))


def _records(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [dict(v) for v in value if isinstance(v, dict)]


def _composition(value: Any) -> dict[str, float]:
    if not isinstance(value, dict):
        return {}
    return {str(k): _float(v) for k, v in value.items()}


def _yield_points(value: Any) -> list[dict[str, Any]]:
    return [
        {'name': str(r.get('name', '')), 'yield': _float(r.get('rate'))}
        for r in _records(value)
    ]


def _scenario_points(value: Any) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for r in _records(value):
        data = r.get('data') if isinstance(r.get('data'), dict) else {}
        point: dict[str, Any] = {'time': str(r.get('time', ''))}
        for name in DEFAULT_SCENARIO_SERIES:
            point[name] = _float(data.get(name))
        for name, v in data.items():
            if str(name) not in point:
                point[str(name)] = _float(v)
        out.append(point)
    return out


def _gap_rows(value: Any) -> list[dict[str, Any]]:
    return [
        {
            'bucket': str(r.get('bucket', '')),
            'assets': _float(r.get('assets')),
            'liabilities': _float(r.get('liabilities')),
            'gap': _float(r.get('gap')),
        }
        for r in _records(value)
    ]


def _scenario_results(value: Any, value_key: str) -> list[dict[str, Any]]:
    return [
        {'scenario_name': str(r.get('scenario_name', '')), value_key: _float(r.get(value_key))}
        for r in _records(value)
    ]


def normalize_snapshot(payload: Any) -> DashboardSnapshot:
    """Convert a raw live-data payload into a fully-defaulted snapshot."""
    if not isinstance(payload, dict):
        return DashboardSnapshot()
    return DashboardSnapshot(
        eve_sensitivity=_float(payload.get('eve_sensitivity')),
        nii_sensitivity=_float(payload.get('nii_sensitivity')),
        portfolio_value=_float(payload.get('portfolio_value')),
        total_loans=_int(payload.get('total_loans')),
        total_deposits=_int(payload.get('total_deposits')),
        total_derivatives=_int(payload.get('total_derivatives')),
        total_assets_value=_float(payload.get('total_assets_value')),
        total_liabilities_value=_float(payload.get('total_liabilities_value')),
        net_interest_income=_float(payload.get('net_interest_income')),
        economic_value_of_equity=_float(payload.get('economic_value_of_equity')),
        yield_curve_data=_yield_points(payload.get('yield_curve_data')),
        scenario_data=_scenario_points(payload.get('scenario_data')),
        nii_repricing_gap=_gap_rows(payload.get('nii_repricing_gap')),
        eve_maturity_gap=_gap_rows(payload.get('eve_maturity_gap')),
        eve_scenarios=_scenario_results(payload.get('eve_scenarios'), 'eve_value'),
        nii_scenarios=_scenario_results(payload.get('nii_scenarios'), 'nii_value'),
        loan_composition=_composition(payload.get('loan_composition')),
        deposit_composition=_composition(payload.get('deposit_composition')),
        derivative_composition=_composition(payload.get('derivative_composition')),
        current_assumptions=BehavioralAssumptions.from_payload(payload.get('current_assumptions')),
    )


def gap_frame(rows: list[dict[str, Any]]) -> pd.DataFrame:
    """Gap rows as a DataFrame with a stable column order."""
    if not rows:
        return pd.DataFrame(columns=GAP_COLUMNS)
    return pd.DataFrame(rows)[GAP_COLUMNS].reset_index(drop=True)


def scenario_series_frame(points: list[dict[str, Any]]) -> pd.DataFrame:
    """Scenario time series: one `time` column and one column per scenario."""
    if not points:
        return pd.DataFrame(columns=['time'] + DEFAULT_SCENARIO_SERIES)
    out = pd.DataFrame(points)
    scenario_cols = [c for c in out.columns if c != 'time']
    out[scenario_cols] = out[scenario_cols].fillna(0.0)
    return out


def key_metrics_frame(snapshot: DashboardSnapshot) -> pd.DataFrame:
    """Headline metrics as a two-column table for display and export."""
    rows = [
        ('EVE Sensitivity (%)', snapshot.eve_sensitivity),
        ('NII Sensitivity (%)', snapshot.nii_sensitivity),
        ('Net Interest Income (Base)', snapshot.net_interest_income),
        ('Economic Value of Equity (Base)', snapshot.economic_value_of_equity),
        ('Total Assets PV', snapshot.total_assets_value),
        ('Total Liabilities PV', snapshot.total_liabilities_value),
        ('Portfolio Value (Net PV)', snapshot.portfolio_value),
        ('Total Loans Count', float(snapshot.total_loans)),
        ('Total Deposits Count', float(snapshot.total_deposits)),
        ('Total Derivatives Count', float(snapshot.total_derivatives)),
    ]
    return pd.DataFrame(rows, columns=['Metric', 'Value'])
