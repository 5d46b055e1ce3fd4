import pytest

from src.data.snapshot import (
    DashboardSnapshot,
    gap_frame,
    key_metrics_frame,
    normalize_snapshot,
    scenario_series_frame,
)
from src.models.assumptions import BehavioralAssumptions


def test_empty_payload_yields_zero_defaults() -> None:
    snap = normalize_snapshot({})
    assert snap == DashboardSnapshot()
    assert snap.eve_sensitivity == 0.0
    assert snap.total_loans == 0
    assert snap.yield_curve_data == []
    assert snap.loan_composition == {}
    assert snap.current_assumptions == BehavioralAssumptions()
    assert normalize_snapshot(None) == DashboardSnapshot()


def test_payload_fields_are_normalized() -> None:
    payload = {
        'eve_sensitivity': '-2.5',
        'total_deposits': 4.0,
        'yield_curve_data': [{'name': '1Y', 'rate': 0.04}],
        'scenario_data': [{'time': 'Q1', 'data': {'Base Case': 10, '+200bps': 12, 'Custom': 3}}],
        'nii_repricing_gap': [{'bucket': '0-3M', 'assets': 5, 'liabilities': 3, 'gap': 2}, 'junk'],
        'eve_scenarios': [{'scenario_name': 'Base Case', 'eve_value': 100}],
        'loan_composition': {'Fixed': '60', 'Floating': None},
        'current_assumptions': {'nmd_effective_maturity_years': 7, 'nmd_deposit_beta': 0.3, 'prepayment_rate': 0.1},
    }
    snap = normalize_snapshot(payload)
    assert snap.eve_sensitivity == -2.5
    assert snap.total_deposits == 4
    assert snap.yield_curve_data == [{'name': '1Y', 'yield': 0.04}]
    assert snap.scenario_data == [{'time': 'Q1', 'Base Case': 10.0, '+200bps': 12.0, '-200bps': 0.0, 'Custom': 3.0}]
    assert snap.nii_repricing_gap == [{'bucket': '0-3M', 'assets': 5.0, 'liabilities': 3.0, 'gap': 2.0}]
    assert snap.eve_scenarios == [{'scenario_name': 'Base Case', 'eve_value': 100.0}]
    assert snap.loan_composition == {'Fixed': 60.0, 'Floating': 0.0}
    assert snap.current_assumptions == BehavioralAssumptions(7, 0.3, 0.1)


def test_gap_and_series_frames_have_stable_columns() -> None:
    assert list(gap_frame([]).columns) == ['bucket', 'assets', 'liabilities', 'gap']
    assert list(scenario_series_frame([]).columns) == ['time', 'Base Case', '+200bps', '-200bps']
    series = scenario_series_frame([{'time': 'Q1', 'Base Case': 1.0}, {'time': 'Q2', 'Base Case': 2.0, 'X': 5.0}])
    assert series['X'].tolist() == [0.0, 5.0]


def test_key_metrics_frame_lists_headline_values() -> None:
    snap = DashboardSnapshot(net_interest_income=1_500_000.0, total_loans=3)
    metrics = key_metrics_frame(snap).set_index('Metric')['Value']
    assert metrics['Net Interest Income (Base)'] == 1_500_000.0
    assert metrics['Total Loans Count'] == 3.0


def test_assumptions_validate_ranges() -> None:
    assert BehavioralAssumptions().to_query_params() == {
        'nmd_effective_maturity_years': 5,
        'nmd_deposit_beta': 0.5,
        'prepayment_rate': 0.0,
    }
    with pytest.raises(ValueError):
        BehavioralAssumptions(nmd_effective_maturity_years=0)
    with pytest.raises(ValueError):
        BehavioralAssumptions(nmd_deposit_beta=1.5)
    with pytest.raises(ValueError):
        BehavioralAssumptions(prepayment_rate=-0.1)


def test_assumptions_from_payload_falls_back_to_defaults() -> None:
    assert BehavioralAssumptions.from_payload(None) == BehavioralAssumptions()
    partial = BehavioralAssumptions.from_payload({'nmd_deposit_beta': '0.25'})
    assert partial == BehavioralAssumptions(5, 0.25, 0.0)
    assert BehavioralAssumptions.from_payload({'nmd_effective_maturity_years': 99}) == BehavioralAssumptions()
