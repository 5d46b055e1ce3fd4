import math

import pytest

from src.calculations.driver_matrix import (
    PLACEHOLDER,
    build_eve_driver_matrix,
    build_nii_driver_matrix,
    duration_chart_data,
    eve_comparison_table,
    matrix_value,
    nii_comparison_table,
    pick_duration,
)


def test_later_row_overwrites_same_key_and_scenario() -> None:
    rows = [
        {'instrument_type': 'Loan', 'scenario': 'Base Case', 'base_pv': 100.0},
        {'instrument_type': 'Loan', 'scenario': 'Parallel Up +200bps', 'base_pv': 90.0},
        {'instrument_type': 'Loan', 'scenario': 'Base Case', 'base_pv': 101.0},
    ]
    matrix = build_eve_driver_matrix(rows)
    assert matrix['Loan']['Base Case'] is rows[2]
    assert matrix_value(matrix, 'Loan', 'Parallel Up +200bps', 'base_pv') == 90.0


def test_missing_cells_render_placeholder() -> None:
    matrix = build_eve_driver_matrix([{'instrument_type': 'Deposit', 'scenario': 'Base Case', 'base_pv': None}])
    assert matrix_value(matrix, 'Deposit', 'Base Case', 'base_pv') == PLACEHOLDER
    assert matrix_value(matrix, 'Deposit', 'Short Rates Up +100bps', 'base_pv') == '-'
    assert matrix_value(matrix, 'Swap', 'Base Case', 'base_pv') == '-'


def test_nii_key_includes_breakdown_value() -> None:
    rows = [
        {'instrument_type': 'Loan', 'breakdown_value': '0-3 Months', 'scenario': 'Base Case', 'nii_contribution': 1.0},
        {'instrument_type': 'Loan', 'breakdown_value': '3-6 Months', 'scenario': 'Base Case', 'nii_contribution': 2.0},
        {'instrument_type': 'Deposit', 'scenario': 'Base Case', 'nii_contribution': -3.0},
        {'instrument_type': 'Loan', 'breakdown_value': '0-3 Months', 'scenario': 'Base Case', 'nii_contribution': 5.0},
    ]
    matrix = build_nii_driver_matrix(rows)
    assert set(matrix) == {'Loan|0-3 Months', 'Loan|3-6 Months', 'Deposit|'}
    assert matrix['Loan|0-3 Months']['Base Case']['nii_contribution'] == 5.0


def test_non_list_rows_give_empty_matrix() -> None:
    assert build_eve_driver_matrix(None) == {}
    assert build_nii_driver_matrix({'instrument_type': 'Loan'}) == {}


def test_duration_is_first_non_null_in_selection_order() -> None:
    entry = {
        'Base Case': {'duration': None},
        'Parallel Up +200bps': {'duration': 4.2},
        'Parallel Down -200bps': {'duration': 4.8},
    }
    assert pick_duration(entry, ['Base Case', 'Parallel Up +200bps', 'Parallel Down -200bps']) == 4.2
    assert pick_duration(entry, ['Parallel Down -200bps', 'Parallel Up +200bps']) == 4.8
    assert pick_duration(entry, ['Long Rates Up +100bps']) is None


def test_eve_comparison_table_columns_follow_selection() -> None:
    rows = [
        {'instrument_type': 'Loan', 'scenario': 'Base Case', 'base_pv': 100.0, 'duration': 3.0},
        {'instrument_type': 'Loan', 'scenario': 'Parallel Up +200bps', 'base_pv': 94.0, 'duration': 3.0},
        {'instrument_type': 'Deposit', 'scenario': 'Base Case', 'base_pv': -80.0},
    ]
    table = eve_comparison_table(rows, ['Parallel Up +200bps', 'Base Case'])
    assert list(table.columns) == ['Instrument Type', 'Duration', 'Parallel Up +200bps PV', 'Base Case PV']
    assert table['Instrument Type'].tolist() == ['Deposit', 'Loan']
    loan = table.set_index('Instrument Type').loc['Loan']
    assert loan['Parallel Up +200bps PV'] == 94.0
    deposit = table.set_index('Instrument Type').loc['Deposit']
    assert math.isnan(deposit['Parallel Up +200bps PV'])
    assert math.isnan(deposit['Duration'])


def test_nii_comparison_table_splits_key() -> None:
    rows = [{'instrument_type': 'Loan', 'breakdown_value': 'Fixed', 'scenario': 'Base Case', 'nii_contribution': 12.5}]
    table = nii_comparison_table(rows, ['Base Case'])
    assert table.to_dict(orient='records') == [
        {'Instrument Type': 'Loan', 'Breakdown': 'Fixed', 'Base Case NII': 12.5}
    ]


def test_duration_chart_weighted_by_absolute_base_pv() -> None:
    drivers = [
        {'instrument_type': 'Loan', 'instrument_id': 'L2', 'duration': 4.0, 'base_pv': 300.0},
        {'instrument_type': 'Loan', 'instrument_id': 'L1', 'duration': 2.0, 'base_pv': -100.0},
        {'instrument_type': 'Loan', 'instrument_id': 'L3', 'duration': None, 'base_pv': 500.0},
        {'instrument_type': 'Deposit', 'instrument_id': 'D1', 'duration': 1.0, 'base_pv': 50.0},
    ]
    points, avg = duration_chart_data(drivers, 'Loan')
    assert points['instrument'].tolist() == ['L1', 'L2']
    assert points['duration'].tolist() == [2.0, 4.0]
    assert avg == pytest.approx((2.0 * 100.0 + 4.0 * 300.0) / 400.0)


def test_duration_chart_without_weight_has_no_average() -> None:
    points, avg = duration_chart_data([{'instrument_type': 'Deposit', 'instrument_id': 'D1', 'duration': 1.0}], 'Deposit')
    assert len(points) == 1
    assert avg is None
    empty, none_avg = duration_chart_data('bad', 'Loan')
    assert empty.empty and none_avg is None
