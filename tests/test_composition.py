import pytest

from src.calculations.composition import (
    average_rates_frame,
    composition_frame,
    drill_down_frames,
    group_by_category,
    net_positions_frame,
    repricing_gap_frame,
    tenor_to_months,
    yield_curve_frame,
)


def test_composition_frame_from_mapping() -> None:
    out = composition_frame({'Fixed Rate Loan': 600.0, 'Floating Rate Loan': '400'})
    assert out.to_dict(orient='records') == [
        {'name': 'Fixed Rate Loan', 'value': 600.0},
        {'name': 'Floating Rate Loan', 'value': 400.0},
    ]
    assert composition_frame(None).empty
    assert list(composition_frame({}).columns) == ['name', 'value']


def test_group_by_category_sums_in_first_seen_order() -> None:
    records = [
        {'instrument_type': 'Loan', 'category': 'Floating', 'total_amount': 10.0},
        {'instrument_type': 'Loan', 'category': 'Fixed', 'total_amount': 5.0},
        {'instrument_type': 'Deposit', 'category': 'Checking', 'total_amount': 99.0},
        {'instrument_type': 'Loan', 'category': 'Floating', 'total_amount': 2.5},
    ]
    out = group_by_category(records, 'Loan')
    assert out['name'].tolist() == ['Floating', 'Fixed']
    assert out['value'].tolist() == [12.5, 5.0]
    assert group_by_category(records, 'Derivative').empty


def test_average_rates_frame_fills_missing_columns() -> None:
    out = average_rates_frame([{'instrument_type': 'Loan', 'category': 'Fixed', 'total_amount': '100'}])
    assert out.loc[0, 'total_amount'] == 100.0
    assert 'average_interest_rate' in out.columns


def test_net_positions_frame_defaults_missing_amounts() -> None:
    out = net_positions_frame([{'bucket': '0-3M', 'total_assets': 10.0}])
    assert out.to_dict(orient='records') == [
        {'bucket': '0-3M', 'total_assets': 10.0, 'total_liabilities': 0.0, 'net_position': 0.0}
    ]


def test_repricing_gap_frame_orders_buckets_and_counts_instruments() -> None:
    rows = [
        {'bucket': '>5 Years', 'assets': 1.0, 'liabilities': 2.0, 'net': -1.0, 'instruments': ['L1']},
        {'bucket': '0-3 Months', 'assets': 5.0, 'liabilities': 1.0, 'net': 4.0, 'instruments': ['L2', 'D1']},
        {'bucket': 'Other', 'assets': 0.0, 'liabilities': 0.0, 'net': 0.0},
    ]
    out = repricing_gap_frame(rows)
    assert out['bucket'].tolist() == ['0-3 Months', '>5 Years', 'Other']
    assert out['instrument_count'].tolist() == [2, 1, 0]


def test_drill_down_frames_sorted_by_amount() -> None:
    assets, liabilities = drill_down_frames(
        {
            'assets': [
                {'instrument_id': 'L1', 'instrument_type': 'Loan', 'amount': 10.0},
                {'instrument_id': 'L2', 'instrument_type': 'Loan', 'amount': 30.0},
            ],
        }
    )
    assert assets['instrument_id'].tolist() == ['L2', 'L1']
    assert liabilities.empty
    assert list(liabilities.columns) == ['instrument_id', 'instrument_type', 'amount']


@pytest.mark.parametrize('tenor, months', [('1M', 1.0), ('6m', 6.0), ('10Y', 120.0), ('bad', None), (None, None)])
def test_tenor_to_months(tenor, months) -> None:
    assert tenor_to_months(tenor) == months


def test_yield_curve_frame_orders_tenors_per_scenario() -> None:
    points = [
        {'name': '10Y', 'yield': 0.045},
        {'name': '3M', 'yield': 0.05},
        {'name': '1Y', 'yield': 0.048},
        {'scenario': '+200bps', 'tenor': '1Y', 'rate': 0.068},
    ]
    out = yield_curve_frame(points)
    base = out[out['scenario'] == 'Base Case']
    assert base['tenor'].tolist() == ['3M', '1Y', '10Y']
    assert base['rate'].tolist() == [0.05, 0.048, 0.045]
    assert out[out['scenario'] == '+200bps']['rate'].tolist() == [0.068]
