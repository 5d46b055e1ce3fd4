import pandas as pd
import pytest

from src.calculations.cashflow_buckets import bucket_cashflows
from src.calculations.composition import composition_frame, repricing_gap_frame, yield_curve_frame
from src.dashboard.plots.cashflow_plots import build_cashflow_ladder_figure
from src.dashboard.plots.dashboard_plots import (
    build_composition_pie,
    build_duration_figure,
    build_gap_figure,
    build_yield_curve_figure,
)
from src.dashboard.plots.portfolio_plots import build_repricing_gap_figure


def test_cashflow_ladder_stacks_fixed_and_floating() -> None:
    buckets = bucket_cashflows(
        [
            {'time_label': '2025-01-15', 'fixed': 100.0, 'floating': 20.0},
            {'time_label': '2025-02-15', 'fixed': 50.0, 'floating': 10.0},
        ],
        'Month',
    )
    fig = build_cashflow_ladder_figure(buckets)
    names = [t.name for t in fig.data]
    assert names[:3] == ['Fixed', 'Floating', 'Cumulative Total']
    assert fig.layout.barmode == 'stack'
    assert list(fig.data[2].y) == [120.0, 180.0]
    assert bool(fig.layout.yaxis2.separatethousands)


def test_empty_frames_produce_empty_figures() -> None:
    assert len(build_cashflow_ladder_figure(bucket_cashflows([], 'Month')).data) == 0
    assert len(build_gap_figure(pd.DataFrame(columns=['bucket', 'assets', 'liabilities', 'gap']), 'Gap').data) == 0


def test_yield_curve_rates_plotted_as_percent() -> None:
    curve = yield_curve_frame([{'name': '1Y', 'yield': 0.04}, {'name': '3M', 'yield': 0.05}])
    fig = build_yield_curve_figure(curve)
    assert list(fig.data[0].x) == ['3M', '1Y']
    assert list(fig.data[0].y) == pytest.approx([5.0, 4.0])


def test_duration_figure_marks_weighted_average() -> None:
    points = pd.DataFrame({'instrument': ['L1', 'L2'], 'duration': [2.0, 4.0]})
    fig = build_duration_figure(points, 3.5, 'Loans')
    assert len(fig.layout.shapes) == 1
    assert fig.layout.shapes[0].y0 == 3.5


def test_pie_and_repricing_gap_figures() -> None:
    pie = build_composition_pie(composition_frame({'Fixed': 3.0, 'Floating': 1.0}), 'Loans')
    assert list(pie.data[0].labels) == ['Fixed', 'Floating']
    gap = repricing_gap_frame([{'bucket': '0-3 Months', 'assets': 5.0, 'liabilities': 2.0, 'net': 3.0}])
    fig = build_repricing_gap_figure(gap, 'Base Case')
    assert [t.name for t in fig.data] == ['Assets', 'Liabilities', 'Net']
    assert fig.layout.title.text == 'Repricing Gap (Base Case)'
