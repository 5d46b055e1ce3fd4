"""Plot builders for the main dashboard page."""

from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go

from src.dashboard.components.formatting import PIE_COLORS, SCENARIO_COLORS, plot_axis_number_format


def build_yield_curve_figure(curve: pd.DataFrame, title: str = 'Yield Curve') -> go.Figure:
    """One line per scenario over ordered tenors; rates are fractions."""
    fig = go.Figure()
    if not curve.empty:
        for scenario, part in curve.groupby('scenario', sort=False):
            fig.add_scatter(
                x=part['tenor'],
                y=part['rate'] * 100.0,
                name=str(scenario),
                mode='lines+markers',
                line=dict(color=SCENARIO_COLORS.get(str(scenario))),
            )
    fig.update_layout(title=title, xaxis_title='Tenor', yaxis_title='Yield (%)')
    fig.update_xaxes(type='category')
    return plot_axis_number_format(fig, y_axes=['yaxis'])


def build_scenario_series_figure(series: pd.DataFrame, title: str = 'NII Scenario Analysis') -> go.Figure:
    fig = go.Figure()
    if not series.empty:
        for col in [c for c in series.columns if c != 'time']:
            fig.add_scatter(
                x=series['time'],
                y=series[col],
                name=str(col),
                mode='lines+markers',
                line=dict(color=SCENARIO_COLORS.get(str(col))),
            )
    fig.update_layout(title=title, xaxis_title='Period', yaxis_title='Value')
    return plot_axis_number_format(fig, y_axes=['yaxis'])


def build_gap_figure(gap: pd.DataFrame, title: str) -> go.Figure:
    """Assets and liabilities as bars with the net gap as a line."""
    fig = go.Figure()
    if not gap.empty:
        fig.add_bar(x=gap['bucket'], y=gap['assets'], name='Assets', marker_color='#2e7d32')
        fig.add_bar(x=gap['bucket'], y=-gap['liabilities'].abs(), name='Liabilities', marker_color='#c62828')
        fig.add_scatter(x=gap['bucket'], y=gap['gap'], name='Gap', mode='lines+markers', line=dict(color='#1f1f1f'))
    fig.update_layout(title=title, barmode='relative', xaxis_title='Bucket', yaxis_title='Amount')
    fig.update_xaxes(type='category')
    return plot_axis_number_format(fig, y_axes=['yaxis'])


def build_composition_pie(composition: pd.DataFrame, title: str) -> go.Figure:
    fig = go.Figure()
    if not composition.empty:
        fig.add_pie(
            labels=composition['name'],
            values=composition['value'],
            marker=dict(colors=PIE_COLORS),
            textinfo='label+percent',
            hole=0.0,
        )
    fig.update_layout(title=title)
    return plot_axis_number_format(fig, y_axes=[])


def build_scenario_results_figure(results: list[dict], value_key: str, title: str) -> go.Figure:
    """Bar chart of one value per named scenario (EVE or NII)."""
    frame = pd.DataFrame(results or [], columns=['scenario_name', value_key])
    fig = go.Figure()
    if not frame.empty:
        fig.add_bar(x=frame['scenario_name'], y=frame[value_key], name=title, marker_color='#8884d8')
    fig.update_layout(title=title, xaxis_title='Scenario', yaxis_title='Value')
    fig.update_xaxes(type='category')
    return plot_axis_number_format(fig, y_axes=['yaxis'])


def build_duration_figure(points: pd.DataFrame, weighted_avg: float | None, title: str) -> go.Figure:
    """Per-instrument duration bars with the PV-weighted average as a reference line."""
    fig = go.Figure()
    if not points.empty:
        fig.add_bar(x=points['instrument'], y=points['duration'], name='Duration', marker_color='#82ca9d')
    if weighted_avg is not None:
        fig.add_hline(
            y=weighted_avg,
            line_dash='dash',
            line_color='#ff7300',
            annotation_text=f'Weighted avg {weighted_avg:.2f}y',
        )
    fig.update_layout(title=title, xaxis_title='Instrument', yaxis_title='Duration (years)')
    fig.update_xaxes(type='category')
    return plot_axis_number_format(fig, y_axes=['yaxis'])
