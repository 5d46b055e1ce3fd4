"""Portfolio composition and repricing gap charts."""

from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go

from src.dashboard.components.formatting import PIE_COLORS, plot_axis_number_format


def build_category_pie(grouped: pd.DataFrame, title: str) -> go.Figure:
    fig = go.Figure()
    if not grouped.empty:
        fig.add_pie(
            labels=grouped['name'],
            values=grouped['value'],
            marker=dict(colors=PIE_COLORS),
            textinfo='label+percent',
        )
    fig.update_layout(title=title)
    return plot_axis_number_format(fig, y_axes=[])


def build_net_positions_figure(positions: pd.DataFrame, title: str = 'Net Positions by Bucket') -> go.Figure:
    fig = go.Figure()
    if not positions.empty:
        fig.add_bar(x=positions['bucket'], y=positions['total_assets'], name='Total Assets', marker_color='#2e7d32')
        fig.add_bar(
            x=positions['bucket'],
            y=-positions['total_liabilities'].abs(),
            name='Total Liabilities',
            marker_color='#c62828',
        )
        fig.add_scatter(
            x=positions['bucket'],
            y=positions['net_position'],
            name='Net Position',
            mode='lines+markers',
            line=dict(color='#1f1f1f'),
        )
    fig.update_layout(title=title, barmode='relative', xaxis_title='Bucket', yaxis_title='Amount')
    fig.update_xaxes(type='category')
    return plot_axis_number_format(fig, y_axes=['yaxis'])


def build_repricing_gap_figure(gap: pd.DataFrame, scenario: str) -> go.Figure:
    """Assets, liabilities and net per repricing bucket for one scenario."""
    fig = go.Figure()
    if not gap.empty:
        fig.add_bar(x=gap['bucket'], y=gap['assets'], name='Assets', marker_color='#2e7d32')
        fig.add_bar(x=gap['bucket'], y=gap['liabilities'], name='Liabilities', marker_color='#c62828')
        fig.add_bar(x=gap['bucket'], y=gap['net'], name='Net', marker_color='#1565c0')
    fig.update_layout(
        title=f'Repricing Gap ({scenario})',
        barmode='group',
        xaxis_title='Repricing Bucket',
        yaxis_title='Amount',
    )
    fig.update_xaxes(type='category')
    return plot_axis_number_format(fig, y_axes=['yaxis'])
