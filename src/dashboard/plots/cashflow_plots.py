"""Cashflow ladder chart."""

from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from src.dashboard.components.formatting import plot_axis_number_format


def build_cashflow_ladder_figure(buckets: pd.DataFrame, *, title: str = 'Cashflow Ladder') -> go.Figure:
    """Stacked fixed/floating bars per period with cumulative totals on a secondary axis."""
    fig = make_subplots(specs=[[{'secondary_y': True}]])
    if not buckets.empty:
        x = buckets['group_key']
        fig.add_bar(x=x, y=buckets['fixed'], name='Fixed', marker_color='#8884d8', secondary_y=False)
        fig.add_bar(x=x, y=buckets['floating'], name='Floating', marker_color='#82ca9d', secondary_y=False)
        fig.add_scatter(
            x=x,
            y=buckets['cumulative_total'],
            name='Cumulative Total',
            mode='lines+markers',
            line=dict(color='#ff7300'),
            secondary_y=True,
        )
        fig.add_scatter(
            x=x,
            y=buckets['cumulative_fixed'],
            name='Cumulative Fixed',
            mode='lines',
            line=dict(color='#8884d8', dash='dot'),
            secondary_y=True,
        )
        fig.add_scatter(
            x=x,
            y=buckets['cumulative_floating'],
            name='Cumulative Floating',
            mode='lines',
            line=dict(color='#82ca9d', dash='dot'),
            secondary_y=True,
        )
    fig.update_layout(title=title, barmode='stack', xaxis_title='Period')
    fig.update_xaxes(type='category')
    fig.update_yaxes(title_text='Cashflow', secondary_y=False)
    fig.update_yaxes(title_text='Cumulative', secondary_y=True)
    return plot_axis_number_format(fig, y_axes=['yaxis', 'yaxis2'])
