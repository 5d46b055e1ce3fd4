"""Shared dashboard formatting helpers."""

from __future__ import annotations

import math
from typing import Any

import pandas as pd
import plotly.graph_objects as go

from src.utils.numbers import safe_float

PIE_COLORS = ['#8884d8', '#82ca9d', '#ffc658', '#ff8042', '#00c49f', '#ffbb28']
SCENARIO_COLORS = {'Base Case': '#8884d8', '+200bps': '#ff7300', '-200bps': '#82ca9d'}
SENSITIVITY_THRESHOLD = 0.5


def format_currency_millions(value: Any) -> str:
    """Format a currency amount as `$X.XXM`."""
    amount = safe_float(value, 0.0) / 1_000_000.0
    if amount < 0:
        return f'-${abs(amount):,.2f}M'
    return f'${amount:,.2f}M'


def format_percent(value: Any, *, digits: int = 2, ratio: bool = False) -> str:
    """Format a percentage; `ratio=True` treats the input as a fraction."""
    number = safe_float(value, None)
    if number is None:
        return '-'
    if ratio:
        number *= 100.0
    return f'{number:.{digits}f}%'


def sensitivity_color(value: Any) -> str:
    """Streamlit color name for an EVE/NII sensitivity percentage."""
    number = float(safe_float(value, 0.0))
    if number > SENSITIVITY_THRESHOLD:
        return 'red'
    if number < -SENSITIVITY_THRESHOLD:
        return 'green'
    return 'orange'


def gap_color(value: Any) -> str:
    """Positive gaps are asset sensitive, negative gaps liability sensitive."""
    number = float(safe_float(value, 0.0))
    if number > 0:
        return 'green'
    if number < 0:
        return 'red'
    return 'gray'


def _gap_cell_style(value: Any) -> str:
    colors = {'green': '#2e7d32', 'red': '#c62828', 'gray': '#757575'}
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ''
    return f'color: {colors[gap_color(value)]}'


def style_numeric_table(
    df: pd.DataFrame,
    *,
    percent_cols: set[str] | None = None,
    gap_cols: set[str] | None = None,
) -> pd.io.formats.style.Styler | pd.DataFrame:
    """Apply consistent numeric formatting across dashboard tables."""
    if df.empty:
        return df
    percent_cols = percent_cols or set()
    gap_cols = gap_cols or set()
    formats: dict[str, str] = {}
    for col in df.columns:
        if not pd.api.types.is_numeric_dtype(df[col]):
            continue
        name = str(col).lower()
        if col in percent_cols or 'rate' in name:
            formats[col] = '{:,.4f}'
        elif 'count' in name:
            formats[col] = '{:,.0f}'
        else:
            formats[col] = '{:,.2f}'
    if not formats:
        return df
    styler = df.style.format(formats, na_rep='-')
    colored = [c for c in df.columns if c in gap_cols and pd.api.types.is_numeric_dtype(df[c])]
    if colored:
        styler = styler.map(_gap_cell_style, subset=colored)
    return styler


def plot_axis_number_format(fig: go.Figure, *, y_axes: list[str]) -> go.Figure:
    """Apply thousand separators and consistent tick formatting to selected y-axes."""
    layout = fig.layout
    for axis_name in y_axes:
        axis = getattr(layout, axis_name, None)
        if axis is None:
            continue
        axis.separatethousands = True
    return apply_plot_layout_hygiene(fig)


def apply_plot_layout_hygiene(fig: go.Figure) -> go.Figure:
    """Apply consistent spacing so legends and axis titles do not overlap."""
    fig.update_layout(
        margin=dict(t=96, r=88, b=122, l=88),
        legend=dict(
            orientation='h',
            yanchor='top',
            y=-0.24,
            xanchor='left',
            x=0.0,
            bgcolor='rgba(0,0,0,0)',
            tracegroupgap=8,
        ),
    )
    fig.update_xaxes(automargin=True, title_standoff=14)
    fig.update_yaxes(automargin=True, title_standoff=12)
    return fig
