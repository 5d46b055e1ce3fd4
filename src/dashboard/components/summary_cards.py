"""Summary card renderer for key KPIs."""

from __future__ import annotations

import streamlit as st

from src.dashboard.components.formatting import format_currency_millions, format_percent, sensitivity_color
from src.data.snapshot import DashboardSnapshot


def sensitivity_markdown(label: str, value: float) -> str:
    """Colored markdown line for a sensitivity percentage."""
    return f'**{label}**  \n:{sensitivity_color(value)}[**{format_percent(value)}**]'


def render_summary_cards(snapshot: DashboardSnapshot, title: str = 'Key Metrics') -> None:
    """Render top-level KPI cards."""
    st.subheader(title)
    c1, c2, c3, c4 = st.columns(4)
    c1.markdown(sensitivity_markdown('EVE Sensitivity (+200bps)', snapshot.eve_sensitivity))
    c2.markdown(sensitivity_markdown('NII Sensitivity (+200bps)', snapshot.nii_sensitivity))
    c3.metric('Net Interest Income (Base)', format_currency_millions(snapshot.net_interest_income))
    c4.metric('Economic Value of Equity (Base)', format_currency_millions(snapshot.economic_value_of_equity))

    c5, c6, c7 = st.columns(3)
    c5.metric('Total Assets PV', format_currency_millions(snapshot.total_assets_value))
    c6.metric('Total Liabilities PV', format_currency_millions(snapshot.total_liabilities_value))
    c7.metric('Portfolio Value (Net PV)', format_currency_millions(snapshot.portfolio_value))

    c8, c9, c10 = st.columns(3)
    c8.metric('Loans', f'{snapshot.total_loans:,d}')
    c9.metric('Deposits', f'{snapshot.total_deposits:,d}')
    c10.metric('Derivatives', f'{snapshot.total_derivatives:,d}')
