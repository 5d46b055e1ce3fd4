"""EVE and NII driver tables rendered from the driver matrix."""

from __future__ import annotations

from typing import Any

import pandas as pd
import streamlit as st

from src.api.client import FetchResult
from src.calculations.driver_matrix import eve_comparison_table, nii_comparison_table
from src.dashboard.components.formatting import style_numeric_table


def render_fetch_error(result: FetchResult, *, what: str, retry_key: str) -> bool:
    """Show an error banner with a Retry button; return True when Retry was clicked."""
    st.error(f'Failed to load {what}: {result.error}')
    return st.button('Retry', key=retry_key)


def _render_table(table: pd.DataFrame, *, empty_text: str) -> None:
    if table.empty:
        st.info(empty_text)
        return
    st.dataframe(style_numeric_table(table), use_container_width=True, hide_index=True)


def render_eve_driver_table(rows: list[dict[str, Any]], selected_scenarios: list[str]) -> pd.DataFrame:
    table = eve_comparison_table(rows, selected_scenarios)
    _render_table(table, empty_text='No EVE driver data for the selected scenarios.')
    return table


def render_nii_driver_table(rows: list[dict[str, Any]], selected_scenarios: list[str]) -> pd.DataFrame:
    table = nii_comparison_table(rows, selected_scenarios)
    _render_table(table, empty_text='No NII driver data for the selected scenarios.')
    return table
