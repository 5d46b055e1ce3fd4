"""Shared UI controls and state normalization helpers."""

from __future__ import annotations

from typing import Any

import streamlit as st

from src.api.client import CASHFLOW_AGGREGATIONS, CASHFLOW_TYPES, NII_BREAKDOWNS
from src.calculations.cashflow_buckets import GROUP_BY_OPTIONS
from src.calculations.driver_matrix import EVE_SCENARIOS
from src.models.assumptions import (
    NMD_MATURITY_MAX_YEARS,
    NMD_MATURITY_MIN_YEARS,
    BehavioralAssumptions,
)

PAGES = ['Dashboard', 'Instruments', 'Portfolio', 'Repricing Gap', 'Cashflow Ladder']
DEFAULT_PAGE = 'Dashboard'
NII_BREAKDOWN_LABELS = {'instrument': 'By Instrument', 'type': 'By Type', 'bucket': 'By Bucket'}
CASHFLOW_AGGREGATION_LABELS = {'assets': 'Assets', 'liabilities': 'Liabilities', 'net': 'Net'}
CASHFLOW_TYPE_LABELS = {'pv': 'Present Value', 'total': 'Total (Undiscounted)'}


def coerce_option(current: Any, options: list[Any], default: Any) -> Any:
    """Return a stable option value that is guaranteed to be in options."""
    if not options:
        return default
    if current in options:
        return current
    if default in options:
        return default
    return options[0]


def coerce_multiselect(current: Any, options: list[Any], default: list[Any]) -> list[Any]:
    """Keep only still-available selections, in option order; fall back to `default`."""
    chosen = current if isinstance(current, (list, tuple)) else []
    kept = [o for o in options if o in chosen]
    if kept:
        return kept
    return [o for o in options if o in default] or options[:1]


def _stable_radio(
    *,
    label: str,
    options: list[str],
    key: str,
    default: str,
    horizontal: bool = True,
    format_func=None,
) -> str:
    current = coerce_option(st.session_state.get(key, default), options, default)
    st.session_state[key] = current
    idx = options.index(current)
    if format_func is None:
        return st.radio(label, options=options, index=idx, horizontal=horizontal, key=key)
    return st.radio(label, options=options, index=idx, horizontal=horizontal, key=key, format_func=format_func)


def _stable_selectbox(
    *,
    label: str,
    options: list[Any],
    key: str,
    default: Any,
    format_func=None,
) -> Any:
    if not options:
        return default
    current = coerce_option(st.session_state.get(key, default), options, default)
    st.session_state[key] = current
    idx = options.index(current)
    if format_func is None:
        return st.selectbox(label, options, index=idx, key=key)
    return st.selectbox(label, options, index=idx, key=key, format_func=format_func)


def _stable_multiselect(*, label: str, options: list[str], key: str, default: list[str]) -> list[str]:
    current = coerce_multiselect(st.session_state.get(key, default), options, default)
    st.session_state[key] = current
    return list(st.multiselect(label, options, key=key))


def render_global_controls(default_backend_url: str) -> dict[str, Any]:
    """Render fixed sidebar controls and return normalized UI state."""
    with st.sidebar:
        st.subheader('Controls')
        backend_url = st.text_input(
            'Backend URL',
            value=st.session_state.get('global_backend_url', default_backend_url),
            key='global_backend_url',
        )
        refresh = st.button('Refresh Data', key='global_refresh_data')
        page = _stable_radio(
            label='Page',
            options=PAGES,
            key='global_page',
            default=DEFAULT_PAGE,
            horizontal=False,
        )
    return {
        'backend_url': str(backend_url or default_backend_url).strip(),
        'refresh': bool(refresh),
        'page': page,
    }


def seed_assumption_inputs(assumptions: BehavioralAssumptions, *, force: bool = False) -> None:
    """Copy backend-reported assumptions into the panel's widget state."""
    values = {
        'assumption_nmd_maturity': int(assumptions.nmd_effective_maturity_years),
        'assumption_nmd_beta': float(assumptions.nmd_deposit_beta),
        'assumption_prepayment_rate': float(assumptions.prepayment_rate),
    }
    for key, value in values.items():
        if force or key not in st.session_state:
            st.session_state[key] = value


def render_assumptions_panel(current: BehavioralAssumptions) -> BehavioralAssumptions | None:
    """Render the behavioral assumptions panel; return new assumptions when applied."""
    seed_assumption_inputs(current)
    with st.expander('Behavioral Assumptions', expanded=False):
        c1, c2, c3 = st.columns(3)
        with c1:
            maturity = st.number_input(
                'NMD Effective Maturity (Years)',
                min_value=NMD_MATURITY_MIN_YEARS,
                max_value=NMD_MATURITY_MAX_YEARS,
                step=1,
                key='assumption_nmd_maturity',
            )
        with c2:
            beta = st.number_input(
                'NMD Deposit Beta',
                min_value=0.0,
                max_value=1.0,
                step=0.05,
                format='%.2f',
                key='assumption_nmd_beta',
            )
        with c3:
            cpr = st.number_input(
                'Prepayment Rate (CPR)',
                min_value=0.0,
                max_value=1.0,
                step=0.01,
                format='%.2f',
                key='assumption_prepayment_rate',
            )
        st.caption(
            f'Current: NMD maturity {current.nmd_effective_maturity_years}y, '
            f'beta {current.nmd_deposit_beta:.2f}, CPR {current.prepayment_rate:.2%}'
        )
        if not st.button('Apply Assumptions', key='assumption_apply'):
            return None
    try:
        return BehavioralAssumptions(
            nmd_effective_maturity_years=int(maturity),
            nmd_deposit_beta=float(beta),
            prepayment_rate=float(cpr),
        )
    except ValueError as exc:
        st.error(str(exc))
        return None


def render_eve_scenario_controls() -> list[str]:
    return _stable_multiselect(
        label='EVE scenarios',
        options=EVE_SCENARIOS,
        key='eve_selected_scenarios',
        default=[EVE_SCENARIOS[0]],
    )


def render_nii_driver_controls(scenarios: list[str]) -> dict[str, Any]:
    c1, c2 = st.columns([3, 2])
    with c1:
        selected = _stable_multiselect(
            label='NII scenarios',
            options=scenarios,
            key='nii_selected_scenarios',
            default=scenarios[:1],
        )
    with c2:
        breakdown = _stable_radio(
            label='Breakdown',
            options=NII_BREAKDOWNS,
            key='nii_breakdown',
            default=NII_BREAKDOWNS[0],
            format_func=lambda v: NII_BREAKDOWN_LABELS.get(v, v),
        )
    return {'scenarios': selected, 'breakdown': breakdown}


def render_cashflow_controls(instrument_types: list[str], scenarios: list[str]) -> dict[str, Any]:
    """Scenario, instrument type, aggregation, cashflow type and grouping selectors."""
    type_options = ['all'] + [t for t in instrument_types if t != 'all']
    c1, c2, c3 = st.columns(3)
    with c1:
        scenario = _stable_selectbox(
            label='Scenario', options=scenarios, key='cashflow_scenario', default=scenarios[0] if scenarios else 'Base Case'
        )
        instrument_type = _stable_selectbox(
            label='Instrument type',
            options=type_options,
            key='cashflow_instrument_type',
            default='all',
            format_func=lambda v: 'All' if v == 'all' else v,
        )
    with c2:
        aggregation = _stable_radio(
            label='Aggregation',
            options=CASHFLOW_AGGREGATIONS,
            key='cashflow_aggregation',
            default='assets',
            format_func=lambda v: CASHFLOW_AGGREGATION_LABELS.get(v, v),
        )
        cashflow_type = _stable_radio(
            label='Cashflow type',
            options=CASHFLOW_TYPES,
            key='cashflow_type',
            default='pv',
            format_func=lambda v: CASHFLOW_TYPE_LABELS.get(v, v),
        )
    with c3:
        group_by = _stable_radio(
            label='Group by',
            options=GROUP_BY_OPTIONS,
            key='cashflow_group_by',
            default='Month',
            horizontal=False,
        )
    return {
        'scenario': scenario,
        'instrument_type': instrument_type,
        'aggregation': aggregation,
        'cashflow_type': cashflow_type,
        'group_by': group_by,
    }
