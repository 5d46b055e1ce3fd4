"""Streamlit app entrypoint for the IRRBB dashboard."""

from __future__ import annotations

from pathlib import Path
import sys
from typing import Any

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pandas as pd
import streamlit as st

from src.api.client import BackendConfig, FetchResult, IrrbbApiClient
from src.calculations.cashflow_buckets import bucket_cashflows
from src.calculations.composition import (
    average_rates_frame,
    composition_frame,
    drill_down_frames,
    group_by_category,
    net_positions_frame,
    repricing_gap_frame,
    yield_curve_frame,
)
from src.calculations.driver_matrix import EVE_SCENARIOS, duration_chart_data
from src.dashboard.components.controls import (
    render_assumptions_panel,
    render_cashflow_controls,
    render_eve_scenario_controls,
    render_global_controls,
    render_nii_driver_controls,
    seed_assumption_inputs,
)
from src.dashboard.components.driver_tables import (
    render_eve_driver_table,
    render_fetch_error,
    render_nii_driver_table,
)
from src.dashboard.components.formatting import format_currency_millions, style_numeric_table
from src.dashboard.components.instrument_forms import render_instrument_manager
from src.dashboard.components.summary_cards import render_summary_cards
from src.dashboard.fetch_state import FetchTracker
from src.dashboard.instrument_workflow import InstrumentManager
from src.dashboard.plots.cashflow_plots import build_cashflow_ladder_figure
from src.dashboard.plots.dashboard_plots import (
    build_composition_pie,
    build_duration_figure,
    build_gap_figure,
    build_scenario_results_figure,
    build_scenario_series_figure,
    build_yield_curve_figure,
)
from src.dashboard.plots.portfolio_plots import (
    build_category_pie,
    build_net_positions_figure,
    build_repricing_gap_figure,
)
from src.dashboard.reporting.export_pack import (
    build_export_context,
    build_export_workbook_bytes,
    default_export_filename,
)
from src.data.snapshot import DashboardSnapshot, gap_frame, scenario_series_frame
from src.models.assumptions import BehavioralAssumptions
from src.utils.logging import get_logger

LOGGER = get_logger(__name__)

INSTRUMENT_TABS = {'Loans': 'Loan', 'Deposits': 'Deposit', 'Derivatives': 'Derivative'}


def _secrets() -> Any:
    # Missing secrets.toml surfaces on first lookup, which from_env tolerates.
    return st.secrets


@st.cache_resource
def _client(base_url: str) -> IrrbbApiClient:
    config = BackendConfig.from_env(base_url, secrets=_secrets())
    LOGGER.info('Using backend %s (timeout %.0fs)', config.base_url, config.timeout_seconds)
    return IrrbbApiClient(config)


def _tracker() -> FetchTracker:
    return FetchTracker(st.session_state)


def _applied_assumptions() -> BehavioralAssumptions:
    current = st.session_state.get('applied_assumptions')
    if isinstance(current, BehavioralAssumptions):
        return current
    return BehavioralAssumptions()


def _load_snapshot(client: IrrbbApiClient, tracker: FetchTracker) -> FetchResult[DashboardSnapshot]:
    assumptions = _applied_assumptions()
    key = f'live_dashboard::{client.config.base_url}::{sorted(assumptions.to_query_params().items())}'
    return tracker.fetch(key, lambda: client.fetch_live_dashboard(**assumptions.to_query_params()))


def _base_case_rows(rows: list[dict[str, Any]], selected: list[str]) -> list[dict[str, Any]]:
    """Driver rows for the duration chart: Base Case when fetched, else the first selected scenario."""
    scenario = 'Base Case' if 'Base Case' in selected else (selected[0] if selected else 'Base Case')
    return [r for r in rows if r.get('scenario') == scenario]


def _render_export(snapshot: DashboardSnapshot, backend_url: str) -> None:
    c1, c2 = st.columns([1, 3])
    with c1:
        if st.button('Generate Executive Pack', key='dashboard_generate_export'):
            try:
                context = build_export_context(snapshot, backend_url=backend_url)
                st.session_state['dashboard_export_bytes'] = build_export_workbook_bytes(
                    context,
                    workbook_title='IRRBB Executive Export Pack',
                )
                st.session_state['dashboard_export_filename'] = default_export_filename()
                st.success('Executive export generated. Use the download button to save the workbook.')
            except (ValueError, OSError) as exc:
                LOGGER.exception('Executive export failed')
                st.error(f'Failed to generate executive export: {exc}')
    if st.session_state.get('dashboard_export_bytes') is not None:
        with c2:
            st.download_button(
                label='Download Executive Pack (.xlsx)',
                data=st.session_state['dashboard_export_bytes'],
                file_name=st.session_state.get('dashboard_export_filename', default_export_filename()),
                mime='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
                key='dashboard_download_export',
            )


def _render_eve_drivers(client: IrrbbApiClient, tracker: FetchTracker) -> None:
    st.subheader('EVE Drivers')
    selected = render_eve_scenario_controls()
    if not selected:
        st.info('Select at least one scenario.')
        return
    key = f'eve_drivers::{client.config.base_url}::{",".join(selected)}'
    result = tracker.fetch(key, lambda: client.fetch_eve_drivers(selected))
    if not result.ok:
        if render_fetch_error(result, what='EVE drivers', retry_key='eve_drivers_retry'):
            tracker.invalidate(key)
            st.rerun()
        return
    rows = result.value_or([])
    render_eve_driver_table(rows, selected)

    duration_rows = _base_case_rows(rows, selected)
    c1, c2 = st.columns(2)
    for col, instrument_type, label in [(c1, 'Loan', 'Asset Duration (Loans)'), (c2, 'Deposit', 'Liability Duration (Deposits)')]:
        points, weighted_avg = duration_chart_data(duration_rows, instrument_type)
        with col:
            if points.empty:
                st.caption(f'{label}: no duration data.')
                continue
            st.plotly_chart(build_duration_figure(points, weighted_avg, label), use_container_width=True)


def _render_nii_drivers(client: IrrbbApiClient, tracker: FetchTracker, scenarios: list[str]) -> None:
    st.subheader('NII Drivers')
    controls = render_nii_driver_controls(scenarios)
    selected = controls['scenarios']
    if not selected:
        st.info('Select at least one scenario.')
        return
    breakdown = controls['breakdown']
    key = f'nii_drivers::{client.config.base_url}::{",".join(selected)}::{breakdown}'
    result = tracker.fetch(key, lambda: client.fetch_nii_drivers(selected, breakdown))
    if not result.ok:
        if render_fetch_error(result, what='NII drivers', retry_key='nii_drivers_retry'):
            tracker.invalidate(key)
            st.rerun()
        return
    render_nii_driver_table(result.value_or([]), selected)


def _render_dashboard_page(client: IrrbbApiClient, tracker: FetchTracker) -> None:
    result = _load_snapshot(client, tracker)
    if not result.ok:
        if render_fetch_error(result, what='dashboard data', retry_key='dashboard_retry'):
            tracker.clear('live_dashboard')
            st.rerun()
        return
    snapshot = result.unwrap()
    if snapshot.current_assumptions != st.session_state.get('reported_assumptions'):
        st.session_state['reported_assumptions'] = snapshot.current_assumptions
        seed_assumption_inputs(snapshot.current_assumptions, force=True)

    applied = render_assumptions_panel(snapshot.current_assumptions)
    if applied is not None:
        LOGGER.info('Applying behavioral assumptions %s', applied)
        st.session_state['applied_assumptions'] = applied
        st.rerun()

    render_summary_cards(snapshot)
    _render_export(snapshot, client.config.base_url)

    st.markdown('---')
    c1, c2 = st.columns(2)
    with c1:
        curve = yield_curve_frame(snapshot.yield_curve_data)
        st.plotly_chart(build_yield_curve_figure(curve), use_container_width=True)
    with c2:
        series = scenario_series_frame(snapshot.scenario_data)
        st.plotly_chart(build_scenario_series_figure(series), use_container_width=True)

    c3, c4 = st.columns(2)
    with c3:
        st.plotly_chart(
            build_scenario_results_figure(snapshot.eve_scenarios, 'eve_value', 'EVE by Scenario'),
            use_container_width=True,
        )
    with c4:
        st.plotly_chart(
            build_scenario_results_figure(snapshot.nii_scenarios, 'nii_value', 'NII by Scenario'),
            use_container_width=True,
        )

    st.markdown('---')
    for title, rows in [('NII Repricing Gap', snapshot.nii_repricing_gap), ('EVE Maturity Gap', snapshot.eve_maturity_gap)]:
        st.subheader(title)
        gap = gap_frame(rows)
        if gap.empty:
            st.info(f'No {title.lower()} data available.')
            continue
        g1, g2 = st.columns([3, 2])
        with g1:
            st.plotly_chart(build_gap_figure(gap, title), use_container_width=True)
        with g2:
            st.dataframe(style_numeric_table(gap, gap_cols={'gap'}), use_container_width=True, hide_index=True)

    st.markdown('---')
    st.subheader('Portfolio Composition')
    p1, p2, p3 = st.columns(3)
    for col, title, composition in [
        (p1, 'Loans', snapshot.loan_composition),
        (p2, 'Deposits', snapshot.deposit_composition),
        (p3, 'Derivatives', snapshot.derivative_composition),
    ]:
        with col:
            frame = composition_frame(composition)
            if frame.empty:
                st.caption(f'{title}: no composition data.')
                continue
            st.plotly_chart(build_composition_pie(frame, title), use_container_width=True)

    st.markdown('---')
    _render_eve_drivers(client, tracker)
    scenario_names = [s['scenario_name'] for s in snapshot.nii_scenarios if s.get('scenario_name')] or EVE_SCENARIOS
    _render_nii_drivers(client, tracker, scenario_names)


def _instrument_manager(client: IrrbbApiClient, tracker: FetchTracker, kind: str) -> InstrumentManager:
    key = f'instrument_manager::{kind}'
    manager = st.session_state.get(key)
    if not isinstance(manager, InstrumentManager):
        manager = InstrumentManager(client=client, kind=kind)
        st.session_state[key] = manager
        manager.refresh()
    manager.client = client
    manager.on_refresh = lambda: tracker.clear()
    return manager


def _render_instruments_page(client: IrrbbApiClient, tracker: FetchTracker) -> None:
    st.subheader('Instrument Management')
    tab = st.radio('Instrument class', list(INSTRUMENT_TABS), horizontal=True, key='instrument_tab')
    manager = _instrument_manager(client, tracker, INSTRUMENT_TABS[tab])
    render_instrument_manager(manager)


def _render_portfolio_page(client: IrrbbApiClient, tracker: FetchTracker) -> None:
    st.subheader('Portfolio Composition')
    # Composition failures fall back to an empty view.
    composition = tracker.fetch(
        f'portfolio_composition::{client.config.base_url}',
        client.fetch_portfolio_composition,
    ).value_or({})
    records = composition.get('records', [])
    c1, c2, c3 = st.columns(3)
    c1.metric('Loans', f"{int(composition.get('total_loans') or 0):,d}")
    c2.metric('Deposits', f"{int(composition.get('total_deposits') or 0):,d}")
    c3.metric('Derivatives', f"{int(composition.get('total_derivatives') or 0):,d}")

    p1, p2 = st.columns(2)
    for col, instrument_type, title in [(p1, 'Loan', 'Loans by Category'), (p2, 'Deposit', 'Deposits by Category')]:
        with col:
            grouped = group_by_category(records, instrument_type)
            if grouped.empty:
                st.caption(f'{title}: no data.')
                continue
            st.plotly_chart(build_category_pie(grouped, title), use_container_width=True)

    rates = average_rates_frame(records)
    if not rates.empty:
        st.dataframe(style_numeric_table(rates), use_container_width=True, hide_index=True)

    st.subheader('Net Positions')
    scenario = st.selectbox('Scenario', EVE_SCENARIOS, key='portfolio_net_scenario')
    key = f'net_positions::{client.config.base_url}::{scenario}'
    result = tracker.fetch(key, lambda: client.fetch_net_positions(scenario))
    if not result.ok:
        if render_fetch_error(result, what='net positions', retry_key='net_positions_retry'):
            tracker.invalidate(key)
            st.rerun()
        return
    positions = net_positions_frame(result.value_or([]))
    if positions.empty:
        st.info('No net position data available.')
        return
    st.plotly_chart(build_net_positions_figure(positions), use_container_width=True)
    bucket = st.selectbox('Bucket constituents', positions['bucket'].tolist(), key='portfolio_constituent_bucket')
    constituents_key = f'bucket_constituents::{client.config.base_url}::{scenario}::{bucket}'
    constituents = tracker.fetch(constituents_key, lambda: client.fetch_bucket_constituents(scenario, bucket))
    if not constituents.ok:
        if render_fetch_error(constituents, what='bucket constituents', retry_key='bucket_constituents_retry'):
            tracker.invalidate(constituents_key)
            st.rerun()
        return
    frame = pd.DataFrame(constituents.value_or([]))
    if frame.empty:
        st.info('No instruments in this bucket.')
    else:
        st.dataframe(style_numeric_table(frame), use_container_width=True, hide_index=True)


def _render_repricing_gap_page(client: IrrbbApiClient, tracker: FetchTracker) -> None:
    st.subheader('Repricing Gap')
    scenario = st.selectbox('Scenario', EVE_SCENARIOS, key='repricing_gap_scenario')
    key = f'repricing_gap::{client.config.base_url}::{scenario}'
    result = tracker.fetch(key, lambda: client.fetch_repricing_gap(scenario))
    if not result.ok:
        if render_fetch_error(result, what='repricing gap', retry_key='repricing_gap_retry'):
            tracker.invalidate(key)
            st.rerun()
        return
    gap = repricing_gap_frame(result.value_or([]))
    if gap.empty:
        st.info('No repricing gap data available.')
        return
    st.plotly_chart(build_repricing_gap_figure(gap, scenario), use_container_width=True)
    st.dataframe(style_numeric_table(gap, gap_cols={'net'}), use_container_width=True, hide_index=True)

    bucket = st.selectbox('Drill down into bucket', gap['bucket'].tolist(), key='repricing_gap_bucket')
    drill_key = f'repricing_drill::{client.config.base_url}::{scenario}::{bucket}'
    drill = tracker.fetch(drill_key, lambda: client.fetch_repricing_gap_drill_down(bucket, scenario))
    if not drill.ok:
        if render_fetch_error(drill, what='bucket drill-down', retry_key='repricing_drill_retry'):
            tracker.invalidate(drill_key)
            st.rerun()
        return
    assets, liabilities = drill_down_frames(drill.value_or({}))
    d1, d2 = st.columns(2)
    for col, title, frame in [(d1, 'Assets', assets), (d2, 'Liabilities', liabilities)]:
        with col:
            st.markdown(f'**{title}** ({format_currency_millions(frame["amount"].sum())})')
            if frame.empty:
                st.caption('None')
            else:
                st.dataframe(style_numeric_table(frame), use_container_width=True, hide_index=True)


def _render_cashflow_page(client: IrrbbApiClient, tracker: FetchTracker) -> None:
    st.subheader('Cashflow Ladder')
    types_result = tracker.fetch(
        f'cashflow_types::{client.config.base_url}',
        client.fetch_cashflow_instrument_types,
    )
    if not types_result.ok:
        st.warning(f'Instrument types unavailable: {types_result.error}')
    controls = render_cashflow_controls(types_result.value_or([]), EVE_SCENARIOS)
    params = {k: controls[k] for k in ['scenario', 'instrument_type', 'aggregation', 'cashflow_type']}
    key = f'cashflow_ladder::{client.config.base_url}::{sorted(params.items())}'
    result = tracker.fetch(key, lambda: client.fetch_cashflow_ladder(**params))
    if not result.ok:
        if render_fetch_error(result, what='cashflow ladder', retry_key='cashflow_retry'):
            tracker.invalidate(key)
            st.rerun()
        return
    buckets = bucket_cashflows(result.value_or([]), controls['group_by'])
    if buckets.empty:
        st.info('No cashflows for the selected filters.')
        return
    st.plotly_chart(build_cashflow_ladder_figure(buckets), use_container_width=True)
    st.dataframe(style_numeric_table(buckets), use_container_width=True, hide_index=True)


def main() -> None:
    st.set_page_config(page_title='IRRBB Dashboard', layout='wide')
    st.title('Interest Rate Risk in the Banking Book')

    default_url = BackendConfig.from_env(secrets=_secrets()).base_url
    ui = render_global_controls(default_url)
    tracker = _tracker()
    try:
        client = _client(ui['backend_url'])
    except ValueError as exc:
        st.error(f'Invalid backend configuration: {exc}')
        st.stop()

    if ui['refresh']:
        dropped = tracker.clear()
        for kind in INSTRUMENT_TABS.values():
            st.session_state.pop(f'instrument_manager::{kind}', None)
        LOGGER.info('Manual refresh cleared %d cached responses', dropped)

    page = ui['page']
    if page == 'Dashboard':
        _render_dashboard_page(client, tracker)
    elif page == 'Instruments':
        _render_instruments_page(client, tracker)
    elif page == 'Portfolio':
        _render_portfolio_page(client, tracker)
    elif page == 'Repricing Gap':
        _render_repricing_gap_page(client, tracker)
    else:
        _render_cashflow_page(client, tracker)


if __name__ == '__main__':
    main()
