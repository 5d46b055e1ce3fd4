"""Streamlit rendering for the instrument management workflow."""

from __future__ import annotations

from datetime import date
from typing import Any

import pandas as pd
import streamlit as st

from src.dashboard.components.formatting import format_currency_millions, style_numeric_table
from src.dashboard.instrument_workflow import InstrumentManager, WorkflowState, instrument_list_frame
from src.models.instruments import SUBTYPE_FIELD, SUBTYPE_OPTIONS, FormField, visible_fields


def _date_value(value: Any) -> date | None:
    if value in (None, ''):
        return None
    ts = pd.to_datetime(value, errors='coerce')
    if pd.isna(ts):
        return None
    return ts.date()


def _render_field(f: FormField, value: Any, key: str) -> Any:
    label = f'{f.label} *' if f.required else f.label
    if f.input_type == 'select':
        options = list(f.options)
        idx = options.index(value) if value in options else 0
        return st.selectbox(label, options, index=idx, key=key, format_func=lambda v: v or '-')
    if f.input_type == 'date':
        return st.date_input(label, value=_date_value(value), key=key)
    placeholder = None
    if f.input_type == 'number' and f.step is not None and f.step < 0.01:
        placeholder = 'e.g. 0.045'
    return st.text_input(label, value='' if value is None else str(value), key=key, placeholder=placeholder)


def render_instrument_form(manager: InstrumentManager, *, mode: str) -> dict[str, Any] | None:
    """Render the add or edit form; return submitted raw values or None."""
    kind = manager.kind
    subtype_name = SUBTYPE_FIELD[kind]
    options = SUBTYPE_OPTIONS[kind]
    current = manager.form_values.get(subtype_name) or options[0]
    prefix = f'instrument_{kind}_{mode}_{manager.editing_id or "new"}'

    # Outside the form so changing it reveals the matching fields immediately.
    subtype = st.selectbox(
        subtype_name.title(),
        options,
        index=options.index(current) if current in options else 0,
        key=f'{prefix}_{subtype_name}',
    )
    values: dict[str, Any] = {subtype_name: subtype}

    with st.form(key=f'{prefix}_form'):
        for f in visible_fields(kind, subtype):
            if f.name == subtype_name:
                continue
            disabled = mode == 'edit' and f.name == 'instrument_id'
            if disabled:
                st.text_input(f.label, value=manager.editing_id or '', disabled=True, key=f'{prefix}_{f.name}')
                values[f.name] = manager.editing_id
                continue
            values[f.name] = _render_field(f, manager.form_values.get(f.name), f'{prefix}_{f.name}')
        c1, c2 = st.columns(2)
        submitted = c1.form_submit_button('Save' if mode == 'edit' else f'Add {kind}')
        cancelled = c2.form_submit_button('Cancel')
    if cancelled:
        manager.cancel()
        st.rerun()
    return values if submitted else None


def render_banner(manager: InstrumentManager) -> None:
    if manager.banner is None:
        return
    if manager.banner.level == 'success':
        st.success(manager.banner.text)
    else:
        st.error(manager.banner.text)


def render_instrument_manager(manager: InstrumentManager) -> None:
    """List, add, edit and delete instruments of one kind."""
    kind = manager.kind
    render_banner(manager)
    if manager.list_error:
        st.error(manager.list_error)
        if st.button('Retry', key=f'instrument_{kind}_retry'):
            manager.refresh()
            st.rerun()

    frame = instrument_list_frame(kind, manager.records)
    c1, c2 = st.columns([3, 1])
    c1.caption(f'{len(frame)} {kind.lower()}(s), total {format_currency_millions(manager.total_amount())}')
    if manager.state == WorkflowState.VIEWING and c2.button(f'Add {kind}', key=f'instrument_{kind}_add'):
        manager.start_add()
        st.rerun()

    if frame.empty:
        st.info(f'No {kind.lower()}s found.')
    else:
        st.dataframe(style_numeric_table(frame), use_container_width=True, hide_index=True)

    if manager.state in (WorkflowState.ADDING, WorkflowState.SUBMIT_PENDING) and manager.editing_id is None:
        st.markdown(f'#### Add {kind}')
        values = render_instrument_form(manager, mode='add')
        if values is not None:
            with st.spinner(f'Saving {kind.lower()}...'):
                manager.submit_new(values)
            st.rerun()
        return

    if manager.state in (WorkflowState.EDITING, WorkflowState.SUBMIT_PENDING) and manager.editing_id is not None:
        st.markdown(f'#### Edit {kind} {manager.editing_id}')
        values = render_instrument_form(manager, mode='edit')
        if values is not None:
            with st.spinner(f'Saving {kind.lower()}...'):
                manager.submit_edit(values)
            st.rerun()
        return

    if manager.state == WorkflowState.DELETE_CONFIRM:
        st.warning(f'Are you sure you want to delete {kind.lower()} {manager.pending_delete_id}?')
        d1, d2 = st.columns(2)
        if d1.button('Delete', key=f'instrument_{kind}_confirm_delete', type='primary'):
            manager.confirm_delete()
            st.rerun()
        if d2.button('Cancel', key=f'instrument_{kind}_cancel_delete'):
            manager.cancel()
            st.rerun()
        return

    if frame.empty:
        return
    ids = frame['instrument_id'].astype(str).tolist()
    s1, s2, s3 = st.columns([2, 1, 1])
    selected = s1.selectbox(f'Select {kind.lower()}', ids, key=f'instrument_{kind}_selected')
    record = next((r for r in manager.records if str(r.get('instrument_id')) == selected), None)
    if s2.button('Edit', key=f'instrument_{kind}_edit') and record is not None:
        manager.start_edit(record)
        st.rerun()
    if s3.button('Delete', key=f'instrument_{kind}_delete'):
        manager.request_delete(selected)
        st.rerun()
