"""Add/edit/delete workflow for one instrument kind, independent of Streamlit widgets."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

import pandas as pd

from src.api.client import FetchResult, IrrbbApiClient
from src.models.instruments import (
    AMOUNT_FIELD,
    InstrumentValidationError,
    default_form_values,
    form_values_from_record,
    instrument_from_form,
)
from src.utils.logging import get_logger

LOGGER = get_logger(__name__)


class WorkflowState(str, Enum):
    VIEWING = 'Viewing'
    ADDING = 'Adding'
    SUBMIT_PENDING = 'Submit-pending'
    EDITING = 'Editing'
    DELETE_CONFIRM = 'Delete-confirm'


@dataclass
class Banner:
    level: str
    text: str


@dataclass
class InstrumentManager:
    """State machine behind one instrument management tab.

    `on_refresh` is called after every successful mutation so the parent
    dashboard can refetch its snapshot.
    """

    client: IrrbbApiClient
    kind: str
    on_refresh: Callable[[], None] | None = None
    state: WorkflowState = WorkflowState.VIEWING
    records: list[dict[str, Any]] = field(default_factory=list)
    form_values: dict[str, Any] = field(default_factory=dict)
    editing_id: str | None = None
    pending_delete_id: str | None = None
    banner: Banner | None = None
    list_error: str | None = None

    @property
    def noun(self) -> str:
        return self.kind.lower()

    def refresh(self) -> FetchResult[list[dict[str, Any]]]:
        """Reload the instrument list; keeps the previous rows on failure."""
        result = self.client.list_instruments(self.kind)
        if result.ok:
            self.records = result.value_or([])
            self.list_error = None
        else:
            self.list_error = f'Failed to load {self.noun}s: {result.error}'
        return result

    def total_amount(self) -> float:
        column = AMOUNT_FIELD[self.kind]
        total = 0.0
        for record in self.records:
            try:
                total += float(record.get(column) or 0.0)
            except (TypeError, ValueError):
                continue
        return total

    def start_add(self) -> None:
        self.state = WorkflowState.ADDING
        self.form_values = default_form_values(self.kind)
        self.editing_id = None
        self.banner = None

    def start_edit(self, record: dict[str, Any]) -> None:
        self.state = WorkflowState.EDITING
        self.form_values = form_values_from_record(self.kind, record)
        self.editing_id = str(record.get('instrument_id', ''))
        self.banner = None

    def request_delete(self, instrument_id: str) -> None:
        self.state = WorkflowState.DELETE_CONFIRM
        self.pending_delete_id = str(instrument_id)
        self.banner = None

    def cancel(self) -> None:
        self.state = WorkflowState.VIEWING
        self.form_values = {}
        self.editing_id = None
        self.pending_delete_id = None

    def _after_success(self, message: str) -> None:
        LOGGER.info(message)
        self.banner = Banner('success', message)
        self.state = WorkflowState.VIEWING
        self.form_values = {}
        self.editing_id = None
        self.pending_delete_id = None
        self.refresh()
        if self.on_refresh is not None:
            self.on_refresh()

    def _submit(self, values: dict[str, Any], *, editing: bool) -> bool:
        return_state = WorkflowState.EDITING if editing else WorkflowState.ADDING
        self.form_values = dict(values)
        try:
            instrument = instrument_from_form(self.kind, values)
        except InstrumentValidationError as exc:
            self.banner = Banner('error', ' '.join(exc.errors))
            self.state = return_state
            return False

        self.state = WorkflowState.SUBMIT_PENDING
        payload = instrument.to_payload()
        if editing:
            result = self.client.update_instrument(self.kind, self.editing_id or instrument.instrument_id, payload)
            verb = 'update'
        else:
            result = self.client.create_instrument(self.kind, payload)
            verb = 'add'

        if not result.ok:
            LOGGER.warning('Failed to %s %s %s: %s', verb, self.noun, instrument.instrument_id, result.error)
            self.banner = Banner('error', f'Failed to {verb} {self.noun}: {result.error}')
            self.state = return_state
            return False

        past = 'added' if verb == 'add' else 'updated'
        self._after_success(f'{self.kind} {instrument.instrument_id} {past}.')
        return True

    def submit_new(self, values: dict[str, Any]) -> bool:
        return self._submit(values, editing=False)

    def submit_edit(self, values: dict[str, Any]) -> bool:
        if self.editing_id is None:
            raise RuntimeError('submit_edit called without an instrument being edited.')
        return self._submit(values, editing=True)

    def confirm_delete(self) -> bool:
        """Send the DELETE for the instrument awaiting confirmation."""
        if self.pending_delete_id is None:
            raise RuntimeError('confirm_delete called without a pending deletion.')
        instrument_id = self.pending_delete_id
        result = self.client.delete_instrument(self.kind, instrument_id)
        if not result.ok:
            LOGGER.warning('Failed to delete %s %s: %s', self.noun, instrument_id, result.error)
            self.banner = Banner('error', f'Failed to delete {self.noun}: {result.error}')
            self.state = WorkflowState.VIEWING
            self.pending_delete_id = None
            return False
        self._after_success(f'{self.kind} {instrument_id} deleted.')
        return True


LIST_COLUMNS = {
    'Loan': ['instrument_id', 'type', 'notional', 'interest_rate', 'spread', 'origination_date', 'maturity_date'],
    'Deposit': ['instrument_id', 'type', 'balance', 'interest_rate', 'open_date', 'maturity_date'],
    'Derivative': ['instrument_id', 'subtype', 'notional', 'fixed_rate', 'floating_rate_index', 'start_date', 'end_date'],
}
EXCLUDED_FROM_IRRBB = 'Excluded from IRRBB'


def instrument_list_frame(kind: str, records: list[dict[str, Any]]) -> pd.DataFrame:
    """Display table for the instrument list; Equity funding is flagged as out of scope."""
    columns = LIST_COLUMNS[kind]
    frame = pd.DataFrame(records or [], columns=columns)
    for col in columns:
        if col.endswith('rate') or col in ('notional', 'balance', 'spread'):
            frame[col] = pd.to_numeric(frame[col], errors='coerce')
    if kind == 'Deposit':
        frame['note'] = frame['type'].map(lambda t: EXCLUDED_FROM_IRRBB if t == 'Equity' else '')
    return frame.reset_index(drop=True)
