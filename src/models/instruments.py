"""Instrument variants, form field layouts, and backend payload builders.

Each instrument class (Loan, Deposit, Derivative) is split into one dataclass
per subtype. A variant only carries the fields that apply to it; `to_payload`
emits the full backend record with the non-applicable fields set to None.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Union

from src.data.validator import is_blank, parse_number, validate_form_values
from src.utils.date_utils import to_iso_date

INSTRUMENT_KINDS = ['Loan', 'Deposit', 'Derivative']

LOAN_TYPES = ['Fixed Rate Loan', 'Floating Rate Loan']
DEPOSIT_TYPES = ['Checking', 'Savings', 'CD', 'Wholesale Funding', 'Equity']
NMD_DEPOSIT_TYPES = ['Checking', 'Savings']
TERM_DEPOSIT_TYPES = ['CD', 'Wholesale Funding']
SWAP_SUBTYPES = ['Payer Swap', 'Receiver Swap']

PAYMENT_FREQUENCIES = ['Monthly', 'Quarterly', 'Semi-Annually', 'Annually']
REPRICING_FREQUENCIES = ['Monthly', 'Quarterly', 'Annually']
LOAN_BENCHMARKS = ['SOFR', 'Prime']
SWAP_FLOATING_INDICES = ['SOFR', 'LIBOR']

LOAN_PAYLOAD_KEYS = [
    'instrument_id', 'type', 'notional', 'interest_rate', 'maturity_date', 'origination_date',
    'benchmark_rate_type', 'spread', 'repricing_frequency', 'next_repricing_date', 'payment_frequency',
]
DEPOSIT_PAYLOAD_KEYS = [
    'instrument_id', 'type', 'balance', 'interest_rate', 'open_date', 'maturity_date',
    'payment_frequency', 'repricing_frequency', 'next_repricing_date',
]
DERIVATIVE_PAYLOAD_KEYS = [
    'instrument_id', 'type', 'subtype', 'notional', 'start_date', 'end_date', 'fixed_rate',
    'floating_rate_index', 'floating_spread', 'fixed_payment_frequency', 'floating_payment_frequency',
]


class InstrumentValidationError(ValueError):
    """Raised when form values cannot be turned into an instrument."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(' '.join(errors))
        self.errors = errors


@dataclass(frozen=True)
class FormField:
    """One input on an instrument form."""

    name: str
    label: str
    input_type: str = 'text'
    options: tuple[str, ...] = ()
    required: bool = False
    subtypes: tuple[str, ...] | None = None
    step: float | None = None

    def applies_to(self, subtype: str) -> bool:
        return self.subtypes is None or subtype in self.subtypes


LOAN_FIELDS: tuple[FormField, ...] = (
    FormField('instrument_id', 'Instrument ID', required=True),
    FormField('type', 'Type', 'select', tuple(LOAN_TYPES)),
    FormField('notional', 'Notional', 'number', required=True, step=0.01),
    FormField('interest_rate', 'Interest Rate', 'number', subtypes=('Fixed Rate Loan',), step=0.0001),
    FormField('origination_date', 'Origination Date', 'date', required=True),
    FormField('maturity_date', 'Maturity Date', 'date', required=True),
    FormField('benchmark_rate_type', 'Benchmark Rate Type', 'select', ('',) + tuple(LOAN_BENCHMARKS), subtypes=('Floating Rate Loan',)),
    FormField('spread', 'Spread', 'number', subtypes=('Floating Rate Loan',), step=0.0001),
    FormField('repricing_frequency', 'Repricing Frequency', 'select', ('',) + tuple(REPRICING_FREQUENCIES), subtypes=('Floating Rate Loan',)),
    FormField('next_repricing_date', 'Next Repricing Date', 'date', subtypes=('Floating Rate Loan',)),
    FormField('payment_frequency', 'Payment Frequency', 'select', tuple(PAYMENT_FREQUENCIES)),
)

DEPOSIT_FIELDS: tuple[FormField, ...] = (
    FormField('instrument_id', 'Instrument ID', required=True),
    FormField('type', 'Type', 'select', tuple(DEPOSIT_TYPES)),
    FormField('balance', 'Balance', 'number', required=True, step=0.01),
    FormField('interest_rate', 'Interest Rate', 'number', required=True, step=0.0001),
    FormField('open_date', 'Open Date', 'date', required=True),
    FormField('maturity_date', 'Maturity Date', 'date', subtypes=tuple(TERM_DEPOSIT_TYPES)),
    FormField('payment_frequency', 'Payment Frequency', 'select', tuple(PAYMENT_FREQUENCIES), subtypes=tuple(TERM_DEPOSIT_TYPES)),
    FormField('repricing_frequency', 'Repricing Frequency', 'select', ('',) + tuple(REPRICING_FREQUENCIES), subtypes=tuple(NMD_DEPOSIT_TYPES)),
    FormField('next_repricing_date', 'Next Repricing Date', 'date', subtypes=tuple(NMD_DEPOSIT_TYPES)),
)

DERIVATIVE_FIELDS: tuple[FormField, ...] = (
    FormField('instrument_id', 'Instrument ID', required=True),
    FormField('subtype', 'Subtype', 'select', tuple(SWAP_SUBTYPES)),
    FormField('notional', 'Notional', 'number', required=True, step=0.01),
    FormField('start_date', 'Start Date', 'date', required=True),
    FormField('end_date', 'End Date', 'date', required=True),
    FormField('fixed_rate', 'Fixed Rate', 'number', step=0.0001),
    FormField('floating_rate_index', 'Floating Rate Index', 'select', ('',) + tuple(SWAP_FLOATING_INDICES)),
    FormField('floating_spread', 'Floating Spread', 'number', step=0.0001),
    FormField('fixed_payment_frequency', 'Fixed Payment Frequency', 'select', tuple(PAYMENT_FREQUENCIES)),
    FormField('floating_payment_frequency', 'Floating Payment Frequency', 'select', tuple(PAYMENT_FREQUENCIES)),
)

FORM_FIELDS: dict[str, tuple[FormField, ...]] = {
    'Loan': LOAN_FIELDS,
    'Deposit': DEPOSIT_FIELDS,
    'Derivative': DERIVATIVE_FIELDS,
}
SUBTYPE_FIELD = {'Loan': 'type', 'Deposit': 'type', 'Derivative': 'subtype'}
SUBTYPE_OPTIONS = {'Loan': LOAN_TYPES, 'Deposit': DEPOSIT_TYPES, 'Derivative': SWAP_SUBTYPES}
AMOUNT_FIELD = {'Loan': 'notional', 'Deposit': 'balance', 'Derivative': 'notional'}


def _check_kind(kind: str) -> str:
    if kind not in FORM_FIELDS:
        raise ValueError(f'Unknown instrument kind `{kind}`; expected one of {INSTRUMENT_KINDS}.')
    return kind


def visible_fields(kind: str, subtype: str) -> list[FormField]:
    """Return the form fields shown for one instrument subtype."""
    return [f for f in FORM_FIELDS[_check_kind(kind)] if f.applies_to(subtype)]


def default_form_values(kind: str) -> dict[str, Any]:
    """Return an empty add-form state with select defaults pre-filled."""
    values: dict[str, Any] = {}
    for f in FORM_FIELDS[_check_kind(kind)]:
        if f.input_type == 'select' and f.options:
            values[f.name] = f.options[0]
        elif f.input_type == 'date':
            values[f.name] = None
        else:
            values[f.name] = ''
    if kind == 'Derivative':
        values['fixed_payment_frequency'] = 'Quarterly'
    return values


def form_values_from_record(kind: str, record: dict[str, Any]) -> dict[str, Any]:
    """Pre-populate an edit form from a backend record."""
    values = default_form_values(kind)
    for f in FORM_FIELDS[_check_kind(kind)]:
        raw = record.get(f.name)
        if is_blank(raw):
            continue
        if f.input_type == 'number':
            values[f.name] = str(raw)
        elif f.input_type == 'date':
            values[f.name] = to_iso_date(raw)
        else:
            values[f.name] = str(raw)
    return values


# Loans

@dataclass(frozen=True)
class FixedRateLoan:
    instrument_id: str
    notional: float
    origination_date: str
    maturity_date: str
    interest_rate: float | None = None
    payment_frequency: str = 'Monthly'

    kind: ClassVar[str] = 'Loan'
    type: ClassVar[str] = 'Fixed Rate Loan'

    def to_payload(self) -> dict[str, Any]:
        payload = dict.fromkeys(LOAN_PAYLOAD_KEYS)
        payload.update(
            instrument_id=self.instrument_id,
            type=self.type,
            notional=self.notional,
            interest_rate=self.interest_rate,
            origination_date=self.origination_date,
            maturity_date=self.maturity_date,
            payment_frequency=self.payment_frequency,
        )
        return payload


@dataclass(frozen=True)
class FloatingRateLoan:
    instrument_id: str
    notional: float
    origination_date: str
    maturity_date: str
    benchmark_rate_type: str | None = None
    spread: float | None = None
    repricing_frequency: str | None = None
    next_repricing_date: str | None = None
    payment_frequency: str = 'Monthly'

    kind: ClassVar[str] = 'Loan'
    type: ClassVar[str] = 'Floating Rate Loan'

    def to_payload(self) -> dict[str, Any]:
        payload = dict.fromkeys(LOAN_PAYLOAD_KEYS)
        payload.update(
            instrument_id=self.instrument_id,
            type=self.type,
            notional=self.notional,
            origination_date=self.origination_date,
            maturity_date=self.maturity_date,
            benchmark_rate_type=self.benchmark_rate_type,
            spread=self.spread,
            repricing_frequency=self.repricing_frequency,
            next_repricing_date=self.next_repricing_date,
            payment_frequency=self.payment_frequency,
        )
        return payload


# Deposits

@dataclass(frozen=True)
class NonMaturityDeposit:
    """Checking or savings balance repriced on a review schedule."""

    instrument_id: str
    type: str
    balance: float
    interest_rate: float
    open_date: str
    repricing_frequency: str | None = None
    next_repricing_date: str | None = None

    kind: ClassVar[str] = 'Deposit'

    def __post_init__(self) -> None:
        if self.type not in NMD_DEPOSIT_TYPES:
            raise ValueError(f'Non-maturity deposit type must be one of {NMD_DEPOSIT_TYPES}.')

    def to_payload(self) -> dict[str, Any]:
        payload = dict.fromkeys(DEPOSIT_PAYLOAD_KEYS)
        payload.update(
            instrument_id=self.instrument_id,
            type=self.type,
            balance=self.balance,
            interest_rate=self.interest_rate,
            open_date=self.open_date,
            repricing_frequency=self.repricing_frequency,
            next_repricing_date=self.next_repricing_date,
        )
        return payload


@dataclass(frozen=True)
class TermDeposit:
    """CD or wholesale funding with a contractual maturity."""

    instrument_id: str
    type: str
    balance: float
    interest_rate: float
    open_date: str
    maturity_date: str | None = None
    payment_frequency: str | None = 'Monthly'

    kind: ClassVar[str] = 'Deposit'

    def __post_init__(self) -> None:
        if self.type not in TERM_DEPOSIT_TYPES:
            raise ValueError(f'Term deposit type must be one of {TERM_DEPOSIT_TYPES}.')

    def to_payload(self) -> dict[str, Any]:
        payload = dict.fromkeys(DEPOSIT_PAYLOAD_KEYS)
        payload.update(
            instrument_id=self.instrument_id,
            type=self.type,
            balance=self.balance,
            interest_rate=self.interest_rate,
            open_date=self.open_date,
            maturity_date=self.maturity_date,
            payment_frequency=self.payment_frequency,
        )
        return payload


@dataclass(frozen=True)
class EquityFunding:
    """Equity booked on the liability side; excluded from EVE/NII runs."""

    instrument_id: str
    balance: float
    interest_rate: float
    open_date: str

    kind: ClassVar[str] = 'Deposit'
    type: ClassVar[str] = 'Equity'

    def to_payload(self) -> dict[str, Any]:
        payload = dict.fromkeys(DEPOSIT_PAYLOAD_KEYS)
        payload.update(
            instrument_id=self.instrument_id,
            type=self.type,
            balance=self.balance,
            interest_rate=self.interest_rate,
            open_date=self.open_date,
        )
        return payload


# Derivatives

@dataclass(frozen=True)
class InterestRateSwap:
    instrument_id: str
    subtype: str
    notional: float
    start_date: str
    end_date: str
    fixed_rate: float | None = None
    floating_rate_index: str | None = None
    floating_spread: float | None = None
    fixed_payment_frequency: str = 'Quarterly'
    floating_payment_frequency: str = 'Monthly'

    kind: ClassVar[str] = 'Derivative'
    type: ClassVar[str] = 'Interest Rate Swap'

    def __post_init__(self) -> None:
        if self.subtype not in SWAP_SUBTYPES:
            raise ValueError(f'Swap subtype must be one of {SWAP_SUBTYPES}.')

    def to_payload(self) -> dict[str, Any]:
        payload = dict.fromkeys(DERIVATIVE_PAYLOAD_KEYS)
        payload.update(
            instrument_id=self.instrument_id,
            type=self.type,
            subtype=self.subtype,
            notional=self.notional,
            start_date=self.start_date,
            end_date=self.end_date,
            fixed_rate=self.fixed_rate,
            floating_rate_index=self.floating_rate_index,
            floating_spread=self.floating_spread,
            fixed_payment_frequency=self.fixed_payment_frequency,
            floating_payment_frequency=self.floating_payment_frequency,
        )
        return payload


Instrument = Union[
    FixedRateLoan,
    FloatingRateLoan,
    NonMaturityDeposit,
    TermDeposit,
    EquityFunding,
    InterestRateSwap,
]


def _text(values: dict[str, Any], name: str) -> str | None:
    value = values.get(name)
    if is_blank(value):
        return None
    return str(value).strip()


def _date(values: dict[str, Any], name: str) -> str | None:
    return to_iso_date(values.get(name))


def _num(values: dict[str, Any], name: str) -> float | None:
    return parse_number(values.get(name))


def validate_instrument_form(kind: str, values: dict[str, Any]) -> list[str]:
    """Return blocking errors for the fields visible under the selected subtype."""
    subtype_name = SUBTYPE_FIELD[_check_kind(kind)]
    subtype = str(values.get(subtype_name) or '')
    errors: list[str] = []
    if subtype not in SUBTYPE_OPTIONS[kind]:
        errors.append(f'{subtype_name.title()} must be one of: {", ".join(SUBTYPE_OPTIONS[kind])}.')
        return errors
    shown = visible_fields(kind, subtype)
    errors.extend(
        validate_form_values(
            values,
            required=[f.name for f in shown if f.required],
            numeric=[f.name for f in shown if f.input_type == 'number'],
            dates=[f.name for f in shown if f.input_type == 'date'],
            labels={f.name: f.label for f in shown},
        )
    )
    return errors


def instrument_from_form(kind: str, values: dict[str, Any]) -> Instrument:
    """Build the subtype variant from raw form values.

    Raises InstrumentValidationError before anything is sent to the backend.
    """
    errors = validate_instrument_form(kind, values)
    if errors:
        raise InstrumentValidationError(errors)

    instrument_id = str(values.get('instrument_id')).strip()
    if kind == 'Loan':
        common = dict(
            instrument_id=instrument_id,
            notional=_num(values, 'notional'),
            origination_date=_date(values, 'origination_date'),
            maturity_date=_date(values, 'maturity_date'),
            payment_frequency=_text(values, 'payment_frequency') or 'Monthly',
        )
        if values.get('type') == 'Fixed Rate Loan':
            return FixedRateLoan(interest_rate=_num(values, 'interest_rate'), **common)
        return FloatingRateLoan(
            benchmark_rate_type=_text(values, 'benchmark_rate_type'),
            spread=_num(values, 'spread'),
            repricing_frequency=_text(values, 'repricing_frequency'),
            next_repricing_date=_date(values, 'next_repricing_date'),
            **common,
        )

    if kind == 'Deposit':
        deposit_type = str(values.get('type'))
        common = dict(
            instrument_id=instrument_id,
            balance=_num(values, 'balance'),
            interest_rate=_num(values, 'interest_rate'),
            open_date=_date(values, 'open_date'),
        )
        if deposit_type in NMD_DEPOSIT_TYPES:
            return NonMaturityDeposit(
                type=deposit_type,
                repricing_frequency=_text(values, 'repricing_frequency'),
                next_repricing_date=_date(values, 'next_repricing_date'),
                **common,
            )
        if deposit_type in TERM_DEPOSIT_TYPES:
            return TermDeposit(
                type=deposit_type,
                maturity_date=_date(values, 'maturity_date'),
                payment_frequency=_text(values, 'payment_frequency') or 'Monthly',
                **common,
            )
        return EquityFunding(**common)

    return InterestRateSwap(
        instrument_id=instrument_id,
        subtype=str(values.get('subtype')),
        notional=_num(values, 'notional'),
        start_date=_date(values, 'start_date'),
        end_date=_date(values, 'end_date'),
        fixed_rate=_num(values, 'fixed_rate'),
        floating_rate_index=_text(values, 'floating_rate_index'),
        floating_spread=_num(values, 'floating_spread'),
        fixed_payment_frequency=_text(values, 'fixed_payment_frequency') or 'Quarterly',
        floating_payment_frequency=_text(values, 'floating_payment_frequency') or 'Monthly',
    )
