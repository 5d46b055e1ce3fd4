from datetime import date

import pytest

from src.data.validator import REQUIRED_FIELDS_MESSAGE, is_blank, parse_number, validate_form_values
from src.models.instruments import (
    EquityFunding,
    FixedRateLoan,
    FloatingRateLoan,
    InstrumentValidationError,
    InterestRateSwap,
    NonMaturityDeposit,
    TermDeposit,
    default_form_values,
    form_values_from_record,
    instrument_from_form,
    validate_instrument_form,
    visible_fields,
)


def _loan_values(**overrides) -> dict:
    values = {
        'instrument_id': 'L100',
        'type': 'Fixed Rate Loan',
        'notional': '1000000',
        'interest_rate': '0.045',
        'origination_date': '2024-01-01',
        'maturity_date': '2029-01-01',
        'payment_frequency': 'Monthly',
    }
    values.update(overrides)
    return values


def test_parse_number_handles_blank_and_text() -> None:
    assert parse_number('') is None
    assert parse_number('  ') is None
    assert parse_number('1,250.5') == 1250.5
    assert parse_number('7') == 7.0
    with pytest.raises(ValueError):
        parse_number('abc')
    assert is_blank(None) and is_blank('') and not is_blank(0)


@pytest.mark.parametrize('raw', ['inf', '-inf', '1e309', 'nan'])
def test_parse_number_rejects_non_finite_values(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_number(raw)


@pytest.mark.parametrize('raw', ['inf', '-inf', '1e309'])
def test_non_finite_notional_blocks_loan_form(raw: str) -> None:
    errors = validate_instrument_form('Loan', _loan_values(notional=raw))
    assert 'Notional must be a number.' in errors


def test_validate_form_values_reports_missing_then_bad_numbers() -> None:
    errors = validate_form_values(
        {'a': '', 'b': 'x', 'c': '2024-13-45'},
        required=['a'],
        numeric=['a', 'b'],
        dates=['c'],
        labels={'a': 'Field A'},
    )
    assert errors[0] == f'{REQUIRED_FIELDS_MESSAGE} Missing: Field A.'
    assert 'b must be a number.' in errors
    assert any('valid date' in e for e in errors)


def test_fixed_rate_loan_payload_is_numeric_and_nulls_floating_fields() -> None:
    loan = instrument_from_form('Loan', _loan_values())
    assert isinstance(loan, FixedRateLoan)
    payload = loan.to_payload()
    assert payload['notional'] == 1000000
    assert isinstance(payload['notional'], float)
    assert payload['interest_rate'] == 0.045
    assert payload['type'] == 'Fixed Rate Loan'
    assert payload['spread'] is None
    assert payload['benchmark_rate_type'] is None
    assert payload['next_repricing_date'] is None


def test_floating_rate_loan_ignores_fixed_interest_rate() -> None:
    values = _loan_values(
        type='Floating Rate Loan',
        interest_rate='0.09',
        benchmark_rate_type='SOFR',
        spread='0.015',
        repricing_frequency='Quarterly',
        next_repricing_date=date(2024, 4, 1),
    )
    loan = instrument_from_form('Loan', values)
    assert isinstance(loan, FloatingRateLoan)
    payload = loan.to_payload()
    assert payload['interest_rate'] is None
    assert payload['spread'] == 0.015
    assert payload['next_repricing_date'] == '2024-04-01'


def test_missing_required_fields_block_submission() -> None:
    with pytest.raises(InstrumentValidationError) as excinfo:
        instrument_from_form('Loan', _loan_values(notional='', maturity_date=None))
    message = excinfo.value.errors[0]
    assert message.startswith(REQUIRED_FIELDS_MESSAGE)
    assert 'Notional' in message and 'Maturity Date' in message


def test_hidden_fields_are_not_validated() -> None:
    # A garbage spread on a fixed-rate loan is not shown and therefore not checked.
    assert validate_instrument_form('Loan', _loan_values(spread='oops')) == []
    errors = validate_instrument_form('Loan', _loan_values(type='Floating Rate Loan', spread='oops'))
    assert errors == ['Spread must be a number.']


def test_unknown_subtype_is_rejected() -> None:
    errors = validate_instrument_form('Loan', _loan_values(type='Balloon Loan'))
    assert len(errors) == 1
    assert 'Fixed Rate Loan' in errors[0]


@pytest.mark.parametrize(
    'deposit_type, cls',
    [('Checking', NonMaturityDeposit), ('Savings', NonMaturityDeposit), ('CD', TermDeposit), ('Wholesale Funding', TermDeposit), ('Equity', EquityFunding)],
)
def test_deposit_subtypes_map_to_variants(deposit_type: str, cls) -> None:
    values = {
        'instrument_id': 'D1',
        'type': deposit_type,
        'balance': '5000',
        'interest_rate': '0.01',
        'open_date': '2023-06-30',
        'maturity_date': '2026-06-30',
        'payment_frequency': 'Annually',
        'repricing_frequency': 'Monthly',
        'next_repricing_date': '2024-07-01',
    }
    deposit = instrument_from_form('Deposit', values)
    assert isinstance(deposit, cls)
    payload = deposit.to_payload()
    assert payload['type'] == deposit_type
    assert payload['balance'] == 5000.0
    if cls is TermDeposit:
        assert payload['maturity_date'] == '2026-06-30'
        assert payload['repricing_frequency'] is None
    elif cls is NonMaturityDeposit:
        assert payload['maturity_date'] is None
        assert payload['repricing_frequency'] == 'Monthly'
    else:
        assert payload['maturity_date'] is None
        assert payload['next_repricing_date'] is None


def test_swap_payload_carries_subtype_and_type() -> None:
    values = default_form_values('Derivative')
    values.update(
        instrument_id='S1',
        subtype='Receiver Swap',
        notional='2500000',
        start_date='2024-01-01',
        end_date='2034-01-01',
        fixed_rate='0.035',
        floating_rate_index='SOFR',
    )
    swap = instrument_from_form('Derivative', values)
    assert isinstance(swap, InterestRateSwap)
    payload = swap.to_payload()
    assert payload['type'] == 'Interest Rate Swap'
    assert payload['subtype'] == 'Receiver Swap'
    assert payload['fixed_payment_frequency'] == 'Quarterly'
    assert payload['floating_spread'] is None


def test_visible_fields_depend_on_subtype() -> None:
    nmd = {f.name for f in visible_fields('Deposit', 'Savings')}
    cd = {f.name for f in visible_fields('Deposit', 'CD')}
    assert 'next_repricing_date' in nmd and 'maturity_date' not in nmd
    assert 'maturity_date' in cd and 'next_repricing_date' not in cd
    with pytest.raises(ValueError):
        visible_fields('Bond', 'Any')


def test_form_values_from_record_prefills_edit_form() -> None:
    record = {'instrument_id': 'L7', 'type': 'Floating Rate Loan', 'notional': 250000.0, 'maturity_date': '2030-05-31T00:00:00', 'spread': None}
    values = form_values_from_record('Loan', record)
    assert values['instrument_id'] == 'L7'
    assert values['type'] == 'Floating Rate Loan'
    assert values['notional'] == '250000.0'
    assert values['maturity_date'] == '2030-05-31'
    assert values['spread'] == ''
