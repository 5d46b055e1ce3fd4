from src.dashboard.components.controls import PAGES, coerce_multiselect, coerce_option


def test_coerce_option_prefers_existing_value() -> None:
    options = ['A', 'B', 'C']
    assert coerce_option('B', options, 'A') == 'B'


def test_coerce_option_falls_back_to_default_then_first() -> None:
    options = ['A', 'B', 'C']
    assert coerce_option('X', options, 'B') == 'B'
    assert coerce_option('X', options, 'Y') == 'A'
    assert coerce_option('X', [], 'Y') == 'Y'


def test_coerce_multiselect_keeps_valid_choices_in_option_order() -> None:
    options = ['Base Case', 'Parallel Up +200bps', 'Parallel Down -200bps']
    assert coerce_multiselect(['Parallel Down -200bps', 'Gone', 'Base Case'], options, ['Base Case']) == [
        'Base Case',
        'Parallel Down -200bps',
    ]
    assert coerce_multiselect(['Gone'], options, ['Parallel Up +200bps']) == ['Parallel Up +200bps']
    assert coerce_multiselect(None, options, []) == ['Base Case']


def test_pages_start_with_dashboard() -> None:
    assert PAGES[0] == 'Dashboard'
    assert 'Cashflow Ladder' in PAGES
