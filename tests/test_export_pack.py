from __future__ import annotations

from datetime import datetime, timezone
from io import BytesIO

import pandas as pd

from src.dashboard.reporting.export_pack import (
    EXPORT_SHEETS,
    build_export_context,
    build_export_workbook_bytes,
    default_export_filename,
)
from src.data.snapshot import normalize_snapshot


def _snapshot():
    return normalize_snapshot(
        {
            'eve_sensitivity': -3.2,
            'net_interest_income': 2_000_000,
            'total_loans': 4,
            'nii_scenarios': [
                {'scenario_name': 'Base Case', 'nii_value': 100.0},
                {'scenario_name': '+200bps', 'nii_value': 120.0},
            ],
            'eve_scenarios': [{'scenario_name': 'Base Case', 'eve_value': 500.0}],
            'nii_repricing_gap': [{'bucket': '0-3M', 'assets': 10, 'liabilities': 4, 'gap': 6}],
            'loan_composition': {'Fixed': 60, 'Floating': 40},
            'deposit_composition': {'Savings': 25},
        }
    )


def test_export_context_builds_every_sheet() -> None:
    generated = datetime(2025, 3, 31, 12, 0, tzinfo=timezone.utc)
    context = build_export_context(_snapshot(), backend_url='http://backend.test', generated_at=generated)

    assert list(context) == EXPORT_SHEETS
    meta = context['Summary_Metadata'].set_index('Field')['Value']
    assert meta['Generated At (UTC)'] == '2025-03-31 12:00:00'
    assert meta['Backend URL'] == 'http://backend.test'

    nii = context['NII_Scenarios']
    assert nii['Delta vs Base'].tolist() == [0.0, 20.0]
    assert context['EVE_Maturity_Gap'].empty
    composition = context['Composition']
    assert composition['instrument_class'].tolist() == ['Loan', 'Loan', 'Deposit']
    assert composition['value'].sum() == 125.0


def test_export_workbook_contains_sheets_and_title() -> None:
    context = build_export_context(_snapshot(), backend_url='http://backend.test')
    payload = build_export_workbook_bytes(context, workbook_title='IRRBB Executive Export Pack')

    workbook = pd.ExcelFile(BytesIO(payload), engine='openpyxl')
    assert workbook.sheet_names == EXPORT_SHEETS
    metrics = pd.read_excel(workbook, sheet_name='Key_Metrics')
    row = metrics[metrics['Metric'] == 'Net Interest Income (Base)'].iloc[0]
    assert row['Value'] == 2_000_000.0
    gap = pd.read_excel(workbook, sheet_name='NII_Repricing_Gap')
    assert gap['gap'].tolist() == [6.0]


def test_default_export_filename_is_deterministic() -> None:
    name = default_export_filename(pd.Timestamp('2025-01-31 08:05'))
    assert name == 'irrbb_executive_pack_20250131_0805.xlsx'
