"""Executive Excel export pack built from the live dashboard snapshot."""

from __future__ import annotations

from datetime import datetime, timezone
from io import BytesIO
from typing import Any

import numpy as np
import pandas as pd
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from src.calculations.composition import composition_frame
from src.data.snapshot import DashboardSnapshot, gap_frame, key_metrics_frame

EXPORT_SHEETS = [
    'Summary_Metadata',
    'Key_Metrics',
    'NII_Scenarios',
    'EVE_Scenarios',
    'NII_Repricing_Gap',
    'EVE_Maturity_Gap',
    'Composition',
]


def default_export_filename(as_of: datetime | pd.Timestamp | None = None) -> str:
    """Return a deterministic export filename for the snapshot timestamp."""
    ts = pd.Timestamp(as_of if as_of is not None else datetime.now(timezone.utc))
    return f"irrbb_executive_pack_{ts.strftime('%Y%m%d_%H%M')}.xlsx"


def _scenario_frame(results: list[dict[str, Any]], value_key: str, label: str) -> pd.DataFrame:
    frame = pd.DataFrame(results or [], columns=['scenario_name', value_key])
    frame = frame.rename(columns={'scenario_name': 'Scenario', value_key: label})
    if frame.empty:
        return frame
    base = frame.loc[frame['Scenario'] == 'Base Case', label]
    if not base.empty:
        frame['Delta vs Base'] = frame[label] - float(base.iloc[0])
    return frame


def _composition_sheet(snapshot: DashboardSnapshot) -> pd.DataFrame:
    parts = []
    for label, composition in [
        ('Loan', snapshot.loan_composition),
        ('Deposit', snapshot.deposit_composition),
        ('Derivative', snapshot.derivative_composition),
    ]:
        frame = composition_frame(composition)
        if frame.empty:
            continue
        frame.insert(0, 'instrument_class', label)
        parts.append(frame)
    if not parts:
        return pd.DataFrame(columns=['instrument_class', 'name', 'value'])
    return pd.concat(parts, ignore_index=True).rename(columns={'name': 'category'})


def build_export_context(
    snapshot: DashboardSnapshot,
    *,
    backend_url: str,
    generated_at: datetime | None = None,
) -> dict[str, pd.DataFrame]:
    """Build normalized dataframes for executive export sheets."""
    generated = generated_at or datetime.now(timezone.utc)
    assumptions = snapshot.current_assumptions
    metadata = pd.DataFrame(
        [
            ('Generated At (UTC)', pd.Timestamp(generated).strftime('%Y-%m-%d %H:%M:%S')),
            ('Backend URL', backend_url),
            ('NMD Effective Maturity (Years)', assumptions.nmd_effective_maturity_years),
            ('NMD Deposit Beta', assumptions.nmd_deposit_beta),
            ('Prepayment Rate (CPR)', assumptions.prepayment_rate),
        ],
        columns=['Field', 'Value'],
    )
    return {
        'Summary_Metadata': metadata,
        'Key_Metrics': key_metrics_frame(snapshot),
        'NII_Scenarios': _scenario_frame(snapshot.nii_scenarios, 'nii_value', 'NII'),
        'EVE_Scenarios': _scenario_frame(snapshot.eve_scenarios, 'eve_value', 'EVE'),
        'NII_Repricing_Gap': gap_frame(snapshot.nii_repricing_gap),
        'EVE_Maturity_Gap': gap_frame(snapshot.eve_maturity_gap),
        'Composition': _composition_sheet(snapshot),
    }


def _format_worksheet(
    ws,
    *,
    header_row: int = 1,
    freeze_panes: str = 'A2',
) -> None:
    ws.freeze_panes = freeze_panes
    max_row = ws.max_row
    max_col = ws.max_column
    if max_row <= 0 or max_col <= 0:
        return

    for col_idx in range(1, max_col + 1):
        cell = ws.cell(row=header_row, column=col_idx)
        cell.font = Font(bold=True)

    headers: dict[int, str] = {}
    for col_idx in range(1, max_col + 1):
        headers[col_idx] = str(ws.cell(row=header_row, column=col_idx).value or '').strip().lower()

    for row_idx in range(header_row + 1, max_row + 1):
        for col_idx in range(1, max_col + 1):
            cell = ws.cell(row=row_idx, column=col_idx)
            if isinstance(cell.value, (pd.Timestamp, datetime)):
                cell.number_format = 'YYYY-MM-DD'
                continue
            if isinstance(cell.value, bool):
                continue
            if isinstance(cell.value, (int, float, np.integer, np.floating)):
                header = headers.get(col_idx, '')
                if 'count' in header:
                    cell.number_format = '#,##0'
                else:
                    cell.number_format = '#,##0.00'

    for col_idx in range(1, max_col + 1):
        max_len = 0
        for row_idx in range(1, min(max_row, 200) + 1):
            val = ws.cell(row=row_idx, column=col_idx).value
            text = '' if val is None else str(val)
            max_len = max(max_len, len(text))
        ws.column_dimensions[get_column_letter(col_idx)].width = min(max(10, max_len + 2), 60)


def build_export_workbook_bytes(context: dict[str, Any], *, workbook_title: str) -> bytes:
    """Serialize export context into an Excel workbook."""
    output = BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        for sheet in EXPORT_SHEETS:
            pd.DataFrame(context.get(sheet, pd.DataFrame())).to_excel(writer, sheet_name=sheet, index=False)

        wb = writer.book
        wb.properties.title = str(workbook_title)

        for sheet in EXPORT_SHEETS:
            _format_worksheet(writer.sheets[sheet])

    return output.getvalue()
