"""
Payroll spreadsheet export (XLSX).

Writes the same columns and 2 dp values as the CSV export, plus a totals row,
to a single-sheet workbook.  Numbers are written as numbers so the payroll
provider can sum them.
"""

from __future__ import annotations

import io
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from plant_engines.payroll import (
    PAYROLL_CSV_HEADERS,
    PayrollSummary,
    PayrollTotals,
)

SHEET_TITLE = "Payroll"
_NUMERIC_COLUMNS = range(4, len(PAYROLL_CSV_HEADERS))
_CENT = Decimal("0.01")


def _number(value: Decimal) -> float:
    # openpyxl has no Decimal cell type
    return float(value.quantize(_CENT, rounding=ROUND_HALF_UP))


def _row_cells(row: PayrollSummary) -> list:
    return [
        row.employee_number,
        row.first_name,
        row.last_name,
        row.department,
        _number(row.regular_hours),
        _number(row.overtime_hours),
        _number(row.total_hours),
        _number(row.hourly_rate),
        _number(row.regular_pay),
        _number(row.overtime_pay),
        _number(row.gross_pay),
    ]


def render_payroll_xlsx(
    rows: Sequence[PayrollSummary],
    totals: PayrollTotals,
) -> bytes:
    """Workbook bytes: header row, one row per employee, then a totals row."""
    import openpyxl
    from openpyxl.styles import Font

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws.append(list(PAYROLL_CSV_HEADERS))
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for row in rows:
        ws.append(_row_cells(row))

    ws.append([
        "Totals", "", "", f"{totals.employee_count} employees",
        _number(totals.regular_hours),
        _number(totals.overtime_hours),
        _number(totals.total_hours),
        None,
        None,
        None,
        _number(totals.gross_pay),
    ])
    for cell in ws[ws.max_row]:
        cell.font = Font(bold=True)

    for col in _NUMERIC_COLUMNS:
        for cells in ws.iter_cols(min_col=col + 1, max_col=col + 1, min_row=2):
            for cell in cells:
                cell.number_format = "0.00"

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
