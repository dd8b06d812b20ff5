"""
Module: plant_engines.payroll
Responsibility:
    Hours for a single time-clock entry, per-employee payroll aggregation
    over a pay period, and the payroll CSV export format.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The caller loads closed
    time entries (clock_out set, clock_in inside the period) and hands them
    in as ``PayrollEntry`` values.

Invariants enforced:
    - Entry hours = (clock_out - clock_in - break) in hours, 2 dp, never
      negative.  Overtime = hours beyond the daily regular cap.
    - Regular hours per entry are capped at the daily cap (8); overtime hours
      come from the entry as recorded.
    - Regular pay = regular hours x rate; overtime pay = overtime hours x
      rate x multiplier (1.5); gross = regular + overtime pay.
    - Rows are sorted by last name; department defaults to "N/A".
    - Entries without an employee, or still open, are ignored.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from plant_engines.tracer import traced_engine

DEFAULT_DAILY_REGULAR_HOURS = Decimal("8")
DEFAULT_OVERTIME_MULTIPLIER = Decimal("1.5")
DEFAULT_DEPARTMENT = "N/A"

_HOUR_PLACES = Decimal("0.01")

PAYROLL_CSV_HEADERS: tuple[str, ...] = (
    "Employee Number",
    "First Name",
    "Last Name",
    "Department",
    "Regular Hours",
    "Overtime Hours",
    "Total Hours",
    "Hourly Rate",
    "Regular Pay",
    "Overtime Pay",
    "Gross Pay",
)


@dataclass(frozen=True)
class EntryHours:
    total_hours: Decimal
    overtime_hours: Decimal


@dataclass(frozen=True)
class PayrollEmployee:
    employee_id: str
    employee_number: str
    first_name: str
    last_name: str
    hourly_rate: Decimal = Decimal("0")
    department: str | None = None


@dataclass(frozen=True)
class PayrollEntry:
    """A closed time entry with the employee it belongs to."""

    employee: PayrollEmployee | None
    total_hours: Decimal | None
    overtime_hours: Decimal | None
    clock_out: datetime | None = None


@dataclass(frozen=True)
class PayrollSummary:
    employee_id: str
    employee_number: str
    first_name: str
    last_name: str
    department: str
    regular_hours: Decimal
    overtime_hours: Decimal
    total_hours: Decimal
    hourly_rate: Decimal
    regular_pay: Decimal
    overtime_pay: Decimal
    gross_pay: Decimal


@dataclass(frozen=True)
class PayrollTotals:
    regular_hours: Decimal
    overtime_hours: Decimal
    total_hours: Decimal
    gross_pay: Decimal
    employee_count: int


def compute_entry_hours(
    clock_in: datetime,
    clock_out: datetime,
    break_start: datetime | None = None,
    break_end: datetime | None = None,
    daily_regular_hours: Decimal = DEFAULT_DAILY_REGULAR_HOURS,
) -> EntryHours:
    """Worked hours for one punch pair, minus a completed break."""
    worked = clock_out - clock_in
    if break_start is not None and break_end is not None and break_end > break_start:
        worked -= break_end - break_start

    seconds = Decimal(max(int(worked.total_seconds()), 0))
    total = (seconds / Decimal("3600")).quantize(_HOUR_PLACES, rounding=ROUND_HALF_UP)
    overtime = max(total - daily_regular_hours, Decimal("0"))
    return EntryHours(total_hours=total, overtime_hours=overtime)


def format_duration(start: datetime, now: datetime) -> str:
    """Elapsed time as ``Xh Ym`` (whole hours, whole minutes)."""
    elapsed = max(int((now - start).total_seconds()), 0)
    hours, remainder = divmod(elapsed, 3600)
    return f"{hours}h {remainder // 60}m"


@traced_engine(
    "payroll", "1.0",
    fingerprint_fields=("daily_regular_hours", "overtime_multiplier"),
)
def summarize_payroll(
    entries: Iterable[PayrollEntry],
    daily_regular_hours: Decimal = DEFAULT_DAILY_REGULAR_HOURS,
    overtime_multiplier: Decimal = DEFAULT_OVERTIME_MULTIPLIER,
) -> list[PayrollSummary]:
    """Aggregate closed time entries into one pay row per employee."""
    by_employee: dict[str, PayrollSummary] = {}

    for entry in entries:
        emp = entry.employee
        if emp is None or entry.clock_out is None:
            continue

        existing = by_employee.get(emp.employee_id) or PayrollSummary(
            employee_id=emp.employee_id,
            employee_number=emp.employee_number,
            first_name=emp.first_name,
            last_name=emp.last_name,
            department=emp.department or DEFAULT_DEPARTMENT,
            regular_hours=Decimal("0"),
            overtime_hours=Decimal("0"),
            total_hours=Decimal("0"),
            hourly_rate=emp.hourly_rate or Decimal("0"),
            regular_pay=Decimal("0"),
            overtime_pay=Decimal("0"),
            gross_pay=Decimal("0"),
        )

        total = entry.total_hours or Decimal("0")
        by_employee[emp.employee_id] = replace(
            existing,
            regular_hours=existing.regular_hours + min(total, daily_regular_hours),
            overtime_hours=existing.overtime_hours + (entry.overtime_hours or Decimal("0")),
            total_hours=existing.total_hours + total,
        )

    results = []
    for row in by_employee.values():
        regular_pay = row.regular_hours * row.hourly_rate
        overtime_pay = row.overtime_hours * row.hourly_rate * overtime_multiplier
        results.append(replace(
            row,
            regular_pay=regular_pay,
            overtime_pay=overtime_pay,
            gross_pay=regular_pay + overtime_pay,
        ))

    return sorted(results, key=lambda r: (r.last_name.casefold(), r.first_name.casefold()))


def payroll_totals(rows: Sequence[PayrollSummary]) -> PayrollTotals:
    return PayrollTotals(
        regular_hours=sum((r.regular_hours for r in rows), Decimal("0")),
        overtime_hours=sum((r.overtime_hours for r in rows), Decimal("0")),
        total_hours=sum((r.total_hours for r in rows), Decimal("0")),
        gross_pay=sum((r.gross_pay for r in rows), Decimal("0")),
        employee_count=len(rows),
    )


def last_week_period(today: date) -> tuple[date, date]:
    """Sunday..Saturday of the week before the one containing ``today``."""
    days_since_sunday = (today.weekday() + 1) % 7
    start = today - timedelta(days=days_since_sunday + 7)
    return start, start + timedelta(days=6)


def _money(value: Decimal) -> str:
    return str(value.quantize(_HOUR_PLACES, rounding=ROUND_HALF_UP))


def payroll_row_values(row: PayrollSummary) -> list[str]:
    """One export row in header order, numbers to 2 dp."""
    return [
        row.employee_number,
        row.first_name,
        row.last_name,
        row.department,
        _money(row.regular_hours),
        _money(row.overtime_hours),
        _money(row.total_hours),
        _money(row.hourly_rate),
        _money(row.regular_pay),
        _money(row.overtime_pay),
        _money(row.gross_pay),
    ]


def render_payroll_csv(rows: Sequence[PayrollSummary]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(PAYROLL_CSV_HEADERS)
    for row in rows:
        writer.writerow(payroll_row_values(row))
    return buf.getvalue()


def export_filename(period_start: date, period_end: date, extension: str = "csv") -> str:
    return (
        f"payroll-export-{period_start.isoformat()}"
        f"-to-{period_end.isoformat()}.{extension}"
    )
