"""
Tests for payroll hours, aggregation and CSV export.

Covers:
- Hours per punch pair with a break, overtime beyond the daily cap
- Per-employee aggregation and pay
- Entries without employee or clock-out are ignored
- Default pay period (last Sunday..Saturday)
- CSV layout and file naming
"""

import csv
import io
from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from plant_engines.payroll import (
    PAYROLL_CSV_HEADERS,
    PayrollEmployee,
    PayrollEntry,
    compute_entry_hours,
    export_filename,
    format_duration,
    last_week_period,
    payroll_totals,
    render_payroll_csv,
    summarize_payroll,
)


def _at(hour, minute=0, day=8):
    return datetime(2024, 1, day, hour, minute, tzinfo=UTC)


SMITH = PayrollEmployee(
    employee_id="e-1",
    employee_number="E100",
    first_name="Jordan",
    last_name="Smith",
    hourly_rate=Decimal("20"),
    department="Production",
)
ADAMS = PayrollEmployee(
    employee_id="e-2",
    employee_number="E200",
    first_name="Casey",
    last_name="Adams",
    hourly_rate=Decimal("15"),
)


class TestEntryHours:
    """Tests for a single punch pair."""

    def test_full_shift_with_break(self):
        hours = compute_entry_hours(
            clock_in=_at(8),
            clock_out=_at(17, 30),
            break_start=_at(12),
            break_end=_at(12, 30),
        )

        assert hours.total_hours == Decimal("9.00")
        assert hours.overtime_hours == Decimal("1.00")

    def test_short_shift_no_overtime(self):
        hours = compute_entry_hours(clock_in=_at(8), clock_out=_at(12, 20))

        assert hours.total_hours == Decimal("4.33")
        assert hours.overtime_hours == Decimal("0")

    def test_unfinished_break_not_deducted(self):
        hours = compute_entry_hours(
            clock_in=_at(8), clock_out=_at(12), break_start=_at(10),
        )

        assert hours.total_hours == Decimal("4.00")

    def test_custom_daily_cap(self):
        hours = compute_entry_hours(
            clock_in=_at(6), clock_out=_at(18), daily_regular_hours=Decimal("10"),
        )

        assert hours.overtime_hours == Decimal("2.00")

    def test_never_negative(self):
        hours = compute_entry_hours(clock_in=_at(12), clock_out=_at(8))

        assert hours.total_hours == Decimal("0.00")


class TestFormatDuration:

    def test_hours_and_minutes(self):
        assert format_duration(_at(8), _at(10, 45)) == "2h 45m"

    def test_under_an_hour(self):
        assert format_duration(_at(8), _at(8, 5)) == "0h 5m"


class TestSummarizePayroll:
    """Tests for per-employee aggregation."""

    def _entries(self):
        return [
            PayrollEntry(SMITH, Decimal("9.00"), Decimal("1.00"), clock_out=_at(17)),
            PayrollEntry(SMITH, Decimal("6.00"), Decimal("0"), clock_out=_at(14, day=9)),
            PayrollEntry(ADAMS, Decimal("4.00"), Decimal("0"), clock_out=_at(12)),
        ]

    def test_aggregates_per_employee(self):
        rows = summarize_payroll(self._entries())

        smith = next(r for r in rows if r.employee_number == "E100")
        assert smith.regular_hours == Decimal("14.00")
        assert smith.overtime_hours == Decimal("1.00")
        assert smith.total_hours == Decimal("15.00")
        assert smith.regular_pay == Decimal("280")
        assert smith.overtime_pay == Decimal("30")
        assert smith.gross_pay == Decimal("310")

    def test_sorted_by_last_name(self):
        rows = summarize_payroll(self._entries())

        assert [r.last_name for r in rows] == ["Adams", "Smith"]

    def test_department_defaults(self):
        rows = summarize_payroll(self._entries())

        assert rows[0].department == "N/A"
        assert rows[1].department == "Production"

    def test_skips_open_and_orphan_entries(self):
        rows = summarize_payroll([
            PayrollEntry(SMITH, Decimal("3.00"), Decimal("0"), clock_out=None),
            PayrollEntry(None, Decimal("8.00"), Decimal("0"), clock_out=_at(16)),
        ])

        assert rows == []

    def test_custom_multiplier(self):
        rows = summarize_payroll(
            [PayrollEntry(SMITH, Decimal("10.00"), Decimal("2.00"), clock_out=_at(18))],
            overtime_multiplier=Decimal("2"),
        )

        assert rows[0].overtime_pay == Decimal("80")

    def test_totals(self):
        totals = payroll_totals(summarize_payroll(self._entries()))

        assert totals.employee_count == 2
        assert totals.total_hours == Decimal("19.00")
        assert totals.gross_pay == Decimal("370")


class TestPayPeriod:

    @pytest.mark.parametrize(
        "today",
        [date(2024, 1, 14), date(2024, 1, 15), date(2024, 1, 20)],
    )
    def test_previous_sunday_to_saturday(self, today):
        assert last_week_period(today) == (date(2024, 1, 7), date(2024, 1, 13))


class TestPayrollCsv:

    def test_headers_and_values(self):
        text = render_payroll_csv(summarize_payroll([
            PayrollEntry(SMITH, Decimal("9"), Decimal("1"), clock_out=_at(17)),
        ]))

        rows = list(csv.reader(io.StringIO(text)))
        assert tuple(rows[0]) == PAYROLL_CSV_HEADERS
        assert rows[1] == [
            "E100", "Jordan", "Smith", "Production",
            "8.00", "1.00", "9.00", "20.00", "160.00", "30.00", "190.00",
        ]

    def test_empty_report_is_header_only(self):
        assert render_payroll_csv([]).strip() == ",".join(PAYROLL_CSV_HEADERS)

    def test_filename(self):
        assert export_filename(date(2024, 1, 7), date(2024, 1, 13)) == (
            "payroll-export-2024-01-07-to-2024-01-13.csv"
        )
        assert export_filename(date(2024, 1, 7), date(2024, 1, 13), "xlsx").endswith(".xlsx")
