"""
HR Module Service (``plant_modules.hr.service``).

Responsibility
--------------
Orchestrates the HR screens -- employee documents, the time clock kiosk and
the weekly payroll export -- by loading rows, delegating hour and pay math to
``plant_engines.payroll`` and persisting the outcome.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``HRService`` is the sole public entry point
for HR operations.  It composes the pure payroll engine and the XLSX writer in
``plant_modules.hr.export``.

Invariants enforced
-------------------
* Each mutating method owns the transaction boundary (``commit`` on
  success, ``rollback`` on any exception).
* At most one open time entry per employee; clock-in is refused otherwise.
* One break per time entry: a break cannot start twice or end before it
  starts.
* Archiving a document that has not expired requires ``confirm=True``.

Failure modes
-------------
* ``EmployeeNotFoundError`` -- no active employee with that number.
* ``AlreadyClockedInError`` / ``NotClockedInError`` / ``BreakStateError``.
* ``RequiredFieldError`` -- document type or name missing.
* ``ArchiveConfirmationRequiredError`` -- see above.
* ``RecordNotFoundError`` -- unknown document or entry ID.

Audit relevance
---------------
Structured log events at operation start and on commit for every punch and
document change, carrying employee and entry IDs.  Time entries are the
source of payroll, so each punch records the acting user.

Usage::

    service = HRService(session, clock=clock)
    kiosk = service.lookup_employee("e123")
    entry = service.clock_in(kiosk.employee.id, actor_id=actor_id)
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from plant_engines.payroll import (
    DEFAULT_DAILY_REGULAR_HOURS,
    DEFAULT_OVERTIME_MULTIPLIER,
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
from plant_kernel.domain.clock import Clock, SystemClock
from plant_kernel.exceptions import (
    AlreadyClockedInError,
    ArchiveConfirmationRequiredError,
    BreakStateError,
    EmployeeNotFoundError,
    NotClockedInError,
    RecordNotFoundError,
    RequiredFieldError,
)
from plant_kernel.logging_config import get_logger
from plant_modules.hr.export import render_payroll_xlsx
from plant_modules.hr.models import (
    DocumentType,
    EmployeeDocument,
    EmploymentStatus,
    KioskSession,
    PayrollReport,
    TimeEntry,
)
from plant_modules.hr.orm import (
    EmployeeDocumentModel,
    EmployeeModel,
    TimeEntryModel,
)

logger = get_logger("modules.hr.service")


class HRService:
    """
    Employee documents, kiosk punches and payroll export.

    Guarantees
    ----------
    * Clock is injectable for deterministic testing; every timestamp the
      service writes comes from it.
    * Payroll hours use the configured daily regular-hours cap and overtime
      multiplier (8 and 1.5 by default).
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        daily_regular_hours: Decimal = DEFAULT_DAILY_REGULAR_HOURS,
        overtime_multiplier: Decimal = DEFAULT_OVERTIME_MULTIPLIER,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._daily_regular_hours = daily_regular_hours
        self._overtime_multiplier = overtime_multiplier

    # =========================================================================
    # Employee documents
    # =========================================================================

    def list_documents(
        self,
        employee_id: UUID,
        include_archived: bool = False,
    ) -> list[EmployeeDocument]:
        """Documents for one employee, newest first."""
        query = (
            self._session.query(EmployeeDocumentModel)
            .filter(EmployeeDocumentModel.employee_id == employee_id)
        )
        if not include_archived:
            query = query.filter(EmployeeDocumentModel.is_archived.is_(False))
        rows = query.order_by(EmployeeDocumentModel.created_at.desc()).all()
        return [row.to_dto() for row in rows]

    def add_document(
        self,
        employee_id: UUID,
        document_type: DocumentType | str | None,
        document_name: str | None,
        actor_id: UUID,
        description: str | None = None,
        expiry_date: date | None = None,
    ) -> EmployeeDocument:
        if not document_type:
            raise RequiredFieldError("document_type")
        if not document_name or not document_name.strip():
            raise RequiredFieldError("document_name")

        document = EmployeeDocument(
            id=uuid4(),
            employee_id=employee_id,
            document_type=DocumentType(document_type),
            document_name=document_name.strip(),
            description=description or None,
            expiry_date=expiry_date,
            created_at=self._clock.now(),
        )
        try:
            self._session.add(EmployeeDocumentModel.from_dto(document, created_by_id=actor_id))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("employee_document_added", extra={
            "employee_id": str(employee_id),
            "document_id": str(document.id),
            "document_type": document.document_type.value,
        })
        return document

    def archive_document(
        self,
        document_id: UUID,
        actor_id: UUID,
        confirm: bool = False,
    ) -> EmployeeDocument:
        """
        Soft-archive a document.

        Expired documents archive straight away; anything else (including a
        document with no expiry date) needs ``confirm=True``.
        """
        try:
            row = self._get_document(document_id)
            if not row.to_dto().is_expired(self._clock.today()) and not confirm:
                raise ArchiveConfirmationRequiredError(str(document_id), row.document_name)

            row.is_archived = True
            row.archived_at = self._clock.now()
            row.updated_by_id = actor_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("employee_document_archived", extra={
            "document_id": str(document_id),
            "confirmed": confirm,
        })
        return row.to_dto()

    def restore_document(self, document_id: UUID, actor_id: UUID) -> EmployeeDocument:
        try:
            row = self._get_document(document_id)
            row.is_archived = False
            row.archived_at = None
            row.updated_by_id = actor_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("employee_document_restored", extra={"document_id": str(document_id)})
        return row.to_dto()

    def _get_document(self, document_id: UUID) -> EmployeeDocumentModel:
        row = self._session.get(EmployeeDocumentModel, document_id)
        if row is None:
            raise RecordNotFoundError("employee_documents", str(document_id))
        return row

    # =========================================================================
    # Time clock kiosk
    # =========================================================================

    def lookup_employee(self, employee_number: str) -> KioskSession:
        """Find an active employee by number (case-insensitive) and their open entry."""
        number = (employee_number or "").strip().upper()
        row = (
            self._session.query(EmployeeModel)
            .filter(
                EmployeeModel.employee_number == number,
                EmployeeModel.employment_status == EmploymentStatus.ACTIVE.value,
            )
            .one_or_none()
        )
        if row is None:
            logger.info("kiosk_employee_not_found", extra={"employee_number": number})
            raise EmployeeNotFoundError(number)

        return KioskSession(
            employee=row.to_dto(),
            department_name=row.department.name if row.department else None,
            active_entry=self.active_entry(row.id),
        )

    def active_entry(self, employee_id: UUID) -> TimeEntry | None:
        """Most recent entry without a clock-out, if any."""
        row = self._open_entry(employee_id)
        return row.to_dto() if row else None

    def _open_entry(self, employee_id: UUID) -> TimeEntryModel | None:
        return (
            self._session.query(TimeEntryModel)
            .filter(
                TimeEntryModel.employee_id == employee_id,
                TimeEntryModel.clock_out.is_(None),
            )
            .order_by(TimeEntryModel.clock_in.desc())
            .first()
        )

    def clock_in(self, employee_id: UUID, actor_id: UUID) -> TimeEntry:
        logger.info("kiosk_clock_in_started", extra={"employee_id": str(employee_id)})
        try:
            existing = self._open_entry(employee_id)
            if existing is not None:
                raise AlreadyClockedInError(str(employee_id), str(existing.id))

            entry = TimeEntry(id=uuid4(), employee_id=employee_id, clock_in=self._clock.now())
            self._session.add(TimeEntryModel.from_dto(entry, created_by_id=actor_id))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("kiosk_clocked_in", extra={
            "employee_id": str(employee_id),
            "entry_id": str(entry.id),
        })
        return entry

    def clock_out(self, entry_id: UUID, actor_id: UUID) -> TimeEntry:
        """Close the entry and compute total and overtime hours."""
        logger.info("kiosk_clock_out_started", extra={"entry_id": str(entry_id)})
        try:
            row = self._get_open_entry(entry_id)
            now = self._clock.now()
            # An unfinished break ends with the shift.
            if row.break_start is not None and row.break_end is None:
                row.break_end = now
            hours = compute_entry_hours(
                row.clock_in, now, row.break_start, row.break_end,
                daily_regular_hours=self._daily_regular_hours,
            )
            row.clock_out = now
            row.total_hours = hours.total_hours
            row.overtime_hours = hours.overtime_hours
            row.updated_by_id = actor_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("kiosk_clocked_out", extra={
            "entry_id": str(entry_id),
            "total_hours": str(row.total_hours),
            "overtime_hours": str(row.overtime_hours),
        })
        return row.to_dto()

    def start_break(self, entry_id: UUID, actor_id: UUID) -> TimeEntry:
        try:
            row = self._get_open_entry(entry_id)
            if row.break_start is not None:
                raise BreakStateError(str(entry_id), "break already taken")
            row.break_start = self._clock.now()
            row.updated_by_id = actor_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("kiosk_break_started", extra={"entry_id": str(entry_id)})
        return row.to_dto()

    def end_break(self, entry_id: UUID, actor_id: UUID) -> TimeEntry:
        try:
            row = self._get_open_entry(entry_id)
            if row.break_start is None:
                raise BreakStateError(str(entry_id), "break not started")
            if row.break_end is not None:
                raise BreakStateError(str(entry_id), "break already ended")
            row.break_end = self._clock.now()
            row.updated_by_id = actor_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("kiosk_break_ended", extra={"entry_id": str(entry_id)})
        return row.to_dto()

    def session_duration(self, entry: TimeEntry) -> str:
        """Time on the clock so far, ``Xh Ym``."""
        return format_duration(entry.clock_in, entry.clock_out or self._clock.now())

    def _get_open_entry(self, entry_id: UUID) -> TimeEntryModel:
        row = self._session.get(TimeEntryModel, entry_id)
        if row is None:
            raise RecordNotFoundError("time_entries", str(entry_id))
        if row.clock_out is not None:
            raise NotClockedInError(str(entry_id))
        return row

    # =========================================================================
    # Payroll export
    # =========================================================================

    def default_payroll_period(self) -> tuple[date, date]:
        """Sunday..Saturday of last week."""
        return last_week_period(self._clock.today())

    def load_payroll_entries(self, period_start: date, period_end: date) -> list[PayrollEntry]:
        """Closed entries whose clock-in falls inside the period (end day inclusive)."""
        start = datetime.combine(period_start, time.min, tzinfo=timezone.utc)
        end = datetime.combine(period_end, time(23, 59, 59), tzinfo=timezone.utc)
        rows = (
            self._session.query(TimeEntryModel)
            .filter(
                TimeEntryModel.clock_out.is_not(None),
                TimeEntryModel.clock_in >= start,
                TimeEntryModel.clock_in <= end,
            )
            .order_by(TimeEntryModel.clock_in)
            .all()
        )

        entries = []
        for row in rows:
            emp = row.employee
            entries.append(PayrollEntry(
                employee=PayrollEmployee(
                    employee_id=str(emp.id),
                    employee_number=emp.employee_number,
                    first_name=emp.first_name,
                    last_name=emp.last_name,
                    hourly_rate=emp.hourly_rate,
                    department=emp.department.name if emp.department else None,
                ) if emp is not None else None,
                total_hours=row.total_hours,
                overtime_hours=row.overtime_hours,
                clock_out=row.clock_out,
            ))
        return entries

    def payroll_report(self, period_start: date, period_end: date) -> PayrollReport:
        entries = self.load_payroll_entries(period_start, period_end)
        rows = summarize_payroll(
            entries,
            daily_regular_hours=self._daily_regular_hours,
            overtime_multiplier=self._overtime_multiplier,
        )
        totals = payroll_totals(rows)
        logger.info("payroll_report_built", extra={
            "period_start": period_start.isoformat(),
            "period_end": period_end.isoformat(),
            "entry_count": len(entries),
            "employee_count": totals.employee_count,
            "gross_pay": str(totals.gross_pay),
        })
        return PayrollReport(
            period_start=period_start,
            period_end=period_end,
            rows=tuple(rows),
            totals=totals,
        )

    def export_payroll_csv(self, period_start: date, period_end: date) -> tuple[str, str]:
        """``(filename, csv_text)`` for the period."""
        report = self.payroll_report(period_start, period_end)
        filename = export_filename(period_start, period_end)
        logger.info("payroll_exported", extra={"export_filename": filename, "format": "csv"})
        return filename, render_payroll_csv(report.rows)

    def export_payroll_xlsx(self, period_start: date, period_end: date) -> tuple[str, bytes]:
        """``(filename, workbook_bytes)`` for the period."""
        report = self.payroll_report(period_start, period_end)
        filename = export_filename(period_start, period_end, extension="xlsx")
        logger.info("payroll_exported", extra={"export_filename": filename, "format": "xlsx"})
        return filename, render_payroll_xlsx(report.rows, report.totals)
