"""
HR Domain Models (``plant_modules.hr.models``).

Responsibility
--------------
Frozen dataclass value objects for the people side of the plant:
departments, employees, employee documents, kiosk time entries and the
payroll report assembled from them.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by
``HRService`` and returned to callers.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* Hours and rates use ``Decimal`` -- NEVER ``float``.
* Timestamps are timezone-aware UTC.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from plant_engines.payroll import PayrollSummary, PayrollTotals


class EmploymentStatus(str, Enum):
    """Employment lifecycle."""
    ACTIVE = "active"
    ON_LEAVE = "on_leave"
    TERMINATED = "terminated"


class DocumentType(str, Enum):
    """Employee document catalogue."""
    I9 = "i9"
    W4 = "w4"
    OFFER_LETTER = "offer_letter"
    HANDBOOK_ACK = "handbook_ack"
    BACKGROUND_CHECK = "background_check"
    CERTIFICATION = "certification"
    OTHER = "other"


DOCUMENT_TYPE_LABELS: dict[DocumentType, str] = {
    DocumentType.I9: "I-9 Employment Eligibility",
    DocumentType.W4: "W-4 Tax Withholding",
    DocumentType.OFFER_LETTER: "Offer Letter",
    DocumentType.HANDBOOK_ACK: "Handbook Acknowledgment",
    DocumentType.BACKGROUND_CHECK: "Background Check",
    DocumentType.CERTIFICATION: "Certification",
    DocumentType.OTHER: "Other",
}


@dataclass(frozen=True)
class Department:
    id: UUID
    name: str
    is_active: bool = True


@dataclass(frozen=True)
class Employee:
    """An hourly plant employee."""
    id: UUID
    employee_number: str
    first_name: str
    last_name: str
    hourly_rate: Decimal = Decimal("0")
    department_id: UUID | None = None
    employment_status: EmploymentStatus = EmploymentStatus.ACTIVE
    hire_date: date | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class EmployeeDocument:
    """A document kept on an employee's file."""
    id: UUID
    employee_id: UUID
    document_type: DocumentType
    document_name: str
    description: str | None = None
    expiry_date: date | None = None
    is_archived: bool = False
    archived_at: datetime | None = None
    created_at: datetime | None = None

    def is_expired(self, today: date) -> bool:
        return self.expiry_date is not None and self.expiry_date < today


@dataclass(frozen=True)
class TimeEntry:
    """One kiosk punch pair; ``clock_out`` is None while on the clock."""
    id: UUID
    employee_id: UUID
    clock_in: datetime
    clock_out: datetime | None = None
    break_start: datetime | None = None
    break_end: datetime | None = None
    total_hours: Decimal | None = None
    overtime_hours: Decimal | None = None

    @property
    def is_open(self) -> bool:
        return self.clock_out is None

    @property
    def on_break(self) -> bool:
        return self.break_start is not None and self.break_end is None


@dataclass(frozen=True)
class KioskSession:
    """What the kiosk shows after an employee enters their number."""
    employee: Employee
    department_name: str | None
    active_entry: TimeEntry | None


@dataclass(frozen=True)
class PayrollReport:
    period_start: date
    period_end: date
    rows: tuple[PayrollSummary, ...]
    totals: PayrollTotals
