"""
HR ORM Persistence Models (``plant_modules.hr.orm``).

Responsibility:
    SQLAlchemy ORM models that persist the frozen dataclass DTOs defined in
    ``plant_modules.hr.models``.  Each ORM class mirrors a DTO and provides
    ``to_dto()`` / ``from_dto()`` round-trip conversion.

Architecture position:
    **Modules layer** -- persistence companions to the pure DTO models.
    Inherits from ``TrackedBase`` which provides id, created_at, updated_at,
    created_by_id and updated_by_id.

Invariants enforced:
    - Enum fields stored as String(50) containing the enum .value string.
    - ``employee_number`` is unique and stored upper-case.
    - Hours and rates are Decimal -- NEVER float.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from plant_kernel.db.base import TrackedBase, UTCDateTime

# ---------------------------------------------------------------------------
# DepartmentModel
# ---------------------------------------------------------------------------

class DepartmentModel(TrackedBase):
    __tablename__ = "hr_departments"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("name", name="uq_hr_department_name"),
    )

    def to_dto(self):
        from plant_modules.hr.models import Department
        return Department(id=self.id, name=self.name, is_active=self.is_active)

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "DepartmentModel":
        return cls(
            id=dto.id,
            name=dto.name,
            is_active=dto.is_active,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<DepartmentModel {self.name}>"


# ---------------------------------------------------------------------------
# EmployeeModel
# ---------------------------------------------------------------------------

class EmployeeModel(TrackedBase):
    """
    ORM model for ``Employee``.

    Guarantees:
        - ``employee_number`` is unique (uq_hr_employee_number).
        - ``employment_status`` stores the enum .value string.
    """

    __tablename__ = "hr_employees"

    employee_number: Mapped[str] = mapped_column(String(50), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    hourly_rate: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    department_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("hr_departments.id"), nullable=True,
    )
    employment_status: Mapped[str] = mapped_column(String(50), default="active", nullable=False)
    hire_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    department: Mapped[DepartmentModel | None] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("employee_number", name="uq_hr_employee_number"),
        Index("idx_hr_employee_status", "employment_status"),
        Index("idx_hr_employee_department", "department_id"),
    )

    def to_dto(self):
        from plant_modules.hr.models import Employee, EmploymentStatus
        return Employee(
            id=self.id,
            employee_number=self.employee_number,
            first_name=self.first_name,
            last_name=self.last_name,
            hourly_rate=self.hourly_rate,
            department_id=self.department_id,
            employment_status=EmploymentStatus(self.employment_status),
            hire_date=self.hire_date,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "EmployeeModel":
        return cls(
            id=dto.id,
            employee_number=dto.employee_number.upper(),
            first_name=dto.first_name,
            last_name=dto.last_name,
            hourly_rate=dto.hourly_rate,
            department_id=dto.department_id,
            employment_status=(
                dto.employment_status.value
                if hasattr(dto.employment_status, "value")
                else dto.employment_status
            ),
            hire_date=dto.hire_date,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return (
            f"<EmployeeModel {self.employee_number}: "
            f"{self.first_name} {self.last_name} ({self.employment_status})>"
        )


# ---------------------------------------------------------------------------
# EmployeeDocumentModel
# ---------------------------------------------------------------------------

class EmployeeDocumentModel(TrackedBase):
    """
    ORM model for ``EmployeeDocument``.

    Contract:
        Archiving is a soft flag; rows are never deleted so the employee file
        keeps its history.
    """

    __tablename__ = "hr_employee_documents"

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("hr_employees.id"), nullable=False)
    document_type: Mapped[str] = mapped_column(String(50), nullable=False)
    document_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    archived_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    __table_args__ = (
        Index("idx_hr_document_employee", "employee_id"),
        Index("idx_hr_document_archived", "employee_id", "is_archived"),
    )

    def to_dto(self):
        from plant_modules.hr.models import DocumentType, EmployeeDocument
        return EmployeeDocument(
            id=self.id,
            employee_id=self.employee_id,
            document_type=DocumentType(self.document_type),
            document_name=self.document_name,
            description=self.description,
            expiry_date=self.expiry_date,
            is_archived=self.is_archived,
            archived_at=self.archived_at,
            created_at=self.created_at,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "EmployeeDocumentModel":
        orm = cls(
            id=dto.id,
            employee_id=dto.employee_id,
            document_type=(
                dto.document_type.value
                if hasattr(dto.document_type, "value")
                else dto.document_type
            ),
            document_name=dto.document_name,
            description=dto.description,
            expiry_date=dto.expiry_date,
            is_archived=dto.is_archived,
            archived_at=dto.archived_at,
            created_by_id=created_by_id,
        )
        if dto.created_at is not None:
            orm.created_at = dto.created_at
        return orm

    def __repr__(self) -> str:
        return f"<EmployeeDocumentModel {self.document_type}: {self.document_name}>"


# ---------------------------------------------------------------------------
# TimeEntryModel
# ---------------------------------------------------------------------------

class TimeEntryModel(TrackedBase):
    """
    ORM model for ``TimeEntry`` -- one kiosk punch pair.

    Guarantees:
        - ``total_hours`` / ``overtime_hours`` are filled only at clock-out.
    """

    __tablename__ = "hr_time_entries"

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("hr_employees.id"), nullable=False)
    clock_in: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    clock_out: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    break_start: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    break_end: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    total_hours: Mapped[Decimal | None] = mapped_column(nullable=True)
    overtime_hours: Mapped[Decimal | None] = mapped_column(nullable=True)

    employee: Mapped[EmployeeModel] = relationship(lazy="joined")

    __table_args__ = (
        Index("idx_hr_time_entry_employee", "employee_id", "clock_in"),
        Index("idx_hr_time_entry_clock_in", "clock_in"),
    )

    def to_dto(self):
        from plant_modules.hr.models import TimeEntry
        return TimeEntry(
            id=self.id,
            employee_id=self.employee_id,
            clock_in=self.clock_in,
            clock_out=self.clock_out,
            break_start=self.break_start,
            break_end=self.break_end,
            total_hours=self.total_hours,
            overtime_hours=self.overtime_hours,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "TimeEntryModel":
        return cls(
            id=dto.id,
            employee_id=dto.employee_id,
            clock_in=dto.clock_in,
            clock_out=dto.clock_out,
            break_start=dto.break_start,
            break_end=dto.break_end,
            total_hours=dto.total_hours,
            overtime_hours=dto.overtime_hours,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        state = "open" if self.clock_out is None else "closed"
        return f"<TimeEntryModel {self.employee_id} {self.clock_in} ({state})>"
