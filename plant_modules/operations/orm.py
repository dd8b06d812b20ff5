"""
Operations ORM Persistence Models (``plant_modules.operations.orm``).

Invariants enforced:
    - ``business_date`` is unique in ``operations_day_closes``: a date is
      closed at most once.
    - ``bol_number`` is unique.
"""

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import Date, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from plant_kernel.db.base import TrackedBase, UTCDateTime


class BillOfLadingModel(TrackedBase):
    __tablename__ = "operations_bills_of_lading"

    bol_number: Mapped[str] = mapped_column(String(50), nullable=False)
    ship_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="draft", nullable=False)

    __table_args__ = (
        UniqueConstraint("bol_number", name="uq_operations_bol_number"),
        Index("idx_operations_bol_ship_date", "ship_date", "status"),
    )

    def to_dto(self):
        from plant_modules.operations.models import BillOfLading, BillOfLadingStatus
        return BillOfLading(
            id=self.id,
            bol_number=self.bol_number,
            ship_date=self.ship_date,
            status=BillOfLadingStatus(self.status),
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "BillOfLadingModel":
        return cls(
            id=dto.id,
            bol_number=dto.bol_number,
            ship_date=dto.ship_date,
            status=dto.status.value if hasattr(dto.status, "value") else dto.status,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<BillOfLadingModel {self.bol_number} [{self.status}]>"


class DayCloseModel(TrackedBase):
    __tablename__ = "operations_day_closes"

    business_date: Mapped[date] = mapped_column(Date, nullable=False)
    closed_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    closed_by: Mapped[UUID] = mapped_column(nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("business_date", name="uq_operations_day_close_date"),
    )

    def to_dto(self):
        from plant_modules.operations.models import DayClose
        return DayClose(
            id=self.id,
            business_date=self.business_date,
            closed_at=self.closed_at,
            closed_by=self.closed_by,
            notes=self.notes,
        )

    def __repr__(self) -> str:
        return f"<DayCloseModel {self.business_date}>"
