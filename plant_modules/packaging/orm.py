"""
Packaging ORM Persistence Models (``plant_modules.packaging.orm``).

Invariants enforced:
    - ``case_pack_size`` is unique: one indicator digit per pack size.
    - ``indicator_digit`` is a single character 0-9 (validated by the DTO).
"""

from uuid import UUID

from sqlalchemy import Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from plant_kernel.db.base import TrackedBase


class PackagingIndicatorModel(TrackedBase):
    __tablename__ = "packaging_indicator_mappings"

    case_pack_size: Mapped[int] = mapped_column(Integer, nullable=False)
    indicator_digit: Mapped[str] = mapped_column(String(1), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("case_pack_size", name="uq_packaging_case_pack_size"),
    )

    def to_dto(self):
        from plant_modules.packaging.models import PackagingIndicatorMapping
        return PackagingIndicatorMapping(
            id=self.id,
            case_pack_size=self.case_pack_size,
            indicator_digit=self.indicator_digit,
            description=self.description,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "PackagingIndicatorModel":
        return cls(
            id=dto.id,
            case_pack_size=dto.case_pack_size,
            indicator_digit=dto.indicator_digit,
            description=dto.description,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<PackagingIndicatorModel {self.case_pack_size} -> {self.indicator_digit}>"
