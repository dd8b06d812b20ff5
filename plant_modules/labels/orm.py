"""
Labels ORM Persistence Models (``plant_modules.labels.orm``).

``fields_config`` stores the positioned label elements as a JSON list of
objects using the designer's camelCase keys (``fieldKey``, ``fontSize``).
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from plant_kernel.db.base import TrackedBase


class LabelTemplateModel(TrackedBase):
    __tablename__ = "label_templates"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    lot_type: Mapped[str] = mapped_column(String(50), nullable=False)
    width_inches: Mapped[Decimal] = mapped_column(nullable=False)
    height_inches: Mapped[Decimal] = mapped_column(nullable=False)
    fields_config: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        Index("idx_label_template_lot_type", "lot_type", "is_active"),
    )

    def to_dto(self):
        from plant_engines.labels import LotType
        from plant_modules.labels.models import LabelTemplate
        return LabelTemplate(
            id=self.id,
            name=self.name,
            lot_type=LotType(self.lot_type),
            width_inches=self.width_inches,
            height_inches=self.height_inches,
            fields_config=tuple(self.fields_config or ()),
            is_default=self.is_default,
            is_active=self.is_active,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "LabelTemplateModel":
        lot_type = dto.lot_type.value if hasattr(dto.lot_type, "value") else dto.lot_type
        return cls(
            id=dto.id,
            name=dto.name,
            lot_type=lot_type,
            width_inches=dto.width_inches,
            height_inches=dto.height_inches,
            fields_config=[dict(element) for element in dto.fields_config],
            is_default=dto.is_default,
            is_active=dto.is_active,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<LabelTemplateModel {self.lot_type}/{self.name}>"
