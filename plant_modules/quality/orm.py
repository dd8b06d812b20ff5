"""
Quality ORM Persistence Models (``plant_modules.quality.orm``).

Responsibility:
    SQLAlchemy models for QA test templates, product QA requirements and the
    QA tests recorded against production lots.

Invariants enforced:
    - ``test_code`` is unique across templates.
    - ``applicable_stages``, ``photo_urls`` and ``document_urls`` are JSON
      lists of strings, never NULL.  Services assign new lists rather than
      mutating in place so the change is flushed.
    - Decimal limits -- NEVER float.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from plant_kernel.db.base import TrackedBase, UTCDateTime


def _value(enum_or_str):
    return enum_or_str.value if hasattr(enum_or_str, "value") else enum_or_str


# ---------------------------------------------------------------------------
# QATestTemplateModel
# ---------------------------------------------------------------------------

class QATestTemplateModel(TrackedBase):
    __tablename__ = "quality_test_templates"

    test_name: Mapped[str] = mapped_column(String(200), nullable=False)
    test_code: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    test_method: Mapped[str | None] = mapped_column(Text, nullable=True)
    parameter_type: Mapped[str] = mapped_column(String(50), nullable=False)
    target_value: Mapped[str | None] = mapped_column(String(100), nullable=True)
    min_value: Mapped[Decimal | None] = mapped_column(nullable=True)
    max_value: Mapped[Decimal | None] = mapped_column(nullable=True)
    uom: Mapped[str | None] = mapped_column(String(50), nullable=True)
    required_equipment: Mapped[str | None] = mapped_column(Text, nullable=True)
    typical_duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    applicable_stages: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    is_critical: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    __table_args__ = (
        UniqueConstraint("test_code", name="uq_quality_test_code"),
        Index("idx_quality_template_category", "category"),
    )

    def to_dto(self):
        from plant_engines.qa import ParameterType, ProductionStage, QATestCategory
        from plant_modules.quality.models import QATestTemplate
        return QATestTemplate(
            id=self.id,
            test_name=self.test_name,
            test_code=self.test_code,
            parameter_type=ParameterType(self.parameter_type),
            category=QATestCategory(self.category) if self.category else None,
            description=self.description,
            test_method=self.test_method,
            target_value=self.target_value,
            min_value=self.min_value,
            max_value=self.max_value,
            uom=self.uom,
            required_equipment=self.required_equipment,
            typical_duration_minutes=self.typical_duration_minutes,
            applicable_stages=tuple(ProductionStage(s) for s in self.applicable_stages or ()),
            is_critical=self.is_critical,
            is_active=self.is_active,
            sort_order=self.sort_order,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "QATestTemplateModel":
        model = cls(id=dto.id, created_by_id=created_by_id)
        model.apply(dto)
        return model

    def apply(self, dto) -> None:
        """Copy every editable field from a ``QATestTemplate``."""
        self.test_name = dto.test_name
        self.test_code = dto.test_code
        self.description = dto.description
        self.category = _value(dto.category) if dto.category else None
        self.test_method = dto.test_method
        self.parameter_type = _value(dto.parameter_type)
        self.target_value = dto.target_value
        self.min_value = dto.min_value
        self.max_value = dto.max_value
        self.uom = dto.uom
        self.required_equipment = dto.required_equipment
        self.typical_duration_minutes = dto.typical_duration_minutes
        self.applicable_stages = [_value(s) for s in dto.applicable_stages]
        self.is_critical = dto.is_critical
        self.is_active = dto.is_active
        self.sort_order = dto.sort_order

    def __repr__(self) -> str:
        return f"<QATestTemplateModel {self.test_code}: {self.test_name}>"


# ---------------------------------------------------------------------------
# ProductQARequirementModel
# ---------------------------------------------------------------------------

class ProductQARequirementModel(TrackedBase):
    __tablename__ = "product_qa_requirements"

    product_id: Mapped[UUID] = mapped_column(ForeignKey("mfg_products.id"), nullable=False)
    test_template_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("quality_test_templates.id"), nullable=True,
    )
    parameter_name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_critical: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    frequency: Mapped[str | None] = mapped_column(String(50), nullable=True)
    sample_size: Mapped[str | None] = mapped_column(String(50), nullable=True)
    target_value: Mapped[str | None] = mapped_column(String(100), nullable=True)
    min_value: Mapped[Decimal | None] = mapped_column(nullable=True)
    max_value: Mapped[Decimal | None] = mapped_column(nullable=True)
    uom: Mapped[str | None] = mapped_column(String(50), nullable=True)

    __table_args__ = (
        Index("idx_quality_requirement_product", "product_id"),
    )

    def to_dto(self):
        from plant_engines.qa import QATestFrequency
        from plant_modules.quality.models import ProductQARequirement
        return ProductQARequirement(
            id=self.id,
            product_id=self.product_id,
            parameter_name=self.parameter_name,
            test_template_id=self.test_template_id,
            is_critical=self.is_critical,
            frequency=QATestFrequency(self.frequency) if self.frequency else None,
            sample_size=self.sample_size,
            target_value=self.target_value,
            min_value=self.min_value,
            max_value=self.max_value,
            uom=self.uom,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "ProductQARequirementModel":
        return cls(
            id=dto.id,
            product_id=dto.product_id,
            test_template_id=dto.test_template_id,
            parameter_name=dto.parameter_name,
            is_critical=dto.is_critical,
            frequency=_value(dto.frequency) if dto.frequency else None,
            sample_size=dto.sample_size,
            target_value=dto.target_value,
            min_value=dto.min_value,
            max_value=dto.max_value,
            uom=dto.uom,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<ProductQARequirementModel {self.product_id}: {self.parameter_name}>"


# ---------------------------------------------------------------------------
# LotQATestModel
# ---------------------------------------------------------------------------

class LotQATestModel(TrackedBase):
    """
    ORM model for ``LotQATest``.

    Guarantees:
        - ``passed`` / ``out_of_spec`` are the evaluated result, never the raw
          tester input for numeric and range parameters.
        - ``verified_by`` and ``verified_at`` are set together.
    """

    __tablename__ = "production_lot_qa_tests"

    production_lot_id: Mapped[UUID] = mapped_column(
        ForeignKey("mfg_production_lots.id"), nullable=False,
    )
    test_template_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("quality_test_templates.id"), nullable=True,
    )
    test_name: Mapped[str] = mapped_column(String(200), nullable=False)
    parameter_type: Mapped[str] = mapped_column(String(50), nullable=False)
    test_value_numeric: Mapped[Decimal | None] = mapped_column(nullable=True)
    test_value_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    passed: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    out_of_spec: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    tested_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    tested_by: Mapped[UUID | None] = mapped_column(nullable=True)
    verified_by: Mapped[UUID | None] = mapped_column(nullable=True)
    verified_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    target_value: Mapped[str | None] = mapped_column(String(100), nullable=True)
    min_value: Mapped[Decimal | None] = mapped_column(nullable=True)
    max_value: Mapped[Decimal | None] = mapped_column(nullable=True)
    uom: Mapped[str | None] = mapped_column(String(50), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    corrective_action: Mapped[str | None] = mapped_column(Text, nullable=True)
    photo_urls: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    document_urls: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    __table_args__ = (
        Index("idx_quality_lot_test_lot", "production_lot_id", "tested_at"),
    )

    def to_dto(self):
        from plant_engines.qa import ParameterType
        from plant_modules.quality.models import LotQATest
        return LotQATest(
            id=self.id,
            production_lot_id=self.production_lot_id,
            test_name=self.test_name,
            parameter_type=ParameterType(self.parameter_type),
            tested_at=self.tested_at,
            test_template_id=self.test_template_id,
            test_value_numeric=self.test_value_numeric,
            test_value_text=self.test_value_text,
            passed=self.passed,
            out_of_spec=self.out_of_spec,
            tested_by=self.tested_by,
            verified_by=self.verified_by,
            verified_at=self.verified_at,
            target_value=self.target_value,
            min_value=self.min_value,
            max_value=self.max_value,
            uom=self.uom,
            notes=self.notes,
            corrective_action=self.corrective_action,
            photo_urls=tuple(self.photo_urls or ()),
            document_urls=tuple(self.document_urls or ()),
        )

    def apply_input(self, data, passed: bool | None, out_of_spec: bool) -> None:
        """Copy tester-entered fields from a ``QATestInput``."""
        self.test_template_id = data.test_template_id
        self.test_name = data.test_name
        self.parameter_type = _value(data.parameter_type)
        self.test_value_numeric = data.test_value_numeric
        self.test_value_text = data.test_value_text
        self.passed = passed
        self.out_of_spec = out_of_spec
        self.target_value = data.target_value
        self.min_value = data.min_value
        self.max_value = data.max_value
        self.uom = data.uom
        self.notes = data.notes
        self.corrective_action = data.corrective_action or None

    def __repr__(self) -> str:
        return f"<LotQATestModel {self.test_name} lot={self.production_lot_id} passed={self.passed}>"
