"""
Quality Domain Models (``plant_modules.quality.models``).

Test templates (the catalogue of QA checks), per-product QA requirements,
and QA test results recorded against production lots.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from plant_engines.qa import (
    ParameterType,
    ProductionStage,
    QATestCategory,
    QATestFrequency,
)


@dataclass(frozen=True)
class QATestTemplate:
    id: UUID
    test_name: str
    test_code: str
    parameter_type: ParameterType
    category: QATestCategory | None = None
    description: str | None = None
    test_method: str | None = None
    target_value: str | None = None
    min_value: Decimal | None = None
    max_value: Decimal | None = None
    uom: str | None = None
    required_equipment: str | None = None
    typical_duration_minutes: int | None = None
    applicable_stages: tuple[ProductionStage, ...] = ()
    is_critical: bool = False
    is_active: bool = True
    sort_order: int = 0

    def applies_to(self, stage: ProductionStage | str) -> bool:
        return ProductionStage(stage) in self.applicable_stages


@dataclass(frozen=True)
class QATestTemplateFilter:
    """Listing filters; ``None`` means "do not filter"."""

    category: QATestCategory | None = None
    stage: ProductionStage | None = None
    is_active: bool | None = None
    is_critical: bool | None = None
    search: str | None = None


@dataclass(frozen=True)
class ProductQARequirement:
    id: UUID
    product_id: UUID
    parameter_name: str
    test_template_id: UUID | None = None
    is_critical: bool = False
    frequency: QATestFrequency | None = None
    sample_size: str | None = None
    target_value: str | None = None
    min_value: Decimal | None = None
    max_value: Decimal | None = None
    uom: str | None = None


@dataclass(frozen=True)
class QATestInput:
    """A result as entered by the tester, before pass/fail evaluation."""

    test_name: str
    parameter_type: ParameterType
    test_template_id: UUID | None = None
    test_value_numeric: Decimal | None = None
    test_value_text: str | None = None
    passed: bool | None = None
    out_of_spec: bool = False
    target_value: str | None = None
    min_value: Decimal | None = None
    max_value: Decimal | None = None
    uom: str | None = None
    notes: str | None = None
    corrective_action: str | None = None


@dataclass(frozen=True)
class LotQATest:
    id: UUID
    production_lot_id: UUID
    test_name: str
    parameter_type: ParameterType
    tested_at: datetime
    test_template_id: UUID | None = None
    test_value_numeric: Decimal | None = None
    test_value_text: str | None = None
    passed: bool | None = None
    out_of_spec: bool = False
    tested_by: UUID | None = None
    verified_by: UUID | None = None
    verified_at: datetime | None = None
    target_value: str | None = None
    min_value: Decimal | None = None
    max_value: Decimal | None = None
    uom: str | None = None
    notes: str | None = None
    corrective_action: str | None = None
    photo_urls: tuple[str, ...] = field(default_factory=tuple)
    document_urls: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_verified(self) -> bool:
        return self.verified_at is not None


@dataclass(frozen=True)
class PendingQALot:
    """A production lot row for the QA work queue."""

    id: UUID
    lot_number: str
    production_date: date
    production_stage: str
    approval_status: str | None
    quantity_produced: Decimal | None
    product_id: UUID | None
    product_name: str | None
    product_sku: str | None
    machine_name: str | None
    qa_tests_count: int = 0
    required_tests_count: int = 0
