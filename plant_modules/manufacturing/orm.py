"""
Manufacturing ORM Persistence Models (``plant_modules.manufacturing.orm``).

Responsibility:
    SQLAlchemy ORM models for products, recipes, machines, production lots,
    the ingredient lots each production lot consumed, and overrun checks.

Architecture position:
    **Modules layer** -- persistence companions to
    ``plant_modules.manufacturing.models``.  Recipe items and lot ingredients
    reference ``purchasing_materials`` / ``purchasing_receiving_lots``.

Invariants enforced:
    - Enum fields stored as String(50) containing the enum .value string.
    - ``lot_number`` is unique across production lots.
    - Overrun samples are stored as a JSON list of decimal strings.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Boolean, Date, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from plant_kernel.db.base import TrackedBase, UTCDateTime
from plant_modules.purchasing.orm import MaterialModel


def _value(enum_or_str):
    return enum_or_str.value if hasattr(enum_or_str, "value") else enum_or_str


# ---------------------------------------------------------------------------
# ProductModel
# ---------------------------------------------------------------------------

class ProductModel(TrackedBase):
    """
    ORM model for ``Product``.

    Guarantees:
        - ``sku`` is unique (uq_mfg_product_sku).
        - ``upc`` holds the unit GTIN (12 or 13 digits) used for case codes.
    """

    __tablename__ = "mfg_products"

    sku: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="draft", nullable=False)
    upc: Mapped[str | None] = mapped_column(String(14), nullable=True)
    case_pack_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    case_material_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("purchasing_materials.id"), nullable=True,
    )
    shelf_life_days: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("sku", name="uq_mfg_product_sku"),
        Index("idx_mfg_product_status", "status"),
    )

    def to_dto(self):
        from plant_modules.manufacturing.models import Product, ProductStatus
        return Product(
            id=self.id,
            sku=self.sku,
            name=self.name,
            status=ProductStatus(self.status),
            upc=self.upc,
            case_pack_size=self.case_pack_size,
            case_material_id=self.case_material_id,
            shelf_life_days=self.shelf_life_days,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "ProductModel":
        return cls(
            id=dto.id,
            sku=dto.sku,
            name=dto.name,
            status=_value(dto.status),
            upc=dto.upc,
            case_pack_size=dto.case_pack_size,
            case_material_id=dto.case_material_id,
            shelf_life_days=dto.shelf_life_days,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<ProductModel {self.sku}: {self.name} ({self.status})>"


# ---------------------------------------------------------------------------
# RecipeModel / RecipeItemModel
# ---------------------------------------------------------------------------

class RecipeModel(TrackedBase):
    __tablename__ = "mfg_recipes"

    product_id: Mapped[UUID] = mapped_column(ForeignKey("mfg_products.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    batch_size: Mapped[Decimal] = mapped_column(nullable=False)
    batch_unit_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    standard_labor_hours: Mapped[Decimal | None] = mapped_column(nullable=True)
    standard_machine_hours: Mapped[Decimal | None] = mapped_column(nullable=True)

    __table_args__ = (
        Index("idx_mfg_recipe_product", "product_id"),
    )

    def to_dto(self):
        from plant_modules.manufacturing.models import ProductRecipe
        return ProductRecipe(
            id=self.id,
            product_id=self.product_id,
            name=self.name,
            batch_size=self.batch_size,
            batch_unit_code=self.batch_unit_code,
            is_default=self.is_default,
            is_active=self.is_active,
            standard_labor_hours=self.standard_labor_hours,
            standard_machine_hours=self.standard_machine_hours,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "RecipeModel":
        return cls(
            id=dto.id,
            product_id=dto.product_id,
            name=dto.name,
            batch_size=dto.batch_size,
            batch_unit_code=dto.batch_unit_code,
            is_default=dto.is_default,
            is_active=dto.is_active,
            standard_labor_hours=dto.standard_labor_hours,
            standard_machine_hours=dto.standard_machine_hours,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<RecipeModel {self.name} batch={self.batch_size}>"


class RecipeItemModel(TrackedBase):
    __tablename__ = "mfg_recipe_items"

    recipe_id: Mapped[UUID] = mapped_column(ForeignKey("mfg_recipes.id"), nullable=False)
    material_id: Mapped[UUID] = mapped_column(ForeignKey("purchasing_materials.id"), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(nullable=False)
    unit_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    material: Mapped[MaterialModel] = relationship(lazy="joined")
    recipe: Mapped[RecipeModel] = relationship()

    __table_args__ = (
        Index("idx_mfg_recipe_item_recipe", "recipe_id", "sort_order"),
    )

    def to_dto(self):
        from plant_modules.manufacturing.models import RecipeItem
        return RecipeItem(
            id=self.id,
            recipe_id=self.recipe_id,
            material_id=self.material_id,
            material_name=self.material.name if self.material else "",
            quantity=self.quantity,
            unit_code=self.unit_code or (self.material.usage_unit_code if self.material else None),
            sort_order=self.sort_order,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "RecipeItemModel":
        return cls(
            id=dto.id,
            recipe_id=dto.recipe_id,
            material_id=dto.material_id,
            quantity=dto.quantity,
            unit_code=dto.unit_code,
            sort_order=dto.sort_order,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<RecipeItemModel recipe={self.recipe_id} material={self.material_id} qty={self.quantity}>"


# ---------------------------------------------------------------------------
# MachineModel
# ---------------------------------------------------------------------------

class MachineModel(TrackedBase):
    __tablename__ = "mfg_machines"

    code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    hourly_rate: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("code", name="uq_mfg_machine_code"),
    )

    def to_dto(self):
        from plant_modules.manufacturing.models import Machine
        return Machine(
            id=self.id,
            code=self.code,
            name=self.name,
            hourly_rate=self.hourly_rate,
            is_active=self.is_active,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "MachineModel":
        return cls(
            id=dto.id,
            code=dto.code,
            name=dto.name,
            hourly_rate=dto.hourly_rate,
            is_active=dto.is_active,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<MachineModel {self.code}: {self.name}>"


# ---------------------------------------------------------------------------
# ProductionLotModel
# ---------------------------------------------------------------------------

class ProductionLotModel(TrackedBase):
    """
    ORM model for ``ProductionLot``.

    Guarantees:
        - ``lot_number`` is unique (uq_mfg_lot_number).
        - ``material_cost`` is the sum of the lot's ingredient costs.
    """

    __tablename__ = "mfg_production_lots"

    lot_number: Mapped[str] = mapped_column(String(50), nullable=False)
    product_id: Mapped[UUID] = mapped_column(ForeignKey("mfg_products.id"), nullable=False)
    recipe_id: Mapped[UUID | None] = mapped_column(ForeignKey("mfg_recipes.id"), nullable=True)
    machine_id: Mapped[UUID | None] = mapped_column(ForeignKey("mfg_machines.id"), nullable=True)
    production_date: Mapped[date] = mapped_column(Date, nullable=False)
    quantity_produced: Mapped[Decimal] = mapped_column(nullable=False)
    labor_hours: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    machine_hours: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    material_cost: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(50), default="completed", nullable=False)
    production_stage: Mapped[str] = mapped_column(String(50), default="finished", nullable=False)
    approval_status: Mapped[str] = mapped_column(String(50), default="pending_qa", nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    product: Mapped[ProductModel] = relationship(lazy="joined")
    machine: Mapped[MachineModel | None] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("lot_number", name="uq_mfg_lot_number"),
        Index("idx_mfg_lot_date_status", "production_date", "status"),
        Index("idx_mfg_lot_product", "product_id"),
    )

    def to_dto(self):
        from plant_modules.manufacturing.models import (
            LotApprovalStatus,
            ProductionLot,
            ProductionLotStatus,
        )
        return ProductionLot(
            id=self.id,
            lot_number=self.lot_number,
            product_id=self.product_id,
            production_date=self.production_date,
            quantity_produced=self.quantity_produced,
            recipe_id=self.recipe_id,
            machine_id=self.machine_id,
            labor_hours=self.labor_hours,
            machine_hours=self.machine_hours,
            material_cost=self.material_cost,
            expiry_date=self.expiry_date,
            status=ProductionLotStatus(self.status),
            production_stage=self.production_stage,
            approval_status=LotApprovalStatus(self.approval_status),
            notes=self.notes,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "ProductionLotModel":
        return cls(
            id=dto.id,
            lot_number=dto.lot_number,
            product_id=dto.product_id,
            recipe_id=dto.recipe_id,
            machine_id=dto.machine_id,
            production_date=dto.production_date,
            quantity_produced=dto.quantity_produced,
            labor_hours=dto.labor_hours,
            machine_hours=dto.machine_hours,
            material_cost=dto.material_cost,
            expiry_date=dto.expiry_date,
            status=_value(dto.status),
            production_stage=_value(dto.production_stage),
            approval_status=_value(dto.approval_status),
            notes=dto.notes,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<ProductionLotModel {self.lot_number}: {self.quantity_produced} ({self.status})>"


class ProductionLotIngredientModel(TrackedBase):
    __tablename__ = "mfg_production_lot_ingredients"

    production_lot_id: Mapped[UUID] = mapped_column(
        ForeignKey("mfg_production_lots.id"), nullable=False,
    )
    material_id: Mapped[UUID] = mapped_column(ForeignKey("purchasing_materials.id"), nullable=False)
    receiving_lot_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchasing_receiving_lots.id"), nullable=False,
    )
    quantity_used: Mapped[Decimal] = mapped_column(nullable=False)
    cost_per_unit: Mapped[Decimal] = mapped_column(nullable=False)
    total_cost: Mapped[Decimal] = mapped_column(nullable=False)

    __table_args__ = (
        Index("idx_mfg_ingredient_lot", "production_lot_id"),
        Index("idx_mfg_ingredient_receiving_lot", "receiving_lot_id"),
    )

    def to_dto(self):
        from plant_modules.manufacturing.models import ProductionLotIngredient
        return ProductionLotIngredient(
            id=self.id,
            production_lot_id=self.production_lot_id,
            material_id=self.material_id,
            receiving_lot_id=self.receiving_lot_id,
            quantity_used=self.quantity_used,
            cost_per_unit=self.cost_per_unit,
            total_cost=self.total_cost,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "ProductionLotIngredientModel":
        return cls(
            id=dto.id,
            production_lot_id=dto.production_lot_id,
            material_id=dto.material_id,
            receiving_lot_id=dto.receiving_lot_id,
            quantity_used=dto.quantity_used,
            cost_per_unit=dto.cost_per_unit,
            total_cost=dto.total_cost,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<ProductionLotIngredientModel lot={self.production_lot_id} qty={self.quantity_used}>"


# ---------------------------------------------------------------------------
# OverrunCheckModel
# ---------------------------------------------------------------------------

class OverrunCheckModel(TrackedBase):
    __tablename__ = "mfg_overrun_checks"

    production_lot_id: Mapped[UUID] = mapped_column(
        ForeignKey("mfg_production_lots.id"), nullable=False,
    )
    mix_volume: Mapped[Decimal] = mapped_column(nullable=False)
    density: Mapped[Decimal] = mapped_column(nullable=False)
    target_overrun: Mapped[Decimal] = mapped_column(nullable=False)
    tolerance_percent: Mapped[Decimal] = mapped_column(nullable=False)
    samples: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    average_overrun: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    checked_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    __table_args__ = (
        Index("idx_mfg_overrun_lot", "production_lot_id", "checked_at"),
    )

    def to_dto(self):
        from plant_engines.overrun import OverrunStatus
        from plant_modules.manufacturing.models import OverrunCheck
        return OverrunCheck(
            id=self.id,
            production_lot_id=self.production_lot_id,
            mix_volume=self.mix_volume,
            density=self.density,
            target_overrun=self.target_overrun,
            tolerance_percent=self.tolerance_percent,
            samples=tuple(Decimal(s) for s in self.samples or ()),
            average_overrun=self.average_overrun,
            status=OverrunStatus(self.status) if self.status else None,
            checked_at=self.checked_at,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "OverrunCheckModel":
        return cls(
            id=dto.id,
            production_lot_id=dto.production_lot_id,
            mix_volume=dto.mix_volume,
            density=dto.density,
            target_overrun=dto.target_overrun,
            tolerance_percent=dto.tolerance_percent,
            samples=[str(s) for s in dto.samples],
            average_overrun=dto.average_overrun,
            status=_value(dto.status) if dto.status is not None else None,
            checked_at=dto.checked_at,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<OverrunCheckModel lot={self.production_lot_id} avg={self.average_overrun} ({self.status})>"
