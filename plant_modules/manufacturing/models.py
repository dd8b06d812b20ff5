"""
Manufacturing Domain Models (``plant_modules.manufacturing.models``).

Responsibility
--------------
Products, recipes, machines, the in-progress production run a line operator
works through, the production lots it produces and the overrun checks taken
on those lots.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  ``ProductionRun``
is the one mutable object: it holds screen state between weighing steps and
is only persisted when the run is finished.

Invariants enforced
-------------------
* Quantity to produce = recipe batch size x batch multiplier (multiplier >= 1).
* A run can finish only when every ingredient is weighed and the quantity
  to produce is positive.
* All quantities and costs use ``Decimal``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from uuid import UUID

from plant_engines.overrun import OverrunStatus

_CENT = Decimal("0.01")
_UNIT_COST_PLACES = Decimal("0.0001")


class ProductStatus(str, Enum):
    DRAFT = "draft"
    APPROVED = "approved"
    DISCONTINUED = "discontinued"


class ProductionLotStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class LotApprovalStatus(str, Enum):
    PENDING_QA = "pending_qa"
    APPROVED = "approved"
    ON_HOLD = "on_hold"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Product:
    id: UUID
    sku: str
    name: str
    status: ProductStatus = ProductStatus.DRAFT
    upc: str | None = None
    case_pack_size: int | None = None
    case_material_id: UUID | None = None
    shelf_life_days: int | None = None


@dataclass(frozen=True)
class ProductRecipe:
    id: UUID
    product_id: UUID
    name: str
    batch_size: Decimal
    batch_unit_code: str | None = None
    is_default: bool = False
    is_active: bool = True
    standard_labor_hours: Decimal | None = None
    standard_machine_hours: Decimal | None = None


@dataclass(frozen=True)
class RecipeItem:
    id: UUID
    recipe_id: UUID
    material_id: UUID
    material_name: str
    quantity: Decimal
    unit_code: str | None = None
    sort_order: int = 0


@dataclass(frozen=True)
class Machine:
    id: UUID
    code: str
    name: str
    hourly_rate: Decimal = Decimal("0")
    is_active: bool = True


@dataclass(frozen=True)
class WeighedIngredient:
    """One weighing step of a production run."""
    recipe_item_id: UUID
    material_id: UUID
    material_name: str
    required_quantity: Decimal
    unit_code: str
    weighed_quantity: Decimal = Decimal("0")
    receiving_lot_id: UUID | None = None
    lot_number: str = ""
    cost_per_unit: Decimal = Decimal("0")
    total_cost: Decimal = Decimal("0")
    is_completed: bool = False


@dataclass
class ProductionRun:
    """
    Screen state for one batch.

    Changing the product or recipe resets the run; starting it builds one
    weighing step per recipe item.
    """

    product_id: UUID
    recipe: ProductRecipe
    machine_id: UUID
    batch_multiplier: int = 1
    labor_hours: Decimal = Decimal("1")
    machine_hours: Decimal = Decimal("1")
    notes: str = ""
    ingredients: list[WeighedIngredient] = field(default_factory=list)
    current_step: int = 0
    started: bool = False

    def __post_init__(self):
        if self.batch_multiplier < 1:
            self.batch_multiplier = 1

    @property
    def quantity_to_produce(self) -> Decimal:
        return (self.recipe.batch_size or Decimal("0")) * self.batch_multiplier

    @property
    def all_ingredients_completed(self) -> bool:
        return all(ing.is_completed for ing in self.ingredients)

    @property
    def can_finish(self) -> bool:
        return self.started and self.all_ingredients_completed and self.quantity_to_produce > 0

    @property
    def material_cost(self) -> Decimal:
        return sum((ing.total_cost for ing in self.ingredients), Decimal("0"))

    def complete_ingredient(self, completed: WeighedIngredient) -> None:
        """Replace the matching step and move to the next one."""
        self.ingredients = [
            completed if ing.recipe_item_id == completed.recipe_item_id else ing
            for ing in self.ingredients
        ]
        if self.current_step < len(self.ingredients) - 1:
            self.current_step += 1


def weigh(
    ingredient: WeighedIngredient,
    weighed_quantity: Decimal,
    receiving_lot_id: UUID,
    lot_number: str,
    cost_per_unit: Decimal,
) -> WeighedIngredient:
    """A completed copy of ``ingredient`` with its lot and cost filled in."""
    return replace(
        ingredient,
        weighed_quantity=weighed_quantity,
        receiving_lot_id=receiving_lot_id,
        lot_number=lot_number,
        cost_per_unit=cost_per_unit,
        total_cost=(weighed_quantity * cost_per_unit).quantize(_CENT, rounding=ROUND_HALF_UP),
        is_completed=True,
    )


@dataclass(frozen=True)
class ProductionLot:
    id: UUID
    lot_number: str
    product_id: UUID
    production_date: date
    quantity_produced: Decimal
    recipe_id: UUID | None = None
    machine_id: UUID | None = None
    labor_hours: Decimal = Decimal("0")
    machine_hours: Decimal = Decimal("0")
    material_cost: Decimal = Decimal("0")
    expiry_date: date | None = None
    status: ProductionLotStatus = ProductionLotStatus.COMPLETED
    production_stage: str = "finished"
    approval_status: LotApprovalStatus = LotApprovalStatus.PENDING_QA
    notes: str | None = None


@dataclass(frozen=True)
class ProductionLotIngredient:
    id: UUID
    production_lot_id: UUID
    material_id: UUID
    receiving_lot_id: UUID
    quantity_used: Decimal
    cost_per_unit: Decimal
    total_cost: Decimal


@dataclass(frozen=True)
class ProductionCostSummary:
    material_cost: Decimal
    machine_cost: Decimal
    total_cost: Decimal
    quantity_produced: Decimal

    @property
    def cost_per_unit(self) -> Decimal:
        if self.quantity_produced <= 0:
            return Decimal("0")
        return (self.total_cost / self.quantity_produced).quantize(
            _UNIT_COST_PLACES, rounding=ROUND_HALF_UP,
        )


@dataclass(frozen=True)
class FinishedRun:
    lot: ProductionLot
    ingredients: tuple[ProductionLotIngredient, ...]
    cost: ProductionCostSummary


@dataclass(frozen=True)
class OverrunCheck:
    id: UUID
    production_lot_id: UUID
    mix_volume: Decimal
    density: Decimal
    target_overrun: Decimal
    tolerance_percent: Decimal
    samples: tuple[Decimal, ...]
    average_overrun: Decimal
    status: OverrunStatus | None
    checked_at: datetime
