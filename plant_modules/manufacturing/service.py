"""
Manufacturing Module Service (``plant_modules.manufacturing.service``).

Responsibility
--------------
Drives production execution: lists what can be made (approved products,
their recipes, active machines), builds the weighing steps for a batch,
records each weighed ingredient lot, and on finish writes the production
lot with its ingredient usage and cost.  Overrun samples taken during the
run are stored against the lot.

Architecture position
---------------------
**Modules layer** -- thin glue over ``plant_engines.overrun``.  Ingredient
lots and their unit costs come from the purchasing tables.

Invariants enforced
-------------------
* Labor and machine hours default to the recipe's standard hours when the
  operator leaves them blank.
* ``finish_run`` refuses until every ingredient is weighed and the
  quantity to produce is positive.
* The production lot, its ingredient rows and its material cost are
  written in one transaction.

Failure modes
-------------
* ``ProductionRunNotReadyError`` -- run not started, ingredients pending,
  or nothing to produce.
* ``RecordNotFoundError`` -- unknown product, recipe, machine, recipe item,
  receiving lot or production lot.
* ``RequiredFieldError`` -- weighed quantity missing or not positive.

Audit relevance
---------------
Every finished run logs the lot number, quantity and material cost; the
ingredient rows give lot-level traceability from finished goods back to
receiving lots.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from plant_config.schema import ProductionConfig
from plant_engines.overrun import OverrunSampleSet
from plant_kernel.domain.clock import Clock, SystemClock
from plant_kernel.exceptions import (
    ProductionRunNotReadyError,
    RecordNotFoundError,
    RequiredFieldError,
)
from plant_kernel.logging_config import get_logger
from plant_modules.manufacturing.models import (
    FinishedRun,
    Machine,
    OverrunCheck,
    Product,
    ProductionCostSummary,
    ProductionLot,
    ProductionLotIngredient,
    ProductionLotStatus,
    ProductionRun,
    ProductRecipe,
    ProductStatus,
    RecipeItem,
    WeighedIngredient,
    weigh,
)
from plant_modules.manufacturing.orm import (
    MachineModel,
    OverrunCheckModel,
    ProductionLotIngredientModel,
    ProductionLotModel,
    ProductModel,
    RecipeItemModel,
    RecipeModel,
)
from plant_modules.purchasing.models import ReceivingLot
from plant_modules.purchasing.orm import ReceivingLotModel

logger = get_logger("modules.manufacturing.service")

DEFAULT_RUN_HOURS = Decimal("1")
DEFAULT_UNIT_CODE = "units"


def _first_given(*values: Decimal | None) -> Decimal | None:
    """First value that is not None; zero counts as given."""
    return next((v for v in values if v is not None), None)


class ManufacturingService:
    """Production execution and overrun checks."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: ProductionConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or ProductionConfig()

    # =========================================================================
    # Selection lists
    # =========================================================================

    def list_approved_products(self) -> list[Product]:
        rows = (
            self._session.query(ProductModel)
            .filter(ProductModel.status == ProductStatus.APPROVED.value)
            .order_by(ProductModel.name)
            .all()
        )
        return [row.to_dto() for row in rows]

    def list_recipes(self, product_id: UUID) -> list[ProductRecipe]:
        """Active recipes for a product, the default recipe first."""
        rows = (
            self._session.query(RecipeModel)
            .filter(RecipeModel.product_id == product_id, RecipeModel.is_active.is_(True))
            .order_by(RecipeModel.is_default.desc(), RecipeModel.name)
            .all()
        )
        return [row.to_dto() for row in rows]

    def list_recipe_items(self, recipe_id: UUID) -> list[RecipeItem]:
        rows = (
            self._session.query(RecipeItemModel)
            .filter(RecipeItemModel.recipe_id == recipe_id)
            .order_by(RecipeItemModel.sort_order)
            .all()
        )
        return [row.to_dto() for row in rows]

    def list_active_machines(self) -> list[Machine]:
        rows = (
            self._session.query(MachineModel)
            .filter(MachineModel.is_active.is_(True))
            .order_by(MachineModel.name)
            .all()
        )
        return [row.to_dto() for row in rows]

    def available_lots(self, material_id: UUID) -> list[ReceivingLot]:
        """Receiving lots of a material, soonest expiry first."""
        rows = (
            self._session.query(ReceivingLotModel)
            .filter(ReceivingLotModel.material_id == material_id)
            .order_by(
                ReceivingLotModel.expiry_date.is_(None),
                ReceivingLotModel.expiry_date,
                ReceivingLotModel.internal_lot_number,
            )
            .all()
        )
        return [row.to_dto() for row in rows]

    # =========================================================================
    # Production run
    # =========================================================================

    def start_run(
        self,
        product_id: UUID,
        recipe_id: UUID,
        machine_id: UUID,
        batch_multiplier: int = 1,
        labor_hours: Decimal | None = None,
        machine_hours: Decimal | None = None,
        notes: str = "",
    ) -> ProductionRun:
        """Build one weighing step per recipe item."""
        self._get(ProductModel, product_id, "products")
        self._get(MachineModel, machine_id, "machines")
        recipe = self._get(RecipeModel, recipe_id, "product_recipes").to_dto()

        run = ProductionRun(
            product_id=product_id,
            recipe=recipe,
            machine_id=machine_id,
            batch_multiplier=batch_multiplier,
            labor_hours=_first_given(labor_hours, recipe.standard_labor_hours, DEFAULT_RUN_HOURS),
            machine_hours=_first_given(machine_hours, recipe.standard_machine_hours, DEFAULT_RUN_HOURS),
            notes=notes,
        )
        run.ingredients = [
            WeighedIngredient(
                recipe_item_id=item.id,
                material_id=item.material_id,
                material_name=item.material_name,
                required_quantity=item.quantity * run.batch_multiplier,
                unit_code=item.unit_code or DEFAULT_UNIT_CODE,
            )
            for item in self.list_recipe_items(recipe_id)
        ]
        run.started = True

        logger.info("production_run_started", extra={
            "product_id": str(product_id),
            "recipe_id": str(recipe_id),
            "machine_id": str(machine_id),
            "batch_multiplier": run.batch_multiplier,
            "quantity_to_produce": str(run.quantity_to_produce),
            "ingredient_count": len(run.ingredients),
        })
        return run

    def weigh_ingredient(
        self,
        run: ProductionRun,
        recipe_item_id: UUID,
        receiving_lot_id: UUID,
        weighed_quantity: Decimal | None,
    ) -> WeighedIngredient:
        """Complete one weighing step from the chosen receiving lot."""
        if weighed_quantity is None or weighed_quantity <= 0:
            raise RequiredFieldError("weighed_quantity")

        step = next((i for i in run.ingredients if i.recipe_item_id == recipe_item_id), None)
        if step is None:
            raise RecordNotFoundError("recipe_items", str(recipe_item_id))
        lot = self._get(ReceivingLotModel, receiving_lot_id, "receiving_lots")

        completed = weigh(
            step,
            weighed_quantity=weighed_quantity,
            receiving_lot_id=lot.id,
            lot_number=lot.internal_lot_number,
            cost_per_unit=lot.cost_per_base_unit if lot.cost_per_base_unit is not None else lot.unit_cost,
        )
        run.complete_ingredient(completed)

        logger.info("ingredient_weighed", extra={
            "recipe_item_id": str(recipe_item_id),
            "receiving_lot_id": str(receiving_lot_id),
            "weighed_quantity": str(weighed_quantity),
            "total_cost": str(completed.total_cost),
        })
        return completed

    def cost_summary(self, run: ProductionRun) -> ProductionCostSummary:
        machine = self._get(MachineModel, run.machine_id, "machines")
        machine_cost = machine.hourly_rate * run.machine_hours
        material_cost = run.material_cost
        return ProductionCostSummary(
            material_cost=material_cost,
            machine_cost=machine_cost,
            total_cost=material_cost + machine_cost,
            quantity_produced=run.quantity_to_produce,
        )

    def finish_run(self, run: ProductionRun, actor_id: UUID) -> FinishedRun:
        """Write the production lot and its ingredient usage."""
        if not run.started:
            raise ProductionRunNotReadyError("production has not been started")
        if not run.all_ingredients_completed:
            pending = sum(1 for i in run.ingredients if not i.is_completed)
            raise ProductionRunNotReadyError(f"{pending} ingredient(s) not weighed")
        if run.quantity_to_produce <= 0:
            raise ProductionRunNotReadyError("quantity to produce must be greater than 0")

        logger.info("production_run_finish_started", extra={
            "product_id": str(run.product_id),
            "recipe_id": str(run.recipe.id),
            "quantity_produced": str(run.quantity_to_produce),
        })
        try:
            product = self._get(ProductModel, run.product_id, "products")
            cost = self.cost_summary(run)
            today = self._clock.today()

            lot = ProductionLot(
                id=uuid4(),
                lot_number=self._next_lot_number(product.sku, today),
                product_id=run.product_id,
                production_date=today,
                quantity_produced=run.quantity_to_produce,
                recipe_id=run.recipe.id,
                machine_id=run.machine_id,
                labor_hours=run.labor_hours,
                machine_hours=run.machine_hours,
                material_cost=cost.material_cost,
                expiry_date=(
                    today + timedelta(days=product.shelf_life_days)
                    if product.shelf_life_days else None
                ),
                status=ProductionLotStatus.COMPLETED,
                notes=run.notes or None,
            )
            self._session.add(ProductionLotModel.from_dto(lot, created_by_id=actor_id))
            self._session.flush()

            ingredients = []
            for ing in run.ingredients:
                usage = ProductionLotIngredient(
                    id=uuid4(),
                    production_lot_id=lot.id,
                    material_id=ing.material_id,
                    receiving_lot_id=ing.receiving_lot_id,
                    quantity_used=ing.weighed_quantity,
                    cost_per_unit=ing.cost_per_unit,
                    total_cost=ing.total_cost,
                )
                self._session.add(ProductionLotIngredientModel.from_dto(usage, created_by_id=actor_id))
                ingredients.append(usage)

            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("production_lot_created", extra={
            "production_lot_id": str(lot.id),
            "lot_number": lot.lot_number,
            "quantity_produced": str(lot.quantity_produced),
            "material_cost": str(lot.material_cost),
        })
        return FinishedRun(lot=lot, ingredients=tuple(ingredients), cost=cost)

    def _next_lot_number(self, sku: str, production_date) -> str:
        """``{SKU}-{YYYYMMDD}-{NN}``, numbered per product per day."""
        prefix = f"{sku}-{production_date:%Y%m%d}-"
        count = (
            self._session.query(ProductionLotModel)
            .filter(ProductionLotModel.lot_number.like(f"{prefix}%"))
            .count()
        )
        return f"{prefix}{count + 1:02d}"

    def list_lot_ingredients(self, production_lot_id: UUID) -> list[ProductionLotIngredient]:
        rows = (
            self._session.query(ProductionLotIngredientModel)
            .filter(ProductionLotIngredientModel.production_lot_id == production_lot_id)
            .all()
        )
        return [row.to_dto() for row in rows]

    # =========================================================================
    # Overrun
    # =========================================================================

    def new_overrun_samples(self, mix_volume: Decimal, density: Decimal | None = None) -> OverrunSampleSet:
        """Sample set seeded with the plant's target, tolerance and density."""
        return OverrunSampleSet(
            mix_volume=mix_volume,
            density=density or self._config.default_mix_density,
            target=self._config.target_overrun,
            tolerance_percent=self._config.tolerance_percent,
        )

    def record_overrun_check(
        self,
        production_lot_id: UUID,
        samples: OverrunSampleSet,
        actor_id: UUID,
    ) -> OverrunCheck:
        check = OverrunCheck(
            id=uuid4(),
            production_lot_id=production_lot_id,
            mix_volume=samples.mix_volume,
            density=samples.density,
            target_overrun=samples.target,
            tolerance_percent=samples.tolerance_percent,
            samples=tuple(samples.samples),
            average_overrun=samples.average,
            status=samples.average_status,
            checked_at=self._clock.now(),
        )
        try:
            self._get(ProductionLotModel, production_lot_id, "production_lots")
            self._session.add(OverrunCheckModel.from_dto(check, created_by_id=actor_id))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("overrun_check_recorded", extra={
            "production_lot_id": str(production_lot_id),
            "sample_count": len(check.samples),
            "average_overrun": str(check.average_overrun),
            "status": check.status.value if check.status else None,
        })
        return check

    def list_overrun_checks(self, production_lot_id: UUID) -> list[OverrunCheck]:
        rows = (
            self._session.query(OverrunCheckModel)
            .filter(OverrunCheckModel.production_lot_id == production_lot_id)
            .order_by(OverrunCheckModel.checked_at)
            .all()
        )
        return [row.to_dto() for row in rows]

    def _get(self, model, record_id: UUID, table: str):
        row = self._session.get(model, record_id)
        if row is None:
            raise RecordNotFoundError(table, str(record_id))
        return row
