"""
Manufacturing Module (``plant_modules.manufacturing``).

Production execution (batch setup, ingredient weighing, finishing into a
production lot) and overrun checks.
"""

from plant_modules.manufacturing.models import (
    FinishedRun,
    LotApprovalStatus,
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
)

__all__ = [
    "FinishedRun",
    "LotApprovalStatus",
    "Machine",
    "OverrunCheck",
    "Product",
    "ProductionCostSummary",
    "ProductionLot",
    "ProductionLotIngredient",
    "ProductionLotStatus",
    "ProductionRun",
    "ProductRecipe",
    "ProductStatus",
    "RecipeItem",
    "WeighedIngredient",
]
