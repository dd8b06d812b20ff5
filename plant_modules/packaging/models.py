"""
Packaging Domain Models (``plant_modules.packaging.models``).

Packaging indicator mappings (case pack size -> GTIN-14 indicator digit),
case codes built from them, and pallet recommendations for a box material.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from plant_engines.gtin import validate_indicator_digit
from plant_engines.pallet import PalletOption, PalletType


@dataclass(frozen=True)
class PackagingIndicatorMapping:
    id: UUID
    case_pack_size: int
    indicator_digit: str
    description: str | None = None

    def __post_init__(self):
        if self.case_pack_size < 1:
            raise ValueError("case_pack_size must be at least 1")
        validate_indicator_digit(self.indicator_digit)


@dataclass(frozen=True)
class CaseCode:
    product_id: UUID
    case_pack_size: int | None
    indicator_digit: str
    unit_gtin: str
    gtin14: str


@dataclass(frozen=True)
class PalletRecommendation:
    material_id: UUID
    pallet_type: PalletType
    box_length_in: Decimal | None
    box_width_in: Decimal | None
    options: tuple[PalletOption, ...]
