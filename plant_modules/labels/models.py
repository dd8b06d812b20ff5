"""
Labels Domain Models (``plant_modules.labels.models``).

Label templates (size plus positioned elements) per lot type, and the
rendered print job.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any
from uuid import UUID

from plant_engines.labels import LabelLayout, LotType


@dataclass(frozen=True)
class LabelTemplate:
    id: UUID
    name: str
    lot_type: LotType
    width_inches: Decimal
    height_inches: Decimal
    fields_config: tuple[dict[str, Any], ...] = ()
    is_default: bool = False
    is_active: bool = True

    def __post_init__(self):
        if self.width_inches <= 0 or self.height_inches <= 0:
            raise ValueError("Label dimensions must be positive")

    def layout(self) -> LabelLayout:
        return LabelLayout.from_config(self.width_inches, self.height_inches, self.fields_config)


@dataclass(frozen=True)
class PrintJob:
    template_id: UUID
    lot_type: LotType
    lot_id: UUID
    copies: int
    fields: dict[str, str]
    html: str
