"""End-of-day close and shipping documents."""

from plant_modules.operations.models import (
    BillOfLading,
    BillOfLadingStatus,
    BlockerItem,
    BlockerKind,
    BlockerPreview,
    DayClose,
    DayCloseBlockers,
)

__all__ = [
    "BillOfLading",
    "BillOfLadingStatus",
    "BlockerItem",
    "BlockerKind",
    "BlockerPreview",
    "DayClose",
    "DayCloseBlockers",
]
