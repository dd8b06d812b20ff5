"""
Operations Domain Models (``plant_modules.operations.models``).

End-of-day close: the open transactions that block closing a business date,
and the record written when a date is closed.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from uuid import UUID

BLOCKER_PREVIEW_LIMIT = 5


class BillOfLadingStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class BlockerKind(str, Enum):
    RECEIVING_SESSIONS = "receiving_sessions"
    PRODUCTION_LOTS = "production_lots"
    BILLS_OF_LADING = "bills_of_lading"


@dataclass(frozen=True)
class BillOfLading:
    id: UUID
    bol_number: str
    ship_date: date
    status: BillOfLadingStatus = BillOfLadingStatus.DRAFT


@dataclass(frozen=True)
class BlockerItem:
    id: UUID
    number: str
    status: str


@dataclass(frozen=True)
class BlockerPreview:
    items: tuple[BlockerItem, ...]
    overflow: int

    @property
    def overflow_label(self) -> str | None:
        return f"+{self.overflow} more" if self.overflow else None


@dataclass(frozen=True)
class DayCloseBlockers:
    business_date: date
    receiving_sessions: tuple[BlockerItem, ...] = ()
    production_lots: tuple[BlockerItem, ...] = ()
    bills_of_lading: tuple[BlockerItem, ...] = ()

    @property
    def total_blockers(self) -> int:
        return len(self.receiving_sessions) + len(self.production_lots) + len(self.bills_of_lading)

    @property
    def can_close(self) -> bool:
        return self.total_blockers == 0

    def preview(self, kind: BlockerKind | str, limit: int = BLOCKER_PREVIEW_LIMIT) -> BlockerPreview:
        """First ``limit`` blockers of one kind plus how many were left out."""
        items = getattr(self, BlockerKind(kind).value)
        return BlockerPreview(items=items[:limit], overflow=max(0, len(items) - limit))


@dataclass(frozen=True)
class DayClose:
    id: UUID
    business_date: date
    closed_at: datetime
    closed_by: UUID
    notes: str | None = None
