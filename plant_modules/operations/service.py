"""
Operations Module Service (``plant_modules.operations.service``).

Responsibility
--------------
End-of-day close.  Finds the transactions still open on a business date and
records the close once there are none.

Blockers for a date
-------------------
* Receiving sessions received that day whose status is not completed or
  cancelled.
* Production lots produced that day that are still in progress.
* Bills of lading shipping that day that are not shipped, delivered or
  cancelled.

Failure modes
-------------
* ``FutureDayCloseError`` -- the date is after today.
* ``DayAlreadyClosedError`` -- a close row exists for the date.
* ``DayCloseBlockedError`` -- open transactions remain.

Audit relevance
---------------
Every close attempt logs ``day_close_started`` and either ``day_closed`` or
``day_close_refused`` with the reason.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from plant_kernel.domain.clock import Clock, SystemClock
from plant_kernel.exceptions import (
    DayAlreadyClosedError,
    DayCloseBlockedError,
    FutureDayCloseError,
)
from plant_kernel.logging_config import get_logger
from plant_modules.manufacturing.models import ProductionLotStatus
from plant_modules.manufacturing.orm import ProductionLotModel
from plant_modules.operations.models import (
    BillOfLadingStatus,
    BlockerItem,
    DayClose,
    DayCloseBlockers,
)
from plant_modules.operations.orm import BillOfLadingModel, DayCloseModel
from plant_modules.purchasing.models import ReceivingStatus
from plant_modules.purchasing.orm import ReceivingSessionModel

logger = get_logger("modules.operations.service")

_FINISHED_RECEIVING = (ReceivingStatus.COMPLETED.value, ReceivingStatus.CANCELLED.value)
_FINISHED_BOL = (
    BillOfLadingStatus.SHIPPED.value,
    BillOfLadingStatus.DELIVERED.value,
    BillOfLadingStatus.CANCELLED.value,
)


class OperationsService:
    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()

    def blockers(self, business_date: date) -> DayCloseBlockers:
        sessions = (
            self._session.query(ReceivingSessionModel)
            .filter(
                ReceivingSessionModel.received_date == business_date,
                ReceivingSessionModel.status.notin_(_FINISHED_RECEIVING),
            )
            .order_by(ReceivingSessionModel.receiving_number)
            .all()
        )
        lots = (
            self._session.query(ProductionLotModel)
            .filter(
                ProductionLotModel.production_date == business_date,
                ProductionLotModel.status == ProductionLotStatus.IN_PROGRESS.value,
            )
            .order_by(ProductionLotModel.lot_number)
            .all()
        )
        bols = (
            self._session.query(BillOfLadingModel)
            .filter(
                BillOfLadingModel.ship_date == business_date,
                BillOfLadingModel.status.notin_(_FINISHED_BOL),
            )
            .order_by(BillOfLadingModel.bol_number)
            .all()
        )
        return DayCloseBlockers(
            business_date=business_date,
            receiving_sessions=tuple(BlockerItem(s.id, s.receiving_number, s.status) for s in sessions),
            production_lots=tuple(BlockerItem(lot.id, lot.lot_number, lot.status) for lot in lots),
            bills_of_lading=tuple(BlockerItem(b.id, b.bol_number, b.status) for b in bols),
        )

    def is_closed(self, business_date: date) -> bool:
        return self._find_close(business_date) is not None

    def close_day(self, business_date: date, actor_id: UUID, notes: str | None = None) -> DayClose:
        """
        Close a business date.

        Preconditions are checked in order: not in the future, not already
        closed, no blockers.
        """
        logger.info("day_close_started", extra={
            "business_date": business_date.isoformat(),
            "actor_id": str(actor_id),
        })

        if business_date > self._clock.today():
            logger.warning("day_close_refused", extra={
                "business_date": business_date.isoformat(), "reason": "future_date",
            })
            raise FutureDayCloseError(business_date.isoformat())
        if self.is_closed(business_date):
            logger.warning("day_close_refused", extra={
                "business_date": business_date.isoformat(), "reason": "already_closed",
            })
            raise DayAlreadyClosedError(business_date.isoformat())

        blockers = self.blockers(business_date)
        if not blockers.can_close:
            logger.warning("day_close_refused", extra={
                "business_date": business_date.isoformat(),
                "reason": "blockers",
                "total_blockers": blockers.total_blockers,
            })
            raise DayCloseBlockedError(business_date.isoformat(), blockers.total_blockers)

        row = DayCloseModel(
            id=uuid4(),
            business_date=business_date,
            closed_at=self._clock.now(),
            closed_by=actor_id,
            notes=notes,
            created_by_id=actor_id,
        )
        try:
            self._session.add(row)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("day_closed", extra={
            "business_date": business_date.isoformat(),
            "day_close_id": str(row.id),
        })
        return row.to_dto()

    def _find_close(self, business_date: date) -> DayCloseModel | None:
        return (
            self._session.query(DayCloseModel)
            .filter(DayCloseModel.business_date == business_date)
            .one_or_none()
        )
