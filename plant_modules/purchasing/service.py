"""
Purchasing Module Service (``plant_modules.purchasing.service``).

Responsibility
--------------
Supplier invoices per purchase order, the additional costs billed on them,
and the landed cost calculation that spreads those costs over the receiving
lots of the order.  Also answers "should this supplier be flagged?" for the
screens that pick a supplier.

Architecture position
---------------------
**Modules layer** -- thin glue over ``plant_engines.landed_cost`` and
``plant_engines.supplier_status``.

Invariants enforced
-------------------
* Each mutating method owns the transaction boundary.
* Calculating landed costs deletes the invoice's previous allocations and
  writes the new set in the same transaction.
* Every additional cost is distributed in full (engine guarantee).

Failure modes
-------------
* ``RecordNotFoundError`` -- unknown invoice, cost or supplier.
* ``ValueError`` -- additional cost amount below 0.01, or an unknown cost
  type or allocation method.

Audit relevance
---------------
Landed cost feeds the cost of every production lot that consumes the
material, so each calculation logs the invoice, lot count and total cost
distributed.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from plant_engines.landed_cost import (
    AdditionalCost,
    AllocationMethod,
    CostType,
    LotBasis,
    allocate_landed_costs,
)
from plant_engines.supplier_status import (
    highlight_level,
    should_warn,
    status_label,
    warning_message,
)
from plant_kernel.domain.clock import Clock, SystemClock
from plant_kernel.exceptions import RecordNotFoundError
from plant_kernel.logging_config import get_logger
from plant_modules.purchasing.models import (
    InvoiceAdditionalCost,
    InvoiceTotals,
    LandedCostAllocation,
    ReceivingLot,
    SupplierInvoice,
    SupplierStatusView,
)
from plant_modules.purchasing.orm import (
    InvoiceAdditionalCostModel,
    LandedCostAllocationModel,
    ReceivingLotModel,
    ReceivingSessionModel,
    SupplierInvoiceModel,
    SupplierModel,
)

logger = get_logger("modules.purchasing.service")


class PurchasingService:
    """Invoices, additional costs and landed cost allocation."""

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()

    # =========================================================================
    # Invoices
    # =========================================================================

    def list_invoices(self, purchase_order_id: UUID) -> list[SupplierInvoice]:
        rows = (
            self._session.query(SupplierInvoiceModel)
            .filter(SupplierInvoiceModel.purchase_order_id == purchase_order_id)
            .order_by(SupplierInvoiceModel.invoice_date.desc())
            .all()
        )
        return [row.to_dto() for row in rows]

    def invoice_totals(self, purchase_order_id: UUID) -> InvoiceTotals:
        invoices = self.list_invoices(purchase_order_id)
        return InvoiceTotals(
            invoice_count=len(invoices),
            total_invoiced=sum((inv.total_amount for inv in invoices), Decimal("0")),
            total_paid=sum((inv.amount_paid for inv in invoices), Decimal("0")),
        )

    def _get_invoice(self, invoice_id: UUID) -> SupplierInvoiceModel:
        row = self._session.get(SupplierInvoiceModel, invoice_id)
        if row is None:
            raise RecordNotFoundError("supplier_invoices", str(invoice_id))
        return row

    # =========================================================================
    # Additional costs
    # =========================================================================

    def list_additional_costs(self, invoice_id: UUID) -> list[InvoiceAdditionalCost]:
        rows = (
            self._session.query(InvoiceAdditionalCostModel)
            .filter(InvoiceAdditionalCostModel.invoice_id == invoice_id)
            .order_by(InvoiceAdditionalCostModel.created_at)
            .all()
        )
        return [row.to_dto() for row in rows]

    def total_additional_costs(self, invoice_id: UUID) -> Decimal:
        return sum(
            (cost.amount for cost in self.list_additional_costs(invoice_id)),
            Decimal("0"),
        )

    def add_additional_cost(
        self,
        invoice_id: UUID,
        cost_type: CostType | str,
        amount: Decimal,
        actor_id: UUID,
        allocation_method: AllocationMethod | str = AllocationMethod.PROPORTIONAL,
        description: str | None = None,
    ) -> InvoiceAdditionalCost:
        cost = InvoiceAdditionalCost(
            id=uuid4(),
            invoice_id=invoice_id,
            cost_type=CostType(cost_type),
            amount=Decimal(amount),
            allocation_method=AllocationMethod(allocation_method),
            description=description or None,
        )
        try:
            self._get_invoice(invoice_id)
            self._session.add(InvoiceAdditionalCostModel.from_dto(cost, created_by_id=actor_id))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("additional_cost_added", extra={
            "invoice_id": str(invoice_id),
            "cost_id": str(cost.id),
            "cost_type": cost.cost_type.value,
            "amount": str(cost.amount),
            "allocation_method": cost.allocation_method.value,
        })
        return cost

    def delete_additional_cost(self, cost_id: UUID) -> None:
        try:
            row = self._session.get(InvoiceAdditionalCostModel, cost_id)
            if row is None:
                raise RecordNotFoundError("invoice_additional_costs", str(cost_id))
            self._session.delete(row)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("additional_cost_deleted", extra={"cost_id": str(cost_id)})

    # =========================================================================
    # Landed cost
    # =========================================================================

    def invoice_lots(self, invoice_id: UUID) -> list[ReceivingLot]:
        """Receiving lots taken in against the invoice's purchase order."""
        invoice = self._get_invoice(invoice_id)
        return [row.to_dto() for row in self._invoice_lot_rows(invoice.purchase_order_id)]

    def _invoice_lot_rows(self, purchase_order_id: UUID) -> list[ReceivingLotModel]:
        return (
            self._session.query(ReceivingLotModel)
            .join(ReceivingSessionModel, ReceivingLotModel.receiving_session_id == ReceivingSessionModel.id)
            .filter(ReceivingSessionModel.purchase_order_id == purchase_order_id)
            .order_by(ReceivingLotModel.internal_lot_number)
            .all()
        )

    def calculate_landed_costs(self, invoice_id: UUID, actor_id: UUID) -> list[LandedCostAllocation]:
        """
        Spread the invoice's additional costs over its receiving lots.

        Replaces any allocations from a previous calculation and updates each
        lot's ``cost_per_base_unit``.  An invoice with no lots yields an empty
        list and clears old allocations.
        """
        logger.info("landed_cost_calculation_started", extra={"invoice_id": str(invoice_id)})
        try:
            invoice = self._get_invoice(invoice_id)
            lot_rows = self._invoice_lot_rows(invoice.purchase_order_id)
            costs = [
                AdditionalCost(
                    cost_type=cost.cost_type,
                    amount=cost.amount,
                    allocation_method=cost.allocation_method,
                )
                for cost in self.list_additional_costs(invoice_id)
            ]

            lots_by_id = {str(row.id): row for row in lot_rows}
            bases = []
            for row in lot_rows:
                lot = row.to_dto()
                bases.append(LotBasis(
                    lot_id=str(row.id),
                    material_cost=lot.material_cost,
                    base_quantity=lot.effective_base_quantity,
                ))
            results = allocate_landed_costs(lots=bases, costs=costs)

            (
                self._session.query(LandedCostAllocationModel)
                .filter(LandedCostAllocationModel.invoice_id == invoice_id)
                .delete(synchronize_session=False)
            )

            allocations = []
            for result in results:
                allocation = LandedCostAllocation(
                    id=uuid4(),
                    invoice_id=invoice_id,
                    receiving_lot_id=UUID(result.lot_id),
                    material_cost=result.material_cost,
                    freight_allocated=result.freight_allocated,
                    duty_allocated=result.duty_allocated,
                    other_costs_allocated=result.other_costs_allocated,
                    total_landed_cost=result.total_landed_cost,
                    cost_per_base_unit=result.cost_per_base_unit,
                )
                self._session.add(
                    LandedCostAllocationModel.from_dto(allocation, created_by_id=actor_id),
                )
                lot_row = lots_by_id[result.lot_id]
                lot_row.cost_per_base_unit = result.cost_per_base_unit
                lot_row.updated_by_id = actor_id
                allocations.append(allocation)

            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("landed_cost_calculated", extra={
            "invoice_id": str(invoice_id),
            "lot_count": len(allocations),
            "cost_count": len(costs),
            "distributed": str(sum((c.amount for c in costs), Decimal("0"))),
        })
        return allocations

    def list_allocations(self, invoice_id: UUID) -> list[LandedCostAllocation]:
        rows = (
            self._session.query(LandedCostAllocationModel)
            .filter(LandedCostAllocationModel.invoice_id == invoice_id)
            .all()
        )
        return [row.to_dto() for row in rows]

    # =========================================================================
    # Supplier status
    # =========================================================================

    def supplier_status(self, supplier_id: UUID) -> SupplierStatusView:
        row = self._session.get(SupplierModel, supplier_id)
        if row is None:
            raise RecordNotFoundError("suppliers", str(supplier_id))
        warn = should_warn(row.approval_status)
        return SupplierStatusView(
            supplier_id=row.id,
            name=row.name,
            status=row.approval_status,
            label=status_label(row.approval_status),
            highlight=highlight_level(row.approval_status),
            warn=warn,
            warning_message=warning_message(row.name) if warn else None,
        )
