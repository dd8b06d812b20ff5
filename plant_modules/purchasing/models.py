"""
Purchasing Domain Models (``plant_modules.purchasing.models``).

Responsibility
--------------
Frozen dataclass value objects for suppliers, materials, purchase orders,
receiving sessions and lots, supplier invoices, invoice additional costs and
the landed cost allocations computed from them.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* An additional cost amount is at least 0.01.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from plant_engines.landed_cost import AllocationMethod, CostType
from plant_engines.supplier_status import HighlightLevel

MIN_ADDITIONAL_COST = Decimal("0.01")


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"


PAYMENT_STATUS_LABELS: dict[str, str] = {
    PaymentStatus.PENDING.value: "Pending",
    PaymentStatus.PARTIAL.value: "Partial",
    PaymentStatus.PAID.value: "Paid",
    PaymentStatus.OVERDUE.value: "Overdue",
}


def payment_status_label(status: str | None) -> str:
    """Human label; anything unrecognized reads as Pending."""
    return PAYMENT_STATUS_LABELS.get(status or "", PAYMENT_STATUS_LABELS["pending"])


def parse_payment_status(value: str | None) -> PaymentStatus:
    """Stored status as an enum; unrecognized values are treated as pending."""
    try:
        return PaymentStatus(value)
    except ValueError:
        return PaymentStatus.PENDING


class ReceivingStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Supplier:
    id: UUID
    code: str
    name: str
    approval_status: str = "draft"


@dataclass(frozen=True)
class SupplierStatusView:
    """Everything a screen needs to flag a supplier."""
    supplier_id: UUID
    name: str
    status: str | None
    label: str
    highlight: HighlightLevel
    warn: bool
    warning_message: str | None


@dataclass(frozen=True)
class Material:
    """A purchased ingredient or packaging material."""
    id: UUID
    code: str
    name: str
    usage_unit_code: str | None = None
    allergens: tuple[str, ...] = ()
    box_length_in: Decimal | None = None
    box_width_in: Decimal | None = None
    box_height_in: Decimal | None = None
    is_active: bool = True


@dataclass(frozen=True)
class PurchaseOrder:
    id: UUID
    po_number: str
    supplier_id: UUID
    order_date: date
    status: str = "open"


@dataclass(frozen=True)
class ReceivingSession:
    id: UUID
    receiving_number: str
    purchase_order_id: UUID | None
    received_date: date
    status: ReceivingStatus = ReceivingStatus.OPEN


@dataclass(frozen=True)
class ReceivingLot:
    """One lot of material taken in during a receiving session."""
    id: UUID
    receiving_session_id: UUID
    material_id: UUID
    internal_lot_number: str
    quantity_received: Decimal
    unit_cost: Decimal = Decimal("0")
    base_quantity: Decimal | None = None
    unit_code: str | None = None
    supplier_lot_number: str | None = None
    expiry_date: date | None = None
    received_date: date | None = None
    location_name: str | None = None
    cost_per_base_unit: Decimal | None = None

    @property
    def material_cost(self) -> Decimal:
        return self.quantity_received * self.unit_cost

    @property
    def effective_base_quantity(self) -> Decimal:
        return self.base_quantity if self.base_quantity is not None else self.quantity_received


@dataclass(frozen=True)
class SupplierInvoice:
    id: UUID
    purchase_order_id: UUID
    invoice_number: str
    invoice_date: date
    total_amount: Decimal = Decimal("0")
    amount_paid: Decimal = Decimal("0")
    due_date: date | None = None
    payment_status: PaymentStatus = PaymentStatus.PENDING

    @property
    def status_label(self) -> str:
        return payment_status_label(self.payment_status.value)


@dataclass(frozen=True)
class InvoiceTotals:
    invoice_count: int
    total_invoiced: Decimal
    total_paid: Decimal

    @property
    def outstanding(self) -> Decimal:
        return self.total_invoiced - self.total_paid


@dataclass(frozen=True)
class InvoiceAdditionalCost:
    """Freight, duty and other charges billed on a supplier invoice."""
    id: UUID
    invoice_id: UUID
    cost_type: CostType
    amount: Decimal
    allocation_method: AllocationMethod = AllocationMethod.PROPORTIONAL
    description: str | None = None

    def __post_init__(self):
        if self.amount < MIN_ADDITIONAL_COST:
            raise ValueError("Amount must be greater than 0")


@dataclass(frozen=True)
class LandedCostAllocation:
    id: UUID
    invoice_id: UUID
    receiving_lot_id: UUID
    material_cost: Decimal
    freight_allocated: Decimal
    duty_allocated: Decimal
    other_costs_allocated: Decimal
    total_landed_cost: Decimal
    cost_per_base_unit: Decimal
