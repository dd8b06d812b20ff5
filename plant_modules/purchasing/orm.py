"""
Purchasing ORM Persistence Models (``plant_modules.purchasing.orm``).

Responsibility:
    SQLAlchemy ORM models that persist the DTOs defined in
    ``plant_modules.purchasing.models``.  Each ORM class mirrors a DTO and
    provides ``to_dto()`` / ``from_dto()`` round-trip conversion.

Architecture position:
    **Modules layer** -- persistence companions to the pure DTO models.
    Other areas hold foreign keys into these tables (materials, receiving
    lots), so they are registered first.

Invariants enforced:
    - All monetary fields use Decimal -- NEVER float.
    - Enum fields stored as String(50) containing the enum .value string.
    - One landed cost allocation per (invoice, receiving lot).
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Boolean, Date, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from plant_kernel.db.base import TrackedBase


def _value(enum_or_str):
    return enum_or_str.value if hasattr(enum_or_str, "value") else enum_or_str


# ---------------------------------------------------------------------------
# SupplierModel
# ---------------------------------------------------------------------------

class SupplierModel(TrackedBase):
    __tablename__ = "purchasing_suppliers"

    code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    approval_status: Mapped[str] = mapped_column(String(50), default="draft", nullable=False)

    __table_args__ = (
        UniqueConstraint("code", name="uq_purchasing_supplier_code"),
        Index("idx_purchasing_supplier_status", "approval_status"),
    )

    def to_dto(self):
        from plant_modules.purchasing.models import Supplier
        return Supplier(
            id=self.id,
            code=self.code,
            name=self.name,
            approval_status=self.approval_status,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "SupplierModel":
        return cls(
            id=dto.id,
            code=dto.code,
            name=dto.name,
            approval_status=_value(dto.approval_status),
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<SupplierModel {self.code}: {self.name} ({self.approval_status})>"


# ---------------------------------------------------------------------------
# MaterialModel
# ---------------------------------------------------------------------------

class MaterialModel(TrackedBase):
    """
    ORM model for ``Material``.

    Guarantees:
        - ``allergens`` is a JSON list of names, never NULL.
        - Box dimensions (inches) are only set for case/box materials and
          feed the pallet recommendations.
    """

    __tablename__ = "purchasing_materials"

    code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    usage_unit_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    allergens: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    box_length_in: Mapped[Decimal | None] = mapped_column(nullable=True)
    box_width_in: Mapped[Decimal | None] = mapped_column(nullable=True)
    box_height_in: Mapped[Decimal | None] = mapped_column(nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("code", name="uq_purchasing_material_code"),
    )

    def to_dto(self):
        from plant_modules.purchasing.models import Material
        return Material(
            id=self.id,
            code=self.code,
            name=self.name,
            usage_unit_code=self.usage_unit_code,
            allergens=tuple(self.allergens or ()),
            box_length_in=self.box_length_in,
            box_width_in=self.box_width_in,
            box_height_in=self.box_height_in,
            is_active=self.is_active,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "MaterialModel":
        return cls(
            id=dto.id,
            code=dto.code,
            name=dto.name,
            usage_unit_code=dto.usage_unit_code,
            allergens=list(dto.allergens),
            box_length_in=dto.box_length_in,
            box_width_in=dto.box_width_in,
            box_height_in=dto.box_height_in,
            is_active=dto.is_active,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<MaterialModel {self.code}: {self.name}>"


# ---------------------------------------------------------------------------
# PurchaseOrderModel
# ---------------------------------------------------------------------------

class PurchaseOrderModel(TrackedBase):
    __tablename__ = "purchasing_purchase_orders"

    po_number: Mapped[str] = mapped_column(String(50), nullable=False)
    supplier_id: Mapped[UUID] = mapped_column(ForeignKey("purchasing_suppliers.id"), nullable=False)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="open", nullable=False)

    supplier: Mapped[SupplierModel] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("po_number", name="uq_purchasing_po_number"),
        Index("idx_purchasing_po_supplier", "supplier_id"),
    )

    def to_dto(self):
        from plant_modules.purchasing.models import PurchaseOrder
        return PurchaseOrder(
            id=self.id,
            po_number=self.po_number,
            supplier_id=self.supplier_id,
            order_date=self.order_date,
            status=self.status,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "PurchaseOrderModel":
        return cls(
            id=dto.id,
            po_number=dto.po_number,
            supplier_id=dto.supplier_id,
            order_date=dto.order_date,
            status=dto.status,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<PurchaseOrderModel {self.po_number} ({self.status})>"


# ---------------------------------------------------------------------------
# ReceivingSessionModel
# ---------------------------------------------------------------------------

class ReceivingSessionModel(TrackedBase):
    __tablename__ = "purchasing_receiving_sessions"

    receiving_number: Mapped[str] = mapped_column(String(50), nullable=False)
    purchase_order_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("purchasing_purchase_orders.id"), nullable=True,
    )
    received_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="open", nullable=False)

    __table_args__ = (
        UniqueConstraint("receiving_number", name="uq_purchasing_receiving_number"),
        Index("idx_purchasing_receiving_date_status", "received_date", "status"),
        Index("idx_purchasing_receiving_po", "purchase_order_id"),
    )

    def to_dto(self):
        from plant_modules.purchasing.models import ReceivingSession, ReceivingStatus
        return ReceivingSession(
            id=self.id,
            receiving_number=self.receiving_number,
            purchase_order_id=self.purchase_order_id,
            received_date=self.received_date,
            status=ReceivingStatus(self.status),
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "ReceivingSessionModel":
        return cls(
            id=dto.id,
            receiving_number=dto.receiving_number,
            purchase_order_id=dto.purchase_order_id,
            received_date=dto.received_date,
            status=_value(dto.status),
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<ReceivingSessionModel {self.receiving_number} ({self.status})>"


# ---------------------------------------------------------------------------
# ReceivingLotModel
# ---------------------------------------------------------------------------

class ReceivingLotModel(TrackedBase):
    """
    ORM model for ``ReceivingLot``.

    Guarantees:
        - ``internal_lot_number`` is unique (uq_purchasing_internal_lot).
        - ``cost_per_base_unit`` is rewritten whenever landed costs are
          calculated for an invoice covering the lot.
    """

    __tablename__ = "purchasing_receiving_lots"

    receiving_session_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchasing_receiving_sessions.id"), nullable=False,
    )
    material_id: Mapped[UUID] = mapped_column(ForeignKey("purchasing_materials.id"), nullable=False)
    internal_lot_number: Mapped[str] = mapped_column(String(50), nullable=False)
    supplier_lot_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    quantity_received: Mapped[Decimal] = mapped_column(nullable=False)
    unit_cost: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    base_quantity: Mapped[Decimal | None] = mapped_column(nullable=True)
    unit_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    received_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    location_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    cost_per_base_unit: Mapped[Decimal | None] = mapped_column(nullable=True)

    session: Mapped[ReceivingSessionModel] = relationship(lazy="joined")
    material: Mapped[MaterialModel] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("internal_lot_number", name="uq_purchasing_internal_lot"),
        Index("idx_purchasing_lot_session", "receiving_session_id"),
        Index("idx_purchasing_lot_material", "material_id"),
    )

    def to_dto(self):
        from plant_modules.purchasing.models import ReceivingLot
        return ReceivingLot(
            id=self.id,
            receiving_session_id=self.receiving_session_id,
            material_id=self.material_id,
            internal_lot_number=self.internal_lot_number,
            quantity_received=self.quantity_received,
            unit_cost=self.unit_cost,
            base_quantity=self.base_quantity,
            unit_code=self.unit_code,
            supplier_lot_number=self.supplier_lot_number,
            expiry_date=self.expiry_date,
            received_date=self.received_date,
            location_name=self.location_name,
            cost_per_base_unit=self.cost_per_base_unit,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "ReceivingLotModel":
        return cls(
            id=dto.id,
            receiving_session_id=dto.receiving_session_id,
            material_id=dto.material_id,
            internal_lot_number=dto.internal_lot_number,
            quantity_received=dto.quantity_received,
            unit_cost=dto.unit_cost,
            base_quantity=dto.base_quantity,
            unit_code=dto.unit_code,
            supplier_lot_number=dto.supplier_lot_number,
            expiry_date=dto.expiry_date,
            received_date=dto.received_date,
            location_name=dto.location_name,
            cost_per_base_unit=dto.cost_per_base_unit,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<ReceivingLotModel {self.internal_lot_number}: {self.quantity_received}>"


# ---------------------------------------------------------------------------
# SupplierInvoiceModel
# ---------------------------------------------------------------------------

class SupplierInvoiceModel(TrackedBase):
    __tablename__ = "purchasing_supplier_invoices"

    purchase_order_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchasing_purchase_orders.id"), nullable=False,
    )
    invoice_number: Mapped[str] = mapped_column(String(100), nullable=False)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    total_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    amount_paid: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    payment_status: Mapped[str] = mapped_column(String(50), default="pending", nullable=False)

    __table_args__ = (
        UniqueConstraint("purchase_order_id", "invoice_number", name="uq_purchasing_po_invoice"),
        Index("idx_purchasing_invoice_po", "purchase_order_id"),
    )

    def to_dto(self):
        from plant_modules.purchasing.models import SupplierInvoice, parse_payment_status
        return SupplierInvoice(
            id=self.id,
            purchase_order_id=self.purchase_order_id,
            invoice_number=self.invoice_number,
            invoice_date=self.invoice_date,
            total_amount=self.total_amount,
            amount_paid=self.amount_paid,
            due_date=self.due_date,
            payment_status=parse_payment_status(self.payment_status),
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "SupplierInvoiceModel":
        return cls(
            id=dto.id,
            purchase_order_id=dto.purchase_order_id,
            invoice_number=dto.invoice_number,
            invoice_date=dto.invoice_date,
            due_date=dto.due_date,
            total_amount=dto.total_amount,
            amount_paid=dto.amount_paid,
            payment_status=_value(dto.payment_status),
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<SupplierInvoiceModel {self.invoice_number}: {self.total_amount} ({self.payment_status})>"


# ---------------------------------------------------------------------------
# InvoiceAdditionalCostModel
# ---------------------------------------------------------------------------

class InvoiceAdditionalCostModel(TrackedBase):
    __tablename__ = "purchasing_invoice_additional_costs"

    invoice_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchasing_supplier_invoices.id"), nullable=False,
    )
    cost_type: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    allocation_method: Mapped[str] = mapped_column(String(50), default="proportional", nullable=False)

    __table_args__ = (
        Index("idx_purchasing_additional_cost_invoice", "invoice_id"),
    )

    def to_dto(self):
        from plant_engines.landed_cost import AllocationMethod, CostType
        from plant_modules.purchasing.models import InvoiceAdditionalCost
        return InvoiceAdditionalCost(
            id=self.id,
            invoice_id=self.invoice_id,
            cost_type=CostType(self.cost_type),
            amount=self.amount,
            allocation_method=AllocationMethod(self.allocation_method),
            description=self.description,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "InvoiceAdditionalCostModel":
        return cls(
            id=dto.id,
            invoice_id=dto.invoice_id,
            cost_type=_value(dto.cost_type),
            description=dto.description,
            amount=dto.amount,
            allocation_method=_value(dto.allocation_method),
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<InvoiceAdditionalCostModel {self.cost_type}: {self.amount} ({self.allocation_method})>"


# ---------------------------------------------------------------------------
# LandedCostAllocationModel
# ---------------------------------------------------------------------------

class LandedCostAllocationModel(TrackedBase):
    """
    ORM model for ``LandedCostAllocation``.

    Contract:
        Rows for an invoice are replaced wholesale on every calculation;
        they are never edited in place.
    """

    __tablename__ = "purchasing_landed_cost_allocations"

    invoice_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchasing_supplier_invoices.id"), nullable=False,
    )
    receiving_lot_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchasing_receiving_lots.id"), nullable=False,
    )
    material_cost: Mapped[Decimal] = mapped_column(nullable=False)
    freight_allocated: Mapped[Decimal] = mapped_column(nullable=False)
    duty_allocated: Mapped[Decimal] = mapped_column(nullable=False)
    other_costs_allocated: Mapped[Decimal] = mapped_column(nullable=False)
    total_landed_cost: Mapped[Decimal] = mapped_column(nullable=False)
    cost_per_base_unit: Mapped[Decimal] = mapped_column(nullable=False)

    __table_args__ = (
        UniqueConstraint("invoice_id", "receiving_lot_id", name="uq_purchasing_allocation_lot"),
        Index("idx_purchasing_allocation_invoice", "invoice_id"),
    )

    def to_dto(self):
        from plant_modules.purchasing.models import LandedCostAllocation
        return LandedCostAllocation(
            id=self.id,
            invoice_id=self.invoice_id,
            receiving_lot_id=self.receiving_lot_id,
            material_cost=self.material_cost,
            freight_allocated=self.freight_allocated,
            duty_allocated=self.duty_allocated,
            other_costs_allocated=self.other_costs_allocated,
            total_landed_cost=self.total_landed_cost,
            cost_per_base_unit=self.cost_per_base_unit,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "LandedCostAllocationModel":
        return cls(
            id=dto.id,
            invoice_id=dto.invoice_id,
            receiving_lot_id=dto.receiving_lot_id,
            material_cost=dto.material_cost,
            freight_allocated=dto.freight_allocated,
            duty_allocated=dto.duty_allocated,
            other_costs_allocated=dto.other_costs_allocated,
            total_landed_cost=dto.total_landed_cost,
            cost_per_base_unit=dto.cost_per_base_unit,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<LandedCostAllocationModel lot={self.receiving_lot_id} total={self.total_landed_cost}>"
