"""
Purchasing Module (``plant_modules.purchasing``).

Suppliers, materials, purchase orders, receiving, supplier invoices and
landed cost allocation.  Cost math comes from ``plant_engines.landed_cost``.
"""

from plant_modules.purchasing.models import (
    PAYMENT_STATUS_LABELS,
    InvoiceAdditionalCost,
    InvoiceTotals,
    LandedCostAllocation,
    Material,
    PaymentStatus,
    PurchaseOrder,
    ReceivingLot,
    ReceivingSession,
    ReceivingStatus,
    Supplier,
    SupplierInvoice,
    SupplierStatusView,
    parse_payment_status,
    payment_status_label,
)

__all__ = [
    "PAYMENT_STATUS_LABELS",
    "InvoiceAdditionalCost",
    "InvoiceTotals",
    "LandedCostAllocation",
    "Material",
    "PaymentStatus",
    "PurchaseOrder",
    "ReceivingLot",
    "ReceivingSession",
    "ReceivingStatus",
    "Supplier",
    "SupplierInvoice",
    "SupplierStatusView",
    "parse_payment_status",
    "payment_status_label",
]
