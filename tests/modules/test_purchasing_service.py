"""
Tests for the purchasing service.

Covers:
- Invoice listing and totals
- Additional cost validation and persistence
- Landed cost calculation over an invoice's receiving lots
- Supplier status flags
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from plant_engines.landed_cost import AllocationMethod, CostType
from plant_engines.supplier_status import HighlightLevel
from plant_kernel.exceptions import RecordNotFoundError
from plant_modules.purchasing.models import PaymentStatus, parse_payment_status, payment_status_label
from plant_modules.purchasing.orm import ReceivingLotModel, SupplierInvoiceModel, SupplierModel
from plant_modules.purchasing.service import PurchasingService
from tests.modules.conftest import (
    TEST_INVOICE_ID,
    TEST_LOT_A_ID,
    TEST_LOT_B_ID,
    TEST_PO_ID,
    TEST_SUPPLIER_ID,
)


@pytest.fixture
def purchasing_service(session, deterministic_clock):
    return PurchasingService(session, clock=deterministic_clock)


# =============================================================================
# Invoices
# =============================================================================


class TestInvoices:

    def test_list_and_totals(self, purchasing_service, test_invoice):
        invoices = purchasing_service.list_invoices(TEST_PO_ID)
        totals = purchasing_service.invoice_totals(TEST_PO_ID)

        assert [i.invoice_number for i in invoices] == ["INV-7001"]
        assert totals.invoice_count == 1
        assert totals.total_invoiced == Decimal("1150.00")
        assert totals.outstanding == Decimal("650.00")

    def test_no_invoices(self, purchasing_service, test_purchase_order):
        totals = purchasing_service.invoice_totals(TEST_PO_ID)

        assert totals.invoice_count == 0
        assert totals.outstanding == Decimal("0")

    @pytest.mark.parametrize(
        "status,label",
        [("paid", "Paid"), ("partial", "Partial"), ("overdue", "Overdue"), ("bogus", "Pending"), (None, "Pending")],
    )
    def test_payment_status_label(self, status, label):
        assert payment_status_label(status) == label

    def test_invoice_status_label(self, purchasing_service, test_invoice):
        invoice = purchasing_service.list_invoices(TEST_PO_ID)[0]

        assert invoice.payment_status is PaymentStatus.PENDING
        assert invoice.status_label == "Pending"

    def test_unknown_stored_status_reads_as_pending(self, purchasing_service, session, test_invoice):
        session.get(SupplierInvoiceModel, TEST_INVOICE_ID).payment_status = "disputed"
        session.commit()

        invoice = purchasing_service.list_invoices(TEST_PO_ID)[0]
        totals = purchasing_service.invoice_totals(TEST_PO_ID)

        assert invoice.payment_status is PaymentStatus.PENDING
        assert invoice.status_label == "Pending"
        assert totals.invoice_count == 1

    @pytest.mark.parametrize(
        "stored,expected",
        [("paid", PaymentStatus.PAID), ("disputed", PaymentStatus.PENDING), (None, PaymentStatus.PENDING)],
    )
    def test_parse_payment_status(self, stored, expected):
        assert parse_payment_status(stored) is expected


# =============================================================================
# Additional costs
# =============================================================================


class TestAdditionalCosts:

    def test_add_and_total(self, purchasing_service, test_invoice, test_actor_id):
        purchasing_service.add_additional_cost(
            TEST_INVOICE_ID, "freight", Decimal("100.00"), actor_id=test_actor_id,
        )
        purchasing_service.add_additional_cost(
            TEST_INVOICE_ID, CostType.DUTY, Decimal("40.00"), actor_id=test_actor_id,
            allocation_method="quantity", description="Import duty",
        )

        costs = purchasing_service.list_additional_costs(TEST_INVOICE_ID)
        assert {c.cost_type for c in costs} == {CostType.FREIGHT, CostType.DUTY}
        assert purchasing_service.total_additional_costs(TEST_INVOICE_ID) == Decimal("140.00")

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("0.001"), Decimal("-5")])
    def test_amount_must_be_positive(self, purchasing_service, test_invoice, test_actor_id, amount):
        with pytest.raises(ValueError, match="greater than 0"):
            purchasing_service.add_additional_cost(
                TEST_INVOICE_ID, "freight", amount, actor_id=test_actor_id,
            )

    def test_unknown_cost_type(self, purchasing_service, test_invoice, test_actor_id):
        with pytest.raises(ValueError):
            purchasing_service.add_additional_cost(
                TEST_INVOICE_ID, "tariff", Decimal("5"), actor_id=test_actor_id,
            )

    def test_missing_invoice(self, purchasing_service, test_actor_id):
        with pytest.raises(RecordNotFoundError):
            purchasing_service.add_additional_cost(
                uuid4(), "freight", Decimal("5"), actor_id=test_actor_id,
            )

    def test_delete(self, purchasing_service, test_invoice, test_actor_id):
        cost = purchasing_service.add_additional_cost(
            TEST_INVOICE_ID, "handling", Decimal("12.00"), actor_id=test_actor_id,
        )

        purchasing_service.delete_additional_cost(cost.id)

        assert purchasing_service.list_additional_costs(TEST_INVOICE_ID) == []

    def test_delete_missing(self, purchasing_service):
        with pytest.raises(RecordNotFoundError):
            purchasing_service.delete_additional_cost(uuid4())


# =============================================================================
# Landed cost
# =============================================================================


class TestLandedCost:

    def _add_costs(self, service, actor_id):
        service.add_additional_cost(TEST_INVOICE_ID, "freight", Decimal("100.00"), actor_id=actor_id)
        service.add_additional_cost(
            TEST_INVOICE_ID, "duty", Decimal("40.00"), actor_id=actor_id,
            allocation_method=AllocationMethod.QUANTITY,
        )

    def test_invoice_lots(self, purchasing_service, test_invoice, test_receiving_lots):
        lots = purchasing_service.invoice_lots(TEST_INVOICE_ID)

        assert [lot.internal_lot_number for lot in lots] == ["RL-0001", "RL-0002"]

    def test_allocates_over_lots(
        self, purchasing_service, session, test_invoice, test_receiving_lots, test_actor_id,
    ):
        self._add_costs(purchasing_service, test_actor_id)

        allocations = purchasing_service.calculate_landed_costs(TEST_INVOICE_ID, actor_id=test_actor_id)

        by_lot = {a.receiving_lot_id: a for a in allocations}
        lot_a, lot_b = by_lot[TEST_LOT_A_ID], by_lot[TEST_LOT_B_ID]
        assert lot_a.material_cost == Decimal("300")
        assert lot_a.freight_allocated == Decimal("30.00")
        assert lot_a.duty_allocated == Decimal("10.00")
        assert lot_a.total_landed_cost == Decimal("340.00")
        assert lot_a.cost_per_base_unit == Decimal("34.0000")
        assert lot_b.total_landed_cost == Decimal("800.00")
        assert lot_b.cost_per_base_unit == Decimal("26.6667")

        assert session.get(ReceivingLotModel, TEST_LOT_B_ID).cost_per_base_unit == Decimal("26.6667")

    def test_recalculation_replaces_allocations(
        self, purchasing_service, test_invoice, test_receiving_lots, test_actor_id,
    ):
        self._add_costs(purchasing_service, test_actor_id)
        purchasing_service.calculate_landed_costs(TEST_INVOICE_ID, actor_id=test_actor_id)
        purchasing_service.add_additional_cost(
            TEST_INVOICE_ID, "other", Decimal("10.00"), actor_id=test_actor_id,
            allocation_method="equal",
        )

        purchasing_service.calculate_landed_costs(TEST_INVOICE_ID, actor_id=test_actor_id)

        stored = purchasing_service.list_allocations(TEST_INVOICE_ID)
        assert len(stored) == 2
        assert sum(a.other_costs_allocated for a in stored) == Decimal("10.00")

    def test_no_lots(self, purchasing_service, test_invoice, test_actor_id):
        assert purchasing_service.calculate_landed_costs(TEST_INVOICE_ID, actor_id=test_actor_id) == []

    def test_logs(self, purchasing_service, test_invoice, test_receiving_lots, test_actor_id, captured_logs):
        purchasing_service.calculate_landed_costs(TEST_INVOICE_ID, actor_id=test_actor_id)

        messages = [r["message"] for r in captured_logs()]
        assert "landed_cost_calculation_started" in messages
        assert "landed_cost_calculated" in messages

    def test_missing_invoice(self, purchasing_service, test_actor_id):
        with pytest.raises(RecordNotFoundError):
            purchasing_service.calculate_landed_costs(uuid4(), actor_id=test_actor_id)


# =============================================================================
# Supplier status
# =============================================================================


class TestSupplierStatus:

    def test_approved(self, purchasing_service, test_supplier):
        view = purchasing_service.supplier_status(TEST_SUPPLIER_ID)

        assert view.label == "Approved"
        assert view.highlight is HighlightLevel.NONE
        assert not view.warn
        assert view.warning_message is None

    def test_probation(self, purchasing_service, session, test_supplier):
        session.get(SupplierModel, TEST_SUPPLIER_ID).approval_status = "probation"
        session.commit()

        view = purchasing_service.supplier_status(TEST_SUPPLIER_ID)

        assert view.highlight is HighlightLevel.AMBER
        assert view.warn
        assert view.warning_message == 'The supplier "Sweet Co" is not approved or is on probation.'

    def test_missing(self, purchasing_service):
        with pytest.raises(RecordNotFoundError):
            purchasing_service.supplier_status(uuid4())
