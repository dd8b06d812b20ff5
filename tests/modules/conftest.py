"""
Shared fixtures for module tests.

Provides the parent rows module services read and write against: a supplier
with a purchase order, a completed receiving session and two lots, a supplier
invoice, an approved product with recipe and machine, an employee, and a
production lot.

All IDs are deterministic so tests can import and use them directly.

Every fixture is opt-in, there is no autouse.  Fixtures commit rather than
flush: a service that fails rolls the session back, and parent rows must
survive that.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

import pytest

from plant_modules.hr.models import Department, Employee
from plant_modules.hr.orm import DepartmentModel, EmployeeModel
from plant_modules.manufacturing.models import (
    Machine,
    Product,
    ProductionLot,
    ProductRecipe,
    ProductStatus,
    RecipeItem,
)
from plant_modules.manufacturing.orm import (
    MachineModel,
    ProductionLotModel,
    ProductModel,
    RecipeItemModel,
    RecipeModel,
)
from plant_modules.purchasing.models import (
    Material,
    PurchaseOrder,
    ReceivingLot,
    ReceivingSession,
    ReceivingStatus,
    Supplier,
    SupplierInvoice,
)
from plant_modules.purchasing.orm import (
    MaterialModel,
    PurchaseOrderModel,
    ReceivingLotModel,
    ReceivingSessionModel,
    SupplierInvoiceModel,
    SupplierModel,
)

# ---------------------------------------------------------------------------
# Deterministic parent entity IDs
# ---------------------------------------------------------------------------

TEST_SUPPLIER_ID = UUID("00000000-0000-4000-a000-000000000001")
TEST_MATERIAL_ID = UUID("00000000-0000-4000-a000-000000000002")
TEST_PO_ID = UUID("00000000-0000-4000-a000-000000000003")
TEST_RECEIVING_SESSION_ID = UUID("00000000-0000-4000-a000-000000000004")
TEST_LOT_A_ID = UUID("00000000-0000-4000-a000-000000000005")
TEST_LOT_B_ID = UUID("00000000-0000-4000-a000-000000000006")
TEST_INVOICE_ID = UUID("00000000-0000-4000-a000-000000000007")
TEST_PRODUCT_ID = UUID("00000000-0000-4000-a000-000000000010")
TEST_RECIPE_ID = UUID("00000000-0000-4000-a000-000000000011")
TEST_RECIPE_ITEM_ID = UUID("00000000-0000-4000-a000-000000000012")
TEST_MACHINE_ID = UUID("00000000-0000-4000-a000-000000000013")
TEST_PRODUCTION_LOT_ID = UUID("00000000-0000-4000-a000-000000000014")
TEST_DEPARTMENT_ID = UUID("00000000-0000-4000-a000-000000000020")
TEST_EMPLOYEE_ID = UUID("00000000-0000-4000-a000-000000000021")

TEST_BUSINESS_DATE = date(2024, 1, 15)


def _save(session, row):
    session.add(row)
    session.commit()
    return row


# ---------------------------------------------------------------------------
# Purchasing parents
# ---------------------------------------------------------------------------


@pytest.fixture
def test_supplier(session, test_actor_id) -> Supplier:
    supplier = Supplier(
        id=TEST_SUPPLIER_ID,
        code="SWEET",
        name="Sweet Co",
        approval_status="approved",
    )
    _save(session, SupplierModel.from_dto(supplier, created_by_id=test_actor_id))
    return supplier


@pytest.fixture
def test_material(session, test_actor_id) -> Material:
    material = Material(
        id=TEST_MATERIAL_ID,
        code="SUG-01",
        name="Cane Sugar",
        usage_unit_code="kg",
        allergens=("milk",),
        box_length_in=Decimal("12"),
        box_width_in=Decimal("10"),
        box_height_in=Decimal("8"),
    )
    _save(session, MaterialModel.from_dto(material, created_by_id=test_actor_id))
    return material


@pytest.fixture
def test_purchase_order(session, test_actor_id, test_supplier) -> PurchaseOrder:
    po = PurchaseOrder(
        id=TEST_PO_ID,
        po_number="PO-1001",
        supplier_id=TEST_SUPPLIER_ID,
        order_date=date(2024, 1, 2),
    )
    _save(session, PurchaseOrderModel.from_dto(po, created_by_id=test_actor_id))
    return po


@pytest.fixture
def test_receiving_session(session, test_actor_id, test_purchase_order) -> ReceivingSession:
    receiving = ReceivingSession(
        id=TEST_RECEIVING_SESSION_ID,
        receiving_number="RCV-0001",
        purchase_order_id=TEST_PO_ID,
        received_date=TEST_BUSINESS_DATE,
        status=ReceivingStatus.COMPLETED,
    )
    _save(session, ReceivingSessionModel.from_dto(receiving, created_by_id=test_actor_id))
    return receiving


@pytest.fixture
def test_receiving_lots(
    session, test_actor_id, test_material, test_receiving_session,
) -> tuple[ReceivingLot, ReceivingLot]:
    """
    Two lots of the test material on the test purchase order.

    Lot A: 10 kg at 30.00 (material cost 300, base quantity defaults to 10).
    Lot B: 20 kg at 35.00 (material cost 700, base quantity 30).
    """
    lot_a = ReceivingLot(
        id=TEST_LOT_A_ID,
        receiving_session_id=TEST_RECEIVING_SESSION_ID,
        material_id=TEST_MATERIAL_ID,
        internal_lot_number="RL-0001",
        quantity_received=Decimal("10"),
        unit_cost=Decimal("30"),
        unit_code="kg",
        expiry_date=date(2024, 6, 30),
        received_date=TEST_BUSINESS_DATE,
        location_name="Dry Store",
    )
    lot_b = ReceivingLot(
        id=TEST_LOT_B_ID,
        receiving_session_id=TEST_RECEIVING_SESSION_ID,
        material_id=TEST_MATERIAL_ID,
        internal_lot_number="RL-0002",
        quantity_received=Decimal("20"),
        unit_cost=Decimal("35"),
        base_quantity=Decimal("30"),
        unit_code="kg",
        expiry_date=date(2024, 3, 31),
        received_date=TEST_BUSINESS_DATE,
    )
    for lot in (lot_a, lot_b):
        session.add(ReceivingLotModel.from_dto(lot, created_by_id=test_actor_id))
    session.commit()
    return lot_a, lot_b


@pytest.fixture
def test_invoice(session, test_actor_id, test_purchase_order) -> SupplierInvoice:
    invoice = SupplierInvoice(
        id=TEST_INVOICE_ID,
        purchase_order_id=TEST_PO_ID,
        invoice_number="INV-7001",
        invoice_date=date(2024, 1, 10),
        total_amount=Decimal("1150.00"),
        amount_paid=Decimal("500.00"),
    )
    _save(session, SupplierInvoiceModel.from_dto(invoice, created_by_id=test_actor_id))
    return invoice


# ---------------------------------------------------------------------------
# Manufacturing parents
# ---------------------------------------------------------------------------


@pytest.fixture
def test_product(session, test_actor_id, test_material) -> Product:
    product = Product(
        id=TEST_PRODUCT_ID,
        sku="VAN",
        name="Vanilla Bean",
        status=ProductStatus.APPROVED,
        upc="036000291452",
        case_pack_size=12,
        case_material_id=TEST_MATERIAL_ID,
        shelf_life_days=365,
    )
    _save(session, ProductModel.from_dto(product, created_by_id=test_actor_id))
    return product


@pytest.fixture
def test_recipe(session, test_actor_id, test_product, test_material) -> ProductRecipe:
    """Default recipe: 100 units per batch using 5 kg of the test material."""
    recipe = ProductRecipe(
        id=TEST_RECIPE_ID,
        product_id=TEST_PRODUCT_ID,
        name="Standard Vanilla",
        batch_size=Decimal("100"),
        batch_unit_code="pint",
        is_default=True,
    )
    item = RecipeItem(
        id=TEST_RECIPE_ITEM_ID,
        recipe_id=TEST_RECIPE_ID,
        material_id=TEST_MATERIAL_ID,
        material_name="Cane Sugar",
        quantity=Decimal("5"),
        unit_code="kg",
    )
    session.add(RecipeModel.from_dto(recipe, created_by_id=test_actor_id))
    session.flush()
    session.add(RecipeItemModel.from_dto(item, created_by_id=test_actor_id))
    session.commit()
    return recipe


@pytest.fixture
def test_machine(session, test_actor_id) -> Machine:
    machine = Machine(
        id=TEST_MACHINE_ID,
        code="FRZ-1",
        name="Continuous Freezer 1",
        hourly_rate=Decimal("50"),
    )
    _save(session, MachineModel.from_dto(machine, created_by_id=test_actor_id))
    return machine


@pytest.fixture
def test_production_lot(session, test_actor_id, test_product, test_machine) -> ProductionLot:
    lot = ProductionLot(
        id=TEST_PRODUCTION_LOT_ID,
        lot_number="VAN-20240115-01",
        product_id=TEST_PRODUCT_ID,
        production_date=TEST_BUSINESS_DATE,
        quantity_produced=Decimal("100"),
        machine_id=TEST_MACHINE_ID,
        expiry_date=date(2025, 1, 14),
    )
    _save(session, ProductionLotModel.from_dto(lot, created_by_id=test_actor_id))
    return lot


# ---------------------------------------------------------------------------
# HR parents
# ---------------------------------------------------------------------------


@pytest.fixture
def test_employee(session, test_actor_id) -> Employee:
    department = Department(id=TEST_DEPARTMENT_ID, name="Production")
    employee = Employee(
        id=TEST_EMPLOYEE_ID,
        employee_number="E123",
        first_name="Jordan",
        last_name="Smith",
        hourly_rate=Decimal("20"),
        department_id=TEST_DEPARTMENT_ID,
        hire_date=date(2023, 5, 1),
    )
    session.add(DepartmentModel.from_dto(department, created_by_id=test_actor_id))
    session.add(EmployeeModel.from_dto(employee, created_by_id=test_actor_id))
    session.commit()
    return employee
