"""
Labels Module Service (``plant_modules.labels.service``).

Responsibility
--------------
Loads label templates and lot data, then renders a printable HTML document
through ``plant_engines.labels``.

Failure modes
-------------
* ``RecordNotFoundError`` -- unknown template or lot.
* A template for the other lot type is rejected with ``ValueError``.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from plant_config.schema import LabelsConfig
from plant_engines.labels import (
    LotType,
    ProductionLotLabelData,
    ReceivingLotLabelData,
    render_print_document,
)
from plant_kernel.domain.clock import Clock, SystemClock
from plant_kernel.exceptions import RecordNotFoundError
from plant_kernel.logging_config import get_logger
from plant_modules.labels.models import LabelTemplate, PrintJob
from plant_modules.labels.orm import LabelTemplateModel
from plant_modules.manufacturing.orm import ProductionLotModel
from plant_modules.purchasing.orm import PurchaseOrderModel, ReceivingLotModel

logger = get_logger("modules.labels.service")


class LabelService:
    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: LabelsConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or LabelsConfig()

    def templates_for(self, lot_type: LotType | str) -> list[LabelTemplate]:
        """Active templates for a lot type, default first."""
        rows = (
            self._session.query(LabelTemplateModel)
            .filter(
                LabelTemplateModel.lot_type == LotType(lot_type).value,
                LabelTemplateModel.is_active.is_(True),
            )
            .order_by(LabelTemplateModel.is_default.desc(), LabelTemplateModel.name)
            .all()
        )
        return [row.to_dto() for row in rows]

    def default_template(self, lot_type: LotType | str) -> LabelTemplate | None:
        templates = self.templates_for(lot_type)
        for template in templates:
            if template.is_default:
                return template
        return templates[0] if templates else None

    def create_template(self, template: LabelTemplate, actor_id: UUID) -> LabelTemplate:
        try:
            self._session.add(LabelTemplateModel.from_dto(template, created_by_id=actor_id))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("label_template_created", extra={
            "template_id": str(template.id),
            "lot_type": LotType(template.lot_type).value,
        })
        return template

    # -------------------------------------------------------------------------
    # Lot data
    # -------------------------------------------------------------------------

    def receiving_lot_data(self, lot_id: UUID) -> ReceivingLotLabelData:
        lot = self._session.get(ReceivingLotModel, lot_id)
        if lot is None:
            raise RecordNotFoundError("receiving_lots", str(lot_id))

        supplier_name = None
        if lot.session is not None and lot.session.purchase_order_id is not None:
            order = self._session.get(PurchaseOrderModel, lot.session.purchase_order_id)
            if order is not None and order.supplier is not None:
                supplier_name = order.supplier.name

        material = lot.material
        return ReceivingLotLabelData(
            internal_lot_number=lot.internal_lot_number,
            material_name=material.name if material else None,
            material_code=material.code if material else None,
            allergens=tuple(material.allergens or ()) if material else (),
            supplier_name=supplier_name,
            quantity_received=lot.quantity_received,
            unit_code=lot.unit_code,
            expiry_date=lot.expiry_date,
            received_date=lot.received_date,
            location_name=lot.location_name,
        )

    def production_lot_data(self, lot_id: UUID) -> ProductionLotLabelData:
        lot = self._session.get(ProductionLotModel, lot_id)
        if lot is None:
            raise RecordNotFoundError("production_lots", str(lot_id))
        return ProductionLotLabelData(
            lot_number=lot.lot_number,
            product_name=lot.product.name if lot.product else None,
            product_sku=lot.product.sku if lot.product else None,
            quantity_produced=lot.quantity_produced,
            expiry_date=lot.expiry_date,
            production_date=lot.production_date,
        )

    # -------------------------------------------------------------------------
    # Printing
    # -------------------------------------------------------------------------

    def render_print_job(
        self,
        template_id: UUID,
        lot_type: LotType | str,
        lot_id: UUID,
        copies: int = 1,
    ) -> PrintJob:
        lot_type = LotType(lot_type)
        row = self._session.get(LabelTemplateModel, template_id)
        if row is None:
            raise RecordNotFoundError("label_templates", str(template_id))
        template = row.to_dto()
        if template.lot_type is not lot_type:
            raise ValueError(
                f"Template {template.name!r} is for {template.lot_type.value} lots, not {lot_type.value}"
            )

        if lot_type is LotType.RECEIVING:
            fields = self.receiving_lot_data(lot_id).field_values()
        else:
            fields = self.production_lot_data(lot_id).field_values()

        copies = max(1, min(copies, self._config.max_copies))
        html = render_print_document(
            template.layout(),
            fields,
            print_date=self._clock.today(),
            copies=copies,
            dpi=self._config.dpi,
            barcode_format=self._config.default_barcode_format,
        )
        logger.info("label_print_rendered", extra={
            "template_id": str(template_id),
            "lot_type": lot_type.value,
            "lot_id": str(lot_id),
            "copies": copies,
        })
        return PrintJob(
            template_id=template_id,
            lot_type=lot_type,
            lot_id=lot_id,
            copies=copies,
            fields=fields,
            html=html,
        )
