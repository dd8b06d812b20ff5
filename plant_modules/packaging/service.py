"""
Packaging Module Service (``plant_modules.packaging.service``).

Responsibility
--------------
Maintains the case-pack-size -> indicator digit table, builds GTIN-14 case
codes for products, and recommends pallet layer patterns for a box material.

Architecture position
---------------------
**Modules layer** -- thin glue over ``plant_engines.gtin`` and
``plant_engines.pallet``.

Failure modes
-------------
* ``InvalidIndicatorDigitError`` -- indicator not a single digit 0-9.
* ``DuplicateRecordError`` -- case pack size already mapped.
* ``RecordNotFoundError`` -- unknown mapping, product or material.
* ``RequiredFieldError`` -- product has no unit GTIN.
* A pack size with no mapping is not an error: the default indicator is used
  and a warning is logged.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from plant_config.schema import PackagingConfig
from plant_engines.gtin import build_gtin14
from plant_engines.pallet import PalletType, recommend_arrangements
from plant_kernel.domain.clock import Clock, SystemClock
from plant_kernel.exceptions import (
    DuplicateRecordError,
    RecordNotFoundError,
    RequiredFieldError,
)
from plant_kernel.logging_config import get_logger
from plant_modules.manufacturing.orm import ProductModel
from plant_modules.packaging.models import (
    CaseCode,
    PackagingIndicatorMapping,
    PalletRecommendation,
)
from plant_modules.packaging.orm import PackagingIndicatorModel
from plant_modules.purchasing.orm import MaterialModel

logger = get_logger("modules.packaging.service")


class PackagingService:
    """Indicator mappings, case codes and pallet recommendations."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: PackagingConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or PackagingConfig()

    # =========================================================================
    # Indicator mappings
    # =========================================================================

    def list_indicators(self) -> list[PackagingIndicatorMapping]:
        rows = (
            self._session.query(PackagingIndicatorModel)
            .order_by(PackagingIndicatorModel.case_pack_size)
            .all()
        )
        return [row.to_dto() for row in rows]

    def create_indicator(
        self,
        case_pack_size: int,
        indicator_digit: str,
        actor_id: UUID,
        description: str | None = None,
    ) -> PackagingIndicatorMapping:
        mapping = PackagingIndicatorMapping(
            id=uuid4(),
            case_pack_size=case_pack_size,
            indicator_digit=indicator_digit,
            description=description or None,
        )
        try:
            self._ensure_size_free(case_pack_size)
            self._session.add(PackagingIndicatorModel.from_dto(mapping, created_by_id=actor_id))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("packaging_indicator_created", extra={
            "mapping_id": str(mapping.id),
            "case_pack_size": case_pack_size,
            "indicator_digit": indicator_digit,
        })
        return mapping

    def update_indicator(
        self,
        mapping_id: UUID,
        case_pack_size: int,
        indicator_digit: str,
        actor_id: UUID,
        description: str | None = None,
    ) -> PackagingIndicatorMapping:
        mapping = PackagingIndicatorMapping(
            id=mapping_id,
            case_pack_size=case_pack_size,
            indicator_digit=indicator_digit,
            description=description or None,
        )
        try:
            row = self._get_mapping(mapping_id)
            if row.case_pack_size != case_pack_size:
                self._ensure_size_free(case_pack_size)
            row.case_pack_size = mapping.case_pack_size
            row.indicator_digit = mapping.indicator_digit
            row.description = mapping.description
            row.updated_by_id = actor_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("packaging_indicator_updated", extra={
            "mapping_id": str(mapping_id),
            "case_pack_size": case_pack_size,
            "indicator_digit": indicator_digit,
        })
        return mapping

    def delete_indicator(self, mapping_id: UUID) -> None:
        try:
            self._session.delete(self._get_mapping(mapping_id))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("packaging_indicator_deleted", extra={"mapping_id": str(mapping_id)})

    def indicator_for_size(self, case_pack_size: int | None) -> str:
        """Mapped digit for a pack size, or the default indicator."""
        row = None
        if case_pack_size is not None:
            row = (
                self._session.query(PackagingIndicatorModel)
                .filter(PackagingIndicatorModel.case_pack_size == case_pack_size)
                .one_or_none()
            )
        if row is None:
            logger.warning("packaging_indicator_fallback", extra={
                "case_pack_size": case_pack_size,
                "indicator_digit": self._config.default_indicator_digit,
            })
            return self._config.default_indicator_digit
        return row.indicator_digit

    def _get_mapping(self, mapping_id: UUID) -> PackagingIndicatorModel:
        row = self._session.get(PackagingIndicatorModel, mapping_id)
        if row is None:
            raise RecordNotFoundError("packaging_indicator_mappings", str(mapping_id))
        return row

    def _ensure_size_free(self, case_pack_size: int) -> None:
        taken = (
            self._session.query(PackagingIndicatorModel)
            .filter(PackagingIndicatorModel.case_pack_size == case_pack_size)
            .first()
        )
        if taken is not None:
            raise DuplicateRecordError("packaging_indicator_mappings", f"case_pack_size={case_pack_size}")

    # =========================================================================
    # Case codes
    # =========================================================================

    def case_code(self, product_id: UUID) -> CaseCode:
        """GTIN-14 for a product's shipping case."""
        product = self._session.get(ProductModel, product_id)
        if product is None:
            raise RecordNotFoundError("products", str(product_id))
        if not product.upc:
            raise RequiredFieldError("upc")

        indicator = self.indicator_for_size(product.case_pack_size)
        gtin14 = build_gtin14(indicator, product.upc)
        logger.info("case_code_built", extra={
            "product_id": str(product_id),
            "case_pack_size": product.case_pack_size,
            "gtin14": gtin14,
        })
        return CaseCode(
            product_id=product_id,
            case_pack_size=product.case_pack_size,
            indicator_digit=indicator,
            unit_gtin=product.upc,
            gtin14=gtin14,
        )

    # =========================================================================
    # Pallet configuration
    # =========================================================================

    def pallet_recommendations(
        self,
        material_id: UUID,
        pallet_type: PalletType | str = PalletType.US_STANDARD,
        custom_length_in: Decimal | None = None,
        custom_width_in: Decimal | None = None,
    ) -> PalletRecommendation:
        """Layer options for a box material; empty when it has no box size."""
        material = self._session.get(MaterialModel, material_id)
        if material is None:
            raise RecordNotFoundError("materials", str(material_id))

        pallet_type = PalletType(pallet_type)
        if pallet_type is PalletType.CUSTOM:
            custom_length_in = custom_length_in or self._config.custom_pallet_length_in
            custom_width_in = custom_width_in or self._config.custom_pallet_width_in

        options = recommend_arrangements(
            box_length_in=material.box_length_in,
            box_width_in=material.box_width_in,
            pallet_type=pallet_type,
            custom_length_in=custom_length_in,
            custom_width_in=custom_width_in,
        )
        return PalletRecommendation(
            material_id=material_id,
            pallet_type=pallet_type,
            box_length_in=material.box_length_in,
            box_width_in=material.box_width_in,
            options=tuple(options),
        )
