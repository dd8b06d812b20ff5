"""
Tests for the packaging service: indicator digit mappings, GTIN-14 case
codes and pallet recommendations for box materials.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from plant_config.schema import PackagingConfig
from plant_engines.pallet import PalletType
from plant_kernel.exceptions import (
    DuplicateRecordError,
    InvalidIndicatorDigitError,
    RecordNotFoundError,
    RequiredFieldError,
)
from plant_modules.manufacturing.orm import ProductModel
from plant_modules.packaging.service import PackagingService
from plant_modules.purchasing.orm import MaterialModel
from tests.modules.conftest import TEST_MATERIAL_ID, TEST_PRODUCT_ID


@pytest.fixture
def packaging_service(session, deterministic_clock):
    return PackagingService(session, clock=deterministic_clock)


# =============================================================================
# Indicator mappings
# =============================================================================


class TestIndicatorMappings:

    def test_create_and_list(self, packaging_service, test_actor_id):
        packaging_service.create_indicator(24, "5", actor_id=test_actor_id)
        packaging_service.create_indicator(6, "2", actor_id=test_actor_id, description="Six pack")

        mappings = packaging_service.list_indicators()

        assert [(m.case_pack_size, m.indicator_digit) for m in mappings] == [(6, "2"), (24, "5")]
        assert mappings[0].description == "Six pack"

    def test_duplicate_size(self, packaging_service, test_actor_id):
        packaging_service.create_indicator(12, "3", actor_id=test_actor_id)

        with pytest.raises(DuplicateRecordError):
            packaging_service.create_indicator(12, "4", actor_id=test_actor_id)

    @pytest.mark.parametrize("digit", ["", "12", "x"])
    def test_invalid_digit(self, packaging_service, test_actor_id, digit):
        with pytest.raises(InvalidIndicatorDigitError):
            packaging_service.create_indicator(12, digit, actor_id=test_actor_id)

    def test_invalid_size(self, packaging_service, test_actor_id):
        with pytest.raises(ValueError, match="at least 1"):
            packaging_service.create_indicator(0, "1", actor_id=test_actor_id)

    def test_update(self, packaging_service, test_actor_id):
        mapping = packaging_service.create_indicator(12, "3", actor_id=test_actor_id)

        packaging_service.update_indicator(mapping.id, 12, "7", actor_id=test_actor_id)

        assert packaging_service.indicator_for_size(12) == "7"

    def test_update_to_taken_size(self, packaging_service, test_actor_id):
        packaging_service.create_indicator(6, "2", actor_id=test_actor_id)
        mapping = packaging_service.create_indicator(12, "3", actor_id=test_actor_id)

        with pytest.raises(DuplicateRecordError):
            packaging_service.update_indicator(mapping.id, 6, "3", actor_id=test_actor_id)

    def test_delete(self, packaging_service, test_actor_id):
        mapping = packaging_service.create_indicator(12, "3", actor_id=test_actor_id)

        packaging_service.delete_indicator(mapping.id)

        assert packaging_service.list_indicators() == []

    def test_delete_missing(self, packaging_service):
        with pytest.raises(RecordNotFoundError):
            packaging_service.delete_indicator(uuid4())

    def test_fallback_to_default(self, packaging_service, captured_logs):
        assert packaging_service.indicator_for_size(48) == "1"
        assert packaging_service.indicator_for_size(None) == "1"

        assert any(r["message"] == "packaging_indicator_fallback" for r in captured_logs())

    def test_configured_default(self, session):
        service = PackagingService(session, config=PackagingConfig(default_indicator_digit="8"))

        assert service.indicator_for_size(48) == "8"


# =============================================================================
# Case codes
# =============================================================================


class TestCaseCodes:

    def test_default_indicator(self, packaging_service, test_product):
        code = packaging_service.case_code(TEST_PRODUCT_ID)

        assert code.indicator_digit == "1"
        assert code.unit_gtin == "036000291452"
        assert code.gtin14 == "10036000291459"

    def test_mapped_indicator(self, packaging_service, test_product, test_actor_id):
        packaging_service.create_indicator(12, "3", actor_id=test_actor_id)

        code = packaging_service.case_code(TEST_PRODUCT_ID)

        assert code.case_pack_size == 12
        assert code.gtin14 == "30036000291453"

    def test_missing_upc(self, packaging_service, session, test_product):
        session.get(ProductModel, TEST_PRODUCT_ID).upc = None
        session.commit()

        with pytest.raises(RequiredFieldError):
            packaging_service.case_code(TEST_PRODUCT_ID)

    def test_missing_product(self, packaging_service):
        with pytest.raises(RecordNotFoundError):
            packaging_service.case_code(uuid4())


# =============================================================================
# Pallet configuration
# =============================================================================


class TestPalletRecommendations:

    def test_box_material(self, packaging_service, test_material):
        rec = packaging_service.pallet_recommendations(TEST_MATERIAL_ID)

        assert rec.pallet_type is PalletType.US_STANDARD
        assert [o.id for o in rec.options] == ["max-cases", "stability", "cold-storage", "alternate"]
        assert rec.options[0].ti == 16

    def test_custom_pallet_from_arguments(self, packaging_service, test_material):
        rec = packaging_service.pallet_recommendations(
            TEST_MATERIAL_ID, "CUSTOM",
            custom_length_in=Decimal("24"), custom_width_in=Decimal("20"),
        )

        assert rec.options[0].ti == 4

    def test_material_without_box_size(self, packaging_service, session, test_material):
        row = session.get(MaterialModel, TEST_MATERIAL_ID)
        row.box_length_in = None
        session.commit()

        rec = packaging_service.pallet_recommendations(TEST_MATERIAL_ID)

        assert rec.options == ()

    def test_missing_material(self, packaging_service):
        with pytest.raises(RecordNotFoundError):
            packaging_service.pallet_recommendations(uuid4())
