"""
Tests for the pallet Ti optimizer.

Covers:
- Maximum Ti per orientation, lengthwise wins a tie
- Recommendation ordering and de-duplication
- Efficiency percentages
- Pallet footprints (US, Euro, custom)
- Property: no layer ever covers more than the pallet
"""

from decimal import Decimal

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from plant_engines.pallet import (
    Orientation,
    PalletType,
    calculate_max_ti,
    pallet_dimensions,
    recommend_arrangements,
)


class TestCalculateMaxTi:
    """Tests for the orientation search."""

    def test_lengthwise_best(self):
        result = calculate_max_ti(Decimal("12"), Decimal("10"), Decimal("48"), Decimal("40"))

        assert result.lengthwise.ti == 16
        assert result.widthwise.ti == 12
        assert result.max_ti == 16
        assert result.arrangement.orientation is Orientation.LENGTHWISE
        assert (result.arrangement.cols, result.arrangement.rows) == (4, 4)

    def test_widthwise_best(self):
        result = calculate_max_ti(Decimal("10"), Decimal("12"), Decimal("48"), Decimal("40"))

        assert result.lengthwise.ti == 12
        assert result.widthwise.ti == 16
        assert result.arrangement.orientation is Orientation.WIDTHWISE
        assert (result.arrangement.cols, result.arrangement.rows) == (4, 4)

    def test_tie_prefers_lengthwise(self):
        result = calculate_max_ti(Decimal("10"), Decimal("10"), Decimal("48"), Decimal("40"))

        assert result.lengthwise.ti == result.widthwise.ti == 16
        assert result.arrangement.orientation is Orientation.LENGTHWISE

    def test_box_too_large(self):
        result = calculate_max_ti(Decimal("50"), Decimal("50"), Decimal("48"), Decimal("40"))

        assert result.max_ti == 0
        assert result.arrangement is None


class TestRecommendArrangements:
    """Tests for the ordered recommendation list."""

    def test_full_list_order(self):
        options = recommend_arrangements(Decimal("12"), Decimal("10"))

        assert [o.id for o in options] == ["max-cases", "stability", "cold-storage", "alternate"]
        assert [o.ti for o in options] == [16, 14, 12, 12]
        assert [o.efficiency for o in options] == [100, 88, 75, 75]

    def test_only_max_cases_highlighted(self):
        options = recommend_arrangements(Decimal("12"), Decimal("10"))

        assert options[0].highlight is True
        assert not any(o.highlight for o in options[1:])

    def test_alternate_uses_other_orientation(self):
        options = recommend_arrangements(Decimal("12"), Decimal("10"))
        alternate = options[-1]

        assert alternate.arrangement.orientation is Orientation.WIDTHWISE
        assert "widthwise" in alternate.description

    def test_single_case_layer_has_no_variants(self):
        """Stability and cold storage collapse to 1, identical to max."""
        options = recommend_arrangements(Decimal("40"), Decimal("30"))

        assert [o.id for o in options] == ["max-cases"]
        assert options[0].ti == 1

    def test_tie_has_no_alternate(self):
        options = recommend_arrangements(Decimal("10"), Decimal("10"))

        assert "alternate" not in [o.id for o in options]

    @pytest.mark.parametrize(
        "length,width",
        [
            (None, Decimal("10")),
            (Decimal("12"), None),
            (Decimal("0"), Decimal("10")),
            (Decimal("12"), Decimal("-1")),
        ],
    )
    def test_missing_dimensions(self, length, width):
        assert recommend_arrangements(length, width) == []

    def test_box_does_not_fit(self):
        assert recommend_arrangements(Decimal("50"), Decimal("50")) == []

    def test_euro_pallet(self):
        options = recommend_arrangements(Decimal("12"), Decimal("10"), PalletType.EURO)

        assert options[0].ti == 9

    def test_custom_pallet_dimensions(self):
        options = recommend_arrangements(
            Decimal("12"), Decimal("10"),
            pallet_type="CUSTOM",
            custom_length_in=Decimal("24"),
            custom_width_in=Decimal("20"),
        )

        assert options[0].ti == 4
        assert options[0].efficiency == 100


class TestPalletDimensions:

    def test_custom_falls_back_to_us_size(self):
        dims = pallet_dimensions(PalletType.CUSTOM)

        assert (dims.length_in, dims.width_in) == (Decimal("48"), Decimal("40"))

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            pallet_dimensions("CHEP")


# =============================================================================
# Properties
# =============================================================================

box_side = st.decimals(
    min_value=Decimal("1"), max_value=Decimal("60"),
    places=2, allow_nan=False, allow_infinity=False,
)


class TestPalletProperties:

    @given(length=box_side, width=box_side, pallet_type=st.sampled_from(list(PalletType)))
    @settings(max_examples=200)
    def test_layer_never_exceeds_pallet_area(self, length, width, pallet_type):
        pallet = pallet_dimensions(pallet_type)
        for option in recommend_arrangements(length, width, pallet_type):
            assert option.ti * length * width <= pallet.area
            assert 0 <= option.efficiency <= 100

    @given(length=box_side, width=box_side)
    @settings(max_examples=200)
    def test_first_option_is_highlighted_maximum(self, length, width):
        options = recommend_arrangements(length, width)
        if not options:
            return
        assert options[0].id == "max-cases"
        assert options[0].highlight
        assert all(o.ti <= options[0].ti for o in options)
        assert len({o.id for o in options}) == len(options)
