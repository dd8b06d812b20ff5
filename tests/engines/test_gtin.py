"""Tests for GS1 check digits and GTIN-14 case codes."""

import pytest

from plant_engines.gtin import (
    build_gtin14,
    gs1_check_digit,
    is_valid_gtin,
    validate_indicator_digit,
)
from plant_kernel.exceptions import InvalidIndicatorDigitError


class TestCheckDigit:

    def test_upc_a(self):
        assert gs1_check_digit("03600029145") == "2"

    def test_ean_13(self):
        assert gs1_check_digit("400638133393") == "1"

    def test_non_numeric_rejected(self):
        with pytest.raises(ValueError, match="numeric"):
            gs1_check_digit("03600A29145")

    @pytest.mark.parametrize(
        "code,valid",
        [
            ("036000291452", True),
            ("036000291453", False),
            ("4006381333931", True),
            ("96385074", True),
            ("0360002914", False),
            ("abc", False),
        ],
    )
    def test_is_valid_gtin(self, code, valid):
        assert is_valid_gtin(code) is valid


class TestIndicatorDigit:

    @pytest.mark.parametrize("digit", ["0", "1", "9"])
    def test_valid(self, digit):
        assert validate_indicator_digit(digit) == digit

    @pytest.mark.parametrize("digit", ["", "10", "a", None, 1])
    def test_invalid(self, digit):
        with pytest.raises(InvalidIndicatorDigitError):
            validate_indicator_digit(digit)


class TestBuildGtin14:

    def test_from_upc_a(self):
        assert build_gtin14("1", "036000291452") == "10036000291459"

    def test_from_ean_13(self):
        code = build_gtin14("1", "4006381333931")

        assert code == "14006381333938"
        assert is_valid_gtin(code)

    def test_indicator_changes_check_digit(self):
        first = build_gtin14("1", "036000291452")
        second = build_gtin14("2", "036000291452")

        assert first[1:13] == second[1:13]
        assert is_valid_gtin(second)

    @pytest.mark.parametrize("base", ["12345", "03600029145A", "12345678901234"])
    def test_bad_base_rejected(self, base):
        with pytest.raises(ValueError, match="12 or 13 digits"):
            build_gtin14("1", base)

    def test_bad_indicator_rejected(self):
        with pytest.raises(InvalidIndicatorDigitError):
            build_gtin14("X", "036000291452")
