"""
Module: plant_engines.gtin
Responsibility:
    GS1 check digits and GTIN-14 case codes.  A case code is the packaging
    indicator digit, followed by the first 12 digits of the unit's GTIN-13
    form, followed by a freshly computed check digit.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Failure modes:
    - InvalidIndicatorDigitError for anything other than one digit 0-9.
    - ValueError for a base code that is not 12 or 13 digits.
"""

from __future__ import annotations

from plant_kernel.exceptions import InvalidIndicatorDigitError

DEFAULT_INDICATOR_DIGIT = "1"


def validate_indicator_digit(indicator_digit: str) -> str:
    if (
        not isinstance(indicator_digit, str)
        or len(indicator_digit) != 1
        or indicator_digit not in "0123456789"
    ):
        raise InvalidIndicatorDigitError(str(indicator_digit))
    return indicator_digit


def gs1_check_digit(digits: str) -> str:
    """Mod-10 check digit for a GS1 key without its check digit."""
    if not digits.isdigit():
        raise ValueError(f"GS1 key must be numeric: {digits!r}")
    total = 0
    # Weights alternate 3,1,... starting from the rightmost data digit.
    for i, ch in enumerate(reversed(digits)):
        total += int(ch) * (3 if i % 2 == 0 else 1)
    return str((10 - total % 10) % 10)


def is_valid_gtin(code: str) -> bool:
    if not code.isdigit() or len(code) not in (8, 12, 13, 14):
        return False
    return gs1_check_digit(code[:-1]) == code[-1]


def build_gtin14(indicator_digit: str, base_gtin: str) -> str:
    """GTIN-14 case code from a unit UPC-A (12) or EAN-13 (13) code."""
    validate_indicator_digit(indicator_digit)
    if not base_gtin.isdigit() or len(base_gtin) not in (12, 13):
        raise ValueError(f"Base GTIN must be 12 or 13 digits: {base_gtin!r}")
    body = indicator_digit + base_gtin.zfill(13)[:12]
    return body + gs1_check_digit(body)
