"""
Module: plant_engines.pallet
Responsibility:
    Pallet layer ("Ti") optimization: how many case boxes fit on one layer
    of a pallet, in which orientation, and which alternative arrangements
    to offer (stability interlock, cold-storage airflow, rotated cases).

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Lengthwise Ti = floor(PL / BL) x floor(PW / BW).
    - Widthwise Ti = floor(PL / BW) x floor(PW / BL).
    - Maximum Ti picks the larger orientation; lengthwise wins a tie.
    - Recommendation order is fixed: max cases, stability, cold storage,
      alternate orientation.  Only the max-cases option is highlighted.
    - Efficiency = round(Ti x box area / pallet area x 100).

Failure modes:
    - Missing or non-positive box dimensions return no recommendations.
    - KeyError for an unknown pallet type string in ``pallet_dimensions``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from enum import Enum

from plant_engines.tracer import traced_engine
from plant_kernel.logging_config import get_logger

logger = get_logger("engines.pallet")

STABILITY_FACTOR = Decimal("0.9")
COLD_STORAGE_FACTOR = Decimal("0.8")

DEFAULT_CUSTOM_LENGTH_IN = Decimal("48")
DEFAULT_CUSTOM_WIDTH_IN = Decimal("40")


class PalletType(str, Enum):
    US_STANDARD = "US_STANDARD"
    EURO = "EURO"
    CUSTOM = "CUSTOM"


class Orientation(str, Enum):
    LENGTHWISE = "lengthwise"
    WIDTHWISE = "widthwise"


@dataclass(frozen=True)
class PalletDimensions:
    name: str
    length_in: Decimal
    width_in: Decimal

    @property
    def area(self) -> Decimal:
        return self.length_in * self.width_in


PALLET_TYPES: dict[PalletType, PalletDimensions] = {
    PalletType.US_STANDARD: PalletDimensions(
        "US Standard (GMA)", Decimal("48"), Decimal("40"),
    ),
    # 1200mm x 800mm
    PalletType.EURO: PalletDimensions(
        "Euro (EUR 1)", Decimal("47.24"), Decimal("31.5"),
    ),
    PalletType.CUSTOM: PalletDimensions(
        "Custom", DEFAULT_CUSTOM_LENGTH_IN, DEFAULT_CUSTOM_WIDTH_IN,
    ),
}


@dataclass(frozen=True)
class Arrangement:
    cols: int
    rows: int
    orientation: Orientation

    @property
    def ti(self) -> int:
        return self.cols * self.rows


@dataclass(frozen=True)
class MaxTiResult:
    max_ti: int
    arrangement: Arrangement | None
    lengthwise: Arrangement
    widthwise: Arrangement


@dataclass(frozen=True)
class PalletOption:
    """One recommended layer arrangement."""

    id: str
    name: str
    description: str
    ti: int
    efficiency: int
    arrangement: Arrangement
    highlight: bool = False


def pallet_dimensions(
    pallet_type: PalletType | str,
    custom_length_in: Decimal | None = None,
    custom_width_in: Decimal | None = None,
) -> PalletDimensions:
    """Resolve pallet footprint; custom pallets fall back to 48 x 40."""
    pallet_type = PalletType(pallet_type)
    if pallet_type is PalletType.CUSTOM:
        return PalletDimensions(
            PALLET_TYPES[PalletType.CUSTOM].name,
            custom_length_in or DEFAULT_CUSTOM_LENGTH_IN,
            custom_width_in or DEFAULT_CUSTOM_WIDTH_IN,
        )
    return PALLET_TYPES[pallet_type]


def _fit(span: Decimal, size: Decimal) -> int:
    return int((span / size).to_integral_value(rounding=ROUND_FLOOR))


def calculate_max_ti(
    box_length_in: Decimal,
    box_width_in: Decimal,
    pallet_length_in: Decimal,
    pallet_width_in: Decimal,
) -> MaxTiResult:
    """Best single-orientation layer for a box on a pallet footprint."""
    lengthwise = Arrangement(
        cols=_fit(pallet_length_in, box_length_in),
        rows=_fit(pallet_width_in, box_width_in),
        orientation=Orientation.LENGTHWISE,
    )
    widthwise = Arrangement(
        cols=_fit(pallet_length_in, box_width_in),
        rows=_fit(pallet_width_in, box_length_in),
        orientation=Orientation.WIDTHWISE,
    )
    best = lengthwise if lengthwise.ti >= widthwise.ti else widthwise
    return MaxTiResult(
        max_ti=best.ti,
        arrangement=best if best.ti > 0 else None,
        lengthwise=lengthwise,
        widthwise=widthwise,
    )


def _efficiency(ti: int, box_area: Decimal, pallet_area: Decimal) -> int:
    pct = Decimal(ti) * box_area / pallet_area * 100
    return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _scaled_ti(max_ti: int, factor: Decimal) -> int:
    return max(1, math.floor(Decimal(max_ti) * factor))


@traced_engine(
    "pallet", "1.0",
    fingerprint_fields=("box_length_in", "box_width_in", "pallet_type"),
)
def recommend_arrangements(
    box_length_in: Decimal | None,
    box_width_in: Decimal | None,
    pallet_type: PalletType | str = PalletType.US_STANDARD,
    custom_length_in: Decimal | None = None,
    custom_width_in: Decimal | None = None,
) -> list[PalletOption]:
    """
    Ordered layer recommendations for a box on the selected pallet.

    Returns an empty list when either box dimension is missing, or when the
    box does not fit on the pallet at all.
    """
    if not box_length_in or not box_width_in or box_length_in <= 0 or box_width_in <= 0:
        return []

    pallet = pallet_dimensions(pallet_type, custom_length_in, custom_width_in)
    result = calculate_max_ti(
        box_length_in, box_width_in, pallet.length_in, pallet.width_in,
    )
    if result.arrangement is None:
        logger.info("pallet_box_does_not_fit", extra={
            "box_length_in": str(box_length_in),
            "box_width_in": str(box_width_in),
            "pallet_type": PalletType(pallet_type).value,
        })
        return []

    box_area = box_length_in * box_width_in
    max_ti = result.max_ti
    options = [
        PalletOption(
            id="max-cases",
            name="Maximum Cases",
            description="Fits the most cases per layer",
            ti=max_ti,
            efficiency=_efficiency(max_ti, box_area, pallet.area),
            arrangement=result.arrangement,
            highlight=True,
        ),
    ]

    stability_ti = _scaled_ti(max_ti, STABILITY_FACTOR)
    if stability_ti != max_ti:
        options.append(PalletOption(
            id="stability",
            name="Best Stability",
            description="Allows interlocking pattern between layers",
            ti=stability_ti,
            efficiency=_efficiency(stability_ti, box_area, pallet.area),
            arrangement=result.arrangement,
        ))

    cold_ti = _scaled_ti(max_ti, COLD_STORAGE_FACTOR)
    if cold_ti != max_ti and cold_ti != stability_ti:
        options.append(PalletOption(
            id="cold-storage",
            name="Cold Storage",
            description="Gaps between cases for air circulation",
            ti=cold_ti,
            efficiency=_efficiency(cold_ti, box_area, pallet.area),
            arrangement=result.arrangement,
        ))

    if result.lengthwise.ti != result.widthwise.ti:
        alternate = (
            result.widthwise
            if result.lengthwise.ti == max_ti
            else result.lengthwise
        )
        if alternate.ti > 0:
            options.append(PalletOption(
                id="alternate",
                name="Alternate Orientation",
                description=f"Cases rotated 90° ({alternate.orientation.value})",
                ti=alternate.ti,
                efficiency=_efficiency(alternate.ti, box_area, pallet.area),
                arrangement=alternate,
            ))

    return options
