"""
Module: plant_engines.overrun
Responsibility:
    Overrun (volumetric expansion) percentage for aerated frozen product,
    classification against a target band, and a running sample set used on
    the production floor.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Overrun % = ((mix volume x density) / filled weight - 1) x 100.
    - Non-positive filled weight yields 0, never a division error.
    - Tolerance band is inclusive at both ends.
    - Samples with non-positive filled weight are never recorded.

Failure modes:
    - ValueError from OverrunSampleSet on a negative tolerance.

Usage:
    from plant_engines.overrun import calculate_overrun, classify_overrun

    pct = calculate_overrun(
        mix_volume=Decimal("100"), density=Decimal("1.1"),
        filled_weight=Decimal("55"),
    )
    status = classify_overrun(pct, target=Decimal("100"),
                              tolerance_percent=Decimal("5"))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from plant_engines.tracer import traced_engine

DEFAULT_TARGET_OVERRUN = Decimal("100")
DEFAULT_TOLERANCE_PERCENT = Decimal("5")
DEFAULT_MIX_DENSITY = Decimal("1.1")

_HUNDRED = Decimal("100")


class OverrunStatus(str, Enum):
    """Where an overrun value falls relative to the target band."""

    PASS = "pass"
    HIGH = "high"  # Above band: too much air
    LOW = "low"  # Below band: too dense


@traced_engine(
    "overrun", "1.0",
    fingerprint_fields=("mix_volume", "density", "filled_weight"),
)
def calculate_overrun(
    mix_volume: Decimal,
    density: Decimal,
    filled_weight: Decimal,
) -> Decimal:
    """Overrun percent for one filled sample; 0 when filled_weight <= 0."""
    if filled_weight <= 0:
        return Decimal("0")
    return ((mix_volume * density) / filled_weight - 1) * _HUNDRED


def tolerance_band(
    target: Decimal,
    tolerance_percent: Decimal,
) -> tuple[Decimal, Decimal]:
    """Return (min, max) of the acceptable overrun band."""
    spread = tolerance_percent / _HUNDRED
    return target * (1 - spread), target * (1 + spread)


def classify_overrun(
    value: Decimal,
    target: Decimal = DEFAULT_TARGET_OVERRUN,
    tolerance_percent: Decimal = DEFAULT_TOLERANCE_PERCENT,
) -> OverrunStatus:
    low, high = tolerance_band(target, tolerance_percent)
    if low <= value <= high:
        return OverrunStatus.PASS
    if value > high:
        return OverrunStatus.HIGH
    return OverrunStatus.LOW


@dataclass
class OverrunSampleSet:
    """
    Running set of overrun samples for one batch.

    Contract:
        Mutable accumulator owned by one production run.  Samples are only
        accepted when a positive filled weight was measured.
    """

    mix_volume: Decimal
    density: Decimal = DEFAULT_MIX_DENSITY
    target: Decimal = DEFAULT_TARGET_OVERRUN
    tolerance_percent: Decimal = DEFAULT_TOLERANCE_PERCENT
    samples: list[Decimal] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.tolerance_percent < 0:
            raise ValueError("Tolerance percent cannot be negative")

    def add_sample(self, filled_weight: Decimal | None) -> Decimal | None:
        """Record a sample; returns its overrun, or None if it was rejected."""
        if filled_weight is None or filled_weight <= 0:
            return None
        value = calculate_overrun(
            mix_volume=self.mix_volume,
            density=self.density,
            filled_weight=filled_weight,
        )
        self.samples.append(value)
        return value

    def clear(self) -> None:
        self.samples.clear()

    @property
    def average(self) -> Decimal:
        if not self.samples:
            return Decimal("0")
        return sum(self.samples, Decimal("0")) / len(self.samples)

    @property
    def band(self) -> tuple[Decimal, Decimal]:
        return tolerance_band(self.target, self.tolerance_percent)

    def status_of(self, value: Decimal) -> OverrunStatus:
        return classify_overrun(value, self.target, self.tolerance_percent)

    @property
    def average_status(self) -> OverrunStatus | None:
        if not self.samples:
            return None
        return self.status_of(self.average)
