"""
Module: plant_engines.landed_cost
Responsibility:
    Distribute an invoice's additional costs (freight, duty, insurance,
    customs, handling, other) across the receiving lots billed on that
    invoice, and derive each lot's landed cost per base unit.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Conservation: for every additional cost, the cent-rounded shares over
      all lots sum exactly to the cost amount.  The rounding remainder goes
      to the last lot.
    - Bucketing: freight -> freight_allocated; duty and customs ->
      duty_allocated; insurance, handling and other -> other_costs_allocated.
    - total_landed_cost = material_cost + all three buckets.
    - cost_per_base_unit is total_landed_cost / base quantity, 4 dp, and 0
      for a lot with no base quantity.

Failure modes:
    - ValueError on an unknown allocation method or cost type.
    - A zero basis (no material cost, or no quantity) falls back to an equal
      split so the cost is still fully distributed.
    - No lots: nothing is allocated, an empty tuple is returned.

Usage:
    from plant_engines.landed_cost import (
        AdditionalCost, LotBasis, allocate_landed_costs,
    )

    allocations = allocate_landed_costs(
        lots=[LotBasis("lot-1", Decimal("300"), Decimal("10")),
              LotBasis("lot-2", Decimal("700"), Decimal("30"))],
        costs=[AdditionalCost("freight", Decimal("100.00"))],
    )
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from plant_engines.tracer import traced_engine
from plant_kernel.logging_config import get_logger

logger = get_logger("engines.landed_cost")

_CENT = Decimal("0.01")
_UNIT_COST_PLACES = Decimal("0.0001")


class CostType(str, Enum):
    FREIGHT = "freight"
    DUTY = "duty"
    INSURANCE = "insurance"
    CUSTOMS = "customs"
    HANDLING = "handling"
    OTHER = "other"


COST_TYPE_LABELS: dict[CostType, str] = {
    CostType.FREIGHT: "Freight",
    CostType.DUTY: "Duty",
    CostType.INSURANCE: "Insurance",
    CostType.CUSTOMS: "Customs/Brokerage",
    CostType.HANDLING: "Handling",
    CostType.OTHER: "Other",
}


class AllocationMethod(str, Enum):
    PROPORTIONAL = "proportional"  # By lot material cost
    QUANTITY = "quantity"  # By lot base quantity
    EQUAL = "equal"  # Split evenly


ALLOCATION_METHOD_LABELS: dict[AllocationMethod, str] = {
    AllocationMethod.PROPORTIONAL: "Proportional (by value)",
    AllocationMethod.QUANTITY: "By Quantity",
    AllocationMethod.EQUAL: "Equal Split",
}


class CostBucket(str, Enum):
    FREIGHT = "freight_allocated"
    DUTY = "duty_allocated"
    OTHER = "other_costs_allocated"


_BUCKET_BY_TYPE: dict[CostType, CostBucket] = {
    CostType.FREIGHT: CostBucket.FREIGHT,
    CostType.DUTY: CostBucket.DUTY,
    CostType.CUSTOMS: CostBucket.DUTY,
    CostType.INSURANCE: CostBucket.OTHER,
    CostType.HANDLING: CostBucket.OTHER,
    CostType.OTHER: CostBucket.OTHER,
}


def bucket_for(cost_type: CostType | str) -> CostBucket:
    return _BUCKET_BY_TYPE[CostType(cost_type)]


@dataclass(frozen=True)
class LotBasis:
    """A receiving lot as seen by the allocator."""

    lot_id: str
    material_cost: Decimal
    base_quantity: Decimal


@dataclass(frozen=True)
class AdditionalCost:
    cost_type: CostType | str
    amount: Decimal
    allocation_method: AllocationMethod | str = AllocationMethod.PROPORTIONAL


@dataclass(frozen=True)
class LotAllocation:
    """Landed cost breakdown for one lot."""

    lot_id: str
    material_cost: Decimal
    freight_allocated: Decimal
    duty_allocated: Decimal
    other_costs_allocated: Decimal
    total_landed_cost: Decimal
    cost_per_base_unit: Decimal

    @property
    def additional_allocated(self) -> Decimal:
        return self.freight_allocated + self.duty_allocated + self.other_costs_allocated


def _basis(lot: LotBasis, method: AllocationMethod) -> Decimal:
    if method is AllocationMethod.PROPORTIONAL:
        return lot.material_cost
    if method is AllocationMethod.QUANTITY:
        return lot.base_quantity
    return Decimal("1")


def split_amount(
    amount: Decimal,
    lots: Sequence[LotBasis],
    method: AllocationMethod | str,
) -> list[Decimal]:
    """
    Split one amount across lots to the cent.

    Every lot but the last gets its rounded ratio share; the last lot gets
    whatever remains so the shares sum to ``amount`` exactly.
    """
    method = AllocationMethod(method)
    if not lots:
        return []

    weights = [_basis(lot, method) for lot in lots]
    total = sum(weights, Decimal("0"))
    if total <= 0:
        logger.warning("landed_cost_zero_basis", extra={
            "method": method.value,
            "lot_count": len(lots),
        })
        weights = [Decimal("1")] * len(lots)
        total = Decimal(len(lots))

    shares: list[Decimal] = []
    allocated_so_far = Decimal("0")
    last = len(lots) - 1
    for i, weight in enumerate(weights):
        if i == last:
            share = amount - allocated_so_far
        else:
            share = (amount * weight / total).quantize(_CENT, rounding=ROUND_HALF_UP)
            allocated_so_far += share
        shares.append(share)
    return shares


@traced_engine("landed_cost", "1.0", fingerprint_fields=("lots", "costs"))
def allocate_landed_costs(
    lots: Sequence[LotBasis],
    costs: Sequence[AdditionalCost],
) -> tuple[LotAllocation, ...]:
    """Allocate every additional cost across lots and total each lot."""
    if not lots:
        return ()

    buckets: list[dict[CostBucket, Decimal]] = [
        {bucket: Decimal("0") for bucket in CostBucket} for _ in lots
    ]
    for cost in costs:
        bucket = bucket_for(cost.cost_type)
        shares = split_amount(cost.amount, lots, cost.allocation_method)
        for lot_buckets, share in zip(buckets, shares):
            lot_buckets[bucket] += share

    allocations = []
    for lot, lot_buckets in zip(lots, buckets):
        total = lot.material_cost + sum(lot_buckets.values(), Decimal("0"))
        if lot.base_quantity > 0:
            per_unit = (total / lot.base_quantity).quantize(
                _UNIT_COST_PLACES, rounding=ROUND_HALF_UP,
            )
        else:
            per_unit = Decimal("0")
        allocations.append(LotAllocation(
            lot_id=lot.lot_id,
            material_cost=lot.material_cost,
            freight_allocated=lot_buckets[CostBucket.FREIGHT],
            duty_allocated=lot_buckets[CostBucket.DUTY],
            other_costs_allocated=lot_buckets[CostBucket.OTHER],
            total_landed_cost=total,
            cost_per_base_unit=per_unit,
        ))
    return tuple(allocations)
