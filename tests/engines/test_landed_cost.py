"""
Tests for landed cost allocation.

Covers:
- Proportional, quantity and equal splits
- Rounding remainder lands on the last lot
- Zero-basis fallback to an equal split
- Cost type bucketing (customs with duty, insurance with other)
- Cost per base unit
- Property: shares always sum to the cost amount
"""

from decimal import Decimal

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from plant_engines.landed_cost import (
    AdditionalCost,
    AllocationMethod,
    CostBucket,
    CostType,
    LotBasis,
    allocate_landed_costs,
    bucket_for,
    split_amount,
)

LOTS = [
    LotBasis("lot-1", Decimal("300"), Decimal("10")),
    LotBasis("lot-2", Decimal("700"), Decimal("30")),
]


class TestSplitAmount:
    """Tests for splitting one amount over lots."""

    def test_proportional_by_material_cost(self):
        shares = split_amount(Decimal("100.00"), LOTS, AllocationMethod.PROPORTIONAL)

        assert shares == [Decimal("30.00"), Decimal("70.00")]

    def test_by_quantity(self):
        shares = split_amount(Decimal("100.00"), LOTS, "quantity")

        assert shares == [Decimal("25.00"), Decimal("75.00")]

    def test_equal(self):
        shares = split_amount(Decimal("100.00"), LOTS, AllocationMethod.EQUAL)

        assert shares == [Decimal("50.00"), Decimal("50.00")]

    def test_remainder_goes_to_last_lot(self):
        lots = [LotBasis(f"lot-{i}", Decimal("1"), Decimal("1")) for i in range(3)]

        shares = split_amount(Decimal("100.00"), lots, AllocationMethod.EQUAL)

        assert shares == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
        assert sum(shares) == Decimal("100.00")

    def test_zero_basis_falls_back_to_equal(self, captured_logs):
        lots = [
            LotBasis("lot-1", Decimal("0"), Decimal("5")),
            LotBasis("lot-2", Decimal("0"), Decimal("5")),
        ]

        shares = split_amount(Decimal("10.00"), lots, AllocationMethod.PROPORTIONAL)

        assert shares == [Decimal("5.00"), Decimal("5.00")]
        assert any(r["message"] == "landed_cost_zero_basis" for r in captured_logs())

    def test_no_lots(self):
        assert split_amount(Decimal("10"), [], AllocationMethod.EQUAL) == []

    def test_unknown_method_rejected(self):
        with pytest.raises(ValueError):
            split_amount(Decimal("10"), LOTS, "by-weight")


class TestBuckets:

    @pytest.mark.parametrize(
        "cost_type,bucket",
        [
            (CostType.FREIGHT, CostBucket.FREIGHT),
            (CostType.DUTY, CostBucket.DUTY),
            (CostType.CUSTOMS, CostBucket.DUTY),
            (CostType.INSURANCE, CostBucket.OTHER),
            (CostType.HANDLING, CostBucket.OTHER),
            ("other", CostBucket.OTHER),
        ],
    )
    def test_bucket_for(self, cost_type, bucket):
        assert bucket_for(cost_type) is bucket


class TestAllocateLandedCosts:
    """Tests for the full per-lot breakdown."""

    def test_freight_and_duty(self):
        allocations = allocate_landed_costs(
            lots=LOTS,
            costs=[
                AdditionalCost(CostType.FREIGHT, Decimal("100.00")),
                AdditionalCost(CostType.CUSTOMS, Decimal("40.00"), AllocationMethod.EQUAL),
                AdditionalCost(CostType.INSURANCE, Decimal("10.00"), AllocationMethod.QUANTITY),
            ],
        )

        first, second = allocations
        assert first.lot_id == "lot-1"
        assert first.freight_allocated == Decimal("30.00")
        assert first.duty_allocated == Decimal("20.00")
        assert first.other_costs_allocated == Decimal("2.50")
        assert first.total_landed_cost == Decimal("352.50")
        assert first.cost_per_base_unit == Decimal("35.2500")

        assert second.freight_allocated == Decimal("70.00")
        assert second.duty_allocated == Decimal("20.00")
        assert second.other_costs_allocated == Decimal("7.50")
        assert second.total_landed_cost == Decimal("797.50")
        assert second.cost_per_base_unit == Decimal("26.5833")

    def test_additional_allocated(self):
        allocations = allocate_landed_costs(
            lots=LOTS,
            costs=[AdditionalCost("freight", Decimal("100.00"))],
        )

        assert sum(a.additional_allocated for a in allocations) == Decimal("100.00")

    def test_no_costs_is_material_only(self):
        allocations = allocate_landed_costs(lots=LOTS, costs=[])

        assert [a.total_landed_cost for a in allocations] == [Decimal("300"), Decimal("700")]
        assert allocations[0].cost_per_base_unit == Decimal("30.0000")

    def test_zero_base_quantity_has_zero_unit_cost(self):
        allocations = allocate_landed_costs(
            lots=[LotBasis("lot-1", Decimal("50"), Decimal("0"))],
            costs=[AdditionalCost("freight", Decimal("5.00"))],
        )

        assert allocations[0].total_landed_cost == Decimal("55.00")
        assert allocations[0].cost_per_base_unit == Decimal("0")

    def test_no_lots(self):
        assert allocate_landed_costs(lots=[], costs=[AdditionalCost("freight", Decimal("5"))]) == ()

    def test_emits_engine_trace(self, captured_logs):
        allocate_landed_costs(lots=LOTS, costs=[])

        traces = [r for r in captured_logs() if r["message"] == "PLANT_ENGINE_TRACE"]
        assert traces and traces[-1]["engine_name"] == "landed_cost"


# =============================================================================
# Properties
# =============================================================================

money = st.decimals(
    min_value=Decimal("0"), max_value=Decimal("100000"),
    places=2, allow_nan=False, allow_infinity=False,
)
positive_money = st.decimals(
    min_value=Decimal("0.01"), max_value=Decimal("100000"),
    places=2, allow_nan=False, allow_infinity=False,
)
lot_strategy = st.builds(
    LotBasis,
    lot_id=st.uuids().map(str),
    material_cost=money,
    base_quantity=money,
)


class TestConservation:

    @given(
        amount=positive_money,
        lots=st.lists(lot_strategy, min_size=1, max_size=12),
        method=st.sampled_from(list(AllocationMethod)),
    )
    @settings(max_examples=300)
    def test_shares_sum_to_amount(self, amount, lots, method):
        shares = split_amount(amount, lots, method)

        assert len(shares) == len(lots)
        assert sum(shares, Decimal("0")) == amount

    @given(
        lots=st.lists(lot_strategy, min_size=1, max_size=8),
        freight=positive_money,
        duty=positive_money,
    )
    @settings(max_examples=100)
    def test_allocated_total_equals_costs(self, lots, freight, duty):
        allocations = allocate_landed_costs(
            lots=lots,
            costs=[
                AdditionalCost("freight", freight),
                AdditionalCost("duty", duty, "quantity"),
            ],
        )

        assert sum((a.freight_allocated for a in allocations), Decimal("0")) == freight
        assert sum((a.duty_allocated for a in allocations), Decimal("0")) == duty
