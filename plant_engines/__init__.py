"""
Module: plant_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    plant_modules services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import plant_kernel logging and exceptions (and sibling engine
    modules).  MUST NOT import plant_modules.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Dates and timestamps are passed in by the calling service.
    - Decimal-only arithmetic for quantities, hours and money.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from plant_engines.overrun import calculate_overrun
    from plant_engines.pallet import recommend_arrangements
    from plant_engines.landed_cost import allocate_landed_costs
    from plant_engines.payroll import summarize_payroll
    from plant_engines.qa import evaluate_result
"""

from plant_engines.gtin import build_gtin14, gs1_check_digit, validate_indicator_digit
from plant_engines.labels import (
    LabelLayout,
    LotType,
    ProductionLotLabelData,
    ReceivingLotLabelData,
    render_print_document,
)
from plant_engines.landed_cost import (
    AdditionalCost,
    AllocationMethod,
    CostType,
    LotAllocation,
    LotBasis,
    allocate_landed_costs,
)
from plant_engines.merge_fields import MergeResult, render_merge_fields
from plant_engines.overrun import (
    OverrunSampleSet,
    OverrunStatus,
    calculate_overrun,
    classify_overrun,
    tolerance_band,
)
from plant_engines.pallet import (
    PalletOption,
    PalletType,
    calculate_max_ti,
    recommend_arrangements,
)
from plant_engines.payroll import (
    PayrollEntry,
    PayrollSummary,
    compute_entry_hours,
    last_week_period,
    render_payroll_csv,
    summarize_payroll,
)
from plant_engines.qa import QAEvaluation, evaluate_result, next_test_code
from plant_engines.supplier_status import highlight_level, should_warn, status_label
from plant_engines.tracer import traced_engine

__all__ = [
    # Tracer
    "traced_engine",
    # Overrun
    "OverrunSampleSet",
    "OverrunStatus",
    "calculate_overrun",
    "classify_overrun",
    "tolerance_band",
    # Pallet
    "PalletOption",
    "PalletType",
    "calculate_max_ti",
    "recommend_arrangements",
    # Landed cost
    "AdditionalCost",
    "AllocationMethod",
    "CostType",
    "LotAllocation",
    "LotBasis",
    "allocate_landed_costs",
    # Payroll
    "PayrollEntry",
    "PayrollSummary",
    "compute_entry_hours",
    "last_week_period",
    "render_payroll_csv",
    "summarize_payroll",
    # QA
    "QAEvaluation",
    "evaluate_result",
    "next_test_code",
    # GTIN
    "build_gtin14",
    "gs1_check_digit",
    "validate_indicator_digit",
    # Labels
    "LabelLayout",
    "LotType",
    "ProductionLotLabelData",
    "ReceivingLotLabelData",
    "render_print_document",
    # Merge fields
    "MergeResult",
    "render_merge_fields",
    # Supplier status
    "highlight_level",
    "should_warn",
    "status_label",
]
