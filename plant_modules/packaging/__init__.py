"""
Packaging Module (``plant_modules.packaging``).

GTIN-14 packaging indicator mappings, product case codes and pallet layer
recommendations.
"""

from plant_modules.packaging.models import (
    CaseCode,
    PackagingIndicatorMapping,
    PalletRecommendation,
)

__all__ = [
    "CaseCode",
    "PackagingIndicatorMapping",
    "PalletRecommendation",
]
