"""
Quality Module (``plant_modules.quality``).

QA test templates, product QA requirements and QA tests recorded against
production lots, with photo and document evidence.
"""

from plant_modules.quality.models import (
    LotQATest,
    PendingQALot,
    ProductQARequirement,
    QATestInput,
    QATestTemplate,
    QATestTemplateFilter,
)

__all__ = [
    "LotQATest",
    "PendingQALot",
    "ProductQARequirement",
    "QATestInput",
    "QATestTemplate",
    "QATestTemplateFilter",
]
