"""
Module: plant_engines.qa
Responsibility:
    QA test result evaluation (automatic pass/fail for numeric and range
    parameters), corrective-action rules, test code generation, and the
    storage path conventions for QA evidence files.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Timestamps and random
    suffixes used in evidence paths are passed in by the caller.

Invariants enforced:
    - Numeric/range results with a value are judged against whichever bounds
      exist, inclusively; out_of_spec is the negation of passed.  Without any
      bound, or without a value, the supplied pass flag is kept.
    - A failed result requires a corrective action.
    - Test codes are ``{first 3 letters of category, upper}-{NNNN}``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

QA_EVIDENCE_BUCKET = "qa-test-evidence"

IMAGE_EXTENSIONS: tuple[str, ...] = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp")

_CODE_NUMBER = re.compile(r"-(\d+)$")
_TIMESTAMP_PREFIX = re.compile(r"^\d+-(.+)$")
_UNSAFE_FILE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


class QATestCategory(str, Enum):
    MICROBIOLOGICAL = "microbiological"
    PHYSICAL = "physical"
    CHEMICAL = "chemical"
    SENSORY = "sensory"
    SAFETY = "safety"


class ParameterType(str, Enum):
    NUMERIC = "numeric"
    PASS_FAIL = "pass_fail"
    TEXT = "text"
    RANGE = "range"


class ProductionStage(str, Enum):
    BASE = "base"
    FLAVORING = "flavoring"
    FINISHED = "finished"


class QATestFrequency(str, Enum):
    PER_BATCH = "per_batch"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"


PARAMETER_TYPE_LABELS: dict[ParameterType, str] = {
    ParameterType.NUMERIC: "Numeric Value",
    ParameterType.PASS_FAIL: "Pass / Fail",
    ParameterType.TEXT: "Text Entry",
    ParameterType.RANGE: "Range (Min/Max)",
}

FREQUENCY_LABELS: dict[QATestFrequency, str] = {
    QATestFrequency.PER_BATCH: "Per Batch",
    QATestFrequency.HOURLY: "Hourly",
    QATestFrequency.DAILY: "Daily",
    QATestFrequency.WEEKLY: "Weekly",
}

@dataclass(frozen=True)
class QAEvaluation:
    passed: bool | None
    out_of_spec: bool


def evaluate_result(
    parameter_type: ParameterType | str,
    value: Decimal | None,
    min_value: Decimal | None = None,
    max_value: Decimal | None = None,
    passed: bool | None = None,
    out_of_spec: bool = False,
) -> QAEvaluation:
    """Decide pass/fail for a recorded result."""
    parameter_type = ParameterType(parameter_type)
    if parameter_type in (ParameterType.NUMERIC, ParameterType.RANGE) and value is not None:
        if min_value is not None and max_value is not None:
            ok = min_value <= value <= max_value
        elif min_value is not None:
            ok = value >= min_value
        elif max_value is not None:
            ok = value <= max_value
        else:
            return QAEvaluation(passed=passed, out_of_spec=out_of_spec)
        return QAEvaluation(passed=ok, out_of_spec=not ok)
    return QAEvaluation(passed=passed, out_of_spec=out_of_spec)


def requires_corrective_action(evaluation: QAEvaluation) -> bool:
    return evaluation.passed is False or evaluation.out_of_spec


def next_test_code(category: QATestCategory | str, last_code: str | None) -> str:
    """Next sequential code for a category given the highest existing one."""
    prefix = code_prefix(category)
    next_num = 1
    if last_code:
        match = _CODE_NUMBER.search(last_code)
        if match:
            next_num = int(match.group(1)) + 1
    return f"{prefix}-{next_num:04d}"


def code_prefix(category: QATestCategory | str) -> str:
    return QATestCategory(category).value[:3].upper()


# ---------------------------------------------------------------------------
# Evidence file paths
# ---------------------------------------------------------------------------


def file_extension(file_name: str) -> str:
    return file_name.rsplit(".", 1)[-1]


def safe_file_name(file_name: str) -> str:
    return _UNSAFE_FILE_CHARS.sub("_", file_name)


def photo_path(lot_id: str, test_id: str, file_name: str, timestamp_ms: int, suffix: str) -> str:
    return f"{lot_id}/{test_id}/photos/{timestamp_ms}-{suffix}.{file_extension(file_name)}"


def document_path(lot_id: str, test_id: str, file_name: str, timestamp_ms: int) -> str:
    return f"{lot_id}/{test_id}/documents/{timestamp_ms}-{safe_file_name(file_name)}"


def file_name_from_url(url: str) -> str:
    """Last URL segment with any ``<digits>-`` upload prefix removed."""
    name = url.split("/")[-1]
    match = _TIMESTAMP_PREFIX.match(name)
    return match.group(1) if match else name


def is_image_url(url: str) -> bool:
    lower = url.lower()
    return any(ext in lower for ext in IMAGE_EXTENSIONS)


def is_pdf_url(url: str) -> bool:
    return ".pdf" in url.lower()
