"""
Module: plant_engines.supplier_status
Responsibility:
    Supplier approval status presentation rules shared by purchasing and
    receiving: highlight level, whether to warn before using the supplier,
    and a human-readable label.

Status mapping:
    - approved: no highlight, no warning
    - probation: amber highlight, warning
    - draft, pending_qa, rejected, archived, unknown: red highlight, warning
"""

from __future__ import annotations

from enum import Enum


class SupplierApprovalStatus(str, Enum):
    DRAFT = "draft"
    PENDING_QA = "pending_qa"
    PROBATION = "probation"
    APPROVED = "approved"
    REJECTED = "rejected"
    ARCHIVED = "archived"


class HighlightLevel(str, Enum):
    NONE = "none"
    AMBER = "amber"
    RED = "red"


STATUS_LABELS: dict[str, str] = {
    SupplierApprovalStatus.DRAFT.value: "Draft",
    SupplierApprovalStatus.PENDING_QA.value: "Pending QA",
    SupplierApprovalStatus.PROBATION.value: "Probation",
    SupplierApprovalStatus.APPROVED.value: "Approved",
    SupplierApprovalStatus.REJECTED.value: "Rejected",
    SupplierApprovalStatus.ARCHIVED.value: "Archived",
}


def _normalize(status: str | None) -> str | None:
    return status.lower() if status else None


def highlight_level(status: str | None) -> HighlightLevel:
    normalized = _normalize(status)
    if normalized == SupplierApprovalStatus.APPROVED.value:
        return HighlightLevel.NONE
    if normalized == SupplierApprovalStatus.PROBATION.value:
        return HighlightLevel.AMBER
    return HighlightLevel.RED


def should_warn(status: str | None) -> bool:
    return _normalize(status) != SupplierApprovalStatus.APPROVED.value


def status_label(status: str | None) -> str:
    if not status:
        return "Unknown"
    return STATUS_LABELS.get(status.lower(), status)


def warning_message(supplier_name: str | None = None) -> str:
    if supplier_name:
        return f'The supplier "{supplier_name}" is not approved or is on probation.'
    return "This supplier is not approved or is on probation."
