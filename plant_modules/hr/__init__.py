"""
HR Module (``plant_modules.hr``).

Responsibility
--------------
Employee document records, the shop-floor time clock kiosk and the weekly
payroll export (CSV and XLSX).

Architecture position
---------------------
**Modules layer** -- DTOs, ORM models and ``HRService``.  Hour and pay math
comes from ``plant_engines.payroll``.
"""

from plant_modules.hr.models import (
    DOCUMENT_TYPE_LABELS,
    Department,
    DocumentType,
    Employee,
    EmployeeDocument,
    EmploymentStatus,
    KioskSession,
    PayrollReport,
    TimeEntry,
)

__all__ = [
    "DOCUMENT_TYPE_LABELS",
    "Department",
    "DocumentType",
    "Employee",
    "EmployeeDocument",
    "EmploymentStatus",
    "KioskSession",
    "PayrollReport",
    "TimeEntry",
]
