"""
Data Models Package

This package contains all Pydantic models used by Accrual Ledger.
All data flowing through the engine must conform to these schemas.
"""

from accrual_ledger.models.ledger import (
    Allocation,
    CategoryTotal,
    CoverageBucket,
    DailyEntry,
    DailySummary,
    FlowType,
    LedgerRecord,
    MonthlyTotal,
    PeriodStatistics,
    PeriodView,
    ReportRequest,
    ReportResult,
    ReportWindow,
    ValidationIssue,
    ValidationResult,
)
from accrual_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Allocation",
    "CategoryTotal",
    "CoverageBucket",
    "DailyEntry",
    "DailySummary",
    "FlowType",
    "LedgerRecord",
    "MonthlyTotal",
    "PeriodStatistics",
    "PeriodView",
    "ReportRequest",
    "ReportResult",
    "ReportWindow",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
