"""
Data Models Package

This package contains all Pydantic models used in Finance Tracker.
All data flowing through the system must conform to these schemas.
"""

from finance_tracker.models.transaction import (
    ALL_CATEGORIES,
    DEFAULT_CATEGORY,
    DeleteConfirmation,
    TransactionDraft,
    TransactionKind,
    TransactionRecord,
    ValidationIssue,
)
from finance_tracker.models.summary import (
    BudgetStatus,
    CategoryTotal,
    DailyPoint,
    DashboardSnapshot,
    LedgerTotals,
    TrendSeries,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "ALL_CATEGORIES",
    "DEFAULT_CATEGORY",
    "DeleteConfirmation",
    "TransactionDraft",
    "TransactionKind",
    "TransactionRecord",
    "ValidationIssue",
    # Derived views
    "BudgetStatus",
    "CategoryTotal",
    "DailyPoint",
    "DashboardSnapshot",
    "LedgerTotals",
    "TrendSeries",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
