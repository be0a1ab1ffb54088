"""
Audit Models for Finance Tracker

Every ledger operation leaves a structured event behind:
what was attempted, on which record, and how it ended.
This gives a readable trail when the dashboard and the remote
store disagree about what happened.

DESIGN DECISION: Events are append-only log lines. They are not
persisted by this package and never feed back into ledger state.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Load
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_LOAD_FAILED = "ledger_load_failed"

    # Mutations
    TRANSACTION_CREATED = "transaction_created"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    VALIDATION_FAILED = "validation_failed"
    REMOTE_FAILURE = "remote_failure"

    # Process-local UI state
    EDIT_STARTED = "edit_started"
    EDIT_CANCELLED = "edit_cancelled"
    BUDGET_CHANGED = "budget_changed"
    FILTER_CHANGED = "filter_changed"

    # System events
    LISTENER_FAILED = "listener_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Which record, if any (ids are opaque strings from the remote store)
    transaction_id: Optional[str] = None
    operation: Optional[str] = Field(
        default=None,
        description="Store operation that emitted the event (load_all, create, ...)"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "transaction_id": self.transaction_id,
            "operation": self.operation,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.ledger_loaded(count=12)
        event = AuditEventBuilder.remote_failure("update", "Network Error", transaction_id)
    """

    @staticmethod
    def ledger_loaded(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            operation="load_all",
            description=f"Ledger loaded with {count} transactions",
            details={"count": count},
        )

    @staticmethod
    def ledger_load_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            operation="load_all",
            description="Ledger load failed; keeping previous ledger",
            error_message=error_message,
        )

    @staticmethod
    def transaction_created(
        transaction_id: str,
        kind: str,
        amount: str,
        category: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_CREATED,
            transaction_id=transaction_id,
            operation="create",
            description=f"Created {kind} of {amount} in {category}",
            details={"kind": kind, "amount": amount, "category": category},
            is_user_action=True,
        )

    @staticmethod
    def transaction_updated(transaction_id: str, replaced: bool) -> AuditEvent:
        # replaced=False means the record vanished locally while the call was in flight
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            severity=AuditSeverity.INFO if replaced else AuditSeverity.WARNING,
            transaction_id=transaction_id,
            operation="update",
            description=(
                "Transaction updated"
                if replaced
                else "Transaction updated remotely but no longer in local ledger"
            ),
            details={"replaced": replaced},
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(transaction_id: str, removed: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            severity=AuditSeverity.INFO if removed else AuditSeverity.WARNING,
            transaction_id=transaction_id,
            operation="remove",
            description=(
                "Transaction deleted"
                if removed
                else "Transaction deleted remotely but was not in local ledger"
            ),
            details={"removed": removed},
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        operation: str,
        issues: list[dict],
        transaction_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            transaction_id=transaction_id,
            operation=operation,
            description=f"Input rejected before {operation}: {len(issues)} issue(s)",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def remote_failure(
        operation: str,
        error_message: str,
        transaction_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REMOTE_FAILURE,
            severity=AuditSeverity.ERROR,
            transaction_id=transaction_id,
            operation=operation,
            description=f"Remote ledger call failed during {operation}",
            error_message=error_message,
        )

    @staticmethod
    def edit_started(transaction_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EDIT_STARTED,
            severity=AuditSeverity.DEBUG,
            transaction_id=transaction_id,
            description="Editing started",
            is_user_action=True,
        )

    @staticmethod
    def edit_cancelled(transaction_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EDIT_CANCELLED,
            severity=AuditSeverity.DEBUG,
            transaction_id=transaction_id,
            description="Editing cancelled",
            is_user_action=True,
        )

    @staticmethod
    def budget_changed(old: str, new: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_CHANGED,
            severity=AuditSeverity.DEBUG,
            description=f"Budget changed from {old} to {new}",
            details={"old": old, "new": new},
            is_user_action=True,
        )

    @staticmethod
    def filter_changed(category: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FILTER_CHANGED,
            severity=AuditSeverity.DEBUG,
            description=f"Active filter set to {category}",
            details={"category": category},
            is_user_action=True,
        )

    @staticmethod
    def listener_failed(listener: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LISTENER_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"State listener {listener} raised",
            error_message=error_message,
        )
