"""
Audit Logger

DESIGN DECISION: Every ledger operation is logged.
This provides:
1. Traceability of what the store asked the remote service to do
2. Debugging capability when local and remote state drift
3. A record of failures the UI only showed briefly

The audit logger:
- Is synchronous (it only writes local structured logs)
- Never raises into the caller; a logging failure must not undo a mutation
"""

from collections import deque
from typing import Optional

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service for the TransactionStore.

    Keeps the most recent events in memory as well, so a front end (or a
    test) can show what just happened without tailing the log.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("finance_tracker.audit")
        self._history: deque[AuditEvent] = deque(maxlen=history_size)

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Most recent events, oldest first."""
        return list(self._history)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at the level matching its severity."""
        self._history.append(event)

        log_dict = event.to_log_dict()
        try:
            if event.severity.value == "error":
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Log rendering problems are reported, never propagated
            structlog.get_logger("finance_tracker.audit").error(
                "audit_log_failed",
                error=str(e),
                event_id=str(event.event_id),
            )

    def log_ledger_loaded(self, count: int) -> None:
        self.log(AuditEventBuilder.ledger_loaded(count))

    def log_ledger_load_failed(self, error_message: str) -> None:
        self.log(AuditEventBuilder.ledger_load_failed(error_message))

    def log_transaction_created(
        self,
        transaction_id: str,
        kind: str,
        amount: str,
        category: str,
    ) -> None:
        self.log(AuditEventBuilder.transaction_created(
            transaction_id=transaction_id,
            kind=kind,
            amount=amount,
            category=category,
        ))

    def log_transaction_updated(self, transaction_id: str, replaced: bool) -> None:
        self.log(AuditEventBuilder.transaction_updated(transaction_id, replaced))

    def log_transaction_deleted(self, transaction_id: str, removed: bool) -> None:
        self.log(AuditEventBuilder.transaction_deleted(transaction_id, removed))

    def log_validation_failed(
        self,
        operation: str,
        issues: list[dict],
        transaction_id: Optional[str] = None,
    ) -> None:
        self.log(AuditEventBuilder.validation_failed(
            operation=operation,
            issues=issues,
            transaction_id=transaction_id,
        ))

    def log_remote_failure(
        self,
        operation: str,
        error_message: str,
        transaction_id: Optional[str] = None,
    ) -> None:
        self.log(AuditEventBuilder.remote_failure(
            operation=operation,
            error_message=error_message,
            transaction_id=transaction_id,
        ))

    def log_edit_started(self, transaction_id: str) -> None:
        self.log(AuditEventBuilder.edit_started(transaction_id))

    def log_edit_cancelled(self, transaction_id: Optional[str]) -> None:
        self.log(AuditEventBuilder.edit_cancelled(transaction_id))

    def log_budget_changed(self, old: str, new: str) -> None:
        self.log(AuditEventBuilder.budget_changed(old, new))

    def log_filter_changed(self, category: str) -> None:
        self.log(AuditEventBuilder.filter_changed(category))

    def log_listener_failed(self, listener: str, error_message: str) -> None:
        self.log(AuditEventBuilder.listener_failed(listener, error_message))
