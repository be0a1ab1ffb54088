"""
Transaction Store for Finance Tracker

The single writer of the ledger. Every other part of the system reads
from it; nothing else mutates it.

Flow for each mutation:
1. Validate input locally (no network on failure)
2. Call the remote ledger
3. Reconcile the local ledger with the canonical response
4. Notify listeners

DESIGN DECISION: Nothing is optimistic. The ledger only ever reflects
what the remote store acknowledged, and a failed call leaves it exactly
as it was.

KNOWN HAZARD: calls are not queued. If two mutations are in flight their
responses are applied in completion order, not issue order, so an older
update that resolves last overwrites a newer one. This store does not
sequence requests.
"""

import asyncio
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence, TypeVar, Union

from finance_tracker.audit import AuditLogger
from finance_tracker.config import DashboardSettings, Settings, get_settings
from finance_tracker.models.summary import (
    BudgetStatus,
    CategoryTotal,
    DashboardSnapshot,
    LedgerTotals,
    TrendSeries,
)
from finance_tracker.models.transaction import (
    ALL_CATEGORIES,
    TransactionDraft,
    TransactionRecord,
)
from finance_tracker.queries import (
    build_snapshot,
    category_breakdown,
    category_index,
    compute_totals,
    daily_expense_series,
    evaluate_budget,
    filter_by_category,
    month_to_date_expense,
)
from finance_tracker.services.ledger import (
    HttpLedgerClient,
    InMemoryLedgerClient,
    LedgerClientInterface,
    LedgerError,
)
from finance_tracker.validation import TransactionValidationError, TransactionValidator


Listener = Callable[["TransactionStore"], None]
DraftInput = Union[TransactionDraft, Mapping[str, Any]]
T = TypeVar("T")

# Fallback messages when a failure carries no text of its own
LOAD_FAILED = "Failed to load transactions"
CREATE_FAILED = "Failed to create transaction"
UPDATE_FAILED = "Failed to update transaction"
DELETE_FAILED = "Failed to delete transaction"


class TransactionStore:
    """
    Owns the ledger and the process-local dashboard state.

    State:
    - ledger: records acknowledged by the remote store
    - loading: True while any remote call is pending
    - last_error: most recent failure message (cleared when an operation starts)
    - editing_target: the record being edited, if any
    - budget / active_filter: ephemeral UI state, never persisted

    Derived values (totals, categories, budget status, filtered view,
    trend) are properties recomputed on every read.
    """

    def __init__(
        self,
        client: LedgerClientInterface,
        validator: Optional[TransactionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[DashboardSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the store. The ledger starts empty until load_all().

        Args:
            client: Remote ledger binding
            validator: Input validator (default TransactionValidator)
            audit_logger: Structured operation log (default: a local AuditLogger)
            settings: Dashboard settings (default budget, timezone, trend length)
            clock: Returns "now"; injected by tests to pin the reference time
        """
        self._client = client
        self._validator = validator or TransactionValidator()
        self._audit = audit_logger or AuditLogger()
        self._settings = settings or get_settings().dashboard
        self._zone = self._settings.tzinfo
        self._clock = clock or (lambda: datetime.now(self._zone))

        self._ledger: list[TransactionRecord] = []
        self._pending_calls = 0
        self._last_error: Optional[str] = None
        self._editing_target: Optional[TransactionRecord] = None
        self._budget: Decimal = self._settings.default_budget
        self._active_filter: str = ALL_CATEGORIES
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def ledger(self) -> tuple[TransactionRecord, ...]:
        """Read-only view of the ledger, in ledger order."""
        return tuple(self._ledger)

    @property
    def loading(self) -> bool:
        return self._pending_calls > 0

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def editing_target(self) -> Optional[TransactionRecord]:
        return self._editing_target

    @property
    def budget(self) -> Decimal:
        return self._budget

    @property
    def active_filter(self) -> str:
        return self._active_filter

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit

    def now(self) -> datetime:
        """The reference instant used when a caller does not pass one."""
        return self._clock()

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def totals(self) -> LedgerTotals:
        return compute_totals(self._ledger)

    @property
    def income_total(self) -> Decimal:
        return self.totals.income_total

    @property
    def expense_total(self) -> Decimal:
        return self.totals.expense_total

    @property
    def balance(self) -> Decimal:
        return self.totals.balance

    @property
    def categories(self) -> list[str]:
        return category_index(self._ledger)

    @property
    def category_breakdown(self) -> list[CategoryTotal]:
        return category_breakdown(self._ledger)

    @property
    def filtered(self) -> Sequence[TransactionRecord]:
        return filter_by_category(self.ledger, self._active_filter)

    def month_to_date_expense(self, now: Optional[datetime] = None) -> Decimal:
        return month_to_date_expense(self._ledger, now or self.now(), self._zone)

    def budget_status(self, now: Optional[datetime] = None) -> BudgetStatus:
        return evaluate_budget(self.month_to_date_expense(now), self._budget)

    @property
    def over_budget(self) -> bool:
        return self.budget_status().over_budget

    def trend(self, now: Optional[datetime] = None) -> TrendSeries:
        """Daily expense series over the whole ledger."""
        return daily_expense_series(
            self._ledger,
            now or self.now(),
            self._settings.trend_days,
            self._zone,
        )

    def filtered_trend(self, now: Optional[datetime] = None) -> TrendSeries:
        """Daily expense series over the records visible under the active filter."""
        return daily_expense_series(
            self.filtered,
            now or self.now(),
            self._settings.trend_days,
            self._zone,
        )

    @property
    def has_trend_data(self) -> bool:
        return self.trend().has_data

    def snapshot(self, now: Optional[datetime] = None) -> DashboardSnapshot:
        """All derived values at one reference instant."""
        return build_snapshot(
            self.ledger,
            self._budget,
            self._active_filter,
            now or self.now(),
            self._settings.trend_days,
            self._zone,
        )

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        """Call `listener(store)` after every state change."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                # A broken reader must not undo an acknowledged mutation
                self._audit.log_listener_failed(
                    getattr(listener, "__name__", repr(listener)),
                    str(e),
                )

    # ------------------------------------------------------------------
    # Remote operations
    # ------------------------------------------------------------------

    async def load_all(self) -> None:
        """
        Replace the ledger with the remote store's full list.

        Failures are recorded in last_error and never raised: there is no
        caller waiting on a load to react to.
        """
        self._last_error = None
        try:
            records = await self._remote(self._client.list_all())
        except Exception as e:
            message = _error_message(e, LOAD_FAILED)
            self._last_error = message
            self._audit.log_ledger_load_failed(message)
            self._notify()
            return

        self._ledger = list(records)
        self._audit.log_ledger_loaded(len(self._ledger))
        self._notify()

    async def create(self, draft: DraftInput) -> TransactionRecord:
        """
        Persist a new transaction and put it at the front of the ledger.

        Raises:
            TransactionValidationError: Invalid input (remote store not contacted)
            RemoteLedgerError: The remote call failed
        """
        self._last_error = None
        clean = self._validate("create", draft)
        if clean.occurred_at is None:
            clean = clean.model_copy(update={"occurred_at": self.now()})

        try:
            record = await self._remote(self._client.create(clean))
        except Exception as e:
            self._fail("create", e, CREATE_FAILED)
            raise

        self._ledger.insert(0, record)
        self._audit.log_transaction_created(
            transaction_id=record.id,
            kind=record.kind.value,
            amount=str(record.amount),
            category=record.category,
        )
        self._notify()
        return record

    async def update(self, transaction_id: str, draft: DraftInput) -> TransactionRecord:
        """
        Update a transaction and replace it in place.

        On success editing_target is cleared. On failure neither the ledger
        nor editing_target changes.

        Raises:
            TransactionValidationError: Invalid input (remote store not contacted)
            RemoteLedgerError: The remote call failed
        """
        self._last_error = None
        clean = self._validate("update", draft, transaction_id)

        try:
            record = await self._remote(self._client.update(transaction_id, clean))
        except Exception as e:
            self._fail("update", e, UPDATE_FAILED, transaction_id)
            raise

        replaced = False
        for index, existing in enumerate(self._ledger):
            if existing.id == transaction_id:
                self._ledger[index] = record
                replaced = True
        self._editing_target = None
        self._audit.log_transaction_updated(transaction_id, replaced)
        self._notify()
        return record

    async def remove(self, transaction_id: str) -> None:
        """
        Delete a transaction and drop it from the ledger.

        Raises:
            RemoteLedgerError: The remote call failed
        """
        self._last_error = None
        try:
            await self._remote(self._client.delete(transaction_id))
        except Exception as e:
            self._fail("remove", e, DELETE_FAILED, transaction_id)
            raise

        before = len(self._ledger)
        self._ledger = [r for r in self._ledger if r.id != transaction_id]
        self._audit.log_transaction_deleted(transaction_id, len(self._ledger) < before)
        self._notify()

    # ------------------------------------------------------------------
    # Local state (no network)
    # ------------------------------------------------------------------

    def begin_edit(self, record: TransactionRecord) -> None:
        self._editing_target = record
        self._audit.log_edit_started(record.id)
        self._notify()

    def cancel_edit(self) -> None:
        previous = self._editing_target
        self._editing_target = None
        self._audit.log_edit_cancelled(previous.id if previous else None)
        self._notify()

    def set_active_filter(self, category: str) -> None:
        """Select "All" or a category. Unknown categories simply filter to nothing."""
        if not isinstance(category, str) or not category:
            raise ValueError("Filter must be 'All' or a category name")
        self._active_filter = category
        self._audit.log_filter_changed(category)
        self._notify()

    def set_budget(self, value: Union[Decimal, int, float, str]) -> None:
        """
        Set the monthly budget threshold.

        Raises:
            ValueError: If the value is not a finite, non-negative number
        """
        try:
            budget = value if isinstance(value, Decimal) else Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Budget must be a number, got {value!r}")
        if not budget.is_finite() or budget < 0:
            raise ValueError("Budget must be a finite number >= 0")

        old = self._budget
        self._budget = budget
        self._audit.log_budget_changed(str(old), str(budget))
        self._notify()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _validate(
        self,
        operation: str,
        draft: DraftInput,
        transaction_id: Optional[str] = None,
    ) -> TransactionDraft:
        try:
            return self._validator.validate(draft)
        except TransactionValidationError as e:
            self._last_error = e.message
            self._audit.log_validation_failed(
                operation=operation,
                issues=[issue.model_dump() for issue in e.issues],
                transaction_id=transaction_id,
            )
            self._notify()
            raise

    async def _remote(self, call: Awaitable[T]) -> T:
        """
        Await one client call, counting it as pending while it runs.

        The count is released even when the call is cancelled, so an
        abandoned request never leaves `loading` stuck on.
        """
        self._pending_calls += 1
        self._notify()
        cancelled = False
        try:
            return await call
        except asyncio.CancelledError:
            cancelled = True
            raise
        finally:
            self._pending_calls -= 1
            if cancelled:
                # No outcome will be applied, so report the loading change here
                self._notify()

    def _fail(
        self,
        operation: str,
        error: Exception,
        fallback: str,
        transaction_id: Optional[str] = None,
    ) -> None:
        message = _error_message(error, fallback)
        self._last_error = message
        self._audit.log_remote_failure(operation, message, transaction_id)
        self._notify()


def _error_message(error: Exception, fallback: str) -> str:
    if isinstance(error, LedgerError):
        return error.message or fallback
    return str(error) or fallback


def create_store(
    settings: Optional[Settings] = None,
    client: Optional[LedgerClientInterface] = None,
) -> TransactionStore:
    """
    Factory function to build a TransactionStore from configuration.

    Args:
        settings: Root settings (default: environment)
        client: Explicit ledger client; overrides FINANCE_BACKEND

    Returns:
        A store with an empty ledger - call load_all() to populate it
    """
    settings = settings or get_settings()
    dashboard = settings.dashboard

    if client is None:
        if dashboard.backend == "memory":
            client = InMemoryLedgerClient()
        else:
            client = HttpLedgerClient(settings.ledger_api)

    return TransactionStore(
        client=client,
        audit_logger=AuditLogger(),
        settings=dashboard,
    )
