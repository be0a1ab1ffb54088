"""
In-Memory Ledger Client

A process-local stand-in for the remote ledger. It behaves like the
REST service: assigns ids, stamps timestamps, defaults the transaction
date to "now", lists most recent first, and answers unknown ids with
"Transaction not found.".

Used for tests, offline demos (FINANCE_BACKEND=memory) and for
reproducing response-ordering hazards via injected delays and failures.
"""

import asyncio
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional
from uuid import uuid4

from finance_tracker.models.transaction import (
    DeleteConfirmation,
    TransactionDraft,
    TransactionRecord,
)
from finance_tracker.services.ledger.interface import (
    LedgerClientInterface,
    NotFoundError,
    RemoteLedgerError,
)


NOT_FOUND_MESSAGE = "Transaction not found."


def _sort_key(record: TransactionRecord) -> datetime:
    occurred = record.occurred_at
    if occurred.tzinfo is None:
        return occurred.replace(tzinfo=timezone.utc)
    return occurred


class InMemoryLedgerClient(LedgerClientInterface):
    """Dictionary-backed implementation of the remote ledger."""

    def __init__(
        self,
        records: Optional[Iterable[TransactionRecord]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._records: dict[str, TransactionRecord] = {r.id: r for r in records or []}
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._failures: list[str] = []
        self._delays: list[float] = []
        # (operation, transaction_id) per call, in issue order
        self.calls: list[tuple[str, Optional[str]]] = []

    @property
    def records(self) -> list[TransactionRecord]:
        """Stored records in canonical order."""
        return sorted(self._records.values(), key=_sort_key, reverse=True)

    def fail_next(self, message: str = "Network Error") -> None:
        """Make the next call raise RemoteLedgerError with this message."""
        self._failures.append(message)

    def delay_next(self, seconds: float) -> None:
        """Make the next call wait before answering."""
        self._delays.append(seconds)

    async def _begin(self, operation: str, transaction_id: Optional[str] = None) -> None:
        self.calls.append((operation, transaction_id))
        # Pop both queues at issue time so concurrent calls get their own setup
        delay = self._delays.pop(0) if self._delays else 0.0
        failure = self._failures.pop(0) if self._failures else None
        await asyncio.sleep(delay)
        if failure is not None:
            raise RemoteLedgerError(failure)

    async def list_all(self) -> list[TransactionRecord]:
        await self._begin("list_all")
        return self.records

    async def create(self, draft: TransactionDraft) -> TransactionRecord:
        await self._begin("create")
        now = self._clock()
        record = TransactionRecord(
            id=uuid4().hex,
            title=draft.title,
            amount=draft.amount,
            kind=draft.kind,
            category=draft.category,
            occurred_at=draft.occurred_at or now,
            created_at=now,
            updated_at=now,
        )
        self._records[record.id] = record
        return record

    async def update(self, transaction_id: str, draft: TransactionDraft) -> TransactionRecord:
        await self._begin("update", transaction_id)
        existing = self._records.get(transaction_id)
        if existing is None:
            raise NotFoundError(NOT_FOUND_MESSAGE, status_code=404)

        updated = existing.model_copy(update={
            "title": draft.title,
            "amount": draft.amount,
            "kind": draft.kind,
            "category": draft.category,
            "occurred_at": draft.occurred_at or existing.occurred_at,
            "updated_at": self._clock(),
        })
        self._records[transaction_id] = updated
        return updated

    async def delete(self, transaction_id: str) -> DeleteConfirmation:
        await self._begin("delete", transaction_id)
        if transaction_id not in self._records:
            raise NotFoundError(NOT_FOUND_MESSAGE, status_code=404)
        del self._records[transaction_id]
        return DeleteConfirmation(id=transaction_id)
