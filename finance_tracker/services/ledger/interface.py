"""
Abstract Remote Ledger Interface

DESIGN DECISION: The store talks to persistence only through this interface.
This allows us to:
1. Bind to the REST API today and something else later
2. Use an in-memory ledger for tests and offline demos
3. Keep the store's reconciliation logic free of transport details

The interface is intentionally tiny - four operations, nothing else.
Whatever a backend accepts, it must hand back the canonical record.
"""

from abc import ABC, abstractmethod

from finance_tracker.models.transaction import (
    DeleteConfirmation,
    TransactionDraft,
    TransactionRecord,
)


class LedgerClientInterface(ABC):
    """
    Abstract interface for the remote ledger.

    Every failure surfaces as a RemoteLedgerError carrying a message
    that can be shown to a user as-is.
    """

    @abstractmethod
    async def list_all(self) -> list[TransactionRecord]:
        """
        Fetch the whole ledger.

        Returns:
            Records in the store's canonical order (most recent first)

        Raises:
            RemoteLedgerError: If the call fails or the payload is malformed
        """
        pass

    @abstractmethod
    async def create(self, draft: TransactionDraft) -> TransactionRecord:
        """
        Persist a new transaction.

        Args:
            draft: Validated user input

        Returns:
            The canonical record with its assigned id

        Raises:
            RemoteLedgerError: If the store rejects or cannot be reached
        """
        pass

    @abstractmethod
    async def update(self, transaction_id: str, draft: TransactionDraft) -> TransactionRecord:
        """
        Replace the fields of an existing transaction.

        Returns:
            The canonical record after the update

        Raises:
            NotFoundError: If no transaction has that id
            RemoteLedgerError: For any other failure
        """
        pass

    @abstractmethod
    async def delete(self, transaction_id: str) -> DeleteConfirmation:
        """
        Delete a transaction.

        Returns:
            Confirmation echoing the deleted id

        Raises:
            NotFoundError: If no transaction has that id
            RemoteLedgerError: For any other failure
        """
        pass


class LedgerError(Exception):
    """Base exception for ledger operations. `message` is user-facing."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RemoteLedgerError(LedgerError):
    """The remote ledger call failed (network, non-success response, bad payload)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(RemoteLedgerError):
    """No transaction with the requested id exists remotely."""
    pass
