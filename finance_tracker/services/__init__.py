"""Services package."""

from finance_tracker.services.ledger import (
    HttpLedgerClient,
    InMemoryLedgerClient,
    LedgerClientInterface,
    LedgerError,
    NotFoundError,
    RemoteLedgerError,
)

__all__ = [
    "HttpLedgerClient",
    "InMemoryLedgerClient",
    "LedgerClientInterface",
    "LedgerError",
    "NotFoundError",
    "RemoteLedgerError",
]
