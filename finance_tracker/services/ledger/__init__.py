"""
Remote Ledger Package

Provides the abstract ledger client and its implementations.
The REST binding is the production backend; the in-memory binding
serves tests and offline use.
"""

from finance_tracker.services.ledger.interface import (
    LedgerClientInterface,
    LedgerError,
    NotFoundError,
    RemoteLedgerError,
)
from finance_tracker.services.ledger.http_client import HttpLedgerClient
from finance_tracker.services.ledger.in_memory import InMemoryLedgerClient

__all__ = [
    # Interface
    "LedgerClientInterface",
    # Exceptions
    "LedgerError",
    "NotFoundError",
    "RemoteLedgerError",
    # Implementations
    "HttpLedgerClient",
    "InMemoryLedgerClient",
]
