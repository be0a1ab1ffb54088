"""
Shared fixtures for Finance Tracker tests.

All tests run against a pinned reference time and the in-memory ledger
client, so nothing depends on the wall clock or the network.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from itertools import count

import pytest

from finance_tracker.audit import AuditLogger
from finance_tracker.config import DashboardSettings
from finance_tracker.models.transaction import TransactionKind, TransactionRecord
from finance_tracker.services.ledger import InMemoryLedgerClient
from finance_tracker.store import TransactionStore


REFERENCE_TIME = datetime(2025, 3, 20, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def ref_time() -> datetime:
    return REFERENCE_TIME


@pytest.fixture
def make_record():
    """Factory for canonical records with sequential ids."""
    ids = count(1)

    def _make(
        amount="100",
        kind=TransactionKind.EXPENSE,
        category="General",
        title="Item",
        occurred_at=None,
        days_ago=None,
        record_id=None,
    ) -> TransactionRecord:
        if occurred_at is None:
            occurred_at = REFERENCE_TIME - timedelta(days=days_ago or 0)
        return TransactionRecord(
            id=record_id or f"tx{next(ids)}",
            title=title,
            amount=Decimal(str(amount)),
            kind=kind,
            category=category,
            occurred_at=occurred_at,
        )

    return _make


@pytest.fixture
def dashboard_settings() -> DashboardSettings:
    return DashboardSettings(
        default_budget=Decimal("20000"),
        timezone="UTC",
        trend_days=14,
    )


@pytest.fixture
def client() -> InMemoryLedgerClient:
    return InMemoryLedgerClient(clock=lambda: REFERENCE_TIME)


@pytest.fixture
def store(client, dashboard_settings) -> TransactionStore:
    return TransactionStore(
        client=client,
        audit_logger=AuditLogger(),
        settings=dashboard_settings,
        clock=lambda: REFERENCE_TIME,
    )
