"""
Tests for TransactionStore

Every test builds a fresh store against the in-memory ledger client,
so state never leaks between tests.
"""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from finance_tracker.config import DashboardSettings, get_settings
from finance_tracker.models.audit import AuditEventType
from finance_tracker.models.transaction import (
    ALL_CATEGORIES,
    TransactionDraft,
    TransactionKind,
)
from finance_tracker.services.ledger import (
    InMemoryLedgerClient,
    NotFoundError,
    RemoteLedgerError,
)
from finance_tracker.store import TransactionStore, create_store
from finance_tracker.validation import TransactionValidationError


def draft(**overrides) -> dict:
    data = {"title": "Lunch", "amount": "350", "kind": "expense", "category": "Food"}
    data.update(overrides)
    return data


@pytest.fixture
def seeded_client(make_record, ref_time):
    return InMemoryLedgerClient(
        records=[
            make_record(record_id="a", amount=5000, kind=TransactionKind.INCOME, category="Work", days_ago=10),
            make_record(record_id="b", amount=2000, category="Food", days_ago=1),
            make_record(record_id="c", amount=700, category="Transport", days_ago=5),
        ],
        clock=lambda: ref_time,
    )


@pytest.fixture
def seeded_store(seeded_client, dashboard_settings, ref_time):
    return TransactionStore(
        client=seeded_client,
        settings=dashboard_settings,
        clock=lambda: ref_time,
    )


class TestInitialState:
    """Tests for a freshly built store."""

    def test_defaults(self, store):
        """Test the empty starting state."""
        assert store.ledger == ()
        assert store.loading is False
        assert store.last_error is None
        assert store.editing_target is None
        assert store.active_filter == ALL_CATEGORIES
        assert store.budget == Decimal("20000")

    def test_budget_default_comes_from_settings(self, client, ref_time):
        """Test that the starting budget is configurable."""
        store = TransactionStore(
            client=client,
            settings=DashboardSettings(default_budget=Decimal("3000")),
            clock=lambda: ref_time,
        )
        assert store.budget == Decimal("3000")

    def test_trend_window_comes_from_settings(self, client, ref_time):
        """Test that the trend (and its empty-state wording) follows trend_days."""
        store = TransactionStore(
            client=client,
            settings=DashboardSettings(trend_days=7),
            clock=lambda: ref_time,
        )
        assert store.trend().days == 7
        assert store.filtered_trend().days == 7

    def test_derived_values_on_empty_ledger(self, store):
        """Test that derived views are well-formed with no data."""
        assert store.balance == 0
        assert store.categories == ["All"]
        assert len(store.trend().points) == 14
        assert store.has_trend_data is False
        assert store.over_budget is False


class TestLoadAll:
    """Tests for the full ledger load."""

    @pytest.mark.asyncio
    async def test_load_replaces_ledger_in_remote_order(self, seeded_store):
        """Test that load uses the remote store's most-recent-first order."""
        await seeded_store.load_all()
        assert [r.id for r in seeded_store.ledger] == ["b", "c", "a"]
        assert seeded_store.loading is False

    @pytest.mark.asyncio
    async def test_load_failure_keeps_ledger_and_does_not_raise(self, seeded_store, seeded_client):
        """Test that a failed load only sets last_error."""
        await seeded_store.load_all()
        before = seeded_store.ledger

        seeded_client.fail_next("Network Error")
        await seeded_store.load_all()

        assert seeded_store.ledger == before
        assert seeded_store.last_error == "Network Error"
        assert seeded_store.loading is False

    @pytest.mark.asyncio
    async def test_loading_true_while_pending(self, seeded_store, seeded_client):
        """Test the loading flag for the duration of the call."""
        seeded_client.delay_next(0.01)
        task = asyncio.create_task(seeded_store.load_all())
        await asyncio.sleep(0)
        assert seeded_store.loading is True
        await task
        assert seeded_store.loading is False

    @pytest.mark.asyncio
    async def test_cancelled_load_releases_loading(self, seeded_store, seeded_client):
        """Test that a cancelled load does not leave loading stuck on."""
        seeded_client.delay_next(1.0)
        task = asyncio.create_task(seeded_store.load_all())
        await asyncio.sleep(0.01)
        assert seeded_store.loading is True

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert seeded_store.loading is False
        assert seeded_store.ledger == ()

    @pytest.mark.asyncio
    async def test_error_cleared_on_next_operation(self, seeded_store, seeded_client):
        """Test that last_error is not an accumulating log."""
        seeded_client.fail_next("boom")
        await seeded_store.load_all()
        assert seeded_store.last_error == "boom"

        await seeded_store.load_all()
        assert seeded_store.last_error is None


class TestCreate:
    """Tests for create."""

    @pytest.mark.asyncio
    async def test_create_inserts_at_front(self, seeded_store):
        """Test that a new record lands at index 0 and length grows by one."""
        await seeded_store.load_all()
        before = len(seeded_store.ledger)

        record = await seeded_store.create(draft(title="Fuel", category="Transport"))

        assert len(seeded_store.ledger) == before + 1
        assert seeded_store.ledger[0] == record
        assert record.title == "Fuel"
        assert record.id

    @pytest.mark.asyncio
    async def test_create_defaults_date_to_now(self, store, ref_time):
        """Test that an unspecified occurrence date becomes the current time."""
        record = await store.create(draft())
        assert record.occurred_at == ref_time

    @pytest.mark.asyncio
    async def test_create_accepts_draft_model(self, store):
        """Test passing a TransactionDraft instead of raw data."""
        record = await store.create(TransactionDraft(title="Salary", amount=5000, kind="income"))
        assert record.category == "General"
        assert store.income_total == Decimal("5000")

    @pytest.mark.asyncio
    async def test_empty_title_fails_before_remote_call(self, store, client):
        """Scenario: create with title="" never reaches the remote store."""
        with pytest.raises(TransactionValidationError):
            await store.create(draft(title=""))

        assert client.calls == []
        assert store.ledger == ()
        assert store.last_error == "Title is required."

    @pytest.mark.asyncio
    async def test_out_of_range_amount_fails_before_remote_call(self, store, client):
        """Test that an amount too large for a JSON number is a validation failure."""
        with pytest.raises(TransactionValidationError):
            await store.create(draft(amount="1e400"))

        assert client.calls == []
        assert store.last_error == "Amount must be a number > 0."
        assert store.loading is False

    @pytest.mark.asyncio
    async def test_remote_failure_leaves_ledger_and_reraises(self, seeded_store, seeded_client):
        """Test that a failed create records the error and propagates it."""
        await seeded_store.load_all()
        before = seeded_store.ledger

        seeded_client.fail_next("Server error")
        with pytest.raises(RemoteLedgerError, match="Server error"):
            await seeded_store.create(draft())

        assert seeded_store.ledger == before
        assert seeded_store.last_error == "Server error"
        assert seeded_store.loading is False

    @pytest.mark.asyncio
    async def test_ledger_unchanged_while_create_pending(self, seeded_store, seeded_client):
        """Test that readers see the pre-mutation ledger until the response arrives."""
        await seeded_store.load_all()
        seeded_client.delay_next(0.01)

        task = asyncio.create_task(seeded_store.create(draft()))
        await asyncio.sleep(0)
        assert seeded_store.loading is True
        assert len(seeded_store.ledger) == 3

        await task
        assert len(seeded_store.ledger) == 4

    @pytest.mark.asyncio
    async def test_cancelled_create_releases_loading(self, seeded_store, seeded_client):
        """Test that cancelling a pending create leaves the store idle and unchanged."""
        await seeded_store.load_all()
        before = seeded_store.ledger
        seen = []
        seeded_store.subscribe(lambda s: seen.append(s.loading))

        seeded_client.delay_next(1.0)
        task = asyncio.create_task(seeded_store.create(draft()))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert seeded_store.loading is False
        assert seeded_store.ledger == before
        assert seen == [True, False]

        # The next call starts from a clean count
        await seeded_store.create(draft())
        assert seeded_store.loading is False


class TestUpdate:
    """Tests for update."""

    @pytest.mark.asyncio
    async def test_update_replaces_in_place(self, seeded_store):
        """Test that only the matching record changes and the order is kept."""
        await seeded_store.load_all()
        ids_before = [r.id for r in seeded_store.ledger]
        target = seeded_store.ledger[1]
        seeded_store.begin_edit(target)

        updated = await seeded_store.update(target.id, draft(title="Matatu", amount="900", category="Transport"))

        assert [r.id for r in seeded_store.ledger] == ids_before
        assert seeded_store.ledger[1] == updated
        assert updated.title == "Matatu"
        assert updated.amount == Decimal("900")
        assert seeded_store.editing_target is None

    @pytest.mark.asyncio
    async def test_update_does_not_resort(self, seeded_store, ref_time):
        """Test that a date change leaves the record where it was."""
        await seeded_store.load_all()
        oldest = seeded_store.ledger[-1]

        await seeded_store.update(
            oldest.id,
            draft(occurred_at=datetime(2025, 3, 20, 18, 0, tzinfo=timezone.utc)),
        )
        assert seeded_store.ledger[-1].id == oldest.id

    @pytest.mark.asyncio
    async def test_update_failure_keeps_editing_target(self, seeded_store, seeded_client):
        """Test that a failed update changes nothing but last_error."""
        await seeded_store.load_all()
        target = seeded_store.ledger[0]
        seeded_store.begin_edit(target)
        before = seeded_store.ledger

        seeded_client.fail_next("Network Error")
        with pytest.raises(RemoteLedgerError):
            await seeded_store.update(target.id, draft(title="Changed"))

        assert seeded_store.ledger == before
        assert seeded_store.editing_target == target
        assert seeded_store.last_error == "Network Error"

    @pytest.mark.asyncio
    async def test_update_validation_failure(self, seeded_store, seeded_client):
        """Test that invalid updates never reach the remote store."""
        await seeded_store.load_all()
        calls_before = len(seeded_client.calls)

        with pytest.raises(TransactionValidationError):
            await seeded_store.update("b", draft(amount="-3"))

        assert len(seeded_client.calls) == calls_before
        assert seeded_store.last_error == "Amount must be a number > 0."

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, seeded_store):
        """Test the not-found message from the remote store."""
        await seeded_store.load_all()
        with pytest.raises(NotFoundError):
            await seeded_store.update("missing", draft())
        assert seeded_store.last_error == "Transaction not found."

    @pytest.mark.asyncio
    async def test_responses_apply_in_completion_order(self, seeded_store, seeded_client):
        """Test the documented hazard: the slower, older update wins locally."""
        await seeded_store.load_all()
        seeded_client.delay_next(0.02)
        seeded_client.delay_next(0.0)

        await asyncio.gather(
            seeded_store.update("b", draft(title="First issued")),
            seeded_store.update("b", draft(title="Second issued")),
        )

        record = next(r for r in seeded_store.ledger if r.id == "b")
        assert record.title == "First issued"


class TestRemove:
    """Tests for remove."""

    @pytest.mark.asyncio
    async def test_remove_drops_record(self, seeded_store):
        """Test that length shrinks by one and the id is gone."""
        await seeded_store.load_all()
        await seeded_store.remove("c")
        assert len(seeded_store.ledger) == 2
        assert all(r.id != "c" for r in seeded_store.ledger)

    @pytest.mark.asyncio
    async def test_remove_failure(self, seeded_store, seeded_client):
        """Test that a failed delete leaves the ledger and re-raises."""
        await seeded_store.load_all()
        before = seeded_store.ledger
        seeded_client.fail_next("Gateway timeout")

        with pytest.raises(RemoteLedgerError):
            await seeded_store.remove("c")

        assert seeded_store.ledger == before
        assert seeded_store.last_error == "Gateway timeout"

    @pytest.mark.asyncio
    async def test_filter_survives_deleting_last_record_of_category(self, seeded_store):
        """Test that filtering on a vanished category yields nothing, with no fallback."""
        await seeded_store.load_all()
        seeded_store.set_active_filter("Transport")
        assert len(seeded_store.filtered) == 1

        await seeded_store.remove("c")

        assert seeded_store.active_filter == "Transport"
        assert list(seeded_store.filtered) == []
        assert "Transport" not in seeded_store.categories


class TestLocalState:
    """Tests for edit, filter and budget state."""

    def test_begin_and_cancel_edit(self, store, make_record):
        """Test that editing has no network effect."""
        record = make_record()
        store.begin_edit(record)
        assert store.editing_target == record
        store.cancel_edit()
        assert store.editing_target is None

    @pytest.mark.asyncio
    async def test_filtered_view(self, seeded_store):
        """Test that the filtered view follows the active filter."""
        await seeded_store.load_all()
        assert list(seeded_store.filtered) == list(seeded_store.ledger)

        seeded_store.set_active_filter("Food")
        assert [r.id for r in seeded_store.filtered] == ["b"]

    def test_set_budget(self, store):
        """Test accepted budget inputs."""
        store.set_budget(3000)
        assert store.budget == Decimal("3000")
        store.set_budget("2500.50")
        assert store.budget == Decimal("2500.50")
        store.set_budget(0)
        assert store.budget == 0

    @pytest.mark.parametrize("value", [-1, "abc", float("nan"), float("inf")])
    def test_set_budget_rejects_invalid(self, store, value):
        """Test that negative or non-finite budgets are rejected."""
        with pytest.raises(ValueError):
            store.set_budget(value)
        assert store.budget == Decimal("20000")

    @pytest.mark.asyncio
    async def test_budget_status_tracks_budget(self, seeded_store):
        """Test over/under budget as the threshold moves."""
        await seeded_store.load_all()
        # Food 2000 + Transport 700 this month
        assert seeded_store.month_to_date_expense() == Decimal("2700")

        seeded_store.set_budget(2700)
        assert seeded_store.over_budget is False
        seeded_store.set_budget(2699)
        assert seeded_store.over_budget is True

    @pytest.mark.asyncio
    async def test_derived_values_follow_mutations(self, seeded_store):
        """Test that nothing derived is cached across a ledger change."""
        await seeded_store.load_all()
        assert seeded_store.balance == Decimal("2300")

        await seeded_store.create(draft(amount="300"))
        assert seeded_store.balance == Decimal("2000")
        assert seeded_store.trend().values[-1] == Decimal("300")

        await seeded_store.remove("a")
        assert seeded_store.income_total == 0
        assert "Work" not in seeded_store.categories


class TestListeners:
    """Tests for state-change subscriptions."""

    @pytest.mark.asyncio
    async def test_listener_sees_loading_transitions(self, store):
        """Test that subscribers are told when a call starts and ends."""
        seen = []
        store.subscribe(lambda s: seen.append((s.loading, len(s.ledger))))

        await store.create(draft())

        assert seen[0] == (True, 0)
        assert seen[-1] == (False, 1)

    @pytest.mark.asyncio
    async def test_unsubscribe(self, store):
        """Test that removed listeners are not called."""
        seen = []

        def listener(s):
            seen.append(s)

        store.subscribe(listener)
        store.unsubscribe(listener)
        await store.create(draft())
        assert seen == []

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_break_mutation(self, store):
        """Test that a broken reader is logged and the mutation still applies."""
        def broken(s):
            raise RuntimeError("render failed")

        store.subscribe(broken)
        record = await store.create(draft())

        assert store.ledger[0] == record
        event_types = [e.event_type for e in store.audit_logger.recent_events]
        assert AuditEventType.LISTENER_FAILED in event_types


class TestAuditTrail:
    """Tests that operations leave audit events."""

    @pytest.mark.asyncio
    async def test_operations_are_audited(self, seeded_store, seeded_client):
        """Test the event sequence for a load, create and failed delete."""
        await seeded_store.load_all()
        await seeded_store.create(draft())
        seeded_client.fail_next("nope")
        with pytest.raises(RemoteLedgerError):
            await seeded_store.remove("a")

        event_types = [e.event_type for e in seeded_store.audit_logger.recent_events]
        assert event_types == [
            AuditEventType.LEDGER_LOADED,
            AuditEventType.TRANSACTION_CREATED,
            AuditEventType.REMOTE_FAILURE,
        ]


class TestCreateStore:
    """Tests for the store factory."""

    def test_memory_backend(self, monkeypatch):
        """Test that FINANCE_BACKEND=memory builds an in-process client."""
        monkeypatch.setenv("FINANCE_BACKEND", "memory")
        get_settings.cache_clear()
        try:
            store = create_store()
            assert isinstance(store._client, InMemoryLedgerClient)
        finally:
            get_settings.cache_clear()

    def test_explicit_client_wins(self, client):
        """Test that a passed client overrides configuration."""
        store = create_store(client=client)
        assert store._client is client


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
