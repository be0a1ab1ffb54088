"""
Dashboard Snapshot

Runs every derived computation against one (ledger, budget, filter,
reference time) tuple, so all the cards on a page agree with each other.
"""

from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Optional, Sequence

from finance_tracker.models.summary import DashboardSnapshot
from finance_tracker.models.transaction import TransactionRecord
from finance_tracker.queries.aggregation import (
    category_breakdown,
    category_index,
    compute_totals,
)
from finance_tracker.queries.budget import evaluate_budget
from finance_tracker.queries.time_window import (
    TREND_DAYS,
    daily_expense_series,
    month_to_date_expense,
)
from finance_tracker.queries.view_filter import filter_by_category


def build_snapshot(
    ledger: Sequence[TransactionRecord],
    budget: Decimal,
    active_filter: str,
    reference: datetime,
    trend_days: int = TREND_DAYS,
    zone: Optional[tzinfo] = None,
) -> DashboardSnapshot:
    filtered = list(filter_by_category(ledger, active_filter))
    month_expense = month_to_date_expense(ledger, reference, zone)

    return DashboardSnapshot(
        generated_at=reference,
        totals=compute_totals(ledger),
        categories=category_index(ledger),
        category_breakdown=category_breakdown(ledger),
        budget_status=evaluate_budget(month_expense, budget),
        active_filter=active_filter,
        filtered=filtered,
        trend=daily_expense_series(ledger, reference, trend_days, zone),
        filtered_trend=daily_expense_series(filtered, reference, trend_days, zone),
    )
