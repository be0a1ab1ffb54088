"""
Derived-view queries over the ledger.

All functions are pure: same inputs, same output, no side effects.
"""

from finance_tracker.queries.aggregation import (
    category_breakdown,
    category_index,
    compute_totals,
)
from finance_tracker.queries.budget import evaluate_budget, is_over_budget
from finance_tracker.queries.snapshot import build_snapshot
from finance_tracker.queries.time_window import (
    TREND_DAYS,
    daily_expense_series,
    local_date,
    month_to_date_expense,
)
from finance_tracker.queries.view_filter import filter_by_category

__all__ = [
    "TREND_DAYS",
    "build_snapshot",
    "category_breakdown",
    "category_index",
    "compute_totals",
    "daily_expense_series",
    "evaluate_budget",
    "filter_by_category",
    "is_over_budget",
    "local_date",
    "month_to_date_expense",
]
