"""
Aggregation Engine

Totals and the category index, computed deterministically from the ledger.
Decimal arithmetic keeps `balance == income_total - expense_total` exact.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Sequence

from finance_tracker.models.summary import CategoryTotal, LedgerTotals
from finance_tracker.models.transaction import (
    ALL_CATEGORIES,
    TransactionKind,
    TransactionRecord,
)


def compute_totals(ledger: Iterable[TransactionRecord]) -> LedgerTotals:
    """Sum income and expense; balance is derived on the result."""
    income = Decimal("0")
    expense = Decimal("0")
    for record in ledger:
        if record.kind == TransactionKind.INCOME:
            income += record.amount
        elif record.kind == TransactionKind.EXPENSE:
            expense += record.amount
    return LedgerTotals(income_total=income, expense_total=expense)


def category_index(ledger: Iterable[TransactionRecord]) -> list[str]:
    """
    Distinct categories sorted ascending, with "All" always first.

    A category literally named "All" collapses into the sentinel.
    """
    distinct = {record.category for record in ledger}
    distinct.discard(ALL_CATEGORIES)
    return [ALL_CATEGORIES, *sorted(distinct)]


def category_breakdown(
    ledger: Sequence[TransactionRecord],
    kind: TransactionKind = TransactionKind.EXPENSE,
) -> list[CategoryTotal]:
    """Per-category totals for one kind, largest first (ties by name)."""
    totals: dict[str, Decimal] = defaultdict(Decimal)
    counts: dict[str, int] = defaultdict(int)
    for record in ledger:
        if record.kind != kind:
            continue
        totals[record.category] += record.amount
        counts[record.category] += 1

    rows = [
        CategoryTotal(category=name, total=total, count=counts[name])
        for name, total in totals.items()
    ]
    rows.sort(key=lambda row: (-row.total, row.category))
    return rows
