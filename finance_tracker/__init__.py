"""
Finance Tracker - Source Package

The transaction state engine behind a personal-finance dashboard:
a ledger of income/expense records kept in sync with a remote store,
plus the summaries derived from it (totals, budget status, category
index, filtered view, spending trend).

DESIGN PRINCIPLES:
1. The ledger only holds what the remote store acknowledged
2. Fail early, fail visibly
3. Derived values are computed, never stored
4. One writer, many readers
5. Storage backend is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
