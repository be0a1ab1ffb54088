"""View Filter - the slice of the ledger shown under the active category."""

from typing import Sequence

from finance_tracker.models.transaction import (
    ALL_CATEGORIES,
    DEFAULT_CATEGORY,
    TransactionRecord,
)


def filter_by_category(
    ledger: Sequence[TransactionRecord],
    active_filter: str,
) -> Sequence[TransactionRecord]:
    """
    Records whose category equals `active_filter` exactly.

    "All" returns the ledger itself (read-only by convention). A category
    with no remaining records gives an empty list; there is no fallback.
    """
    if active_filter == ALL_CATEGORIES:
        return ledger
    return [
        record for record in ledger
        if (record.category or DEFAULT_CATEGORY) == active_filter
    ]
