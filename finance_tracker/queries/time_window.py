"""
Time-Window Engine

Month-to-date expense and the daily expense series, as pure functions of
the ledger and a reference instant.

TIMEZONE POLICY: every timestamp is converted to one zone (the dashboard's
configured zone, UTC unless overridden) before its calendar date is taken.
Naive timestamps are taken to already be in that zone.
"""

from datetime import date, datetime, timedelta, tzinfo, timezone
from decimal import Decimal
from typing import Iterable, Optional

from finance_tracker.models.summary import DailyPoint, TrendSeries
from finance_tracker.models.transaction import TransactionRecord


TREND_DAYS = 14
LABEL_FORMAT = "%m-%d"


def local_date(moment: datetime, zone: Optional[tzinfo] = None) -> date:
    """Calendar date of `moment` in `zone` (UTC when omitted)."""
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(zone or timezone.utc).date()


def month_to_date_expense(
    ledger: Iterable[TransactionRecord],
    reference: datetime,
    zone: Optional[tzinfo] = None,
) -> Decimal:
    """
    Sum of expenses whose calendar month and year match the reference.

    Records later in the month than the reference still count; the window
    is the calendar month, not "up to now".
    """
    ref_day = local_date(reference, zone)
    total = Decimal("0")
    for record in ledger:
        if not record.is_expense:
            continue
        day = local_date(record.occurred_at, zone)
        if day.year == ref_day.year and day.month == ref_day.month:
            total += record.amount
    return total


def daily_expense_series(
    ledger: Iterable[TransactionRecord],
    reference: datetime,
    days: int = TREND_DAYS,
    zone: Optional[tzinfo] = None,
) -> TrendSeries:
    """
    Expense per calendar day for the `days` days ending on the reference day.

    Every bucket starts at zero, so the series always has exactly `days`
    points. Income and records outside the window are ignored.
    """
    if days < 1:
        raise ValueError("days must be at least 1")

    end = local_date(reference, zone)
    window = [end - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    buckets: dict[date, Decimal] = {day: Decimal("0") for day in window}

    for record in ledger:
        if not record.is_expense:
            continue
        day = local_date(record.occurred_at, zone)
        if day in buckets:
            buckets[day] += record.amount

    return TrendSeries(points=[
        DailyPoint(day=day, label=day.strftime(LABEL_FORMAT), value=buckets[day])
        for day in window
    ])
