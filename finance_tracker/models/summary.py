"""
Derived View Models

Everything here is computed from the ledger (plus budget, filter and a
reference time). None of these objects is ever stored by the
TransactionStore; they are rebuilt on every read.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from finance_tracker.models.transaction import TransactionRecord


class LedgerTotals(BaseModel):
    """Income, expense and the balance between them."""
    model_config = ConfigDict(frozen=True)

    income_total: Decimal = Field(default=Decimal("0"))
    expense_total: Decimal = Field(default=Decimal("0"))

    @property
    def balance(self) -> Decimal:
        """Never stored - always income minus expense."""
        return self.income_total - self.expense_total


class CategoryTotal(BaseModel):
    """One row of the category breakdown."""
    model_config = ConfigDict(frozen=True)

    category: str
    total: Decimal
    count: int = Field(ge=0)


class DailyPoint(BaseModel):
    """One time bucket of the daily expense series."""
    model_config = ConfigDict(frozen=True)

    day: date
    label: str = Field(..., description="Compact MM-DD label for chart axes")
    value: Decimal = Field(default=Decimal("0"), ge=0)


class TrendSeries(BaseModel):
    """
    Daily expense series, oldest bucket first.

    Always holds one point per day of the window, even for an empty ledger.
    """
    model_config = ConfigDict(frozen=True)

    points: list[DailyPoint] = Field(default_factory=list)

    @property
    def days(self) -> int:
        """Length of the window in calendar days."""
        return len(self.points)

    @property
    def labels(self) -> list[str]:
        return [p.label for p in self.points]

    @property
    def values(self) -> list[Decimal]:
        return [p.value for p in self.points]

    @property
    def has_data(self) -> bool:
        """False when every bucket is exactly zero; the UI shows an empty state then."""
        return any(p.value > 0 for p in self.points)


class BudgetStatus(BaseModel):
    """Month-to-date expense compared against the budget threshold."""
    model_config = ConfigDict(frozen=True)

    month_to_date_expense: Decimal
    budget: Decimal
    over_budget: bool

    @property
    def remaining(self) -> Decimal:
        """Negative once the budget is exceeded."""
        return self.budget - self.month_to_date_expense


class DashboardSnapshot(BaseModel):
    """
    Every derived value the dashboard renders, computed at one instant.

    `trend` covers the whole ledger; `filtered_trend` only the records
    visible under the active filter (what the chart card plots).
    """
    model_config = ConfigDict(frozen=True)

    generated_at: datetime
    totals: LedgerTotals
    categories: list[str]
    category_breakdown: list[CategoryTotal]
    budget_status: BudgetStatus
    active_filter: str
    filtered: list[TransactionRecord]
    trend: TrendSeries
    filtered_trend: TrendSeries
