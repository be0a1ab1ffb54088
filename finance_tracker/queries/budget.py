"""Budget Evaluator - month-to-date expense against the budget threshold."""

from decimal import Decimal

from finance_tracker.models.summary import BudgetStatus


def is_over_budget(month_to_date_expense: Decimal, budget: Decimal) -> bool:
    # Strict: spending exactly the budget is still on track
    return month_to_date_expense > budget


def evaluate_budget(month_to_date_expense: Decimal, budget: Decimal) -> BudgetStatus:
    return BudgetStatus(
        month_to_date_expense=month_to_date_expense,
        budget=budget,
        over_budget=is_over_budget(month_to_date_expense, budget),
    )
