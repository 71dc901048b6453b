"""
Budget Ledger

Owns the per-month, per-category {assigned, spent} table.

INVARIANT: An entry's spent is always the sum of the expenses recorded for
that month and category. Budget edits only ever change assigned; spent is
recomputed from the expense list on every edit.
"""

from decimal import Decimal
from typing import Any

import structlog

from src.formatting import format_category, format_currency, format_month_name
from src.models.finance import BudgetEntry, Category, FinanceState
from src.models.results import MutationResult
from src.validation import as_category, to_decimal, validate_budget, validate_month


logger = structlog.get_logger(__name__)


def recompute_spent(state: FinanceState, month: str, category: Category) -> Decimal:
    """Sum of the expenses dated in `month` for `category`."""
    return sum(
        (
            expense.amount
            for expense in state.expenses
            if expense.month == month and expense.category == category
        ),
        Decimal("0"),
    )


def expenses_by_category(state: FinanceState, month: str) -> dict[Category, Decimal]:
    """
    Category totals of the expenses dated in `month`.

    Only real categories appear; the surplus bucket is not an expense
    category and never shows up here.
    """
    totals: dict[Category, Decimal] = {}
    for expense in state.expenses:
        if expense.month != month:
            continue
        totals[expense.category] = totals.get(expense.category, Decimal("0")) + expense.amount
    return totals


def set_budget(
    state: FinanceState,
    month: str,
    category: Any,
    assigned: Any,
) -> MutationResult:
    """
    Create or adjust the budget of one category in one month.

    Args:
        state: Current aggregate (left untouched)
        month: Month key (YYYY-MM)
        category: Category or its document value
        assigned: New assigned amount

    Returns:
        MutationResult with the updated aggregate, or the validation error
    """
    month_check = validate_month(month)
    if not month_check.valid:
        return MutationResult.from_validation(month_check)

    check = validate_budget(category, assigned, state.currency)
    if not check.valid:
        logger.info("budget_rejected", month=month, error=check.error)
        return MutationResult.from_validation(check)

    resolved = as_category(category)
    amount = to_decimal(assigned)

    updated = state.model_copy(deep=True)
    spent = recompute_spent(updated, month, resolved)
    updated.ensure_month(month).categories[resolved] = BudgetEntry(
        assigned=amount,
        spent=spent,
    )

    logger.info(
        "budget_set",
        month=month,
        category=resolved.value,
        assigned=str(amount),
        spent=str(spent),
    )
    return MutationResult.applied(
        updated,
        (
            f"Budget for {format_category(resolved)} in {format_month_name(month)} "
            f"set to {format_currency(amount, updated.currency)}"
        ),
        month=month,
        category=resolved.value,
        assigned=amount,
        spent=spent,
    )
