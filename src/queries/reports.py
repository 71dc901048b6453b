"""
Report Queries

DESIGN DECISION: Reports are DETERMINISTIC, read-only views.
Every number shown to the user is computed here from the stored
aggregate; nothing is estimated and the state is never modified.

Category spending is always recomputed from the expense list, so a
report stays correct even if a stored budget entry drifted.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from src.config import get_settings
from src.ledger.budget import expenses_by_category
from src.ledger.goals import goal_percentage
from src.ledger.months import category_percentage
from src.models.finance import Category, Currency, Expense, FinanceState
from src.validation import as_category, to_decimal


# =============================================================================
# RESULT MODELS
# =============================================================================

class SpendingStatus(str, Enum):
    """Traffic-light status of spending against income."""
    GOOD = "good"
    CAUTION = "caution"
    EXCEEDED = "exceeded"


class DashboardSummary(BaseModel):
    """Headline numbers for the whole ledger."""

    currency: Currency
    income_total: Decimal
    expense_total: Decimal
    balance: Decimal
    spent_percentage: Decimal = Field(
        ...,
        description="Expense total as a percentage of income (0 with no income)"
    )
    status: SpendingStatus
    previous_surplus: Decimal


class CategoryRow(BaseModel):
    """One budgeted category in a month report."""

    category: Category
    assigned: Decimal
    spent: Decimal
    percentage: int
    exceeded: bool


class MonthReport(BaseModel):
    """Budget versus actual spending for one month."""

    month: str
    rows: list[CategoryRow] = Field(default_factory=list)
    assigned_total: Decimal = Decimal("0")
    spent_total: Decimal = Decimal("0")
    surplus: Decimal = Decimal("0")
    leftover: Decimal = Field(
        default=Decimal("0"),
        description="assigned + surplus - spent"
    )


class GoalStatus(BaseModel):
    """Progress of one savings goal."""

    index: int
    name: str
    progress: Decimal
    total: Decimal
    remaining: Decimal
    percentage: Decimal
    near_completion: bool


# =============================================================================
# QUERIES
# =============================================================================

def dashboard_summary(
    state: FinanceState,
    warning_threshold: Optional[Any] = None,
) -> DashboardSummary:
    """
    Income, expenses and a spending status.

    Status is GOOD below the warning threshold, CAUTION below 100% and
    EXCEEDED from 100% on.
    """
    threshold = to_decimal(warning_threshold)
    if threshold is None:
        threshold = Decimal(str(get_settings().app.expense_percentage_warning))

    income = state.income_total
    expenses = state.expense_total
    spent_percentage = expenses / income * 100 if income > 0 else Decimal("0")

    if spent_percentage < threshold:
        status = SpendingStatus.GOOD
    elif spent_percentage < 100:
        status = SpendingStatus.CAUTION
    else:
        status = SpendingStatus.EXCEEDED

    return DashboardSummary(
        currency=state.currency,
        income_total=income,
        expense_total=expenses,
        balance=income - expenses,
        spent_percentage=spent_percentage,
        status=status,
        previous_surplus=state.previous_surplus,
    )


def month_report(state: FinanceState, month: str) -> MonthReport:
    """
    Rows for every budgeted category of `month`, in category order.

    A month without a budget yields an empty report.
    """
    month_budget = state.budgets.get(month)
    if month_budget is None:
        return MonthReport(month=month)

    spent_by_category = expenses_by_category(state, month)
    rows = []
    for category in Category:
        entry = month_budget.categories.get(category)
        if entry is None:
            continue
        spent = spent_by_category.get(category, Decimal("0"))
        percentage = category_percentage(spent, entry.assigned)
        rows.append(CategoryRow(
            category=category,
            assigned=entry.assigned,
            spent=spent,
            percentage=percentage,
            exceeded=percentage > 100,
        ))

    assigned_total = sum((row.assigned for row in rows), Decimal("0"))
    spent_total = sum((row.spent for row in rows), Decimal("0"))
    return MonthReport(
        month=month,
        rows=rows,
        assigned_total=assigned_total,
        spent_total=spent_total,
        surplus=month_budget.surplus,
        leftover=assigned_total + month_budget.surplus - spent_total,
    )


def available_months(state: FinanceState) -> list[str]:
    """Budget months, newest first."""
    return sorted(state.budgets.keys(), reverse=True)


def recent_expenses(state: FinanceState, limit: Optional[int] = None) -> list[Expense]:
    """The most recently recorded expenses, newest first."""
    limit = limit if limit is not None else get_settings().app.max_recent_expenses
    if limit <= 0:
        return []
    return list(reversed(state.expenses[-limit:]))


def shortcuts_for(state: FinanceState, category: Any) -> list[Decimal]:
    """Preset amounts for a category (empty for unknown categories)."""
    resolved = as_category(category)
    if resolved is None:
        return []
    return list(state.shortcuts.get(resolved, []))


def goal_overview(state: FinanceState) -> list[GoalStatus]:
    """Progress of every goal, flagging those close to completion."""
    warning = Decimal(str(get_settings().app.goal_percentage_warning))
    overview = []
    for index, goal in enumerate(state.goals):
        percentage = goal_percentage(goal)
        overview.append(GoalStatus(
            index=index,
            name=goal.name,
            progress=goal.progress,
            total=goal.total,
            remaining=goal.remaining,
            percentage=percentage,
            near_completion=percentage >= warning,
        ))
    return overview
