"""
Ledger Package

State transitions of the finance aggregate. Every operation takes a
FinanceState, works on a copy and returns a MutationResult.
"""

from src.ledger.budget import expenses_by_category, recompute_spent, set_budget
from src.ledger.expenses import (
    add_income,
    check_expense,
    commit_expense,
    delete_expense,
    post_expense,
)
from src.ledger.goals import contribute, create_goal, goal_percentage, update_goal
from src.ledger.months import (
    adjacent_month,
    category_percentage,
    current_month,
    is_month_key,
    month_key,
)
from src.ledger.preferences import change_currency
from src.ledger.surplus import carry_surplus_to_next_month, save_surplus_to_goal

__all__ = [
    # Budgets
    "expenses_by_category",
    "recompute_spent",
    "set_budget",
    # Expenses and incomes
    "add_income",
    "check_expense",
    "commit_expense",
    "delete_expense",
    "post_expense",
    # Goals
    "contribute",
    "create_goal",
    "goal_percentage",
    "update_goal",
    # Months
    "adjacent_month",
    "category_percentage",
    "current_month",
    "is_month_key",
    "month_key",
    # Preferences
    "change_currency",
    # Surplus
    "carry_surplus_to_next_month",
    "save_surplus_to_goal",
]
