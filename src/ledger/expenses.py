"""
Expense Posting

Posting an expense is a two-phase protocol:

1. check_expense() validates the draft and evaluates the confirmation
   policy. It returns an ExpenseCheck listing the confirmations the user
   must give. Nothing is written.
2. commit_expense() takes the caller's yes/no answers and, only if every
   required confirmation was given, appends the expense and updates the
   month/category budget entry.

The policy has two independent gates:
- INCOME_SHARE: the expense is more than `expense_percentage_warning`
  percent of total income.
- BUDGET_EXCEEDED: the category budget for the month would go over 100%.

CRITICAL: commit_expense() re-evaluates the policy against the state it is
given. If the state moved on since the check (the caller may interleave
other work), a gate that fires now still needs an explicit answer.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional
from uuid import UUID

import structlog

from src.config import get_settings
from src.formatting import format_category, format_currency, format_percentage
from src.ledger.budget import recompute_spent
from src.models.finance import BudgetEntry, Expense, FinanceState, Income
from src.models.results import (
    ConfirmationKind,
    ConfirmationPrompt,
    ExpenseCheck,
    MutationResult,
    RejectionReason,
    ValidationOutcome,
)
from src.validation import (
    as_category,
    as_date,
    to_decimal,
    validate_amount,
    validate_category,
    validate_date,
)


logger = structlog.get_logger(__name__)


def _resolve_threshold(warning_threshold: Optional[Any]) -> Decimal:
    if warning_threshold is None:
        warning_threshold = get_settings().app.expense_percentage_warning
    return Decimal(str(warning_threshold))


def _evaluate_policy(
    state: FinanceState,
    expense: Expense,
    threshold: Decimal,
) -> dict[str, Any]:
    """Compute shares and the confirmations an expense needs against `state`."""
    income_total = state.income_total
    income_share = (
        expense.amount / income_total * 100 if income_total > 0 else Decimal("0")
    )

    budget = state.month_budget(expense.month).entry(expense.category)
    new_spent = budget.spent + expense.amount
    # No assigned budget means no budget gate at all
    budget_share = (
        new_spent / budget.assigned * 100 if budget.assigned > 0 else Decimal("0")
    )

    prompts = []
    if income_share > threshold:
        prompts.append(ConfirmationPrompt(
            kind=ConfirmationKind.INCOME_SHARE,
            title="Confirm expense",
            message=(
                f"This expense is {format_percentage(income_share)} of your income "
                f"({format_currency(expense.amount, state.currency)}). Confirm?"
            ),
            percentage=income_share,
        ))
    if budget_share > 100:
        prompts.append(ConfirmationPrompt(
            kind=ConfirmationKind.BUDGET_EXCEEDED,
            title="Budget warning",
            message=(
                f"This expense exceeds the {format_category(expense.category)} budget "
                f"({format_percentage(budget_share)}). Continue?"
            ),
            percentage=budget_share,
        ))

    return {
        "income_share": income_share,
        "budget_share": budget_share,
        "budget_before": budget.model_copy(),
        "new_spent": new_spent,
        "required_confirmations": prompts,
    }


def check_expense(
    state: FinanceState,
    amount: Any,
    category: Any,
    note: Optional[str] = None,
    expense_date: Any = None,
    today: Optional[date] = None,
    warning_threshold: Optional[Any] = None,
) -> ExpenseCheck:
    """
    Check phase: validate a draft expense and evaluate the policy.

    Args:
        state: Current aggregate (never modified)
        amount: Expense amount
        category: Category or its document value
        note: Optional free-text note
        expense_date: Date of the expense; defaults to today
        today: Reference date for validation (defaults to the real date)
        warning_threshold: Income-share percentage override

    Returns:
        ExpenseCheck. If validation failed, `validation` says why and no
        confirmations are listed.
    """
    today = today or date.today()
    if expense_date is None or expense_date == "":
        expense_date = today

    amount_check = validate_amount(amount, state.currency)
    if not amount_check.valid:
        return ExpenseCheck(validation=amount_check)

    category_check = validate_category(category)
    if not category_check.valid:
        return ExpenseCheck(validation=category_check)

    date_check = validate_date(expense_date, allow_future=False, today=today)
    if not date_check.valid:
        return ExpenseCheck(validation=date_check)

    expense = Expense(
        amount=to_decimal(amount),
        category=as_category(category),
        note=note or None,
        expense_date=as_date(expense_date),
    )
    policy = _evaluate_policy(state, expense, _resolve_threshold(warning_threshold))

    check = ExpenseCheck(
        validation=ValidationOutcome.ok(),
        expense=expense,
        month=expense.month,
        **policy,
    )
    logger.info(
        "expense_checked",
        check_id=str(check.check_id),
        month=check.month,
        category=expense.category.value,
        income_share=str(check.income_share),
        budget_share=str(check.budget_share),
        confirmations=[kind.value for kind in check.confirmation_kinds],
    )
    return check


def commit_expense(
    state: FinanceState,
    check: ExpenseCheck,
    answers: Optional[Mapping[ConfirmationKind, bool]] = None,
    warning_threshold: Optional[Any] = None,
) -> MutationResult:
    """
    Commit phase: record the expense if every required gate was confirmed.

    Args:
        state: Current aggregate (never modified)
        check: The ExpenseCheck returned by check_expense()
        answers: The user's answer per confirmation kind; a missing answer
                 counts as "no"
        warning_threshold: Income-share percentage override

    Returns:
        MutationResult. Declining aborts with no state change.
    """
    if not check.accepted or check.expense is None:
        return MutationResult.from_validation(check.validation)

    expense = check.expense
    if state.find_expense(expense.id) is not None:
        return MutationResult.applied(
            state,
            "Expense already recorded",
            expense_id=str(expense.id),
            already_recorded=True,
        )

    policy = _evaluate_policy(state, expense, _resolve_threshold(warning_threshold))
    answers = answers or {}
    declined = [
        prompt.kind
        for prompt in policy["required_confirmations"]
        if answers.get(prompt.kind) is not True
    ]

    if declined:
        logger.info(
            "expense_declined",
            check_id=str(check.check_id),
            declined=[kind.value for kind in declined],
        )
        if ConfirmationKind.INCOME_SHARE in declined:
            return MutationResult.rejected(
                RejectionReason.CONFIRMATION_DECLINED,
                "Expense not recorded: confirmation declined",
                "amount",
                declined=[kind.value for kind in declined],
            )
        return MutationResult.rejected(
            RejectionReason.BUDGET_CAPACITY_EXCEEDED,
            (
                f"Expense not recorded: it exceeds the "
                f"{format_category(expense.category)} budget "
                f"({format_percentage(policy['budget_share'])})"
            ),
            "category",
            declined=[kind.value for kind in declined],
        )

    updated = state.model_copy(deep=True)
    updated.expenses.append(expense.model_copy())
    budget_before: BudgetEntry = policy["budget_before"]
    updated.ensure_month(expense.month).categories[expense.category] = BudgetEntry(
        assigned=budget_before.assigned,
        spent=policy["new_spent"],
    )

    logger.info(
        "expense_posted",
        expense_id=str(expense.id),
        month=expense.month,
        category=expense.category.value,
        amount=str(expense.amount),
        spent=str(policy["new_spent"]),
    )
    return MutationResult.applied(
        updated,
        f"Expense of {format_currency(expense.amount, updated.currency)} recorded",
        expense_id=str(expense.id),
        month=expense.month,
        category=expense.category.value,
        amount=expense.amount,
        spent=policy["new_spent"],
        confirmed=[prompt.kind.value for prompt in policy["required_confirmations"]],
    )


def post_expense(
    state: FinanceState,
    amount: Any,
    category: Any,
    note: Optional[str] = None,
    expense_date: Any = None,
    answers: Optional[Mapping[ConfirmationKind, bool]] = None,
    today: Optional[date] = None,
    warning_threshold: Optional[Any] = None,
) -> MutationResult:
    """Check and commit in one call, with answers supplied up front."""
    check = check_expense(
        state,
        amount,
        category,
        note=note,
        expense_date=expense_date,
        today=today,
        warning_threshold=warning_threshold,
    )
    if not check.accepted:
        return MutationResult.from_validation(check.validation)
    return commit_expense(state, check, answers, warning_threshold=warning_threshold)


def delete_expense(state: FinanceState, expense_id: Any) -> MutationResult:
    """
    Remove an expense and recompute its month/category spent.
    """
    try:
        target = expense_id if isinstance(expense_id, UUID) else UUID(str(expense_id))
    except ValueError:
        target = None

    expense = state.find_expense(target) if target else None
    if expense is None:
        return MutationResult.rejected(
            RejectionReason.NOT_FOUND,
            "Expense not found",
            "id",
        )

    updated = state.model_copy(deep=True)
    updated.expenses = [e for e in updated.expenses if e.id != expense.id]

    month_budget = updated.budgets.get(expense.month)
    if month_budget is not None and expense.category in month_budget.categories:
        month_budget.categories[expense.category].spent = recompute_spent(
            updated, expense.month, expense.category
        )

    logger.info(
        "expense_deleted",
        expense_id=str(expense.id),
        month=expense.month,
        category=expense.category.value,
    )
    return MutationResult.applied(
        updated,
        "Expense deleted",
        expense_id=str(expense.id),
        month=expense.month,
        category=expense.category.value,
    )


def add_income(
    state: FinanceState,
    amount: Any,
    income_date: Any = None,
    today: Optional[date] = None,
) -> MutationResult:
    """Append an income record. Incomes cannot be dated in the future."""
    today = today or date.today()
    if income_date is None or income_date == "":
        income_date = today

    amount_check = validate_amount(amount, state.currency)
    if not amount_check.valid:
        return MutationResult.from_validation(amount_check)

    date_check = validate_date(income_date, allow_future=False, today=today)
    if not date_check.valid:
        return MutationResult.from_validation(date_check)

    income = Income(amount=to_decimal(amount), income_date=as_date(income_date))
    updated = state.model_copy(deep=True)
    updated.incomes.append(income)

    logger.info("income_added", amount=str(income.amount), date=income.income_date.isoformat())
    return MutationResult.applied(
        updated,
        f"Income of {format_currency(income.amount, updated.currency)} recorded",
        amount=income.amount,
        income_total=updated.income_total,
    )
