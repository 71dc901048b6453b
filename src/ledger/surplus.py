"""
Surplus Transfers

The previous surplus (money left unspent) waits in
FinanceState.previous_surplus until the user moves it, either into a
goal's progress or into next month's "excedente" budget bucket.

INVARIANT: a transfer conserves value. The amount taken out of
previous_surplus equals the amount added to the destination, and both
changes land in the same returned aggregate.
"""

from datetime import date
from typing import Any, Optional

import structlog

from src.formatting import format_currency, format_month_name
from src.ledger.goals import goal_index
from src.ledger.months import adjacent_month, current_month
from src.models.finance import FinanceState
from src.models.results import MutationResult, RejectionReason
from src.validation import validate_month


logger = structlog.get_logger(__name__)


def save_surplus_to_goal(state: FinanceState, goal_position: Any) -> MutationResult:
    """
    Add the whole previous surplus to a goal's progress.

    NOTE: Unlike contribute(), the transfer is not capped at the goal's
    remaining headroom, so progress can end up above total.
    """
    if not state.goals:
        return MutationResult.rejected(
            RejectionReason.NO_GOALS,
            "There are no goals yet. Create a goal first.",
        )

    position = goal_index(state, goal_position)
    if position is None:
        return MutationResult.rejected(
            RejectionReason.NOT_FOUND,
            f"Goal {goal_position} not found",
            "index",
        )

    amount = state.previous_surplus
    updated = state.model_copy(deep=True)
    goal = updated.goals[position]
    goal.progress = goal.progress + amount
    updated.previous_surplus -= amount

    logger.info("surplus_saved_to_goal", index=position, amount=str(amount))
    return MutationResult.applied(
        updated,
        f"{format_currency(amount, updated.currency)} saved to '{goal.name}'",
        index=position,
        amount=amount,
        progress=goal.progress,
    )


def carry_surplus_to_next_month(
    state: FinanceState,
    from_month: Optional[str] = None,
    today: Optional[date] = None,
) -> MutationResult:
    """
    Move the previous surplus into the following month's surplus bucket.

    Args:
        state: Current aggregate (never modified)
        from_month: Month the surplus comes from; defaults to the current month
        today: Reference date used for the default month
    """
    from_month = from_month or current_month(today)
    month_check = validate_month(from_month)
    if not month_check.valid:
        return MutationResult.from_validation(month_check)

    next_month = adjacent_month(from_month, 1)
    if next_month == from_month:
        return MutationResult.rejected(
            RejectionReason.INVALID_DATE,
            f"There is no month after {from_month}",
            "month",
        )
    amount = state.previous_surplus

    updated = state.model_copy(deep=True)
    month_budget = updated.ensure_month(next_month)
    month_budget.surplus = month_budget.surplus + amount
    updated.previous_surplus -= amount

    logger.info(
        "surplus_carried",
        from_month=from_month,
        to_month=next_month,
        amount=str(amount),
    )
    return MutationResult.applied(
        updated,
        (
            f"{format_currency(amount, updated.currency)} carried to "
            f"{format_month_name(next_month)}"
        ),
        from_month=from_month,
        to_month=next_month,
        amount=amount,
        surplus=month_budget.surplus,
    )
