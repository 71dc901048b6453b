"""
Savings Goals

Goals are addressed by their position in the goal list.

INVARIANT: progress <= total. Edits cannot shrink a goal below what has
already been saved, and contributions are capped at the remaining headroom.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

import structlog

from src.config import get_settings
from src.formatting import format_currency
from src.models.finance import FinanceState, Goal
from src.models.results import MutationResult, RejectionReason
from src.validation import as_date, to_decimal, validate_amount, validate_date, validate_goal


logger = structlog.get_logger(__name__)


def goal_index(state: FinanceState, index: Any) -> Optional[int]:
    """The index as an int if it addresses an existing goal, else None."""
    if isinstance(index, bool):
        return None
    try:
        position = int(index)
    except (TypeError, ValueError):
        return None
    if 0 <= position < len(state.goals):
        return position
    return None


def goal_percentage(goal: Goal) -> Decimal:
    """Progress as a percentage of the goal total."""
    if goal.total <= 0:
        return Decimal("0")
    return goal.progress / goal.total * 100


def _goal_not_found(index: Any) -> MutationResult:
    return MutationResult.rejected(
        RejectionReason.NOT_FOUND,
        f"Goal {index} not found",
        "index",
    )


def create_goal(
    state: FinanceState,
    name: Any,
    total: Any,
    deadline: Any,
    today: Optional[date] = None,
    max_goals: Optional[int] = None,
) -> MutationResult:
    """
    Add a new goal with zero progress.

    Rejected when the goal list is full or any field is invalid.
    """
    if max_goals is None:
        max_goals = get_settings().app.max_goals
    if len(state.goals) >= max_goals:
        return MutationResult.rejected(
            RejectionReason.GOAL_LIMIT_REACHED,
            f"You can have at most {max_goals} goals",
        )

    check = validate_goal(name, total, deadline, state.currency, today=today)
    if not check.valid:
        return MutationResult.from_validation(check)

    goal = Goal(
        name=name.strip(),
        total=to_decimal(total),
        progress=Decimal("0"),
        deadline=as_date(deadline),
    )
    updated = state.model_copy(deep=True)
    updated.goals.append(goal)

    logger.info("goal_created", index=len(updated.goals) - 1, total=str(goal.total))
    return MutationResult.applied(
        updated,
        f"Goal '{goal.name}' created",
        index=len(updated.goals) - 1,
        name=goal.name,
    )


def update_goal(
    state: FinanceState,
    index: Any,
    name: Any,
    total: Any,
    deadline: Any,
    today: Optional[date] = None,
) -> MutationResult:
    """
    Edit a goal's name, total and deadline. Progress is preserved.

    The new total may not be below the progress already saved.
    """
    position = goal_index(state, index)
    if position is None:
        return _goal_not_found(index)

    check = validate_goal(name, total, deadline, state.currency, today=today)
    if not check.valid:
        return MutationResult.from_validation(check)

    deadline_check = validate_date(deadline, allow_future=True, allow_past=False, today=today)
    if not deadline_check.valid:
        return MutationResult.from_validation(
            deadline_check.qualified("Goal deadline", "deadline")
        )

    existing = state.goals[position]
    new_total = to_decimal(total)
    if new_total < existing.progress:
        return MutationResult.rejected(
            RejectionReason.INVALID_GOAL_FIELD,
            (
                "Goal total cannot be less than the current progress "
                f"({format_currency(existing.progress, state.currency)})"
            ),
            "total",
            progress=existing.progress,
        )

    updated = state.model_copy(deep=True)
    updated.goals[position] = Goal(
        name=name.strip(),
        total=new_total,
        progress=existing.progress,
        deadline=as_date(deadline),
    )

    logger.info("goal_updated", index=position, total=str(new_total))
    return MutationResult.applied(
        updated,
        f"Goal '{name.strip()}' updated",
        index=position,
    )


def contribute(state: FinanceState, index: Any, amount: Any) -> MutationResult:
    """
    Add money to a goal's progress.

    A contribution larger than the remaining headroom is rejected, and the
    message states the exact amount still missing.
    """
    position = goal_index(state, index)
    if position is None:
        return _goal_not_found(index)

    check = validate_amount(amount, state.currency)
    if not check.valid:
        return MutationResult.from_validation(check)

    goal = state.goals[position]
    value = to_decimal(amount)
    remaining = goal.remaining
    if goal.progress + value > goal.total:
        return MutationResult.rejected(
            RejectionReason.GOAL_CAPACITY_EXCEEDED,
            f"Amount exceeds the remaining {format_currency(remaining, state.currency)}",
            "amount",
            remaining=remaining,
        )

    updated = state.model_copy(deep=True)
    updated.goals[position].progress = goal.progress + value

    logger.info("goal_contribution", index=position, amount=str(value))
    return MutationResult.applied(
        updated,
        f"{format_currency(value, state.currency)} added to '{goal.name}'",
        index=position,
        progress=updated.goals[position].progress,
        remaining=updated.goals[position].remaining,
    )
