"""
Result Models

Every ledger operation reports its outcome as data instead of raising:
validation predicates return ValidationOutcome, mutations return
MutationResult, and the expense pre-check returns ExpenseCheck.

IMPORTANT: A rejected MutationResult never carries a modified state.
Callers keep whatever aggregate they already hold.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from src.models.finance import BudgetEntry, Expense, FinanceState


class RejectionReason(str, Enum):
    """Why an operation was not applied."""
    INVALID_AMOUNT = "invalid_amount"
    INVALID_CATEGORY = "invalid_category"
    INVALID_DATE = "invalid_date"
    INVALID_CURRENCY = "invalid_currency"
    INVALID_GOAL_FIELD = "invalid_goal_field"
    BUDGET_CAPACITY_EXCEEDED = "budget_capacity_exceeded"
    GOAL_CAPACITY_EXCEEDED = "goal_capacity_exceeded"
    GOAL_LIMIT_REACHED = "goal_limit_reached"
    NO_GOALS = "no_goals"
    SCHEMA_INVALID = "schema_invalid"
    NOT_FOUND = "not_found"
    CONFIRMATION_DECLINED = "confirmation_declined"
    STORAGE_FAILED = "storage_failed"


class ValidationOutcome(BaseModel):
    """Result of a single validation predicate."""

    valid: bool
    error: str = ""
    reason: Optional[RejectionReason] = None
    field: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationOutcome":
        return cls(valid=True)

    @classmethod
    def fail(
        cls,
        reason: RejectionReason,
        error: str,
        field: Optional[str] = None,
    ) -> "ValidationOutcome":
        return cls(valid=False, error=error, reason=reason, field=field)

    def qualified(self, prefix: str, field: str) -> "ValidationOutcome":
        """Re-tag a failed sub-check with a field and message prefix."""
        if self.valid:
            return self
        return ValidationOutcome.fail(self.reason, f"{prefix}: {self.error}", field)


class MutationResult(BaseModel):
    """
    Outcome of a state mutation.

    success=True carries the updated aggregate; success=False carries the
    reason, the offending field and a human-readable message.
    """

    success: bool
    state: Optional[FinanceState] = None
    reason: Optional[RejectionReason] = None
    field: Optional[str] = None
    message: str = ""
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def applied(
        cls,
        state: FinanceState,
        message: str = "",
        **details: Any,
    ) -> "MutationResult":
        return cls(success=True, state=state, message=message, details=details)

    @classmethod
    def rejected(
        cls,
        reason: RejectionReason,
        message: str,
        field: Optional[str] = None,
        **details: Any,
    ) -> "MutationResult":
        return cls(
            success=False,
            reason=reason,
            field=field,
            message=message,
            details=details,
        )

    @classmethod
    def from_validation(cls, outcome: ValidationOutcome) -> "MutationResult":
        return cls.rejected(outcome.reason, outcome.error, outcome.field)


# =============================================================================
# CONFIRMATION PROTOCOL
# =============================================================================

class ConfirmationKind(str, Enum):
    """The two independent gates of the expense confirmation policy."""
    INCOME_SHARE = "income_share"        # Expense is a large share of income
    BUDGET_EXCEEDED = "budget_exceeded"  # Category budget would go over 100%


class ConfirmationPrompt(BaseModel):
    """A yes/no question the caller must put to the user before committing."""

    kind: ConfirmationKind
    title: str
    message: str
    percentage: Decimal = Field(
        ...,
        description="The share that triggered the gate"
    )


class ExpenseCheck(BaseModel):
    """
    Result of the check phase of posting an expense.

    This is the request object handed to the caller: it says whether the
    draft is valid and which confirmations it needs. Nothing has been
    written yet; commit_expense() does that once answers are collected.
    """

    check_id: UUID = Field(default_factory=uuid4)

    validation: ValidationOutcome
    expense: Optional[Expense] = None
    month: Optional[str] = None

    income_share: Decimal = Decimal("0")
    budget_share: Decimal = Decimal("0")
    budget_before: BudgetEntry = Field(default_factory=BudgetEntry)
    new_spent: Decimal = Decimal("0")

    required_confirmations: list[ConfirmationPrompt] = Field(default_factory=list)

    @property
    def accepted(self) -> bool:
        """Did the draft pass validation?"""
        return self.validation.valid

    @property
    def needs_confirmation(self) -> bool:
        return bool(self.required_confirmations)

    @property
    def confirmation_kinds(self) -> list[ConfirmationKind]:
        return [prompt.kind for prompt in self.required_confirmations]
