"""
Validation Predicates

DESIGN DECISION: Every mutation of the finance state is gated by these
functions. They are pure: no storage, no settings, no clock unless one is
passed in ("today" defaults to the real date).

Each predicate returns a ValidationOutcome. Expected bad input (a negative
amount, an unknown category, a malformed date) is reported, never raised.

There is exactly one amount check. Callers that need the looser rule
(positive, no ceiling) pass bounded=False instead of using a second helper.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from src.formatting import format_currency
from src.models.finance import (
    MAX_AMOUNT_BY_CURRENCY,
    MONTH_KEY_PATTERN,
    Category,
    Currency,
)
from src.models.results import RejectionReason, ValidationOutcome


DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
GOAL_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\s\-_]+$")

MIN_DATE = date(2000, 1, 1)
MAX_YEARS_AHEAD = 10

GOAL_NAME_MIN_LENGTH = 3
GOAL_NAME_MAX_LENGTH = 50


# =============================================================================
# COERCION HELPERS
# =============================================================================

def to_decimal(value: Any) -> Optional[Decimal]:
    """Parse a user-supplied amount; None if it is not a number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None


def as_category(value: Any) -> Optional[Category]:
    if isinstance(value, Category):
        return value
    if isinstance(value, str):
        try:
            return Category(value)
        except ValueError:
            return None
    return None


def as_currency(value: Any) -> Optional[Currency]:
    if isinstance(value, Currency):
        return value
    if isinstance(value, str):
        try:
            return Currency(value)
        except ValueError:
            return None
    return None


def as_date(value: Any) -> Optional[date]:
    """Parse a YYYY-MM-DD string or pass a date through; None if invalid."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and DATE_PATTERN.match(value.strip()):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def _years_after(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return day.replace(year=day.year + years, day=28)


# =============================================================================
# PREDICATES
# =============================================================================

def validate_amount(
    amount: Any,
    currency: Any = Currency.USD,
    max_amount: Any = None,
    bounded: bool = True,
) -> ValidationOutcome:
    """
    Validate a money amount.

    Checks:
    - Is a finite number
    - Is greater than zero
    - Does not exceed the currency ceiling (skipped when bounded=False)

    Args:
        amount: Raw amount (Decimal, int, float or numeric string)
        currency: Currency whose ceiling applies
        max_amount: Overrides the currency ceiling for this call; an
            override that is not a positive number fails the check
        bounded: Whether the ceiling is enforced at all
    """
    value = to_decimal(amount)
    if value is None or value.is_nan():
        return ValidationOutcome.fail(
            RejectionReason.INVALID_AMOUNT,
            "Amount must be a number",
            "amount",
        )
    if not value.is_finite():
        return ValidationOutcome.fail(
            RejectionReason.INVALID_AMOUNT,
            "Amount must be a finite number",
            "amount",
        )
    if value <= 0:
        return ValidationOutcome.fail(
            RejectionReason.INVALID_AMOUNT,
            "Amount must be greater than 0",
            "amount",
        )

    if not bounded:
        return ValidationOutcome.ok()

    resolved = as_currency(currency) or Currency.USD
    ceiling = MAX_AMOUNT_BY_CURRENCY[resolved]
    if max_amount is not None:
        override = to_decimal(max_amount)
        if override is None or not override.is_finite() or override <= 0:
            return ValidationOutcome.fail(
                RejectionReason.INVALID_AMOUNT,
                "Maximum amount must be a positive number",
                "amount",
            )
        ceiling = override

    if value > ceiling:
        return ValidationOutcome.fail(
            RejectionReason.INVALID_AMOUNT,
            f"Amount cannot exceed {format_currency(ceiling, resolved)}",
            "amount",
        )
    return ValidationOutcome.ok()


def validate_category(category: Any) -> ValidationOutcome:
    """Category must be one of the fixed spending categories."""
    if category is None or category == "" or not isinstance(category, str):
        return ValidationOutcome.fail(
            RejectionReason.INVALID_CATEGORY,
            "Select a category",
            "category",
        )
    if as_category(category) is None:
        return ValidationOutcome.fail(
            RejectionReason.INVALID_CATEGORY,
            "Invalid category",
            "category",
        )
    return ValidationOutcome.ok()


def validate_date(
    value: Any,
    allow_future: bool = True,
    allow_past: bool = True,
    today: Optional[date] = None,
) -> ValidationOutcome:
    """
    Validate a calendar date.

    Checks (in order):
    - Present and in YYYY-MM-DD form
    - A real calendar date
    - Not in the future (when allow_future is False)
    - Not today or earlier (when allow_past is False)
    - Not before 2000-01-01
    - Not more than 10 years after today
    """
    if value is None or value == "":
        return ValidationOutcome.fail(
            RejectionReason.INVALID_DATE, "Date is required", "date"
        )
    if isinstance(value, str) and not DATE_PATTERN.match(value.strip()):
        return ValidationOutcome.fail(
            RejectionReason.INVALID_DATE,
            "Invalid date format (use YYYY-MM-DD)",
            "date",
        )

    parsed = as_date(value)
    if parsed is None:
        return ValidationOutcome.fail(
            RejectionReason.INVALID_DATE, "Invalid date", "date"
        )

    today = today or date.today()

    if not allow_future and parsed > today:
        return ValidationOutcome.fail(
            RejectionReason.INVALID_DATE, "Date cannot be in the future", "date"
        )
    # Today has already started, so it counts as past
    if not allow_past and parsed <= today:
        return ValidationOutcome.fail(
            RejectionReason.INVALID_DATE, "Date cannot be in the past", "date"
        )
    if parsed < MIN_DATE:
        return ValidationOutcome.fail(
            RejectionReason.INVALID_DATE,
            "Date is too old (minimum 2000)",
            "date",
        )
    if parsed > _years_after(today, MAX_YEARS_AHEAD):
        return ValidationOutcome.fail(
            RejectionReason.INVALID_DATE,
            f"Date is too far ahead (maximum {MAX_YEARS_AHEAD} years in the future)",
            "date",
        )
    return ValidationOutcome.ok()


def validate_month(month: Any) -> ValidationOutcome:
    """Month keys are YYYY-MM with 01 <= MM <= 12."""
    if not isinstance(month, str) or not MONTH_KEY_PATTERN.match(month):
        return ValidationOutcome.fail(
            RejectionReason.INVALID_DATE,
            "Invalid month (use YYYY-MM)",
            "month",
        )
    return ValidationOutcome.ok()


def validate_currency(currency: Any) -> ValidationOutcome:
    """Currency must be one of the supported codes."""
    if currency is None or currency == "" or not isinstance(currency, str):
        return ValidationOutcome.fail(
            RejectionReason.INVALID_CURRENCY, "Select a currency", "currency"
        )
    if as_currency(currency) is None:
        options = ", ".join(c.value for c in Currency)
        return ValidationOutcome.fail(
            RejectionReason.INVALID_CURRENCY,
            f"Unsupported currency. Valid options: {options}",
            "currency",
        )
    return ValidationOutcome.ok()


def validate_goal(
    name: Any,
    total: Any,
    deadline: Any,
    currency: Any = Currency.USD,
    today: Optional[date] = None,
) -> ValidationOutcome:
    """
    Validate the editable fields of a savings goal.

    The first failing check is reported, qualified with its field:
    name shape, then total (as an amount), then deadline (future only).
    """
    if not isinstance(name, str) or len(name.strip()) < GOAL_NAME_MIN_LENGTH:
        return ValidationOutcome.fail(
            RejectionReason.INVALID_GOAL_FIELD,
            f"Goal name must be at least {GOAL_NAME_MIN_LENGTH} characters",
            "name",
        )
    if len(name.strip()) > GOAL_NAME_MAX_LENGTH:
        return ValidationOutcome.fail(
            RejectionReason.INVALID_GOAL_FIELD,
            f"Goal name cannot exceed {GOAL_NAME_MAX_LENGTH} characters",
            "name",
        )
    if not GOAL_NAME_PATTERN.match(name.strip()):
        return ValidationOutcome.fail(
            RejectionReason.INVALID_GOAL_FIELD,
            "Goal name may only contain letters, digits, spaces, hyphens or underscores",
            "name",
        )

    amount_check = validate_amount(total, currency)
    if not amount_check.valid:
        return amount_check.qualified("Goal total", "total")

    date_check = validate_date(deadline, allow_future=True, allow_past=False, today=today)
    if not date_check.valid:
        return date_check.qualified("Goal deadline", "deadline")

    return ValidationOutcome.ok()


def validate_budget(
    category: Any,
    assigned: Any,
    currency: Any = Currency.USD,
) -> ValidationOutcome:
    """A budget edit needs a known category and a valid assigned amount."""
    category_check = validate_category(category)
    if not category_check.valid:
        return category_check.qualified("Category", "category")

    amount_check = validate_amount(assigned, currency)
    if not amount_check.valid:
        return amount_check.qualified("Assigned amount", "assigned")

    return ValidationOutcome.ok()
