"""
Month Keys

Budgets and expenses are bucketed by calendar month using "YYYY-MM" keys.
Because the keys are zero-padded, lexicographic order is chronological
order, so plain sorting works everywhere.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

import structlog

from src.models.finance import MONTH_KEY_PATTERN
from src.validation import to_decimal


logger = structlog.get_logger(__name__)

# Years a four-digit month key can hold
MIN_YEAR = 1
MAX_YEAR = 9999


def is_month_key(value: Any) -> bool:
    return isinstance(value, str) and bool(MONTH_KEY_PATTERN.match(value))


def month_key(day: date) -> str:
    """The month key a date falls in."""
    return day.strftime("%Y-%m")


def current_month(today: Optional[date] = None) -> str:
    return month_key(today or date.today())


def adjacent_month(month: str, offset: int) -> str:
    """
    The month `offset` calendar months away, rolling the year as needed.

    adjacent_month("2025-12", 1)  -> "2026-01"
    adjacent_month("2025-01", -1) -> "2024-12"

    Fails closed: malformed input, or a result outside years 0001-9999,
    is logged and the input is returned unchanged.
    """
    if not is_month_key(month) or isinstance(offset, bool):
        logger.warning("adjacent_month_invalid_input", month=month, offset=offset)
        return month
    try:
        steps = int(offset)
    except (TypeError, ValueError):
        logger.warning("adjacent_month_invalid_input", month=month, offset=offset)
        return month

    year, number = (int(part) for part in month.split("-"))
    index = year * 12 + (number - 1) + steps
    if not MIN_YEAR <= index // 12 <= MAX_YEAR:
        logger.warning("adjacent_month_out_of_range", month=month, offset=offset)
        return month
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def category_percentage(spent: Any, assigned: Any) -> int:
    """
    Spent as a whole percentage of assigned, rounded half-up.

    Returns 0 when nothing is assigned (or the inputs are not numbers).
    """
    spent_value = to_decimal(spent)
    assigned_value = to_decimal(assigned)
    if spent_value is None or not spent_value.is_finite():
        spent_value = Decimal("0")
    if assigned_value is None or not assigned_value.is_finite() or assigned_value <= 0:
        return 0
    ratio = spent_value / assigned_value * 100
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
