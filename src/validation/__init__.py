"""Validation package."""

from src.validation.validator import (
    as_category,
    as_currency,
    as_date,
    to_decimal,
    validate_amount,
    validate_budget,
    validate_category,
    validate_currency,
    validate_date,
    validate_goal,
    validate_month,
)

__all__ = [
    "as_category",
    "as_currency",
    "as_date",
    "to_decimal",
    "validate_amount",
    "validate_budget",
    "validate_category",
    "validate_currency",
    "validate_date",
    "validate_goal",
    "validate_month",
]
