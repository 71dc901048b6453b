"""User preferences stored in the finance state."""

from typing import Any

import structlog

from src.models.finance import FinanceState
from src.models.results import MutationResult
from src.validation import as_currency, validate_currency


logger = structlog.get_logger(__name__)


def change_currency(state: FinanceState, currency: Any) -> MutationResult:
    """
    Switch the display currency.

    Stored amounts are not converted; only labels and amount ceilings change.
    """
    check = validate_currency(currency)
    if not check.valid:
        return MutationResult.from_validation(check)

    resolved = as_currency(currency)
    updated = state.model_copy(deep=True)
    previous = updated.currency
    updated.currency = resolved

    logger.info("currency_changed", previous=previous.value, currency=resolved.value)
    return MutationResult.applied(
        updated,
        f"Currency changed to {resolved.value}",
        previous=previous.value,
        currency=resolved.value,
    )
