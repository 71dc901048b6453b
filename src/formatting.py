"""
Display Formatters

Strings handed to presentation collaborators: money, percentages, dates,
category and month labels. Formatters never raise; bad input degrades to a
placeholder.
"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any, Optional

from src.models.finance import MONTH_KEY_PATTERN, Category, Currency


MONTH_NAMES = [
    "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
    "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
]


def _decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def _round(value: Decimal, exponent: str) -> Decimal:
    """Round half-up to `exponent`, with enough precision for any magnitude."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 4)
        return value.quantize(Decimal(exponent), rounding=ROUND_HALF_UP)


def format_currency(amount: Any, currency: Any = Currency.USD) -> str:
    """
    Format an amount with thousands separators and up to two decimals.

    Example: format_currency(Decimal("1234.5"), Currency.USD) -> "1,234.5 USD"
    """
    try:
        code = Currency(currency).value
    except ValueError:
        code = Currency.USD.value

    value = _decimal(amount)
    if value is None:
        value = Decimal("0")

    text = f"{_round(value, '0.01'):,.2f}"
    text = text.rstrip("0").rstrip(".")
    return f"{text} {code}"


def format_percentage(value: Any) -> str:
    """Whole-number percentage, rounded half-up: 79.5 -> "80%"."""
    number = _decimal(value)
    if number is None:
        return "0%"
    return f"{_round(number, '1')}%"


def format_date(value: Any, style: str = "long") -> str:
    """
    Format a date.

    Styles: "short" (15/06/2025), "long" (15 de junio de 2025), "iso".
    """
    if value is None or value == "":
        return "No date"
    if isinstance(value, datetime):
        day = value.date()
    elif isinstance(value, date):
        day = value
    else:
        try:
            day = date.fromisoformat(str(value))
        except ValueError:
            return "Invalid date"

    if style == "iso":
        return day.isoformat()
    if style == "short":
        return day.strftime("%d/%m/%Y")
    return f"{day.day} de {MONTH_NAMES[day.month - 1].lower()} de {day.year}"


def format_category(category: Any) -> str:
    """Capitalized category label."""
    if isinstance(category, Category):
        category = category.value
    if not isinstance(category, str) or not category:
        return "Unknown"
    return category[0].upper() + category[1:]


def format_month_name(month: Any) -> str:
    """'2025-06' -> 'Junio 2025'. Malformed keys are returned unchanged."""
    if not isinstance(month, str) or not month:
        return "Invalid month"
    if not MONTH_KEY_PATTERN.match(month):
        return month
    year, number = month.split("-")
    return f"{MONTH_NAMES[int(number) - 1]} {year}"
