"""
Core Data Models for the Finance Tracker

These models define the schema of the single persisted aggregate
(FinanceState) and everything it contains.

DESIGN DECISION: Field names are English, but every model carries the
original document keys as aliases (moneda, gastos, presupuestos, ...).
Documents written by earlier versions of the app therefore load unchanged,
and to_document() writes the same shape back.

DESIGN DECISION: Category and Currency are closed enums. An unknown value
is rejected when the document is parsed, never tolerated deep inside the
ledger.
"""

import re
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import NAMESPACE_OID, UUID, uuid4, uuid5

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Currency(str, Enum):
    """Supported currencies."""
    USD = "USD"
    EUR = "EUR"
    COP = "COP"
    ARS = "ARS"
    CLP = "CLP"


class Category(str, Enum):
    """
    Spending categories.

    Values are the document keys used by budgets, expenses and shortcuts.
    """
    FOOD = "alimentacion"
    TRANSPORT = "transporte"
    ENTERTAINMENT = "entretenimiento"
    SERVICES = "servicios"
    OTHER = "otros"


# Largest single amount accepted per currency
MAX_AMOUNT_BY_CURRENCY: dict[Currency, Decimal] = {
    Currency.USD: Decimal("1000000"),
    Currency.EUR: Decimal("1000000"),
    Currency.COP: Decimal("4000000000"),
    Currency.ARS: Decimal("1000000000"),
    Currency.CLP: Decimal("1000000000"),
}

# Pseudo-category holding carried-forward surplus inside a month's budgets
SURPLUS_KEY = "excedente"

MONTH_KEY_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

# Namespace of the ids derived for expenses stored without one
LEGACY_EXPENSE_NAMESPACE = uuid5(NAMESPACE_OID, "finance-tracker.expense")

DEFAULT_SHORTCUTS: dict[Category, list[int]] = {
    Category.FOOD: [50000, 100000, 200000],
    Category.TRANSPORT: [10000, 30000, 50000],
    Category.ENTERTAINMENT: [50000, 100000, 200000],
    Category.SERVICES: [100000, 200000, 500000],
    Category.OTHER: [50000, 100000, 150000],
}


def decimal_to_number(value: Decimal) -> int | float:
    """Render a Decimal as a plain JSON number (int when integral)."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def legacy_expense_id(position: int, entry: dict) -> UUID:
    """
    Deterministic id for an expense document that has none.

    Derived from the entry's position and values, so every load of the
    same document yields the same ids until it is saved with them.
    """
    values = [
        entry.get("monto", entry.get("amount")),
        entry.get("categoria", entry.get("category")),
        entry.get("fecha", entry.get("expense_date")),
        entry.get("nota", entry.get("note")),
    ]
    return uuid5(LEGACY_EXPENSE_NAMESPACE, "|".join([str(position)] + [str(v) for v in values]))


def default_shortcuts() -> dict[Category, list[Decimal]]:
    return {
        category: [Decimal(amount) for amount in amounts]
        for category, amounts in DEFAULT_SHORTCUTS.items()
    }


# =============================================================================
# LEDGER RECORDS
# =============================================================================

class Expense(BaseModel):
    """
    A committed expense.

    Immutable once created; the only lifecycle event is deletion by id.
    Documents from older versions carry no id; FinanceState derives a
    stable one for them on load (see legacy_expense_id).
    """
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique expense ID"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        alias="monto",
        description="Expense amount in the state currency"
    )
    category: Category = Field(
        ...,
        alias="categoria",
    )
    note: Optional[str] = Field(
        default=None,
        alias="nota",
        description="Free-text note"
    )
    expense_date: date = Field(
        ...,
        alias="fecha",
        description="Calendar date of the expense"
    )

    @property
    def month(self) -> str:
        return self.expense_date.strftime("%Y-%m")

    def to_document(self) -> dict:
        return {
            "id": str(self.id),
            "monto": decimal_to_number(self.amount),
            "categoria": self.category.value,
            "nota": self.note or "",
            "fecha": self.expense_date.isoformat(),
        }


class Income(BaseModel):
    """An income record. Incomes are append-only."""
    model_config = ConfigDict(populate_by_name=True)

    amount: Decimal = Field(..., gt=0, alias="monto")
    income_date: date = Field(..., alias="fecha")

    def to_document(self) -> dict:
        return {
            "monto": decimal_to_number(self.amount),
            "fecha": self.income_date.isoformat(),
        }


class BudgetEntry(BaseModel):
    """
    Assigned/spent pair for one (month, category).

    INVARIANT: spent equals the sum of that month's expenses in the
    category. The ledger recomputes it; it is never trusted from callers.
    """
    model_config = ConfigDict(populate_by_name=True)

    assigned: Decimal = Field(default=Decimal("0"), ge=0, alias="asignado")
    spent: Decimal = Field(default=Decimal("0"), ge=0, alias="gastado")

    def to_document(self) -> dict:
        return {
            "asignado": decimal_to_number(self.assigned),
            "gastado": decimal_to_number(self.spent),
        }


class MonthBudget(BaseModel):
    """
    All budget entries of one month plus its carried surplus.

    In documents the surplus sits next to the categories under the
    "excedente" key; it is split out here so it can never be mistaken
    for a category.
    """

    categories: dict[Category, BudgetEntry] = Field(default_factory=dict)
    surplus: Decimal = Field(default=Decimal("0"), ge=0)

    @model_validator(mode='before')
    @classmethod
    def split_surplus_key(cls, data: Any) -> Any:
        """Accept the document shape {category: entry, ..., excedente: n}."""
        if isinstance(data, dict) and not {"categories", "surplus"} & data.keys():
            categories = {k: v for k, v in data.items() if k != SURPLUS_KEY}
            return {
                "categories": categories,
                "surplus": data.get(SURPLUS_KEY, 0),
            }
        return data

    def entry(self, category: Category) -> BudgetEntry:
        """Entry for a category, or an empty one if nothing is budgeted."""
        return self.categories.get(category, BudgetEntry())

    def to_document(self) -> dict:
        document = {
            category.value: entry.to_document()
            for category, entry in self.categories.items()
        }
        if self.surplus:
            document[SURPLUS_KEY] = decimal_to_number(self.surplus)
        return document


class Goal(BaseModel):
    """
    A savings goal.

    Name shape and deadline rules are enforced by the validator when a goal
    is created or edited, not here: a stored goal whose deadline has passed
    must still load.
    """
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=50, alias="nombre")
    total: Decimal = Field(..., gt=0)
    progress: Decimal = Field(default=Decimal("0"), ge=0, alias="progreso")
    deadline: date = Field(..., alias="plazo")

    @property
    def remaining(self) -> Decimal:
        return self.total - self.progress

    def to_document(self) -> dict:
        return {
            "nombre": self.name,
            "total": decimal_to_number(self.total),
            "progreso": decimal_to_number(self.progress),
            "plazo": self.deadline.isoformat(),
        }


# =============================================================================
# AGGREGATE ROOT
# =============================================================================

class FinanceState(BaseModel):
    """
    The whole of a user's finance data; the only unit persisted.

    CRITICAL: Ledger operations never mutate the instance they receive.
    They work on a deep copy and hand the updated aggregate back.
    """
    model_config = ConfigDict(populate_by_name=True)

    currency: Currency = Field(default=Currency.USD, alias="moneda")
    incomes: list[Income] = Field(default_factory=list, alias="ingresos")
    expenses: list[Expense] = Field(default_factory=list, alias="gastos")
    budgets: dict[str, MonthBudget] = Field(default_factory=dict, alias="presupuestos")
    goals: list[Goal] = Field(default_factory=list, alias="metas")
    shortcuts: dict[Category, list[Decimal]] = Field(
        default_factory=default_shortcuts,
        alias="atajos",
    )
    previous_surplus: Decimal = Field(default=Decimal("0"), ge=0, alias="excedenteAnterior")

    @model_validator(mode='before')
    @classmethod
    def assign_legacy_expense_ids(cls, data: Any) -> Any:
        """Give id-less expense documents a stable id."""
        if not isinstance(data, dict):
            return data
        key = "gastos" if "gastos" in data else "expenses"
        entries = data.get(key)
        if not isinstance(entries, list):
            return data

        filled = []
        for position, entry in enumerate(entries):
            if isinstance(entry, dict) and not entry.get("id"):
                entry = {**entry, "id": legacy_expense_id(position, entry)}
            filled.append(entry)
        return {**data, key: filled}

    @field_validator('budgets')
    @classmethod
    def validate_month_keys(cls, v: dict[str, MonthBudget]) -> dict[str, MonthBudget]:
        """Budget months must be YYYY-MM keys."""
        for month in v:
            if not MONTH_KEY_PATTERN.match(month):
                raise ValueError(f"Invalid budget month key: {month}")
        return v

    @classmethod
    def default(cls, currency: Optional[Currency] = None) -> "FinanceState":
        """A fresh, empty state."""
        return cls(currency=currency or Currency.USD)

    @property
    def income_total(self) -> Decimal:
        return sum((income.amount for income in self.incomes), Decimal("0"))

    @property
    def expense_total(self) -> Decimal:
        return sum((expense.amount for expense in self.expenses), Decimal("0"))

    def month_budget(self, month: str) -> MonthBudget:
        """Budgets of a month without creating it."""
        return self.budgets.get(month, MonthBudget())

    def ensure_month(self, month: str) -> MonthBudget:
        """Budgets of a month, creating the month if absent."""
        return self.budgets.setdefault(month, MonthBudget())

    def find_expense(self, expense_id: UUID) -> Optional[Expense]:
        for expense in self.expenses:
            if expense.id == expense_id:
                return expense
        return None

    def to_document(self) -> dict:
        """
        Convert to the persisted document shape.

        Values are plain JSON types (numbers, strings, lists, dicts).
        """
        return {
            "moneda": self.currency.value,
            "ingresos": [income.to_document() for income in self.incomes],
            "gastos": [expense.to_document() for expense in self.expenses],
            "presupuestos": {
                month: budget.to_document()
                for month, budget in sorted(self.budgets.items())
            },
            "metas": [goal.to_document() for goal in self.goals],
            "atajos": {
                category.value: [decimal_to_number(amount) for amount in amounts]
                for category, amounts in self.shortcuts.items()
            },
            "excedenteAnterior": decimal_to_number(self.previous_surplus),
        }
