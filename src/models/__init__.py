"""
Data Models Package

This package contains all Pydantic models used by the finance tracker.
All data flowing through the ledger must conform to these schemas.
"""

from src.models.finance import (
    DEFAULT_SHORTCUTS,
    MAX_AMOUNT_BY_CURRENCY,
    SURPLUS_KEY,
    BudgetEntry,
    Category,
    Currency,
    Expense,
    FinanceState,
    Goal,
    Income,
    MonthBudget,
)
from src.models.results import (
    ConfirmationKind,
    ConfirmationPrompt,
    ExpenseCheck,
    MutationResult,
    RejectionReason,
    ValidationOutcome,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "DEFAULT_SHORTCUTS",
    "MAX_AMOUNT_BY_CURRENCY",
    "SURPLUS_KEY",
    "BudgetEntry",
    "Category",
    "Currency",
    "Expense",
    "FinanceState",
    "Goal",
    "Income",
    "MonthBudget",
    # Results
    "ConfirmationKind",
    "ConfirmationPrompt",
    "ExpenseCheck",
    "MutationResult",
    "RejectionReason",
    "ValidationOutcome",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
