"""
Shared fixtures for the Finance Tracker tests.

All tests pin "today" explicitly so date rules never depend on the
real clock.
"""

from datetime import date
from decimal import Decimal

import pytest

from src.audit import AuditLogger
from src.config import get_settings
from src.models.finance import (
    BudgetEntry,
    Category,
    Expense,
    FinanceState,
    Goal,
    Income,
    MonthBudget,
)
from src.orchestrator import FinanceTracker
from src.services.storage import InMemoryAuditStorage, InMemoryFinanceStorage


TODAY = date(2025, 6, 20)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Run every test away from any local .env and with fresh settings."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "FINANCE_EXPENSE_PERCENTAGE_WARNING",
        "FINANCE_GOAL_PERCENTAGE_WARNING",
        "FINANCE_MAX_GOALS",
        "FINANCE_MAX_RECENT_EXPENSES",
        "FINANCE_DEFAULT_CURRENCY",
        "FINANCE_STORAGE_DATA_PATH",
        "FINANCE_STORAGE_EXPORT_FILE_NAME",
        "FINANCE_STORAGE_WRITE_ATTEMPTS",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def empty_state() -> FinanceState:
    return FinanceState.default()


@pytest.fixture
def funded_state() -> FinanceState:
    """USD state with a single income of 1000."""
    return FinanceState(
        incomes=[Income(amount=Decimal("1000"), income_date=date(2025, 6, 1))],
    )


@pytest.fixture
def transport_state() -> FinanceState:
    """
    June 2025 transport budget of 100 with 90 already spent, and an
    income large enough that the income gate never fires.
    """
    return FinanceState(
        incomes=[Income(amount=Decimal("100000"), income_date=date(2025, 6, 1))],
        expenses=[
            Expense(
                amount=Decimal("90"),
                category=Category.TRANSPORT,
                note="Bus pass",
                expense_date=date(2025, 6, 10),
            ),
        ],
        budgets={
            "2025-06": MonthBudget(
                categories={
                    Category.TRANSPORT: BudgetEntry(
                        assigned=Decimal("100"),
                        spent=Decimal("90"),
                    ),
                },
            ),
        },
    )


@pytest.fixture
def goal_state() -> FinanceState:
    """One goal of 1000 with 900 saved and a surplus of 300 waiting."""
    return FinanceState(
        goals=[
            Goal(
                name="Vacaciones",
                total=Decimal("1000"),
                progress=Decimal("900"),
                deadline=date(2026, 1, 31),
            ),
        ],
        previous_surplus=Decimal("300"),
    )


@pytest.fixture
def memory_storage() -> InMemoryFinanceStorage:
    return InMemoryFinanceStorage()


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def tracker(memory_storage, audit_storage) -> FinanceTracker:
    return FinanceTracker(
        storage=memory_storage,
        audit_logger=AuditLogger(audit_storage),
    )
