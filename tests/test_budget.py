"""Tests for the budget ledger."""

from datetime import date
from decimal import Decimal

from src.ledger import expenses_by_category, recompute_spent, set_budget
from src.models.finance import BudgetEntry, Category, Expense
from src.models.results import RejectionReason


class TestSetBudget:
    """Tests for creating and adjusting category budgets."""

    def test_creates_entry(self, empty_state):
        """Test a new month and category are created."""
        result = set_budget(empty_state, "2025-06", "alimentacion", 300)

        assert result.success is True
        entry = result.state.budgets["2025-06"].categories[Category.FOOD]
        assert entry == BudgetEntry(assigned=Decimal("300"), spent=Decimal("0"))
        assert result.details["assigned"] == Decimal("300")

    def test_does_not_modify_input(self, empty_state):
        """Test the caller's state is left as it was."""
        set_budget(empty_state, "2025-06", "alimentacion", 300)
        assert empty_state.budgets == {}

    def test_adjusting_keeps_spent_from_expenses(self, transport_state):
        """Test spent is recomputed, never reset, when assigned changes."""
        result = set_budget(transport_state, "2025-06", Category.TRANSPORT, 250)

        entry = result.state.budgets["2025-06"].categories[Category.TRANSPORT]
        assert entry.assigned == Decimal("250")
        assert entry.spent == Decimal("90")

    def test_spent_counts_existing_expenses(self, funded_state):
        """Test budgeting a category that already has expenses."""
        state = funded_state.model_copy(deep=True)
        state.expenses.append(Expense(
            amount=Decimal("40"),
            category=Category.SERVICES,
            expense_date=date(2025, 7, 3),
        ))
        result = set_budget(state, "2025-07", "servicios", 100)
        assert result.state.budgets["2025-07"].categories[Category.SERVICES].spent == Decimal("40")

    def test_rejects_invalid_month(self, empty_state):
        """Test a malformed month key."""
        result = set_budget(empty_state, "2025-13", "alimentacion", 300)
        assert result.success is False
        assert result.reason == RejectionReason.INVALID_DATE
        assert result.field == "month"

    def test_rejects_unknown_category(self, empty_state):
        """Test an unknown category."""
        result = set_budget(empty_state, "2025-06", "vivienda", 300)
        assert result.reason == RejectionReason.INVALID_CATEGORY
        assert result.field == "category"

    def test_rejects_invalid_amount(self, empty_state):
        """Test a non-positive assigned amount."""
        result = set_budget(empty_state, "2025-06", "alimentacion", 0)
        assert result.reason == RejectionReason.INVALID_AMOUNT
        assert result.field == "assigned"

    def test_other_months_untouched(self, transport_state):
        """Test editing one month leaves the others alone."""
        result = set_budget(transport_state, "2025-07", "transporte", 80)
        assert result.state.budgets["2025-06"] == transport_state.budgets["2025-06"]


class TestSpentTotals:
    """Tests for the expense aggregations behind budgets."""

    def test_recompute_spent(self, transport_state):
        """Test the sum over month and category."""
        assert recompute_spent(transport_state, "2025-06", Category.TRANSPORT) == Decimal("90")
        assert recompute_spent(transport_state, "2025-06", Category.FOOD) == Decimal("0")
        assert recompute_spent(transport_state, "2025-05", Category.TRANSPORT) == Decimal("0")

    def test_expenses_by_category(self, transport_state):
        """Test per-category totals of a month."""
        state = transport_state.model_copy(deep=True)
        state.expenses.append(Expense(
            amount=Decimal("15"),
            category=Category.FOOD,
            expense_date=date(2025, 6, 11),
        ))
        assert expenses_by_category(state, "2025-06") == {
            Category.TRANSPORT: Decimal("90"),
            Category.FOOD: Decimal("15"),
        }
