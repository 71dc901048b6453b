"""Tests for surplus transfers."""

from datetime import date
from decimal import Decimal

from src.ledger import carry_surplus_to_next_month, save_surplus_to_goal
from src.models.finance import Category, FinanceState, Goal, MonthBudget
from src.models.results import RejectionReason


class TestCarrySurplus:
    """Moving the surplus into next month's budget."""

    def test_carry_conserves_value(self, goal_state):
        """Test the surplus moves whole and the source is zeroed."""
        result = carry_surplus_to_next_month(goal_state, "2025-06")

        assert result.success is True
        assert result.state.previous_surplus == Decimal("0")
        assert result.state.budgets["2025-07"].surplus == Decimal("300")
        assert result.details["to_month"] == "2025-07"
        assert goal_state.previous_surplus == Decimal("300")

    def test_carry_adds_to_existing_surplus(self):
        """Test a month that already holds surplus."""
        state = FinanceState(
            budgets={"2025-07": MonthBudget(surplus=Decimal("50"))},
            previous_surplus=Decimal("25"),
        )
        result = carry_surplus_to_next_month(state, "2025-06")

        before = state.previous_surplus + state.budgets["2025-07"].surplus
        after = result.state.previous_surplus + result.state.budgets["2025-07"].surplus
        assert after == before
        assert result.state.budgets["2025-07"].surplus == Decimal("75")

    def test_carry_from_december(self, goal_state):
        """Test the year rolls over."""
        result = carry_surplus_to_next_month(goal_state, "2025-12")
        assert "2026-01" in result.state.budgets

    def test_carry_defaults_to_current_month(self, goal_state):
        """Test the source month defaults to today's month."""
        result = carry_surplus_to_next_month(goal_state, today=date(2025, 6, 20))
        assert result.details["from_month"] == "2025-06"
        assert result.state.budgets["2025-07"].surplus == Decimal("300")

    def test_carry_rejects_malformed_month(self, goal_state):
        """Test an invalid source month."""
        result = carry_surplus_to_next_month(goal_state, "2025-13")
        assert result.success is False
        assert result.reason == RejectionReason.INVALID_DATE

    def test_carry_rejects_last_month_of_year_9999(self, goal_state):
        """Test there is nowhere to carry from December 9999."""
        result = carry_surplus_to_next_month(goal_state, "9999-12")

        assert result.success is False
        assert result.reason == RejectionReason.INVALID_DATE
        assert result.field == "month"
        assert goal_state.budgets == {}

    def test_surplus_is_not_a_category(self, goal_state):
        """Test the carried amount stays out of category entries."""
        result = carry_surplus_to_next_month(goal_state, "2025-06")
        month_budget = result.state.budgets["2025-07"]
        assert month_budget.categories == {}
        assert month_budget.to_document() == {"excedente": 300}

    def test_carried_month_keeps_category_entries(self, transport_state):
        """Test existing budgets of the target month survive."""
        state = transport_state.model_copy(update={"previous_surplus": Decimal("10")})
        result = carry_surplus_to_next_month(state, "2025-05")

        month_budget = result.state.budgets["2025-06"]
        assert month_budget.surplus == Decimal("10")
        assert month_budget.categories[Category.TRANSPORT].assigned == Decimal("100")


class TestSaveSurplusToGoal:
    """Moving the surplus into a goal."""

    def test_no_goals(self, empty_state):
        """Test there must be a goal to save into."""
        result = save_surplus_to_goal(empty_state, 0)
        assert result.reason == RejectionReason.NO_GOALS

    def test_unknown_goal(self, goal_state):
        """Test an index that addresses no goal."""
        result = save_surplus_to_goal(goal_state, 4)
        assert result.reason == RejectionReason.NOT_FOUND

    def test_within_headroom(self):
        """Test a surplus that fits the goal."""
        state = FinanceState(
            goals=[Goal(name="Casa", total=Decimal("1000"), progress=Decimal("100"), deadline=date(2027, 1, 1))],
            previous_surplus=Decimal("300"),
        )
        result = save_surplus_to_goal(state, 0)

        assert result.state.goals[0].progress == Decimal("400")
        assert result.state.previous_surplus == Decimal("0")

    def test_transfer_is_not_capped(self, goal_state):
        """Test a surplus larger than the headroom still moves whole."""
        result = save_surplus_to_goal(goal_state, 0)

        assert result.success is True
        assert result.state.goals[0].progress == Decimal("1200")
        assert result.state.previous_surplus == Decimal("0")
        assert goal_state.goals[0].progress == Decimal("900")
