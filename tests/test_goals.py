"""Tests for savings goals."""

import pytest
from datetime import date
from decimal import Decimal

from src.ledger import contribute, create_goal, goal_percentage, update_goal
from src.models.finance import Goal
from src.models.results import RejectionReason


TODAY = date(2025, 6, 20)


class TestCreateGoal:
    """Tests for goal creation."""

    def test_create_goal(self, empty_state):
        """Test a goal starts with zero progress."""
        result = create_goal(empty_state, "Fondo de emergencia", 3000, "2026-06-01", today=TODAY)

        assert result.success is True
        goal = result.state.goals[0]
        assert goal.name == "Fondo de emergencia"
        assert goal.total == Decimal("3000")
        assert goal.progress == Decimal("0")
        assert goal.deadline == date(2026, 6, 1)
        assert empty_state.goals == []

    def test_goal_limit(self, goal_state):
        """Test the goal list cannot grow past the limit."""
        result = create_goal(goal_state, "Otra meta", 100, "2026-01-01", today=TODAY, max_goals=1)
        assert result.success is False
        assert result.reason == RejectionReason.GOAL_LIMIT_REACHED

    def test_default_goal_limit_is_ten(self, empty_state):
        """Test the configured default of ten goals."""
        state = empty_state
        for number in range(10):
            state = create_goal(state, f"Meta {number}", 100, "2026-01-01", today=TODAY).state
        result = create_goal(state, "Meta 10", 100, "2026-01-01", today=TODAY)
        assert result.reason == RejectionReason.GOAL_LIMIT_REACHED

    def test_invalid_name(self, empty_state):
        """Test a too-short name."""
        result = create_goal(empty_state, "ab", 100, "2026-01-01", today=TODAY)
        assert result.reason == RejectionReason.INVALID_GOAL_FIELD
        assert result.field == "name"

    def test_deadline_today_rejected(self, empty_state):
        """Test deadlines must lie after today."""
        result = create_goal(empty_state, "Meta", 100, "2025-06-20", today=TODAY)
        assert result.reason == RejectionReason.INVALID_DATE
        assert result.field == "deadline"


class TestContribute:
    """Tests for goal contributions."""

    def test_over_cap_rejected(self, goal_state):
        """Test a contribution above the remaining 100 is refused."""
        result = contribute(goal_state, 0, 150)

        assert result.success is False
        assert result.reason == RejectionReason.GOAL_CAPACITY_EXCEEDED
        assert result.message == "Amount exceeds the remaining 100 USD"
        assert result.details["remaining"] == Decimal("100")
        assert goal_state.goals[0].progress == Decimal("900")

    def test_exact_cap_completes_goal(self, goal_state):
        """Test contributing exactly the remainder fills the goal."""
        result = contribute(goal_state, 0, 100)

        goal = result.state.goals[0]
        assert goal.progress == goal.total
        assert result.details["remaining"] == Decimal("0")

    def test_partial_contribution(self, goal_state):
        """Test a contribution below the cap."""
        result = contribute(goal_state, "0", Decimal("25.5"))
        assert result.state.goals[0].progress == Decimal("925.5")

    @pytest.mark.parametrize("index", [1, -1, "x", None, True])
    def test_unknown_goal(self, goal_state, index):
        """Test indexes that address no goal."""
        result = contribute(goal_state, index, 10)
        assert result.reason == RejectionReason.NOT_FOUND

    def test_invalid_amount(self, goal_state):
        """Test a non-positive contribution."""
        result = contribute(goal_state, 0, 0)
        assert result.reason == RejectionReason.INVALID_AMOUNT


class TestUpdateGoal:
    """Tests for editing goals."""

    def test_update_preserves_progress(self, goal_state):
        """Test edits never touch progress."""
        result = update_goal(goal_state, 0, "Viaje largo", 2000, "2026-12-31", today=TODAY)

        goal = result.state.goals[0]
        assert goal.name == "Viaje largo"
        assert goal.total == Decimal("2000")
        assert goal.progress == Decimal("900")
        assert goal.deadline == date(2026, 12, 31)

    def test_total_below_progress_rejected(self, goal_state):
        """Test shrinking a goal below what is saved."""
        result = update_goal(goal_state, 0, "Vacaciones", 800, "2026-01-31", today=TODAY)

        assert result.success is False
        assert result.reason == RejectionReason.INVALID_GOAL_FIELD
        assert result.field == "total"
        assert goal_state.goals[0].total == Decimal("1000")

    def test_total_equal_to_progress_allowed(self, goal_state):
        """Test shrinking exactly to the saved amount."""
        result = update_goal(goal_state, 0, "Vacaciones", 900, "2026-01-31", today=TODAY)
        assert result.success is True

    def test_unknown_goal(self, goal_state):
        """Test editing a goal that does not exist."""
        result = update_goal(goal_state, 3, "Vacaciones", 900, "2026-01-31", today=TODAY)
        assert result.reason == RejectionReason.NOT_FOUND

    def test_past_deadline_rejected(self, goal_state):
        """Test the new deadline must be in the future."""
        result = update_goal(goal_state, 0, "Vacaciones", 1000, "2025-01-01", today=TODAY)
        assert result.reason == RejectionReason.INVALID_DATE
        assert result.field == "deadline"


class TestGoalPercentage:
    """Tests for goal progress percentages."""

    def test_percentage(self):
        """Test progress over total."""
        goal = Goal(name="Moto", total=Decimal("1000"), progress=Decimal("900"), deadline=date(2026, 1, 1))
        assert goal_percentage(goal) == Decimal("90")

    def test_can_exceed_hundred(self):
        """Test goals overfilled by a surplus transfer."""
        goal = Goal(name="Moto", total=Decimal("1000"), progress=Decimal("1200"), deadline=date(2026, 1, 1))
        assert goal_percentage(goal) == Decimal("120")
