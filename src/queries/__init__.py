"""Report queries package."""

from src.queries.reports import (
    CategoryRow,
    DashboardSummary,
    GoalStatus,
    MonthReport,
    SpendingStatus,
    available_months,
    dashboard_summary,
    goal_overview,
    month_report,
    recent_expenses,
    shortcuts_for,
)

__all__ = [
    "CategoryRow",
    "DashboardSummary",
    "GoalStatus",
    "MonthReport",
    "SpendingStatus",
    "available_months",
    "dashboard_summary",
    "goal_overview",
    "month_report",
    "recent_expenses",
    "shortcuts_for",
]
