"""
Main Orchestrator for the Finance Tracker

This module ties together all the components and defines the
end-to-end flows for every user action:
1. Expense (draft → check → confirm → commit → save)
2. Budgets, incomes, goals, surplus transfers, preferences
3. Reset, export and import of the whole document

DESIGN DECISION: The orchestrator enforces the boundaries:
- Every action loads the stored state, runs one ledger operation and
  saves the result; there is no long-lived in-memory copy
- No expense is written while a required confirmation is missing
- Every step is audited

A failed save is reported as STORAGE_FAILED and the stored document
keeps its previous contents.
"""

from datetime import date
from pathlib import Path
from typing import Any, Mapping, Optional, Union
from uuid import UUID

from src import ledger
from src.audit import AuditLogger, create_correlation_id
from src.config import get_settings
from src.models.audit import AuditEventType
from src.models.finance import Currency, FinanceState
from src.models.results import (
    ConfirmationKind,
    ExpenseCheck,
    MutationResult,
    RejectionReason,
)
from src.queries import DashboardSummary, MonthReport, dashboard_summary, month_report
from src.services.storage import (
    AuditStorageInterface,
    FinanceStorageInterface,
    JsonFileFinanceStorage,
    StorageError,
    export_state,
    import_state,
)


class FinanceTracker:
    """
    Runs ledger operations against a storage backend.

    Each public method is one user action:
    1. Load → the stored state, or a fresh default state
    2. Apply → a pure ledger operation on that state
    3. Save → only if the operation succeeded
    4. Audit → the outcome, success or rejection
    """

    def __init__(
        self,
        storage: Optional[FinanceStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage or JsonFileFinanceStorage()
        self._audit_logger = audit_logger or AuditLogger()

    # =========================================================================
    # STATE
    # =========================================================================

    def load_state(self) -> FinanceState:
        """The stored state, or the default state when nothing valid is stored."""
        state = self._storage.load()
        if state is None:
            state = FinanceState.default(Currency(get_settings().app.default_currency))
        return state

    def _persist(
        self,
        operation: str,
        result: MutationResult,
        event_type: AuditEventType,
        entity_type: str,
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> MutationResult:
        """Save a successful result, audit either outcome."""
        correlation_id = correlation_id or create_correlation_id()
        if not result.success:
            self._audit_logger.log_rejection(operation, result, correlation_id)
            return result

        if not self._storage.save(result.state):
            self._audit_logger.log_save_failed(
                operation,
                "State could not be written",
                correlation_id,
            )
            return MutationResult.rejected(
                RejectionReason.STORAGE_FAILED,
                "Your data could not be saved. Please try again.",
            )

        self._audit_logger.log_mutation(
            event_type,
            entity_type,
            result,
            entity_id=entity_id,
            correlation_id=correlation_id,
        )
        return result

    # =========================================================================
    # EXPENSES AND INCOMES
    # =========================================================================

    def request_expense(
        self,
        amount: Any,
        category: Any,
        note: Optional[str] = None,
        expense_date: Any = None,
        today: Optional[date] = None,
    ) -> ExpenseCheck:
        """
        Check phase of posting an expense.

        Returns the ExpenseCheck to show the user. If it lists required
        confirmations, collect the answers and pass them to confirm_expense().
        """
        state = self.load_state()
        check = ledger.check_expense(
            state,
            amount,
            category,
            note=note,
            expense_date=expense_date,
            today=today,
        )

        if not check.accepted:
            self._audit_logger.log_rejection(
                "post_expense",
                MutationResult.from_validation(check.validation),
                check.check_id,
            )
        elif check.needs_confirmation:
            self._audit_logger.log_confirmation_requested(check, check.check_id)

        return check

    def confirm_expense(
        self,
        check: ExpenseCheck,
        answers: Optional[Mapping[ConfirmationKind, bool]] = None,
    ) -> MutationResult:
        """
        Commit phase of posting an expense.

        The policy is evaluated again against the state stored now, so a
        change made between check and commit is taken into account.
        """
        state = self.load_state()
        result = ledger.commit_expense(state, check, answers)

        if result.success and result.details.get("already_recorded"):
            return result

        if not result.success and "declined" in result.details:
            self._audit_logger.log_confirmation_declined(
                check,
                result.details["declined"],
                check.check_id,
            )
            return result

        if not result.success:
            self._audit_logger.log_rejection("post_expense", result, check.check_id)
            return result

        if not self._storage.save(result.state):
            self._audit_logger.log_save_failed(
                "post_expense",
                "State could not be written",
                check.check_id,
            )
            return MutationResult.rejected(
                RejectionReason.STORAGE_FAILED,
                "Your data could not be saved. Please try again.",
            )

        self._audit_logger.log_expense_posted(check, check.check_id)
        return result

    def record_expense(
        self,
        amount: Any,
        category: Any,
        note: Optional[str] = None,
        expense_date: Any = None,
        answers: Optional[Mapping[ConfirmationKind, bool]] = None,
        today: Optional[date] = None,
    ) -> MutationResult:
        """Check and confirm in one call, with the answers known up front."""
        check = self.request_expense(
            amount,
            category,
            note=note,
            expense_date=expense_date,
            today=today,
        )
        if not check.accepted:
            return MutationResult.from_validation(check.validation)
        return self.confirm_expense(check, answers)

    def delete_expense(self, expense_id: Any) -> MutationResult:
        correlation_id = create_correlation_id()
        result = ledger.delete_expense(self.load_state(), expense_id)
        if not result.success:
            self._audit_logger.log_rejection("delete_expense", result, correlation_id)
            return result

        if not self._storage.save(result.state):
            self._audit_logger.log_save_failed(
                "delete_expense",
                "State could not be written",
                correlation_id,
            )
            return MutationResult.rejected(
                RejectionReason.STORAGE_FAILED,
                "Your data could not be saved. Please try again.",
            )

        self._audit_logger.log_expense_deleted(
            expense_id=UUID(result.details["expense_id"]),
            month=result.details["month"],
            category=result.details["category"],
            correlation_id=correlation_id,
        )
        return result

    def add_income(
        self,
        amount: Any,
        income_date: Any = None,
        today: Optional[date] = None,
    ) -> MutationResult:
        result = ledger.add_income(self.load_state(), amount, income_date, today=today)
        return self._persist("add_income", result, AuditEventType.INCOME_ADDED, "income")

    # =========================================================================
    # BUDGETS
    # =========================================================================

    def set_budget(self, month: str, category: Any, assigned: Any) -> MutationResult:
        result = ledger.set_budget(self.load_state(), month, category, assigned)
        return self._persist(
            "set_budget",
            result,
            AuditEventType.BUDGET_SET,
            "budget",
            entity_id=str(month),
        )

    # =========================================================================
    # GOALS AND SURPLUS
    # =========================================================================

    def create_goal(
        self,
        name: Any,
        total: Any,
        deadline: Any,
        today: Optional[date] = None,
    ) -> MutationResult:
        result = ledger.create_goal(self.load_state(), name, total, deadline, today=today)
        return self._persist("create_goal", result, AuditEventType.GOAL_CREATED, "goal")

    def update_goal(
        self,
        index: Any,
        name: Any,
        total: Any,
        deadline: Any,
        today: Optional[date] = None,
    ) -> MutationResult:
        result = ledger.update_goal(
            self.load_state(), index, name, total, deadline, today=today
        )
        return self._persist(
            "update_goal",
            result,
            AuditEventType.GOAL_UPDATED,
            "goal",
            entity_id=str(index),
        )

    def contribute(self, index: Any, amount: Any) -> MutationResult:
        result = ledger.contribute(self.load_state(), index, amount)
        return self._persist(
            "contribute",
            result,
            AuditEventType.GOAL_CONTRIBUTION,
            "goal",
            entity_id=str(index),
        )

    def save_surplus_to_goal(self, index: Any) -> MutationResult:
        result = ledger.save_surplus_to_goal(self.load_state(), index)
        return self._persist(
            "save_surplus_to_goal",
            result,
            AuditEventType.SURPLUS_SAVED_TO_GOAL,
            "goal",
            entity_id=str(index),
        )

    def carry_surplus(
        self,
        from_month: Optional[str] = None,
        today: Optional[date] = None,
    ) -> MutationResult:
        result = ledger.carry_surplus_to_next_month(
            self.load_state(), from_month, today=today
        )
        return self._persist(
            "carry_surplus",
            result,
            AuditEventType.SURPLUS_CARRIED,
            "budget",
            entity_id=result.details.get("to_month"),
        )

    # =========================================================================
    # PREFERENCES AND DOCUMENT
    # =========================================================================

    def change_currency(self, currency: Any) -> MutationResult:
        result = ledger.change_currency(self.load_state(), currency)
        return self._persist(
            "change_currency",
            result,
            AuditEventType.CURRENCY_CHANGED,
            "preferences",
        )

    def reset(self) -> MutationResult:
        """Replace everything with the default state."""
        try:
            state = self._storage.reset()
        except StorageError as e:
            self._audit_logger.log_save_failed("reset", str(e))
            return MutationResult.rejected(
                RejectionReason.STORAGE_FAILED,
                "Your data could not be reset. Please try again.",
            )

        result = MutationResult.applied(state, "Data reset to the initial state")
        self._audit_logger.log_mutation(AuditEventType.STATE_RESET, "document", result)
        return result

    def export_data(
        self,
        base_name: Optional[str] = None,
        today: Optional[date] = None,
    ) -> tuple[str, bytes]:
        """
        Serialize the stored state for download.

        Returns:
            (filename, JSON bytes)
        """
        state = self.load_state()
        filename, content = export_state(state, base_name, today)
        self._audit_logger.log_mutation(
            AuditEventType.DATA_EXPORTED,
            "document",
            MutationResult.applied(state, "Data exported", filename=filename),
            entity_id=filename,
        )
        return filename, content

    def import_data(self, filename: str, content: Union[str, bytes]) -> MutationResult:
        """
        Replace the stored state with an uploaded export.

        A file that fails the schema check changes nothing.
        """
        result = import_state(filename, content)
        if not result.success:
            self._audit_logger.log_import_rejected(filename, result.message)
            return result
        return self._persist(
            "import_data",
            result,
            AuditEventType.DATA_IMPORTED,
            "document",
            entity_id=filename,
        )

    # =========================================================================
    # REPORTS
    # =========================================================================

    def dashboard(self) -> DashboardSummary:
        return dashboard_summary(self.load_state())

    def month_report(self, month: str) -> MonthReport:
        return month_report(self.load_state(), month)


def create_tracker(
    data_path: Optional[Union[str, Path]] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
) -> FinanceTracker:
    """
    Factory function to create a tracker backed by the JSON file store.

    Args:
        data_path: Location of the document; defaults to the configured path
        audit_storage: Where audit events are kept besides the local log
    """
    return FinanceTracker(
        storage=JsonFileFinanceStorage(data_path),
        audit_logger=AuditLogger(audit_storage),
    )
