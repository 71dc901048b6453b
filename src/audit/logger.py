"""
Audit Logger

DESIGN DECISION: Every state change and every rejection is logged.
This provides:
1. Complete traceability of how the ledger reached its current state
2. Debugging capability when a number looks wrong

The audit logger:
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to tie an expense check to its commit
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from src.models.results import ExpenseCheck, MutationResult
from src.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit store, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger()

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_confirmation_requested(
        self,
        check: ExpenseCheck,
        correlation_id: UUID,
    ) -> None:
        """Log that an expense is waiting on the user's confirmation."""
        event = AuditEventBuilder.confirmation_requested(
            check_id=check.check_id,
            kinds=[kind.value for kind in check.confirmation_kinds],
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_confirmation_declined(
        self,
        check: ExpenseCheck,
        declined: list[str],
        correlation_id: UUID,
    ) -> None:
        """Log a declined confirmation."""
        event = AuditEventBuilder.confirmation_declined(
            check_id=check.check_id,
            kinds=declined,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_expense_posted(
        self,
        check: ExpenseCheck,
        correlation_id: UUID,
    ) -> None:
        """Log an expense written to the ledger."""
        expense = check.expense
        event = AuditEventBuilder.expense_posted(
            expense_id=expense.id,
            month=check.month,
            category=expense.category.value,
            amount=str(expense.amount),
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_expense_deleted(
        self,
        expense_id: UUID,
        month: str,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an expense removed from the ledger."""
        event = AuditEventBuilder.expense_deleted(
            expense_id=expense_id,
            month=month,
            category=category,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_mutation(
        self,
        event_type: AuditEventType,
        entity_type: str,
        result: MutationResult,
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful state change described by its result."""
        event = AuditEventBuilder.mutation_applied(
            event_type=event_type,
            description=result.message or event_type.value,
            entity_type=entity_type,
            entity_id=entity_id,
            details={key: str(value) for key, value in result.details.items()},
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_rejection(
        self,
        operation: str,
        result: MutationResult,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an operation the ledger refused."""
        event = AuditEventBuilder.operation_rejected(
            operation=operation,
            reason=result.reason.value if result.reason else "unknown",
            message=result.message,
            field=result.field,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_save_failed(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a state that could not be persisted."""
        event = AuditEventBuilder.save_failed(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_import_rejected(
        self,
        filename: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an import file that failed the schema check."""
        event = AuditEventBuilder.import_rejected(
            filename=filename,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., an expense check).
    Pass it through all subsequent operations.
    """
    return uuid4()
