"""
Audit Models for the Finance Tracker

Every mutation of the finance state, applied or rejected, produces one
audit event. Events go to the structured log and, when configured, to an
append-only audit store. They are not a transaction history and are never
replayed.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every ledger operation has its own event type.
    """
    # Expenses and incomes
    CONFIRMATION_REQUESTED = "confirmation_requested"
    CONFIRMATION_DECLINED = "confirmation_declined"
    EXPENSE_POSTED = "expense_posted"
    EXPENSE_DELETED = "expense_deleted"
    INCOME_ADDED = "income_added"

    # Budgets
    BUDGET_SET = "budget_set"

    # Goals
    GOAL_CREATED = "goal_created"
    GOAL_UPDATED = "goal_updated"
    GOAL_CONTRIBUTION = "goal_contribution"

    # Surplus
    SURPLUS_SAVED_TO_GOAL = "surplus_saved_to_goal"
    SURPLUS_CARRIED = "surplus_carried"

    # Settings
    CURRENCY_CHANGED = "currency_changed"

    # Rejections
    OPERATION_REJECTED = "operation_rejected"

    # Persistence
    SAVE_FAILED = "save_failed"
    STATE_RESET = "state_reset"
    DATA_EXPORTED = "data_exported"
    DATA_IMPORTED = "data_imported"
    IMPORT_REJECTED = "import_rejected"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'goal', 'budget')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Identifier of the entity (expense id, goal index, month)"
    )

    # Correlation - ties the check and commit of one expense together
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_posted(expense_id, "2025-06", ...)
        event = AuditEventBuilder.operation_rejected("contribute", reason, ...)
    """

    @staticmethod
    def confirmation_requested(
        check_id: UUID,
        kinds: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONFIRMATION_REQUESTED,
            entity_type="expense_check",
            entity_id=str(check_id),
            correlation_id=correlation_id,
            description=f"Expense needs {len(kinds)} confirmation(s)",
            details={"confirmations": kinds},
        )

    @staticmethod
    def confirmation_declined(
        check_id: UUID,
        kinds: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONFIRMATION_DECLINED,
            entity_type="expense_check",
            entity_id=str(check_id),
            correlation_id=correlation_id,
            description="User declined to confirm the expense",
            details={"declined": kinds},
            is_user_action=True,
        )

    @staticmethod
    def expense_posted(
        expense_id: UUID,
        month: str,
        category: str,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_POSTED,
            entity_type="expense",
            entity_id=str(expense_id),
            correlation_id=correlation_id,
            description=f"Expense posted: {category} {amount} in {month}",
            details={
                "month": month,
                "category": category,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(
        expense_id: UUID,
        month: str,
        category: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=str(expense_id),
            correlation_id=correlation_id,
            description=f"Expense deleted from {category} in {month}",
            details={"month": month, "category": category},
            is_user_action=True,
        )

    @staticmethod
    def mutation_applied(
        event_type: AuditEventType,
        description: str,
        entity_type: str,
        entity_id: Optional[str] = None,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=description,
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def operation_rejected(
        operation: str,
        reason: str,
        message: str,
        field: Optional[str] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="operation",
            entity_id=operation,
            correlation_id=correlation_id,
            description=f"{operation} rejected: {reason}",
            details={"field": field},
            error_code=reason,
            error_message=message,
        )

    @staticmethod
    def save_failed(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="operation",
            entity_id=operation,
            correlation_id=correlation_id,
            description=f"State could not be saved after {operation}",
            error_message=error_message,
        )

    @staticmethod
    def import_rejected(
        filename: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="document",
            entity_id=filename,
            correlation_id=correlation_id,
            description=f"Import rejected: {filename}",
            error_code="schema_invalid",
            error_message=error_message,
            is_user_action=True,
        )
