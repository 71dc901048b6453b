"""
Abstract Storage Interface

DESIGN DECISION: The ledger never talks to a storage technology directly.
It only needs three operations on one opaque document:
1. load the current state (or learn there is none)
2. save a new state
3. reset to the default state

This keeps the file store swappable (in-memory for tests, a database
later) without touching business logic.

IMPORTANT: load() reads the stored document every time. There is no
process-wide cached copy of the state.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.models.audit import AuditEvent
from src.models.finance import FinanceState


class FinanceStorageInterface(ABC):
    """
    Abstract interface for finance state storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load(self) -> Optional[FinanceState]:
        """
        Load the stored state.

        Returns:
            The stored state, or None if nothing is stored or the stored
            document fails the schema check
        """
        pass

    @abstractmethod
    def save(self, state: FinanceState) -> bool:
        """
        Replace the stored state.

        Args:
            state: The aggregate to persist

        Returns:
            True if saved successfully, False otherwise
        """
        pass

    @abstractmethod
    def reset(self) -> FinanceState:
        """
        Write the default state back and return it.

        Raises:
            StorageWriteError: If the default state could not be written
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit events are append-only. Never update or delete.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event.

        Returns:
            True if successful
        """
        pass

    @abstractmethod
    def get_events(
        self,
        correlation_id: Optional[str] = None,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get audit events, optionally filtered by correlation ID.

        Returns:
            List of events, oldest first
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class SchemaInvalidError(StorageError):
    """A document does not have the finance state shape."""
    pass


class StorageWriteError(StorageError):
    """The document could not be written."""
    pass
