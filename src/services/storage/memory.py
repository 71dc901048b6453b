"""
In-Memory Storage

Process-local implementations of the storage interfaces, used by tests
and by callers that do not need persistence.

The finance store keeps the serialized JSON document rather than the
model object, so every load() hands out a fresh, independent state.
"""

from typing import Optional

import structlog

from src.models.audit import AuditEvent
from src.models.finance import Currency, FinanceState
from src.services.storage.document import dump_json, parse_json
from src.services.storage.interface import (
    AuditStorageInterface,
    FinanceStorageInterface,
    SchemaInvalidError,
    StorageWriteError,
)


logger = structlog.get_logger(__name__)


class InMemoryFinanceStorage(FinanceStorageInterface):
    """
    Holds one JSON document in memory.

    Set fail_writes to simulate an unavailable store.
    """

    def __init__(
        self,
        document: Optional[str] = None,
        default_currency: Currency = Currency.USD,
    ):
        self._document = document
        self._default_currency = default_currency
        self.fail_writes = False
        self.save_count = 0

    @property
    def document(self) -> Optional[str]:
        return self._document

    def load(self) -> Optional[FinanceState]:
        if self._document is None:
            return None
        try:
            return parse_json(self._document)
        except SchemaInvalidError as e:
            logger.warning("stored_state_invalid", error=str(e))
            return None

    def save(self, state: FinanceState) -> bool:
        if self.fail_writes:
            logger.error("state_write_failed", error="writes disabled")
            return False
        self._document = dump_json(state)
        self.save_count += 1
        return True

    def reset(self) -> FinanceState:
        state = FinanceState.default(self._default_currency)
        if not self.save(state):
            raise StorageWriteError("Could not write default state")
        return state


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events(
        self,
        correlation_id: Optional[str] = None,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = self._events
        if correlation_id:
            events = [e for e in events if str(e.correlation_id) == str(correlation_id)]
        return events[-limit:]
