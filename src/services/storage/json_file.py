"""
JSON File Storage

Keeps the whole finance state in one pretty-printed JSON document on disk.

CRITICAL: Writes are atomic. The document is written to a temporary file
in the same directory and moved over the target with os.replace, so a
crash mid-write leaves the previous document intact.

Transient OS errors during a write are retried with tenacity; a write that
still fails is reported as save() -> False, never raised to the ledger.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.config import get_settings
from src.models.finance import Currency, FinanceState
from src.services.storage.document import dump_json, parse_json
from src.services.storage.interface import (
    FinanceStorageInterface,
    SchemaInvalidError,
    StorageWriteError,
)


logger = structlog.get_logger(__name__)


class JsonFileFinanceStorage(FinanceStorageInterface):
    """
    File-backed implementation of FinanceStorageInterface.

    Every load() reads the file again; nothing is cached between calls.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        write_attempts: Optional[int] = None,
    ):
        settings = get_settings()
        self._path = Path(path or settings.storage.data_path)
        self._write_attempts = write_attempts or settings.storage.write_attempts
        self._default_currency = Currency(settings.app.default_currency)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[FinanceState]:
        if not self._path.exists():
            logger.info("no_stored_state", path=str(self._path))
            return None

        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error("state_read_failed", path=str(self._path), error=str(e))
            return None

        try:
            return parse_json(text)
        except SchemaInvalidError as e:
            logger.warning("stored_state_invalid", path=str(self._path), error=str(e))
            return None

    def save(self, state: FinanceState) -> bool:
        try:
            self._write(dump_json(state))
        except StorageWriteError as e:
            logger.error("state_write_failed", path=str(self._path), error=str(e))
            return False

        logger.debug("state_saved", path=str(self._path))
        return True

    def reset(self) -> FinanceState:
        state = FinanceState.default(self._default_currency)
        if not self.save(state):
            raise StorageWriteError(f"Could not write default state to {self._path}")
        logger.info("state_reset", path=str(self._path))
        return state

    def _write(self, content: str) -> None:
        """Write content atomically, retrying transient OS errors."""
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._write_attempts),
                wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
                retry=retry_if_exception_type(OSError),
                reraise=True,
            ):
                with attempt:
                    self._write_once(content)
        except OSError as e:
            raise StorageWriteError(str(e)) from e

    def _write_once(self, content: str) -> None:
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)

        temp_name: Optional[str] = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                prefix=self._path.name + "-",
                suffix=".tmp",
                dir=directory,
                delete=False,
            ) as tf:
                temp_name = tf.name
                tf.write(content)
                tf.flush()
                os.fsync(tf.fileno())
            os.replace(temp_name, self._path)
            temp_name = None
        finally:
            # Only left over when the write or the rename failed
            if temp_name and os.path.exists(temp_name):
                os.unlink(temp_name)
