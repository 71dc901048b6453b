"""Services package."""

from src.services.storage import (
    AuditStorageInterface,
    FinanceStorageInterface,
    InMemoryAuditStorage,
    InMemoryFinanceStorage,
    JsonFileFinanceStorage,
    SchemaInvalidError,
    StorageError,
    StorageWriteError,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "FinanceStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryFinanceStorage",
    "JsonFileFinanceStorage",
    "SchemaInvalidError",
    "StorageError",
    "StorageWriteError",
]
