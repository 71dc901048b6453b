"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
The finance state is one JSON document; the file store is the default
backend, with in-memory stores for tests.
"""

from src.services.storage.interface import (
    AuditStorageInterface,
    FinanceStorageInterface,
    SchemaInvalidError,
    StorageError,
    StorageWriteError,
)
from src.services.storage.document import (
    check_document_schema,
    dump_json,
    export_filename,
    export_state,
    import_state,
    parse_document,
    parse_json,
)
from src.services.storage.json_file import JsonFileFinanceStorage
from src.services.storage.memory import InMemoryAuditStorage, InMemoryFinanceStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "FinanceStorageInterface",
    # Exceptions
    "SchemaInvalidError",
    "StorageError",
    "StorageWriteError",
    # Document codec
    "check_document_schema",
    "dump_json",
    "export_filename",
    "export_state",
    "import_state",
    "parse_document",
    "parse_json",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryFinanceStorage",
    "JsonFileFinanceStorage",
]
