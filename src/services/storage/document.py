"""
Finance Document Codec

Converts between FinanceState and its JSON document, and implements the
export/import file contract.

The schema check mirrors what a stored document must look like:
- all of ingresos, gastos, presupuestos, metas, moneda, atajos present
- ingresos, gastos and metas are lists
- presupuestos is a map
- moneda is a supported currency
- every atajos key is a known category mapping to a list
After the structural check the document must also parse into
FinanceState (amounts, dates, month keys, categories).
"""

import json
from datetime import date
from typing import Any, Optional, Union

import structlog
from pydantic import ValidationError

from src.config import get_settings
from src.models.finance import Category, Currency, FinanceState
from src.models.results import MutationResult, RejectionReason, ValidationOutcome
from src.services.storage.interface import SchemaInvalidError


logger = structlog.get_logger(__name__)

REQUIRED_KEYS = ("ingresos", "gastos", "presupuestos", "metas", "moneda", "atajos")
LIST_KEYS = ("ingresos", "gastos", "metas")


def _schema_error(message: str, field: Optional[str] = None) -> ValidationOutcome:
    return ValidationOutcome.fail(RejectionReason.SCHEMA_INVALID, message, field)


def check_document_schema(document: Any) -> ValidationOutcome:
    """Structural check of a parsed document."""
    if not isinstance(document, dict):
        return _schema_error("Document must be a JSON object")

    for key in REQUIRED_KEYS:
        if key not in document:
            return _schema_error(f"Missing key: {key}", key)

    for key in LIST_KEYS:
        if not isinstance(document[key], list):
            return _schema_error(f"{key} must be a list", key)

    if not isinstance(document["presupuestos"], dict):
        return _schema_error("presupuestos must be a map", "presupuestos")

    currencies = {c.value for c in Currency}
    if document["moneda"] not in currencies:
        return _schema_error(f"Unsupported currency: {document['moneda']}", "moneda")

    shortcuts = document["atajos"]
    if not isinstance(shortcuts, dict):
        return _schema_error("atajos must be a map", "atajos")
    categories = {c.value for c in Category}
    for key, amounts in shortcuts.items():
        if key not in categories or not isinstance(amounts, list):
            return _schema_error(f"Invalid shortcut entry: {key}", "atajos")

    return ValidationOutcome.ok()


def parse_document(document: Any) -> FinanceState:
    """
    Build a FinanceState from a parsed document.

    Raises:
        SchemaInvalidError: If the document fails the schema check or
                            does not parse into the model
    """
    check = check_document_schema(document)
    if not check.valid:
        raise SchemaInvalidError(check.error)
    try:
        return FinanceState.model_validate(document)
    except ValidationError as e:
        raise SchemaInvalidError(f"Invalid finance data: {e.error_count()} error(s)") from e


def parse_json(text: Union[str, bytes]) -> FinanceState:
    """Parse JSON text into a FinanceState; raises SchemaInvalidError."""
    try:
        document = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SchemaInvalidError("File is not valid JSON") from e
    return parse_document(document)


def dump_json(state: FinanceState) -> str:
    """Pretty-printed JSON document of the state."""
    return json.dumps(state.to_document(), indent=2, ensure_ascii=False)


# =============================================================================
# EXPORT / IMPORT
# =============================================================================

def export_filename(base_name: Optional[str] = None, today: Optional[date] = None) -> str:
    """<base-name>_<YYYY-MM-DD>.json"""
    base_name = base_name or get_settings().storage.export_file_name
    return f"{base_name}_{(today or date.today()).isoformat()}.json"


def export_state(
    state: FinanceState,
    base_name: Optional[str] = None,
    today: Optional[date] = None,
) -> tuple[str, bytes]:
    """
    Serialize the state for download.

    Returns:
        (filename, UTF-8 encoded JSON bytes)
    """
    return export_filename(base_name, today), dump_json(state).encode("utf-8")


def import_state(filename: str, content: Union[str, bytes]) -> MutationResult:
    """
    Parse an uploaded export file.

    The whole file is accepted or the whole file is rejected; on success
    the result carries the replacement state (persisting it is the
    caller's job).
    """
    if not filename or not filename.lower().endswith(".json"):
        return MutationResult.rejected(
            RejectionReason.SCHEMA_INVALID,
            "Please select a JSON file",
            "file",
        )
    try:
        state = parse_json(content)
    except SchemaInvalidError as e:
        logger.warning("import_rejected", filename=filename, error=str(e))
        return MutationResult.rejected(
            RejectionReason.SCHEMA_INVALID,
            str(e),
            "file",
        )

    logger.info("import_parsed", filename=filename, expenses=len(state.expenses))
    return MutationResult.applied(state, "Data imported", filename=filename)
