"""Tests for the document codec and the storage backends."""

import json

import pytest
from datetime import date

from src.models.audit import AuditEvent, AuditEventType
from src.models.finance import Currency, FinanceState
from src.models.results import RejectionReason
from src.services.storage import (
    InMemoryAuditStorage,
    InMemoryFinanceStorage,
    JsonFileFinanceStorage,
    SchemaInvalidError,
    StorageWriteError,
    check_document_schema,
    dump_json,
    export_filename,
    export_state,
    import_state,
    parse_document,
    parse_json,
)


def valid_document() -> dict:
    return FinanceState.default().to_document()


class TestSchemaCheck:
    """Tests for the structural document check."""

    def test_default_document_is_valid(self):
        """Test a freshly serialized state passes."""
        assert check_document_schema(valid_document()).valid is True

    @pytest.mark.parametrize("key", ["ingresos", "gastos", "presupuestos", "metas", "moneda", "atajos"])
    def test_missing_key(self, key):
        """Test every top-level key is required."""
        document = valid_document()
        del document[key]

        outcome = check_document_schema(document)
        assert outcome.valid is False
        assert outcome.reason == RejectionReason.SCHEMA_INVALID
        assert outcome.field == key

    def test_lists_must_be_lists(self):
        """Test ingresos, gastos and metas shapes."""
        document = valid_document()
        document["gastos"] = {}
        assert check_document_schema(document).field == "gastos"

    def test_budgets_must_be_a_map(self):
        """Test presupuestos shape."""
        document = valid_document()
        document["presupuestos"] = []
        assert check_document_schema(document).field == "presupuestos"

    def test_unsupported_currency(self):
        """Test moneda must be supported."""
        document = valid_document()
        document["moneda"] = "GBP"
        assert check_document_schema(document).field == "moneda"

    def test_unknown_shortcut_category(self):
        """Test atajos keys must be categories with list values."""
        document = valid_document()
        document["atajos"]["vivienda"] = [10]
        assert check_document_schema(document).field == "atajos"

        document = valid_document()
        document["atajos"]["transporte"] = 10
        assert check_document_schema(document).field == "atajos"

    def test_not_an_object(self):
        """Test a JSON array is rejected."""
        assert check_document_schema([]).valid is False


class TestParsing:
    """Tests for turning documents into state."""

    def test_parse_document(self):
        """Test a valid document parses."""
        document = valid_document()
        document["moneda"] = "CLP"
        assert parse_document(document).currency == Currency.CLP

    def test_parse_rejects_bad_values(self):
        """Test values the schema check cannot see still fail."""
        document = valid_document()
        document["gastos"] = [{"monto": -1, "categoria": "otros", "fecha": "2025-06-01"}]
        with pytest.raises(SchemaInvalidError):
            parse_document(document)

    def test_parse_json_rejects_garbage(self):
        """Test non-JSON text."""
        with pytest.raises(SchemaInvalidError, match="not valid JSON"):
            parse_json("{not json")

    def test_dump_json_is_indented(self):
        """Test the document is pretty-printed with two spaces."""
        text = dump_json(FinanceState.default())
        assert '\n  "moneda": "USD"' in text
        assert json.loads(text) == valid_document()


class TestExportImport:
    """Tests for the export file contract."""

    def test_export_filename(self):
        """Test <base>_<YYYY-MM-DD>.json."""
        assert export_filename("finance-app-data", date(2025, 6, 20)) == "finance-app-data_2025-06-20.json"

    def test_export_filename_default_base(self):
        """Test the configured base name."""
        assert export_filename(today=date(2025, 6, 20)) == "finance-app-data_2025-06-20.json"

    def test_export_then_import(self, transport_state):
        """Test an exported file imports to the same document."""
        filename, content = export_state(transport_state, today=date(2025, 6, 20))
        result = import_state(filename, content)

        assert result.success is True
        assert result.state.to_document() == transport_state.to_document()

    def test_import_requires_json_name(self):
        """Test the file extension is checked first."""
        result = import_state("backup.txt", dump_json(FinanceState.default()))
        assert result.reason == RejectionReason.SCHEMA_INVALID
        assert result.message == "Please select a JSON file"

    def test_import_missing_metas(self):
        """Test a document without goals is rejected wholesale."""
        document = valid_document()
        del document["metas"]

        result = import_state("backup.json", json.dumps(document))
        assert result.success is False
        assert result.reason == RejectionReason.SCHEMA_INVALID
        assert result.state is None

    def test_import_negative_surplus(self):
        """Test a negative previous surplus is rejected wholesale."""
        document = valid_document()
        document["excedenteAnterior"] = -50

        result = import_state("backup.json", json.dumps(document))
        assert result.success is False
        assert result.reason == RejectionReason.SCHEMA_INVALID
        assert result.field == "file"

    def test_import_accepts_bytes(self):
        """Test uploaded bytes are decoded."""
        result = import_state("backup.JSON", dump_json(FinanceState.default()).encode("utf-8"))
        assert result.success is True


class TestJsonFileStorage:
    """Tests for the file-backed store."""

    def test_load_missing_file(self, tmp_path):
        """Test no file means no state."""
        storage = JsonFileFinanceStorage(tmp_path / "data.json")
        assert storage.load() is None

    def test_save_and_load(self, tmp_path, transport_state):
        """Test a saved state loads back equal."""
        storage = JsonFileFinanceStorage(tmp_path / "data.json")

        assert storage.save(transport_state) is True
        loaded = storage.load()
        assert loaded.to_document() == transport_state.to_document()

    def test_save_leaves_no_temp_files(self, tmp_path, transport_state):
        """Test the atomic write cleans up after itself."""
        storage = JsonFileFinanceStorage(tmp_path / "data.json")
        storage.save(transport_state)
        storage.save(transport_state)
        assert [p.name for p in tmp_path.iterdir()] == ["data.json"]

    def test_save_creates_directories(self, tmp_path):
        """Test a missing parent directory is created."""
        storage = JsonFileFinanceStorage(tmp_path / "nested" / "data.json")
        assert storage.save(FinanceState.default()) is True
        assert (tmp_path / "nested" / "data.json").exists()

    def test_corrupt_file_loads_as_absent(self, tmp_path):
        """Test unparseable content is treated as no state."""
        path = tmp_path / "data.json"
        path.write_text("{oops", encoding="utf-8")
        assert JsonFileFinanceStorage(path).load() is None

    def test_schema_invalid_file_loads_as_absent(self, tmp_path):
        """Test a document missing keys is treated as no state."""
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"moneda": "USD"}), encoding="utf-8")
        assert JsonFileFinanceStorage(path).load() is None

    def test_failed_write_returns_false(self, tmp_path):
        """Test a write onto a directory fails without raising."""
        target = tmp_path / "taken"
        target.mkdir()
        storage = JsonFileFinanceStorage(target, write_attempts=1)

        assert storage.save(FinanceState.default()) is False
        assert [p.name for p in tmp_path.iterdir()] == ["taken"]

    def test_reset_writes_default(self, tmp_path, transport_state):
        """Test reset replaces the stored state."""
        storage = JsonFileFinanceStorage(tmp_path / "data.json")
        storage.save(transport_state)

        state = storage.reset()
        assert state.expenses == []
        assert storage.load().to_document() == FinanceState.default().to_document()

    def test_path_from_settings(self, monkeypatch, tmp_path):
        """Test the configured data path is used by default."""
        from src.config import get_settings

        monkeypatch.setenv("FINANCE_STORAGE_DATA_PATH", str(tmp_path / "configured.json"))
        get_settings.cache_clear()
        assert JsonFileFinanceStorage().path == tmp_path / "configured.json"


class TestInMemoryStorage:
    """Tests for the in-memory stores."""

    def test_loads_are_independent(self, transport_state):
        """Test each load hands out a fresh state."""
        storage = InMemoryFinanceStorage()
        storage.save(transport_state)

        first = storage.load()
        first.expenses.clear()
        assert len(storage.load().expenses) == 1

    def test_failed_writes(self):
        """Test fail_writes simulates an unavailable store."""
        storage = InMemoryFinanceStorage()
        storage.fail_writes = True

        assert storage.save(FinanceState.default()) is False
        assert storage.document is None
        with pytest.raises(StorageWriteError):
            storage.reset()

    def test_reset_uses_default_currency(self):
        """Test reset starts over in the configured currency."""
        storage = InMemoryFinanceStorage(default_currency=Currency.EUR)
        assert storage.reset().currency == Currency.EUR

    def test_audit_storage_filters_by_correlation(self):
        """Test audit events are appended and filtered."""
        from uuid import uuid4

        storage = InMemoryAuditStorage()
        correlation_id = uuid4()
        storage.append_event(AuditEvent(event_type=AuditEventType.BUDGET_SET, description="a"))
        storage.append_event(AuditEvent(
            event_type=AuditEventType.EXPENSE_POSTED,
            description="b",
            correlation_id=correlation_id,
        ))

        assert len(storage.get_events()) == 2
        events = storage.get_events(correlation_id=str(correlation_id))
        assert [e.event_type for e in events] == [AuditEventType.EXPENSE_POSTED]
