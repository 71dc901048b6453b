"""Tests for configuration loading."""

import pytest

from src.config import (
    FinanceSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)


class TestDefaults:
    """Tests for the built-in defaults."""

    def test_policy_defaults(self):
        """Test thresholds and limits."""
        settings = get_settings().app
        assert settings.expense_percentage_warning == 70.0
        assert settings.goal_percentage_warning == 80.0
        assert settings.max_goals == 10
        assert settings.max_recent_expenses == 5
        assert settings.default_currency == "USD"

    def test_storage_defaults(self):
        """Test document locations."""
        settings = get_settings().storage
        assert settings.data_path == "finance_data.json"
        assert settings.export_file_name == "finance-app-data"
        assert settings.write_attempts == 3


class TestEnvironment:
    """Tests for environment overrides."""

    def test_env_override(self, monkeypatch):
        """Test FINANCE_* variables are read."""
        monkeypatch.setenv("FINANCE_EXPENSE_PERCENTAGE_WARNING", "50")
        monkeypatch.setenv("FINANCE_DEFAULT_CURRENCY", "cop")
        settings = FinanceSettings()
        assert settings.expense_percentage_warning == 50.0
        assert settings.default_currency == "COP"

    def test_storage_env_override(self, monkeypatch):
        """Test FINANCE_STORAGE_* variables are read."""
        monkeypatch.setenv("FINANCE_STORAGE_WRITE_ATTEMPTS", "5")
        assert StorageSettings().write_attempts == 5

    def test_unsupported_currency(self, monkeypatch):
        """Test an unknown default currency is rejected."""
        monkeypatch.setenv("FINANCE_DEFAULT_CURRENCY", "GBP")
        with pytest.raises(ValueError, match="Unsupported currency"):
            FinanceSettings()

    def test_validate_all_settings(self, monkeypatch):
        """Test the startup check reports broken sections."""
        assert validate_all_settings() == {"app": True, "storage": True}

        monkeypatch.setenv("FINANCE_MAX_GOALS", "0")
        results = validate_all_settings()
        assert results["app"] is False
        assert "app_error" in results
        assert results["storage"] is True
