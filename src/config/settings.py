"""
Configuration Management for the Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All tunable policy thresholds live here, not in the ledger.
The ledger functions accept explicit overrides and fall back to these
values, so tests can pin thresholds without touching the environment.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FinanceSettings(BaseSettings):
    """
    Budget policy and display settings.

    Loads configuration from FINANCE_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Confirmation policy
    expense_percentage_warning: float = Field(
        default=70.0,
        ge=0.0,
        le=100.0,
        description="Share of total income above which an expense needs confirmation"
    )
    goal_percentage_warning: float = Field(
        default=80.0,
        ge=0.0,
        le=100.0,
        description="Goal progress percentage flagged as near completion"
    )

    # Limits
    max_goals: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum number of savings goals"
    )
    max_recent_expenses: int = Field(
        default=5,
        ge=1,
        le=50,
        description="How many expenses the recent list shows"
    )

    default_currency: str = Field(
        default="USD",
        description="Currency of a freshly created state"
    )

    @field_validator('default_currency')
    @classmethod
    def validate_default_currency(cls, v: str) -> str:
        """Only allow supported currency codes."""
        allowed = {"USD", "EUR", "COP", "ARS", "CLP"}
        code = v.strip().upper()
        if code not in allowed:
            raise ValueError(f"Unsupported currency: {v}. Allowed: {sorted(allowed)}")
        return code


class StorageSettings(BaseSettings):
    """Document storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_path: str = Field(
        default="finance_data.json",
        description="Path of the JSON document holding the finance state"
    )
    export_file_name: str = Field(
        default="finance-app-data",
        min_length=1,
        description="Base name for exported files"
    )
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed document write is attempted"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def app(self) -> FinanceSettings:
        return FinanceSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus "<name>_error" entries
    for the sections that failed. Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.app
        results["app"] = True
    except ValueError as e:
        results["app"] = False
        results["app_error"] = str(e)

    try:
        _ = settings.storage
        results["storage"] = True
    except ValueError as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    return results
