"""Configuration package."""

from src.config.settings import (
    FinanceSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "FinanceSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
