"""Configuration package."""

from family_finance.config.settings import (
    DEFAULT_RATES,
    AppSettings,
    CurrencySettings,
    DatabaseSettings,
    FinanceDatabaseSettings,
    Settings,
    TasksDatabaseSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "DEFAULT_RATES",
    "AppSettings",
    "CurrencySettings",
    "DatabaseSettings",
    "FinanceDatabaseSettings",
    "Settings",
    "TasksDatabaseSettings",
    "get_settings",
    "validate_all_settings",
]
