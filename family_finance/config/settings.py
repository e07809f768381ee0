"""
Configuration Management for Family Finance

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every external store and every currency default the core relies on
is declared in one place and validated at startup.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Fixed rate table: 1 unit of the keyed currency = X units of MXN
DEFAULT_RATES: dict[str, Decimal] = {
    "MXN": Decimal("1.00"),
    "USD": Decimal("17.00"),
    "EUR": Decimal("18.50"),
    "PEN": Decimal("4.50"),
    "COP": Decimal("0.0042"),
    "CLP": Decimal("0.019"),
}


class CurrencySettings(BaseSettings):
    """Currency defaults and the fixed conversion table."""

    model_config = SettingsConfigDict(
        env_prefix="CURRENCY_",
        extra="ignore"
    )

    native_currency: str = Field(
        default="MXN",
        description="Reporting currency every amount is converted into"
    )
    default_record_currency: str = Field(
        default="USD",
        description="Currency assumed for records that do not state one"
    )
    rates: dict[str, Decimal] = Field(
        default_factory=lambda: dict(DEFAULT_RATES),
        description="Rate to native currency keyed by currency code (JSON in env)"
    )

    @field_validator('native_currency', 'default_record_currency')
    @classmethod
    def normalize_code(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError(f"Currency must be a 3-letter code, got: {v!r}")
        return v

    @field_validator('rates')
    @classmethod
    def validate_rates(cls, v: dict[str, Decimal]) -> dict[str, Decimal]:
        normalized = {code.strip().upper(): rate for code, rate in v.items()}
        for code, rate in normalized.items():
            if rate <= 0:
                raise ValueError(f"Rate for {code} must be positive")
        return normalized


class DatabaseSettings(BaseSettings):
    """Shared connection-pool knobs for the PostgreSQL stores."""

    model_config = SettingsConfigDict(extra="ignore")

    host: str = "localhost"
    port: int = Field(default=5432, ge=1, le=65535)
    name: str = "postgres"
    user: str = "postgres"
    password: str = ""

    pool_min_size: int = Field(
        default=1,
        ge=0,
        description="Connections opened eagerly when the pool is created"
    )
    pool_max_size: int = Field(
        default=10,
        ge=1,
        description="Upper bound on concurrently checked-out connections"
    )
    command_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Seconds before a single statement is abandoned by the driver"
    )

    @property
    def dsn(self) -> str:
        """Connection string understood by asyncpg."""
        auth = self.user if not self.password else f"{self.user}:{self.password}"
        return f"postgresql://{auth}@{self.host}:{self.port}/{self.name}"


class TasksDatabaseSettings(DatabaseSettings):
    """Tasks (chores) database, read-only from this service."""

    model_config = SettingsConfigDict(
        env_prefix="TASKS_DB_",
        extra="ignore"
    )

    host: str = "postgres-tasks"
    name: str = "tasks_db"


class FinanceDatabaseSettings(DatabaseSettings):
    """Finance database holding expenses and income."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_DB_",
        extra="ignore"
    )

    host: str = "postgres-finance"
    name: str = "finance_db"


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Task report window used when the caller gives no range
    default_task_window_days: int = Field(
        default=30,
        ge=1,
        description="Days covered by a member task report without explicit bounds"
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

    # Note: sub-settings are loaded lazily to allow partial configuration

    @property
    def currency(self) -> CurrencySettings:
        return CurrencySettings()

    @property
    def tasks_db(self) -> TasksDatabaseSettings:
        return TasksDatabaseSettings()

    @property
    def finance_db(self) -> FinanceDatabaseSettings:
        return FinanceDatabaseSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("currency", "tasks_db", "finance_db", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
