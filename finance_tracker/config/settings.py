"""
Configuration Management for Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Budget and filter selection are NOT configuration - they are process-local
UI state owned by the TransactionStore. Only their starting values live here.
"""

from decimal import Decimal
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerApiSettings(BaseSettings):
    """Remote ledger service (REST API) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:5000",
        description="Base URL of the transactions API"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Per-request timeout in seconds"
    )
    list_retry_attempts: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Attempts for the full ledger load; 1 means no retry (reads only, never mutations)"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize so paths can be appended with a leading slash."""
        return v.rstrip("/")


class DashboardSettings(BaseSettings):
    """Dashboard defaults and derived-view parameters."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_budget: Decimal = Field(
        default=Decimal("20000"),
        ge=0,
        description="Monthly budget the store starts with"
    )
    timezone: str = Field(
        default="UTC",
        description="Zone used to derive calendar days and months from timestamps"
    )
    trend_days: int = Field(
        default=14,
        ge=1,
        le=366,
        description="Number of daily buckets in the spending trend"
    )
    currency_label: str = Field(
        default="KSh",
        max_length=8,
        description="Currency prefix used by the front end"
    )
    backend: str = Field(
        default="http",
        pattern="^(http|memory)$",
        description="Which ledger client to build: the REST API or an in-process store"
    )

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Fail at startup rather than on the first date calculation."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @property
    def tzinfo(self) -> ZoneInfo:
        """The configured zone as a tzinfo object."""
        return ZoneInfo(self.timezone)


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
    def ledger_api(self) -> LedgerApiSettings:
        return LedgerApiSettings()

    @property
    def dashboard(self) -> DashboardSettings:
        return DashboardSettings()


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

    Returns a dict of {setting_name: is_valid}, with an
    additional "<name>_error" entry for each failure.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.ledger_api
        results["ledger_api"] = True
    except Exception as e:
        results["ledger_api"] = False
        results["ledger_api_error"] = str(e)

    try:
        _ = settings.dashboard
        results["dashboard"] = True
    except Exception as e:
        results["dashboard"] = False
        results["dashboard_error"] = str(e)

    return results
