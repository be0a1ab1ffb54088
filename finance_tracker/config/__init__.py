"""Configuration package."""

from finance_tracker.config.settings import (
    DashboardSettings,
    LedgerApiSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "DashboardSettings",
    "LedgerApiSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
