"""Configuration package."""

from accrual_ledger.config.settings import (
    AppSettings,
    ReportingSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ReportingSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
