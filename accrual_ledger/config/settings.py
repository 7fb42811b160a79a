"""
Configuration Management for Accrual Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The engine itself takes plain arguments; these settings only supply
defaults to the validator, the aggregator and the reporting layer.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ReportingSettings(BaseSettings):
    """Reporting and aggregation configuration."""

    model_config = SettingsConfigDict(
        env_prefix="REPORTING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    currency_symbol: str = Field(
        default="$",
        max_length=5,
        description="Symbol used when formatting amounts for display"
    )
    display_decimal_places: int = Field(
        default=2,
        ge=0,
        le=6,
        description="Decimal places shown for display amounts"
    )
    week_start_day: int = Field(
        default=0,
        ge=0,
        le=6,
        description="First day of the week view (0 = Monday, 6 = Sunday)"
    )
    default_history_months: int = Field(
        default=6,
        ge=1,
        le=120,
        description="Months returned by the monthly history report"
    )
    raise_on_degenerate_bucket: bool = Field(
        default=False,
        description="Raise instead of skipping a coverage bucket with no days"
    )


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

    # Validation thresholds
    max_record_amount: float = Field(
        default=1000000.0,
        gt=0,
        description="Maximum reasonable record amount (for sanity checking)"
    )
    max_coverage_months: int = Field(
        default=120,
        ge=1,
        description="Longest reasonable coverage span in months"
    )
    future_date_tolerance_days: int = Field(
        default=7,
        ge=0,
        description="How many days in the future a record can be anchored"
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
    def app(self) -> AppSettings:
        return AppSettings()

    @property
    def reporting(self) -> ReportingSettings:
        return ReportingSettings()


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

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    try:
        _ = settings.reporting
        results["reporting"] = True
    except Exception as e:
        results["reporting"] = False
        results["reporting_error"] = str(e)

    return results
