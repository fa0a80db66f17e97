"""
Configuration Management for finplan

Uses pydantic-settings for type-safe configuration from environment variables.

All tunables of the engine live here: currency and locale defaults, the
collection caps applied by the orchestrator, and logging output.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Forecast engine defaults and caps."""

    model_config = SettingsConfigDict(
        env_prefix="FINPLAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_currency: str = Field(
        default="USD",
        min_length=3,
        description="Currency used when neither the record nor the caller names one",
    )
    default_locale: str = Field(
        default="en-US",
        description="Locale used when the requested one is unusable",
    )
    default_ownership: str = Field(
        default="shared",
        description="Ownership scope for records without one",
    )

    # Collection caps
    goal_event_limit: int = Field(
        default=200,
        ge=1,
        description="Most recent goal events kept before normalization",
    )
    recent_goal_event_limit: int = Field(
        default=5,
        ge=1,
        description="Events attached to each goal for display",
    )
    max_recurring_projections: int = Field(
        default=4,
        ge=0,
        description="Recurring planning versions projected besides the active one",
    )
    due_row_display_limit: int = Field(
        default=12,
        ge=1,
        description="Earliest due rows returned by the fragility scorer",
    )

    # Horizons
    core_horizon_months: int = Field(
        default=12,
        ge=1,
        le=240,
        description="Horizon of the synthetic live-baseline scenario",
    )
    cycle_window_before: int = Field(
        default=3,
        ge=0,
        description="Months before the current cycle offered as options",
    )
    cycle_window_after: int = Field(
        default=9,
        ge=0,
        description="Months after the current cycle offered as options",
    )

    @field_validator("default_currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.strip().upper()


class LoggingSettings(BaseSettings):
    """Structured logging output."""

    model_config = SettingsConfigDict(
        env_prefix="FINPLAN_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = Field(
        default="INFO",
        description="Minimum stdlib log level",
    )
    json_output: bool = Field(
        default=True,
        description="Render JSON lines (False renders for a console)",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def engine(self) -> EngineSettings:
        return EngineSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


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

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    settings = get_settings()
    results = {}

    try:
        _ = settings.engine
        results["engine"] = True
    except Exception as e:
        results["engine"] = False
        results["engine_error"] = str(e)

    try:
        _ = settings.logging
        results["logging"] = True
    except Exception as e:
        results["logging"] = False
        results["logging_error"] = str(e)

    return results
