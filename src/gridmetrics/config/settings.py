"""
Application settings using Pydantic.

Provides environment-based configuration loading with GRIDMETRICS_ prefix.
"""

from functools import lru_cache
from typing import Literal

import pydantic
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from gridmetrics.core.errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GRIDMETRICS_",
        extra="ignore",
    )

    # Network served by the operator
    total_customers: int = Field(default=10000, ge=0)
    average_power_per_customer_kw: float = Field(default=2.0, ge=0)

    # Fallbacks for outages recorded without duration or customer counts
    estimation_mode: Literal["fixed", "skip", "strict"] = "fixed"
    default_duration_hours: float = Field(default=1.0, ge=0)
    default_affected_customers: int = Field(default=100, ge=0)

    # Analysis defaults
    default_time_range: str = "Last 30 Days"
    default_type_filter: str = "All Types"
    depart_breakdown_limit: int = Field(default=8, ge=1)

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    try:
        return Settings()
    except pydantic.ValidationError as exc:
        invalid = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        raise ConfigurationError("Invalid configuration", details={"fields": invalid}) from exc
