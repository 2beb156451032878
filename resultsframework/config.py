"""
Configuration for the Results Framework Engine.

Structural rules are fixed constants. Only logging behaviour is read
from the environment (prefix RESULTSFRAMEWORK_).
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# STRUCTURAL CONSTANTS
# =============================================================================

# Cap for objectives, outcomes per objective, outputs per outcome
MAX_CHILDREN = 10

# Project duration in years
MIN_DURATION = 1
MAX_DURATION = 5
DEFAULT_DURATION = 1

# New indicators start with this data collection frequency
DEFAULT_FREQUENCY = "monthly"

YEAR_LABEL_PREFIX = "Year"


# =============================================================================
# RUNTIME SETTINGS
# =============================================================================

class Settings(BaseSettings):
    """Environment-driven settings."""

    model_config = SettingsConfigDict(
        env_prefix="RESULTSFRAMEWORK_",
        extra="ignore",
    )

    LOG_LEVEL: str = "WARNING"
    LOG_FORMAT: str = "console"  # "console" or "json"


settings = Settings()
