"""
CareCore Configuration Module

Centralized configuration management using Pydantic Settings.
Supports environment variables and .env files.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class CareCoreSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="CARECORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    env: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    log_json: bool | None = None  # unset: JSON in production only

    # Compliance
    default_jurisdiction: str = "OTHER"
    standard_review_interval_days: int = 60
    min_assessment_length: int = 50

    # Windows
    expiring_plan_window_days: int = 30
    authorization_expiring_soon_days: int = 30


class VitalSignThresholds(BaseSettings):
    """Advisory ranges for vital signs captured at task completion."""

    model_config = SettingsConfigDict(
        env_prefix="VITALS_",
        env_file=".env",
        extra="ignore",
    )

    max_systolic: float = 180
    max_diastolic: float = 120
    min_oxygen_saturation: float = 90
    max_temperature_f: float = 103
    min_temperature_f: float = 95


class Settings:
    """
    Aggregated settings container.

    Usage:
        from carecore.config import get_settings
        settings = get_settings()
        print(settings.app.standard_review_interval_days)
    """

    def __init__(self):
        self.app = CareCoreSettings()
        self.vitals = VitalSignThresholds()

    @property
    def is_production(self) -> bool:
        return self.app.env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: The application settings
    """
    return Settings()
