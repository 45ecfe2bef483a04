# File: localizable/core/config.py
"""
Configuration settings for Localizable.

This module defines application settings using Pydantic's BaseSettings,
which supports environment variable loading and validation.
"""

import json
from typing import Annotated, Dict, List, Union

from pydantic import field_validator, ValidationInfo
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Locale and fallback settings are read by the localization service on every
    resolve call, so a fresh ``Settings`` instance can be passed in tests
    without touching the process-wide singleton.
    """

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        extra="ignore",
    )

    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Localizable"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite:///localizable.db"
    DB_ECHO: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"

    # ================================
    # Localization Configuration
    # ================================

    # Supported locales, in display order, mapped to human-readable names
    LOCALES: Annotated[Dict[str, str], NoDecode] = {
        "en": "English",
    }

    # Locale used when a request does not name one
    DEFAULT_LOCALE: str = "en"

    # When enabled, fields with neither a localized nor a native value
    # resolve to FIELD_FALLBACK_VALUE instead of None
    FIELD_FALLBACK: bool = True
    FIELD_FALLBACK_VALUE: str = "This field is not translated yet."

    @field_validator("LOCALES", mode="before")
    @classmethod
    def assemble_locales(cls, v: Union[str, List[str], Dict[str, str], None]) -> Dict[str, str]:
        """Accept a JSON object, a JSON list of codes, or a comma-separated list of codes."""
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except json.JSONDecodeError:
                v = [i.strip() for i in v.split(",") if i.strip()]
        if isinstance(v, (list, tuple)):
            # Bare codes carry no display name; use the code itself
            v = {code: code for code in v}
        if not v:
            return {"en": "English"}
        return v

    @field_validator("DEFAULT_LOCALE")
    @classmethod
    def validate_default_locale(cls, v: str, info: ValidationInfo) -> str:
        """Ensure default locale is one of the configured locales."""
        locales = info.data.get("LOCALES") or {"en": "English"}
        if v not in locales:
            return next(iter(locales))
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        return v.upper() if v.upper() in valid_levels else "INFO"

    def locale_codes(self) -> List[str]:
        """Configured locale codes in declaration order."""
        return list(self.LOCALES.keys())


# Create settings instance
settings = Settings()
