"""Settings loaded from environment variables or a ``.env`` file."""

from __future__ import annotations

from functools import lru_cache

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .enums import Format
from .errors import ConfigurationError

__all__ = ["Settings", "get_settings"]


class Settings(BaseSettings):
    """Configuration for olapclient.

    Every value can be overridden with an ``OLAPCLIENT_`` prefixed
    environment variable, for example ``OLAPCLIENT_LOG_LEVEL=DEBUG``.
    """

    model_config = SettingsConfigDict(
        env_prefix="OLAPCLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "WARNING"
    log_path: str | None = None

    # Query defaults
    default_format: Format = Format.JSONRECORDS
    default_locale: str = ""

    # Separator used to build level display names
    display_name_joint: str = "/"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if v.upper() not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"):
            raise ValueError(f"Invalid log level '{v}'")
        return v.upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance.

    Raises:
        ConfigurationError: If a configured value is invalid
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid olapclient settings: {e}") from e
