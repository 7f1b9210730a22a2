"""Library configuration and decode options."""

import logging
from dataclasses import dataclass, fields
from datetime import timedelta
from functools import lru_cache
from typing import Any, Mapping

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class Settings(BaseSettings):
    """Library defaults loaded from WEBTOKENS_* environment variables."""

    # Algorithm used by encode() when none is given
    default_algorithm: str = "HS256"

    # Default clock skew tolerance for exp/nbf, in seconds
    leeway: int = Field(default=0, ge=0)

    # Weak key warnings (keys below these sizes are still accepted)
    min_hmac_key_length: int = 16  # bytes
    min_rsa_key_size: int = 2048  # bits

    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="WEBTOKENS_", env_file=".env", case_sensitive=False, extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return value


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """Apply the configured log level to the package logger."""
    settings = settings or get_settings()
    logger = logging.getLogger("webtokens")
    logger.setLevel(settings.log_level)
    return logger


@dataclass(frozen=True)
class ValidationOptions:
    """
    Options controlling what decode() checks.

    Example:
        options = ValidationOptions(leeway=30)
        payload = decode(token, key, options=options, algorithms=["HS256"])

        # Or as a mapping of overrides
        payload = decode(token, key, options={"verify_expiration": False})
    """

    verify: bool = True
    verify_expiration: bool = True
    verify_not_before: bool = True
    leeway: float | timedelta | None = None  # None = settings default

    def __post_init__(self):
        leeway = self.leeway
        if leeway is None:
            leeway = get_settings().leeway
        elif isinstance(leeway, timedelta):
            leeway = leeway.total_seconds()
        elif isinstance(leeway, bool) or not isinstance(leeway, (int, float)):
            raise TypeError(f"leeway must be a number of seconds or a timedelta, got {type(leeway).__name__}")

        if leeway < 0:
            raise ValueError(f"leeway must not be negative, got {leeway}")

        # frozen dataclass
        object.__setattr__(self, "leeway", leeway)

    @classmethod
    def from_mapping(cls, overrides: Mapping[str, Any]) -> "ValidationOptions":
        """Build options from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown validation options: {', '.join(sorted(unknown))}")
        return cls(**overrides)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ValidationOptions":
        """Default options using the configured leeway."""
        settings = settings or get_settings()
        return cls(leeway=settings.leeway)
