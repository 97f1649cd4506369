"""
Configuration management for external_ip.

Uses pydantic-settings for type-safe configuration with automatic
environment variable loading and validation. Every setting can be given as
an EXTERNAL_IP_* environment variable or in a .env file.
"""

from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from external_ip.constants import DEFAULT_HTTP_TIMEOUT, DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from external_ip.exceptions import ConfigurationError

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are validated when first loaded, so a bad value fails fast
    instead of surfacing in the middle of a resolution.
    """

    model_config = SettingsConfigDict(
        env_prefix="EXTERNAL_IP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra env vars
    )

    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Resolution timeout in seconds when the caller passes no context",
    )
    protocol: int = Field(
        default=0,
        description="Address family filter: 0 (any), 4 (IPv4) or 6 (IPv6)",
    )
    http_timeout: float = Field(
        default=DEFAULT_HTTP_TIMEOUT,
        gt=0,
        description="Upper bound in seconds for a single HTTP source request",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header sent by HTTP sources",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level for the command line tool",
    )

    @field_validator("protocol")
    @classmethod
    def validate_protocol(cls, v: int) -> int:
        """Only 0, 4 and 6 are legal address family filters."""
        if v not in (0, 4, 6):
            raise ValueError("only ipv4 and ipv6 protocol is supported")
        return v

    @field_validator("user_agent", mode="before")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip whitespace from string values, falling back to the default."""
        if isinstance(v, str):
            v = v.strip()
            return v if v else DEFAULT_USER_AGENT
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        """Normalize to an upper-case standard logging level name."""
        if isinstance(v, str):
            v = v.strip().upper()
            if v not in LOG_LEVELS:
                raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {v!r}")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.

    Raises:
        ConfigurationError: If an environment value fails validation
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"invalid external_ip settings: {e}") from e


def get_timeout() -> float:
    """Get default resolution timeout from settings."""
    return get_settings().timeout


def get_protocol() -> int:
    """Get default address family filter from settings."""
    return get_settings().protocol


def get_http_timeout() -> float:
    """Get HTTP request timeout ceiling from settings."""
    return get_settings().http_timeout


def get_user_agent() -> str:
    """Get HTTP User-Agent from settings."""
    return get_settings().user_agent
