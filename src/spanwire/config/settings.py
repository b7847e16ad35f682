"""Environment-driven settings.

This module provides the SpanwireSettings class and a settings singleton.
Tracer options that can come from the environment (token, component name)
live here alongside the logging options; the record callback is code-only
and is passed to ``Tracer.from_settings`` directly.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from spanwire.config.env_loader import load_env_files
from spanwire.config.validators import resolve_path, validate_log_format, validate_log_level
from spanwire.telemetry import (
    SETTINGS_LOAD_FAILED,
    SETTINGS_LOADED,
    SETTINGS_LOADING,
    get_logger,
)

log = get_logger(__name__)


class SpanwireSettings(BaseSettings):
    """Unified settings read from ``SPANWIRE_*`` environment variables.

    Validates all values using Pydantic.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPANWIRE_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Tracer
    access_token: str | None = Field(default=None, description="Tracing account access token")
    component_name: str | None = Field(
        default=None, description="Component or service name attached to span reports"
    )

    # Telemetry
    log_dir: Path = Field(default=Path("logs"), description="Log directory path")
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="console", description="Console log format (json or console)"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        return validate_log_level(v)

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        return validate_log_format(v)

    @field_validator("log_dir", mode="before")
    @classmethod
    def resolve_log_dir(cls, v: Path | str) -> Path:
        """Resolve relative paths to absolute."""
        return resolve_path(v)


_settings: SpanwireSettings | None = None


def load_settings(project_root: Path | None = None) -> SpanwireSettings:
    """Load and validate settings.

    This function:
    1. Loads .env files (via env_loader)
    2. Creates SpanwireSettings (reads environment variables)
    3. Validates all values using Pydantic

    Args:
        project_root: Directory to look for .env files in. Defaults to cwd.

    Returns:
        Validated SpanwireSettings instance.

    Raises:
        pydantic.ValidationError: If validation fails.
    """
    log.info(SETTINGS_LOADING)
    load_env_files(project_root)

    try:
        settings = SpanwireSettings()
    except Exception as e:
        log.error(SETTINGS_LOAD_FAILED, error=str(e), error_type=type(e).__name__)
        raise

    log.info(
        SETTINGS_LOADED,
        component_name=settings.component_name,
        has_access_token=settings.access_token is not None,
        log_level=settings.log_level,
        log_format=settings.log_format,
    )
    return settings


def get_settings() -> SpanwireSettings:
    """Get the settings singleton.

    Returns:
        SpanwireSettings instance, loaded on first call.
    """
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
