"""Custom Pydantic validators for configuration.

Validators raise ValueError so Pydantic reports them as field errors.
"""

from pathlib import Path
from typing import Any


def validate_log_level(value: str) -> str:
    """Validate log level is one of the standard levels.

    Args:
        value: Log level string.

    Returns:
        Validated log level.

    Raises:
        ValueError: If log level is not valid.
    """
    valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if value.upper() not in valid_levels:
        raise ValueError(f"log_level must be one of {valid_levels}, got {value}")
    return value.upper()


def validate_log_format(value: str) -> str:
    """Validate log format is 'json' or 'console'.

    Args:
        value: Log format string.

    Returns:
        Validated log format.

    Raises:
        ValueError: If log format is not valid.
    """
    valid_formats = {"json", "console"}
    if value.lower() not in valid_formats:
        raise ValueError(f"log_format must be one of {valid_formats}, got {value}")
    return value.lower()


def validate_required_string(value: Any, missing_message: str, type_message: str) -> str:
    """Require a value to be present and a string.

    Args:
        value: Raw value.
        missing_message: Error message when value is None.
        type_message: Error message when value is not a str.

    Returns:
        The value unchanged.

    Raises:
        ValueError: If value is None or not a string.
    """
    if value is None:
        raise ValueError(missing_message)
    if not isinstance(value, str):
        raise ValueError(type_message)
    return value


def validate_callable(value: Any, message: str) -> Any:
    """Allow None or a callable.

    Raises:
        ValueError: If value is set but not callable.
    """
    if value is not None and not callable(value):
        raise ValueError(message)
    return value


def resolve_path(value: Path | str) -> Path:
    """Resolve relative paths against the current working directory.

    Args:
        value: Path value (can be string or Path).

    Returns:
        Absolute, resolved Path object.
    """
    path = Path(value) if isinstance(value, str) else value
    if not path.is_absolute():
        path = Path.cwd() / path
    return path.resolve()
