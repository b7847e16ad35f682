"""Structured logging using structlog.

spanwire is imported by host applications, so importing it never touches
logging configuration. ``get_logger`` returns structlog loggers bound to
stdlib loggers; whatever handlers and levels the host has decide where (and
whether) events go. With no configuration the root logger sits at WARNING,
so per-span debug events are dropped before any formatting or I/O.

Applications that want spanwire's own output call ``configure_logging()``
once at startup:
- JSON-lines file output (``current.jsonl``, rotated) at INFO
- Pretty-printed or JSON console output at the configured level
- UTC timestamps
- Component and event tracking
"""

import logging
import logging.handlers
import pathlib
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from spanwire.config.settings import SpanwireSettings

# Handlers added by configure_logging; host handlers are never removed.
_installed_handlers: list[logging.Handler] = []


def _add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add UTC timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _component_from_name(logger_name: str) -> str:
    # "spanwire.tracing.tracer" -> "tracer"
    if "." in logger_name:
        return logger_name.split(".")[-1]
    return logger_name or "unknown"


def _add_component(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add component name to log records coming from stdlib loggers.

    Args:
        logger: The logger instance.
        method_name: The log method name (info, error, etc.).
        event_dict: The event dictionary.

    Returns:
        Event dictionary with component added.
    """
    # ProcessorFormatter passes logger=None for foreign records; add_logger_name
    # has already copied the record's name into the event dict.
    name = getattr(logger, "name", None) or event_dict.get("logger", "")
    event_dict["component"] = _component_from_name(name)
    return event_dict


def _add_component_from_event_dict(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add component name to structlog events.

    Runs after add_logger_name, so the dotted logger name is already in the
    event dict.
    """
    event_dict["component"] = _component_from_name(event_dict.get("logger", ""))
    return event_dict


def _processors() -> list[Any]:
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        _add_component_from_event_dict,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]


def _foreign_pre_chain() -> list[Any]:
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_timestamp,
        _add_component,
    ]


def _configure_file_handler(log_dir: pathlib.Path) -> logging.handlers.RotatingFileHandler:
    """Configure rotating file handler for JSON logs.

    Args:
        log_dir: Directory for log files.

    Returns:
        Configured RotatingFileHandler writing ``current.jsonl``.
    """
    log_dir.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        filename=str(log_dir / "current.jsonl"),
        maxBytes=50 * 1024 * 1024,  # 50 MB
        backupCount=5,
        encoding="utf-8",
    )
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=_foreign_pre_chain(),
        )
    )
    return handler


def _configure_console_handler(log_format: str) -> logging.StreamHandler[Any]:
    """Configure console handler.

    Args:
        log_format: "console" for pretty-printed output, "json" for JSON lines.

    Returns:
        Configured StreamHandler on stderr.
    """
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=True)
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_foreign_pre_chain(),
        )
    )
    return handler


def configure_logging(settings: "SpanwireSettings | None" = None) -> None:
    """Install spanwire's file and console handlers on the root logger.

    Optional; call once at application startup. Calling it again replaces
    the handlers it installed before and leaves every other handler alone.

    Args:
        settings: Loaded settings supplying log_dir, log_level and
            log_format. Defaults to ``get_settings()``, which also reads
            ``.env`` files.
    """
    if settings is None:
        from spanwire.config.settings import get_settings  # noqa: PLC0415

        settings = get_settings()

    configured_level = getattr(logging, settings.log_level, logging.INFO)

    root_logger = logging.getLogger()
    for handler in _installed_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    # Span lifecycle events are DEBUG; the root only admits them when the
    # console asks for DEBUG, and the file never records them.
    root_logger.setLevel(min(configured_level, logging.INFO))

    file_handler = _configure_file_handler(settings.log_dir)
    file_handler.setLevel(logging.INFO)

    console_handler = _configure_console_handler(settings.log_format)
    console_handler.setLevel(configured_level)

    for handler in (file_handler, console_handler):
        root_logger.addHandler(handler)
        _installed_handlers.append(handler)

    structlog.configure(
        processors=_processors(),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:  # Returns structlog.stdlib.BoundLogger
    """Get a structured logger instance.

    Does not configure anything. The logger is bound to the stdlib logger
    ``name`` with spanwire's processor chain, independent of the global
    structlog configuration.

    Args:
        name: Logger name (typically __name__ of the calling module).

    Returns:
        structlog BoundLogger.

    Example:
        >>> from spanwire.telemetry import get_logger
        >>> log = get_logger(__name__)
        >>> log.info("span_started", span_id="123", trace_id="abc")
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=_processors(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
    )
