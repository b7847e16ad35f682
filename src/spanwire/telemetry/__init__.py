"""Telemetry module for the library's own structured logging.

This module provides:
- Structured logging via structlog
- Semantic event constants
"""

from spanwire.telemetry.events import (
    CARRIER_EXTRACTED,
    CARRIER_INJECTED,
    ENV_FILES_LOADED,
    INBOUND_CONTEXT_REJECTED,
    INBOUND_SPAN_STARTED,
    OUTBOUND_SPAN_STARTED,
    SETTINGS_LOAD_FAILED,
    SETTINGS_LOADED,
    SETTINGS_LOADING,
    SPAN_FINISHED,
    SPAN_REPORTED,
    SPAN_STARTED,
    TRACED_CALL_FAILED,
    TRACER_CLEARED,
    TRACER_CREATED,
    TRACER_DIAGNOSTIC,
)
from spanwire.telemetry.logger import configure_logging, get_logger

__all__ = [
    # Core exports
    "get_logger",
    "configure_logging",
    # Event constants
    "TRACER_CREATED",
    "TRACER_CLEARED",
    "TRACER_DIAGNOSTIC",
    "SPAN_STARTED",
    "SPAN_FINISHED",
    "SPAN_REPORTED",
    "CARRIER_INJECTED",
    "CARRIER_EXTRACTED",
    "INBOUND_SPAN_STARTED",
    "INBOUND_CONTEXT_REJECTED",
    "OUTBOUND_SPAN_STARTED",
    "TRACED_CALL_FAILED",
    "SETTINGS_LOADING",
    "SETTINGS_LOADED",
    "SETTINGS_LOAD_FAILED",
    "ENV_FILES_LOADED",
]
