"""Span creation, reference resolution and carrier propagation.

This module provides:
- Tracer: span factory and registry implementing TracerProtocol
- Span / SpanContext: the unit of work and its immutable identity
- child_of / follows_from: reference builders for start_span
- Error hierarchy and carrier formats
"""

from spanwire.tracing.carrier import BAGGAGE_PREFIX, CANONICAL_FIELDS, TRACER_STATE_PREFIX
from spanwire.tracing.config import RecordCallback, TracerConfig
from spanwire.tracing.context import SpanContext
from spanwire.tracing.ids import generate_id
from spanwire.tracing.references import Reference, child_of, follows_from
from spanwire.tracing.span import Span
from spanwire.tracing.tracer import Tracer
from spanwire.tracing.types import (
    CarrierFormat,
    ConfigurationError,
    CorruptedTraceError,
    InternalEvent,
    ReferenceType,
    SpanEventError,
    SpanLogRecord,
    SpanReport,
    TracerError,
    TracerProtocol,
    ValidationError,
)

__all__ = [
    # Core
    "Tracer",
    "TracerConfig",
    "TracerProtocol",
    "RecordCallback",
    "Span",
    "SpanContext",
    "Reference",
    "child_of",
    "follows_from",
    "generate_id",
    # Types
    "CarrierFormat",
    "ReferenceType",
    "InternalEvent",
    "SpanLogRecord",
    "SpanReport",
    # Carrier layout
    "TRACER_STATE_PREFIX",
    "BAGGAGE_PREFIX",
    "CANONICAL_FIELDS",
    # Errors
    "TracerError",
    "ConfigurationError",
    "ValidationError",
    "CorruptedTraceError",
    "SpanEventError",
]
