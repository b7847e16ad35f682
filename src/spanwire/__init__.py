"""spanwire: span creation and cross-process trace context propagation."""

from spanwire.tracing import (
    CarrierFormat,
    ConfigurationError,
    CorruptedTraceError,
    Reference,
    ReferenceType,
    Span,
    SpanContext,
    SpanEventError,
    SpanReport,
    Tracer,
    TracerConfig,
    TracerError,
    TracerProtocol,
    ValidationError,
    child_of,
    follows_from,
)

__version__ = "0.1.0"

__all__ = [
    "Tracer",
    "TracerConfig",
    "TracerProtocol",
    "Span",
    "SpanContext",
    "SpanReport",
    "Reference",
    "ReferenceType",
    "CarrierFormat",
    "child_of",
    "follows_from",
    "TracerError",
    "ConfigurationError",
    "ValidationError",
    "CorruptedTraceError",
    "SpanEventError",
]
