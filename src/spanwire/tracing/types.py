"""Type definitions for the tracing engine.

This module defines the core types shared by the tracer, spans and carriers:
- ReferenceType: How a span relates to its parent (root, childOf, followsFrom)
- CarrierFormat: Supported carrier serialization formats
- SpanLogRecord / SpanReport: Dict shapes for span logs and finished-span reports
- TracerProtocol: Capability interface implemented by the Tracer
- Error classes: Hierarchy of tracing errors
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping, MutableMapping, Protocol, Sequence

from typing_extensions import NotRequired, TypedDict

if TYPE_CHECKING:
    from spanwire.tracing.context import SpanContext
    from spanwire.tracing.references import Reference
    from spanwire.tracing.span import Span


class ReferenceType(str, Enum):
    """Relationship between a span and the context it was started from.

    Values are the literal strings written to carriers.
    """

    ROOT = "root"
    CHILD_OF = "childOf"
    FOLLOWS_FROM = "followsFrom"

    @classmethod
    def parse(cls, value: Any) -> "ReferenceType":
        """Normalize a raw reference type value.

        Args:
            value: Enum member or string (camelCase and snake_case accepted).

        Returns:
            Matching ReferenceType. Anything unrecognized maps to ROOT.
        """
        if isinstance(value, ReferenceType):
            return value
        if value in ("childOf", "child_of"):
            return cls.CHILD_OF
        if value in ("followsFrom", "follows_from"):
            return cls.FOLLOWS_FROM
        return cls.ROOT


class CarrierFormat(str, Enum):
    """Carrier formats understood by inject/extract."""

    TEXT_MAP = "text_map"
    HTTP_HEADERS = "http_headers"
    BINARY = "binary"

    @classmethod
    def from_str(cls, value: "str | CarrierFormat") -> "CarrierFormat | None":
        """Convert a string to a CarrierFormat.

        Args:
            value: Format enum or its string value (case-insensitive).

        Returns:
            CarrierFormat or None if the value is unknown.
        """
        if isinstance(value, CarrierFormat):
            return value
        if not isinstance(value, str):
            return None
        value_lower = value.lower()
        for fmt in cls:
            if fmt.value == value_lower:
                return fmt
        return None


class SpanLogRecord(TypedDict):
    """A single structured log entry attached to a span.

    Attributes:
        event: Event name.
        timestamp: Epoch milliseconds.
        payload: Arbitrary payload, present only when supplied.
    """

    event: str
    timestamp: float
    payload: NotRequired[Any]


class SpanReport(TypedDict):
    """Snapshot of a finished span handed to the record callback."""

    component: str
    operation_name: str
    start_time: float
    finish_time: float | None
    duration: float | None
    tags: dict[str, Any]
    logs: list[SpanLogRecord]
    trace_id: str
    span_id: str
    parent_id: str
    baggage: dict[str, str]
    reference_type: str


@dataclass(frozen=True)
class InternalEvent:
    """Record of a recoverable anomaly observed by the tracer.

    Attributes:
        message: Human-readable description.
        payload: Optional offending value or extra detail.
    """

    message: str
    payload: Any = None


class TracerProtocol(Protocol):
    """Capability interface that transport adapters depend on."""

    def start_span(
        self,
        operation_name: str,
        *,
        child_of: "Span | SpanContext | None" = None,
        follows_from: "Span | SpanContext | None" = None,
        references: "Sequence[Reference] | None" = None,
        start_time: float | None = None,
        tags: Mapping[str, Any] | None = None,
    ) -> "Span":
        """Start a new span."""
        ...

    def inject(
        self,
        span_or_context: "Span | SpanContext",
        fmt: "CarrierFormat | str",
        carrier: MutableMapping[str, Any] | None,
    ) -> None:
        """Write a span context into a carrier."""
        ...

    def extract(self, fmt: "CarrierFormat | str", carrier: Any) -> "SpanContext | None":
        """Read a span context from a carrier."""
        ...


# Error hierarchy


class TracerError(Exception):
    """Base exception for all tracing errors."""

    pass


class ConfigurationError(TracerError):
    """Raised when the tracer is constructed with invalid configuration."""

    pass


class ValidationError(TracerError):
    """Raised when start_span or Span.log receive invalid arguments."""

    pass


class CorruptedTraceError(TracerError):
    """Raised when a carrier fails its integrity checks during extract."""

    pass


class SpanEventError(Exception):
    """Application error that should be logged to the active span as an event.

    Transport adapters log ``{"event": event_name, "payload": payload}`` to the
    current span before re-raising.

    Args:
        message: Error message.
        event_name: Name of the span log event.
        payload: Optional event payload.
    """

    def __init__(self, message: str, event_name: str, payload: Any = None) -> None:  # noqa: D107
        super().__init__(message)
        self.event_name = event_name
        self.payload = payload
