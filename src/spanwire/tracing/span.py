"""Span: a mutable, timed unit of work.

Spans are created by ``Tracer.start_span`` and owned by the caller until they
are finished. Tags and logs may be mutated before or after finish; finishing
reports the span through the tracer exactly once.
"""

import threading
import time
from typing import TYPE_CHECKING, Any, Mapping

from spanwire.telemetry import SPAN_FINISHED, get_logger
from spanwire.tracing.context import SpanContext
from spanwire.tracing.types import SpanLogRecord, ValidationError

if TYPE_CHECKING:
    from spanwire.tracing.tracer import Tracer

log = get_logger(__name__)


def now_ms() -> float:
    """Current wall-clock time in epoch milliseconds."""
    return time.time() * 1000


def is_timestamp(value: Any) -> bool:
    """True for int/float values (bool is rejected)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class Span:
    """A single timed operation with an identity, tags and logs.

    Args:
        tracer: Tracer that created the span and receives its report.
        operation_name: Name of the operation; fixed for the span's lifetime.
        context: Identity and linkage of the span.
        start_time: Epoch milliseconds at which the operation started.
        tags: Initial tags (copied).
    """

    def __init__(  # noqa: D107
        self,
        tracer: "Tracer",
        operation_name: str,
        context: SpanContext,
        start_time: float,
        tags: Mapping[str, Any] | None = None,
    ) -> None:
        self._tracer = tracer
        self._operation_name = operation_name
        self._context = context
        self._start_time = start_time
        self._finish_time: float | None = None
        self._duration: float | None = None
        self._tags: dict[str, Any] = dict(tags or {})
        self._logs: list[SpanLogRecord] = []
        self._lock = threading.Lock()

    @property
    def operation_name(self) -> str:
        """Operation name given at creation."""
        return self._operation_name

    @property
    def context(self) -> SpanContext:
        """Immutable context of this span."""
        return self._context

    @property
    def tracer(self) -> "Tracer":
        """Tracer that created this span."""
        return self._tracer

    @property
    def start_time(self) -> float:
        """Start timestamp in epoch milliseconds."""
        return self._start_time

    @property
    def finish_time(self) -> float | None:
        """Finish timestamp, or None while the span is open."""
        return self._finish_time

    @property
    def duration(self) -> float | None:
        """finish_time - start_time, or None while open. Never clamped."""
        return self._duration

    @property
    def is_finished(self) -> bool:
        """True once finish() has been called."""
        return self._finish_time is not None

    @property
    def tags(self) -> dict[str, Any]:
        """Copy of the current tags."""
        with self._lock:
            return dict(self._tags)

    @property
    def logs(self) -> list[SpanLogRecord]:
        """Copy of the log entries in insertion order."""
        with self._lock:
            return list(self._logs)

    def duration_ms(self) -> float | None:
        """Duration in milliseconds, as written into span reports."""
        return self._duration

    def set_tag(self, key: str, value: Any) -> "Span":
        """Set a single tag, overwriting any previous value.

        Args:
            key: Tag name.
            value: Tag value (any type).

        Returns:
            This span, for chaining.
        """
        with self._lock:
            self._tags[key] = value
        return self

    def add_tags(self, tags: Mapping[str, Any]) -> "Span":
        """Merge several tags; later writes win on key collision."""
        with self._lock:
            self._tags.update(tags)
        return self

    def log(self, fields: Mapping[str, Any], timestamp: float | None = None) -> "Span":
        """Append a structured log entry.

        Args:
            fields: Mapping with a required string ``event`` and an optional
                ``payload``.
            timestamp: Epoch milliseconds. Non-numeric values fall back to now.

        Returns:
            This span, for chaining.

        Raises:
            ValidationError: If fields is not a mapping or has no string event.
        """
        if not isinstance(fields, Mapping):
            raise ValidationError("Span.log() expects a mapping as its first argument")
        event = fields.get("event")
        if not isinstance(event, str):
            raise ValidationError(
                "Span.log() must contain an event name. For example span.log({'event': 'name'})"
            )

        if timestamp is None or not is_timestamp(timestamp):
            timestamp = now_ms()
        record: SpanLogRecord = {"event": event, "timestamp": timestamp}
        if "payload" in fields:
            record["payload"] = fields["payload"]

        with self._lock:
            self._logs.append(record)
        return self

    def log_event(self, event: str, payload: Any = None) -> "Span":
        """Shorthand for ``log({"event": event, "payload": payload})``."""
        fields: dict[str, Any] = {"event": event}
        if payload is not None:
            fields["payload"] = payload
        return self.log(fields)

    def set_baggage_item(self, key: str, value: str) -> "Span":
        """Attach a baggage item that propagates to children and carriers.

        The span's context is replaced by a copy carrying the new item; the
        previous SpanContext object is left untouched.
        """
        with self._lock:
            self._context = self._context.with_baggage_item(key, value)
        return self

    def get_baggage_item(self, key: str) -> str | None:
        """Look up a baggage item on this span's context."""
        return self._context.baggage.get(key)

    def finish(self, finish_time: float | None = None) -> None:
        """Finish the span and report it through the tracer.

        Only the first call has an effect. Later calls record a tracer
        diagnostic and return without reporting again.

        Args:
            finish_time: Epoch milliseconds. Defaults to now.

        Raises:
            ValidationError: If finish_time is supplied but not numeric.
        """
        if finish_time is not None and not is_timestamp(finish_time):
            raise ValidationError("finishTime must be a timestamp of type number")

        with self._lock:
            already_finished = self._finish_time is not None
            if not already_finished:
                self._finish_time = finish_time if finish_time is not None else now_ms()
                self._duration = self._finish_time - self._start_time

        if already_finished:
            self._tracer.record_internal_event("Span already finished", self._context.span_id)
            return

        log.debug(
            SPAN_FINISHED,
            operation_name=self._operation_name,
            trace_id=self._context.trace_id,
            span_id=self._context.span_id,
            duration_ms=self._duration,
        )
        self._tracer.record(self)

    def __repr__(self) -> str:  # noqa: D105
        state = "finished" if self.is_finished else "open"
        return (
            f"Span(operation_name={self._operation_name!r}, "
            f"span_id={self._context.span_id!r}, state={state})"
        )
