"""Tracer: span factory, span registry and carrier propagation.

The Tracer is process-scoped and meant to be shared by many concurrent
operations. Construct it once at startup and pass it explicitly to every
adapter and call site that creates spans.

Usage:
    tracer = Tracer(access_token="token", component_name="billing")

    parent = tracer.start_span("handle_request")
    child = tracer.start_span("query_db", child_of=parent)
    child.finish()

    carrier: dict[str, str] = {}
    tracer.inject(parent, CarrierFormat.TEXT_MAP, carrier)
    remote = tracer.join("remote_work", carrier)
"""

import threading
from typing import TYPE_CHECKING, Any, Mapping, MutableMapping, Sequence

from spanwire.telemetry import (
    CARRIER_EXTRACTED,
    CARRIER_INJECTED,
    SPAN_REPORTED,
    SPAN_STARTED,
    TRACER_CLEARED,
    TRACER_CREATED,
    get_logger,
)
from spanwire.tracing.carrier import extract_text_map, inject_text_map
from spanwire.tracing.config import RecordCallback, TracerConfig
from spanwire.tracing.context import SpanContext
from spanwire.tracing.diagnostics import DiagnosticsBuffer
from spanwire.tracing.references import Reference, child_of, follows_from
from spanwire.tracing.span import Span, is_timestamp, now_ms
from spanwire.tracing.types import (
    CarrierFormat,
    InternalEvent,
    ReferenceType,
    SpanReport,
    ValidationError,
)

if TYPE_CHECKING:
    from spanwire.config.settings import SpanwireSettings

log = get_logger(__name__)

_RESOLVABLE_KINDS = (ReferenceType.CHILD_OF, ReferenceType.FOLLOWS_FROM)


class Tracer:
    """Creates spans, resolves their references and propagates contexts.

    Implements TracerProtocol (start_span, inject, extract) directly.

    Args:
        access_token: Access token for the tracing account.
        component_name: Name of the emitting component.
        record_callback: Optional callable invoked with each finished span's
            report, synchronously on the finishing thread.

    Raises:
        ConfigurationError: If any option is missing or has the wrong type.
    """

    def __init__(  # noqa: D107
        self,
        access_token: str | None = None,
        component_name: str | None = None,
        record_callback: RecordCallback | None = None,
    ) -> None:
        config = TracerConfig.build(
            access_token=access_token,
            component_name=component_name,
            record_callback=record_callback,
        )
        self._init_from_config(config)

    @classmethod
    def from_config(cls, config: TracerConfig) -> "Tracer":
        """Create a tracer from an already validated config."""
        tracer = cls.__new__(cls)
        tracer._init_from_config(config)
        return tracer

    @classmethod
    def from_settings(
        cls, settings: "SpanwireSettings", record_callback: RecordCallback | None = None
    ) -> "Tracer":
        """Create a tracer from environment-driven settings.

        Args:
            settings: Loaded SpanwireSettings.
            record_callback: Optional report sink (not configurable from env).

        Returns:
            Configured Tracer.

        Raises:
            ConfigurationError: If the settings lack a token or component name.
        """
        return cls(
            access_token=settings.access_token,
            component_name=settings.component_name,
            record_callback=record_callback,
        )

    def _init_from_config(self, config: TracerConfig) -> None:
        self._config = config
        self._spans: list[Span] = []
        self._spans_lock = threading.Lock()
        self._diagnostics = DiagnosticsBuffer(config.component_name)
        log.info(
            TRACER_CREATED,
            tracer_component=config.component_name,
            has_record_callback=config.record_callback is not None,
        )

    # Configuration

    @property
    def config(self) -> TracerConfig:
        """Validated construction options."""
        return self._config

    @property
    def access_token(self) -> str:
        """Access token given at construction."""
        return self._config.access_token

    @property
    def component_name(self) -> str:
        """Component name attached to every report."""
        return self._config.component_name

    @property
    def record_callback(self) -> RecordCallback | None:
        """Report sink, if one was configured."""
        return self._config.record_callback

    # Buffers

    @property
    def spans(self) -> list[Span]:
        """Snapshot of spans created since the last clear()."""
        with self._spans_lock:
            return list(self._spans)

    @property
    def internal_events(self) -> list[InternalEvent]:
        """Snapshot of recorded diagnostics."""
        return self._diagnostics.snapshot()

    def clear(self) -> None:
        """Discard all buffered spans.

        Spans started concurrently with the clear may or may not remain in
        the buffer afterwards.
        """
        with self._spans_lock:
            discarded = len(self._spans)
            self._spans = []
        log.debug(TRACER_CLEARED, tracer_component=self.component_name, discarded=discarded)

    def record_internal_event(self, message: str, payload: Any = None) -> InternalEvent:
        """Record a recoverable anomaly without raising.

        Args:
            message: Description of the anomaly.
            payload: Optional offending value.

        Returns:
            The stored InternalEvent.
        """
        return self._diagnostics.record(message, payload)

    def is_sampled(self) -> bool:
        """Sampling decision for new root spans. Always True."""
        return True

    # Span creation

    def start_span(
        self,
        operation_name: str,
        *,
        child_of: Span | SpanContext | None = None,
        follows_from: Span | SpanContext | None = None,
        references: Sequence[Reference] | None = None,
        start_time: float | None = None,
        tags: Mapping[str, Any] | None = None,
    ) -> Span:
        """Start a new span.

        The first reference of kind childOf/followsFrom with a usable
        context becomes the parent. References without a usable context are
        skipped and recorded as diagnostics. With no parent the span starts
        a new trace.

        Args:
            operation_name: Name of the operation.
            child_of: Shorthand for a trailing ``child_of(...)`` reference.
            follows_from: Shorthand for a trailing ``follows_from(...)``
                reference (after child_of).
            references: Explicit references, scanned first.
            start_time: Epoch milliseconds. Defaults to now.
            tags: Initial tags (copied).

        Returns:
            The new, open Span. It is also appended to ``spans``.

        Raises:
            ValidationError: If start_time is not numeric or tags is not a
                mapping.
        """
        if start_time is not None and not is_timestamp(start_time):
            raise ValidationError("startTime must be a timestamp of type number")
        if tags is not None and not isinstance(tags, Mapping):
            raise ValidationError("tags must be an object")

        normalized = self._normalize_references(references, child_of, follows_from)
        parent, reference_type = self._resolve_parent(normalized)

        if parent is None:
            context = SpanContext.root(sampled=self.is_sampled())
        else:
            context = parent.child(reference_type)

        span = Span(
            self,
            operation_name,
            context,
            start_time=start_time if start_time is not None else now_ms(),
            tags=tags,
        )

        with self._spans_lock:
            self._spans.append(span)

        log.debug(
            SPAN_STARTED,
            operation_name=operation_name,
            trace_id=context.trace_id,
            span_id=context.span_id,
            parent_id=context.parent_id,
            reference_type=context.reference_type.value,
        )
        return span

    def _normalize_references(
        self,
        references: Sequence[Reference] | None,
        child_of_ref: Any,
        follows_from_ref: Any,
    ) -> list[Reference]:
        normalized = list(references or [])
        if child_of_ref is not None:
            normalized.append(child_of(child_of_ref))
        if follows_from_ref is not None:
            normalized.append(follows_from(follows_from_ref))
        return normalized

    def _resolve_parent(
        self, references: list[Reference]
    ) -> tuple[SpanContext | None, ReferenceType]:
        for ref in references:
            kind = ref.kind if isinstance(ref, Reference) else None
            if kind is None or ReferenceType.parse(kind) not in _RESOLVABLE_KINDS:
                self.record_internal_event(
                    f"Unsupported reference type: {getattr(kind, 'value', kind)}", ref
                )
                continue

            context = ref.referenced_context()
            if context is None:
                self.record_internal_event("Span reference has an invalid context", ref.referenced)
                continue

            return context, ReferenceType.parse(kind)

        return None, ReferenceType.ROOT

    # Propagation

    def inject(
        self,
        span_or_context: Span | SpanContext,
        fmt: CarrierFormat | str,
        carrier: MutableMapping[str, Any] | None,
    ) -> None:
        """Write a span's context into a carrier.

        Only the text-map format is supported. Unsupported formats and
        unusable carriers are recorded as diagnostics; nothing is raised and
        nothing is written.

        Args:
            span_or_context: Span or SpanContext to propagate.
            fmt: Carrier format.
            carrier: Mutable mapping that receives the keys.
        """
        resolved = CarrierFormat.from_str(fmt)
        if resolved is None:
            self.record_internal_event(f"Unknown format: {fmt}")
            return
        if resolved is not CarrierFormat.TEXT_MAP:
            self.record_internal_event(f"Unsupported format: {resolved.value}")
            return

        if carrier is None:
            self.record_internal_event("Unexpected null text_map carrier in call to inject")
            return
        if not isinstance(carrier, MutableMapping):
            self.record_internal_event(
                f"Unexpected '{type(carrier).__name__}' text_map carrier in call to inject"
            )
            return

        context = span_or_context.context if isinstance(span_or_context, Span) else span_or_context
        if not isinstance(context, SpanContext):
            self.record_internal_event("Cannot inject an object that is not a span or context")
            return

        inject_text_map(context, carrier)
        log.debug(CARRIER_INJECTED, trace_id=context.trace_id, span_id=context.span_id)

    def extract(self, fmt: CarrierFormat | str, carrier: Any) -> SpanContext | None:
        """Read a span context from a carrier.

        Args:
            fmt: Carrier format. text_map and http_headers are accepted;
                http_headers matches keys case-insensitively.
            carrier: Mapping written by ``inject``.

        Returns:
            The extracted SpanContext, or None when the format or carrier is
            unusable (recorded as a diagnostic).

        Raises:
            CorruptedTraceError: If the carrier is missing canonical fields
                or carries an unparseable sampled value.
        """
        resolved = CarrierFormat.from_str(fmt)
        if resolved is None or resolved is CarrierFormat.BINARY:
            name = resolved.value if resolved is not None else fmt
            self.record_internal_event(f"Unsupported format: {name}")
            return None

        if not isinstance(carrier, Mapping):
            self.record_internal_event(
                f"Unexpected '{type(carrier).__name__}' {resolved.value} carrier in call to extract"
            )
            return None

        context = extract_text_map(
            carrier, case_insensitive=resolved is CarrierFormat.HTTP_HEADERS
        )
        log.debug(CARRIER_EXTRACTED, trace_id=context.trace_id, span_id=context.span_id)
        return context

    def join(
        self,
        operation_name: str,
        carrier: Any,
        fmt: CarrierFormat | str = CarrierFormat.TEXT_MAP,
    ) -> Span:
        """Start a span that continues the trace found in a carrier.

        Args:
            operation_name: Name of the new span.
            carrier: Carrier to extract from.
            fmt: Carrier format. Defaults to text_map.

        Returns:
            A childOf span of the extracted context, or a root span when the
            format or carrier is unusable.

        Raises:
            CorruptedTraceError: If the carrier fails its integrity checks.
        """
        context = self.extract(fmt, carrier)
        return self.start_span(operation_name, child_of=context)

    # Reporting

    def record(self, span: Span) -> SpanReport:
        """Build a finished span's report and hand it to the record callback.

        Called by ``Span.finish`` exactly once per span. The callback runs
        synchronously; its exceptions propagate to the finishing caller.

        Args:
            span: The finished span.

        Returns:
            The assembled report.
        """
        context = span.context
        report: SpanReport = {
            "component": self.component_name,
            "operation_name": span.operation_name,
            "start_time": span.start_time,
            "finish_time": span.finish_time,
            "duration": span.duration_ms(),
            "tags": span.tags,
            "logs": span.logs,
            "trace_id": context.trace_id,
            "span_id": context.span_id,
            "parent_id": context.parent_id,
            "baggage": dict(context.baggage),
            "reference_type": context.reference_type.value,
        }

        callback = self._config.record_callback
        log.debug(
            SPAN_REPORTED,
            operation_name=span.operation_name,
            span_id=context.span_id,
            delivered=callback is not None,
        )
        if callback is not None:
            callback(report)
        return report

    def __repr__(self) -> str:  # noqa: D105
        return f"Tracer(component_name={self.component_name!r}, spans={len(self.spans)})"
