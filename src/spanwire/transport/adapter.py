"""Generic transport adapter for metadata-carrying transports.

Works with anything that exposes request/response metadata as a flat mapping
(HTTP headers, gRPC metadata, message-bus headers). The tracer is always
passed in explicitly.

Usage:
    # Server side
    with inbound_span(tracer, "GetInvoice", request.metadata) as span:
        span.set_tag("rpc.type", "unary")
        ...

    # Client side
    with outbound_span(tracer, "GetInvoice", parent=span) as (child, metadata):
        stub.GetInvoice(request, metadata=metadata)
"""

from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncGenerator, Generator, Mapping

from spanwire.telemetry import (
    INBOUND_CONTEXT_REJECTED,
    INBOUND_SPAN_STARTED,
    OUTBOUND_SPAN_STARTED,
    TRACED_CALL_FAILED,
    get_logger,
)
from spanwire.tracing.context import SpanContext
from spanwire.tracing.span import Span
from spanwire.tracing.types import (
    CarrierFormat,
    CorruptedTraceError,
    SpanEventError,
    TracerProtocol,
)

log = get_logger(__name__)


def _start_inbound(
    tracer: TracerProtocol,
    operation_name: str,
    metadata: Mapping[str, Any] | None,
    tags: Mapping[str, Any] | None,
) -> Span:
    context: SpanContext | None = None
    if metadata is not None:
        try:
            context = tracer.extract(CarrierFormat.TEXT_MAP, metadata)
        except CorruptedTraceError as e:
            # Unusable upstream context: continue with a fresh trace
            log.warning(INBOUND_CONTEXT_REJECTED, operation_name=operation_name, error=str(e))

    span = tracer.start_span(operation_name, child_of=context, tags=tags)
    log.debug(
        INBOUND_SPAN_STARTED,
        operation_name=operation_name,
        trace_id=span.context.trace_id,
        continued=context is not None,
    )
    return span


def _record_failure(span: Span, error: BaseException) -> None:
    """Tag and log an exception on the span."""
    if isinstance(error, SpanEventError):
        span.log({"event": error.event_name, "payload": error.payload})
    span.set_tag("error", True)
    span.log(
        {
            "event": "error",
            "payload": {"error": str(error), "error_type": type(error).__name__},
        }
    )
    log.info(
        TRACED_CALL_FAILED,
        operation_name=span.operation_name,
        span_id=span.context.span_id,
        error_type=type(error).__name__,
    )


@contextmanager
def inbound_span(
    tracer: TracerProtocol,
    operation_name: str,
    metadata: Mapping[str, Any] | None,
    *,
    tags: Mapping[str, Any] | None = None,
) -> Generator[Span, None, None]:
    """Trace the handling of an incoming call.

    The span continues the trace found in ``metadata``; a missing or
    corrupted context starts a new trace instead of failing the call.

    Args:
        tracer: Tracer to create the span with.
        operation_name: Name of the handled operation.
        metadata: Incoming metadata carrying a text-map context.
        tags: Initial span tags.

    Yields:
        The open span. It is finished on exit; an exception is tagged and
        logged on the span, then re-raised.
    """
    span = _start_inbound(tracer, operation_name, metadata, tags)
    try:
        yield span
    except Exception as e:
        _record_failure(span, e)
        raise
    finally:
        span.finish()


@asynccontextmanager
async def inbound_span_async(
    tracer: TracerProtocol,
    operation_name: str,
    metadata: Mapping[str, Any] | None,
    *,
    tags: Mapping[str, Any] | None = None,
) -> AsyncGenerator[Span, None]:
    """Async variant of ``inbound_span`` for coroutine handlers."""
    span = _start_inbound(tracer, operation_name, metadata, tags)
    try:
        yield span
    except Exception as e:
        _record_failure(span, e)
        raise
    finally:
        span.finish()


def outbound_metadata(
    tracer: TracerProtocol,
    span: Span | SpanContext,
    metadata: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build outgoing metadata carrying a span's context.

    Args:
        tracer: Tracer used for injection.
        span: Span or context to propagate.
        metadata: Existing metadata to copy (left unmodified).

    Returns:
        A new dict with the existing metadata plus the carrier keys.
    """
    carrier: dict[str, Any] = dict(metadata or {})
    tracer.inject(span, CarrierFormat.TEXT_MAP, carrier)
    return carrier


@contextmanager
def outbound_span(
    tracer: TracerProtocol,
    operation_name: str,
    parent: Span | SpanContext | None = None,
    metadata: Mapping[str, Any] | None = None,
    *,
    tags: Mapping[str, Any] | None = None,
) -> Generator[tuple[Span, dict[str, Any]], None, None]:
    """Trace an outgoing call.

    Args:
        tracer: Tracer to create the span with.
        operation_name: Name of the called operation.
        parent: Span or context to continue; None starts a new trace.
        metadata: Existing outgoing metadata to copy.
        tags: Initial span tags.

    Yields:
        (span, carrier): the open client span and the metadata to send with
        the call. The span is finished on exit.
    """
    span = tracer.start_span(operation_name, child_of=parent, tags=tags)
    carrier = outbound_metadata(tracer, span, metadata)
    log.debug(
        OUTBOUND_SPAN_STARTED,
        operation_name=operation_name,
        trace_id=span.context.trace_id,
        span_id=span.context.span_id,
    )
    try:
        yield span, carrier
    except Exception as e:
        _record_failure(span, e)
        raise
    finally:
        span.finish()
