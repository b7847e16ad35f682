"""Text-map carrier codec.

Wire layout of a flat string-keyed carrier:

    ot-tracer-traceid        trace_id
    ot-tracer-spanid         span_id
    ot-tracer-parentid       parent_id
    ot-tracer-referencetype  reference_type ("root" | "childOf" | "followsFrom")
    ot-tracer-sampled        "true" | "false"
    ot-baggage-<key>         one entry per baggage item

Any transport adapter (HTTP headers, gRPC metadata, message headers) that
reads and writes these keys interoperates with the tracer.
"""

from typing import Any, Mapping, MutableMapping

from spanwire.tracing.context import SpanContext
from spanwire.tracing.types import CorruptedTraceError, ReferenceType

TRACER_STATE_PREFIX = "ot-tracer-"
BAGGAGE_PREFIX = "ot-baggage-"

FIELD_TRACE_ID = TRACER_STATE_PREFIX + "traceid"
FIELD_SPAN_ID = TRACER_STATE_PREFIX + "spanid"
FIELD_PARENT_ID = TRACER_STATE_PREFIX + "parentid"
FIELD_REFERENCE_TYPE = TRACER_STATE_PREFIX + "referencetype"
FIELD_SAMPLED = TRACER_STATE_PREFIX + "sampled"

CANONICAL_FIELDS = (
    FIELD_TRACE_ID,
    FIELD_SPAN_ID,
    FIELD_PARENT_ID,
    FIELD_REFERENCE_TYPE,
    FIELD_SAMPLED,
)


def _encode_sampled(sampled: bool) -> str:
    return "true" if sampled else "false"


def _decode_sampled(raw: Any) -> bool:
    if raw is True or raw is False:
        return raw
    if isinstance(raw, str) and raw in ("true", "false"):
        return raw == "true"
    raise CorruptedTraceError(f"Trace corrupted, sampled should be type bool, got {raw!r}")


def inject_text_map(context: SpanContext, carrier: MutableMapping[str, Any]) -> None:
    """Write a context into a carrier.

    Args:
        context: Context to serialize.
        carrier: Mutable mapping that receives the canonical keys and one
            ``ot-baggage-`` entry per baggage item. Existing keys are
            overwritten.
    """
    carrier[FIELD_SPAN_ID] = context.span_id
    carrier[FIELD_PARENT_ID] = context.parent_id
    carrier[FIELD_TRACE_ID] = context.trace_id
    carrier[FIELD_REFERENCE_TYPE] = context.reference_type.value
    carrier[FIELD_SAMPLED] = _encode_sampled(context.sampled)
    for key, value in context.baggage_items():
        carrier[BAGGAGE_PREFIX + key] = value


def extract_text_map(carrier: Mapping[str, Any], case_insensitive: bool = False) -> SpanContext:
    """Read a context from a carrier.

    Args:
        carrier: Flat mapping as written by ``inject_text_map``.
        case_insensitive: Match keys ignoring case (HTTP header semantics).
            Baggage keys are then reported lower-cased.

    Returns:
        A new SpanContext carrying the extracted identifiers, reference type,
        sampling decision and baggage.

    Raises:
        CorruptedTraceError: If any of the five canonical fields is missing
            or the sampled field is not "true"/"false".
    """
    fields: dict[str, Any] = {}
    baggage: dict[str, str] = {}

    for raw_key, value in carrier.items():
        if not isinstance(raw_key, str):
            continue
        key = raw_key.lower() if case_insensitive else raw_key

        if key == FIELD_SAMPLED:
            fields[key] = _decode_sampled(value)
        elif key in CANONICAL_FIELDS:
            fields[key] = value
        elif key.startswith(BAGGAGE_PREFIX):
            baggage[key[len(BAGGAGE_PREFIX) :]] = value

    # Distinct keys: header casings that fold to the same name count once.
    if len(fields) != len(CANONICAL_FIELDS):
        raise CorruptedTraceError("Trace corrupted, require traceId, spanId and sampled")

    return SpanContext(
        span_id=fields[FIELD_SPAN_ID],
        parent_id=fields[FIELD_PARENT_ID],
        trace_id=fields[FIELD_TRACE_ID],
        reference_type=ReferenceType.parse(fields[FIELD_REFERENCE_TYPE]),
        sampled=fields[FIELD_SAMPLED],
        baggage=baggage,
    )
