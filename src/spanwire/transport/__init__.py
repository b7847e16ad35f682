"""Transport adapters that carry span contexts across process boundaries."""

from spanwire.transport.adapter import (
    inbound_span,
    inbound_span_async,
    outbound_metadata,
    outbound_span,
)

__all__ = [
    "inbound_span",
    "inbound_span_async",
    "outbound_metadata",
    "outbound_span",
]
