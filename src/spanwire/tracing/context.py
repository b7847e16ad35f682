"""Span context: the immutable identity and linkage of one span.

A SpanContext is what crosses process boundaries. It is a frozen dataclass
and should never be modified after creation; derive new contexts with
``root()``, ``child()`` or ``with_baggage_item()`` instead.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from spanwire.tracing.ids import generate_id
from spanwire.tracing.types import ReferenceType


def _freeze(baggage: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(baggage or {}))


@dataclass(frozen=True)
class SpanContext:
    """Identity and linkage record for a span.

    For a root context ``span_id == parent_id == trace_id``. For a child,
    ``trace_id`` is inherited, ``parent_id`` is the parent's ``span_id`` and
    ``span_id`` is freshly generated.

    Attributes:
        span_id: This span's identifier.
        parent_id: Identifier of the direct parent (equals span_id for roots).
        trace_id: Identifier shared by every span in the trace.
        reference_type: How this span relates to its parent.
        sampled: Whether the trace is sampled.
        baggage: Key-value pairs propagated alongside the identifiers.
    """

    span_id: str
    parent_id: str
    trace_id: str
    reference_type: ReferenceType = ReferenceType.ROOT
    sampled: bool = True
    baggage: Mapping[str, str] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:  # noqa: D105
        object.__setattr__(self, "reference_type", ReferenceType.parse(self.reference_type))
        object.__setattr__(self, "baggage", _freeze(self.baggage))

    @classmethod
    def root(cls, sampled: bool = True, baggage: Mapping[str, str] | None = None) -> "SpanContext":
        """Create a context that starts a new trace.

        Args:
            sampled: Sampling decision for the trace.
            baggage: Initial baggage items.

        Returns:
            Root SpanContext whose three identifiers are the same fresh id.
        """
        new_id = generate_id()
        return cls(
            span_id=new_id,
            parent_id=new_id,
            trace_id=new_id,
            reference_type=ReferenceType.ROOT,
            sampled=sampled,
            baggage=baggage or {},
        )

    def child(self, reference_type: ReferenceType) -> "SpanContext":
        """Derive the context of a span that references this one.

        Args:
            reference_type: CHILD_OF or FOLLOWS_FROM.

        Returns:
            New SpanContext in the same trace with a fresh span_id. Baggage
            and the sampling decision are inherited.
        """
        return SpanContext(
            span_id=generate_id(),
            parent_id=self.span_id,
            trace_id=self.trace_id,
            reference_type=reference_type,
            sampled=self.sampled,
            baggage=self.baggage,
        )

    def with_baggage_item(self, key: str, value: str) -> "SpanContext":
        """Return a copy of this context with one more baggage item."""
        baggage = dict(self.baggage)
        baggage[key] = value
        return replace(self, baggage=baggage)

    def baggage_items(self) -> Iterator[tuple[str, str]]:
        """Iterate over baggage (key, value) pairs."""
        return iter(self.baggage.items())

    @property
    def is_root(self) -> bool:
        """True when this context starts its trace."""
        return self.reference_type is ReferenceType.ROOT

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict view, used for logging and reports."""
        return {
            "trace_id": self.trace_id,
            "span_id": self.span_id,
            "parent_id": self.parent_id,
            "reference_type": self.reference_type.value,
            "sampled": self.sampled,
            "baggage": dict(self.baggage),
        }
