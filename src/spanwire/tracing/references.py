"""Span references: the parent links passed to Tracer.start_span."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from spanwire.tracing.context import SpanContext
from spanwire.tracing.types import ReferenceType

if TYPE_CHECKING:
    from spanwire.tracing.span import Span


@dataclass(frozen=True)
class Reference:
    """A typed link from a new span to an existing span or context.

    Attributes:
        kind: Relationship type. Only CHILD_OF and FOLLOWS_FROM are resolvable.
        referenced: The referenced Span or SpanContext. Anything else is
            treated as an invalid reference during resolution.
    """

    kind: ReferenceType | str
    referenced: Any

    def referenced_context(self) -> SpanContext | None:
        """Resolve the referenced object to a SpanContext.

        Returns:
            The context, or None when the referenced object is missing or
            is neither a Span nor a SpanContext.
        """
        from spanwire.tracing.span import Span  # noqa: PLC0415

        if isinstance(self.referenced, Span):
            return self.referenced.context
        if isinstance(self.referenced, SpanContext):
            return self.referenced
        return None


def child_of(referenced: "Span | SpanContext | Any") -> Reference:
    """Build a blocking parent/child reference."""
    return Reference(kind=ReferenceType.CHILD_OF, referenced=referenced)


def follows_from(referenced: "Span | SpanContext | Any") -> Reference:
    """Build a causal, non-blocking reference."""
    return Reference(kind=ReferenceType.FOLLOWS_FROM, referenced=referenced)
