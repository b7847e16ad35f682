"""Process-local buffer of recoverable anomalies seen by a tracer."""

import threading
from typing import Any

from spanwire.telemetry import TRACER_DIAGNOSTIC, get_logger
from spanwire.tracing.types import InternalEvent

log = get_logger(__name__)


class DiagnosticsBuffer:
    """Thread-safe, append-only list of InternalEvent records.

    Every record is also emitted as a ``tracer_diagnostic`` warning so the
    anomaly reaches the structured log even if nobody inspects the buffer.

    Args:
        component_name: Component name attached to emitted log events.
    """

    def __init__(self, component_name: str) -> None:  # noqa: D107
        self._component_name = component_name
        self._events: list[InternalEvent] = []
        self._lock = threading.Lock()

    def record(self, message: str, payload: Any = None) -> InternalEvent:
        """Append a diagnostic record.

        Args:
            message: Description of the anomaly.
            payload: Optional offending value.

        Returns:
            The stored InternalEvent.
        """
        event = InternalEvent(message=message, payload=payload)
        with self._lock:
            self._events.append(event)
        log.warning(
            TRACER_DIAGNOSTIC,
            tracer_component=self._component_name,
            message=message,
            payload=repr(payload) if payload is not None else None,
        )
        return event

    def snapshot(self) -> list[InternalEvent]:
        """Copy of the records in insertion order."""
        with self._lock:
            return list(self._events)
