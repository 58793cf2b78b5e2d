"""Lifecycle event output.

Each event produces a JSON record followed by a one-line summary on
stdout, in that order, and is folded into the injected metrics.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

from pydantic_core import PydanticSerializationError

from podwatch.kubernetes.models import EventType
from podwatch.observability.logging import get_logger

if TYPE_CHECKING:
    from podwatch.lifecycle.events import LifecycleEvent
    from podwatch.observability.metrics import PodMetrics


log = get_logger(__name__)


def summarize(event: LifecycleEvent) -> str:
    """Human-readable summary line for ``event``."""
    if event.event_type == EventType.ADDED:
        return (
            f"NEW POD CREATED: {event.pod_name} in namespace {event.namespace} "
            f"(Phase: {event.phase}, Node: {event.node_name or ''})"
        )
    if event.event_type == EventType.DELETED:
        return f"POD DELETED: {event.pod_name} in namespace {event.namespace}"
    return (
        f"POD UPDATED: {event.pod_name} in namespace {event.namespace} "
        f"(Phase: {event.phase}, Reason: {event.reason or ''})"
    )


class EventEmitter:
    """Writes lifecycle events to the log sink and updates metrics."""

    def __init__(self, metrics: PodMetrics | None = None, stream: TextIO | None = None) -> None:
        """Initialize the emitter.

        Args:
            metrics: Metrics state to update, or None when metrics are disabled.
            stream: Output stream; stdout when omitted.
        """
        self.metrics = metrics
        self._stream = stream

    def emit(self, event: LifecycleEvent) -> None:
        """Publish one event. Never raises on serialization problems."""
        try:
            record: str | None = event.to_json()
        except (PydanticSerializationError, TypeError, ValueError) as e:
            log.error(
                "lifecycle_event_serialization_failed",
                pod=event.pod_name,
                namespace=event.namespace,
                event_type=str(event.event_type),
                error=str(e),
            )
            record = None

        if record is not None:
            self._write(record)
        self._write(summarize(event))

        if self.metrics is not None:
            self._record_metrics(self.metrics, event)

    def _write(self, line: str) -> None:
        stream = self._stream or sys.stdout
        stream.write(line + "\n")
        stream.flush()

    def _record_metrics(self, metrics: PodMetrics, event: LifecycleEvent) -> None:
        metrics.record_event(
            namespace=event.namespace,
            event_type=event.event_type.value,
            phase=event.phase,
            timestamp=event.timestamp.timestamp(),
        )
        if event.event_type == EventType.DELETED:
            metrics.remove_pod(event.pod_uid)
        else:
            metrics.upsert_pod(event.pod_uid, event.namespace, event.phase)


__all__ = ["EventEmitter", "summarize"]
