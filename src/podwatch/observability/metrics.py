"""Prometheus metrics for podwatch.

``PodMetrics`` owns its own registry and is handed to the components that
write to it, so nothing here is a process-wide singleton. Metric writes
come from the watch consumer while the HTTP server thread reads them.
"""

from __future__ import annotations

import threading
from collections import Counter as Tally
from collections.abc import Iterable
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Gauge, Info

if TYPE_CHECKING:
    from podwatch.kubernetes.models import PodSnapshot


class PodMetrics:
    """Counters and gauges describing observed Pod lifecycles.

    Exposes:
    - ``events_total{namespace,event_type,phase}``
    - ``active_pods{namespace,phase}``
    - ``watcher_reconnects_total{namespace}``
    - ``last_event_timestamp{namespace}``
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics.

        Args:
            registry: Registry to register into. A fresh one is created
                when omitted.
        """
        self.registry = registry if registry is not None else CollectorRegistry()

        self.info = Info(
            "podwatch_build",
            "podwatch build information",
            registry=self.registry,
        )

        self.events_total = Counter(
            "events_total",
            "Pod lifecycle events observed",
            ["namespace", "event_type", "phase"],
            registry=self.registry,
        )

        self.active_pods = Gauge(
            "active_pods",
            "Currently known Pods by phase",
            ["namespace", "phase"],
            registry=self.registry,
        )

        self.watcher_reconnects_total = Counter(
            "watcher_reconnects_total",
            "Watch stream re-establishments",
            ["namespace"],
            registry=self.registry,
        )

        self.last_event_timestamp = Gauge(
            "last_event_timestamp",
            "Unix time of the last lifecycle event",
            ["namespace"],
            registry=self.registry,
        )

        # uid -> (namespace, phase)
        self._active: dict[str, tuple[str, str]] = {}
        self._published: set[tuple[str, str]] = set()
        self._lock = threading.Lock()

    def set_build_info(self, version: str) -> None:
        """Set build information metrics."""
        self.info.info({"version": version})

    def record_event(self, namespace: str, event_type: str, phase: str, timestamp: float) -> None:
        """Count one lifecycle event and stamp its namespace."""
        self.events_total.labels(namespace=namespace, event_type=event_type, phase=phase).inc()
        self.last_event_timestamp.labels(namespace=namespace).set(timestamp)

    def record_reconnect(self, namespace: str) -> None:
        """Count one watch re-establishment."""
        self.watcher_reconnects_total.labels(namespace=namespace).inc()

    def upsert_pod(self, uid: str, namespace: str, phase: str) -> None:
        """Track ``uid`` in ``phase`` and republish ``active_pods``."""
        with self._lock:
            self._active[uid] = (namespace, phase)
            self._publish_active()

    def remove_pod(self, uid: str) -> None:
        """Forget ``uid`` and republish ``active_pods``."""
        with self._lock:
            self._active.pop(uid, None)
            self._publish_active()

    def resync(self, pods: Iterable[PodSnapshot]) -> None:
        """Replace the tracked Pods with a fresh listing."""
        with self._lock:
            self._active = {pod.uid: (pod.namespace, pod.phase) for pod in pods}
            self._publish_active()

    def _publish_active(self) -> None:
        # Full re-aggregation; label sets that emptied out drop to zero.
        counts = Tally(self._active.values())
        current = set(counts)
        for namespace, phase in self._published - current:
            self.active_pods.labels(namespace=namespace, phase=phase).set(0)
        for (namespace, phase), count in counts.items():
            self.active_pods.labels(namespace=namespace, phase=phase).set(count)
        self._published |= current


__all__ = ["PodMetrics"]
