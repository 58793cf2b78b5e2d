"""Pod lifecycle controller.

Wires the watch session manager, the snapshot store, the lifecycle differ
and the event emitter together, and owns the controller state machine:

    Initializing -> Connected <-> ReconnectBackoff -> Draining -> Stopped
                                  ReconnectBackoff -> Fatal
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from podwatch.controller.errors import StartupConnectivityError, WatchRetriesExhaustedError
from podwatch.controller.session import DEFAULT_MAX_RECONNECT_ATTEMPTS, WatchSessionManager
from podwatch.controller.state import ControllerState
from podwatch.kubernetes.client import API_ERRORS
from podwatch.kubernetes.models import EventType, PodNotification, PodSnapshot
from podwatch.lifecycle.differ import describe_changes
from podwatch.lifecycle.events import LifecycleEvent
from podwatch.lifecycle.snapshots import SnapshotStore
from podwatch.observability.logging import get_logger

if TYPE_CHECKING:
    from podwatch.config.settings import Settings
    from podwatch.kubernetes.client import PodClient
    from podwatch.lifecycle.emitter import EventEmitter
    from podwatch.observability.metrics import PodMetrics


EXIT_OK = 0
EXIT_FATAL = 1


class PodLifecycleController:
    """Watches Pods and emits one lifecycle event per observed change."""

    def __init__(
        self,
        client: PodClient,
        emitter: EventEmitter,
        *,
        namespace: str = "",
        max_reconnect_attempts: int = DEFAULT_MAX_RECONNECT_ATTEMPTS,
        backoff_unit: float = 1.0,
        health_check_namespace: str = "default",
        health_check_timeout: float = 10.0,
        metrics: PodMetrics | None = None,
    ) -> None:
        self.client = client
        self.emitter = emitter
        self.namespace = namespace
        self.metrics = metrics
        self.health_check_namespace = health_check_namespace
        self.health_check_timeout = health_check_timeout
        self._log = get_logger(__name__, namespace=namespace or "all")
        self.snapshots = SnapshotStore()
        self.session = WatchSessionManager(
            client,
            namespace,
            max_reconnect_attempts=max_reconnect_attempts,
            backoff_unit=backoff_unit,
            metrics=metrics,
            on_relist=self._seed,
            on_state_change=self._on_session_state,
        )
        self._state = ControllerState.INITIALIZING
        self._stop = asyncio.Event()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: PodClient,
        emitter: EventEmitter,
        *,
        namespace: str | None = None,
        metrics: PodMetrics | None = None,
    ) -> PodLifecycleController:
        """Build a controller from application settings."""
        return cls(
            client,
            emitter,
            namespace=settings.kubernetes.namespace if namespace is None else namespace,
            max_reconnect_attempts=settings.watch.max_reconnect_attempts,
            backoff_unit=settings.watch.backoff_unit_seconds,
            health_check_namespace=settings.kubernetes.health_check_namespace,
            health_check_timeout=settings.kubernetes.health_check_timeout,
            metrics=metrics,
        )

    @property
    def state(self) -> ControllerState:
        return self._state

    def _set_state(self, state: ControllerState) -> None:
        if state != self._state:
            self._log.debug("controller_state_changed", previous=self._state.value, state=state.value)
            self._state = state

    def _on_session_state(self, state: ControllerState) -> None:
        if self._state in (ControllerState.DRAINING, ControllerState.STOPPED, ControllerState.FATAL):
            return
        self._set_state(state)

    def request_stop(self) -> None:
        """Begin a cooperative shutdown.

        The notification being processed finishes; no new session opens.
        """
        if self._state.is_terminal:
            return
        self._log.info("shutdown_requested")
        self._set_state(ControllerState.DRAINING)
        self._stop.set()

    async def check_connectivity(self) -> None:
        """Probe the API server.

        Raises:
            StartupConnectivityError: If the probe fails.
        """
        try:
            await asyncio.to_thread(
                self.client.probe,
                self.health_check_namespace,
                self.health_check_timeout,
            )
        except API_ERRORS as e:
            msg = f"failed to connect to Kubernetes API: {e}"
            raise StartupConnectivityError(msg) from e

    async def run(self) -> int:
        """Run until stopped. Returns the process exit code."""
        self._set_state(ControllerState.INITIALIZING)
        try:
            await self.check_connectivity()
        except StartupConnectivityError as e:
            self._log.error("kubernetes_connectivity_failed", error=str(e))
            self._set_state(ControllerState.FATAL)
            return EXIT_FATAL

        self._log.info("kubernetes_connected")

        try:
            await self.session.run(self.handle, self._stop)
        except WatchRetriesExhaustedError as e:
            self._log.error("pod_monitor_failed", error=str(e), attempts=e.attempts)
            self._set_state(ControllerState.FATAL)
            return EXIT_FATAL

        self._set_state(ControllerState.DRAINING)
        self._set_state(ControllerState.STOPPED)
        self._log.info("pod_monitor_stopped")
        return EXIT_OK

    def _seed(self, pods: list[PodSnapshot]) -> None:
        self.snapshots.replace(pods)
        if self.metrics is not None:
            self.metrics.resync(pods)

    def handle(self, notification: PodNotification) -> None:
        """Route one Pod notification to the snapshot store and emitter."""
        pod = notification.pod

        if notification.kind == EventType.ADDED:
            if pod.uid in self.snapshots:
                self._log.debug("pod_already_known", pod=f"{pod.namespace}/{pod.name}", uid=pod.uid)
                return
            self.emitter.emit(LifecycleEvent.from_pod(EventType.ADDED, pod, "New pod created"))
            self.snapshots.put(pod)

        elif notification.kind == EventType.DELETED:
            self.emitter.emit(LifecycleEvent.from_pod(EventType.DELETED, pod, "Pod deleted"))
            self.snapshots.remove(pod.uid)

        elif notification.kind == EventType.MODIFIED:
            previous = self.snapshots.get(pod.uid)
            if previous is None:
                event = LifecycleEvent.from_pod(
                    EventType.MODIFIED, pod, "New pod detected during watch"
                )
            else:
                event = LifecycleEvent.from_pod(
                    EventType.MODIFIED,
                    pod,
                    "Pod updated",
                    reason=describe_changes(previous, pod),
                )
            self.emitter.emit(event)
            self.snapshots.put(pod)


__all__ = ["EXIT_FATAL", "EXIT_OK", "PodLifecycleController"]
