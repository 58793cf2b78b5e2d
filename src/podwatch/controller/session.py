"""Watch session management.

A session is one full Pod listing followed by a watch resumed from the
listing's resource version, so no change falls between the two. When a
session ends without a stop request the manager backs off quadratically
and opens a new one, until too many sessions in a row fail without
delivering a single Pod event.
"""

from __future__ import annotations

import asyncio
import contextlib
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from podwatch.controller.errors import WatchRetriesExhaustedError, WatchStreamError
from podwatch.controller.state import ControllerState
from podwatch.kubernetes.client import API_ERRORS
from podwatch.kubernetes.models import (
    ErrorNotification,
    MalformedNotification,
    PodNotification,
    PodSnapshot,
    parse_notification,
)
from podwatch.observability.logging import get_logger

if TYPE_CHECKING:
    from podwatch.kubernetes.client import PodListing
    from podwatch.observability.metrics import PodMetrics


DEFAULT_MAX_RECONNECT_ATTEMPTS = 10


class WatchStream(Protocol):
    """An open watch: iterable of raw events that can be told to stop."""

    def __iter__(self) -> Any: ...

    def stop(self) -> None: ...


class PodSource(Protocol):
    """The two API calls a session needs."""

    def list_pods(self, namespace: str = "") -> PodListing: ...

    def watch_pods(self, namespace: str = "", resource_version: str | None = None) -> WatchStream: ...


@dataclass(frozen=True)
class _StreamFailure:
    error: BaseException


_CLOSED = object()
_STOPPED = object()


def backoff_delay(attempt: int, unit: float = 1.0) -> float:
    """Seconds to wait before reconnect ``attempt`` (``attempt²`` units)."""
    return float(attempt * attempt) * unit


async def _sleep_unless_stopped(stop: asyncio.Event, delay: float) -> bool:
    """Sleep ``delay`` seconds; return True if ``stop`` was set meanwhile."""
    try:
        await asyncio.wait_for(stop.wait(), timeout=delay)
    except TimeoutError:
        return False
    return True


class WatchSessionManager:
    """Turns List + Watch sessions into one continuous notification feed."""

    def __init__(
        self,
        source: PodSource,
        namespace: str = "",
        *,
        max_reconnect_attempts: int = DEFAULT_MAX_RECONNECT_ATTEMPTS,
        backoff_unit: float = 1.0,
        metrics: PodMetrics | None = None,
        on_relist: Callable[[list[PodSnapshot]], None] | None = None,
        on_state_change: Callable[[ControllerState], None] | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            source: Client used for List and Watch calls.
            namespace: Namespace to watch; empty watches all namespaces.
            max_reconnect_attempts: Consecutive failed sessions tolerated.
            backoff_unit: Seconds per backoff unit.
            metrics: Metrics state for reconnect counting.
            on_relist: Receives the Pods of every fresh listing.
            on_state_change: Told when the feed connects or starts backing off.
        """
        self.source = source
        self.namespace = namespace
        self.max_reconnect_attempts = max_reconnect_attempts
        self.backoff_unit = backoff_unit
        self.metrics = metrics
        self._on_relist = on_relist
        self._on_state_change = on_state_change
        self._reconnects = 0
        self._log = get_logger(__name__, namespace=self.scope)

    @property
    def reconnect_count(self) -> int:
        """Consecutive failed sessions since the last Pod event."""
        return self._reconnects

    @property
    def scope(self) -> str:
        return self.namespace or "all"

    async def run(self, handle: Callable[[PodNotification], None], stop: asyncio.Event) -> None:
        """Feed Pod notifications to ``handle`` until ``stop`` is set.

        Raises:
            WatchRetriesExhaustedError: When the reconnect ceiling is reached.
        """
        while not stop.is_set():
            try:
                await self._run_session(handle, stop)
                cause = "watch channel closed"
            except WatchStreamError as e:
                cause = str(e)

            if stop.is_set():
                break

            self._reconnects += 1
            if self._reconnects >= self.max_reconnect_attempts:
                self._log.error(
                    "watch_retries_exhausted",
                    attempts=self._reconnects,
                    cause=cause,
                )
                raise WatchRetriesExhaustedError(self.max_reconnect_attempts, cause)

            delay = backoff_delay(self._reconnects, self.backoff_unit)
            self._log.warning(
                "watch_stream_closed",
                cause=cause,
                retry_in_seconds=delay,
                attempt=self._reconnects,
                max_attempts=self.max_reconnect_attempts,
            )
            if self.metrics is not None:
                self.metrics.record_reconnect(self.scope)
            self._notify_state(ControllerState.RECONNECT_BACKOFF)

            if await _sleep_unless_stopped(stop, delay):
                break

        self._log.info("watch_session_stopped")

    async def _run_session(self, handle: Callable[[PodNotification], None], stop: asyncio.Event) -> None:
        try:
            listing = await asyncio.to_thread(self.source.list_pods, self.namespace)
        except API_ERRORS as e:
            raise WatchStreamError(f"failed to list existing pods: {e}") from e

        if self._on_relist is not None:
            self._on_relist(listing.pods)
        self._log.info(
            "pod_watch_session_opened",
            existing_pods=len(listing.pods),
            resource_version=listing.resource_version,
        )

        try:
            stream = self.source.watch_pods(self.namespace, listing.resource_version)
        except API_ERRORS as e:
            raise WatchStreamError(f"failed to create pod watcher: {e}") from e

        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[Any] = asyncio.Queue()
        self._start_pump(stream, loop, queue)

        async def relay_stop() -> None:
            await stop.wait()
            queue.put_nowait(_STOPPED)

        relay = asyncio.create_task(relay_stop())
        self._notify_state(ControllerState.CONNECTED)
        try:
            while True:
                item = await queue.get()
                if item is _STOPPED or stop.is_set():
                    return
                if item is _CLOSED:
                    return
                if isinstance(item, _StreamFailure):
                    raise WatchStreamError(f"watch stream failed: {item.error}") from item.error
                self._dispatch(item, handle)
        finally:
            stream.stop()
            relay.cancel()

    def _start_pump(self, stream: Iterable[Any], loop: asyncio.AbstractEventLoop, queue: asyncio.Queue[Any]) -> None:
        """Read the blocking stream on a daemon thread and hand events to ``queue``."""

        def put(item: Any) -> None:
            # The loop may already be closed if shutdown finished first.
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(queue.put_nowait, item)

        def pump() -> None:
            try:
                for raw in stream:
                    put(raw)
            except Exception as e:  # noqa: BLE001
                put(_StreamFailure(e))
            put(_CLOSED)

        threading.Thread(target=pump, name="podwatch-watch-stream", daemon=True).start()

    def _dispatch(self, raw: Any, handle: Callable[[PodNotification], None]) -> None:
        notification = parse_notification(raw)

        if isinstance(notification, ErrorNotification):
            self._log.warning("watch_error_event", detail=notification.detail)
            return
        if isinstance(notification, MalformedNotification):
            self._log.warning(
                "unexpected_watch_object",
                event_type=notification.kind,
                detail=notification.detail,
            )
            return

        handle(notification)
        self._reconnects = 0

    def _notify_state(self, state: ControllerState) -> None:
        if self._on_state_change is not None:
            self._on_state_change(state)


__all__ = [
    "DEFAULT_MAX_RECONNECT_ATTEMPTS",
    "PodSource",
    "WatchSessionManager",
    "WatchStream",
    "backoff_delay",
]
