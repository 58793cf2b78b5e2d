"""Pytest configuration and fixtures for podwatch tests."""

from __future__ import annotations

import threading
from collections.abc import Callable, Generator, Iterator
from dataclasses import dataclass, field
from typing import Any

import pytest
from prometheus_client import CollectorRegistry

from podwatch.kubernetes.client import PodListing
from podwatch.kubernetes.models import PodSnapshot
from podwatch.observability.metrics import PodMetrics


@pytest.fixture(autouse=True)
def reset_settings() -> Generator[None, None, None]:
    """Reset settings cache before each test."""
    from podwatch.config.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ============================================================================
# Pod manifests
# ============================================================================


def build_pod(
    name: str = "p1",
    *,
    uid: str | None = None,
    namespace: str = "default",
    phase: str = "Pending",
    node: str = "node-1",
    pod_ip: str = "10.0.0.5",
    labels: dict[str, str] | None = None,
    containers: list[dict[str, Any]] | None = None,
    conditions: list[dict[str, str]] | None = None,
) -> dict[str, Any]:
    """Pod manifest in the camelCase form the API server returns."""
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "uid": uid or f"uid-{name}",
            "labels": labels if labels is not None else {"app": name},
        },
        "spec": {
            "nodeName": node,
            "containers": [{"name": "app", "image": "nginx:latest"}],
        },
        "status": {
            "phase": phase,
            "podIP": pod_ip,
            "containerStatuses": containers if containers is not None else [],
            "conditions": conditions if conditions is not None else [],
        },
    }


@pytest.fixture
def make_pod() -> Callable[..., dict[str, Any]]:
    """Factory for Pod manifests."""
    return build_pod


@pytest.fixture
def make_snapshot() -> Callable[..., PodSnapshot]:
    """Factory for Pod snapshots."""

    def _make(name: str = "p1", **kwargs: Any) -> PodSnapshot:
        return PodSnapshot.from_manifest(build_pod(name, **kwargs))

    return _make


@pytest.fixture
def sample_pod_event() -> dict[str, Any]:
    """Sample watch event for a running pod."""
    return {
        "type": "MODIFIED",
        "object": build_pod(
            "test-pod",
            uid="test-uid-12345",
            phase="Running",
            containers=[{"name": "main", "ready": True, "restartCount": 0}],
            conditions=[{"type": "Ready", "status": "True"}],
        ),
    }


# ============================================================================
# Fake Kubernetes API
# ============================================================================


class FakeWatchStream:
    """Iterable of raw watch events.

    With ``hold_open`` the stream blocks after its events until stopped,
    like a quiet but healthy watch connection.
    """

    def __init__(self, events: list[Any], hold_open: bool = False) -> None:
        self.events = list(events)
        self.hold_open = hold_open
        self.stopped = threading.Event()

    def __iter__(self) -> Iterator[Any]:
        for event in self.events:
            if self.stopped.is_set():
                return
            yield event
        if self.hold_open:
            self.stopped.wait(timeout=30)

    def stop(self) -> None:
        self.stopped.set()


@dataclass
class FakeSession:
    """What one List + Watch round returns."""

    pods: list[dict[str, Any]] = field(default_factory=list)
    events: list[Any] = field(default_factory=list)
    hold_open: bool = False
    resource_version: str = "100"
    list_error: Exception | None = None


class FakePodSource:
    """Stand-in for ``PodClient`` serving scripted sessions in order.

    Once the script runs out every further session is an empty stream
    held open until stopped.
    """

    def __init__(self, sessions: list[FakeSession] | None = None, probe_error: Exception | None = None) -> None:
        self.sessions = list(sessions or [])
        self.probe_error = probe_error
        self.list_calls: list[str] = []
        self.watch_calls: list[tuple[str, str | None]] = []
        self.probe_calls: list[tuple[str, float]] = []
        self.streams: list[FakeWatchStream] = []
        self._current = FakeSession(hold_open=True)

    def list_pods(self, namespace: str = "") -> PodListing:
        self.list_calls.append(namespace)
        self._current = self.sessions.pop(0) if self.sessions else FakeSession(hold_open=True)
        if self._current.list_error is not None:
            raise self._current.list_error
        return PodListing(
            pods=[PodSnapshot.from_manifest(p) for p in self._current.pods],
            resource_version=self._current.resource_version,
        )

    def watch_pods(self, namespace: str = "", resource_version: str | None = None) -> FakeWatchStream:
        self.watch_calls.append((namespace, resource_version))
        stream = FakeWatchStream(self._current.events, hold_open=self._current.hold_open)
        self.streams.append(stream)
        return stream

    def probe(self, namespace: str = "default", timeout: float = 10.0) -> None:
        self.probe_calls.append((namespace, timeout))
        if self.probe_error is not None:
            raise self.probe_error


@pytest.fixture
def fake_source_factory() -> Callable[..., FakePodSource]:
    """Factory for scripted fake Pod sources."""
    return FakePodSource


@pytest.fixture
def fake_session() -> type[FakeSession]:
    """The scripted session type."""
    return FakeSession


@pytest.fixture
def metrics() -> PodMetrics:
    """Metrics bound to an isolated registry."""
    return PodMetrics(CollectorRegistry())
