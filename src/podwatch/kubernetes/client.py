"""Kubernetes API access for the pod watcher.

Wraps the official ``kubernetes`` client with the three calls the
controller needs: a full Pod listing, a Pod watch resumed from the
listing's resource version, and a lightweight connectivity probe.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from kubernetes import client, watch
from kubernetes import config as k8s_config
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from podwatch.kubernetes.models import EventType, MalformedPodError, PodSnapshot
from podwatch.observability.logging import get_logger


log = get_logger(__name__)

# Failures of a single API call that a fresh List + Watch may recover from
API_ERRORS: tuple[type[Exception], ...] = (ApiException, HTTPError, OSError)


def load_kube_config(kubeconfig: str | None = None) -> None:
    """Load cluster credentials.

    In-cluster service account configuration is tried first; outside a
    cluster the kubeconfig at ``kubeconfig``, ``$KUBECONFIG`` or
    ``~/.kube/config`` is used.
    """
    try:
        k8s_config.load_incluster_config()
        log.debug("kubernetes_config_loaded", source="in_cluster")
    except k8s_config.ConfigException:
        path = kubeconfig or os.environ.get("KUBECONFIG") or os.path.expanduser("~/.kube/config")
        k8s_config.load_kube_config(config_file=path)
        log.debug("kubernetes_config_loaded", source="kubeconfig", path=path)


@dataclass
class PodListing:
    """Result of a full Pod listing."""

    pods: list[PodSnapshot] = field(default_factory=list)
    resource_version: str | None = None


class PodWatchStream:
    """One open watch registration.

    Iterating yields raw events as ``{"type": ..., "object": manifest}``
    dicts and blocks until the API server sends the next one. Iteration
    ends when the server closes the stream. An error status sent by the
    server is yielded as an ``ERROR`` event, after which the stream ends.
    """

    def __init__(self, watcher: watch.Watch, events: Iterator[dict[str, Any]]) -> None:
        self._watcher = watcher
        self._events = events

    def __iter__(self) -> Iterator[dict[str, Any]]:
        try:
            for event in self._events:
                yield {
                    "type": event.get("type"),
                    "object": event.get("raw_object", event.get("object")),
                }
        except ApiException as e:
            yield {
                "type": EventType.ERROR.value,
                "object": {"code": e.status, "reason": e.reason, "message": str(e.body or "")},
            }

    def stop(self) -> None:
        """Ask the underlying watch to stop after the current event."""
        self._watcher.stop()


class PodClient:
    """List, watch and probe Pods through the Kubernetes CoreV1 API."""

    def __init__(
        self,
        core_api: client.CoreV1Api | None = None,
        watch_timeout_seconds: int | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            core_api: CoreV1 API to call; built from the loaded config when omitted.
            watch_timeout_seconds: Server-side watch timeout. None leaves the
                API server default.
        """
        self.core_api = core_api or client.CoreV1Api()
        self.watch_timeout_seconds = watch_timeout_seconds
        self._api_client = self.core_api.api_client

    def _to_manifest(self, obj: Any) -> Any:
        if isinstance(obj, dict):
            return obj
        return self._api_client.sanitize_for_serialization(obj)

    def list_pods(self, namespace: str = "") -> PodListing:
        """List every Pod in ``namespace`` (all namespaces when empty)."""
        if namespace:
            result = self.core_api.list_namespaced_pod(namespace)
        else:
            result = self.core_api.list_pod_for_all_namespaces()

        listing = PodListing(resource_version=result.metadata.resource_version)
        for item in result.items or []:
            try:
                listing.pods.append(PodSnapshot.from_manifest(self._to_manifest(item)))
            except (MalformedPodError, AttributeError, TypeError, ValueError) as e:
                log.warning("pod_listing_item_skipped", error=str(e))
        return listing

    def watch_pods(self, namespace: str = "", resource_version: str | None = None) -> PodWatchStream:
        """Open a watch on Pods starting at ``resource_version``.

        The stream ends when the API server closes the connection.
        """
        watcher = watch.Watch()
        # Passed even when None: with timeout_seconds present the library
        # returns on server close instead of silently re-watching.
        kwargs: dict[str, Any] = {"timeout_seconds": self.watch_timeout_seconds}
        if resource_version:
            kwargs["resource_version"] = resource_version

        if namespace:
            events = watcher.stream(self.core_api.list_namespaced_pod, namespace, **kwargs)
        else:
            events = watcher.stream(self.core_api.list_pod_for_all_namespaces, **kwargs)
        return PodWatchStream(watcher, events)

    def probe(self, namespace: str = "default", timeout: float = 10.0) -> None:
        """Read one Namespace to prove the API server is reachable.

        Raises:
            ApiException: If the API server rejects the request.
        """
        self.core_api.read_namespace(namespace, _request_timeout=timeout)


__all__ = [
    "API_ERRORS",
    "PodClient",
    "PodListing",
    "PodWatchStream",
    "load_kube_config",
]
