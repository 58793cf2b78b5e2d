"""Pod snapshots and watch notifications.

Everything that crosses the Kubernetes API boundary is converted here into
plain immutable values. Raw watch events become one member of the
``Notification`` union, so the rest of the controller never inspects
API payloads directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class EventType(StrEnum):
    """Watch event kinds delivered by the API server."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    ERROR = "ERROR"


class MalformedPodError(ValueError):
    """Raised when a manifest cannot be interpreted as a Pod."""


@dataclass(frozen=True)
class ContainerStatusSnapshot:
    """The container status fields the lifecycle differ compares."""

    name: str
    ready: bool = False
    restart_count: int = 0


@dataclass(frozen=True)
class PodConditionSnapshot:
    """A single ``status.conditions`` entry."""

    type: str
    status: str


@dataclass(frozen=True)
class PodSnapshot:
    """Last-seen state of one Pod, keyed by its UID."""

    uid: str
    name: str
    namespace: str
    phase: str = ""
    pod_ip: str = ""
    node_name: str = ""
    labels: dict[str, str] = field(default_factory=dict, hash=False)
    container_statuses: tuple[ContainerStatusSnapshot, ...] = ()
    conditions: tuple[PodConditionSnapshot, ...] = ()

    @classmethod
    def from_manifest(cls, manifest: Any) -> PodSnapshot:
        """Build a snapshot from a Pod manifest in API (camelCase) form.

        Raises:
            MalformedPodError: If the manifest is not a Pod or has no UID.
        """
        if not isinstance(manifest, dict):
            msg = f"expected a Pod manifest, got {type(manifest).__name__}"
            raise MalformedPodError(msg)

        kind = manifest.get("kind")
        if kind is not None and kind != "Pod":
            msg = f"expected kind Pod, got {kind}"
            raise MalformedPodError(msg)

        metadata = manifest.get("metadata") or {}
        uid = metadata.get("uid")
        if not uid:
            msg = "pod manifest has no metadata.uid"
            raise MalformedPodError(msg)

        spec = manifest.get("spec") or {}
        status = manifest.get("status") or {}

        return cls(
            uid=str(uid),
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            phase=status.get("phase") or "",
            pod_ip=status.get("podIP") or "",
            node_name=spec.get("nodeName") or "",
            labels=dict(metadata.get("labels") or {}),
            container_statuses=tuple(
                ContainerStatusSnapshot(
                    name=cs.get("name", ""),
                    ready=bool(cs.get("ready", False)),
                    restart_count=int(cs.get("restartCount", 0) or 0),
                )
                for cs in status.get("containerStatuses") or []
            ),
            conditions=tuple(
                PodConditionSnapshot(type=c.get("type", ""), status=c.get("status", ""))
                for c in status.get("conditions") or []
            ),
        )


# ============================================================================
# Notification union
# ============================================================================


@dataclass(frozen=True)
class PodNotification:
    """A well-formed ADDED, MODIFIED or DELETED event for a Pod."""

    kind: EventType
    pod: PodSnapshot


@dataclass(frozen=True)
class ErrorNotification:
    """An ``ERROR`` event surfaced by the API server inside the stream."""

    detail: str
    kind: EventType = EventType.ERROR


@dataclass(frozen=True)
class MalformedNotification:
    """An event whose type or object could not be understood."""

    kind: str
    detail: str


Notification = PodNotification | ErrorNotification | MalformedNotification


def parse_notification(raw: Any) -> Notification:
    """Classify one raw watch event.

    ``raw`` is a mapping with ``type`` and ``object`` keys, where ``object``
    is the manifest in API form. Never raises.
    """
    if not isinstance(raw, dict):
        return MalformedNotification(kind="", detail=f"unexpected event {type(raw).__name__}")

    raw_type = str(raw.get("type", ""))
    obj = raw.get("object")

    if raw_type == EventType.ERROR:
        if isinstance(obj, dict):
            detail = obj.get("message") or obj.get("reason") or str(obj)
        else:
            detail = str(obj)
        return ErrorNotification(detail=str(detail))

    try:
        kind = EventType(raw_type)
    except ValueError:
        return MalformedNotification(kind=raw_type, detail=f"unknown event type {raw_type!r}")

    try:
        pod = PodSnapshot.from_manifest(obj)
    except (MalformedPodError, AttributeError, TypeError, ValueError) as e:
        return MalformedNotification(kind=raw_type, detail=str(e))

    return PodNotification(kind=kind, pod=pod)


__all__ = [
    "ContainerStatusSnapshot",
    "ErrorNotification",
    "EventType",
    "MalformedNotification",
    "MalformedPodError",
    "Notification",
    "PodConditionSnapshot",
    "PodNotification",
    "PodSnapshot",
    "parse_notification",
]
