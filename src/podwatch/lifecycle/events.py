"""Lifecycle event record emitted once per observed Pod change."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from podwatch.kubernetes.models import EventType, PodSnapshot


class LifecycleEvent(BaseModel):
    """Immutable record of one observed Pod change."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    event_type: EventType
    pod_uid: str
    pod_name: str
    namespace: str
    pod_ip: str | None = None
    node_name: str | None = None
    phase: str
    labels: dict[str, str] | None = None
    message: str
    reason: str | None = None

    @classmethod
    def from_pod(
        cls,
        event_type: EventType,
        pod: PodSnapshot,
        message: str,
        reason: str | None = None,
    ) -> LifecycleEvent:
        """Build an event from the snapshot the notification carried."""
        return cls(
            event_type=event_type,
            pod_uid=pod.uid,
            pod_name=pod.name,
            namespace=pod.namespace,
            pod_ip=pod.pod_ip or None,
            node_name=pod.node_name or None,
            phase=pod.phase,
            labels=dict(pod.labels) or None,
            message=message,
            reason=reason,
        )

    def to_json(self) -> str:
        """Serialize as one JSON line, omitting empty optional fields."""
        return self.model_dump_json(exclude_none=True)


__all__ = ["LifecycleEvent"]
