"""In-memory store of last-seen Pod state."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from podwatch.kubernetes.models import PodSnapshot


class SnapshotStore:
    """Last-seen ``PodSnapshot`` per Pod UID.

    Only the watch consumer touches the store, so it is not locked.
    """

    def __init__(self) -> None:
        self._pods: dict[str, PodSnapshot] = {}

    def __len__(self) -> int:
        return len(self._pods)

    def __contains__(self, uid: object) -> bool:
        return uid in self._pods

    def __iter__(self) -> Iterator[PodSnapshot]:
        return iter(list(self._pods.values()))

    def get(self, uid: str) -> PodSnapshot | None:
        return self._pods.get(uid)

    def put(self, pod: PodSnapshot) -> None:
        self._pods[pod.uid] = pod

    def remove(self, uid: str) -> PodSnapshot | None:
        return self._pods.pop(uid, None)

    def replace(self, pods: Iterable[PodSnapshot]) -> None:
        """Drop everything and seed from a fresh listing."""
        self._pods = {pod.uid: pod for pod in pods}


__all__ = ["SnapshotStore"]
