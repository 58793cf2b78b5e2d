"""podwatch lifecycle package.

Snapshot tracking, change descriptions and event output.
"""

from podwatch.lifecycle.differ import NO_TRACKED_CHANGE, describe_changes
from podwatch.lifecycle.emitter import EventEmitter, summarize
from podwatch.lifecycle.events import LifecycleEvent
from podwatch.lifecycle.snapshots import SnapshotStore


__all__ = [
    "NO_TRACKED_CHANGE",
    "EventEmitter",
    "LifecycleEvent",
    "SnapshotStore",
    "describe_changes",
    "summarize",
]
