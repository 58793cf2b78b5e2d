"""Change descriptions between two observations of the same Pod."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from podwatch.kubernetes.models import PodSnapshot


NO_TRACKED_CHANGE = "Metadata or spec updated"


def describe_changes(old: PodSnapshot, new: PodSnapshot) -> str:
    """Describe what changed from ``old`` to ``new``.

    Checks run in a fixed order: phase, then container statuses compared
    by position up to the shorter list, then conditions matched by type.
    All findings are joined with ``"; "``. When none of those fields
    differ the result is ``NO_TRACKED_CHANGE``.
    """
    reasons: list[str] = []

    if old.phase != new.phase:
        reasons.append(f"Phase changed from {old.phase} to {new.phase}")

    for old_cs, new_cs in zip(old.container_statuses, new.container_statuses, strict=False):
        if new_cs.ready != old_cs.ready:
            reasons.append(
                f"Container {new_cs.name} readiness changed to {str(new_cs.ready).lower()}"
            )
        if new_cs.restart_count != old_cs.restart_count:
            reasons.append(
                f"Container {new_cs.name} restart count changed to {new_cs.restart_count}"
            )

    for condition in new.conditions:
        previous = next((c for c in old.conditions if c.type == condition.type), None)
        if previous is None:
            reasons.append(f"New condition {condition.type}: {condition.status}")
        elif previous.status != condition.status:
            reasons.append(f"Condition {condition.type} changed to {condition.status}")

    if not reasons:
        return NO_TRACKED_CHANGE
    return "; ".join(reasons)


__all__ = ["NO_TRACKED_CHANGE", "describe_changes"]
