"""podwatch Kubernetes package.

Kubernetes API access and the values that cross the API boundary.
"""

from podwatch.kubernetes.client import (
    API_ERRORS,
    PodClient,
    PodListing,
    PodWatchStream,
    load_kube_config,
)
from podwatch.kubernetes.models import (
    ContainerStatusSnapshot,
    ErrorNotification,
    EventType,
    MalformedNotification,
    Notification,
    PodConditionSnapshot,
    PodNotification,
    PodSnapshot,
    parse_notification,
)


__all__ = [
    "API_ERRORS",
    "ContainerStatusSnapshot",
    "ErrorNotification",
    "EventType",
    "MalformedNotification",
    "Notification",
    "PodClient",
    "PodConditionSnapshot",
    "PodListing",
    "PodNotification",
    "PodSnapshot",
    "PodWatchStream",
    "load_kube_config",
    "parse_notification",
]
