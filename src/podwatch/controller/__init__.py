"""podwatch controller package.

The watch session manager, the lifecycle controller and its entry points.
"""

from podwatch.controller.controller import EXIT_FATAL, EXIT_OK, PodLifecycleController
from podwatch.controller.errors import (
    PodWatchError,
    StartupConnectivityError,
    WatchRetriesExhaustedError,
    WatchStreamError,
)
from podwatch.controller.session import WatchSessionManager, backoff_delay
from podwatch.controller.state import ControllerState


__all__ = [
    "EXIT_FATAL",
    "EXIT_OK",
    "ControllerState",
    "PodLifecycleController",
    "PodWatchError",
    "StartupConnectivityError",
    "WatchRetriesExhaustedError",
    "WatchSessionManager",
    "WatchStreamError",
    "backoff_delay",
]
