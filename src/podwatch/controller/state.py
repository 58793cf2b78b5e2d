"""Controller lifecycle states."""

from __future__ import annotations

from enum import StrEnum


class ControllerState(StrEnum):
    """Where the controller is in its lifecycle.

    ``STOPPED`` and ``FATAL`` are terminal.
    """

    INITIALIZING = "Initializing"
    CONNECTED = "Connected"
    RECONNECT_BACKOFF = "ReconnectBackoff"
    DRAINING = "Draining"
    STOPPED = "Stopped"
    FATAL = "Fatal"

    @property
    def is_terminal(self) -> bool:
        return self in (ControllerState.STOPPED, ControllerState.FATAL)


__all__ = ["ControllerState"]
