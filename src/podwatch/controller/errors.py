"""Controller error types."""

from __future__ import annotations


class PodWatchError(RuntimeError):
    """Base class for pod watcher failures."""


class StartupConnectivityError(PodWatchError):
    """The API server could not be reached before watching started."""


class WatchStreamError(PodWatchError):
    """A List or Watch call failed or the stream raised mid-session.

    Transient: the session manager retries it with backoff.
    """


class WatchRetriesExhaustedError(PodWatchError):
    """The reconnect ceiling was reached without a successful event."""

    def __init__(self, attempts: int, cause: str = "") -> None:
        message = f"watch failed after {attempts} retries"
        if cause:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.attempts = attempts
        self.cause = cause


__all__ = [
    "PodWatchError",
    "StartupConnectivityError",
    "WatchRetriesExhaustedError",
    "WatchStreamError",
]
