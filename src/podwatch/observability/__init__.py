"""podwatch observability package.

Logging and metrics for the pod watcher.
"""

from podwatch.observability.logging import configure_logging, get_logger
from podwatch.observability.metrics import PodMetrics
from podwatch.observability.server import MetricsServer

__all__ = ["configure_logging", "get_logger", "MetricsServer", "PodMetrics"]
