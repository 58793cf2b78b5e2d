"""kube-podwatch - Kubernetes Pod lifecycle watcher.

A long-running controller that watches Pods, emits structured lifecycle
events to stdout and exports Prometheus metrics about what it saw.
"""

from podwatch.version import __version__


__all__ = ["__version__"]
