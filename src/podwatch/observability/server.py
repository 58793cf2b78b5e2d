"""HTTP endpoint for Prometheus scraping and liveness checks.

Serves ``/metrics`` from a ``PodMetrics`` registry and ``/healthz`` with a
plain ``OK``. Runs on a daemon thread next to the watch consumer and handles each
request on its own thread, so a slow scrape never blocks a liveness probe.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer
from prometheus_client.registry import CollectorRegistry

from podwatch.observability.logging import get_logger


log = get_logger(__name__)

HEALTH_PATH = "/healthz"

StartResponse = Callable[..., Any]


class _QuietHandler(WSGIRequestHandler):
    """Request handler that keeps scrape traffic out of the log stream."""

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        return


def create_app(registry: CollectorRegistry) -> Callable[[dict[str, Any], StartResponse], Iterable[bytes]]:
    """Build the WSGI app that answers liveness probes and metric scrapes."""
    metrics_app = make_wsgi_app(registry)

    def app(environ: dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
        if environ.get("PATH_INFO") == HEALTH_PATH:
            start_response("200 OK", [("Content-Type", "text/plain; charset=utf-8")])
            return [b"OK"]
        return metrics_app(environ, start_response)

    return app


class MetricsServer:
    """Background metrics and liveness server."""

    def __init__(self, registry: CollectorRegistry, host: str = "0.0.0.0", port: int = 8080) -> None:  # noqa: S104
        self.registry = registry
        self.host = host
        self.port = port
        self._server: WSGIServer | None = None
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Bind the listening socket and start serving."""
        self._server = make_server(
            self.host,
            self.port,
            create_app(self.registry),
            server_class=ThreadingWSGIServer,
            handler_class=_QuietHandler,
        )
        self.port = self._server.server_port
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name="podwatch-metrics",
            daemon=True,
        )
        self._thread.start()
        log.info("metrics_server_started", host=self.host, port=self.port)

    def stop(self) -> None:
        """Stop serving and release the socket."""
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        self._server = None
        log.info("metrics_server_stopped")


__all__ = ["HEALTH_PATH", "MetricsServer", "create_app"]
