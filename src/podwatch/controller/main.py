"""podwatch controller entry points.

``run`` starts the long-running watcher; ``health_check`` performs one
connectivity probe for container healthchecks.
"""

from __future__ import annotations

import asyncio
import signal
import sys

from kubernetes import config as k8s_config

from podwatch.config.settings import Settings, get_settings
from podwatch.controller.controller import EXIT_FATAL, EXIT_OK, PodLifecycleController
from podwatch.kubernetes.client import API_ERRORS, PodClient, load_kube_config
from podwatch.lifecycle.emitter import EventEmitter
from podwatch.observability.logging import configure_logging, get_logger
from podwatch.observability.metrics import PodMetrics
from podwatch.observability.server import MetricsServer


logger = get_logger(__name__)

_SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _configure(settings: Settings, log_level: str | None = None) -> None:
    configure_logging(
        level=log_level or settings.observability.log_level,
        format_type=settings.observability.log_format,
    )


async def _run_until_signalled(controller: PodLifecycleController) -> int:
    loop = asyncio.get_running_loop()
    for sig in _SHUTDOWN_SIGNALS:
        loop.add_signal_handler(sig, controller.request_stop)
    try:
        return await controller.run()
    finally:
        for sig in _SHUTDOWN_SIGNALS:
            loop.remove_signal_handler(sig)


def run(namespace: str | None = None, log_level: str | None = None) -> int:
    """Run the pod watcher until a shutdown signal or a fatal error.

    Args:
        namespace: Overrides the configured namespace; empty watches all.
        log_level: Overrides the configured log level.
    """
    settings = get_settings()
    _configure(settings, log_level)
    scope = settings.kubernetes.namespace if namespace is None else namespace

    logger.info(
        "starting_pod_monitor",
        version=settings.version,
        namespace=scope or "all",
        metrics_enabled=settings.observability.metrics_enabled,
    )

    try:
        load_kube_config(settings.kubernetes.kubeconfig)
    except (k8s_config.ConfigException, OSError) as e:
        logger.error("kubernetes_config_failed", error=str(e))
        return EXIT_FATAL

    metrics: PodMetrics | None = None
    server: MetricsServer | None = None
    if settings.observability.metrics_enabled:
        metrics = PodMetrics()
        metrics.set_build_info(settings.version)
        server = MetricsServer(
            metrics.registry,
            host=settings.observability.metrics_host,
            port=settings.observability.metrics_port,
        )
        try:
            server.start()
        except OSError as e:
            logger.error("metrics_server_failed", error=str(e))
            return EXIT_FATAL

    controller = PodLifecycleController.from_settings(
        settings,
        PodClient(watch_timeout_seconds=settings.watch.timeout_seconds),
        EventEmitter(metrics),
        namespace=scope,
        metrics=metrics,
    )

    try:
        exit_code = asyncio.run(_run_until_signalled(controller))
    except KeyboardInterrupt:
        logger.info("pod_monitor_interrupted")
        exit_code = EXIT_OK
    finally:
        if server is not None:
            server.stop()

    if exit_code == EXIT_OK:
        logger.info("pod_monitor_stopped_gracefully")
    return exit_code


def health_check(log_level: str | None = None) -> int:
    """Probe the API server once. Returns 0 when reachable."""
    settings = get_settings()
    _configure(settings, log_level)

    try:
        load_kube_config(settings.kubernetes.kubeconfig)
        PodClient().probe(
            settings.kubernetes.health_check_namespace,
            settings.kubernetes.health_check_timeout,
        )
    except k8s_config.ConfigException as e:
        logger.error("health_check_failed", reason="unable to load kubernetes config", error=str(e))
        return EXIT_FATAL
    except API_ERRORS as e:
        logger.error("health_check_failed", reason="unable to connect to kubernetes api", error=str(e))
        return EXIT_FATAL

    print("Health check passed: pod monitor is healthy")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(run())
