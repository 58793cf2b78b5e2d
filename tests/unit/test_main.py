"""Unit tests for the controller entry points."""

from __future__ import annotations

import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from kubernetes import config as k8s_config
from kubernetes.client.rest import ApiException

from podwatch.controller.main import health_check, run


def _controller(exit_code: int) -> MagicMock:
    controller = MagicMock()
    controller.run = AsyncMock(return_value=exit_code)
    controller.request_stop = lambda: None
    return controller


@pytest.fixture(autouse=True)
def configure_logging_mock():
    """Keep entry points from reconfiguring the root logger."""
    with patch("podwatch.controller.main.configure_logging") as mock_configure:
        yield mock_configure


class TestHealthCheck:
    """Tests for the one-shot probe."""

    def test_passes(self, capsys: pytest.CaptureFixture[str]) -> None:
        with (
            patch("podwatch.controller.main.load_kube_config"),
            patch("podwatch.controller.main.PodClient") as mock_client,
        ):
            assert health_check() == 0

        mock_client.return_value.probe.assert_called_once_with("default", 10.0)
        assert "Health check passed: pod monitor is healthy" in capsys.readouterr().out

    def test_api_unreachable(self, capsys: pytest.CaptureFixture[str]) -> None:
        with (
            patch("podwatch.controller.main.load_kube_config"),
            patch("podwatch.controller.main.PodClient") as mock_client,
        ):
            mock_client.return_value.probe.side_effect = ApiException(status=500, reason="boom")
            assert health_check() == 1

        assert "Health check passed" not in capsys.readouterr().out

    def test_config_missing(self) -> None:
        with patch(
            "podwatch.controller.main.load_kube_config",
            side_effect=k8s_config.ConfigException("no config"),
        ):
            assert health_check() == 1


class TestRun:
    """Tests for the watcher entry point."""

    def test_config_missing(self) -> None:
        with patch(
            "podwatch.controller.main.load_kube_config",
            side_effect=k8s_config.ConfigException("no config"),
        ):
            assert run() == 1

    def test_runs_controller(self) -> None:
        controller = _controller(0)

        with (
            patch.dict(os.environ, {"PODWATCH_OBSERVABILITY_METRICS_ENABLED": "false"}),
            patch("podwatch.controller.main.load_kube_config"),
            patch("podwatch.controller.main.PodClient"),
            patch(
                "podwatch.controller.main.PodLifecycleController.from_settings",
                return_value=controller,
            ) as from_settings,
        ):
            assert run(namespace="web") == 0

        controller.run.assert_awaited_once()
        assert from_settings.call_args.kwargs["namespace"] == "web"
        assert from_settings.call_args.kwargs["metrics"] is None

    def test_fatal_exit_code_is_returned(self) -> None:
        controller = _controller(1)

        with (
            patch.dict(os.environ, {"PODWATCH_OBSERVABILITY_METRICS_ENABLED": "false"}),
            patch("podwatch.controller.main.load_kube_config"),
            patch("podwatch.controller.main.PodClient"),
            patch(
                "podwatch.controller.main.PodLifecycleController.from_settings",
                return_value=controller,
            ),
        ):
            assert run() == 1

    def test_metrics_server_started_and_stopped(self) -> None:
        controller = _controller(0)

        with (
            patch.dict(os.environ, {"PODWATCH_OBSERVABILITY_METRICS_ENABLED": "true"}),
            patch("podwatch.controller.main.load_kube_config"),
            patch("podwatch.controller.main.PodClient"),
            patch("podwatch.controller.main.MetricsServer") as mock_server,
            patch(
                "podwatch.controller.main.PodLifecycleController.from_settings",
                return_value=controller,
            ) as from_settings,
        ):
            assert run() == 0

        mock_server.return_value.start.assert_called_once()
        mock_server.return_value.stop.assert_called_once()
        assert from_settings.call_args.kwargs["metrics"] is not None

    def test_log_level_override(self, configure_logging_mock: MagicMock) -> None:
        controller = _controller(0)

        with (
            patch.dict(
                os.environ,
                {
                    "PODWATCH_OBSERVABILITY_METRICS_ENABLED": "false",
                    "PODWATCH_OBSERVABILITY_LOG_LEVEL": "WARNING",
                    "PODWATCH_WATCH_TIMEOUT_SECONDS": "300",
                },
            ),
            patch("podwatch.controller.main.load_kube_config"),
            patch("podwatch.controller.main.PodClient") as mock_client,
            patch(
                "podwatch.controller.main.PodLifecycleController.from_settings",
                return_value=controller,
            ),
        ):
            assert run(log_level="DEBUG") == 0

        assert configure_logging_mock.call_args.kwargs["level"] == "DEBUG"
        mock_client.assert_called_once_with(watch_timeout_seconds=300)

    def test_configured_log_level_without_override(self, configure_logging_mock: MagicMock) -> None:
        with (
            patch.dict(os.environ, {"PODWATCH_OBSERVABILITY_LOG_LEVEL": "WARNING"}),
            patch("podwatch.controller.main.load_kube_config"),
            patch("podwatch.controller.main.PodClient"),
        ):
            assert health_check() == 0

        assert configure_logging_mock.call_args.kwargs["level"] == "WARNING"
