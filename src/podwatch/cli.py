"""podwatch command line interface.

Starts the pod watcher or runs a one-off connectivity probe.
"""

from __future__ import annotations

import argparse
import sys
from typing import TYPE_CHECKING

from podwatch.version import __version__

if TYPE_CHECKING:
    from argparse import Namespace


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="podwatch",
        description="podwatch - Kubernetes Pod lifecycle watcher",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  podwatch run                      Watch pods in the configured namespace
  podwatch run --namespace web      Watch pods in namespace "web"
  podwatch health-check             Probe the Kubernetes API once
  podwatch --health-check           Same, for container healthchecks
        """,
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v enables debug logging)",
    )

    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Probe the Kubernetes API and exit without watching",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Start the pod watcher")
    run_parser.add_argument(
        "--namespace",
        "-n",
        type=str,
        default=None,
        help="Namespace to watch (default: PODWATCH_K8S_NAMESPACE, empty = all namespaces)",
    )

    # Health check command
    subparsers.add_parser("health-check", help="Probe the Kubernetes API and exit")

    return parser


def _log_level(args: Namespace) -> str | None:
    """Log level override from -v, or None to keep the configured level."""
    return "DEBUG" if args.verbose else None


def run_watcher(args: Namespace) -> int:
    """Start the pod watcher."""
    from podwatch.controller.main import run

    return run(namespace=getattr(args, "namespace", None), log_level=_log_level(args))


def run_health_check(args: Namespace) -> int:
    """Probe the Kubernetes API once."""
    from podwatch.controller.main import health_check

    return health_check(log_level=_log_level(args))


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.health_check:
        return run_health_check(args)

    # Watching is the default when no command is given
    command = args.command or "run"

    command_handlers = {
        "run": run_watcher,
        "health-check": run_health_check,
    }

    handler = command_handlers.get(command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
