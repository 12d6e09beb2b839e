"""CLI serve command.

This module provides the ``minfo serve`` command that runs the web UI and
JSON API as a long-lived service.
"""

from __future__ import annotations

import asyncio
import errno
import logging
import os
import signal
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import click
from aiohttp import web

from minfo import __version__
from minfo.cli import load_cli_config
from minfo.cli.exit_codes import ExitCode
from minfo.config.models import MinfoConfig
from minfo.server.app import create_app
from minfo.tools.detection import check_tool_availability

logger = logging.getLogger(__name__)

# SIGTERM from the container runtime, SIGINT from Ctrl+C
SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGINT)


@contextmanager
def shutdown_on_signals(event: asyncio.Event) -> Iterator[None]:
    """Set event when a shutdown signal arrives, for the block's duration."""
    loop = asyncio.get_running_loop()

    def _on_signal(sig: signal.Signals) -> None:
        logger.info("Received %s, shutting down", sig.name)
        event.set()

    installed = []
    for sig in SHUTDOWN_SIGNALS:
        try:
            loop.add_signal_handler(sig, _on_signal, sig)
        except (ValueError, RuntimeError, NotImplementedError) as e:
            logger.warning("Cannot handle %s: %s", sig.name, e)
        else:
            installed.append(sig)
    try:
        yield
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


async def run_server(config: MinfoConfig) -> int:
    """Run the HTTP server until SIGTERM or SIGINT.

    Args:
        config: Application configuration.

    Returns:
        Exit code (0 for clean shutdown, non-zero for errors).
    """
    server = config.server
    shutdown_event = asyncio.Event()

    app = create_app(config)
    runner = web.AppRunner(app, shutdown_timeout=server.shutdown_timeout)
    await runner.setup()

    try:
        with shutdown_on_signals(shutdown_event):
            site = web.TCPSite(runner, server.bind, server.port)
            await site.start()

            logger.info(
                "minfo %s listening on http://%s:%d (PID %d)",
                __version__,
                server.bind,
                server.port,
                os.getpid(),
            )
            logger.info("Media root: %s", server.media_root)

            await shutdown_event.wait()
            logger.info(
                "Waiting up to %.1fs for in-flight requests",
                server.shutdown_timeout,
            )
    except OSError as e:
        if e.errno == errno.EADDRINUSE:
            logger.error("Port %d is already in use", server.port)
        elif e.errno == errno.EADDRNOTAVAIL:
            logger.error("Cannot bind to address %s", server.bind)
        else:
            logger.error("Server error: %s", e)
        return ExitCode.SERVER_ERROR
    finally:
        await runner.cleanup()
        logger.info("minfo stopped")

    return ExitCode.SUCCESS


@click.command("serve")
@click.option(
    "--bind",
    type=str,
    default=None,
    help="Address to bind to (default: 0.0.0.0, or MINFO_BIND).",
)
@click.option(
    "--port",
    "-p",
    type=click.IntRange(1, 65535),
    default=None,
    help="Port to bind to (default: 8080, or PORT).",
)
@click.pass_context
def serve_command(ctx: click.Context, bind: str | None, port: int | None) -> None:
    """Run the minfo web UI and API server.

    Handles graceful shutdown on SIGTERM or SIGINT (Ctrl+C).

    Configuration precedence (highest to lowest):
      1. CLI flags (--bind, --port, --log-level, ...)
      2. Environment variables (PORT, MEDIA_ROOT, WEB_PASSWORD, ...)
      3. Config file (--config or ~/.minfo/config.toml)
      4. Default values

    \b
    Examples:
        minfo serve                      # Listen on 0.0.0.0:8080
        minfo serve --port 9000          # Custom port
        minfo --log-json serve           # JSON logs for container runtimes
    """
    # Always log to stderr as well so container runtimes capture output
    config = load_cli_config(ctx, include_stderr=True, bind=bind, port=port)

    availability = check_tool_availability(config.tools)
    missing = [tool for tool, ok in availability.items() if not ok]
    if missing:
        logger.warning("External tools not found: %s", ", ".join(missing))

    try:
        exit_code = asyncio.run(run_server(config))
    except KeyboardInterrupt:
        exit_code = ExitCode.INTERRUPTED
    sys.exit(exit_code)
