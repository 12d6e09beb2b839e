"""Local inspection commands.

These run the same workflows as the HTTP API against a path on this
machine: ``minfo mediainfo``, ``minfo bdinfo`` and ``minfo screenshots``.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import click

from minfo.cli import load_cli_config
from minfo.cli.exit_codes import ExitCode, exit_code_for
from minfo.config.models import MinfoConfig
from minfo.core.errors import MinfoError
from minfo.inspection import bdinfo_report, capture_screenshots, mediainfo_report
from minfo.media.resolver import SourceResolver

logger = logging.getLogger(__name__)

Workflow = Callable[..., Awaitable[Any]]


async def _run_workflow(config: MinfoConfig, workflow: Workflow, path: Path) -> Any:
    resolver = SourceResolver.from_config(config)
    async with asyncio.timeout(config.timeouts.request):
        return await workflow(resolver, config.tools, path)


def run_workflow(config: MinfoConfig, workflow: Workflow, path: Path) -> Any:
    """Run an inspection workflow to completion, exiting on failure."""
    try:
        return asyncio.run(_run_workflow(config, workflow, path))
    except KeyboardInterrupt:
        click.echo("Interrupted.", err=True)
        sys.exit(ExitCode.INTERRUPTED)
    except TimeoutError as e:
        click.echo(f"Error: timed out after {config.timeouts.request:g}s", err=True)
        sys.exit(exit_code_for(e))
    except (MinfoError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(exit_code_for(e))


_path_argument = click.argument("path", type=click.Path(exists=True, path_type=Path))


@click.command("mediainfo")
@_path_argument
@click.pass_context
def mediainfo_command(ctx: click.Context, path: Path) -> None:
    """Print the mediainfo report for PATH.

    PATH may be a video file or a directory; for a directory the largest
    video files are tried in turn until one produces a report.
    """
    config = load_cli_config(ctx)
    click.echo(run_workflow(config, mediainfo_report, path))


@click.command("bdinfo")
@_path_argument
@click.pass_context
def bdinfo_command(ctx: click.Context, path: Path) -> None:
    """Print the bdinfo report for PATH.

    PATH may be a BDMV folder, a disc root, an ISO image or a folder
    containing one. ISO images are mounted read-only while bdinfo runs.
    """
    config = load_cli_config(ctx)
    click.echo(run_workflow(config, bdinfo_report, path))


@click.command("screenshots")
@_path_argument
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    default=Path("screenshots.zip"),
    show_default=True,
    help="Where to write the zip archive.",
)
@click.pass_context
def screenshots_command(ctx: click.Context, path: Path, output: Path) -> None:
    """Capture eight frames spread across the video at PATH into a zip."""
    config = load_cli_config(ctx)
    archive = run_workflow(config, capture_screenshots, path)
    try:
        output.write_bytes(archive)
    except OSError as e:
        click.echo(f"Error: cannot write {output}: {e}", err=True)
        sys.exit(ExitCode.OPERATION_FAILED)
    click.echo(f"Wrote {output}")
