"""CLI module for minfo."""

from __future__ import annotations

import dataclasses
import logging
import sys
from pathlib import Path

import click

from minfo.cli.exit_codes import ExitCode
from minfo.config import ConfigFileError, MinfoConfig, get_config
from minfo.logging import configure_logging

logger = logging.getLogger(__name__)


def load_cli_config(
    ctx: click.Context, *, include_stderr: bool | None = None, **overrides
) -> MinfoConfig:
    """Build the configuration for a command and configure logging.

    Global options stored on the context by main() are combined with
    command specific overrides (bind, port, ...). Exits with
    ExitCode.CONFIG_ERROR if the configuration is invalid.

    Args:
        ctx: Click context of the running command.
        include_stderr: Also log to stderr when a log file is configured.
        **overrides: Keyword overrides passed through to get_config().
    """
    options = ctx.find_root().obj or {}
    try:
        config = get_config(
            config_path=options.get("config_path"),
            log_level=options.get("log_level"),
            log_format="json" if options.get("log_json") else None,
            log_file=options.get("log_file"),
            strict=options.get("config_path") is not None,
            **overrides,
        )
    except (ConfigFileError, ValueError) as e:
        click.echo(f"Error: invalid configuration: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    logging_config = config.logging
    if include_stderr is not None:
        logging_config = dataclasses.replace(
            logging_config, include_stderr=include_stderr
        )
    configure_logging(logging_config)
    return config


@click.group()
@click.version_option(package_name="minfo")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (default: ~/.minfo/config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """minfo - inspect video files, Blu-ray folders and disc images."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["log_level"] = log_level
    ctx.obj["log_file"] = log_file
    ctx.obj["log_json"] = log_json


def _register_commands() -> None:
    from minfo.cli.inspect import bdinfo_command, mediainfo_command, screenshots_command
    from minfo.cli.serve import serve_command

    main.add_command(serve_command)
    main.add_command(mediainfo_command)
    main.add_command(bdinfo_command)
    main.add_command(screenshots_command)


_register_commands()
