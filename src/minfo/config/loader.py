"""Configuration loading.

Later layers win:

    defaults < config file < environment < CLI flags

The config file is TOML, ``~/.minfo/config.toml`` unless
MINFO_CONFIG_PATH or ``--config`` names another. See
minfo.config.builder.ENV_VARS for the environment variables read.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from minfo.config.builder import ConfigBuilder, layer_from_env, layer_from_file
from minfo.config.env import EnvReader
from minfo.config.models import MinfoConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path.home() / ".minfo" / "config.toml"


class ConfigFileError(ValueError):
    """Raised when the config file exists but cannot be parsed."""


def get_default_config_path() -> Path:
    """Return MINFO_CONFIG_PATH if set, else ~/.minfo/config.toml."""
    override = os.environ.get("MINFO_CONFIG_PATH", "").strip()
    return Path(override).expanduser() if override else DEFAULT_CONFIG_FILE


def load_config_file(
    path: Path | None = None, *, strict: bool = False
) -> dict[str, Any]:
    """Read the TOML config file.

    A missing file is not an error and yields an empty dict. An unreadable
    or malformed file is skipped with a warning, unless strict is set.

    Raises:
        ConfigFileError: When strict and the file cannot be parsed.
    """
    path = path or get_default_config_path()
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        if strict:
            raise ConfigFileError(f"Cannot parse config file {path}: {e}") from e
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}


def get_config(
    config_path: Path | None = None,
    bind: str | None = None,
    port: int | None = None,
    log_level: str | None = None,
    log_format: str | None = None,
    log_file: Path | None = None,
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> MinfoConfig:
    """Assemble the configuration from every layer.

    Args:
        config_path: Config file to read instead of the default location.
        bind: Listen address from the command line.
        port: Listen port from the command line.
        log_level: Log level from the command line.
        log_format: Log format from the command line.
        log_file: Log file from the command line.
        env_reader: Environment source; os.environ when None.
        strict: Fail on an unparseable config file instead of skipping it.

    Raises:
        ConfigFileError: When strict and the config file cannot be parsed.
        ValueError: When a value is malformed or out of range.
    """
    builder = ConfigBuilder()
    builder.apply(
        layer_from_file(load_config_file(config_path, strict=strict)),
        source_name="file",
    )
    builder.apply(layer_from_env(env_reader or EnvReader()), source_name="env")
    builder.apply(
        {
            ("server", "bind"): bind,
            ("server", "port"): port,
            ("logging", "level"): log_level,
            ("logging", "format"): log_format,
            ("logging", "file"): log_file,
        },
        source_name="cli",
    )
    config = builder.build()
    logger.debug(
        "Configuration loaded (port from %s, media root from %s)",
        builder.source_of("server", "port"),
        builder.source_of("server", "media_root"),
    )
    return config
