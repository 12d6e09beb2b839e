"""Layered configuration assembly.

A layer maps ``(section, field)`` keys, such as ``("server", "port")``, to
values. ConfigBuilder stacks layers in order of increasing precedence and
then instantiates each section dataclass, so defaults and validation live
in one place: minfo.config.models.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import fields
from pathlib import Path
from typing import Any

from minfo.config.env import EnvReader, parse_duration
from minfo.config.models import (
    LoggingConfig,
    MinfoConfig,
    ResolverConfig,
    ServerConfig,
    TimeoutsConfig,
    ToolPathsConfig,
)

logger = logging.getLogger(__name__)

ConfigKey = tuple[str, str]
ConfigLayer = Mapping[ConfigKey, Any]

SECTIONS: dict[str, type] = {
    "tools": ToolPathsConfig,
    "timeouts": TimeoutsConfig,
    "resolver": ResolverConfig,
    "server": ServerConfig,
    "logging": LoggingConfig,
}

# Environment variable and reader kind for each overridable key. Names
# match existing container deployments.
ENV_VARS: dict[ConfigKey, tuple[str, str]] = {
    ("tools", "mediainfo"): ("MEDIAINFO_BIN", "str"),
    ("tools", "bdinfo"): ("BDINFO_BIN", "str"),
    ("tools", "ffprobe"): ("FFPROBE_BIN", "str"),
    ("tools", "ffmpeg"): ("FFMPEG_BIN", "str"),
    ("tools", "mount"): ("MOUNT_BIN", "str"),
    ("tools", "umount"): ("UMOUNT_BIN", "str"),
    ("timeouts", "request"): ("REQUEST_TIMEOUT", "duration"),
    ("resolver", "candidate_limit"): ("MINFO_CANDIDATE_LIMIT", "int"),
    ("server", "bind"): ("MINFO_BIND", "str"),
    ("server", "port"): ("PORT", "int"),
    ("server", "password"): ("WEB_PASSWORD", "str"),
    ("server", "media_root"): ("MEDIA_ROOT", "path"),
    ("logging", "level"): ("MINFO_LOG_LEVEL", "str"),
    ("logging", "file"): ("MINFO_LOG_FILE", "path"),
    ("logging", "format"): ("MINFO_LOG_FORMAT", "str"),
}


def _file_duration(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"invalid duration {value!r}")
    if isinstance(value, int | float):
        return float(value)
    return parse_duration(str(value))


def _file_path(value: Any) -> Path:
    return Path(str(value)).expanduser()


# Converters for file values whose TOML type differs from the model's
_FILE_CONVERTERS: dict[ConfigKey, Callable[[Any], Any]] = {
    ("timeouts", "request"): _file_duration,
    ("timeouts", "mount"): _file_duration,
    ("timeouts", "umount"): _file_duration,
    ("server", "shutdown_timeout"): _file_duration,
    ("server", "media_root"): _file_path,
    ("logging", "file"): _file_path,
}


class ConfigBuilder:
    """Stacks configuration layers and builds a MinfoConfig.

    Example:
        builder = ConfigBuilder()
        builder.apply(layer_from_file(data), source_name="file")
        builder.apply(layer_from_env(EnvReader()), source_name="env")
        builder.apply({("server", "port"): 9000}, source_name="cli")
        config = builder.build()
    """

    def __init__(self) -> None:
        self._sections: dict[str, dict[str, Any]] = {}
        self._origins: dict[ConfigKey, str] = {}

    def apply(self, layer: ConfigLayer, source_name: str = "") -> None:
        """Overlay a layer; None values leave earlier values in place.

        Raises:
            KeyError: If a key names an unknown section.
        """
        for (section, name), value in layer.items():
            if section not in SECTIONS:
                raise KeyError(f"unknown config section: {section}")
            if value is None:
                continue
            self._sections.setdefault(section, {})[name] = value
            self._origins[(section, name)] = source_name

    def source_of(self, section: str, name: str) -> str:
        """Name the layer that set a value, or "default" if none did."""
        return self._origins.get((section, name)) or "default"

    def build(self) -> MinfoConfig:
        """Instantiate every section from the stacked values.

        Raises:
            ValueError: If a section rejects its values.
        """
        built = {}
        for section, model in SECTIONS.items():
            values = self._sections.get(section, {})
            try:
                built[section] = model(**values)
            except TypeError as e:
                raise ValueError(f"[{section}] {e}") from e
        return MinfoConfig(**built)


def layer_from_file(file_config: Mapping[str, Any]) -> dict[ConfigKey, Any]:
    """Turn parsed TOML into a layer.

    Tables are named after the sections (``[tools]``, ``[server]``, ...).
    Unknown tables and keys are logged and skipped.

    Raises:
        ValueError: If a section is not a table or a duration is malformed.
    """
    layer: dict[ConfigKey, Any] = {}
    for section, table in file_config.items():
        model = SECTIONS.get(section)
        if model is None:
            logger.warning("Ignoring unknown config section [%s]", section)
            continue
        if not isinstance(table, dict):
            raise ValueError(f"config section [{section}] must be a table")
        known = {f.name for f in fields(model)}
        for name, value in table.items():
            if name not in known:
                logger.warning("Ignoring unknown config key %s.%s", section, name)
                continue
            convert = _FILE_CONVERTERS.get((section, name))
            layer[(section, name)] = convert(value) if convert else value
    return layer


def layer_from_env(reader: EnvReader) -> dict[ConfigKey, Any]:
    """Read every variable in ENV_VARS into a layer (None when unset)."""
    getters: dict[str, Callable[[str], Any]] = {
        "str": reader.get_str,
        "int": reader.get_int,
        "duration": reader.get_duration,
        "path": reader.get_path,
    }
    return {key: getters[kind](var) for key, (var, kind) in ENV_VARS.items()}
