"""Configuration for minfo.

Values come from defaults, ~/.minfo/config.toml, environment variables
and CLI flags, in increasing order of precedence. get_config() returns a
frozen MinfoConfig that is passed explicitly to the components using it.
"""

from minfo.config.builder import (
    ENV_VARS,
    ConfigBuilder,
    layer_from_env,
    layer_from_file,
)
from minfo.config.env import EnvReader, parse_duration
from minfo.config.loader import (
    ConfigFileError,
    get_config,
    get_default_config_path,
    load_config_file,
)
from minfo.config.models import (
    DEFAULT_TOOL_BINARIES,
    LoggingConfig,
    MinfoConfig,
    ResolverConfig,
    ServerConfig,
    TimeoutsConfig,
    ToolPathsConfig,
)

__all__ = [
    "DEFAULT_TOOL_BINARIES",
    "ENV_VARS",
    "ConfigBuilder",
    "ConfigFileError",
    "EnvReader",
    "LoggingConfig",
    "MinfoConfig",
    "ResolverConfig",
    "ServerConfig",
    "TimeoutsConfig",
    "ToolPathsConfig",
    "get_config",
    "get_default_config_path",
    "layer_from_env",
    "layer_from_file",
    "load_config_file",
    "parse_duration",
]
