"""Typed configuration sections.

MinfoConfig is assembled once at startup from defaults, the config file,
the environment and CLI flags (see minfo.config.loader), then handed to the
server, the resolver and the CLI commands. Every section is frozen and
checks its own values in ``__post_init__``.
"""

from dataclasses import dataclass, field
from pathlib import Path

# Tool name -> default executable name looked up on PATH
DEFAULT_TOOL_BINARIES: dict[str, str] = {
    "mediainfo": "mediainfo",
    "bdinfo": "bdinfo",
    "ffprobe": "ffprobe",
    "ffmpeg": "ffmpeg",
    "mount": "mount",
    "umount": "umount",
}

LOG_LEVELS = ("debug", "info", "warning", "error")
LOG_FORMATS = ("text", "json")


def _require_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")


@dataclass(frozen=True)
class ToolPathsConfig:
    """Executable for each external tool.

    A value may be a bare name (searched on PATH) or a path to the binary.
    None or blank keeps the tool's default name.
    """

    mediainfo: str | None = None
    bdinfo: str | None = None
    ffprobe: str | None = None
    ffmpeg: str | None = None
    mount: str | None = None
    umount: str | None = None

    def binary_for(self, tool: str) -> str:
        """Return the configured binary for a tool, or its default name.

        Raises:
            KeyError: If the tool is unknown.
        """
        default = DEFAULT_TOOL_BINARIES[tool]
        configured = (getattr(self, tool) or "").strip()
        return configured or default


@dataclass(frozen=True)
class TimeoutsConfig:
    """Deadlines, in seconds."""

    request: float = 600.0
    """Upper bound for one request: resolution plus every tool run."""

    mount: float = 30.0
    """Mount deadline, nested inside the request deadline."""

    umount: float = 30.0
    """Per attempt unmount deadline, independent of the request deadline."""

    def __post_init__(self) -> None:
        _require_positive("request timeout", self.request)
        _require_positive("mount timeout", self.mount)
        _require_positive("umount timeout", self.umount)


@dataclass(frozen=True)
class ResolverConfig:
    """Media resolution settings."""

    candidate_limit: int = 5
    """How many of the largest videos mediainfo may try, in order."""

    def __post_init__(self) -> None:
        if self.candidate_limit < 1:
            raise ValueError(
                f"candidate_limit must be at least 1, got {self.candidate_limit}"
            )


@dataclass(frozen=True)
class ServerConfig:
    """HTTP server settings."""

    bind: str = "0.0.0.0"  # nosec B104 - container deployments expose the port
    port: int = 8080
    password: str | None = None
    """Basic Auth secret; None or blank leaves the server open."""

    media_root: Path = Path("/media")
    """Directory the path autocomplete is confined to."""

    max_upload_bytes: int = 8 << 30
    max_suggestions: int = 200
    shutdown_timeout: float = 30.0
    """Grace period for in-flight requests when stopping."""

    def __post_init__(self) -> None:
        if not 0 < self.port < 65536:
            raise ValueError(f"port out of range (1-65535): {self.port}")
        _require_positive("max_upload_bytes", self.max_upload_bytes)
        _require_positive("max_suggestions", self.max_suggestions)
        _require_positive("shutdown_timeout", self.shutdown_timeout)


@dataclass(frozen=True)
class LoggingConfig:
    """Log output settings.

    Attributes:
        level: One of debug, info, warning, error.
        file: Rotating log file; None logs to stderr only.
        format: "text" for humans, "json" for log collectors.
        include_stderr: Mirror records to stderr when a file is set.
        max_bytes: Size at which the log file rotates.
        backup_count: Rotated files kept.
    """

    level: str = "info"
    file: Path | None = None
    format: str = "text"
    include_stderr: bool = False
    max_bytes: int = 10 << 20
    backup_count: int = 5

    def __post_init__(self) -> None:
        if self.level.casefold() not in LOG_LEVELS:
            raise ValueError(
                f"log level {self.level!r} is not one of {', '.join(LOG_LEVELS)}"
            )
        if self.format.casefold() not in LOG_FORMATS:
            raise ValueError(
                f"log format {self.format!r} is not one of {', '.join(LOG_FORMATS)}"
            )


@dataclass(frozen=True)
class MinfoConfig:
    """Complete minfo configuration, one attribute per section."""

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    timeouts: TimeoutsConfig = field(default_factory=TimeoutsConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
