"""Exception hierarchy for minfo.

Every error raised by the core derives from MinfoError so the HTTP layer
and the CLI can catch the whole family with a single except clause and then
map individual kinds to status codes or exit codes.
"""

from __future__ import annotations

from pathlib import Path


class MinfoError(Exception):
    """Base exception for minfo errors."""


class MediaNotFoundError(MinfoError):
    """Base for errors where no usable media exists at or under the input."""


class SourceNotFoundError(MediaNotFoundError):
    """Raised when the input path does not exist.

    Attributes:
        path: The path that could not be found.
    """

    def __init__(self, path: Path | str, reason: str | None = None) -> None:
        self.path = Path(path)
        detail = f": {reason}" if reason else ""
        super().__init__(f"path not found: {path}{detail}")


class NoVideoFoundError(MediaNotFoundError):
    """Raised when a directory scan finds no recognized video files."""

    def __init__(self, root: Path | str, message: str | None = None) -> None:
        self.root = Path(root)
        super().__init__(message or f"no video files found under directory: {root}")


class DiscLayoutError(MediaNotFoundError):
    """Raised when no BDMV layout or disc image can be located."""


class MediaScanError(MinfoError):
    """Raised when a directory walk hits an unreadable entry.

    The walk is aborted as a whole; partial results are never returned.

    Attributes:
        path: The entry that could not be read.
    """

    def __init__(self, path: Path | str, cause: OSError) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"cannot read {path}: {cause.strerror or cause}")


class ToolNotFoundError(MinfoError):
    """Raised when an external tool executable cannot be located."""

    def __init__(self, tool: str, binary: str, env_var: str | None = None) -> None:
        self.tool = tool
        self.binary = binary
        hint = f"set {env_var} or add to PATH" if env_var else "add it to PATH"
        super().__init__(f"{binary} not found; {hint}")


class ToolFailureError(MinfoError):
    """Raised when an external tool exits non-zero or produces no usable output.

    Attributes:
        tool: Short name of the tool (e.g. "ffprobe").
        stderr: Diagnostic output captured from the tool, if any.
    """

    def __init__(self, tool: str, message: str, stderr: str = "") -> None:
        self.tool = tool
        self.stderr = stderr
        super().__init__(message)


class MountError(ToolFailureError):
    """Raised when an ISO image cannot be mounted."""

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__("mount", f"mount iso failed: {message}", stderr)


class ToolTimeoutError(MinfoError):
    """Raised when an external tool exceeds its deadline.

    The process group has already been terminated and reaped when this is
    raised.
    """

    def __init__(self, tool: str, timeout: float) -> None:
        self.tool = tool
        self.timeout = timeout
        super().__init__(f"{tool} timed out after {timeout:g}s")
