"""Core utilities package.

This package contains the building blocks shared by the rest of minfo:
the exception hierarchy, scoped release guards and the bounded subprocess
runner used for every external tool invocation.
"""

from minfo.core.errors import (
    DiscLayoutError,
    MediaNotFoundError,
    MediaScanError,
    MinfoError,
    MountError,
    NoVideoFoundError,
    SourceNotFoundError,
    ToolFailureError,
    ToolNotFoundError,
    ToolTimeoutError,
)
from minfo.core.release import ReleaseAction, ScopedRelease
from minfo.core.subprocess_utils import (
    TERMINATE_GRACE_SECONDS,
    CommandResult,
    best_error_message,
    run_command,
    terminate_process_group,
)

__all__ = [
    # errors
    "MinfoError",
    "MediaNotFoundError",
    "SourceNotFoundError",
    "NoVideoFoundError",
    "DiscLayoutError",
    "MediaScanError",
    "ToolNotFoundError",
    "ToolFailureError",
    "MountError",
    "ToolTimeoutError",
    # release
    "ReleaseAction",
    "ScopedRelease",
    # subprocess_utils
    "TERMINATE_GRACE_SECONDS",
    "CommandResult",
    "best_error_message",
    "run_command",
    "terminate_process_group",
]
