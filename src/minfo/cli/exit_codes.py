"""Centralized exit codes for all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Configuration and argument errors
    20-29: Input errors
    30-39: Tool/dependency errors
    40-49: Operation errors
"""

from enum import IntEnum

from minfo.core.errors import (
    MediaNotFoundError,
    MountError,
    ToolNotFoundError,
    ToolTimeoutError,
)


class ExitCode(IntEnum):
    """Exit codes for minfo CLI commands."""

    # Success (0)
    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1
    INTERRUPTED = 2

    # Configuration errors (10-19)
    CONFIG_ERROR = 10
    INVALID_ARGUMENTS = 11

    # Input errors (20-29)
    TARGET_NOT_FOUND = 20

    # Tool/dependency errors (30-39)
    TOOL_NOT_AVAILABLE = 30

    # Operation errors (40-49)
    OPERATION_FAILED = 40
    MOUNT_FAILED = 41
    TIMED_OUT = 42
    SERVER_ERROR = 43


def exit_code_for(error: BaseException) -> ExitCode:
    """Map an exception raised by a command to its exit code."""
    if isinstance(error, MediaNotFoundError):
        return ExitCode.TARGET_NOT_FOUND
    if isinstance(error, ToolNotFoundError):
        return ExitCode.TOOL_NOT_AVAILABLE
    if isinstance(error, MountError):
        return ExitCode.MOUNT_FAILED
    if isinstance(error, ToolTimeoutError | TimeoutError):
        return ExitCode.TIMED_OUT
    return ExitCode.OPERATION_FAILED
