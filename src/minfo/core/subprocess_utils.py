"""Subprocess utilities for external tool invocation.

This module provides the standard subprocess wrapper used across minfo
for consistent timeout handling, cancellation and error reporting when
invoking external tools like mediainfo, bdinfo, ffprobe, ffmpeg and mount.

Every command is started as the leader of a new process group. When the
deadline elapses or the awaiting task is cancelled, the whole group is sent
SIGTERM, given a short grace period, then sent SIGKILL, and the child is
always reaped before control returns to the caller.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from minfo.core.errors import ToolFailureError, ToolTimeoutError

logger = logging.getLogger(__name__)

# Delay between SIGTERM and SIGKILL when tearing down a process group
TERMINATE_GRACE_SECONDS = 0.3


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a single external command invocation."""

    args: tuple[str, ...]
    stdout: bytes
    stderr: bytes
    returncode: int
    error: str | None = None
    """Raw execution error (e.g. "exit status 1"), None on success."""

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def command_name(self) -> str:
        return Path(self.args[0]).name if self.args else "unknown"

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")

    def combined_output(self) -> str:
        """Return trimmed stdout followed by trimmed stderr."""
        output = self.stdout_text.strip()
        diagnostics = self.stderr_text.strip()
        if diagnostics:
            if output:
                output += "\n\n"
            output += diagnostics
        return output

    def check(self, tool: str | None = None) -> CommandResult:
        """Raise ToolFailureError if the command failed.

        Args:
            tool: Tool name for the error message (defaults to the binary name).

        Returns:
            self, to allow chaining.
        """
        if self.error is None:
            return self
        name = tool or self.command_name
        raise ToolFailureError(
            name,
            best_error_message(self.error, self.stderr_text, self.stdout_text),
            stderr=self.stderr_text,
        )


def best_error_message(error: str, stderr: str, stdout: str = "") -> str:
    """Compose a user-facing message from a failed command.

    The tool's diagnostic stream wins; the raw execution error is used only
    when stderr is empty. Any stray stdout is appended after a blank line.
    """
    message = stderr.strip() or error
    if stdout.strip():
        message += "\n\n" + stdout.strip()
    return message


def _signal_group(pgid: int, sig: signal.Signals) -> None:
    try:
        os.killpg(pgid, sig)
    except ProcessLookupError:
        pass  # group already gone
    except PermissionError as e:
        logger.warning("Cannot send %s to process group %d: %s", sig.name, pgid, e)


async def terminate_process_group(
    process: asyncio.subprocess.Process,
    grace: float = TERMINATE_GRACE_SECONDS,
) -> None:
    """Terminate a process group and reap its leader.

    Sends SIGTERM to the whole group, waits the grace period, then sends
    SIGKILL to the group. The leader is always awaited before returning,
    even if this coroutine is itself cancelled during the grace period.

    Args:
        process: Process started with start_new_session=True.
        grace: Seconds between SIGTERM and SIGKILL.
    """
    pgid = process.pid
    _signal_group(pgid, signal.SIGTERM)
    try:
        await asyncio.sleep(grace)
    finally:
        _signal_group(pgid, signal.SIGKILL)
        await process.wait()


async def run_command(
    args: Sequence[str | Path],
    *,
    timeout: float | None = None,
) -> CommandResult:
    """Run an external command as its own process group.

    Output is captured fully in memory. A non-zero exit is reported on the
    result (see CommandResult.check) rather than raised, so callers can
    decide how to present diagnostics. Nothing is retried.

    Args:
        args: Command and arguments. Path objects are converted to strings.
        timeout: Seconds before the process group is torn down. None waits
            for as long as the calling task allows.

    Returns:
        CommandResult with captured stdout/stderr and return code.

    Raises:
        ToolFailureError: If the executable cannot be started.
        ToolTimeoutError: If the timeout elapsed. The process group has
            been killed and reaped.
        asyncio.CancelledError: If the awaiting task was cancelled (for
            example by an enclosing asyncio.timeout). The process group has
            been killed and reaped before this propagates.

    Example:
        >>> result = await run_command(["ffprobe", "-version"], timeout=10)
        >>> if result.ok:
        ...     print(result.stdout_text)
    """
    str_args = tuple(str(arg) for arg in args)
    command_name = Path(str_args[0]).name if str_args else "unknown"

    logger.debug(
        "Executing command: %s",
        " ".join(str_args),
        extra={"command": command_name, "arg_count": len(str_args)},
    )

    start_time = time.monotonic()

    try:
        process = await asyncio.create_subprocess_exec(  # nosec B603
            *str_args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
        )
    except OSError as e:
        raise ToolFailureError(command_name, f"{command_name}: {e}") from e

    try:
        async with asyncio.timeout(timeout):
            stdout, stderr = await process.communicate()
    except TimeoutError:
        await terminate_process_group(process)
        elapsed = time.monotonic() - start_time
        logger.warning(
            "Command timed out after %ss: %s",
            timeout,
            " ".join(str_args[:3]) + ("..." if len(str_args) > 3 else ""),
            extra={
                "command": command_name,
                "timeout_seconds": timeout,
                "elapsed_seconds": round(elapsed, 3),
            },
        )
        raise ToolTimeoutError(command_name, timeout or 0.0) from None
    except asyncio.CancelledError:
        await terminate_process_group(process)
        logger.info(
            "Command cancelled: %s",
            command_name,
            extra={
                "command": command_name,
                "elapsed_seconds": round(time.monotonic() - start_time, 3),
            },
        )
        raise

    returncode = process.returncode if process.returncode is not None else -1
    elapsed = time.monotonic() - start_time
    logger.debug(
        "Command completed",
        extra={
            "command": command_name,
            "elapsed_seconds": round(elapsed, 3),
            "returncode": returncode,
        },
    )

    error = None
    if returncode > 0:
        error = f"exit status {returncode}"
    elif returncode < 0:
        try:
            error = f"signal: {signal.Signals(-returncode).name}"
        except ValueError:
            error = f"signal: {-returncode}"

    return CommandResult(
        args=str_args,
        stdout=stdout or b"",
        stderr=stderr or b"",
        returncode=returncode,
        error=error,
    )
