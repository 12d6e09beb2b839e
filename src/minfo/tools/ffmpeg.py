"""ffprobe/ffmpeg command wrappers.

The argument shapes here are fixed: the duration probe asks only for the
container's format duration as a bare number, and frame capture seeks
before opening the input and writes exactly one PNG frame.
"""

from __future__ import annotations

import asyncio
import logging
import math
from pathlib import Path

from minfo.core.errors import ToolFailureError
from minfo.core.subprocess_utils import run_command

logger = logging.getLogger(__name__)


def _has_content(path: Path) -> bool:
    try:
        return path.stat().st_size > 0
    except FileNotFoundError:
        return False


def build_probe_args(ffprobe: str, path: Path | str) -> list[str]:
    """Build the ffprobe command line for a format-duration probe."""
    return [
        ffprobe,
        "-v",
        "error",
        "-show_entries",
        "format=duration",
        "-of",
        "default=noprint_wrappers=1:nokey=1",
        str(path),
    ]


def build_capture_args(
    ffmpeg: str, path: Path | str, seconds: float, out_path: Path | str
) -> list[str]:
    """Build the ffmpeg command line capturing one frame at a timestamp."""
    return [
        ffmpeg,
        "-hide_banner",
        "-loglevel",
        "error",
        "-y",
        "-ss",
        f"{seconds:.3f}",
        "-i",
        str(path),
        "-frames:v",
        "1",
        "-q:v",
        "2",
        "-an",
        str(out_path),
    ]


def parse_duration_output(stdout: str) -> float:
    """Parse the bare duration printed by ffprobe.

    Raises:
        ToolFailureError: If the value is empty, not a number, or not positive.
    """
    value = stdout.strip()
    if not value:
        raise ToolFailureError("ffprobe", "ffprobe returned empty duration")
    try:
        duration = float(value)
    except ValueError as e:
        raise ToolFailureError("ffprobe", f"invalid duration: {e}") from e
    if not math.isfinite(duration) or duration <= 0:
        raise ToolFailureError("ffprobe", "duration must be positive")
    return duration


async def probe_duration(
    ffprobe: str, path: Path | str, *, timeout: float | None = None
) -> float:
    """Return the container duration of a media file in seconds.

    Raises:
        ToolFailureError: If ffprobe fails or reports an unusable duration.
        ToolTimeoutError: If ffprobe exceeds the timeout.
    """
    result = await run_command(build_probe_args(ffprobe, path), timeout=timeout)
    if not result.ok:
        message = result.stderr_text.strip() or result.error
        raise ToolFailureError(
            "ffprobe", f"ffprobe failed: {message}", stderr=result.stderr_text
        )
    duration = parse_duration_output(result.stdout_text)
    logger.debug("Probed duration %.3fs for %s", duration, path)
    return duration


async def capture_frame(
    ffmpeg: str,
    path: Path | str,
    seconds: float,
    out_path: Path | str,
    *,
    timeout: float | None = None,
) -> Path:
    """Capture a single PNG frame at the given timestamp.

    Returns:
        The output path.

    Raises:
        ToolFailureError: If ffmpeg exits non-zero or writes no frame, which
            happens when the seek lands past the last decodable frame.
        ToolTimeoutError: If ffmpeg exceeds the timeout.
    """
    out_path = Path(out_path)
    result = await run_command(
        build_capture_args(ffmpeg, path, seconds, out_path), timeout=timeout
    )
    if not result.ok:
        message = result.stderr_text.strip() or str(result.error)
        if result.stdout_text.strip():
            message += "\n" + result.stdout_text.strip()
        raise ToolFailureError(
            "ffmpeg", f"ffmpeg failed: {message}", stderr=result.stderr_text
        )
    if not await asyncio.to_thread(_has_content, out_path):
        raise ToolFailureError(
            "ffmpeg",
            f"ffmpeg failed: no frame written at {seconds:.3f}s",
            stderr=result.stderr_text,
        )
    return out_path
