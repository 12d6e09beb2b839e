"""Inspection workflows shared by the HTTP API and the CLI.

Each workflow resolves the input through SourceResolver, runs the external
tools against the resolved path and releases whatever resolution acquired
(ISO mounts) before returning, on success and on failure alike. Deadlines
come from the caller: wrap a call in asyncio.timeout() to bound it.
"""

from __future__ import annotations

import asyncio
import logging
import random
import shutil
import tempfile
from pathlib import Path

from minfo.config.models import ToolPathsConfig
from minfo.core.errors import ToolFailureError
from minfo.media.packaging import package_files
from minfo.media.resolver import SourceResolver
from minfo.media.sampling import DEFAULT_SAMPLE_COUNT, sample_timestamps
from minfo.tools.detection import resolve_tool
from minfo.tools.ffmpeg import capture_frame, probe_duration
from minfo.tools.info import run_info_tool

logger = logging.getLogger(__name__)

SCREENSHOT_DIR_PREFIX = "minfo-shots-"


async def mediainfo_report(
    resolver: SourceResolver, tools: ToolPathsConfig, input_path: Path | str
) -> str:
    """Run mediainfo against the best candidate under input_path.

    Candidates are tried in rank order until one yields non-empty output.

    Returns:
        The mediainfo report (stdout, then any stderr).

    Raises:
        ToolNotFoundError: If mediainfo cannot be located.
        MediaNotFoundError: If input has no video files.
        ToolFailureError: If every candidate failed; carries the last
            candidate's error.
    """
    mediainfo = resolve_tool("mediainfo", tools)
    async with await resolver.resolve_candidates(input_path) as candidates:
        last_error = ""
        for path in candidates.paths:
            try:
                output = await run_info_tool(mediainfo, path, tool="mediainfo")
            except ToolFailureError as e:
                logger.info("mediainfo failed for %s: %s", path, e)
                last_error = str(e)
                continue
            if output:
                return output
            last_error = f"mediainfo returned empty output for: {path}"
    raise ToolFailureError("mediainfo", last_error or "mediainfo returned empty output")


async def bdinfo_report(
    resolver: SourceResolver, tools: ToolPathsConfig, input_path: Path | str
) -> str:
    """Run bdinfo against the disc root of input_path.

    An ISO is mounted for the duration of the run. The report may be empty.

    Raises:
        ToolNotFoundError: If bdinfo cannot be located.
        MediaNotFoundError: If input holds no BDMV layout or ISO.
        MountError: If an ISO cannot be mounted.
        ToolFailureError: If bdinfo exits non-zero.
    """
    bdinfo = resolve_tool("bdinfo", tools)
    async with await resolver.resolve_disc_root(input_path) as source:
        return await run_info_tool(bdinfo, source.path, tool="bdinfo")


async def capture_screenshots(
    resolver: SourceResolver,
    tools: ToolPathsConfig,
    input_path: Path | str,
    *,
    count: int = DEFAULT_SAMPLE_COUNT,
    rng: random.Random | None = None,
) -> bytes:
    """Capture frames spread across the resolved video and zip them.

    Frames are written as shot_01.png, shot_02.png, ... into a private
    temporary directory that is removed before returning.

    Returns:
        Zip archive bytes.

    Raises:
        ToolNotFoundError: If ffprobe or ffmpeg cannot be located.
        MediaNotFoundError: If input holds no playable video.
        MountError: If an ISO cannot be mounted.
        ToolFailureError: If probing or any capture fails.
    """
    ffprobe = resolve_tool("ffprobe", tools)
    ffmpeg = resolve_tool("ffmpeg", tools)
    async with await resolver.resolve_for_playback(input_path) as source:
        duration = await probe_duration(ffprobe, source.path)
        timestamps = sample_timestamps(duration, count=count, rng=rng)
        shot_dir = Path(
            await asyncio.to_thread(tempfile.mkdtemp, prefix=SCREENSHOT_DIR_PREFIX)
        )
        try:
            shots = []
            for index, seconds in enumerate(timestamps, start=1):
                out_path = shot_dir / f"shot_{index:02d}.png"
                await capture_frame(ffmpeg, source.path, seconds, out_path)
                shots.append(out_path)
            logger.info(
                "Captured %d screenshots from %s (duration %.1fs)",
                len(shots),
                source.path,
                duration,
            )
            return await asyncio.to_thread(package_files, shots)
        finally:
            await asyncio.to_thread(shutil.rmtree, shot_dir, ignore_errors=True)
