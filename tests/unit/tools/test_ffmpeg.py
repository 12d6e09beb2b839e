"""Tests for ffprobe/ffmpeg wrappers."""

import pytest

from minfo.core.errors import ToolFailureError, ToolTimeoutError
from minfo.tools.ffmpeg import (
    build_capture_args,
    build_probe_args,
    capture_frame,
    parse_duration_output,
    probe_duration,
)


class TestArgumentShapes:
    """Tests for command line construction."""

    def test_probe_args(self):
        """The probe asks only for the format duration as a bare number."""
        assert build_probe_args("ffprobe", "/m/a.mkv") == [
            "ffprobe",
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "default=noprint_wrappers=1:nokey=1",
            "/m/a.mkv",
        ]

    def test_capture_args_seek_before_input(self):
        """Capture seeks before -i and writes a single frame."""
        args = build_capture_args("ffmpeg", "/m/a.mkv", 12.3456, "/tmp/shot_01.png")

        assert args[:7] == [
            "ffmpeg",
            "-hide_banner",
            "-loglevel",
            "error",
            "-y",
            "-ss",
            "12.346",
        ]
        assert args.index("-ss") < args.index("-i")
        assert args[args.index("-i") + 1] == "/m/a.mkv"
        assert args[args.index("-frames:v") + 1] == "1"
        assert args[-1] == "/tmp/shot_01.png"


class TestParseDurationOutput:
    """Tests for parse_duration_output."""

    def test_valid(self):
        """A bare number with a trailing newline parses."""
        assert parse_duration_output("5421.376000\n") == pytest.approx(5421.376)

    @pytest.mark.parametrize(
        ("output", "message"),
        [
            ("", "empty duration"),
            ("  \n", "empty duration"),
            ("N/A", "invalid duration"),
            ("0.000000", "must be positive"),
            ("-3", "must be positive"),
        ],
    )
    def test_invalid(self, output, message):
        """Unusable output raises ToolFailureError."""
        with pytest.raises(ToolFailureError, match=message):
            parse_duration_output(output)


class TestProbeDuration:
    """Tests for probe_duration with fake binaries."""

    @pytest.mark.asyncio
    async def test_probe_success(self, make_tool, temp_dir):
        """The printed duration is returned."""
        ffprobe = make_tool("ffprobe", "echo 12.5")
        assert await probe_duration(str(ffprobe), temp_dir / "a.mkv") == 12.5

    @pytest.mark.asyncio
    async def test_probe_failure_uses_stderr(self, make_tool, temp_dir):
        """A non-zero exit reports the tool's stderr."""
        ffprobe = make_tool("ffprobe", "echo 'Invalid data found' >&2; exit 1")
        with pytest.raises(ToolFailureError, match="ffprobe failed: Invalid data"):
            await probe_duration(str(ffprobe), temp_dir / "a.mkv")

    @pytest.mark.asyncio
    async def test_probe_timeout(self, make_tool, temp_dir):
        """A hung probe raises ToolTimeoutError."""
        ffprobe = make_tool("ffprobe", "sleep 30")
        with pytest.raises(ToolTimeoutError):
            await probe_duration(str(ffprobe), temp_dir / "a.mkv", timeout=0.2)


class TestCaptureFrame:
    """Tests for capture_frame with fake binaries."""

    @pytest.mark.asyncio
    async def test_capture_writes_output(self, make_tool, temp_dir):
        """The output path (last argument) is returned."""
        # Write the output file named by the last argument
        ffmpeg = make_tool("ffmpeg", 'for last; do :; done; printf png > "$last"')
        out = temp_dir / "shot_01.png"

        result = await capture_frame(str(ffmpeg), temp_dir / "a.mkv", 1.5, out)

        assert result == out
        assert out.read_bytes() == b"png"

    @pytest.mark.asyncio
    async def test_capture_failure(self, make_tool, temp_dir):
        """A failing ffmpeg raises with its stderr."""
        ffmpeg = make_tool("ffmpeg", "echo 'seek failed' >&2; exit 1")
        with pytest.raises(ToolFailureError, match="ffmpeg failed: seek failed"):
            await capture_frame(str(ffmpeg), "/m/a.mkv", 1.0, temp_dir / "x.png")

    @pytest.mark.asyncio
    async def test_clean_exit_without_frame(self, make_tool, temp_dir):
        """Exiting 0 without writing the PNG is a tool failure."""
        ffmpeg = make_tool("ffmpeg", "exit 0")
        out = temp_dir / "shot_01.png"
        with pytest.raises(ToolFailureError, match="no frame written at 42.000s"):
            await capture_frame(str(ffmpeg), "/m/a.mkv", 42.0, out)

    @pytest.mark.asyncio
    async def test_empty_frame_file(self, make_tool, temp_dir):
        """A zero-byte output file does not count as a frame."""
        ffmpeg = make_tool("ffmpeg", 'for last; do :; done; : > "$last"')
        with pytest.raises(ToolFailureError, match="no frame written"):
            await capture_frame(str(ffmpeg), "/m/a.mkv", 1.0, temp_dir / "x.png")
