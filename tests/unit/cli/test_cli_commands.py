"""Tests for the minfo command line."""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path

import pytest
from click.testing import CliRunner

from minfo.cli import main
from minfo.cli.exit_codes import ExitCode

# Fake ffmpeg writing a placeholder PNG to its last argument
FAKE_FFMPEG = 'for last; do :; done; printf png > "$last"'


@pytest.fixture(autouse=True)
def isolated_cli(temp_dir: Path, monkeypatch):
    """Point config lookup at an empty location and restore root logging."""
    monkeypatch.setenv("MINFO_CONFIG_PATH", str(temp_dir / "absent.toml"))
    for var in ("MEDIAINFO_BIN", "BDINFO_BIN", "FFPROBE_BIN", "FFMPEG_BIN"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.delenv("REQUEST_TIMEOUT", raising=False)

    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestMediainfoCommand:
    """Tests for `minfo mediainfo`."""

    def test_prints_report(self, runner, make_tool, make_file, temp_dir, monkeypatch):
        """The report of the largest video is printed."""
        tool = make_tool("mediainfo", 'echo "Complete name : $1"')
        monkeypatch.setenv("MEDIAINFO_BIN", str(tool))
        media = temp_dir / "media"
        make_file(media / "small.mkv", 1)
        make_file(media / "large.mkv", 9)

        result = runner.invoke(main, ["mediainfo", str(media)])

        assert result.exit_code == 0, result.output
        assert f"Complete name : {media / 'large.mkv'}" in result.output

    def test_missing_tool(self, runner, make_file, temp_dir, monkeypatch):
        """A missing mediainfo binary exits with TOOL_NOT_AVAILABLE."""
        monkeypatch.setenv("MEDIAINFO_BIN", str(temp_dir / "no-mediainfo"))
        video = make_file(temp_dir / "a.mkv", 1)

        result = runner.invoke(main, ["mediainfo", str(video)])

        assert result.exit_code == ExitCode.TOOL_NOT_AVAILABLE
        assert "not found; set MEDIAINFO_BIN" in result.output

    def test_missing_path(self, runner, temp_dir):
        """A non-existent path is rejected by argument validation."""
        result = runner.invoke(main, ["mediainfo", str(temp_dir / "missing")])
        assert result.exit_code == 2


class TestBdinfoCommand:
    """Tests for `minfo bdinfo`."""

    def test_directory_without_disc(self, runner, make_tool, temp_dir, monkeypatch):
        """A folder without BDMV or ISO exits with TARGET_NOT_FOUND."""
        monkeypatch.setenv("BDINFO_BIN", str(make_tool("bdinfo", "exit 0")))
        empty = temp_dir / "empty"
        empty.mkdir()

        result = runner.invoke(main, ["bdinfo", str(empty)])

        assert result.exit_code == ExitCode.TARGET_NOT_FOUND
        assert "does not contain BDMV or BDISO content" in result.output

    def test_runs_on_disc_root(self, runner, make_tool, bdmv_disc, monkeypatch):
        """bdinfo receives the disc root for a BDMV directory."""
        tool = make_tool("bdinfo", 'echo "Disc: $1"')
        monkeypatch.setenv("BDINFO_BIN", str(tool))

        result = runner.invoke(main, ["bdinfo", str(bdmv_disc / "BDMV")])

        assert result.exit_code == 0, result.output
        assert f"Disc: {bdmv_disc}" in result.output


class TestScreenshotsCommand:
    """Tests for `minfo screenshots`."""

    def test_writes_zip(self, runner, make_tool, make_file, temp_dir, monkeypatch):
        """Eight frames are written to the output archive."""
        monkeypatch.setenv("FFPROBE_BIN", str(make_tool("ffprobe", "echo 120.0")))
        monkeypatch.setenv("FFMPEG_BIN", str(make_tool("ffmpeg", FAKE_FFMPEG)))
        video = make_file(temp_dir / "movie.mkv", 10)
        output = temp_dir / "out.zip"

        result = runner.invoke(main, ["screenshots", str(video), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert f"Wrote {output}" in result.output
        names = zipfile.ZipFile(io.BytesIO(output.read_bytes())).namelist()
        assert names == [f"shot_{i:02d}.png" for i in range(1, 9)]

    def test_timeout(self, runner, make_tool, make_file, temp_dir, monkeypatch):
        """A hung probe exits with TIMED_OUT once the deadline passes."""
        monkeypatch.setenv("FFPROBE_BIN", str(make_tool("ffprobe", "sleep 30")))
        monkeypatch.setenv("FFMPEG_BIN", str(make_tool("ffmpeg", FAKE_FFMPEG)))
        monkeypatch.setenv("REQUEST_TIMEOUT", "300ms")
        video = make_file(temp_dir / "movie.mkv", 10)

        result = runner.invoke(main, ["screenshots", str(video)])

        assert result.exit_code == ExitCode.TIMED_OUT
        assert "timed out after 0.3s" in result.output

    def test_no_frame_written(
        self, runner, make_tool, make_file, temp_dir, monkeypatch
    ):
        """ffmpeg exiting cleanly without a frame fails the command."""
        monkeypatch.setenv("FFPROBE_BIN", str(make_tool("ffprobe", "echo 120.0")))
        monkeypatch.setenv("FFMPEG_BIN", str(make_tool("ffmpeg", "exit 0")))
        video = make_file(temp_dir / "movie.mkv", 10)
        output = temp_dir / "out.zip"

        result = runner.invoke(main, ["screenshots", str(video), "-o", str(output)])

        assert result.exit_code == ExitCode.OPERATION_FAILED
        assert "ffmpeg failed: no frame written" in result.output
        assert not output.exists()


class TestConfigErrors:
    """Tests for configuration failures."""

    def test_broken_config_file(self, runner, temp_dir, make_file):
        """An explicit unparseable config file exits with CONFIG_ERROR."""
        config = temp_dir / "broken.toml"
        config.write_text("[server\n")
        video = make_file(temp_dir / "a.mkv", 1)

        result = runner.invoke(main, ["--config", str(config), "mediainfo", str(video)])

        assert result.exit_code == ExitCode.CONFIG_ERROR
        assert "invalid configuration" in result.output
