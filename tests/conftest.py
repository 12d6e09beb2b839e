"""Shared test fixtures for minfo."""

import shutil
import stat
import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


def write_file(path: Path, size: int) -> Path:
    """Create a file of exactly size bytes, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\0" * size)
    return path


@pytest.fixture
def make_tool(temp_dir: Path) -> Callable[[str, str], Path]:
    """Factory writing fake tool executables as small shell scripts.

    Usage:
        ffprobe = make_tool("ffprobe", 'echo 12.5')
    """
    bin_dir = temp_dir / "bin"
    bin_dir.mkdir()

    def _make(name: str, body: str) -> Path:
        script = bin_dir / name
        script.write_text(f"#!/bin/sh\n{body}\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make


@pytest.fixture
def bdmv_disc(temp_dir: Path) -> Path:
    """Create a disc root with BDMV/STREAM streams of 10, 50 and 30 bytes."""
    disc = temp_dir / "disc"
    stream = disc / "BDMV" / "STREAM"
    write_file(stream / "00001.m2ts", 10)
    write_file(stream / "00002.m2ts", 50)
    write_file(stream / "00003.m2ts", 30)
    write_file(disc / "BDMV" / "index.bdmv", 500)
    return disc


@pytest.fixture
def make_file() -> Callable[[Path, int], Path]:
    """Factory creating files of a given size."""
    return write_file
