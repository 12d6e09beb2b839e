"""Filesystem discovery for video files and Blu-ray layouts.

All walks here are synchronous and deterministic: directory entries are
visited in lexical order, depth first, without following symlinked
directories. Any unreadable entry aborts the walk with MediaScanError so a
partially scanned tree is never mistaken for a complete one. Callers on the
event loop run these functions in a worker thread.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from pathlib import Path

from minfo.core.errors import MediaScanError, NoVideoFoundError
from minfo.media.models import VideoCandidate

logger = logging.getLogger(__name__)

# Recognized video container extensions (lowercase, with leading dot)
VIDEO_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".m2ts",
        ".mts",
        ".mkv",
        ".mp4",
        ".m4v",
        ".mov",
        ".avi",
        ".wmv",
        ".flv",
        ".mpg",
        ".mpeg",
        ".m2v",
        ".ts",
        ".vob",
        ".webm",
    }
)

BDMV_DIR = "BDMV"
STREAM_DIR = "STREAM"


def is_video_file(path: Path | str) -> bool:
    """Check whether a path has a recognized video extension (any case)."""
    return Path(path).suffix.lower() in VIDEO_EXTENSIONS


def is_iso_file(path: Path | str) -> bool:
    return Path(path).suffix.lower() == ".iso"


def is_m2ts_file(path: Path | str) -> bool:
    return Path(path).suffix.lower() == ".m2ts"


def _sorted_entries(directory: Path) -> list[os.DirEntry[str]]:
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        raise MediaScanError(directory, e) from e


def _is_dir(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError as e:
        raise MediaScanError(entry.path, e) from e


def _size_of(entry: os.DirEntry[str]) -> int:
    try:
        return entry.stat(follow_symlinks=False).st_size
    except OSError as e:
        raise MediaScanError(entry.path, e) from e


def iter_files(root: Path) -> Iterator[os.DirEntry[str]]:
    """Yield every non-directory entry under root in walk order.

    Raises:
        MediaScanError: If any directory or entry cannot be read.
    """
    for entry in _sorted_entries(root):
        if _is_dir(entry):
            yield from iter_files(Path(entry.path))
        else:
            yield entry


def _largest(
    entries: Iterator[os.DirEntry[str]], accept: Callable[[str], bool]
) -> Path | None:
    # Strictly larger wins, so the first file seen keeps ties. Empty files
    # never win.
    best: Path | None = None
    best_size = 0
    for entry in entries:
        if not accept(entry.name):
            continue
        size = _size_of(entry)
        if size > best_size:
            best, best_size = Path(entry.path), size
    return best


def find_first_iso(root: Path) -> Path | None:
    """Return the first .iso file in walk order, or None.

    The walk stops at the first match.
    """
    for entry in iter_files(root):
        if is_iso_file(entry.name):
            return Path(entry.path)
    return None


def find_largest_m2ts(bdmv_root: Path) -> Path:
    """Find the largest .m2ts stream under a BDMV layout.

    If bdmv_root has a STREAM subdirectory only that subtree is searched.

    Raises:
        NoVideoFoundError: If no non-empty .m2ts file exists.
        MediaScanError: If the walk hits an unreadable entry.
    """
    search_root = bdmv_root / STREAM_DIR
    if not search_root.is_dir():
        search_root = bdmv_root
    found = _largest(iter_files(search_root), is_m2ts_file)
    if found is None:
        raise NoVideoFoundError(bdmv_root, "no m2ts files found under BDMV")
    logger.debug("Largest m2ts under %s: %s", bdmv_root, found)
    return found


def find_largest_video_file(root: Path) -> Path:
    """Find the largest recognized video file anywhere under root.

    Raises:
        NoVideoFoundError: If no non-empty video file exists.
        MediaScanError: If the walk hits an unreadable entry.
    """
    found = _largest(iter_files(root), is_video_file)
    if found is None:
        raise NoVideoFoundError(root)
    return found


def find_video_file(root: Path) -> Path:
    """Pick a single video file from a directory.

    Files directly inside root are preferred over anything nested: only
    when the top level holds no usable video is the whole tree searched.

    Raises:
        NoVideoFoundError: If no non-empty video file exists.
        MediaScanError: If the walk hits an unreadable entry.
    """
    top_level = (entry for entry in _sorted_entries(root) if not _is_dir(entry))
    found = _largest(top_level, is_video_file)
    if found is not None:
        return found
    return find_largest_video_file(root)


def find_video_candidates(root: Path, limit: int) -> list[VideoCandidate]:
    """Rank every video file under root and return the top entries.

    Args:
        root: Directory to walk.
        limit: Maximum number of candidates; values below 1 are treated as 1.

    Returns:
        Up to limit candidates ordered by descending size, then path.

    Raises:
        NoVideoFoundError: If the tree holds no recognized video file.
        MediaScanError: If the walk hits an unreadable entry.
    """
    limit = max(limit, 1)
    candidates = [
        VideoCandidate(path=Path(entry.path), size_bytes=_size_of(entry))
        for entry in iter_files(root)
        if is_video_file(entry.name)
    ]
    if not candidates:
        raise NoVideoFoundError(root)
    candidates.sort(key=VideoCandidate.sort_key)
    return candidates[:limit]


def _is_stream_dir(path: Path) -> bool:
    return path.name.upper() == STREAM_DIR and path.parent.name.upper() == BDMV_DIR


def playback_bdmv_root(path: Path) -> Path | None:
    """Locate the BDMV directory whose streams should be played.

    Accepts a BDMV directory, its STREAM subdirectory, or a disc root
    holding a BDMV child.

    Returns:
        The directory to search for .m2ts streams, or None if path is not
        part of a BDMV layout.
    """
    if path.name.upper() == BDMV_DIR or _is_stream_dir(path):
        return path
    child = path / BDMV_DIR
    if child.is_dir():
        return child
    return None


def disc_root(path: Path) -> Path | None:
    """Locate the disc root (the directory containing BDMV).

    Accepts the same inputs as playback_bdmv_root, so a BDMV directory and
    its parent resolve to the same disc root.

    Returns:
        The disc root, or None if path is not part of a BDMV layout.
    """
    if path.name.upper() == BDMV_DIR:
        return path.parent
    if _is_stream_dir(path):
        return path.parent.parent
    if (path / BDMV_DIR).is_dir():
        return path
    return None
