"""Data models for media source resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType

from minfo.core.release import ScopedRelease


@dataclass(frozen=True)
class VideoCandidate:
    """A video file found during a directory scan.

    Candidates rank by descending size, then ascending path, so selection
    is deterministic regardless of directory listing order.
    """

    path: Path
    size_bytes: int

    def sort_key(self) -> tuple[int, str]:
        return (-self.size_bytes, str(self.path))


@dataclass(frozen=True)
class MountHandle:
    """A mounted disc image.

    The handle owns both the OS-level mount and the temporary directory it
    is mounted on. Calling release.release() unmounts and removes the
    directory; the holder must do so exactly once.
    """

    mount_point: Path
    backing_image: Path
    release: ScopedRelease


class _ReleasingContext:
    """Async context manager support for resolution results."""

    release: ScopedRelease

    async def __aenter__(self):
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.release.release()


@dataclass(frozen=True)
class ResolvedSource(_ReleasingContext):
    """The concrete path a downstream tool should read.

    If resolution mounted an ISO, release unmounts it; otherwise release is
    a no-op. Use as an async context manager so release happens when the
    caller is done with the path:

        async with await resolver.resolve_for_playback(path) as source:
            await probe_duration(ffprobe, source.path)
    """

    path: Path
    release: ScopedRelease = field(default_factory=ScopedRelease.noop)


@dataclass(frozen=True)
class ResolvedCandidates(_ReleasingContext):
    """Ranked candidate paths for metadata extraction (never empty)."""

    paths: tuple[Path, ...]
    release: ScopedRelease = field(default_factory=ScopedRelease.noop)
