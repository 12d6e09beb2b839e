"""Media source resolution.

SourceResolver turns arbitrary input (a file, a directory, a BDMV tree or
an ISO image) into the concrete path a downstream tool should read. When
resolution mounts an ISO, the mount's release guard travels with the
result; if anything fails after the mount, the mount is released before the
error propagates.
"""

from __future__ import annotations

import asyncio
import logging
import os
import stat
from pathlib import Path

from minfo.config.models import MinfoConfig
from minfo.core.errors import DiscLayoutError, MediaScanError, SourceNotFoundError
from minfo.media.discovery import (
    disc_root,
    find_first_iso,
    find_largest_m2ts,
    find_video_candidates,
    find_video_file,
    is_iso_file,
    playback_bdmv_root,
)
from minfo.media.models import ResolvedCandidates, ResolvedSource
from minfo.media.mount import MountController

logger = logging.getLogger(__name__)

DEFAULT_CANDIDATE_LIMIT = 5


def _is_directory(path: Path) -> bool:
    try:
        st = os.stat(path)
    except (FileNotFoundError, NotADirectoryError) as e:
        raise SourceNotFoundError(path) from e
    except OSError as e:
        raise MediaScanError(path, e) from e
    return stat.S_ISDIR(st.st_mode)


class SourceResolver:
    """Resolves user input to media paths for the external tools."""

    def __init__(
        self,
        mounter: MountController,
        *,
        candidate_limit: int = DEFAULT_CANDIDATE_LIMIT,
    ) -> None:
        self._mounter = mounter
        self.candidate_limit = max(candidate_limit, 1)

    @classmethod
    def from_config(cls, config: MinfoConfig) -> SourceResolver:
        return cls(
            MountController.from_config(config),
            candidate_limit=config.resolver.candidate_limit,
        )

    async def resolve_for_playback(self, input_path: Path | str) -> ResolvedSource:
        """Resolve input to a single streamable video file.

        - A plain file is returned as is.
        - An ISO file is mounted and its largest BDMV stream returned.
        - A BDMV layout (the BDMV directory, its STREAM subdirectory or a
          disc root) yields its largest .m2ts stream.
        - Any other directory yields the first ISO found in walk order
          (mounted as above), else its largest video file, preferring the
          top level over nested files.

        Raises:
            SourceNotFoundError: If input does not exist.
            NoVideoFoundError: If no usable video is found.
            DiscLayoutError: If a mounted ISO has no BDMV directory.
            MediaScanError: If a directory walk hits an unreadable entry.
            MountError: If an ISO cannot be mounted.
        """
        path = Path(input_path)
        if not await asyncio.to_thread(_is_directory, path):
            if is_iso_file(path):
                return await self._stream_from_iso(path)
            return ResolvedSource(path)

        bdmv = await asyncio.to_thread(playback_bdmv_root, path)
        if bdmv is not None:
            return ResolvedSource(await asyncio.to_thread(find_largest_m2ts, bdmv))

        iso = await asyncio.to_thread(find_first_iso, path)
        if iso is not None:
            return await self._stream_from_iso(iso)

        return ResolvedSource(await asyncio.to_thread(find_video_file, path))

    async def resolve_candidates(
        self, input_path: Path | str, limit: int | None = None
    ) -> ResolvedCandidates:
        """Resolve input to ranked video files for metadata extraction.

        Args:
            input_path: File or directory.
            limit: Maximum number of candidates (defaults to the configured
                candidate limit; values below 1 are treated as 1).

        Returns:
            A plain file on its own, or up to limit video files under a
            directory ranked by descending size then path.

        Raises:
            SourceNotFoundError: If input does not exist.
            NoVideoFoundError: If a directory holds no video files.
            MediaScanError: If the walk hits an unreadable entry.
        """
        path = Path(input_path)
        if not await asyncio.to_thread(_is_directory, path):
            return ResolvedCandidates((path,))
        candidates = await asyncio.to_thread(
            find_video_candidates,
            path,
            self.candidate_limit if limit is None else limit,
        )
        logger.debug("Resolved %d candidates under %s", len(candidates), path)
        return ResolvedCandidates(tuple(c.path for c in candidates))

    async def resolve_disc_root(self, input_path: Path | str) -> ResolvedSource:
        """Resolve input to a disc root for disc-level tools.

        The disc root is the directory holding BDMV. A BDMV directory, its
        STREAM subdirectory and the disc root itself all resolve to the same
        path. ISO files, or the first ISO found in a directory, are mounted
        and the mount point is returned.

        Raises:
            SourceNotFoundError: If input does not exist.
            DiscLayoutError: If input is a non-ISO file, holds neither a
                BDMV layout nor an ISO, or a mounted ISO lacks BDMV.
            MediaScanError: If the walk hits an unreadable entry.
            MountError: If an ISO cannot be mounted.
        """
        path = Path(input_path)
        if not await asyncio.to_thread(_is_directory, path):
            if is_iso_file(path):
                return await self._disc_from_iso(path)
            raise DiscLayoutError("path must be a folder containing BDMV or ISO")

        root = await asyncio.to_thread(disc_root, path)
        if root is not None:
            return ResolvedSource(root)

        iso = await asyncio.to_thread(find_first_iso, path)
        if iso is not None:
            return await self._disc_from_iso(iso)

        raise DiscLayoutError("path does not contain BDMV or BDISO content")

    async def _stream_from_iso(self, iso_path: Path) -> ResolvedSource:
        handle = await self._mounter.mount(iso_path)
        try:
            bdmv = await asyncio.to_thread(playback_bdmv_root, handle.mount_point)
            if bdmv is None:
                raise DiscLayoutError("BDMV folder not found in ISO")
            stream = await asyncio.to_thread(find_largest_m2ts, bdmv)
        except BaseException:
            await handle.release.release()
            raise
        return ResolvedSource(stream, handle.release)

    async def _disc_from_iso(self, iso_path: Path) -> ResolvedSource:
        handle = await self._mounter.mount(iso_path)
        try:
            if await asyncio.to_thread(disc_root, handle.mount_point) is None:
                raise DiscLayoutError("BDMV folder not found in ISO")
        except BaseException:
            await handle.release.release()
            raise
        return ResolvedSource(handle.mount_point, handle.release)
