"""Read-only ISO mounting.

Each mount gets its own temporary directory, so concurrent requests never
share a mount point. The returned MountHandle owns both the mount and the
directory; releasing it unmounts (falling back to a lazy unmount) and then
removes the directory whether or not the unmount succeeded.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import shutil
import tempfile
from pathlib import Path

from minfo.config.models import MinfoConfig, TimeoutsConfig, ToolPathsConfig
from minfo.core.errors import MountError, ToolFailureError, ToolTimeoutError
from minfo.core.release import ScopedRelease
from minfo.core.subprocess_utils import best_error_message, run_command
from minfo.media.models import MountHandle
from minfo.tools.detection import resolve_tool

logger = logging.getLogger(__name__)

MOUNT_DIR_PREFIX = "minfo-iso-mount-"
MOUNT_OPTIONS = "loop,ro"


def _remove_dir(path: Path) -> None:
    shutil.rmtree(path, ignore_errors=True)


class MountController:
    """Mounts ISO images read-only on private temporary directories."""

    def __init__(
        self,
        tools: ToolPathsConfig | None = None,
        timeouts: TimeoutsConfig | None = None,
        *,
        temp_dir: Path | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            tools: Tool path configuration for the mount and umount binaries.
            timeouts: Mount and unmount deadlines.
            temp_dir: Parent directory for mount points. None uses the
                system temporary directory.
        """
        self._tools = tools or ToolPathsConfig()
        self._timeouts = timeouts or TimeoutsConfig()
        self._temp_dir = temp_dir

    @classmethod
    def from_config(cls, config: MinfoConfig) -> MountController:
        return cls(config.tools, config.timeouts)

    async def mount(self, iso_path: Path | str) -> MountHandle:
        """Mount an ISO image read-only.

        The mount runs under its own deadline, nested inside whatever
        deadline the calling task already has. If the mount fails, times
        out or is cancelled, the temporary directory is removed before the
        error propagates.

        Args:
            iso_path: Path to the disc image.

        Returns:
            MountHandle whose release unmounts the image and removes the
            mount point. The caller must release it exactly once.

        Raises:
            ToolNotFoundError: If mount or umount cannot be located.
            MountError: If the mount tool exits non-zero.
            ToolTimeoutError: If the mount tool exceeds its deadline.
        """
        iso_path = Path(iso_path)
        mount_bin = resolve_tool("mount", self._tools)
        umount_bin = resolve_tool("umount", self._tools)

        mount_dir = Path(
            await asyncio.to_thread(
                tempfile.mkdtemp, prefix=MOUNT_DIR_PREFIX, dir=self._temp_dir
            )
        )
        try:
            result = await run_command(
                [mount_bin, "-o", MOUNT_OPTIONS, iso_path, mount_dir],
                timeout=self._timeouts.mount,
            )
        except BaseException:
            await asyncio.to_thread(_remove_dir, mount_dir)
            raise

        if not result.ok:
            await asyncio.to_thread(_remove_dir, mount_dir)
            message = result.stderr_text.strip() or str(result.error)
            logger.warning("Failed to mount %s: %s", iso_path, message)
            raise MountError(message, stderr=result.stderr_text)

        logger.info("Mounted %s at %s", iso_path, mount_dir)
        return MountHandle(
            mount_point=mount_dir,
            backing_image=iso_path,
            release=ScopedRelease(
                functools.partial(self._unmount, umount_bin, mount_dir),
                label=f"mount {mount_dir}",
            ),
        )

    async def _try_umount(self, args: list[str | Path]) -> bool:
        # Each attempt gets a fresh deadline of its own so cleanup still runs
        # after the request deadline that triggered it has expired.
        try:
            result = await run_command(args, timeout=self._timeouts.umount)
        except (ToolFailureError, ToolTimeoutError) as e:
            logger.warning("Unmount attempt failed: %s", e)
            return False
        if not result.ok:
            logger.warning(
                "Unmount attempt failed: %s",
                best_error_message(str(result.error), result.stderr_text),
            )
            return False
        return True

    async def _unmount(self, umount_bin: str, mount_dir: Path) -> None:
        try:
            if await self._try_umount([umount_bin, mount_dir]):
                logger.info("Unmounted %s", mount_dir)
            elif await self._try_umount([umount_bin, "-l", mount_dir]):
                logger.info("Lazily unmounted %s", mount_dir)
            else:
                logger.error("Could not unmount %s", mount_dir)
        finally:
            await asyncio.to_thread(_remove_dir, mount_dir)
