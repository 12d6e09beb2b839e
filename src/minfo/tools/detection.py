"""External tool lookup.

Resolves the executables minfo shells out to (mediainfo, bdinfo, ffprobe,
ffmpeg, mount, umount). Each tool's binary can be overridden independently
through ToolPathsConfig; the default is the bare tool name looked up on
PATH. Lookups are read-only and safe to call concurrently.
"""

from __future__ import annotations

import logging
import shutil

from minfo.config.models import DEFAULT_TOOL_BINARIES, ToolPathsConfig
from minfo.core.errors import ToolNotFoundError

logger = logging.getLogger(__name__)

# Tool name -> environment variable that overrides its binary
TOOL_ENV_VARS: dict[str, str] = {
    "mediainfo": "MEDIAINFO_BIN",
    "bdinfo": "BDINFO_BIN",
    "ffprobe": "FFPROBE_BIN",
    "ffmpeg": "FFMPEG_BIN",
    "mount": "MOUNT_BIN",
    "umount": "UMOUNT_BIN",
}


def find_tool(tool: str, tools: ToolPathsConfig) -> str | None:
    """Find a tool executable.

    Args:
        tool: Tool name (e.g. "ffmpeg").
        tools: Tool path configuration.

    Returns:
        Path to the executable, or None if it cannot be found.
    """
    binary = tools.binary_for(tool)
    return shutil.which(binary)


def resolve_tool(tool: str, tools: ToolPathsConfig) -> str:
    """Resolve a tool executable or raise.

    Args:
        tool: Tool name (e.g. "ffmpeg").
        tools: Tool path configuration.

    Returns:
        Path to the executable.

    Raises:
        ToolNotFoundError: If the configured binary is not executable or
            not on PATH.
    """
    found = find_tool(tool, tools)
    if found is None:
        binary = tools.binary_for(tool)
        logger.debug("Tool %s not found (binary=%s)", tool, binary)
        raise ToolNotFoundError(tool, binary, TOOL_ENV_VARS.get(tool))
    return found


def check_tool_availability(tools: ToolPathsConfig) -> dict[str, bool]:
    """Report which external tools are available.

    Returns:
        Mapping of tool name to availability.
    """
    return {tool: find_tool(tool, tools) is not None for tool in DEFAULT_TOOL_BINARIES}
