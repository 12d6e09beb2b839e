"""Info dump tools (mediainfo, bdinfo)."""

from __future__ import annotations

from pathlib import Path

from minfo.core.subprocess_utils import run_command


async def run_info_tool(
    binary: str, path: Path | str, *, tool: str, timeout: float | None = None
) -> str:
    """Run an info tool against a path and return its report.

    The report is the tool's stdout followed by any stderr output; it may
    be empty, which callers treat according to the tool.

    Raises:
        ToolFailureError: If the tool exits non-zero.
        ToolTimeoutError: If the tool exceeds the timeout.
    """
    result = await run_command([binary, str(path)], timeout=timeout)
    result.check(tool)
    return result.combined_output()
