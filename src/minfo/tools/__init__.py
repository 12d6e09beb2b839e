"""External tool lookup and invocation.

This package locates the external executables minfo depends on and wraps
their command lines (duration probe, frame capture, info dumps).
"""

from minfo.tools.detection import (
    TOOL_ENV_VARS,
    check_tool_availability,
    find_tool,
    resolve_tool,
)
from minfo.tools.ffmpeg import (
    build_capture_args,
    build_probe_args,
    capture_frame,
    parse_duration_output,
    probe_duration,
)
from minfo.tools.info import run_info_tool

__all__ = [
    # detection
    "TOOL_ENV_VARS",
    "check_tool_availability",
    "find_tool",
    "resolve_tool",
    # ffmpeg
    "build_capture_args",
    "build_probe_args",
    "capture_frame",
    "parse_duration_output",
    "probe_duration",
    # info
    "run_info_tool",
]
