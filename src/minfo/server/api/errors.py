"""JSON response envelopes and error mapping for the API.

Two envelopes are used, matching the web UI:
- ``{"ok": ..., "output": ..., "error": ...}`` for tool endpoints
- ``{"ok": ..., "root": ..., "items": [...], "error": ...}`` for path
  suggestions

Empty fields are omitted from the body.

Usage:
    from minfo.server.api.errors import info_error, info_response

    return info_response(report)
    return info_error("missing file or path")
"""

from __future__ import annotations

from typing import Any

from aiohttp import web

from minfo.core.errors import (
    MediaNotFoundError,
    MinfoError,
    ToolNotFoundError,
    ToolTimeoutError,
)


class RequestError(MinfoError):
    """Raised for malformed client input (missing fields, oversized body).

    Attributes:
        status: HTTP status to respond with.
    """

    def __init__(self, message: str, *, status: int = 400) -> None:
        self.status = status
        super().__init__(message)


def error_status(error: BaseException) -> int:
    """Map an exception to the HTTP status reported to the client.

    Missing input, missing media and missing tools are client errors;
    deadlines map to 504; anything else is a server-side failure.
    """
    if isinstance(error, RequestError):
        return error.status
    if isinstance(error, MediaNotFoundError | ToolNotFoundError):
        return 400
    if isinstance(error, ToolTimeoutError | TimeoutError):
        return 504
    return 500


def _envelope(ok: bool, **fields: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"ok": ok}
    body.update({key: value for key, value in fields.items() if value})
    return body


def info_response(output: str) -> web.Response:
    """Successful tool response."""
    return web.json_response(_envelope(True, output=output))


def info_error(message: str, *, status: int = 400) -> web.Response:
    """Failed tool response."""
    return web.json_response(_envelope(False, error=message), status=status)


def path_response(root: str, items: list[str]) -> web.Response:
    return web.json_response(_envelope(True, root=root, items=items))


def path_error(message: str, *, status: int = 400) -> web.Response:
    return web.json_response(_envelope(False, error=message), status=status)
