"""Request context for structured logging.

Provides context propagation for request-handling tasks using contextvars,
enabling automatic injection of request_id and the request path into log
records emitted anywhere below a handler (resolver, mount, tool runs).
"""

from __future__ import annotations

import contextvars
import logging
import uuid
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_request_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_path", default=None
)


def new_request_id() -> str:
    """Return a short random identifier for a request."""
    return uuid.uuid4().hex[:8]


def get_request_context() -> tuple[str | None, str | None]:
    """Get current request context.

    Returns:
        Tuple of (request_id, request_path), either may be None.
    """
    return _request_id.get(), _request_path.get()


@contextmanager
def request_context(
    request_id: str | None = None,
    request_path: str | None = None,
) -> Generator[str, None, None]:
    """Context manager for request handling context.

    Sets request context on entry, restores the previous values on exit.
    Safe across asyncio tasks because each task runs in its own context copy.

    Yields:
        The request identifier in effect.

    Example:
        with request_context(request_path="/api/bdinfo") as rid:
            logger.info("Resolving source")  # Automatically tagged [rid]
    """
    rid = request_id or new_request_id()
    id_token = _request_id.set(rid)
    path_token = _request_path.set(request_path)
    try:
        yield rid
    finally:
        _request_id.reset(id_token)
        _request_path.reset(path_token)


class RequestContextFilter(logging.Filter):
    """Logging filter that injects request context into log records.

    Adds request_id and request_path attributes for JSON output and a
    compact request_tag like "[3f2a9c1e] " for text output.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        request_id, request_path = get_request_context()
        record.request_id = request_id
        record.request_path = request_path
        record.request_tag = f"[{request_id}] " if request_id else ""
        return True  # Never filter out records
