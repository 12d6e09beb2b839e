"""Request middleware.

The access log middleware gives every request a request ID (logged on every
record emitted while the request is handled, and echoed in the
``X-Request-ID`` response header) and logs method, path, status and
duration once the handler finishes.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable

from aiohttp import web

from minfo.logging.context import request_context

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

REQUEST_ID_HEADER = "X-Request-ID"


@web.middleware
async def access_log_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    """Log each request and bind a request ID to its log records."""
    incoming_id = request.headers.get(REQUEST_ID_HEADER)
    with request_context(request_id=incoming_id, request_path=request.path) as rid:
        start = time.monotonic()
        status = 500
        try:
            response = await handler(request)
            status = response.status
        except web.HTTPException as e:
            status = e.status
            raise
        finally:
            logger.info(
                "%s %s %d %.3fs",
                request.method,
                request.path,
                status,
                time.monotonic() - start,
                extra={"method": request.method, "status": status},
            )
        response.headers[REQUEST_ID_HEADER] = rid
        return response
