"""Tool endpoints: mediainfo, bdinfo and screenshots.

Each handler stages the request input, runs the matching inspection
workflow under the configured request deadline and releases the staged
input on every exit path. Failures are reported through the JSON
envelope with a status chosen by error_status().
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import AsyncExitStack
from functools import wraps

from aiohttp import web

from minfo.core.errors import MinfoError
from minfo.inspection import bdinfo_report, capture_screenshots, mediainfo_report
from minfo.server.api.errors import error_status, info_error, info_response
from minfo.server.state import CONFIG_KEY, RESOLVER_KEY
from minfo.server.uploads import stage_input

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def json_errors(handler: Handler) -> Handler:
    """Decorator reporting minfo errors, deadlines and OS errors as envelopes."""

    @wraps(handler)
    async def wrapper(request: web.Request) -> web.StreamResponse:
        try:
            return await handler(request)
        except MinfoError as e:
            status = error_status(e)
            log = logger.warning if status >= 500 else logger.info
            log("%s failed (%d): %s", request.path, status, e)
            return info_error(str(e), status=status)
        except TimeoutError:
            timeout = request.app[CONFIG_KEY].timeouts.request
            logger.warning("%s timed out after %gs", request.path, timeout)
            return info_error(f"request timed out after {timeout:g}s", status=504)
        except OSError as e:
            # Filesystem failures outside the tools (staging, packaging)
            logger.exception("%s failed", request.path)
            return info_error(str(e), status=500)

    return wrapper


async def _run_tool_request(
    request: web.Request,
    workflow: Callable[..., Awaitable[str | bytes]],
) -> str | bytes:
    config = request.app[CONFIG_KEY]
    resolver = request.app[RESOLVER_KEY]
    async with AsyncExitStack() as stack:
        staged = await stage_input(request, config.server.max_upload_bytes)
        await stack.enter_async_context(staged.release)
        async with asyncio.timeout(config.timeouts.request):
            return await workflow(resolver, config.tools, staged.path)


@json_errors
async def mediainfo_handler(request: web.Request) -> web.Response:
    """Handle POST /api/mediainfo.

    Form fields: ``path`` (server-side file or directory) or ``file``
    (upload). Directories are searched for video files and the largest
    candidates are tried in turn.
    """
    output = await _run_tool_request(request, mediainfo_report)
    return info_response(str(output))


@json_errors
async def bdinfo_handler(request: web.Request) -> web.Response:
    """Handle POST /api/bdinfo.

    Accepts a BDMV folder, a disc root, an ISO file or a folder holding an
    ISO. ISO images are mounted read-only for the duration of the run.
    """
    output = await _run_tool_request(request, bdinfo_report)
    return info_response(str(output))


@json_errors
async def screenshots_handler(request: web.Request) -> web.Response:
    """Handle POST /api/screenshots.

    Returns:
        ``screenshots.zip`` with eight PNG frames spread across the video.
    """
    archive = await _run_tool_request(request, capture_screenshots)
    return web.Response(
        body=archive,
        content_type="application/zip",
        headers={"Content-Disposition": 'attachment; filename="screenshots.zip"'},
    )


def setup_media_routes(app: web.Application) -> None:
    """Register tool endpoints."""
    app.router.add_post("/api/mediainfo", mediainfo_handler)
    app.router.add_post("/api/bdinfo", bdinfo_handler)
    app.router.add_post("/api/screenshots", screenshots_handler)
