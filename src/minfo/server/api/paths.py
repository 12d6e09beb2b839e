"""Path autocomplete endpoint.

Suggestions are restricted to the configured media root: a prefix that
escapes the root (absolute, or through ``..``) is rejected.
"""

from __future__ import annotations

import asyncio
import logging
import os

from aiohttp import web

from minfo.server.api.errors import RequestError, path_error, path_response
from minfo.server.state import CONFIG_KEY

logger = logging.getLogger(__name__)


class PathOutsideRootError(RequestError):
    """Raised when a suggestion prefix points outside the media root."""

    def __init__(self) -> None:
        super().__init__("path is outside MEDIA_ROOT")


def is_subpath(root: str, path: str) -> bool:
    """Check whether path equals root or lies beneath it (lexically)."""
    rel = os.path.relpath(path, root)
    return rel == "." or not (rel == ".." or rel.startswith(".." + os.sep))


def list_dir(directory: str, base: str, limit: int) -> list[str]:
    """List entries of directory whose names start with base (any case).

    Directories are suffixed with a path separator. At most limit entries
    are returned; limit <= 0 means no cap.

    Raises:
        OSError: If the directory cannot be read.
    """
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda entry: entry.name)

    base_lower = base.lower()
    items: list[str] = []
    for entry in entries:
        if base_lower and not entry.name.lower().startswith(base_lower):
            continue
        full = os.path.join(directory, entry.name)
        if entry.is_dir(follow_symlinks=False):
            full += os.sep
        items.append(full)
        if 0 < limit <= len(items):
            break
    return items


def suggest_paths(root: str, prefix: str, limit: int) -> list[str]:
    """Suggest filesystem paths completing prefix under root.

    A prefix ending in a separator lists that directory; otherwise the
    entries of its parent directory matching the final component are
    returned. Relative prefixes are taken relative to root.

    Raises:
        PathOutsideRootError: If the prefix resolves outside root.
        OSError: If the directory cannot be read.
    """
    root_abs = os.path.abspath(os.path.normpath(root))
    if not prefix:
        return list_dir(root_abs, "", limit)

    cleaned = os.path.normpath(prefix)
    if os.path.isabs(cleaned):
        abs_prefix = cleaned
    else:
        abs_prefix = os.path.normpath(os.path.join(root_abs, cleaned))

    if prefix.endswith(("/", os.sep)):
        if not is_subpath(root_abs, abs_prefix):
            raise PathOutsideRootError()
        return list_dir(abs_prefix, "", limit)

    directory, base = os.path.split(abs_prefix)
    if not is_subpath(root_abs, directory):
        raise PathOutsideRootError()
    return list_dir(directory, base, limit)


async def path_suggest_handler(request: web.Request) -> web.Response:
    """Handle GET /api/path?prefix=...

    Returns:
        ``{"ok": true, "root": ..., "items": [...]}`` on success.
    """
    server = request.app[CONFIG_KEY].server
    root = str(server.media_root)
    prefix = request.query.get("prefix", "").strip().strip('"')

    try:
        items = await asyncio.to_thread(
            suggest_paths, root, prefix, server.max_suggestions
        )
    except RequestError as e:
        return path_error(str(e), status=e.status)
    except OSError as e:
        logger.debug("Path suggestion failed for %r: %s", prefix, e)
        return path_error(str(e))

    return path_response(root, items)


def setup_path_routes(app: web.Application) -> None:
    app.router.add_get("/api/path", path_suggest_handler)
