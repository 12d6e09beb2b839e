"""HTTP application.

This module provides the aiohttp Application with the health endpoint,
the tool API and the static web UI.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path

from aiohttp import web

from minfo import __version__
from minfo.config.models import MinfoConfig
from minfo.media.resolver import SourceResolver
from minfo.server.api import setup_api_routes
from minfo.server.auth import create_auth_middleware, is_auth_enabled
from minfo.server.middleware import access_log_middleware
from minfo.server.state import CONFIG_KEY, RESOLVER_KEY, STARTED_AT_KEY
from minfo.tools.detection import check_tool_availability

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


@dataclass
class HealthStatus:
    """Health check response payload."""

    status: str
    """Overall status: 'healthy', or 'degraded' when a tool is missing."""

    version: str
    """minfo version string."""

    uptime_seconds: float
    """Seconds since the application was created."""

    tools: dict[str, bool] = field(default_factory=dict)
    """Availability of each external tool."""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


async def health_handler(request: web.Request) -> web.Response:
    """Handle GET /health requests.

    Always answers 200 while the process is serving; a missing external
    tool is reported as 'degraded' in the body rather than through the
    status code, so container probes do not restart the service for it.
    """
    config = request.app[CONFIG_KEY]
    tools = check_tool_availability(config.tools)
    health = HealthStatus(
        status="healthy" if all(tools.values()) else "degraded",
        version=__version__,
        uptime_seconds=round(time.monotonic() - request.app[STARTED_AT_KEY], 1),
        tools=tools,
    )
    return web.json_response(health.to_dict())


async def index_handler(request: web.Request) -> web.FileResponse:
    """Serve the web UI entry page."""
    return web.FileResponse(STATIC_DIR / "index.html")


def create_app(
    config: MinfoConfig | None = None,
    resolver: SourceResolver | None = None,
) -> web.Application:
    """Create and configure the aiohttp Application.

    Args:
        config: Application configuration. Defaults are used if None.
        resolver: Source resolver; built from config if None.

    Returns:
        Configured aiohttp Application instance.
    """
    config = config or MinfoConfig()

    app = web.Application(
        client_max_size=config.server.max_upload_bytes,
        middlewares=[access_log_middleware],
    )

    password = config.server.password
    if password and is_auth_enabled(password):
        app.middlewares.append(create_auth_middleware(password))
        logger.info("Authentication enabled for web UI and API endpoints")
    else:
        logger.warning(
            "Authentication is disabled. Set WEB_PASSWORD to protect the web UI."
        )

    app[CONFIG_KEY] = config
    app[RESOLVER_KEY] = resolver or SourceResolver.from_config(config)
    app[STARTED_AT_KEY] = time.monotonic()

    app.router.add_get("/health", health_handler)
    setup_api_routes(app)

    if (STATIC_DIR / "index.html").is_file():
        app.router.add_get("/", index_handler)
        app.router.add_static("/static", STATIC_DIR, name="static")
    else:
        logger.debug("No web UI assets found in %s", STATIC_DIR)

    return app
