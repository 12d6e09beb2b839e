"""API route modules for the minfo web server.

- media.py: mediainfo, bdinfo and screenshots tool endpoints
- paths.py: path autocomplete under the media root
- errors.py: JSON envelopes and error-to-status mapping
"""

from aiohttp import web

from minfo.server.api.media import setup_media_routes
from minfo.server.api.paths import setup_path_routes

__all__ = [
    "setup_api_routes",
]


def setup_api_routes(app: web.Application) -> None:
    """Register all API routes with the application."""
    setup_media_routes(app)
    setup_path_routes(app)
