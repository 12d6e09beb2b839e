"""HTTP server for minfo.

This package provides the aiohttp application serving the tool API, path
suggestions, the health endpoint and the web UI.
"""

from minfo.server.app import create_app

__all__ = ["create_app"]
