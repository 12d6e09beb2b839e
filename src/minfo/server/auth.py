"""HTTP Basic Authentication middleware for the minfo web UI.

When a password is configured (WEB_PASSWORD), every endpoint except
/health requires HTTP Basic Authentication (RFC 7617). Any username is
accepted; only the password is checked.

Security note: credentials travel in clear text. Put the server behind a
TLS terminating reverse proxy when exposing it beyond a trusted network.
"""

from __future__ import annotations

import base64
import binascii
import logging
import secrets
from collections.abc import Awaitable, Callable

from aiohttp import web

logger = logging.getLogger(__name__)

AUTH_REALM = "minfo"
UNAUTHENTICATED_PATHS = frozenset({"/health"})

RequestHandler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def parse_basic_auth(auth_header: str | None) -> tuple[str, str] | None:
    """Parse an HTTP Basic Authorization header.

    Args:
        auth_header: The value of the Authorization header, or None.

    Returns:
        Tuple of (username, password) if the header is valid Basic auth,
        None if it is missing, malformed, or uses another scheme.

    Example:
        >>> parse_basic_auth("Basic dXNlcjpwYXNzd29yZA==")
        ('user', 'password')
        >>> parse_basic_auth("Bearer token123") is None
        True
    """
    if not auth_header or not auth_header.startswith("Basic "):
        return None

    encoded = auth_header[len("Basic ") :].strip()
    if not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    # Split on the first colon only; passwords may contain colons
    if ":" not in decoded:
        return None
    username, password = decoded.split(":", 1)
    return username, password


def validate_password(provided: str, expected: str) -> bool:
    """Compare passwords in constant time."""
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def is_auth_enabled(password: str | None) -> bool:
    """Check whether authentication is enabled.

    Empty or whitespace-only passwords disable authentication.
    """
    return password is not None and password.strip() != ""


def _unauthorized() -> web.Response:
    return web.json_response(
        {"ok": False, "error": "unauthorized"},
        status=401,
        headers={"WWW-Authenticate": f'Basic realm="{AUTH_REALM}"'},
    )


def create_auth_middleware(
    password: str,
) -> Callable[..., Awaitable[web.StreamResponse]]:
    """Create auth middleware for the given password.

    The returned middleware:
    - Allows /health without authentication (for container probes)
    - Requires valid Basic Auth credentials for everything else
    - Returns 401 with a WWW-Authenticate header on failure

    Args:
        password: The shared secret to validate against.

    Returns:
        aiohttp middleware function.
    """

    @web.middleware
    async def auth_middleware(
        request: web.Request, handler: RequestHandler
    ) -> web.StreamResponse:
        if request.path in UNAUTHENTICATED_PATHS:
            return await handler(request)

        credentials = parse_basic_auth(request.headers.get("Authorization"))
        if credentials is None:
            return _unauthorized()

        _username, provided = credentials
        if not validate_password(provided, password):
            logger.info("Rejected credentials for %s %s", request.method, request.path)
            return _unauthorized()

        return await handler(request)

    return auth_middleware
