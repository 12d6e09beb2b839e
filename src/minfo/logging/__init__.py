"""Structured logging module for minfo.

Provides configurable logging with JSON format support and file rotation.
Includes request context support for concurrent request handling.
"""

from minfo.logging.config import configure_logging
from minfo.logging.context import (
    RequestContextFilter,
    get_request_context,
    new_request_id,
    request_context,
)
from minfo.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "RequestContextFilter",
    "configure_logging",
    "get_request_context",
    "new_request_id",
    "request_context",
]
