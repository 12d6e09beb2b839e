"""Root logger setup from LoggingConfig."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from minfo.logging.context import RequestContextFilter
from minfo.logging.handlers import JSONFormatter

if TYPE_CHECKING:
    from minfo.config.models import LoggingConfig

# request_tag is "[3f2a9c1e] " inside a request and empty otherwise
TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(request_tag)s%(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def _formatter(config: LoggingConfig) -> logging.Formatter:
    if config.format.casefold() == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)


def _open_log_file(config: LoggingConfig) -> logging.Handler | None:
    if config.file is None:
        return None
    path = Path(config.file).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        # Logging is not configured yet; report on stderr directly
        print(f"minfo: cannot open log file {path}: {e}", file=sys.stderr)
        return None


def configure_logging(config: LoggingConfig) -> None:
    """Replace the root logger's handlers according to config.

    Records go to the log file when one is configured and can be opened,
    and to stderr when no file is in use or include_stderr is set. Every
    handler tags records with the current request context.
    """
    level = logging.getLevelName(config.level.upper())
    handlers: list[logging.Handler] = []

    file_handler = _open_log_file(config)
    if file_handler is not None:
        handlers.append(file_handler)
    if file_handler is None or config.include_stderr:
        handlers.append(logging.StreamHandler(sys.stderr))

    formatter = _formatter(config)
    request_filter = RequestContextFilter()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(request_filter)

    root = logging.getLogger()
    for old in root.handlers[:]:
        root.removeHandler(old)
    root.setLevel(level)
    for handler in handlers:
        root.addHandler(handler)
