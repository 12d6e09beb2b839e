"""JSON log formatting.

Each record becomes one JSON object per line. Request fields sit at the
top level so collectors can group lines by request; anything passed via
``extra=`` is nested under ``context``.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Attributes present on every LogRecord; anything else came from extra=
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}

_REQUEST_ATTRS = ("request_id", "request_path")
_HIDDEN_ATTRS = frozenset({*_REQUEST_ATTRS, "request_tag"})


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(timespec="milliseconds"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for attr in _REQUEST_ATTRS:
            value = getattr(record, attr, None)
            if value:
                entry[attr] = value

        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
            and key not in _HIDDEN_ATTRS
            and not key.startswith("_")
        }
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)
