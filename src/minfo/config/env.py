"""Typed access to environment variables.

Values are read through EnvReader, which can be handed a plain dict in
tests instead of touching os.environ. Blank values count as unset, and a
value that does not parse falls back to the caller's default with a
warning rather than stopping startup.
"""

from __future__ import annotations

import logging
import math
import os
import re
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# One component of a duration such as "1h30m" or "1.5s"
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ms|h|m|s)")
_DURATION_UNITS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


def parse_duration(value: str) -> float:
    """Parse a duration string into seconds.

    Accepts bare numbers (seconds) and unit sequences in the style of
    "90s", "10m" or "1h30m".

    Raises:
        ValueError: If the string is not a valid duration.
    """
    text = value.strip()
    if not text:
        raise ValueError("empty duration")
    try:
        return float(text)
    except ValueError:
        pass

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos != len(text) or pos == 0:
        raise ValueError(f"invalid duration {value!r}")
    return total


def _positive_duration(value: str) -> float:
    seconds = parse_duration(value)
    if not math.isfinite(seconds) or seconds <= 0:
        raise ValueError(f"duration must be positive: {value!r}")
    return seconds


class EnvReader:
    """Reads and converts environment variables.

    Example:
        reader = EnvReader(env={"PORT": "9000"})
        reader.get_int("PORT", 8080)  # 9000
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        """Read from env, or from os.environ when env is None."""
        self._env: Mapping[str, str] = os.environ if env is None else env

    def _lookup(self, var: str) -> str | None:
        value = (self._env.get(var) or "").strip()
        return value or None

    def _convert(
        self,
        var: str,
        default: T | None,
        convert: Callable[[str], T],
        kind: str,
    ) -> T | None:
        raw = self._lookup(var)
        if raw is None:
            return default
        try:
            return convert(raw)
        except ValueError:
            logger.warning("invalid %s %s=%r; fallback to %s", kind, var, raw, default)
            return default

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Return the stripped value, or default when unset or blank."""
        raw = self._lookup(var)
        return default if raw is None else raw

    def get_int(self, var: str, default: int | None = None) -> int | None:
        return self._convert(var, default, int, "integer")

    def get_float(self, var: str, default: float | None = None) -> float | None:
        return self._convert(var, default, float, "number")

    def get_duration(self, var: str, default: float | None = None) -> float | None:
        """Return a positive duration in seconds ("600", "90s", "1h30m").

        Zero, negative and non-finite values are treated as invalid.
        """
        return self._convert(var, default, _positive_duration, "duration")

    def get_path(self, var: str, default: Path | None = None) -> Path | None:
        """Return the value as a Path with ``~`` expanded."""
        raw = self._lookup(var)
        return default if raw is None else Path(raw).expanduser()
