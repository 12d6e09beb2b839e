"""Scoped release guards.

A ScopedRelease owns a single asynchronous cleanup action (unmounting an
ISO, deleting a staged upload). Whoever holds the guard is responsible for
calling release() exactly once on every exit path; the guard makes repeated
calls harmless so error paths can release unconditionally.

Example:
    async with ScopedRelease(cleanup, label="upload"):
        ...  # use the resource
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from types import TracebackType

logger = logging.getLogger(__name__)

ReleaseAction = Callable[[], Awaitable[None]]


class ScopedRelease:
    """Idempotent guard around a single cleanup action."""

    def __init__(self, action: ReleaseAction | None = None, *, label: str = "") -> None:
        """Initialize the guard.

        Args:
            action: Coroutine function performing the cleanup. None creates
                a no-op guard for resources that need no cleanup.
            label: Short description used in debug logs.
        """
        self._action = action
        self._released = False
        self.label = label or ("noop" if action is None else "resource")

    @classmethod
    def noop(cls) -> ScopedRelease:
        """Create a guard that releases nothing."""
        return cls()

    @property
    def released(self) -> bool:
        """True once release() has been called."""
        return self._released

    async def release(self) -> None:
        """Run the cleanup action once.

        Subsequent calls return immediately. The guard is marked released
        before the action runs, so an action that raises is not retried.
        """
        if self._released:
            return
        self._released = True
        if self._action is None:
            return
        logger.debug("Releasing %s", self.label)
        await self._action()

    async def __aenter__(self) -> ScopedRelease:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.release()

    def __repr__(self) -> str:
        state = "released" if self._released else "held"
        return f"ScopedRelease({self.label!r}, {state})"
