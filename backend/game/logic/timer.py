"""
Server-side round deadline timer.

One RoundTimer per active room sleeps until the room's deadline and then
awaits a callback. The callback re-checks the room through Room.tick, so a
timer that fires late, or after the room already ended, does no harm.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

logger = structlog.get_logger()

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


def _current_task() -> asyncio.Task | None:
    try:
        return asyncio.current_task()
    except RuntimeError:  # no running loop
        return None


class RoundTimer:
    """Single-shot asyncio timer for a round deadline."""

    def __init__(self) -> None:
        self._active_task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._active_task is not None and not self._active_task.done()

    def start(self, seconds: float, on_timeout: Callable[[], Awaitable[None]]) -> None:
        """Start (or restart) the timer. Negative delays fire immediately."""
        self.cancel()
        self._active_task = asyncio.create_task(self._run_timer(max(0.0, seconds), on_timeout))

    def cancel(self) -> None:
        """
        Cancel the active timer. Safe to call when nothing is running.

        Called from inside the timeout callback, the task is only detached:
        cancelling it there would abort the callback.
        """
        task, self._active_task = self._active_task, None
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()

    async def _run_timer(self, seconds: float, on_timeout: Callable[[], Awaitable[None]]) -> None:
        try:
            await asyncio.sleep(seconds)
            await on_timeout()
        except asyncio.CancelledError:
            pass
        except (RuntimeError, OSError, ConnectionError, ValueError):  # fmt: skip
            logger.exception("round timer callback failed")
