"""Manage per-room round deadline timers."""

import logging
from collections.abc import Awaitable, Callable

from game.logic.timer import RoundTimer

logger = logging.getLogger(__name__)

# Callback type: (room_id) -> Awaitable[None]
DeadlineCallback = Callable[[str], Awaitable[None]]


class TimerManager:
    """Manage round timer lifecycle for all active rooms.

    Keeps at most one timer per room. It does NOT inspect room state -- the
    caller (SessionManager) decides when a room needs a deadline and what
    happens when it fires.
    """

    def __init__(self, on_deadline: DeadlineCallback) -> None:
        self._timers: dict[str, RoundTimer] = {}
        self._on_deadline = on_deadline

    def __len__(self) -> int:
        return len(self._timers)

    def has_timer(self, room_id: str) -> bool:
        """Check if a deadline timer exists for a room."""
        return room_id in self._timers

    def start(self, room_id: str, delay_seconds: float) -> None:
        """Arm the deadline for a room, replacing any existing timer."""
        self.cancel(room_id)
        timer = RoundTimer()
        self._timers[room_id] = timer
        timer.start(delay_seconds, lambda rid=room_id: self._on_deadline(rid))
        logger.debug("deadline timer armed for room %s in %.1fs", room_id, delay_seconds)

    def cancel(self, room_id: str) -> None:
        """Cancel and forget the timer for a room, if any."""
        timer = self._timers.pop(room_id, None)
        if timer is not None:
            timer.cancel()

    def cancel_all(self) -> None:
        """Cancel every timer (server shutdown)."""
        for room_id in list(self._timers):
            self.cancel(room_id)
