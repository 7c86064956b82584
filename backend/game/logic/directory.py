"""
Room directory: assigns joining players to rooms.

Rooms are kept in creation order. A joiner goes to the oldest room that is
still waiting and has a free seat; when none exists a new waiting room is
created, unless the directory is already at its room limit.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import structlog

from game.logic.enums import RoomState
from game.logic.exceptions import DirectoryFullError, UnknownRoomError
from game.logic.room import Room
from game.logic.settings import GameSettings

if TYPE_CHECKING:
    from collections.abc import Callable

logger = structlog.get_logger()


def _default_room_id() -> str:
    return uuid.uuid4().hex


class RoomDirectory:
    """
    Registry of live rooms, in creation order.

    max_rooms caps how many rooms may exist at once; 0 means no cap.
    Ended rooms are taken out with remove() once their final standings
    have gone out.
    """

    def __init__(
        self,
        settings: GameSettings | None = None,
        room_id_factory: Callable[[], str] = _default_room_id,
        max_rooms: int = 0,
    ) -> None:
        if max_rooms < 0:
            raise ValueError(f"max_rooms must be non-negative, got {max_rooms}")
        self._settings = settings or GameSettings()
        self._room_id_factory = room_id_factory
        self._max_rooms = max_rooms
        self._rooms: dict[str, Room] = {}

    @property
    def rooms(self) -> list[Room]:
        return list(self._rooms.values())

    @property
    def settings(self) -> GameSettings:
        return self._settings

    @property
    def max_rooms(self) -> int:
        return self._max_rooms

    @property
    def is_full(self) -> bool:
        return bool(self._max_rooms) and len(self._rooms) >= self._max_rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def find_joinable(self) -> Room | None:
        """Return the oldest room that is waiting and not full."""
        for room in self._rooms.values():
            if room.is_joinable:
                return room
        return None

    def assign(self) -> Room:
        """
        Return the first joinable room, creating one if none exists.

        Raises DirectoryFullError when a room would have to be created but
        the directory is at max_rooms.
        """
        room = self.find_joinable()
        if room is not None:
            return room
        if self.is_full:
            raise DirectoryFullError(f"room limit of {self._max_rooms} reached")
        return self.create()

    def create(self) -> Room:
        room_id = self._room_id_factory()
        if room_id in self._rooms:
            raise ValueError(f"room id {room_id} already exists")
        room = Room(room_id=room_id, settings=self._settings)
        self._rooms[room_id] = room
        logger.info("room created", room_id=room_id, room_count=len(self._rooms))
        return room

    def get(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise UnknownRoomError(f"room {room_id} does not exist")
        return room

    def remove(self, room_id: str) -> Room | None:
        return self._rooms.pop(room_id, None)

    def count_by_state(self) -> dict[RoomState, int]:
        counts = dict.fromkeys(RoomState, 0)
        for room in self._rooms.values():
            counts[room.state] += 1
        return counts
