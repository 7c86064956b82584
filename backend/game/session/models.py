from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from game.messaging.protocol import ConnectionProtocol


@dataclass
class Player:
    """Represent a connected player in the session layer.

    Lifecycle:
    - Created on the first joinGame from a connection
    - room_id is set while the player sits in a room
    - On leave_game, or when the room ends: room_id is cleared to None,
      and the player may join again
    - On unregister: Player is removed from the registry entirely
    """

    connection: ConnectionProtocol
    name: str
    room_id: str | None = None

    @property
    def connection_id(self) -> str:
        return self.connection.connection_id
