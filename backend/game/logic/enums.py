"""
String enum definitions for match-3 game concepts.
"""

from enum import Enum, StrEnum


class GemType(StrEnum):
    """Gem colors a grid cell can hold."""

    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    PURPLE = "purple"
    ORANGE = "orange"


class Empty(Enum):
    """Marker for a cleared cell awaiting gravity and refill."""

    EMPTY = "empty"


EMPTY = Empty.EMPTY


class RoomState(StrEnum):
    """Lifecycle state of a room. ENDED is terminal."""

    WAITING = "waiting"
    ACTIVE = "active"
    ENDED = "ended"


class MoveOutcome(StrEnum):
    """Result of a legal swap attempt."""

    MATCHED = "matched"
    NO_MATCH = "no_match"  # swap reverted, no score


class GameErrorCode(StrEnum):
    """Error codes sent to clients for rejected operations."""

    GAME_NOT_ACTIVE = "game_not_active"
    OUT_OF_BOUNDS = "out_of_bounds"
    NOT_ADJACENT = "not_adjacent"
    MOVE_IN_FLIGHT = "move_in_flight"
    UNKNOWN_PLAYER = "unknown_player"
    UNKNOWN_ROOM = "unknown_room"
    ROOM_NOT_JOINABLE = "room_not_joinable"
    SERVER_FULL = "server_full"
    INVALID_ACTION = "invalid_action"
