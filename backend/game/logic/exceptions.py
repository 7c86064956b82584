"""Typed domain exceptions for match-3 rule violations.

Player-facing rule violations use subclasses of GameRuleError. Each carries
a GameErrorCode so the session layer can convert it into an error message
for the requesting player without touching any other room state.
"""

from game.logic.enums import GameErrorCode


class InvalidConfigurationError(ValueError):
    """Game settings cannot produce a playable grid (e.g. fewer than 2 gem types).

    Raised at startup; the process should not continue with such settings.
    """


class GameRuleError(Exception):
    """Base exception for player-facing rule violations."""

    code: GameErrorCode = GameErrorCode.INVALID_ACTION

    def __init__(self, message: str, *, code: GameErrorCode | None = None) -> None:
        if code is not None:
            self.code = code
        super().__init__(message)


class IllegalMoveError(GameRuleError):
    """Move rejected: wrong room state, out of bounds, not adjacent, or another move in flight."""

    def __init__(self, reason: GameErrorCode, message: str | None = None) -> None:
        super().__init__(message or f"illegal move: {reason.value}", code=reason)

    @property
    def reason(self) -> GameErrorCode:
        return self.code


class UnknownPlayerError(GameRuleError):
    """Player is not (or no longer) a member of the room."""

    code = GameErrorCode.UNKNOWN_PLAYER


class UnknownRoomError(GameRuleError):
    """Room is not (or no longer) tracked by the directory."""

    code = GameErrorCode.UNKNOWN_ROOM


class RoomNotJoinableError(GameRuleError):
    """Room is active, ended, or at capacity."""

    code = GameErrorCode.ROOM_NOT_JOINABLE


class DirectoryFullError(GameRuleError):
    """No joinable room exists and the directory is at its room limit."""

    code = GameErrorCode.SERVER_FULL


class CascadeLimitError(RuntimeError):
    """Cascade resolution exceeded its cycle cap.

    An internal invariant violation, not a player error.
    """

    def __init__(self, max_cycles: int) -> None:
        self.max_cycles = max_cycles
        super().__init__(f"cascade did not settle within {max_cycles} cycles")
