from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from game.logic.enums import GameErrorCode
from game.logic.types import Move, Position

# ASCII control character boundaries for input validation
_SPACE_ORD = 0x20
_DEL_ORD = 0x7F

MAX_PLAYER_NAME_LENGTH = 32


class ClientMessageType(StrEnum):
    JOIN_GAME = "joinGame"
    MOVE = "move"
    SCORE_UPDATE = "scoreUpdate"
    PING = "ping"


class ServerMessageType(StrEnum):
    ROOM_JOINED = "roomJoined"
    GAME_START = "gameStart"
    PLAYER_MOVE = "playerMove"
    BOARD_UPDATE = "boardUpdate"
    SCORE_UPDATE = "scoreUpdate"
    PLAYER_LEFT = "playerLeft"
    GAME_END = "gameEnd"
    ERROR = "error"
    PONG = "pong"


class SessionErrorCode(StrEnum):
    ALREADY_IN_ROOM = "already_in_room"
    NOT_IN_ROOM = "not_in_room"
    INVALID_MESSAGE = "invalid_message"
    CLIENT_SCORE_REJECTED = "client_score_rejected"
    INTERNAL_ERROR = "internal_error"


ErrorCode = SessionErrorCode | GameErrorCode


class JoinGameMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal[ClientMessageType.JOIN_GAME] = ClientMessageType.JOIN_GAME
    player_name: str = Field(alias="playerName", min_length=1, max_length=MAX_PLAYER_NAME_LENGTH)

    @field_validator("player_name")
    @classmethod
    def _validate_player_name(cls, v: str) -> str:
        if any(ord(c) < _SPACE_ORD or ord(c) == _DEL_ORD for c in v):
            raise ValueError("playerName must not contain control characters")
        v = v.strip()
        if not v:
            raise ValueError("playerName must not be blank")
        return v


class MoveMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal[ClientMessageType.MOVE] = ClientMessageType.MOVE
    source: Position = Field(alias="from")
    target: Position = Field(alias="to")

    def to_move(self) -> Move:
        return Move(source=self.source, target=self.target)


class ClientScoreMessage(BaseModel):
    """Client-reported points, sent by legacy clients that score locally."""

    type: Literal[ClientMessageType.SCORE_UPDATE] = ClientMessageType.SCORE_UPDATE
    points: int = Field(ge=0)


class PingMessage(BaseModel):
    type: Literal[ClientMessageType.PING] = ClientMessageType.PING


ClientMessage = JoinGameMessage | MoveMessage | ClientScoreMessage | PingMessage


class RoomJoinedMessage(BaseModel):
    type: Literal[ServerMessageType.ROOM_JOINED] = ServerMessageType.ROOM_JOINED
    room_id: str = Field(serialization_alias="roomId")


class ErrorMessage(BaseModel):
    type: Literal[ServerMessageType.ERROR] = ServerMessageType.ERROR
    code: ErrorCode
    message: str


class PongMessage(BaseModel):
    type: Literal[ServerMessageType.PONG] = ServerMessageType.PONG


_ClientMessage = Annotated[ClientMessage, Field(discriminator="type")]

_client_message_adapter = TypeAdapter(_ClientMessage)


def parse_client_message(data: dict[str, Any]) -> ClientMessage:
    """Parse a raw dict into a typed ClientMessage, discriminated by "type"."""
    return _client_message_adapter.validate_python(data)
