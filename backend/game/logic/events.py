"""Domain event models and service event transport container.

Domain event classes are the canonical event types for the room logic layer.
ServiceEvent is the transport wrapper used to route events to clients:
Room operations return lists of ServiceEvent with typed routing targets and
the session layer delivers them.

All layers import exclusively from this module for event types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from game.logic.enums import MoveOutcome  # noqa: TC001
from game.logic.types import Grid, PlayerStanding, Position  # noqa: TC001

# ---------------------------------------------------------------------------
# Typed routing targets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BroadcastTarget:
    """Event should be sent to every current member of the room."""


@dataclass(frozen=True)
class PlayerTarget:
    """Event should be sent to one player only."""

    player_id: str


EventTarget = BroadcastTarget | PlayerTarget


# ---------------------------------------------------------------------------
# Event type enum
# ---------------------------------------------------------------------------


class EventType(StrEnum):
    """Types of room events."""

    GAME_START = "game_start"
    PLAYER_MOVE = "player_move"
    BOARD_UPDATE = "board_update"
    SCORE_UPDATE = "score_update"
    PLAYER_LEFT = "player_left"
    GAME_END = "game_end"


# ---------------------------------------------------------------------------
# Domain event models
# ---------------------------------------------------------------------------


class GameEvent(BaseModel):
    """Base class for all domain room events."""

    model_config = ConfigDict(frozen=True)

    type: EventType


class GameStartEvent(GameEvent):
    """Sent to each member when the round starts, carrying that member's own grid."""

    type: Literal[EventType.GAME_START] = EventType.GAME_START
    players: list[PlayerStanding]
    end_time: int = Field(serialization_alias="endTime")
    grid: Grid


class PlayerMoveEvent(GameEvent):
    """Broadcast on every legal move attempt, matched or not."""

    type: Literal[EventType.PLAYER_MOVE] = EventType.PLAYER_MOVE
    player_id: str = Field(serialization_alias="playerId")
    source: Position = Field(serialization_alias="from")
    target: Position = Field(serialization_alias="to")


class BoardUpdateEvent(GameEvent):
    """Sent to the mover with the authoritative grid after the move resolves."""

    type: Literal[EventType.BOARD_UPDATE] = EventType.BOARD_UPDATE
    grid: Grid
    outcome: MoveOutcome
    score_delta: int = Field(serialization_alias="scoreDelta")
    cascades: int


class ScoreUpdateEvent(GameEvent):
    """Broadcast when a player's score changes."""

    type: Literal[EventType.SCORE_UPDATE] = EventType.SCORE_UPDATE
    player_id: str = Field(serialization_alias="playerId")
    score: int


class PlayerLeftEvent(GameEvent):
    """Broadcast to the remaining members when a player leaves."""

    type: Literal[EventType.PLAYER_LEFT] = EventType.PLAYER_LEFT
    player_id: str = Field(serialization_alias="playerId")
    name: str


class GameEndEvent(GameEvent):
    """Broadcast once when the round ends, standings in rank order."""

    type: Literal[EventType.GAME_END] = EventType.GAME_END
    scores: list[PlayerStanding]


Event = GameStartEvent | PlayerMoveEvent | BoardUpdateEvent | ScoreUpdateEvent | PlayerLeftEvent | GameEndEvent


# ---------------------------------------------------------------------------
# Service event transport container
# ---------------------------------------------------------------------------


class ServiceEvent(BaseModel):
    """Event transport container for the room logic layer.

    Uses typed internal targets (BroadcastTarget / PlayerTarget) for routing.
    """

    model_config = {"arbitrary_types_allowed": True}

    event: EventType
    data: GameEvent
    target: EventTarget = BroadcastTarget()

    @model_validator(mode="after")
    def _ensure_event_matches_data(self) -> ServiceEvent:
        if self.event.value != self.data.type.value:
            raise ValueError(
                f"ServiceEvent.event '{self.event.value}' does not match data.type '{self.data.type.value}'",
            )
        return self


def broadcast(event: GameEvent) -> ServiceEvent:
    return ServiceEvent(event=event.type, data=event, target=BroadcastTarget())


def to_player(player_id: str, event: GameEvent) -> ServiceEvent:
    return ServiceEvent(event=event.type, data=event, target=PlayerTarget(player_id=player_id))


def find_event(events: list[ServiceEvent], event_type: EventType) -> GameEvent | None:
    """Return the data of the first event of the given type, if any."""
    for event in events:
        if event.event == event_type:
            return event.data
    return None
