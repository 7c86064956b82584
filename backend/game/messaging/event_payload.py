"""Centralized event payload shaping for wire serialization.

Defines helpers that produce the canonical dict shape for ServiceEvent
payloads, so the session layer never serializes domain events itself.
"""

from __future__ import annotations

from typing import Any

from game.logic.board import grid_to_wire
from game.logic.events import EventType, ServiceEvent
from game.messaging.types import ServerMessageType

# Wire message type for each domain event type.
EVENT_MESSAGE_TYPE: dict[EventType, ServerMessageType] = {
    EventType.GAME_START: ServerMessageType.GAME_START,
    EventType.PLAYER_MOVE: ServerMessageType.PLAYER_MOVE,
    EventType.BOARD_UPDATE: ServerMessageType.BOARD_UPDATE,
    EventType.SCORE_UPDATE: ServerMessageType.SCORE_UPDATE,
    EventType.PLAYER_LEFT: ServerMessageType.PLAYER_LEFT,
    EventType.GAME_END: ServerMessageType.GAME_END,
}

if set(EVENT_MESSAGE_TYPE.keys()) != set(EventType):
    raise RuntimeError(  # pragma: no cover
        f"EVENT_MESSAGE_TYPE keys {set(EVENT_MESSAGE_TYPE.keys())} != EventType members {set(EventType)}",
    )


def service_event_payload(event: ServiceEvent) -> dict[str, Any]:
    """Return the wire-format dict for a ServiceEvent payload.

    Shape: {"type": <wire message type>, **data_fields} with camelCase field
    names from the serialization aliases. Grids are sent as rows of gem
    names. The domain "type" field is replaced by the wire type.
    """
    payload: dict[str, Any] = {
        "type": EVENT_MESSAGE_TYPE[event.event].value,
        **event.data.model_dump(
            mode="json",
            exclude={"type", "grid"},
            by_alias=True,
        ),
    }
    grid = getattr(event.data, "grid", None)
    if grid is not None:
        payload["grid"] = grid_to_wire(grid)
    return payload
