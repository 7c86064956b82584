"""
Pydantic models for the session layer.
"""

from pydantic import BaseModel


class ServerStatus(BaseModel):
    """Capacity counters for the /status endpoint."""

    waiting_rooms: int
    active_rooms: int
    connected_players: int
    players_in_rooms: int
