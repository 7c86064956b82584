from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from game.messaging.types import ServerMessageType
from game.tests.mocks import MockConnection

if TYPE_CHECKING:
    from game.session.manager import SessionManager

START_MS = 1_000_000


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, now_ms: int = START_MS) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


class GatedConnection(MockConnection):
    """MockConnection whose sends stall while its gate is closed."""

    def __init__(self, connection_id: str | None = None) -> None:
        super().__init__(connection_id)
        self.gate = asyncio.Event()
        self.gate.set()
        self.stalled = asyncio.Event()

    async def send_bytes(self, data: bytes) -> None:
        if not self.gate.is_set():
            self.stalled.set()
            await self.gate.wait()
        await super().send_bytes(data)


def drain(connection: MockConnection) -> list[dict]:
    """Return everything sent so far and forget it."""
    messages = connection.sent_messages
    connection._outbox.clear()
    return messages


def types_of(messages: list[dict]) -> list[str]:
    return [m["type"] for m in messages]


async def connect_and_join(manager: SessionManager, name: str) -> MockConnection:
    connection = MockConnection()
    manager.register_connection(connection)
    await manager.join_game(connection, name)
    return connection


async def start_round(manager: SessionManager, names: tuple[str, ...] = ("Alice", "Bob")) -> list[MockConnection]:
    """Join players until a round starts; the returned connections have empty outboxes."""
    connections = [await connect_and_join(manager, name) for name in names]
    for connection in connections:
        assert ServerMessageType.GAME_START in types_of(drain(connection))
    return connections
