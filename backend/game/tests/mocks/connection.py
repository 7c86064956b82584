from typing import Any
from uuid import uuid4

from game.messaging.encoder import decode
from game.messaging.protocol import ConnectionProtocol


class MockConnection(ConnectionProtocol):
    """In-memory, send-only connection for session and router tests.

    Outgoing frames are kept encoded in _outbox; sent_messages decodes them.
    """

    def __init__(self, connection_id: str | None = None) -> None:
        self._connection_id = connection_id or uuid4().hex
        self._outbox: list[bytes] = []
        self.is_closed = False

    @property
    def connection_id(self) -> str:
        return self._connection_id

    @property
    def sent_messages(self) -> list[dict[str, Any]]:
        return [decode(raw) for raw in self._outbox]

    async def send_bytes(self, data: bytes) -> None:
        if self.is_closed:
            raise ConnectionError("connection closed")
        self._outbox.append(data)

    async def receive_bytes(self) -> bytes:
        raise ConnectionError("mock connections are send-only")

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.is_closed = True
