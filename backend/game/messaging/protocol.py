"""Abstract connection protocol for MessagePack binary communication."""

from abc import ABC, abstractmethod
from typing import Any

from game.messaging.encoder import encode


class ConnectionProtocol(ABC):
    """
    Abstract interface for a client connection.

    Lets the session and routing layers run without a real WebSocket.
    Frames are MessagePack maps.
    """

    @property
    @abstractmethod
    def connection_id(self) -> str:
        """Unique identifier for this connection; doubles as the player id."""
        ...

    @abstractmethod
    async def send_bytes(self, data: bytes) -> None: ...

    @abstractmethod
    async def receive_bytes(self) -> bytes: ...

    @abstractmethod
    async def close(self, code: int = 1000, reason: str = "") -> None: ...

    async def send_message(self, data: dict[str, Any]) -> None:
        """Encode a message as MessagePack and send it."""
        await self.send_bytes(encode(data))
