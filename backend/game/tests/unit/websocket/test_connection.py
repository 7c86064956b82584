"""Unit tests for WebSocketConnection wrapper class."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import anyio
import pytest
from starlette.websockets import WebSocketDisconnect

from game.server.websocket import WebSocketConnection, websocket_endpoint


class TestWebSocketConnection:
    """Test error handling and delegation in WebSocketConnection wrapper."""

    async def test_send_bytes_converts_disconnect_to_connection_error(self):
        mock_ws = MagicMock()
        mock_ws.send_bytes = AsyncMock(side_effect=WebSocketDisconnect())
        conn = WebSocketConnection(mock_ws, connection_id="test-conn")

        with pytest.raises(ConnectionError, match="WebSocket already disconnected"):
            await conn.send_bytes(b"data")

    async def test_close_suppresses_disconnect(self):
        """Closing an already-disconnected WebSocket completes without error."""
        mock_ws = MagicMock()
        mock_ws.close = AsyncMock(side_effect=WebSocketDisconnect())
        conn = WebSocketConnection(mock_ws, connection_id="test-conn")

        await conn.close()

    async def test_receive_disconnect_raises_connection_error(self):
        mock_ws = MagicMock()
        mock_ws.receive = AsyncMock(return_value={"type": "websocket.disconnect", "code": 1000})
        conn = WebSocketConnection(mock_ws, connection_id="test-conn")

        with pytest.raises(ConnectionError, match="WebSocket disconnected"):
            await conn.receive_bytes()

    async def test_receive_binary_frame(self):
        mock_ws = MagicMock()
        mock_ws.receive = AsyncMock(return_value={"type": "websocket.receive", "bytes": b"\x80"})
        conn = WebSocketConnection(mock_ws, connection_id="test-conn")

        assert await conn.receive_bytes() == b"\x80"

    async def test_receive_text_frame_passes_bytes_through(self):
        mock_ws = MagicMock()
        mock_ws.receive = AsyncMock(return_value={"type": "websocket.receive", "text": "hello"})
        conn = WebSocketConnection(mock_ws, connection_id="test-conn")

        assert await conn.receive_bytes() == b"hello"

    def test_connection_id_defaults_to_random_hex(self):
        first = WebSocketConnection(MagicMock())
        second = WebSocketConnection(MagicMock())
        assert first.connection_id != second.connection_id
        assert len(first.connection_id) == 32


class TestWebSocketEndpoint:
    async def test_disconnect_cleanup_finishes_when_cancelled(self):
        mock_ws = MagicMock()
        mock_ws.accept = AsyncMock()
        mock_ws.receive = AsyncMock(return_value={"type": "websocket.disconnect", "code": 1000})

        cleanup_started = asyncio.Event()
        release = asyncio.Event()
        cleaned_up = []

        async def slow_disconnect(connection):
            cleanup_started.set()
            await release.wait()
            cleaned_up.append(connection.connection_id)

        router = MagicMock()
        router.handle_connect = AsyncMock()
        router.handle_disconnect = slow_disconnect

        async with anyio.create_task_group() as tg:
            tg.start_soon(websocket_endpoint, mock_ws, router)
            await cleanup_started.wait()
            tg.cancel_scope.cancel()
            release.set()

        assert len(cleaned_up) == 1
