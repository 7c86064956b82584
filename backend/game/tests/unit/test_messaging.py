from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError

from game.logic.types import Position
from game.messaging.types import (
    ClientScoreMessage,
    JoinGameMessage,
    MoveMessage,
    PingMessage,
    SessionErrorCode,
    parse_client_message,
)
from game.tests.mocks import MockConnection


class TestParseClientMessage:
    def test_join_game(self):
        message = parse_client_message({"type": "joinGame", "playerName": "Alice"})
        assert isinstance(message, JoinGameMessage)
        assert message.player_name == "Alice"

    def test_move_uses_from_and_to(self):
        message = parse_client_message(
            {"type": "move", "from": {"row": 1, "col": 2}, "to": {"row": 1, "col": 3}},
        )
        assert isinstance(message, MoveMessage)
        move = message.to_move()
        assert move.source == Position(row=1, col=2)
        assert move.target == Position(row=1, col=3)

    def test_score_update(self):
        message = parse_client_message({"type": "scoreUpdate", "points": 30})
        assert isinstance(message, ClientScoreMessage)
        assert message.points == 30

    def test_ping(self):
        assert isinstance(parse_client_message({"type": "ping"}), PingMessage)

    def test_player_name_is_stripped(self):
        message = parse_client_message({"type": "joinGame", "playerName": "  Bob  "})
        assert message.player_name == "Bob"

    @pytest.mark.parametrize(
        "data",
        [
            {"type": "joinGame", "playerName": ""},
            {"type": "joinGame", "playerName": "   "},
            {"type": "joinGame", "playerName": "a\x00b"},
            {"type": "joinGame", "playerName": "x" * 33},
            {"type": "joinGame"},
            {"type": "move", "from": {"row": 0, "col": 0}},
            {"type": "move", "from": {"row": "a", "col": 0}, "to": {"row": 0, "col": 1}},
            {"type": "scoreUpdate", "points": -1},
            {"type": "teleport"},
            {"playerName": "Alice"},
        ],
    )
    def test_invalid_messages_rejected(self, data):
        with pytest.raises(ValidationError):
            parse_client_message(data)


class TestMessageRouter:
    @pytest.fixture
    async def setup(self, message_router, mock_connection, session_manager):
        await message_router.handle_connect(mock_connection)
        return message_router, mock_connection, session_manager

    async def test_join_routes_to_session(self, setup):
        router, connection, session_manager = setup
        await router.handle_message(connection, {"type": "joinGame", "playerName": "Alice"})

        assert connection.sent_messages[0]["type"] == "roomJoined"
        assert session_manager.get_room_for(connection.connection_id) is not None

    async def test_invalid_message_returns_error(self, setup):
        router, connection, _ = setup
        await router.handle_message(connection, {"type": "bogus"})

        msgs = connection.sent_messages
        assert len(msgs) == 1
        assert msgs[0]["type"] == "error"
        assert msgs[0]["code"] == SessionErrorCode.INVALID_MESSAGE

    async def test_move_without_room(self, setup):
        router, connection, _ = setup
        await router.handle_message(
            connection,
            {"type": "move", "from": {"row": 0, "col": 0}, "to": {"row": 0, "col": 1}},
        )
        assert connection.sent_messages[0]["code"] == SessionErrorCode.NOT_IN_ROOM

    async def test_ping(self, setup):
        router, connection, _ = setup
        await router.handle_message(connection, {"type": "ping"})
        assert connection.sent_messages == [{"type": "pong"}]

    async def test_unexpected_error_returns_internal_error(self, setup):
        router, connection, session_manager = setup
        session_manager.join_game = AsyncMock(side_effect=RuntimeError("boom"))

        await router.handle_message(connection, {"type": "joinGame", "playerName": "Alice"})

        msgs = connection.sent_messages
        assert msgs[0]["type"] == "error"
        assert msgs[0]["code"] == SessionErrorCode.INTERNAL_ERROR

    async def test_disconnect_leaves_room_and_unregisters(self, setup):
        router, connection, session_manager = setup
        other = MockConnection()
        await router.handle_connect(other)
        await router.handle_message(connection, {"type": "joinGame", "playerName": "Alice"})
        await router.handle_message(other, {"type": "joinGame", "playerName": "Bob"})
        other._outbox.clear()

        await router.handle_disconnect(connection)

        assert [m["type"] for m in other.sent_messages] == ["playerLeft", "gameEnd"]
        assert session_manager.get_player(connection.connection_id) is None
        assert session_manager.room_count == 0
