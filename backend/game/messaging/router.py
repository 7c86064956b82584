from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from game.messaging.types import (
    ClientScoreMessage,
    ErrorMessage,
    JoinGameMessage,
    MoveMessage,
    PingMessage,
    SessionErrorCode,
    parse_client_message,
)

if TYPE_CHECKING:
    from game.messaging.protocol import ConnectionProtocol
    from game.session.manager import SessionManager

logger = logging.getLogger(__name__)


class MessageRouter:
    """
    Routes incoming messages to appropriate handlers.

    This class contains pure business logic and can be tested
    without real WebSocket connections.
    """

    def __init__(self, session_manager: SessionManager) -> None:
        self._session_manager = session_manager

    async def handle_message(
        self,
        connection: ConnectionProtocol,
        raw_message: dict[str, Any],
    ) -> None:
        try:
            message = parse_client_message(raw_message)
        except (ValidationError, KeyError, TypeError, ValueError) as e:
            logger.warning("invalid message from %s: %s", connection.connection_id, e)
            await connection.send_message(
                ErrorMessage(code=SessionErrorCode.INVALID_MESSAGE, message=str(e)).model_dump(),
            )
            return

        try:
            await self._dispatch(connection, message)
        except Exception:
            logger.exception("unexpected error handling %s from %s", message.type, connection.connection_id)
            await connection.send_message(
                ErrorMessage(code=SessionErrorCode.INTERNAL_ERROR, message="Internal server error").model_dump(),
            )

    async def _dispatch(
        self,
        connection: ConnectionProtocol,
        message: JoinGameMessage | MoveMessage | ClientScoreMessage | PingMessage,
    ) -> None:
        if isinstance(message, JoinGameMessage):
            await self._session_manager.join_game(connection, message.player_name)
        elif isinstance(message, MoveMessage):
            await self._session_manager.submit_move(connection, message.to_move())
        elif isinstance(message, ClientScoreMessage):
            await self._session_manager.submit_client_score(connection, message.points)
        elif isinstance(message, PingMessage):
            await self._session_manager.handle_ping(connection)

    async def handle_connect(self, connection: ConnectionProtocol) -> None:
        self._session_manager.register_connection(connection)

    async def handle_disconnect(self, connection: ConnectionProtocol) -> None:
        await self._session_manager.leave_game(connection)
        self._session_manager.unregister_connection(connection)
