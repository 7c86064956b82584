from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog

from game.logic.directory import RoomDirectory
from game.logic.enums import RoomState
from game.logic.events import BroadcastTarget, PlayerTarget
from game.logic.exceptions import DirectoryFullError, GameRuleError
from game.messaging.event_payload import service_event_payload
from game.messaging.types import (
    ErrorCode,
    ErrorMessage,
    PongMessage,
    RoomJoinedMessage,
    SessionErrorCode,
)
from game.session.broadcast import broadcast_to_connections
from game.session.models import Player
from game.session.timer_manager import TimerManager
from game.session.types import ServerStatus

if TYPE_CHECKING:
    from game.logic.events import ServiceEvent
    from game.logic.room import Room
    from game.logic.settings import GameSettings
    from game.logic.types import Move
    from game.messaging.protocol import ConnectionProtocol

logger = structlog.get_logger()


def epoch_ms() -> int:
    return int(time.time() * 1000)


class SessionManager:
    """
    Coordinate connections, rooms and round deadlines.

    Every mutation of a room runs under that room's asyncio.Lock, so moves,
    leaves and deadline ticks for one room never interleave. Rooms share no
    state, so different rooms proceed independently.
    """

    def __init__(
        self,
        settings: GameSettings | None = None,
        *,
        trust_client_scores: bool = False,
        max_rooms: int = 0,
        clock: Callable[[], int] = epoch_ms,
        room_id_factory: Callable[[], str] | None = None,
    ) -> None:
        if room_id_factory is None:
            self._directory = RoomDirectory(settings, max_rooms=max_rooms)
        else:
            self._directory = RoomDirectory(settings, room_id_factory=room_id_factory, max_rooms=max_rooms)
        self._trust_client_scores = trust_client_scores
        self._clock = clock
        self._connections: dict[str, ConnectionProtocol] = {}
        self._players: dict[str, Player] = {}  # connection_id -> Player
        self._room_locks: dict[str, asyncio.Lock] = {}  # room_id -> Lock
        self._timer_manager = TimerManager(on_deadline=self._handle_deadline)

    @property
    def directory(self) -> RoomDirectory:
        return self._directory

    @property
    def timer_manager(self) -> TimerManager:
        return self._timer_manager

    @property
    def room_count(self) -> int:
        return len(self._directory)

    def register_connection(self, connection: ConnectionProtocol) -> None:
        self._connections[connection.connection_id] = connection

    def unregister_connection(self, connection: ConnectionProtocol) -> None:
        self._connections.pop(connection.connection_id, None)
        self._players.pop(connection.connection_id, None)

    def get_player(self, connection_id: str) -> Player | None:
        return self._players.get(connection_id)

    def get_room_for(self, connection_id: str) -> Room | None:
        player = self._players.get(connection_id)
        if player is None or player.room_id is None or player.room_id not in self._directory:
            return None
        return self._directory.get(player.room_id)

    def get_status(self) -> ServerStatus:
        counts = self._directory.count_by_state()
        return ServerStatus(
            waiting_rooms=counts[RoomState.WAITING],
            active_rooms=counts[RoomState.ACTIVE],
            connected_players=len(self._connections),
            players_in_rooms=sum(room.player_count for room in self._directory.rooms),
        )

    def _room_lock(self, room_id: str) -> asyncio.Lock:
        return self._room_locks.setdefault(room_id, asyncio.Lock())

    def _is_live(self, room: Room) -> bool:
        return room.room_id in self._directory

    async def _send_error(self, connection: ConnectionProtocol, code: ErrorCode, message: str) -> None:
        logger.warning("session error sent to client", error_code=code.value, error_message=message)
        await connection.send_message(ErrorMessage(code=code, message=message).model_dump())

    # --- Joining and leaving ---

    async def join_game(self, connection: ConnectionProtocol, player_name: str) -> None:
        """
        Put the connection into the first joinable room.

        The joiner gets roomJoined first; if the join fills the room to the
        starting threshold every member then gets gameStart and the round
        deadline is armed.
        """
        connection_id = connection.connection_id
        player = self._players.get(connection_id)
        if player is not None and player.room_id is not None:
            await self._send_error(connection, SessionErrorCode.ALREADY_IN_ROOM, "Already in a room")
            return

        while True:
            try:
                room = self._directory.assign()
            except DirectoryFullError as e:
                await self._send_error(connection, e.code, "No room available")
                return

            async with self._room_lock(room.room_id):
                # the room may have started or closed while we waited for the lock
                if not self._is_live(room) or not room.is_joinable:
                    continue

                events = room.join(connection_id, player_name, self._clock())
                if player is None:
                    player = Player(connection=connection, name=player_name)
                    self._players[connection_id] = player
                player.name = player_name
                player.room_id = room.room_id
                structlog.contextvars.bind_contextvars(room_id=room.room_id)
                logger.info("player joined room", player_count=room.player_count)

                await connection.send_message(RoomJoinedMessage(room_id=room.room_id).model_dump(by_alias=True))
                await self._dispatch_events(room, events)
                self._maybe_start_timer(room)
                return

    async def leave_game(self, connection: ConnectionProtocol) -> None:
        """Remove the connection's player from their room, if any."""
        player = self._players.get(connection.connection_id)
        if player is None or player.room_id is None:
            return

        room_id = player.room_id
        if room_id not in self._directory:
            player.room_id = None
            return

        room = self._directory.get(room_id)
        async with self._room_lock(room_id):
            player.room_id = None
            if not self._is_live(room) or connection.connection_id not in room.members:
                return
            events = room.leave(connection.connection_id)
            logger.info("player left room", room_id=room_id, player_count=room.player_count)
            await self._dispatch_events(room, events)
            self._close_room_if_done(room)

    # --- In-round actions ---

    async def submit_move(self, connection: ConnectionProtocol, move: Move) -> None:
        """Play a swap on the player's own grid; rule violations go back to the sender only."""
        room = await self._require_room(connection)
        if room is None:
            return

        async with self._room_lock(room.room_id):
            if not self._is_live(room):
                await self._send_error(connection, SessionErrorCode.NOT_IN_ROOM, "Room has closed")
                return
            try:
                result, events = room.submit_move(connection.connection_id, move)
            except GameRuleError as e:
                await self._send_error(connection, e.code, str(e))
                return
            logger.debug(
                "move resolved",
                outcome=result.outcome.value,
                score_delta=result.score_delta,
                cascades=result.cycles,
            )
            await self._dispatch_events(room, events)

    async def submit_client_score(self, connection: ConnectionProtocol, points: int) -> None:
        """Legacy client-reported scoring; only honored when trust_client_scores is on."""
        if not self._trust_client_scores:
            await self._send_error(
                connection,
                SessionErrorCode.CLIENT_SCORE_REJECTED,
                "Scores are computed by the server",
            )
            return

        room = await self._require_room(connection)
        if room is None:
            return

        async with self._room_lock(room.room_id):
            if not self._is_live(room):
                await self._send_error(connection, SessionErrorCode.NOT_IN_ROOM, "Room has closed")
                return
            try:
                events = room.award_client_points(connection.connection_id, points)
            except GameRuleError as e:
                await self._send_error(connection, e.code, str(e))
                return
            await self._dispatch_events(room, events)

    async def handle_ping(self, connection: ConnectionProtocol) -> None:
        await connection.send_message(PongMessage().model_dump())

    async def _require_room(self, connection: ConnectionProtocol) -> Room | None:
        room = self.get_room_for(connection.connection_id)
        if room is None:
            await self._send_error(connection, SessionErrorCode.NOT_IN_ROOM, "You must join a game first")
            return None
        structlog.contextvars.bind_contextvars(room_id=room.room_id)
        return room

    # --- Deadlines ---

    async def tick(self, now_ms: int | None = None) -> int:
        """
        End every active room whose deadline has passed.

        Hook for an external scheduler; the per-room deadline timers use the
        same path. Returns the number of rooms that ended.
        """
        now = self._clock() if now_ms is None else now_ms
        ended = 0
        for room in self._directory.rooms:
            if room.state == RoomState.ACTIVE and await self._tick_room(room, now):
                ended += 1
        return ended

    async def _tick_room(self, room: Room, now_ms: int) -> bool:
        async with self._room_lock(room.room_id):
            if not self._is_live(room):
                return False
            events = room.tick(now_ms)
            await self._dispatch_events(room, events)
            return self._close_room_if_done(room)

    async def _handle_deadline(self, room_id: str) -> None:
        if room_id not in self._directory:
            return
        room = self._directory.get(room_id)
        structlog.contextvars.bind_contextvars(room_id=room_id)
        await self._tick_room(room, self._clock())
        # woke up before the wall-clock deadline: sleep the remainder
        if self._is_live(room) and room.state == RoomState.ACTIVE:
            self._maybe_start_timer(room, rearm=True)

    def _maybe_start_timer(self, room: Room, *, rearm: bool = False) -> None:
        if room.state != RoomState.ACTIVE or room.end_time_ms is None:
            return
        if self._timer_manager.has_timer(room.room_id) and not rearm:
            return
        remaining_ms = room.end_time_ms - self._clock()
        self._timer_manager.start(room.room_id, max(remaining_ms, 1) / 1000)

    def cancel_all_timers(self) -> None:
        self._timer_manager.cancel_all()

    # --- Delivery and cleanup ---

    async def _dispatch_events(self, room: Room, events: list[ServiceEvent]) -> None:
        """Deliver room events to current members using their typed targets."""
        for event in events:
            message = service_event_payload(event)
            if isinstance(event.target, BroadcastTarget):
                await self._broadcast_to_room(room, message)
            elif isinstance(event.target, PlayerTarget):
                connection = self._connections.get(event.target.player_id)
                if connection is not None:
                    await broadcast_to_connections([connection], message)

    async def _broadcast_to_room(self, room: Room, message: dict[str, Any]) -> None:
        connections = [self._connections[pid] for pid in room.members if pid in self._connections]
        await broadcast_to_connections(connections, message)

    def _close_room_if_done(self, room: Room) -> bool:
        """
        Retire an ended room, or an abandoned waiting room.

        Members of an ended room are detached so they can join again.
        Returns True when the room ended.
        """
        if room.state == RoomState.ENDED:
            self._timer_manager.cancel(room.room_id)
            for player_id in room.members:
                player = self._players.get(player_id)
                if player is not None and player.room_id == room.room_id:
                    player.room_id = None
            self._retire_room(room)
            logger.info("room closed", room_id=room.room_id)
            return True
        if room.state == RoomState.WAITING and room.is_empty:
            self._retire_room(room)
            logger.info("empty room discarded", room_id=room.room_id)
        return False

    def _retire_room(self, room: Room) -> None:
        self._directory.remove(room.room_id)
        self._room_locks.pop(room.room_id, None)
