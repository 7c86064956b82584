"""
Room state machine for one timed round.

A Room owns its members and their private grids. It moves
WAITING -> ACTIVE when enough players have joined and ACTIVE -> ENDED when
the deadline passes or too few players remain. ENDED is terminal.

Operations are synchronous and return ServiceEvent lists; the session layer
serializes access per room and delivers the events.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from game.logic.board import generate_grid
from game.logic.enums import GameErrorCode, MoveOutcome, RoomState
from game.logic.events import (
    BoardUpdateEvent,
    GameEndEvent,
    GameStartEvent,
    PlayerLeftEvent,
    PlayerMoveEvent,
    ScoreUpdateEvent,
    ServiceEvent,
    broadcast,
    to_player,
)
from game.logic.exceptions import GameRuleError, IllegalMoveError, RoomNotJoinableError, UnknownPlayerError
from game.logic.moves import play_move, validate_move
from game.logic.rng import create_board_rng, generate_seed
from game.logic.settings import GameSettings
from game.logic.types import PlayerStanding

if TYPE_CHECKING:
    import random

    from game.logic.types import Grid, Move, MoveResult

logger = structlog.get_logger()


@dataclass
class RoomMember:
    """A player seated in a room, with their private board."""

    player_id: str
    name: str
    join_seq: int
    grid: Grid
    rng: random.Random
    score: int = 0
    move_in_flight: bool = False

    def standing(self) -> PlayerStanding:
        return PlayerStanding(id=self.player_id, name=self.name, score=self.score)


@dataclass
class Room:
    """
    One timed round shared by up to settings.max_players players.

    members preserves join order (dict insertion order). end_time_ms is set
    in epoch milliseconds when the room becomes active.
    """

    room_id: str
    settings: GameSettings = field(default_factory=GameSettings)
    seed: str = field(default_factory=generate_seed)
    state: RoomState = RoomState.WAITING
    end_time_ms: int | None = None
    members: dict[str, RoomMember] = field(default_factory=dict)
    _next_seq: int = field(default=0, init=False, repr=False)

    @property
    def player_count(self) -> int:
        return len(self.members)

    @property
    def is_empty(self) -> bool:
        return not self.members

    @property
    def is_full(self) -> bool:
        return self.player_count >= self.settings.max_players

    @property
    def is_joinable(self) -> bool:
        return self.state == RoomState.WAITING and not self.is_full

    def roster(self) -> list[PlayerStanding]:
        """Members in join order."""
        return [m.standing() for m in self.members.values()]

    def standings(self) -> list[PlayerStanding]:
        """Members ranked by score descending, ties broken by join order."""
        ranked = sorted(self.members.values(), key=lambda m: (-m.score, m.join_seq))
        return [m.standing() for m in ranked]

    def grid_for(self, player_id: str) -> Grid:
        return self._member(player_id).grid

    def join(self, player_id: str, name: str, now_ms: int) -> list[ServiceEvent]:
        """
        Seat a player with a fresh grid.

        When the join brings the room to min_players the round starts: the
        deadline is fixed and every member receives gameStart with the roster
        and their own grid.
        """
        if not self.is_joinable:
            raise RoomNotJoinableError(f"room {self.room_id} is {self.state.value} with {self.player_count} players")
        if player_id in self.members:
            raise RoomNotJoinableError(f"player {player_id} is already in room {self.room_id}")

        rng = create_board_rng(self.seed, player_id)
        self.members[player_id] = RoomMember(
            player_id=player_id,
            name=name,
            join_seq=self._next_seq,
            grid=generate_grid(self.settings.grid_size, self.settings.gem_types, rng),
            rng=rng,
        )
        self._next_seq += 1
        logger.debug("player joined room", room_id=self.room_id, player_id=player_id, count=self.player_count)

        if self.player_count >= self.settings.min_players:
            return self._start(now_ms)
        return []

    def _start(self, now_ms: int) -> list[ServiceEvent]:
        self.state = RoomState.ACTIVE
        self.end_time_ms = now_ms + self.settings.round_duration_ms
        logger.info("round started", room_id=self.room_id, players=self.player_count, end_time=self.end_time_ms)
        roster = self.roster()
        return [
            to_player(
                member.player_id,
                GameStartEvent(players=roster, end_time=self.end_time_ms, grid=member.grid),
            )
            for member in self.members.values()
        ]

    def leave(self, player_id: str) -> list[ServiceEvent]:
        """
        Remove a player and their grid.

        Remaining members are told who left. An active room that drops below
        min_players ends immediately.
        """
        member = self._member(player_id)
        del self.members[player_id]
        logger.debug("player left room", room_id=self.room_id, player_id=player_id, count=self.player_count)

        if self.state == RoomState.ENDED:
            return []
        events = [broadcast(PlayerLeftEvent(player_id=player_id, name=member.name))] if self.members else []
        if self.state == RoomState.ACTIVE and self.player_count < self.settings.min_players:
            events.extend(self.end())
        return events

    def submit_move(
        self,
        player_id: str,
        move: Move,
        rng: random.Random | None = None,
    ) -> tuple[MoveResult, list[ServiceEvent]]:
        """
        Validate and play a swap on the player's grid.

        Every legal attempt is broadcast as playerMove and the mover gets a
        boardUpdate with the resolved grid. A matched move also broadcasts
        the new score. Illegal moves raise IllegalMoveError and change
        nothing.
        """
        member = self._member(player_id)
        validate_move(self.state, member, move, self.settings.grid_size)

        member.move_in_flight = True
        try:
            result = play_move(member.grid, move, rng or member.rng, self.settings)
        finally:
            member.move_in_flight = False

        member.grid = result.grid
        events = [
            broadcast(PlayerMoveEvent(player_id=player_id, source=move.source, target=move.target)),
            to_player(
                player_id,
                BoardUpdateEvent(
                    grid=result.grid,
                    outcome=result.outcome,
                    score_delta=result.score_delta,
                    cascades=result.cycles,
                ),
            ),
        ]
        if result.outcome == MoveOutcome.MATCHED:
            member.score += result.score_delta
            events.append(broadcast(ScoreUpdateEvent(player_id=player_id, score=member.score)))
        return result, events

    def award_client_points(self, player_id: str, points: int) -> list[ServiceEvent]:
        """Add client-reported points to a player's score (legacy clients)."""
        member = self._member(player_id)
        if self.state != RoomState.ACTIVE:
            raise IllegalMoveError(GameErrorCode.GAME_NOT_ACTIVE, f"room is {self.state.value}")
        if points < 0:
            raise GameRuleError(f"points must be non-negative, got {points}")
        member.score += points
        return [broadcast(ScoreUpdateEvent(player_id=player_id, score=member.score))]

    def tick(self, now_ms: int) -> list[ServiceEvent]:
        """End the round if its deadline has passed. Safe to call repeatedly."""
        if self.state == RoomState.ACTIVE and self.end_time_ms is not None and now_ms >= self.end_time_ms:
            return self.end()
        return []

    def end(self) -> list[ServiceEvent]:
        """
        End an active round and publish the final standings.

        No-op for rooms that are waiting or already ended, so the final
        standings go out at most once.
        """
        if self.state != RoomState.ACTIVE:
            return []
        self.state = RoomState.ENDED
        scores = self.standings()
        logger.info("round ended", room_id=self.room_id, scores=[s.model_dump() for s in scores])
        return [broadcast(GameEndEvent(scores=scores))]

    def _member(self, player_id: str) -> RoomMember:
        member = self.members.get(player_id)
        if member is None:
            raise UnknownPlayerError(f"player {player_id} is not in room {self.room_id}")
        return member
