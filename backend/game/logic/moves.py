"""
Move validation and execution.

validate_move() gates a swap on room state, bounds, adjacency and the
one-move-at-a-time rule. play_move() runs a legal swap through the board
engine and reverts it when the swap produces no match.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from game.logic.board import apply_move, resolve_cascade
from game.logic.enums import GameErrorCode, MoveOutcome, RoomState
from game.logic.exceptions import IllegalMoveError
from game.logic.types import MoveResult

if TYPE_CHECKING:
    import random

    from game.logic.room import RoomMember
    from game.logic.settings import GameSettings
    from game.logic.types import Grid, Move, Position


def in_bounds(position: Position, size: int) -> bool:
    return 0 <= position.row < size and 0 <= position.col < size


def is_adjacent(a: Position, b: Position) -> bool:
    """True when the two cells share an edge (Manhattan distance exactly 1)."""
    return abs(a.row - b.row) + abs(a.col - b.col) == 1


def validate_move(state: RoomState, member: RoomMember, move: Move, size: int) -> None:
    """
    Check that a move may be played on the member's board.

    Checks run in order: room state, bounds, adjacency, in-flight move.
    Raises IllegalMoveError carrying the first failing reason.
    """
    if state != RoomState.ACTIVE:
        raise IllegalMoveError(GameErrorCode.GAME_NOT_ACTIVE, f"room is {state.value}, moves need an active round")
    if not (in_bounds(move.source, size) and in_bounds(move.target, size)):
        raise IllegalMoveError(GameErrorCode.OUT_OF_BOUNDS, f"positions must be within a {size}x{size} board")
    if not is_adjacent(move.source, move.target):
        raise IllegalMoveError(GameErrorCode.NOT_ADJACENT, "cells must share an edge")
    if member.move_in_flight:
        raise IllegalMoveError(GameErrorCode.MOVE_IN_FLIGHT, "previous move is still being resolved")


def play_move(grid: Grid, move: Move, rng: random.Random, settings: GameSettings) -> MoveResult:
    """
    Swap two cells and resolve the resulting cascade.

    A swap that produces no match is undone: the result carries the
    untouched input grid, NO_MATCH and zero score. The caller must have
    validated the move.
    """
    swapped = apply_move(grid, move)
    report = resolve_cascade(
        swapped,
        rng,
        gem_types=settings.gem_types,
        points_per_gem=settings.points_per_gem,
        max_cycles=settings.max_cascade_cycles,
    )
    if not report.matched:
        return MoveResult(outcome=MoveOutcome.NO_MATCH, grid=grid)
    return MoveResult(
        outcome=MoveOutcome.MATCHED,
        grid=report.grid,
        score_delta=report.score_delta,
        cycles=report.cycles,
    )
