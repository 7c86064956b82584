"""
Pydantic models for board engine data structures.

Contains the grid alias and the typed models (positions, moves, matches,
cascade and move results) that cross component boundaries.
"""

from pydantic import BaseModel, ConfigDict, Field

from game.logic.enums import Empty, GemType, MoveOutcome

Cell = GemType | Empty
Grid = tuple[tuple[Cell, ...], ...]


class Position(BaseModel):
    """A (row, col) cell coordinate. Row 0 is the top row."""

    model_config = ConfigDict(frozen=True)

    row: int
    col: int


class Move(BaseModel):
    """A swap request between two cells.

    Serialized with the wire names "from" and "to".
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: Position = Field(alias="from")
    target: Position = Field(alias="to")


class Match(BaseModel):
    """A maximal straight run of three or more identical gems."""

    model_config = ConfigDict(frozen=True)

    gem: GemType
    positions: tuple[Position, ...]

    @property
    def length(self) -> int:
        return len(self.positions)


class CascadeReport(BaseModel):
    """Fully resolved outcome of one cascade.

    cycles counts the clear/drop/refill rounds that found matches;
    matches_per_cycle holds the matches each of those rounds cleared.
    """

    model_config = ConfigDict(frozen=True)

    grid: Grid
    score_delta: int = 0
    cycles: int = 0
    matches_per_cycle: tuple[tuple[Match, ...], ...] = ()

    @property
    def matched(self) -> bool:
        return self.cycles > 0


class MoveResult(BaseModel):
    """Result of playing a legal move on a player's grid."""

    model_config = ConfigDict(frozen=True)

    outcome: MoveOutcome
    grid: Grid
    score_delta: int = 0
    cycles: int = 0


class PlayerStanding(BaseModel):
    """Player identity and score as sent in roster and final standings."""

    id: str
    name: str
    score: int
