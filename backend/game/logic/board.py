"""
Board engine for match-3 grids.

Pure functions over immutable grids: generation without pre-existing matches,
match detection, swapping, gravity, refill, scoring and cascade resolution.
No I/O and no time-based waits; any staged reveal of cascade steps belongs
to the client.

Grid layout: grid[row][col], row 0 at the top, gravity pulls toward the
highest row index.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from game.logic.enums import EMPTY, Empty, GemType
from game.logic.exceptions import CascadeLimitError, InvalidConfigurationError
from game.logic.settings import MAX_CASCADE_CYCLES, POINTS_PER_GEM
from game.logic.types import CascadeReport, Cell, Grid, Match, Move, Position

if TYPE_CHECKING:
    import random
    from collections.abc import Iterable, Sequence

MIN_MATCH_LENGTH = 3


def generate_grid(size: int, gem_types: Sequence[GemType], rng: random.Random) -> Grid:
    """
    Generate a size x size grid with no run of three.

    Cells are filled row-major with a uniformly chosen gem, skipping any gem
    that would complete a run with the two cells directly to its left or the
    two cells directly above; those are the only filled neighbors a new cell
    can line up with.

    With only two gem types a cell can have both gems ruled out. The row
    then backtracks to its earlier cells. Any row can be completed below two
    valid rows, so generation never fails for a palette of two or more gems.
    """
    palette = list(dict.fromkeys(gem_types))
    if len(palette) < 2:  # noqa: PLR2004
        raise InvalidConfigurationError(f"need at least 2 distinct gem types, got {len(palette)}")

    rows: list[list[Cell]] = []
    for _ in range(size):
        row = _fill_row(rows, size, palette, rng)
        if row is None:
            raise InvalidConfigurationError(f"could not fill a match-free {size}x{size} grid from {len(palette)} gems")
        rows.append(row)
    return _freeze(rows)


def _fill_row(rows: list[list[Cell]], size: int, palette: list[GemType], rng: random.Random) -> list[Cell] | None:
    """Depth-first fill of the next row below rows, or None if no fill exists."""
    row = len(rows)
    cells: list[Cell] = []
    # whether the rest of a row can be filled depends only on the column and
    # the two cells before it
    dead_ends: set[tuple[int, Cell | None, Cell | None]] = set()

    def extend(col: int) -> bool:
        if col == size:
            return True
        key = (col, cells[col - 2] if col >= 2 else None, cells[col - 1] if col >= 1 else None)  # noqa: PLR2004
        if key in dead_ends:
            return False
        forbidden: set[Cell] = set()
        if col >= 2 and cells[col - 1] == cells[col - 2]:  # noqa: PLR2004
            forbidden.add(cells[col - 1])
        if row >= 2 and rows[row - 1][col] == rows[row - 2][col]:  # noqa: PLR2004
            forbidden.add(rows[row - 1][col])
        candidates = [gem for gem in palette if gem not in forbidden]
        rng.shuffle(candidates)
        for gem in candidates:
            cells.append(gem)
            if extend(col + 1):
                return True
            cells.pop()
        dead_ends.add(key)
        return False

    return cells if extend(0) else None


def find_matches(grid: Grid) -> list[Match]:
    """
    Find every maximal horizontal and vertical run of three or more gems.

    Horizontal runs are reported first in row-major order, then vertical runs
    in column-major order. A cell may belong to one run of each axis; both
    runs are reported.
    """
    size = len(grid)
    matches: list[Match] = []
    for row in range(size):
        matches.extend(_runs([Position(row=row, col=col) for col in range(size)], grid))
    for col in range(size):
        matches.extend(_runs([Position(row=row, col=col) for row in range(size)], grid))
    return matches


def _runs(line: list[Position], grid: Grid) -> list[Match]:
    """Split one row or column into maximal same-gem runs of MIN_MATCH_LENGTH or more."""
    found: list[Match] = []
    start = 0
    while start < len(line):
        first = line[start]
        gem = grid[first.row][first.col]
        end = start + 1
        while end < len(line) and grid[line[end].row][line[end].col] == gem:
            end += 1
        if not isinstance(gem, Empty) and end - start >= MIN_MATCH_LENGTH:
            found.append(Match(gem=gem, positions=tuple(line[start:end])))
        start = end
    return found


def apply_move(grid: Grid, move: Move) -> Grid:
    """Return a new grid with the cells at move.source and move.target swapped.

    No legality checks: callers go through game.logic.moves.
    """
    rows = _thaw(grid)
    a, b = move.source, move.target
    rows[a.row][a.col], rows[b.row][b.col] = rows[b.row][b.col], rows[a.row][a.col]
    return _freeze(rows)


def clear_matches(grid: Grid, matches: Iterable[Match]) -> Grid:
    """Set every matched position (union over all matches) to EMPTY."""
    rows = _thaw(grid)
    for match in matches:
        for pos in match.positions:
            rows[pos.row][pos.col] = EMPTY
    return _freeze(rows)


def apply_gravity(grid: Grid) -> Grid:
    """
    Compact each column toward the bottom.

    Gems keep their relative order; EMPTY cells collect at the top.
    """
    size = len(grid)
    rows = _thaw(grid)
    for col in range(size):
        gems = [grid[row][col] for row in range(size) if not isinstance(grid[row][col], Empty)]
        padding = size - len(gems)
        for row in range(size):
            rows[row][col] = EMPTY if row < padding else gems[row - padding]
    return _freeze(rows)


def refill(grid: Grid, gem_types: Sequence[GemType], rng: random.Random) -> Grid:
    """
    Fill every EMPTY cell with a freshly sampled gem, scanning row-major.

    Unlike generate_grid, refills may create new runs; the next cascade
    cycle picks them up.
    """
    palette = list(dict.fromkeys(gem_types))
    rows = _thaw(grid)
    for row in rows:
        for col, cell in enumerate(row):
            if isinstance(cell, Empty):
                row[col] = rng.choice(palette)
    return _freeze(rows)


def score_matches(matches: Iterable[Match], points_per_gem: int = POINTS_PER_GEM) -> int:
    """
    Score a set of matches: points_per_gem for every cell of every match.

    A cell shared by a horizontal and a vertical match counts once per match.
    """
    return sum(points_per_gem * match.length for match in matches)


def resolve_cascade(
    grid: Grid,
    rng: random.Random,
    *,
    gem_types: Sequence[GemType] = tuple(GemType),
    points_per_gem: int = POINTS_PER_GEM,
    max_cycles: int = MAX_CASCADE_CYCLES,
) -> CascadeReport:
    """
    Resolve matches until the grid settles.

    Each cycle finds matches, scores them, clears them, drops the remaining
    gems and refills the gaps. Stops at the first cycle that finds no match.
    Raises CascadeLimitError if the grid is still matching after max_cycles.
    """
    cycles: list[tuple[Match, ...]] = []
    score = 0
    while True:
        matches = find_matches(grid)
        if not matches:
            break
        if len(cycles) >= max_cycles:
            raise CascadeLimitError(max_cycles)
        cycles.append(tuple(matches))
        score += score_matches(matches, points_per_gem)
        grid = refill(apply_gravity(clear_matches(grid, matches)), gem_types, rng)

    return CascadeReport(
        grid=grid,
        score_delta=score,
        cycles=len(cycles),
        matches_per_cycle=tuple(cycles),
    )


def has_empty_cells(grid: Grid) -> bool:
    return any(isinstance(cell, Empty) for row in grid for cell in row)


def grid_to_wire(grid: Grid) -> list[list[str]]:
    """Convert a grid to the wire form: a list of rows of gem names."""
    return [[cell.value for cell in row] for row in grid]


def grid_from_rows(rows: Sequence[Sequence[str | None]]) -> Grid:
    """Build a grid from gem names; None or "empty" marks an EMPTY cell."""
    return tuple(
        tuple(EMPTY if value is None or value == EMPTY.value else GemType(value) for value in row) for row in rows
    )


def _thaw(grid: Grid) -> list[list[Cell]]:
    return [list(row) for row in grid]


def _freeze(rows: list[list[Cell]]) -> Grid:
    return tuple(tuple(row) for row in rows)
