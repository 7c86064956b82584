"""Centralized game settings for match-3 rounds - all configurable gameplay rules."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from game.logic.enums import GemType
from game.logic.exceptions import InvalidConfigurationError

GRID_SIZE = 8
MIN_PLAYERS = 2
MAX_PLAYERS = 4
ROUND_DURATION_SECONDS = 5 * 60
POINTS_PER_GEM = 10
MAX_CASCADE_CYCLES = 1000

# smallest board where a 3-run can exist in both axes
_MIN_GRID_SIZE = 3


class GameSettings(BaseModel):
    """
    Centralized configuration for match-3 round rules.

    Defaults describe the standard game: 8x8 board, six gems, 2-4 players,
    five-minute rounds.
    """

    model_config = ConfigDict(frozen=True)

    # --- Board ---
    grid_size: int = GRID_SIZE
    gem_types: tuple[GemType, ...] = tuple(GemType)

    # --- Scoring ---
    points_per_gem: int = POINTS_PER_GEM
    max_cascade_cycles: int = MAX_CASCADE_CYCLES

    # --- Room ---
    min_players: int = MIN_PLAYERS
    max_players: int = MAX_PLAYERS
    round_duration_seconds: float = ROUND_DURATION_SECONDS

    @property
    def round_duration_ms(self) -> int:
        return int(self.round_duration_seconds * 1000)


def validate_settings(settings: GameSettings) -> None:
    """Validate that the settings describe a playable round.

    Raises InvalidConfigurationError listing every problem found.
    """
    errors: list[str] = []

    if len(set(settings.gem_types)) < 2:  # noqa: PLR2004
        errors.append(f"gem_types must contain at least 2 distinct gems, got {len(set(settings.gem_types))}")

    if settings.grid_size < _MIN_GRID_SIZE:
        errors.append(f"grid_size must be at least {_MIN_GRID_SIZE}, got {settings.grid_size}")

    if settings.points_per_gem < 0:
        errors.append(f"points_per_gem must be non-negative, got {settings.points_per_gem}")

    if settings.max_cascade_cycles < 1:
        errors.append(f"max_cascade_cycles must be positive, got {settings.max_cascade_cycles}")

    if settings.min_players < 1:
        errors.append(f"min_players must be positive, got {settings.min_players}")

    if settings.max_players < settings.min_players:
        errors.append(f"max_players={settings.max_players} is below min_players={settings.min_players}")

    if settings.round_duration_seconds <= 0:
        errors.append(f"round_duration_seconds must be positive, got {settings.round_duration_seconds}")

    if errors:
        raise InvalidConfigurationError("; ".join(errors))
