"""Game server configuration via environment variables."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from game.logic.enums import GemType
from game.logic.settings import (
    GRID_SIZE,
    MAX_PLAYERS,
    MIN_PLAYERS,
    ROUND_DURATION_SECONDS,
    GameSettings,
    validate_settings,
)
from shared.validators import StringListEnvSettingsSource, parse_string_list

if TYPE_CHECKING:
    from pydantic_settings.sources.base import PydanticBaseSettingsSource


class GameServerSettings(BaseSettings):
    model_config = {"env_prefix": "GAME_"}

    host: str = "0.0.0.0"  # noqa: S104
    port: int = Field(default=3000, ge=1, le=65535)
    log_dir: str | None = None
    cors_origins: list[str] = ["*"]
    max_rooms: int = Field(default=0, ge=0)  # 0 = unlimited

    # round rules
    round_duration_seconds: float = Field(default=ROUND_DURATION_SECONDS, gt=0)
    min_players: int = Field(default=MIN_PLAYERS, ge=1)
    max_players: int = Field(default=MAX_PLAYERS, ge=1)
    grid_size: int = Field(default=GRID_SIZE, ge=3, le=32)
    gem_types: list[GemType] = list(GemType)
    trust_client_scores: bool = False

    @field_validator("cors_origins", mode="before")
    @classmethod
    def validate_cors_origins(cls, v: str | list[str]) -> list[str]:
        return parse_string_list(v)

    @field_validator("gem_types", mode="before")
    @classmethod
    def validate_gem_types(cls, v: str | list[str]) -> list[str]:
        return parse_string_list(v)

    def game_settings(self) -> GameSettings:
        """Build the round rules from process settings.

        Raises InvalidConfigurationError when the rules cannot produce a
        playable round (e.g. fewer than 2 gem types).
        """
        settings = GameSettings(
            grid_size=self.grid_size,
            gem_types=tuple(self.gem_types),
            min_players=self.min_players,
            max_players=self.max_players,
            round_duration_seconds=self.round_duration_seconds,
        )
        validate_settings(settings)
        return settings

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, StringListEnvSettingsSource(settings_cls), dotenv_settings, file_secret_settings
