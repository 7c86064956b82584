import pytest
from pydantic import ValidationError

from game.logic.enums import GemType
from game.logic.exceptions import InvalidConfigurationError
from game.server.settings import GameServerSettings


class TestGameServerSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("GAME_CORS_ORIGINS", raising=False)
        settings = GameServerSettings()
        assert settings.host == "0.0.0.0"  # noqa: S104
        assert settings.port == 3000
        assert settings.cors_origins == ["*"]
        assert settings.max_rooms == 0
        assert settings.trust_client_scores is False

    def test_port_from_env(self, monkeypatch):
        monkeypatch.setenv("GAME_PORT", "8080")
        assert GameServerSettings().port == 8080

    def test_port_out_of_range_rejected(self):
        with pytest.raises(ValidationError, match="port"):
            GameServerSettings(port=70000)

    def test_cors_origins_json_array(self, monkeypatch):
        monkeypatch.setenv("GAME_CORS_ORIGINS", '["http://a.com","http://b.com"]')
        settings = GameServerSettings()
        assert settings.cors_origins == ["http://a.com", "http://b.com"]

    def test_cors_origins_csv(self, monkeypatch):
        monkeypatch.setenv("GAME_CORS_ORIGINS", "http://a.com,http://b.com")
        settings = GameServerSettings()
        assert settings.cors_origins == ["http://a.com", "http://b.com"]

    def test_cors_origins_invalid_raises(self, monkeypatch):
        monkeypatch.setenv("GAME_CORS_ORIGINS", "")
        with pytest.raises(ValidationError, match="cors_origins"):
            GameServerSettings()

    def test_gem_types_csv(self, monkeypatch):
        monkeypatch.setenv("GAME_GEM_TYPES", "red, blue, green")
        settings = GameServerSettings()
        assert settings.gem_types == [GemType.RED, GemType.BLUE, GemType.GREEN]

    def test_unknown_gem_rejected(self, monkeypatch):
        monkeypatch.setenv("GAME_GEM_TYPES", "red,silver")
        with pytest.raises(ValidationError, match="gem_types"):
            GameServerSettings()

    def test_negative_max_rooms_rejected(self):
        with pytest.raises(ValidationError, match="max_rooms"):
            GameServerSettings(max_rooms=-1)


class TestGameSettingsWiring:
    def test_round_rules_flow_through(self):
        settings = GameServerSettings(
            grid_size=6,
            round_duration_seconds=60,
            min_players=3,
            max_players=3,
            gem_types=["red", "blue", "green"],
        )
        game_settings = settings.game_settings()
        assert game_settings.grid_size == 6
        assert game_settings.round_duration_ms == 60_000
        assert game_settings.min_players == 3
        assert game_settings.gem_types == (GemType.RED, GemType.BLUE, GemType.GREEN)

    def test_single_gem_fails_at_startup(self):
        settings = GameServerSettings(gem_types=["red"])
        with pytest.raises(InvalidConfigurationError):
            settings.game_settings()

    def test_min_above_max_fails_at_startup(self):
        settings = GameServerSettings(min_players=5, max_players=4)
        with pytest.raises(InvalidConfigurationError, match="max_players"):
            settings.game_settings()
