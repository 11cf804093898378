"""
Farkle Duel - Settings Tests

Environment-driven configuration and logging setup.
"""

import logging

import pytest
from pydantic import ValidationError

from src.config.settings import (
    DEFAULT_ROOM_NAMES,
    Settings,
    configure_logging,
    get_settings,
)


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


class TestSettings:
    def test_defaults(self, env):
        settings = Settings(_env_file=None)

        assert settings.room_names == DEFAULT_ROOM_NAMES
        assert settings.bust_delay_seconds == 2.0
        assert settings.win_score == 10000
        assert not settings.debug

    def test_env_overrides(self, env):
        env.setenv("WIN_SCORE", "5000")
        env.setenv("ROOM_NAMES", '["Den", "Parlour"]')
        env.setenv("ENABLE_FOUR_STRAIGHT", "true")

        settings = Settings(_env_file=None)

        assert settings.win_score == 5000
        assert settings.room_names == ["Den", "Parlour"]
        assert settings.enable_four_straight

    def test_supabase_credentials_required(self, monkeypatch):
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_service_key_is_optional(self, env):
        env.delenv("SUPABASE_SERVICE_KEY", raising=False)
        assert Settings(_env_file=None).supabase_service_key is None

        env.setenv("SUPABASE_SERVICE_KEY", "service-key")
        assert Settings(_env_file=None).supabase_service_key == "service-key"

    def test_negative_bust_delay_rejected(self, env):
        env.setenv("BUST_DELAY_SECONDS", "-1")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_scoring_rules(self, env):
        env.setenv("WIN_SCORE", "3000")
        env.setenv("ENABLE_THREE_PAIRS", "false")

        rules = Settings(_env_file=None).scoring_rules()

        assert rules.win_score == 3000
        assert not rules.enable_three_pairs
        assert rules.single_one == 100

    def test_get_settings_is_cached(self, env):
        assert get_settings() is get_settings()


class TestConfigureLogging:
    def test_debug_wins_over_level(self, env, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))

        configure_logging(Settings(_env_file=None, debug=True, log_level="WARNING"))

        assert calls[0]["level"] == logging.DEBUG

    def test_level_from_settings(self, env, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))

        configure_logging(Settings(_env_file=None, log_level="warning"))

        assert calls[0]["level"] == "WARNING"
