"""
Test suite for environment-driven configuration.

Run with: pytest test_config.py -v
"""

import config as config_module
from config import ServerConfig, TableTiming, get_env_bool, get_env_float, get_env_int


class TestEnvHelpers:

    def test_bool_values(self, monkeypatch):
        monkeypatch.setenv("FLAG", "yes")
        assert get_env_bool("FLAG") is True
        monkeypatch.setenv("FLAG", "off")
        assert get_env_bool("FLAG", True) is False
        monkeypatch.setenv("FLAG", "maybe")
        assert get_env_bool("FLAG", True) is True

    def test_int_fallback(self, monkeypatch):
        monkeypatch.setenv("NUM", "seven")
        assert get_env_int("NUM", 5) == 5

    def test_float(self, monkeypatch):
        monkeypatch.setenv("SECS", "0.25")
        assert get_env_float("SECS", 1.0) == 0.25
        monkeypatch.setenv("SECS", "soon")
        assert get_env_float("SECS", 1.0) == 1.0


class TestServerConfig:

    def test_defaults(self, monkeypatch):
        for key in ("MAX_PLAYERS_PER_TABLE", "TABLE_CODE_LENGTH", "RESPONSE_TIMEOUT", "NEXT_ROUND_DELAY"):
            monkeypatch.delenv(key, raising=False)

        cfg = ServerConfig.from_env()
        assert cfg.MAX_PLAYERS_PER_TABLE == 5
        assert cfg.TABLE_CODE_LENGTH == 6
        assert cfg.RESPONSE_TIMEOUT == 30.0
        assert cfg.timing.NEXT_ROUND_DELAY == 1.5

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("MAX_PLAYERS_PER_TABLE", "3")
        monkeypatch.setenv("RESPONSE_TIMEOUT", "10")
        monkeypatch.setenv("DEALER_DRAW_DELAY", "0")

        cfg = ServerConfig.from_env()
        assert cfg.MAX_PLAYERS_PER_TABLE == 3
        assert cfg.RESPONSE_TIMEOUT == 10.0
        assert cfg.timing.DEALER_DRAW_DELAY == 0.0

    def test_reload_config(self, monkeypatch):
        monkeypatch.setenv("PORT", "9100")
        try:
            assert config_module.reload_config().PORT == 9100
            assert config_module.config.PORT == 9100
        finally:
            monkeypatch.delenv("PORT")
            config_module.reload_config()

    def test_instant_timing(self):
        timing = TableTiming.instant()
        assert timing.JOIN_GRACE_DELAY == 0
        assert timing.NEXT_ROUND_DELAY == 0
