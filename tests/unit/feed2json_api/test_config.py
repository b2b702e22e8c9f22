"""Tests for feed2json_api.config module."""

import pytest

from feed2json_api.config import (
    DEFAULT_USER_AGENT,
    APIConfig,
    get_config,
    load_config,
    reset_config,
    set_config,
)


class TestLoadConfig:
    def test_loads_prod(self, monkeypatch) -> None:
        monkeypatch.delenv("FEED2JSON_CACHE_DIR", raising=False)
        monkeypatch.delenv("FEED2JSON_FETCH_TIMEOUT", raising=False)
        monkeypatch.delenv("PORT", raising=False)
        config = load_config("prod")
        assert config.cache.dir == "cache"
        assert config.cache.cache_conversion_errors is True
        assert config.fetch.timeout_seconds == 10
        assert config.fetch.user_agent == DEFAULT_USER_AGENT
        assert config.server.port == 3000

    def test_env_var_selects_config(self, monkeypatch) -> None:
        monkeypatch.setenv("FEED2JSON_CONFIG", "dev")
        monkeypatch.delenv("FEED2JSON_CACHE_DIR", raising=False)
        assert load_config().cache.dir == "cache-dev"

    def test_env_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("FEED2JSON_CACHE_DIR", "/tmp/feeds")
        monkeypatch.setenv("FEED2JSON_FETCH_TIMEOUT", "2.5")
        monkeypatch.setenv("PORT", "8080")
        config = load_config("prod")
        assert config.cache.dir == "/tmp/feeds"
        assert config.fetch.timeout_seconds == 2.5
        assert config.server.port == 8080

    def test_missing_config_raises(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_config("does-not-exist")


class TestGlobalConfig:
    def test_set_and_reset(self) -> None:
        config = APIConfig()
        set_config(config)
        assert get_config() is config
        reset_config()
        assert get_config() is not config
        reset_config()
