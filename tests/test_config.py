"""Tests for settings and store backend resolution"""
from conftest import make_settings

from ideapage_api.core.config import THIRTY_DAYS_SECONDS, resolve_store_config


class TestResolveStoreConfig:

    def test_vercel_kv_needs_all_three_values(self):
        settings = make_settings(
            kv_url="redis://kv", kv_rest_api_url="https://kv.test", kv_rest_api_token="kv-token",
            upstash_redis_rest_url="https://up.test", upstash_redis_rest_token="up-token",
        )
        config = resolve_store_config(settings)
        assert (config.backend, config.url, config.token) == ("vercel-kv", "https://kv.test", "kv-token")

    def test_partial_vercel_kv_falls_through_to_upstash(self):
        settings = make_settings(
            kv_rest_api_url="https://kv.test",
            upstash_redis_rest_url="https://up.test", upstash_redis_rest_token="up-token",
        )
        config = resolve_store_config(settings)
        assert (config.backend, config.url, config.token) == ("upstash", "https://up.test", "up-token")

    def test_redis_url(self):
        config = resolve_store_config(make_settings(redis_url="redis://localhost:6379/0"))
        assert config.backend == "redis"
        assert config.persistent

    def test_no_credentials_uses_memory(self, caplog):
        config = resolve_store_config(make_settings())
        assert config.backend == "memory"
        assert not config.persistent
        assert "non-persistent" in caplog.text


class TestSettings:

    def test_defaults(self):
        settings = make_settings()
        assert settings.content_ttl_seconds == THIRTY_DAYS_SECONDS == 2592000
        assert settings.preview_key_prefix == "preview_landing_page:"
        assert settings.dynamic_key_prefix == "dynamic_landing_page:"
        assert settings.page_fetch_attempts == 3

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4o-mini")
        monkeypatch.setenv("KEEPALIVE_INTERVAL_SECONDS", "5")
        settings = make_settings()
        assert settings.openai_model == "gpt-4o-mini"
        assert settings.keepalive_interval_seconds == 5.0
