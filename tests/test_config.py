"""Tests for settings, target configuration and service wiring."""

from __future__ import annotations

from universal_gateway.core.config import Settings, build_target_configs, collect_config_warnings
from universal_gateway.gateway.types import DEFAULT_TARGET_CONFIGS, AuthType


class TestTargetConfigs:
    def test_credentials_filled_from_settings(self):
        settings = Settings(_env_file=None, github_token="gh", weather_api_key="w", news_api_key="")
        targets = build_target_configs(settings)

        assert set(targets) == {"github", "weather", "news"}
        assert targets["github"].credential == "gh"
        assert targets["github"].auth_type == AuthType.TOKEN
        assert targets["weather"].credential == "w"
        assert targets["news"].has_credential is False

    def test_defaults_are_not_mutated(self):
        build_target_configs(Settings(_env_file=None, github_token="secret"))
        assert DEFAULT_TARGET_CONFIGS["github"].credential == ""

    def test_target_limits(self):
        targets = build_target_configs(Settings(_env_file=None))
        assert targets["github"].rate_limit.requests == 5000
        assert targets["github"].rate_limit.window_seconds == 3600.0
        assert targets["weather"].retries == 2
        assert targets["weather"].timeout_seconds == 5.0
        assert targets["news"].rate_limit.window_seconds == 86400.0


class TestConfigWarnings:
    def test_all_missing(self):
        warnings = collect_config_warnings(
            Settings(_env_file=None, github_token="", weather_api_key="", news_api_key="")
        )
        assert len(warnings) == 3
        assert any("GITHUB_TOKEN" in w for w in warnings)

    def test_none_missing(self):
        settings = Settings(_env_file=None, github_token="a", weather_api_key="b", news_api_key="c")
        assert collect_config_warnings(settings) == []

    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "from-env")
        monkeypatch.setenv("CACHE_MAX_SIZE", "42")

        settings = Settings(_env_file=None)

        assert settings.github_token == "from-env"
        assert settings.cache_max_size == 42


class TestBuildServices:
    def test_services_share_components(self, services, test_settings):
        assert services.pipeline.cache is services.cache
        assert services.pipeline.rate_limiter is services.rate_limiter
        assert services.pipeline.metrics is services.metrics
        assert services.cache.max_size == test_settings.cache_max_size
        assert services.targets["github"].credential == "test-token"
