import dataclasses

from pydantic_settings import BaseSettings, SettingsConfigDict

from universal_gateway.gateway.types import DEFAULT_TARGET_CONFIGS, TargetConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Upstream credentials (empty = not configured)
    github_token: str = ""
    weather_api_key: str = ""
    news_api_key: str = ""

    # Response cache
    cache_ttl: float = 300.0  # seconds
    cache_max_size: int = 100
    cache_cleanup_interval: float = 600.0  # seconds between expired-entry sweeps

    # App
    app_name: str = "Universal API Gateway"
    app_version: str = "1.0.0"
    app_debug: bool = True
    app_host: str = "0.0.0.0"
    app_port: int = 3000

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    @property
    def credentials(self) -> dict[str, str]:
        """Credential per target name."""
        return {
            "github": self.github_token,
            "weather": self.weather_api_key,
            "news": self.news_api_key,
        }


settings = Settings()


def build_target_configs(settings: Settings) -> dict[str, TargetConfig]:
    """Default target configs with credentials filled in from settings."""
    credentials = settings.credentials
    return {
        name: dataclasses.replace(config, credential=credentials.get(name, ""))
        for name, config in DEFAULT_TARGET_CONFIGS.items()
    }


def collect_config_warnings(settings: Settings) -> list[str]:
    """Warnings for missing optional credentials. Never fatal."""
    warnings: list[str] = []

    if not settings.github_token:
        warnings.append("GITHUB_TOKEN not set - using public API access only (rate limited)")

    if not settings.weather_api_key:
        warnings.append("WEATHER_API_KEY not set - weather features will be unavailable")

    if not settings.news_api_key:
        warnings.append("NEWS_API_KEY not set - news features will be unavailable")

    return warnings
