"""Application configuration using Pydantic Settings."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal
from urllib import parse as urllib_parse

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


def _default_data_dir() -> Path:
    """Resolve the default data directory.

    FEEDLINKER_DATA_DIR wins (used by tests), then the container volume
    /config, then ./data next to the package.
    """
    data_dir_env = os.environ.get("FEEDLINKER_DATA_DIR", "")
    if data_dir_env:
        return Path(data_dir_env)
    if Path("/config").exists():
        return Path("/config")
    return (Path(__file__).parent.parent.parent / "data").resolve()


def json_config_settings_source(
    settings: BaseSettings | None = None,
) -> dict[str, Any]:  # noqa: ANN001
    """Load settings from settings.json file.

    This source has lowest priority - env vars will override JSON values.

    Args:
        settings: The Settings class being constructed (unused)

    Returns:
        Dictionary with setting keys (lowercase) and values from JSON file.
    """
    settings_file = _default_data_dir() / "config" / "settings.json"
    if not settings_file.exists():
        return {}

    try:
        with settings_file.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except Exception:
        return {}

    if not isinstance(data, dict):
        return {}

    # The "matching" section belongs to MatchingConfig, not Settings
    return {k.lower(): v for k, v in data.items() if k.lower() != "matching"}


class ProxySettings(BaseModel):
    """Outbound proxy applied to every catalog request."""

    enabled: bool = Field(default=False, description="Route catalog calls through the proxy")
    host: str = Field(default="", description="Proxy host name or address")
    port: int = Field(default=8080, ge=1, le=65535, description="Proxy port")
    protocol: Literal["http", "https", "socks4", "socks5"] = Field(
        default="http", description="Proxy protocol"
    )
    username: str | None = Field(default=None, description="Proxy username")
    password: str | None = Field(default=None, description="Proxy password")

    @property
    def url(self) -> str | None:
        """Proxy URL for httpx, or None when the proxy is not usable."""
        if not self.enabled or not self.host:
            return None
        auth = ""
        if self.username and self.password:
            auth = (
                f"{urllib_parse.quote(self.username, safe='')}:"
                f"{urllib_parse.quote(self.password, safe='')}@"
            )
        return f"{self.protocol}://{auth}{self.host}:{self.port}"


class CatalogSettings(BaseModel):
    """Media catalog (TMDB) API settings."""

    api_key: str = Field(default="", description="Catalog API key")
    enabled: bool = Field(default=False, description="Whether catalog lookups are enabled")
    auto_search: bool = Field(
        default=True, description="Search the catalog for feed items without a link"
    )
    api_base_url: str = Field(
        default="https://api.themoviedb.org/3", description="Catalog API base URL"
    )
    site_base_url: str = Field(
        default="https://www.themoviedb.org", description="Base URL for canonical links"
    )
    image_base_url: str = Field(
        default="https://image.tmdb.org/t/p", description="Base URL for poster images"
    )
    language: str = Field(default="zh-CN", description="Language sent with searches")
    include_adult: bool = Field(default=False, description="Include adult titles in searches")
    timeout_seconds: float = Field(default=10.0, gt=0, description="Per-request timeout")
    min_request_interval: float = Field(
        default=2.0, ge=0, description="Minimum seconds between outbound catalog calls"
    )
    max_results: int = Field(default=10, ge=1, description="Candidates kept per search page")
    max_retries: int = Field(default=2, ge=0, description="Retries for transient failures")
    retry_base_delay: float = Field(default=1.0, ge=0, description="First backoff delay")
    retry_multiplier: float = Field(default=2.0, ge=1, description="Backoff multiplier")
    retry_max_delay: float = Field(default=5.0, ge=0, description="Backoff delay cap")
    retry_jitter: float = Field(
        default=0.0, ge=0, description="Random spread added to each delay, as a fraction of it"
    )
    proxy: ProxySettings = Field(default_factory=ProxySettings)

    @property
    def is_configured(self) -> bool:
        """Whether the catalog may be called at all."""
        return self.enabled and bool(self.api_key.strip())


class CacheSettings(BaseModel):
    """Resolved-link cache settings."""

    ttl_seconds: float = Field(default=86400, ge=0, description="TTL for resolved links")
    negative_ttl_seconds: float = Field(
        default=21600, ge=0, description="TTL for 'no match' results"
    )
    max_entries: int = Field(default=1000, ge=1, description="Maximum cached title pairs")


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from:
    1. JSON file (settings.json in config directory) - lowest priority
    2. .env file
    3. Environment variables - highest priority (override JSON/.env)

    All settings are prefixed with FEEDLINKER_ (e.g., FEEDLINKER_ENV=production).
    Nested sections use a double underscore (FEEDLINKER_CATALOG__API_KEY=...).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FEEDLINKER_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources - JSON file first, then env vars.

        Priority (lowest to highest):
        1. JSON file (settings.json)
        2. .env file
        3. Environment variables
        4. Init settings (values passed to Settings())
        """
        return (  # type: ignore[return-value]
            init_settings,
            env_settings,
            dotenv_settings,
            json_config_settings_source,
        )

    # Application
    env: Literal["development", "production", "testing"] = Field(
        default="development",
        description="Application environment (development, production, testing)",
    )

    host_bind_address: str = Field(default="127.0.0.1", description="Address to bind to")
    host_port: int = Field(default=8000, ge=1, le=65535, description="Port to bind to")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_to_file: bool = Field(default=False, description="Write JSON logs under logs_dir")

    data_dir: Path = Field(
        default_factory=_default_data_dir,
        description="Base directory for application data (config, logs)",
    )

    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)

    @property
    def config_dir(self) -> Path:
        """Directory for configuration files (settings.json, etc.)."""
        return self.data_dir / "config"

    @property
    def logs_dir(self) -> Path:
        """Directory for log files (if file logging is enabled)."""
        return self.data_dir / "logs"

    @property
    def is_debug(self) -> bool:
        """Check if running in debug/development mode."""
        return self.env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.env == "testing"

    def model_post_init(self, __context: object) -> None:
        """Post-initialization: create data directories if they don't exist."""
        self.data_dir = self.data_dir.resolve()
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached settings instance.

    Creates and caches the settings instance on first call.
    The cache is cleared when reload_settings() is called.

    Returns:
        Settings instance
    """
    return Settings()


def reload_settings() -> Settings:
    """Reload settings from all sources (JSON, .env, env vars).

    Returns:
        New Settings instance
    """
    get_settings.cache_clear()
    return get_settings()
