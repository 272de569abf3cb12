"""Configuration using pydantic-settings, loadable from a TOML file."""

import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.fetcher import DEFAULT_MAX_BYTES, DEFAULT_USER_AGENT
from .errors import ConfigError


class AppSettings(BaseModel):
    """Service-level settings."""

    model_config = ConfigDict(populate_by_name=True)

    listen: str = ":8080"
    worker_count: int = Field(10, ge=0, alias="workerCount")


class DatabaseSettings(BaseModel):
    """Record store connection."""

    url: str = "sqlite:///linkmeta.db"
    connect_timeout: float = Field(5.0, ge=0)
    pool_size: int = Field(10, ge=1)


class RedisSettings(BaseModel):
    """Redis connection parameters (timeouts in seconds)."""

    model_config = ConfigDict(populate_by_name=True)

    addresses: list[str] = Field(default_factory=list, alias="redis")
    pool_size: int = Field(10, ge=1)
    dial_timeout: float = Field(5.0, ge=0)
    read_timeout: float = Field(3.0, ge=0)
    write_timeout: float = Field(3.0, ge=0)


class CacheSettings(BaseModel):
    """Freshness policy defaults."""

    max_age: float = Field(3600.0, ge=0, allow_inf_nan=False, description="Seconds before a record is refreshed")
    allow_stale: bool = False


class FetcherSettings(BaseModel):
    """HTTP fetcher configuration."""

    timeout: float = Field(10.0, gt=0)
    user_agent: str = DEFAULT_USER_AGENT
    max_connections: int = Field(100, ge=1)
    max_keepalive_connections: int = Field(20, ge=0)
    max_content_bytes: int = Field(DEFAULT_MAX_BYTES, ge=1)


class LinkMetaSettings(BaseSettings):
    """linkmeta configuration."""

    app: AppSettings = Field(default_factory=AppSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    fetcher: FetcherSettings = Field(default_factory=FetcherSettings)

    model_config = SettingsConfigDict(env_prefix="LINKMETA_", env_nested_delimiter="__", extra="ignore")


def load_settings(path: str | Path | None = None) -> LinkMetaSettings:
    """Load settings from a TOML file, or from the environment if path is None.

    Values in the file take precedence over environment variables.
    """
    try:
        if path is None:
            return LinkMetaSettings()

        path = Path(path)
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError as exc:
            raise ConfigError(f"Config file not found: {path}") from exc
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

        return LinkMetaSettings(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc

