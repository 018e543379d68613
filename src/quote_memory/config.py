"""
Configuration for the quote memory service.

Settings are read from the environment via pydantic-settings:

- ``QUOTE_*``       engine sizing and matching behaviour
- ``QUOTE_REDIS_*`` key-value substrate connection

Nothing here is read at import time; callers build a ``Settings`` object
and pass it into the engine.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class QuoteSettings(BaseSettings):
    """Per-user capacities and matching options."""

    model_config = SettingsConfigDict(env_prefix="QUOTE_", extra="ignore")

    cache_size: int = Field(default=25, ge=1, description="Recent messages cached per user")
    store_size: int = Field(default=100, ge=1, description="Remembered messages kept per user")
    quoted_index_size: int | None = Field(
        default=None,
        ge=1,
        description="Recently quoted ids tracked per user (defaults to cache_size)",
    )
    init_timeout_ms: int = Field(default=10000, ge=0, description="Wait for the substrate at startup")
    substring_match: bool = Field(default=True, description="Fall back to substring matching for short queries")
    mash_limit: int = Field(default=10, ge=1, description="Messages returned by a mash command")

    @property
    def effective_quoted_index_size(self) -> int:
        return self.quoted_index_size or self.cache_size


class RedisSettings(BaseSettings):
    """Redis substrate settings. No URL means the in-process substrate is used."""

    model_config = SettingsConfigDict(env_prefix="QUOTE_REDIS_", extra="ignore")

    url: str | None = None
    key_prefix: str = "quote:"
    max_connections: int = Field(default=10, ge=1)


class Settings(BaseSettings):
    """Aggregate settings object handed to the factory and the engine."""

    model_config = SettingsConfigDict(extra="ignore")

    quote: QuoteSettings = Field(default_factory=QuoteSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
