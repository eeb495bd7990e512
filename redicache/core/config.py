"""Cache session configuration (settings and environment).

Single source of truth for connection and key settings. Uses
pydantic-settings with REDICACHE_ environment variables and .env
support. Instances are frozen: a session's configuration never changes
after it is built.
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from redicache.core.constants import DEFAULT_IDLE_TIMEOUT_SECONDS, DEFAULT_MAX_RETRIES


class RedisConfig(BaseSettings):
    """Connection, key prefix and expiration settings for one cache session.

    Every physical key written or read by a session is
    ``key_prefix + logical key``. ``expiration_in_minutes`` is the session
    default used when a candidate or raw write supplies no expiration.
    """

    # Connection
    host: str = "127.0.0.1"
    port: int = Field(default=6379, ge=1, le=65535)
    password: SecretStr | None = None
    db: int = Field(default=0, ge=0)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    idle_timeout_seconds: int = Field(default=DEFAULT_IDLE_TIMEOUT_SECONDS, ge=0)

    # Keys
    key_prefix: str = ""
    expiration_in_minutes: int = Field(default=0, ge=0)

    # Diagnostics: when True, operation outcomes are logged at DEBUG level.
    debug: bool = False

    model_config = SettingsConfigDict(
        env_prefix="REDICACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    @property
    def address(self) -> str:
        """Return host:port for log lines."""
        return f"{self.host}:{self.port}"

    @property
    def default_expiration(self) -> timedelta:
        """Session default expiration as a timedelta (zero means no TTL)."""
        return timedelta(minutes=self.expiration_in_minutes)


@lru_cache
def get_settings() -> RedisConfig:
    """Return cached settings read from the environment (one per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() after changing REDICACHE_* variables.

    Returns:
        Loaded and validated RedisConfig instance.
    """
    return RedisConfig()
