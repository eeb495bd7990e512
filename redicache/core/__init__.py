"""Core: configuration and shared constants."""

from redicache.core.config import RedisConfig, get_settings

__all__ = ["RedisConfig", "get_settings"]
