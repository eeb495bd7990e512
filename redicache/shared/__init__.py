"""Shared helpers: logging setup. No cache logic."""

from redicache.shared.logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
