"""
Shared utilities module

Logging and caching helpers used across the scheduling engine.
"""

from .cache import CacheEntry, CacheStats, MemoryCache
from .logger import (
    ContextLogger,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
    get_repository_logger,
    get_use_case_logger,
)

__all__ = [
    # Cache
    "CacheEntry",
    "CacheStats",
    "MemoryCache",
    # Logging
    "ContextLogger",
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "get_repository_logger",
    "get_use_case_logger",
]
