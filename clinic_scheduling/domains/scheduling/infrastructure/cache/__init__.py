"""
Scheduling Cache Adapters
"""

from clinic_scheduling.domains.scheduling.infrastructure.cache.availability_cache import (
    MemoryAvailabilityCache,
    RedisAvailabilityCache,
)

__all__ = ["MemoryAvailabilityCache", "RedisAvailabilityCache"]
