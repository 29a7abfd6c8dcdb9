# ============================================================================
# SCOPE: INFRASTRUCTURE (Scheduling)
# Description: Availability cache adapters. In-memory (per process) and
#              Redis (shared) implementations of IAvailabilityCache.
# ============================================================================
"""
Availability Cache - slot lists per (doctor, date, duration).

Features:
- One entry per doctor day holding a list per duration, so a single
  invalidation drops every duration at once
- TTL as a safety net; writes invalidate synchronously
- Redis errors surface as RepositoryUnavailableException

Usage:
    cache = MemoryAvailabilityCache(ttl_seconds=1800)
    await cache.set(7, date(2025, 3, 10), 30, [time(9, 0), time(9, 30)])
    await cache.get(7, date(2025, 3, 10), 30)
    await cache.invalidate(7, date(2025, 3, 10))
"""

import asyncio
import json
import logging
from datetime import date, time

from redis.asyncio import Redis
from redis.exceptions import RedisError

from clinic_scheduling.core.domain import RepositoryUnavailableException
from clinic_scheduling.core.shared.cache import MemoryCache
from clinic_scheduling.domains.scheduling.application.ports.availability_cache import IAvailabilityCache

logger = logging.getLogger(__name__)

# Cache key type for (doctor_id, date)
DayKey = tuple[int, date]


def _encode_slots(slots: list[time]) -> str:
    return json.dumps([slot.strftime("%H:%M") for slot in slots])


def _decode_slots(raw: str | bytes) -> list[time]:
    return [time.fromisoformat(item) for item in json.loads(raw)]


class MemoryAvailabilityCache(IAvailabilityCache):
    """Per-process availability cache backed by MemoryCache."""

    def __init__(self, ttl_seconds: float = 1800, max_size: int = 5000, cache: MemoryCache | None = None):
        self._cache = cache or MemoryCache(max_size=max_size, default_ttl=ttl_seconds)
        self._write_lock = asyncio.Lock()

    async def get(self, doctor_id: int, on_date: date, duration_minutes: int) -> list[time] | None:
        day: dict[int, list[time]] | None = await self._cache.async_get((doctor_id, on_date))
        if day is None:
            return None
        slots = day.get(duration_minutes)
        return list(slots) if slots is not None else None

    async def set(
        self,
        doctor_id: int,
        on_date: date,
        duration_minutes: int,
        slots: list[time],
    ) -> None:
        async with self._write_lock:
            day = dict(await self._cache.async_get((doctor_id, on_date)) or {})
            day[duration_minutes] = list(slots)
            await self._cache.async_set((doctor_id, on_date), day)

    async def invalidate(self, doctor_id: int, on_date: date) -> None:
        async with self._write_lock:
            await self._cache.async_delete((doctor_id, on_date))
        logger.debug(f"Availability invalidated for doctor {doctor_id} on {on_date}")

    @property
    def stats(self) -> dict:
        return self._cache.get_info()


class RedisAvailabilityCache(IAvailabilityCache):
    """
    Shared availability cache in Redis.

    One hash per doctor day: ``availability:{doctor_id}:{date}`` with one
    field per duration holding the JSON list of "HH:MM" starts.
    """

    REDIS_KEY_PREFIX = "availability"  # {prefix}:{doctor_id}:{date}

    def __init__(self, client: Redis, ttl_seconds: int = 1800):
        self._redis = client
        self.ttl_seconds = ttl_seconds

    def _make_redis_key(self, doctor_id: int, on_date: date) -> str:
        """Create Redis key string."""
        return f"{self.REDIS_KEY_PREFIX}:{doctor_id}:{on_date.isoformat()}"

    async def get(self, doctor_id: int, on_date: date, duration_minutes: int) -> list[time] | None:
        key = self._make_redis_key(doctor_id, on_date)
        try:
            raw = await self._redis.hget(key, str(duration_minutes))
        except RedisError as e:
            raise self._unavailable("get", e) from e
        if raw is None:
            return None
        return _decode_slots(raw)

    async def set(
        self,
        doctor_id: int,
        on_date: date,
        duration_minutes: int,
        slots: list[time],
    ) -> None:
        key = self._make_redis_key(doctor_id, on_date)
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.hset(key, str(duration_minutes), _encode_slots(slots))
                pipe.expire(key, self.ttl_seconds)
                await pipe.execute()
        except RedisError as e:
            raise self._unavailable("set", e) from e

    async def invalidate(self, doctor_id: int, on_date: date) -> None:
        key = self._make_redis_key(doctor_id, on_date)
        try:
            await self._redis.delete(key)
        except RedisError as e:
            raise self._unavailable("invalidate", e) from e
        logger.debug(f"Availability invalidated in Redis: {key}")

    def _unavailable(self, operation: str, error: Exception) -> RepositoryUnavailableException:
        logger.error(f"Redis {operation} failed: {error}")
        return RepositoryUnavailableException(service="redis", operation=operation, original_error=error)
