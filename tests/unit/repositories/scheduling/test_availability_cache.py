"""
Unit tests for the availability cache adapters.

Tests:
- MemoryAvailabilityCache (per duration entries, day invalidation, TTL)
- RedisAvailabilityCache (key layout, encoding, error mapping)
"""

import json
from datetime import date, time
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from clinic_scheduling.core.domain import RepositoryUnavailableException
from clinic_scheduling.core.shared.cache import MemoryCache
from clinic_scheduling.domains.scheduling.infrastructure.cache import (
    MemoryAvailabilityCache,
    RedisAvailabilityCache,
)

MONDAY = date(2025, 3, 10)
SLOTS = [time(9, 0), time(9, 30), time(14, 15)]


class ManualTimer:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def pipeline():
    """Redis pipeline usable as an async context manager."""
    pipe = MagicMock()
    pipe.__aenter__.return_value = pipe
    pipe.__aexit__.return_value = False
    pipe.execute = AsyncMock(return_value=[1, True])
    return pipe


# ============================================================================
# MemoryAvailabilityCache Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.repository
class TestMemoryAvailabilityCache:
    """Test MemoryAvailabilityCache."""

    @pytest.mark.asyncio
    async def test_miss_returns_none(self):
        cache = MemoryAvailabilityCache()

        assert await cache.get(7, MONDAY, 30) is None

    @pytest.mark.asyncio
    async def test_durations_share_the_day_entry(self):
        cache = MemoryAvailabilityCache()

        await cache.set(7, MONDAY, 30, SLOTS)
        await cache.set(7, MONDAY, 60, SLOTS[:1])

        assert await cache.get(7, MONDAY, 30) == SLOTS
        assert await cache.get(7, MONDAY, 60) == [time(9, 0)]
        assert await cache.get(7, MONDAY, 45) is None
        assert cache.stats["size"] == 1

    @pytest.mark.asyncio
    async def test_empty_list_is_a_hit(self):
        cache = MemoryAvailabilityCache()

        await cache.set(7, MONDAY, 30, [])

        assert await cache.get(7, MONDAY, 30) == []

    @pytest.mark.asyncio
    async def test_invalidate_drops_every_duration(self):
        # Arrange
        cache = MemoryAvailabilityCache()
        await cache.set(7, MONDAY, 30, SLOTS)
        await cache.set(7, MONDAY, 60, SLOTS)
        await cache.set(7, date(2025, 3, 11), 30, SLOTS)

        # Act
        await cache.invalidate(7, MONDAY)

        # Assert
        assert await cache.get(7, MONDAY, 30) is None
        assert await cache.get(7, MONDAY, 60) is None
        assert await cache.get(7, date(2025, 3, 11), 30) == SLOTS

    @pytest.mark.asyncio
    async def test_returned_list_is_a_copy(self):
        cache = MemoryAvailabilityCache()
        await cache.set(7, MONDAY, 30, SLOTS)

        (await cache.get(7, MONDAY, 30)).clear()

        assert await cache.get(7, MONDAY, 30) == SLOTS

    @pytest.mark.asyncio
    async def test_entries_expire_after_ttl(self):
        timer = ManualTimer()
        cache = MemoryAvailabilityCache(cache=MemoryCache(max_size=10, default_ttl=60, timer=timer))
        await cache.set(7, MONDAY, 30, SLOTS)

        timer.now = 59
        assert await cache.get(7, MONDAY, 30) == SLOTS

        timer.now = 60
        assert await cache.get(7, MONDAY, 30) is None


# ============================================================================
# RedisAvailabilityCache Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.repository
class TestRedisAvailabilityCache:
    """Test RedisAvailabilityCache."""

    def test_key_layout(self, mock_redis):
        cache = RedisAvailabilityCache(mock_redis)

        assert cache._make_redis_key(7, MONDAY) == "availability:7:2025-03-10"

    @pytest.mark.asyncio
    async def test_get_decodes_slots(self, mock_redis):
        mock_redis.hget.return_value = '["09:00", "09:30", "14:15"]'
        cache = RedisAvailabilityCache(mock_redis)

        slots = await cache.get(7, MONDAY, 30)

        assert slots == SLOTS
        mock_redis.hget.assert_awaited_once_with("availability:7:2025-03-10", "30")

    @pytest.mark.asyncio
    async def test_get_miss(self, mock_redis):
        cache = RedisAvailabilityCache(mock_redis)

        assert await cache.get(7, MONDAY, 30) is None

    @pytest.mark.asyncio
    async def test_set_writes_field_and_ttl(self, mock_redis, pipeline):
        # Arrange
        mock_redis.pipeline.return_value = pipeline
        cache = RedisAvailabilityCache(mock_redis, ttl_seconds=900)

        # Act
        await cache.set(7, MONDAY, 30, SLOTS)

        # Assert
        mock_redis.pipeline.assert_called_once_with(transaction=True)
        key, field, payload = pipeline.hset.call_args.args
        assert (key, field) == ("availability:7:2025-03-10", "30")
        assert json.loads(payload) == ["09:00", "09:30", "14:15"]
        pipeline.expire.assert_called_once_with("availability:7:2025-03-10", 900)
        pipeline.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalidate_deletes_the_day(self, mock_redis):
        cache = RedisAvailabilityCache(mock_redis)

        await cache.invalidate(7, MONDAY)

        mock_redis.delete.assert_awaited_once_with("availability:7:2025-03-10")

    @pytest.mark.asyncio
    async def test_redis_errors_surface_as_unavailable(self, mock_redis):
        mock_redis.hget.side_effect = RedisConnectionError("Connection refused")
        cache = RedisAvailabilityCache(mock_redis)

        with pytest.raises(RepositoryUnavailableException) as exc_info:
            await cache.get(7, MONDAY, 30)

        assert exc_info.value.code == "REPOSITORY_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_invalidate_failure_is_not_swallowed(self, mock_redis):
        mock_redis.delete.side_effect = RedisConnectionError("Connection reset")
        cache = RedisAvailabilityCache(mock_redis)

        with pytest.raises(RepositoryUnavailableException):
            await cache.invalidate(7, MONDAY)
