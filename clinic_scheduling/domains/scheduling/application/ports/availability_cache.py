"""
Availability Cache Port

Cache of generated slot lists keyed by (doctor, date, duration).
"""

from datetime import date, time
from typing import Protocol, runtime_checkable


@runtime_checkable
class IAvailabilityCache(Protocol):
    """
    Availability cache interface.

    Entries are invalidated by every write that touches the doctor's day;
    the TTL is only a safety net.
    """

    async def get(self, doctor_id: int, on_date: date, duration_minutes: int) -> list[time] | None:
        """Cached slot starts, or None on a miss."""
        ...

    async def set(
        self,
        doctor_id: int,
        on_date: date,
        duration_minutes: int,
        slots: list[time],
    ) -> None:
        """Store a slot list."""
        ...

    async def invalidate(self, doctor_id: int, on_date: date) -> None:
        """Drop every cached list for the doctor's day, whatever the duration."""
        ...
