"""
Booking Lock Manager

Serializes validate-then-write sequences within one process:
- per (doctor, date), for overlap checks
- per (patient, month), for the patient appointment limits

Cross-process safety for overlaps comes from the database exclusion
constraint.
"""

import asyncio
from collections.abc import AsyncIterator, Iterable
from contextlib import AsyncExitStack, asynccontextmanager
from datetime import date

# (scope, owner id, date); "doctor" < "patient" keeps a stable order
LockKey = tuple[str, int, date]


def doctor_key(doctor_id: int, on_date: date) -> LockKey:
    return ("doctor", doctor_id, on_date)


def patient_key(patient_id: int, on_date: date) -> LockKey:
    """Patient locks cover a whole month, like the monthly limit."""
    return ("patient", patient_id, on_date.replace(day=1))


class BookingLockManager:
    """
    One asyncio.Lock per key, created lazily under a global lock and
    dropped once nobody holds or waits for it.

    Example:
        ```python
        locks = BookingLockManager()
        async with locks.hold_many([doctor_key(7, day), patient_key(123, day)]):
            result = await validator.validate(draft)
            if result.valid:
                await repository.insert(appointment)
        ```
    """

    def __init__(self):
        self._locks: dict[LockKey, asyncio.Lock] = {}
        self._users: dict[LockKey, int] = {}
        self._global_lock = asyncio.Lock()

    async def _checkout(self, key: LockKey) -> asyncio.Lock:
        """Get or create the lock for a key and register one user."""
        async with self._global_lock:
            lock = self._locks.setdefault(key, asyncio.Lock())
            self._users[key] = self._users.get(key, 0) + 1
            return lock

    def _checkin(self, key: LockKey) -> None:
        # No await between the check and the delete
        remaining = self._users[key] - 1
        if remaining:
            self._users[key] = remaining
        else:
            del self._users[key]
            del self._locks[key]

    @asynccontextmanager
    async def _hold_key(self, key: LockKey) -> AsyncIterator[None]:
        lock = await self._checkout(key)
        try:
            async with lock:
                yield
        finally:
            self._checkin(key)

    @asynccontextmanager
    async def hold(self, doctor_id: int, on_date: date) -> AsyncIterator[None]:
        """Hold the lock of one doctor day."""
        async with self._hold_key(doctor_key(doctor_id, on_date)):
            yield

    @asynccontextmanager
    async def hold_many(self, keys: Iterable[LockKey]) -> AsyncIterator[None]:
        """
        Hold several locks at once.

        Locks are taken in sorted order so two bookings crossing the same
        keys cannot deadlock.
        """
        async with AsyncExitStack() as stack:
            for key in sorted(set(keys)):
                await stack.enter_async_context(self._hold_key(key))
            yield

    def is_locked(self, key: LockKey) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    @property
    def size(self) -> int:
        return len(self._locks)
