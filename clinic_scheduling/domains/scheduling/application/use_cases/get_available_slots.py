# ============================================================================
# SCOPE: APPLICATION LAYER (Scheduling)
# Description: Use case for listing a doctor's bookable start times.
# ============================================================================
"""Get Available Slots Use Case.

Serves slot lists from the availability cache, generating and caching
them on a miss. Misses fill under the doctor-day booking lock, so a list
is never cached from a read that raced a booking.
"""

import logging
from datetime import date, datetime, time

from clinic_scheduling.domains.scheduling.application.dto.scheduling_dtos import (
    GetAvailableSlotsRequest,
    GetAvailableSlotsResult,
)
from clinic_scheduling.domains.scheduling.application.ports.availability_cache import IAvailabilityCache
from clinic_scheduling.domains.scheduling.application.services.booking_lock import BookingLockManager
from clinic_scheduling.domains.scheduling.domain.services.calendar_rules import CalendarRules, Clock
from clinic_scheduling.domains.scheduling.domain.services.slot_generator import SlotGenerator
from clinic_scheduling.domains.scheduling.domain.value_objects.error_codes import SchedulingErrorCode
from clinic_scheduling.domains.scheduling.domain.value_objects.scheduling_rules import SchedulingRules

logger = logging.getLogger(__name__)


class GetAvailableSlotsUseCase:
    """Use case for getting available time slots.

    Cached lists are re-filtered by lead time on read, since a list
    cached in the morning goes stale as the clock advances.
    """

    def __init__(
        self,
        rules: SchedulingRules,
        clock: Clock,
        slot_generator: SlotGenerator,
        availability_cache: IAvailabilityCache,
        booking_locks: BookingLockManager,
    ) -> None:
        """Initialize use case.

        Args:
            rules: Clinic scheduling rules
            clock: Clinic-local time source
            slot_generator: Domain service producing slot lists
            availability_cache: Cache of generated lists
            booking_locks: Lock shared with the booking use cases
        """
        self._rules = rules
        self._calendar = CalendarRules(rules)
        self._clock = clock
        self._generator = slot_generator
        self._cache = availability_cache
        self._locks = booking_locks

    async def execute(self, request: GetAvailableSlotsRequest) -> GetAvailableSlotsResult:
        """Execute the get available slots use case.

        Args:
            request: Doctor, date and optional duration

        Returns:
            GetAvailableSlotsResult with ascending start times, or
            INVALID_DURATION.
        """
        duration = request.duration_minutes
        if duration is None:
            duration = self._rules.default_duration_minutes
        if not self._calendar.duration_is_valid(duration):
            return GetAvailableSlotsResult.error(  # type: ignore[return-value]
                SchedulingErrorCode.INVALID_DURATION,
                f"Duration must be between {self._rules.min_duration_minutes} "
                f"and {self._rules.max_duration_minutes} minutes",
            )

        slots, from_cache = await self.available_slots(request.doctor_id, request.date, duration)
        return GetAvailableSlotsResult(success=True, slots=slots, from_cache=from_cache)

    async def available_slots(self, doctor_id: int, on_date: date, duration_minutes: int) -> tuple[list[time], bool]:
        """Slot list for a doctor's day and whether it came from the cache."""
        cached = await self._cache.get(doctor_id, on_date, duration_minutes)
        if cached is not None:
            logger.debug(f"Availability cache hit for doctor {doctor_id} on {on_date}")
            return self._still_bookable(on_date, cached), True

        async with self._locks.hold(doctor_id, on_date):
            # Another reader may have filled the entry while we waited
            cached = await self._cache.get(doctor_id, on_date, duration_minutes)
            if cached is not None:
                return self._still_bookable(on_date, cached), True
            slots = await self._generator.generate(doctor_id, on_date, duration_minutes)
            await self._cache.set(doctor_id, on_date, duration_minutes, slots)
        logger.debug(f"Generated {len(slots)} slots for doctor {doctor_id} on {on_date}")
        return slots, False

    def _still_bookable(self, on_date: date, slots: list[time]) -> list[time]:
        now = self._clock.now()
        return [
            slot
            for slot in slots
            if self._calendar.satisfies_lead_time(now, datetime.combine(on_date, slot))
        ]
