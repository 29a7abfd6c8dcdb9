"""
Unit tests for availability use cases.

Tests:
- GetAvailableSlotsUseCase (cache miss, hit and lead time re-filtering)
- Cache fills racing a booking
- SuggestAlternativeSlotsUseCase
"""

import asyncio
from datetime import date, time

import pytest

from clinic_scheduling.domains.scheduling.application.dto import (
    CreateAppointmentRequest,
    GetAvailableSlotsRequest,
    SuggestAlternativeSlotsRequest,
)
from clinic_scheduling.domains.scheduling.domain.value_objects import SchedulingErrorCode
from clinic_scheduling.domains.scheduling.infrastructure.repositories import InMemoryAppointmentRepository


class PausingAppointmentRepository(InMemoryAppointmentRepository):
    """In-memory repository that can stall one read until the test resumes it."""

    def __init__(self):
        super().__init__()
        self.paused = asyncio.Event()
        self.resume = asyncio.Event()
        self._pause_next_read = False

    def pause_next_read(self) -> None:
        self._pause_next_read = True

    async def find_active_by_doctor_and_date(self, *args, **kwargs):
        result = await super().find_active_by_doctor_and_date(*args, **kwargs)
        if self._pause_next_read:
            self._pause_next_read = False
            self.paused.set()
            await self.resume.wait()
        return result


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def get_slots(container, schedule_repository, appointment_repository):
    return container.build_get_available_slots(schedule_repository, appointment_repository)


@pytest.fixture
def suggest(container, schedule_repository, appointment_repository):
    return container.build_suggest_alternative_slots(schedule_repository, appointment_repository)


# ============================================================================
# GetAvailableSlotsUseCase Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_second_read_comes_from_cache(get_slots, monday):
    request = GetAvailableSlotsRequest(doctor_id=7, date=monday, duration_minutes=30)

    first = await get_slots.execute(request)
    second = await get_slots.execute(request)

    assert first.success and second.success
    assert not first.from_cache
    assert second.from_cache
    assert first.slots == second.slots
    assert len(first.slots) == 20


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_durations_are_cached_separately(get_slots, book_appointment, monday):
    await book_appointment(time(10, 0), 30)

    short = await get_slots.execute(GetAvailableSlotsRequest(doctor_id=7, date=monday, duration_minutes=30))
    long = await get_slots.execute(GetAvailableSlotsRequest(doctor_id=7, date=monday, duration_minutes=60))

    assert not long.from_cache
    assert time(9, 30) in short.slots
    assert time(9, 30) not in long.slots


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_default_duration(get_slots, monday):
    result = await get_slots.execute(GetAvailableSlotsRequest(doctor_id=7, date=monday))

    assert result.success
    assert result.slots[-1] == time(17, 30)


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_invalid_duration(get_slots, monday):
    result = await get_slots.execute(GetAvailableSlotsRequest(doctor_id=7, date=monday, duration_minutes=500))

    assert not result.success
    assert result.error_code == SchedulingErrorCode.INVALID_DURATION.value
    assert result.slots == []


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_zero_duration_is_not_the_default(get_slots, monday):
    result = await get_slots.execute(GetAvailableSlotsRequest(doctor_id=7, date=monday, duration_minutes=0))

    assert not result.success
    assert result.error_code == "INVALID_DURATION"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_cached_list_is_refiltered_by_lead_time(get_slots, clock):
    # Arrange: today at 08:00, first bookable start is 10:00
    today = date(2025, 3, 3)
    request = GetAvailableSlotsRequest(doctor_id=7, date=today, duration_minutes=30)
    first = await get_slots.execute(request)
    assert first.slots[0] == time(10, 0)

    # Act: an hour later the cached list is still used
    clock.advance(minutes=60)
    second = await get_slots.execute(request)

    # Assert
    assert second.from_cache
    assert second.slots[0] == time(11, 0)


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_unknown_doctor_has_no_slots(get_slots, monday):
    result = await get_slots.execute(GetAvailableSlotsRequest(doctor_id=99, date=monday))

    assert result.success
    assert result.slots == []


# ============================================================================
# Cache Fill Race Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_booking_during_cache_fill_is_not_hidden(container, schedule_repository, reception, monday):
    # Arrange: a slot read stalls right after loading the day's appointments
    appointments = PausingAppointmentRepository()
    get_slots = container.build_get_available_slots(schedule_repository, appointments)
    create = container.build_create_appointment(schedule_repository, appointments)
    request = GetAvailableSlotsRequest(doctor_id=7, date=monday, duration_minutes=30)

    appointments.pause_next_read()
    reading = asyncio.create_task(get_slots.execute(request))
    await appointments.paused.wait()

    # Act: a booking for 10:00 arrives while the read is stalled
    booking = asyncio.create_task(
        create.execute(
            CreateAppointmentRequest(
                doctor_id=7,
                patient_id=123,
                appointment_date=monday,
                start_time=time(10, 0),
                duration_minutes=30,
                actor=reception,
            )
        )
    )
    for _ in range(5):
        await asyncio.sleep(0)
    appointments.resume.set()
    await reading
    booked = await booking

    # Assert
    assert booked.success, booked.error_message
    after = await get_slots.execute(request)
    assert not after.from_cache
    assert time(10, 0) not in after.slots
    assert container.get_booking_locks().size == 0


# ============================================================================
# SuggestAlternativeSlotsUseCase Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_suggestions_are_nearest_first(suggest, book_appointment, monday):
    await book_appointment(time(10, 0), 30)

    result = await suggest.execute(
        SuggestAlternativeSlotsRequest(
            doctor_id=7,
            date=monday,
            requested_time=time(10, 0),
            duration_minutes=30,
            limit=4,
        )
    )

    assert result.success
    assert result.slots == [time(9, 30), time(10, 30), time(9, 0), time(11, 0)]


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_suggestions_respect_window(suggest, book_appointment, monday):
    await book_appointment(time(10, 0), 30)

    result = await suggest.execute(
        SuggestAlternativeSlotsRequest(
            doctor_id=7,
            date=monday,
            requested_time=time(10, 0),
            duration_minutes=30,
            window_minutes=30,
        )
    )

    assert result.slots == [time(9, 30), time(10, 30)]


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_suggestions_invalid_duration(suggest, monday):
    result = await suggest.execute(
        SuggestAlternativeSlotsRequest(doctor_id=7, date=monday, requested_time=time(10, 0), duration_minutes=1)
    )

    assert not result.success
    assert result.error_code == "INVALID_DURATION"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_suggestions_zero_duration(suggest, monday):
    result = await suggest.execute(
        SuggestAlternativeSlotsRequest(doctor_id=7, date=monday, requested_time=time(10, 0), duration_minutes=0)
    )

    assert result.error_code == "INVALID_DURATION"
