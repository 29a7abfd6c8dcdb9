"""
Round-trip tests between GetAvailableSlotsUseCase and AppointmentValidator.

Every offered start must validate, every start that validates must be
offered, and every offered start must sit on the slot grid.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time

import pytest

from clinic_scheduling.config.settings import Settings
from clinic_scheduling.core.container import SchedulingContainer
from clinic_scheduling.domains.scheduling.application.dto import GetAvailableSlotsRequest
from clinic_scheduling.domains.scheduling.domain.entities import (
    Appointment,
    Contract,
    Doctor,
    ScheduleSlotDefinition,
)
from clinic_scheduling.domains.scheduling.domain.services import AppointmentDraft, CalendarRules
from clinic_scheduling.domains.scheduling.domain.value_objects import SchedulingRules, from_minutes
from clinic_scheduling.domains.scheduling.infrastructure.cache import MemoryAvailabilityCache
from clinic_scheduling.domains.scheduling.infrastructure.repositories import (
    InMemoryAppointmentRepository,
    InMemoryScheduleRepository,
)

# A patient with no bookings, so limits never interfere
OTHER_PATIENT = 999


class FrozenClock:
    def __init__(self, now: datetime):
        self._now = now

    def now(self) -> datetime:
        return self._now


@dataclass
class Day:
    """One scenario: clinic rules, the doctor's windows and the day's bookings."""

    now: datetime
    on_date: date
    duration: int
    windows: list[tuple[time, time]]
    rules: SchedulingRules = field(default_factory=SchedulingRules)
    booked: list[tuple[time, int]] = field(default_factory=list)


DAYS = {
    "buffered": Day(
        now=datetime(2025, 3, 3, 8, 0),
        on_date=date(2025, 3, 10),
        duration=30,
        windows=[(time(8, 0), time(18, 0))],
        rules=SchedulingRules(buffer_minutes=10),
        booked=[(time(10, 0), 30), (time(14, 10), 45)],
    ),
    "adjacent_and_split": Day(
        now=datetime(2025, 3, 3, 8, 0),
        on_date=date(2025, 3, 10),
        duration=60,
        windows=[(time(8, 0), time(10, 0)), (time(10, 0), time(12, 0)), (time(14, 15), time(17, 45))],
    ),
    "fine_grid": Day(
        now=datetime(2025, 3, 3, 8, 0),
        on_date=date(2025, 3, 11),
        duration=45,
        windows=[(time(7, 0), time(12, 20)), (time(13, 5), time(19, 0))],
        rules=SchedulingRules(slot_granularity_minutes=15, buffer_minutes=5),
        booked=[(time(9, 20), 25)],
    ),
    "today_near_lead_time": Day(
        now=datetime(2025, 3, 3, 9, 50),
        on_date=date(2025, 3, 3),
        duration=30,
        windows=[(time(8, 0), time(18, 0))],
    ),
    "horizon_edge": Day(
        now=datetime(2025, 3, 5, 10, 0),
        on_date=date(2025, 6, 3),
        duration=30,
        windows=[(time(8, 0), time(18, 0))],
    ),
}


async def prepare(day: Day):
    """Container, validator and slot use case over in-memory stores for one scenario."""
    schedules = InMemoryScheduleRepository(
        doctors=[Doctor(id=7, full_name="Dra. Laura Gómez", is_active=True)],
        contracts=[Contract(id=1, doctor_id=7, start_date=date(2025, 1, 1), end_date=None)],
        slot_definitions=[
            ScheduleSlotDefinition(
                id=i, doctor_id=7, day_of_week=day.on_date.weekday(), start_time=start, end_time=end
            )
            for i, (start, end) in enumerate(day.windows, start=1)
        ],
    )
    appointments = InMemoryAppointmentRepository()
    for start, minutes in day.booked:
        await appointments.insert(
            Appointment.create(
                doctor_id=7,
                patient_id=456,
                appointment_date=day.on_date,
                start_time=start,
                duration_minutes=minutes,
            )
        )
    container = SchedulingContainer(
        settings=Settings(),
        rules=day.rules,
        clock=FrozenClock(day.now),
        availability_cache=MemoryAvailabilityCache(),
    )
    validator = container.create_validator(schedules, appointments)
    get_slots = container.build_get_available_slots(schedules, appointments)
    return validator, get_slots


def draft(day: Day, start: time) -> AppointmentDraft:
    return AppointmentDraft(
        doctor_id=7,
        patient_id=OTHER_PATIENT,
        appointment_date=day.on_date,
        start_time=start,
        duration_minutes=day.duration,
    )


# ============================================================================
# Round-Trip Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
@pytest.mark.parametrize("name", list(DAYS))
async def test_every_offered_slot_validates(name):
    # Arrange
    day = DAYS[name]
    validator, get_slots = await prepare(day)
    calendar = CalendarRules(day.rules)

    # Act
    result = await get_slots.execute(
        GetAvailableSlotsRequest(doctor_id=7, date=day.on_date, duration_minutes=day.duration)
    )

    # Assert
    assert result.success
    assert result.slots, f"{name}: expected at least one slot"
    for slot in result.slots:
        assert calendar.is_aligned_to_granularity(slot), f"{name}: {slot} is off the grid"
        validation = await validator.validate(draft(day, slot))
        assert validation.valid, f"{name}: {slot} offered but rejected with {validation.reason}"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
@pytest.mark.parametrize("name", list(DAYS))
async def test_every_valid_start_is_offered(name):
    day = DAYS[name]
    validator, get_slots = await prepare(day)
    granularity = day.rules.slot_granularity_minutes
    result = await get_slots.execute(
        GetAvailableSlotsRequest(doctor_id=7, date=day.on_date, duration_minutes=day.duration)
    )

    accepted = []
    for minute in range(0, 24 * 60, granularity):
        start = from_minutes(minute)
        if (await validator.validate(draft(day, start))).valid:
            accepted.append(start)

    assert accepted == result.slots


# ============================================================================
# Boundary Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_buffer_blocks_neighbouring_slots():
    day = DAYS["buffered"]
    _, get_slots = await prepare(day)

    result = await get_slots.execute(GetAvailableSlotsRequest(doctor_id=7, date=day.on_date, duration_minutes=30))

    # 10:00-10:30 widened to 09:50-10:40
    assert time(9, 0) in result.slots
    assert time(9, 30) not in result.slots
    assert time(10, 30) not in result.slots
    assert time(11, 0) in result.slots


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_today_starts_after_lead_time():
    day = DAYS["today_near_lead_time"]
    _, get_slots = await prepare(day)

    result = await get_slots.execute(GetAvailableSlotsRequest(doctor_id=7, date=day.on_date, duration_minutes=30))

    # 09:50 + 2h = 11:50, next aligned start is 12:00
    assert result.slots[0] == time(12, 0)


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_horizon_edge_keeps_the_exact_limit():
    day = DAYS["horizon_edge"]
    _, get_slots = await prepare(day)

    result = await get_slots.execute(GetAvailableSlotsRequest(doctor_id=7, date=day.on_date, duration_minutes=30))

    # 90 days after 10:00 on 5 March
    assert result.slots == [time(8, 0), time(8, 30), time(9, 0), time(9, 30), time(10, 0)]
