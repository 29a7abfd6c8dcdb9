"""
Unit tests for TransitionAppointmentUseCase.

Tests:
- Single-record transitions and their reason codes
- Authorization by capability
- Rescheduling (new record, chain links, cache invalidation)
"""

from datetime import date, datetime, time
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from clinic_scheduling.core.domain import RepositoryUnavailableException
from clinic_scheduling.domains.scheduling.application.dto import (
    GetAvailableSlotsRequest,
    TransitionAppointmentRequest,
)
from clinic_scheduling.domains.scheduling.domain.events import (
    AppointmentCancelled,
    AppointmentCreated,
    AppointmentStatusChanged,
)
from clinic_scheduling.domains.scheduling.domain.value_objects import AppointmentStatus, SchedulingErrorCode


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def transition(container, schedule_repository, appointment_repository):
    return container.build_transition_appointment(schedule_repository, appointment_repository)


@pytest.fixture
def get_slots(container, schedule_repository, appointment_repository):
    return container.build_get_available_slots(schedule_repository, appointment_repository)


@pytest_asyncio.fixture
async def scheduled(book_appointment):
    """Appointment on Monday 09:00-09:30, still SCHEDULED."""
    return await book_appointment(time(9, 0), 30)


def move(appointment_id: int, target: AppointmentStatus, actor, **kwargs) -> TransitionAppointmentRequest:
    return TransitionAppointmentRequest(appointment_id=appointment_id, target_status=target, actor=actor, **kwargs)


# ============================================================================
# Single-record Transition Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_confirm(transition, scheduled, appointment_repository, reception):
    result = await transition.execute(move(scheduled.id, AppointmentStatus.CONFIRMED, reception))

    assert result.success
    assert result.appointment.status == AppointmentStatus.CONFIRMED
    stored = await appointment_repository.find_by_id(scheduled.id)
    assert stored.status == AppointmentStatus.CONFIRMED
    assert stored.status_history[-1].actor_id == "reception-1"

    (event,) = result.events
    assert isinstance(event, AppointmentStatusChanged)
    assert event.to_status == "confirmed"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_scheduled_to_completed_is_rejected(transition, scheduled, appointment_repository, reception):
    result = await transition.execute(move(scheduled.id, AppointmentStatus.COMPLETED, reception))

    assert not result.success
    assert result.error_code == SchedulingErrorCode.INVALID_STATE_TRANSITION.value
    stored = await appointment_repository.find_by_id(scheduled.id)
    assert stored.status == AppointmentStatus.SCHEDULED


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_back_to_scheduled_is_rejected(transition, scheduled, reception):
    result = await transition.execute(move(scheduled.id, AppointmentStatus.SCHEDULED, reception))

    assert result.error_code == "INVALID_STATE_TRANSITION"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_terminal_appointment_is_rejected(transition, scheduled, reception):
    await transition.execute(move(scheduled.id, AppointmentStatus.CANCELLED, reception, reason="Viaje"))

    result = await transition.execute(move(scheduled.id, AppointmentStatus.CONFIRMED, reception))

    assert result.error_code == "ALREADY_TERMINAL"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_unknown_appointment(transition, reception):
    result = await transition.execute(move(999, AppointmentStatus.CONFIRMED, reception))

    assert result.error_code == "APPOINTMENT_NOT_FOUND"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_missing_capability(transition, scheduled, patient_actor):
    result = await transition.execute(move(scheduled.id, AppointmentStatus.CONFIRMED, patient_actor))

    assert result.error_code == "NOT_AUTHORIZED"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_cancel_frees_slot_and_keeps_record(
    transition, get_slots, scheduled, appointment_repository, patient_actor, monday
):
    # Arrange
    request = GetAvailableSlotsRequest(doctor_id=7, date=monday, duration_minutes=30)
    before = await get_slots.execute(request)
    assert time(9, 0) not in before.slots

    # Act
    result = await transition.execute(
        move(scheduled.id, AppointmentStatus.CANCELLED, patient_actor, reason="No puedo ir")
    )
    after = await get_slots.execute(request)

    # Assert
    assert result.success
    assert isinstance(result.events[0], AppointmentCancelled)
    assert not after.from_cache
    assert time(9, 0) in after.slots

    stored = await appointment_repository.find_by_id(scheduled.id)
    assert stored.status == AppointmentStatus.CANCELLED
    assert stored.is_deleted()
    assert stored.cancelled_by == "patient-123"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_no_show_before_start(transition, scheduled, reception):
    await transition.execute(move(scheduled.id, AppointmentStatus.CONFIRMED, reception))

    result = await transition.execute(move(scheduled.id, AppointmentStatus.NO_SHOW, reception))

    assert result.error_code == "APPOINTMENT_NOT_STARTED"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_no_show_after_start(transition, scheduled, clock, reception):
    await transition.execute(move(scheduled.id, AppointmentStatus.CONFIRMED, reception))
    clock.set(datetime(2025, 3, 10, 9, 20))

    result = await transition.execute(move(scheduled.id, AppointmentStatus.NO_SHOW, reception))

    assert result.success
    assert result.appointment.status == AppointmentStatus.NO_SHOW


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_full_lifecycle(transition, scheduled, reception):
    for target in (AppointmentStatus.CONFIRMED, AppointmentStatus.IN_PROGRESS, AppointmentStatus.COMPLETED):
        result = await transition.execute(move(scheduled.id, target, reception))
        assert result.success, result.error_message

    assert result.appointment.status == AppointmentStatus.COMPLETED
    assert len(result.appointment.status_history) == 3


# ============================================================================
# Reschedule Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_reschedule_to_another_day(transition, get_slots, scheduled, appointment_repository, reception, monday):
    tuesday = date(2025, 3, 11)
    await get_slots.execute(GetAvailableSlotsRequest(doctor_id=7, date=monday, duration_minutes=30))
    await get_slots.execute(GetAvailableSlotsRequest(doctor_id=7, date=tuesday, duration_minutes=30))

    result = await transition.execute(
        move(
            scheduled.id,
            AppointmentStatus.RESCHEDULED,
            reception,
            new_date=tuesday,
            new_start_time=time(10, 0),
        )
    )

    assert result.success, result.error_message
    original, replacement = result.appointment, result.new_appointment
    assert original.status == AppointmentStatus.RESCHEDULED
    assert original.rescheduled_to_id == replacement.id
    assert replacement.rescheduled_from_id == original.id
    assert replacement.status == AppointmentStatus.SCHEDULED
    assert replacement.appointment_date == tuesday
    assert replacement.end_time == time(10, 30)

    assert {type(e) for e in result.events} == {AppointmentStatusChanged, AppointmentCreated}

    monday_slots = await get_slots.execute(GetAvailableSlotsRequest(doctor_id=7, date=monday, duration_minutes=30))
    tuesday_slots = await get_slots.execute(
        GetAvailableSlotsRequest(doctor_id=7, date=tuesday, duration_minutes=30)
    )
    assert not monday_slots.from_cache and time(9, 0) in monday_slots.slots
    assert not tuesday_slots.from_cache and time(10, 0) not in tuesday_slots.slots

    assert len(appointment_repository.all()) == 2


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_reschedule_onto_own_interval(transition, book_appointment, reception, monday):
    # One hour appointment moved half an hour later overlaps itself only
    appointment = await book_appointment(time(9, 0), 60)

    result = await transition.execute(
        move(appointment.id, AppointmentStatus.RESCHEDULED, reception, new_date=monday, new_start_time=time(9, 30))
    )

    assert result.success, result.error_message
    assert result.new_appointment.start_time == time(9, 30)
    assert result.new_appointment.duration_minutes == 60


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_reschedule_requires_target(transition, scheduled, reception):
    result = await transition.execute(move(scheduled.id, AppointmentStatus.RESCHEDULED, reception))

    assert result.error_code == "RESCHEDULE_TARGET_REQUIRED"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_reschedule_onto_taken_slot(
    transition, scheduled, book_appointment, appointment_repository, reception, monday
):
    await book_appointment(time(11, 0), 30, patient_id=456)

    result = await transition.execute(
        move(scheduled.id, AppointmentStatus.RESCHEDULED, reception, new_date=monday, new_start_time=time(11, 0))
    )

    assert result.error_code == "SLOT_ALREADY_BOOKED"
    stored = await appointment_repository.find_by_id(scheduled.id)
    assert stored.status == AppointmentStatus.SCHEDULED
    assert len(appointment_repository.all()) == 2


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_reschedule_terminal_appointment(transition, scheduled, reception):
    await transition.execute(move(scheduled.id, AppointmentStatus.CANCELLED, reception))

    result = await transition.execute(move(scheduled.id, AppointmentStatus.RESCHEDULED, reception))

    assert result.error_code == "ALREADY_TERMINAL"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_reschedule_requires_capability(transition, scheduled, patient_actor, monday):
    result = await transition.execute(
        move(scheduled.id, AppointmentStatus.RESCHEDULED, patient_actor, new_date=monday, new_start_time=time(11, 0))
    )

    assert result.error_code == "NOT_AUTHORIZED"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_reschedule_with_zero_duration_is_rejected(transition, scheduled, appointment_repository, reception):
    result = await transition.execute(
        move(
            scheduled.id,
            AppointmentStatus.RESCHEDULED,
            reception,
            new_date=date(2025, 3, 11),
            new_start_time=time(10, 0),
            new_duration_minutes=0,
        )
    )

    assert result.error_code == "INVALID_DURATION"
    stored = await appointment_repository.find_by_id(scheduled.id)
    assert stored.status == AppointmentStatus.SCHEDULED


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_reschedule_restores_original_when_store_fails(
    transition, scheduled, appointment_repository, container, reception
):
    # Arrange: the replacement insert hits an unreachable store
    appointment_repository.insert = AsyncMock(
        side_effect=RepositoryUnavailableException(service="postgresql", operation="insert")
    )

    # Act
    with pytest.raises(RepositoryUnavailableException):
        await transition.execute(
            move(
                scheduled.id,
                AppointmentStatus.RESCHEDULED,
                reception,
                new_date=date(2025, 3, 11),
                new_start_time=time(10, 0),
            )
        )

    # Assert
    stored = await appointment_repository.find_by_id(scheduled.id)
    assert stored.status == AppointmentStatus.SCHEDULED
    assert stored.rescheduled_to_id is None
    assert len(appointment_repository.all()) == 1
    assert container.get_booking_locks().size == 0
