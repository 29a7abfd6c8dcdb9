"""
Shared pytest fixtures for all tests.

This module provides a fixed clinic clock, in-memory repositories seeded
with one doctor, mock database sessions and the wired scheduling
container.
"""

import os
from datetime import date, datetime, time, timedelta
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduling.config.settings import Settings
from clinic_scheduling.core.container import SchedulingContainer
from clinic_scheduling.domains.scheduling.domain.entities import (
    Appointment,
    Contract,
    Doctor,
    ScheduleSlotDefinition,
)
from clinic_scheduling.domains.scheduling.domain.value_objects import ActorContext, Capability, SchedulingRules
from clinic_scheduling.domains.scheduling.infrastructure.cache import MemoryAvailabilityCache
from clinic_scheduling.domains.scheduling.infrastructure.repositories import (
    InMemoryAppointmentRepository,
    InMemoryScheduleRepository,
)

# Ensure test environment
os.environ["ENVIRONMENT"] = "test"

# Monday 3 March 2025, 08:00 clinic time
NOW = datetime(2025, 3, 3, 8, 0)
# The following Monday, well inside lead time and horizon
MONDAY = date(2025, 3, 10)
SATURDAY = date(2025, 3, 8)
DOCTOR_ID = 7
PATIENT_ID = 123


class FixedClock:
    """Clock that only moves when a test moves it."""

    def __init__(self, now: datetime = NOW):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def set(self, now: datetime) -> None:
        self._now = now

    def advance(self, minutes: int = 0, days: int = 0) -> None:
        self._now += timedelta(minutes=minutes, days=days)


async def book(
    repository: InMemoryAppointmentRepository,
    start: time,
    duration_minutes: int = 30,
    on_date: date = MONDAY,
    doctor_id: int = DOCTOR_ID,
    patient_id: int = PATIENT_ID,
) -> Appointment:
    """Insert an appointment straight into the repository."""
    appointment = Appointment.create(
        doctor_id=doctor_id,
        patient_id=patient_id,
        appointment_date=on_date,
        start_time=start,
        duration_minutes=duration_minutes,
    )
    return await repository.insert(appointment)


# ============================================================================
# DOMAIN FIXTURES
# ============================================================================


@pytest.fixture
def clock() -> FixedClock:
    """Clinic clock frozen at NOW."""
    return FixedClock()


@pytest.fixture
def rules() -> SchedulingRules:
    """Default clinic rules: Mon-Fri 08:00-18:00, 30 min slots, 2h lead time."""
    return SchedulingRules()


@pytest.fixture
def doctor() -> Doctor:
    return Doctor(id=DOCTOR_ID, full_name="Dra. Laura Gómez", is_active=True)


@pytest.fixture
def contract() -> Contract:
    return Contract(id=1, doctor_id=DOCTOR_ID, start_date=date(2025, 1, 1), end_date=None)


@pytest.fixture
def slot_definitions() -> list[ScheduleSlotDefinition]:
    """08:00-18:00 every weekday."""
    return [
        ScheduleSlotDefinition(
            id=day + 1,
            doctor_id=DOCTOR_ID,
            day_of_week=day,
            start_time=time(8, 0),
            end_time=time(18, 0),
        )
        for day in range(5)
    ]


@pytest.fixture
def schedule_repository(doctor, contract, slot_definitions) -> InMemoryScheduleRepository:
    return InMemoryScheduleRepository(
        doctors=[doctor],
        contracts=[contract],
        slot_definitions=slot_definitions,
    )


@pytest.fixture
def appointment_repository() -> InMemoryAppointmentRepository:
    return InMemoryAppointmentRepository()


@pytest.fixture
def availability_cache() -> MemoryAvailabilityCache:
    return MemoryAvailabilityCache(ttl_seconds=1800)


@pytest.fixture
def container(rules, clock, availability_cache) -> SchedulingContainer:
    """Scheduling container over the fixed clock and in-memory cache."""
    return SchedulingContainer(
        settings=Settings(),
        rules=rules,
        clock=clock,
        availability_cache=availability_cache,
    )


@pytest.fixture
def reception() -> ActorContext:
    """Front desk actor allowed to do everything."""
    return ActorContext.with_all_capabilities("reception-1")


@pytest.fixture
def patient_actor() -> ActorContext:
    """Patient self-service actor: may only book and cancel."""
    return ActorContext(
        actor_id="patient-123",
        capabilities=frozenset({Capability.CREATE, Capability.CANCEL}),
    )


# ============================================================================
# INFRASTRUCTURE FIXTURES
# ============================================================================


@pytest.fixture
def mock_async_session():
    """Create a mock async database session."""
    session = AsyncMock(spec=AsyncSession)
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def mock_redis() -> Mock:
    """Create a mock Redis client."""
    mock = Mock(spec=Redis)
    mock.hget = AsyncMock(return_value=None)
    mock.delete = AsyncMock(return_value=1)
    return mock


# ============================================================================
# HELPER FIXTURES
# ============================================================================


@pytest.fixture
def monday() -> date:
    return MONDAY


@pytest.fixture
def saturday() -> date:
    return SATURDAY


@pytest.fixture
def book_appointment(appointment_repository):
    """Insert an appointment for the seeded doctor without going through validation."""

    async def _book(start: time, duration_minutes: int = 30, on_date: date = MONDAY, **kwargs) -> Appointment:
        return await book(appointment_repository, start, duration_minutes, on_date, **kwargs)

    return _book
