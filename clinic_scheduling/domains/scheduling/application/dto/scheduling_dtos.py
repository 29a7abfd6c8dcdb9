# ============================================================================
# SCOPE: APPLICATION LAYER (Scheduling)
# Description: Data Transfer Objects for booking, availability and lifecycle.
# ============================================================================
"""Scheduling DTOs.

Requests are immutable; results carry either the payload or a reason code
from SchedulingErrorCode plus a human-readable message.
"""

from dataclasses import dataclass, field
from datetime import date, time
from typing import Any

from clinic_scheduling.core.domain import DomainEvent
from clinic_scheduling.domains.scheduling.domain.entities.appointment import Appointment
from clinic_scheduling.domains.scheduling.domain.value_objects.actor import ActorContext
from clinic_scheduling.domains.scheduling.domain.value_objects.appointment_status import AppointmentStatus
from clinic_scheduling.domains.scheduling.domain.value_objects.error_codes import SchedulingErrorCode

# =============================================================================
# Request DTOs
# =============================================================================


@dataclass(frozen=True)
class GetAvailableSlotsRequest:
    """Request DTO for getting available time slots."""

    doctor_id: int
    date: date
    duration_minutes: int | None = None


@dataclass(frozen=True)
class CreateAppointmentRequest:
    """Request DTO for booking a new appointment."""

    doctor_id: int
    patient_id: int
    appointment_date: date
    start_time: time
    duration_minutes: int
    actor: ActorContext
    reason: str | None = None


@dataclass(frozen=True)
class TransitionAppointmentRequest:
    """
    Request DTO for moving an appointment through its lifecycle.

    ``new_date`` and ``new_start_time`` are required when the target is
    RESCHEDULED; ``new_duration_minutes`` defaults to the current length.
    """

    appointment_id: int
    target_status: AppointmentStatus
    actor: ActorContext
    reason: str | None = None
    new_date: date | None = None
    new_start_time: time | None = None
    new_duration_minutes: int | None = None


@dataclass(frozen=True)
class SuggestAlternativeSlotsRequest:
    """Request DTO for slots near a requested time."""

    doctor_id: int
    date: date
    requested_time: time
    duration_minutes: int | None = None
    window_minutes: int | None = None
    limit: int | None = None


# =============================================================================
# Result DTOs
# =============================================================================


@dataclass
class UseCaseResult:
    """Generic result for use case operations."""

    success: bool
    data: Any | None = None
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls, data: Any = None) -> "UseCaseResult":
        """Create successful result."""
        return cls(success=True, data=data)

    @classmethod
    def error(cls, code: str | SchedulingErrorCode, message: str) -> "UseCaseResult":
        """Create error result."""
        return cls(success=False, error_code=str(getattr(code, "value", code)), error_message=message)


@dataclass
class GetAvailableSlotsResult(UseCaseResult):
    """Result for get available slots operation."""

    slots: list[time] = field(default_factory=list)
    from_cache: bool = False


@dataclass
class CreateAppointmentResult(UseCaseResult):
    """Result for create appointment operation."""

    appointment: Appointment | None = None
    events: list[DomainEvent] = field(default_factory=list)
    alternatives: list[time] = field(default_factory=list)


@dataclass
class TransitionAppointmentResult(UseCaseResult):
    """Result for a lifecycle transition; reschedules also carry the new record."""

    appointment: Appointment | None = None
    new_appointment: Appointment | None = None
    events: list[DomainEvent] = field(default_factory=list)


@dataclass
class SuggestAlternativeSlotsResult(UseCaseResult):
    """Result for alternative slot suggestions, nearest first."""

    slots: list[time] = field(default_factory=list)
