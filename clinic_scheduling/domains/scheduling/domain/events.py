"""
Scheduling Domain Events

Recorded by the Appointment aggregate and returned with use case results.
"""

from dataclasses import dataclass
from datetime import date, time

from clinic_scheduling.core.domain import DomainEvent


@dataclass(frozen=True, kw_only=True)
class AppointmentCreated(DomainEvent):
    """A new appointment was booked."""

    appointment_id: int | None
    doctor_id: int
    patient_id: int
    appointment_date: date
    start_time: time
    end_time: time
    actor_id: str | None = None
    rescheduled_from_id: int | None = None


@dataclass(frozen=True, kw_only=True)
class AppointmentCancelled(DomainEvent):
    appointment_id: int | None
    doctor_id: int
    appointment_date: date
    reason: str | None = None
    cancelled_by: str | None = None


@dataclass(frozen=True, kw_only=True)
class AppointmentStatusChanged(DomainEvent):
    """An appointment moved between lifecycle states."""

    appointment_id: int | None
    doctor_id: int
    appointment_date: date
    from_status: str
    to_status: str
    actor_id: str | None = None
