"""
Scheduling Domain Layer

Components:
- Entities: Appointment (aggregate root), Doctor, Contract, ScheduleSlotDefinition
- Value Objects: AppointmentStatus, SchedulingRules, TimeWindow, ActorContext
- Events: AppointmentCreated, AppointmentCancelled, AppointmentStatusChanged

Domain services live in ``domain.services`` and depend on the application ports.
"""

from clinic_scheduling.domains.scheduling.domain.entities import (
    Appointment,
    Contract,
    Doctor,
    ScheduleSlotDefinition,
    StatusChange,
)
from clinic_scheduling.domains.scheduling.domain.events import (
    AppointmentCancelled,
    AppointmentCreated,
    AppointmentStatusChanged,
)
from clinic_scheduling.domains.scheduling.domain.value_objects import (
    ActorContext,
    AppointmentStatus,
    Capability,
    SchedulingErrorCode,
    SchedulingRules,
    TimeWindow,
)

__all__ = [
    # Entities
    "Appointment",
    "StatusChange",
    "Doctor",
    "Contract",
    "ScheduleSlotDefinition",
    # Events
    "AppointmentCreated",
    "AppointmentCancelled",
    "AppointmentStatusChanged",
    # Value Objects
    "AppointmentStatus",
    "ActorContext",
    "Capability",
    "SchedulingErrorCode",
    "SchedulingRules",
    "TimeWindow",
]
