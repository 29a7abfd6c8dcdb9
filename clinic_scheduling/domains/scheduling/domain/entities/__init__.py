"""
Scheduling Domain Entities
"""

from clinic_scheduling.domains.scheduling.domain.entities.appointment import Appointment, StatusChange
from clinic_scheduling.domains.scheduling.domain.entities.doctor import (
    Contract,
    Doctor,
    ScheduleSlotDefinition,
)

__all__ = [
    "Appointment",
    "StatusChange",
    "Doctor",
    "Contract",
    "ScheduleSlotDefinition",
]
