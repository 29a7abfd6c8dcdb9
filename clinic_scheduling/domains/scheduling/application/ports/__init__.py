"""
Scheduling Domain Ports

Interfaces (ports) for scheduling domain following Clean Architecture.
"""

from clinic_scheduling.domains.scheduling.application.ports.appointment_repository import IAppointmentRepository
from clinic_scheduling.domains.scheduling.application.ports.availability_cache import IAvailabilityCache
from clinic_scheduling.domains.scheduling.application.ports.schedule_repository import IScheduleRepository

__all__ = [
    "IAppointmentRepository",
    "IScheduleRepository",
    "IAvailabilityCache",
]
