"""
Scheduling Repositories
"""

from clinic_scheduling.domains.scheduling.infrastructure.repositories.appointment_repository import (
    SQLAlchemyAppointmentRepository,
)
from clinic_scheduling.domains.scheduling.infrastructure.repositories.in_memory import (
    InMemoryAppointmentRepository,
    InMemoryScheduleRepository,
)
from clinic_scheduling.domains.scheduling.infrastructure.repositories.schedule_repository import (
    SQLAlchemyScheduleRepository,
)

__all__ = [
    "SQLAlchemyAppointmentRepository",
    "SQLAlchemyScheduleRepository",
    "InMemoryAppointmentRepository",
    "InMemoryScheduleRepository",
]
