"""
Scheduling SQLAlchemy Persistence
"""

from clinic_scheduling.domains.scheduling.infrastructure.persistence.sqlalchemy.models import (
    AppointmentModel,
    DoctorContractModel,
    DoctorModel,
    DoctorScheduleSlotModel,
)

__all__ = [
    "DoctorModel",
    "DoctorContractModel",
    "DoctorScheduleSlotModel",
    "AppointmentModel",
]
