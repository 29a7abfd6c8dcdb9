"""
Scheduling Use Cases
"""

from clinic_scheduling.domains.scheduling.application.use_cases.create_appointment import CreateAppointmentUseCase
from clinic_scheduling.domains.scheduling.application.use_cases.get_available_slots import GetAvailableSlotsUseCase
from clinic_scheduling.domains.scheduling.application.use_cases.suggest_alternative_slots import (
    SuggestAlternativeSlotsUseCase,
)
from clinic_scheduling.domains.scheduling.application.use_cases.transition_appointment import (
    TransitionAppointmentUseCase,
)

__all__ = [
    "GetAvailableSlotsUseCase",
    "CreateAppointmentUseCase",
    "TransitionAppointmentUseCase",
    "SuggestAlternativeSlotsUseCase",
]
