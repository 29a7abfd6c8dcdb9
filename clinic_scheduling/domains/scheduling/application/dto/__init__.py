"""
Scheduling DTOs
"""

from clinic_scheduling.domains.scheduling.application.dto.scheduling_dtos import (
    CreateAppointmentRequest,
    CreateAppointmentResult,
    GetAvailableSlotsRequest,
    GetAvailableSlotsResult,
    SuggestAlternativeSlotsRequest,
    SuggestAlternativeSlotsResult,
    TransitionAppointmentRequest,
    TransitionAppointmentResult,
    UseCaseResult,
)

__all__ = [
    # Requests
    "GetAvailableSlotsRequest",
    "CreateAppointmentRequest",
    "TransitionAppointmentRequest",
    "SuggestAlternativeSlotsRequest",
    # Results
    "UseCaseResult",
    "GetAvailableSlotsResult",
    "CreateAppointmentResult",
    "TransitionAppointmentResult",
    "SuggestAlternativeSlotsResult",
]
