"""
Scheduling reason codes.

Closed set of machine-readable codes returned to callers. Validation codes
are recoverable (pick another time); REPOSITORY_UNAVAILABLE is the only
infrastructure code and travels as an exception, never as a result.
"""

from enum import Enum


class SchedulingErrorCode(str, Enum):
    """Reason codes for validation, booking and transition failures."""

    # Appointment validation, in evaluation order
    NOT_A_WORKING_DAY = "NOT_A_WORKING_DAY"
    OUTSIDE_BUSINESS_HOURS = "OUTSIDE_BUSINESS_HOURS"
    INVALID_SLOT_ALIGNMENT = "INVALID_SLOT_ALIGNMENT"
    INVALID_DURATION = "INVALID_DURATION"
    INSUFFICIENT_LEAD_TIME = "INSUFFICIENT_LEAD_TIME"
    BOOKING_TOO_FAR_AHEAD = "BOOKING_TOO_FAR_AHEAD"
    NO_ACTIVE_CONTRACT = "NO_ACTIVE_CONTRACT"
    OUTSIDE_DOCTOR_SCHEDULE = "OUTSIDE_DOCTOR_SCHEDULE"
    SLOT_ALREADY_BOOKED = "SLOT_ALREADY_BOOKED"
    PATIENT_LIMIT_EXCEEDED = "PATIENT_LIMIT_EXCEEDED"

    # Booking preconditions
    DOCTOR_NOT_FOUND = "DOCTOR_NOT_FOUND"
    DOCTOR_INACTIVE = "DOCTOR_INACTIVE"

    # Lifecycle
    APPOINTMENT_NOT_FOUND = "APPOINTMENT_NOT_FOUND"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    ALREADY_TERMINAL = "ALREADY_TERMINAL"
    APPOINTMENT_NOT_STARTED = "APPOINTMENT_NOT_STARTED"
    RESCHEDULE_TARGET_REQUIRED = "RESCHEDULE_TARGET_REQUIRED"

    # Access
    NOT_AUTHORIZED = "NOT_AUTHORIZED"

    # Infrastructure
    REPOSITORY_UNAVAILABLE = "REPOSITORY_UNAVAILABLE"
