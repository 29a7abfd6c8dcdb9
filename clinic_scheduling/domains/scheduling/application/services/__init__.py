"""
Scheduling Application Services
"""

from clinic_scheduling.domains.scheduling.application.services.booking_lock import (
    BookingLockManager,
    LockKey,
    doctor_key,
    patient_key,
)

__all__ = ["BookingLockManager", "LockKey", "doctor_key", "patient_key"]
