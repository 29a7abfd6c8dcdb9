"""
Scheduling Domain Services
"""

from clinic_scheduling.domains.scheduling.domain.services.appointment_validator import (
    AppointmentDraft,
    AppointmentValidator,
    ValidationResult,
)
from clinic_scheduling.domains.scheduling.domain.services.calendar_rules import (
    CalendarRules,
    Clock,
    SystemClock,
)
from clinic_scheduling.domains.scheduling.domain.services.conflict_detector import (
    BusyTimeline,
    ConflictDetector,
    intervals_overlap,
)
from clinic_scheduling.domains.scheduling.domain.services.contract_checker import (
    ContractCheck,
    ContractValidityChecker,
)
from clinic_scheduling.domains.scheduling.domain.services.slot_generator import SlotGenerator

__all__ = [
    "CalendarRules",
    "Clock",
    "SystemClock",
    "ContractCheck",
    "ContractValidityChecker",
    "BusyTimeline",
    "ConflictDetector",
    "intervals_overlap",
    "SlotGenerator",
    "AppointmentDraft",
    "AppointmentValidator",
    "ValidationResult",
]
