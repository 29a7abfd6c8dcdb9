"""
Scheduling Domain Value Objects

Immutable value objects for the scheduling domain.
"""

from clinic_scheduling.domains.scheduling.domain.value_objects.actor import (
    TRANSITION_CAPABILITIES,
    ActorContext,
    Capability,
)
from clinic_scheduling.domains.scheduling.domain.value_objects.appointment_status import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    AppointmentStatus,
)
from clinic_scheduling.domains.scheduling.domain.value_objects.error_codes import SchedulingErrorCode
from clinic_scheduling.domains.scheduling.domain.value_objects.scheduling_rules import SchedulingRules
from clinic_scheduling.domains.scheduling.domain.value_objects.time_window import (
    TimeWindow,
    from_minutes,
    merge_windows,
    to_minutes,
)

__all__ = [
    "AppointmentStatus",
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "ActorContext",
    "Capability",
    "TRANSITION_CAPABILITIES",
    "SchedulingErrorCode",
    "SchedulingRules",
    "TimeWindow",
    "merge_windows",
    "to_minutes",
    "from_minutes",
]
