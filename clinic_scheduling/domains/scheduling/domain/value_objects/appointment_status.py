"""
Appointment Status Value Objects

Lifecycle states of an appointment and the transition table that governs them.
"""

from clinic_scheduling.core.domain import StatusEnum


class AppointmentStatus(StatusEnum):
    """
    Appointment lifecycle states.

    Valid transitions:
    - SCHEDULED -> CONFIRMED, CANCELLED, RESCHEDULED
    - CONFIRMED -> IN_PROGRESS, CANCELLED, NO_SHOW, RESCHEDULED
    - IN_PROGRESS -> COMPLETED
    - COMPLETED, CANCELLED, NO_SHOW, RESCHEDULED -> (terminal)
    """

    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"
    RESCHEDULED = "rescheduled"

    def allowed_targets(self) -> frozenset["AppointmentStatus"]:
        """Statuses reachable from this one in a single transition."""
        return _TRANSITIONS[self]

    def can_transition_to(self, new_status: "AppointmentStatus") -> bool:
        """Check if transition to new status is valid."""
        return new_status in _TRANSITIONS[self]

    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return not _TRANSITIONS[self]

    def is_active(self) -> bool:
        """Check if the appointment still occupies its time slot."""
        return self in ACTIVE_STATUSES

    def can_be_cancelled(self) -> bool:
        """Check if appointment can be cancelled."""
        return self.can_transition_to(AppointmentStatus.CANCELLED)


_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset(
        {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED, AppointmentStatus.RESCHEDULED}
    ),
    AppointmentStatus.CONFIRMED: frozenset(
        {
            AppointmentStatus.IN_PROGRESS,
            AppointmentStatus.CANCELLED,
            AppointmentStatus.NO_SHOW,
            AppointmentStatus.RESCHEDULED,
        }
    ),
    AppointmentStatus.IN_PROGRESS: frozenset({AppointmentStatus.COMPLETED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
    AppointmentStatus.RESCHEDULED: frozenset(),
}

# Statuses that block the doctor's time for conflict detection
ACTIVE_STATUSES: frozenset[AppointmentStatus] = frozenset(
    {AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED, AppointmentStatus.IN_PROGRESS}
)

TERMINAL_STATUSES: frozenset[AppointmentStatus] = frozenset(
    status for status, targets in _TRANSITIONS.items() if not targets
)
