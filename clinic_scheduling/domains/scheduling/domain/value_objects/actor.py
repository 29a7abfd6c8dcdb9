"""
Actor Value Objects

The caller resolves roles into capabilities before entering the engine;
only the capability set travels with a request.
"""

from dataclasses import dataclass, field
from enum import Enum

from clinic_scheduling.core.domain import ValueObject

from .appointment_status import AppointmentStatus


class Capability(str, Enum):
    """Operations an actor may be granted."""

    CREATE = "create"
    CONFIRM = "confirm"
    START = "start"
    COMPLETE = "complete"
    CANCEL = "cancel"
    MARK_NO_SHOW = "mark_no_show"
    RESCHEDULE = "reschedule"


# Capability required to move an appointment into each target status
TRANSITION_CAPABILITIES: dict[AppointmentStatus, Capability] = {
    AppointmentStatus.CONFIRMED: Capability.CONFIRM,
    AppointmentStatus.IN_PROGRESS: Capability.START,
    AppointmentStatus.COMPLETED: Capability.COMPLETE,
    AppointmentStatus.CANCELLED: Capability.CANCEL,
    AppointmentStatus.NO_SHOW: Capability.MARK_NO_SHOW,
    AppointmentStatus.RESCHEDULED: Capability.RESCHEDULE,
}


@dataclass(frozen=True)
class ActorContext(ValueObject):
    """Who is acting and what they may do."""

    actor_id: str
    capabilities: frozenset[Capability] = field(default_factory=frozenset)

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def can_transition_to(self, target: AppointmentStatus) -> bool:
        required = TRANSITION_CAPABILITIES.get(target)
        return required is not None and self.can(required)

    @classmethod
    def with_all_capabilities(cls, actor_id: str) -> "ActorContext":
        return cls(actor_id=actor_id, capabilities=frozenset(Capability))
