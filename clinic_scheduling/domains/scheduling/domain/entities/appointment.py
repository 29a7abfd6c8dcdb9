"""
Appointment Entity for Scheduling Domain

Represents a booked doctor time slot and its lifecycle.
"""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta

from clinic_scheduling.core.domain import (
    AggregateRoot,
    AlreadyTerminalException,
    AppointmentNotStartedException,
    InvalidStateTransitionException,
)

from ..events import AppointmentCancelled, AppointmentCreated, AppointmentStatusChanged
from ..value_objects.appointment_status import AppointmentStatus
from ..value_objects.time_window import TimeWindow


@dataclass(frozen=True)
class StatusChange:
    """One entry of the appointment status history."""

    from_status: AppointmentStatus
    to_status: AppointmentStatus
    changed_at: datetime
    actor_id: str | None = None
    reason: str | None = None


@dataclass(eq=False)
class Appointment(AggregateRoot[int]):
    """
    Appointment aggregate root for scheduling domain.

    Status only changes through the transition methods below; each one
    stamps its timestamp, appends to ``status_history``, bumps the version
    and records a domain event.

    Example:
        ```python
        appointment = Appointment.create(
            doctor_id=7,
            patient_id=123,
            appointment_date=date(2025, 3, 10),
            start_time=time(9, 0),
            duration_minutes=30,
        )
        appointment.confirm(actor_id="reception-1")
        appointment.start()
        appointment.complete(notes="Control de rutina")
        ```
    """

    # References
    doctor_id: int = 0
    patient_id: int = 0

    # Scheduling
    appointment_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None

    # Status
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    status_history: list[StatusChange] = field(default_factory=list)

    reason: str | None = None
    notes: str | None = None

    # Timestamps
    confirmed_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    no_show_at: datetime | None = None
    rescheduled_at: datetime | None = None

    # Cancellation
    cancellation_reason: str | None = None
    cancelled_by: str | None = None

    # Reschedule chain
    rescheduled_from_id: int | None = None
    rescheduled_to_id: int | None = None

    @classmethod
    def create(
        cls,
        doctor_id: int,
        patient_id: int,
        appointment_date: date,
        start_time: time,
        duration_minutes: int,
        reason: str | None = None,
        rescheduled_from_id: int | None = None,
    ) -> "Appointment":
        """Create a new scheduled appointment."""
        end_dt = datetime.combine(appointment_date, start_time) + timedelta(minutes=duration_minutes)
        return cls(
            doctor_id=doctor_id,
            patient_id=patient_id,
            appointment_date=appointment_date,
            start_time=start_time,
            end_time=end_dt.time(),
            reason=reason,
            rescheduled_from_id=rescheduled_from_id,
        )

    @property
    def datetime_start(self) -> datetime | None:
        """Get start as datetime."""
        if self.appointment_date and self.start_time:
            return datetime.combine(self.appointment_date, self.start_time)
        return None

    @property
    def datetime_end(self) -> datetime | None:
        """Get end as datetime."""
        if self.appointment_date and self.end_time:
            return datetime.combine(self.appointment_date, self.end_time)
        return None

    @property
    def duration_minutes(self) -> int:
        if self.datetime_start is None or self.datetime_end is None:
            return 0
        return int((self.datetime_end - self.datetime_start).total_seconds() // 60)

    @property
    def schedule(self) -> tuple[date, time, time]:
        """Date, start and end; every persisted appointment has them."""
        if self.appointment_date is None or self.start_time is None or self.end_time is None:
            raise ValueError(f"Appointment {self.id} has no date and time")
        return self.appointment_date, self.start_time, self.end_time

    @property
    def window(self) -> TimeWindow:
        _, start, end = self.schedule
        return TimeWindow(start=start, end=end)

    @property
    def occupies_slot(self) -> bool:
        """Active and not soft-deleted appointments block the doctor's time."""
        return self.status.is_active() and not self.is_deleted()

    def record_booking(self, actor_id: str | None = None) -> None:
        """Record the creation event once the appointment has an id."""
        appointment_date, start, end = self.schedule
        self._record_event(
            AppointmentCreated(
                appointment_id=self.id,
                doctor_id=self.doctor_id,
                patient_id=self.patient_id,
                appointment_date=appointment_date,
                start_time=start,
                end_time=end,
                actor_id=actor_id,
                rescheduled_from_id=self.rescheduled_from_id,
            )
        )

    # Status Transitions

    def ensure_can_transition_to(self, target: AppointmentStatus) -> None:
        """Raise if the transition table forbids moving to target."""
        if self.status.is_terminal():
            raise AlreadyTerminalException(self.status.value, target.value)
        if not self.status.can_transition_to(target):
            raise InvalidStateTransitionException(self.status.value, target.value)

    def _apply_transition(
        self,
        target: AppointmentStatus,
        actor_id: str | None = None,
        reason: str | None = None,
    ) -> datetime:
        self.ensure_can_transition_to(target)

        changed_at = datetime.now(UTC)
        previous = self.status
        self.status = target
        self.status_history.append(
            StatusChange(
                from_status=previous,
                to_status=target,
                changed_at=changed_at,
                actor_id=actor_id,
                reason=reason,
            )
        )
        self.touch()
        self.increment_version()

        if target != AppointmentStatus.CANCELLED:
            self._record_event(
                AppointmentStatusChanged(
                    appointment_id=self.id,
                    doctor_id=self.doctor_id,
                    appointment_date=self.appointment_date,  # type: ignore[arg-type]
                    from_status=previous.value,
                    to_status=target.value,
                    actor_id=actor_id,
                )
            )
        return changed_at

    def confirm(self, actor_id: str | None = None) -> None:
        """Confirm the appointment."""
        self.confirmed_at = self._apply_transition(AppointmentStatus.CONFIRMED, actor_id)

    def start(self, actor_id: str | None = None) -> None:
        """Start the appointment (patient arrived)."""
        self.started_at = self._apply_transition(AppointmentStatus.IN_PROGRESS, actor_id)

    def complete(self, actor_id: str | None = None, notes: str | None = None) -> None:
        """Complete the appointment."""
        self.completed_at = self._apply_transition(AppointmentStatus.COMPLETED, actor_id)
        if notes:
            self.notes = notes

    def cancel(self, reason: str | None = None, cancelled_by: str | None = None) -> None:
        """
        Cancel the appointment.

        The record is soft-deleted and kept for audit history.
        """
        self.cancelled_at = self._apply_transition(AppointmentStatus.CANCELLED, cancelled_by, reason)
        self.cancellation_reason = reason
        self.cancelled_by = cancelled_by
        self.deleted_at = self.cancelled_at
        self._record_event(
            AppointmentCancelled(
                appointment_id=self.id,
                doctor_id=self.doctor_id,
                appointment_date=self.appointment_date,  # type: ignore[arg-type]
                reason=reason,
                cancelled_by=cancelled_by,
            )
        )

    def mark_no_show(self, now: datetime, actor_id: str | None = None) -> None:
        """
        Mark patient as no-show.

        Args:
            now: Current clinic-local wall time
            actor_id: Who recorded the no-show
        """
        self.ensure_can_transition_to(AppointmentStatus.NO_SHOW)
        if self.datetime_start is not None and now < self.datetime_start:
            raise AppointmentNotStartedException(self.status.value)
        self.no_show_at = self._apply_transition(AppointmentStatus.NO_SHOW, actor_id)

    def mark_rescheduled(self, new_appointment_id: int | None = None, actor_id: str | None = None) -> None:
        """Close this appointment in favour of its replacement."""
        self.rescheduled_at = self._apply_transition(AppointmentStatus.RESCHEDULED, actor_id)
        self.rescheduled_to_id = new_appointment_id

    def link_replacement(self, new_appointment_id: int | None) -> None:
        """Point a rescheduled appointment at the record that replaced it."""
        if self.status != AppointmentStatus.RESCHEDULED:
            raise InvalidStateTransitionException(self.status.value, AppointmentStatus.RESCHEDULED.value)
        self.rescheduled_to_id = new_appointment_id
        self.touch()

    def transition_to(
        self,
        target: AppointmentStatus,
        now: datetime,
        actor_id: str | None = None,
        reason: str | None = None,
    ) -> None:
        """
        Apply a single-record transition by target status.

        Rescheduling needs a replacement appointment and goes through
        ``mark_rescheduled`` instead.
        """
        if target == AppointmentStatus.CONFIRMED:
            self.confirm(actor_id)
        elif target == AppointmentStatus.IN_PROGRESS:
            self.start(actor_id)
        elif target == AppointmentStatus.COMPLETED:
            self.complete(actor_id, notes=reason)
        elif target == AppointmentStatus.CANCELLED:
            self.cancel(reason=reason, cancelled_by=actor_id)
        elif target == AppointmentStatus.NO_SHOW:
            self.mark_no_show(now, actor_id)
        else:
            self.ensure_can_transition_to(target)
            raise InvalidStateTransitionException(self.status.value, target.value)

    def __str__(self) -> str:
        return (
            f"Appointment({self.id}, doctor={self.doctor_id}, "
            f"{self.appointment_date} {self.start_time}-{self.end_time}, {self.status.value})"
        )
