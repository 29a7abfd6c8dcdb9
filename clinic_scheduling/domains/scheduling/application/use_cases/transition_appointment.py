# ============================================================================
# SCOPE: APPLICATION LAYER (Scheduling)
# Description: Use case for appointment lifecycle transitions.
# ============================================================================
"""Transition Appointment Use Case.

Confirms, starts, completes, cancels, marks no-show or reschedules an
appointment through the state machine.
"""

import copy

from clinic_scheduling.core.domain import AppointmentConflictException, DomainException
from clinic_scheduling.core.shared.logger import ContextLogger, get_use_case_logger
from clinic_scheduling.domains.scheduling.application.dto.scheduling_dtos import (
    TransitionAppointmentRequest,
    TransitionAppointmentResult,
)
from clinic_scheduling.domains.scheduling.application.ports.appointment_repository import IAppointmentRepository
from clinic_scheduling.domains.scheduling.application.ports.availability_cache import IAvailabilityCache
from clinic_scheduling.domains.scheduling.application.services.booking_lock import (
    BookingLockManager,
    doctor_key,
    patient_key,
)
from clinic_scheduling.domains.scheduling.domain.entities.appointment import Appointment
from clinic_scheduling.domains.scheduling.domain.services.appointment_validator import (
    AppointmentDraft,
    AppointmentValidator,
)
from clinic_scheduling.domains.scheduling.domain.services.calendar_rules import Clock
from clinic_scheduling.domains.scheduling.domain.value_objects.actor import TRANSITION_CAPABILITIES
from clinic_scheduling.domains.scheduling.domain.value_objects.appointment_status import AppointmentStatus
from clinic_scheduling.domains.scheduling.domain.value_objects.error_codes import SchedulingErrorCode

logger = get_use_case_logger("transition_appointment")


class TransitionAppointmentUseCase:
    """
    Use case for appointment status transitions.

    Business failures come back as reason codes; repository failures
    propagate as RepositoryUnavailableException.
    """

    def __init__(
        self,
        appointment_repository: IAppointmentRepository,
        validator: AppointmentValidator,
        booking_locks: BookingLockManager,
        availability_cache: IAvailabilityCache,
        clock: Clock,
    ):
        self.appointment_repo = appointment_repository
        self.validator = validator
        self.booking_locks = booking_locks
        self.cache = availability_cache
        self.clock = clock

    async def execute(self, request: TransitionAppointmentRequest) -> TransitionAppointmentResult:
        """
        Execute a lifecycle transition.

        Args:
            request: Appointment, target status, actor and reschedule target

        Returns:
            TransitionAppointmentResult with the updated appointment (and the
            replacement for reschedules) plus the recorded events
        """
        target = request.target_status
        log = logger.with_context(
            appointment_id=request.appointment_id,
            target=target.value,
            actor_id=request.actor.actor_id,
        )

        appointment = await self.appointment_repo.find_by_id(request.appointment_id)
        if appointment is None:
            return self._error(
                SchedulingErrorCode.APPOINTMENT_NOT_FOUND,
                f"Appointment {request.appointment_id} not found",
            )

        required = TRANSITION_CAPABILITIES.get(target)
        if required is not None and not request.actor.can(required):
            log.warning("Transition rejected: missing capability", capability=required.value)
            return self._error(
                SchedulingErrorCode.NOT_AUTHORIZED,
                f"Actor is not allowed to move appointments to '{target.value}'",
            )

        if target == AppointmentStatus.RESCHEDULED:
            return await self._reschedule(appointment, request, log)

        on_date, _, _ = appointment.schedule
        async with self.booking_locks.hold(appointment.doctor_id, on_date):
            # Re-read under the lock so concurrent transitions see each other
            current = await self.appointment_repo.find_by_id(request.appointment_id)
            if current is None:
                return self._error(
                    SchedulingErrorCode.APPOINTMENT_NOT_FOUND,
                    f"Appointment {request.appointment_id} not found",
                )
            try:
                current.transition_to(
                    target,
                    now=self.clock.now(),
                    actor_id=request.actor.actor_id,
                    reason=request.reason,
                )
            except DomainException as e:
                log.info(f"Transition rejected: {e.code}", current=current.status.value)
                return self._error_from(e)

            saved = await self.appointment_repo.update_status(current)

        events = current.pull_domain_events()
        await self.cache.invalidate(saved.doctor_id, on_date)

        log.info(f"Appointment {saved.id} moved to {target.value}")
        return TransitionAppointmentResult(success=True, appointment=saved, events=events)

    async def _reschedule(
        self,
        appointment: Appointment,
        request: TransitionAppointmentRequest,
        log: ContextLogger,
    ) -> TransitionAppointmentResult:
        """Close the appointment and book its replacement under both days' locks."""
        try:
            appointment.ensure_can_transition_to(AppointmentStatus.RESCHEDULED)
        except DomainException as e:
            return self._error_from(e)

        if request.new_date is None or request.new_start_time is None:
            return self._error(
                SchedulingErrorCode.RESCHEDULE_TARGET_REQUIRED,
                "A new date and start time are required to reschedule",
            )

        old_date, _, _ = appointment.schedule
        new_date = request.new_date
        duration = (
            request.new_duration_minutes if request.new_duration_minutes is not None else appointment.duration_minutes
        )
        doctor_id = appointment.doctor_id
        locks = [
            doctor_key(doctor_id, old_date),
            doctor_key(doctor_id, new_date),
            patient_key(appointment.patient_id, new_date),
        ]

        async with self.booking_locks.hold_many(locks):
            current = await self.appointment_repo.find_by_id(request.appointment_id)
            if current is None:
                return self._error(
                    SchedulingErrorCode.APPOINTMENT_NOT_FOUND,
                    f"Appointment {request.appointment_id} not found",
                )
            try:
                current.ensure_can_transition_to(AppointmentStatus.RESCHEDULED)
            except DomainException as e:
                return self._error_from(e)

            draft = AppointmentDraft(
                doctor_id=doctor_id,
                patient_id=current.patient_id,
                appointment_date=new_date,
                start_time=request.new_start_time,
                duration_minutes=duration,
            )
            validation = await self.validator.validate(draft, exclude_appointment_id=current.id)
            if validation.reason is not None:
                log.info(f"Reschedule rejected: {validation.reason.value}")
                return self._error(validation.reason, validation.message or "")

            replacement = Appointment.create(
                doctor_id=doctor_id,
                patient_id=current.patient_id,
                appointment_date=new_date,
                start_time=request.new_start_time,
                duration_minutes=duration,
                reason=current.reason,
                rescheduled_from_id=current.id,
            )
            # Original stops blocking its slot before the replacement is inserted
            original = copy.deepcopy(current)
            current.mark_rescheduled(actor_id=request.actor.actor_id)
            await self.appointment_repo.update_status(current)
            try:
                new_appointment = await self.appointment_repo.insert(replacement)
            except AppointmentConflictException as e:
                log.warning(f"Reschedule insert rejected by store: {e}")
                await self.appointment_repo.update_status(original)
                return self._error(
                    SchedulingErrorCode.SLOT_ALREADY_BOOKED,
                    "The requested time slot is already booked",
                )
            except Exception as e:
                log.error(f"Reschedule insert failed, restoring original: {e}")
                await self.appointment_repo.update_status(original)
                raise

            current.link_replacement(new_appointment.id)
            saved = await self.appointment_repo.update_status(current)

        new_appointment.record_booking(request.actor.actor_id)
        events = current.pull_domain_events() + new_appointment.pull_domain_events()

        await self.cache.invalidate(doctor_id, old_date)
        if new_date != old_date:
            await self.cache.invalidate(doctor_id, new_date)

        log.info(
            f"Appointment {saved.id} rescheduled to {new_appointment.id} "
            f"on {new_date.isoformat()} {request.new_start_time.strftime('%H:%M')}"
        )
        return TransitionAppointmentResult(
            success=True,
            appointment=saved,
            new_appointment=new_appointment,
            events=events,
        )

    @staticmethod
    def _error(code: SchedulingErrorCode, message: str) -> TransitionAppointmentResult:
        return TransitionAppointmentResult(success=False, error_code=code.value, error_message=message)

    @staticmethod
    def _error_from(exc: DomainException) -> TransitionAppointmentResult:
        return TransitionAppointmentResult(success=False, error_code=exc.code, error_message=exc.message)
