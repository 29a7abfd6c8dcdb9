# ============================================================================
# SCOPE: APPLICATION LAYER (Scheduling)
# Description: Use case for booking a new appointment.
# ============================================================================
"""Create Appointment Use Case.

Validates and books an appointment under the doctor-day and patient-month
booking locks.
"""

from clinic_scheduling.core.domain import AppointmentConflictException
from clinic_scheduling.core.shared.logger import get_use_case_logger
from clinic_scheduling.domains.scheduling.application.dto.scheduling_dtos import (
    CreateAppointmentRequest,
    CreateAppointmentResult,
)
from clinic_scheduling.domains.scheduling.application.ports.appointment_repository import IAppointmentRepository
from clinic_scheduling.domains.scheduling.application.ports.availability_cache import IAvailabilityCache
from clinic_scheduling.domains.scheduling.application.ports.schedule_repository import IScheduleRepository
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
from clinic_scheduling.domains.scheduling.domain.value_objects.actor import Capability
from clinic_scheduling.domains.scheduling.domain.value_objects.error_codes import SchedulingErrorCode

from .suggest_alternative_slots import SuggestAlternativeSlotsUseCase

logger = get_use_case_logger("create_appointment")


class CreateAppointmentUseCase:
    """
    Use case for booking appointments.

    Validation and insert run inside the booking locks, so of two
    concurrent requests for the same interval, or for the last booking a
    patient limit allows, exactly one succeeds.
    Repository failures propagate as RepositoryUnavailableException.
    """

    def __init__(
        self,
        schedule_repository: IScheduleRepository,
        appointment_repository: IAppointmentRepository,
        validator: AppointmentValidator,
        booking_locks: BookingLockManager,
        availability_cache: IAvailabilityCache,
        alternatives: SuggestAlternativeSlotsUseCase | None = None,
    ):
        """
        Initialize use case with dependencies.

        Args:
            schedule_repository: Doctor and schedule lookups
            appointment_repository: Appointment persistence
            validator: Booking rule validator
            booking_locks: Doctor-day and patient-month serialization points
            availability_cache: Cache invalidated after the insert
            alternatives: Suggests other times when the slot is taken
        """
        self.schedule_repo = schedule_repository
        self.appointment_repo = appointment_repository
        self.validator = validator
        self.booking_locks = booking_locks
        self.cache = availability_cache
        self.alternatives = alternatives

    async def execute(self, request: CreateAppointmentRequest) -> CreateAppointmentResult:
        """
        Execute appointment booking use case.

        Args:
            request: Booking request parameters

        Returns:
            CreateAppointmentResult with the appointment and its events, or
            a reason code
        """
        log = logger.with_context(
            doctor_id=request.doctor_id,
            patient_id=request.patient_id,
            date=request.appointment_date.isoformat(),
            actor_id=request.actor.actor_id,
        )

        if not request.actor.can(Capability.CREATE):
            log.warning("Booking rejected: actor lacks create capability")
            return self._error(SchedulingErrorCode.NOT_AUTHORIZED, "Actor is not allowed to book appointments")

        # 1. Doctor must exist and accept appointments
        doctor = await self.schedule_repo.find_doctor(request.doctor_id)
        if doctor is None:
            return self._error(SchedulingErrorCode.DOCTOR_NOT_FOUND, f"Doctor {request.doctor_id} not found")
        if not doctor.is_active:
            return self._error(SchedulingErrorCode.DOCTOR_INACTIVE, f"Doctor {request.doctor_id} is not active")

        draft = AppointmentDraft(
            doctor_id=request.doctor_id,
            patient_id=request.patient_id,
            appointment_date=request.appointment_date,
            start_time=request.start_time,
            duration_minutes=request.duration_minutes,
        )

        saved: Appointment | None = None
        locks = [
            doctor_key(request.doctor_id, request.appointment_date),
            patient_key(request.patient_id, request.appointment_date),
        ]
        async with self.booking_locks.hold_many(locks):
            # 2. Validate against the current state of the day
            validation = await self.validator.validate(draft)
            if validation.valid:
                # 3. Insert while still holding the lock
                appointment = Appointment.create(
                    doctor_id=request.doctor_id,
                    patient_id=request.patient_id,
                    appointment_date=request.appointment_date,
                    start_time=request.start_time,
                    duration_minutes=request.duration_minutes,
                    reason=request.reason,
                )
                try:
                    saved = await self.appointment_repo.insert(appointment)
                except AppointmentConflictException as e:
                    log.warning(f"Insert rejected by store: {e}")

        if validation.reason is not None:
            log.info(f"Booking rejected: {validation.reason.value}", start=str(request.start_time))
            return await self._rejected(request, validation.reason, validation.message or "")

        if saved is None:
            return await self._rejected(
                request,
                SchedulingErrorCode.SLOT_ALREADY_BOOKED,
                "The requested time slot is already booked",
            )

        saved.record_booking(request.actor.actor_id)
        events = saved.pull_domain_events()

        # 4. Keep availability in sync
        await self.cache.invalidate(request.doctor_id, request.appointment_date)

        log.info(
            f"Appointment booked: {saved.id} at {request.start_time.strftime('%H:%M')}",
            appointment_id=saved.id,
        )
        return CreateAppointmentResult(success=True, appointment=saved, events=events)

    async def _rejected(
        self,
        request: CreateAppointmentRequest,
        code: SchedulingErrorCode,
        message: str,
    ) -> CreateAppointmentResult:
        result = self._error(code, message)
        if code == SchedulingErrorCode.SLOT_ALREADY_BOOKED and self.alternatives is not None:
            result.alternatives = await self.alternatives.suggest(
                request.doctor_id,
                request.appointment_date,
                request.start_time,
                request.duration_minutes,
            )
        return result

    @staticmethod
    def _error(code: SchedulingErrorCode, message: str) -> CreateAppointmentResult:
        return CreateAppointmentResult(success=False, error_code=code.value, error_message=message)
