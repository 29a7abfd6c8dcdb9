"""
Appointment Validator for Scheduling Domain

Runs every booking rule against a proposed appointment and reports the
first failure as a reason code.
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, time

from clinic_scheduling.domains.scheduling.application.ports.appointment_repository import IAppointmentRepository
from clinic_scheduling.domains.scheduling.application.ports.schedule_repository import IScheduleRepository

from ..value_objects.error_codes import SchedulingErrorCode
from ..value_objects.scheduling_rules import SchedulingRules
from ..value_objects.time_window import end_minutes, to_minutes
from .calendar_rules import CalendarRules, Clock
from .conflict_detector import ConflictDetector
from .contract_checker import ContractValidityChecker


@dataclass(frozen=True)
class AppointmentDraft:
    """Proposed appointment, not yet persisted."""

    doctor_id: int
    patient_id: int
    appointment_date: date
    start_time: time
    duration_minutes: int


@dataclass(frozen=True)
class ValidationResult:
    """Validated draft with its end time, or the first failing reason."""

    valid: bool
    draft: AppointmentDraft
    end_time: time | None = None
    reason: SchedulingErrorCode | None = None
    message: str | None = None

    @classmethod
    def ok(cls, draft: AppointmentDraft, end_time: time) -> "ValidationResult":
        return cls(valid=True, draft=draft, end_time=end_time)

    @classmethod
    def fail(cls, draft: AppointmentDraft, reason: SchedulingErrorCode, message: str) -> "ValidationResult":
        return cls(valid=False, draft=draft, reason=reason, message=message)


class AppointmentValidator:
    """
    Domain service that validates proposed appointments.

    Checks run fail-fast in this order:
    1. NOT_A_WORKING_DAY
    2. OUTSIDE_BUSINESS_HOURS
    3. INVALID_SLOT_ALIGNMENT
    4. INVALID_DURATION
    5. INSUFFICIENT_LEAD_TIME
    6. BOOKING_TOO_FAR_AHEAD
    7. NO_ACTIVE_CONTRACT
    8. OUTSIDE_DOCTOR_SCHEDULE
    9. SLOT_ALREADY_BOOKED
    10. PATIENT_LIMIT_EXCEEDED

    Validation never mutates anything. The conflict check is only
    authoritative under the (doctor, date) booking lock, the patient
    limits only under the (patient, month) lock.

    A draft fits the doctor's schedule when it lies inside one bookable
    window; overlapping or touching definitions are merged first, the
    same windows the slot generator walks.
    """

    def __init__(
        self,
        rules: SchedulingRules,
        clock: Clock,
        schedule_repository: IScheduleRepository,
        contract_checker: ContractValidityChecker,
        conflict_detector: ConflictDetector,
        appointment_repository: IAppointmentRepository,
    ):
        self.rules = rules
        self.calendar = CalendarRules(rules)
        self._clock = clock
        self._schedules = schedule_repository
        self._contracts = contract_checker
        self._conflicts = conflict_detector
        self._appointments = appointment_repository

    async def validate(
        self,
        draft: AppointmentDraft,
        exclude_appointment_id: int | None = None,
    ) -> ValidationResult:
        """
        Validate a proposed appointment.

        Args:
            draft: Proposed appointment
            exclude_appointment_id: Appointment being replaced, ignored by
                the conflict and patient limit checks

        Returns:
            ValidationResult with the computed end time or the failure
        """
        day = draft.appointment_date
        start = draft.start_time
        duration = draft.duration_minutes

        if not self.calendar.is_working_day(day):
            return ValidationResult.fail(
                draft,
                SchedulingErrorCode.NOT_A_WORKING_DAY,
                f"{day.isoformat()} is not a clinic working day",
            )

        end = self.calendar.end_time_for(start, duration) if duration > 0 else start
        if (
            end is None
            or not self.calendar.is_within_working_hours(start)
            or not self.calendar.is_within_working_hours(end)
        ):
            return ValidationResult.fail(
                draft,
                SchedulingErrorCode.OUTSIDE_BUSINESS_HOURS,
                f"Appointment must fall within {self.rules.business_hours}",
            )

        if not self.calendar.is_aligned_to_granularity(start):
            return ValidationResult.fail(
                draft,
                SchedulingErrorCode.INVALID_SLOT_ALIGNMENT,
                f"Start time must align to {self.rules.slot_granularity_minutes} minute slots",
            )

        if not self.calendar.duration_is_valid(duration):
            return ValidationResult.fail(
                draft,
                SchedulingErrorCode.INVALID_DURATION,
                f"Duration must be between {self.rules.min_duration_minutes} "
                f"and {self.rules.max_duration_minutes} minutes",
            )

        now = self._clock.now()
        proposed_start = datetime.combine(day, start)
        if not self.calendar.satisfies_lead_time(now, proposed_start):
            return ValidationResult.fail(
                draft,
                SchedulingErrorCode.INSUFFICIENT_LEAD_TIME,
                f"Appointments must be booked at least {self.rules.min_lead_time_minutes} minutes ahead",
            )

        if not self.calendar.within_horizon(now, proposed_start):
            return ValidationResult.fail(
                draft,
                SchedulingErrorCode.BOOKING_TOO_FAR_AHEAD,
                f"Appointments cannot be booked more than {self.rules.max_horizon_days} days ahead",
            )

        contract = await self._contracts.check(draft.doctor_id, day)
        if not contract.valid:
            return ValidationResult.fail(
                draft,
                SchedulingErrorCode.NO_ACTIVE_CONTRACT,
                f"Doctor {draft.doctor_id} has no active contract on {day.isoformat()}",
            )

        if not await self._fits_doctor_schedule(draft.doctor_id, day, start, end):
            return ValidationResult.fail(
                draft,
                SchedulingErrorCode.OUTSIDE_DOCTOR_SCHEDULE,
                "Requested time is outside the doctor's schedule",
            )

        if await self._conflicts.has_conflict(
            draft.doctor_id, day, start, end, exclude_appointment_id=exclude_appointment_id
        ):
            return ValidationResult.fail(
                draft,
                SchedulingErrorCode.SLOT_ALREADY_BOOKED,
                "The requested time slot is already booked",
            )

        limit_message = await self._check_patient_limits(draft, exclude_appointment_id)
        if limit_message:
            return ValidationResult.fail(draft, SchedulingErrorCode.PATIENT_LIMIT_EXCEEDED, limit_message)

        return ValidationResult.ok(draft, end)

    async def _fits_doctor_schedule(self, doctor_id: int, day: date, start: time, end: time) -> bool:
        definitions = await self._schedules.find_active_slot_definitions(doctor_id, day.weekday())
        start_minute = to_minutes(start)
        end_minute = end_minutes(end)
        return any(
            window.start_minute <= start_minute and end_minute <= window.end_minute
            for window in self.calendar.bookable_windows(definitions)
        )

    async def _check_patient_limits(
        self,
        draft: AppointmentDraft,
        exclude_appointment_id: int | None,
    ) -> str | None:
        day = draft.appointment_date

        per_day = self.rules.max_patient_appointments_per_day
        if per_day is not None:
            count = await self._appointments.count_active_by_patient(
                draft.patient_id, day, day, exclude_appointment_id=exclude_appointment_id
            )
            if count >= per_day:
                return f"Patient already has {count} appointments on {day.isoformat()} (max {per_day})"

        per_month = self.rules.max_patient_appointments_per_month
        if per_month is not None:
            first = day.replace(day=1)
            last = day.replace(day=monthrange(day.year, day.month)[1])
            count = await self._appointments.count_active_by_patient(
                draft.patient_id, first, last, exclude_appointment_id=exclude_appointment_id
            )
            if count >= per_month:
                return f"Patient already has {count} appointments in {day.strftime('%Y-%m')} (max {per_month})"

        return None
