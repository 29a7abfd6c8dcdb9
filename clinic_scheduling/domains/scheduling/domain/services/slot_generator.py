"""
Slot Generator for Scheduling Domain

Produces the bookable start times of a doctor's day.
"""

import logging
from datetime import date, datetime, time

from clinic_scheduling.domains.scheduling.application.ports.appointment_repository import IAppointmentRepository
from clinic_scheduling.domains.scheduling.application.ports.schedule_repository import IScheduleRepository

from ..value_objects.scheduling_rules import SchedulingRules
from ..value_objects.time_window import from_minutes
from .calendar_rules import CalendarRules, Clock
from .conflict_detector import ConflictDetector
from .contract_checker import ContractValidityChecker

logger = logging.getLogger(__name__)


class SlotGenerator:
    """
    Domain service for availability.

    Walks the doctor's schedule windows for the weekday in granularity
    steps and keeps the starts that satisfy lead time, horizon and do not
    collide with an active appointment. The day's appointments are read
    once per call.

    Example:
        ```python
        generator = SlotGenerator(rules, clock, schedules, appointments, checker, detector)
        slots = await generator.generate(doctor_id=7, on_date=date(2025, 3, 10))
        # [time(8, 0), time(8, 30), ...]
        ```
    """

    def __init__(
        self,
        rules: SchedulingRules,
        clock: Clock,
        schedule_repository: IScheduleRepository,
        appointment_repository: IAppointmentRepository,
        contract_checker: ContractValidityChecker,
        conflict_detector: ConflictDetector,
    ):
        self.rules = rules
        self.calendar = CalendarRules(rules)
        self._clock = clock
        self._schedules = schedule_repository
        self._appointments = appointment_repository
        self._contracts = contract_checker
        self._conflicts = conflict_detector

    async def generate(
        self,
        doctor_id: int,
        on_date: date,
        duration_minutes: int | None = None,
    ) -> list[time]:
        """
        Generate available slot starts for a doctor and date.

        Args:
            doctor_id: Doctor ID
            on_date: Day to generate
            duration_minutes: Appointment length (clinic default if omitted)

        Returns:
            Ascending, de-duplicated start times. Empty when the day is not
            bookable at all.
        """
        duration = duration_minutes if duration_minutes is not None else self.rules.default_duration_minutes
        if not self.calendar.duration_is_valid(duration):
            return []

        if not self.calendar.is_working_day(on_date):
            return []

        doctor = await self._schedules.find_doctor(doctor_id)
        if doctor is None or not doctor.is_active:
            logger.debug(f"Doctor {doctor_id} unavailable, no slots for {on_date}")
            return []

        contract = await self._contracts.check(doctor_id, on_date)
        if not contract.valid:
            return []

        definitions = await self._schedules.find_active_slot_definitions(doctor_id, on_date.weekday())
        windows = self.calendar.bookable_windows(definitions)
        if not windows:
            return []

        timeline = await self._conflicts.load_timeline(doctor_id, on_date)
        now = self._clock.now()
        granularity = self.rules.slot_granularity_minutes

        slots: set[time] = set()
        for window in windows:
            minute = self.calendar.align_up_minute(window.start_minute)
            while minute + duration <= window.end_minute:
                start = from_minutes(minute)
                proposed = datetime.combine(on_date, start)
                if (
                    self.calendar.satisfies_lead_time(now, proposed)
                    and self.calendar.within_horizon(now, proposed)
                    and not timeline.overlaps_minutes(minute, minute + duration)
                ):
                    slots.add(start)
                minute += granularity

        return sorted(slots)
