"""
Calendar Rules for Scheduling Domain

Pure clinic calendar checks parameterized by SchedulingRules.
"""

from datetime import date, datetime, time, timedelta
from typing import Protocol, runtime_checkable
from zoneinfo import ZoneInfo

from ..entities.doctor import ScheduleSlotDefinition
from ..value_objects.scheduling_rules import SchedulingRules
from ..value_objects.time_window import MINUTES_PER_DAY, TimeWindow, from_minutes, merge_windows, to_minutes


@runtime_checkable
class Clock(Protocol):
    """Source of the current clinic-local wall time."""

    def now(self) -> datetime:
        """Naive datetime in the clinic's timezone."""
        ...


class SystemClock:
    """Clock backed by the system time in the clinic's timezone."""

    def __init__(self, timezone: str = "America/Argentina/Buenos_Aires"):
        self._zone = ZoneInfo(timezone)

    def now(self) -> datetime:
        return datetime.now(self._zone).replace(tzinfo=None)


class CalendarRules:
    """
    Clinic calendar rules.

    Every method is a pure function of its arguments and the rules given
    at construction.

    Example:
        ```python
        calendar = CalendarRules(SchedulingRules())
        calendar.is_working_day(date(2025, 3, 10))  # Monday -> True
        calendar.is_aligned_to_granularity(time(9, 15))  # False with 30 min
        ```
    """

    def __init__(self, rules: SchedulingRules):
        self.rules = rules

    def is_working_day(self, on: date) -> bool:
        """Weekday is a clinic working day and the date is not a closure."""
        return on.weekday() in self.rules.working_days and on not in self.rules.closed_dates

    def is_within_working_hours(self, at: time) -> bool:
        """Inclusive check against working hours start and end."""
        return self.rules.working_hours_start <= at <= self.rules.working_hours_end

    def is_aligned_to_granularity(self, at: time) -> bool:
        if at.second or at.microsecond:
            return False
        return to_minutes(at) % self.rules.slot_granularity_minutes == 0

    def satisfies_lead_time(self, now: datetime, proposed_start: datetime) -> bool:
        return proposed_start - now >= self.rules.lead_time

    def within_horizon(self, now: datetime, proposed_start: datetime) -> bool:
        return proposed_start - now <= self.rules.horizon

    def duration_is_valid(self, minutes: int) -> bool:
        return self.rules.min_duration_minutes <= minutes <= self.rules.max_duration_minutes

    def end_time_for(self, start: time, minutes: int) -> time | None:
        """
        End time of an interval starting at ``start``.

        Returns None when the interval would cross midnight.
        """
        start_dt = datetime.combine(date.min, start)
        end_dt = start_dt + timedelta(minutes=minutes)
        if end_dt.date() != start_dt.date():
            return None
        return end_dt.time()

    def align_up_minute(self, minute: int) -> int:
        """Smallest granularity-aligned minute of day >= minute."""
        granularity = self.rules.slot_granularity_minutes
        return -(-minute // granularity) * granularity

    def align_up(self, at: time) -> time | None:
        """
        Smallest aligned time >= at.

        Returns None when no aligned time is left in the day.
        """
        minute = to_minutes(at)
        if at.second or at.microsecond:
            minute += 1
        aligned = self.align_up_minute(minute)
        if aligned >= MINUTES_PER_DAY:
            return None
        return from_minutes(aligned)

    def bookable_windows(self, definitions: list[ScheduleSlotDefinition]) -> list[TimeWindow]:
        """Active schedule windows clipped to working hours and merged."""
        business_hours = self.rules.business_hours
        clipped = []
        for definition in definitions:
            if not definition.is_active:
                continue
            window = definition.window.clip(business_hours)
            if window is not None:
                clipped.append(window)
        return merge_windows(clipped)
