"""
Scheduling Rules

Immutable clinic configuration injected into calendar rules, the slot
generator and the validator.
"""

from dataclasses import dataclass, field
from datetime import date, time, timedelta
from typing import TYPE_CHECKING

from clinic_scheduling.core.domain import ValueObject

from .time_window import TimeWindow

if TYPE_CHECKING:
    from clinic_scheduling.config.settings import Settings


def _parse_clock(value: str) -> time:
    hour, minute = value.strip().split(":")
    return time(int(hour), int(minute))


@dataclass(frozen=True)
class SchedulingRules(ValueObject):
    """
    Clinic-wide booking rules.

    Example:
        ```python
        rules = SchedulingRules(min_lead_time_minutes=60, buffer_minutes=5)
        rules.business_hours  # 08:00 - 18:00
        ```
    """

    working_days: frozenset[int] = field(default_factory=lambda: frozenset({0, 1, 2, 3, 4}))
    working_hours_start: time = time(8, 0)
    working_hours_end: time = time(18, 0)
    slot_granularity_minutes: int = 30
    min_duration_minutes: int = 15
    max_duration_minutes: int = 180
    min_lead_time_minutes: int = 120
    max_horizon_days: int = 90
    buffer_minutes: int = 0
    max_patient_appointments_per_day: int | None = 3
    max_patient_appointments_per_month: int | None = 10
    closed_dates: frozenset[date] = field(default_factory=frozenset)
    timezone: str = "America/Argentina/Buenos_Aires"
    cache_ttl_seconds: int = 1800
    suggestion_window_minutes: int = 120

    def _validate(self) -> None:
        if not self.working_days <= frozenset(range(7)):
            raise ValueError("Working days must be between 0 (Monday) and 6 (Sunday)")
        if self.working_hours_start >= self.working_hours_end:
            raise ValueError("Working hours start must be before end")
        if self.slot_granularity_minutes <= 0:
            raise ValueError("Slot granularity must be positive")
        if self.min_duration_minutes <= 0 or self.min_duration_minutes > self.max_duration_minutes:
            raise ValueError("Duration bounds are inconsistent")
        if self.min_lead_time_minutes < 0 or self.max_horizon_days < 0 or self.buffer_minutes < 0:
            raise ValueError("Lead time, horizon and buffer cannot be negative")

    @property
    def business_hours(self) -> TimeWindow:
        return TimeWindow(start=self.working_hours_start, end=self.working_hours_end)

    @property
    def lead_time(self) -> timedelta:
        return timedelta(minutes=self.min_lead_time_minutes)

    @property
    def horizon(self) -> timedelta:
        return timedelta(days=self.max_horizon_days)

    @property
    def default_duration_minutes(self) -> int:
        """Duration used when a caller asks for slots without one."""
        return max(self.slot_granularity_minutes, self.min_duration_minutes)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "SchedulingRules":
        """Build rules from SCHEDULING_* settings."""
        return cls(
            working_days=frozenset(settings.working_days),
            working_hours_start=_parse_clock(settings.SCHEDULING_WORKING_HOURS_START),
            working_hours_end=_parse_clock(settings.SCHEDULING_WORKING_HOURS_END),
            slot_granularity_minutes=settings.SCHEDULING_SLOT_GRANULARITY_MINUTES,
            min_duration_minutes=settings.SCHEDULING_MIN_DURATION_MINUTES,
            max_duration_minutes=settings.SCHEDULING_MAX_DURATION_MINUTES,
            min_lead_time_minutes=settings.SCHEDULING_MIN_LEAD_TIME_MINUTES,
            max_horizon_days=settings.SCHEDULING_MAX_HORIZON_DAYS,
            buffer_minutes=settings.SCHEDULING_BUFFER_MINUTES,
            max_patient_appointments_per_day=settings.SCHEDULING_MAX_PATIENT_APPOINTMENTS_PER_DAY,
            max_patient_appointments_per_month=settings.SCHEDULING_MAX_PATIENT_APPOINTMENTS_PER_MONTH,
            closed_dates=frozenset(settings.closed_dates),
            timezone=settings.CLINIC_TIMEZONE,
            cache_ttl_seconds=settings.AVAILABILITY_CACHE_TTL_SECONDS,
            suggestion_window_minutes=settings.SCHEDULING_SUGGESTION_WINDOW_MINUTES,
        )
