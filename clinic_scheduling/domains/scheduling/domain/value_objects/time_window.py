"""
Time window value objects.

Half-open [start, end) intervals within a single day, expressed as
``datetime.time`` values and compared through minute-of-day arithmetic.
"""

from dataclasses import dataclass
from datetime import time

from clinic_scheduling.core.domain import ValueObject

MINUTES_PER_DAY = 24 * 60


def to_minutes(value: time) -> int:
    """Minute of day for a time value (seconds are truncated)."""
    return value.hour * 60 + value.minute


def from_minutes(minutes: int) -> time:
    """Time value for a minute of day. 1440 maps to 23:59:59.999999."""
    if minutes >= MINUTES_PER_DAY:
        return time.max
    if minutes < 0:
        raise ValueError(f"Minute of day cannot be negative: {minutes}")
    return time(minutes // 60, minutes % 60)


def end_minutes(value: time) -> int:
    """Minute of day for an interval end; time.max means end of day."""
    if value == time.max:
        return MINUTES_PER_DAY
    return to_minutes(value)


@dataclass(frozen=True)
class TimeWindow(ValueObject):
    """
    Half-open time interval within a day.

    Two windows [s1, e1) and [s2, e2) overlap iff s1 < e2 and s2 < e1,
    so back-to-back windows do not overlap.
    """

    start: time
    end: time

    def _validate(self) -> None:
        if self.start >= self.end:
            raise ValueError("Window start must be before end")

    @property
    def start_minute(self) -> int:
        return to_minutes(self.start)

    @property
    def end_minute(self) -> int:
        return end_minutes(self.end)

    @property
    def duration_minutes(self) -> int:
        return self.end_minute - self.start_minute

    def overlaps_with(self, other: "TimeWindow") -> bool:
        """Check if window overlaps with another."""
        return self.start_minute < other.end_minute and other.start_minute < self.end_minute

    def contains(self, other: "TimeWindow") -> bool:
        """Check if the other window lies entirely inside this one."""
        return self.start_minute <= other.start_minute and other.end_minute <= self.end_minute

    def clip(self, bounds: "TimeWindow") -> "TimeWindow | None":
        """Intersection with bounds, or None when they do not overlap."""
        start = max(self.start_minute, bounds.start_minute)
        end = min(self.end_minute, bounds.end_minute)
        if start >= end:
            return None
        return TimeWindow(start=from_minutes(start), end=from_minutes(end))

    def __str__(self) -> str:
        return f"{self.start.strftime('%H:%M')} - {self.end.strftime('%H:%M')}"

    @classmethod
    def from_minute_range(cls, start: int, end: int) -> "TimeWindow":
        return cls(start=from_minutes(start), end=from_minutes(end))


def merge_windows(windows: list[TimeWindow]) -> list[TimeWindow]:
    """
    Merge overlapping or touching windows.

    Returns a sorted list of disjoint windows covering the same minutes.
    """
    if not windows:
        return []

    ordered = sorted(windows, key=lambda w: (w.start_minute, w.end_minute))
    merged: list[list[int]] = [[ordered[0].start_minute, ordered[0].end_minute]]

    for window in ordered[1:]:
        last = merged[-1]
        if window.start_minute <= last[1]:
            last[1] = max(last[1], window.end_minute)
        else:
            merged.append([window.start_minute, window.end_minute])

    return [TimeWindow.from_minute_range(start, end) for start, end in merged]
