"""
Conflict Detector for Scheduling Domain

Detects overlaps between a proposed interval and a doctor's active
appointments on the same date.
"""

from bisect import bisect_right
from datetime import date, time

from clinic_scheduling.domains.scheduling.application.ports.appointment_repository import IAppointmentRepository

from ..entities.appointment import Appointment
from ..value_objects.time_window import end_minutes, to_minutes


def intervals_overlap(start1, end1, start2, end2) -> bool:
    """Half-open intervals [start1, end1) and [start2, end2) overlap."""
    return start1 < end2 and start2 < end1


class BusyTimeline:
    """
    Busy minutes of a doctor's day.

    Built once from the day's active appointments (widened by the buffer
    on both sides), sorted and merged, then queried in O(log A).

    Example:
        ```python
        timeline = BusyTimeline.from_appointments(appointments, buffer_minutes=5)
        timeline.overlaps(time(10, 0), time(10, 30))
        ```
    """

    def __init__(self, intervals: list[tuple[int, int]]):
        merged: list[list[int]] = []
        for start, end in sorted(intervals):
            if merged and start <= merged[-1][1]:
                merged[-1][1] = max(merged[-1][1], end)
            else:
                merged.append([start, end])
        self._starts = [start for start, _ in merged]
        self._ends = [end for _, end in merged]

    @classmethod
    def from_appointments(cls, appointments: list[Appointment], buffer_minutes: int = 0) -> "BusyTimeline":
        intervals = []
        for appointment in appointments:
            if appointment.start_time is None or appointment.end_time is None:
                continue
            intervals.append(
                (
                    to_minutes(appointment.start_time) - buffer_minutes,
                    end_minutes(appointment.end_time) + buffer_minutes,
                )
            )
        return cls(intervals)

    def overlaps_minutes(self, start: int, end: int) -> bool:
        # First busy interval ending after the proposed start
        index = bisect_right(self._ends, start)
        return index < len(self._starts) and self._starts[index] < end

    def overlaps(self, start: time, end: time) -> bool:
        return self.overlaps_minutes(to_minutes(start), end_minutes(end))

    def __len__(self) -> int:
        return len(self._starts)


class ConflictDetector:
    """
    Domain service for double-booking detection.

    When guarding a write it must run under the booking lock of the
    (doctor, date) pair.
    """

    def __init__(self, appointment_repository: IAppointmentRepository, buffer_minutes: int = 0):
        self._appointments = appointment_repository
        self.buffer_minutes = buffer_minutes

    async def load_timeline(
        self,
        doctor_id: int,
        on_date: date,
        exclude_appointment_id: int | None = None,
    ) -> BusyTimeline:
        """Fetch the day's active appointments once and build a timeline."""
        appointments = await self._active_appointments(doctor_id, on_date, exclude_appointment_id)
        return BusyTimeline.from_appointments(appointments, self.buffer_minutes)

    async def find_conflicts(
        self,
        doctor_id: int,
        on_date: date,
        start: time,
        end: time,
        exclude_appointment_id: int | None = None,
    ) -> list[Appointment]:
        """
        Find active appointments overlapping [start, end).

        Args:
            doctor_id: Doctor ID
            on_date: Appointment date
            start: Proposed start time
            end: Proposed end time
            exclude_appointment_id: Appointment to ignore (reschedules)

        Returns:
            Conflicting appointments sorted by start time
        """
        proposed_start = to_minutes(start)
        proposed_end = end_minutes(end)
        conflicts = []
        for appointment in await self._active_appointments(doctor_id, on_date, exclude_appointment_id):
            if appointment.start_time is None or appointment.end_time is None:
                continue
            if intervals_overlap(
                proposed_start,
                proposed_end,
                to_minutes(appointment.start_time) - self.buffer_minutes,
                end_minutes(appointment.end_time) + self.buffer_minutes,
            ):
                conflicts.append(appointment)
        return sorted(conflicts, key=lambda a: a.start_time or time.min)

    async def has_conflict(
        self,
        doctor_id: int,
        on_date: date,
        start: time,
        end: time,
        exclude_appointment_id: int | None = None,
    ) -> bool:
        conflicts = await self.find_conflicts(doctor_id, on_date, start, end, exclude_appointment_id)
        return bool(conflicts)

    async def _active_appointments(
        self,
        doctor_id: int,
        on_date: date,
        exclude_appointment_id: int | None,
    ) -> list[Appointment]:
        appointments = await self._appointments.find_active_by_doctor_and_date(
            doctor_id, on_date, exclude_appointment_id=exclude_appointment_id
        )
        return [
            a
            for a in appointments
            if a.occupies_slot and (exclude_appointment_id is None or a.id != exclude_appointment_id)
        ]
