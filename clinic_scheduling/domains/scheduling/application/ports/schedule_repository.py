"""
Schedule Repository Port

Read-only access to doctors, their contracts and weekly slot definitions.
"""

from datetime import date
from typing import Protocol, runtime_checkable

from clinic_scheduling.domains.scheduling.domain.entities.doctor import (
    Contract,
    Doctor,
    ScheduleSlotDefinition,
)


@runtime_checkable
class IScheduleRepository(Protocol):
    """Doctor schedule repository interface."""

    async def find_active_slot_definitions(
        self,
        doctor_id: int,
        day_of_week: int,
    ) -> list[ScheduleSlotDefinition]:
        """
        Find the doctor's active availability windows for a weekday.

        Args:
            doctor_id: Doctor ID
            day_of_week: 0=Monday ... 6=Sunday

        Returns:
            Active slot definitions sorted by start time
        """
        ...

    async def find_active_contract(self, doctor_id: int, on_date: date) -> Contract | None:
        """
        Find the active contract covering a date.

        Returns:
            Contract in force on that date, None otherwise
        """
        ...

    async def find_doctor(self, doctor_id: int) -> Doctor | None:
        """Find doctor by ID."""
        ...
