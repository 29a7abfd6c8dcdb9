"""
Doctor, Contract and Schedule Slot Entities

Read-only reference data consumed by the scheduling engine. Their CRUD
lives elsewhere; the engine only loads them through IScheduleRepository.
"""

from dataclasses import dataclass
from datetime import date, time

from clinic_scheduling.core.domain import Entity

from ..value_objects.time_window import TimeWindow

DAY_NAMES = ("Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado", "Domingo")


@dataclass(eq=False)
class Doctor(Entity[int]):
    """Doctor that appointments are booked against."""

    full_name: str = ""
    is_active: bool = True
    specialty_id: int | None = None


@dataclass(eq=False)
class Contract(Entity[int]):
    """
    Employment contract of a doctor.

    A contract without end date is open-ended.
    """

    doctor_id: int = 0
    start_date: date | None = None
    end_date: date | None = None
    contract_type: str = "staff"
    is_active: bool = True

    def covers(self, on: date) -> bool:
        """Check if the contract is in force on the given date."""
        if not self.is_active or self.start_date is None:
            return False
        if on < self.start_date:
            return False
        return self.end_date is None or on <= self.end_date


@dataclass(eq=False)
class ScheduleSlotDefinition(Entity[int]):
    """Recurring weekly availability window of a doctor (0=Monday)."""

    doctor_id: int = 0
    day_of_week: int = 0
    start_time: time = time(8, 0)
    end_time: time = time(18, 0)
    is_active: bool = True

    def __post_init__(self):
        if not 0 <= self.day_of_week <= 6:
            raise ValueError(f"day_of_week must be between 0 and 6, got {self.day_of_week}")

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(start=self.start_time, end=self.end_time)

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day_of_week]
