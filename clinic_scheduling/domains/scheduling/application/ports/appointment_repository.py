"""
Appointment Repository Port

Interface for appointment data access following Clean Architecture.
"""

from datetime import date
from typing import Protocol, runtime_checkable

from clinic_scheduling.domains.scheduling.domain.entities.appointment import Appointment


@runtime_checkable
class IAppointmentRepository(Protocol):
    """
    Appointment repository interface.

    Implementations raise RepositoryUnavailableException when the store
    cannot be reached, and AppointmentConflictException when the store
    itself rejects an overlapping insert.

    Example:
        ```python
        class SQLAlchemyAppointmentRepository(IAppointmentRepository):
            async def find_by_id(self, appointment_id: int) -> Appointment | None:
                # SQLAlchemy implementation
                pass
        ```
    """

    async def find_active_by_doctor_and_date(
        self,
        doctor_id: int,
        appointment_date: date,
        exclude_appointment_id: int | None = None,
    ) -> list[Appointment]:
        """
        Find appointments that block the doctor's time on a date.

        Only scheduled, confirmed and in-progress appointments that are not
        soft-deleted are returned.

        Args:
            doctor_id: Doctor ID
            appointment_date: Day to look at
            exclude_appointment_id: Appointment to leave out (reschedules)

        Returns:
            Active appointments sorted by start time
        """
        ...

    async def insert(self, appointment: Appointment) -> Appointment:
        """
        Persist a new appointment.

        Returns:
            The appointment with its id assigned
        """
        ...

    async def update_status(self, appointment: Appointment) -> Appointment:
        """
        Persist status, timestamps and history of an existing appointment.

        Returns:
            Updated appointment
        """
        ...

    async def find_by_id(self, appointment_id: int) -> Appointment | None:
        """
        Find appointment by ID.

        Args:
            appointment_id: Unique appointment identifier

        Returns:
            Appointment if found, None otherwise
        """
        ...

    async def count_active_by_patient(
        self,
        patient_id: int,
        start_date: date,
        end_date: date,
        exclude_appointment_id: int | None = None,
    ) -> int:
        """
        Count a patient's active appointments between two dates (inclusive).

        Args:
            patient_id: Patient ID
            start_date: First day of the range
            end_date: Last day of the range
            exclude_appointment_id: Appointment not to count

        Returns:
            Number of active appointments
        """
        ...
