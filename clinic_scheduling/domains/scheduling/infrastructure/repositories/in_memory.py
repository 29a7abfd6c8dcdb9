"""
In-memory repositories for development and testing.

Stored entities are copies, so callers only see changes they persist.
"""

import copy
from datetime import date

from clinic_scheduling.core.domain import AppointmentConflictException, EntityNotFoundException
from clinic_scheduling.domains.scheduling.application.ports.appointment_repository import IAppointmentRepository
from clinic_scheduling.domains.scheduling.application.ports.schedule_repository import IScheduleRepository
from clinic_scheduling.domains.scheduling.domain.entities.appointment import Appointment
from clinic_scheduling.domains.scheduling.domain.entities.doctor import (
    Contract,
    Doctor,
    ScheduleSlotDefinition,
)
from clinic_scheduling.domains.scheduling.domain.services.conflict_detector import intervals_overlap


def _detached(appointment: Appointment) -> Appointment:
    clone = copy.deepcopy(appointment)
    clone.clear_domain_events()
    return clone


class InMemoryAppointmentRepository(IAppointmentRepository):
    """
    In-memory implementation of the appointment repository.

    Like the PostgreSQL exclusion constraint, inserting an appointment
    that overlaps an active one of the same doctor raises
    AppointmentConflictException.
    """

    def __init__(self, appointments: list[Appointment] | None = None):
        self._appointments: dict[int, Appointment] = {}
        self._next_id = 1
        for appointment in appointments or []:
            self._store(appointment)

    def _store(self, appointment: Appointment) -> Appointment:
        stored = _detached(appointment)
        if stored.id is None:
            stored.id = self._next_id
        self._next_id = max(self._next_id, stored.id + 1)
        self._appointments[stored.id] = stored
        return stored

    async def find_active_by_doctor_and_date(
        self,
        doctor_id: int,
        appointment_date: date,
        exclude_appointment_id: int | None = None,
    ) -> list[Appointment]:
        matches = [
            a
            for a in self._appointments.values()
            if a.doctor_id == doctor_id
            and a.appointment_date == appointment_date
            and a.occupies_slot
            and a.id != exclude_appointment_id
        ]
        return [_detached(a) for a in sorted(matches, key=lambda a: a.start_time)]  # type: ignore[arg-type, return-value]

    async def insert(self, appointment: Appointment) -> Appointment:
        for existing in self._appointments.values():
            if (
                existing.occupies_slot
                and existing.doctor_id == appointment.doctor_id
                and existing.datetime_start is not None
                and appointment.datetime_start is not None
                and intervals_overlap(
                    existing.datetime_start,
                    existing.datetime_end,
                    appointment.datetime_start,
                    appointment.datetime_end,
                )
            ):
                raise AppointmentConflictException(
                    doctor_id=appointment.doctor_id,
                    time_slot=f"{appointment.appointment_date} {appointment.start_time}-{appointment.end_time}",
                )
        stored = self._store(appointment)
        return _detached(stored)

    async def update_status(self, appointment: Appointment) -> Appointment:
        if appointment.id is None or appointment.id not in self._appointments:
            raise EntityNotFoundException("Appointment", appointment.id)
        stored = self._store(appointment)
        return _detached(stored)

    async def find_by_id(self, appointment_id: int) -> Appointment | None:
        stored = self._appointments.get(appointment_id)
        return _detached(stored) if stored else None

    async def count_active_by_patient(
        self,
        patient_id: int,
        start_date: date,
        end_date: date,
        exclude_appointment_id: int | None = None,
    ) -> int:
        return sum(
            1
            for a in self._appointments.values()
            if a.patient_id == patient_id
            and a.appointment_date is not None
            and start_date <= a.appointment_date <= end_date
            and a.occupies_slot
            and a.id != exclude_appointment_id
        )

    def all(self) -> list[Appointment]:
        """Every stored appointment, including cancelled and soft-deleted ones."""
        return [_detached(a) for a in self._appointments.values()]


class InMemoryScheduleRepository(IScheduleRepository):
    """In-memory implementation of the schedule repository."""

    def __init__(
        self,
        doctors: list[Doctor] | None = None,
        contracts: list[Contract] | None = None,
        slot_definitions: list[ScheduleSlotDefinition] | None = None,
    ):
        self._doctors = {d.id: d for d in doctors or []}
        self._contracts = list(contracts or [])
        self._slots = list(slot_definitions or [])

    def add_doctor(self, doctor: Doctor) -> None:
        self._doctors[doctor.id] = doctor

    def add_contract(self, contract: Contract) -> None:
        self._contracts.append(contract)

    def add_slot_definition(self, definition: ScheduleSlotDefinition) -> None:
        self._slots.append(definition)

    async def find_active_slot_definitions(
        self,
        doctor_id: int,
        day_of_week: int,
    ) -> list[ScheduleSlotDefinition]:
        matches = [
            s for s in self._slots if s.doctor_id == doctor_id and s.day_of_week == day_of_week and s.is_active
        ]
        return sorted(matches, key=lambda s: s.start_time)

    async def find_active_contract(self, doctor_id: int, on_date: date) -> Contract | None:
        covering = [c for c in self._contracts if c.doctor_id == doctor_id and c.covers(on_date)]
        if not covering:
            return None
        return max(covering, key=lambda c: c.start_date)  # type: ignore[arg-type, return-value]

    async def find_doctor(self, doctor_id: int) -> Doctor | None:
        return self._doctors.get(doctor_id)
