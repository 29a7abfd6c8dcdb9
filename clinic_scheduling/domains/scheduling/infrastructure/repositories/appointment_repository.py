"""
Appointment Repository Implementation

SQLAlchemy implementation of IAppointmentRepository.
"""

from datetime import date, datetime
from typing import Any

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduling.core.domain import (
    AppointmentConflictException,
    EntityNotFoundException,
    RepositoryUnavailableException,
)
from clinic_scheduling.core.shared.logger import get_repository_logger
from clinic_scheduling.domains.scheduling.application.ports.appointment_repository import IAppointmentRepository
from clinic_scheduling.domains.scheduling.domain.entities.appointment import Appointment, StatusChange
from clinic_scheduling.domains.scheduling.domain.value_objects.appointment_status import (
    ACTIVE_STATUSES,
    AppointmentStatus,
)
from clinic_scheduling.domains.scheduling.infrastructure.persistence.sqlalchemy.models import (
    EXCLUSION_CONSTRAINT_NAME,
    AppointmentModel,
)

logger = get_repository_logger("appointment")

_SERVICE = "postgresql"


class SQLAlchemyAppointmentRepository(IAppointmentRepository):
    """
    SQLAlchemy implementation of appointment repository.

    Every write commits. Driver errors surface as
    RepositoryUnavailableException; an overlap rejected by the exclusion
    constraint surfaces as AppointmentConflictException.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_active_by_doctor_and_date(
        self,
        doctor_id: int,
        appointment_date: date,
        exclude_appointment_id: int | None = None,
    ) -> list[Appointment]:
        """Find slot-blocking appointments for a doctor's day."""
        query = select(AppointmentModel).where(
            and_(
                AppointmentModel.doctor_id == doctor_id,
                AppointmentModel.appointment_date == appointment_date,
                AppointmentModel.status.in_(list(ACTIVE_STATUSES)),
                AppointmentModel.deleted_at.is_(None),
            )
        )

        if exclude_appointment_id is not None:
            query = query.where(AppointmentModel.id != exclude_appointment_id)

        query = query.order_by(AppointmentModel.start_time)

        try:
            result = await self.session.execute(query)
            models = result.scalars().all()
        except SQLAlchemyError as e:
            raise self._unavailable("find_active_by_doctor_and_date", e) from e
        return [self._to_entity(m) for m in models]

    async def insert(self, appointment: Appointment) -> Appointment:
        """Insert a new appointment."""
        model = self._to_model(appointment)
        self.session.add(model)

        try:
            await self.session.commit()
            await self.session.refresh(model)
        except IntegrityError as e:
            await self.session.rollback()
            if EXCLUSION_CONSTRAINT_NAME in str(e.orig):
                logger.warning(
                    "Overlap rejected by exclusion constraint",
                    doctor_id=appointment.doctor_id,
                    date=str(appointment.appointment_date),
                )
                raise AppointmentConflictException(
                    doctor_id=appointment.doctor_id,
                    time_slot=f"{appointment.appointment_date} {appointment.start_time}-{appointment.end_time}",
                ) from e
            raise self._unavailable("insert", e) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise self._unavailable("insert", e) from e

        return self._to_entity(model)

    async def update_status(self, appointment: Appointment) -> Appointment:
        """Persist the lifecycle fields of an existing appointment."""
        try:
            result = await self.session.execute(
                select(AppointmentModel).where(AppointmentModel.id == appointment.id)
            )
            model = result.scalar_one_or_none()
            if model is None:
                raise EntityNotFoundException("Appointment", appointment.id)

            self._update_model(model, appointment)
            await self.session.commit()
            await self.session.refresh(model)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise self._unavailable("update_status", e) from e

        return self._to_entity(model)

    async def find_by_id(self, appointment_id: int) -> Appointment | None:
        """Find appointment by ID."""
        try:
            result = await self.session.execute(
                select(AppointmentModel).where(AppointmentModel.id == appointment_id)
            )
            model = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._unavailable("find_by_id", e) from e
        return self._to_entity(model) if model else None

    async def count_active_by_patient(
        self,
        patient_id: int,
        start_date: date,
        end_date: date,
        exclude_appointment_id: int | None = None,
    ) -> int:
        """Count a patient's active appointments in a date range."""
        query = select(func.count()).select_from(AppointmentModel).where(
            and_(
                AppointmentModel.patient_id == patient_id,
                AppointmentModel.appointment_date.between(start_date, end_date),
                AppointmentModel.status.in_(list(ACTIVE_STATUSES)),
                AppointmentModel.deleted_at.is_(None),
            )
        )

        if exclude_appointment_id is not None:
            query = query.where(AppointmentModel.id != exclude_appointment_id)

        try:
            result = await self.session.execute(query)
            return result.scalar_one()
        except SQLAlchemyError as e:
            raise self._unavailable("count_active_by_patient", e) from e

    def _unavailable(self, operation: str, error: Exception) -> RepositoryUnavailableException:
        logger.error(f"Database error during {operation}: {error}", operation=operation)
        return RepositoryUnavailableException(service=_SERVICE, operation=operation, original_error=error)

    # Mapping methods

    def _to_entity(self, model: AppointmentModel) -> Appointment:
        """Convert model to entity."""
        # Column() syntax: instance attributes hold values at runtime
        appointment = Appointment(
            id=model.id,  # type: ignore[arg-type]
            doctor_id=model.doctor_id,  # type: ignore[arg-type]
            patient_id=model.patient_id,  # type: ignore[arg-type]
            appointment_date=model.appointment_date,  # type: ignore[arg-type]
            start_time=model.start_time,  # type: ignore[arg-type]
            end_time=model.end_time,  # type: ignore[arg-type]
            status=model.status or AppointmentStatus.SCHEDULED,  # type: ignore[arg-type]
            status_history=self._history_from_json(model.status_history or []),  # type: ignore[arg-type]
            reason=model.reason,  # type: ignore[arg-type]
            notes=model.notes,  # type: ignore[arg-type]
            confirmed_at=model.confirmed_at,  # type: ignore[arg-type]
            started_at=model.started_at,  # type: ignore[arg-type]
            completed_at=model.completed_at,  # type: ignore[arg-type]
            cancelled_at=model.cancelled_at,  # type: ignore[arg-type]
            no_show_at=model.no_show_at,  # type: ignore[arg-type]
            rescheduled_at=model.rescheduled_at,  # type: ignore[arg-type]
            cancellation_reason=model.cancellation_reason,  # type: ignore[arg-type]
            cancelled_by=model.cancelled_by,  # type: ignore[arg-type]
            rescheduled_from_id=model.rescheduled_from_id,  # type: ignore[arg-type]
            rescheduled_to_id=model.rescheduled_to_id,  # type: ignore[arg-type]
            deleted_at=model.deleted_at,  # type: ignore[arg-type]
            version=model.version or 0,  # type: ignore[arg-type]
        )

        if model.created_at:
            appointment.created_at = model.created_at  # type: ignore[assignment]
        if model.updated_at:
            appointment.updated_at = model.updated_at  # type: ignore[assignment]

        return appointment

    def _to_model(self, appointment: Appointment) -> AppointmentModel:
        """Convert entity to model."""
        return AppointmentModel(
            doctor_id=appointment.doctor_id,
            patient_id=appointment.patient_id,
            appointment_date=appointment.appointment_date,
            start_time=appointment.start_time,
            end_time=appointment.end_time,
            starts_at=appointment.datetime_start,
            ends_at=appointment.datetime_end,
            status=appointment.status,
            status_history=self._history_to_json(appointment.status_history),
            reason=appointment.reason,
            notes=appointment.notes,
            rescheduled_from_id=appointment.rescheduled_from_id,
            version=appointment.version,
        )

    def _update_model(self, model: AppointmentModel, appointment: Appointment) -> None:
        """Update lifecycle fields of model from entity."""
        model.status = appointment.status  # type: ignore[assignment]
        model.status_history = self._history_to_json(appointment.status_history)  # type: ignore[assignment]
        model.notes = appointment.notes  # type: ignore[assignment]
        model.confirmed_at = appointment.confirmed_at  # type: ignore[assignment]
        model.started_at = appointment.started_at  # type: ignore[assignment]
        model.completed_at = appointment.completed_at  # type: ignore[assignment]
        model.cancelled_at = appointment.cancelled_at  # type: ignore[assignment]
        model.no_show_at = appointment.no_show_at  # type: ignore[assignment]
        model.rescheduled_at = appointment.rescheduled_at  # type: ignore[assignment]
        model.cancellation_reason = appointment.cancellation_reason  # type: ignore[assignment]
        model.cancelled_by = appointment.cancelled_by  # type: ignore[assignment]
        model.rescheduled_to_id = appointment.rescheduled_to_id  # type: ignore[assignment]
        model.deleted_at = appointment.deleted_at  # type: ignore[assignment]
        model.version = appointment.version  # type: ignore[assignment]
        model.updated_at = appointment.updated_at  # type: ignore[assignment]

    @staticmethod
    def _history_to_json(history: list[StatusChange]) -> list[dict[str, Any]]:
        return [
            {
                "from": change.from_status.value,
                "to": change.to_status.value,
                "changed_at": change.changed_at.isoformat(),
                "actor_id": change.actor_id,
                "reason": change.reason,
            }
            for change in history
        ]

    @staticmethod
    def _history_from_json(items: list[dict[str, Any]]) -> list[StatusChange]:
        return [
            StatusChange(
                from_status=AppointmentStatus(item["from"]),
                to_status=AppointmentStatus(item["to"]),
                changed_at=datetime.fromisoformat(item["changed_at"]),
                actor_id=item.get("actor_id"),
                reason=item.get("reason"),
            )
            for item in items
        ]
