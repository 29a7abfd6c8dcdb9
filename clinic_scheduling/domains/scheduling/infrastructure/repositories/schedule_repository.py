"""
Schedule Repository Implementation

SQLAlchemy implementation of IScheduleRepository.
"""

from datetime import date

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduling.core.domain import RepositoryUnavailableException
from clinic_scheduling.core.shared.logger import get_repository_logger
from clinic_scheduling.domains.scheduling.application.ports.schedule_repository import IScheduleRepository
from clinic_scheduling.domains.scheduling.domain.entities.doctor import (
    Contract,
    Doctor,
    ScheduleSlotDefinition,
)
from clinic_scheduling.domains.scheduling.infrastructure.persistence.sqlalchemy.models import (
    DoctorContractModel,
    DoctorModel,
    DoctorScheduleSlotModel,
)

logger = get_repository_logger("schedule")


class SQLAlchemyScheduleRepository(IScheduleRepository):
    """SQLAlchemy implementation of the read-only schedule repository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_active_slot_definitions(
        self,
        doctor_id: int,
        day_of_week: int,
    ) -> list[ScheduleSlotDefinition]:
        """Find active weekly windows for a doctor's weekday."""
        try:
            result = await self.session.execute(
                select(DoctorScheduleSlotModel)
                .where(
                    and_(
                        DoctorScheduleSlotModel.doctor_id == doctor_id,
                        DoctorScheduleSlotModel.day_of_week == day_of_week,
                        DoctorScheduleSlotModel.is_active.is_(True),
                    )
                )
                .order_by(DoctorScheduleSlotModel.start_time)
            )
            models = result.scalars().all()
        except SQLAlchemyError as e:
            raise self._unavailable("find_active_slot_definitions", e) from e
        return [self._slot_to_entity(m) for m in models]

    async def find_active_contract(self, doctor_id: int, on_date: date) -> Contract | None:
        """Find the active contract covering a date (latest start wins)."""
        try:
            result = await self.session.execute(
                select(DoctorContractModel)
                .where(
                    and_(
                        DoctorContractModel.doctor_id == doctor_id,
                        DoctorContractModel.is_active.is_(True),
                        DoctorContractModel.start_date <= on_date,
                        or_(
                            DoctorContractModel.end_date.is_(None),
                            DoctorContractModel.end_date >= on_date,
                        ),
                    )
                )
                .order_by(DoctorContractModel.start_date.desc())
                .limit(1)
            )
            model = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._unavailable("find_active_contract", e) from e
        return self._contract_to_entity(model) if model else None

    async def find_doctor(self, doctor_id: int) -> Doctor | None:
        """Find doctor by ID."""
        try:
            result = await self.session.execute(select(DoctorModel).where(DoctorModel.id == doctor_id))
            model = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._unavailable("find_doctor", e) from e
        return self._doctor_to_entity(model) if model else None

    def _unavailable(self, operation: str, error: Exception) -> RepositoryUnavailableException:
        logger.error(f"Database error during {operation}: {error}", operation=operation)
        return RepositoryUnavailableException(service="postgresql", operation=operation, original_error=error)

    # Mapping methods

    def _doctor_to_entity(self, model: DoctorModel) -> Doctor:
        return Doctor(
            id=model.id,  # type: ignore[arg-type]
            full_name=model.full_name,  # type: ignore[arg-type]
            is_active=bool(model.is_active),
            specialty_id=model.specialty_id,  # type: ignore[arg-type]
        )

    def _contract_to_entity(self, model: DoctorContractModel) -> Contract:
        return Contract(
            id=model.id,  # type: ignore[arg-type]
            doctor_id=model.doctor_id,  # type: ignore[arg-type]
            start_date=model.start_date,  # type: ignore[arg-type]
            end_date=model.end_date,  # type: ignore[arg-type]
            contract_type=model.contract_type,  # type: ignore[arg-type]
            is_active=bool(model.is_active),
        )

    def _slot_to_entity(self, model: DoctorScheduleSlotModel) -> ScheduleSlotDefinition:
        return ScheduleSlotDefinition(
            id=model.id,  # type: ignore[arg-type]
            doctor_id=model.doctor_id,  # type: ignore[arg-type]
            day_of_week=model.day_of_week,  # type: ignore[arg-type]
            start_time=model.start_time,  # type: ignore[arg-type]
            end_time=model.end_time,  # type: ignore[arg-type]
            is_active=bool(model.is_active),
        )
