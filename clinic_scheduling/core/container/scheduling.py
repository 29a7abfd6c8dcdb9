# ============================================================================
# SCOPE: GLOBAL
# Description: Contenedor del dominio de turnos. Reglas, reloj, locks y cache
#              son singletons; repositorios y casos de uso se crean por sesión.
# ============================================================================
"""
Scheduling Domain Container.

Single Responsibility: Wire all scheduling domain dependencies.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduling.config.redis import get_redis_config
from clinic_scheduling.config.settings import Settings, get_settings
from clinic_scheduling.domains.scheduling.application.ports import (
    IAppointmentRepository,
    IAvailabilityCache,
    IScheduleRepository,
)
from clinic_scheduling.domains.scheduling.application.services import BookingLockManager
from clinic_scheduling.domains.scheduling.application.use_cases import (
    CreateAppointmentUseCase,
    GetAvailableSlotsUseCase,
    SuggestAlternativeSlotsUseCase,
    TransitionAppointmentUseCase,
)
from clinic_scheduling.domains.scheduling.domain.services import (
    AppointmentValidator,
    Clock,
    ConflictDetector,
    ContractValidityChecker,
    SlotGenerator,
    SystemClock,
)
from clinic_scheduling.domains.scheduling.domain.value_objects import SchedulingRules
from clinic_scheduling.domains.scheduling.infrastructure.cache import (
    MemoryAvailabilityCache,
    RedisAvailabilityCache,
)
from clinic_scheduling.domains.scheduling.infrastructure.repositories import (
    SQLAlchemyAppointmentRepository,
    SQLAlchemyScheduleRepository,
)

logger = logging.getLogger(__name__)


class SchedulingContainer:
    """
    Scheduling domain container.

    Use cases take explicit repositories, so the same container serves
    a database session or in-memory stores:

        ```python
        container = SchedulingContainer()
        async with get_async_db_context() as db:
            use_case = container.create_create_appointment_use_case(db)
            result = await use_case.execute(request)
        ```
    """

    def __init__(
        self,
        settings: Settings | None = None,
        rules: SchedulingRules | None = None,
        clock: Clock | None = None,
        availability_cache: IAvailabilityCache | None = None,
    ):
        """
        Initialize scheduling container.

        Args:
            settings: Application settings (defaults to get_settings())
            rules: Overrides the rules built from settings
            clock: Overrides the system clock
            availability_cache: Overrides the configured cache backend
        """
        self.settings = settings or get_settings()
        self.rules = rules or SchedulingRules.from_settings(self.settings)
        self.clock: Clock = clock or SystemClock(self.rules.timezone)

        # Singletons shared by every session
        self._availability_cache = availability_cache
        self._booking_locks = BookingLockManager()

        logger.info(
            f"SchedulingContainer initialized "
            f"(cache={self.settings.AVAILABILITY_CACHE_BACKEND}, tz={self.rules.timezone})"
        )

    # ==================== SINGLETONS ====================

    def get_availability_cache(self) -> IAvailabilityCache:
        """Get availability cache (singleton) for the configured backend."""
        if self._availability_cache is None:
            if self.settings.AVAILABILITY_CACHE_BACKEND == "redis":
                redis_config = get_redis_config(self.settings)
                logger.info(f"Creating RedisAvailabilityCache at {redis_config.host}:{redis_config.port}")
                self._availability_cache = RedisAvailabilityCache(
                    client=redis_config.create_client(),
                    ttl_seconds=self.rules.cache_ttl_seconds,
                )
            else:
                self._availability_cache = MemoryAvailabilityCache(
                    ttl_seconds=self.rules.cache_ttl_seconds,
                    max_size=self.settings.AVAILABILITY_CACHE_MAX_SIZE,
                )
        return self._availability_cache

    def get_booking_locks(self) -> BookingLockManager:
        """Get the process-wide booking lock manager."""
        return self._booking_locks

    # ==================== REPOSITORIES ====================

    def create_appointment_repository(self, db: AsyncSession) -> SQLAlchemyAppointmentRepository:
        """Create Appointment Repository."""
        return SQLAlchemyAppointmentRepository(session=db)

    def create_schedule_repository(self, db: AsyncSession) -> SQLAlchemyScheduleRepository:
        """Create Schedule Repository."""
        return SQLAlchemyScheduleRepository(session=db)

    # ==================== DOMAIN SERVICES ====================

    def create_validator(
        self,
        schedules: IScheduleRepository,
        appointments: IAppointmentRepository,
    ) -> AppointmentValidator:
        return AppointmentValidator(
            rules=self.rules,
            clock=self.clock,
            schedule_repository=schedules,
            contract_checker=ContractValidityChecker(schedules),
            conflict_detector=ConflictDetector(appointments, self.rules.buffer_minutes),
            appointment_repository=appointments,
        )

    def create_slot_generator(
        self,
        schedules: IScheduleRepository,
        appointments: IAppointmentRepository,
    ) -> SlotGenerator:
        return SlotGenerator(
            rules=self.rules,
            clock=self.clock,
            schedule_repository=schedules,
            appointment_repository=appointments,
            contract_checker=ContractValidityChecker(schedules),
            conflict_detector=ConflictDetector(appointments, self.rules.buffer_minutes),
        )

    # ==================== USE CASES (explicit repositories) ====================

    def build_get_available_slots(
        self,
        schedules: IScheduleRepository,
        appointments: IAppointmentRepository,
    ) -> GetAvailableSlotsUseCase:
        return GetAvailableSlotsUseCase(
            rules=self.rules,
            clock=self.clock,
            slot_generator=self.create_slot_generator(schedules, appointments),
            availability_cache=self.get_availability_cache(),
            booking_locks=self._booking_locks,
        )

    def build_suggest_alternative_slots(
        self,
        schedules: IScheduleRepository,
        appointments: IAppointmentRepository,
    ) -> SuggestAlternativeSlotsUseCase:
        return SuggestAlternativeSlotsUseCase(
            rules=self.rules,
            available_slots=self.build_get_available_slots(schedules, appointments),
        )

    def build_create_appointment(
        self,
        schedules: IScheduleRepository,
        appointments: IAppointmentRepository,
    ) -> CreateAppointmentUseCase:
        return CreateAppointmentUseCase(
            schedule_repository=schedules,
            appointment_repository=appointments,
            validator=self.create_validator(schedules, appointments),
            booking_locks=self._booking_locks,
            availability_cache=self.get_availability_cache(),
            alternatives=self.build_suggest_alternative_slots(schedules, appointments),
        )

    def build_transition_appointment(
        self,
        schedules: IScheduleRepository,
        appointments: IAppointmentRepository,
    ) -> TransitionAppointmentUseCase:
        return TransitionAppointmentUseCase(
            appointment_repository=appointments,
            validator=self.create_validator(schedules, appointments),
            booking_locks=self._booking_locks,
            availability_cache=self.get_availability_cache(),
            clock=self.clock,
        )

    # ==================== USE CASES (database session) ====================

    def create_get_available_slots_use_case(self, db: AsyncSession) -> GetAvailableSlotsUseCase:
        """Create GetAvailableSlotsUseCase with dependencies."""
        return self.build_get_available_slots(
            self.create_schedule_repository(db),
            self.create_appointment_repository(db),
        )

    def create_suggest_alternative_slots_use_case(self, db: AsyncSession) -> SuggestAlternativeSlotsUseCase:
        """Create SuggestAlternativeSlotsUseCase with dependencies."""
        return self.build_suggest_alternative_slots(
            self.create_schedule_repository(db),
            self.create_appointment_repository(db),
        )

    def create_create_appointment_use_case(self, db: AsyncSession) -> CreateAppointmentUseCase:
        """Create CreateAppointmentUseCase with dependencies."""
        return self.build_create_appointment(
            self.create_schedule_repository(db),
            self.create_appointment_repository(db),
        )

    def create_transition_appointment_use_case(self, db: AsyncSession) -> TransitionAppointmentUseCase:
        """Create TransitionAppointmentUseCase with dependencies."""
        return self.build_transition_appointment(
            self.create_schedule_repository(db),
            self.create_appointment_repository(db),
        )
