"""
Scheduling engine lifecycle.

Startup configures logging from settings, optionally creates the
scheduling tables and builds the container; shutdown releases the shared
database engine.

    ```python
    async with scheduling_lifespan(create_schema=True) as container:
        async with get_async_db_context() as db:
            result = await container.create_create_appointment_use_case(db).execute(request)
    ```
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from clinic_scheduling.config.settings import Settings, get_settings
from clinic_scheduling.core.container import SchedulingContainer
from clinic_scheduling.core.shared.logger import configure_logging_from_settings
from clinic_scheduling.database.async_db import close_async_db, create_tables

logger = logging.getLogger(__name__)


class LifecycleManager:
    """Startup and shutdown of one scheduling engine process."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.container: SchedulingContainer | None = None

    async def startup(self, create_schema: bool = False) -> SchedulingContainer:
        if self.container is not None:
            logger.warning("Lifecycle already started, reusing container")
            return self.container

        configure_logging_from_settings(self.settings)
        logger.info(f"Starting {self.settings.PROJECT_NAME} in {self.settings.ENVIRONMENT} mode")

        if create_schema:
            await create_tables()

        self.container = SchedulingContainer(settings=self.settings)
        return self.container

    async def shutdown(self) -> None:
        if self.container is None:
            logger.warning("Lifecycle not started, skipping shutdown")
            return

        await close_async_db()
        self.container = None
        logger.info("Scheduling engine stopped")


@asynccontextmanager
async def scheduling_lifespan(
    settings: Settings | None = None,
    create_schema: bool = False,
) -> AsyncGenerator[SchedulingContainer, None]:
    """Run the engine between startup and shutdown."""
    manager = LifecycleManager(settings)
    container = await manager.startup(create_schema=create_schema)
    try:
        yield container
    finally:
        await manager.shutdown()
