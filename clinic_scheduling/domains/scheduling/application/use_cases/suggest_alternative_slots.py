# ============================================================================
# SCOPE: APPLICATION LAYER (Scheduling)
# Description: Use case for proposing slots near a requested time.
# ============================================================================
"""Suggest Alternative Slots Use Case.

Offers available start times within a window around the time a patient
asked for, nearest first.
"""

import logging
from datetime import date, time

from clinic_scheduling.domains.scheduling.application.dto.scheduling_dtos import (
    SuggestAlternativeSlotsRequest,
    SuggestAlternativeSlotsResult,
)
from clinic_scheduling.domains.scheduling.domain.value_objects.error_codes import SchedulingErrorCode
from clinic_scheduling.domains.scheduling.domain.value_objects.scheduling_rules import SchedulingRules
from clinic_scheduling.domains.scheduling.domain.value_objects.time_window import to_minutes

from .get_available_slots import GetAvailableSlotsUseCase

logger = logging.getLogger(__name__)


class SuggestAlternativeSlotsUseCase:
    """Use case for alternative slot suggestions."""

    def __init__(self, rules: SchedulingRules, available_slots: GetAvailableSlotsUseCase) -> None:
        self._rules = rules
        self._available = available_slots

    async def execute(self, request: SuggestAlternativeSlotsRequest) -> SuggestAlternativeSlotsResult:
        duration = request.duration_minutes
        if duration is None:
            duration = self._rules.default_duration_minutes
        if not self._rules.min_duration_minutes <= duration <= self._rules.max_duration_minutes:
            return SuggestAlternativeSlotsResult.error(  # type: ignore[return-value]
                SchedulingErrorCode.INVALID_DURATION,
                f"Duration must be between {self._rules.min_duration_minutes} "
                f"and {self._rules.max_duration_minutes} minutes",
            )

        slots = await self.suggest(
            request.doctor_id,
            request.date,
            request.requested_time,
            duration,
            window_minutes=request.window_minutes,
            limit=request.limit,
        )
        return SuggestAlternativeSlotsResult(success=True, slots=slots)

    async def suggest(
        self,
        doctor_id: int,
        on_date: date,
        requested_time: time,
        duration_minutes: int,
        window_minutes: int | None = None,
        limit: int | None = None,
    ) -> list[time]:
        """
        Available starts within the window around requested_time.

        Sorted by distance to the requested time, earlier first on ties.
        """
        window = window_minutes if window_minutes is not None else self._rules.suggestion_window_minutes
        requested = to_minutes(requested_time)

        slots, _ = await self._available.available_slots(doctor_id, on_date, duration_minutes)
        nearby = [slot for slot in slots if abs(to_minutes(slot) - requested) <= window]
        nearby.sort(key=lambda slot: (abs(to_minutes(slot) - requested), slot))

        logger.debug(f"{len(nearby)} alternatives for doctor {doctor_id} around {requested_time} on {on_date}")
        return nearby[:limit] if limit else nearby
