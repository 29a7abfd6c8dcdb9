"""
Contract Validity Checker

Decides whether a doctor holds an active contract on a given date.
"""

from dataclasses import dataclass
from datetime import date

from clinic_scheduling.domains.scheduling.application.ports.schedule_repository import IScheduleRepository

from ..entities.doctor import Contract
from ..value_objects.error_codes import SchedulingErrorCode


@dataclass(frozen=True)
class ContractCheck:
    """Outcome of a contract check."""

    valid: bool
    contract: Contract | None = None
    reason: SchedulingErrorCode | None = None


class ContractValidityChecker:
    """Read-only contract lookup for a (doctor, date)."""

    def __init__(self, schedule_repository: IScheduleRepository):
        self._schedules = schedule_repository

    async def check(self, doctor_id: int, on_date: date) -> ContractCheck:
        contract = await self._schedules.find_active_contract(doctor_id, on_date)
        if contract is None or not contract.covers(on_date):
            return ContractCheck(valid=False, reason=SchedulingErrorCode.NO_ACTIVE_CONTRACT)
        return ContractCheck(valid=True, contract=contract)
