from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import DayStatus, DutyType


@dataclass(frozen=True)
class DayHeader:
    day: date
    duty_type: DutyType
    status: DayStatus

    @property
    def is_published(self) -> bool:
        return self.status == DayStatus.PUBLISHED


@dataclass(frozen=True)
class Allocation:
    allocation_id: str
    person_id: str
    post_id: int
    day: date
    is_punishment: bool = False
    # Whose punishment balance paid for this duty; survives swaps.
    punishment_debtor_id: Optional[str] = None

    @property
    def charged_person_id(self) -> str:
        """Person whose bookkeeping this duty was booked against."""

        if self.is_punishment and self.punishment_debtor_id:
            return self.punishment_debtor_id
        return self.person_id
