from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, List

from ..core.constants import FATIGUE_WINDOW_DAYS
from ..core.exceptions import FatigueViolationError
from .repository import RosterRepository


class FatigueChecker:
    """Minimum-rest rule: no two duties within `window_days` of each other.

    Checks run against the caller's unit of work, so allocations written
    earlier in the same pass are visible.
    """

    def __init__(self, window_days: int = FATIGUE_WINDOW_DAYS):
        self._window = timedelta(days=int(window_days))

    def window(self, day: date) -> List[date]:
        """Dates whose allocations decide whether `day` is rested."""

        span = self._window.days
        return [day + timedelta(days=offset) for offset in range(-span, span + 1)]

    def is_fatigued(
        self,
        rosters: RosterRepository,
        *,
        person_id: str,
        day: date,
        exclude_allocation_ids: Iterable[str] = (),
    ) -> bool:
        return rosters.has_allocation_between(
            person_id=person_id,
            start=day - self._window,
            end=day + self._window,
            exclude_ids=tuple(exclude_allocation_ids),
        )

    def ensure_rested(
        self,
        rosters: RosterRepository,
        *,
        person_id: str,
        day: date,
        exclude_allocation_ids: Iterable[str] = (),
    ) -> None:
        if self.is_fatigued(rosters, person_id=person_id, day=day, exclude_allocation_ids=exclude_allocation_ids):
            raise FatigueViolationError(person_id, day)
