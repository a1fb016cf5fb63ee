from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import DayStatus, DutyType
from .model import Allocation, DayHeader


class RosterRepository(Protocol):
    # Day headers
    def get_day(self, day: date) -> Optional[DayHeader]:
        raise NotImplementedError

    def upsert_draft_day(self, *, day: date, duty_type: DutyType) -> None:
        raise NotImplementedError

    def set_day_status(self, *, day: date, from_status: DayStatus, to_status: DayStatus) -> bool:
        """Conditional transition; False when the day is not in from_status."""

        raise NotImplementedError

    def publish_range(self, *, start: date, end: date) -> int:
        """Move every Draft day in [start, end] to Published; returns the count."""

        raise NotImplementedError

    # Allocations
    def list_allocations(self, *, day: date) -> Sequence[Allocation]:
        raise NotImplementedError

    def delete_allocations(self, *, day: date) -> int:
        raise NotImplementedError

    def create_allocation(self, *, person_id: str, post_id: int, day: date, is_punishment: bool) -> str:
        """Returns allocation_id."""

        raise NotImplementedError

    def get_allocation(self, allocation_id: str) -> Optional[Allocation]:
        raise NotImplementedError

    def reassign_allocation(self, *, allocation_id: str, from_person_id: str, to_person_id: str) -> bool:
        raise NotImplementedError

    def has_allocation_between(
        self,
        *,
        person_id: str,
        start: date,
        end: date,
        exclude_ids: Iterable[str] = (),
    ) -> bool:
        raise NotImplementedError

    def list_roster_rows(self, *, start: date, end: date) -> Sequence[dict]:
        """Day headers left-joined with allocations, people and posts (UI rows)."""

        raise NotImplementedError
