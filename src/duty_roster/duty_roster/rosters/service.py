from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Union

from ..common.datetime_utils import duty_type_for, iter_days, weekday_label
from ..common.validators import require_date_range, require_scheduler
from ..core.enums import DayStatus, DutyType, Role
from ..core.exceptions import (
    DomainError,
    NothingToPublishError,
    NotFoundError,
    NotPublishedError,
    PeriodGenerationError,
)
from ..database.unit_of_work import UnitOfWorkFactory
from .allocator import DayAllocator

logger = logging.getLogger(__name__)


class RosterService:
    """Generation, publication and errata of day rosters.

    Every date is its own unit of work: a failure rolls back that date only,
    and dates committed before it stay committed.
    """

    def __init__(self, uow_factory: UnitOfWorkFactory, allocator: DayAllocator):
        self._uow = uow_factory
        self._allocator = allocator

    def generate_day(self, *, current_role: Role, day: date, duty_type: Union[DutyType, str]) -> str:
        require_scheduler(current_role)
        duty = duty_type if isinstance(duty_type, DutyType) else DutyType.parse(duty_type)
        return self._generate_day(day, duty)

    def _generate_day(self, day: date, duty_type: DutyType) -> str:
        logger.info(f"Generating roster for {day} ({duty_type.value})")
        with self._uow() as uow:
            created = self._allocator.allocate(uow, day=day, duty_type=duty_type)
        return f"Roster for {day.isoformat()} ({duty_type.value}) generated with {len(created)} allocation(s)"

    def generate_period(self, *, current_role: Role, start: date, end: date) -> int:
        require_scheduler(current_role)
        require_date_range(start, end)

        generated = 0
        for day in iter_days(start, end):
            try:
                self._generate_day(day, duty_type_for(day))
            except DomainError as e:
                logger.warning(f"Period {start}..{end} stopped at {day} after {generated} day(s): {e}")
                raise PeriodGenerationError(day, e, generated) from e
            generated += 1

        logger.info(f"Period {start}..{end} generated ({generated} day(s))")
        return generated

    def publish(self, *, current_role: Role, start: date, end: date) -> int:
        require_scheduler(current_role)
        require_date_range(start, end)

        with self._uow() as uow:
            count = uow.rosters.publish_range(start=start, end=end)
        if count == 0:
            raise NothingToPublishError(f"No draft days to publish between {start.isoformat()} and {end.isoformat()}")

        logger.info(f"Published {count} day(s) between {start} and {end}")
        return count

    def reopen(self, *, current_role: Role, day: date) -> None:
        """Errata: bring a published day back to Draft."""

        require_scheduler(current_role)
        with self._uow() as uow:
            uow.lock_days(day)
            header = uow.rosters.get_day(day)
            if header is None:
                raise NotFoundError(f"No roster exists for {day.isoformat()}")
            if not header.is_published:
                raise NotPublishedError(f"Roster for {day.isoformat()} is not published; nothing to reopen")
            if not uow.rosters.set_day_status(day=day, from_status=DayStatus.PUBLISHED, to_status=DayStatus.DRAFT):
                raise NotPublishedError(f"Roster for {day.isoformat()} is not published; nothing to reopen")

        logger.info(f"Errata: {day} reopened as draft")

    def roster_view(self, *, start: date, end: date, viewer_id: Optional[str] = None) -> dict:
        require_date_range(start, end)
        with self._uow() as uow:
            rows = uow.rosters.list_roster_rows(start=start, end=end)

        days: dict[date, dict] = {}
        for r in rows:
            entry = days.get(r["date"])
            if entry is None:
                entry = {
                    "date": r["date"].isoformat(),
                    "label": weekday_label(r["date"]),
                    "duty_type": r["duty_type"],
                    "status": r["status"],
                    "allocations": [],
                }
                days[r["date"]] = entry

            if r["allocation_id"]:
                entry["allocations"].append(
                    {
                        "allocation_id": r["allocation_id"],
                        "post": r["post_name"],
                        "person_id": r["person_id"],
                        "person_name": r["person_name"],
                        "class_label": r["class_label"],
                        "is_punishment": r["is_punishment"],
                        "is_mine": viewer_id is not None and r["person_id"] == str(viewer_id),
                    }
                )

        ordered = [days[d] for d in sorted(days)]
        return {
            "published": [d for d in ordered if d["status"] == DayStatus.PUBLISHED.value],
            "drafts": [d for d in ordered if d["status"] != DayStatus.PUBLISHED.value],
        }

    def scheduler_dashboard(self, *, current_role: Role) -> dict:
        require_scheduler(current_role)
        with self._uow() as uow:
            indebted = uow.eligibility.list_indebted()
            awaiting = uow.swaps.list_awaiting_scheduler()

        return {
            "punished": [
                {"person_id": c.person_id, "name": c.name, "balance": c.punishment_balance} for c in indebted
            ],
            "awaiting_swaps": list(awaiting),
        }
