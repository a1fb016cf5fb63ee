from __future__ import annotations

import logging
from datetime import date
from typing import List

from ..common.datetime_utils import now_local
from ..core.enums import DutyType
from ..core.exceptions import AlreadyPublishedError, StaffingError
from ..database.unit_of_work import UnitOfWork
from ..eligibility.service import record_duty
from .model import Allocation
from .selector import CandidateSelector

logger = logging.getLogger(__name__)


class DayAllocator:
    """Builds the full roster for one date inside the caller's unit of work.

    Any error leaves the unit to roll back, so a date is either fully
    allocated or untouched.
    """

    def __init__(self, selector: CandidateSelector):
        self._selector = selector

    def reset_draft(self, uow: UnitOfWork, *, day: date) -> int:
        """Undo the bookkeeping of a draft day's allocations, then drop them."""

        header = uow.rosters.get_day(day)
        if header is None:
            return 0
        if header.is_published:
            raise AlreadyPublishedError(day)

        current = uow.rosters.list_allocations(day=day)
        for alloc in current:
            # Reverse with the duty type the allocation was booked under, against
            # whoever was charged for it (a swapped punishment duty stays the debtor's).
            record_duty(
                uow.eligibility,
                person_id=alloc.charged_person_id,
                duty_type=header.duty_type,
                is_punishment=alloc.is_punishment,
                reverse=True,
            )

        if current:
            allocation_ids = [a.allocation_id for a in current]
            closed = uow.swaps.reject_open_for_allocations(allocation_ids=allocation_ids, responded_at=now_local())
            if closed:
                logger.info(f"Regenerating {day}: closed {closed} open swap(s) on replaced allocations")
            voided = uow.swaps.void_debts_for_allocations(allocation_ids=allocation_ids)
            if voided:
                logger.info(f"Regenerating {day}: voided {voided} swap debt(s) on replaced allocations")
        return uow.rosters.delete_allocations(day=day)

    def allocate(self, uow: UnitOfWork, *, day: date, duty_type: DutyType) -> List[Allocation]:
        # Neighbouring dates feed the fatigue check, so they are locked too.
        uow.lock_days(*self._selector.fatigue.window(day))
        removed = self.reset_draft(uow, day=day)
        if removed:
            logger.info(f"Regenerating {day}: reverted {removed} previous allocation(s)")

        uow.rosters.upsert_draft_day(day=day, duty_type=duty_type)

        created: List[Allocation] = []
        for post in uow.eligibility.list_posts():
            chosen = self._selector.select(uow, post=post, day=day, duty_type=duty_type)
            if chosen is None:
                logger.warning(f"No candidate for post '{post.name}' on {day} (years {post.allowed_years})")
                raise StaffingError(post.name, post.years)

            is_punishment = chosen.owes_punishment
            allocation_id = uow.rosters.create_allocation(
                person_id=chosen.person_id,
                post_id=post.post_id,
                day=day,
                is_punishment=is_punishment,
            )
            record_duty(
                uow.eligibility,
                person_id=chosen.person_id,
                duty_type=duty_type,
                is_punishment=is_punishment,
            )
            created.append(
                Allocation(
                    allocation_id=allocation_id,
                    person_id=chosen.person_id,
                    post_id=post.post_id,
                    day=day,
                    is_punishment=is_punishment,
                )
            )
        return created
