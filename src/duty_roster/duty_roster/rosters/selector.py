from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..core.enums import DutyType
from ..eligibility.model import Candidate, Post
from ..eligibility.service import candidate_pool
from ..database.unit_of_work import UnitOfWork
from .fatigue import FatigueChecker

logger = logging.getLogger(__name__)


class CandidateSelector:
    """Greedy first-fit over the fairness-ranked pool.

    The pool is already ordered by fairness priority, so the first person who
    holds an accepted year and is rested is the most deserving eligible one.
    """

    def __init__(self, fatigue: FatigueChecker):
        self._fatigue = fatigue

    @property
    def fatigue(self) -> FatigueChecker:
        return self._fatigue

    def select(self, uow: UnitOfWork, *, post: Post, day: date, duty_type: DutyType) -> Optional[Candidate]:
        pool = candidate_pool(uow.eligibility, post=post, on_date=day, duty_type=duty_type)
        for candidate in pool:
            if not post.accepts_year(candidate.year):
                continue
            if self._fatigue.is_fatigued(uow.rosters, person_id=candidate.person_id, day=day):
                continue
            logger.debug(f"Post '{post.name}' on {day}: picked {candidate.person_id} from {len(pool)} candidates")
            return candidate
        return None
