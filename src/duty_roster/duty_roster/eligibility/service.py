from __future__ import annotations

from datetime import date
from typing import List, Optional

from ..core.enums import DutyType, Gender
from .model import Candidate, Post, priority_key
from .repository import EligibilityRepository


def candidate_pool(
    people: EligibilityRepository,
    *,
    post: Post,
    on_date: date,
    duty_type: DutyType,
) -> List[Candidate]:
    """Gender-matching, available people ranked by fairness priority.

    Seniority and fatigue are not applied here; the selector checks them in
    ranking order.
    """

    gender: Optional[Gender] = None if post.gender_restriction == Gender.MIXED else post.gender_restriction
    away = {w.person_id for w in people.list_unavailability(on_date=on_date)}
    pool = [c for c in people.list_people(gender=gender) if c.person_id not in away and post.accepts_gender(c.gender)]
    pool.sort(key=priority_key(duty_type))
    return pool


def record_duty(
    people: EligibilityRepository,
    *,
    person_id: str,
    duty_type: DutyType,
    is_punishment: bool,
    reverse: bool = False,
) -> None:
    """Apply (or undo) the bookkeeping of one performed duty.

    A punishment duty pays one unit of debt and leaves the fairness counter
    alone; an ordinary duty adds one to the counter of its duty type.
    """

    step = -1 if reverse else 1
    if is_punishment:
        people.add_punishment(person_id=person_id, delta=-step)
    else:
        people.add_duty_credit(person_id=person_id, duty_type=duty_type, delta=step)


def transfer_duty_credit(
    people: EligibilityRepository,
    *,
    from_person_id: str,
    to_person_id: str,
    duty_type: DutyType,
) -> None:
    people.add_duty_credit(person_id=from_person_id, duty_type=duty_type, delta=-1)
    people.add_duty_credit(person_id=to_person_id, duty_type=duty_type, delta=1)
