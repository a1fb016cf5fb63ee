from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from ..core.enums import DutyType, Gender
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Post:
    post_id: int
    name: str
    gender_restriction: Gender
    allowed_years: str
    priority: int = 1

    @property
    def years(self) -> tuple[int, ...]:
        """Accepted seniority years, parsed from the stored "1,2,3" list."""

        out: list[int] = []
        for part in self.allowed_years.split(","):
            part = part.strip()
            if part.lstrip("-").isdigit():
                out.append(int(part))
        return tuple(out)

    def accepts_year(self, year: int) -> bool:
        # Strict membership: a post for years {1,3} does not take year 2.
        return int(year) in self.years

    def accepts_gender(self, gender: Gender) -> bool:
        return self.gender_restriction == Gender.MIXED or self.gender_restriction == gender


@dataclass(frozen=True)
class Candidate:
    """Scheduling view of an account: identity plus fairness counters."""

    person_id: str
    name: str
    gender: Gender
    class_label: str
    year: int
    normal_duty_count: int
    weekend_duty_count: int
    punishment_balance: int

    def __post_init__(self) -> None:
        if self.punishment_balance < 0:
            raise ValidationError(f"Person {self.person_id} has a negative punishment balance")

    def counter(self, duty_type: DutyType) -> int:
        if duty_type == DutyType.WEEKEND:
            return self.weekend_duty_count
        return self.normal_duty_count

    @property
    def owes_punishment(self) -> bool:
        return self.punishment_balance > 0


@dataclass(frozen=True)
class UnavailabilityWindow:
    window_id: int
    person_id: str
    start_date: date
    end_date: date
    reason: Optional[str] = None

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


def natural_id_key(person_id: str) -> tuple:
    pid = str(person_id)
    if pid.isdigit():
        return (0, int(pid), pid)
    return (1, 0, pid)


def priority_key(duty_type: DutyType) -> Callable[[Candidate], tuple]:
    """Debtors first, then fewest duties of this type, then id."""

    def key(c: Candidate) -> tuple:
        return (-c.punishment_balance, c.counter(duty_type), natural_id_key(c.person_id))

    return key


def post_order_key(post: Post) -> tuple:
    return (-post.priority, post.name, post.post_id)
