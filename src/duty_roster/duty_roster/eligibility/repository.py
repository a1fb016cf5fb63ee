from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import DutyType, Gender
from .model import Candidate, Post, UnavailabilityWindow


class EligibilityRepository(Protocol):
    def list_posts(self) -> Sequence[Post]:
        """All posts in allocation order (priority desc, name, id)."""

        raise NotImplementedError

    def list_people(self, *, gender: Optional[Gender] = None) -> Sequence[Candidate]:
        """People of the given gender, or everybody when gender is None."""

        raise NotImplementedError

    def get_person(self, person_id: str) -> Optional[Candidate]:
        raise NotImplementedError

    def list_unavailability(self, *, on_date: date) -> Sequence[UnavailabilityWindow]:
        """Windows covering on_date."""

        raise NotImplementedError

    def add_duty_credit(self, *, person_id: str, duty_type: DutyType, delta: int) -> None:
        raise NotImplementedError

    def add_punishment(self, *, person_id: str, delta: int) -> None:
        raise NotImplementedError

    def list_indebted(self) -> Sequence[Candidate]:
        """People with a positive punishment balance, largest debt first."""

        raise NotImplementedError
