from __future__ import annotations

from datetime import date
from typing import Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""

    kind = "domain_error"

    def details(self) -> dict:
        return {}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "validation"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    kind = "forbidden"


class NotFoundError(DomainError):
    kind = "not_found"


class StateConflictError(DomainError):
    """Raised when an entity is not in the state an operation requires."""

    kind = "state_conflict"


class AlreadyPublishedError(StateConflictError):
    kind = "already_published"

    def __init__(self, day: date):
        super().__init__(f"Roster for {day.isoformat()} is already published; reopen it with an errata first")
        self.day = day

    def details(self) -> dict:
        return {"date": self.day.isoformat()}


class NotPublishedError(StateConflictError):
    kind = "not_published"


class NothingToPublishError(StateConflictError):
    """Recoverable: the range holds no draft days."""

    kind = "nothing_to_publish"


class SwapNotPendingError(StateConflictError):
    kind = "not_found_or_not_pending"


class AlreadyResolvedError(StateConflictError):
    kind = "already_resolved"


class LockUnavailableError(StateConflictError):
    kind = "busy"


class StaffingError(DomainError):
    """No eligible, rested candidate exists for a post."""

    kind = "staffing"

    def __init__(self, post_name: str, required_years: Sequence[int]):
        years = ",".join(str(y) for y in required_years)
        super().__init__(
            f"Nobody available for post '{post_name}'. Check the year restriction ({years}) or staffing levels"
        )
        self.post_name = post_name
        self.required_years = tuple(required_years)

    def details(self) -> dict:
        return {"blocking_post_name": self.post_name, "required_years": list(self.required_years)}


class FatigueViolationError(DomainError):
    """Taking the duty would leave the person without 24h of rest."""

    kind = "fatigue_violation"

    def __init__(self, person_id: str, day: date, message: Optional[str] = None):
        super().__init__(
            message or f"Person {person_id} already has a duty within one day of {day.isoformat()}"
        )
        self.person_id = person_id
        self.day = day

    def details(self) -> dict:
        return {"person_id": self.person_id, "date": self.day.isoformat()}


class PeriodGenerationError(DomainError):
    """Period generation stopped at the first failing date."""

    kind = "period_failed"

    def __init__(self, failed_date: date, cause: DomainError, days_generated: int):
        super().__init__(f"Generation stopped at {failed_date.isoformat()}: {cause}")
        self.failed_date = failed_date
        self.cause = cause
        self.reason = str(cause)
        self.days_generated = days_generated

    def details(self) -> dict:
        return {
            "failed_date": self.failed_date.isoformat(),
            "reason": self.reason,
            "cause": self.cause.kind,
            "days_generated": self.days_generated,
            **self.cause.details(),
        }
