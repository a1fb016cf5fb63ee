from __future__ import annotations

from enum import Enum

from .exceptions import ValidationError


class Role(str, Enum):
    """Account roles used for authorization."""

    ADMIN = "admin"
    SCHEDULER = "scheduler"
    MEMBER = "member"


SCHEDULING_ROLES = frozenset({Role.ADMIN, Role.SCHEDULER})


class Gender(str, Enum):
    MALE = "M"
    FEMALE = "F"
    MIXED = "Mixed"


class DutyType(str, Enum):
    """Routine classification of a day; each one has its own fairness counter."""

    NORMAL = "RN"
    WEEKEND = "RD"

    @classmethod
    def parse(cls, value: str) -> "DutyType":
        try:
            return cls(str(value or "").strip().upper())
        except ValueError:
            raise ValidationError(f"Invalid duty type {value!r} (expected RN or RD)")


class DayStatus(str, Enum):
    DRAFT = "Draft"
    PUBLISHED = "Published"


class SwapStatus(str, Enum):
    """Swap workflow: substitute consent first, then scheduler approval."""

    PENDING = "Pending"
    AWAITING_SCHEDULER = "AwaitingScheduler"
    APPROVED = "Approved"
    REJECTED = "Rejected"


OPEN_SWAP_STATUSES = frozenset({SwapStatus.PENDING, SwapStatus.AWAITING_SCHEDULER})


class SwapAction(str, Enum):
    ACCEPT = "accept"
    DECLINE = "decline"


class DebtStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    # Origin duty was deleted by a regeneration before anyone served it.
    VOID = "VOID"
