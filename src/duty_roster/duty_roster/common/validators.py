from __future__ import annotations

from datetime import date

from ..core.enums import SCHEDULING_ROLES, Role
from ..core.exceptions import AuthorizationError, ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_date_range(start: date, end: date) -> None:
    if end < start:
        raise ValidationError("End date must be on or after the start date")


def require_scheduler(current_role: Role) -> None:
    if current_role not in SCHEDULING_ROLES:
        raise AuthorizationError("Only schedulers can perform this action")
