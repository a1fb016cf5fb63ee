from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator

from ..core.constants import WEEKDAY_LABELS, WEEKEND_ROUTINE_WEEKDAYS
from ..core.enums import DutyType
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def iter_days(start: date, end: date) -> Iterator[date]:
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def duty_type_for(day: date) -> DutyType:
    if day.weekday() in WEEKEND_ROUTINE_WEEKDAYS:
        return DutyType.WEEKEND
    return DutyType.NORMAL


def weekday_label(day: date) -> str:
    return f"{WEEKDAY_LABELS[day.weekday()]}, {day.strftime('%d/%m')}"
