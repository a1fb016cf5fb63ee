from __future__ import annotations

from datetime import date

import pytest

from src.duty_roster.duty_roster.common.datetime_utils import duty_type_for, iter_days, parse_iso_date, weekday_label
from src.duty_roster.duty_roster.core.enums import DutyType
from src.duty_roster.duty_roster.core.exceptions import ValidationError


def test_parse_iso_date():
    assert parse_iso_date(" 2030-03-04 ") == date(2030, 3, 4)
    for bad in ("", "04/03/2030", "2030-02-30"):
        with pytest.raises(ValidationError):
            parse_iso_date(bad)


def test_friday_to_sunday_follow_weekend_routine():
    week = list(iter_days(date(2030, 3, 4), date(2030, 3, 10)))
    assert [duty_type_for(d) for d in week] == [DutyType.NORMAL] * 4 + [DutyType.WEEKEND] * 3


def test_iter_days_is_inclusive_and_empty_for_inverted_range():
    assert list(iter_days(date(2030, 3, 4), date(2030, 3, 4))) == [date(2030, 3, 4)]
    assert list(iter_days(date(2030, 3, 5), date(2030, 3, 4))) == []


def test_weekday_label():
    assert weekday_label(date(2030, 3, 8)) == "Friday, 08/03"
