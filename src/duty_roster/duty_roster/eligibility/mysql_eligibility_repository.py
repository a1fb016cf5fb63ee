from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import DutyType, Gender
from ..database.mysql_base import as_date, fetchall, fetchone
from .model import Candidate, Post, UnavailabilityWindow
from .repository import EligibilityRepository

_PERSON_COLUMNS = """
    u.id, u.name, u.gender, u.class_label, u.year,
    u.normal_duty_count, u.weekend_duty_count, u.punishment_balance
"""

# One fixed statement per duty type; the counter column is never built from input.
_CREDIT_SQL = {
    DutyType.NORMAL: "UPDATE users SET normal_duty_count = normal_duty_count + %s WHERE id=%s",
    DutyType.WEEKEND: "UPDATE users SET weekend_duty_count = weekend_duty_count + %s WHERE id=%s",
}


def _candidate(r: dict) -> Candidate:
    return Candidate(
        person_id=str(r["id"]),
        name=r["name"],
        gender=Gender(r["gender"]),
        class_label=r.get("class_label") or "",
        year=int(r["year"]),
        normal_duty_count=int(r["normal_duty_count"] or 0),
        weekend_duty_count=int(r["weekend_duty_count"] or 0),
        punishment_balance=int(r["punishment_balance"] or 0),
    )


class MySQLEligibilityRepository(EligibilityRepository):
    """Eligibility reads and counter writes on the cursor of one unit of work."""

    def __init__(self, cur):
        self._cur = cur

    def list_posts(self) -> Sequence[Post]:
        self._cur.execute(
            """
            SELECT post_id, name, gender_restriction, allowed_years, priority
            FROM posts
            ORDER BY priority DESC, name ASC, post_id ASC
            """
        )
        return [
            Post(
                post_id=int(r["post_id"]),
                name=r["name"],
                gender_restriction=Gender(r["gender_restriction"]),
                allowed_years=r["allowed_years"] or "",
                priority=int(r["priority"] or 1),
            )
            for r in fetchall(self._cur)
        ]

    def list_people(self, *, gender: Optional[Gender] = None) -> Sequence[Candidate]:
        clauses = ["u.is_active=1"]
        params: list[object] = []
        if gender is not None:
            clauses.append("u.gender=%s")
            params.append(gender.value)

        where = " AND ".join(clauses)
        self._cur.execute(
            f"""
            SELECT {_PERSON_COLUMNS}
            FROM users u
            WHERE {where}
            """,
            tuple(params),
        )
        return [_candidate(r) for r in fetchall(self._cur)]

    def get_person(self, person_id: str) -> Optional[Candidate]:
        self._cur.execute(
            f"SELECT {_PERSON_COLUMNS} FROM users u WHERE u.id=%s",
            (str(person_id),),
        )
        r = fetchone(self._cur)
        return _candidate(r) if r else None

    def list_unavailability(self, *, on_date: date) -> Sequence[UnavailabilityWindow]:
        self._cur.execute(
            """
            SELECT window_id, user_id, start_date, end_date, reason
            FROM unavailability
            WHERE %s BETWEEN start_date AND end_date
            """,
            (on_date,),
        )
        return [
            UnavailabilityWindow(
                window_id=int(r["window_id"]),
                person_id=str(r["user_id"]),
                start_date=as_date(r["start_date"]),
                end_date=as_date(r["end_date"]),
                reason=r.get("reason"),
            )
            for r in fetchall(self._cur)
        ]

    def add_duty_credit(self, *, person_id: str, duty_type: DutyType, delta: int) -> None:
        self._cur.execute(_CREDIT_SQL[duty_type], (int(delta), str(person_id)))

    def add_punishment(self, *, person_id: str, delta: int) -> None:
        self._cur.execute(
            "UPDATE users SET punishment_balance = punishment_balance + %s WHERE id=%s",
            (int(delta), str(person_id)),
        )

    def list_indebted(self) -> Sequence[Candidate]:
        self._cur.execute(
            f"""
            SELECT {_PERSON_COLUMNS}
            FROM users u
            WHERE u.punishment_balance > 0
            ORDER BY u.punishment_balance DESC, u.name ASC
            """
        )
        return [_candidate(r) for r in fetchall(self._cur)]
