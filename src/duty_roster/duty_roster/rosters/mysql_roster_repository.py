from __future__ import annotations

import uuid
from datetime import date
from typing import Iterable, Optional, Sequence

from ..core.enums import DayStatus, DutyType
from ..database.mysql_base import as_date, fetchall, fetchone, in_clause
from .model import Allocation, DayHeader
from .repository import RosterRepository


def _allocation(r: dict) -> Allocation:
    return Allocation(
        allocation_id=str(r["allocation_id"]),
        person_id=str(r["user_id"]),
        post_id=int(r["post_id"]),
        day=as_date(r["roster_date"]),
        is_punishment=bool(r["is_punishment"]),
        punishment_debtor_id=str(r["punishment_debtor_id"]) if r.get("punishment_debtor_id") else None,
    )


class MySQLRosterRepository(RosterRepository):
    def __init__(self, cur):
        self._cur = cur

    # -------- Day headers --------
    def get_day(self, day: date) -> Optional[DayHeader]:
        # Locking read: the header row is the serialization point for its date.
        self._cur.execute(
            "SELECT roster_date, duty_type, status FROM day_headers WHERE roster_date=%s FOR UPDATE",
            (day,),
        )
        r = fetchone(self._cur)
        if not r:
            return None
        return DayHeader(day=as_date(r["roster_date"]), duty_type=DutyType(r["duty_type"]), status=DayStatus(r["status"]))

    def upsert_draft_day(self, *, day: date, duty_type: DutyType) -> None:
        self._cur.execute(
            """
            INSERT INTO day_headers(roster_date, duty_type, status)
            VALUES(%s,%s,%s)
            ON DUPLICATE KEY UPDATE duty_type=VALUES(duty_type), status=VALUES(status)
            """,
            (day, duty_type.value, DayStatus.DRAFT.value),
        )

    def set_day_status(self, *, day: date, from_status: DayStatus, to_status: DayStatus) -> bool:
        self._cur.execute(
            "UPDATE day_headers SET status=%s WHERE roster_date=%s AND status=%s",
            (to_status.value, day, from_status.value),
        )
        return self._cur.rowcount > 0

    def publish_range(self, *, start: date, end: date) -> int:
        self._cur.execute(
            """
            UPDATE day_headers
            SET status=%s
            WHERE roster_date BETWEEN %s AND %s AND status=%s
            """,
            (DayStatus.PUBLISHED.value, start, end, DayStatus.DRAFT.value),
        )
        return int(self._cur.rowcount)

    # -------- Allocations --------
    def list_allocations(self, *, day: date) -> Sequence[Allocation]:
        self._cur.execute(
            """
            SELECT allocation_id, user_id, post_id, roster_date, is_punishment, punishment_debtor_id
            FROM allocations
            WHERE roster_date=%s
            ORDER BY post_id ASC
            """,
            (day,),
        )
        return [_allocation(r) for r in fetchall(self._cur)]

    def delete_allocations(self, *, day: date) -> int:
        self._cur.execute("DELETE FROM allocations WHERE roster_date=%s", (day,))
        return int(self._cur.rowcount)

    def create_allocation(self, *, person_id: str, post_id: int, day: date, is_punishment: bool) -> str:
        allocation_id = str(uuid.uuid4())
        self._cur.execute(
            """
            INSERT INTO allocations(allocation_id, user_id, post_id, roster_date, is_punishment, punishment_debtor_id)
            VALUES(%s,%s,%s,%s,%s,%s)
            """,
            (
                allocation_id,
                str(person_id),
                int(post_id),
                day,
                1 if is_punishment else 0,
                str(person_id) if is_punishment else None,
            ),
        )
        return allocation_id

    def get_allocation(self, allocation_id: str) -> Optional[Allocation]:
        self._cur.execute(
            """
            SELECT allocation_id, user_id, post_id, roster_date, is_punishment, punishment_debtor_id
            FROM allocations
            WHERE allocation_id=%s
            FOR UPDATE
            """,
            (str(allocation_id),),
        )
        r = fetchone(self._cur)
        return _allocation(r) if r else None

    def reassign_allocation(self, *, allocation_id: str, from_person_id: str, to_person_id: str) -> bool:
        self._cur.execute(
            "UPDATE allocations SET user_id=%s WHERE allocation_id=%s AND user_id=%s",
            (str(to_person_id), str(allocation_id), str(from_person_id)),
        )
        return self._cur.rowcount > 0

    def has_allocation_between(
        self,
        *,
        person_id: str,
        start: date,
        end: date,
        exclude_ids: Iterable[str] = (),
    ) -> bool:
        clauses = ["user_id=%s", "roster_date BETWEEN %s AND %s"]
        params: list[object] = [str(person_id), start, end]
        excluded = [str(x) for x in exclude_ids]
        if excluded:
            clauses.append(f"allocation_id NOT IN ({in_clause(excluded)})")
            params.extend(excluded)

        where = " AND ".join(clauses)
        self._cur.execute(f"SELECT EXISTS(SELECT 1 FROM allocations WHERE {where}) AS hit", tuple(params))
        r = fetchone(self._cur)
        return bool(r and r["hit"])

    def list_roster_rows(self, *, start: date, end: date) -> Sequence[dict]:
        self._cur.execute(
            """
            SELECT
                d.roster_date,
                d.duty_type,
                d.status,
                a.allocation_id,
                a.user_id,
                a.is_punishment,
                u.name AS person_name,
                u.class_label,
                p.name AS post_name,
                p.priority
            FROM day_headers d
            LEFT JOIN allocations a ON a.roster_date = d.roster_date
            LEFT JOIN users u ON u.id = a.user_id
            LEFT JOIN posts p ON p.post_id = a.post_id
            WHERE d.roster_date BETWEEN %s AND %s
            ORDER BY d.roster_date ASC, p.priority DESC, p.name ASC
            """,
            (start, end),
        )
        out: list[dict] = []
        for r in fetchall(self._cur):
            out.append(
                {
                    "date": as_date(r["roster_date"]),
                    "duty_type": r["duty_type"],
                    "status": r["status"],
                    "allocation_id": r.get("allocation_id"),
                    "person_id": str(r["user_id"]) if r.get("user_id") is not None else None,
                    "person_name": r.get("person_name") or "",
                    "class_label": r.get("class_label") or "",
                    "post_name": r.get("post_name") or "",
                    "is_punishment": bool(r.get("is_punishment")),
                }
            )
        return out
