from __future__ import annotations

import uuid
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import DebtStatus, SwapStatus
from ..database.mysql_base import as_date, fetchall, fetchone, in_clause
from .model import Debt, SwapRequest
from .repository import SwapRepository


def _fmt_ts(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else ""


class MySQLSwapRepository(SwapRepository):
    def __init__(self, cur):
        self._cur = cur

    # -------- Swap requests --------
    def create_swap(
        self,
        *,
        requester_id: str,
        substitute_id: str,
        allocation_id: str,
        reason: str,
        counter_allocation_id: Optional[str],
        created_at: datetime,
    ) -> str:
        swap_id = str(uuid.uuid4())
        self._cur.execute(
            """
            INSERT INTO swaps(
                swap_id, requester_id, substitute_id, allocation_id,
                counter_allocation_id, status, reason, created_at
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                swap_id,
                str(requester_id),
                str(substitute_id),
                str(allocation_id),
                counter_allocation_id,
                SwapStatus.PENDING.value,
                reason,
                created_at,
            ),
        )
        return swap_id

    def get_swap(self, swap_id: str) -> Optional[SwapRequest]:
        self._cur.execute(
            """
            SELECT swap_id, requester_id, substitute_id, allocation_id, counter_allocation_id,
                   status, reason, created_at, responded_at
            FROM swaps
            WHERE swap_id=%s
            FOR UPDATE
            """,
            (str(swap_id),),
        )
        r = fetchone(self._cur)
        if not r:
            return None
        return SwapRequest(
            swap_id=str(r["swap_id"]),
            requester_id=str(r["requester_id"]),
            substitute_id=str(r["substitute_id"]),
            allocation_id=str(r["allocation_id"]),
            counter_allocation_id=r.get("counter_allocation_id"),
            status=SwapStatus(r["status"]),
            reason=r.get("reason"),
            created_at=r["created_at"],
            responded_at=r.get("responded_at"),
        )

    def has_open_swap_for(self, *, allocation_id: str) -> bool:
        self._cur.execute(
            """
            SELECT EXISTS(
                SELECT 1 FROM swaps
                WHERE (allocation_id=%s OR counter_allocation_id=%s) AND status IN (%s, %s)
            ) AS hit
            """,
            (
                str(allocation_id),
                str(allocation_id),
                SwapStatus.PENDING.value,
                SwapStatus.AWAITING_SCHEDULER.value,
            ),
        )
        r = fetchone(self._cur)
        return bool(r and r["hit"])

    def update_status(
        self,
        *,
        swap_id: str,
        from_statuses: Iterable[SwapStatus],
        to_status: SwapStatus,
        responded_at: Optional[datetime] = None,
    ) -> bool:
        allowed = [s.value for s in from_statuses]
        self._cur.execute(
            f"""
            UPDATE swaps
            SET status=%s, responded_at=COALESCE(%s, responded_at)
            WHERE swap_id=%s AND status IN ({in_clause(allowed)})
            """,
            tuple([to_status.value, responded_at, str(swap_id)] + allowed),
        )
        return self._cur.rowcount > 0

    def reject_open_for_allocations(self, *, allocation_ids: Sequence[str], responded_at: datetime) -> int:
        ids = [str(x) for x in allocation_ids]
        if not ids:
            return 0
        placeholders = in_clause(ids)
        self._cur.execute(
            f"""
            UPDATE swaps
            SET status=%s, responded_at=%s
            WHERE status IN (%s, %s)
              AND (allocation_id IN ({placeholders}) OR counter_allocation_id IN ({placeholders}))
            """,
            tuple(
                [SwapStatus.REJECTED.value, responded_at, SwapStatus.PENDING.value, SwapStatus.AWAITING_SCHEDULER.value]
                + ids
                + ids
            ),
        )
        return int(self._cur.rowcount)

    def list_for_person(self, *, person_id: str, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[dict]:
        self._cur.execute(
            """
            SELECT t.swap_id, t.status, t.reason, t.created_at, t.responded_at,
                   t.requester_id, u1.name AS requester_name,
                   t.substitute_id, u2.name AS substitute_name,
                   a.roster_date, p.name AS post_name
            FROM swaps t
            JOIN users u1 ON u1.id = t.requester_id
            JOIN users u2 ON u2.id = t.substitute_id
            LEFT JOIN allocations a ON a.allocation_id = t.allocation_id
            LEFT JOIN posts p ON p.post_id = a.post_id
            WHERE t.requester_id=%s OR t.substitute_id=%s
            ORDER BY t.created_at DESC
            LIMIT %s
            """,
            (str(person_id), str(person_id), int(limit)),
        )
        out: list[dict] = []
        for r in fetchall(self._cur):
            out.append(
                {
                    "swap_id": str(r["swap_id"]),
                    "status": r["status"],
                    "reason": r.get("reason") or "",
                    "requester_id": str(r["requester_id"]),
                    "requester_name": r["requester_name"],
                    "substitute_id": str(r["substitute_id"]),
                    "substitute_name": r["substitute_name"],
                    "date": as_date(r["roster_date"]).isoformat() if r.get("roster_date") else "",
                    "post_name": r.get("post_name") or "",
                    "created_at": _fmt_ts(r.get("created_at")),
                    "responded_at": _fmt_ts(r.get("responded_at")),
                }
            )
        return out

    def list_awaiting_scheduler(self) -> Sequence[dict]:
        self._cur.execute(
            """
            SELECT t.swap_id, t.reason,
                   u1.name AS requester_name, u2.name AS substitute_name,
                   a.roster_date, p.name AS post_name
            FROM swaps t
            JOIN users u1 ON u1.id = t.requester_id
            JOIN users u2 ON u2.id = t.substitute_id
            JOIN allocations a ON a.allocation_id = t.allocation_id
            JOIN posts p ON p.post_id = a.post_id
            WHERE t.status=%s
            ORDER BY a.roster_date ASC
            """,
            (SwapStatus.AWAITING_SCHEDULER.value,),
        )
        return [
            {
                "swap_id": str(r["swap_id"]),
                "requester_name": r["requester_name"],
                "substitute_name": r["substitute_name"],
                "date": as_date(r["roster_date"]).isoformat(),
                "post_name": r["post_name"],
                "reason": r.get("reason") or "",
            }
            for r in fetchall(self._cur)
        ]

    # -------- Debts --------
    def create_debt(self, *, debtor_id: str, creditor_id: str, origin_swap_id: str, created_at: datetime) -> int:
        self._cur.execute(
            """
            INSERT INTO debts(debtor_id, creditor_id, origin_swap_id, status, created_at)
            VALUES(%s,%s,%s,%s,%s)
            """,
            (str(debtor_id), str(creditor_id), str(origin_swap_id), DebtStatus.PENDING.value, created_at),
        )
        return int(self._cur.lastrowid)

    def get_debt(self, debt_id: int) -> Optional[Debt]:
        self._cur.execute(
            """
            SELECT debt_id, debtor_id, creditor_id, origin_swap_id, status, created_at, paid_at
            FROM debts
            WHERE debt_id=%s
            """,
            (int(debt_id),),
        )
        r = fetchone(self._cur)
        if not r:
            return None
        return Debt(
            debt_id=int(r["debt_id"]),
            debtor_id=str(r["debtor_id"]),
            creditor_id=str(r["creditor_id"]),
            origin_swap_id=r.get("origin_swap_id"),
            status=DebtStatus(r["status"]),
            created_at=r["created_at"],
            paid_at=r.get("paid_at"),
        )

    def settle_debt(self, *, debt_id: int, paid_at: datetime) -> bool:
        self._cur.execute(
            "UPDATE debts SET status=%s, paid_at=%s WHERE debt_id=%s AND status=%s",
            (DebtStatus.PAID.value, paid_at, int(debt_id), DebtStatus.PENDING.value),
        )
        return self._cur.rowcount > 0

    def void_debts_for_allocations(self, *, allocation_ids: Sequence[str]) -> int:
        ids = [str(x) for x in allocation_ids]
        if not ids:
            return 0
        self._cur.execute(
            f"""
            UPDATE debts d
            JOIN swaps t ON t.swap_id = d.origin_swap_id
            SET d.status=%s
            WHERE d.status=%s AND t.allocation_id IN ({in_clause(ids)})
            """,
            tuple([DebtStatus.VOID.value, DebtStatus.PENDING.value] + ids),
        )
        return int(self._cur.rowcount)

    def list_debts_for(self, *, person_id: str) -> Sequence[dict]:
        self._cur.execute(
            """
            SELECT d.debt_id, d.status, d.created_at, d.paid_at, d.origin_swap_id,
                   d.debtor_id, u1.name AS debtor_name,
                   d.creditor_id, u2.name AS creditor_name
            FROM debts d
            JOIN users u1 ON u1.id = d.debtor_id
            JOIN users u2 ON u2.id = d.creditor_id
            WHERE d.debtor_id=%s OR d.creditor_id=%s
            ORDER BY d.created_at DESC
            """,
            (str(person_id), str(person_id)),
        )
        return [
            {
                "debt_id": int(r["debt_id"]),
                "status": r["status"],
                "debtor_id": str(r["debtor_id"]),
                "debtor_name": r["debtor_name"],
                "creditor_id": str(r["creditor_id"]),
                "creditor_name": r["creditor_name"],
                "origin_swap_id": r.get("origin_swap_id") or "",
                "created_at": _fmt_ts(r.get("created_at")),
                "paid_at": _fmt_ts(r.get("paid_at")),
            }
            for r in fetchall(self._cur)
        ]
