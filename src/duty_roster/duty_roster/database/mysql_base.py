from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from ..core.constants import DEFAULT_ISOLATION_LEVEL
from .connection import DatabaseConnection


@contextmanager
def transaction(
    conn_factory: DatabaseConnection,
    *,
    isolation_level: str = DEFAULT_ISOLATION_LEVEL,
    dictionary: bool = True,
):
    """Cursor inside an explicit transaction; commits on clean exit, rolls back on error."""

    conn = conn_factory.connect()
    try:
        conn.start_transaction(isolation_level=isolation_level)
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values: Sequence[object]) -> str:
    """Placeholder list for `IN (...)`; callers must pass a non-empty sequence."""

    return ", ".join(["%s"] * len(values))


def as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value), "%Y-%m-%d").date()
