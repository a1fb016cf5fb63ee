from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterator

from ..core.constants import DEFAULT_ISOLATION_LEVEL, DEFAULT_LOCK_TIMEOUT_SECONDS, LOCK_NAME_PREFIX
from ..core.exceptions import LockUnavailableError
from ..eligibility.mysql_eligibility_repository import MySQLEligibilityRepository
from ..rosters.mysql_roster_repository import MySQLRosterRepository
from ..swaps.mysql_swap_repository import MySQLSwapRepository
from .connection import DatabaseConnection
from .mysql_base import fetchone, transaction

logger = logging.getLogger(__name__)


class MySQLUnitOfWork:
    def __init__(self, cur, *, lock_timeout: int):
        self._cur = cur
        self._lock_timeout = int(lock_timeout)
        self._held: set[str] = set()

        self.eligibility = MySQLEligibilityRepository(cur)
        self.rosters = MySQLRosterRepository(cur)
        self.swaps = MySQLSwapRepository(cur)

    def lock_days(self, *days: date) -> None:
        # Sorted acquisition keeps two multi-day units from deadlocking.
        for day in sorted(set(days)):
            name = f"{LOCK_NAME_PREFIX}{day.isoformat()}"
            if name in self._held:
                continue
            self._cur.execute("SELECT GET_LOCK(%s, %s) AS granted", (name, self._lock_timeout))
            r = fetchone(self._cur)
            if not r or r["granted"] != 1:
                logger.warning(f"Lock {name} not granted within {self._lock_timeout}s")
                raise LockUnavailableError(f"{day.isoformat()} is being changed by another operation, try again")
            self._held.add(name)


class MySQLUnitOfWorkFactory:
    """Opens a MySQLUnitOfWork per call.

    Named locks belong to the connection's session, which closes after the
    commit or rollback, so they never outlive the transaction's writes.
    """

    def __init__(
        self,
        conn_factory: DatabaseConnection,
        *,
        isolation_level: str = DEFAULT_ISOLATION_LEVEL,
        lock_timeout: int = DEFAULT_LOCK_TIMEOUT_SECONDS,
    ):
        self._conn_factory = conn_factory
        self._isolation_level = isolation_level
        self._lock_timeout = lock_timeout

    @contextmanager
    def __call__(self) -> Iterator[MySQLUnitOfWork]:
        with transaction(self._conn_factory, isolation_level=self._isolation_level) as (_, cur):
            yield MySQLUnitOfWork(cur, lock_timeout=self._lock_timeout)
