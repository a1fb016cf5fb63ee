from __future__ import annotations

from dataclasses import dataclass

from .core.constants import DEFAULT_ISOLATION_LEVEL, DEFAULT_LOCK_TIMEOUT_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .database.mysql_unit_of_work import MySQLUnitOfWorkFactory
from .database.unit_of_work import UnitOfWorkFactory
from .rosters.allocator import DayAllocator
from .rosters.fatigue import FatigueChecker
from .rosters.selector import CandidateSelector
from .rosters.service import RosterService
from .swaps.service import SwapService


@dataclass(frozen=True)
class Container:
    uow_factory: UnitOfWorkFactory

    roster_service: RosterService
    swap_service: SwapService


def build_services(uow_factory: UnitOfWorkFactory) -> Container:
    fatigue = FatigueChecker()
    allocator = DayAllocator(CandidateSelector(fatigue))

    return Container(
        uow_factory=uow_factory,
        roster_service=RosterService(uow_factory, allocator),
        swap_service=SwapService(uow_factory, fatigue),
    )


def build_container(
    *,
    db_config: dict,
    isolation_level: str = DEFAULT_ISOLATION_LEVEL,
    lock_timeout: int = DEFAULT_LOCK_TIMEOUT_SECONDS,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)
    uow_factory = MySQLUnitOfWorkFactory(conn, isolation_level=isolation_level, lock_timeout=lock_timeout)
    return build_services(uow_factory)
