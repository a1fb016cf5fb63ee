from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Callable, ContextManager, Protocol

if TYPE_CHECKING:
    from ..eligibility.repository import EligibilityRepository
    from ..rosters.repository import RosterRepository
    from ..swaps.repository import SwapRepository


class UnitOfWork(Protocol):
    """One atomic unit: every repository shares the same transaction.

    Leaving the context cleanly commits; any exception rolls everything back.
    """

    eligibility: "EligibilityRepository"
    rosters: "RosterRepository"
    swaps: "SwapRepository"

    def lock_days(self, *days: date) -> None:
        """Serialize against other units touching the same calendar dates."""

        raise NotImplementedError


UnitOfWorkFactory = Callable[[], ContextManager[UnitOfWork]]
