from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import DebtStatus, SwapStatus


@dataclass(frozen=True)
class SwapRequest:
    swap_id: str
    requester_id: str
    substitute_id: str
    allocation_id: str
    status: SwapStatus
    created_at: datetime
    reason: Optional[str] = None
    counter_allocation_id: Optional[str] = None
    responded_at: Optional[datetime] = None

    @property
    def is_exchange(self) -> bool:
        return self.counter_allocation_id is not None


@dataclass(frozen=True)
class Debt:
    """One duty owed by the debtor to the creditor after a one-way swap."""

    debt_id: int
    debtor_id: str
    creditor_id: str
    status: DebtStatus
    created_at: datetime
    origin_swap_id: Optional[str] = None
    paid_at: Optional[datetime] = None
