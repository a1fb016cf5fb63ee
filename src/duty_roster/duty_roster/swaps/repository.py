from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import SwapStatus
from .model import Debt, SwapRequest


class SwapRepository(Protocol):
    # Swap requests
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
        """Returns swap_id of a new Pending request."""

        raise NotImplementedError

    def get_swap(self, swap_id: str) -> Optional[SwapRequest]:
        raise NotImplementedError

    def has_open_swap_for(self, *, allocation_id: str) -> bool:
        raise NotImplementedError

    def update_status(
        self,
        *,
        swap_id: str,
        from_statuses: Iterable[SwapStatus],
        to_status: SwapStatus,
        responded_at: Optional[datetime] = None,
    ) -> bool:
        """Conditional transition; False when the swap is no longer in from_statuses."""

        raise NotImplementedError

    def reject_open_for_allocations(self, *, allocation_ids: Sequence[str], responded_at: datetime) -> int:
        raise NotImplementedError

    def list_for_person(self, *, person_id: str, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[dict]:
        """UI rows where the person is requester or substitute."""

        raise NotImplementedError

    def list_awaiting_scheduler(self) -> Sequence[dict]:
        """UI rows joined with names, date and post."""

        raise NotImplementedError

    # Debts
    def create_debt(self, *, debtor_id: str, creditor_id: str, origin_swap_id: str, created_at: datetime) -> int:
        raise NotImplementedError

    def get_debt(self, debt_id: int) -> Optional[Debt]:
        raise NotImplementedError

    def settle_debt(self, *, debt_id: int, paid_at: datetime) -> bool:
        raise NotImplementedError

    def void_debts_for_allocations(self, *, allocation_ids: Sequence[str]) -> int:
        """Void pending debts whose originating swap moved one of these allocations."""

        raise NotImplementedError

    def list_debts_for(self, *, person_id: str) -> Sequence[dict]:
        raise NotImplementedError
