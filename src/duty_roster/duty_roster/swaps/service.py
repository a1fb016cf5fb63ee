from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty, require_scheduler
from ..core.enums import OPEN_SWAP_STATUSES, SwapAction, SwapStatus, Role
from ..core.exceptions import (
    AlreadyPublishedError,
    AlreadyResolvedError,
    AuthorizationError,
    FatigueViolationError,
    NotFoundError,
    StateConflictError,
    SwapNotPendingError,
    ValidationError,
)
from ..database.unit_of_work import UnitOfWork, UnitOfWorkFactory
from ..eligibility.service import transfer_duty_credit
from ..rosters.fatigue import FatigueChecker
from ..rosters.model import Allocation
from .model import SwapRequest

logger = logging.getLogger(__name__)


class SwapService:
    """Swap lifecycle: request -> substitute response -> scheduler approval.

    Only approval touches allocation ownership and fairness counters, and it
    re-runs the fatigue check because time may have passed since the request.
    """

    def __init__(self, uow_factory: UnitOfWorkFactory, fatigue: FatigueChecker):
        self._uow = uow_factory
        self._fatigue = fatigue

    @staticmethod
    def _require_allocation(uow: UnitOfWork, allocation_id: str) -> Allocation:
        alloc = uow.rosters.get_allocation(str(allocation_id))
        if not alloc:
            raise NotFoundError(f"Allocation {allocation_id} does not exist")
        return alloc

    @staticmethod
    def _require_draft(uow: UnitOfWork, alloc: Allocation) -> None:
        header = uow.rosters.get_day(alloc.day)
        if header is None:
            raise NotFoundError(f"No roster exists for {alloc.day.isoformat()}")
        if header.is_published:
            raise AlreadyPublishedError(alloc.day)

    def request_swap(
        self,
        *,
        requester_id: str,
        allocation_id: str,
        substitute_id: str,
        reason: str,
        counter_allocation_id: Optional[str] = None,
    ) -> str:
        reason = require_non_empty(reason, "Reason")
        allocation_id = require_non_empty(str(allocation_id or ""), "Allocation")
        substitute_id = require_non_empty(str(substitute_id or ""), "Substitute")
        counter_allocation_id = (str(counter_allocation_id).strip() or None) if counter_allocation_id else None
        if substitute_id == str(requester_id):
            raise ValidationError("You cannot swap a duty with yourself")

        today = now_local().date()
        with self._uow() as uow:
            alloc = self._require_allocation(uow, allocation_id)
            if alloc.person_id != str(requester_id):
                raise AuthorizationError("You can only offer your own duties for a swap")
            if alloc.day < today:
                raise ValidationError("Past duties cannot be swapped")
            self._require_draft(uow, alloc)

            if uow.eligibility.get_person(substitute_id) is None:
                raise NotFoundError(f"Person {substitute_id} does not exist")
            if uow.swaps.has_open_swap_for(allocation_id=alloc.allocation_id):
                raise StateConflictError("This duty already has an open swap request")

            exclude = [alloc.allocation_id]
            if counter_allocation_id:
                counter = self._require_allocation(uow, counter_allocation_id)
                if counter.person_id != substitute_id:
                    raise ValidationError("The counter duty must belong to the substitute")
                if counter.day < today:
                    raise ValidationError("Past duties cannot be swapped")
                self._require_draft(uow, counter)
                if uow.swaps.has_open_swap_for(allocation_id=counter.allocation_id):
                    raise StateConflictError("The counter duty already has an open swap request")
                exclude.append(counter.allocation_id)
                self._fatigue.ensure_rested(
                    uow.rosters, person_id=str(requester_id), day=counter.day, exclude_allocation_ids=exclude
                )

            self._fatigue.ensure_rested(uow.rosters, person_id=substitute_id, day=alloc.day, exclude_allocation_ids=exclude)

            swap_id = uow.swaps.create_swap(
                requester_id=str(requester_id),
                substitute_id=substitute_id,
                allocation_id=alloc.allocation_id,
                reason=reason,
                counter_allocation_id=counter_allocation_id,
                created_at=now_local(),
            )

        logger.info(f"Swap {swap_id} requested: {requester_id} -> {substitute_id} for {alloc.day}")
        return swap_id

    def respond_to_swap(self, *, swap_id: str, responder_id: str, action: str) -> SwapStatus:
        try:
            act = SwapAction(str(action or "").strip().lower())
        except ValueError:
            raise ValidationError(f"Invalid action {action!r} (expected accept or decline)")

        with self._uow() as uow:
            swap = uow.swaps.get_swap(str(swap_id))
            if not swap:
                raise NotFoundError("Swap request does not exist")
            if swap.substitute_id != str(responder_id):
                raise AuthorizationError("This swap request is not addressed to you")
            if swap.status != SwapStatus.PENDING:
                raise AlreadyResolvedError("This swap request was already answered")

            if act == SwapAction.ACCEPT:
                new_status = SwapStatus.AWAITING_SCHEDULER
                ok = uow.swaps.update_status(swap_id=swap.swap_id, from_statuses=[SwapStatus.PENDING], to_status=new_status)
            else:
                new_status = SwapStatus.REJECTED
                ok = uow.swaps.update_status(
                    swap_id=swap.swap_id,
                    from_statuses=[SwapStatus.PENDING],
                    to_status=new_status,
                    responded_at=now_local(),
                )
            if not ok:
                raise AlreadyResolvedError("This swap request was already answered")

        logger.info(f"Swap {swap_id}: substitute {responder_id} chose {act.value} -> {new_status.value}")
        return new_status

    def _load_open(self, uow: UnitOfWork, swap_id: str) -> Tuple[SwapRequest, Allocation, Optional[Allocation]]:
        swap = uow.swaps.get_swap(str(swap_id))
        if swap is None or swap.status not in OPEN_SWAP_STATUSES:
            raise SwapNotPendingError("Swap not found or already processed")
        alloc = self._require_allocation(uow, swap.allocation_id)
        counter = self._require_allocation(uow, swap.counter_allocation_id) if swap.is_exchange else None
        return swap, alloc, counter

    def _hand_over(self, uow: UnitOfWork, alloc: Allocation, *, from_person_id: str, to_person_id: str) -> None:
        if not uow.rosters.reassign_allocation(
            allocation_id=alloc.allocation_id, from_person_id=from_person_id, to_person_id=to_person_id
        ):
            raise StateConflictError("The duty changed hands since the swap was requested")
        if alloc.is_punishment:
            # Punishment duties never counted towards fairness; nothing to move.
            return
        header = uow.rosters.get_day(alloc.day)
        if header is None:
            raise NotFoundError(f"No roster exists for {alloc.day.isoformat()}")
        transfer_duty_credit(
            uow.eligibility, from_person_id=from_person_id, to_person_id=to_person_id, duty_type=header.duty_type
        )

    def approve_swap(self, *, current_role: Role, swap_id: str) -> str:
        require_scheduler(current_role)

        with self._uow() as uow:
            _, alloc, counter = self._load_open(uow, swap_id)
            uow.lock_days(*[d for a in (alloc, counter) if a is not None for d in self._fatigue.window(a.day)])
            # Re-read under the day locks.
            swap, alloc, counter = self._load_open(uow, swap_id)

            if alloc.person_id != swap.requester_id:
                raise StateConflictError("The duty changed hands since the swap was requested")
            if counter is not None and counter.person_id != swap.substitute_id:
                raise StateConflictError("The counter duty changed hands since the swap was requested")

            exclude = [a.allocation_id for a in (alloc, counter) if a is not None]
            if self._fatigue.is_fatigued(
                uow.rosters, person_id=swap.substitute_id, day=alloc.day, exclude_allocation_ids=exclude
            ):
                raise FatigueViolationError(
                    swap.substitute_id,
                    alloc.day,
                    "Swap refused: the substitute would break the 24h rest rule by taking this duty",
                )
            if counter is not None and self._fatigue.is_fatigued(
                uow.rosters, person_id=swap.requester_id, day=counter.day, exclude_allocation_ids=exclude
            ):
                raise FatigueViolationError(
                    swap.requester_id,
                    counter.day,
                    "Swap refused: the requester would break the 24h rest rule by taking the counter duty",
                )

            self._hand_over(uow, alloc, from_person_id=swap.requester_id, to_person_id=swap.substitute_id)
            now = now_local()
            if counter is not None:
                self._hand_over(uow, counter, from_person_id=swap.substitute_id, to_person_id=swap.requester_id)
            else:
                uow.swaps.create_debt(
                    debtor_id=swap.requester_id,
                    creditor_id=swap.substitute_id,
                    origin_swap_id=swap.swap_id,
                    created_at=now,
                )

            if not uow.swaps.update_status(
                swap_id=swap.swap_id, from_statuses=OPEN_SWAP_STATUSES, to_status=SwapStatus.APPROVED, responded_at=now
            ):
                raise SwapNotPendingError("Swap not found or already processed")

        logger.info(f"Swap {swap_id} approved: {alloc.day} now held by {swap.substitute_id}")
        return "Swap approved"

    def reject_swap(self, *, current_role: Role, swap_id: str) -> None:
        require_scheduler(current_role)
        with self._uow() as uow:
            ok = uow.swaps.update_status(
                swap_id=str(swap_id),
                from_statuses=OPEN_SWAP_STATUSES,
                to_status=SwapStatus.REJECTED,
                responded_at=now_local(),
            )
        if not ok:
            raise SwapNotPendingError("Swap not found or already processed")
        logger.info(f"Swap {swap_id} rejected by scheduler")

    def list_swaps_for(self, *, person_id: str) -> Sequence[dict]:
        with self._uow() as uow:
            return uow.swaps.list_for_person(person_id=str(person_id))

    def list_debts(self, *, person_id: str) -> Sequence[dict]:
        with self._uow() as uow:
            return uow.swaps.list_debts_for(person_id=str(person_id))

    def settle_debt(self, *, current_role: Role, debt_id: int) -> None:
        require_scheduler(current_role)
        with self._uow() as uow:
            debt = uow.swaps.get_debt(int(debt_id))
            if not debt:
                raise NotFoundError("Debt does not exist")
            if not uow.swaps.settle_debt(debt_id=debt.debt_id, paid_at=now_local()):
                raise StateConflictError("Debt is no longer pending")
        logger.info(f"Debt {debt_id} settled")
