from __future__ import annotations

import copy
import itertools
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Iterable, Optional

import pytest

from src.duty_roster.duty_roster.container import build_services
from src.duty_roster.duty_roster.core.enums import (
    OPEN_SWAP_STATUSES,
    DayStatus,
    DebtStatus,
    DutyType,
    Gender,
    SwapStatus,
)
from src.duty_roster.duty_roster.eligibility.model import (
    Candidate,
    Post,
    UnavailabilityWindow,
    post_order_key,
)
from src.duty_roster.duty_roster.rosters.model import Allocation, DayHeader
from src.duty_roster.duty_roster.swaps.model import Debt, SwapRequest

FROZEN_NOW = datetime(2030, 3, 1, 9, 0, 0)


class IntegrityError(Exception):
    """Stands in for the unique-key violations MySQL would raise."""


@dataclass
class State:
    posts: dict[int, Post] = field(default_factory=dict)
    people: dict[str, Candidate] = field(default_factory=dict)
    windows: list[UnavailabilityWindow] = field(default_factory=list)
    days: dict[date, DayHeader] = field(default_factory=dict)
    allocations: dict[str, Allocation] = field(default_factory=dict)
    swaps: dict[str, SwapRequest] = field(default_factory=dict)
    debts: dict[int, Debt] = field(default_factory=dict)


class InMemoryEligibility:
    def __init__(self, state: State):
        self._s = state

    def list_posts(self):
        return sorted(self._s.posts.values(), key=post_order_key)

    def list_people(self, *, gender=None):
        return [p for p in self._s.people.values() if gender is None or p.gender == gender]

    def get_person(self, person_id):
        return self._s.people.get(str(person_id))

    def list_unavailability(self, *, on_date):
        return [w for w in self._s.windows if w.covers(on_date)]

    def add_duty_credit(self, *, person_id, duty_type, delta):
        p = self._s.people[person_id]
        if duty_type == DutyType.WEEKEND:
            self._s.people[person_id] = replace(p, weekend_duty_count=p.weekend_duty_count + delta)
        else:
            self._s.people[person_id] = replace(p, normal_duty_count=p.normal_duty_count + delta)

    def add_punishment(self, *, person_id, delta):
        p = self._s.people[person_id]
        self._s.people[person_id] = replace(p, punishment_balance=p.punishment_balance + delta)

    def list_indebted(self):
        people = [p for p in self._s.people.values() if p.punishment_balance > 0]
        return sorted(people, key=lambda p: (-p.punishment_balance, p.name))


class InMemoryRosters:
    def __init__(self, state: State, ids):
        self._s = state
        self._ids = ids

    def get_day(self, day):
        return self._s.days.get(day)

    def upsert_draft_day(self, *, day, duty_type):
        self._s.days[day] = DayHeader(day=day, duty_type=duty_type, status=DayStatus.DRAFT)

    def set_day_status(self, *, day, from_status, to_status):
        header = self._s.days.get(day)
        if not header or header.status != from_status:
            return False
        self._s.days[day] = replace(header, status=to_status)
        return True

    def publish_range(self, *, start, end):
        count = 0
        for day, header in list(self._s.days.items()):
            if start <= day <= end and header.status == DayStatus.DRAFT:
                self._s.days[day] = replace(header, status=DayStatus.PUBLISHED)
                count += 1
        return count

    def list_allocations(self, *, day):
        return [a for a in self._s.allocations.values() if a.day == day]

    def delete_allocations(self, *, day):
        doomed = [k for k, a in self._s.allocations.items() if a.day == day]
        for k in doomed:
            del self._s.allocations[k]
        return len(doomed)

    def create_allocation(self, *, person_id, post_id, day, is_punishment):
        for a in self._s.allocations.values():
            if a.day == day and (a.post_id == post_id or a.person_id == person_id):
                raise IntegrityError(f"duplicate allocation for {day}")
        allocation_id = f"alloc-{next(self._ids)}"
        self._s.allocations[allocation_id] = Allocation(
            allocation_id=allocation_id,
            person_id=person_id,
            post_id=post_id,
            day=day,
            is_punishment=is_punishment,
            punishment_debtor_id=person_id if is_punishment else None,
        )
        return allocation_id

    def get_allocation(self, allocation_id):
        return self._s.allocations.get(allocation_id)

    def reassign_allocation(self, *, allocation_id, from_person_id, to_person_id):
        a = self._s.allocations.get(allocation_id)
        if not a or a.person_id != from_person_id:
            return False
        self._s.allocations[allocation_id] = replace(a, person_id=to_person_id)
        return True

    def has_allocation_between(self, *, person_id, start, end, exclude_ids=()):
        excluded = set(exclude_ids)
        return any(
            a.person_id == person_id and start <= a.day <= end and a.allocation_id not in excluded
            for a in self._s.allocations.values()
        )

    def list_roster_rows(self, *, start, end):
        rows = []
        for day in sorted(d for d in self._s.days if start <= d <= end):
            header = self._s.days[day]
            allocs = [a for a in self._s.allocations.values() if a.day == day]
            if not allocs:
                rows.append(
                    {
                        "date": day,
                        "duty_type": header.duty_type.value,
                        "status": header.status.value,
                        "allocation_id": None,
                        "person_id": None,
                        "person_name": "",
                        "class_label": "",
                        "post_name": "",
                        "is_punishment": False,
                    }
                )
                continue
            allocs.sort(key=lambda a: post_order_key(self._s.posts[a.post_id]))
            for a in allocs:
                person = self._s.people[a.person_id]
                rows.append(
                    {
                        "date": day,
                        "duty_type": header.duty_type.value,
                        "status": header.status.value,
                        "allocation_id": a.allocation_id,
                        "person_id": a.person_id,
                        "person_name": person.name,
                        "class_label": person.class_label,
                        "post_name": self._s.posts[a.post_id].name,
                        "is_punishment": a.is_punishment,
                    }
                )
        return rows


class InMemorySwaps:
    def __init__(self, state: State, ids):
        self._s = state
        self._ids = ids

    def create_swap(self, *, requester_id, substitute_id, allocation_id, reason, counter_allocation_id, created_at):
        swap_id = f"swap-{next(self._ids)}"
        self._s.swaps[swap_id] = SwapRequest(
            swap_id=swap_id,
            requester_id=requester_id,
            substitute_id=substitute_id,
            allocation_id=allocation_id,
            counter_allocation_id=counter_allocation_id,
            status=SwapStatus.PENDING,
            reason=reason,
            created_at=created_at,
        )
        return swap_id

    def get_swap(self, swap_id):
        return self._s.swaps.get(swap_id)

    def has_open_swap_for(self, *, allocation_id):
        return any(
            allocation_id in (t.allocation_id, t.counter_allocation_id) and t.status in OPEN_SWAP_STATUSES
            for t in self._s.swaps.values()
        )

    def update_status(self, *, swap_id, from_statuses, to_status, responded_at=None):
        t = self._s.swaps.get(swap_id)
        if not t or t.status not in set(from_statuses):
            return False
        self._s.swaps[swap_id] = replace(t, status=to_status, responded_at=responded_at or t.responded_at)
        return True

    def reject_open_for_allocations(self, *, allocation_ids, responded_at):
        ids = set(allocation_ids)
        count = 0
        for k, t in list(self._s.swaps.items()):
            if t.status in OPEN_SWAP_STATUSES and (t.allocation_id in ids or t.counter_allocation_id in ids):
                self._s.swaps[k] = replace(t, status=SwapStatus.REJECTED, responded_at=responded_at)
                count += 1
        return count

    def list_for_person(self, *, person_id, limit=200):
        return [
            {"swap_id": t.swap_id, "status": t.status.value, "requester_id": t.requester_id}
            for t in self._s.swaps.values()
            if person_id in (t.requester_id, t.substitute_id)
        ][:limit]

    def list_awaiting_scheduler(self):
        out = []
        for t in self._s.swaps.values():
            if t.status != SwapStatus.AWAITING_SCHEDULER:
                continue
            a = self._s.allocations[t.allocation_id]
            out.append(
                {
                    "swap_id": t.swap_id,
                    "requester_name": self._s.people[t.requester_id].name,
                    "substitute_name": self._s.people[t.substitute_id].name,
                    "date": a.day.isoformat(),
                    "post_name": self._s.posts[a.post_id].name,
                    "reason": t.reason or "",
                }
            )
        return sorted(out, key=lambda r: r["date"])

    def create_debt(self, *, debtor_id, creditor_id, origin_swap_id, created_at):
        debt_id = len(self._s.debts) + 1
        self._s.debts[debt_id] = Debt(
            debt_id=debt_id,
            debtor_id=debtor_id,
            creditor_id=creditor_id,
            origin_swap_id=origin_swap_id,
            status=DebtStatus.PENDING,
            created_at=created_at,
        )
        return debt_id

    def get_debt(self, debt_id):
        return self._s.debts.get(debt_id)

    def settle_debt(self, *, debt_id, paid_at):
        d = self._s.debts.get(debt_id)
        if not d or d.status != DebtStatus.PENDING:
            return False
        self._s.debts[debt_id] = replace(d, status=DebtStatus.PAID, paid_at=paid_at)
        return True

    def void_debts_for_allocations(self, *, allocation_ids):
        ids = set(allocation_ids)
        count = 0
        for k, d in list(self._s.debts.items()):
            origin = self._s.swaps.get(d.origin_swap_id)
            if d.status == DebtStatus.PENDING and origin and origin.allocation_id in ids:
                self._s.debts[k] = replace(d, status=DebtStatus.VOID)
                count += 1
        return count

    def list_debts_for(self, *, person_id):
        return [
            {"debt_id": d.debt_id, "status": d.status.value, "debtor_id": d.debtor_id, "creditor_id": d.creditor_id}
            for d in self._s.debts.values()
            if person_id in (d.debtor_id, d.creditor_id)
        ]


class InMemoryUnitOfWork:
    def __init__(self, state: State, ids, locks: list):
        self.eligibility = InMemoryEligibility(state)
        self.rosters = InMemoryRosters(state, ids)
        self.swaps = InMemorySwaps(state, ids)
        self._locks = locks

    def lock_days(self, *days: date) -> None:
        self._locks.extend(sorted(set(days)))


class InMemoryStore:
    """Unit-of-work factory over plain dicts; a failed unit restores its snapshot."""

    def __init__(self):
        self.state = State()
        self.locks: list[date] = []
        self.units = 0
        self._ids = itertools.count(1)

    @contextmanager
    def __call__(self):
        snapshot = copy.deepcopy(self.state)
        self.units += 1
        try:
            yield InMemoryUnitOfWork(self.state, self._ids, self.locks)
        except Exception:
            self.state = snapshot
            raise

    # Seeding helpers
    def add_post(
        self,
        post_id: int,
        name: str,
        years: str,
        *,
        gender: Gender = Gender.MIXED,
        priority: int = 1,
    ) -> Post:
        post = Post(post_id=post_id, name=name, gender_restriction=gender, allowed_years=years, priority=priority)
        self.state.posts[post_id] = post
        return post

    def add_person(
        self,
        person_id: str,
        *,
        year: int,
        gender: Gender = Gender.MALE,
        normal: int = 0,
        weekend: int = 0,
        punishment: int = 0,
        name: Optional[str] = None,
        class_label: str = "",
    ) -> Candidate:
        person = Candidate(
            person_id=person_id,
            name=name or f"Person {person_id}",
            gender=gender,
            class_label=class_label,
            year=year,
            normal_duty_count=normal,
            weekend_duty_count=weekend,
            punishment_balance=punishment,
        )
        self.state.people[person_id] = person
        return person

    def add_window(self, person_id: str, start: date, end: date, reason: str = "leave") -> None:
        self.state.windows.append(
            UnavailabilityWindow(
                window_id=len(self.state.windows) + 1,
                person_id=person_id,
                start_date=start,
                end_date=end,
                reason=reason,
            )
        )

    def add_allocation(self, person_id: str, post_id: int, day: date, *, duty_type: DutyType = DutyType.NORMAL,
                       status: DayStatus = DayStatus.DRAFT, is_punishment: bool = False) -> str:
        if day not in self.state.days:
            self.state.days[day] = DayHeader(day=day, duty_type=duty_type, status=status)
        allocation_id = f"alloc-{next(self._ids)}"
        self.state.allocations[allocation_id] = Allocation(
            allocation_id=allocation_id,
            person_id=person_id,
            post_id=post_id,
            day=day,
            is_punishment=is_punishment,
            punishment_debtor_id=person_id if is_punishment else None,
        )
        return allocation_id

    def person(self, person_id: str) -> Candidate:
        return self.state.people[person_id]

    def allocations_on(self, day: date) -> list[Allocation]:
        return [a for a in self.state.allocations.values() if a.day == day]

    def holders(self, day: date) -> dict[int, str]:
        return {a.post_id: a.person_id for a in self.allocations_on(day)}

    def counters(self, person_ids: Iterable[str]) -> dict[str, tuple[int, int, int]]:
        return {
            pid: (
                self.state.people[pid].normal_duty_count,
                self.state.people[pid].weekend_duty_count,
                self.state.people[pid].punishment_balance,
            )
            for pid in person_ids
        }


@pytest.fixture(autouse=True)
def frozen_now(monkeypatch):
    from src.duty_roster.duty_roster.rosters import allocator as allocator_module
    from src.duty_roster.duty_roster.swaps import service as swap_service_module

    monkeypatch.setattr(allocator_module, "now_local", lambda: FROZEN_NOW)
    monkeypatch.setattr(swap_service_module, "now_local", lambda: FROZEN_NOW)
    return FROZEN_NOW


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def services(store):
    return build_services(store)


@pytest.fixture
def roster_service(services):
    return services.roster_service


@pytest.fixture
def swap_service(services):
    return services.swap_service
