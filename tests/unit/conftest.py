"""In-memory repositories and a rollback-aware coordinator for service tests.

MemoryCoordinator snapshots the whole MemoryState before each unit of work
and restores it when the work raises, which is what commit/rollback looks
like from the outside. Repositories hand out copies so callers cannot
mutate stored rows without going through a repository method.
"""

import copy
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, TypeVar
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.ct_common.datetime_utils import utc_now
from src.ct_common.errors import (
    DisputeNotFoundError,
    HireRequestNotFoundError,
    OrderAlreadyExistsError,
    OrderNotFoundError,
    StorageConflictError,
)
from src.ct_common.id_generator import generate_id
from src.ct_common.keyspace import KeyspaceAllocator
from src.ct_contract.application.service import ContractApplicationService
from src.ct_contract.domain.models import Contract, ProgressUpdate
from src.ct_dispute.application.service import DisputeApplicationService
from src.ct_dispute.domain.models import Dispute
from src.ct_hire.application.service import HireApplicationService
from src.ct_hire.domain.models import HireRequest, ServiceListing
from src.ct_lifecycle.domain.actor import Actor
from src.ct_notification.application.publisher import NotificationPublisher
from src.ct_notification.domain.models import Notification, NotificationDraft
from src.ct_order.application.service import OrderApplicationService
from src.ct_order.domain.models import Order
from src.ct_order.infrastructure.order_number import OrderNumberAllocator
from src.ct_wallet.domain.models import WalletEntry, WalletLeg

T = TypeVar("T")

BUYER_ID = "user-buyer"
STUDENT_ID = "user-student"
OUTSIDER_ID = "user-outsider"
ADMIN_ID = "user-admin"
SERVICE_ID = "svc-1"
SERVICE_PRICE = 6500
FEE_RATE_BPS = 1000


@dataclass
class MemoryState:
    services: dict[str, ServiceListing] = field(default_factory=dict)
    hires: dict[str, HireRequest] = field(default_factory=dict)
    contracts: dict[str, Contract] = field(default_factory=dict)
    progress: list[ProgressUpdate] = field(default_factory=list)
    orders: dict[str, Order] = field(default_factory=dict)
    wallet: list[WalletEntry] = field(default_factory=list)
    notifications: dict[str, Notification] = field(default_factory=dict)
    disputes: dict[str, Dispute] = field(default_factory=dict)

    def balance(self, user_id: str) -> int:
        return sum(e.amount_cents for e in self.wallet if e.user_id == user_id)

    def notified(self, user_id: str) -> list[str]:
        return [n.type for n in self.notifications.values() if n.user_id == user_id]


class MemoryCoordinator:
    def __init__(self, state: MemoryState) -> None:
        self.state = state
        self.runs = 0
        self.rollbacks = 0

    async def run_atomic(self, work: Callable[[Any], Awaitable[T]]) -> T:
        self.runs += 1
        snapshot = copy.deepcopy(self.state.__dict__)
        try:
            return await work(MagicMock(name="session"))
        except Exception:
            self.rollbacks += 1
            self.state.__dict__.clear()
            self.state.__dict__.update(snapshot)
            raise


def _page(rows: list[Any], cursor_id: Any, limit: int) -> list[Any]:
    rows = sorted(rows, key=lambda r: r.id, reverse=True)
    if cursor_id is not None:
        rows = [r for r in rows if r.id < cursor_id]
    return rows[:limit]


class MemoryHireRepo:
    def __init__(self, state: MemoryState) -> None:
        self.s = state

    async def get_service(self, db: Any, service_id: str) -> ServiceListing | None:
        return self.s.services.get(service_id)

    async def has_pending(self, db: Any, buyer_id: str, service_id: str) -> bool:
        return any(
            h.buyer_id == buyer_id and h.service_id == service_id and h.status == "PENDING"
            for h in self.s.hires.values()
        )

    async def insert(self, db: Any, hire: HireRequest) -> HireRequest:
        stored = replace(hire, created_at=utc_now(), updated_at=utc_now())
        self.s.hires[hire.id] = stored
        return replace(stored)

    async def get_by_id(self, db: Any, hire_id: str) -> HireRequest | None:
        hire = self.s.hires.get(hire_id)
        return replace(hire) if hire else None

    get_for_update = get_by_id

    async def update_status(self, db: Any, hire_id: str, status: str) -> HireRequest:
        if hire_id not in self.s.hires:
            raise HireRequestNotFoundError(hire_id)
        self.s.hires[hire_id] = replace(self.s.hires[hire_id], status=status, updated_at=utc_now())
        return replace(self.s.hires[hire_id])

    async def is_consumed(self, db: Any, hire_id: str) -> bool:
        return any(c.hire_request_id == hire_id for c in self.s.contracts.values()) or any(
            o.hire_request_id == hire_id for o in self.s.orders.values()
        )

    async def delete(self, db: Any, hire_id: str) -> None:
        self.s.hires.pop(hire_id, None)

    async def list_for_user(
        self, db: Any, user_id: str | None, status: str | None, cursor_id: str | None, limit: int
    ) -> list[HireRequest]:
        rows = [
            h for h in self.s.hires.values()
            if (user_id is None or user_id in (h.buyer_id, h.student_id))
            and (status is None or h.status == status)
        ]
        return [replace(h) for h in _page(rows, cursor_id, limit)]


class MemoryContractRepo:
    def __init__(self, state: MemoryState) -> None:
        self.s = state

    async def exists_for_hire(self, db: Any, hire_request_id: str) -> bool:
        return any(c.hire_request_id == hire_request_id for c in self.s.contracts.values())

    async def insert(self, db: Any, contract: Contract) -> Contract:
        stored = replace(contract, created_at=utc_now(), updated_at=utc_now())
        self.s.contracts[contract.id] = stored
        return replace(stored)

    async def get_by_id(self, db: Any, contract_id: str) -> Contract | None:
        contract = self.s.contracts.get(contract_id)
        return replace(contract) if contract else None

    get_for_update = get_by_id

    async def save(self, db: Any, contract: Contract) -> Contract:
        self.s.contracts[contract.id] = replace(contract, updated_at=utc_now())
        return replace(self.s.contracts[contract.id])

    async def add_progress(self, db: Any, update: ProgressUpdate) -> ProgressUpdate:
        stored = replace(update, created_at=utc_now())
        self.s.progress.append(stored)
        return stored

    async def list_progress(self, db: Any, contract_id: str) -> list[ProgressUpdate]:
        rows = [p for p in self.s.progress if p.contract_id == contract_id]
        return sorted(rows, key=lambda p: p.id, reverse=True)

    async def list_for_user(
        self, db: Any, user_id: str | None, status: str | None, cursor_id: str | None, limit: int
    ) -> list[Contract]:
        rows = [
            c for c in self.s.contracts.values()
            if (user_id is None or user_id in (c.buyer_id, c.student_id))
            and (status is None or c.status == status)
        ]
        return [replace(c) for c in _page(rows, cursor_id, limit)]


class MemoryOrderRepo:
    """Enforces both UNIQUE constraints the real orders table carries."""

    def __init__(self, state: MemoryState) -> None:
        self.s = state
        self.probes = 0

    async def number_taken(self, db: Any, order_number: str) -> bool:
        self.probes += 1
        return any(o.order_number == order_number for o in self.s.orders.values())

    async def exists_for_hire(self, db: Any, hire_request_id: str) -> bool:
        return any(o.hire_request_id == hire_request_id for o in self.s.orders.values())

    async def insert(self, db: Any, order: Order) -> Order:
        if any(o.order_number == order.order_number for o in self.s.orders.values()):
            raise StorageConflictError("orders.order_number")
        if await self.exists_for_hire(db, order.hire_request_id):
            raise OrderAlreadyExistsError(order.hire_request_id)
        stored = replace(order, created_at=utc_now(), updated_at=utc_now())
        self.s.orders[order.id] = stored
        return replace(stored)

    async def get_by_id(self, db: Any, order_id: str) -> Order | None:
        order = self.s.orders.get(order_id)
        return replace(order) if order else None

    get_for_update = get_by_id

    async def update_status(
        self, db: Any, order_id: str, status: str, paid_at: datetime | None
    ) -> Order:
        if order_id not in self.s.orders:
            raise OrderNotFoundError(order_id)
        self.s.orders[order_id] = replace(
            self.s.orders[order_id], status=status, paid_at=paid_at, updated_at=utc_now()
        )
        return replace(self.s.orders[order_id])

    async def list_for_user(
        self, db: Any, user_id: str | None, status: str | None, cursor_id: str | None, limit: int
    ) -> list[Order]:
        rows = [
            o for o in self.s.orders.values()
            if (user_id is None or user_id in (o.buyer_id, o.student_id))
            and (status is None or o.status == status)
        ]
        return [replace(o) for o in _page(rows, cursor_id, limit)]


class MemoryWalletRepo:
    def __init__(self, state: MemoryState) -> None:
        self.s = state

    async def append(self, db: Any, leg: WalletLeg) -> WalletEntry:
        entry = WalletEntry(
            id=len(self.s.wallet) + 1,
            user_id=leg.user_id,
            amount_cents=leg.amount_cents,
            entry_type=leg.entry_type,
            reason=leg.reason,
            reference_type=leg.reference_type,
            reference_id=leg.reference_id,
            created_at=utc_now(),
        )
        self.s.wallet.append(entry)
        return entry

    async def get_balance(self, db: Any, user_id: str) -> int:
        return self.s.balance(user_id)

    async def list_entries(
        self, db: Any, user_id: str, cursor_id: int | None, limit: int
    ) -> list[WalletEntry]:
        return _page([e for e in self.s.wallet if e.user_id == user_id], cursor_id, limit)


class MemoryNotificationRepo:
    def __init__(self, state: MemoryState) -> None:
        self.s = state

    async def insert(self, db: Any, draft: NotificationDraft) -> Notification:
        n = Notification(
            id=generate_id(),
            user_id=draft.user_id,
            type=draft.type,
            title=draft.title,
            body=draft.body,
            created_at=utc_now(),
        )
        self.s.notifications[n.id] = n
        return replace(n)

    async def get_by_id(self, db: Any, notification_id: str) -> Notification | None:
        n = self.s.notifications.get(notification_id)
        return replace(n) if n else None

    async def list_for_user(
        self, db: Any, user_id: str, cursor_id: str | None, limit: int
    ) -> list[Notification]:
        rows = [n for n in self.s.notifications.values() if n.user_id == user_id]
        return [replace(n) for n in _page(rows, cursor_id, limit)]

    async def count_unread(self, db: Any, user_id: str) -> int:
        return sum(
            1 for n in self.s.notifications.values() if n.user_id == user_id and not n.is_read
        )

    async def mark_read(self, db: Any, notification_id: str, user_id: str) -> None:
        n = self.s.notifications.get(notification_id)
        if n is not None and n.user_id == user_id:
            n.is_read = True

    async def mark_all_read(self, db: Any, user_id: str) -> int:
        updated = 0
        for n in self.s.notifications.values():
            if n.user_id == user_id and not n.is_read:
                n.is_read = True
                updated += 1
        return updated


class MemoryDisputeRepo:
    def __init__(self, state: MemoryState) -> None:
        self.s = state

    def _joined(self, dispute: Dispute) -> Dispute:
        order = self.s.orders[dispute.order_id]
        return replace(dispute, buyer_id=order.buyer_id, student_id=order.student_id)

    async def insert(self, db: Any, dispute: Dispute) -> Dispute:
        self.s.disputes[dispute.id] = replace(
            dispute, created_at=utc_now(), updated_at=utc_now()
        )
        return self._joined(self.s.disputes[dispute.id])

    async def get_by_id(self, db: Any, dispute_id: str) -> Dispute | None:
        dispute = self.s.disputes.get(dispute_id)
        return self._joined(dispute) if dispute else None

    get_for_update = get_by_id

    async def update(
        self,
        db: Any,
        dispute_id: str,
        status: str,
        resolution: str | None = None,
        resolution_note: str | None = None,
        resolved_at: datetime | None = None,
    ) -> Dispute:
        current = self.s.disputes.get(dispute_id)
        if current is None:
            raise DisputeNotFoundError(dispute_id)
        self.s.disputes[dispute_id] = replace(
            current,
            status=status,
            resolution=resolution or current.resolution,
            resolution_note=resolution_note or current.resolution_note,
            resolved_at=resolved_at or current.resolved_at,
            updated_at=utc_now(),
        )
        return self._joined(self.s.disputes[dispute_id])

    async def list_for_user(
        self, db: Any, user_id: str | None, status: str | None, cursor_id: str | None, limit: int
    ) -> list[Dispute]:
        rows = [self._joined(d) for d in self.s.disputes.values()]
        rows = [
            d for d in rows
            if (user_id is None or user_id in (d.buyer_id, d.student_id))
            and (status is None or d.status == status)
        ]
        return _page(rows, cursor_id, limit)


@dataclass
class Repos:
    hires: MemoryHireRepo
    contracts: MemoryContractRepo
    orders: MemoryOrderRepo
    wallet: MemoryWalletRepo
    notifications: MemoryNotificationRepo
    disputes: MemoryDisputeRepo


@pytest.fixture
def state() -> MemoryState:
    s = MemoryState()
    s.services[SERVICE_ID] = ServiceListing(
        id=SERVICE_ID, owner_id=STUDENT_ID, title="Logo design", price_cents=SERVICE_PRICE,
        is_active=True,
    )
    s.services["svc-off"] = ServiceListing(
        id="svc-off", owner_id=STUDENT_ID, title="Retired", price_cents=1000, is_active=False,
    )
    return s


@pytest.fixture
def coordinator(state: MemoryState) -> MemoryCoordinator:
    return MemoryCoordinator(state)


@pytest.fixture
def repos(state: MemoryState) -> Repos:
    return Repos(
        hires=MemoryHireRepo(state),
        contracts=MemoryContractRepo(state),
        orders=MemoryOrderRepo(state),
        wallet=MemoryWalletRepo(state),
        notifications=MemoryNotificationRepo(state),
        disputes=MemoryDisputeRepo(state),
    )


@pytest.fixture
def buyer() -> Actor:
    return Actor(BUYER_ID, "BUYER")


@pytest.fixture
def student() -> Actor:
    return Actor(STUDENT_ID, "STUDENT")


@pytest.fixture
def outsider() -> Actor:
    return Actor(OUTSIDER_ID, "BUYER")


@pytest.fixture
def admin() -> Actor:
    return Actor(ADMIN_ID, "ADMIN")


@pytest.fixture
def make_hire(state: MemoryState) -> Callable[..., HireRequest]:
    def _make(
        status: str = "ACCEPTED",
        buyer_id: str = BUYER_ID,
        student_id: str = STUDENT_ID,
        price_cents: int = SERVICE_PRICE,
    ) -> HireRequest:
        hire = HireRequest(
            id=generate_id(),
            buyer_id=buyer_id,
            student_id=student_id,
            service_id=SERVICE_ID,
            price_cents=price_cents,
            status=status,
            created_at=utc_now(),
        )
        state.hires[hire.id] = hire
        return hire

    return _make


@pytest.fixture
def accepted_hire(make_hire: Callable[..., HireRequest]) -> HireRequest:
    return make_hire()


@pytest.fixture
def publisher() -> AsyncMock:
    mock = AsyncMock(spec=NotificationPublisher)
    mock.publish.return_value = 0
    return mock


@pytest.fixture
def order_service(
    coordinator: MemoryCoordinator, repos: Repos, publisher: AsyncMock
) -> OrderApplicationService:
    return OrderApplicationService(
        coordinator,  # type: ignore[arg-type]
        publisher=publisher,
        repo=repos.orders,
        hire_repo=repos.hires,
        wallet_repo=repos.wallet,
        notification_repo=repos.notifications,
        numbers=OrderNumberAllocator(
            repos.orders, KeyspaceAllocator(1000, 9999, rng=random.Random(20240101))
        ),
        fee_rate_bps=FEE_RATE_BPS,
    )


@pytest.fixture
def hire_service(
    coordinator: MemoryCoordinator, repos: Repos, publisher: AsyncMock
) -> HireApplicationService:
    return HireApplicationService(
        coordinator,  # type: ignore[arg-type]
        publisher=publisher,
        repo=repos.hires,
        notification_repo=repos.notifications,
    )


@pytest.fixture
def contract_service(
    coordinator: MemoryCoordinator, repos: Repos, publisher: AsyncMock
) -> ContractApplicationService:
    return ContractApplicationService(
        coordinator,  # type: ignore[arg-type]
        publisher=publisher,
        repo=repos.contracts,
        hire_repo=repos.hires,
        notification_repo=repos.notifications,
        fee_rate_bps=FEE_RATE_BPS,
    )


@pytest.fixture
def dispute_service(
    coordinator: MemoryCoordinator,
    repos: Repos,
    publisher: AsyncMock,
    order_service: OrderApplicationService,
) -> DisputeApplicationService:
    return DisputeApplicationService(
        coordinator,  # type: ignore[arg-type]
        order_service,
        publisher=publisher,
        repo=repos.disputes,
        order_repo=repos.orders,
        notification_repo=repos.notifications,
    )
