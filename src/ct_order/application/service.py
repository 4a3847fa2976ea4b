"""OrderApplicationService — order creation and the order lifecycle.

create_order runs as one atomic unit:
  lock hire request → check ACCEPTED + buyer → one order per hire →
  allocate order number (probe on the same session) → insert → notify.
A StorageConflictError (two transactions drew the same number) re-runs the
unit exactly once; a second conflict propagates.

apply_transition is the in-transaction step shared with ct_dispute: state
machine check, status write, wallet legs and notification drafts.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.ct_common.datetime_utils import utc_now
from src.ct_common.enums import HireStatus, NotificationType, OrderStatus, PartyRole
from src.ct_common.errors import (
    ForbiddenError,
    HireRequestNotFoundError,
    InvalidTransitionError,
    OrderAlreadyExistsError,
    OrderNotFoundError,
    StorageConflictError,
    ValidationError,
)
from src.ct_common.id_generator import generate_id
from src.ct_common.pagination import cursor_decode, cursor_encode
from src.ct_common.transaction import TransactionCoordinator
from src.ct_hire.domain.repository import HireRequestRepositoryProtocol
from src.ct_hire.infrastructure.persistence import HireRequestRepository
from src.ct_lifecycle.domain.actor import Actor
from src.ct_lifecycle.domain.rules import ORDER_MACHINE
from src.ct_lifecycle.domain.state_machine import state_value
from src.ct_notification.application.publisher import NotificationPublisher
from src.ct_notification.application.service import notify
from src.ct_notification.domain.models import Notification, NotificationDraft
from src.ct_notification.domain.repository import NotificationRepositoryProtocol
from src.ct_notification.infrastructure.persistence import NotificationRepository
from src.ct_order.application.schemas import OrderListResponse, OrderResponse
from src.ct_order.domain.models import Order
from src.ct_order.domain.repository import OrderRepositoryProtocol
from src.ct_order.domain.settlement import capture_legs, refund_legs, release_legs
from src.ct_order.infrastructure.order_number import OrderNumberAllocator
from src.ct_order.infrastructure.persistence import OrderRepository
from src.ct_wallet.application.service import post as post_wallet_legs
from src.ct_wallet.domain.models import WalletLeg
from src.ct_wallet.domain.repository import WalletRepositoryProtocol
from src.ct_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


def _status_drafts(order: Order, target: str, actor_id: str | None) -> list[NotificationDraft]:
    recipients = [uid for uid in (order.buyer_id, order.student_id) if uid != actor_id]
    if target == OrderStatus.PAID:
        return [
            NotificationDraft(
                order.student_id,
                NotificationType.PAYMENT_RECEIVED.value,
                "Payment Received",
                f"Order #{order.order_number} has been paid. You can start working.",
            )
        ]
    return [
        NotificationDraft(
            uid,
            NotificationType.ORDER_STATUS_CHANGED.value,
            "Order Status Updated",
            f"Order #{order.order_number} status changed to {target}",
        )
        for uid in recipients
    ]


class OrderApplicationService:
    def __init__(
        self,
        coordinator: TransactionCoordinator,
        publisher: NotificationPublisher | None = None,
        repo: OrderRepositoryProtocol | None = None,
        hire_repo: HireRequestRepositoryProtocol | None = None,
        wallet_repo: WalletRepositoryProtocol | None = None,
        notification_repo: NotificationRepositoryProtocol | None = None,
        numbers: OrderNumberAllocator | None = None,
        fee_rate_bps: int | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._publisher = publisher or NotificationPublisher()
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()
        self._hires: HireRequestRepositoryProtocol = hire_repo or HireRequestRepository()
        self._wallet: WalletRepositoryProtocol = wallet_repo or WalletRepository()
        self._notifications: NotificationRepositoryProtocol = (
            notification_repo or NotificationRepository()
        )
        self._numbers = numbers or OrderNumberAllocator(self._repo)
        self._fee_rate_bps = settings.PLATFORM_FEE_BPS if fee_rate_bps is None else fee_rate_bps

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_order(self, hire_request_id: str, actor: Actor) -> OrderResponse:
        async def work(db: AsyncSession) -> tuple[Order, list[Notification]]:
            hire = await self._hires.get_for_update(db, hire_request_id)
            if hire is None:
                raise HireRequestNotFoundError(hire_request_id)
            if hire.status != HireStatus.ACCEPTED:
                raise InvalidTransitionError("hire request", hire.status, "ORDERED")
            if PartyRole.BUYER not in actor.party_roles(hire.buyer_id, hire.student_id):
                raise ForbiddenError("Only the buyer can place an order")
            if await self._repo.exists_for_hire(db, hire_request_id):
                raise OrderAlreadyExistsError(hire_request_id)

            order_number = await self._numbers.allocate(db)
            order = await self._repo.insert(
                db,
                Order(
                    id=generate_id(),
                    order_number=order_number,
                    hire_request_id=hire.id,
                    buyer_id=hire.buyer_id,
                    student_id=hire.student_id,
                    service_id=hire.service_id,
                    amount_cents=hire.price_cents,
                    status=OrderStatus.PENDING.value,
                ),
            )
            sent = await notify(
                db,
                self._notifications,
                [
                    NotificationDraft(
                        uid,
                        NotificationType.ORDER_CREATED.value,
                        "New Order Created",
                        f"Order #{order.order_number} has been created.",
                    )
                    for uid in (order.buyer_id, order.student_id)
                ],
            )
            return order, sent

        try:
            order, sent = await self._coordinator.run_atomic(work)
        except StorageConflictError as exc:
            logger.warning(
                "Order for hire %s hit %s; retrying once", hire_request_id, exc.constraint
            )
            order, sent = await self._coordinator.run_atomic(work)

        await self._publisher.publish(sent)
        logger.info(
            "Order %s #%s created: buyer=%s student=%s amount=%d",
            order.id, order.order_number, order.buyer_id, order.student_id, order.amount_cents,
        )
        return OrderResponse.from_domain(order)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def apply_transition(
        self,
        db: AsyncSession,
        order: Order,
        target: str,
        roles: frozenset[PartyRole],
        actor_id: str | None = None,
    ) -> tuple[Order, list[NotificationDraft]]:
        """Validate and apply one transition inside the caller's transaction.

        The caller must hold the row lock (get_for_update) on ``order``.
        """
        target = state_value(target)
        ORDER_MACHINE.check(order.status, target, roles)
        if (
            order.status == OrderStatus.DISPUTED
            and target == OrderStatus.COMPLETED
            and not order.is_paid
        ):
            # Nothing in escrow to release
            raise InvalidTransitionError(ORDER_MACHINE.entity, order.status, target)

        paid_at = order.paid_at
        legs: list[WalletLeg] = []
        if target == OrderStatus.PAID:
            paid_at = utc_now()
            legs = capture_legs(order)
        elif target == OrderStatus.COMPLETED and order.is_paid:
            legs = release_legs(order, self._fee_rate_bps)
        elif target == OrderStatus.CANCELLED and order.is_paid:
            legs = refund_legs(order)

        updated = await self._repo.update_status(db, order.id, target, paid_at)
        await post_wallet_legs(db, self._wallet, legs)
        return updated, _status_drafts(updated, target, actor_id)

    async def transition(self, order_id: str, target: str, actor: Actor) -> OrderResponse:
        target = state_value(target)

        async def work(db: AsyncSession) -> tuple[Order, list[Notification]]:
            order = await self._load_for_update(db, order_id)
            roles = actor.party_roles(order.buyer_id, order.student_id)
            ORDER_MACHINE.check(order.status, target, roles)
            if OrderStatus.DISPUTED in (state_value(order.status), target):
                # Only ct_dispute moves an order in or out of DISPUTED
                raise InvalidTransitionError(ORDER_MACHINE.entity, order.status, target)
            updated, drafts = await self.apply_transition(
                db, order, target, roles, actor.user_id
            )
            sent = await notify(db, self._notifications, drafts)
            return updated, sent

        order, sent = await self._coordinator.run_atomic(work)
        await self._publisher.publish(sent)
        logger.info("Order %s → %s by %s", order_id, target, actor.user_id)
        return OrderResponse.from_domain(order)

    async def pay_order(self, order_id: str, actor: Actor) -> OrderResponse:
        return await self.transition(order_id, OrderStatus.PAID.value, actor)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_order(self, order_id: str, actor: Actor) -> OrderResponse:
        async def work(db: AsyncSession) -> Order | None:
            return await self._repo.get_by_id(db, order_id)

        order = await self._coordinator.run_atomic(work)
        if order is None:
            raise OrderNotFoundError(order_id)
        if not actor.party_roles(order.buyer_id, order.student_id):
            raise ForbiddenError()
        return OrderResponse.from_domain(order)

    async def list_orders(
        self, actor: Actor, status: str | None, cursor: str | None, limit: int
    ) -> OrderListResponse:
        if status is not None and status not in ORDER_MACHINE.states:
            raise ValidationError("status", f"unknown order status {status}")
        cursor_id = cursor_decode(cursor)
        if cursor_id is not None and not isinstance(cursor_id, str):
            cursor_id = None
        user_filter = None if actor.is_admin else actor.user_id

        async def work(db: AsyncSession) -> list[Order]:
            return await self._repo.list_for_user(db, user_filter, status, cursor_id, limit + 1)

        rows = await self._coordinator.run_atomic(work)
        has_more = len(rows) > limit
        page = rows[:limit]
        return OrderListResponse(
            items=[OrderResponse.from_domain(o) for o in page],
            next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
            has_more=has_more,
        )

    async def _load_for_update(self, db: AsyncSession, order_id: str) -> Order:
        order = await self._repo.get_for_update(db, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order
