"""DisputeApplicationService — raise, review and resolve order disputes.

Raising a dispute and moving the order to DISPUTED commit together.
Resolution is admin-only and settles the order through the same
in-transaction step the order service uses:

  RELEASE → order COMPLETED, escrow paid out to the student
  REFUND  → order CANCELLED, escrow refunded to the buyer (if it was paid)
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.ct_common.datetime_utils import utc_now
from src.ct_common.enums import (
    DisputeResolution,
    DisputeStatus,
    NotificationType,
    OrderStatus,
    PartyRole,
)
from src.ct_common.errors import (
    DisputeNotFoundError,
    ForbiddenError,
    OrderNotFoundError,
    ValidationError,
)
from src.ct_common.id_generator import generate_id
from src.ct_common.pagination import cursor_decode, cursor_encode
from src.ct_common.transaction import TransactionCoordinator
from src.ct_dispute.application.schemas import DisputeListResponse, DisputeResponse
from src.ct_dispute.domain.models import Dispute
from src.ct_dispute.domain.repository import DisputeRepositoryProtocol
from src.ct_dispute.infrastructure.persistence import DisputeRepository
from src.ct_lifecycle.domain.actor import Actor
from src.ct_lifecycle.domain.rules import DISPUTE_MACHINE
from src.ct_lifecycle.domain.state_machine import state_value
from src.ct_notification.application.publisher import NotificationPublisher
from src.ct_notification.application.service import notify
from src.ct_notification.domain.models import Notification, NotificationDraft
from src.ct_notification.domain.repository import NotificationRepositoryProtocol
from src.ct_notification.infrastructure.persistence import NotificationRepository
from src.ct_order.application.service import OrderApplicationService
from src.ct_order.domain.repository import OrderRepositoryProtocol
from src.ct_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)

_RESOLUTION_TARGET = {
    DisputeResolution.RELEASE.value: OrderStatus.COMPLETED.value,
    DisputeResolution.REFUND.value: OrderStatus.CANCELLED.value,
}


class DisputeApplicationService:
    def __init__(
        self,
        coordinator: TransactionCoordinator,
        orders: OrderApplicationService,
        publisher: NotificationPublisher | None = None,
        repo: DisputeRepositoryProtocol | None = None,
        order_repo: OrderRepositoryProtocol | None = None,
        notification_repo: NotificationRepositoryProtocol | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._orders = orders
        self._publisher = publisher or NotificationPublisher()
        self._repo: DisputeRepositoryProtocol = repo or DisputeRepository()
        self._order_repo: OrderRepositoryProtocol = order_repo or OrderRepository()
        self._notifications: NotificationRepositoryProtocol = (
            notification_repo or NotificationRepository()
        )

    async def raise_dispute(
        self, actor: Actor, order_id: str, title: str, description: str
    ) -> DisputeResponse:
        if not title.strip():
            raise ValidationError("title", "must not be empty")
        if not description.strip():
            raise ValidationError("description", "must not be empty")

        async def work(db: AsyncSession) -> tuple[Dispute, list[Notification]]:
            order = await self._order_repo.get_for_update(db, order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            roles = actor.party_roles(order.buyer_id, order.student_id)
            await self._orders.apply_transition(
                db, order, OrderStatus.DISPUTED, roles, actor.user_id
            )
            dispute = await self._repo.insert(
                db,
                Dispute(
                    id=generate_id(),
                    order_id=order_id,
                    raised_by_id=actor.user_id,
                    title=title,
                    description=description,
                    status=DisputeStatus.OPEN.value,
                ),
            )
            other = order.student_id if actor.user_id == order.buyer_id else order.buyer_id
            sent = await notify(
                db,
                self._notifications,
                [
                    NotificationDraft(
                        other,
                        NotificationType.DISPUTE_RAISED.value,
                        "Dispute Raised",
                        f"A dispute has been raised for order #{order.order_number}: {title}",
                    )
                ],
            )
            return dispute, sent

        dispute, sent = await self._coordinator.run_atomic(work)
        await self._publisher.publish(sent)
        logger.info("Dispute %s raised on order %s by %s", dispute.id, order_id, actor.user_id)
        return DisputeResponse.from_domain(dispute)

    async def start_review(self, dispute_id: str, admin: Actor) -> DisputeResponse:
        async def work(db: AsyncSession) -> Dispute:
            dispute = await self._load_for_update(db, dispute_id)
            DISPUTE_MACHINE.check(
                dispute.status, DisputeStatus.UNDER_REVIEW, self._roles(admin, dispute)
            )
            return await self._repo.update(db, dispute_id, DisputeStatus.UNDER_REVIEW.value)

        dispute = await self._coordinator.run_atomic(work)
        logger.info("Dispute %s under review by %s", dispute_id, admin.user_id)
        return DisputeResponse.from_domain(dispute)

    async def resolve(
        self,
        dispute_id: str,
        admin: Actor,
        resolution: str,
        note: str | None = None,
    ) -> DisputeResponse:
        resolution = state_value(resolution)
        target = _RESOLUTION_TARGET.get(resolution)
        if target is None:
            raise ValidationError("resolution", f"unknown resolution {resolution}")

        async def work(db: AsyncSession) -> tuple[Dispute, list[Notification]]:
            dispute = await self._load_for_update(db, dispute_id)
            roles = self._roles(admin, dispute)
            DISPUTE_MACHINE.check(dispute.status, DisputeStatus.RESOLVED, roles)

            order = await self._order_repo.get_for_update(db, dispute.order_id)
            if order is None:
                raise OrderNotFoundError(dispute.order_id)
            settled, _ = await self._orders.apply_transition(
                db, order, target, roles, admin.user_id
            )
            resolved = await self._repo.update(
                db,
                dispute_id,
                DisputeStatus.RESOLVED.value,
                resolution=resolution,
                resolution_note=note,
                resolved_at=utc_now(),
            )
            sent = await notify(
                db,
                self._notifications,
                [
                    NotificationDraft(
                        uid,
                        NotificationType.DISPUTE_RESOLVED.value,
                        "Dispute Resolved",
                        f"The dispute on order #{settled.order_number} was resolved: "
                        f"order {settled.status}",
                    )
                    for uid in (order.buyer_id, order.student_id)
                ],
            )
            return resolved, sent

        dispute, sent = await self._coordinator.run_atomic(work)
        await self._publisher.publish(sent)
        logger.info(
            "Dispute %s resolved (%s) by %s", dispute_id, dispute.resolution, admin.user_id
        )
        return DisputeResponse.from_domain(dispute)

    async def get_dispute(self, dispute_id: str, actor: Actor) -> DisputeResponse:
        async def work(db: AsyncSession) -> Dispute | None:
            return await self._repo.get_by_id(db, dispute_id)

        dispute = await self._coordinator.run_atomic(work)
        if dispute is None:
            raise DisputeNotFoundError(dispute_id)
        if not self._roles(actor, dispute):
            raise ForbiddenError()
        return DisputeResponse.from_domain(dispute)

    async def list_disputes(
        self, actor: Actor, status: str | None, cursor: str | None, limit: int
    ) -> DisputeListResponse:
        if status is not None and status not in DISPUTE_MACHINE.states:
            raise ValidationError("status", f"unknown dispute status {status}")
        cursor_id = cursor_decode(cursor)
        if cursor_id is not None and not isinstance(cursor_id, str):
            cursor_id = None
        user_filter = None if actor.is_admin else actor.user_id

        async def work(db: AsyncSession) -> list[Dispute]:
            return await self._repo.list_for_user(db, user_filter, status, cursor_id, limit + 1)

        rows = await self._coordinator.run_atomic(work)
        has_more = len(rows) > limit
        page = rows[:limit]
        return DisputeListResponse(
            items=[DisputeResponse.from_domain(d) for d in page],
            next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
            has_more=has_more,
        )

    async def _load_for_update(self, db: AsyncSession, dispute_id: str) -> Dispute:
        dispute = await self._repo.get_for_update(db, dispute_id)
        if dispute is None:
            raise DisputeNotFoundError(dispute_id)
        return dispute

    @staticmethod
    def _roles(actor: Actor, dispute: Dispute) -> frozenset[PartyRole]:
        return actor.party_roles(dispute.buyer_id or "", dispute.student_id or "")

