"""HireApplicationService — hire request creation and status transitions.

Each operation is one TransactionCoordinator unit: the row lock, the state
machine check, the status write and the notification rows commit together.
Notifications are pushed to Redis only after the commit.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.ct_common.cents import validate_amount
from src.ct_common.enums import HireStatus, NotificationType, PartyRole
from src.ct_common.errors import (
    ForbiddenError,
    HireRequestNotFoundError,
    InvalidTransitionError,
    PendingHireExistsError,
    ServiceNotFoundError,
    ValidationError,
)
from src.ct_common.id_generator import generate_id
from src.ct_common.pagination import cursor_decode, cursor_encode
from src.ct_common.transaction import TransactionCoordinator
from src.ct_hire.application.schemas import HireRequestListResponse, HireRequestResponse
from src.ct_hire.domain.models import HireRequest
from src.ct_hire.domain.repository import HireRequestRepositoryProtocol
from src.ct_hire.infrastructure.persistence import HireRequestRepository
from src.ct_lifecycle.domain.actor import Actor
from src.ct_lifecycle.domain.rules import HIRE_REQUEST_MACHINE
from src.ct_lifecycle.domain.state_machine import state_value
from src.ct_notification.application.publisher import NotificationPublisher
from src.ct_notification.application.service import notify
from src.ct_notification.domain.models import Notification, NotificationDraft
from src.ct_notification.domain.repository import NotificationRepositoryProtocol
from src.ct_notification.infrastructure.persistence import NotificationRepository

logger = logging.getLogger(__name__)


def _transition_drafts(hire: HireRequest, target: str, actor_id: str) -> list[NotificationDraft]:
    if target == HireStatus.ACCEPTED:
        return [
            NotificationDraft(
                hire.buyer_id,
                NotificationType.HIRE_ACCEPTED.value,
                "Hire Request Accepted",
                "Your hire request has been accepted. Create the contract to proceed.",
            )
        ]
    if target == HireStatus.REJECTED:
        return [
            NotificationDraft(
                hire.buyer_id,
                NotificationType.HIRE_REJECTED.value,
                "Hire Request Rejected",
                "Your hire request has been rejected.",
            )
        ]
    other = hire.student_id if actor_id == hire.buyer_id else hire.buyer_id
    return [
        NotificationDraft(
            other,
            NotificationType.HIRE_CANCELLED.value,
            "Hire Request Cancelled",
            "A hire request you are part of has been cancelled.",
        )
    ]


class HireApplicationService:
    def __init__(
        self,
        coordinator: TransactionCoordinator,
        publisher: NotificationPublisher | None = None,
        repo: HireRequestRepositoryProtocol | None = None,
        notification_repo: NotificationRepositoryProtocol | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._publisher = publisher or NotificationPublisher()
        self._repo: HireRequestRepositoryProtocol = repo or HireRequestRepository()
        self._notifications: NotificationRepositoryProtocol = (
            notification_repo or NotificationRepository()
        )

    async def create_hire_request(
        self,
        actor: Actor,
        service_id: str,
        message: str | None = None,
        price_cents: int | None = None,
    ) -> HireRequestResponse:
        if price_cents is not None:
            validate_amount(price_cents, "price_cents")
            if price_cents < 0:
                raise ValidationError("price_cents", "must be positive")

        async def work(db: AsyncSession) -> tuple[HireRequest, list[Notification]]:
            service = await self._repo.get_service(db, service_id)
            if service is None or not service.is_active:
                raise ServiceNotFoundError(service_id)
            if service.owner_id == actor.user_id:
                raise ForbiddenError("You cannot hire yourself")
            if await self._repo.has_pending(db, actor.user_id, service_id):
                raise PendingHireExistsError(service_id)
            agreed_cents = service.price_cents if price_cents is None else price_cents
            if agreed_cents <= 0:
                raise ValidationError("price_cents", "service has no positive price; set one")

            hire = await self._repo.insert(
                db,
                HireRequest(
                    id=generate_id(),
                    buyer_id=actor.user_id,
                    student_id=service.owner_id,
                    service_id=service_id,
                    message=message,
                    price_cents=agreed_cents,
                    status=HireStatus.PENDING.value,
                ),
            )
            sent = await notify(
                db,
                self._notifications,
                [
                    NotificationDraft(
                        service.owner_id,
                        NotificationType.HIRE_REQUESTED.value,
                        "New Hire Request",
                        f'You have received a new hire request for "{service.title}"',
                    )
                ],
            )
            return hire, sent

        hire, sent = await self._coordinator.run_atomic(work)
        await self._publisher.publish(sent)
        logger.info(
            "Hire request %s created: buyer=%s student=%s price=%d",
            hire.id, hire.buyer_id, hire.student_id, hire.price_cents,
        )
        return HireRequestResponse.from_domain(hire)

    async def transition(self, hire_id: str, target: str, actor: Actor) -> HireRequestResponse:
        """Move a hire request to ``target`` if the edge exists and the actor may take it."""
        target = state_value(target)

        async def work(db: AsyncSession) -> tuple[HireRequest, list[Notification]]:
            hire = await self._repo.get_for_update(db, hire_id)
            if hire is None:
                raise HireRequestNotFoundError(hire_id)
            HIRE_REQUEST_MACHINE.check(
                hire.status, target, actor.party_roles(hire.buyer_id, hire.student_id)
            )
            if (
                hire.status == HireStatus.ACCEPTED
                and target == HireStatus.CANCELLED
                and await self._repo.is_consumed(db, hire_id)
            ):
                # A contract or order already depends on this acceptance
                raise InvalidTransitionError(HIRE_REQUEST_MACHINE.entity, hire.status, target)

            updated = await self._repo.update_status(db, hire_id, target)
            sent = await notify(
                db, self._notifications, _transition_drafts(hire, target, actor.user_id)
            )
            return updated, sent

        hire, sent = await self._coordinator.run_atomic(work)
        await self._publisher.publish(sent)
        logger.info("Hire request %s → %s by %s", hire_id, target, actor.user_id)
        return HireRequestResponse.from_domain(hire)

    async def accept(self, hire_id: str, actor: Actor) -> HireRequestResponse:
        return await self.transition(hire_id, HireStatus.ACCEPTED.value, actor)

    async def reject(self, hire_id: str, actor: Actor) -> HireRequestResponse:
        return await self.transition(hire_id, HireStatus.REJECTED.value, actor)

    async def cancel(self, hire_id: str, actor: Actor) -> HireRequestResponse:
        return await self.transition(hire_id, HireStatus.CANCELLED.value, actor)

    async def delete_hire_request(self, hire_id: str, actor: Actor) -> None:
        """Hard-delete a hire request. Only its buyer, only while PENDING."""

        async def work(db: AsyncSession) -> None:
            hire = await self._repo.get_for_update(db, hire_id)
            if hire is None:
                raise HireRequestNotFoundError(hire_id)
            if hire.buyer_id != actor.user_id:
                raise ForbiddenError("You can only delete your own hire requests")
            if hire.status != HireStatus.PENDING:
                raise InvalidTransitionError("hire request", hire.status, "DELETED")
            await self._repo.delete(db, hire_id)

        await self._coordinator.run_atomic(work)
        logger.info("Hire request %s deleted by %s", hire_id, actor.user_id)

    async def get_hire_request(self, hire_id: str, actor: Actor) -> HireRequestResponse:
        async def work(db: AsyncSession) -> HireRequest | None:
            return await self._repo.get_by_id(db, hire_id)

        hire = await self._coordinator.run_atomic(work)
        if hire is None:
            raise HireRequestNotFoundError(hire_id)
        if not actor.party_roles(hire.buyer_id, hire.student_id):
            raise ForbiddenError()
        return HireRequestResponse.from_domain(hire)

    async def list_hire_requests(
        self, actor: Actor, status: str | None, cursor: str | None, limit: int
    ) -> HireRequestListResponse:
        if status is not None and status not in {s.value for s in HireStatus}:
            raise ValidationError("status", f"unknown hire status {status}")
        cursor_id = cursor_decode(cursor)
        if cursor_id is not None and not isinstance(cursor_id, str):
            cursor_id = None
        user_filter = None if actor.is_admin else actor.user_id

        async def work(db: AsyncSession) -> list[HireRequest]:
            return await self._repo.list_for_user(db, user_filter, status, cursor_id, limit + 1)

        rows = await self._coordinator.run_atomic(work)
        has_more = len(rows) > limit
        page = rows[:limit]
        return HireRequestListResponse(
            items=[HireRequestResponse.from_domain(h) for h in page],
            next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
            has_more=has_more,
        )
