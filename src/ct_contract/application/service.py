"""ContractApplicationService — formalize an accepted hire request.

Lifecycle: DRAFT (created by the student from an ACCEPTED hire request)
→ ACTIVE (second signature) → COMPLETED (buyer marks complete, or the
student bundles completion with a progress update).
"""

import logging
from dataclasses import replace

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.ct_common.cents import calculate_fee
from src.ct_common.datetime_utils import utc_now
from src.ct_common.enums import ContractStatus, HireStatus, NotificationType, PartyRole
from src.ct_common.errors import (
    AlreadySignedError,
    ContractAlreadyExistsError,
    ContractNotFoundError,
    ForbiddenError,
    HireRequestNotFoundError,
    InvalidTransitionError,
    ValidationError,
)
from src.ct_common.id_generator import generate_id
from src.ct_common.pagination import cursor_decode, cursor_encode
from src.ct_common.transaction import TransactionCoordinator
from src.ct_contract.application.schemas import ContractListResponse, ContractResponse
from src.ct_contract.domain.models import Contract, ProgressUpdate
from src.ct_contract.domain.repository import ContractRepositoryProtocol
from src.ct_contract.infrastructure.persistence import ContractRepository
from src.ct_hire.domain.repository import HireRequestRepositoryProtocol
from src.ct_hire.infrastructure.persistence import HireRequestRepository
from src.ct_lifecycle.domain.actor import Actor
from src.ct_lifecycle.domain.rules import CONTRACT_MACHINE
from src.ct_lifecycle.domain.state_machine import state_value
from src.ct_notification.application.publisher import NotificationPublisher
from src.ct_notification.application.service import notify
from src.ct_notification.domain.models import Notification, NotificationDraft
from src.ct_notification.domain.repository import NotificationRepositoryProtocol
from src.ct_notification.infrastructure.persistence import NotificationRepository

logger = logging.getLogger(__name__)


class ContractApplicationService:
    def __init__(
        self,
        coordinator: TransactionCoordinator,
        publisher: NotificationPublisher | None = None,
        repo: ContractRepositoryProtocol | None = None,
        hire_repo: HireRequestRepositoryProtocol | None = None,
        notification_repo: NotificationRepositoryProtocol | None = None,
        fee_rate_bps: int | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._publisher = publisher or NotificationPublisher()
        self._repo: ContractRepositoryProtocol = repo or ContractRepository()
        self._hires: HireRequestRepositoryProtocol = hire_repo or HireRequestRepository()
        self._notifications: NotificationRepositoryProtocol = (
            notification_repo or NotificationRepository()
        )
        self._fee_rate_bps = settings.PLATFORM_FEE_BPS if fee_rate_bps is None else fee_rate_bps

    async def create_contract(
        self,
        actor: Actor,
        hire_request_id: str,
        deliverables: list[str],
        timeline_days: int,
        additional_terms: str | None = None,
    ) -> ContractResponse:
        deliverables = [d.strip() for d in deliverables if d and d.strip()]
        if not deliverables:
            raise ValidationError("deliverables", "at least one deliverable is required")
        if not 1 <= timeline_days <= 365:
            raise ValidationError("timeline_days", "must be between 1 and 365")

        async def work(db: AsyncSession) -> tuple[Contract, list[Notification]]:
            hire = await self._hires.get_for_update(db, hire_request_id)
            if hire is None:
                raise HireRequestNotFoundError(hire_request_id)
            if actor.user_id != hire.student_id:
                raise ForbiddenError("Only the student can create the contract")
            if hire.status != HireStatus.ACCEPTED:
                raise InvalidTransitionError("hire request", hire.status, "CONTRACTED")
            if await self._repo.exists_for_hire(db, hire_request_id):
                raise ContractAlreadyExistsError(hire_request_id)

            service = await self._hires.get_service(db, hire.service_id)
            fee = calculate_fee(hire.price_cents, self._fee_rate_bps)
            contract = await self._repo.insert(
                db,
                Contract(
                    id=generate_id(),
                    hire_request_id=hire.id,
                    buyer_id=hire.buyer_id,
                    student_id=hire.student_id,
                    service_id=hire.service_id,
                    title=service.title if service else f"Service {hire.service_id}",
                    deliverables=deliverables,
                    timeline_days=timeline_days,
                    additional_terms=additional_terms,
                    price_cents=hire.price_cents,
                    platform_fee_cents=fee,
                    student_payout_cents=hire.price_cents - fee,
                    status=ContractStatus.DRAFT.value,
                ),
            )
            sent = await notify(
                db,
                self._notifications,
                [
                    NotificationDraft(
                        hire.buyer_id,
                        NotificationType.CONTRACT_CREATED.value,
                        "Contract Created",
                        f'A contract has been created for "{contract.title}". Please review and sign.',
                    )
                ],
            )
            return contract, sent

        contract, sent = await self._coordinator.run_atomic(work)
        await self._publisher.publish(sent)
        logger.info(
            "Contract %s created from hire %s: price=%d fee=%d",
            contract.id, hire_request_id, contract.price_cents, contract.platform_fee_cents,
        )
        return ContractResponse.from_domain(contract)

    async def sign_contract(
        self, contract_id: str, actor: Actor, signature: str
    ) -> ContractResponse:
        """Record the actor's signature; the second signature activates the contract."""
        if not signature or not signature.strip():
            raise ValidationError("signature", "signature is required")

        async def work(db: AsyncSession) -> tuple[Contract, list[Notification]]:
            contract = await self._load_for_update(db, contract_id)
            roles = actor.party_roles(contract.buyer_id, contract.student_id)
            if not roles & {PartyRole.BUYER, PartyRole.STUDENT}:
                raise ForbiddenError()
            if contract.signed_by(actor.user_id):
                raise AlreadySignedError(contract_id)
            if contract.status != ContractStatus.DRAFT:
                raise InvalidTransitionError(
                    CONTRACT_MACHINE.entity, contract.status, ContractStatus.ACTIVE.value
                )

            now = utc_now()
            is_buyer = actor.user_id == contract.buyer_id
            if is_buyer:
                contract = replace(contract, buyer_signature=signature, buyer_signed_at=now)
            else:
                contract = replace(contract, student_signature=signature, student_signed_at=now)

            if contract.fully_signed:
                CONTRACT_MACHINE.check(contract.status, ContractStatus.ACTIVE, roles)
                contract = replace(contract, status=ContractStatus.ACTIVE.value, signed_at=now)

            saved = await self._repo.save(db, contract)
            other = contract.student_id if is_buyer else contract.buyer_id
            signer = "buyer" if is_buyer else "student"
            sent = await notify(
                db,
                self._notifications,
                [
                    NotificationDraft(
                        other,
                        NotificationType.CONTRACT_SIGNED.value,
                        "Contract Signed",
                        f'The {signer} has signed the contract for "{contract.title}".',
                    )
                ],
            )
            return saved, sent

        contract, sent = await self._coordinator.run_atomic(work)
        await self._publisher.publish(sent)
        logger.info("Contract %s signed by %s (status=%s)", contract_id, actor.user_id, contract.status)
        return ContractResponse.from_domain(contract)

    async def update_progress(
        self,
        contract_id: str,
        actor: Actor,
        status: str,
        notes: str,
        attachments: list[str] | None = None,
        mark_as_completed: bool = False,
        completion_notes: str | None = None,
    ) -> ContractResponse:
        """Append a progress update; optionally complete the contract in the same unit."""
        if not status or not status.strip():
            raise ValidationError("status", "progress status is required")

        async def work(db: AsyncSession) -> tuple[Contract, list[ProgressUpdate], list[Notification]]:
            contract = await self._load_for_update(db, contract_id)
            roles = actor.party_roles(contract.buyer_id, contract.student_id)
            if contract.status != ContractStatus.ACTIVE:
                raise InvalidTransitionError(
                    CONTRACT_MACHINE.entity, contract.status, "PROGRESS_UPDATE"
                )
            if PartyRole.STUDENT not in roles:
                raise ForbiddenError("Only the student can update progress")

            await self._repo.add_progress(
                db,
                ProgressUpdate(
                    id=generate_id(),
                    contract_id=contract_id,
                    user_id=actor.user_id,
                    status=status,
                    notes=notes,
                    attachments=list(attachments or []),
                ),
            )
            contract = replace(contract, progress_status=status, progress_notes=notes)
            drafts = [
                NotificationDraft(
                    contract.buyer_id,
                    NotificationType.PROGRESS_UPDATED.value,
                    "Progress Updated",
                    f'Progress has been updated for "{contract.title}": {status}',
                )
            ]
            if mark_as_completed:
                CONTRACT_MACHINE.check(contract.status, ContractStatus.COMPLETED, roles)
                contract = self._completed(contract, completion_notes)
                drafts.append(self._completion_draft(contract, contract.buyer_id))

            saved = await self._repo.save(db, contract)
            progress = await self._repo.list_progress(db, contract_id)
            sent = await notify(db, self._notifications, drafts)
            return saved, progress, sent

        contract, progress, sent = await self._coordinator.run_atomic(work)
        await self._publisher.publish(sent)
        logger.info(
            "Contract %s progress '%s' by %s (completed=%s)",
            contract_id, status, actor.user_id, mark_as_completed,
        )
        return ContractResponse.from_domain(contract, progress)

    async def complete_contract(
        self, contract_id: str, actor: Actor, completion_notes: str | None = None
    ) -> ContractResponse:
        """Buyer marks an ACTIVE contract completed."""

        async def work(db: AsyncSession) -> tuple[Contract, list[Notification]]:
            contract = await self._load_for_update(db, contract_id)
            roles = actor.party_roles(contract.buyer_id, contract.student_id)
            CONTRACT_MACHINE.check(contract.status, ContractStatus.COMPLETED, roles)
            if PartyRole.BUYER not in roles:
                raise ForbiddenError("Students complete a contract through a progress update")

            saved = await self._repo.save(db, self._completed(contract, completion_notes))
            sent = await notify(
                db, self._notifications, [self._completion_draft(saved, saved.student_id)]
            )
            return saved, sent

        contract, sent = await self._coordinator.run_atomic(work)
        await self._publisher.publish(sent)
        logger.info("Contract %s completed by %s", contract_id, actor.user_id)
        return ContractResponse.from_domain(contract)

    async def transition(self, contract_id: str, target: str, actor: Actor) -> ContractResponse:
        """Generic entry point: only completion is reachable by a bare status change."""
        target = state_value(target)
        if target != ContractStatus.COMPLETED:
            raise ValidationError(
                "target_state", "a contract becomes ACTIVE when both parties sign"
            )
        return await self.complete_contract(contract_id, actor)

    async def get_contract(self, contract_id: str, actor: Actor) -> ContractResponse:
        async def work(db: AsyncSession) -> tuple[Contract | None, list[ProgressUpdate]]:
            contract = await self._repo.get_by_id(db, contract_id)
            if contract is None:
                return None, []
            return contract, await self._repo.list_progress(db, contract_id)

        contract, progress = await self._coordinator.run_atomic(work)
        if contract is None:
            raise ContractNotFoundError(contract_id)
        if not actor.party_roles(contract.buyer_id, contract.student_id):
            raise ForbiddenError()
        return ContractResponse.from_domain(contract, progress)

    async def list_contracts(
        self, actor: Actor, status: str | None, cursor: str | None, limit: int
    ) -> ContractListResponse:
        if status is not None and status not in {s.value for s in ContractStatus}:
            raise ValidationError("status", f"unknown contract status {status}")
        cursor_id = cursor_decode(cursor)
        if cursor_id is not None and not isinstance(cursor_id, str):
            cursor_id = None
        user_filter = None if actor.is_admin else actor.user_id

        async def work(db: AsyncSession) -> list[Contract]:
            return await self._repo.list_for_user(db, user_filter, status, cursor_id, limit + 1)

        rows = await self._coordinator.run_atomic(work)
        has_more = len(rows) > limit
        page = rows[:limit]
        return ContractListResponse(
            items=[ContractResponse.from_domain(c) for c in page],
            next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
            has_more=has_more,
        )

    # ------------------------------------------------------------------

    async def _load_for_update(self, db: AsyncSession, contract_id: str) -> Contract:
        contract = await self._repo.get_for_update(db, contract_id)
        if contract is None:
            raise ContractNotFoundError(contract_id)
        return contract

    @staticmethod
    def _completed(contract: Contract, completion_notes: str | None) -> Contract:
        return replace(
            contract,
            status=ContractStatus.COMPLETED.value,
            progress_status=ContractStatus.COMPLETED.value,
            completion_notes=completion_notes,
            completed_at=utc_now(),
        )

    @staticmethod
    def _completion_draft(contract: Contract, user_id: str) -> NotificationDraft:
        return NotificationDraft(
            user_id,
            NotificationType.CONTRACT_COMPLETED.value,
            "Contract Completed",
            f'The contract for "{contract.title}" has been marked completed.',
        )
