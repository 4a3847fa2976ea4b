"""WalletApplicationService — append-only ledger operations.

``post`` is the in-transaction primitive other modules call with their own
session (payment capture, payout release, refund). ``record_wallet_entry``
is the standalone operation and opens its own atomic unit.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.ct_common.cents import validate_amount
from src.ct_common.enums import WalletEntryType
from src.ct_common.errors import ValidationError
from src.ct_common.pagination import cursor_decode, cursor_encode
from src.ct_common.transaction import TransactionCoordinator
from src.ct_wallet.application.schemas import (
    BalanceResponse,
    WalletEntriesResponse,
    WalletEntryItem,
)
from src.ct_wallet.domain.models import WalletEntry, WalletLeg
from src.ct_wallet.domain.repository import WalletRepositoryProtocol
from src.ct_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


async def post(
    db: AsyncSession, repo: WalletRepositoryProtocol, legs: list[WalletLeg]
) -> list[WalletEntry]:
    """Append every leg inside the caller's transaction."""
    entries = []
    for leg in legs:
        validate_amount(leg.amount_cents)
        entries.append(await repo.append(db, leg))
    return entries


class WalletApplicationService:
    def __init__(
        self,
        coordinator: TransactionCoordinator,
        repo: WalletRepositoryProtocol | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._repo: WalletRepositoryProtocol = repo or WalletRepository()

    async def record_wallet_entry(
        self,
        user_id: str,
        amount_cents: int,
        reason: str,
        entry_type: str = WalletEntryType.ADJUSTMENT.value,
    ) -> WalletEntry:
        validate_amount(amount_cents)
        if not reason or not reason.strip():
            raise ValidationError("reason", "must not be empty")
        leg = WalletLeg(
            user_id=user_id,
            amount_cents=amount_cents,
            entry_type=entry_type,
            reason=reason,
        )

        async def work(db: AsyncSession) -> WalletEntry:
            return await self._repo.append(db, leg)

        entry = await self._coordinator.run_atomic(work)
        logger.info(
            "Wallet entry %d: user=%s amount=%d type=%s",
            entry.id, user_id, amount_cents, entry_type,
        )
        return entry

    async def get_balance(self, user_id: str) -> BalanceResponse:
        async def work(db: AsyncSession) -> int:
            return await self._repo.get_balance(db, user_id)

        balance = await self._coordinator.run_atomic(work)
        return BalanceResponse.from_cents(user_id, balance)

    async def list_entries(
        self, user_id: str, cursor: str | None, limit: int
    ) -> WalletEntriesResponse:
        cursor_id = cursor_decode(cursor)
        if cursor_id is not None and not isinstance(cursor_id, int):
            cursor_id = None

        async def work(db: AsyncSession) -> list[WalletEntry]:
            return await self._repo.list_entries(db, user_id, cursor_id, limit + 1)

        entries = await self._coordinator.run_atomic(work)
        has_more = len(entries) > limit
        page = entries[:limit]
        return WalletEntriesResponse(
            items=[WalletEntryItem.from_domain(e) for e in page],
            next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
            has_more=has_more,
        )
