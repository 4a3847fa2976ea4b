"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ct_wallet.domain.models import WalletEntry, WalletLeg


class WalletRepositoryProtocol(Protocol):
    async def append(self, db: AsyncSession, leg: WalletLeg) -> WalletEntry: ...

    async def get_balance(self, db: AsyncSession, user_id: str) -> int: ...

    async def list_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
    ) -> list[WalletEntry]: ...
