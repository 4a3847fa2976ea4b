"""DisputeRepository Protocol."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ct_dispute.domain.models import Dispute


class DisputeRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, dispute: Dispute) -> Dispute: ...

    async def get_by_id(self, db: AsyncSession, dispute_id: str) -> Dispute | None: ...

    async def get_for_update(self, db: AsyncSession, dispute_id: str) -> Dispute | None: ...

    async def update(
        self,
        db: AsyncSession,
        dispute_id: str,
        status: str,
        resolution: str | None = None,
        resolution_note: str | None = None,
        resolved_at: datetime | None = None,
    ) -> Dispute: ...

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str | None,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Dispute]: ...
