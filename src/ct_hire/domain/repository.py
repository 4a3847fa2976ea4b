"""HireRequestRepository Protocol."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ct_hire.domain.models import HireRequest, ServiceListing


class HireRequestRepositoryProtocol(Protocol):
    async def get_service(self, db: AsyncSession, service_id: str) -> ServiceListing | None: ...

    async def has_pending(self, db: AsyncSession, buyer_id: str, service_id: str) -> bool: ...

    async def insert(self, db: AsyncSession, hire: HireRequest) -> HireRequest: ...

    async def get_by_id(self, db: AsyncSession, hire_id: str) -> HireRequest | None: ...

    async def get_for_update(self, db: AsyncSession, hire_id: str) -> HireRequest | None: ...

    async def update_status(self, db: AsyncSession, hire_id: str, status: str) -> HireRequest: ...

    async def is_consumed(self, db: AsyncSession, hire_id: str) -> bool: ...

    async def delete(self, db: AsyncSession, hire_id: str) -> None: ...

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str | None,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[HireRequest]: ...
