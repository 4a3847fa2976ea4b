"""OrderRepository Protocol."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ct_order.domain.models import Order


class OrderRepositoryProtocol(Protocol):
    async def number_taken(self, db: AsyncSession, order_number: str) -> bool: ...

    async def exists_for_hire(self, db: AsyncSession, hire_request_id: str) -> bool: ...

    async def insert(self, db: AsyncSession, order: Order) -> Order: ...

    async def get_by_id(self, db: AsyncSession, order_id: str) -> Order | None: ...

    async def get_for_update(self, db: AsyncSession, order_id: str) -> Order | None: ...

    async def update_status(
        self, db: AsyncSession, order_id: str, status: str, paid_at: datetime | None
    ) -> Order: ...

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str | None,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]: ...
