"""Order number allocation over the orders table.

Order numbers are the decimal string of a value in
[ORDER_NUMBER_MIN, ORDER_NUMBER_MAX]. The uniqueness probe runs on the
session of the transaction that will insert the order; the UNIQUE
constraint on orders.order_number catches the remaining race between two
concurrent transactions.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.ct_common.keyspace import KeyspaceAllocator
from src.ct_order.domain.repository import OrderRepositoryProtocol


def format_order_number(value: int) -> str:
    return str(value)


def default_allocator() -> KeyspaceAllocator:
    return KeyspaceAllocator(
        settings.ORDER_NUMBER_MIN,
        settings.ORDER_NUMBER_MAX,
        max_random_attempts=settings.ORDER_NUMBER_RANDOM_ATTEMPTS,
    )


class OrderNumberAllocator:
    def __init__(
        self, repo: OrderRepositoryProtocol, allocator: KeyspaceAllocator | None = None
    ) -> None:
        self._repo = repo
        self._allocator = allocator or default_allocator()

    async def allocate(self, db: AsyncSession) -> str:
        async def is_taken(candidate: int) -> bool:
            return await self._repo.number_taken(db, format_order_number(candidate))

        return format_order_number(await self._allocator.allocate(is_taken))
