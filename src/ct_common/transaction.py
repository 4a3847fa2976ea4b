"""TransactionCoordinator — the only place a write transaction is opened.

Every lifecycle operation hands its whole unit of work to ``run_atomic``:
the work receives the transactional session and must use it for every read
and write (including the order-number uniqueness probe). Either everything
the work wrote commits, or nothing does.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)

T = TypeVar("T")

AtomicWork = Callable[[AsyncSession], Awaitable[T]]


class TransactionCoordinator:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def run_atomic(self, work: AtomicWork[T]) -> T:
        """Run ``work`` inside one transaction.

        Commits when ``work`` returns, rolls back when it raises. The raised
        exception propagates unchanged.
        """
        async with self._session_factory() as session:
            try:
                async with session.begin():
                    return await work(session)
            except Exception as exc:
                logger.debug("Transaction rolled back: %s", type(exc).__name__)
                raise
