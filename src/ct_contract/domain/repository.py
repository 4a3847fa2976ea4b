"""ContractRepository Protocol."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ct_contract.domain.models import Contract, ProgressUpdate


class ContractRepositoryProtocol(Protocol):
    async def exists_for_hire(self, db: AsyncSession, hire_request_id: str) -> bool: ...

    async def insert(self, db: AsyncSession, contract: Contract) -> Contract: ...

    async def get_by_id(self, db: AsyncSession, contract_id: str) -> Contract | None: ...

    async def get_for_update(self, db: AsyncSession, contract_id: str) -> Contract | None: ...

    async def save(self, db: AsyncSession, contract: Contract) -> Contract: ...

    async def add_progress(self, db: AsyncSession, update: ProgressUpdate) -> ProgressUpdate: ...

    async def list_progress(self, db: AsyncSession, contract_id: str) -> list[ProgressUpdate]: ...

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str | None,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Contract]: ...
