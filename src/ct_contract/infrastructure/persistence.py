"""ContractRepository — raw SQL persistence for contracts and progress updates.

JSONB columns are bound as JSON text and decoded on the way out; with
untyped text() queries asyncpg hands JSONB back as a string.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ct_common.errors import ContractNotFoundError, InternalError
from src.ct_contract.domain.models import Contract, ProgressUpdate

_COLUMNS = """
    id, hire_request_id, buyer_id, student_id, service_id, title, deliverables,
    timeline_days, additional_terms, price_cents, platform_fee_cents,
    student_payout_cents, status, buyer_signature, buyer_signed_at,
    student_signature, student_signed_at, signed_at, progress_status,
    progress_notes, completion_notes, completed_at, created_at, updated_at
"""

_EXISTS_FOR_HIRE_SQL = text(
    "SELECT 1 FROM contracts WHERE hire_request_id = :hire_request_id LIMIT 1"
)

_INSERT_SQL = text(f"""
    INSERT INTO contracts
        (id, hire_request_id, buyer_id, student_id, service_id, title, deliverables,
         timeline_days, additional_terms, price_cents, platform_fee_cents,
         student_payout_cents, status, created_at, updated_at)
    VALUES
        (:id, :hire_request_id, :buyer_id, :student_id, :service_id, :title,
         CAST(:deliverables AS JSONB), :timeline_days, :additional_terms, :price_cents,
         :platform_fee_cents, :student_payout_cents, :status, NOW(), NOW())
    RETURNING {_COLUMNS}
""")

_GET_BY_ID_SQL = text(f"SELECT {_COLUMNS} FROM contracts WHERE id = :id")

_GET_FOR_UPDATE_SQL = text(f"SELECT {_COLUMNS} FROM contracts WHERE id = :id FOR UPDATE")

_SAVE_SQL = text(f"""
    UPDATE contracts
    SET status = :status,
        buyer_signature = :buyer_signature,
        buyer_signed_at = :buyer_signed_at,
        student_signature = :student_signature,
        student_signed_at = :student_signed_at,
        signed_at = :signed_at,
        progress_status = :progress_status,
        progress_notes = :progress_notes,
        completion_notes = :completion_notes,
        completed_at = :completed_at,
        updated_at = NOW()
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

_INSERT_PROGRESS_SQL = text("""
    INSERT INTO contract_progress (id, contract_id, user_id, status, notes, attachments)
    VALUES (:id, :contract_id, :user_id, :status, :notes, CAST(:attachments AS JSONB))
    RETURNING id, contract_id, user_id, status, notes, attachments, created_at
""")

_LIST_PROGRESS_SQL = text("""
    SELECT id, contract_id, user_id, status, notes, attachments, created_at
    FROM contract_progress
    WHERE contract_id = :contract_id
    ORDER BY id DESC
""")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM contracts
    WHERE (CAST(:user_id AS TEXT) IS NULL OR buyer_id = :user_id OR student_id = :user_id)
      AND (CAST(:status AS TEXT) IS NULL OR status = :status)
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")


def _load_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return list(json.loads(value))
    return list(value)


def _row_to_contract(row: Any) -> Contract:
    return Contract(
        id=row.id,
        hire_request_id=row.hire_request_id,
        buyer_id=row.buyer_id,
        student_id=row.student_id,
        service_id=row.service_id,
        title=row.title,
        deliverables=_load_list(row.deliverables),
        timeline_days=row.timeline_days,
        additional_terms=row.additional_terms,
        price_cents=row.price_cents,
        platform_fee_cents=row.platform_fee_cents,
        student_payout_cents=row.student_payout_cents,
        status=row.status,
        buyer_signature=row.buyer_signature,
        buyer_signed_at=row.buyer_signed_at,
        student_signature=row.student_signature,
        student_signed_at=row.student_signed_at,
        signed_at=row.signed_at,
        progress_status=row.progress_status,
        progress_notes=row.progress_notes,
        completion_notes=row.completion_notes,
        completed_at=row.completed_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_progress(row: Any) -> ProgressUpdate:
    return ProgressUpdate(
        id=row.id,
        contract_id=row.contract_id,
        user_id=row.user_id,
        status=row.status,
        notes=row.notes,
        attachments=_load_list(row.attachments),
        created_at=row.created_at,
    )


class ContractRepository:
    """Concrete implementation of ContractRepositoryProtocol."""

    async def exists_for_hire(self, db: AsyncSession, hire_request_id: str) -> bool:
        result = await db.execute(_EXISTS_FOR_HIRE_SQL, {"hire_request_id": hire_request_id})
        return result.fetchone() is not None

    async def insert(self, db: AsyncSession, contract: Contract) -> Contract:
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": contract.id,
                "hire_request_id": contract.hire_request_id,
                "buyer_id": contract.buyer_id,
                "student_id": contract.student_id,
                "service_id": contract.service_id,
                "title": contract.title,
                "deliverables": json.dumps(contract.deliverables),
                "timeline_days": contract.timeline_days,
                "additional_terms": contract.additional_terms,
                "price_cents": contract.price_cents,
                "platform_fee_cents": contract.platform_fee_cents,
                "student_payout_cents": contract.student_payout_cents,
                "status": contract.status,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Contract insert returned no rows")
        return _row_to_contract(row)

    async def get_by_id(self, db: AsyncSession, contract_id: str) -> Contract | None:
        result = await db.execute(_GET_BY_ID_SQL, {"id": contract_id})
        row = result.fetchone()
        return _row_to_contract(row) if row else None

    async def get_for_update(self, db: AsyncSession, contract_id: str) -> Contract | None:
        result = await db.execute(_GET_FOR_UPDATE_SQL, {"id": contract_id})
        row = result.fetchone()
        return _row_to_contract(row) if row else None

    async def save(self, db: AsyncSession, contract: Contract) -> Contract:
        result = await db.execute(
            _SAVE_SQL,
            {
                "id": contract.id,
                "status": contract.status,
                "buyer_signature": contract.buyer_signature,
                "buyer_signed_at": contract.buyer_signed_at,
                "student_signature": contract.student_signature,
                "student_signed_at": contract.student_signed_at,
                "signed_at": contract.signed_at,
                "progress_status": contract.progress_status,
                "progress_notes": contract.progress_notes,
                "completion_notes": contract.completion_notes,
                "completed_at": contract.completed_at,
            },
        )
        row = result.fetchone()
        if row is None:
            raise ContractNotFoundError(contract.id)
        return _row_to_contract(row)

    async def add_progress(self, db: AsyncSession, update: ProgressUpdate) -> ProgressUpdate:
        result = await db.execute(
            _INSERT_PROGRESS_SQL,
            {
                "id": update.id,
                "contract_id": update.contract_id,
                "user_id": update.user_id,
                "status": update.status,
                "notes": update.notes,
                "attachments": json.dumps(list(update.attachments)),
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Progress insert returned no rows")
        return _row_to_progress(row)

    async def list_progress(self, db: AsyncSession, contract_id: str) -> list[ProgressUpdate]:
        result = await db.execute(_LIST_PROGRESS_SQL, {"contract_id": contract_id})
        return [_row_to_progress(row) for row in result.fetchall()]

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str | None,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Contract]:
        result = await db.execute(
            _LIST_SQL,
            {"user_id": user_id, "status": status, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_contract(row) for row in result.fetchall()]
