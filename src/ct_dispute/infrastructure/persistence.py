"""DisputeRepository — raw SQL persistence for disputes.

Reads join the disputed order so callers can check party access without a
second query.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ct_common.errors import DisputeNotFoundError, InternalError
from src.ct_dispute.domain.models import Dispute

_COLUMNS = """
    d.id, d.order_id, d.raised_by_id, d.title, d.description, d.status,
    d.resolution, d.resolution_note, d.created_at, d.updated_at, d.resolved_at,
    o.buyer_id, o.student_id
"""

_INSERT_SQL = text("""
    INSERT INTO disputes (id, order_id, raised_by_id, title, description, status,
        created_at, updated_at)
    VALUES (:id, :order_id, :raised_by_id, :title, :description, :status, NOW(), NOW())
""")

_GET_BY_ID_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM disputes d JOIN orders o ON o.id = d.order_id
    WHERE d.id = :id
""")

_GET_FOR_UPDATE_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM disputes d JOIN orders o ON o.id = d.order_id
    WHERE d.id = :id
    FOR UPDATE OF d
""")

_UPDATE_SQL = text("""
    UPDATE disputes
    SET status = :status,
        resolution = COALESCE(:resolution, resolution),
        resolution_note = COALESCE(:resolution_note, resolution_note),
        resolved_at = COALESCE(:resolved_at, resolved_at),
        updated_at = NOW()
    WHERE id = :id
""")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM disputes d JOIN orders o ON o.id = d.order_id
    WHERE (CAST(:user_id AS TEXT) IS NULL OR o.buyer_id = :user_id OR o.student_id = :user_id)
      AND (CAST(:status AS TEXT) IS NULL OR d.status = :status)
      AND (CAST(:cursor_id AS TEXT) IS NULL OR d.id < :cursor_id)
    ORDER BY d.id DESC
    LIMIT :limit
""")


def _row_to_dispute(row: Any) -> Dispute:
    return Dispute(
        id=row.id,
        order_id=row.order_id,
        raised_by_id=row.raised_by_id,
        title=row.title,
        description=row.description,
        status=row.status,
        resolution=row.resolution,
        resolution_note=row.resolution_note,
        buyer_id=row.buyer_id,
        student_id=row.student_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
        resolved_at=row.resolved_at,
    )


class DisputeRepository:
    """Concrete implementation of DisputeRepositoryProtocol."""

    async def insert(self, db: AsyncSession, dispute: Dispute) -> Dispute:
        await db.execute(
            _INSERT_SQL,
            {
                "id": dispute.id,
                "order_id": dispute.order_id,
                "raised_by_id": dispute.raised_by_id,
                "title": dispute.title,
                "description": dispute.description,
                "status": dispute.status,
            },
        )
        saved = await self.get_by_id(db, dispute.id)
        if saved is None:
            raise InternalError("Dispute insert not visible in its own transaction")
        return saved

    async def get_by_id(self, db: AsyncSession, dispute_id: str) -> Dispute | None:
        result = await db.execute(_GET_BY_ID_SQL, {"id": dispute_id})
        row = result.fetchone()
        return _row_to_dispute(row) if row else None

    async def get_for_update(self, db: AsyncSession, dispute_id: str) -> Dispute | None:
        result = await db.execute(_GET_FOR_UPDATE_SQL, {"id": dispute_id})
        row = result.fetchone()
        return _row_to_dispute(row) if row else None

    async def update(
        self,
        db: AsyncSession,
        dispute_id: str,
        status: str,
        resolution: str | None = None,
        resolution_note: str | None = None,
        resolved_at: datetime | None = None,
    ) -> Dispute:
        await db.execute(
            _UPDATE_SQL,
            {
                "id": dispute_id,
                "status": status,
                "resolution": resolution,
                "resolution_note": resolution_note,
                "resolved_at": resolved_at,
            },
        )
        saved = await self.get_by_id(db, dispute_id)
        if saved is None:
            raise DisputeNotFoundError(dispute_id)
        return saved

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str | None,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Dispute]:
        result = await db.execute(
            _LIST_SQL,
            {"user_id": user_id, "status": status, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_dispute(row) for row in result.fetchall()]
