"""HireRequestRepository — raw SQL persistence for hire requests.

Transaction ownership: every method runs inside the caller's
TransactionCoordinator.run_atomic session.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ct_common.errors import HireRequestNotFoundError, InternalError
from src.ct_hire.domain.models import HireRequest, ServiceListing

_COLUMNS = (
    "id, buyer_id, student_id, service_id, message, price_cents, status, "
    "created_at, updated_at"
)

_GET_SERVICE_SQL = text("""
    SELECT id, owner_id, title, price_cents, is_active
    FROM services
    WHERE id = :id
""")

_HAS_PENDING_SQL = text("""
    SELECT 1 FROM hire_requests
    WHERE buyer_id = :buyer_id AND service_id = :service_id AND status = 'PENDING'
    LIMIT 1
""")

_INSERT_SQL = text(f"""
    INSERT INTO hire_requests
        (id, buyer_id, student_id, service_id, message, price_cents, status,
         created_at, updated_at)
    VALUES
        (:id, :buyer_id, :student_id, :service_id, :message, :price_cents, :status,
         NOW(), NOW())
    RETURNING {_COLUMNS}
""")

_GET_BY_ID_SQL = text(f"SELECT {_COLUMNS} FROM hire_requests WHERE id = :id")

_GET_FOR_UPDATE_SQL = text(f"SELECT {_COLUMNS} FROM hire_requests WHERE id = :id FOR UPDATE")

_UPDATE_STATUS_SQL = text(f"""
    UPDATE hire_requests
    SET status = :status, updated_at = NOW()
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

# A hire request is consumed once a contract or an order references it
_IS_CONSUMED_SQL = text("""
    SELECT EXISTS (SELECT 1 FROM contracts WHERE hire_request_id = :id)
        OR EXISTS (SELECT 1 FROM orders WHERE hire_request_id = :id)
""")

_DELETE_SQL = text("DELETE FROM hire_requests WHERE id = :id")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM hire_requests
    WHERE (CAST(:user_id AS TEXT) IS NULL OR buyer_id = :user_id OR student_id = :user_id)
      AND (CAST(:status AS TEXT) IS NULL OR status = :status)
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_hire(row: Any) -> HireRequest:
    return HireRequest(
        id=row.id,
        buyer_id=row.buyer_id,
        student_id=row.student_id,
        service_id=row.service_id,
        message=row.message,
        price_cents=row.price_cents,
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class HireRequestRepository:
    """Concrete implementation of HireRequestRepositoryProtocol."""

    async def get_service(self, db: AsyncSession, service_id: str) -> ServiceListing | None:
        result = await db.execute(_GET_SERVICE_SQL, {"id": service_id})
        row = result.fetchone()
        if row is None:
            return None
        return ServiceListing(
            id=row.id,
            owner_id=row.owner_id,
            title=row.title,
            price_cents=row.price_cents,
            is_active=row.is_active,
        )

    async def has_pending(self, db: AsyncSession, buyer_id: str, service_id: str) -> bool:
        result = await db.execute(
            _HAS_PENDING_SQL, {"buyer_id": buyer_id, "service_id": service_id}
        )
        return result.fetchone() is not None

    async def insert(self, db: AsyncSession, hire: HireRequest) -> HireRequest:
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": hire.id,
                "buyer_id": hire.buyer_id,
                "student_id": hire.student_id,
                "service_id": hire.service_id,
                "message": hire.message,
                "price_cents": hire.price_cents,
                "status": hire.status,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Hire request insert returned no rows")
        return _row_to_hire(row)

    async def get_by_id(self, db: AsyncSession, hire_id: str) -> HireRequest | None:
        result = await db.execute(_GET_BY_ID_SQL, {"id": hire_id})
        row = result.fetchone()
        return _row_to_hire(row) if row else None

    async def get_for_update(self, db: AsyncSession, hire_id: str) -> HireRequest | None:
        result = await db.execute(_GET_FOR_UPDATE_SQL, {"id": hire_id})
        row = result.fetchone()
        return _row_to_hire(row) if row else None

    async def update_status(self, db: AsyncSession, hire_id: str, status: str) -> HireRequest:
        result = await db.execute(_UPDATE_STATUS_SQL, {"id": hire_id, "status": status})
        row = result.fetchone()
        if row is None:
            raise HireRequestNotFoundError(hire_id)
        return _row_to_hire(row)

    async def is_consumed(self, db: AsyncSession, hire_id: str) -> bool:
        result = await db.execute(_IS_CONSUMED_SQL, {"id": hire_id})
        return bool(result.scalar_one())

    async def delete(self, db: AsyncSession, hire_id: str) -> None:
        await db.execute(_DELETE_SQL, {"id": hire_id})

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str | None,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[HireRequest]:
        result = await db.execute(
            _LIST_SQL,
            {"user_id": user_id, "status": status, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_hire(row) for row in result.fetchall()]
