"""OrderRepository — raw SQL persistence for orders.

Transaction ownership: every method runs inside the caller's
TransactionCoordinator.run_atomic session. ``insert`` turns a unique
violation into a domain error so the service can decide whether to retry.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.ct_common.errors import (
    InternalError,
    OrderAlreadyExistsError,
    OrderNotFoundError,
    StorageConflictError,
)
from src.ct_order.domain.models import Order
from src.ct_order.infrastructure.db_models import (
    HIRE_REQUEST_CONSTRAINT,
    ORDER_NUMBER_CONSTRAINT,
)

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, order_number, hire_request_id, buyer_id, student_id, service_id,
    amount_cents, status, paid_at, created_at, updated_at
"""

_NUMBER_TAKEN_SQL = text("SELECT 1 FROM orders WHERE order_number = :order_number LIMIT 1")

_EXISTS_FOR_HIRE_SQL = text(
    "SELECT 1 FROM orders WHERE hire_request_id = :hire_request_id LIMIT 1"
)

_INSERT_ORDER_SQL = text(f"""
    INSERT INTO orders (id, order_number, hire_request_id, buyer_id, student_id,
        service_id, amount_cents, status, created_at, updated_at)
    VALUES (:id, :order_number, :hire_request_id, :buyer_id, :student_id,
        :service_id, :amount_cents, :status, NOW(), NOW())
    RETURNING {_SELECT_COLUMNS}
""")

_GET_ORDER_BY_ID_SQL = text(f"SELECT {_SELECT_COLUMNS} FROM orders WHERE id = :id")

_GET_ORDER_FOR_UPDATE_SQL = text(
    f"SELECT {_SELECT_COLUMNS} FROM orders WHERE id = :id FOR UPDATE"
)

_UPDATE_STATUS_SQL = text(f"""
    UPDATE orders
    SET status = :status, paid_at = :paid_at, updated_at = NOW()
    WHERE id = :id
    RETURNING {_SELECT_COLUMNS}
""")

_LIST_ORDERS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE (CAST(:user_id AS TEXT) IS NULL OR buyer_id = :user_id OR student_id = :user_id)
      AND (CAST(:status AS TEXT) IS NULL OR status = :status)
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_order(row: Any) -> Order:
    return Order(
        id=row.id,
        order_number=row.order_number,
        hire_request_id=row.hire_request_id,
        buyer_id=row.buyer_id,
        student_id=row.student_id,
        service_id=row.service_id,
        amount_cents=row.amount_cents,
        status=row.status,
        paid_at=row.paid_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def violated_constraint(exc: IntegrityError) -> str | None:
    """Name of the constraint behind an IntegrityError, when the driver reports it."""
    orig = exc.orig
    for source in (orig, getattr(orig, "__cause__", None)):
        name = getattr(source, "constraint_name", None)
        if name:
            return str(name)
    message = str(orig)
    for known in (ORDER_NUMBER_CONSTRAINT, HIRE_REQUEST_CONSTRAINT):
        if known in message:
            return known
    return None


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def number_taken(self, db: AsyncSession, order_number: str) -> bool:
        result = await db.execute(_NUMBER_TAKEN_SQL, {"order_number": order_number})
        return result.fetchone() is not None

    async def exists_for_hire(self, db: AsyncSession, hire_request_id: str) -> bool:
        result = await db.execute(_EXISTS_FOR_HIRE_SQL, {"hire_request_id": hire_request_id})
        return result.fetchone() is not None

    async def insert(self, db: AsyncSession, order: Order) -> Order:
        try:
            result = await db.execute(
                _INSERT_ORDER_SQL,
                {
                    "id": order.id,
                    "order_number": order.order_number,
                    "hire_request_id": order.hire_request_id,
                    "buyer_id": order.buyer_id,
                    "student_id": order.student_id,
                    "service_id": order.service_id,
                    "amount_cents": order.amount_cents,
                    "status": order.status,
                },
            )
        except IntegrityError as exc:
            constraint = violated_constraint(exc)
            if constraint == ORDER_NUMBER_CONSTRAINT:
                raise StorageConflictError("orders.order_number") from exc
            if constraint == HIRE_REQUEST_CONSTRAINT:
                raise OrderAlreadyExistsError(order.hire_request_id) from exc
            raise
        row = result.fetchone()
        if row is None:
            raise InternalError("Order insert returned no rows")
        return _row_to_order(row)

    async def get_by_id(self, db: AsyncSession, order_id: str) -> Order | None:
        result = await db.execute(_GET_ORDER_BY_ID_SQL, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def get_for_update(self, db: AsyncSession, order_id: str) -> Order | None:
        result = await db.execute(_GET_ORDER_FOR_UPDATE_SQL, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def update_status(
        self, db: AsyncSession, order_id: str, status: str, paid_at: datetime | None
    ) -> Order:
        result = await db.execute(
            _UPDATE_STATUS_SQL, {"id": order_id, "status": status, "paid_at": paid_at}
        )
        row = result.fetchone()
        if row is None:
            raise OrderNotFoundError(order_id)
        return _row_to_order(row)

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str | None,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]:
        result = await db.execute(
            _LIST_ORDERS_SQL,
            {"user_id": user_id, "status": status, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_order(row) for row in result.fetchall()]
