"""WalletRepository — raw SQL over the append-only wallet_entries table.

Balance is never stored: it is SUM(amount_cents) over a user's entries.
Transaction ownership: the caller runs every method inside
TransactionCoordinator.run_atomic.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ct_common.errors import InternalError
from src.ct_wallet.domain.models import WalletEntry, WalletLeg

_INSERT_ENTRY_SQL = text("""
    INSERT INTO wallet_entries
        (user_id, amount_cents, entry_type, reason, reference_type, reference_id)
    VALUES
        (:user_id, :amount_cents, :entry_type, :reason, :reference_type, :reference_id)
    RETURNING id, user_id, amount_cents, entry_type, reason,
              reference_type, reference_id, created_at
""")

_BALANCE_SQL = text("""
    SELECT COALESCE(SUM(amount_cents), 0) AS balance
    FROM wallet_entries
    WHERE user_id = :user_id
""")

_LIST_ENTRIES_SQL = text("""
    SELECT id, user_id, amount_cents, entry_type, reason,
           reference_type, reference_id, created_at
    FROM wallet_entries
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_entry(row: Any) -> WalletEntry:
    return WalletEntry(
        id=row.id,
        user_id=row.user_id,
        amount_cents=row.amount_cents,
        entry_type=row.entry_type,
        reason=row.reason,
        reference_type=row.reference_type,
        reference_id=row.reference_id,
        created_at=row.created_at,
    )


class WalletRepository:
    """Concrete implementation of WalletRepositoryProtocol."""

    async def append(self, db: AsyncSession, leg: WalletLeg) -> WalletEntry:
        result = await db.execute(
            _INSERT_ENTRY_SQL,
            {
                "user_id": leg.user_id,
                "amount_cents": leg.amount_cents,
                "entry_type": leg.entry_type,
                "reason": leg.reason,
                "reference_type": leg.reference_type,
                "reference_id": leg.reference_id,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Wallet insert returned no rows")
        return _row_to_entry(row)

    async def get_balance(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(_BALANCE_SQL, {"user_id": user_id})
        return int(result.scalar_one())

    async def list_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
    ) -> list[WalletEntry]:
        result = await db.execute(
            _LIST_ENTRIES_SQL,
            {"user_id": user_id, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_entry(row) for row in result.fetchall()]
