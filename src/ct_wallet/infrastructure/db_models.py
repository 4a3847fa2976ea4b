"""SQLAlchemy ORM model for wallet_entries.

Append-only: no updated_at, and the repository exposes no UPDATE/DELETE.
"""

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.ct_common.database import Base


class WalletEntryORM(Base):
    __tablename__ = "wallet_entries"
    __table_args__ = (
        CheckConstraint("amount_cents <> 0", name="ck_wallet_amount_nonzero"),
        Index("idx_wallet_user_id", "user_id", "id"),
        Index("idx_wallet_reference", "reference_type", "reference_id"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    entry_type: Mapped[str] = mapped_column(String(30), nullable=False)
    reason: Mapped[str] = mapped_column(String(500), nullable=False)
    reference_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    reference_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
