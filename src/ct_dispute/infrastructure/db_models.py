"""SQLAlchemy ORM model for the disputes table."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.ct_common.database import Base


class DisputeORM(Base):
    __tablename__ = "disputes"
    __table_args__ = (
        CheckConstraint(
            "status IN ('OPEN', 'UNDER_REVIEW', 'RESOLVED')", name="ck_disputes_status"
        ),
        CheckConstraint(
            "resolution IS NULL OR resolution IN ('RELEASE', 'REFUND')",
            name="ck_disputes_resolution",
        ),
        CheckConstraint(
            "(status = 'RESOLVED') = (resolution IS NOT NULL)",
            name="ck_disputes_resolved_has_resolution",
        ),
        Index("idx_disputes_order", "order_id"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    order_id: Mapped[str] = mapped_column(String(26), ForeignKey("orders.id"), nullable=False)
    raised_by_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="OPEN")
    resolution: Mapped[str | None] = mapped_column(String(16), nullable=True)
    resolution_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
