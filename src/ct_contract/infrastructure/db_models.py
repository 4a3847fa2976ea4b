"""SQLAlchemy ORM models for the contracts and contract_progress tables."""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.ct_common.database import Base


class ContractORM(Base):
    __tablename__ = "contracts"
    __table_args__ = (
        UniqueConstraint("hire_request_id", name="uq_contracts_hire_request"),
        CheckConstraint(
            "status IN ('DRAFT', 'ACTIVE', 'COMPLETED')", name="ck_contracts_status"
        ),
        CheckConstraint("price_cents > 0", name="ck_contracts_price_positive"),
        CheckConstraint(
            "student_payout_cents = price_cents - platform_fee_cents",
            name="ck_contracts_payout_split",
        ),
        CheckConstraint("timeline_days BETWEEN 1 AND 365", name="ck_contracts_timeline"),
        Index("idx_contracts_buyer", "buyer_id", "id"),
        Index("idx_contracts_student", "student_id", "id"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    hire_request_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("hire_requests.id"), nullable=False
    )
    buyer_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    student_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    service_id: Mapped[str] = mapped_column(String(64), ForeignKey("services.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    deliverables: Mapped[list[str]] = mapped_column(JSONB, nullable=False)
    timeline_days: Mapped[int] = mapped_column(Integer, nullable=False)
    additional_terms: Mapped[str | None] = mapped_column(Text, nullable=True)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    platform_fee_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    student_payout_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="DRAFT")
    buyer_signature: Mapped[str | None] = mapped_column(String(200), nullable=True)
    buyer_signed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    student_signature: Mapped[str | None] = mapped_column(String(200), nullable=True)
    student_signed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    signed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    progress_status: Mapped[str | None] = mapped_column(String(64), nullable=True)
    progress_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    completion_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class ContractProgressORM(Base):
    """One row per progress update; rows are never edited."""

    __tablename__ = "contract_progress"
    __table_args__ = (Index("idx_contract_progress_contract", "contract_id", "id"),)

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    contract_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("contracts.id"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(64), nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False)
    attachments: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
