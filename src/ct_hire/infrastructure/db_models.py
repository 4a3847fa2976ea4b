"""SQLAlchemy ORM models for the services and hire_requests tables."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.ct_common.database import Base


class ServiceORM(Base):
    """Service listings are managed elsewhere; read here for owner and price."""

    __tablename__ = "services"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class HireRequestORM(Base):
    __tablename__ = "hire_requests"
    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'ACCEPTED', 'REJECTED', 'CANCELLED')",
            name="ck_hire_requests_status",
        ),
        CheckConstraint("price_cents > 0", name="ck_hire_requests_price_positive"),
        CheckConstraint("buyer_id <> student_id", name="ck_hire_requests_no_self_hire"),
        Index("idx_hire_requests_buyer", "buyer_id", "id"),
        Index("idx_hire_requests_student", "student_id", "id"),
        Index("idx_hire_requests_service_status", "service_id", "buyer_id", "status"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    buyer_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    student_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    service_id: Mapped[str] = mapped_column(String(64), ForeignKey("services.id"), nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="PENDING")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
