"""SQLAlchemy ORM model for the orders table."""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.ct_common.database import Base

ORDER_NUMBER_CONSTRAINT = "uq_orders_order_number"
HIRE_REQUEST_CONSTRAINT = "uq_orders_hire_request"


class OrderORM(Base):
    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("order_number", name=ORDER_NUMBER_CONSTRAINT),
        UniqueConstraint("hire_request_id", name=HIRE_REQUEST_CONSTRAINT),
        CheckConstraint(
            "status IN ('PENDING', 'PAID', 'IN_PROGRESS', 'DELIVERED', "
            "'COMPLETED', 'CANCELLED', 'DISPUTED')",
            name="ck_orders_status",
        ),
        CheckConstraint("amount_cents > 0", name="ck_orders_amount_positive"),
        Index("idx_orders_buyer", "buyer_id", "id"),
        Index("idx_orders_student", "student_id", "id"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    order_number: Mapped[str] = mapped_column(String(16), nullable=False)
    hire_request_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("hire_requests.id"), nullable=False
    )
    buyer_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    student_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    service_id: Mapped[str] = mapped_column(String(64), ForeignKey("services.id"), nullable=False)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="PENDING")
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
