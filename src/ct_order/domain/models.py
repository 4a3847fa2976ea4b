"""Domain models for ct_order — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Order:
    id: str
    order_number: str        # "1000".."9999", globally unique
    hire_request_id: str     # at most one order per hire request
    buyer_id: str
    student_id: str
    service_id: str
    amount_cents: int
    status: str              # OrderStatus value
    paid_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_paid(self) -> bool:
        return self.paid_at is not None
