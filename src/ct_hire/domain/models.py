"""Domain models for ct_hire — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ServiceListing:
    """Read-only view of a row in the services table."""

    id: str
    owner_id: str
    title: str
    price_cents: int
    is_active: bool


@dataclass
class HireRequest:
    id: str
    buyer_id: str
    student_id: str        # service owner
    service_id: str
    price_cents: int
    status: str            # HireStatus value
    message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
