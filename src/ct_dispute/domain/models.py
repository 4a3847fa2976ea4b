"""Domain models for ct_dispute — pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Dispute:
    id: str
    order_id: str
    raised_by_id: str
    title: str
    description: str
    status: str                        # DisputeStatus value
    resolution: str | None = None      # DisputeResolution value once RESOLVED
    resolution_note: str | None = None
    # Parties of the disputed order, joined in on read
    buyer_id: str | None = None
    student_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    resolved_at: datetime | None = None
