"""Domain models for ct_contract — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Contract:
    id: str
    hire_request_id: str
    buyer_id: str
    student_id: str
    service_id: str
    title: str
    deliverables: list[str]
    timeline_days: int
    price_cents: int
    platform_fee_cents: int
    student_payout_cents: int        # price_cents - platform_fee_cents
    status: str                      # ContractStatus value
    additional_terms: str | None = None
    buyer_signature: str | None = None
    buyer_signed_at: datetime | None = None
    student_signature: str | None = None
    student_signed_at: datetime | None = None
    signed_at: datetime | None = None  # set when the second party signs
    progress_status: str | None = None
    progress_notes: str | None = None
    completion_notes: str | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def signed_by(self, user_id: str) -> bool:
        if user_id == self.buyer_id:
            return self.buyer_signed_at is not None
        if user_id == self.student_id:
            return self.student_signed_at is not None
        return False

    @property
    def fully_signed(self) -> bool:
        return self.buyer_signed_at is not None and self.student_signed_at is not None


@dataclass(frozen=True)
class ProgressUpdate:
    id: str
    contract_id: str
    user_id: str
    status: str
    notes: str
    attachments: list[str] = field(default_factory=list)
    created_at: datetime | None = None
