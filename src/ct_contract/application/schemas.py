"""Pydantic schemas for the ct_contract API."""

from pydantic import BaseModel, Field, model_validator

from src.ct_common.cents import cents_to_display
from src.ct_common.datetime_utils import iso_or_none
from src.ct_contract.domain.models import Contract, ProgressUpdate


class CreateContractRequest(BaseModel):
    hire_request_id: str = Field(..., min_length=1, max_length=26)
    deliverables: list[str] = Field(..., min_length=1)
    timeline_days: int = Field(..., ge=1, le=365, description="1 day to 1 year")
    additional_terms: str | None = Field(None, max_length=5000)


class SignContractRequest(BaseModel):
    signature: str = Field(..., min_length=1, max_length=200)


class ProgressUpdateRequest(BaseModel):
    status: str = Field(..., min_length=1, max_length=64)
    notes: str = Field(..., min_length=1, max_length=5000)
    attachments: list[str] = Field(default_factory=list)
    mark_as_completed: bool = False
    completion_notes: str | None = Field(None, max_length=5000)

    @model_validator(mode="after")
    def completion_notes_need_completion(self) -> "ProgressUpdateRequest":
        if self.completion_notes and not self.mark_as_completed:
            raise ValueError("completion_notes requires mark_as_completed")
        return self


class CompleteContractRequest(BaseModel):
    completion_notes: str | None = Field(None, max_length=5000)


class ProgressUpdateItem(BaseModel):
    id: str
    user_id: str
    status: str
    notes: str
    attachments: list[str]
    created_at: str | None

    @classmethod
    def from_domain(cls, p: ProgressUpdate) -> "ProgressUpdateItem":
        return cls(
            id=p.id,
            user_id=p.user_id,
            status=p.status,
            notes=p.notes,
            attachments=list(p.attachments),
            created_at=iso_or_none(p.created_at),
        )


class ContractResponse(BaseModel):
    id: str
    hire_request_id: str
    buyer_id: str
    student_id: str
    service_id: str
    title: str
    deliverables: list[str]
    timeline_days: int
    additional_terms: str | None
    price_cents: int
    price_display: str
    platform_fee_cents: int
    student_payout_cents: int
    status: str
    is_signed_by_buyer: bool
    is_signed_by_student: bool
    signed_at: str | None
    progress_status: str | None
    progress_notes: str | None
    completion_notes: str | None
    completed_at: str | None
    created_at: str | None
    progress_updates: list[ProgressUpdateItem] = Field(default_factory=list)

    @classmethod
    def from_domain(
        cls, c: Contract, progress: list[ProgressUpdate] | None = None
    ) -> "ContractResponse":
        return cls(
            id=c.id,
            hire_request_id=c.hire_request_id,
            buyer_id=c.buyer_id,
            student_id=c.student_id,
            service_id=c.service_id,
            title=c.title,
            deliverables=list(c.deliverables),
            timeline_days=c.timeline_days,
            additional_terms=c.additional_terms,
            price_cents=c.price_cents,
            price_display=cents_to_display(c.price_cents),
            platform_fee_cents=c.platform_fee_cents,
            student_payout_cents=c.student_payout_cents,
            status=c.status,
            is_signed_by_buyer=c.buyer_signed_at is not None,
            is_signed_by_student=c.student_signed_at is not None,
            signed_at=iso_or_none(c.signed_at),
            progress_status=c.progress_status,
            progress_notes=c.progress_notes,
            completion_notes=c.completion_notes,
            completed_at=iso_or_none(c.completed_at),
            created_at=iso_or_none(c.created_at),
            progress_updates=[ProgressUpdateItem.from_domain(p) for p in progress or []],
        )


class ContractListResponse(BaseModel):
    items: list[ContractResponse]
    next_cursor: str | None
    has_more: bool
