"""Pydantic schemas for the ct_hire API."""

from pydantic import BaseModel, Field

from src.ct_common.cents import cents_to_display
from src.ct_common.datetime_utils import iso_or_none
from src.ct_hire.domain.models import HireRequest


class CreateHireRequest(BaseModel):
    service_id: str = Field(..., min_length=1, max_length=64)
    message: str | None = Field(None, max_length=2000)
    price_cents: int | None = Field(
        None, gt=0, description="Proposed price; defaults to the service price"
    )


class HireRequestResponse(BaseModel):
    id: str
    buyer_id: str
    student_id: str
    service_id: str
    message: str | None
    price_cents: int
    price_display: str
    status: str
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, h: HireRequest) -> "HireRequestResponse":
        return cls(
            id=h.id,
            buyer_id=h.buyer_id,
            student_id=h.student_id,
            service_id=h.service_id,
            message=h.message,
            price_cents=h.price_cents,
            price_display=cents_to_display(h.price_cents),
            status=h.status,
            created_at=iso_or_none(h.created_at),
            updated_at=iso_or_none(h.updated_at),
        )


class HireRequestListResponse(BaseModel):
    items: list[HireRequestResponse]
    next_cursor: str | None
    has_more: bool
