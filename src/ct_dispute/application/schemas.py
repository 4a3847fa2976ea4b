"""Pydantic schemas for the ct_dispute API."""

from pydantic import BaseModel, Field

from src.ct_common.datetime_utils import iso_or_none
from src.ct_common.enums import DisputeResolution
from src.ct_dispute.domain.models import Dispute


class CreateDisputeRequest(BaseModel):
    order_id: str = Field(..., min_length=1, max_length=26)
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)


class ResolveDisputeRequest(BaseModel):
    resolution: DisputeResolution
    note: str | None = Field(None, max_length=5000)


class DisputeResponse(BaseModel):
    id: str
    order_id: str
    raised_by_id: str
    title: str
    description: str
    status: str
    resolution: str | None
    resolution_note: str | None
    created_at: str | None
    resolved_at: str | None

    @classmethod
    def from_domain(cls, d: Dispute) -> "DisputeResponse":
        return cls(
            id=d.id,
            order_id=d.order_id,
            raised_by_id=d.raised_by_id,
            title=d.title,
            description=d.description,
            status=d.status,
            resolution=d.resolution,
            resolution_note=d.resolution_note,
            created_at=iso_or_none(d.created_at),
            resolved_at=iso_or_none(d.resolved_at),
        )


class DisputeListResponse(BaseModel):
    items: list[DisputeResponse]
    next_cursor: str | None
    has_more: bool
