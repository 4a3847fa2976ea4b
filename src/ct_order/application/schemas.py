"""Pydantic schemas for the ct_order API."""

from pydantic import BaseModel, Field

from src.ct_common.cents import cents_to_display
from src.ct_common.datetime_utils import iso_or_none
from src.ct_common.enums import OrderStatus
from src.ct_order.domain.models import Order


class CreateOrderRequest(BaseModel):
    hire_request_id: str = Field(..., min_length=1, max_length=26)


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatus


class OrderResponse(BaseModel):
    id: str
    order_number: str
    hire_request_id: str
    buyer_id: str
    student_id: str
    service_id: str
    amount_cents: int
    amount_display: str
    status: str
    paid_at: str | None
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, o: Order) -> "OrderResponse":
        return cls(
            id=o.id,
            order_number=o.order_number,
            hire_request_id=o.hire_request_id,
            buyer_id=o.buyer_id,
            student_id=o.student_id,
            service_id=o.service_id,
            amount_cents=o.amount_cents,
            amount_display=cents_to_display(o.amount_cents),
            status=o.status,
            paid_at=iso_or_none(o.paid_at),
            created_at=iso_or_none(o.created_at),
            updated_at=iso_or_none(o.updated_at),
        )


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    next_cursor: str | None
    has_more: bool
