"""ct_order REST API — create, pay, move through the lifecycle, query."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from src.ct_common.dependencies import get_coordinator, get_publisher
from src.ct_common.response import ApiResponse, success_response
from src.ct_common.transaction import TransactionCoordinator
from src.ct_gateway.auth.dependencies import get_current_actor
from src.ct_lifecycle.domain.actor import Actor
from src.ct_notification.application.publisher import NotificationPublisher
from src.ct_order.application.schemas import CreateOrderRequest, UpdateOrderStatusRequest
from src.ct_order.application.service import OrderApplicationService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_order_service(
    coordinator: Annotated[TransactionCoordinator, Depends(get_coordinator)],
    publisher: Annotated[NotificationPublisher, Depends(get_publisher)],
) -> OrderApplicationService:
    return OrderApplicationService(coordinator, publisher)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(
    body: CreateOrderRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[OrderApplicationService, Depends(get_order_service)],
    request: Request,
) -> ApiResponse:
    data = await service.create_order(body.hire_request_id, actor)
    resp = success_response(data.model_dump(), message="Order created")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_orders(
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[OrderApplicationService, Depends(get_order_service)],
    request: Request,
    status_filter: str | None = Query(None, alias="status", description="Filter by OrderStatus"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await service.list_orders(actor, status_filter, cursor, limit)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[OrderApplicationService, Depends(get_order_service)],
    request: Request,
) -> ApiResponse:
    data = await service.get_order(order_id, actor)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{order_id}/pay")
async def pay_order(
    order_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[OrderApplicationService, Depends(get_order_service)],
    request: Request,
) -> ApiResponse:
    data = await service.pay_order(order_id, actor)
    resp = success_response(data.model_dump(), message="Payment captured")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{order_id}/status")
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[OrderApplicationService, Depends(get_order_service)],
    request: Request,
) -> ApiResponse:
    data = await service.transition(order_id, body.status.value, actor)
    resp = success_response(data.model_dump(), message="Order status updated")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
