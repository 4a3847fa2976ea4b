"""ct_dispute REST API — parties raise disputes, admins review and resolve them."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from src.ct_common.dependencies import get_coordinator, get_publisher
from src.ct_common.response import ApiResponse, success_response
from src.ct_common.transaction import TransactionCoordinator
from src.ct_dispute.application.schemas import CreateDisputeRequest, ResolveDisputeRequest
from src.ct_dispute.application.service import DisputeApplicationService
from src.ct_gateway.auth.dependencies import get_current_actor, require_admin
from src.ct_lifecycle.domain.actor import Actor
from src.ct_notification.application.publisher import NotificationPublisher
from src.ct_order.application.service import OrderApplicationService

router = APIRouter(prefix="/disputes", tags=["disputes"])


def get_dispute_service(
    coordinator: Annotated[TransactionCoordinator, Depends(get_coordinator)],
    publisher: Annotated[NotificationPublisher, Depends(get_publisher)],
) -> DisputeApplicationService:
    orders = OrderApplicationService(coordinator, publisher)
    return DisputeApplicationService(coordinator, orders, publisher)


@router.post("", status_code=status.HTTP_201_CREATED)
async def raise_dispute(
    body: CreateDisputeRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[DisputeApplicationService, Depends(get_dispute_service)],
    request: Request,
) -> ApiResponse:
    data = await service.raise_dispute(actor, body.order_id, body.title, body.description)
    resp = success_response(data.model_dump(), message="Dispute created")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_disputes(
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[DisputeApplicationService, Depends(get_dispute_service)],
    request: Request,
    status_filter: str | None = Query(None, alias="status", description="Filter by DisputeStatus"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await service.list_disputes(actor, status_filter, cursor, limit)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{dispute_id}")
async def get_dispute(
    dispute_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[DisputeApplicationService, Depends(get_dispute_service)],
    request: Request,
) -> ApiResponse:
    data = await service.get_dispute(dispute_id, actor)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{dispute_id}/review")
async def start_review(
    dispute_id: str,
    admin: Annotated[Actor, Depends(require_admin)],
    service: Annotated[DisputeApplicationService, Depends(get_dispute_service)],
    request: Request,
) -> ApiResponse:
    data = await service.start_review(dispute_id, admin)
    resp = success_response(data.model_dump(), message="Dispute under review")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{dispute_id}/resolve")
async def resolve_dispute(
    dispute_id: str,
    body: ResolveDisputeRequest,
    admin: Annotated[Actor, Depends(require_admin)],
    service: Annotated[DisputeApplicationService, Depends(get_dispute_service)],
    request: Request,
) -> ApiResponse:
    data = await service.resolve(dispute_id, admin, body.resolution.value, body.note)
    resp = success_response(data.model_dump(), message="Dispute resolved")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
