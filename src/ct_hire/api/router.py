"""ct_hire REST API — hire requests between buyers and service owners."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from src.ct_common.dependencies import get_coordinator, get_publisher
from src.ct_common.response import ApiResponse, success_response
from src.ct_common.transaction import TransactionCoordinator
from src.ct_gateway.auth.dependencies import get_current_actor
from src.ct_hire.application.schemas import CreateHireRequest
from src.ct_hire.application.service import HireApplicationService
from src.ct_lifecycle.domain.actor import Actor
from src.ct_notification.application.publisher import NotificationPublisher

router = APIRouter(prefix="/hire-requests", tags=["hire-requests"])


def get_hire_service(
    coordinator: Annotated[TransactionCoordinator, Depends(get_coordinator)],
    publisher: Annotated[NotificationPublisher, Depends(get_publisher)],
) -> HireApplicationService:
    return HireApplicationService(coordinator, publisher)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_hire_request(
    body: CreateHireRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[HireApplicationService, Depends(get_hire_service)],
    request: Request,
) -> ApiResponse:
    data = await service.create_hire_request(
        actor, body.service_id, body.message, body.price_cents
    )
    resp = success_response(data.model_dump(), message="Hire request created")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_hire_requests(
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[HireApplicationService, Depends(get_hire_service)],
    request: Request,
    status_filter: str | None = Query(None, alias="status", description="Filter by HireStatus"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await service.list_hire_requests(actor, status_filter, cursor, limit)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{hire_id}")
async def get_hire_request(
    hire_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[HireApplicationService, Depends(get_hire_service)],
    request: Request,
) -> ApiResponse:
    data = await service.get_hire_request(hire_id, actor)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{hire_id}/accept")
async def accept_hire_request(
    hire_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[HireApplicationService, Depends(get_hire_service)],
    request: Request,
) -> ApiResponse:
    data = await service.accept(hire_id, actor)
    resp = success_response(data.model_dump(), message="Hire request accepted")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{hire_id}/reject")
async def reject_hire_request(
    hire_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[HireApplicationService, Depends(get_hire_service)],
    request: Request,
) -> ApiResponse:
    data = await service.reject(hire_id, actor)
    resp = success_response(data.model_dump(), message="Hire request rejected")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{hire_id}/cancel")
async def cancel_hire_request(
    hire_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[HireApplicationService, Depends(get_hire_service)],
    request: Request,
) -> ApiResponse:
    data = await service.cancel(hire_id, actor)
    resp = success_response(data.model_dump(), message="Hire request cancelled")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("/{hire_id}")
async def delete_hire_request(
    hire_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[HireApplicationService, Depends(get_hire_service)],
    request: Request,
) -> ApiResponse:
    await service.delete_hire_request(hire_id, actor)
    resp = success_response(message="Hire request deleted")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
