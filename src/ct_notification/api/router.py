"""ct_notification REST API — the caller's inbox."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.ct_common.dependencies import get_coordinator
from src.ct_common.response import ApiResponse, success_response
from src.ct_common.transaction import TransactionCoordinator
from src.ct_gateway.auth.dependencies import get_current_actor
from src.ct_lifecycle.domain.actor import Actor
from src.ct_notification.application.service import NotificationApplicationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_notification_service(
    coordinator: Annotated[TransactionCoordinator, Depends(get_coordinator)],
) -> NotificationApplicationService:
    return NotificationApplicationService(coordinator)


@router.get("")
async def list_notifications(
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[NotificationApplicationService, Depends(get_notification_service)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await service.list_notifications(actor.user_id, cursor, limit)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/unread-count")
async def unread_count(
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[NotificationApplicationService, Depends(get_notification_service)],
    request: Request,
) -> ApiResponse:
    data = await service.unread_count(actor.user_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/read-all")
async def mark_all_read(
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[NotificationApplicationService, Depends(get_notification_service)],
    request: Request,
) -> ApiResponse:
    data = await service.mark_all_read(actor.user_id)
    resp = success_response(data.model_dump(), message="All notifications marked as read")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[NotificationApplicationService, Depends(get_notification_service)],
    request: Request,
) -> ApiResponse:
    await service.mark_read(notification_id, actor.user_id)
    resp = success_response(message="Notification marked as read")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
