"""Generic status-change endpoint across hire requests, contracts and orders."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.ct_common.dependencies import get_coordinator, get_publisher
from src.ct_common.response import ApiResponse, success_response
from src.ct_common.transaction import TransactionCoordinator
from src.ct_contract.application.service import ContractApplicationService
from src.ct_gateway.auth.dependencies import get_current_actor
from src.ct_hire.application.service import HireApplicationService
from src.ct_lifecycle.application.schemas import TransitionRequest
from src.ct_lifecycle.application.service import LifecycleService
from src.ct_lifecycle.domain.actor import Actor
from src.ct_notification.application.publisher import NotificationPublisher
from src.ct_order.application.service import OrderApplicationService

router = APIRouter(tags=["lifecycle"])


def get_lifecycle_service(
    coordinator: Annotated[TransactionCoordinator, Depends(get_coordinator)],
    publisher: Annotated[NotificationPublisher, Depends(get_publisher)],
) -> LifecycleService:
    return LifecycleService(
        HireApplicationService(coordinator, publisher),
        ContractApplicationService(coordinator, publisher),
        OrderApplicationService(coordinator, publisher),
    )


@router.post("/transitions")
async def transition(
    body: TransitionRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[LifecycleService, Depends(get_lifecycle_service)],
    request: Request,
) -> ApiResponse:
    data = await service.transition(
        body.entity_id, body.entity_kind.value, body.target_state, actor
    )
    resp = success_response(data.model_dump(), message="Transition applied")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
