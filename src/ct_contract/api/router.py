"""ct_contract REST API — create, sign, progress and complete contracts."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from src.ct_common.dependencies import get_coordinator, get_publisher
from src.ct_common.response import ApiResponse, success_response
from src.ct_common.transaction import TransactionCoordinator
from src.ct_contract.application.schemas import (
    CompleteContractRequest,
    CreateContractRequest,
    ProgressUpdateRequest,
    SignContractRequest,
)
from src.ct_contract.application.service import ContractApplicationService
from src.ct_gateway.auth.dependencies import get_current_actor
from src.ct_lifecycle.domain.actor import Actor
from src.ct_notification.application.publisher import NotificationPublisher

router = APIRouter(prefix="/contracts", tags=["contracts"])


def get_contract_service(
    coordinator: Annotated[TransactionCoordinator, Depends(get_coordinator)],
    publisher: Annotated[NotificationPublisher, Depends(get_publisher)],
) -> ContractApplicationService:
    return ContractApplicationService(coordinator, publisher)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_contract(
    body: CreateContractRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[ContractApplicationService, Depends(get_contract_service)],
    request: Request,
) -> ApiResponse:
    data = await service.create_contract(
        actor, body.hire_request_id, body.deliverables, body.timeline_days, body.additional_terms
    )
    resp = success_response(data.model_dump(), message="Contract created")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_contracts(
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[ContractApplicationService, Depends(get_contract_service)],
    request: Request,
    status_filter: str | None = Query(None, alias="status", description="Filter by ContractStatus"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await service.list_contracts(actor, status_filter, cursor, limit)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{contract_id}")
async def get_contract(
    contract_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[ContractApplicationService, Depends(get_contract_service)],
    request: Request,
) -> ApiResponse:
    data = await service.get_contract(contract_id, actor)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{contract_id}/sign")
async def sign_contract(
    contract_id: str,
    body: SignContractRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[ContractApplicationService, Depends(get_contract_service)],
    request: Request,
) -> ApiResponse:
    data = await service.sign_contract(contract_id, actor, body.signature)
    resp = success_response(data.model_dump(), message="Contract signed")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{contract_id}/progress")
async def update_progress(
    contract_id: str,
    body: ProgressUpdateRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[ContractApplicationService, Depends(get_contract_service)],
    request: Request,
) -> ApiResponse:
    data = await service.update_progress(
        contract_id,
        actor,
        body.status,
        body.notes,
        attachments=body.attachments,
        mark_as_completed=body.mark_as_completed,
        completion_notes=body.completion_notes,
    )
    resp = success_response(data.model_dump(), message="Progress updated")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{contract_id}/complete")
async def complete_contract(
    contract_id: str,
    body: CompleteContractRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[ContractApplicationService, Depends(get_contract_service)],
    request: Request,
) -> ApiResponse:
    data = await service.complete_contract(contract_id, actor, body.completion_notes)
    resp = success_response(data.model_dump(), message="Contract completed")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
