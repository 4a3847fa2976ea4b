"""ct_wallet REST API — balance and entries for the caller, adjustments for admins."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from src.ct_common.dependencies import get_coordinator
from src.ct_common.errors import ForbiddenError
from src.ct_common.response import ApiResponse, success_response
from src.ct_common.transaction import TransactionCoordinator
from src.ct_gateway.auth.dependencies import get_current_actor, require_admin
from src.ct_lifecycle.domain.actor import Actor
from src.ct_wallet.application.schemas import AdjustmentRequest, WalletEntryItem
from src.ct_wallet.application.service import WalletApplicationService

router = APIRouter(prefix="/wallet", tags=["wallet"])


def get_wallet_service(
    coordinator: Annotated[TransactionCoordinator, Depends(get_coordinator)],
) -> WalletApplicationService:
    return WalletApplicationService(coordinator)


def _target_user(actor: Actor, user_id: str | None) -> str:
    """Admins may inspect any account (system accounts included); others only their own."""
    if user_id is None or user_id == actor.user_id:
        return actor.user_id
    if not actor.is_admin:
        raise ForbiddenError("Cannot read another user's wallet")
    return user_id


@router.get("/balance")
async def get_balance(
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[WalletApplicationService, Depends(get_wallet_service)],
    request: Request,
    user_id: str | None = Query(None, description="Admin only: account to inspect"),
) -> ApiResponse:
    data = await service.get_balance(_target_user(actor, user_id))
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/entries")
async def list_entries(
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[WalletApplicationService, Depends(get_wallet_service)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    user_id: str | None = Query(None, description="Admin only: account to inspect"),
) -> ApiResponse:
    data = await service.list_entries(_target_user(actor, user_id), cursor, limit)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/adjustments", status_code=status.HTTP_201_CREATED)
async def record_adjustment(
    body: AdjustmentRequest,
    admin: Annotated[Actor, Depends(require_admin)],
    service: Annotated[WalletApplicationService, Depends(get_wallet_service)],
    request: Request,
) -> ApiResponse:
    entry = await service.record_wallet_entry(
        body.user_id, body.amount_cents, f"{body.reason} (by {admin.user_id})"
    )
    resp = success_response(WalletEntryItem.from_domain(entry).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
