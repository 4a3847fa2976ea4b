"""Current-user endpoint. Registration and login live in the auth service."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.ct_common.response import ApiResponse, success_response
from src.ct_gateway.auth.dependencies import get_current_user
from src.ct_gateway.user.db_models import UserModel
from src.ct_gateway.user.schemas import UserInfo

router = APIRouter(tags=["me"])


def _get_request_id(request: Request) -> str:
    """Read request_id injected by RequestLogMiddleware, fallback if absent."""
    return getattr(request.state, "request_id", "req_unknown")


@router.get("/me")
async def get_me(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    request: Request,
) -> ApiResponse:
    resp = success_response(UserInfo.from_model(current_user).model_dump())
    resp.request_id = _get_request_id(request)
    return resp
