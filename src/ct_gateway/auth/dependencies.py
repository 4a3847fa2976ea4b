"""FastAPI dependencies: get_current_actor, require_admin.

Usage in any protected router:
    from src.ct_gateway.auth.dependencies import get_current_actor

    @router.get("/protected")
    async def protected(actor: Actor = Depends(get_current_actor)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.ct_common.dependencies import get_coordinator
from src.ct_common.errors import AccountDisabledError, ForbiddenError, InvalidCredentialsError
from src.ct_common.transaction import TransactionCoordinator
from src.ct_gateway.auth.jwt_handler import decode_token
from src.ct_gateway.user.db_models import UserModel
from src.ct_lifecycle.domain.actor import Actor

# tokenUrl points Swagger UI at the external auth service's login route
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def load_user(coordinator: TransactionCoordinator, user_id: str) -> UserModel | None:
    async def work(db: AsyncSession) -> UserModel | None:
        result = await db.execute(select(UserModel).where(UserModel.id == user_id))
        return result.scalar_one_or_none()

    return await coordinator.run_atomic(work)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    coordinator: TransactionCoordinator = Depends(get_coordinator),
) -> UserModel:
    """Validate the bearer token and return the active user behind it.

    Raises HTTP 401 if the token is missing, invalid, expired, or names an
    unknown user. Raises AccountDisabledError (403) for a deactivated account.
    """
    try:
        payload = decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    user = await load_user(coordinator, str(payload["sub"]))
    if user is None:
        raise _CREDENTIALS_EXCEPTION
    if not user.is_active:
        raise AccountDisabledError()
    return user


async def get_current_actor(user: UserModel = Depends(get_current_user)) -> Actor:
    return Actor(user_id=user.id, role=user.role)


async def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_admin:
        raise ForbiddenError("Admin role required")
    return actor
