"""JWT bearer token verification.

Tokens are issued by the auth service; this backend only verifies them.
HS256 with a shared JWT_SECRET. No revocation list: a token stays valid
until its ``exp`` claim passes.
"""

from typing import Any

from jose import JWTError, jwt

from config.settings import settings
from src.ct_common.errors import InvalidCredentialsError


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Raises:
        InvalidCredentialsError: bad signature, expired, malformed, no ``sub``,
            or a token whose ``type`` claim says it is not an access token.
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type", "access") != "access":
        raise InvalidCredentialsError()
    if not payload.get("sub"):
        raise InvalidCredentialsError()
    return payload
