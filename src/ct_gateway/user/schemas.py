"""Pydantic schemas for the current-user endpoint."""

from pydantic import BaseModel, EmailStr

from src.ct_gateway.user.db_models import UserModel


class UserInfo(BaseModel):
    """Minimal user info returned by GET /me."""

    id: str
    name: str
    email: EmailStr
    role: str
    is_active: bool

    @classmethod
    def from_model(cls, user: UserModel) -> "UserInfo":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            is_active=user.is_active,
        )
