"""Admin User Schemas — staff account management bodies and views."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from propertyhub.schemas.base import CamelModel, Pagination


class AdminUserCreate(CamelModel):
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    email: str | None = None
    mobile_number: str | None = None
    role_name: str | None = None


class AdminUserUpdate(CamelModel):
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    email: str | None = None
    mobile_number: str | None = None
    role_name: str | None = None
    is_active: bool | None = None


class SuperAdminCreate(CamelModel):
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    email: str | None = None
    mobile_number: str | None = None
    secret_key: str | None = None


class UserOut(CamelModel):
    user_id: UUID
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    mobile_number: str
    user_type: str
    is_active: bool
    role_name: str | None = None
    created_at: datetime | None = None


class UserList(CamelModel):
    users: list[UserOut]
    pagination: Pagination


def user_out(user, role_name: str | None) -> UserOut:
    return UserOut.model_validate({**user.to_dict(), "role_name": role_name})
