"""Auth Schemas — signup / login / refresh / logout bodies.

Design Decisions:
    - Fields are optional at the schema level; required-field and format checks
      run in services/auth_flows.py so every entry point gets the same messages
"""

from uuid import UUID

from pydantic import Field

from propertyhub.schemas.base import CamelModel


class SignupRequest(CamelModel):
    mobile_number: str | None = None
    email: str | None = None
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    rera_number: str | None = None
    role_name: str | None = None
    otp: str | None = None
    device_id: str | None = Field(None, max_length=255)


class LoginRequest(CamelModel):
    mobile_number: str | None = None
    otp: str | None = None
    device_id: str | None = Field(None, max_length=255)


class RefreshRequest(CamelModel):
    refresh_token: str | None = None


class AuthTokensOut(CamelModel):
    user_id: UUID
    role: str
    access_token: str
    refresh_token: str


class AccessTokenOut(CamelModel):
    user_id: UUID
    role: str
    access_token: str


class RevokedOut(CamelModel):
    revoked: int
