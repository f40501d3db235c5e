"""Auth Flows — signup, login, refresh, logout built on the Token Manager.

Invariants:
    - Signup writes User + UserRole + refresh Token + INSERT audit in one unit of work
    - Login rotates the (user, device) refresh token atomically: the active row is
      revoked (ROTATED) and a new one inserted in the same transaction
    - A concurrent login that loses the race hits the partial unique index and
      surfaces as ConflictError
    - Refresh never issues an access token for an inactive user or a user
      without an active role
    - Logout operations are idempotent and return the number of revoked rows

Design Decisions:
    - OTP is a static code from Settings until an SMS provider is integrated
    - Access-token role is re-read from the Credential Store on refresh, so a
      role change takes effect at the next refresh rather than at re-login
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping
from uuid import UUID

from propertyhub.config import Settings
from propertyhub.core.domain_types import (
    ActorContext, DeviceContext, RevocationReason, RoleName, RoleType, UserType,
)
from propertyhub.core.errors import (
    ConflictError, ForbiddenError, ResourceNotFoundError,
    UnauthenticatedError, ValidationError,
)
from propertyhub.core.validators import (
    check_contact_formats, check_required_fields, is_valid_rera_number,
)
from propertyhub.infrastructure.database import DatabaseSessionManager
from propertyhub.models.user import User
from propertyhub.services import audit_recorder, credential_store
from propertyhub.services.token_manager import TokenManager

logger = logging.getLogger(__name__)

SIGNUP_REQUIRED = ("mobile_number", "email", "first_name", "last_name", "otp")
LOGIN_REQUIRED = ("mobile_number", "otp")


@dataclass
class AuthTokens:
    user_id: UUID
    role: str
    access_token: str
    refresh_token: str


def _check_otp(otp: str | None, settings: Settings) -> None:
    if not otp or not secrets.compare_digest(str(otp), settings.login_otp_code):
        raise ValidationError("Invalid OTP entered", field="otp")


async def signup(
    db_manager: DatabaseSessionManager,
    tokens: TokenManager,
    settings: Settings,
    payload: Mapping[str, Any],
    device: DeviceContext,
) -> AuthTokens:
    """Register a client account and log it in."""
    check_required_fields(SIGNUP_REQUIRED, payload)
    check_contact_formats(payload["email"], payload["mobile_number"])
    rera_number = payload.get("rera_number") or None
    if rera_number is not None and not is_valid_rera_number(rera_number):
        raise ValidationError("Invalid RERA number format", field="reraNumber")
    _check_otp(payload["otp"], settings)
    role_name = payload.get("role_name") or RoleName.BROKER.value

    async with db_manager.unit_of_work() as db:
        conflict = await credential_store.find_contact_conflict(
            db, payload["email"], payload["mobile_number"], rera_number,
        )
        if conflict:
            raise ConflictError(conflict)
        role = await credential_store.get_role_by_name(
            db, role_name, RoleType.CLIENT.value,
        )
        if role is None:
            raise ValidationError(
                "Invalid role. Please choose: Owner, Investor, or Broker",
                field="roleName",
            )
        user = User(
            first_name=payload["first_name"],
            last_name=payload["last_name"],
            email=payload["email"],
            mobile_number=payload["mobile_number"],
            rera_number=rera_number,
            user_type=UserType.CLIENT.value,
            is_active=True,
        )
        db.add(user)
        await db.flush()
        await credential_store.assign_role(db, user.user_id, role.role_id)
        record = await tokens.issue_refresh_token(
            db, user.user_id, role.role_name, device,
        )
        actor = ActorContext(
            user_id=user.user_id, ip_address=device.ip_address,
            user_agent=device.user_agent,
        )
        snapshot = user.to_dict()
        snapshot["role_name"] = role.role_name
        await audit_recorder.record_insert(db, actor, "User", user.user_id, snapshot)

    logger.info("User signed up", extra={"user_id": str(user.user_id)})
    return AuthTokens(
        user_id=user.user_id,
        role=role.role_name,
        access_token=tokens.issue_access_token(user.user_id, role.role_name),
        refresh_token=record.refresh_token,
    )


async def login(
    db_manager: DatabaseSessionManager,
    tokens: TokenManager,
    settings: Settings,
    payload: Mapping[str, Any],
    device: DeviceContext,
) -> AuthTokens:
    """OTP login; rotates the refresh token for this device."""
    check_required_fields(LOGIN_REQUIRED, payload)
    check_contact_formats(None, payload["mobile_number"])
    _check_otp(payload["otp"], settings)

    async with db_manager.unit_of_work() as db:
        user = await credential_store.get_user_by_mobile(db, payload["mobile_number"])
        if user is None or not user.is_active:
            raise ResourceNotFoundError(
                "User", message="Account does not exist, please sign up first",
            )
        roles = await credential_store.get_active_roles(db, user.user_id)
        if not roles:
            raise ForbiddenError("No active role assigned to this account")
        primary = roles[0].role_name
        rotated = await tokens.revoke_device(
            db, user.user_id, device.device_id, RevocationReason.ROTATED,
        )
        record = await tokens.issue_refresh_token(db, user.user_id, primary, device)

    logger.info(
        f"User logged in (rotated {rotated} token(s))",
        extra={"user_id": str(user.user_id)},
    )
    return AuthTokens(
        user_id=user.user_id,
        role=primary,
        access_token=tokens.issue_access_token(user.user_id, primary),
        refresh_token=record.refresh_token,
    )


async def refresh(
    db_manager: DatabaseSessionManager,
    tokens: TokenManager,
    refresh_token: str,
) -> AuthTokens:
    """Exchange a valid refresh token for a new access token."""
    if not refresh_token:
        raise ValidationError("Refresh token is required", field="refreshToken")

    async with db_manager.unit_of_work() as db:
        verification = await tokens.verify_refresh_token(db, refresh_token)
        if not verification.valid:
            raise UnauthenticatedError(
                verification.reason or "Invalid refresh token",
                expired=verification.expired,
            )
        record = verification.record
        actor = await credential_store.load_actor(db, record.user_id)
        if actor is None:
            raise UnauthenticatedError("Account is inactive")
        if not actor.roles:
            raise ForbiddenError("No active role assigned to this account")
        record.last_used_at = datetime.now(timezone.utc)

    return AuthTokens(
        user_id=actor.user_id,
        role=actor.primary_role,
        access_token=tokens.issue_access_token(actor.user_id, actor.primary_role),
        refresh_token=refresh_token,
    )


async def logout(
    db_manager: DatabaseSessionManager, tokens: TokenManager, refresh_token: str,
) -> int:
    if not refresh_token:
        raise ValidationError("Refresh token is required", field="refreshToken")
    async with db_manager.unit_of_work() as db:
        return await tokens.revoke(db, refresh_token, RevocationReason.LOGOUT)


async def logout_all(
    db_manager: DatabaseSessionManager, tokens: TokenManager, actor: ActorContext,
) -> int:
    async with db_manager.unit_of_work() as db:
        return await tokens.revoke_all(db, actor.user_id, RevocationReason.LOGOUT_ALL)
