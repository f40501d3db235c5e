"""User Administration — staff account management behind USER_* permissions.

Invariants:
    - Only admin-type roles are assigned here; client accounts come from signup
    - Client users cannot be edited or deleted through this module (ForbiddenError)
    - An admin cannot delete their own account
    - Deletion is soft (is_active=False) and revokes every refresh token the
      user holds (USER_DEACTIVATED) in the same unit of work
    - Every committed change writes exactly one audit row
    - Super Admin bootstrap is one-time and guarded by a configured secret
"""

import logging
import math
import secrets
from dataclasses import dataclass
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.config import Settings
from propertyhub.core.domain_types import (
    ActorContext, RevocationReason, RoleName, RoleType, UserType,
)
from propertyhub.core.errors import (
    ConflictError, ForbiddenError, ResourceNotFoundError, ValidationError,
)
from propertyhub.core.validators import check_contact_formats, check_required_fields
from propertyhub.infrastructure.database import DatabaseSessionManager
from propertyhub.models.role import Role
from propertyhub.models.user import User
from propertyhub.models.user_role import UserRole
from propertyhub.services import audit_recorder, credential_store
from propertyhub.services.token_manager import TokenManager

logger = logging.getLogger(__name__)

CREATE_REQUIRED = ("first_name", "last_name", "email", "mobile_number", "role_name")
SUPER_ADMIN_REQUIRED = ("first_name", "last_name", "email", "mobile_number")
EDITABLE_USER_FIELDS = ("first_name", "last_name", "email", "mobile_number", "is_active")


@dataclass
class ManagedUser:
    user: User
    role_name: str | None


@dataclass
class UserPage:
    items: list[ManagedUser]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


async def _admin_role(db: AsyncSession, role_name: str) -> Role:
    role = await credential_store.get_role_by_name(db, role_name)
    if role is None:
        raise ValidationError(f"Invalid role: {role_name}", field="roleName")
    if role.role_type != RoleType.ADMIN.value:
        raise ForbiddenError(
            "Cannot create client roles (Owner, Investor, Broker). "
            "These are created via signup.",
        )
    return role


async def _managed_target(db: AsyncSession, user_id: UUID) -> User:
    user = await db.get(User, user_id, with_for_update=True)
    if user is None:
        raise ResourceNotFoundError("User", str(user_id))
    if user.user_type != UserType.ADMIN.value:
        raise ForbiddenError(
            "Cannot manage client users (Owner, Broker, Investor) via admin API",
        )
    return user


async def create_user(
    db_manager: DatabaseSessionManager,
    actor: ActorContext,
    payload: Mapping[str, Any],
) -> ManagedUser:
    check_required_fields(CREATE_REQUIRED, payload)
    check_contact_formats(payload["email"], payload["mobile_number"])

    async with db_manager.unit_of_work() as db:
        role = await _admin_role(db, payload["role_name"])
        conflict = await credential_store.find_contact_conflict(
            db, payload["email"], payload["mobile_number"],
        )
        if conflict:
            raise ConflictError(conflict)
        user = User(
            first_name=payload["first_name"],
            last_name=payload["last_name"],
            email=payload["email"],
            mobile_number=payload["mobile_number"],
            user_type=UserType.ADMIN.value,
            is_active=True,
        )
        db.add(user)
        await db.flush()
        await credential_store.assign_role(
            db, user.user_id, role.role_id, assigned_by=actor.user_id,
        )
        snapshot = user.to_dict()
        snapshot.update(role_name=role.role_name, created_by=actor.primary_role)
        await audit_recorder.record_insert(db, actor, "User", user.user_id, snapshot)

    logger.info(
        f"Admin user created with role {role.role_name}",
        extra={"user_id": str(actor.user_id)},
    )
    return ManagedUser(user=user, role_name=role.role_name)


async def update_user(
    db_manager: DatabaseSessionManager,
    actor: ActorContext,
    user_id: UUID,
    payload: Mapping[str, Any],
    tokens: TokenManager | None = None,
) -> ManagedUser:
    patch = {
        k: payload[k] for k in EDITABLE_USER_FIELDS
        if k in payload and payload[k] is not None
    }
    new_role_name = payload.get("role_name")
    if not patch and not new_role_name:
        raise ValidationError("No fields to update")
    check_contact_formats(patch.get("email"), patch.get("mobile_number"))

    async with db_manager.unit_of_work() as db:
        user = await _managed_target(db, user_id)
        roles = await credential_store.get_active_roles(db, user_id)
        current_role = roles[0].role_name if roles else None
        conflict = await credential_store.find_contact_conflict(
            db, patch.get("email"), patch.get("mobile_number"),
            exclude_user_id=user_id,
        )
        if conflict:
            raise ConflictError(conflict)

        old = user.to_dict()
        extra_old: dict[str, Any] = {}
        extra_new: dict[str, Any] = {}
        role_name = current_role
        if new_role_name and new_role_name != current_role:
            role = await _admin_role(db, new_role_name)
            await credential_store.replace_roles(
                db, user_id, role.role_id, assigned_by=actor.user_id,
            )
            extra_old["role_name"] = current_role
            extra_new["role_name"] = role.role_name
            role_name = role.role_name

        if user_id == actor.user_id and patch.get("is_active") is False:
            raise ForbiddenError("You cannot deactivate your own account")
        for key, value in patch.items():
            setattr(user, key, value)
        if patch.get("is_active") is False and tokens is not None:
            await tokens.revoke_all(db, user_id, RevocationReason.USER_DEACTIVATED)
        await db.flush()
        await audit_recorder.record_update(
            db, actor, "User", user_id, old, patch,
            extra_old=extra_old, extra_new=extra_new,
        )

    return ManagedUser(user=user, role_name=role_name)


async def delete_user(
    db_manager: DatabaseSessionManager,
    actor: ActorContext,
    tokens: TokenManager,
    user_id: UUID,
) -> int:
    """Deactivate an admin user; returns the number of revoked refresh tokens."""
    if user_id == actor.user_id:
        raise ForbiddenError("You cannot delete your own account")

    async with db_manager.unit_of_work() as db:
        user = await _managed_target(db, user_id)
        if not user.is_active:
            raise ResourceNotFoundError("User", str(user_id))
        user.is_active = False
        revoked = await tokens.revoke_all(
            db, user_id, RevocationReason.USER_DEACTIVATED,
        )
        await db.flush()
        await audit_recorder.record_update(
            db, actor, "User", user_id,
            {"is_active": True}, {"is_active": False},
        )
    return revoked


async def list_users(
    db_manager: DatabaseSessionManager,
    role_name: str | None = None,
    is_active: bool | None = None,
    page: int = 1,
    limit: int = 10,
) -> UserPage:
    page = max(page, 1)
    limit = min(max(limit, 1), 100)
    primary_role = (
        select(Role.role_name)
        .join(UserRole, UserRole.role_id == Role.role_id)
        .where(UserRole.user_id == User.user_id)
        .order_by(UserRole.assigned_at)
        .limit(1)
        .correlate(User)
        .scalar_subquery()
    )
    clauses = [User.user_type == UserType.ADMIN.value]
    if is_active is not None:
        clauses.append(User.is_active.is_(is_active))
    if role_name:
        clauses.append(primary_role == role_name)

    async with db_manager.session() as db:
        total = (await db.execute(
            select(func.count(User.user_id)).where(*clauses)
        )).scalar_one()
        rows = (await db.execute(
            select(User, primary_role.label("role_name"))
            .where(*clauses)
            .order_by(User.created_at.desc(), User.user_id)
            .offset((page - 1) * limit)
            .limit(limit)
        )).all()
    items = [ManagedUser(user=row[0], role_name=row[1]) for row in rows]
    return UserPage(items=items, page=page, limit=limit, total=total)


async def create_super_admin(
    db_manager: DatabaseSessionManager,
    settings: Settings,
    payload: Mapping[str, Any],
    secret_key: str | None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> ManagedUser:
    """One-time bootstrap of the first Super Admin account."""
    expected = settings.super_admin_creation_secret
    if not expected:
        raise ForbiddenError("Super Admin creation is disabled")
    if not secret_key or not secrets.compare_digest(secret_key, expected):
        raise ForbiddenError("Invalid secret key")
    check_required_fields(SUPER_ADMIN_REQUIRED, payload)
    check_contact_formats(payload["email"], payload["mobile_number"])

    async with db_manager.unit_of_work() as db:
        role = await credential_store.get_role_by_name(
            db, RoleName.SUPER_ADMIN.value, RoleType.ADMIN.value,
        )
        if role is None:
            raise ValidationError("Super Admin role is not configured")
        existing = (await db.execute(
            select(func.count(UserRole.user_id))
            .where(UserRole.role_id == role.role_id)
        )).scalar_one()
        if existing:
            raise ConflictError("A Super Admin already exists")
        conflict = await credential_store.find_contact_conflict(
            db, payload["email"], payload["mobile_number"],
        )
        if conflict:
            raise ConflictError(conflict)
        user = User(
            first_name=payload["first_name"],
            last_name=payload["last_name"],
            email=payload["email"],
            mobile_number=payload["mobile_number"],
            user_type=UserType.ADMIN.value,
            is_active=True,
        )
        db.add(user)
        await db.flush()
        await credential_store.assign_role(db, user.user_id, role.role_id)
        actor = ActorContext(
            user_id=user.user_id, ip_address=ip_address, user_agent=user_agent,
        )
        snapshot = user.to_dict()
        snapshot["role_name"] = role.role_name
        await audit_recorder.record_insert(db, actor, "User", user.user_id, snapshot)

    logger.warning("Super Admin account created", extra={"user_id": str(user.user_id)})
    return ManagedUser(user=user, role_name=role.role_name)
