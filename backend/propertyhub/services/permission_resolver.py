"""Permission Resolver — role → permission authorization for a named action.

Invariants:
    - Only grants through ACTIVE roles count (Role.is_active)
    - Permission-level is_active is NOT filtered; only role activity matters
    - No identity → UnauthenticatedError (401); identity without grant → ForbiddenError (403)
    - ALL-mode denials list exactly the missing codes

Design Decisions:
    - One query fetches the granted subset of the requested codes; ANY/ALL
      evaluation happens in core/permission_rules.py
"""

import logging
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.domain_types import (
    ActorContext, AuthorizationMode, AuthorizationResult,
)
from propertyhub.core.errors import ForbiddenError, UnauthenticatedError
from propertyhub.core.permission_rules import evaluate_permissions, normalize_codes
from propertyhub.models.permission import Permission
from propertyhub.models.role import Role
from propertyhub.models.role_permission import RolePermission

logger = logging.getLogger(__name__)


async def granted_codes(
    db: AsyncSession, role_ids: Iterable[int], codes: list[str],
) -> set[str]:
    """Subset of `codes` granted to any of the active roles in `role_ids`."""
    role_ids = list(role_ids)
    if not role_ids or not codes:
        return set()
    rows = (await db.execute(
        select(Permission.code)
        .join(RolePermission, RolePermission.permission_id == Permission.permission_id)
        .join(Role, Role.role_id == RolePermission.role_id)
        .where(
            RolePermission.role_id.in_(role_ids),
            Role.is_active.is_(True),
            Permission.code.in_(codes),
        )
        .distinct()
    )).scalars().all()
    return set(rows)


async def authorize(
    db: AsyncSession,
    role_ids: Iterable[int],
    required: str | Iterable[str],
    mode: AuthorizationMode = AuthorizationMode.ANY,
) -> AuthorizationResult:
    role_ids = list(role_ids)
    codes = normalize_codes(required)
    granted = await granted_codes(db, role_ids, codes)
    return evaluate_permissions(codes, granted, mode, has_active_role=bool(role_ids))


async def require_permissions(
    db: AsyncSession,
    actor: ActorContext | None,
    required: str | Iterable[str],
    mode: AuthorizationMode = AuthorizationMode.ANY,
) -> None:
    """Raise unless the actor is authorized for the action."""
    if actor is None:
        raise UnauthenticatedError()
    if not actor.roles:
        raise ForbiddenError("No active role assigned", normalize_codes(required))
    result = await authorize(db, actor.role_ids, required, mode)
    if not result.granted:
        logger.info(
            f"Permission denied: missing {result.missing}",
            extra={"user_id": str(actor.user_id)},
        )
        raise ForbiddenError("Insufficient permissions", result.missing)


async def check_any_permission(
    db: AsyncSession, actor: ActorContext | None, codes: Iterable[str],
) -> None:
    await require_permissions(db, actor, codes, AuthorizationMode.ANY)


async def check_all_permissions(
    db: AsyncSession, actor: ActorContext | None, codes: Iterable[str],
) -> None:
    await require_permissions(db, actor, codes, AuthorizationMode.ALL)
