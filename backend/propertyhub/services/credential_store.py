"""Credential Store — reads and writes identity, role membership, permission grants.

Invariants:
    - An actor's roles are its ACTIVE roles (Role.is_active) in assignment order
    - The first active role is the primary role
    - Inactive users never resolve to an ActorContext
    - Uniqueness checks cover email, mobile number and RERA number

Design Decisions:
    - Module-level async functions taking an AsyncSession: the caller owns the
      transaction, so these compose inside any unit of work
    - Join entities are queried explicitly; no relationship() traversal
"""

from uuid import UUID

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.domain_types import ActorContext, RoleRef
from propertyhub.models.role import Role
from propertyhub.models.user import User
from propertyhub.models.user_role import UserRole


async def get_user(db: AsyncSession, user_id: UUID) -> User | None:
    return await db.get(User, user_id)


async def get_user_by_mobile(db: AsyncSession, mobile_number: str) -> User | None:
    return (await db.execute(
        select(User).where(User.mobile_number == mobile_number)
    )).scalar_one_or_none()


async def get_active_roles(db: AsyncSession, user_id: UUID) -> list[RoleRef]:
    """Active roles held by the user, earliest assignment first."""
    rows = (await db.execute(
        select(Role.role_id, Role.role_name, Role.role_type)
        .join(UserRole, UserRole.role_id == Role.role_id)
        .where(UserRole.user_id == user_id, Role.is_active.is_(True))
        .order_by(UserRole.assigned_at, Role.role_id)
    )).all()
    return [RoleRef(r.role_id, r.role_name, r.role_type) for r in rows]


async def get_role_by_name(
    db: AsyncSession, role_name: str, role_type: str | None = None,
) -> Role | None:
    """Active role by exact name, optionally restricted to a role type."""
    query = select(Role).where(
        Role.role_name == role_name, Role.is_active.is_(True),
    )
    if role_type is not None:
        query = query.where(Role.role_type == role_type)
    return (await db.execute(query)).scalar_one_or_none()


async def load_actor(
    db: AsyncSession,
    user_id: UUID,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> ActorContext | None:
    """Resolve an ActorContext for an active user; None when unknown or inactive."""
    user = await get_user(db, user_id)
    if user is None or not user.is_active:
        return None
    roles = await get_active_roles(db, user_id)
    return ActorContext(
        user_id=user.user_id, roles=tuple(roles),
        ip_address=ip_address, user_agent=user_agent,
    )


async def find_contact_conflict(
    db: AsyncSession,
    email: str | None = None,
    mobile_number: str | None = None,
    rera_number: str | None = None,
    exclude_user_id: UUID | None = None,
) -> str | None:
    """Return a conflict message if any contact field is already taken."""
    clauses = []
    if email:
        clauses.append(User.email == email)
    if mobile_number:
        clauses.append(User.mobile_number == mobile_number)
    if rera_number:
        clauses.append(User.rera_number == rera_number)
    if not clauses:
        return None
    query = select(User).where(or_(*clauses))
    if exclude_user_id is not None:
        query = query.where(User.user_id != exclude_user_id)
    existing = (await db.execute(query.limit(1))).scalar_one_or_none()
    if existing is None:
        return None
    if email and existing.email == email:
        return "Email already registered"
    if mobile_number and existing.mobile_number == mobile_number:
        return "Mobile number already registered"
    return "RERA number already registered"


async def assign_role(
    db: AsyncSession, user_id: UUID, role_id: int,
    assigned_by: UUID | None = None,
) -> UserRole:
    membership = UserRole(
        user_id=user_id, role_id=role_id, assigned_by=assigned_by,
    )
    db.add(membership)
    await db.flush()
    return membership


async def replace_roles(
    db: AsyncSession, user_id: UUID, role_id: int,
    assigned_by: UUID | None = None,
) -> UserRole:
    """Drop every membership of the user and assign exactly one role."""
    existing = (await db.execute(
        select(UserRole).where(UserRole.user_id == user_id)
    )).scalars().all()
    for membership in existing:
        await db.delete(membership)
    await db.flush()
    return await assign_role(db, user_id, role_id, assigned_by)
