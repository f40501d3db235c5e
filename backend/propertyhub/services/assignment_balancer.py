"""Assignment Balancer — least-loaded Sales handler selection and re-assignment checks.

Invariants:
    - Candidates: active users holding the active Sales role, in role-assignment order
    - Load: count of ACTIVE properties whose sales_id is the candidate
    - Selection delegates to core/load_balance.pick_least_loaded (first minimum wins)
    - No candidates → None; the property stays unassigned
"""

from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.errors import ValidationError
from propertyhub.core.load_balance import pick_least_loaded
from propertyhub.models.property import Property
from propertyhub.models.role import Role
from propertyhub.models.user import User
from propertyhub.models.user_role import UserRole


async def sales_candidates(db: AsyncSession, sales_role_name: str) -> list[UUID]:
    rows = (await db.execute(
        select(User.user_id)
        .join(UserRole, UserRole.user_id == User.user_id)
        .join(Role, Role.role_id == UserRole.role_id)
        .where(
            Role.role_name == sales_role_name,
            Role.is_active.is_(True),
            User.is_active.is_(True),
        )
        .order_by(UserRole.assigned_at, User.user_id)
    )).scalars().all()
    return list(rows)


async def sales_load(
    db: AsyncSession, sales_role_name: str,
) -> list[tuple[UUID, int]]:
    """(candidate, active property count) in enumeration order."""
    candidates = await sales_candidates(db, sales_role_name)
    if not candidates:
        return []
    counts = dict((await db.execute(
        select(Property.sales_id, func.count(Property.property_id))
        .where(
            Property.sales_id.in_(candidates),
            Property.is_active.is_(True),
        )
        .group_by(Property.sales_id)
    )).all())
    return [(user_id, counts.get(user_id, 0)) for user_id in candidates]


async def pick_sales_handler(db: AsyncSession, sales_role_name: str) -> UUID | None:
    return pick_least_loaded(await sales_load(db, sales_role_name))


async def require_assignable(db: AsyncSession, user_id: UUID) -> User:
    """Re-assignment target must exist and be active."""
    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise ValidationError(
            "Assignee not found or inactive", field="salesId",
        )
    return user
