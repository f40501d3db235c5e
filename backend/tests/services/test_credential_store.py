"""Credential Store — tests for identity lookups and role membership.

Tests cover:
    - Active roles come back in assignment order; inactive roles are skipped
    - load_actor returns None for inactive users
    - Contact conflicts name the field that collided
    - replace_roles leaves exactly one membership
"""

from sqlalchemy import select, update

from propertyhub.models.role import Role
from propertyhub.models.user_role import UserRole
from propertyhub.services import credential_store
from tests.seed_data import make_user, staggered


async def test_active_roles_in_assignment_order(db_manager, seeded, test_db):
    roles = seeded["roles"]
    user = await make_user(test_db, roles["Broker"], assigned_at=staggered(5))
    test_db.add(UserRole(
        user_id=user.user_id, role_id=roles["Investor"].role_id,
        assigned_at=staggered(1),
    ))
    await test_db.commit()
    async with db_manager.session() as db:
        active = await credential_store.get_active_roles(db, user.user_id)
    assert [r.role_name for r in active] == ["Investor", "Broker"]


async def test_inactive_role_is_not_active_membership(db_manager, seeded, test_db):
    role = seeded["roles"]["Broker"]
    user = await make_user(test_db, role)
    await test_db.execute(
        update(Role).where(Role.role_id == role.role_id).values(is_active=False)
    )
    await test_db.commit()
    async with db_manager.session() as db:
        actor = await credential_store.load_actor(db, user.user_id)
    assert actor is not None
    assert actor.roles == ()


async def test_load_actor_skips_inactive_user(db_manager, seeded, test_db):
    user = await make_user(test_db, seeded["roles"]["Owner"], is_active=False)
    async with db_manager.session() as db:
        assert await credential_store.load_actor(db, user.user_id) is None


async def test_contact_conflicts_name_the_field(db_manager, seeded, test_db):
    user = await make_user(
        test_db, seeded["roles"]["Owner"],
        email="taken@example.com", rera_number="MHRERA/A1",
    )
    async with db_manager.session() as db:
        assert await credential_store.find_contact_conflict(
            db, email="taken@example.com",
        ) == "Email already registered"
        assert await credential_store.find_contact_conflict(
            db, mobile_number=user.mobile_number,
        ) == "Mobile number already registered"
        assert await credential_store.find_contact_conflict(
            db, rera_number="MHRERA/A1",
        ) == "RERA number already registered"
        assert await credential_store.find_contact_conflict(
            db, email="taken@example.com", exclude_user_id=user.user_id,
        ) is None


async def test_replace_roles_leaves_one_membership(db_manager, seeded, test_db):
    roles = seeded["roles"]
    user = await make_user(test_db, roles["Sales"])
    async with db_manager.unit_of_work() as db:
        await credential_store.replace_roles(db, user.user_id, roles["Admin"].role_id)
    async with db_manager.session() as db:
        memberships = (await db.execute(
            select(UserRole.role_id).where(UserRole.user_id == user.user_id)
        )).scalars().all()
    assert memberships == [roles["Admin"].role_id]
