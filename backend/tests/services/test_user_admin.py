"""User Administration — tests for staff account CRUD and Super Admin bootstrap.

Tests cover:
    - Only admin roles can be assigned; client users are off-limits
    - Soft delete revokes every refresh token and audits the change
    - Self-delete / self-deactivate are Forbidden
    - Role change replaces the membership and is audited
    - Listing filters by primary role and active flag
    - Super Admin bootstrap: secret required, one-time only
"""

import pytest
from sqlalchemy import select

from propertyhub.core.errors import (
    ConflictError, ForbiddenError, ResourceNotFoundError, ValidationError,
)
from propertyhub.models.audit_log import AuditLog
from propertyhub.models.token import Token
from propertyhub.models.user import User
from propertyhub.services import user_admin
from tests.seed_data import make_actor, make_user


def _make_staff(**overrides) -> dict:
    payload = {
        "first_name": "Meera",
        "last_name": "Iyer",
        "email": "meera@example.com",
        "mobile_number": "9811111111",
        "role_name": "Sales",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
async def super_admin(seeded, test_db):
    role = seeded["roles"]["Super Admin"]
    return make_actor(await make_user(test_db, role), role)


async def _reload(db_manager, user_id) -> User:
    async with db_manager.session() as db:
        return await db.get(User, user_id)


# ─── Create ─────────────────────────────────────────────────────

async def test_create_staff_user(db_manager, super_admin):
    result = await user_admin.create_user(db_manager, super_admin, _make_staff())
    assert result.role_name == "Sales"
    assert result.user.user_type == "admin"
    async with db_manager.session() as db:
        [audit] = (await db.execute(select(AuditLog))).scalars().all()
    assert audit.operation == "INSERT"
    assert audit.user_id == super_admin.user_id


async def test_create_rejects_client_role(db_manager, super_admin):
    with pytest.raises(ForbiddenError):
        await user_admin.create_user(db_manager, super_admin, _make_staff(role_name="Owner"))


async def test_create_rejects_unknown_role(db_manager, super_admin):
    with pytest.raises(ValidationError):
        await user_admin.create_user(db_manager, super_admin, _make_staff(role_name="Janitor"))


async def test_create_rejects_duplicate_email(db_manager, super_admin):
    await user_admin.create_user(db_manager, super_admin, _make_staff())
    with pytest.raises(ConflictError):
        await user_admin.create_user(
            db_manager, super_admin, _make_staff(mobile_number="9822222222"),
        )


# ─── Update ─────────────────────────────────────────────────────

async def test_update_changes_role_and_audits(db_manager, super_admin):
    created = await user_admin.create_user(db_manager, super_admin, _make_staff())
    result = await user_admin.update_user(
        db_manager, super_admin, created.user.user_id,
        {"role_name": "Admin", "first_name": "Mira"},
    )
    assert result.role_name == "Admin"
    assert result.user.first_name == "Mira"
    async with db_manager.session() as db:
        audit = (await db.execute(
            select(AuditLog).where(AuditLog.operation == "UPDATE")
        )).scalar_one()
    assert audit.old_value == {"first_name": "Meera", "role_name": "Sales"}
    assert audit.new_value == {"first_name": "Mira", "role_name": "Admin"}


async def test_update_client_user_is_forbidden(db_manager, super_admin, seeded, test_db):
    client = await make_user(test_db, seeded["roles"]["Owner"])
    with pytest.raises(ForbiddenError):
        await user_admin.update_user(
            db_manager, super_admin, client.user_id, {"first_name": "X"},
        )


async def test_update_with_nothing_is_rejected(db_manager, super_admin):
    created = await user_admin.create_user(db_manager, super_admin, _make_staff())
    with pytest.raises(ValidationError):
        await user_admin.update_user(db_manager, super_admin, created.user.user_id, {})


async def test_cannot_deactivate_self(db_manager, super_admin, tokens):
    with pytest.raises(ForbiddenError):
        await user_admin.update_user(
            db_manager, super_admin, super_admin.user_id, {"is_active": False}, tokens,
        )


# ─── Delete ─────────────────────────────────────────────────────

async def test_delete_deactivates_and_revokes_tokens(db_manager, super_admin, tokens):
    created = await user_admin.create_user(db_manager, super_admin, _make_staff())
    user_id = created.user.user_id
    async with db_manager.unit_of_work() as db:
        await tokens.issue_refresh_token(db, user_id, "Sales")

    revoked = await user_admin.delete_user(db_manager, super_admin, tokens, user_id)
    assert revoked == 1
    assert (await _reload(db_manager, user_id)).is_active is False
    async with db_manager.session() as db:
        token = (await db.execute(select(Token))).scalar_one()
    assert token.revocation_reason == "USER_DEACTIVATED"


async def test_delete_self_is_forbidden(db_manager, super_admin, tokens):
    with pytest.raises(ForbiddenError):
        await user_admin.delete_user(db_manager, super_admin, tokens, super_admin.user_id)


async def test_delete_twice_is_not_found(db_manager, super_admin, tokens):
    created = await user_admin.create_user(db_manager, super_admin, _make_staff())
    await user_admin.delete_user(db_manager, super_admin, tokens, created.user.user_id)
    with pytest.raises(ResourceNotFoundError):
        await user_admin.delete_user(db_manager, super_admin, tokens, created.user.user_id)


# ─── List ───────────────────────────────────────────────────────

async def test_list_filters_by_role(db_manager, super_admin, seeded, test_db):
    await user_admin.create_user(db_manager, super_admin, _make_staff())
    await make_user(test_db, seeded["roles"]["Owner"])
    page = await user_admin.list_users(db_manager, role_name="Sales")
    assert [i.role_name for i in page.items] == ["Sales"]
    everyone = await user_admin.list_users(db_manager)
    assert {i.role_name for i in everyone.items} == {"Sales", "Super Admin"}


# ─── Super Admin bootstrap ──────────────────────────────────────

def _bootstrap_payload() -> dict:
    return {
        "first_name": "Root", "last_name": "Admin",
        "email": "root@example.com", "mobile_number": "9899999999",
    }


async def test_super_admin_requires_secret(db_manager, settings, seeded):
    with pytest.raises(ForbiddenError) as exc_info:
        await user_admin.create_super_admin(
            db_manager, settings, _bootstrap_payload(), "wrong",
        )
    assert exc_info.value.message == "Invalid secret key"


async def test_super_admin_disabled_without_configured_secret(db_manager, settings, seeded):
    disabled = settings.model_copy(update={"super_admin_creation_secret": ""})
    with pytest.raises(ForbiddenError):
        await user_admin.create_super_admin(
            db_manager, disabled, _bootstrap_payload(), "bootstrap-secret",
        )


async def test_super_admin_is_one_time(db_manager, settings, seeded):
    result = await user_admin.create_super_admin(
        db_manager, settings, _bootstrap_payload(), "bootstrap-secret",
    )
    assert result.role_name == "Super Admin"
    with pytest.raises(ConflictError):
        await user_admin.create_super_admin(
            db_manager, settings,
            {**_bootstrap_payload(), "email": "b@example.com", "mobile_number": "9888888888"},
            "bootstrap-secret",
        )
