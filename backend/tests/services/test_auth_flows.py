"""Auth Flows — tests for signup, OTP login, token rotation, refresh and logout.

Tests cover:
    - Signup writes user, role, refresh token and INSERT audit together
    - Signup rejects bad OTP, duplicate contacts and admin roles
    - Login rotates the refresh token per device (one active row per device)
    - Refresh fails for revoked tokens and inactive accounts
    - Logout / logout-all are idempotent and return revoked counts
"""

import pytest
from sqlalchemy import select, update

from propertyhub.core.domain_types import DeviceContext
from propertyhub.core.errors import (
    ConflictError, ForbiddenError, ResourceNotFoundError,
    UnauthenticatedError, ValidationError,
)
from propertyhub.models.audit_log import AuditLog
from propertyhub.models.token import Token
from propertyhub.models.user import User
from propertyhub.services import auth_flows
from tests.seed_data import make_actor, make_user

PHONE = DeviceContext(device_id="phone", user_agent="pytest", ip_address="10.0.0.1")
LAPTOP = DeviceContext(device_id="laptop", user_agent="pytest", ip_address="10.0.0.2")


def _make_signup(**overrides) -> dict:
    payload = {
        "mobile_number": "9876543210",
        "email": "asha@example.com",
        "first_name": "Asha",
        "last_name": "Rao",
        "otp": "1111",
    }
    payload.update(overrides)
    return payload


async def _active_tokens(db_manager, user_id):
    async with db_manager.session() as db:
        return (await db.execute(
            select(Token).where(Token.user_id == user_id, Token.is_active.is_(True))
        )).scalars().all()


# ─── Signup ─────────────────────────────────────────────────────

async def test_signup_creates_account_and_tokens(db_manager, tokens, settings, seeded):
    result = await auth_flows.signup(
        db_manager, tokens, settings, _make_signup(role_name="Owner"), PHONE,
    )
    assert result.role == "Owner"
    assert tokens.verify_access_token(result.access_token).claims["subjectId"] == str(result.user_id)

    async with db_manager.session() as db:
        user = await db.get(User, result.user_id)
        audit = (await db.execute(select(AuditLog))).scalars().all()
    assert user.user_type == "client"
    assert len(audit) == 1
    assert audit[0].operation == "INSERT"
    assert audit[0].user_id == result.user_id
    assert audit[0].new_value["role_name"] == "Owner"
    [token] = await _active_tokens(db_manager, result.user_id)
    assert token.refresh_token == result.refresh_token
    assert token.device_id == "phone"


async def test_signup_defaults_to_broker(db_manager, tokens, settings, seeded):
    result = await auth_flows.signup(db_manager, tokens, settings, _make_signup(), PHONE)
    assert result.role == "Broker"


async def test_signup_rejects_wrong_otp(db_manager, tokens, settings, seeded):
    with pytest.raises(ValidationError) as exc_info:
        await auth_flows.signup(db_manager, tokens, settings, _make_signup(otp="0000"), PHONE)
    assert exc_info.value.message == "Invalid OTP entered"


async def test_signup_rejects_duplicate_mobile(db_manager, tokens, settings, seeded):
    await auth_flows.signup(db_manager, tokens, settings, _make_signup(), PHONE)
    with pytest.raises(ConflictError) as exc_info:
        await auth_flows.signup(
            db_manager, tokens, settings, _make_signup(email="other@example.com"), PHONE,
        )
    assert exc_info.value.message == "Mobile number already registered"


async def test_signup_cannot_pick_admin_role(db_manager, tokens, settings, seeded):
    with pytest.raises(ValidationError):
        await auth_flows.signup(
            db_manager, tokens, settings, _make_signup(role_name="Admin"), PHONE,
        )
    async with db_manager.session() as db:
        assert (await db.execute(select(User))).scalars().all() == []


async def test_signup_rejects_malformed_rera(db_manager, tokens, settings, seeded):
    with pytest.raises(ValidationError):
        await auth_flows.signup(
            db_manager, tokens, settings, _make_signup(rera_number="rera-1"), PHONE,
        )


async def test_signup_requires_fields(db_manager, tokens, settings, seeded):
    with pytest.raises(ValidationError) as exc_info:
        await auth_flows.signup(
            db_manager, tokens, settings, _make_signup(email=None, first_name=""), PHONE,
        )
    assert exc_info.value.message == "Missing required fields: email, first_name"


# ─── Login ──────────────────────────────────────────────────────

async def test_login_unknown_mobile_is_not_found(db_manager, tokens, settings, seeded):
    with pytest.raises(ResourceNotFoundError):
        await auth_flows.login(
            db_manager, tokens, settings,
            {"mobile_number": "9123456789", "otp": "1111"}, PHONE,
        )


async def test_login_rotates_token_for_same_device(db_manager, tokens, settings, seeded):
    signup = await auth_flows.signup(db_manager, tokens, settings, _make_signup(), PHONE)
    login = await auth_flows.login(
        db_manager, tokens, settings,
        {"mobile_number": "9876543210", "otp": "1111"}, PHONE,
    )
    [active] = await _active_tokens(db_manager, signup.user_id)
    assert active.refresh_token == login.refresh_token
    async with db_manager.session() as db:
        old = (await db.execute(
            select(Token).where(Token.refresh_token == signup.refresh_token)
        )).scalar_one()
    assert old.is_active is False
    assert old.revocation_reason == "ROTATED"


async def test_login_on_second_device_keeps_first(db_manager, tokens, settings, seeded):
    signup = await auth_flows.signup(db_manager, tokens, settings, _make_signup(), PHONE)
    await auth_flows.login(
        db_manager, tokens, settings,
        {"mobile_number": "9876543210", "otp": "1111"}, LAPTOP,
    )
    active = await _active_tokens(db_manager, signup.user_id)
    assert {t.device_id for t in active} == {"phone", "laptop"}


async def test_logins_without_device_id_share_one_slot(db_manager, tokens, settings, seeded):
    anonymous = DeviceContext(user_agent="pytest")
    signup = await auth_flows.signup(db_manager, tokens, settings, _make_signup(), anonymous)
    login = await auth_flows.login(
        db_manager, tokens, settings,
        {"mobile_number": "9876543210", "otp": "1111"}, anonymous,
    )
    [active] = await _active_tokens(db_manager, signup.user_id)
    assert active.refresh_token == login.refresh_token
    assert active.device_id == "unknown"


async def test_login_without_role_is_forbidden(db_manager, tokens, settings, seeded, test_db):
    user = await make_user(test_db, None)
    with pytest.raises(ForbiddenError):
        await auth_flows.login(
            db_manager, tokens, settings,
            {"mobile_number": user.mobile_number, "otp": "1111"}, PHONE,
        )


async def test_login_does_not_write_audit(db_manager, tokens, settings, seeded):
    await auth_flows.signup(db_manager, tokens, settings, _make_signup(), PHONE)
    await auth_flows.login(
        db_manager, tokens, settings,
        {"mobile_number": "9876543210", "otp": "1111"}, PHONE,
    )
    async with db_manager.session() as db:
        assert len((await db.execute(select(AuditLog))).scalars().all()) == 1


# ─── Refresh / Logout ───────────────────────────────────────────

async def test_refresh_issues_access_token(db_manager, tokens, settings, seeded):
    signup = await auth_flows.signup(db_manager, tokens, settings, _make_signup(), PHONE)
    result = await auth_flows.refresh(db_manager, tokens, signup.refresh_token)
    assert result.user_id == signup.user_id
    assert result.role == "Broker"
    [token] = await _active_tokens(db_manager, signup.user_id)
    assert token.last_used_at is not None


async def test_refresh_after_logout_is_unauthenticated(db_manager, tokens, settings, seeded):
    signup = await auth_flows.signup(db_manager, tokens, settings, _make_signup(), PHONE)
    assert await auth_flows.logout(db_manager, tokens, signup.refresh_token) == 1
    assert await auth_flows.logout(db_manager, tokens, signup.refresh_token) == 0
    with pytest.raises(UnauthenticatedError) as exc_info:
        await auth_flows.refresh(db_manager, tokens, signup.refresh_token)
    assert exc_info.value.message == "Token not found or revoked"


async def test_refresh_for_deactivated_user_fails(db_manager, tokens, settings, seeded, test_db):
    signup = await auth_flows.signup(db_manager, tokens, settings, _make_signup(), PHONE)
    await test_db.execute(
        update(User).where(User.user_id == signup.user_id).values(is_active=False)
    )
    await test_db.commit()
    with pytest.raises(UnauthenticatedError):
        await auth_flows.refresh(db_manager, tokens, signup.refresh_token)


async def test_logout_all_revokes_every_device(db_manager, tokens, settings, seeded):
    signup = await auth_flows.signup(db_manager, tokens, settings, _make_signup(), PHONE)
    await auth_flows.login(
        db_manager, tokens, settings,
        {"mobile_number": "9876543210", "otp": "1111"}, LAPTOP,
    )
    async with db_manager.session() as db:
        user = await db.get(User, signup.user_id)
    revoked = await auth_flows.logout_all(db_manager, tokens, make_actor(user, None))
    assert revoked == 2
    assert await _active_tokens(db_manager, signup.user_id) == []
