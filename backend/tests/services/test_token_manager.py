"""Token Manager — tests for access/refresh issuance, verification and revocation.

Tests cover:
    - Access tokens carry subjectId + role and verify statelessly
    - Expired access tokens are reported as expired (not merely invalid)
    - Refresh tokens are rejected as access tokens
    - Refresh verification checks storage before the signature
    - Revoked refresh tokens fail with "Token not found or revoked"
    - revoke_all / revoke_device return the number of rows deactivated
    - A second active row for one (user, device) is a ConflictError; a missing
      device id is stored as "unknown" and takes part in the same rule
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import select

from propertyhub.core.domain_types import DeviceContext, RevocationReason
from propertyhub.core.errors import ConflictError
from propertyhub.models.token import Token
from propertyhub.services.token_manager import (
    REASON_ACCESS_EXPIRED, REASON_NOT_FOUND, REASON_REFRESH_EXPIRED,
)
from tests.seed_data import make_user


async def _issue(db_manager, tokens, user, device_id=None, now=None):
    async with db_manager.unit_of_work() as db:
        record = await tokens.issue_refresh_token(
            db, user.user_id, "Owner", DeviceContext(device_id=device_id), now=now,
        )
    return record.refresh_token


# ─── Access tokens ──────────────────────────────────────────────

def test_access_token_round_trip(tokens):
    user_id = uuid4()
    verification = tokens.verify_access_token(tokens.issue_access_token(user_id, "Broker"))
    assert verification.valid
    assert verification.claims["subjectId"] == str(user_id)
    assert verification.claims["role"] == "Broker"


def test_expired_access_token_is_flagged(tokens):
    issued = datetime.now(timezone.utc) - timedelta(hours=1)
    token = tokens.issue_access_token(uuid4(), "Owner", now=issued)
    verification = tokens.verify_access_token(token)
    assert not verification.valid
    assert verification.expired
    assert verification.reason == REASON_ACCESS_EXPIRED


def test_garbage_access_token_is_invalid(tokens):
    verification = tokens.verify_access_token("not-a-jwt")
    assert not verification.valid
    assert not verification.expired


def test_refresh_token_is_not_an_access_token(tokens):
    refresh, _ = tokens.sign_refresh_token(uuid4(), "Owner")
    assert not tokens.verify_access_token(refresh).valid


# ─── Refresh tokens ─────────────────────────────────────────────

async def test_issued_refresh_token_verifies(db_manager, tokens, seeded, test_db):
    user = await make_user(test_db, seeded["roles"]["Owner"])
    refresh = await _issue(db_manager, tokens, user, "phone")
    async with db_manager.session() as db:
        verification = await tokens.verify_refresh_token(db, refresh)
    assert verification.valid
    assert verification.record.user_id == user.user_id
    assert verification.record.device_id == "phone"


async def test_revoked_refresh_token_reports_not_found(db_manager, tokens, seeded, test_db):
    user = await make_user(test_db, seeded["roles"]["Owner"])
    refresh = await _issue(db_manager, tokens, user)
    async with db_manager.unit_of_work() as db:
        assert await tokens.revoke(db, refresh, RevocationReason.LOGOUT) == 1
    async with db_manager.session() as db:
        verification = await tokens.verify_refresh_token(db, refresh)
    assert not verification.valid
    assert verification.reason == REASON_NOT_FOUND


async def test_expired_refresh_row_reports_expiry(db_manager, tokens, seeded, test_db):
    user = await make_user(test_db, seeded["roles"]["Owner"])
    issued = datetime.now(timezone.utc) - timedelta(days=8)
    refresh = await _issue(db_manager, tokens, user, now=issued)
    async with db_manager.session() as db:
        verification = await tokens.verify_refresh_token(db, refresh)
    assert not verification.valid
    assert verification.expired
    assert verification.reason == REASON_REFRESH_EXPIRED


async def test_unknown_refresh_token_reports_not_found(db_manager, tokens):
    refresh, _ = tokens.sign_refresh_token(
        uuid4(), "Owner",
    )
    async with db_manager.session() as db:
        verification = await tokens.verify_refresh_token(db, refresh)
    assert verification.reason == REASON_NOT_FOUND


# ─── Revocation ─────────────────────────────────────────────────

async def test_revoke_all_counts_active_rows(db_manager, tokens, seeded, test_db):
    user = await make_user(test_db, seeded["roles"]["Owner"])
    await _issue(db_manager, tokens, user, "a")
    await _issue(db_manager, tokens, user, "b")
    async with db_manager.unit_of_work() as db:
        revoked = await tokens.revoke_all(db, user.user_id, RevocationReason.LOGOUT_ALL)
    assert revoked == 2
    async with db_manager.unit_of_work() as db:
        assert await tokens.revoke_all(db, user.user_id, RevocationReason.LOGOUT_ALL) == 0


async def test_revoke_device_only_touches_that_device(db_manager, tokens, seeded, test_db):
    user = await make_user(test_db, seeded["roles"]["Owner"])
    await _issue(db_manager, tokens, user, "a")
    await _issue(db_manager, tokens, user, "b")
    async with db_manager.unit_of_work() as db:
        revoked = await tokens.revoke_device(db, user.user_id, "a", RevocationReason.ROTATED)
    assert revoked == 1
    async with db_manager.session() as db:
        rows = (await db.execute(
            select(Token).where(Token.user_id == user.user_id)
        )).scalars().all()
    state = {r.device_id: (r.is_active, r.revocation_reason) for r in rows}
    assert state == {"a": (False, "ROTATED"), "b": (True, None)}


# ─── One active token per device ────────────────────────────────

async def test_second_active_token_for_device_is_a_conflict(db_manager, tokens, seeded, test_db):
    user = await make_user(test_db, seeded["roles"]["Owner"])
    await _issue(db_manager, tokens, user, "phone")
    with pytest.raises(ConflictError):
        await _issue(db_manager, tokens, user, "phone")
    async with db_manager.session() as db:
        rows = (await db.execute(
            select(Token).where(Token.user_id == user.user_id)
        )).scalars().all()
    assert [(r.device_id, r.is_active) for r in rows] == [("phone", True)]


async def test_missing_device_id_is_stored_as_unknown(db_manager, tokens, seeded, test_db):
    user = await make_user(test_db, seeded["roles"]["Owner"])
    await _issue(db_manager, tokens, user)
    with pytest.raises(ConflictError):
        await _issue(db_manager, tokens, user)
    async with db_manager.unit_of_work() as db:
        revoked = await tokens.revoke_device(db, user.user_id, None, RevocationReason.ROTATED)
    assert revoked == 1
    async with db_manager.session() as db:
        [row] = (await db.execute(
            select(Token).where(Token.user_id == user.user_id)
        )).scalars().all()
    assert row.device_id == "unknown"
    assert row.revocation_reason == "ROTATED"
