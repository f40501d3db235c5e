"""Token Manager — issue, verify, revoke access and refresh tokens.

Invariants:
    - Access tokens are stateless JWTs carrying {subjectId, role, iat, exp}
    - Refresh tokens are JWTs signed with a separate secret AND persisted as a row
    - verify_refresh_token checks storage first (missing / inactive / past expires_at),
      then the signature; a naturally expired row with is_active=True is still rejected
    - Revocation only ever flips is_active True → False; repeated calls return 0
    - Row-level operations run inside the caller's session (caller owns the unit of work)

Design Decisions:
    - python-jose for signing: HS256 with secrets from Settings
    - jti on refresh tokens: two tokens minted in the same second stay distinct,
      which the unique refresh_token column requires
    - Verification returns a TokenVerification value instead of raising; callers
      decide whether a failure is 401 or just "not logged in"
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from jose import jwt, JWTError, ExpiredSignatureError
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.config import Settings
from propertyhub.core.domain_types import (
    UNKNOWN_DEVICE_ID, DeviceContext, RevocationReason,
)
from propertyhub.core.expiry import calculate_expiry_date, is_expired
from propertyhub.models.token import Token

logger = logging.getLogger(__name__)

REASON_NOT_FOUND = "Token not found or revoked"
REASON_REFRESH_EXPIRED = "Refresh token expired"
REASON_INVALID_SIGNATURE = "Invalid token signature"
REASON_ACCESS_EXPIRED = "Access token expired"
REASON_INVALID_ACCESS = "Invalid access token"

_REFRESH_TYPE = "refresh"


@dataclass
class TokenVerification:
    """Outcome of verifying an access or refresh token."""
    valid: bool
    claims: dict[str, Any] = field(default_factory=dict)
    record: Token | None = None
    reason: str | None = None
    expired: bool = False


class TokenManager:
    """Signs and checks credentials; persists refresh tokens through the caller's session."""

    def __init__(self, settings: Settings):
        self.settings = settings

    # ─── Access tokens ──────────────────────────────────────────

    def issue_access_token(
        self, user_id: UUID, role: str | None, now: datetime | None = None,
    ) -> str:
        issued = now or datetime.now(timezone.utc)
        expires = calculate_expiry_date(self.settings.access_token_expiry, issued)
        claims = {
            "subjectId": str(user_id),
            "role": role,
            "iat": int(issued.timestamp()),
            "exp": int(expires.timestamp()),
        }
        return jwt.encode(
            claims, self.settings.jwt_access_secret,
            algorithm=self.settings.jwt_algorithm,
        )

    def verify_access_token(self, token: str) -> TokenVerification:
        """Signature + exp only. Never touches storage."""
        try:
            claims = jwt.decode(
                token, self.settings.jwt_access_secret,
                algorithms=[self.settings.jwt_algorithm],
            )
        except ExpiredSignatureError:
            return TokenVerification(
                valid=False, reason=REASON_ACCESS_EXPIRED, expired=True,
            )
        except JWTError:
            return TokenVerification(valid=False, reason=REASON_INVALID_ACCESS)
        if not claims.get("subjectId") or claims.get("typ") == _REFRESH_TYPE:
            return TokenVerification(valid=False, reason=REASON_INVALID_ACCESS)
        return TokenVerification(valid=True, claims=claims)

    # ─── Refresh tokens ─────────────────────────────────────────

    def sign_refresh_token(
        self, user_id: UUID, role: str | None, now: datetime | None = None,
    ) -> tuple[str, datetime]:
        """Return (signed token, expires_at). Raises ValidationError on a bad duration."""
        issued = now or datetime.now(timezone.utc)
        expires = calculate_expiry_date(self.settings.refresh_token_expiry, issued)
        claims = {
            "subjectId": str(user_id),
            "role": role,
            "typ": _REFRESH_TYPE,
            "jti": uuid.uuid4().hex,
            "iat": int(issued.timestamp()),
            "exp": int(expires.timestamp()),
        }
        signed = jwt.encode(
            claims, self.settings.jwt_refresh_secret,
            algorithm=self.settings.jwt_algorithm,
        )
        return signed, expires

    async def issue_refresh_token(
        self,
        db: AsyncSession,
        user_id: UUID,
        role: str | None,
        device: DeviceContext | None = None,
        now: datetime | None = None,
    ) -> Token:
        """Sign a refresh token and add its row to the caller's session."""
        issued = now or datetime.now(timezone.utc)
        signed, expires = self.sign_refresh_token(user_id, role, issued)
        device = device or DeviceContext()
        record = Token(
            user_id=user_id,
            refresh_token=signed,
            device_id=device.token_device_id,
            user_agent=device.user_agent,
            ip_address=device.ip_address,
            issued_at=issued,
            expires_at=expires,
            is_active=True,
        )
        db.add(record)
        await db.flush()
        return record

    async def verify_refresh_token(
        self, db: AsyncSession, token: str, now: datetime | None = None,
    ) -> TokenVerification:
        """Storage check (exists, active, not past expires_at), then signature."""
        record = (await db.execute(
            select(Token).where(Token.refresh_token == token)
        )).scalar_one_or_none()
        if record is None or not record.is_active:
            return TokenVerification(valid=False, reason=REASON_NOT_FOUND)
        if is_expired(record.expires_at, now):
            return TokenVerification(
                valid=False, record=record,
                reason=REASON_REFRESH_EXPIRED, expired=True,
            )
        try:
            claims = jwt.decode(
                token, self.settings.jwt_refresh_secret,
                algorithms=[self.settings.jwt_algorithm],
            )
        except ExpiredSignatureError:
            return TokenVerification(
                valid=False, record=record,
                reason=REASON_REFRESH_EXPIRED, expired=True,
            )
        except JWTError:
            return TokenVerification(
                valid=False, record=record, reason=REASON_INVALID_SIGNATURE,
            )
        if claims.get("subjectId") != str(record.user_id):
            return TokenVerification(
                valid=False, record=record, reason=REASON_INVALID_SIGNATURE,
            )
        return TokenVerification(valid=True, claims=claims, record=record)

    # ─── Revocation ─────────────────────────────────────────────

    async def revoke(
        self, db: AsyncSession, token: str, reason: RevocationReason,
    ) -> int:
        result = await db.execute(
            update(Token)
            .where(Token.refresh_token == token, Token.is_active.is_(True))
            .values(is_active=False, revocation_reason=reason.value)
        )
        return result.rowcount or 0

    async def revoke_all(
        self, db: AsyncSession, user_id: UUID, reason: RevocationReason,
    ) -> int:
        result = await db.execute(
            update(Token)
            .where(Token.user_id == user_id, Token.is_active.is_(True))
            .values(is_active=False, revocation_reason=reason.value)
        )
        count = result.rowcount or 0
        if count:
            logger.info(
                f"Revoked {count} refresh token(s) ({reason.value})",
                extra={"user_id": str(user_id)},
            )
        return count

    async def revoke_device(
        self,
        db: AsyncSession,
        user_id: UUID,
        device_id: str | None,
        reason: RevocationReason,
    ) -> int:
        """Deactivate the active token(s) for one (user, device) pair."""
        result = await db.execute(
            update(Token)
            .where(
                Token.user_id == user_id,
                Token.device_id == (device_id or UNKNOWN_DEVICE_ID),
                Token.is_active.is_(True),
            )
            .values(is_active=False, revocation_reason=reason.value)
        )
        # Runs before the replacement row is flushed; the partial unique
        # index allows one active row per device.
        return result.rowcount or 0
