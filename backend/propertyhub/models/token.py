"""Token ORM — persisted refresh-token credential.

Invariants:
    - refresh_token is unique
    - is_active moves True → False exactly once and never back
    - At most one active row per (user_id, device_id): partial unique index
    - Expiry is derived from expires_at at verification time, never stored as a flag

Design Decisions:
    - Partial unique index declared for both postgresql and sqlite so the
      constraint is exercised by the test database too
    - device_id is never NULL: a login without one is stored as "unknown",
      so the index covers every row (NULLs would never collide)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Boolean, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from propertyhub.db.base import Base


class Token(Base):
    __tablename__ = "tokens"
    __table_args__ = (
        Index(
            "uq_tokens_active_user_device",
            "user_id", "device_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    token_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    refresh_token: Mapped[str] = mapped_column(
        String(1000), nullable=False, unique=True,
    )
    device_id: Mapped[str] = mapped_column(
        String(255), nullable=False, server_default="unknown",
    )
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(50), nullable=True)
    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    last_used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    revocation_reason: Mapped[str | None] = mapped_column(
        String(100), nullable=True,
    )
