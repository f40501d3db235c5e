"""User ORM — identity record for clients (Owner/Broker/Investor) and admin staff.

Invariants:
    - user_id is immutable UUID primary key
    - mobile_number is required and unique; email and rera_number unique when set
    - user_type is "client" or "admin"
    - Users are never hard-deleted; is_active=False is the soft delete

Design Decisions:
    - Role membership lives in user_roles (explicit join entity), no relationship()
      attribute: memberships are always read with explicit queries
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from propertyhub.db.base import Base


class User(Base):
    """Identity record shared by every component."""
    __tablename__ = "users"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    mobile_number: Mapped[str] = mapped_column(
        String(20), nullable=False, unique=True,
    )
    email: Mapped[str | None] = mapped_column(
        String(255), nullable=True, unique=True,
    )
    rera_number: Mapped[str | None] = mapped_column(
        String(50), nullable=True, unique=True,
    )
    user_type: Mapped[str] = mapped_column(String(20), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
