"""Role ORM — named capability bucket (static reference data).

Invariants:
    - role_name is unique
    - role_type is "client" or "admin"
    - Only roles with is_active=True contribute permissions
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, Boolean, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from propertyhub.db.base import Base


class Role(Base):
    __tablename__ = "roles"

    role_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    role_name: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True,
    )
    role_type: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
