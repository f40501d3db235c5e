"""Amenity ORM — reference catalog of listing amenities."""

from datetime import datetime, timezone

from sqlalchemy import String, Boolean, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from propertyhub.db.base import Base


class Amenity(Base):
    __tablename__ = "amenities"

    amenity_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    amenity_name: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True,
    )
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
