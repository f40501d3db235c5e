"""PropertyCertification ORM — one row per (property, certification type)."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from propertyhub.db.base import Base


class PropertyCertification(Base):
    __tablename__ = "property_certifications"

    property_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("properties.property_id", ondelete="CASCADE"),
        primary_key=True,
    )
    certification_type: Mapped[str] = mapped_column(
        String(50), primary_key=True,
    )
    certification_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
