"""PropertyAmenity ORM — explicit join entity linking a property to an amenity.

Invariants:
    - (property_id, amenity_id) is the primary key: no duplicate links
    - The set of links is replaced wholesale on update, never merged
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from propertyhub.db.base import Base


class PropertyAmenity(Base):
    __tablename__ = "property_amenities"

    property_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("properties.property_id", ondelete="CASCADE"),
        primary_key=True,
    )
    amenity_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("amenities.amenity_id"), primary_key=True,
    )
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
