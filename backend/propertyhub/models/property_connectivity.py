"""PropertyConnectivity ORM — nearby transit / landmark entries for a property.

Invariants:
    - connectivity_type is always non-empty (validated before insert)
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Integer, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from propertyhub.db.base import Base


class PropertyConnectivity(Base):
    __tablename__ = "property_connectivity"

    connectivity_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    property_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("properties.property_id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    connectivity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    distance_km: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
