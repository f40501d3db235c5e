"""AuditLog ORM — immutable, append-only record of every data mutation.

Invariants:
    - INSERT: old_value is NULL, new_value is the full new record
    - UPDATE: old_value / new_value hold only the changed keys
    - DELETE: old_value is the full record, new_value is NULL
    - Rows are never updated or deleted once written
    - Written in the same transaction as the mutation it describes

Design Decisions:
    - JSON columns: the shape is consumed by external reporting tools as-is
    - none_as_null on old_value / new_value: the absent side is SQL NULL,
      not the JSON literal null, so "old_value IS NULL" finds every INSERT
    - No FK on user_id / record_id: audit rows outlive any referential cleanup
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from propertyhub.db.base import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    audit_log_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    operation: Mapped[str] = mapped_column(String(20), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    record_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    old_value: Mapped[dict | None] = mapped_column(
        JSON(none_as_null=True), nullable=True,
    )
    new_value: Mapped[dict | None] = mapped_column(
        JSON(none_as_null=True), nullable=True,
    )
    table_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(50), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
