"""SQLAlchemy Declarative Base — shared base class for all ORM models.

Invariants:
    - All models inherit from Base
    - Base is the single source of truth for table metadata
    - to_dict() snapshots column values only, never relationships

Design Decisions:
    - Separate file for Base: avoids circular imports between models
    - Snapshot keyed by attribute name: audit rows and the update delta compare
      the same keys the allow-list uses
"""

from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all PropertyHub ORM models."""

    def to_dict(self) -> dict[str, Any]:
        """Column attribute → current value."""
        return {
            attr.key: getattr(self, attr.key)
            for attr in inspect(self).mapper.column_attrs
        }
