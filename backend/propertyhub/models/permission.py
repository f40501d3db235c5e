"""Permission ORM — named atomic action, matched by exact code.

Invariants:
    - code is unique and case-sensitive
    - is_active exists for catalog maintenance only; authorization never filters on it
"""

from sqlalchemy import String, Text, Boolean, Integer
from sqlalchemy.orm import Mapped, mapped_column

from propertyhub.db.base import Base


class Permission(Base):
    __tablename__ = "permissions"

    permission_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    code: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
