"""
Snippetbox: Snippet ORM Model
=============================

ORM mapping for the ``snippets`` table. Alembic's migration 001 creates the
same table; keep the two in sync.

Table design:
    - Integer id assigned by the store (autoincrement); never reused or changed.
    - ``created`` and ``expires`` are UTC and set together at insert time,
      so ``expires - created`` is exactly the chosen lifetime.
    - Rows are never updated. Expired rows simply stop matching queries.

Index on ``created``:
    The home page lists the newest snippets first, so ``created`` is indexed.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from snippetbox.database import Base

TITLE_MAX_LENGTH = 100
# Largest value a 32-bit INTEGER id column holds.
MAX_SNIPPET_ID = 2**31 - 1


class Snippet(Base):
    __tablename__ = "snippets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("idx_snippets_created", "created"),)

    def __repr__(self) -> str:
        return f"<Snippet(id={self.id}, title={self.title!r}, expires='{self.expires}')>"
