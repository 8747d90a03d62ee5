"""
SQLAlchemy ORM models for persistent storage.

Models mirror the catalog document and the pending ledger rows.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CatalogDocumentDB(Base):
    """
    The last catalog document loaded from the desktop export.

    Stored verbatim so it can be re-parsed on the next start.
    """

    __tablename__ = "catalog_documents"

    key: Mapped[str] = mapped_column(String(32), primary_key=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON)
    stored_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<CatalogDocumentDB(key={self.key})>"


class PendingEntryDB(Base):
    """
    One staged card addition.

    AUTOINCREMENT on SQLite so deleted ids are never handed out again.
    """

    __tablename__ = "pending_entries"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    action: Mapped[str] = mapped_column(String(16), default="add")
    product: Mapped[str] = mapped_column(String(255))
    set_name: Mapped[str] = mapped_column(String(255))
    card_number: Mapped[str] = mapped_column(String(64))
    parallel: Mapped[str] = mapped_column(String(255))
    player: Mapped[str] = mapped_column(String(255), default="")
    team: Mapped[str] = mapped_column(String(255), default="")
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    serial_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    grade: Mapped[str | None] = mapped_column(String(64), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return (
            f"<PendingEntryDB(id={self.id}, card={self.set_name}#{self.card_number}, "
            f"parallel={self.parallel})>"
        )
