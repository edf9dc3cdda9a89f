"""SQLAlchemy model emulating key-value tables on a relational database."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, JSON, func

from .session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TableItem(Base):
    """One document of a logical table, addressed by (table_name, item_key)."""

    __tablename__ = "table_items"

    table_name = Column(String(255), primary_key=True)
    item_key = Column(String(255), primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    # stamped client-side: SQLite's CURRENT_TIMESTAMP only has second resolution
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
