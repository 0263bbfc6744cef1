"""Database schema for the local document mirror.

A single table holds documents from every collection. The unique
constraint keeps one row per (collection, doc_id), matching document
store semantics where ids are unique within a collection.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class StoredDocument(Base):
    """A JSON document mirrored from the production store.

    Invariant: UNIQUE(collection, doc_id)
    """

    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    doc_id: Mapped[str] = mapped_column(String(256), nullable=False)
    data_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (UniqueConstraint("collection", "doc_id", name="uq_collection_doc_id"),)
