"""SQLAlchemy ORM model for rows of every mirrored collection."""

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tripstore.infrastructure.database.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CollectionRecordModel(Base):
    """ORM model — maps to the 'collection_records' table.

    One table holds every collection; ``data`` carries the record fields
    except ``id`` and the server-owned timestamps.
    """

    __tablename__ = "collection_records"

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection: Mapped[str] = mapped_column(String(100), nullable=False)
    id: Mapped[str] = mapped_column(String(255), nullable=False)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("collection", "id", name="uq_collection_records_collection_id"),
        Index("ix_collection_records_collection", "collection"),
    )

    def __repr__(self) -> str:
        return f"<CollectionRecordModel(collection='{self.collection}', id={self.id})>"
