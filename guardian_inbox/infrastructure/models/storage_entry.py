"""SQLAlchemy model for per-user key/value storage."""

from sqlalchemy import Column, DateTime, Integer, String, Text, UniqueConstraint

from guardian_inbox.infrastructure.database import Base


class StorageEntryModel(Base):
    """Serialized value stored under ``key`` for a single user."""

    __tablename__ = "storage_entry"
    __table_args__ = (UniqueConstraint("owner_id", "key", name="uq_storage_entry_owner_key"),)

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(128), nullable=False, index=True)
    key = Column(String(120), nullable=False)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(), nullable=False)


__all__ = ["StorageEntryModel"]
