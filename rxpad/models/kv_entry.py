from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from rxpad.core.db import Base


class KeyValueEntry(Base):
    """One key of the local key-value store. Values are opaque serialized records."""

    __tablename__ = "kv_store"

    key = Column(String(255), primary_key=True, index=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
