# catalyst/data/models/record.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from catalyst.data.database import Base


class KeyValueRecordModel(Base):
    """One JSON document per logical storage key."""

    __tablename__ = "kv_records"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    size = Column(Integer, nullable=False, default=0)  # utf-8 bytes of value
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
