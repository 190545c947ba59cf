from datetime import timezone

from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.types import TypeDecorator

from ..database import Base


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC datetimes on every backend.

    sqlite has no timezone support, so values are normalized to UTC before
    they are written and UTC is attached again when they are read back.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            value = value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Outage(Base):
    __tablename__ = "outages"

    id = Column(Integer, primary_key=True, index=True)
    start_time = Column(UTCDateTime, nullable=False, index=True)
    end_time = Column(UTCDateTime, nullable=True)  # NULL while the outage is ongoing
    duration_seconds = Column(Integer, nullable=True)  # set together with end_time
