from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String

from app.database import Base
from app.utils.dates import now


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("event_start_datetime < event_end_datetime", name="ck_events_period"),
        CheckConstraint("capacity >= 1", name="ck_events_capacity"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(String(500), nullable=True)
    event_start_datetime = Column(DateTime(timezone=True), nullable=False)
    event_end_datetime = Column(DateTime(timezone=True), nullable=False)
    capacity = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=now, onupdate=now)
