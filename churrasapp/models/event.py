"""
Event model
"""

import math
import uuid

from sqlalchemy import Column, DateTime, Index, Integer, String

from churrasapp.core.db import Base
from churrasapp.schemas.fields import utcnow


def new_public_id() -> str:
    return str(uuid.uuid4())


class Event(Base):
    __tablename__ = "events"

    # pk never leaves the storage layer; id is the public UUID
    pk = Column(Integer, primary_key=True)
    id = Column(String(36), unique=True, nullable=False, index=True, default=new_public_id)
    name = Column(String(100), nullable=False)
    date = Column(DateTime, nullable=False)
    location = Column(String(200), nullable=False)
    organizer_id = Column(String(36), nullable=False, index=True, default=new_public_id)
    status = Column(String(20), nullable=False, default="draft")
    confirmation_deadline = Column(DateTime, nullable=True)
    estimated_participants = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_events_status_date", "status", "date"),
    )

    @property
    def days_until_event(self):
        if self.date is None:
            return None
        return math.ceil((self.date - utcnow()).total_seconds() / 86400)

    @property
    def is_confirmation_open(self) -> bool:
        if self.confirmation_deadline is None:
            return True
        return utcnow() < self.confirmation_deadline

    def can_be_edited(self) -> bool:
        return self.status == "draft" or (self.status == "active" and (self.days_until_event or 0) > 0)

    def can_be_cancelled(self) -> bool:
        return self.status in ("draft", "active") and (self.days_until_event or 0) > 0

    def __repr__(self):
        return f"<Event {self.id} {self.name!r} status={self.status}>"
