"""
Guest model
"""

from sqlalchemy import Column, DateTime, Index, Integer, String

from churrasapp.core.db import Base
from churrasapp.models.event import new_public_id
from churrasapp.schemas.fields import utcnow


class Guest(Base):
    __tablename__ = "guests"

    pk = Column(Integer, primary_key=True)
    id = Column(String(36), unique=True, nullable=False, index=True, default=new_public_id)
    # public id of the parent event, not a storage foreign key
    event_id = Column(String(36), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=True)
    rsvp_status = Column(String(10), nullable=False, default="pending", index=True)
    payment_status = Column(String(10), nullable=False, default="pending", index=True)
    payment_method = Column(String(10), nullable=True)
    confirmed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_guests_event_rsvp", "event_id", "rsvp_status"),
    )

    @property
    def is_confirmed(self) -> bool:
        return self.rsvp_status == "yes"

    @property
    def has_paid(self) -> bool:
        return self.payment_status == "paid"

    @property
    def days_since_confirmation(self):
        if self.confirmed_at is None:
            return None
        return int((utcnow() - self.confirmed_at).total_seconds() // 86400)

    def __repr__(self):
        return f"<Guest {self.id} {self.name!r} rsvp={self.rsvp_status}>"
