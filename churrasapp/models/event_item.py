"""
EventItem model - a shopping-list entry, or a reusable template when is_template is set
"""

from sqlalchemy import Boolean, Column, DateTime, Float, Index, Integer, String

from churrasapp.core.db import Base
from churrasapp.models.event import new_public_id
from churrasapp.schemas.fields import utcnow


class EventItem(Base):
    __tablename__ = "event_items"

    pk = Column(Integer, primary_key=True)
    id = Column(String(36), unique=True, nullable=False, index=True, default=new_public_id)
    event_id = Column(String(36), nullable=True, index=True)
    name = Column(String(100), nullable=False)
    category = Column(String(20), nullable=False, index=True)
    quantity = Column(Float, nullable=False)
    unit = Column(String(10), nullable=False)
    estimated_cost = Column(Float, nullable=False)
    actual_cost = Column(Float, nullable=True)
    assigned_to = Column(String(100), nullable=True)
    is_purchased = Column(Boolean, nullable=False, default=False)
    is_template = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_event_items_event_category", "event_id", "category"),
        Index("ix_event_items_event_purchased", "event_id", "is_purchased"),
    )

    @property
    def cost_difference(self):
        if self.actual_cost is None:
            return None
        return self.actual_cost - self.estimated_cost

    @property
    def is_over_budget(self) -> bool:
        if self.actual_cost is None:
            return False
        return self.actual_cost > self.estimated_cost

    @property
    def total_estimated_cost(self) -> float:
        return self.quantity * self.estimated_cost

    @property
    def total_actual_cost(self):
        if self.actual_cost is None:
            return None
        return self.quantity * self.actual_cost

    @property
    def purchase_status(self) -> str:
        if self.is_purchased:
            return "purchased"
        if self.assigned_to:
            return "assigned"
        return "pending"

    def __repr__(self):
        return f"<EventItem {self.id} {self.name!r} category={self.category}>"
