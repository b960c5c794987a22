"""
Event-related Pydantic schemas
"""

from typing import Any, Dict, List, Optional

from pydantic import model_validator

from churrasapp.schemas.common import CamelModel, ResponseModel
from churrasapp.schemas.fields import (
    Deadline,
    EventDate,
    EventName,
    EventStatus,
    Location,
    Participants,
    UtcDatetime,
    check_deadline_order,
)


class EventCreate(CamelModel):
    """Schema for creating an event"""
    name: EventName
    date: EventDate
    location: Location
    estimated_participants: Participants
    confirmation_deadline: Deadline = None
    status: EventStatus = "draft"

    @model_validator(mode="after")
    def _deadline_before_event(self):
        check_deadline_order(self.date, self.confirmation_deadline)
        return self


class EventCreateRequest(EventCreate):
    """POST /api/events body: an event plus an optional starter shopping list"""
    items: Optional[List[Dict[str, Any]]] = None


class EventUpdate(CamelModel):
    """Partial update. Unset fields are left untouched; explicit nulls are
    only accepted for the confirmation deadline."""
    name: EventName = None
    date: EventDate = None
    location: Location = None
    estimated_participants: Participants = None
    confirmation_deadline: Deadline = None
    status: EventStatus = None


class EventResponse(ResponseModel):
    """Event as returned by the API"""
    id: str
    name: str
    date: UtcDatetime
    location: str
    organizer_id: str
    status: str
    confirmation_deadline: Optional[UtcDatetime] = None
    estimated_participants: int
    days_until_event: Optional[int] = None
    is_confirmation_open: bool
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None
