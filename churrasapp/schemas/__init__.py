"""
Pydantic schemas package
"""

from .common import Envelope, parse_or_fail
from .event import EventCreate, EventCreateRequest, EventUpdate, EventResponse
from .guest import GuestCreate, GuestUpdate, GuestResponse
from .event_item import EventItemCreate, EventItemUpdate, EventItemResponse

__all__ = [
    "Envelope",
    "parse_or_fail",
    "EventCreate",
    "EventCreateRequest",
    "EventUpdate",
    "EventResponse",
    "GuestCreate",
    "GuestUpdate",
    "GuestResponse",
    "EventItemCreate",
    "EventItemUpdate",
    "EventItemResponse",
]
