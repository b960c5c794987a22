"""
Database models package
"""

from .event import Event
from .guest import Guest
from .event_item import EventItem

__all__ = ["Event", "Guest", "EventItem"]
