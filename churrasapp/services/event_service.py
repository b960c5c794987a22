"""
Event operations: create, lookup, partial update, soft delete, listing
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic_core import PydanticCustomError
from sqlalchemy.orm import Session

from churrasapp.core.config import settings
from churrasapp.core.errors import DomainRuleViolation
from churrasapp.models import Event, EventItem, Guest
from churrasapp.models.event import new_public_id
from churrasapp.schemas.common import custom_error_to_failure, parse_or_fail
from churrasapp.schemas.event import EventCreate, EventUpdate
from churrasapp.schemas.fields import check_deadline_order, utcnow
from churrasapp.services.normalization import strip_protected

logger = logging.getLogger(__name__)

PROTECTED_FIELDS = {"id", "_id", "pk", "organizer_id", "organizerId", "created_at", "createdAt", "updated_at", "updatedAt"}


class EventService:
    """Persistence operations for events"""

    @staticmethod
    def create_event(db: Session, event_data: Union[EventCreate, Dict[str, Any]]) -> Event:
        """Validate and persist a new event. Raises ValidationFailed."""
        data = parse_or_fail(EventCreate, event_data)
        values = data.model_dump(include=set(EventCreate.model_fields))
        event = Event(id=new_public_id(), organizer_id=new_public_id(), **values)
        db.add(event)
        db.commit()
        db.refresh(event)
        if not settings.is_production:
            logger.info("Event saved: %s (%s)", event.name, event.id, extra={"event_id": event.id})
        return event

    @staticmethod
    def find_by_public_id(db: Session, public_id: str) -> Optional[Event]:
        return db.query(Event).filter(Event.id == public_id).first()

    @staticmethod
    def update_by_public_id(db: Session, public_id: str, update_data: Dict[str, Any]) -> Optional[Event]:
        """Apply a partial update; protected fields are silently dropped."""
        event = EventService.find_by_public_id(db, public_id)
        if not event:
            return None

        changes = parse_or_fail(EventUpdate, strip_protected(update_data, PROTECTED_FIELDS))
        changes = changes.model_dump(exclude_unset=True)
        try:
            check_deadline_order(
                changes.get("date", event.date),
                changes.get("confirmation_deadline", event.confirmation_deadline),
            )
        except PydanticCustomError as e:
            raise custom_error_to_failure(e) from e

        for field, value in changes.items():
            setattr(event, field, value)
        event.updated_at = utcnow()
        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def delete_by_public_id(db: Session, public_id: str) -> Optional[Event]:
        """Soft delete: the event is cancelled, never removed. Repeat calls are harmless."""
        event = EventService.find_by_public_id(db, public_id)
        if not event:
            return None
        if event.status != "cancelled":
            event.status = "cancelled"
            event.updated_at = utcnow()
            db.commit()
            db.refresh(event)
            logger.info("Event cancelled: %s", event.id, extra={"event_id": event.id})
        return event

    @staticmethod
    def list_events(
        db: Session,
        status: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Event], int]:
        """Newest first; returns the page and the total matching count"""
        query = db.query(Event)
        if status:
            query = query.filter(Event.status == status.strip().lower())
        total = query.count()
        events = query.order_by(Event.created_at.desc(), Event.pk.desc()).offset(offset).limit(limit).all()
        return events, total

    @staticmethod
    def find_with_relations(db: Session, public_id: str) -> Optional[Dict[str, Any]]:
        """Event plus its guests, items and their statistics"""
        from churrasapp.services.guest_service import GuestService
        from churrasapp.services.item_service import ItemService

        event = EventService.find_by_public_id(db, public_id)
        if not event:
            return None

        guests = db.query(Guest).filter(Guest.event_id == public_id).order_by(Guest.created_at.desc()).all()
        items = (
            db.query(EventItem)
            .filter(EventItem.event_id == public_id)
            .order_by(EventItem.category, EventItem.name)
            .all()
        )
        return {
            "event": event,
            "guests": guests,
            "items": items,
            "guest_count": len(guests),
            "confirmed_guest_count": sum(1 for g in guests if g.rsvp_status == "yes"),
            "guest_stats": GuestService.get_event_stats(db, public_id),
            "item_stats": ItemService.get_event_stats(db, public_id),
        }

    @staticmethod
    def require_open_event(db: Session, public_id: str) -> Event:
        """Parent check run before a guest or item is saved under an event"""
        event = EventService.find_by_public_id(db, public_id)
        if not event:
            raise DomainRuleViolation("eventId", "Evento não encontrado")
        if event.status == "cancelled":
            raise DomainRuleViolation("eventId", "Evento cancelado não pode ser alterado")
        return event
