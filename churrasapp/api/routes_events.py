"""
Event API routes - /api/events
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from churrasapp.core.db import get_db
from churrasapp.core.errors import ValidationFailed
from churrasapp.schemas.event import EventCreateRequest, EventResponse
from churrasapp.schemas.event_item import EventItemResponse
from churrasapp.schemas.guest import GuestResponse
from churrasapp.services.event_service import EventService
from churrasapp.services.item_service import ItemService
from churrasapp.services.normalization import strip_protected
from churrasapp.utils.responses import internal_error, not_found_error, success_response, validation_error

logger = logging.getLogger(__name__)

router = APIRouter()

# starter items always belong to the event being created
BINDING_FIELDS = {"event_id", "eventId", "is_template", "isTemplate"}


def _camelize(value: Any) -> Any:
    if isinstance(value, dict):
        return {to_camel(key): _camelize(item) for key, item in value.items()}
    return value


def _breakdown(stats: Dict[str, Any]) -> Dict[str, Any]:
    # category names are data, not field names
    breakdown = {category: _camelize(costs) for category, costs in stats["categories_breakdown"].items()}
    return {**_camelize({k: v for k, v in stats.items() if k != "categories_breakdown"}), "categoriesBreakdown": breakdown}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(event_data: EventCreateRequest, db: Session = Depends(get_db)):
    """Create an event, plus its starter shopping list when items are sent"""
    try:
        event = EventService.create_event(db, event_data)
    except ValidationFailed as e:
        return validation_error(e)
    except Exception:
        logger.exception("Failed to create event")
        return internal_error("Erro interno do servidor ao criar evento")

    # the event stands even when a starter item fails
    items = []
    for item in event_data.items or []:
        try:
            item_data = strip_protected(item, BINDING_FIELDS)
            item_data.update(event_id=event.id, is_template=False)
            created = ItemService.create_item(db, item_data)
            items.append(EventItemResponse.model_validate(created).dump())
        except ValidationFailed as e:
            logger.warning("Skipped item for event %s: %s", event.id, e.errors, extra={"event_id": event.id})
        except Exception:
            db.rollback()
            logger.exception("Failed to create item for event %s", event.id, extra={"event_id": event.id})

    data = EventResponse.model_validate(event).dump()
    data["items"] = items
    return success_response(
        data,
        status_code=status.HTTP_201_CREATED,
        created=True,
        itemsCount=len(items),
    )


@router.get("")
async def list_events(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """List events, newest first"""
    try:
        events, total = EventService.list_events(db, status=status_filter, limit=limit, offset=offset)
    except Exception:
        logger.exception("Failed to list events")
        return internal_error("Erro interno do servidor ao listar eventos")

    return success_response(
        [EventResponse.model_validate(event).dump() for event in events],
        total=total,
        limit=limit,
        offset=offset,
        hasMore=offset + limit < total,
    )


@router.get("/{event_id}")
async def get_event(event_id: str, db: Session = Depends(get_db)):
    """Event with its guests, items and statistics"""
    try:
        result = EventService.find_with_relations(db, event_id)
    except Exception:
        logger.exception("Failed to fetch event %s", event_id)
        return internal_error("Erro interno do servidor ao buscar evento")

    if not result:
        return not_found_error(eventId=event_id)

    data = EventResponse.model_validate(result["event"]).dump()
    data.update(
        guests=[GuestResponse.model_validate(guest).dump() for guest in result["guests"]],
        items=[EventItemResponse.model_validate(item).dump() for item in result["items"]],
        guestCount=result["guest_count"],
        confirmedGuestCount=result["confirmed_guest_count"],
        stats={
            "guests": _camelize(result["guest_stats"]),
            "items": _breakdown(result["item_stats"]),
        },
    )
    return success_response(data, guestCount=result["guest_count"], itemCount=len(result["items"]))


@router.put("/{event_id}")
async def update_event(
    event_id: str,
    update_data: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
):
    """Partial update; id, organizer and timestamps cannot be changed"""
    try:
        event = EventService.update_by_public_id(db, event_id, update_data)
    except ValidationFailed as e:
        return validation_error(e)
    except Exception:
        logger.exception("Failed to update event %s", event_id)
        return internal_error("Erro interno do servidor ao atualizar evento")

    if not event:
        return not_found_error(eventId=event_id)
    return success_response(EventResponse.model_validate(event).dump(), updated=True)


@router.delete("/{event_id}")
async def delete_event(event_id: str, db: Session = Depends(get_db)):
    """Soft delete: the event is cancelled"""
    try:
        event = EventService.delete_by_public_id(db, event_id)
    except Exception:
        logger.exception("Failed to delete event %s", event_id)
        return internal_error("Erro interno do servidor ao deletar evento")

    if not event:
        return not_found_error(eventId=event_id)
    return success_response({"id": event.id, "status": event.status}, deleted=True)
