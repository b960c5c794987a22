"""
Shopping-list operations: items, purchases, templates and cost statistics
"""

import logging
from typing import Any, Dict, List, Optional, Union

from pydantic_core import PydanticCustomError
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from churrasapp.core.config import settings
from churrasapp.core.errors import TemplateNotFound
from churrasapp.models import EventItem
from churrasapp.models.event import new_public_id
from churrasapp.schemas.common import custom_error_to_failure, parse_or_fail
from churrasapp.schemas.event_item import EventItemCreate, EventItemUpdate
from churrasapp.schemas.fields import check_item_binding, utcnow
from churrasapp.services.event_service import EventService
from churrasapp.services.normalization import normalize_item, strip_protected

logger = logging.getLogger(__name__)

PROTECTED_FIELDS = {
    "id", "_id", "pk", "event_id", "eventId", "created_at", "createdAt", "updated_at", "updatedAt",
}
ITEM_FIELDS = (
    "name", "category", "quantity", "unit", "estimated_cost", "actual_cost",
    "assigned_to", "is_purchased", "is_template",
)
# what a template carries over to a concrete item and back
TEMPLATE_FIELDS = ("name", "category", "quantity", "unit", "estimated_cost")
EVENT_SPECIFIC_FIELDS = {
    "event_id", "eventId", "actual_cost", "actualCost", "assigned_to", "assignedTo",
    "is_purchased", "isPurchased", "is_template", "isTemplate",
}


def _snapshot(item: EventItem) -> Dict[str, Any]:
    return {field: getattr(item, field) for field in ITEM_FIELDS}


class ItemService:
    """Persistence operations for event items and templates"""

    @staticmethod
    def create_item(db: Session, item_data: Union[EventItemCreate, Dict[str, Any]]) -> EventItem:
        """Validate and persist an item or template. Raises ValidationFailed."""
        data = parse_or_fail(EventItemCreate, item_data)
        if data.event_id:
            EventService.require_open_event(db, data.event_id)

        item = EventItem(id=new_public_id(), **normalize_item(data.model_dump()))
        db.add(item)
        db.commit()
        db.refresh(item)
        if not settings.is_production:
            logger.info(
                "Item saved: %s (%s) - category: %s", item.name, item.id, item.category,
                extra={"item_id": item.id, "event_id": item.event_id},
            )
        return item

    @staticmethod
    def find_by_public_id(db: Session, public_id: str) -> Optional[EventItem]:
        return db.query(EventItem).filter(EventItem.id == public_id).first()

    @staticmethod
    def find_by_event_id(
        db: Session,
        event_id: str,
        category: Optional[str] = None,
        is_purchased: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[EventItem]:
        """Items of an event ordered by category then name"""
        query = db.query(EventItem).filter(EventItem.event_id == event_id)
        if category:
            query = query.filter(EventItem.category == category.strip().lower())
        if is_purchased is not None:
            query = query.filter(EventItem.is_purchased.is_(is_purchased))
        query = query.order_by(EventItem.category, EventItem.name).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def find_templates(db: Session) -> List[EventItem]:
        return (
            db.query(EventItem)
            .filter(EventItem.is_template.is_(True))
            .order_by(EventItem.category, EventItem.name)
            .all()
        )

    @staticmethod
    def _save(db: Session, item: EventItem, values: Dict[str, Any]) -> EventItem:
        try:
            check_item_binding(values.get("is_template", False), item.event_id)
        except PydanticCustomError as e:
            raise custom_error_to_failure(e) from e
        for field, value in normalize_item(values).items():
            setattr(item, field, value)
        item.updated_at = utcnow()
        db.commit()
        db.refresh(item)
        return item

    @staticmethod
    def update_by_public_id(db: Session, public_id: str, update_data: Dict[str, Any]) -> Optional[EventItem]:
        """Partial update; the item id and its event cannot be changed."""
        item = ItemService.find_by_public_id(db, public_id)
        if not item:
            return None
        changes = parse_or_fail(EventItemUpdate, strip_protected(update_data, PROTECTED_FIELDS))
        return ItemService._save(db, item, {**_snapshot(item), **changes.model_dump(exclude_unset=True)})

    @staticmethod
    def mark_as_purchased(db: Session, public_id: str, actual_cost: Optional[float] = None) -> Optional[EventItem]:
        """Without ``actual_cost`` the stored one is kept, falling back to the estimate."""
        item = ItemService.find_by_public_id(db, public_id)
        if not item:
            return None
        changes: Dict[str, Any] = {"is_purchased": True}
        if actual_cost is not None:
            changes["actual_cost"] = actual_cost
        changes = parse_or_fail(EventItemUpdate, changes).model_dump(exclude_unset=True)
        return ItemService._save(db, item, {**_snapshot(item), **changes})

    @staticmethod
    def assign_to(db: Session, public_id: str, assigned_to: Optional[str]) -> Optional[EventItem]:
        item = ItemService.find_by_public_id(db, public_id)
        if not item:
            return None
        changes = parse_or_fail(EventItemUpdate, {"assigned_to": assigned_to})
        return ItemService._save(db, item, {**_snapshot(item), "assigned_to": changes.assigned_to})

    @staticmethod
    def delete_by_public_id(db: Session, public_id: str) -> Optional[EventItem]:
        """Hard delete; returns the removed item"""
        item = ItemService.find_by_public_id(db, public_id)
        if not item:
            return None
        db.delete(item)
        db.commit()
        logger.info("Item removed: %s", public_id, extra={"item_id": public_id})
        return item

    @staticmethod
    def create_from_template(
        db: Session,
        template_id: str,
        event_id: str,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> EventItem:
        """Copy a template into a new, unpurchased and unassigned item of ``event_id``"""
        template = ItemService.find_by_public_id(db, template_id)
        if not template or not template.is_template:
            raise TemplateNotFound(template_id)

        overrides = strip_protected(overrides or {}, PROTECTED_FIELDS | EVENT_SPECIFIC_FIELDS)
        item_data = {field: getattr(template, field) for field in TEMPLATE_FIELDS}
        item_data.update(overrides)
        item_data.update(event_id=event_id, is_template=False, is_purchased=False, actual_cost=None, assigned_to=None)
        return ItemService.create_item(db, item_data)

    @staticmethod
    def convert_to_template(db: Session, public_id: str) -> Optional[EventItem]:
        """Snapshot an item into a new template, dropping everything event-specific"""
        item = ItemService.find_by_public_id(db, public_id)
        if not item:
            return None
        template_data = {field: getattr(item, field) for field in TEMPLATE_FIELDS}
        template_data.update(event_id=None, is_template=True, is_purchased=False, actual_cost=None, assigned_to=None)
        return ItemService.create_item(db, template_data)

    @staticmethod
    def get_event_stats(db: Session, event_id: str) -> Dict[str, Any]:
        """Totals and a per-category cost breakdown for one event.

        A single grouped query; the per-category rows are rolled up into
        the event totals here.
        """
        estimated = EventItem.quantity * EventItem.estimated_cost
        actual = EventItem.quantity * func.coalesce(EventItem.actual_cost, 0)
        rows = (
            db.query(
                EventItem.category,
                func.count(EventItem.pk),
                func.sum(case((EventItem.is_purchased.is_(True), 1), else_=0)),
                func.sum(case((EventItem.assigned_to.isnot(None), 1), else_=0)),
                func.sum(estimated),
                func.sum(actual),
            )
            .filter(EventItem.event_id == event_id)
            .group_by(EventItem.category)
            .all()
        )

        stats: Dict[str, Any] = {
            "total_items": 0,
            "purchased_items": 0,
            "assigned_items": 0,
            "total_estimated_cost": 0.0,
            "total_actual_cost": 0.0,
            "categories_breakdown": {},
        }
        for category, count, purchased, assigned, estimated_sum, actual_sum in rows:
            stats["total_items"] += int(count)
            stats["purchased_items"] += int(purchased or 0)
            stats["assigned_items"] += int(assigned or 0)
            stats["total_estimated_cost"] += float(estimated_sum or 0)
            stats["total_actual_cost"] += float(actual_sum or 0)
            stats["categories_breakdown"][category] = {
                "estimated_cost": float(estimated_sum or 0),
                "actual_cost": float(actual_sum or 0),
            }
        return stats
