"""
Guest operations: invitations, RSVP, payment and per-event statistics
"""

import logging
from typing import Any, Dict, List, Optional, Union

from pydantic_core import PydanticCustomError
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from churrasapp.core.config import settings
from churrasapp.models import Guest
from churrasapp.models.event import new_public_id
from churrasapp.schemas.common import custom_error_to_failure, parse_or_fail
from churrasapp.schemas.fields import check_payment, utcnow
from churrasapp.schemas.guest import GuestCreate, GuestUpdate
from churrasapp.services.event_service import EventService
from churrasapp.services.normalization import normalize_guest, strip_protected

logger = logging.getLogger(__name__)

PROTECTED_FIELDS = {
    "id", "_id", "pk", "event_id", "eventId", "created_at", "createdAt", "updated_at", "updatedAt",
}
GUEST_FIELDS = ("name", "phone", "rsvp_status", "payment_status", "payment_method", "confirmed_at")


def _snapshot(guest: Guest) -> Dict[str, Any]:
    return {field: getattr(guest, field) for field in GUEST_FIELDS}


def _check_payment(values: Dict[str, Any]) -> None:
    try:
        check_payment(values.get("payment_status"), values.get("payment_method"))
    except PydanticCustomError as e:
        raise custom_error_to_failure(e) from e


class GuestService:
    """Persistence operations for guests"""

    @staticmethod
    def create_guest(db: Session, guest_data: Union[GuestCreate, Dict[str, Any]]) -> Guest:
        """Validate, check the parent event and persist. Raises ValidationFailed."""
        data = parse_or_fail(GuestCreate, guest_data)
        EventService.require_open_event(db, data.event_id)

        values = normalize_guest(data.model_dump())
        guest = Guest(id=new_public_id(), **values)
        db.add(guest)
        db.commit()
        db.refresh(guest)
        if not settings.is_production:
            logger.info(
                "Guest saved: %s (%s) - rsvp: %s", guest.name, guest.id, guest.rsvp_status,
                extra={"guest_id": guest.id, "event_id": guest.event_id},
            )
        return guest

    @staticmethod
    def find_by_public_id(db: Session, public_id: str) -> Optional[Guest]:
        return db.query(Guest).filter(Guest.id == public_id).first()

    @staticmethod
    def find_by_event_id(
        db: Session,
        event_id: str,
        rsvp_status: Optional[str] = None,
        payment_status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Guest]:
        """Guests of an event, newest first"""
        query = db.query(Guest).filter(Guest.event_id == event_id)
        if rsvp_status:
            query = query.filter(Guest.rsvp_status == rsvp_status.strip().lower())
        if payment_status:
            query = query.filter(Guest.payment_status == payment_status.strip().lower())
        query = query.order_by(Guest.created_at.desc(), Guest.pk.desc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def _save(db: Session, guest: Guest, values: Dict[str, Any]) -> Guest:
        _check_payment(values)
        for field, value in normalize_guest(values).items():
            setattr(guest, field, value)
        guest.updated_at = utcnow()
        db.commit()
        db.refresh(guest)
        return guest

    @staticmethod
    def update_by_public_id(db: Session, public_id: str, update_data: Dict[str, Any]) -> Optional[Guest]:
        """Partial update; the guest id and its event cannot be changed."""
        guest = GuestService.find_by_public_id(db, public_id)
        if not guest:
            return None
        changes = parse_or_fail(GuestUpdate, strip_protected(update_data, PROTECTED_FIELDS))
        return GuestService._save(db, guest, {**_snapshot(guest), **changes.model_dump(exclude_unset=True)})

    @staticmethod
    def update_rsvp(db: Session, public_id: str, status: str) -> Optional[Guest]:
        """Record an RSVP; answering "yes" stamps a fresh confirmation time."""
        guest = GuestService.find_by_public_id(db, public_id)
        if not guest:
            return None
        changes = parse_or_fail(GuestUpdate, {"rsvp_status": status})
        values = {**_snapshot(guest), "rsvp_status": changes.rsvp_status}
        if changes.rsvp_status == "yes":
            values["confirmed_at"] = utcnow()
        return GuestService._save(db, guest, values)

    @staticmethod
    def confirm_attendance(db: Session, public_id: str) -> Optional[Guest]:
        return GuestService.update_rsvp(db, public_id, "yes")

    @staticmethod
    def mark_as_paid(db: Session, public_id: str, method: Optional[str] = None) -> Optional[Guest]:
        """Mark the guest as paid. Without ``method`` the stored one must exist."""
        guest = GuestService.find_by_public_id(db, public_id)
        if not guest:
            return None
        values = {**_snapshot(guest), "payment_status": "paid"}
        if method is not None:
            values["payment_method"] = parse_or_fail(GuestUpdate, {"payment_method": method}).payment_method
        return GuestService._save(db, guest, values)

    @staticmethod
    def delete_by_public_id(db: Session, public_id: str) -> Optional[Guest]:
        """Hard delete; returns the removed guest"""
        guest = GuestService.find_by_public_id(db, public_id)
        if not guest:
            return None
        db.delete(guest)
        db.commit()
        logger.info("Guest removed: %s", public_id, extra={"guest_id": public_id})
        return guest

    @staticmethod
    def get_event_stats(db: Session, event_id: str) -> Dict[str, int]:
        """RSVP and payment counters for one event in a single query"""
        def count_where(condition):
            return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

        row = db.query(
            func.count(Guest.pk),
            count_where(Guest.rsvp_status == "yes"),
            count_where(Guest.rsvp_status == "no"),
            count_where(Guest.rsvp_status == "pending"),
            count_where(Guest.rsvp_status == "maybe"),
            count_where(Guest.payment_status == "paid"),
        ).filter(Guest.event_id == event_id).one()

        total, confirmed, declined, pending, maybe, paid = row
        return {
            "total": int(total),
            "confirmed": int(confirmed),
            "declined": int(declined),
            "pending": int(pending),
            "maybe": int(maybe),
            "paid": int(paid),
        }
