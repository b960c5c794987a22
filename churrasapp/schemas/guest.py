"""
Guest-related Pydantic schemas
"""

from typing import Optional

from pydantic import model_validator

from churrasapp.schemas.common import CamelModel, ResponseModel
from churrasapp.schemas.fields import (
    ConfirmedAt,
    EventRef,
    PaymentMethod,
    PaymentStatus,
    PersonName,
    Phone,
    RsvpStatus,
    UtcDatetime,
    check_payment,
)


class GuestCreate(CamelModel):
    """Schema for creating a guest"""
    event_id: EventRef
    name: PersonName
    phone: Phone = None
    rsvp_status: RsvpStatus = "pending"
    payment_status: PaymentStatus = "pending"
    payment_method: PaymentMethod = None
    confirmed_at: ConfirmedAt = None

    @model_validator(mode="after")
    def _paid_requires_method(self):
        check_payment(self.payment_status, self.payment_method)
        return self


class GuestUpdate(CamelModel):
    """Schema for updating a guest"""
    name: PersonName = None
    phone: Phone = None
    rsvp_status: RsvpStatus = None
    payment_status: PaymentStatus = None
    payment_method: PaymentMethod = None
    confirmed_at: ConfirmedAt = None


class GuestResponse(ResponseModel):
    """Guest response schema"""
    id: str
    event_id: str
    name: str
    phone: Optional[str] = None
    rsvp_status: str
    payment_status: str
    payment_method: Optional[str] = None
    confirmed_at: Optional[UtcDatetime] = None
    is_confirmed: bool
    has_paid: bool
    days_since_confirmation: Optional[int] = None
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None
