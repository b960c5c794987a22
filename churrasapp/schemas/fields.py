"""
Field rules shared by every layer.

Request bodies, the service layer, the web form and the API client all
build their models from these annotated types, so a rule is declared in
exactly one place. Strings are trimmed and enum-like values lower-cased
before length/enum checks run.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Optional

from pydantic import AfterValidator, BeforeValidator, Field, PlainSerializer, StringConstraints
from pydantic_core import PydanticCustomError

UUID4_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-4[0-9a-fA-F]{3}-[89abAB][0-9a-fA-F]{3}-[0-9a-fA-F]{12}$"
# Brazilian phone numbers: optional +55, optional area code, 8 or 9 digits
PHONE_PATTERN = r"^(\+55\s?)?(\(?\d{2}\)?\s?)?\d{4,5}-?\d{4}$"

EVENT_STATUSES = ("draft", "active", "completed", "cancelled")
RSVP_STATUSES = ("pending", "yes", "no", "maybe")
PAYMENT_STATUSES = ("pending", "paid")
PAYMENT_METHODS = ("pix", "cash", "transfer")
ITEM_CATEGORIES = ("meat", "drinks", "charcoal", "sides", "extras")
ITEM_UNITS = ("kg", "unit", "liter", "pack")


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the storage representation)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _lower(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _date_only(value: Any) -> Any:
    # HTML date inputs send YYYY-MM-DD
    if isinstance(value, str) and len(value.strip()) == 10:
        return value.strip() + "T00:00:00"
    return value


def _future_event_date(value: datetime) -> datetime:
    if value <= utcnow():
        raise PydanticCustomError("future_date", "Data do evento deve ser no futuro")
    return value


def _future_deadline(value: datetime) -> datetime:
    if value <= utcnow():
        raise PydanticCustomError("future_date", "Deadline de confirmação deve ser no futuro")
    return value


def _not_in_future(value: datetime) -> datetime:
    if value > utcnow():
        raise PydanticCustomError("past_date", "Data de confirmação não pode ser no futuro")
    return value


def check_deadline_order(date: Optional[datetime], deadline: Optional[datetime]) -> None:
    """The confirmation deadline must come strictly before the event."""
    if date is not None and deadline is not None and deadline >= date:
        raise PydanticCustomError(
            "deadline_order",
            "Deadline de confirmação deve ser antes da data do evento",
            {"field": "confirmationDeadline"},
        )


def check_payment(payment_status: Optional[str], payment_method: Optional[str]) -> None:
    if payment_status == "paid" and not payment_method:
        raise PydanticCustomError(
            "payment_method_required",
            "Método de pagamento é obrigatório quando o pagamento está confirmado",
            {"field": "paymentMethod"},
        )


def check_item_binding(is_template: bool, event_id: Optional[str]) -> None:
    """An item is either bound to an event or a template, never both."""
    if is_template and event_id:
        raise PydanticCustomError(
            "template_bound",
            "Template não pode estar vinculado a um evento",
            {"field": "eventId"},
        )
    if not is_template and not event_id:
        raise PydanticCustomError("event_required", "ID do evento é obrigatório", {"field": "eventId"})


# -------- Strings --------

EventName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=100)]
Location = Annotated[str, StringConstraints(strip_whitespace=True, min_length=5, max_length=200)]
PersonName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
ItemName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
Assignee = Annotated[
    Optional[Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]],
    BeforeValidator(_blank_to_none),
]
Phone = Annotated[
    Optional[Annotated[str, StringConstraints(strip_whitespace=True, max_length=20, pattern=PHONE_PATTERN)]],
    BeforeValidator(_blank_to_none),
]
EventRef = Annotated[str, StringConstraints(strip_whitespace=True, pattern=UUID4_PATTERN)]

# -------- Enums --------

EventStatus = Annotated[Literal["draft", "active", "completed", "cancelled"], BeforeValidator(_lower)]
RsvpStatus = Annotated[Literal["pending", "yes", "no", "maybe"], BeforeValidator(_lower)]
PaymentStatus = Annotated[Literal["pending", "paid"], BeforeValidator(_lower)]
PaymentMethod = Annotated[
    Optional[Literal["pix", "cash", "transfer"]],
    BeforeValidator(_lower),
    BeforeValidator(_blank_to_none),
]
Category = Annotated[Literal["meat", "drinks", "charcoal", "sides", "extras"], BeforeValidator(_lower)]
Unit = Annotated[Literal["kg", "unit", "liter", "pack"], BeforeValidator(_lower)]

# -------- Numbers --------

Participants = Annotated[int, Field(ge=1, le=50)]
Quantity = Annotated[float, Field(ge=0, allow_inf_nan=False)]
Money = Annotated[float, Field(ge=0, allow_inf_nan=False)]

# -------- Dates --------

EventDate = Annotated[
    datetime,
    BeforeValidator(_date_only),
    AfterValidator(to_naive_utc),
    AfterValidator(_future_event_date),
]
Deadline = Annotated[
    Optional[
        Annotated[
            datetime,
            BeforeValidator(_date_only),
            AfterValidator(to_naive_utc),
            AfterValidator(_future_deadline),
        ]
    ],
    BeforeValidator(_blank_to_none),
]
ConfirmedAt = Annotated[
    Optional[Annotated[datetime, AfterValidator(to_naive_utc), AfterValidator(_not_in_future)]],
    BeforeValidator(_blank_to_none),
]

# Naive UTC in storage, explicit UTC offset on the wire
UtcDatetime = Annotated[
    datetime,
    PlainSerializer(lambda v: v.replace(tzinfo=timezone.utc).isoformat(), when_used="json"),
]
