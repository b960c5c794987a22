"""
Tests for guest RSVP, payment and statistics
"""

from datetime import timedelta

import pytest

from churrasapp.core.errors import DomainRuleViolation, ValidationFailed
from churrasapp.models import Guest
from churrasapp.schemas.fields import utcnow
from churrasapp.services.event_service import EventService
from churrasapp.services.guest_service import GuestService

UNKNOWN_ID = "5b6f7c1e-2b7a-4c55-9a3e-1f0c2d3e4f50"


@pytest.fixture
def guest(db_session, sample_event):
    return GuestService.create_guest(db_session, {"eventId": sample_event.id, "name": "Maria Silva"})


def test_create_guest_defaults(guest, sample_event):
    """New guests are pending on both RSVP and payment"""
    assert guest.event_id == sample_event.id
    assert guest.rsvp_status == "pending"
    assert guest.payment_status == "pending"
    assert guest.confirmed_at is None
    assert guest.is_confirmed is False
    assert guest.has_paid is False


def test_create_guest_requires_existing_event(db_session):
    with pytest.raises(DomainRuleViolation) as exc_info:
        GuestService.create_guest(db_session, {"eventId": UNKNOWN_ID, "name": "Maria"})

    assert exc_info.value.first_field == "eventId"
    assert exc_info.value.message == "Evento não encontrado"


def test_create_guest_rejects_cancelled_event(db_session, sample_event):
    EventService.delete_by_public_id(db_session, sample_event.id)

    with pytest.raises(DomainRuleViolation):
        GuestService.create_guest(db_session, {"eventId": sample_event.id, "name": "Maria"})
    assert db_session.query(Guest).count() == 0


def test_create_guest_rejects_malformed_event_id(db_session):
    with pytest.raises(ValidationFailed) as exc_info:
        GuestService.create_guest(db_session, {"eventId": "not-a-uuid", "name": "Maria"})

    assert exc_info.value.first_field == "eventId"


@pytest.mark.parametrize("phone", ["11987654321", "+55 11 98765-4321", "(11) 8765-4321", "98765-4321"])
def test_brazilian_phone_formats_are_accepted(db_session, sample_event, phone):
    guest = GuestService.create_guest(db_session, {"eventId": sample_event.id, "name": "João", "phone": phone})
    assert guest.phone == phone


def test_invalid_phone_is_rejected(db_session, sample_event):
    with pytest.raises(ValidationFailed) as exc_info:
        GuestService.create_guest(db_session, {"eventId": sample_event.id, "name": "João", "phone": "abc"})

    assert exc_info.value.first_field == "phone"


def test_blank_phone_is_stored_as_none(db_session, sample_event):
    guest = GuestService.create_guest(db_session, {"eventId": sample_event.id, "name": "João", "phone": "   "})
    assert guest.phone is None


def test_paid_without_method_is_rejected(db_session, sample_event):
    """Payment confirmed requires a payment method"""
    with pytest.raises(ValidationFailed) as exc_info:
        GuestService.create_guest(db_session, {
            "eventId": sample_event.id, "name": "João", "paymentStatus": "paid",
        })

    assert exc_info.value.first_field == "paymentMethod"


def test_rsvp_yes_on_create_sets_confirmed_at(db_session, sample_event):
    guest = GuestService.create_guest(db_session, {
        "eventId": sample_event.id, "name": "João", "rsvpStatus": "YES",
    })

    assert guest.rsvp_status == "yes"
    assert guest.confirmed_at is not None
    assert guest.days_since_confirmation == 0


def test_confirmed_at_in_future_is_rejected(db_session, sample_event):
    with pytest.raises(ValidationFailed) as exc_info:
        GuestService.create_guest(db_session, {
            "eventId": sample_event.id,
            "name": "João",
            "rsvpStatus": "yes",
            "confirmedAt": (utcnow() + timedelta(days=2)).isoformat(),
        })

    assert exc_info.value.first_field == "confirmedAt"


def test_confirm_then_decline_clears_confirmed_at(db_session, guest):
    confirmed = GuestService.confirm_attendance(db_session, guest.id)
    assert confirmed.is_confirmed is True
    assert confirmed.confirmed_at is not None

    declined = GuestService.update_rsvp(db_session, guest.id, "no")
    assert declined.rsvp_status == "no"
    assert declined.confirmed_at is None


def test_update_rsvp_rejects_unknown_status(db_session, guest):
    with pytest.raises(ValidationFailed) as exc_info:
        GuestService.update_rsvp(db_session, guest.id, "talvez")

    assert exc_info.value.first_field == "rsvpStatus"


def test_mark_as_paid_with_method(db_session, guest):
    paid = GuestService.mark_as_paid(db_session, guest.id, "PIX")

    assert paid.payment_status == "paid"
    assert paid.payment_method == "pix"
    assert paid.has_paid is True


def test_mark_as_paid_without_any_method_fails(db_session, guest):
    """The paid/method invariant holds for the convenience operation too"""
    with pytest.raises(ValidationFailed):
        GuestService.mark_as_paid(db_session, guest.id)

    db_session.refresh(guest)
    assert guest.payment_status == "pending"


def test_update_keeps_event_binding(db_session, guest, sample_event):
    updated = GuestService.update_by_public_id(db_session, guest.id, {
        "name": "Maria Souza", "eventId": UNKNOWN_ID, "id": "ignored",
    })

    assert updated.id == guest.id
    assert updated.event_id == sample_event.id
    assert updated.name == "Maria Souza"


def test_delete_is_hard(db_session, guest):
    removed = GuestService.delete_by_public_id(db_session, guest.id)

    assert removed.id == guest.id
    assert GuestService.find_by_public_id(db_session, guest.id) is None
    assert GuestService.delete_by_public_id(db_session, guest.id) is None


def test_find_by_event_id_filters(db_session, sample_event):
    GuestService.create_guest(db_session, {"eventId": sample_event.id, "name": "Ana", "rsvpStatus": "yes"})
    GuestService.create_guest(db_session, {
        "eventId": sample_event.id, "name": "Bia", "rsvpStatus": "yes",
        "paymentStatus": "paid", "paymentMethod": "cash",
    })
    GuestService.create_guest(db_session, {"eventId": sample_event.id, "name": "Caio", "rsvpStatus": "maybe"})

    assert len(GuestService.find_by_event_id(db_session, sample_event.id)) == 3
    assert len(GuestService.find_by_event_id(db_session, sample_event.id, rsvp_status="yes")) == 2
    assert len(GuestService.find_by_event_id(db_session, sample_event.id, payment_status="paid")) == 1
    assert len(GuestService.find_by_event_id(db_session, sample_event.id, limit=1, offset=1)) == 1


def test_event_stats(db_session, sample_event):
    """Counters per RSVP status plus paid guests"""
    for name, rsvp in [("Ana", "yes"), ("Bia", "yes"), ("Caio", "no"), ("Davi", "maybe"), ("Eva", "pending")]:
        GuestService.create_guest(db_session, {"eventId": sample_event.id, "name": name, "rsvpStatus": rsvp})
    GuestService.create_guest(db_session, {
        "eventId": sample_event.id, "name": "Fábio", "paymentStatus": "paid", "paymentMethod": "transfer",
    })

    stats = GuestService.get_event_stats(db_session, sample_event.id)

    assert stats == {"total": 6, "confirmed": 2, "declined": 1, "pending": 2, "maybe": 1, "paid": 1}


def test_event_stats_for_empty_event(db_session, sample_event):
    stats = GuestService.get_event_stats(db_session, sample_event.id)
    assert stats["total"] == 0
    assert stats["paid"] == 0
