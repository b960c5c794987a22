"""
Tests for the /api/events endpoints
"""

import json
import re

import pytest

from churrasapp.models import EventItem
from churrasapp.schemas.fields import UUID4_PATTERN
from churrasapp.services.guest_service import GuestService
from churrasapp.services.item_service import ItemService

UNKNOWN_ID = "5b6f7c1e-2b7a-4c55-9a3e-1f0c2d3e4f50"


def _create(client, payload):
    response = client.post("/api/events", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_create_event(client, event_payload):
    """Valid payloads create a draft event"""
    response = client.post("/api/events", json=event_payload)
    body = response.json()

    assert response.status_code == 201
    assert body["error"] is None
    assert body["meta"]["created"] is True
    assert body["meta"]["itemsCount"] == 0
    assert "timestamp" in body["meta"]
    assert body["data"]["status"] == "draft"
    assert re.match(UUID4_PATTERN, body["data"]["id"])
    assert body["data"]["estimatedParticipants"] == 10
    assert body["data"]["name"] == "Churrasco da Firma"
    assert body["data"]["date"].endswith("+00:00")
    assert "pk" not in body["data"]


def test_create_event_with_items(client, event_payload):
    """Valid items are created under the event; invalid ones are skipped"""
    event_payload["items"] = [
        {"name": "Picanha", "category": "meat", "quantity": 4, "unit": "kg", "estimatedCost": 8000},
        {"name": "Cerveja", "category": "drinks", "quantity": 20, "unit": "unit", "estimatedCost": 500,
         "eventId": UNKNOWN_ID, "isTemplate": True},
        {"name": "X", "category": "invalid", "quantity": 1, "unit": "kg", "estimatedCost": 1},
    ]
    response = client.post("/api/events", json=event_payload)
    body = response.json()

    assert response.status_code == 201
    assert body["meta"]["itemsCount"] == 2
    assert {item["name"] for item in body["data"]["items"]} == {"Picanha", "Cerveja"}
    assert all(item["eventId"] == body["data"]["id"] for item in body["data"]["items"])
    assert all(item["isTemplate"] is False for item in body["data"]["items"])


@pytest.mark.parametrize("field", ["quantity", "estimatedCost", "actualCost"])
@pytest.mark.parametrize("value", [float("inf"), "inf"])
def test_create_event_skips_items_with_infinite_numbers(client, db_manager, event_payload, field, value):
    """Non-finite numbers are a validation failure, so the item is skipped and nothing breaks"""
    item = {"name": "Picanha", "category": "meat", "quantity": 1, "unit": "kg", "estimatedCost": 8000}
    item[field] = value
    event_payload["items"] = [item]
    # stdlib json writes the bare Infinity literal
    response = client.post(
        "/api/events", content=json.dumps(event_payload), headers={"Content-Type": "application/json"},
    )
    body = response.json()

    assert response.status_code == 201
    assert body["meta"]["itemsCount"] == 0
    assert body["data"]["items"] == []
    with db_manager.session() as db:
        assert db.query(EventItem).count() == 0
    assert client.get(f"/api/events/{body['data']['id']}").status_code == 200


def test_create_event_survives_item_storage_failure(client, event_payload, monkeypatch):
    """The event is answered as created even when storing a starter item blows up"""
    def broken_create_item(db, item_data):
        raise RuntimeError("disk I/O error")

    monkeypatch.setattr(ItemService, "create_item", staticmethod(broken_create_item))
    event_payload["items"] = [
        {"name": "Picanha", "category": "meat", "quantity": 4, "unit": "kg", "estimatedCost": 8000},
    ]

    response = client.post("/api/events", json=event_payload)
    body = response.json()

    assert response.status_code == 201
    assert body["meta"]["itemsCount"] == 0
    assert body["data"]["items"] == []

    detail = client.get(f"/api/events/{body['data']['id']}")
    assert detail.status_code == 200
    assert detail.json()["data"]["name"] == "Churrasco da Firma"
    assert client.get("/api/events").json()["meta"]["total"] == 1


def test_create_event_validation_error(client, event_payload):
    """Invalid bodies answer 400 naming the first failed field"""
    event_payload["estimatedParticipants"] = 0
    response = client.post("/api/events", json=event_payload)
    body = response.json()

    assert response.status_code == 400
    assert body["data"] is None
    assert body["error"] == "Dados inválidos"
    assert body["meta"]["field"] == "estimatedParticipants"
    assert body["meta"]["validationErrors"][0]["message"] == "Deve ser maior ou igual a 1"


def test_create_event_missing_fields(client):
    response = client.post("/api/events", json={"name": "Churrasco"})
    body = response.json()

    assert response.status_code == 400
    fields = {error["field"] for error in body["meta"]["validationErrors"]}
    assert {"date", "location", "estimatedParticipants"} <= fields


def test_create_event_deadline_after_date(client, event_payload, future_date):
    event_payload["confirmationDeadline"] = future_date(40)
    response = client.post("/api/events", json=event_payload)

    assert response.status_code == 400
    assert response.json()["meta"]["field"] == "confirmationDeadline"


def test_create_event_malformed_json(client):
    response = client.post("/api/events", content="{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["error"] == "Dados inválidos"


def test_get_event_with_relations(client, db_manager, event_payload):
    event = _create(client, event_payload)
    with db_manager.session() as db:
        GuestService.create_guest(db, {"eventId": event["id"], "name": "Ana", "rsvpStatus": "yes"})

    response = client.get(f"/api/events/{event['id']}")
    body = response.json()

    assert response.status_code == 200
    assert body["data"]["id"] == event["id"]
    assert body["data"]["guestCount"] == 1
    assert body["data"]["confirmedGuestCount"] == 1
    assert body["data"]["guests"][0]["isConfirmed"] is True
    assert body["data"]["stats"]["guests"]["confirmed"] == 1
    assert body["data"]["stats"]["items"]["totalItems"] == 0
    assert body["meta"]["guestCount"] == 1
    assert body["meta"]["itemCount"] == 0


def test_get_event_item_breakdown(client, event_payload):
    event_payload["items"] = [
        {"name": "Picanha", "category": "meat", "quantity": 4, "unit": "kg", "estimatedCost": 8000},
    ]
    event = _create(client, event_payload)

    stats = client.get(f"/api/events/{event['id']}").json()["data"]["stats"]["items"]

    assert stats["totalEstimatedCost"] == 32000
    assert stats["categoriesBreakdown"] == {"meat": {"estimatedCost": 32000, "actualCost": 0}}


def test_get_unknown_event(client):
    """Unknown ids are a 404 with null data"""
    response = client.get(f"/api/events/{UNKNOWN_ID}")
    body = response.json()

    assert response.status_code == 404
    assert body["data"] is None
    assert body["error"] == "Evento não encontrado"
    assert body["meta"]["eventId"] == UNKNOWN_ID


def test_update_event(client, event_payload):
    """Protected fields are ignored by PUT"""
    event = _create(client, event_payload)

    response = client.put(f"/api/events/{event['id']}", json={
        "name": "Churrasco de Fim de Ano",
        "id": "ignored",
        "organizerId": "ignored",
        "createdAt": "2000-01-01T00:00:00Z",
    })
    body = response.json()

    assert response.status_code == 200
    assert body["meta"]["updated"] is True
    assert body["data"]["id"] == event["id"]
    assert body["data"]["organizerId"] == event["organizerId"]
    assert body["data"]["createdAt"] == event["createdAt"]
    assert body["data"]["name"] == "Churrasco de Fim de Ano"


def test_update_event_validation_error(client, event_payload):
    event = _create(client, event_payload)

    response = client.put(f"/api/events/{event['id']}", json={"status": "finished"})

    assert response.status_code == 400
    assert response.json()["meta"]["field"] == "status"


def test_update_unknown_event(client):
    response = client.put(f"/api/events/{UNKNOWN_ID}", json={"name": "Qualquer"})
    assert response.status_code == 404


def test_list_events(client, event_payload):
    for i in range(3):
        _create(client, {**event_payload, "name": f"Churrasco {i}"})

    response = client.get("/api/events", params={"limit": 2})
    body = response.json()

    assert response.status_code == 200
    assert len(body["data"]) == 2
    assert body["meta"]["total"] == 3
    assert body["meta"]["limit"] == 2
    assert body["meta"]["offset"] == 0
    assert body["meta"]["hasMore"] is True

    last = client.get("/api/events", params={"limit": 2, "offset": 2}).json()
    assert len(last["data"]) == 1
    assert last["meta"]["hasMore"] is False


def test_list_events_by_status(client, event_payload):
    _create(client, event_payload)
    _create(client, {**event_payload, "status": "active"})

    body = client.get("/api/events", params={"status": "active"}).json()

    assert body["meta"]["total"] == 1
    assert body["data"][0]["status"] == "active"


def test_list_events_rejects_bad_pagination(client):
    response = client.get("/api/events", params={"limit": 0})

    assert response.status_code == 400
    assert response.json()["meta"]["field"] == "limit"


def test_delete_event_twice(client, event_payload):
    """Soft delete answers cancelled every time"""
    event = _create(client, event_payload)

    for _ in range(2):
        response = client.delete(f"/api/events/{event['id']}")
        body = response.json()
        assert response.status_code == 200
        assert body["data"] == {"id": event["id"], "status": "cancelled"}
        assert body["meta"]["deleted"] is True

    assert client.get(f"/api/events/{event['id']}").json()["data"]["status"] == "cancelled"


def test_delete_unknown_event(client):
    response = client.delete(f"/api/events/{UNKNOWN_ID}")
    assert response.status_code == 404


def test_unknown_route(client):
    response = client.get("/api/nada")
    body = response.json()

    assert response.status_code == 404
    assert body["error"] == "Rota não encontrada"
    assert body["meta"]["path"] == "/api/nada"
    assert body["meta"]["method"] == "GET"
