"""
Python client for the ChurrasApp API.

Payloads are checked with the same field rules the server applies before
anything is sent, so an invalid event never leaves the caller. HTTP
failures surface as ApiError; network failures as ApiError with status 0.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from churrasapp.core.errors import ValidationFailed
from churrasapp.schemas.common import parse_or_fail
from churrasapp.schemas.event import EventCreate, EventUpdate
from churrasapp.services.shopping_list import calculate_event_items

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3001"


class ApiError(Exception):
    """Non-2xx answer from the API, or status 0 when the server was unreachable"""

    def __init__(self, message: str, status: int, data: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data


def _require_id(event_id: Optional[str]) -> str:
    if not event_id or not str(event_id).strip():
        raise ValidationFailed([{"field": "id", "message": "ID do evento é obrigatório"}])
    return str(event_id).strip()


def _unwrap(body: Any) -> Any:
    # envelope bodies carry the payload under "data"
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


def starter_items(estimated_participants: int):
    """Shopping list sent along with a new event, in wire format"""
    return [
        {
            "name": item["name"],
            "category": item["category"],
            "quantity": item["quantity"],
            "unit": item["unit"],
            "estimatedCost": item["estimated_cost"],
        }
        for item in calculate_event_items(estimated_participants)
    ]


class ChurrasClient:
    """Event operations over HTTP"""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        client: Optional[httpx.Client] = None,
        timeout: float = 5.0,
    ):
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)
        self._owns_client = client is None

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _request(self, method: str, endpoint: str, **kwargs) -> Any:
        url = "/api/" + endpoint.lstrip("/")
        try:
            response = self._client.request(method, url, headers={"Accept": "application/json"}, **kwargs)
        except httpx.RequestError as exc:
            logger.error("Request to %s failed: %s", url, exc)
            raise ApiError(str(exc) or "Erro de conexão com o servidor", 0) from exc

        try:
            body = response.json()
        except ValueError:
            body = {"message": response.text}

        if response.is_error:
            message = None
            if isinstance(body, dict):
                message = body.get("error") or body.get("message")
            raise ApiError(message or f"HTTP Error: {response.status_code}", response.status_code, body)
        return body

    def create_event(self, event_data: Dict[str, Any], items=None) -> Dict[str, Any]:
        """Validate locally, then create the event with its starter shopping list.

        ``items`` defaults to the basic template scaled to the headcount.
        Raises ValidationFailed without sending anything when the data is invalid.
        """
        event = parse_or_fail(EventCreate, event_data)
        payload = event.model_dump(mode="json", by_alias=True, exclude_none=True)
        payload["items"] = items if items is not None else starter_items(event.estimated_participants)
        return _unwrap(self._request("POST", "events", json=payload))

    def get_event(self, event_id: str) -> Dict[str, Any]:
        return _unwrap(self._request("GET", f"events/{_require_id(event_id)}"))

    def list_events(self, status: Optional[str] = None, limit: Optional[int] = None, offset: Optional[int] = None):
        params = {key: value for key, value in (("status", status), ("limit", limit), ("offset", offset)) if value is not None}
        return _unwrap(self._request("GET", "events", params=params))

    def update_event(self, event_id: str, update_data: Dict[str, Any]) -> Dict[str, Any]:
        """Partial update; the fields sent are checked locally first"""
        event_id = _require_id(event_id)
        parse_or_fail(EventUpdate, update_data)
        return _unwrap(self._request("PUT", f"events/{event_id}", json=update_data))

    def delete_event(self, event_id: str) -> Dict[str, Any]:
        return _unwrap(self._request("DELETE", f"events/{_require_id(event_id)}"))
