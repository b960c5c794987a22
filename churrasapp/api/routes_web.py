"""
Server-rendered pages - event list, creation form with shopping-list preview, event detail
"""

import logging
from pathlib import Path
from typing import Dict, List

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from churrasapp.core.db import get_db
from churrasapp.core.errors import ValidationFailed
from churrasapp.schemas.common import parse_or_fail
from churrasapp.schemas.event import EventCreate
from churrasapp.services.event_service import EventService
from churrasapp.services.item_service import ItemService
from churrasapp.services.shopping_list import calculate_event_items, format_currency

logger = logging.getLogger(__name__)

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[2] / "templates"))
templates.env.filters["brl"] = format_currency


def _field_errors(errors: List[Dict[str, str]]) -> Dict[str, str]:
    # first message per field, keyed by the wire (camelCase) name
    field_errors: Dict[str, str] = {}
    for error in errors:
        field_errors.setdefault(error["field"], error["message"])
    return field_errors


def _preview(participants: str):
    try:
        headcount = int(participants)
    except (TypeError, ValueError):
        return []
    return calculate_event_items(headcount)


@router.get("/", response_class=HTMLResponse)
async def events_page(request: Request, db: Session = Depends(get_db)):
    """Most recent events"""
    events, total = EventService.list_events(db, limit=50)
    return templates.TemplateResponse(request, "events_list.html", {"events": events, "total": total})


@router.get("/events/new", response_class=HTMLResponse)
async def new_event_page(request: Request):
    """Empty creation form"""
    return templates.TemplateResponse(
        request, "event_form.html", {"form": {}, "errors": {}, "preview": [], "preview_total": 0}
    )


@router.post("/events/new", response_class=HTMLResponse)
async def submit_event_form(
    request: Request,
    name: str = Form(""),
    date: str = Form(""),
    location: str = Form(""),
    estimated_participants: str = Form(""),
    confirmation_deadline: str = Form(""),
    action: str = Form("create"),
    db: Session = Depends(get_db),
):
    """Validate the form; either re-render it with a shopping-list preview or create the event"""
    form = {
        "name": name,
        "date": date,
        "location": location,
        "estimatedParticipants": estimated_participants,
        "confirmationDeadline": confirmation_deadline,
    }
    preview = _preview(estimated_participants)
    context = {
        "form": form,
        "errors": {},
        "preview": preview,
        "preview_total": sum(item["total_cost"] for item in preview),
    }

    # blank inputs count as missing
    payload = {key: value for key, value in form.items() if value.strip()}
    try:
        event_data = parse_or_fail(EventCreate, payload)
    except ValidationFailed as e:
        context["errors"] = _field_errors(e.errors)
        return templates.TemplateResponse(
            request, "event_form.html", context, status_code=status.HTTP_400_BAD_REQUEST
        )

    if action == "preview":
        return templates.TemplateResponse(request, "event_form.html", context)

    event = EventService.create_event(db, event_data)
    for item in calculate_event_items(event.estimated_participants):
        ItemService.create_item(db, {
            "event_id": event.id,
            "name": item["name"],
            "category": item["category"],
            "quantity": item["quantity"],
            "unit": item["unit"],
            "estimated_cost": item["estimated_cost"],
        })
    return RedirectResponse(f"/events/{event.id}", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/events/{event_id}", response_class=HTMLResponse)
async def event_detail_page(request: Request, event_id: str, db: Session = Depends(get_db)):
    """Event with guests, shopping list and totals"""
    result = EventService.find_with_relations(db, event_id)
    if not result:
        return templates.TemplateResponse(
            request,
            "event_detail.html",
            {"result": None, "event_id": event_id},
            status_code=status.HTTP_404_NOT_FOUND,
        )
    return templates.TemplateResponse(request, "event_detail.html", {"result": result, "event_id": event_id})
