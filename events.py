from __future__ import annotations
import re
from typing import Any, Dict, List

from database import Store
from errors import NotFound

ERROR_CODE = "EVENTS_MANAGEMENT_ERROR"
DEFAULT_COLOR = "#9CAF88"


def generate_slug(title: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


def get_events(store: Store) -> List[Dict[str, Any]]:
    return store.find("events", sort="event_date")


def get_event_categories(store: Store) -> List[Dict[str, Any]]:
    return store.find("event_categories", sort="name")


def create_event(store: Store, data: Dict[str, Any]) -> Dict[str, Any]:
    return store.insert("events", {
        "title": data["title"],
        "slug": generate_slug(data["title"]),
        "description": data.get("description"),
        "event_date": data["event_date"],
        "start_time": data.get("start_time"),
        "end_time": data.get("end_time"),
        "location": data.get("location"),
        "image_url": data.get("image_url"),
        "category_id": data.get("category_id"),
        "is_published": bool(data.get("is_published", False)),
        "max_attendees": data.get("max_attendees"),
        "current_attendees": 0,
        "ticket_price": data.get("ticket_price") or 0,
    })


def update_event(store: Store, event_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
    # only fields the client sent; explicit nulls clear a value
    if changes.get("title"):
        changes["slug"] = generate_slug(changes["title"])
    updated = store.update("events", event_id, changes)
    if updated is None:
        raise NotFound("Failed to update event", code=ERROR_CODE)
    return updated


def delete_event(store: Store, event_id: int) -> Dict[str, Any]:
    if not store.delete("events", event_id):
        raise NotFound("Failed to delete event", code=ERROR_CODE)
    return {"success": True}


def create_event_category(store: Store, data: Dict[str, Any]) -> Dict[str, Any]:
    return store.insert("event_categories", {
        "name": data["name"],
        "description": data.get("description"),
        "color": data.get("color") or DEFAULT_COLOR,
        "is_active": True,
    })
