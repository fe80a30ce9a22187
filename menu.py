from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Dict, List

from database import Store
from errors import NotFound, ValidationFailed

logger = logging.getLogger(__name__)

ERROR_CODE = "MENU_MANAGEMENT_ERROR"


def get_menu_items(store: Store) -> List[Dict[str, Any]]:
    return store.find("menu_items", sort=["category", "sort_order", "name"])


def get_public_menu(store: Store) -> Dict[str, Any]:
    categories = store.find("menu_categories", sort="display_order")
    items = store.find("menu_items", {"is_available": True}, sort=["category", "sort_order", "name"])
    return {"categories": categories, "items": items}


def get_categories(store: Store) -> List[Dict[str, Any]]:
    return store.find("menu_categories", sort="display_order")


def create_menu_item(store: Store, data: Dict[str, Any]) -> Dict[str, Any]:
    item = store.insert("menu_items", {
        "name": data["name"],
        "description": data.get("description"),
        "price": data["price"],
        "category": data["category"],
        "image_url": data.get("image_url"),
        "is_available": data.get("is_available", True),
        "stock_level": data.get("stock_level"),
        "sort_order": data.get("sort_order") or 0,
        "price_history": [],
    })
    logger.info("Menu item created: %s (%s)", item["id"], item["name"])
    return item


def update_menu_item(store: Store, item_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
    current = store.get("menu_items", item_id)
    if current is None:
        raise NotFound("Failed to update menu item", code=ERROR_CODE)

    changes = {k: v for k, v in changes.items() if v is not None}
    new_price = changes.get("price")
    if new_price is not None and current.get("price") != new_price:
        history = list(current.get("price_history") or [])
        history.append({
            "old_price": current.get("price"),
            "new_price": new_price,
            "changed_at": datetime.utcnow(),
        })
        changes["price_history"] = history

    return store.update("menu_items", item_id, changes)


def delete_menu_item(store: Store, item_id: int) -> Dict[str, Any]:
    if not store.delete("menu_items", item_id):
        raise NotFound("Failed to delete menu item", code=ERROR_CODE)
    return {"success": True}


def bulk_update_availability(store: Store, ids: List[int], is_available: bool) -> Dict[str, Any]:
    if not ids:
        raise ValidationFailed("No menu items selected", code=ERROR_CODE)
    updated = store.update_many("menu_items", ids, {"is_available": is_available})
    logger.info("Availability set to %s for %s menu items", is_available, updated)
    return {"success": True, "updated": updated}


def create_category(store: Store, data: Dict[str, Any]) -> Dict[str, Any]:
    return store.insert("menu_categories", {
        "name": data["name"],
        "description": data.get("description"),
        "display_order": data.get("display_order") or 0,
    })
