"""Idempotent table setup and seed data.

Run once against a fresh database with ``python seed.py``; running it again
only fills in what is missing.
"""
from __future__ import annotations
import logging
from typing import Any, Dict

from auth import hash_password
from config import settings
from database import Store

logger = logging.getLogger(__name__)

MENU_CATEGORIES = [
    {"name": "breakfast", "description": "Served until 11:30", "display_order": 1},
    {"name": "extras", "description": "Add to any breakfast", "display_order": 2},
    {"name": "lunch", "description": "Served from 11:30", "display_order": 3},
    {"name": "cakes", "description": "Homemade every morning", "display_order": 4},
    {"name": "milkshakes", "description": None, "display_order": 5},
    {"name": "smoothies", "description": None, "display_order": 6},
    {"name": "drinks", "description": "Hot and cold drinks", "display_order": 7},
]

MENU_ITEMS = [
    ("breakfast", "Clifton's Big Breakfast", "Two sausages, two bacon, egg, beans, tomato, hash brown, mushrooms, toast", 8.99, "/images/cliftons-big-breakfast.png"),
    ("breakfast", "Clifton's Small Breakfast", "One sausage, one bacon, egg, beans, tomato, toast", 6.99, "/images/cliftons-small-breakfast.png"),
    ("breakfast", "Bacon Bap", "Crispy bacon in soft white bap", 3.50, "/images/bacon-bap.png"),
    ("breakfast", "Sausage Bap", "Juicy sausage in toasted bap", 3.50, "/images/sausage-bap.png"),
    ("breakfast", "Bacon, Sausage & Egg Bap", "Loaded bap with fried egg", 4.50, "/images/bacon-sausage-egg-bap.png"),
    ("extras", "Breakfast Extras", "Bacon, sausage, black pudding, hash brown, egg, beans, tomatoes", 0.50, "/images/breakfast-sides.png"),
    ("lunch", "Jacket Potato", "With salad, coleslaw, 2 toppings", 6.75, "/images/jacket-potato.png"),
    ("lunch", "Panini", "Brie & bacon, ham & tomato, or cheese & onion", 4.95, "/images/panini-grilled.png"),
    ("lunch", "Toastie", "Toasted sandwich with 2 fillings", 4.95, "/images/toastie.png"),
    ("lunch", "Scampi, Chips & Peas", "Golden scampi with chips and peas", 6.95, "/images/scampi-chips.png"),
    ("cakes", "Slice of Cake", "Homemade cake slice", 3.00, "/images/cakes-bakes-assorted.png"),
    ("cakes", "Cupcake", "Fluffy cupcake with icing", 2.50, "/images/cakes-bakes-assorted.png"),
    ("cakes", "Brownies", "Fudgy chocolate brownie", 3.50, "/images/cakes-bakes-assorted.png"),
    ("milkshakes", "Milkshakes", "Chocolate, strawberry, banana, vanilla, hazelnut, caramel, biscoff", 3.95, "/images/milkshakes-row.png"),
    ("smoothies", "Mixed Berry", "Strawberry, raspberry, blueberry, blackberry", 3.95, "/images/smoothies-fresh.png"),
    ("drinks", "Tea", "Traditional English breakfast tea", 1.50, "/images/hot-cold-drinks.png"),
    ("drinks", "Coffee", "Freshly brewed coffee", 2.00, "/images/hot-cold-drinks.png"),
    ("drinks", "Flat White", "Strong coffee with steamed milk", 3.50, "/images/hot-cold-drinks.png"),
    ("drinks", "Cappuccino", "Espresso with foamed milk", 3.50, "/images/hot-cold-drinks.png"),
    ("drinks", "Hot Chocolate", "Rich hot chocolate", 3.50, "/images/hot-cold-drinks.png"),
]

EVENT_CATEGORIES = [
    {"name": "Live Music", "description": "Acoustic evenings", "color": "#9CAF88", "is_active": True},
    {"name": "Workshops", "description": "Latte art and baking", "color": "#C8A27C", "is_active": True},
]

BLOG_CATEGORIES = [
    {"name": "News", "slug": "news", "description": "What's new at the shop", "color": "#9CAF88", "is_active": True},
    {"name": "Recipes", "slug": "recipes", "description": "From our kitchen", "color": "#C8A27C", "is_active": True},
]


def _seed_table(store: Store, table: str, rows) -> int:
    if store.find(table, limit=1):
        logger.info("%s already populated, skipping", table)
        return 0
    for row in rows:
        store.insert(table, row)
    logger.info("%s populated with %s rows", table, len(rows))
    return len(rows)


def init_database(store: Store) -> Dict[str, Any]:
    store.ensure_indexes()
    created = {
        "menu_categories": _seed_table(store, "menu_categories", MENU_CATEGORIES),
        "menu_items": _seed_table(store, "menu_items", [
            {
                "category": category,
                "name": name,
                "description": description,
                "price": price,
                "image_url": image_url,
                "is_available": True,
                "stock_level": None,
                "sort_order": idx,
                "price_history": [],
            }
            for idx, (category, name, description, price, image_url) in enumerate(MENU_ITEMS)
        ]),
        "event_categories": _seed_table(store, "event_categories", EVENT_CATEGORIES),
        "blog_categories": _seed_table(store, "blog_categories", BLOG_CATEGORIES),
        "admin_users": 0,
    }

    if not store.find("admin_users", {"email": settings.admin_email}, limit=1):
        store.insert("admin_users", {
            "email": settings.admin_email,
            "name": "Administrator",
            "role": "admin",
            "password_hash": hash_password(settings.admin_password),
        })
        created["admin_users"] = 1
        logger.info("Admin user %s created", settings.admin_email)

    return {"success": True, "created": created}


if __name__ == "__main__":
    from database import get_store

    logging.basicConfig(level=settings.log_level)
    print(init_database(get_store()))
