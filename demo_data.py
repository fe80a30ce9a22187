from __future__ import annotations
from datetime import datetime, timedelta
from typing import Any, Dict, List

DEMO_MENU_CATEGORIES = [
    {"id": 1, "name": "breakfast", "description": "Served until 11:30", "display_order": 1},
    {"id": 2, "name": "lunch", "description": "Served from 11:30", "display_order": 2},
    {"id": 3, "name": "cakes", "description": "Homemade every morning", "display_order": 3},
    {"id": 4, "name": "drinks", "description": "Hot and cold drinks", "display_order": 4},
]

DEMO_MENU_ITEMS = [
    {"id": 1, "category": "breakfast", "name": "Clifton's Big Breakfast", "description": "Two sausages, two bacon, egg, beans, tomato, hash brown, mushrooms, toast", "price": 8.99, "image_url": "/images/cliftons-big-breakfast.png", "is_available": True, "stock_level": None, "sort_order": 1, "price_history": []},
    {"id": 2, "category": "breakfast", "name": "Bacon Bap", "description": "Crispy bacon in soft white bap", "price": 3.50, "image_url": "/images/bacon-bap.png", "is_available": True, "stock_level": None, "sort_order": 2, "price_history": []},
    {"id": 3, "category": "lunch", "name": "Jacket Potato", "description": "With salad, coleslaw, 2 toppings", "price": 6.75, "image_url": "/images/jacket-potato.png", "is_available": True, "stock_level": None, "sort_order": 1, "price_history": []},
    {"id": 4, "category": "lunch", "name": "Panini", "description": "Brie & bacon, ham & tomato, or cheese & onion", "price": 4.95, "image_url": "/images/panini-grilled.png", "is_available": True, "stock_level": None, "sort_order": 2, "price_history": []},
    {"id": 5, "category": "cakes", "name": "Slice of Cake", "description": "Homemade cake slice", "price": 3.00, "image_url": "/images/cakes-bakes-assorted.png", "is_available": True, "stock_level": None, "sort_order": 1, "price_history": []},
    {"id": 6, "category": "drinks", "name": "Flat White", "description": "Strong coffee with steamed milk", "price": 3.50, "image_url": "/images/hot-cold-drinks.png", "is_available": True, "stock_level": None, "sort_order": 1, "price_history": []},
    {"id": 7, "category": "drinks", "name": "Tea", "description": "Traditional English breakfast tea", "price": 1.50, "image_url": "/images/hot-cold-drinks.png", "is_available": True, "stock_level": None, "sort_order": 2, "price_history": []},
]

DEMO_EVENT_CATEGORIES = [
    {"id": 1, "name": "Live Music", "description": "Acoustic evenings", "color": "#9CAF88", "is_active": True},
    {"id": 2, "name": "Workshops", "description": "Latte art and baking", "color": "#C8A27C", "is_active": True},
]

DEMO_BLOG_CATEGORIES = [
    {"id": 1, "name": "News", "slug": "news", "description": "What's new at the shop", "color": "#9CAF88", "is_active": True},
]


def _day(offset: int) -> str:
    return (datetime.utcnow() + timedelta(days=offset)).date().isoformat()


def demo_tables() -> Dict[str, List[Dict[str, Any]]]:
    now = datetime.utcnow()
    events = [
        {"id": 1, "title": "Acoustic Friday", "slug": "acoustic-friday", "description": "Local musicians unplugged.", "event_date": _day(7), "start_time": "19:00", "end_time": "21:30", "location": "Clifton's Coffee Shop", "image_url": None, "category_id": 1, "is_published": True, "max_attendees": 40, "current_attendees": 12, "ticket_price": 5.00},
        {"id": 2, "title": "Latte Art Workshop", "slug": "latte-art-workshop", "description": "Pour your first rosetta.", "event_date": _day(14), "start_time": "10:00", "end_time": "12:00", "location": "Clifton's Coffee Shop", "image_url": None, "category_id": 2, "is_published": True, "max_attendees": 10, "current_attendees": 8, "ticket_price": 15.00},
        {"id": 3, "title": "Community Coffee Morning", "slug": "community-coffee-morning", "description": "Free entry, all welcome.", "event_date": _day(3), "start_time": "09:30", "end_time": "11:00", "location": "Clifton's Coffee Shop", "image_url": None, "category_id": None, "is_published": True, "max_attendees": None, "current_attendees": 0, "ticket_price": 0},
    ]
    blog_posts = [
        {"id": 1, "title": "New Autumn Menu", "slug": "new-autumn-menu", "content": "Pumpkin spice is back, along with three new cakes.", "excerpt": "Pumpkin spice is back.", "featured_image": None, "category_id": 1, "is_published": True, "publish_date": now - timedelta(days=2), "author_name": "Clifton's Coffee Shop", "meta_title": "New Autumn Menu", "meta_description": "Pumpkin spice is back.", "reading_time": 1},
    ]
    orders = [
        {"id": 1001, "customer_name": "John Smith", "customer_email": "john@example.com", "customer_phone": None, "order_type": "collection", "total_amount": 12.50, "status": "pending", "stripe_payment_intent_id": None, "special_instructions": None, "delivery_address": None, "created_at": now},
        {"id": 1002, "customer_name": "Sarah Jones", "customer_email": "sarah@example.com", "customer_phone": None, "order_type": "delivery", "total_amount": 18.95, "status": "confirmed", "stripe_payment_intent_id": None, "special_instructions": None, "delivery_address": "12 High Street", "created_at": now - timedelta(days=1)},
        {"id": 1003, "customer_name": "Mike Wilson", "customer_email": "mike@example.com", "customer_phone": None, "order_type": "collection", "total_amount": 8.99, "status": "completed", "stripe_payment_intent_id": None, "special_instructions": None, "delivery_address": None, "created_at": now - timedelta(days=2)},
    ]
    order_items = [
        {"id": 1, "order_id": 1003, "menu_item_id": 1, "item_name": "Clifton's Big Breakfast", "quantity": 1, "price_at_time": 8.99, "subtotal": 8.99, "special_requests": None, "created_at": now - timedelta(days=2)},
    ]
    bookings = [
        {"id": 2001, "customer_name": "Emma Brown", "customer_email": "emma@example.com", "customer_phone": "+44 123 456 789", "party_size": 4, "booking_date": _day(1), "booking_time": "12:00", "status": "pending", "special_requests": None, "created_at": now},
        {"id": 2002, "customer_name": "David Lee", "customer_email": "david@example.com", "customer_phone": "+44 987 654 321", "party_size": 2, "booking_date": _day(2), "booking_time": "14:30", "status": "confirmed", "special_requests": None, "created_at": now - timedelta(hours=12)},
    ]
    return {
        "menu_categories": DEMO_MENU_CATEGORIES,
        "menu_items": DEMO_MENU_ITEMS,
        "event_categories": DEMO_EVENT_CATEGORIES,
        "events": events,
        "blog_categories": DEMO_BLOG_CATEGORIES,
        "blog_posts": blog_posts,
        "orders": orders,
        "order_items": order_items,
        "table_bookings": bookings,
    }
