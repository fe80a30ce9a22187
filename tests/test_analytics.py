from datetime import datetime, timedelta

import analytics

NOW = datetime(2030, 6, 15, 12, 0)


def at(days_ago):
    return NOW - timedelta(days=days_ago)


def test_period_start_defaults_to_a_week():
    assert analytics.period_start("30d", NOW) == NOW - timedelta(days=30)
    assert analytics.period_start("bogus", NOW) == NOW - timedelta(days=7)


def test_overview(store):
    store.insert("orders", {"status": "completed", "total_amount": 12.0, "created_at": at(1)})
    store.insert("orders", {"status": "completed", "total_amount": 8.0, "created_at": at(1)})
    store.insert("orders", {"status": "pending", "total_amount": 5.0, "created_at": at(2)})
    store.insert("orders", {"status": "completed", "total_amount": 99.0, "created_at": at(20)})
    store.insert("table_bookings", {"status": "pending", "created_at": at(3)})
    store.insert("messages", {"status": "new", "created_at": at(1)})
    store.insert("messages", {"status": "read", "created_at": at(1)})

    result = analytics.overview(store, "7d", now=NOW)

    assert result["total_orders"] == 3
    assert result["total_revenue"] == 20.0
    assert result["avg_order_value"] == round(20.0 / 3, 2)
    assert result["orders_by_status"] == {"completed": 2, "pending": 1}
    assert result["total_bookings"] == 1
    assert result["unread_messages"] == 1
    assert result["daily_revenue"] == [{"date": "2030-06-14", "revenue": 20.0}]

    assert analytics.overview(store, "30d", now=NOW)["total_revenue"] == 119.0


def test_overview_of_empty_period(store):
    result = analytics.overview(store, now=NOW)
    assert result["total_orders"] == 0
    assert result["avg_order_value"] == 0


def test_popular_items(store):
    store.insert("order_items", {"item_name": "Latte", "quantity": 2, "subtotal": 6.4, "created_at": at(1)})
    store.insert("order_items", {"item_name": "Latte", "quantity": 3, "subtotal": 9.6, "created_at": at(2)})
    store.insert("order_items", {"item_name": "Tea", "quantity": 1, "subtotal": 1.5, "created_at": at(1)})
    store.insert("order_items", {"item_name": "Tea", "quantity": 9, "subtotal": 13.5, "created_at": at(40)})

    ranked = analytics.popular_items(store, "7d", now=NOW)
    assert ranked[0] == {"name": "Latte", "total_quantity": 5, "total_revenue": 16.0, "order_count": 2}
    assert ranked[1]["name"] == "Tea"
    assert ranked[1]["total_quantity"] == 1
