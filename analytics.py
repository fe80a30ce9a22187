from __future__ import annotations
from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from database import Store

PERIODS = {
    "1d": timedelta(days=1),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
}


def period_start(period: str, now: Optional[datetime] = None) -> datetime:
    now = now or datetime.utcnow()
    return now - PERIODS.get(period, PERIODS["7d"])


def _since(store: Store, table: str, start: datetime) -> List[Dict[str, Any]]:
    return [r for r in store.find(table) if r.get("created_at") and r["created_at"] >= start]


def overview(store: Store, period: str = "7d", now: Optional[datetime] = None) -> Dict[str, Any]:
    start = period_start(period, now)
    orders = _since(store, "orders", start)
    bookings = _since(store, "table_bookings", start)
    messages = _since(store, "messages", start)
    completed = [o for o in orders if o.get("status") == "completed"]

    total_revenue = round(sum(float(o.get("total_amount") or 0) for o in completed), 2)
    avg_order_value = round(total_revenue / len(orders), 2) if orders else 0

    daily = defaultdict(float)
    for order in completed:
        daily[order["created_at"].date().isoformat()] += float(order.get("total_amount") or 0)

    return {
        "total_orders": len(orders),
        "total_bookings": len(bookings),
        "total_messages": len(messages),
        "unread_messages": sum(1 for m in messages if m.get("status") == "new"),
        "total_revenue": total_revenue,
        "avg_order_value": avg_order_value,
        "orders_by_status": dict(Counter(o.get("status") for o in orders)),
        "bookings_by_status": dict(Counter(b.get("status") for b in bookings)),
        "daily_revenue": [{"date": d, "revenue": round(v, 2)} for d, v in sorted(daily.items())],
        "period": period,
    }


def popular_items(store: Store, period: str = "7d", now: Optional[datetime] = None, top: int = 10) -> List[Dict[str, Any]]:
    stats: Dict[str, Dict[str, Any]] = {}
    for item in _since(store, "order_items", period_start(period, now)):
        name = item.get("item_name") or f"Item #{item.get('menu_item_id')}"
        entry = stats.setdefault(name, {"name": name, "total_quantity": 0, "total_revenue": 0.0, "order_count": 0})
        entry["total_quantity"] += item.get("quantity") or 0
        entry["total_revenue"] = round(entry["total_revenue"] + float(item.get("subtotal") or 0), 2)
        entry["order_count"] += 1
    ranked = sorted(stats.values(), key=lambda s: s["total_quantity"], reverse=True)
    return ranked[:top]
