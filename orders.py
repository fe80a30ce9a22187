from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from cart import delivery_fee
from config import settings
from database import Store
from errors import NotFound, PaymentFailed, ValidationFailed
from payments import Gateway, to_minor_units
from schemas import CartLine

logger = logging.getLogger(__name__)

ORDER_TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"in_progress", "cancelled"},
    "in_progress": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}


def check_transition(transitions: Dict[str, set], current: str, new: str, code: str) -> None:
    if current == new:
        raise ValidationFailed(f"Status is already {new}", code=code)
    if new not in transitions.get(current, set()):
        raise ValidationFailed(f"Cannot change status from {current} to {new}", code=code)


def _cart_amount(cart_items: List[CartLine], order_type: str) -> float:
    return round(sum(it.price * it.quantity for it in cart_items) + delivery_fee(order_type), 2)


def create_order_payment_intent(gateway: Gateway, amount: float, cart_items: List[CartLine],
                                customer_email: str, customer_name: str,
                                customer_phone: Optional[str] = None, order_type: str = "collection",
                                delivery_address: Optional[str] = None,
                                special_instructions: Optional[str] = None,
                                currency: Optional[str] = None) -> Dict[str, Any]:
    code = "PAYMENT_INTENT_FAILED"
    if not amount or amount <= 0:
        raise ValidationFailed("Valid amount is required", code=code)
    if not cart_items:
        raise ValidationFailed("Cart items are required", code=code)
    if not customer_email or not customer_name:
        raise ValidationFailed("Customer email and name are required", code=code)

    logger.info("Payment intent request received: amount=%s email=%s", amount, customer_email)

    calculated = _cart_amount(cart_items, order_type)
    if abs(calculated - amount) > 0.01:
        raise ValidationFailed(
            "Amount mismatch: calculated amount does not match provided amount", code=code
        )

    currency = (currency or settings.currency).lower()
    intent = gateway.create_intent(to_minor_units(amount), currency, {
        "customer_email": customer_email,
        "customer_name": customer_name,
        "customer_phone": customer_phone or "",
        "order_type": order_type,
        "cart_items_count": len(cart_items),
        "total_items": sum(it.quantity for it in cart_items),
        "delivery_address": delivery_address or "",
        "special_instructions": special_instructions or "",
    })
    return {
        "client_secret": intent.client_secret,
        "payment_intent_id": intent.id,
        "amount": amount,
        "currency": currency,
    }


def _insert_items(store: Store, order_id: int, items: List[Dict[str, Any]]) -> int:
    written = 0
    for item in items:
        menu_item = store.get("menu_items", item["menu_item_id"])
        if menu_item is None:
            logger.warning("Order %s references unknown menu item %s", order_id, item["menu_item_id"])
        store.insert("order_items", {
            "order_id": order_id,
            "menu_item_id": item["menu_item_id"],
            "item_name": (menu_item or {}).get("name") or item.get("name"),
            "quantity": item["quantity"],
            "price_at_time": item["price_at_time"],
            "subtotal": round(item["price_at_time"] * item["quantity"], 2),
            "special_requests": item.get("special_requests"),
        })
        written += 1
    return written


def confirm_order(store: Store, gateway: Gateway, payment_intent_id: str, cart_items: List[CartLine],
                  customer_email: str, customer_name: str, total_amount: float,
                  customer_phone: Optional[str] = None, order_type: str = "collection",
                  delivery_address: Optional[str] = None,
                  special_instructions: Optional[str] = None) -> Dict[str, Any]:
    code = "ORDER_CONFIRMATION_FAILED"
    if not payment_intent_id:
        raise ValidationFailed("Payment intent ID is required", code=code)
    if not cart_items:
        raise ValidationFailed("Cart items are required", code=code)
    if not customer_email or not customer_name:
        raise ValidationFailed("Customer details are required", code=code)

    logger.info("Confirm order request received: intent=%s email=%s", payment_intent_id, customer_email)

    intent = gateway.retrieve_intent(payment_intent_id)
    logger.info("Payment intent status: %s", intent.status)
    if intent.status != "succeeded":
        raise PaymentFailed("Payment has not been completed successfully", code=code)

    # the processor's amount is authoritative; the order must match what was paid
    if to_minor_units(total_amount) != intent.amount:
        logger.error("Order total %s does not match paid amount %s for %s",
                     total_amount, intent.amount, payment_intent_id)
        raise ValidationFailed("Order total does not match the amount paid", code=code)
    if abs(_cart_amount(cart_items, order_type) - total_amount) > 0.01:
        raise ValidationFailed(
            "Amount mismatch: calculated amount does not match provided amount", code=code
        )

    order, created = store.insert_unique("orders", {
        "customer_email": customer_email,
        "customer_name": customer_name,
        "customer_phone": customer_phone,
        "order_type": order_type,
        "total_amount": total_amount,
        "status": "confirmed",
        "stripe_payment_intent_id": payment_intent_id,
        "special_instructions": special_instructions,
        "delivery_address": delivery_address,
    }, "stripe_payment_intent_id")
    if not created:
        logger.info("Payment intent %s already confirmed as order %s", payment_intent_id, order["id"])
    else:
        logger.info("Order created successfully: %s", order["id"])
        try:
            _insert_items(store, order["id"], [
                {
                    "menu_item_id": it.id,
                    "name": it.name,
                    "quantity": it.quantity,
                    "price_at_time": it.price,
                    "special_requests": it.special_requests,
                }
                for it in cart_items
            ])
        except Exception:
            # the order itself is paid for and must survive
            logger.exception("Order %s created but order items creation failed", order["id"])

    return {
        "order_id": order["id"],
        "status": order["status"],
        "payment_intent_id": payment_intent_id,
        "total_amount": order["total_amount"],
    }


def create_order(store: Store, data: Dict[str, Any]) -> Dict[str, Any]:
    items = data.pop("items", None) or []
    order = store.insert("orders", {**data, "status": "pending"})
    if items:
        try:
            _insert_items(store, order["id"], items)
        except Exception:
            logger.exception("Failed to create order items for order %s", order["id"])
    return order


def list_orders(store: Store, status: Optional[str] = None, limit: int = 50) -> List[Dict[str, Any]]:
    filters = {"status": status} if status else None
    return store.find("orders", filters, sort="-created_at", limit=limit)


def get_order_details(store: Store, order_id: int) -> Dict[str, Any]:
    order = store.get("orders", order_id)
    if order is None:
        raise NotFound("Order not found", code="ORDER_NOT_FOUND")
    items = store.find("order_items", {"order_id": order_id}, sort="id")
    summary = {
        "subtotal": round(sum(float(it.get("subtotal") or 0) for it in items), 2),
        "total": float(order.get("total_amount") or 0),
        "item_count": len(items),
        "total_quantity": sum(it.get("quantity") or 0 for it in items),
    }
    return {"order": order, "items": items, "summary": summary}


def update_order_status(store: Store, order_id: int, status: str) -> Dict[str, Any]:
    order = store.get("orders", order_id)
    if order is None:
        raise NotFound("Order not found", code="ORDER_NOT_FOUND")
    check_transition(ORDER_TRANSITIONS, order["status"], status, "ORDER_STATUS_ERROR")
    logger.info("Order %s: %s -> %s", order_id, order["status"], status)
    return store.update("orders", order_id, {"status": status})
