"""Event ticket sales: two-phase card payment against event capacity.

Phase one (``create_payment_intent``) validates the event and quantity and asks
the payment processor for an intent; nothing is written to the store. Phase two
(``confirm_ticket_purchase``) runs after the customer completed card entry: the
intent is fetched again, and only a ``succeeded`` intent produces a ticket sale.
The sale is built from the intent metadata, never from fresh client input.
"""
from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd

from config import settings
from database import Store
from errors import NotFound, PaymentFailed, ValidationFailed
from payments import Gateway, to_minor_units

logger = logging.getLogger(__name__)

ERROR_CODE = "TICKET_PURCHASE_ERROR"
MAX_TICKETS_PER_PURCHASE = 10

CSV_COLUMNS = [
    "Confirmation Number",
    "Event",
    "Customer Name",
    "Customer Email",
    "Phone",
    "Quantity",
    "Total Amount",
    "Status",
    "Purchase Date",
]


def confirmation_number(sale_id: int) -> str:
    return f"TKT-{sale_id:06d}"


def remaining_tickets(event: Dict[str, Any]) -> Optional[int]:
    if not event.get("max_attendees"):
        return None
    return event["max_attendees"] - (event.get("current_attendees") or 0)


def create_payment_intent(store: Store, gateway: Gateway, event_id: int, quantity: int,
                          customer_name: str, customer_email: str,
                          customer_phone: Optional[str] = None) -> Dict[str, Any]:
    if not event_id or quantity is None or not customer_name or not customer_email:
        raise ValidationFailed(
            "Missing required fields: event_id, quantity, customer_name, customer_email",
            code=ERROR_CODE,
        )
    if quantity <= 0 or quantity > MAX_TICKETS_PER_PURCHASE:
        raise ValidationFailed("Invalid quantity. Must be between 1 and 10", code=ERROR_CODE)

    logger.info("Creating payment intent for event tickets: event=%s quantity=%s", event_id, quantity)

    event = store.get("events", event_id)
    if event is None:
        raise NotFound("Event not found", code=ERROR_CODE)
    if not event.get("is_published"):
        raise ValidationFailed("Event is not available for booking", code=ERROR_CODE)
    ticket_price = float(event.get("ticket_price") or 0)
    if ticket_price <= 0:
        raise ValidationFailed("This event does not sell tickets", code=ERROR_CODE)

    remaining = remaining_tickets(event)
    if remaining is not None and quantity > remaining:
        raise ValidationFailed(f"Only {max(remaining, 0)} tickets remaining", code=ERROR_CODE)

    total_amount = round(ticket_price * quantity, 2)
    intent = gateway.create_intent(
        to_minor_units(total_amount),
        settings.currency,
        {
            "event_id": event["id"],
            "event_title": event.get("title"),
            "quantity": quantity,
            "customer_name": customer_name,
            "customer_email": customer_email,
            "customer_phone": customer_phone or "",
            "event_date": event.get("event_date"),
            "ticket_price": ticket_price,
        },
    )

    return {
        "client_secret": intent.client_secret,
        "payment_intent_id": intent.id,
        "amount": intent.amount,
        "currency": intent.currency,
        "total_amount": total_amount,
        "event_title": event.get("title"),
        "event_date": event.get("event_date"),
        "quantity": quantity,
    }


def _sale_summary(sale: Dict[str, Any], event_date: Optional[str]) -> Dict[str, Any]:
    return {
        "success": True,
        "ticket_sale_id": sale["id"],
        "confirmation_number": confirmation_number(sale["id"]),
        "event_title": sale.get("event_title"),
        "event_date": event_date,
        "quantity": sale["quantity"],
        "total_amount": sale["total_amount"],
        "customer_name": sale["customer_name"],
        "customer_email": sale["customer_email"],
    }


def confirm_ticket_purchase(store: Store, gateway: Gateway, payment_intent_id: str) -> Dict[str, Any]:
    if not payment_intent_id:
        raise ValidationFailed("Payment intent ID is required", code=ERROR_CODE)

    logger.info("Confirming ticket purchase: %s", payment_intent_id)

    intent = gateway.retrieve_intent(payment_intent_id)
    if intent.status != "succeeded":
        raise PaymentFailed("Payment not completed", code=ERROR_CODE)

    metadata = intent.metadata
    event_date = metadata.get("event_date") or None

    try:
        event_id = int(metadata["event_id"])
        quantity = int(metadata["quantity"])
        ticket_price = float(metadata["ticket_price"])
    except (KeyError, ValueError):
        logger.error("Payment intent %s carries no ticket metadata", payment_intent_id)
        raise ValidationFailed("Payment is not a ticket purchase", code=ERROR_CODE)

    sale, created = store.insert_unique("event_ticket_sales", {
        "event_id": event_id,
        "event_title": metadata.get("event_title"),
        "customer_name": metadata.get("customer_name"),
        "customer_email": metadata.get("customer_email"),
        "customer_phone": metadata.get("customer_phone") or None,
        "quantity": quantity,
        "total_amount": round(ticket_price * quantity, 2),
        "stripe_payment_intent_id": payment_intent_id,
        "status": "confirmed",
        "purchase_date": datetime.utcnow(),
    }, "stripe_payment_intent_id")
    if not created:
        logger.info("Payment intent %s already confirmed as sale %s", payment_intent_id, sale["id"])
        return _sale_summary(sale, event_date)
    logger.info("Ticket sale created: %s", sale["id"])

    event = store.increment("events", event_id, "current_attendees", quantity)
    if event is None:
        logger.error("Failed to update attendee count for event %s", event_id)
    elif event.get("max_attendees") and event["current_attendees"] > event["max_attendees"]:
        # capacity is only checked when the intent is created
        logger.warning(
            "Event %s oversold: %s attendees for %s places",
            event_id, event["current_attendees"], event["max_attendees"],
        )

    return _sale_summary(sale, event_date)


def get_ticket_sales(store: Store) -> List[Dict[str, Any]]:
    return store.find("event_ticket_sales", sort="-purchase_date")


def _format_purchase_date(value) -> str:
    if not value:
        return ""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return value.strftime("%d %b %Y, %H:%M")


def export_ticket_sales_csv(sales: List[Dict[str, Any]]) -> str:
    rows = [
        {
            "Confirmation Number": confirmation_number(sale["id"]),
            "Event": sale.get("event_title") or f"Event #{sale.get('event_id')}",
            "Customer Name": sale.get("customer_name"),
            "Customer Email": sale.get("customer_email"),
            "Phone": sale.get("customer_phone") or "N/A",
            "Quantity": sale.get("quantity"),
            "Total Amount": f"£{float(sale.get('total_amount') or 0):.2f}",
            "Status": sale.get("status"),
            "Purchase Date": _format_purchase_date(sale.get("purchase_date")),
        }
        for sale in sales
    ]
    df = pd.DataFrame(rows, columns=CSV_COLUMNS)
    return df.to_csv(index=False, lineterminator="\n")


def export_filename(today: Optional[datetime] = None) -> str:
    today = today or datetime.utcnow()
    return f"ticket-sales-{today.date().isoformat()}.csv"
