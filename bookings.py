from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from email_validator import EmailNotValidError, validate_email

from database import Store
from errors import NotFound, ValidationFailed
from orders import check_transition

logger = logging.getLogger(__name__)

ERROR_CODE = "BOOKING_FAILED"
MAX_PARTY_SIZE = 20
SLOT_CAPACITY = 50

BOOKING_TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}


def _parse_slot(booking_date: str, booking_time: str) -> datetime:
    for fmt in ("%Y-%m-%d %H:%M", "%Y-%m-%d %H:%M:%S"):
        try:
            return datetime.strptime(f"{booking_date} {booking_time}", fmt)
        except ValueError:
            continue
    raise ValidationFailed("Invalid date or time format", code=ERROR_CODE)


def booked_covers(store: Store, booking_date: str, booking_time: str) -> int:
    bookings = store.find("table_bookings", {"booking_date": booking_date, "booking_time": booking_time})
    return sum(b.get("party_size") or 0 for b in bookings if b.get("status") != "cancelled")


def create_table_booking(store: Store, customer_name: str, customer_email: str, party_size: int,
                         booking_date: str, booking_time: str, customer_phone: Optional[str] = None,
                         special_requests: Optional[str] = None,
                         now: Optional[datetime] = None) -> Dict[str, Any]:
    logger.info("Table booking request received: email=%s party=%s date=%s time=%s",
                customer_email, party_size, booking_date, booking_time)

    if not customer_name or not customer_email or not party_size or not booking_date or not booking_time:
        raise ValidationFailed(
            "Customer name, email, party size, booking date, and time are required", code=ERROR_CODE
        )
    if party_size < 1 or party_size > MAX_PARTY_SIZE:
        raise ValidationFailed("Party size must be between 1 and 20 people", code=ERROR_CODE)
    try:
        validate_email(customer_email, check_deliverability=False)
    except EmailNotValidError:
        raise ValidationFailed("Please provide a valid email address", code=ERROR_CODE)

    slot = _parse_slot(booking_date, booking_time)
    if slot < (now or datetime.now()):
        raise ValidationFailed("Booking date and time must be in the future", code=ERROR_CODE)

    if booked_covers(store, booking_date, booking_time) + party_size > SLOT_CAPACITY:
        raise ValidationFailed(
            "Sorry, we do not have enough capacity available for your requested time. "
            "Please choose a different time.",
            code=ERROR_CODE,
        )

    booking = store.insert("table_bookings", {
        "customer_name": customer_name,
        "customer_email": customer_email,
        "customer_phone": customer_phone or None,
        "party_size": party_size,
        "booking_date": booking_date,
        "booking_time": booking_time,
        "status": "pending",
        "special_requests": special_requests or None,
    })
    logger.info("Booking created successfully: %s", booking["id"])

    return {
        "booking_id": booking["id"],
        "customer_name": customer_name,
        "customer_email": customer_email,
        "party_size": party_size,
        "booking_date": booking_date,
        "booking_time": booking_time,
        "status": "pending",
        "message": "Your table booking has been submitted and is pending approval. "
                   "We will confirm your reservation shortly.",
    }


def list_bookings(store: Store, booking_date: Optional[str] = None, limit: int = 50) -> List[Dict[str, Any]]:
    filters = {"booking_date": booking_date} if booking_date else None
    return store.find("table_bookings", filters, sort=["booking_date", "booking_time"], limit=limit)


def update_booking_status(store: Store, booking_id: int, status: str) -> Dict[str, Any]:
    booking = store.get("table_bookings", booking_id)
    if booking is None:
        raise NotFound("Booking not found", code="BOOKING_NOT_FOUND")
    check_transition(BOOKING_TRANSITIONS, booking["status"], status, "BOOKING_STATUS_ERROR")
    logger.info("Booking %s: %s -> %s", booking_id, booking["status"], status)
    return store.update("table_bookings", booking_id, {"status": status})
