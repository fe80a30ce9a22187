from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from database import Store
from errors import NotFound, ValidationFailed

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "Website Contact"


def log_activity(store: Store, admin_email: str, action_type: str, description: str,
                 target_type: str, target_id: Optional[int]) -> None:
    store.insert("admin_activity_log", {
        "admin_email": admin_email,
        "action_type": action_type,
        "action_description": description,
        "target_type": target_type,
        "target_id": target_id,
    })


def submit_contact_message(store: Store, name: str, email: str, message: str,
                           phone: Optional[str] = None, subject: Optional[str] = None) -> Dict[str, Any]:
    if not name or not email or not message:
        raise ValidationFailed("Name, email, and message are required", code="CONTACT_FORM_ERROR")
    saved = store.insert("messages", {
        "name": name,
        "email": email,
        "phone": phone or None,
        "subject": subject or DEFAULT_SUBJECT,
        "message": message,
        "status": "new",
        "reply_message": None,
        "replied_at": None,
    })
    log_activity(store, "system", "message_received", f"New contact message from {email}", "message", saved["id"])
    logger.info("Contact message %s received from %s", saved["id"], email)
    return {"success": True, "message": "Message sent successfully", "id": saved["id"]}


def list_messages(store: Store, page: int = 1, limit: int = 50, status: Optional[str] = None) -> Dict[str, Any]:
    page = max(page, 1)
    filters = {"status": status} if status and status != "all" else None
    data = store.find("messages", filters, sort="-created_at", limit=limit, skip=(page - 1) * limit)
    total = store.count("messages", filters)
    return {"data": data, "total": total, "page": page, "limit": limit}


def get_message(store: Store, message_id: int) -> Dict[str, Any]:
    message = store.get("messages", message_id)
    if message is None:
        raise NotFound("Message not found", code="MESSAGE_NOT_FOUND")
    return message


def update_message(store: Store, message_id: int, status: Optional[str] = None,
                   reply_message: Optional[str] = None, admin_email: Optional[str] = None) -> Dict[str, Any]:
    changes: Dict[str, Any] = {}
    if status:
        changes["status"] = status
    if reply_message:
        changes["reply_message"] = reply_message
        changes["replied_at"] = datetime.utcnow()
        changes["status"] = "replied"
    if not changes:
        raise ValidationFailed("Nothing to update", code="MESSAGE_UPDATE_ERROR")

    updated = store.update("messages", message_id, changes)
    if updated is None:
        raise NotFound("Message not found", code="MESSAGE_NOT_FOUND")

    if reply_message:
        log_activity(store, admin_email or "admin", "message_replied",
                     f"Replied to message from {updated['email']}", "message", message_id)
    else:
        log_activity(store, admin_email or "admin", "message_updated",
                     f"Updated message status to {status}", "message", message_id)
    return updated
