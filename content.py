from __future__ import annotations
import base64
import binascii
import logging
import os
import re
import time
from datetime import date
from typing import Any, Dict, Optional

from config import settings
from database import Store
from errors import ValidationFailed

logger = logging.getLogger(__name__)

CONTENT_TYPES = ("all", "events", "blog", "categories", "upcoming", "recent")
UPLOAD_ERROR = "CONTENT_IMAGE_UPLOAD_FAILED"

IMAGE_TARGETS = {
    "event": ("event-images", "events", "image_url"),
    "blog": ("blog-images", "blog_posts", "featured_image"),
}


def get_public_content(store: Store, type: str = "all", limit: int = 10,
                       published_only: bool = False, category: Optional[int] = None,
                       today: Optional[date] = None) -> Dict[str, Any]:
    if type not in CONTENT_TYPES:
        raise ValidationFailed(f"Unknown content type: {type}", code="PUBLIC_CONTENT_ERROR")
    result: Dict[str, Any] = {}

    filters: Dict[str, Any] = {}
    if published_only:
        filters["is_published"] = True
    if category is not None:
        filters["category_id"] = category

    if type in ("events", "all"):
        result["events"] = store.find("events", filters, sort="event_date", limit=limit)

    if type in ("blog", "all"):
        result["blog_posts"] = store.find("blog_posts", filters, sort="-publish_date", limit=limit)

    if type in ("categories", "all"):
        result["event_categories"] = store.find("event_categories", {"is_active": True}, sort="name")
        result["blog_categories"] = store.find("blog_categories", {"is_active": True}, sort="name")

    if type in ("upcoming", "all"):
        cutoff = (today or date.today()).isoformat()
        published = store.find("events", {"is_published": True}, sort="event_date")
        result["upcoming_events"] = [e for e in published if (e.get("event_date") or "") >= cutoff][:5]

    if type in ("recent", "all"):
        result["recent_posts"] = store.find("blog_posts", {"is_published": True}, sort="-publish_date", limit=3)

    return result


def _decode_data_url(image_data: str):
    match = re.match(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<payload>.+)$", image_data, re.DOTALL)
    if not match:
        raise ValidationFailed("Image data must be a base64 data URL", code=UPLOAD_ERROR)
    try:
        payload = base64.b64decode(match.group("payload"), validate=True)
    except binascii.Error:
        raise ValidationFailed("Image data is not valid base64", code=UPLOAD_ERROR)
    return match.group("mime"), payload


def _safe_name(file_name: str) -> str:
    name = os.path.basename(file_name)
    name = re.sub(r"[^A-Za-z0-9._-]+", "-", name).strip("-.")
    if not name:
        raise ValidationFailed("A file name is required", code=UPLOAD_ERROR)
    return name


def upload_content_image(store: Store, image_data: str, file_name: str, type: str,
                         target_id: Optional[int] = None, media_root: Optional[str] = None) -> Dict[str, Any]:
    if not image_data or not file_name or not type:
        raise ValidationFailed("Image data, filename, and type are required", code=UPLOAD_ERROR)
    if type not in IMAGE_TARGETS:
        raise ValidationFailed(f"Unknown image type: {type}", code=UPLOAD_ERROR)

    mime, payload = _decode_data_url(image_data)
    if not mime.startswith("image/"):
        raise ValidationFailed(f"Unsupported file type: {mime}", code=UPLOAD_ERROR)

    bucket, table, column = IMAGE_TARGETS[type]
    unique_name = f"{type}/{int(time.time() * 1000)}-{_safe_name(file_name)}"
    path = os.path.join(media_root or settings.media_root, bucket, unique_name)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as fh:
        fh.write(payload)
    logger.info("Stored %s bytes at %s", len(payload), path)

    public_url = f"{settings.public_base_url}/media/{bucket}/{unique_name}"

    if target_id:
        if store.update(table, target_id, {column: public_url}) is None:
            logger.error("Failed to update %s image URL for %s", type, target_id)

    return {"public_url": public_url, "file_name": unique_name}
