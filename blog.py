from __future__ import annotations
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from database import Store
from errors import NotFound
from events import DEFAULT_COLOR, generate_slug

ERROR_CODE = "BLOG_MANAGEMENT_ERROR"
DEFAULT_AUTHOR = "Clifton's Coffee Shop"
WORDS_PER_MINUTE = 200


def reading_time(content: str) -> int:
    words = len(content.split())
    return math.ceil(words / WORDS_PER_MINUTE)


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # stored datetimes are naive UTC, like datetime.utcnow()
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def get_blog_posts(store: Store) -> List[Dict[str, Any]]:
    return store.find("blog_posts", sort="-publish_date")


def get_blog_categories(store: Store) -> List[Dict[str, Any]]:
    return store.find("blog_categories", sort="name")


def create_blog_post(store: Store, data: Dict[str, Any]) -> Dict[str, Any]:
    content = data.get("content") or ""
    return store.insert("blog_posts", {
        "title": data["title"],
        "slug": generate_slug(data["title"]),
        "content": content,
        "excerpt": data.get("excerpt"),
        "featured_image": data.get("featured_image"),
        "category_id": data.get("category_id"),
        "is_published": bool(data.get("is_published", False)),
        "publish_date": naive_utc(data.get("publish_date")) or datetime.utcnow(),
        "author_name": data.get("author_name") or DEFAULT_AUTHOR,
        "meta_title": data.get("meta_title") or data["title"],
        "meta_description": data.get("meta_description") or data.get("excerpt"),
        "reading_time": reading_time(content),
    })


def update_blog_post(store: Store, post_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
    update = dict(changes)
    if changes.get("publish_date") is not None:
        update["publish_date"] = naive_utc(changes["publish_date"])
    if changes.get("title"):
        update["slug"] = generate_slug(changes["title"])
        update["meta_title"] = changes.get("meta_title") or changes["title"]
    if changes.get("content") is not None:
        update["reading_time"] = reading_time(changes["content"])
    if changes.get("excerpt") is not None and not changes.get("meta_description"):
        update["meta_description"] = changes["excerpt"]

    updated = store.update("blog_posts", post_id, update)
    if updated is None:
        raise NotFound("Failed to update blog post", code=ERROR_CODE)
    return updated


def delete_blog_post(store: Store, post_id: int) -> Dict[str, Any]:
    if not store.delete("blog_posts", post_id):
        raise NotFound("Failed to delete blog post", code=ERROR_CODE)
    return {"success": True}


def create_blog_category(store: Store, data: Dict[str, Any]) -> Dict[str, Any]:
    return store.insert("blog_categories", {
        "name": data["name"],
        "slug": generate_slug(data["name"]),
        "description": data.get("description"),
        "color": data.get("color") or DEFAULT_COLOR,
        "is_active": True,
    })
