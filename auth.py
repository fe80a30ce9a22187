from __future__ import annotations
import base64
import hashlib
import logging
import secrets
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from database import Store, get_store
from errors import Unauthorized

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode()).hexdigest()


def make_token(email: str) -> str:
    raw = f"{email}:{datetime.utcnow().timestamp()}:{secrets.token_hex(16)}"
    return base64.urlsafe_b64encode(hashlib.sha256(raw.encode()).digest()).decode().rstrip("=")


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": user["id"], "email": user["email"], "name": user.get("name"), "role": user.get("role")}


def login(store: Store, email: str, password: str) -> Dict[str, Any]:
    users = store.find("admin_users", {"email": email}, limit=1)
    if not users or not secrets.compare_digest(users[0].get("password_hash", ""), hash_password(password)):
        logger.warning("Failed admin login for %s", email)
        raise Unauthorized("Invalid credentials", code="INVALID_CREDENTIALS")
    token = make_token(email)
    store.insert("admin_sessions", {"token": token, "email": email})
    logger.info("Admin %s signed in", email)
    return {"token": token, "user": public_user(users[0])}


def user_for_token(store: Store, token: str) -> Optional[Dict[str, Any]]:
    sessions = store.find("admin_sessions", {"token": token}, limit=1)
    if not sessions:
        return None
    users = store.find("admin_users", {"email": sessions[0]["email"]}, limit=1)
    return users[0] if users else None


def require_admin(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
                  store: Store = Depends(get_store)) -> Dict[str, Any]:
    if credentials is None:
        raise Unauthorized("No authorization header")
    user = user_for_token(store, credentials.credentials)
    if user is None:
        raise Unauthorized("Unauthorized access")
    return public_user(user)
