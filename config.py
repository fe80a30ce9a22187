from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

PLACEHOLDER_MARKERS = ("your-", "your_", "changeme", "placeholder", "xxx")


def _clean(value: Optional[str]) -> Optional[str]:
    # empty strings and template values from .env.example count as unset
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    lowered = value.lower()
    if any(marker in lowered for marker in PLACEHOLDER_MARKERS):
        return None
    return value


def _flag(value: Optional[str]) -> Optional[bool]:
    if value is None or not value.strip():
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str]
    database_name: str
    stripe_secret_key: Optional[str]
    stripe_publishable_key: Optional[str]
    currency: str
    admin_email: str
    admin_password: str
    media_root: str
    public_base_url: str
    log_level: str
    port: int
    force_backend: Optional[bool] = None

    @property
    def backend_available(self) -> bool:
        if self.force_backend is not None:
            return self.force_backend
        return self.database_url is not None

    @property
    def payments_enabled(self) -> bool:
        return self.stripe_secret_key is not None


def load_settings() -> Settings:
    return Settings(
        database_url=_clean(os.getenv("DATABASE_URL")),
        database_name=os.getenv("DATABASE_NAME", "cliftons_coffee"),
        stripe_secret_key=_clean(os.getenv("STRIPE_SECRET_KEY")),
        stripe_publishable_key=_clean(os.getenv("STRIPE_PUBLISHABLE_KEY")),
        currency=os.getenv("PAYMENT_CURRENCY", "gbp").lower(),
        admin_email=os.getenv("ADMIN_EMAIL", "admin@cliftonscoffee.com"),
        admin_password=os.getenv("ADMIN_PASSWORD", "admin123"),
        media_root=os.getenv("MEDIA_ROOT", "media"),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "").rstrip("/"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        port=int(os.getenv("PORT", 8000)),
        force_backend=_flag(os.getenv("BACKEND_AVAILABLE")),
    )


settings = load_settings()
