from __future__ import annotations
import logging
import secrets
import threading
from typing import Dict, Optional, Union

import stripe
from pydantic import BaseModel, Field

from config import settings
from errors import NotFound, PaymentFailed

logger = logging.getLogger(__name__)

_gateway = None


def to_minor_units(amount: float) -> int:
    return int(round(amount * 100))


class PaymentIntent(BaseModel):
    id: str
    client_secret: Optional[str] = None
    status: str
    amount: int = Field(..., ge=0, description="Amount in minor currency units")
    currency: str
    metadata: Dict[str, str] = Field(default_factory=dict)


def _stringify(metadata: Dict[str, object]) -> Dict[str, str]:
    # the processor only stores string metadata values
    return {k: "" if v is None else str(v) for k, v in metadata.items()}


class StripeGateway:
    def __init__(self, secret_key: str):
        self.secret_key = secret_key

    def create_intent(self, amount: int, currency: str, metadata: Dict[str, object]) -> PaymentIntent:
        try:
            intent = stripe.PaymentIntent.create(
                api_key=self.secret_key,
                amount=amount,
                currency=currency,
                payment_method_types=["card"],
                metadata=_stringify(metadata),
            )
        except stripe.StripeError as e:
            logger.error("Stripe API error creating payment intent: %s", e)
            raise PaymentFailed(f"Payment setup failed: {e.user_message or e}", status_code=502)
        logger.info("Payment intent created: %s", intent["id"])
        return self._convert(intent)

    def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id, api_key=self.secret_key)
        except stripe.InvalidRequestError as e:
            logger.error("Unknown payment intent %s: %s", intent_id, e)
            raise NotFound("Failed to verify payment", code="PAYMENT_NOT_FOUND")
        except stripe.StripeError as e:
            logger.error("Stripe API error retrieving %s: %s", intent_id, e)
            raise PaymentFailed("Failed to verify payment", status_code=502)
        return self._convert(intent)

    @staticmethod
    def _convert(intent) -> PaymentIntent:
        return PaymentIntent(
            id=intent["id"],
            client_secret=intent.get("client_secret"),
            status=intent["status"],
            amount=intent["amount"],
            currency=intent["currency"],
            metadata=dict(intent.get("metadata") or {}),
        )


class DemoGateway:
    """Stands in for the card processor when no secret key is configured.

    Intents start as ``requires_payment_method``; ``mark_succeeded`` plays the
    part of the customer completing card entry.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._intents: Dict[str, PaymentIntent] = {}

    def create_intent(self, amount: int, currency: str, metadata: Dict[str, object]) -> PaymentIntent:
        intent_id = f"pi_demo_{secrets.token_hex(8)}"
        intent = PaymentIntent(
            id=intent_id,
            client_secret=f"{intent_id}_secret_{secrets.token_hex(8)}",
            status="requires_payment_method",
            amount=amount,
            currency=currency,
            metadata=_stringify(metadata),
        )
        with self._lock:
            self._intents[intent_id] = intent
        logger.info("Demo payment intent created: %s", intent_id)
        return intent.model_copy()

    def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        with self._lock:
            intent = self._intents.get(intent_id)
        if intent is None:
            raise NotFound("Failed to verify payment", code="PAYMENT_NOT_FOUND")
        return intent.model_copy()

    def mark_succeeded(self, intent_id: str) -> PaymentIntent:
        return self._set_status(intent_id, "succeeded")

    def mark_failed(self, intent_id: str) -> PaymentIntent:
        return self._set_status(intent_id, "requires_payment_method")

    def _set_status(self, intent_id: str, status: str) -> PaymentIntent:
        with self._lock:
            intent = self._intents.get(intent_id)
            if intent is None:
                raise NotFound("Failed to verify payment", code="PAYMENT_NOT_FOUND")
            intent = intent.model_copy(update={"status": status})
            self._intents[intent_id] = intent
        return intent.model_copy()


Gateway = Union[StripeGateway, DemoGateway]


def create_gateway() -> Gateway:
    if settings.payments_enabled:
        return StripeGateway(settings.stripe_secret_key)
    logger.warning("STRIPE_SECRET_KEY not configured; card payments run in demo mode")
    return DemoGateway()


def get_gateway() -> Gateway:
    global _gateway
    if _gateway is None:
        _gateway = create_gateway()
    return _gateway
