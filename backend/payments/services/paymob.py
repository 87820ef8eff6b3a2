from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional
from uuid import uuid4

import requests
from django.conf import settings

from bookings.models import Booking

logger = logging.getLogger(__name__)

BILLING_PLACEHOLDER = "NA"


class PaymobError(Exception):
    """Raised when a call to the Paymob Accept API fails or returns an unusable body."""


@dataclass
class PaymentSession:
    order_id: str
    payment_key: str
    checkout_url: str


def to_minor_units(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_checkout_url(payment_key: str) -> str:
    base_url = settings.PAYMOB_BASE_URL.rstrip("/")
    return f"{base_url}/api/acceptance/iframes/{settings.PAYMOB_IFRAME_ID}?payment_token={payment_key}"


def _get_api_key() -> Optional[str]:
    key = getattr(settings, "PAYMOB_API_KEY", "")
    return key or None


def _should_use_stub() -> bool:
    if getattr(settings, "PAYMOB_USE_STUB", False):
        return True
    return _get_api_key() is None


def _post(path: str, payload: Dict[str, Any], *, expect: str) -> Dict[str, Any]:
    url = f"{settings.PAYMOB_BASE_URL.rstrip('/')}{path}"
    try:
        response = requests.post(url, json=payload, timeout=settings.PAYMOB_REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        raise PaymobError(f"Paymob request to {path} failed: {exc}") from exc

    try:
        body = response.json()
    except ValueError:
        body = {}

    if response.status_code >= 400 or not isinstance(body, dict) or not body.get(expect):
        logger.warning("Paymob %s returned %s: %s", path, response.status_code, body)
        raise PaymobError(f"Paymob {path} returned {response.status_code} without {expect!r}.")
    return body


def authenticate() -> str:
    """Exchange the merchant API key for a short-lived auth token."""
    api_key = _get_api_key()
    if not api_key:
        raise PaymobError("PAYMOB_API_KEY is not configured.")
    body = _post("/api/auth/tokens", {"api_key": api_key}, expect="token")
    return body["token"]


def create_order(*, auth_token: str, booking: Booking, amount_cents: int) -> str:
    """Register an order whose merchant_order_id is the booking id (the webhook join key)."""
    body = _post(
        "/api/ecommerce/orders",
        {
            "auth_token": auth_token,
            "delivery_needed": "false",
            "amount_cents": amount_cents,
            "currency": booking.currency,
            "merchant_order_id": str(booking.pk),
            "items": [],
        },
        expect="id",
    )
    return str(body["id"])


def build_billing_data(user) -> Dict[str, str]:
    # Paymob rejects payment keys without a full billing block.
    email = getattr(user, "email", "") or "customer@example.com"
    return {
        "apartment": BILLING_PLACEHOLDER,
        "email": email,
        "floor": BILLING_PLACEHOLDER,
        "first_name": getattr(user, "first_name", "") or email.split("@")[0],
        "street": BILLING_PLACEHOLDER,
        "building": BILLING_PLACEHOLDER,
        "phone_number": getattr(user, "phone", "") or BILLING_PLACEHOLDER,
        "shipping_method": BILLING_PLACEHOLDER,
        "postal_code": BILLING_PLACEHOLDER,
        "city": BILLING_PLACEHOLDER,
        "country": BILLING_PLACEHOLDER,
        "last_name": getattr(user, "last_name", "") or "Customer",
        "state": BILLING_PLACEHOLDER,
    }


def create_payment_key(
    *,
    auth_token: str,
    order_id: str,
    booking: Booking,
    amount_cents: int,
    billing_data: Dict[str, str],
) -> str:
    body = _post(
        "/api/acceptance/payment_keys",
        {
            "auth_token": auth_token,
            "amount_cents": amount_cents,
            "expiration": settings.PAYMOB_PAYMENT_KEY_EXPIRATION,
            "order_id": order_id,
            "billing_data": billing_data,
            "currency": booking.currency,
            "integration_id": settings.PAYMOB_INTEGRATION_ID,
        },
        expect="token",
    )
    return body["token"]


def _stub_payment_session(*, booking: Booking) -> PaymentSession:
    payment_key = f"pk_test_{uuid4().hex}"
    return PaymentSession(
        order_id=f"order_test_{booking.pk}_{uuid4().hex[:8]}",
        payment_key=payment_key,
        checkout_url=build_checkout_url(payment_key),
    )


def create_payment_session(*, booking: Booking, amount_cents: int, customer) -> PaymentSession:
    """
    Run the three Paymob calls (auth token, order, payment key) for a booking.

    In stub mode no request leaves the process; predictable identifiers are
    returned so the rest of the flow behaves as if Paymob responded.
    """

    if _should_use_stub():
        return _stub_payment_session(booking=booking)

    auth_token = authenticate()
    order_id = create_order(auth_token=auth_token, booking=booking, amount_cents=amount_cents)
    payment_key = create_payment_key(
        auth_token=auth_token,
        order_id=order_id,
        booking=booking,
        amount_cents=amount_cents,
        billing_data=build_billing_data(customer),
    )
    logger.info("Created Paymob order %s for booking %s", order_id, booking.pk)
    return PaymentSession(
        order_id=order_id,
        payment_key=payment_key,
        checkout_url=build_checkout_url(payment_key),
    )
