"""
Paymob transaction callbacks: HMAC verification and booking/payment reconciliation.

Paymob delivers the same transaction object two ways: a POST webhook whose
JSON body nests it under ``obj``, and a GET redirect whose query string
flattens nested keys (``source_data.pan``, ``order``). Both shapes go
through ``handle_callback``.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from django.conf import settings
from django.db import transaction

from bookings.models import Booking
from core.exceptions import InvalidInput, PaymentNotFound, RoomUnavailable, SignatureMismatch
from notifications.services import notify_booking_confirmed, notify_payment_failed
from payments.models import Payment

logger = logging.getLogger(__name__)

# Order is fixed by Paymob; each entry lists the nested path first, then the flattened fallback.
HMAC_FIELDS = (
    ("amount_cents",),
    ("created_at",),
    ("currency",),
    ("error_occured",),
    ("has_parent_transaction",),
    ("id",),
    ("integration_id",),
    ("is_3d_secure",),
    ("is_auth",),
    ("is_capture",),
    ("is_refunded",),
    ("is_standalone_payment",),
    ("is_voided",),
    ("order.id", "order"),
    ("owner",),
    ("pending",),
    ("source_data.pan",),
    ("source_data.sub_type",),
    ("source_data.type",),
    ("success",),
)

MERCHANT_ORDER_PATHS = ("order.merchant_order_id", "merchant_order_id")


@dataclass
class ReconcileOutcome:
    booking_id: int
    payment_status: str
    booking_status: str
    replayed: bool
    signature_valid: bool


def extract_transaction(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    obj = payload.get("obj")
    return obj if isinstance(obj, Mapping) else payload


def _lookup(data: Mapping[str, Any], path: str) -> Any:
    if path in data:
        return data[path]
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def _first_value(data: Mapping[str, Any], paths) -> Any:
    for path in paths:
        value = _lookup(data, path)
        if value is not None and not isinstance(value, Mapping):
            return value
    return None


def _as_text(value: Any) -> str:
    """Render a value the way Paymob does before hashing (JavaScript ``toString``)."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def signature_message(transaction_data: Mapping[str, Any]) -> str:
    return "".join(_as_text(_first_value(transaction_data, paths)) for paths in HMAC_FIELDS)


def compute_signature(transaction_data: Mapping[str, Any], secret: str) -> str:
    message = signature_message(transaction_data)
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha512).hexdigest()


def verify_signature(transaction_data: Mapping[str, Any], received: Optional[str], secret: str) -> bool:
    if not received or not secret:
        return False
    expected = compute_signature(transaction_data, secret)
    return hmac.compare_digest(expected, received.strip().lower())


def _merchant_booking_id(transaction_data: Mapping[str, Any]) -> int:
    merchant_order_id = _first_value(transaction_data, MERCHANT_ORDER_PATHS)
    if merchant_order_id in (None, ""):
        raise InvalidInput("Callback is missing merchant_order_id.")
    try:
        return int(str(merchant_order_id))
    except ValueError:
        logger.warning("Callback carries unknown merchant_order_id %r", merchant_order_id)
        raise PaymentNotFound()


def handle_callback(payload: Mapping[str, Any], signature: Optional[str]) -> ReconcileOutcome:
    """
    Verify a Paymob transaction callback and apply it to the booking and payment.

    Payment update, booking update and notification insert happen in a single
    transaction. Redelivered callbacks for a settled payment are no-ops.
    """

    transaction_data = extract_transaction(payload)
    signature_valid = verify_signature(transaction_data, signature, settings.PAYMOB_HMAC_SECRET)
    if not signature_valid:
        if not settings.PAYMOB_HMAC_SOFT_FAIL:
            logger.warning("Rejected Paymob callback with invalid signature (transaction %s)", transaction_data.get("id"))
            raise SignatureMismatch()
        logger.error(
            "HMAC mismatch on Paymob callback (transaction %s); processing anyway because PAYMOB_HMAC_SOFT_FAIL is set",
            transaction_data.get("id"),
        )

    booking_id = _merchant_booking_id(transaction_data)
    succeeded = _as_bool(transaction_data.get("success"))

    with transaction.atomic():
        # Booking before payment, the same order initiate_payment locks them in.
        booking = Booking.objects.select_for_update().filter(pk=booking_id).first()
        payment = None
        if booking is not None:
            payment = Payment.objects.select_for_update().filter(booking=booking).first()
        if payment is None:
            logger.warning("No payment found for Paymob order with merchant_order_id %s", booking_id)
            raise PaymentNotFound()

        replayed = payment.status == Payment.PAID or (
            payment.status == Payment.FAILED and not succeeded
        )
        if replayed:
            logger.info("Ignoring replayed callback for booking %s (payment %s)", booking_id, payment.status)
        elif succeeded:
            _apply_success(payment, booking, transaction_data)
        else:
            _apply_failure(payment, booking, transaction_data)

    return ReconcileOutcome(
        booking_id=booking_id,
        payment_status=payment.status,
        booking_status=booking.status,
        replayed=replayed,
        signature_valid=signature_valid,
    )


def _record(payment: Payment, status: str, transaction_data: Mapping[str, Any]):
    payment.status = status
    payment.raw = dict(transaction_data)
    transaction_id = transaction_data.get("id")
    if transaction_id is not None:
        payment.provider_transaction_id = str(transaction_id)
    payment.save(update_fields=["status", "raw", "provider_transaction_id", "updated_at"])


def _apply_success(payment: Payment, booking: Booking, transaction_data: Mapping[str, Any]):
    _record(payment, Payment.PAID, transaction_data)
    if not booking.is_pending:
        # Charged after the guest cancelled; needs a manual refund.
        logger.warning(
            "Payment captured for booking %s in status %s; booking left unchanged",
            booking.pk,
            booking.status,
        )
        return
    try:
        booking.confirm()
    except RoomUnavailable:
        # Payment stays paid, so initiate_payment answers AlreadyPaid for this booking.
        logger.error(
            "Payment captured for booking %s but the room is taken for those dates; "
            "booking left pending, needs a manual refund (transaction %s)",
            booking.pk,
            transaction_data.get("id"),
        )
        return
    notify_booking_confirmed(booking)
    logger.info("Booking %s confirmed by Paymob transaction %s", booking.pk, transaction_data.get("id"))


def _apply_failure(payment: Payment, booking: Booking, transaction_data: Mapping[str, Any]):
    _record(payment, Payment.FAILED, transaction_data)
    notify_payment_failed(booking)
    logger.info("Payment failed for booking %s (transaction %s)", booking.pk, transaction_data.get("id"))
