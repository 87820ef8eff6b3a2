from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction

from bookings.models import Booking
from core.exceptions import AlreadyPaid, BookingNotFound, InvalidState, ProviderError
from payments.models import Payment
from payments.services import paymob

logger = logging.getLogger(__name__)


@dataclass
class PaymentSessionDescriptor:
    payment_key: str
    iframe_url: str
    booking_id: int
    amount: Decimal
    currency: str
    reused: bool = False


def _describe(booking: Booking, payment: Payment, *, reused: bool) -> PaymentSessionDescriptor:
    return PaymentSessionDescriptor(
        payment_key=payment.provider_payment_key,
        iframe_url=paymob.build_checkout_url(payment.provider_payment_key),
        booking_id=booking.pk,
        amount=booking.total_amount,
        currency=booking.currency,
        reused=reused,
    )


def initiate_payment(*, user, booking_id) -> PaymentSessionDescriptor:
    """
    Return a checkout session for one of the user's pending bookings.

    An in-flight session is reused so retried requests never open a second
    provider order. The booking row stays locked until the new session is
    stored, and a provider failure rolls everything back.
    """

    with transaction.atomic():
        try:
            booking = Booking.objects.select_for_update().get(pk=booking_id, user=user)
        except (Booking.DoesNotExist, ValueError, TypeError):
            raise BookingNotFound()

        if booking.status != Booking.PENDING:
            raise InvalidState(f"Booking is not pending (status is {booking.status}).")

        existing = Payment.objects.filter(booking=booking).first()
        if existing is not None:
            if existing.status == Payment.PAID:
                raise AlreadyPaid()
            if existing.has_reusable_session:
                logger.info("Reusing payment session for booking %s", booking.pk)
                return _describe(booking, existing, reused=True)

        amount_cents = paymob.to_minor_units(booking.total_amount)
        try:
            session = paymob.create_payment_session(
                booking=booking,
                amount_cents=amount_cents,
                customer=user,
            )
        except paymob.PaymobError as exc:
            logger.warning("Payment session for booking %s failed: %s", booking.pk, exc)
            raise ProviderError() from exc

        payment, _ = Payment.objects.update_or_create(
            booking=booking,
            defaults={
                "provider": Payment.PROVIDER_PAYMOB,
                "provider_order_id": session.order_id,
                "provider_payment_key": session.payment_key,
                "amount": booking.total_amount,
                "currency": booking.currency,
                "status": Payment.INITIATED,
            },
        )

    logger.info(
        "Initiated payment for booking %s: order %s, %s minor units %s",
        booking.pk,
        session.order_id,
        amount_cents,
        booking.currency,
    )
    return _describe(booking, payment, reused=False)
