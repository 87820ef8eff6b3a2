from __future__ import annotations

import logging
import math
from datetime import date, datetime

from django.db import transaction

from bookings.models import Booking
from core.exceptions import (
    BookingNotFound,
    InvalidDateRange,
    InvalidInput,
    InvalidState,
    RoomNotFound,
)
from hotels.models import Room

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def count_nights(check_in: date | datetime, check_out: date | datetime) -> int:
    """Whole nights between the two dates, rounding partial days up."""
    delta = check_out - check_in
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def create_booking(*, user, room_id, check_in: date, check_out: date) -> Booking:
    """
    Create a pending booking for ``user``.

    Nights, total amount and currency are always computed from the room; any
    price supplied by the client is ignored.
    """
    if not room_id or not check_in or not check_out:
        raise InvalidInput("room_id, check_in and check_out are required.")

    nights = count_nights(check_in, check_out)
    if nights < 1:
        raise InvalidDateRange()

    try:
        room = Room.objects.select_related("hotel").get(pk=room_id)
    except (Room.DoesNotExist, ValueError, TypeError):
        raise RoomNotFound()

    total_amount = room.price_per_night * nights
    booking = Booking.objects.create_if_available(
        room=room,
        check_in=check_in,
        check_out=check_out,
        user=user,
        nights=nights,
        total_amount=total_amount,
        currency=room.currency,
        status=Booking.PENDING,
    )
    logger.info(
        "Created booking %s for user %s on room %s (%s nights, %s %s)",
        booking.pk,
        user.pk,
        room.pk,
        nights,
        total_amount,
        room.currency,
    )
    return booking


def list_bookings(user):
    return (
        Booking.objects.for_user(user)
        .select_related("room__hotel", "payment")
        .order_by("-created_at", "-id")
    )


def get_booking(*, user, booking_id) -> Booking:
    try:
        return list_bookings(user).get(pk=booking_id)
    except (Booking.DoesNotExist, ValueError, TypeError):
        raise BookingNotFound()


def cancel_booking(*, user, booking_id) -> Booking:
    """Cancel one of the user's own bookings while it is still pending."""
    with transaction.atomic():
        try:
            booking = Booking.objects.select_for_update().get(pk=booking_id, user=user)
        except (Booking.DoesNotExist, ValueError, TypeError):
            raise BookingNotFound()
        if not booking.is_pending:
            raise InvalidState(f"Only pending bookings can be cancelled (status is {booking.status}).")
        booking.cancel()
    logger.info("Booking %s cancelled by user %s", booking.pk, user.pk)
    return booking
