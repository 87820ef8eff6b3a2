from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from bookings.models import Booking
from hotels.models import Hotel, Room

User = get_user_model()


@pytest.fixture
def guest(db):
    return User.objects.create_user(
        username="guest@example.com",
        email="guest@example.com",
        password="examplepass",
        first_name="Greta",
        last_name="Guest",
        phone="+201000000000",
    )


@pytest.fixture
def other_guest(db):
    return User.objects.create_user(
        username="other@example.com",
        email="other@example.com",
        password="examplepass",
    )


@pytest.fixture
def hotel(db):
    return Hotel.objects.create(
        name="Laguna Shoreline Resort",
        city="Malibu",
        address="123 Pacific Coast Highway",
    )


@pytest.fixture
def room(hotel):
    return Room.objects.create(
        hotel=hotel,
        name="Deluxe Suite",
        capacity=2,
        price_per_night=Decimal("260"),
        currency="USD",
    )


@pytest.fixture
def auth_client(guest):
    client = APIClient()
    client.force_authenticate(guest)
    return client


@pytest.fixture
def make_booking(guest, room):
    """Insert a booking row directly, bypassing the lifecycle service."""

    def _make(*, check_in=date(2024, 3, 1), check_out=date(2024, 3, 4), status=Booking.PENDING, user=None, target_room=None):
        target_room = target_room or room
        nights = (check_out - check_in).days
        return Booking.objects.create(
            user=user or guest,
            room=target_room,
            check_in=check_in,
            check_out=check_out,
            nights=nights,
            total_amount=target_room.price_per_night * nights,
            currency=target_room.currency,
            status=status,
        )

    return _make
