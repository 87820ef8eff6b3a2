from decimal import Decimal

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from hotels.models import Hotel, Room

User = get_user_model()

SEED_PASSWORD = "Innkeep123!"
SUPERUSER_EMAIL = "admin@innkeep.test"
SUPERUSER_PASSWORD = "AdminInnkeep123!"

SAMPLE_HOTELS = [
    {
        "name": "Laguna Shoreline Resort",
        "city": "Malibu",
        "address": "123 Pacific Coast Highway",
        "description": "Luxury beachfront resort with stunning ocean views",
        "price_per_night": Decimal("260"),
        "currency": "USD",
    },
    {
        "name": "Skyline Signature",
        "city": "Dubai",
        "address": "456 Sheikh Zayed Road",
        "description": "Premium 5-star hotel in the heart of Dubai",
        "price_per_night": Decimal("340"),
        "currency": "AED",
    },
    {
        "name": "Summit Chalet",
        "city": "Whistler",
        "address": "789 Mountain Way",
        "description": "Cozy mountain retreat perfect for winter getaways",
        "price_per_night": Decimal("210"),
        "currency": "USD",
    },
]


class Command(BaseCommand):
    help = "Populate the local development database with sample hotels, rooms and users."

    def handle(self, *args, **options):
        if not settings.DEBUG:
            raise CommandError("Refusing to seed data while DEBUG is False.")

        with transaction.atomic():
            self.stdout.write(self.style.MIGRATE_HEADING("Creating hotels & rooms"))
            for sample in SAMPLE_HOTELS:
                hotel = self._ensure_hotel(sample)
                room = self._ensure_room(hotel, sample)
                self.stdout.write(
                    f"  {hotel.name}: {room.name} at {room.price_per_night} {room.currency}/night"
                )

            self.stdout.write(self.style.MIGRATE_HEADING("Creating users"))
            guest = self._ensure_user(
                email="guest@innkeep.test",
                first_name="Greta",
                last_name="Guest",
                phone="+201234567890",
            )
            self.stdout.write(f"  {guest.email} / {SEED_PASSWORD}")

            self.stdout.write(self.style.MIGRATE_HEADING("Ensuring admin superuser"))
            self._ensure_superuser()

        self.stdout.write(self.style.SUCCESS("Development data ready."))

    def _ensure_hotel(self, sample) -> Hotel:
        hotel, _ = Hotel.objects.update_or_create(
            name=sample["name"],
            defaults={
                "city": sample["city"],
                "address": sample["address"],
                "description": sample["description"],
            },
        )
        return hotel

    def _ensure_room(self, hotel: Hotel, sample) -> Room:
        room, _ = Room.objects.update_or_create(
            hotel=hotel,
            name="Deluxe Suite",
            defaults={
                "capacity": 2,
                "price_per_night": sample["price_per_night"],
                "currency": sample["currency"],
            },
        )
        return room

    def _ensure_user(self, *, email, first_name, last_name, phone=""):
        user, created = User.objects.get_or_create(
            username=email,
            defaults={
                "email": email,
                "first_name": first_name,
                "last_name": last_name,
                "display_name": f"{first_name} {last_name}",
                "phone": phone,
            },
        )
        if created:
            user.set_password(SEED_PASSWORD)
            user.save(update_fields=["password"])
        return user

    def _ensure_superuser(self):
        user = User.objects.filter(username=SUPERUSER_EMAIL).first()
        if user is None:
            User.objects.create_superuser(
                username=SUPERUSER_EMAIL,
                email=SUPERUSER_EMAIL,
                password=SUPERUSER_PASSWORD,
                display_name="Innkeep Admin",
            )
            self.stdout.write(f"  {SUPERUSER_EMAIL} / {SUPERUSER_PASSWORD}")
        else:
            self.stdout.write(f"  {SUPERUSER_EMAIL} already exists")
