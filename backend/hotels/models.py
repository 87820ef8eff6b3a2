from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class Hotel(models.Model):
    name = models.CharField(max_length=200)
    city = models.CharField(max_length=120)
    address = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.city})"


class Room(models.Model):
    """A bookable room; price and currency are copied onto each booking at creation."""

    hotel = models.ForeignKey("Hotel", on_delete=models.CASCADE, related_name="rooms")
    name = models.CharField(max_length=120)
    capacity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    price_per_night = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    currency = models.CharField(max_length=3, default="EGP")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["hotel__name", "name", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price_per_night__gte=0),
                name="room_price_per_night_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(capacity__gte=1),
                name="room_capacity_positive",
            ),
        ]

    def __str__(self):
        return f"{self.hotel.name} · {self.name}"
