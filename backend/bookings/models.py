from __future__ import annotations

import logging

from django.conf import settings
from django.db import IntegrityError, models, transaction

from core.exceptions import RoomUnavailable

logger = logging.getLogger(__name__)


class BookingQuerySet(models.QuerySet):
    def for_user(self, user):
        return self.filter(user=user)

    def confirmed(self):
        return self.filter(status=Booking.CONFIRMED)

    def overlapping(self, check_in, check_out, *, room=None, exclude=None):
        """
        Confirmed bookings whose [check_in, check_out) range intersects the candidate range.

        Touching ranges (one check-out equal to the other's check-in) do not overlap.
        The same predicate is enforced by the storage triggers in migration 0002.
        """
        queryset = self.confirmed().filter(check_in__lt=check_out, check_out__gt=check_in)
        if room is not None:
            queryset = queryset.filter(room=room)
        if exclude is not None:
            queryset = queryset.exclude(pk=getattr(exclude, "pk", exclude))
        return queryset


class BookingManager(models.Manager.from_queryset(BookingQuerySet)):
    def create_if_available(self, *, room, check_in, check_out, **fields) -> "Booking":
        """Insert a booking unless a confirmed booking already covers part of the range."""
        from hotels.models import Room

        with transaction.atomic():
            # Serializes concurrent inserts for the same room on backends with row locks.
            Room.objects.select_for_update().filter(pk=room.pk).first()
            if self.overlapping(check_in, check_out, room=room).exists():
                raise RoomUnavailable()
            try:
                with transaction.atomic():
                    return self.create(room=room, check_in=check_in, check_out=check_out, **fields)
            except IntegrityError as exc:
                logger.warning("Overlap trigger rejected booking on room %s: %s", room.pk, exc)
                raise RoomUnavailable() from exc


class Booking(models.Model):
    """A user's reservation of a room for a date range."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    STATUSES = [
        (PENDING, "Pending"),
        (CONFIRMED, "Confirmed"),
        (CANCELLED, "Cancelled"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    room = models.ForeignKey("hotels.Room", on_delete=models.CASCADE, related_name="bookings")
    check_in = models.DateField()
    check_out = models.DateField()
    nights = models.PositiveIntegerField()
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="EGP")
    status = models.CharField(max_length=12, choices=STATUSES, default=PENDING)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = BookingManager()

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["room", "status"], name="booking_room_status_idx"),
            models.Index(fields=["user", "created_at"], name="booking_user_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_check_out_after_check_in",
            ),
            models.CheckConstraint(
                condition=models.Q(nights__gt=0),
                name="booking_nights_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=0),
                name="booking_total_amount_non_negative",
            ),
        ]

    def __str__(self):
        return f"Booking #{self.pk} {self.room_id} {self.check_in}→{self.check_out} ({self.status})"

    @property
    def is_pending(self) -> bool:
        return self.status == self.PENDING

    def confirm(self):
        """Mark confirmed; raises RoomUnavailable when another confirmed booking overlaps."""
        if Booking.objects.overlapping(
            self.check_in, self.check_out, room=self.room_id, exclude=self
        ).exists():
            raise RoomUnavailable()
        self.status = self.CONFIRMED
        try:
            with transaction.atomic():
                self.save(update_fields=["status"])
        except IntegrityError as exc:
            self.status = self.PENDING
            raise RoomUnavailable() from exc

    def cancel(self):
        self.status = self.CANCELLED
        self.save(update_fields=["status"])
