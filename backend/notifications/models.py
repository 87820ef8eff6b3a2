from django.conf import settings
from django.db import models


class Notification(models.Model):
    BOOKING_CONFIRMED = "booking_confirmed"
    PAYMENT_FAILED = "payment_failed"
    TYPES = [
        (BOOKING_CONFIRMED, "Booking confirmed"),
        (PAYMENT_FAILED, "Payment failed"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    type = models.CharField(max_length=40, choices=TYPES)
    title = models.CharField(max_length=200)
    body = models.TextField()
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "read"], name="notification_user_read_idx"),
        ]

    def __str__(self):
        return f"{self.type} → {self.user_id}"
