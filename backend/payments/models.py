from django.db import models


class Payment(models.Model):
    """Provider-side payment attempt for a booking; at most one row per booking."""

    INITIATED = "initiated"
    PAID = "paid"
    FAILED = "failed"
    STATUSES = [
        (INITIATED, "Initiated"),
        (PAID, "Paid"),
        (FAILED, "Failed"),
    ]

    PROVIDER_PAYMOB = "paymob"

    booking = models.OneToOneField("bookings.Booking", on_delete=models.CASCADE, related_name="payment")
    provider = models.CharField(max_length=30, default=PROVIDER_PAYMOB)
    provider_order_id = models.CharField(max_length=64, blank=True)
    provider_payment_key = models.TextField(blank=True)
    provider_transaction_id = models.CharField(max_length=64, blank=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="EGP")
    status = models.CharField(max_length=12, choices=STATUSES, default=INITIATED)
    raw = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gte=0),
                name="payment_amount_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.provider} payment for booking #{self.booking_id} ({self.status})"

    @property
    def has_reusable_session(self) -> bool:
        return self.status == self.INITIATED and bool(self.provider_payment_key)
