from notifications.models import Notification


def notify_booking_confirmed(booking) -> Notification:
    return Notification.objects.create(
        user_id=booking.user_id,
        type=Notification.BOOKING_CONFIRMED,
        title="Booking Confirmed",
        body=f"Your booking has been confirmed. Reference: {booking.pk}",
    )


def notify_payment_failed(booking) -> Notification:
    return Notification.objects.create(
        user_id=booking.user_id,
        type=Notification.PAYMENT_FAILED,
        title="Payment Failed",
        body=f"Payment failed for booking {booking.pk}. You can retry.",
    )


def mark_read(*, user, notification_id=None) -> int:
    """Mark one notification (or all of the user's notifications) as read."""
    queryset = Notification.objects.filter(user=user, read=False)
    if notification_id is not None:
        queryset = queryset.filter(pk=notification_id)
    return queryset.update(read=True)
