import pytest

from notifications.models import Notification
from notifications.services import notify_booking_confirmed, notify_payment_failed


@pytest.fixture
def inbox(guest, other_guest, make_booking):
    booking = make_booking()
    return {
        "confirmed": notify_booking_confirmed(booking),
        "failed": notify_payment_failed(booking),
        "foreign": notify_booking_confirmed(make_booking(user=other_guest)),
    }


@pytest.mark.django_db
def test_list_shows_own_notifications_newest_first(auth_client, inbox):
    response = auth_client.get("/api/notifications/")

    assert response.status_code == 200
    assert [row["id"] for row in response.json()] == [inbox["failed"].id, inbox["confirmed"].id]
    assert response.json()[0]["type"] == "payment_failed"
    assert response.json()[0]["read"] is False


@pytest.mark.django_db
def test_list_filters_by_read_flag(auth_client, inbox):
    Notification.objects.filter(pk=inbox["confirmed"].pk).update(read=True)

    response = auth_client.get("/api/notifications/", {"read": "false"})

    assert [row["id"] for row in response.json()] == [inbox["failed"].id]


@pytest.mark.django_db
def test_mark_single_notification_read(auth_client, inbox):
    response = auth_client.post(
        "/api/notifications/mark-read/",
        {"notification_id": inbox["confirmed"].id},
        format="json",
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "updated": 1}
    assert Notification.objects.get(pk=inbox["confirmed"].pk).read is True
    assert Notification.objects.get(pk=inbox["failed"].pk).read is False


@pytest.mark.django_db
def test_mark_all_read_leaves_other_users_untouched(auth_client, inbox):
    response = auth_client.post("/api/notifications/mark-read/", {}, format="json")

    assert response.json() == {"success": True, "updated": 2}
    assert Notification.objects.get(pk=inbox["foreign"].pk).read is False


@pytest.mark.django_db
def test_cannot_mark_someone_elses_notification(auth_client, inbox):
    response = auth_client.post(
        "/api/notifications/mark-read/",
        {"notification_id": inbox["foreign"].id},
        format="json",
    )

    assert response.json()["updated"] == 0
    assert Notification.objects.get(pk=inbox["foreign"].pk).read is False
