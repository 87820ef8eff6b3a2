from datetime import date

import pytest
from django.db import connection
from django.test.utils import CaptureQueriesContext
from rest_framework.test import APIClient

from bookings.models import Booking
from core.exceptions import AlreadyPaid, SignatureMismatch
from notifications.models import Notification
from payments.models import Payment
from payments.services.sessions import initiate_payment
from payments.services.webhooks import compute_signature, handle_callback, verify_signature

SECRET = "test-hmac-secret"
WEBHOOK_URL = "/api/webhooks/paymob/"


def paymob_transaction(booking, *, success=True, transaction_id=9001):
    return {
        "amount_cents": 78000,
        "created_at": "2024-02-20T10:15:30.123456",
        "currency": booking.currency,
        "error_occured": False,
        "has_parent_transaction": False,
        "id": transaction_id,
        "integration_id": 4242,
        "is_3d_secure": True,
        "is_auth": False,
        "is_capture": False,
        "is_refunded": False,
        "is_standalone_payment": True,
        "is_voided": False,
        "order": {"id": 555, "merchant_order_id": str(booking.pk)},
        "owner": 302,
        "pending": False,
        "source_data": {"pan": "2346", "sub_type": "MasterCard", "type": "card"},
        "success": success,
    }


def redirect_params(booking, *, success=True):
    """The same transaction as Paymob's GET redirect flattens it."""
    return {
        "amount_cents": "78000",
        "created_at": "2024-02-20T10:15:30.123456",
        "currency": booking.currency,
        "error_occured": "false",
        "has_parent_transaction": "false",
        "id": "9001",
        "integration_id": "4242",
        "is_3d_secure": "true",
        "is_auth": "false",
        "is_capture": "false",
        "is_refunded": "false",
        "is_standalone_payment": "true",
        "is_voided": "false",
        "order": "555",
        "merchant_order_id": str(booking.pk),
        "owner": "302",
        "pending": "false",
        "source_data.pan": "2346",
        "source_data.sub_type": "MasterCard",
        "source_data.type": "card",
        "success": "true" if success else "false",
    }


@pytest.fixture
def client():
    return APIClient()


@pytest.fixture
def payable(make_booking):
    """A pending booking with an open Paymob session."""

    def _make(**kwargs):
        booking = make_booking(**kwargs)
        Payment.objects.create(
            booking=booking,
            provider_order_id="555",
            provider_payment_key="pk_test_abc",
            amount=booking.total_amount,
            currency=booking.currency,
        )
        return booking

    return _make


def deliver(client, transaction, *, signature=None):
    signature = compute_signature(transaction, SECRET) if signature is None else signature
    return client.post(
        WEBHOOK_URL,
        {"type": "TRANSACTION", "obj": transaction},
        format="json",
        HTTP_X_PAYMOB_HMAC=signature,
    )


def test_signature_covers_success_flag():
    booking = Booking(pk=1, currency="USD")
    transaction = paymob_transaction(booking, success=False)
    signature = compute_signature(transaction, SECRET)

    tampered = dict(transaction, success=True)

    assert verify_signature(transaction, signature, SECRET)
    assert verify_signature(transaction, signature.upper(), SECRET)
    assert not verify_signature(tampered, signature, SECRET)
    assert not verify_signature(transaction, None, SECRET)
    assert not verify_signature(transaction, signature, "")


def test_signature_matches_for_nested_and_flattened_shapes():
    booking = Booking(pk=1, currency="USD")

    assert compute_signature(paymob_transaction(booking), SECRET) == compute_signature(
        redirect_params(booking), SECRET
    )


@pytest.mark.django_db
def test_success_confirms_booking_and_notifies(client, payable):
    booking = payable()

    response = deliver(client, paymob_transaction(booking))

    assert response.status_code == 200
    assert response.json() == {"detail": "Received"}
    booking.refresh_from_db()
    assert booking.status == Booking.CONFIRMED
    payment = booking.payment
    payment.refresh_from_db()
    assert payment.status == Payment.PAID
    assert payment.provider_transaction_id == "9001"
    assert payment.raw["order"]["merchant_order_id"] == str(booking.pk)
    notification = Notification.objects.get(user=booking.user)
    assert notification.type == Notification.BOOKING_CONFIRMED
    assert notification.title == "Booking Confirmed"
    assert str(booking.pk) in notification.body


@pytest.mark.django_db
def test_redelivered_success_is_idempotent(client, payable):
    booking = payable()
    transaction = paymob_transaction(booking)

    responses = [deliver(client, transaction) for _ in range(3)]

    assert [r.status_code for r in responses] == [200, 200, 200]
    assert responses[-1].json() == {"detail": "Already processed"}
    booking.refresh_from_db()
    assert booking.status == Booking.CONFIRMED
    assert Payment.objects.get(booking=booking).status == Payment.PAID
    assert Notification.objects.filter(user=booking.user).count() == 1


@pytest.mark.django_db
def test_failure_keeps_booking_pending(client, payable):
    booking = payable()

    response = deliver(client, paymob_transaction(booking, success=False))

    assert response.status_code == 200
    booking.refresh_from_db()
    assert booking.status == Booking.PENDING
    assert Payment.objects.get(booking=booking).status == Payment.FAILED
    notification = Notification.objects.get(user=booking.user)
    assert notification.type == Notification.PAYMENT_FAILED


@pytest.mark.django_db
def test_success_after_failure_confirms(client, payable):
    booking = payable()
    deliver(client, paymob_transaction(booking, success=False, transaction_id=1))
    replay = deliver(client, paymob_transaction(booking, success=False, transaction_id=1))

    deliver(client, paymob_transaction(booking, success=True, transaction_id=2))

    assert replay.json() == {"detail": "Already processed"}
    booking.refresh_from_db()
    assert booking.status == Booking.CONFIRMED
    payment = Payment.objects.get(booking=booking)
    assert payment.status == Payment.PAID
    assert payment.provider_transaction_id == "2"


@pytest.mark.django_db
def test_failure_after_success_is_ignored(client, payable):
    booking = payable()
    deliver(client, paymob_transaction(booking))

    response = deliver(client, paymob_transaction(booking, success=False, transaction_id=9002))

    assert response.json() == {"detail": "Already processed"}
    booking.refresh_from_db()
    assert booking.status == Booking.CONFIRMED
    assert Payment.objects.get(booking=booking).status == Payment.PAID


@pytest.mark.django_db
def test_bad_signature_is_rejected_without_changes(client, payable):
    booking = payable()

    response = deliver(client, paymob_transaction(booking), signature="0" * 128)

    assert response.status_code == 403
    assert response.json()["code"] == "signature_mismatch"
    booking.refresh_from_db()
    assert booking.status == Booking.PENDING
    assert Payment.objects.get(booking=booking).status == Payment.INITIATED


@pytest.mark.django_db
def test_missing_signature_is_rejected(client, payable):
    booking = payable()

    response = client.post(WEBHOOK_URL, {"obj": paymob_transaction(booking)}, format="json")

    assert response.status_code == 403


@pytest.mark.django_db
def test_soft_fail_processes_unsigned_callback(settings, payable):
    settings.PAYMOB_HMAC_SOFT_FAIL = True
    booking = payable()

    outcome = handle_callback({"obj": paymob_transaction(booking)}, "not-a-signature")

    assert outcome.signature_valid is False
    assert outcome.booking_status == Booking.CONFIRMED


@pytest.mark.django_db
def test_strict_mode_raises_signature_mismatch(payable):
    booking = payable()

    with pytest.raises(SignatureMismatch):
        handle_callback({"obj": paymob_transaction(booking)}, "not-a-signature")


@pytest.mark.django_db
def test_signature_accepted_from_query_param(client, payable):
    booking = payable()
    transaction = paymob_transaction(booking)
    signature = compute_signature(transaction, SECRET)

    response = client.post(f"{WEBHOOK_URL}?hmac={signature}", {"obj": transaction}, format="json")

    assert response.status_code == 200
    booking.refresh_from_db()
    assert booking.status == Booking.CONFIRMED


@pytest.mark.django_db
def test_redirect_callback_confirms_booking(client, payable):
    booking = payable()
    params = redirect_params(booking)

    response = client.get(WEBHOOK_URL, {**params, "hmac": compute_signature(params, SECRET)})

    assert response.status_code == 200
    booking.refresh_from_db()
    assert booking.status == Booking.CONFIRMED


@pytest.mark.django_db
def test_unknown_booking_is_not_found(client, guest):
    transaction = paymob_transaction(Booking(pk=424242, currency="USD"))

    response = deliver(client, transaction)

    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


@pytest.mark.django_db
def test_missing_merchant_order_id_is_invalid(client):
    transaction = paymob_transaction(Booking(pk=1, currency="USD"))
    transaction["order"] = {"id": 555}

    response = deliver(client, transaction)

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_input"


@pytest.mark.django_db
def test_non_object_body_is_rejected(client):
    response = client.post(WEBHOOK_URL, [1, 2, 3], format="json")

    assert response.status_code == 400


@pytest.mark.django_db
def test_success_for_cancelled_booking_records_payment_only(client, payable):
    booking = payable(status=Booking.CANCELLED)

    response = deliver(client, paymob_transaction(booking))

    assert response.status_code == 200
    booking.refresh_from_db()
    assert booking.status == Booking.CANCELLED
    assert Payment.objects.get(booking=booking).status == Payment.PAID
    assert not Notification.objects.exists()


@pytest.mark.django_db
def test_success_for_taken_room_keeps_charge_and_blocks_new_checkout(client, payable, other_guest):
    first = payable()
    second = payable(user=other_guest, check_in=date(2024, 3, 2), check_out=date(2024, 3, 5))
    deliver(client, paymob_transaction(first, transaction_id=1))

    response = deliver(client, paymob_transaction(second, transaction_id=2))

    assert response.status_code == 200
    second.refresh_from_db()
    assert second.status == Booking.PENDING
    payment = Payment.objects.get(booking=second)
    assert payment.status == Payment.PAID
    assert payment.provider_transaction_id == "2"
    assert payment.raw["order"]["merchant_order_id"] == str(second.pk)
    assert not Notification.objects.filter(user=other_guest).exists()
    with pytest.raises(AlreadyPaid):
        initiate_payment(user=other_guest, booking_id=second.pk)


@pytest.mark.django_db
def test_redelivery_for_taken_room_is_a_replay(client, payable, other_guest):
    first = payable()
    second = payable(user=other_guest, check_in=date(2024, 3, 2), check_out=date(2024, 3, 5))
    deliver(client, paymob_transaction(first, transaction_id=1))
    deliver(client, paymob_transaction(second, transaction_id=2))

    response = deliver(client, paymob_transaction(second, transaction_id=2))

    assert response.json() == {"detail": "Already processed"}
    second.refresh_from_db()
    assert second.status == Booking.PENDING


@pytest.mark.django_db
def test_callback_locks_booking_before_payment(payable):
    booking = payable()
    transaction = paymob_transaction(booking)

    with CaptureQueriesContext(connection) as queries:
        handle_callback({"obj": transaction}, compute_signature(transaction, SECRET))

    selects = [q["sql"] for q in queries.captured_queries if q["sql"].lstrip().upper().startswith("SELECT")]
    assert '"bookings_booking"' in selects[0]
    assert '"payments_payment"' not in selects[0]
    assert '"payments_payment"' in selects[1]
