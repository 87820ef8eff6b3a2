"""
Error taxonomy for the booking and payment flow.

Every error is a DRF ``APIException`` so services can raise them directly and
views need no translation layer; ``api_exception_handler`` adds the machine
readable ``code`` next to DRF's ``detail`` message.
"""

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler


class BookingFlowError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "The request could not be processed."
    default_code = "error"


class InvalidInput(BookingFlowError):
    default_detail = "Missing or malformed fields."
    default_code = "invalid_input"


class InvalidDateRange(BookingFlowError):
    default_detail = "Check-out must be at least one night after check-in."
    default_code = "invalid_date_range"


class RoomNotFound(BookingFlowError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Room not found."
    default_code = "room_not_found"


class RoomUnavailable(BookingFlowError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Room is already booked for these dates."
    default_code = "room_unavailable"


class BookingNotFound(BookingFlowError):
    """Raised for missing bookings and for bookings owned by someone else alike."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Booking not found."
    default_code = "not_found"


class PaymentNotFound(BookingFlowError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Payment not found for this order."
    default_code = "not_found"


class InvalidState(BookingFlowError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Operation is not allowed in the current state."
    default_code = "invalid_state"


class AlreadyPaid(BookingFlowError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Booking already paid."
    default_code = "already_paid"


class ProviderError(BookingFlowError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Payment provider request failed. Please retry."
    default_code = "provider_error"


class SignatureMismatch(BookingFlowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Invalid callback signature."
    default_code = "signature_mismatch"


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is not None and isinstance(exc, BookingFlowError):
        response.data["code"] = exc.default_code
    return response


def validated_input(serializer):
    """Run ``serializer`` validation, reporting field errors as ``InvalidInput``."""
    if not serializer.is_valid():
        raise InvalidInput(serializer.errors)
    return serializer.validated_data
