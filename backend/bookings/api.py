from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from bookings.serializers import BookingCreateSerializer, BookingSerializer
from bookings.services.lifecycle import (
    cancel_booking,
    create_booking,
    get_booking,
    list_bookings,
)
from core.exceptions import validated_input


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Bookings owned by the authenticated user."""

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = []

    def get_queryset(self):
        return list_bookings(self.request.user)

    def get_object(self):
        return get_booking(user=self.request.user, booking_id=self.kwargs["pk"])

    def create(self, request, *args, **kwargs):
        data = validated_input(BookingCreateSerializer(data=request.data))
        booking = create_booking(
            user=request.user,
            room_id=data["room_id"],
            check_in=data["check_in"],
            check_out=data["check_out"],
        )
        booking = get_booking(user=request.user, booking_id=booking.pk)
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        booking = cancel_booking(user=request.user, booking_id=pk)
        return Response(BookingSerializer(booking).data)
