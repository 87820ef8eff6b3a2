from rest_framework import permissions, viewsets

from .filters import RoomAvailabilityFilter
from .models import Room
from .serializers import RoomSerializer


class RoomViewSet(viewsets.ReadOnlyModelViewSet):
    """Public room search; date filters hide rooms with a confirmed overlapping booking."""

    serializer_class = RoomSerializer
    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    filterset_class = RoomAvailabilityFilter
    ordering_fields = ["price_per_night", "capacity"]

    def get_queryset(self):
        return Room.objects.select_related("hotel").order_by("hotel__name", "name", "id")
