from rest_framework import serializers

from bookings.models import Booking


class BookingCreateSerializer(serializers.Serializer):
    room_id = serializers.IntegerField(min_value=1)
    check_in = serializers.DateField()
    check_out = serializers.DateField()


class BookingSerializer(serializers.ModelSerializer):
    room_name = serializers.CharField(source="room.name", read_only=True)
    hotel_id = serializers.IntegerField(source="room.hotel_id", read_only=True)
    hotel_name = serializers.CharField(source="room.hotel.name", read_only=True)
    payment_status = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "room",
            "room_name",
            "hotel_id",
            "hotel_name",
            "check_in",
            "check_out",
            "nights",
            "total_amount",
            "currency",
            "status",
            "payment_status",
            "created_at",
        ]
        read_only_fields = fields

    def get_payment_status(self, obj: Booking) -> str | None:
        payment = getattr(obj, "payment", None)
        return payment.status if payment else None
