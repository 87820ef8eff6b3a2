from rest_framework import serializers

from .models import Room


class RoomSerializer(serializers.ModelSerializer):
    hotel_name = serializers.CharField(source="hotel.name", read_only=True)
    hotel_city = serializers.CharField(source="hotel.city", read_only=True)

    class Meta:
        model = Room
        fields = [
            "id",
            "hotel",
            "hotel_name",
            "hotel_city",
            "name",
            "capacity",
            "price_per_night",
            "currency",
        ]
        read_only_fields = fields
