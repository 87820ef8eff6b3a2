from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ["id", "type", "title", "body", "read", "created_at"]
        read_only_fields = fields


class MarkReadSerializer(serializers.Serializer):
    notification_id = serializers.IntegerField(min_value=1, required=False)
