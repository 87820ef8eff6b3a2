from rest_framework import serializers


class PaymentInitiateSerializer(serializers.Serializer):
    booking_id = serializers.IntegerField(min_value=1)


class PaymentSessionSerializer(serializers.Serializer):
    payment_key = serializers.CharField()
    iframe_url = serializers.URLField()
    booking_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
