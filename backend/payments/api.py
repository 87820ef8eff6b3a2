import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import validated_input

from .serializers import PaymentInitiateSerializer, PaymentSessionSerializer
from .services.sessions import initiate_payment
from .services.webhooks import handle_callback

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Paymob-Hmac"
SIGNATURE_PARAM = "hmac"


class PaymentInitiateView(APIView):
    """Open (or reuse) a Paymob checkout session for one of the caller's bookings."""

    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        data = validated_input(PaymentInitiateSerializer(data=request.data))
        session = initiate_payment(user=request.user, booking_id=data["booking_id"])
        return Response(PaymentSessionSerializer(session).data, status=status.HTTP_200_OK)


class PaymobWebhookView(APIView):
    """Receive Paymob transaction callbacks (POST webhook and GET redirect)."""

    permission_classes: list = []
    authentication_classes: list = []

    def _signature(self, request):
        return request.headers.get(SIGNATURE_HEADER) or request.query_params.get(SIGNATURE_PARAM)

    def _acknowledge(self, outcome):
        message = "Already processed" if outcome.replayed else "Received"
        return Response({"detail": message}, status=status.HTTP_200_OK)

    def post(self, request, *args, **kwargs):
        payload = request.data
        if not isinstance(payload, dict):
            logger.warning("Invalid payload received on Paymob webhook.")
            return Response({"detail": "Invalid payload."}, status=status.HTTP_400_BAD_REQUEST)
        outcome = handle_callback(payload, self._signature(request))
        return self._acknowledge(outcome)

    def get(self, request, *args, **kwargs):
        payload = request.query_params.dict()
        payload.pop(SIGNATURE_PARAM, None)
        outcome = handle_callback(payload, self._signature(request))
        return self._acknowledge(outcome)
