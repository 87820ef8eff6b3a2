from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

from .serializers import GuestLoginSerializer, GuestSerializer, GuestSignupSerializer


class RegisterView(APIView):
    """Sign a guest up and log them straight in."""

    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = GuestSignupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        guest = serializer.save()
        refresh = RefreshToken.for_user(guest)
        payload = {
            "user": GuestSerializer(guest).data,
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }
        return Response(payload, status=status.HTTP_201_CREATED)


class LoginView(TokenObtainPairView):
    serializer_class = GuestLoginSerializer


class MeView(generics.RetrieveUpdateAPIView):
    """The caller's guest profile; the phone number is reused as Paymob billing data."""

    serializer_class = GuestSerializer
    http_method_names = ["get", "patch", "options"]

    def get_object(self):
        return self.request.user
