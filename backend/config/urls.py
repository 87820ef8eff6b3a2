from django.contrib import admin
from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from accounts.api import LoginView, MeView, RegisterView
from bookings.api import BookingViewSet
from hotels.api import RoomViewSet
from notifications.api import NotificationViewSet
from payments.api import PaymentInitiateView, PaymobWebhookView

router = DefaultRouter()
router.register(r"rooms", RoomViewSet, basename="room")
router.register(r"bookings", BookingViewSet, basename="booking")
router.register(r"notifications", NotificationViewSet, basename="notification")

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/register/", RegisterView.as_view(), name="auth-register"),
    path("api/auth/login/", LoginView.as_view(), name="auth-login"),
    path("api/auth/refresh/", TokenRefreshView.as_view(), name="auth-refresh"),
    path("api/auth/me/", MeView.as_view(), name="auth-me"),
    path("api/payments/initiate/", PaymentInitiateView.as_view(), name="payment-initiate"),
    path("api/webhooks/paymob/", PaymobWebhookView.as_view(), name="paymob-webhook"),
    path("api/", include(router.urls)),
]
