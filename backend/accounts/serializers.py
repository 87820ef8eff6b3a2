from django.contrib.auth import authenticate, get_user_model
from rest_framework import exceptions, serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.settings import api_settings as jwt_settings

User = get_user_model()

GUEST_FIELDS = ["first_name", "last_name", "display_name", "phone"]


class GuestSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "email", *GUEST_FIELDS]
        read_only_fields = ["id", "email"]

    def update(self, instance, validated_data):
        guest = super().update(instance, validated_data)
        if guest.fill_display_name():
            guest.save(update_fields=["display_name"])
        return guest


class GuestSignupSerializer(serializers.ModelSerializer):
    """Email is the login; ``username`` mirrors it for Django's auth backend."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8)

    class Meta:
        model = User
        fields = ["email", "password", *GUEST_FIELDS]

    def validate_email(self, value: str) -> str:
        email = value.lower()
        if User.objects.filter(username=email).exists():
            raise serializers.ValidationError("A guest with this email is already registered.")
        return email

    def create(self, validated_data):
        email = validated_data.pop("email")
        password = validated_data.pop("password")
        guest = User(username=email, email=email, **validated_data)
        guest.set_password(password)
        guest.fill_display_name()
        guest.save()
        return guest


class GuestLoginSerializer(TokenObtainPairSerializer):
    """SimpleJWT pair login keyed on email; the response embeds the guest profile."""

    username_field = "email"

    def validate(self, attrs):
        self.user = authenticate(
            self.context.get("request"),
            username=attrs["email"].lower(),
            password=attrs["password"],
        )
        if not jwt_settings.USER_AUTHENTICATION_RULE(self.user):
            raise exceptions.AuthenticationFailed(
                self.error_messages["no_active_account"], "no_active_account"
            )
        refresh = self.get_token(self.user)
        return {
            "refresh": str(refresh),
            "access": str(refresh.access_token),
            "user": GuestSerializer(self.user).data,
        }
